import json

from survey_loader import load_room, parse_signal_type, room_from_records
from survey_models import (
    ConnectivityZone, DisplayType, ElementType, Material, SignalType, SonorizationType, SourceType,
    TriState, Wall,
)


def _records():
    return {
        'room': {
            'id': "42",
            'name': "Salle Horizon",
            'typology': "Salle de formation",
            'numero_devis': "D-77",
            'ia_resume': "Salle bien équipée",
            'ia_warnings': ["Vérifier la réverbération"],
        },
        'project': {'client_name': "Acme"},
        'usage': {'main_usage': "Formation", 'usage_intensity': "intensif", 'nombre_personnes': "24",
                  'formation_demandee': True},
        'environment': {'length_m': 10, 'width_m': "6.5", 'height_m': 0, 'mur_a_materiau': "Placo",
                        'mur_b_materiau': "Papier peint", 'mur_principal': "a"},
        'visio': {'visio_required': "oui", 'visio_platform': "Zoom", 'camera_types': "PTZ, Bar"},
        'sonorization': {'type_sonorisation': "Aucune sonorisation", 'renforcement_voix': True,
                         'nb_micro_main_hf': 2, 'dsp_necessaire': "Peu importe", 'dante_souhaite': "Oui"},
        'sources': [{'source_type': "PC fixe", 'quantity': 2}, {'source_type': "Tablette"}],
        'displays': [{'display_type': "Vidéoprojecteur", 'base_ecran_cm': 240},
                     {'display_type': "Hologramme"}],
        'cables': [{'point_a': "PC fixe", 'point_b': "Vidéoprojecteur", 'signal_type': "HDMI",
                    'distance_m': 6, 'distance_with_margin_m': 7.2}],
        'connectivity_zones': [{'zone_name': "Pupitre", 'hdmi_count': 1, 'usbc_count': 1}],
        'elements_salle': [{'type_element': "Enceinte", 'position_x': 10, 'position_y': 90},
                           {'type_element': "Vidéoprojecteur"},
                           {'type_element': "Lampe"}],
        'photos': [{'file_name': "face.jpg", 'file_url': "https://example.com/face.jpg"}],
    }


def test_room_from_survey_columns():
    room = room_from_records(_records())

    assert room.room_id == "42"
    assert room.quote_reference == "D-77"
    assert room.usage.people_count == 24
    assert room.usage.training_requested is True
    assert room.environment.width_m == 6.5
    assert room.environment.height_m is None
    assert room.environment.principal_wall == Wall.A
    assert room.environment.wall_a == Material.PLACO
    assert room.environment.wall_b == Material.AUTRE
    assert room.visio.required is True
    assert room.visio.camera_types == ("PTZ", "Bar")


def test_tri_state_answers_keep_unknown_apart_from_no():
    sono = room_from_records(_records()).sonorization

    assert sono.sonorization_type == SonorizationType.NONE
    assert sono.dsp == TriState.UNKNOWN
    assert sono.dante == TriState.YES


def test_unknown_labels_fall_back_or_are_skipped():
    room = room_from_records(_records())

    assert [s.source_type for s in room.sources] == [SourceType.PC_FIXE, SourceType.AUTRE]
    assert [d.display_type for d in room.displays] == [DisplayType.PROJECTOR]
    assert [e.element_type for e in room.elements] == [ElementType.SPEAKER, ElementType.SCREEN]
    assert room.elements[1].x_pct == 50.0


def test_signal_aliases():
    assert parse_signal_type("HDMI") == SignalType.HDMI
    assert parse_signal_type("Vidéo HDMI") == SignalType.HDMI
    assert parse_signal_type("dante") == SignalType.AUDIO_DANTE
    assert parse_signal_type("Fibre") == SignalType.OTHER
    assert parse_signal_type(None) == SignalType.OTHER


def test_ai_blocks_and_photos_pass_through():
    room = room_from_records(_records())

    assert room.ai.summary == "Salle bien équipée"
    assert room.ai.warnings == ("Vérifier la réverbération",)
    assert room.photos[0].url == "https://example.com/face.jpg"


def test_records_without_room():
    assert room_from_records({'sources': []}) is None


def test_load_room_from_file(tmp_path):
    path = tmp_path / "survey.json"
    path.write_text(json.dumps(_records(), ensure_ascii=False), encoding='utf-8')

    room = load_room(str(path))

    assert room.name == "Salle Horizon"
    assert room.cables[0].distance_with_margin_m == 7.2


def test_load_room_missing_or_invalid(tmp_path):
    assert load_room(str(tmp_path / "missing.json")) is None

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding='utf-8')
    assert load_room(str(broken)) is None


def test_odd_values_fall_back_instead_of_raising():
    room = room_from_records({
        'room': {'name': "S"},
        'elements': [{'element_type': "Caméra", 'position_x': "abc", 'position_y': None}],
        'visio': {'camera_types': 3},
        'cables': "not a list",
    })

    assert (room.elements[0].x_pct, room.elements[0].y_pct) == (50.0, 50.0)
    assert room.visio.camera_types == ("3",)
    assert room.cables == ()


def test_non_finite_numbers_are_ignored(tmp_path):
    path = tmp_path / "survey.json"
    path.write_text(
        '{"room": {"name": "S"},'
        ' "sources": [{"source_type": "PC fixe", "quantity": Infinity}],'
        ' "environment": {"length_m": Infinity, "width_m": NaN}}',
        encoding='utf-8',
    )

    room = load_room(str(path))

    assert room.sources[0].quantity == 1
    assert room.environment.length_m is None
    assert room.environment.width_m is None


# --- model helpers ---

def test_zone_connector_lookup():
    zone = ConnectivityZone("Table", hdmi_count=2, usbc_count=1)

    assert zone.offers('hdmi')
    assert zone.offers('USB-C')
    assert zone.has_usbc
    assert not zone.has_usba
    assert not zone.offers('rj45')
    assert not zone.offers('thunderbolt')
