from dataclasses import replace

from derived_values import recommend_ports
from document_model import (
    NOT_AVAILABLE, FieldLine, LinkLine, ListLine, SubSection, compile_document, document_filename,
    join_values, metres, or_na, yes_no,
)
from survey_models import (
    ElementType, Environment, RoomElement, Sonorization, Source, SourceType, TriState,
)
from technical_validation import validate_room


def _fields(lines):
    """Flatten field lines (including those inside sub-sections) to a dict"""
    out = {}
    for line in lines:
        if isinstance(line, FieldLine):
            out[line.label] = line.value
        elif isinstance(line, SubSection):
            out.update(_fields(line.lines))
    return out


def _subsection(section, title):
    return next(line for line in section.lines if isinstance(line, SubSection) and line.title == title)


# --- formatting helpers ---

def test_formatting_helpers():
    assert yes_no(True) == "Oui"
    assert yes_no(False) == "Non"
    assert yes_no(TriState.UNKNOWN) == "Je ne sais pas"
    assert or_na(None) == NOT_AVAILABLE
    assert or_na("") == NOT_AVAILABLE
    assert join_values(["PTZ", "Bar"]) == "PTZ, Bar"
    assert join_values([]) == NOT_AVAILABLE
    assert metres(2.5) == "2.5 m"
    assert metres(None) == NOT_AVAILABLE


def test_document_filename():
    assert document_filename("compte-rendu", "Salle Conseil", "pdf") == "compte-rendu-Salle Conseil.pdf"
    assert document_filename("cr", "B12", ".md") == "cr-B12.md"


# --- section selection ---

def test_no_room_means_nothing_to_render():
    assert compile_document(None) is None


def test_full_room_has_every_section_in_order(meeting_room):
    document = compile_document(meeting_room)

    assert document.section_keys == [
        'project', 'usage', 'environment', 'visio', 'sources', 'displays',
        'sonorization', 'zones', 'cables', 'elements', 'synthesis',
    ]
    assert [s.number for s in document.sections] == list(range(1, 12))
    assert document.title == "Compte rendu technique - Salle Conseil"


def test_missing_records_and_empty_lists_are_omitted_but_numbers_are_kept(empty_room):
    room = replace(empty_room, environment=Environment(length_m=4, width_m=3))
    document = compile_document(room)

    assert document.section_keys == ['environment', 'synthesis']
    assert document.section('environment').heading == "3. Environnement"
    assert document.section('synthesis').heading == "11. Synthèse"


def test_absent_sub_fields_render_as_na(empty_room):
    room = replace(empty_room, environment=Environment(length_m=4))
    fields = _fields(compile_document(room).section('environment').lines)

    assert fields["Longueur"] == "4 m"
    assert fields["Largeur"] == NOT_AVAILABLE
    assert fields["Mur principal"] == NOT_AVAILABLE
    assert fields["Faux plafond"] == "Non"
    assert fields["Nombre de prises RJ45"] == "0"


def test_unknown_dsp_is_not_rendered_as_no(empty_room):
    room = replace(empty_room, sonorization=Sonorization(dsp=TriState.UNKNOWN, dante=TriState.NO))
    fields = _fields(compile_document(room).section('sonorization').lines)

    assert fields["DSP"] == "Je ne sais pas"
    assert fields["Dante"] == "Non"


# --- content ---

def test_sources_list_quantities(meeting_room):
    lines = compile_document(meeting_room).section('sources').lines

    assert lines == (ListLine(("PC fixe (x1)", "Laptop (x2)")),)


def test_elements_grouped_by_type_with_fallback_labels(meeting_room):
    groups = compile_document(meeting_room).section('elements').lines

    assert [g.title for g in groups] == ["Écran (1)", "Enceinte (2)", "Caméra (1)"]
    assert groups[0].items == ("Écran principal",)
    assert groups[1].items == ("Enceinte #1", "Enceinte #2")


def test_element_comments_follow_the_label(empty_room):
    room = replace(empty_room, elements=(RoomElement(ElementType.CAMERA, comment="au-dessus de l'écran"),))
    group = compile_document(room).section('elements').lines[0]

    assert group.items == ("Caméra #1 - au-dessus de l'écran",)


def test_synthesis_topology(empty_room, meeting_room):
    assert _fields(compile_document(empty_room).section('synthesis').lines)[
        "Gestion des signaux recommandée"] == "Distribution simple"
    assert _fields(compile_document(meeting_room).section('synthesis').lines)[
        "Gestion des signaux recommandée"] == "Sélecteur"

    room = replace(meeting_room, displays=meeting_room.displays * 2)
    assert _fields(compile_document(room).section('synthesis').lines)[
        "Gestion des signaux recommandée"] == "Matrice"


def test_synthesis_with_ports_validation_and_photos(meeting_room):
    document = compile_document(meeting_room, recommend_ports(meeting_room), validate_room(meeting_room))
    synthesis = document.section('synthesis')

    ports = _fields(_subsection(synthesis, "Prises RJ45 recommandées").lines)
    assert ports["Total"] == "2"
    assert _fields(_subsection(synthesis, "Validation technique").lines)["Statut"] == "OK"
    assert _subsection(synthesis, "Photos").lines == (
        LinkLine("Vue d'ensemble", "https://photos.example.com/salle-conseil/1.jpg"),
    )


def test_missing_information_listed_in_synthesis(empty_room):
    room = replace(empty_room, sources=(Source(SourceType.CODEC),))
    missing = _subsection(compile_document(room).section('synthesis'), "Informations manquantes")

    assert "Au moins un diffuseur" in missing.lines[0].items
