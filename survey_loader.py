"""
Survey Loader Module
Builds a Room aggregate from plain survey records (JSON export of the survey tables)
Accepts both the Python field names and the survey database column names
"""

import json
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Type

from survey_models import (
    AcousticLevel, AIInsights, Brightness, Cable, ConnectivityZone, Display, DisplayPosition,
    DisplayType, ElementType, Environment, Intensity, Material, MonitorType, Photo, Project,
    Room, RoomElement, SignalType, SkillLevel, Sonorization, SonorizationType, Source,
    SourceType, StreamingComplexity, StreamingType, TriState, Usage, Visio, Wall,
)


# Labels found in older survey exports that don't match the enum values
SIGNAL_ALIASES = {
    'hdmi': SignalType.HDMI,
    'hdbaset': SignalType.HDBASET,
    'avoip': SignalType.AVOIP,
    'ip': SignalType.AVOIP,
    'dante': SignalType.AUDIO_DANTE,
    'audio': SignalType.AUDIO_ANALOG,
    'rj45': SignalType.NETWORK,
    'réseau': SignalType.NETWORK,
}

ELEMENT_ALIASES = {
    'vidéoprojecteur': ElementType.SCREEN,
    'écran de projection': ElementType.SCREEN,
    'screen': ElementType.SCREEN,
    'speaker': ElementType.SPEAKER,
    'camera': ElementType.CAMERA,
}


# =============================================================================
# FIELD HELPERS
# =============================================================================

def _get(row: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First non-empty value among the given column names"""
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return default


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("oui", "yes", "true", "1")
    return bool(value)


def _int(value: Any, default: int = 0) -> int:
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return default


def _float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number if number > 0 else None


def _percent(value: Any, default: float = 50.0) -> float:
    """Plan coordinate; unreadable values land in the middle of the room"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _enum(enum_cls: Type, value: Any, default=None):
    """Match an enum member by value or by name, case-insensitively"""
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == text or member.name.lower() == text:
            return member
    return default


def _strings(value: Any) -> tuple:
    if not value:
        return ()
    if isinstance(value, str):
        return tuple(v.strip() for v in value.split(",") if v.strip())
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value if v)
    return (str(value),)


def _records(data: Dict[str, Any], *keys: str) -> List[Dict[str, Any]]:
    rows = _get(data, *keys, default=[])
    if not isinstance(rows, list):
        return []
    return [r for r in rows if isinstance(r, dict)]


# =============================================================================
# RECORD PARSERS
# =============================================================================

def parse_project(row: Dict[str, Any]) -> Project:
    return Project(
        client_name=_get(row, 'client_name', default=""),
        site_name=_text(row.get('site_name')),
        contact_name=_text(row.get('contact_name')),
        decision_contact=_text(row.get('decision_contact')),
        decision_service=_text(row.get('decision_service')),
        decision_date=_text(row.get('decision_date')),
        comments=_text(row.get('comments')),
    )


def parse_usage(row: Dict[str, Any]) -> Usage:
    people = _get(row, 'people_count', 'nombre_personnes')
    return Usage(
        main_usage=_text(row.get('main_usage')),
        intensity=_enum(Intensity, _get(row, 'intensity', 'usage_intensity')),
        skill_level=_enum(SkillLevel, _get(row, 'skill_level', 'user_skill_level')),
        platform_type=_text(row.get('platform_type')),
        people_count=_int(people) if people is not None else None,
        automation_booking=_bool(row.get('automation_booking')),
        automation_lighting=_bool(row.get('automation_lighting')),
        automation_acoustic=_bool(row.get('automation_acoustic')),
        reservation=_bool(_get(row, 'reservation', 'reservation_salle')),
        equipment_removal=_bool(_get(row, 'equipment_removal', 'depose_materiel')),
        equipment_return=_bool(_get(row, 'equipment_return', 'rapatriement_materiel')),
        training_requested=_bool(_get(row, 'training_requested', 'formation_demandee')),
    )


def parse_environment(row: Dict[str, Any]) -> Environment:
    def wall(letter: str) -> Optional[Material]:
        raw = _get(row, f'wall_{letter}', f'mur_{letter}_materiau')
        return _enum(Material, raw, Material.AUTRE if raw else None)

    return Environment(
        length_m=_float(row.get('length_m')),
        width_m=_float(row.get('width_m')),
        height_m=_float(row.get('height_m')),
        wall_a=wall('a'),
        wall_b=wall('b'),
        wall_c=wall('c'),
        wall_d=wall('d'),
        principal_wall=_enum(Wall, _get(row, 'principal_wall', 'mur_principal')),
        floor_material=_text(row.get('floor_material')),
        ceiling_material=_text(row.get('ceiling_material')),
        raised_floor=_bool(_get(row, 'raised_floor', 'has_raised_floor')),
        false_ceiling=_bool(_get(row, 'false_ceiling', 'has_false_ceiling')),
        brightness=_enum(Brightness, _get(row, 'brightness', 'brightness_level')),
        acoustic_issue=_bool(_get(row, 'acoustic_issue', 'has_acoustic_issue')),
        acoustic_comment=_text(row.get('acoustic_comment')),
        rj45_present=_bool(_get(row, 'rj45_present', 'has_rj45')),
        rj45_count=_int(row.get('rj45_count')),
    )


def parse_visio(row: Dict[str, Any]) -> Visio:
    return Visio(
        required=_bool(_get(row, 'required', 'visio_required')),
        platform=_text(_get(row, 'platform', 'visio_platform')),
        need_to_see=_bool(row.get('need_to_see')),
        need_to_be_seen=_bool(row.get('need_to_be_seen')),
        need_to_hear=_bool(row.get('need_to_hear')),
        need_to_be_heard=_bool(row.get('need_to_be_heard')),
        camera_count=_int(row.get('camera_count')),
        camera_types=_strings(row.get('camera_types')),
        mic_count=_int(row.get('mic_count')),
        mic_types=_strings(row.get('mic_types')),
        streaming_enabled=_bool(row.get('streaming_enabled')),
        streaming_type=_enum(StreamingType, row.get('streaming_type')),
        streaming_platform=_text(row.get('streaming_platform')),
        streaming_complexity=_enum(StreamingComplexity, row.get('streaming_complexity')),
    )


def parse_sonorization(row: Dict[str, Any]) -> Sonorization:
    return Sonorization(
        sonorization_type=_enum(
            SonorizationType,
            _get(row, 'sonorization_type', 'type_sonorisation', 'type_sonorization'),
        ),
        diffusion_homogeneous=_bool(_get(row, 'diffusion_homogeneous', 'diffusion_homogene')),
        diffusion_local=_bool(_get(row, 'diffusion_local', 'diffusion_locale')),
        diffusion_directed=_bool(_get(row, 'diffusion_directed', 'diffusion_orientee')),
        voice_reinforcement=_bool(_get(row, 'voice_reinforcement', 'renforcement_voix')),
        mic_handheld=_int(_get(row, 'mic_handheld', 'nb_micro_main_hf')),
        mic_lapel=_int(_get(row, 'mic_lapel', 'nb_micro_cravate_hf')),
        mic_headset=_int(_get(row, 'mic_headset', 'nb_micro_serre_tete_hf')),
        mic_lectern=_int(_get(row, 'mic_lectern', 'nb_micro_pupitre')),
        mic_ceiling_beamforming=_int(_get(row, 'mic_ceiling_beamforming', 'nb_micro_plafond_beamforming')),
        mic_table=_int(_get(row, 'mic_table', 'nb_micro_table')),
        multi_mixing=_bool(_get(row, 'multi_mixing', 'mixage_multiple')),
        monitor_return=_bool(_get(row, 'monitor_return', 'retour_necessaire')),
        monitor_type=_enum(MonitorType, _get(row, 'monitor_type', 'retour_type')),
        acoustic_level=_enum(AcousticLevel, _get(row, 'acoustic_level', 'acoustique_niveau')),
        specific_sources=_text(_get(row, 'specific_sources', 'sources_audio_specifiques')),
        dsp=TriState.from_label(_get(row, 'dsp', 'dsp_necessaire')),
        dante=TriState.from_label(_get(row, 'dante', 'dante_souhaite')),
        anti_feedback=_bool(_get(row, 'anti_feedback', 'anti_larsen')),
    )


def parse_source(row: Dict[str, Any]) -> Source:
    return Source(
        source_type=_enum(SourceType, row.get('source_type'), SourceType.AUTRE),
        quantity=max(1, _int(row.get('quantity'), 1)),
    )


def parse_display(row: Dict[str, Any]) -> Optional[Display]:
    display_type = _enum(DisplayType, row.get('display_type'))
    if display_type is None:
        print(f"⚠️  Unknown display type skipped: {row.get('display_type')!r}")
        return None
    return Display(
        display_type=display_type,
        size_inches=_float(row.get('size_inches')),
        base_width_cm=_float(_get(row, 'base_width_cm', 'base_ecran_cm')),
        position=_enum(DisplayPosition, row.get('position')),
        viewer_distance_m=_float(row.get('viewer_distance_m')),
        mount_height_m=_float(_get(row, 'mount_height_m', 'hauteur_fixation_m')),
        projection_distance_m=_float(_get(row, 'projection_distance_m', 'distance_projection_m')),
    )


def parse_signal_type(value: Any) -> SignalType:
    signal = _enum(SignalType, value)
    if signal is not None:
        return signal
    return SIGNAL_ALIASES.get(str(value or "").strip().lower(), SignalType.OTHER)


def parse_cable(row: Dict[str, Any]) -> Cable:
    return Cable(
        point_a=str(row.get('point_a') or ""),
        point_b=str(row.get('point_b') or ""),
        signal_type=parse_signal_type(row.get('signal_type')),
        transport=_text(row.get('transport')),
        distance_m=_float(row.get('distance_m')),
        distance_with_margin_m=_float(row.get('distance_with_margin_m')),
        recommendation=_text(_get(row, 'recommendation', 'cable_recommendation')),
        comment=_text(_get(row, 'comment', 'commentaire')),
    )


def parse_zone(row: Dict[str, Any]) -> ConnectivityZone:
    return ConnectivityZone(
        name=str(_get(row, 'name', 'zone_name', default="Zone")),
        hdmi_count=_int(row.get('hdmi_count')),
        usbc_count=_int(row.get('usbc_count')),
        displayport_count=_int(row.get('displayport_count')),
        rj45_count=_int(row.get('rj45_count')),
        usba_count=_int(row.get('usba_count')),
        power_230v_count=_int(_get(row, 'power_230v_count', 'prise_230v_count')),
        distance_to_control_room_m=_float(row.get('distance_to_control_room_m')),
    )


def parse_element(row: Dict[str, Any]) -> Optional[RoomElement]:
    raw_type = _get(row, 'element_type', 'type_element')
    element_type = _enum(ElementType, raw_type) or ELEMENT_ALIASES.get(str(raw_type or "").strip().lower())
    if element_type is None:
        print(f"⚠️  Unknown plan element skipped: {raw_type!r}")
        return None
    x = _get(row, 'x_pct', 'position_x', default=50)
    y = _get(row, 'y_pct', 'position_y', default=50)
    return RoomElement(
        element_type=element_type,
        x_pct=_percent(x),
        y_pct=_percent(y),
        label=_text(row.get('label')),
        comment=_text(_get(row, 'comment', 'commentaire')),
    )


def parse_ai_insights(row: Dict[str, Any]) -> AIInsights:
    return AIInsights(
        summary=_text(_get(row, 'ai_summary', 'ia_resume')),
        warnings=_strings(_get(row, 'ai_warnings', 'ia_warnings')),
        critical_errors=_strings(_get(row, 'ai_critical_errors', 'ia_erreurs_critiques')),
        audio_config=_get(row, 'ai_audio_config', 'ia_config_audio'),
        validation_status=_text(_get(row, 'ai_validation_status', 'ia_validation_statut')),
        validation_details=_strings(_get(row, 'ai_validation_details', 'ia_validation_details')),
        usage_scenarios=_get(row, 'ai_usage_scenarios', 'ia_scenarios_usage'),
    )


def _keep(items: Iterable) -> tuple:
    return tuple(item for item in items if item is not None)


def room_from_records(data: Dict[str, Any]) -> Optional[Room]:
    """
    Build a Room from a dict of survey records.

    Expected keys: 'room' (required), 'project', 'usage', 'environment', 'visio',
    'sonorization' (single records) and 'sources', 'displays', 'cables',
    'connectivity_zones', 'elements', 'photos' (lists of records).
    """
    room_row = data.get('room') or data.get('rooms')
    if not isinstance(room_row, dict):
        return None

    def single(key: str, *aliases: str) -> Optional[Dict[str, Any]]:
        row = _get(data, key, *aliases)
        return row if isinstance(row, dict) else None

    project = single('project', 'projects')
    usage = single('usage', 'room_usage')
    environment = single('environment', 'room_environment')
    visio = single('visio', 'room_visio')
    sonorization = single('sonorization', 'room_sonorization')

    return Room(
        room_id=str(_get(room_row, 'room_id', 'id', default="")),
        name=str(_get(room_row, 'name', default="Salle")),
        typology=_text(room_row.get('typology')),
        quote_reference=_text(_get(room_row, 'quote_reference', 'numero_devis')),
        order_reference=_text(_get(room_row, 'order_reference', 'numero_commande')),
        project=parse_project(project) if project else None,
        usage=parse_usage(usage) if usage else None,
        environment=parse_environment(environment) if environment else None,
        visio=parse_visio(visio) if visio else None,
        sonorization=parse_sonorization(sonorization) if sonorization else None,
        sources=_keep(parse_source(r) for r in _records(data, 'sources')),
        displays=_keep(parse_display(r) for r in _records(data, 'displays')),
        cables=_keep(parse_cable(r) for r in _records(data, 'cables')),
        zones=_keep(parse_zone(r) for r in _records(data, 'connectivity_zones', 'zones')),
        elements=_keep(parse_element(r) for r in _records(data, 'elements', 'elements_salle')),
        photos=_keep(
            Photo(name=str(_get(r, 'name', 'file_name', default="Photo")), url=str(_get(r, 'url', 'file_url', default="")))
            for r in _records(data, 'photos')
        ),
        ai=parse_ai_insights(room_row),
    )


def load_room(json_path: str) -> Optional[Room]:
    """Read a survey JSON export from disk"""
    encodings = ['utf-8-sig', 'utf-8', 'latin-1', 'cp1252']
    content = None

    for encoding in encodings:
        try:
            with open(json_path, 'r', encoding=encoding) as f:
                content = f.read()
            break
        except UnicodeDecodeError:
            continue
        except FileNotFoundError:
            print(f"❌ Survey file not found: {json_path}")
            return None

    if not content:
        return None

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        print(f"❌ Invalid survey JSON in {Path(json_path).name}: {e}")
        return None

    return room_from_records(data) if isinstance(data, dict) else None
