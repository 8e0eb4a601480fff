"""
Document Model Module
Turns a surveyed room into an ordered, renderer-agnostic document:
numbered sections holding text, labelled fields, bullet lists, links and
sub-sections. Every output format is rendered from this one model.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple, Union

from derived_values import (
    PortRecommendation, display_size_comment, recommend_topology, recommended_display_size,
)
from survey_models import Cable, ConnectivityZone, Display, Room, TriState, Wall
from technical_validation import ValidationReport, missing_essentials


NOT_AVAILABLE = "N/A"
YES = "Oui"
NO = "Non"

DOCUMENT_TITLE = "Compte rendu technique"

# Fixed section order, numbered from 1
SECTION_TITLES = [
    ('project', "Projet"),
    ('usage', "Usage & Contexte"),
    ('environment', "Environnement"),
    ('visio', "Visio / Streaming"),
    ('sources', "Sources en régie"),
    ('displays', "Diffuseurs"),
    ('sonorization', "Sonorisation"),
    ('zones', "Connectique utilisateur"),
    ('cables', "Liaisons & câblage"),
    ('elements', "Éléments du plan"),
    ('synthesis', "Synthèse"),
]
SECTION_NUMBERS = {key: i + 1 for i, (key, _) in enumerate(SECTION_TITLES)}
SECTION_NAMES = dict(SECTION_TITLES)

WALL_POSITIONS = {
    Wall.A: "haut",
    Wall.B: "droite",
    Wall.C: "bas",
    Wall.D: "gauche",
}


# =============================================================================
# DOCUMENT TREE
# =============================================================================

@dataclass(frozen=True)
class TextLine:
    text: str


@dataclass(frozen=True)
class FieldLine:
    label: str
    value: str


@dataclass(frozen=True)
class ListLine:
    """Bullet list; a title turns it into a nested group under one bullet"""
    items: Tuple[str, ...]
    title: Optional[str] = None


@dataclass(frozen=True)
class LinkLine:
    label: str
    url: str


@dataclass(frozen=True)
class SubSection:
    title: str
    lines: Tuple['Line', ...] = ()


Line = Union[TextLine, FieldLine, ListLine, LinkLine, SubSection]


@dataclass(frozen=True)
class Section:
    key: str
    number: int
    title: str
    lines: Tuple[Line, ...] = ()

    @property
    def heading(self) -> str:
        return f"{self.number}. {self.title}"


@dataclass(frozen=True)
class Document:
    title: str
    header: Tuple[FieldLine, ...] = ()
    sections: Tuple[Section, ...] = ()

    def section(self, key: str) -> Optional[Section]:
        for section in self.sections:
            if section.key == key:
                return section
        return None

    @property
    def section_keys(self) -> List[str]:
        return [s.key for s in self.sections]


# =============================================================================
# FORMATTING
# =============================================================================

def yes_no(value: Any) -> str:
    if isinstance(value, TriState):
        return value.value
    return YES if value else NO


def or_na(value: Any) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def count(value: Optional[int]) -> str:
    return str(value or 0)


def join_values(values: Iterable[Any]) -> str:
    text = ", ".join(or_na(v) for v in values if v is not None and v != "")
    return text or NOT_AVAILABLE


def metres(value: Optional[float]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:g} m"


def document_filename(prefix: str, room_name: str, ext: str) -> str:
    """<prefix>-<room name>.<ext>; unsafe characters are left to the caller"""
    return f"{prefix}-{room_name}.{ext.lstrip('.')}"


# =============================================================================
# SECTION BUILDERS
# =============================================================================

def _project_lines(room: Room) -> List[Line]:
    project = room.project
    return [
        FieldLine("Client", or_na(project.client_name)),
        FieldLine("Site", or_na(project.site_name)),
        FieldLine("Contact", or_na(project.contact_name)),
        FieldLine("Décisionnaire", or_na(project.decision_contact)),
        FieldLine("Service", or_na(project.decision_service)),
        FieldLine("Date de décision", or_na(project.decision_date)),
        FieldLine("Commentaires", or_na(project.comments)),
    ]


def _usage_lines(room: Room) -> List[Line]:
    usage = room.usage
    return [
        FieldLine("Usage principal", or_na(usage.main_usage)),
        FieldLine("Intensité", or_na(usage.intensity)),
        FieldLine("Niveau des utilisateurs", or_na(usage.skill_level)),
        FieldLine("Plateforme", or_na(usage.platform_type)),
        FieldLine("Nombre de personnes", count(usage.people_count)),
        SubSection("Automatisation", (
            FieldLine("Réservation", yes_no(usage.automation_booking)),
            FieldLine("Éclairage", yes_no(usage.automation_lighting)),
            FieldLine("Acoustique", yes_no(usage.automation_acoustic)),
        )),
        FieldLine("Réservation de salle", yes_no(usage.reservation)),
        FieldLine("Dépose de matériel", yes_no(usage.equipment_removal)),
        FieldLine("Rapatriement de matériel", yes_no(usage.equipment_return)),
        FieldLine("Formation demandée", yes_no(usage.training_requested)),
    ]


def _environment_lines(room: Room) -> List[Line]:
    env = room.environment
    walls = tuple(
        FieldLine(f"Mur {wall.value} ({WALL_POSITIONS[wall]})", or_na(env.wall_material(wall)))
        for wall in Wall
    )
    return [
        FieldLine("Longueur", metres(env.length_m)),
        FieldLine("Largeur", metres(env.width_m)),
        FieldLine("Hauteur", metres(env.height_m)),
        SubSection("Murs", walls + (FieldLine("Mur principal", or_na(env.principal_wall)),)),
        FieldLine("Sol", or_na(env.floor_material)),
        FieldLine("Plafond", or_na(env.ceiling_material)),
        FieldLine("Faux plancher", yes_no(env.raised_floor)),
        FieldLine("Faux plafond", yes_no(env.false_ceiling)),
        FieldLine("Luminosité", or_na(env.brightness)),
        FieldLine("Problème acoustique", yes_no(env.acoustic_issue)),
        FieldLine("Commentaire acoustique", or_na(env.acoustic_comment)),
        FieldLine("Prises RJ45 présentes", yes_no(env.rj45_present)),
        FieldLine("Nombre de prises RJ45", count(env.rj45_count)),
    ]


def _visio_lines(room: Room) -> List[Line]:
    visio = room.visio
    lines: List[Line] = [
        FieldLine("Visio requise", yes_no(visio.required)),
        FieldLine("Plateforme", or_na(visio.platform)),
        SubSection("Besoins", (
            FieldLine("Voir", yes_no(visio.need_to_see)),
            FieldLine("Être vu", yes_no(visio.need_to_be_seen)),
            FieldLine("Entendre", yes_no(visio.need_to_hear)),
            FieldLine("Être entendu", yes_no(visio.need_to_be_heard)),
        )),
        FieldLine("Caméras", count(visio.camera_count)),
        FieldLine("Types de caméras", join_values(visio.camera_types)),
        FieldLine("Micros", count(visio.mic_count)),
        FieldLine("Types de micros", join_values(visio.mic_types)),
        FieldLine("Streaming", yes_no(visio.streaming_enabled)),
    ]
    if visio.streaming_enabled:
        lines.append(SubSection("Streaming", (
            FieldLine("Type", or_na(visio.streaming_type)),
            FieldLine("Plateforme", or_na(visio.streaming_platform)),
            FieldLine("Complexité", or_na(visio.streaming_complexity)),
        )))
    return lines


def _sources_lines(room: Room) -> List[Line]:
    return [ListLine(tuple(f"{s.label} (x{s.quantity})" for s in room.sources))]


def _display_block(index: int, display: Display) -> SubSection:
    size = display.effective_size_inches
    recommended = recommended_display_size(display.viewer_distance_m)
    lines = [
        FieldLine("Taille", f"{size:g}\"" if size else NOT_AVAILABLE),
        FieldLine("Base écran", f"{display.base_width_cm:g} cm" if display.base_width_cm else NOT_AVAILABLE),
        FieldLine("Position", or_na(display.position)),
        FieldLine("Distance du dernier spectateur", metres(display.viewer_distance_m)),
        FieldLine("Hauteur de fixation", metres(display.mount_height_m)),
        FieldLine("Distance de projection", metres(display.projection_distance_m)),
        FieldLine("Taille recommandée", f"{recommended}\"" if recommended else NOT_AVAILABLE),
    ]
    comment = display_size_comment(display)
    if comment:
        lines.append(TextLine(comment))
    return SubSection(f"{display.label} #{index + 1}", tuple(lines))


def _displays_lines(room: Room) -> List[Line]:
    return [_display_block(i, d) for i, d in enumerate(room.displays)]


def _sonorization_lines(room: Room) -> List[Line]:
    sono = room.sonorization
    return [
        FieldLine("Type de sonorisation", or_na(sono.sonorization_type)),
        SubSection("Diffusion", (
            FieldLine("Homogène", yes_no(sono.diffusion_homogeneous)),
            FieldLine("Locale", yes_no(sono.diffusion_local)),
            FieldLine("Orientée", yes_no(sono.diffusion_directed)),
        )),
        FieldLine("Renforcement voix", yes_no(sono.voice_reinforcement)),
        SubSection("Micros", (
            FieldLine("Main HF", count(sono.mic_handheld)),
            FieldLine("Cravate HF", count(sono.mic_lapel)),
            FieldLine("Serre-tête HF", count(sono.mic_headset)),
            FieldLine("Pupitre", count(sono.mic_lectern)),
            FieldLine("Plafond beamforming", count(sono.mic_ceiling_beamforming)),
            FieldLine("Table", count(sono.mic_table)),
        )),
        FieldLine("Mixage multiple", yes_no(sono.multi_mixing)),
        FieldLine("Retour", yes_no(sono.monitor_return)),
        FieldLine("Type de retour", or_na(sono.monitor_type)),
        FieldLine("Acoustique", or_na(sono.acoustic_level)),
        FieldLine("Sources spécifiques", or_na(sono.specific_sources)),
        FieldLine("DSP", yes_no(sono.dsp)),
        FieldLine("Dante", yes_no(sono.dante)),
        FieldLine("Anti-larsen", yes_no(sono.anti_feedback)),
    ]


def _zone_block(zone: ConnectivityZone) -> SubSection:
    return SubSection(zone.name, (
        FieldLine("HDMI", count(zone.hdmi_count)),
        FieldLine("USB-C", count(zone.usbc_count)),
        FieldLine("DisplayPort", count(zone.displayport_count)),
        FieldLine("RJ45", count(zone.rj45_count)),
        FieldLine("USB-A", count(zone.usba_count)),
        FieldLine("230V", count(zone.power_230v_count)),
        FieldLine("Distance à la régie", metres(zone.distance_to_control_room_m)),
    ))


def _zones_lines(room: Room) -> List[Line]:
    return [_zone_block(z) for z in room.zones]


def _cable_block(cable: Cable) -> SubSection:
    return SubSection(f"{cable.point_a} → {cable.point_b}", (
        FieldLine("Type de signal", or_na(cable.signal_type)),
        FieldLine("Transport", or_na(cable.transport)),
        FieldLine("Distance", metres(cable.distance_m)),
        FieldLine("Distance avec marge", metres(cable.distance_with_margin_m)),
        FieldLine("Recommandation", or_na(cable.recommendation)),
        FieldLine("Commentaire", or_na(cable.comment)),
    ))


def _cables_lines(room: Room) -> List[Line]:
    return [_cable_block(c) for c in room.cables]


def _elements_lines(room: Room) -> List[Line]:
    lines: List[Line] = []
    for element_type, elements in room.elements_by_type.items():
        items = []
        for i, element in enumerate(elements):
            label = element.label or f"{element_type.value} #{i + 1}"
            if element.comment:
                label = f"{label} - {element.comment}"
            items.append(label)
        lines.append(ListLine(tuple(items), title=f"{element_type.value} ({len(elements)})"))
    return lines


def _text_block(value: Any) -> Tuple[Line, ...]:
    """Pass-through rendering of an already-resolved AI block"""
    if isinstance(value, dict):
        return tuple(FieldLine(str(k), join_values(v) if isinstance(v, list) else or_na(v))
                     for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return (ListLine(tuple(str(v) for v in value)),)
    return (TextLine(str(value)),)


def _synthesis_lines(room: Room, ports: Optional[PortRecommendation],
                     report: Optional[ValidationReport]) -> List[Line]:
    topology = recommend_topology(len(room.sources), len(room.displays))
    lines: List[Line] = [
        FieldLine("Sources", count(len(room.sources))),
        FieldLine("Diffuseurs", count(len(room.displays))),
        FieldLine("Gestion des signaux recommandée", topology.value),
    ]

    if ports is not None:
        lines.append(SubSection("Prises RJ45 recommandées", (
            FieldLine("Baie / régie", count(ports.rack)),
            FieldLine("Table", count(ports.table)),
            FieldLine("Autres", count(ports.other)),
            FieldLine("Total", count(ports.total)),
            TextLine(ports.comment),
        )))

    if report is not None:
        validation: List[Line] = [FieldLine("Statut", report.status.value)]
        if report.details:
            validation.append(ListLine(tuple(report.details)))
        lines.append(SubSection("Validation technique", tuple(validation)))

    missing = missing_essentials(room)
    if missing:
        lines.append(SubSection("Informations manquantes", (ListLine(tuple(missing)),)))

    ai = room.ai
    if not ai.is_empty:
        blocks: List[Line] = []
        if ai.summary:
            blocks.append(FieldLine("Résumé", ai.summary))
        if ai.critical_errors:
            blocks.append(ListLine(ai.critical_errors, title="Erreurs critiques"))
        if ai.warnings:
            blocks.append(ListLine(ai.warnings, title="Points d'attention"))
        if ai.validation_status:
            blocks.append(FieldLine("Validation IA", ai.validation_status))
        if ai.validation_details:
            blocks.append(ListLine(ai.validation_details, title="Détails de validation"))
        if ai.audio_config:
            blocks.append(SubSection("Configuration audio", _text_block(ai.audio_config)))
        if ai.usage_scenarios:
            blocks.append(SubSection("Scénarios d'usage", _text_block(ai.usage_scenarios)))
        lines.append(SubSection("Analyse IA", tuple(blocks)))

    if room.photos:
        lines.append(SubSection("Photos", tuple(LinkLine(p.name, p.url) for p in room.photos)))

    return lines


# =============================================================================
# COMPILER
# =============================================================================

def compile_document(room: Optional[Room],
                     ports: Optional[PortRecommendation] = None,
                     report: Optional[ValidationReport] = None) -> Optional[Document]:
    """
    Build the section model for a room.

    Single-record sections (project, usage, environment, visio, sonorization)
    are emitted only when the record exists; list sections are omitted when
    the list is empty. The synthesis is always emitted. Returns None when
    there is no room, which callers report as "nothing to render".
    """
    if room is None:
        return None

    builders = {
        'project': (room.project, _project_lines),
        'usage': (room.usage, _usage_lines),
        'environment': (room.environment, _environment_lines),
        'visio': (room.visio, _visio_lines),
        'sources': (room.sources, _sources_lines),
        'displays': (room.displays, _displays_lines),
        'sonorization': (room.sonorization, _sonorization_lines),
        'zones': (room.zones, _zones_lines),
        'cables': (room.cables, _cables_lines),
        'elements': (room.elements, _elements_lines),
    }

    sections = []
    for key, title in SECTION_TITLES:
        if key == 'synthesis':
            lines = _synthesis_lines(room, ports, report)
        else:
            backing, build = builders[key]
            if not backing:
                continue
            lines = build(room)
        sections.append(Section(key, SECTION_NUMBERS[key], title, tuple(lines)))

    header = (
        FieldLine("Salle", room.name),
        FieldLine("Typologie", or_na(room.typology)),
        FieldLine("N° de devis", or_na(room.quote_reference)),
        FieldLine("N° de commande", or_na(room.order_reference)),
    )
    return Document(title=f"{DOCUMENT_TITLE} - {room.name}", header=header, sections=tuple(sections))
