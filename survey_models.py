"""
Survey Models Module
Room survey records (usage, environment, visio, sonorization, equipment, cabling)
and the closed vocabularies used by the survey forms
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# =============================================================================
# CLOSED VOCABULARIES
# =============================================================================

class Wall(Enum):
    A = "A"  # haut
    B = "B"  # droite
    C = "C"  # bas
    D = "D"  # gauche


class Material(Enum):
    PLACO = "Placo"
    BETON = "Béton"
    BRIQUE = "Brique"
    VITRAGE = "Vitrage"
    RIDEAUX = "Rideaux / tentures"
    BOIS = "Bois"
    PANNEAUX_ACOUSTIQUES = "Panneaux acoustiques"
    AUTRE = "Autre"


class Intensity(Enum):
    OCCASIONAL = "occasionnel"
    REGULAR = "régulier"
    INTENSIVE = "intensif"


class SkillLevel(Enum):
    BEGINNER = "débutant"
    INTERMEDIATE = "intermédiaire"
    EXPERT = "expert"


class Brightness(Enum):
    LOW = "faible"
    MEDIUM = "moyenne"
    HIGH = "forte"


class StreamingType(Enum):
    LIVE = "live"
    LIVE_RECORD = "live+record"


class StreamingComplexity(Enum):
    SIMPLE = "simple"
    CONTROL_ROOM = "régie"


class SonorizationType(Enum):
    AMBIANCE = "Ambiance"
    CONFERENCE = "Conférence / Formation"
    MIXED = "Mixte (ambiance + voix)"
    NONE = "Aucune sonorisation"


class AcousticLevel(Enum):
    ACCEPTABLE = "Acceptable"
    PROBLEMATIC = "Problématique"
    VERY_REVERBERANT = "Très réverbérée"


class MonitorType(Enum):
    LECTERN = "Pupitre"
    STAGE = "Scène"
    IN_EAR = "Oreillette / in-ear"


class TriState(Enum):
    """Yes / no / unknown answer; UNKNOWN is never the same as NO"""
    YES = "Oui"
    NO = "Non"
    UNKNOWN = "Je ne sais pas"

    @classmethod
    def from_label(cls, value: Any) -> 'TriState':
        if isinstance(value, TriState):
            return value
        if value is True:
            return cls.YES
        if value is False:
            return cls.NO
        text = str(value or "").strip().lower()
        if text in ("oui", "yes", "true"):
            return cls.YES
        if text in ("non", "no", "false"):
            return cls.NO
        # "Je ne sais pas", "Peu importe", empty
        return cls.UNKNOWN

    @property
    def is_yes(self) -> bool:
        return self is TriState.YES


class SourceType(Enum):
    PC_FIXE = "PC fixe"
    LAPTOP = "Laptop"
    PLAYER_SIGNAGE = "Player signage"
    SANS_FIL = "Sans-fil"
    CODEC = "Codec"
    REGIE = "Régie"
    AUTRE = "Autre"


class DisplayType(Enum):
    MONITOR = "Moniteur"
    PROJECTOR = "Vidéoprojecteur"
    LED = "LED"
    VIDEO_WALL = "Mur d'images"
    REPEATER = "Répétiteur"


class DisplayPosition(Enum):
    FRONT = "Face"
    SIDE = "Latéral"
    BACK = "Fond"


class SignalType(Enum):
    HDMI = "Vidéo HDMI"
    HDBASET = "Vidéo HDBaseT"
    AVOIP = "Vidéo IP / AVoIP"
    USB = "USB"
    AUDIO_ANALOG = "Audio analogique"
    AUDIO_DANTE = "Audio numérique / Dante"
    NETWORK = "Réseau RJ45"
    OTHER = "Autre"


class ElementType(Enum):
    SCREEN = "Écran"
    SPEAKER = "Enceinte"
    CONTROL_RACK = "Régie"
    CONNECTIVITY_POINT = "Connectique"
    CAMERA = "Caméra"


def projector_size_inches(base_cm: Optional[float]) -> float:
    """Diagonal in inches of a 16:10 projection screen of the given base width"""
    if not base_cm or base_cm <= 0:
        return 0.0
    height = base_cm * 10 / 16
    diagonal_cm = math.sqrt(base_cm * base_cm + height * height)
    return round(diagonal_cm / 2.54, 1)


# =============================================================================
# SURVEY RECORDS
# =============================================================================

@dataclass(frozen=True)
class Project:
    client_name: str = ""
    site_name: Optional[str] = None
    contact_name: Optional[str] = None
    decision_contact: Optional[str] = None
    decision_service: Optional[str] = None
    decision_date: Optional[str] = None
    comments: Optional[str] = None


@dataclass(frozen=True)
class Usage:
    main_usage: Optional[str] = None
    intensity: Optional[Intensity] = None
    skill_level: Optional[SkillLevel] = None
    platform_type: Optional[str] = None
    people_count: Optional[int] = None
    automation_booking: bool = False
    automation_lighting: bool = False
    automation_acoustic: bool = False
    reservation: bool = False
    equipment_removal: bool = False
    equipment_return: bool = False
    training_requested: bool = False


@dataclass(frozen=True)
class Environment:
    length_m: Optional[float] = None
    width_m: Optional[float] = None
    height_m: Optional[float] = None
    wall_a: Optional[Material] = None
    wall_b: Optional[Material] = None
    wall_c: Optional[Material] = None
    wall_d: Optional[Material] = None
    principal_wall: Optional[Wall] = None
    floor_material: Optional[str] = None
    ceiling_material: Optional[str] = None
    raised_floor: bool = False
    false_ceiling: bool = False
    brightness: Optional[Brightness] = None
    acoustic_issue: bool = False
    acoustic_comment: Optional[str] = None
    rj45_present: bool = False
    rj45_count: int = 0

    def wall_material(self, wall: Wall) -> Optional[Material]:
        return {
            Wall.A: self.wall_a,
            Wall.B: self.wall_b,
            Wall.C: self.wall_c,
            Wall.D: self.wall_d,
        }[wall]

    @property
    def has_floor_area(self) -> bool:
        """True when both length and width are known and positive"""
        return bool(self.length_m and self.width_m and self.length_m > 0 and self.width_m > 0)


@dataclass(frozen=True)
class Visio:
    required: bool = False
    platform: Optional[str] = None
    need_to_see: bool = False
    need_to_be_seen: bool = False
    need_to_hear: bool = False
    need_to_be_heard: bool = False
    camera_count: int = 0
    camera_types: Tuple[str, ...] = ()
    mic_count: int = 0
    mic_types: Tuple[str, ...] = ()
    streaming_enabled: bool = False
    streaming_type: Optional[StreamingType] = None
    streaming_platform: Optional[str] = None
    streaming_complexity: Optional[StreamingComplexity] = None


@dataclass(frozen=True)
class Sonorization:
    sonorization_type: Optional[SonorizationType] = None
    diffusion_homogeneous: bool = False
    diffusion_local: bool = False
    diffusion_directed: bool = False
    voice_reinforcement: bool = False
    mic_handheld: int = 0
    mic_lapel: int = 0
    mic_headset: int = 0
    mic_lectern: int = 0
    mic_ceiling_beamforming: int = 0
    mic_table: int = 0
    multi_mixing: bool = False
    monitor_return: bool = False
    monitor_type: Optional[MonitorType] = None
    acoustic_level: Optional[AcousticLevel] = None
    specific_sources: Optional[str] = None
    dsp: TriState = TriState.UNKNOWN
    dante: TriState = TriState.UNKNOWN
    anti_feedback: bool = False

    @property
    def reinforcement_mic_count(self) -> int:
        return (self.mic_handheld + self.mic_lapel + self.mic_headset +
                self.mic_lectern + self.mic_ceiling_beamforming + self.mic_table)

    @property
    def has_multizone_diffusion(self) -> bool:
        return self.diffusion_homogeneous or self.diffusion_local or self.diffusion_directed


@dataclass(frozen=True)
class Source:
    source_type: SourceType
    quantity: int = 1

    @property
    def label(self) -> str:
        return self.source_type.value


@dataclass(frozen=True)
class Display:
    display_type: DisplayType
    size_inches: Optional[float] = None
    base_width_cm: Optional[float] = None  # Projection screen base (projectors)
    position: Optional[DisplayPosition] = None
    viewer_distance_m: Optional[float] = None
    mount_height_m: Optional[float] = None
    projection_distance_m: Optional[float] = None

    @property
    def label(self) -> str:
        return self.display_type.value

    @property
    def effective_size_inches(self) -> Optional[float]:
        """Explicit size, else the diagonal of a 16:10 screen of the given base"""
        if self.size_inches:
            return self.size_inches
        if self.base_width_cm and self.base_width_cm > 0:
            return projector_size_inches(self.base_width_cm)
        return None


@dataclass(frozen=True)
class Cable:
    point_a: str
    point_b: str
    signal_type: SignalType = SignalType.OTHER
    transport: Optional[str] = None
    distance_m: Optional[float] = None
    distance_with_margin_m: Optional[float] = None  # Supplied upstream
    recommendation: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class ConnectivityZone:
    name: str
    hdmi_count: int = 0
    usbc_count: int = 0
    displayport_count: int = 0
    rj45_count: int = 0
    usba_count: int = 0
    power_230v_count: int = 0
    distance_to_control_room_m: Optional[float] = None

    CONNECTORS = {
        'hdmi': 'hdmi_count',
        'usbc': 'usbc_count',
        'displayport': 'displayport_count',
        'rj45': 'rj45_count',
        'usba': 'usba_count',
        'power_230v': 'power_230v_count',
    }

    def offers(self, connector: str) -> bool:
        """True when the zone has at least one socket of this kind ('hdmi', 'usbc', ...)"""
        attr = self.CONNECTORS.get(connector.lower().replace('-', ''))
        return bool(attr) and getattr(self, attr) > 0

    @property
    def has_usbc(self) -> bool:
        return self.offers('usbc')

    @property
    def has_usba(self) -> bool:
        return self.offers('usba')

    @property
    def video_input_count(self) -> int:
        return self.hdmi_count + self.usbc_count + self.displayport_count


@dataclass(frozen=True)
class RoomElement:
    element_type: ElementType
    x_pct: float = 50.0  # 0-100, along the room width
    y_pct: float = 50.0  # 0-100, along the room length
    label: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class Photo:
    name: str
    url: str


@dataclass(frozen=True)
class AIInsights:
    """Already-resolved AI analysis blocks, rendered as-is"""
    summary: Optional[str] = None
    warnings: Tuple[str, ...] = ()
    critical_errors: Tuple[str, ...] = ()
    audio_config: Optional[Any] = None
    validation_status: Optional[str] = None
    validation_details: Tuple[str, ...] = ()
    usage_scenarios: Optional[Any] = None

    @property
    def is_empty(self) -> bool:
        return not any([self.summary, self.warnings, self.critical_errors, self.audio_config,
                        self.validation_status, self.validation_details, self.usage_scenarios])


@dataclass(frozen=True)
class Room:
    """A surveyed room with all of its survey records"""
    room_id: str
    name: str
    typology: Optional[str] = None
    quote_reference: Optional[str] = None
    order_reference: Optional[str] = None
    project: Optional[Project] = None
    usage: Optional[Usage] = None
    environment: Optional[Environment] = None
    visio: Optional[Visio] = None
    sonorization: Optional[Sonorization] = None
    sources: Tuple[Source, ...] = ()
    displays: Tuple[Display, ...] = ()
    cables: Tuple[Cable, ...] = ()
    zones: Tuple[ConnectivityZone, ...] = ()
    elements: Tuple[RoomElement, ...] = ()
    photos: Tuple[Photo, ...] = ()
    ai: AIInsights = field(default_factory=AIInsights)

    @property
    def elements_by_type(self) -> Dict[ElementType, List[RoomElement]]:
        """Placed elements grouped by type, in first-seen order"""
        groups: Dict[ElementType, List[RoomElement]] = {}
        for element in self.elements:
            groups.setdefault(element.element_type, []).append(element)
        return groups
