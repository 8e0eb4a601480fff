"""
Derived Values Module
Recommendations computed from the survey: RJ45 port counts, signal topology,
display sizing and cable margins
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from survey_models import Display, Room, SourceType
from survey_models import projector_size_inches  # re-exported with the other sizing helpers


# =============================================================================
# RJ45 PORT RECOMMENDATION
# =============================================================================

DEFAULT_PORT_COMMENT = "Prises réseau de base"
WIRELESS_PLATFORM_KEYWORDS = ['byod', 'sans-fil']
NETWORK_SOURCE_KEYWORDS = ['réseau', 'pc']


@dataclass(frozen=True)
class PortRecommendation:
    """Recommended RJ45 ports, split by where they land in the room"""
    rack: int = 0
    table: int = 0
    other: int = 0
    reasons: tuple = ()

    @property
    def total(self) -> int:
        return self.rack + self.table + self.other

    @property
    def comment(self) -> str:
        if self.reasons:
            return f"Prises prévues pour {', '.join(self.reasons)}"
        return DEFAULT_PORT_COMMENT

    def as_room_fields(self) -> Dict[str, object]:
        """Values to store on the room record"""
        return {
            'rj45_rack_recommande': self.rack,
            'rj45_table_recommande': self.table,
            'rj45_autres_recommande': self.other,
            'rj45_total_recommande': self.total,
            'rj45_commentaire': self.comment,
        }


def recommend_ports(room: Room) -> PortRecommendation:
    """
    Count the RJ45 ports a room needs.

    Each condition adds at most one port:
    - rack: visio, streaming, Dante, a signage player
    - table: BYOD / wireless platform
    - other: any networked source (PC, network player)
    """
    visio = room.visio
    sono = room.sonorization
    platform = ((room.usage.platform_type if room.usage else None) or "").lower()

    rack = 0
    table = 0
    other = 0
    reasons: List[str] = []

    if visio and visio.required:
        rack += 1
        reasons.append("visio")
    if visio and visio.streaming_enabled:
        rack += 1
        reasons.append("streaming")
    if sono and sono.dante.is_yes:
        rack += 1
        reasons.append("Dante")
    if any(s.source_type == SourceType.PLAYER_SIGNAGE for s in room.sources):
        rack += 1
        reasons.append("Player signage")

    if any(kw in platform for kw in WIRELESS_PLATFORM_KEYWORDS):
        table += 1
        reasons.append("BYOD")

    if any(kw in s.label.lower() for s in room.sources for kw in NETWORK_SOURCE_KEYWORDS):
        other += 1

    return PortRecommendation(rack=rack, table=table, other=other, reasons=tuple(reasons))


# =============================================================================
# SIGNAL MANAGEMENT TOPOLOGY
# =============================================================================

class Topology(Enum):
    SIMPLE_DISTRIBUTION = "Distribution simple"
    SELECTOR = "Sélecteur"
    MATRIX = "Matrice"


def recommend_topology(source_count: int, display_count: int) -> Topology:
    """Selector for N sources to one display, matrix for N to N, direct otherwise"""
    if source_count > 1 and display_count == 1:
        return Topology.SELECTOR
    if source_count > 1 and display_count > 1:
        return Topology.MATRIX
    return Topology.SIMPLE_DISTRIBUTION


# =============================================================================
# DISPLAY SIZING
# =============================================================================

INCHES_PER_VIEWER_METER = 20
UNDERSIZED_RATIO = 0.8
OVERSIZED_RATIO = 1.5


def recommended_display_size(viewer_distance_m: Optional[float]) -> int:
    if not viewer_distance_m or viewer_distance_m <= 0:
        return 0
    return round(viewer_distance_m * INCHES_PER_VIEWER_METER)


def display_size_comment(display: Display) -> Optional[str]:
    """Compare the screen size with the size recommended for the viewing distance"""
    recommended = recommended_display_size(display.viewer_distance_m)
    current = display.effective_size_inches
    if not recommended or not current:
        return None
    if current < recommended * UNDERSIZED_RATIO:
        return "Écran probablement sous-dimensionné"
    if current > recommended * OVERSIZED_RATIO:
        return "Écran très grand par rapport à la distance"
    return "Taille d'écran cohérente"


# =============================================================================
# CABLE MARGIN
# =============================================================================

def apply_cable_margin(distance_m: Optional[float], factor: float) -> Optional[float]:
    """Measured run length plus the safety allowance, rounded to 0.1 m"""
    if distance_m is None:
        return None
    return round(distance_m * factor, 1)
