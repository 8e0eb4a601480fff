"""
Technical Validation Module
Cross-field consistency rules over a room survey (cabling, connectivity,
acoustics, sonorization) producing warnings, errors and an overall status
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from survey_config import ValidationLimits
from survey_models import AcousticLevel, Room, SignalType, SonorizationType, TriState


class Severity(Enum):
    WARNING = "warning"  # Advisory, never blocks
    ERROR = "error"      # Blocking, reported in the status


class ValidationStatus(Enum):
    OK = "OK"
    WARNINGS = "AVERTISSEMENTS"
    ERRORS = "ERREURS"


ERROR_MARKER = "❌ ERREUR: "
WARNING_MARKER = "⚠️ AVERTISSEMENT: "

BYOD_KEYWORDS = ['byod', 'sans-fil']
MIC_COUNT_REQUIRING_DSP = 2


@dataclass(frozen=True)
class Finding:
    rule_id: str
    severity: Severity
    message: str

    @property
    def detail(self) -> str:
        marker = ERROR_MARKER if self.severity == Severity.ERROR else WARNING_MARKER
        return marker + self.message


@dataclass(frozen=True)
class ValidationRule:
    """A single independent check; returns the messages it raises"""
    rule_id: str
    severity: Severity
    check: Callable[[Room, ValidationLimits], List[str]]


# =============================================================================
# RULES
# =============================================================================

def _format_distance(value: float) -> str:
    return f"{value:g}"


def _check_hdmi_distance(room: Room, limits: ValidationLimits) -> List[str]:
    messages = []
    for cable in room.cables:
        if cable.signal_type != SignalType.HDMI or cable.distance_with_margin_m is None:
            continue
        if cable.distance_with_margin_m > limits.max_hdmi_m:
            messages.append(
                f"Liaison HDMI {cable.point_a}→{cable.point_b} trop longue "
                f"({_format_distance(cable.distance_with_margin_m)}m) pour HDMI direct, "
                f"envisager HDBaseT ou AVoIP."
            )
    return messages


def _is_byod(room: Room) -> bool:
    platforms = [
        room.visio.platform if room.visio else None,
        room.usage.platform_type if room.usage else None,
    ]
    text = " ".join(p for p in platforms if p).lower()
    return any(kw in text for kw in BYOD_KEYWORDS)


def _check_byod_usb(room: Room, limits: ValidationLimits) -> List[str]:
    if not _is_byod(room):
        return []
    if any(zone.has_usbc or zone.has_usba for zone in room.zones):
        return []
    return ["Salle BYOD sans USB-C / USB disponible à la table."]


def _check_reverberant_feedback(room: Room, limits: ValidationLimits) -> List[str]:
    sono = room.sonorization
    if not sono:
        return []
    if (sono.acoustic_level == AcousticLevel.VERY_REVERBERANT
            and sono.mic_ceiling_beamforming > 0
            and not sono.anti_feedback):
        return ["Micro plafond en salle très réverbérée sans anti-larsen : risque de larsen élevé."]
    return []


def _check_visio_network(room: Room, limits: ValidationLimits) -> List[str]:
    # USB-C at the table stands in for "network available". Probably wrong
    # (USB-C is not a network port) but existing surveys rely on it.
    if not room.visio or not room.visio.required:
        return []
    if any(zone.has_usbc for zone in room.zones):
        return []
    return ["Visioconférence requise sans liaison réseau identifiée."]


def _check_voice_without_sonorization(room: Room, limits: ValidationLimits) -> List[str]:
    sono = room.sonorization
    if sono and sono.voice_reinforcement and sono.sonorization_type == SonorizationType.NONE:
        return ["Renforcement voix demandé mais aucune sonorisation définie."]
    return []


def _check_mics_without_dsp(room: Room, limits: ValidationLimits) -> List[str]:
    sono = room.sonorization
    if not sono:
        return []
    if sono.reinforcement_mic_count > MIC_COUNT_REQUIRING_DSP and sono.dsp != TriState.YES:
        return ["Plusieurs micros annoncés sans DSP prévu."]
    return []


def _check_hdbaset_distance(room: Room, limits: ValidationLimits) -> List[str]:
    messages = []
    for cable in room.cables:
        if cable.signal_type != SignalType.HDBASET or cable.distance_with_margin_m is None:
            continue
        if cable.distance_with_margin_m > limits.max_hdbaset_m:
            messages.append(
                f"Liaison HDBaseT {cable.point_a}→{cable.point_b} trop longue "
                f"({_format_distance(cable.distance_with_margin_m)}m), "
                f"envisager fibre ou AVoIP."
            )
    return messages


# Order is stable: new rules are appended, never inserted
RULES: Tuple[ValidationRule, ...] = (
    ValidationRule('hdmi_distance', Severity.WARNING, _check_hdmi_distance),
    ValidationRule('byod_usb', Severity.WARNING, _check_byod_usb),
    ValidationRule('reverberant_feedback', Severity.WARNING, _check_reverberant_feedback),
    ValidationRule('visio_network', Severity.ERROR, _check_visio_network),
    ValidationRule('voice_without_sonorization', Severity.ERROR, _check_voice_without_sonorization),
    ValidationRule('mics_without_dsp', Severity.WARNING, _check_mics_without_dsp),
    ValidationRule('hdbaset_distance', Severity.WARNING, _check_hdbaset_distance),
)


# =============================================================================
# REPORT
# =============================================================================

@dataclass(frozen=True)
class ValidationReport:
    findings: Tuple[Finding, ...] = ()

    @property
    def errors(self) -> List[Finding]:
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[Finding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]

    @property
    def status(self) -> ValidationStatus:
        if self.errors:
            return ValidationStatus.ERRORS
        if self.warnings:
            return ValidationStatus.WARNINGS
        return ValidationStatus.OK

    @property
    def details(self) -> List[str]:
        """Errors first, then warnings, each with its marker"""
        return [f.detail for f in self.errors] + [f.detail for f in self.warnings]

    @property
    def rule_ids(self) -> List[str]:
        return [f.rule_id for f in self.findings]

    def as_room_fields(self) -> Dict[str, object]:
        return {
            'validation_technique_statut': self.status.value,
            'validation_technique_details': self.details,
        }


def validate_room(room: Room, limits: Optional[ValidationLimits] = None,
                  rules: Tuple[ValidationRule, ...] = RULES) -> ValidationReport:
    """Run every rule in order and collect the findings"""
    limits = limits or ValidationLimits()
    findings: List[Finding] = []
    for rule in rules:
        for message in rule.check(room, limits):
            findings.append(Finding(rule.rule_id, rule.severity, message))
    return ValidationReport(findings=tuple(findings))


# =============================================================================
# COMPLETENESS RECAP
# =============================================================================

def missing_essentials(room: Room) -> List[str]:
    """Survey answers still needed before the room can be quoted"""
    missing = []
    env = room.environment
    if not env or not env.has_floor_area:
        missing.append("Dimensions de la salle")
    if not env or env.principal_wall is None:
        missing.append("Mur principal")
    if not room.usage or not room.usage.main_usage:
        missing.append("Usage principal")
    if not room.visio or not room.visio.platform:
        missing.append("Plateforme visio")
    if not room.displays:
        missing.append("Au moins un diffuseur")
    return missing
