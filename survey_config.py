"""
Survey Configuration Module
Tunable limits and export settings, loaded from the environment / .env file
"""

import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

# Load .env from current directory and from next to this module
load_dotenv()
load_dotenv(Path(__file__).parent / ".env")


DEFAULT_MAX_HDMI_M = 5.0
DEFAULT_MAX_HDBASET_M = 70.0
DEFAULT_DOCUMENT_PREFIX = "compte-rendu"
DEFAULT_CABLE_MARGIN_FACTOR = 1.2  # +20% on measured runs
DEFAULT_PAGE_SIZE = "a4"


def _positive_float(name: str, raw, default: float) -> float:
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class ValidationLimits:
    """Distance ceilings used by the technical validation rules"""
    max_hdmi_m: float = DEFAULT_MAX_HDMI_M
    max_hdbaset_m: float = DEFAULT_MAX_HDBASET_M

    def __post_init__(self):
        _positive_float("max_hdmi_m", self.max_hdmi_m, DEFAULT_MAX_HDMI_M)
        _positive_float("max_hdbaset_m", self.max_hdbaset_m, DEFAULT_MAX_HDBASET_M)

    @classmethod
    def from_env(cls) -> 'ValidationLimits':
        return cls(
            max_hdmi_m=_positive_float("MAX_HDMI_M", os.getenv("MAX_HDMI_M"), DEFAULT_MAX_HDMI_M),
            max_hdbaset_m=_positive_float("MAX_HDBASET_M", os.getenv("MAX_HDBASET_M"), DEFAULT_MAX_HDBASET_M),
        )


@dataclass(frozen=True)
class ExportSettings:
    """Output naming and rendering options"""
    document_prefix: str = DEFAULT_DOCUMENT_PREFIX
    cable_margin_factor: float = DEFAULT_CABLE_MARGIN_FACTOR
    page_size: str = DEFAULT_PAGE_SIZE

    @classmethod
    def from_env(cls) -> 'ExportSettings':
        return cls(
            document_prefix=os.getenv("DOCUMENT_PREFIX", DEFAULT_DOCUMENT_PREFIX),
            cable_margin_factor=_positive_float(
                "CABLE_MARGIN_FACTOR", os.getenv("CABLE_MARGIN_FACTOR"), DEFAULT_CABLE_MARGIN_FACTOR
            ),
            page_size=os.getenv("PDF_PAGE_SIZE", DEFAULT_PAGE_SIZE).lower(),
        )
