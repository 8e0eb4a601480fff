"""
Cable Generator Module
Proposes a basic set of links (video and audio) for a room from its sources,
displays, connectivity zones and sonorization answers
"""

from typing import List, Optional

from derived_values import apply_cable_margin
from survey_config import DEFAULT_CABLE_MARGIN_FACTOR
from survey_models import Cable, ConnectivityZone, Room, SignalType


# Endpoint names used for generated equipment
VIDEO_SELECTOR = "Sélecteur vidéo"
VIDEO_MATRIX = "Matrice vidéo"
FALLBACK_DISPLAY = "Diffuseur"
AUDIO_DSP = "DSP / Mixeur audio"
AUDIO_MULTIZONE = "Matrice audio / DSP multizone"
AMPLIFICATION = "Amplification / Enceintes"

# Default run lengths (m) when nothing was measured
ZONE_TO_SELECTOR_M = 2
ZONE_TO_CONTROL_ROOM_M = 10
SOURCE_TO_SWITCHER_M = 3
TO_DISPLAY_M = 5
AUDIO_TO_DSP_M = 5
DSP_TO_AMPLIFICATION_M = 10
AUDIO_DIRECT_M = 8

HDMI_DIRECT_MAX_M = 5  # Zone runs longer than this go over HDBaseT

MIC_CATEGORIES = [
    ('mic_handheld', "Micros main HF"),
    ('mic_lapel', "Micros cravate HF"),
    ('mic_lectern', "Micros pupitre"),
    ('mic_table', "Micros table"),
    ('mic_ceiling_beamforming', "Micros plafond beamforming"),
]
AUDIO_SOURCE_KEYWORDS = ['pc', 'ordinateur', 'player']


class CableGenerator:
    """Builds Cable records for a room; never touches the room itself"""

    def __init__(self, room: Room, margin_factor: float = DEFAULT_CABLE_MARGIN_FACTOR):
        self.room = room
        self.margin_factor = margin_factor
        self.cables: List[Cable] = []

    def _link(self, point_a: str, point_b: str, distance_m: float, comment: str,
              signal_type: SignalType = SignalType.HDMI, transport: str = "HDMI direct"):
        self.cables.append(Cable(
            point_a=point_a,
            point_b=point_b,
            signal_type=signal_type,
            transport=transport,
            distance_m=distance_m,
            distance_with_margin_m=apply_cable_margin(distance_m, self.margin_factor),
            comment=comment,
        ))

    @property
    def video_sources(self) -> List[str]:
        return [
            s.label for s in self.room.sources
            if 'audio' not in s.label.lower() and 'micro' not in s.label.lower()
        ]

    @property
    def display_labels(self) -> List[str]:
        return [d.label for d in self.room.displays]

    # -------------------------------------------------------------------------
    # Video
    # -------------------------------------------------------------------------

    def _zone_target(self, via_selector: bool) -> str:
        displays = self.display_labels
        sources = self.video_sources
        multi = len(sources) > 1 if via_selector else len(sources) > 0
        if len(displays) > 1 or multi:
            return VIDEO_MATRIX
        return displays[0] if displays else FALLBACK_DISPLAY

    def _zone_transport(self, zone: ConnectivityZone):
        distance = zone.distance_to_control_room_m
        if distance and distance > HDMI_DIRECT_MAX_M:
            return SignalType.HDBASET, "HDBaseT"
        return SignalType.HDMI, "HDMI direct"

    def add_zone_links(self, zone: ConnectivityZone):
        inputs = zone.video_input_count
        if inputs == 0:
            return

        signal, transport = self._zone_transport(zone)
        run = zone.distance_to_control_room_m or ZONE_TO_CONTROL_ROOM_M

        if inputs == 1:
            connector = "HDMI" if zone.hdmi_count else "USB-C" if zone.usbc_count else "DisplayPort"
            self._link(f"{connector} {zone.name}", self._zone_target(via_selector=False), run,
                       "Liaison directe depuis source en salle", signal, transport)
            return

        selector = f"Sélecteur local {zone.name}"
        for connector, count in (("HDMI", zone.hdmi_count),
                                 ("USB-C", zone.usbc_count),
                                 ("DisplayPort", zone.displayport_count)):
            for i in range(count):
                self._link(f"{connector} {zone.name} {i + 1}", selector, ZONE_TO_SELECTOR_M,
                           "Source en salle vers sélecteur local")

        if len(self.display_labels) > 1 or self.video_sources:
            self._link(selector, self._zone_target(via_selector=True), run,
                       f"Liaison depuis sélecteur local {zone.name}", signal, transport)

    def add_video_links(self):
        sources = self.video_sources
        displays = self.display_labels

        if len(sources) == 1 and len(displays) == 1:
            self._link(sources[0], displays[0], TO_DISPLAY_M,
                       "Liaison directe générée automatiquement")
        elif len(sources) > 1 and len(displays) == 1:
            for source in sources:
                self._link(source, VIDEO_SELECTOR, SOURCE_TO_SWITCHER_M,
                           "Liaison vers sélecteur générée automatiquement")
            self._link(VIDEO_SELECTOR, displays[0], TO_DISPLAY_M,
                       "Liaison depuis sélecteur générée automatiquement")
        elif len(sources) > 1 and len(displays) > 1:
            for source in sources:
                self._link(source, VIDEO_MATRIX, SOURCE_TO_SWITCHER_M,
                           "Liaison vers matrice générée automatiquement")
            for display in displays:
                self._link(VIDEO_MATRIX, display, TO_DISPLAY_M,
                           "Liaison depuis matrice générée automatiquement")
        elif len(sources) == 1 and len(displays) > 1:
            for display in displays:
                self._link(sources[0], display, TO_DISPLAY_M,
                           "Distribution vidéo générée automatiquement")

    # -------------------------------------------------------------------------
    # Audio
    # -------------------------------------------------------------------------

    def audio_sources(self) -> List[str]:
        sono = self.room.sonorization
        if not sono:
            return []
        names = [label for attr, label in MIC_CATEGORIES if getattr(sono, attr) > 0]
        for source in self.room.sources:
            if any(kw in source.label.lower() for kw in AUDIO_SOURCE_KEYWORDS):
                names.append(f"{source.label} (audio)")
        return names

    def add_audio_links(self):
        sono = self.room.sonorization
        sources = self.audio_sources()
        if not sono or not sources:
            return

        multizone = sono.has_multizone_diffusion
        if len(sources) == 1 and not multizone:
            self._link(sources[0], AMPLIFICATION, AUDIO_DIRECT_M,
                       "Liaison audio directe générée automatiquement",
                       SignalType.AUDIO_ANALOG, "XLR")
            return

        dsp = AUDIO_MULTIZONE if multizone else AUDIO_DSP
        if sono.dante.is_yes:
            signal, transport = SignalType.AUDIO_DANTE, "Dante"
        else:
            signal, transport = SignalType.AUDIO_ANALOG, "XLR"

        for source in sources:
            self._link(source, dsp, AUDIO_TO_DSP_M,
                       "Liaison audio vers DSP générée automatiquement", signal, transport)
        self._link(dsp, AMPLIFICATION, DSP_TO_AMPLIFICATION_M,
                   "Liaison DSP vers amplification générée automatiquement", signal, transport)

    def generate(self) -> List[Cable]:
        self.cables = []
        if not self.room.sources or not self.room.displays:
            return []
        for zone in self.room.zones:
            self.add_zone_links(zone)
        self.add_video_links()
        self.add_audio_links()
        return list(self.cables)


def generate_basic_cables(room: Room, margin_factor: Optional[float] = None) -> List[Cable]:
    """
    Propose basic video and audio links for a room.

    Returns an empty list when the room has no source or no display.
    Distances with margin are computed with margin_factor (default x1.2).
    """
    factor = margin_factor if margin_factor is not None else DEFAULT_CABLE_MARGIN_FACTOR
    return CableGenerator(room, factor).generate()
