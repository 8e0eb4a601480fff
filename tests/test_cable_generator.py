from dataclasses import replace

from cable_generator import (
    AMPLIFICATION, AUDIO_DSP, AUDIO_MULTIZONE, VIDEO_MATRIX, VIDEO_SELECTOR, generate_basic_cables,
)
from survey_models import (
    ConnectivityZone, Display, DisplayType, SignalType, Sonorization, Source, SourceType, TriState,
)


def _room(empty_room, sources=1, displays=1, **changes):
    return replace(
        empty_room,
        sources=tuple(Source(SourceType.PC_FIXE) for _ in range(sources)),
        displays=tuple(Display(DisplayType.MONITOR) for _ in range(displays)),
        **changes,
    )


def _pairs(cables):
    return [(c.point_a, c.point_b) for c in cables]


# --- video ---

def test_nothing_without_sources_or_displays(empty_room):
    assert generate_basic_cables(empty_room) == []
    assert generate_basic_cables(_room(empty_room, displays=0)) == []
    assert generate_basic_cables(_room(empty_room, sources=0)) == []


def test_single_source_single_display_is_direct(empty_room):
    cables = generate_basic_cables(_room(empty_room))

    assert _pairs(cables) == [("PC fixe", "Moniteur")]
    assert cables[0].signal_type == SignalType.HDMI
    assert cables[0].distance_m == 5
    assert cables[0].distance_with_margin_m == 6.0


def test_margin_factor_is_applied(empty_room):
    cables = generate_basic_cables(_room(empty_room), margin_factor=1.5)

    assert cables[0].distance_with_margin_m == 7.5


def test_several_sources_one_display_use_a_selector(empty_room):
    cables = generate_basic_cables(_room(empty_room, sources=2))

    assert _pairs(cables) == [
        ("PC fixe", VIDEO_SELECTOR), ("PC fixe", VIDEO_SELECTOR), (VIDEO_SELECTOR, "Moniteur"),
    ]


def test_several_sources_several_displays_use_a_matrix(empty_room):
    cables = generate_basic_cables(_room(empty_room, sources=2, displays=2))

    assert [c.point_b for c in cables[:2]] == [VIDEO_MATRIX, VIDEO_MATRIX]
    assert [c.point_a for c in cables[2:]] == [VIDEO_MATRIX, VIDEO_MATRIX]


def test_one_source_several_displays_is_distributed(empty_room):
    cables = generate_basic_cables(_room(empty_room, displays=3))

    assert _pairs(cables) == [("PC fixe", "Moniteur")] * 3


# --- connectivity zones ---

def test_zone_with_several_inputs_gets_a_local_selector(empty_room):
    zone = ConnectivityZone("Table", hdmi_count=2, usbc_count=1, distance_to_control_room_m=12)
    cables = generate_basic_cables(_room(empty_room, zones=(zone,)))

    assert _pairs(cables[:3]) == [
        ("HDMI Table 1", "Sélecteur local Table"),
        ("HDMI Table 2", "Sélecteur local Table"),
        ("USB-C Table 1", "Sélecteur local Table"),
    ]
    uplink = cables[3]
    assert (uplink.point_a, uplink.point_b) == ("Sélecteur local Table", "Moniteur")
    assert uplink.transport == "HDBaseT"
    assert uplink.signal_type == SignalType.HDBASET
    assert uplink.distance_m == 12


def test_zone_with_one_input_goes_straight_to_the_matrix(empty_room):
    zone = ConnectivityZone("Pupitre", usbc_count=1)
    cables = generate_basic_cables(_room(empty_room, zones=(zone,)))

    assert (cables[0].point_a, cables[0].point_b) == ("USB-C Pupitre", VIDEO_MATRIX)
    assert cables[0].transport == "HDMI direct"
    assert cables[0].distance_m == 10


# --- audio ---

def test_several_audio_sources_go_through_a_dsp(empty_room):
    sono = Sonorization(mic_handheld=2, mic_table=1, dante=TriState.YES)
    audio = [c for c in generate_basic_cables(_room(empty_room, sonorization=sono))
             if c.signal_type != SignalType.HDMI]

    assert _pairs(audio) == [
        ("Micros main HF", AUDIO_DSP),
        ("Micros table", AUDIO_DSP),
        ("PC fixe (audio)", AUDIO_DSP),
        (AUDIO_DSP, AMPLIFICATION),
    ]
    assert {c.transport for c in audio} == {"Dante"}


def test_multizone_diffusion_uses_the_audio_matrix(empty_room):
    sono = Sonorization(diffusion_local=True, dante=TriState.UNKNOWN)
    audio = [c for c in generate_basic_cables(_room(empty_room, sonorization=sono))
             if c.signal_type == SignalType.AUDIO_ANALOG]

    assert _pairs(audio) == [("PC fixe (audio)", AUDIO_MULTIZONE), (AUDIO_MULTIZONE, AMPLIFICATION)]
    assert {c.transport for c in audio} == {"XLR"}


def test_single_audio_source_is_direct(empty_room):
    room = _room(empty_room, sonorization=Sonorization())
    audio = [c for c in generate_basic_cables(room) if c.signal_type == SignalType.AUDIO_ANALOG]

    assert _pairs(audio) == [("PC fixe (audio)", AMPLIFICATION)]
    assert audio[0].distance_m == 8
