import pytest

from block_diagram import (
    NO_LINKS_MESSAGE, SIGNAL_COLORS, UNKNOWN_SIGNAL_COLOR, DiagramNode, NodeKind, build_signal_flow,
    classify_endpoint, render_signal_flow, signal_flow_svg,
)
from survey_models import Cable, Display, DisplayType, SignalType, Source, SourceType


# --- classification ---

@pytest.mark.parametrize("name, expected", [
    ("Matrice vidéo", NodeKind.MATRIX),
    ("Sélecteur local Table", NodeKind.SELECTOR),
    ("Selecteur 4x1", NodeKind.SELECTOR),
    ("DSP / Mixeur audio", NodeKind.DSP),
    ("Amplification / Enceintes", NodeKind.DSP),
    ("Enceinte plafond", NodeKind.SPEAKER),
    ("HDMI Table 1", NodeKind.ZONE),
    ("USB-C Pupitre", NodeKind.ZONE),
    ("Écran salle", NodeKind.DISPLAY),
    ("Vidéoprojecteur", NodeKind.DISPLAY),
    ("TV accueil", NodeKind.DISPLAY),
    ("PC fixe", NodeKind.SOURCE),
    ("Codec visio", NodeKind.SOURCE),
    ("Boîtier inconnu", NodeKind.SOURCE),
    ("", NodeKind.SOURCE),
])
def test_classification(name, expected):
    assert classify_endpoint(name) == expected


def test_keywords_win_over_type_lists():
    displays = [Display(DisplayType.MONITOR)]

    assert classify_endpoint("Matrice Moniteur", displays=displays) == NodeKind.MATRIX


def test_type_lists_disambiguate_unknown_names():
    displays = [Display(DisplayType.LED)]
    sources = [Source(SourceType.LAPTOP)]

    assert classify_endpoint("LED hall", displays=displays) == NodeKind.DISPLAY
    assert classify_endpoint("LED hall") == NodeKind.SOURCE
    assert classify_endpoint("Laptop invité", sources, displays) == NodeKind.SOURCE


def test_classification_is_deterministic():
    names = ["Matrice vidéo", "Laptop", "Enceinte", "Zone estrade", "???"]

    assert [classify_endpoint(n) for n in names] == [classify_endpoint(n) for n in names]


# --- layout ---

def _selector_cables():
    return [
        Cable("PC fixe", "Sélecteur vidéo", SignalType.HDMI, "HDMI direct", 3),
        Cable("Laptop", "Sélecteur vidéo", SignalType.HDMI, "HDMI direct", 3),
        Cable("Sélecteur vidéo", "Moniteur", SignalType.HDBASET, "HDBaseT", 12.5),
    ]


def test_layout_columns_and_rows():
    graph = build_signal_flow(_selector_cables(), [Source(SourceType.PC_FIXE), Source(SourceType.LAPTOP)],
                              [Display(DisplayType.MONITOR)])
    nodes = graph.nodes
    column_width = (900 - 2 * 80) / 6

    assert list(nodes) == ["PC fixe", "Sélecteur vidéo", "Laptop", "Moniteur"]
    assert nodes["PC fixe"].x == pytest.approx(80)
    assert nodes["Laptop"].x == pytest.approx(80)
    assert nodes["Sélecteur vidéo"].x == pytest.approx(80 + 2 * column_width)
    assert nodes["Moniteur"].x == pytest.approx(80 + 5 * column_width)

    row = (500 - 2 * 80) / 3
    assert nodes["PC fixe"].y == pytest.approx(80 + row)
    assert nodes["Laptop"].y == pytest.approx(80 + 2 * row)
    assert nodes["Sélecteur vidéo"].y == pytest.approx(250)


def test_links_colors_and_legend():
    graph = build_signal_flow(_selector_cables())

    assert len(graph.links) == 3
    assert graph.links[2].distance_label == "12.5m"
    assert graph.legend == [
        ("Vidéo HDMI", SIGNAL_COLORS["Vidéo HDMI"]),
        ("Vidéo HDBaseT", SIGNAL_COLORS["Vidéo HDBaseT"]),
    ]


def test_unknown_signal_gets_the_neutral_color():
    graph = build_signal_flow([Cable("A", "B", SignalType.OTHER)])

    assert graph.links[0].color == UNKNOWN_SIGNAL_COLOR
    assert graph.links[0].distance_label is None


def test_long_labels_are_truncated():
    node = DiagramNode("Sélecteur local Zone table", NodeKind.SELECTOR)

    assert node.display_label == "Sélecteur local ..."
    assert node.width == len("Sélecteur local Zone table") * 7
    assert DiagramNode("PC", NodeKind.SOURCE).width == 100


# --- rendering ---

def test_svg_output():
    cables = [Cable("Micros table", "DSP / Mixeur audio", SignalType.AUDIO_DANTE, "Dante", 5)]
    svg = signal_flow_svg(cables)

    assert "<svg" in svg
    assert "Micros table" in svg
    assert "Dante" in svg


def test_no_links_placeholder():
    graph = build_signal_flow([])
    drawing = render_signal_flow(graph)

    assert graph.is_empty
    assert any(getattr(shape, 'text', None) == NO_LINKS_MESSAGE for shape in drawing.contents)
    assert "Aucune liaison" in signal_flow_svg([])
