#!/usr/bin/env python3
"""
Block Diagram Generator
Creates the signal-flow (synoptic) diagram of a room from its cable list:
endpoints are classified into functional columns, stacked evenly, and joined
by curved arrows coloured by signal type
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.graphics.shapes import Drawing, Group, Path as CurvePath, Polygon, Rect, String
from reportlab.graphics import renderSVG

from survey_models import Cable, Display, Source


SIGNAL_FLOW_FILENAME = "schema-synoptique.svg"

# Canvas (points)
CANVAS_WIDTH = 900
CANVAS_HEIGHT = 500
PADDING = 80
LEGEND_HEIGHT = 40

NODE_MIN_WIDTH = 100
NODE_CHAR_WIDTH = 7
NODE_HEIGHT = 40
LABEL_MAX_CHARS = 18
LABEL_TRUNCATE_AT = 16

NO_LINKS_MESSAGE = "Aucune liaison définie. Ajoutez des câbles pour générer le schéma synoptique."


# Signal colors
SIGNAL_COLORS = {
    "Vidéo HDMI": colors.HexColor('#3b82f6'),               # Blue
    "Vidéo HDBaseT": colors.HexColor('#8b5cf6'),            # Violet
    "Vidéo IP / AVoIP": colors.HexColor('#06b6d4'),         # Cyan
    "USB": colors.HexColor('#22c55e'),                      # Green
    "Audio analogique": colors.HexColor('#f59e0b'),         # Amber
    "Audio numérique / Dante": colors.HexColor('#ef4444'),  # Red
    "Réseau RJ45": colors.HexColor('#64748b'),              # Slate
}
UNKNOWN_SIGNAL_COLOR = colors.HexColor('#888888')


class NodeKind(Enum):
    SOURCE = "source"
    ZONE = "zone"
    SELECTOR = "selector"
    MATRIX = "matrix"
    DSP = "dsp"
    DISPLAY = "display"
    SPEAKER = "speaker"


# Left-to-right signal flow order
NODE_COLUMNS = {
    NodeKind.SOURCE: 0,
    NodeKind.ZONE: 1,
    NodeKind.SELECTOR: 2,
    NodeKind.MATRIX: 3,
    NodeKind.DSP: 4,
    NodeKind.DISPLAY: 5,
    NodeKind.SPEAKER: 6,
}

# (fill, stroke) per node kind
NODE_COLORS = {
    NodeKind.SOURCE: ('#dbeafe', '#2563eb'),
    NodeKind.ZONE: ('#e0e7ff', '#4f46e5'),
    NodeKind.SELECTOR: ('#fef3c7', '#d4a000'),
    NodeKind.MATRIX: ('#f3e8ff', '#9900ff'),
    NodeKind.DSP: ('#fee2e2', '#e00000'),
    NodeKind.DISPLAY: ('#d1fae5', '#00a36c'),
    NodeKind.SPEAKER: ('#ffedd5', '#ff8000'),
}

COLUMN_LABELS = [
    (80, "Sources"),
    (250, "Sélection"),
    (440, "Distribution"),
    (650, "Diffusion"),
]

# Tested in order, first match wins
ENDPOINT_KEYWORDS = [
    (NodeKind.MATRIX, ['matrice', 'matrix']),
    (NodeKind.SELECTOR, ['sélecteur', 'selecteur', 'selector']),
    (NodeKind.DSP, ['dsp', 'mixeur', 'mixer', 'amplification']),
    (NodeKind.SPEAKER, ['enceinte', 'speaker']),
    (NodeKind.ZONE, ['zone', 'hdmi', 'usb-c', 'displayport']),
]
FALLBACK_KEYWORDS = [
    (NodeKind.DISPLAY, ['écran', 'screen', 'vidéoprojecteur', 'projector', 'moniteur', 'monitor', 'tv']),
    (NodeKind.SOURCE, ['pc', 'player', 'codec', 'ordinateur', 'computer']),
]


def _matches_type(name: str, type_labels: Iterable[str]) -> bool:
    for label in type_labels:
        label = label.lower()
        if label and (label == name or label in name):
            return True
    return False


def classify_endpoint(name: str, sources: Sequence[Source] = (),
                      displays: Sequence[Display] = ()) -> NodeKind:
    """Functional kind of a cable endpoint; always returns a kind"""
    lower = (name or "").lower()

    for kind, keywords in ENDPOINT_KEYWORDS:
        if any(kw in lower for kw in keywords):
            return kind

    if _matches_type(lower, (s.label for s in sources)):
        return NodeKind.SOURCE
    if _matches_type(lower, (d.label for d in displays)):
        return NodeKind.DISPLAY

    for kind, keywords in FALLBACK_KEYWORDS:
        if any(kw in lower for kw in keywords):
            return kind

    return NodeKind.SOURCE


# =============================================================================
# GRAPH
# =============================================================================

@dataclass
class DiagramNode:
    """An endpoint placed on the canvas (top-down coordinates, centre of the box)"""
    name: str
    kind: NodeKind
    x: float = 0.0
    y: float = 0.0

    @property
    def width(self) -> float:
        return max(NODE_MIN_WIDTH, len(self.name) * NODE_CHAR_WIDTH)

    @property
    def display_label(self) -> str:
        if len(self.name) > LABEL_MAX_CHARS:
            return self.name[:LABEL_TRUNCATE_AT] + "..."
        return self.name


@dataclass
class DiagramLink:
    source: str
    target: str
    signal_type: str
    transport: str = ""
    distance_m: Optional[float] = None

    @property
    def color(self):
        return SIGNAL_COLORS.get(self.signal_type, UNKNOWN_SIGNAL_COLOR)

    @property
    def distance_label(self) -> Optional[str]:
        if not self.distance_m:
            return None
        return f"{self.distance_m:g}m"


@dataclass
class SignalFlowGraph:
    nodes: Dict[str, DiagramNode] = field(default_factory=dict)  # name -> node, first-seen order
    links: List[DiagramLink] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def legend(self) -> List[Tuple[str, object]]:
        """Signal types present, in order of first use, with their color"""
        seen = []
        for link in self.links:
            if link.signal_type not in seen:
                seen.append(link.signal_type)
        return [(signal, SIGNAL_COLORS.get(signal, UNKNOWN_SIGNAL_COLOR)) for signal in seen]

    def column(self, kind: NodeKind) -> List[DiagramNode]:
        return [n for n in self.nodes.values() if n.kind == kind]


def layout_nodes(graph: SignalFlowGraph, width: float = CANVAS_WIDTH,
                 height: float = CANVAS_HEIGHT, padding: float = PADDING):
    """Place each column at a fixed x, stacking its nodes evenly (1-indexed rows)"""
    max_column = max(NODE_COLUMNS.values()) or 1
    column_width = (width - padding * 2) / max_column
    usable_height = height - padding * 2

    for kind, column in NODE_COLUMNS.items():
        nodes = graph.column(kind)
        row_height = usable_height / (len(nodes) + 1)
        for idx, node in enumerate(nodes):
            node.x = padding + column * column_width
            node.y = padding + (idx + 1) * row_height


def build_signal_flow(cables: Sequence[Cable], sources: Sequence[Source] = (),
                      displays: Sequence[Display] = ()) -> SignalFlowGraph:
    """Nodes (classified and positioned) and links for a cable list"""
    graph = SignalFlowGraph()

    for cable in cables:
        for endpoint in (cable.point_a, cable.point_b):
            if endpoint not in graph.nodes:
                graph.nodes[endpoint] = DiagramNode(
                    name=endpoint,
                    kind=classify_endpoint(endpoint, sources, displays),
                )
        graph.links.append(DiagramLink(
            source=cable.point_a,
            target=cable.point_b,
            signal_type=cable.signal_type.value,
            transport=cable.transport or "",
            distance_m=cable.distance_m,
        ))

    layout_nodes(graph)
    return graph


# =============================================================================
# DRAWING
# =============================================================================

class SignalFlowDiagram:
    """Draws a SignalFlowGraph onto a reportlab Drawing"""

    def __init__(self, width: float = CANVAS_WIDTH, height: float = CANVAS_HEIGHT):
        self.width = width
        self.height = height
        self.total_height = height + LEGEND_HEIGHT

    def _y(self, top_down_y: float) -> float:
        """Layout works top-down, reportlab draws bottom-up"""
        return self.total_height - top_down_y

    def draw_node(self, node: DiagramNode) -> Group:
        fill, stroke = NODE_COLORS[node.kind]
        radius = 0 if node.kind in (NodeKind.MATRIX, NodeKind.SELECTOR) else 8
        y = self._y(node.y)
        group = Group()
        group.add(Rect(
            node.x - node.width / 2, y - NODE_HEIGHT / 2, node.width, NODE_HEIGHT,
            rx=radius, ry=radius,
            fillColor=colors.HexColor(fill), strokeColor=colors.HexColor(stroke), strokeWidth=2,
        ))
        group.add(String(
            node.x, y - 4, node.display_label,
            fontName="Helvetica-Bold", fontSize=11, textAnchor='middle', fillColor=colors.black,
        ))
        return group

    def draw_link(self, link: DiagramLink, nodes: Dict[str, DiagramNode]) -> Optional[Group]:
        start = nodes.get(link.source)
        end = nodes.get(link.target)
        if not start or not end:
            return None

        x1 = start.x + start.width / 2
        y1 = self._y(start.y)
        x2 = end.x - end.width / 2
        y2 = self._y(end.y)
        mid_x = (x1 + x2) / 2

        group = Group()
        curve = CurvePath(fillColor=None, strokeColor=link.color, strokeWidth=2)
        curve.moveTo(x1, y1)
        curve.curveTo(mid_x, y1, mid_x, y2, x2, y2)
        group.add(curve)

        # Arrow head
        group.add(Polygon(
            [x2, y2, x2 - 10, y2 + 3.5, x2 - 10, y2 - 3.5],
            fillColor=link.color, strokeColor=None,
        ))

        if link.distance_label:
            group.add(String(
                mid_x, (y1 + y2) / 2 + 8, link.distance_label,
                fontName="Helvetica", fontSize=9, textAnchor='middle', fillColor=link.color,
            ))
        return group

    def draw_legend(self, graph: SignalFlowGraph) -> Group:
        group = Group()
        x = PADDING
        y = LEGEND_HEIGHT / 2
        for label, color in graph.legend:
            group.add(Rect(x, y - 2, 16, 4, fillColor=color, strokeColor=None))
            group.add(String(x + 22, y - 3, label, fontName="Helvetica", fontSize=10,
                             fillColor=colors.Color(0.3, 0.3, 0.3)))
            x += 22 + len(label) * 6 + 24
        return group

    def draw(self, graph: SignalFlowGraph) -> Drawing:
        drawing = Drawing(self.width, self.total_height)

        if graph.is_empty:
            drawing.add(String(
                self.width / 2, self.total_height / 2, NO_LINKS_MESSAGE,
                fontName="Helvetica", fontSize=12, textAnchor='middle',
                fillColor=colors.Color(0.4, 0.4, 0.4),
            ))
            return drawing

        for x, label in COLUMN_LABELS:
            drawing.add(String(x, self._y(30), label, fontName="Helvetica", fontSize=11,
                               fillColor=colors.Color(0.5, 0.5, 0.5)))

        # Links under the nodes
        for link in graph.links:
            shape = self.draw_link(link, graph.nodes)
            if shape is not None:
                drawing.add(shape)
        for node in graph.nodes.values():
            drawing.add(self.draw_node(node))

        drawing.add(self.draw_legend(graph))
        return drawing


def render_signal_flow(graph: SignalFlowGraph) -> Drawing:
    return SignalFlowDiagram().draw(graph)


def signal_flow_svg(cables: Sequence[Cable], sources: Sequence[Source] = (),
                    displays: Sequence[Display] = ()) -> str:
    """SVG document of the signal-flow diagram"""
    graph = build_signal_flow(cables, sources, displays)
    return renderSVG.drawToString(render_signal_flow(graph))


def generate_signal_flow(json_path: str, output_dir: str = ".") -> Optional[str]:
    """Write schema-synoptique.svg for a survey export"""
    from survey_loader import load_room

    print(f"📄 Loading survey: {json_path}")
    room = load_room(json_path)
    if room is None:
        print("❌ Nothing to render")
        return None

    print(f"🔗 {len(room.cables)} links, {len(room.sources)} sources, {len(room.displays)} displays")
    svg = signal_flow_svg(room.cables, room.sources, room.displays)

    output_path = Path(output_dir) / SIGNAL_FLOW_FILENAME
    output_path.write_text(svg, encoding='utf-8')
    print(f"✅ Generated: {output_path}")
    return str(output_path)


def main():
    import sys

    if len(sys.argv) < 2:
        print("Usage: python block_diagram.py <survey_json> [output_dir]")
        print("\nExample:")
        print("  python block_diagram.py 'salle-conseil.json' exports/")
        sys.exit(1)

    output_dir = sys.argv[2] if len(sys.argv) > 2 else "."
    if not generate_signal_flow(sys.argv[1], output_dir):
        sys.exit(1)


if __name__ == "__main__":
    main()
