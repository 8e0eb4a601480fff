"""
PDF Generator Module
Creates the paginated room survey report using ReportLab: the Markdown
outline is laid out page by page, with the wall schematic and the floor
plan drawn right under the Environment heading
"""

import io
import re
from datetime import datetime
from typing import List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import cm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from document_model import NOT_AVAILABLE, SECTION_NAMES, SECTION_NUMBERS
from survey_models import ElementType, Environment, Room, Wall


PAGE_SIZES = {
    'a4': A4,
    'letter': LETTER,
}
DEFAULT_PAGE_SIZE = A4

MARGIN = 2 * cm

# Heading level -> font size
HEADING_SIZES = {
    1: 18,
    2: 14,
    3: 12,
}
DEEP_HEADING_SIZE = 11
BODY_SIZE = 10
LINE_SPACING = 1.35
BULLET_INDENT = 14

SCHEMATIC_MAX_HEIGHT = 6 * cm
SCHEMATIC_LABEL_SPACE = 1.2 * cm
SCHEMATIC_MIN_WIDTH = 4 * cm
WALL_LABEL_SIZE = 9
WALL_LABEL_GAP = 6
LEGEND_LINE = 14

# Color scheme
COLORS = {
    'text': colors.black,
    'heading': colors.Color(0.1, 0.2, 0.4),
    'wall': colors.Color(0.25, 0.25, 0.25),
    'principal_wall': colors.Color(0.8, 0.1, 0.1),
    'room_fill': colors.Color(0.96, 0.96, 0.96),
    'footer': colors.Color(0.5, 0.5, 0.5),
}

ELEMENT_COLORS = {
    ElementType.SCREEN: colors.HexColor('#3b82f6'),
    ElementType.SPEAKER: colors.HexColor('#f59e0b'),
    ElementType.CONTROL_RACK: colors.HexColor('#8b5cf6'),
    ElementType.CONNECTIVITY_POINT: colors.HexColor('#22c55e'),
    ElementType.CAMERA: colors.HexColor('#ef4444'),
}

PRINCIPAL_STROKE = 4
WALL_STROKE = 1

LINK_PATTERN = re.compile(r'\[([^\]]*)\]\(([^)]*)\)')
HEADING_PATTERN = re.compile(r'^(#{1,6})\s+(.*)$')
BULLET_PATTERN = re.compile(r'^(\s*)[-*]\s+(.*)$')

# Standard PDF fonts only cover Windows-1252
PDF_REPLACEMENTS = {
    '→': '->',
    '❌ ': '',
    '⚠️ ': '',
    '\ufe0f': '',
    '▸': '>',
}


def pdf_text(text: str) -> str:
    """Plain text suitable for the built-in Helvetica font"""
    for source, target in PDF_REPLACEMENTS.items():
        text = text.replace(source, target)
    out = []
    for char in text:
        try:
            char.encode('cp1252')
            out.append(char)
        except UnicodeEncodeError:
            continue
    return ''.join(out)


def _inline(text: str) -> str:
    text = LINK_PATTERN.sub(lambda m: f"{m.group(1)} ({m.group(2)})", text)
    return pdf_text(text)


class PaginatedReportPDF:
    """Lays out a Markdown outline on fixed-size pages"""

    def __init__(self, page_size=None, margin: float = MARGIN, title: str = ""):
        if page_size is None:
            page_size = DEFAULT_PAGE_SIZE
        self.page_size = page_size
        self.page_width, self.page_height = page_size
        self.margin = margin
        self.title = title

        self.buffer = io.BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=self.page_size)
        self.y = self.page_height - self.margin
        self.page_count = 1
        self.blocks_drawn: List[Tuple[str, str]] = []

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def _draw_footer(self):
        c = self.c
        c.setFont("Helvetica", 8)
        c.setFillColor(COLORS['footer'])
        footer = pdf_text(f"{self.title}  |  {datetime.now().strftime('%d/%m/%Y')}")
        c.drawString(self.margin, self.margin / 2, footer)
        page_text = f"Page {self.page_count}"
        c.drawRightString(self.page_width - self.margin, self.margin / 2, page_text)
        c.setFillColor(COLORS['text'])

    def new_page(self):
        self._draw_footer()
        self.c.showPage()
        self.page_count += 1
        self.y = self.page_height - self.margin

    def ensure_space(self, height: float):
        """Start a new page if the next block would cross the bottom margin"""
        if self.y - height < self.margin:
            self.new_page()

    # -------------------------------------------------------------------------
    # Text blocks
    # -------------------------------------------------------------------------

    def draw_heading(self, level: int, text: str):
        size = HEADING_SIZES.get(level, DEEP_HEADING_SIZE)
        lines = simpleSplit(text, "Helvetica-Bold", size, self.content_width)
        space_before = size * 0.6 if level > 1 else 0
        self.ensure_space(space_before + len(lines) * size * LINE_SPACING)
        self.y -= space_before

        self.c.setFillColor(COLORS['heading'])
        self.c.setFont("Helvetica-Bold", size)
        for line in lines:
            self.y -= size * LINE_SPACING
            self.c.drawString(self.margin, self.y, line)
        self.c.setFillColor(COLORS['text'])
        self.blocks_drawn.append(('heading', text))

    def draw_paragraph(self, text: str, indent: float = 0, bullet: bool = False):
        x = self.margin + indent
        width = self.content_width - indent
        bold_label = None
        if text.startswith('**') and ':**' in text:
            label, rest = text[2:].split(':**', 1)
            bold_label = label + ':'
            text = bold_label + rest
        text = text.replace('**', '')

        if bullet:
            x += BULLET_INDENT
            width -= BULLET_INDENT

        lines = simpleSplit(text, "Helvetica", BODY_SIZE, width) or [""]
        line_height = BODY_SIZE * LINE_SPACING
        for i, line in enumerate(lines):
            self.ensure_space(line_height)
            self.y -= line_height
            if i == 0 and bullet:
                self.c.setFont("Helvetica", BODY_SIZE)
                self.c.drawString(x - BULLET_INDENT + 4, self.y, "•")
            if i == 0 and bold_label and line.startswith(bold_label):
                self.c.setFont("Helvetica-Bold", BODY_SIZE)
                self.c.drawString(x, self.y, bold_label)
                offset = stringWidth(bold_label, "Helvetica-Bold", BODY_SIZE)
                self.c.setFont("Helvetica", BODY_SIZE)
                self.c.drawString(x + offset, self.y, line[len(bold_label):])
            else:
                self.c.setFont("Helvetica", BODY_SIZE)
                self.c.drawString(x, self.y, line)
        self.blocks_drawn.append(('paragraph', text))

    def draw_blank(self):
        self.y -= BODY_SIZE * 0.6

    # -------------------------------------------------------------------------
    # Room schematics
    # -------------------------------------------------------------------------

    def side_label_space(self, env: Environment) -> float:
        """Horizontal room needed on each side for the B and D wall labels"""
        widest = max(
            stringWidth(self._wall_label(env, wall), "Helvetica", WALL_LABEL_SIZE)
            for wall in (Wall.B, Wall.D)
        )
        return max(SCHEMATIC_LABEL_SPACE, widest + WALL_LABEL_GAP)

    def room_rect(self, env: Environment,
                  side_space: float = SCHEMATIC_LABEL_SPACE) -> Tuple[float, float, float, float]:
        """Rectangle (x, y_bottom, w, h): width across, length down"""
        max_w = max(self.content_width - 2 * side_space, SCHEMATIC_MIN_WIDTH)
        max_h = SCHEMATIC_MAX_HEIGHT
        scale = min(max_w / env.width_m, max_h / env.length_m)
        w = env.width_m * scale
        h = env.length_m * scale
        x = self.margin + (self.content_width - w) / 2
        return x, self.y - SCHEMATIC_LABEL_SPACE - h, w, h

    def _block_title(self, text: str, height: float):
        self.ensure_space(HEADING_SIZES[3] * LINE_SPACING + height)
        self.y -= HEADING_SIZES[3] * LINE_SPACING
        self.c.setFont("Helvetica-Bold", HEADING_SIZES[3])
        self.c.setFillColor(COLORS['heading'])
        self.c.drawString(self.margin, self.y, pdf_text(text))
        self.c.setFillColor(COLORS['text'])

    def _wall_label(self, env: Environment, wall: Wall) -> str:
        material = env.wall_material(wall)
        return pdf_text(f"{wall.value} - {material.value if material else NOT_AVAILABLE}")

    def draw_wall_schematic(self, env: Optional[Environment]) -> bool:
        """Room outline with one labelled stroke per wall; principal wall is heavier"""
        if env is None or not env.has_floor_area:
            return False

        block_height = SCHEMATIC_MAX_HEIGHT + 2 * SCHEMATIC_LABEL_SPACE
        self._block_title("Schéma des murs", block_height)
        x, y, w, h = self.room_rect(env, self.side_label_space(env))
        c = self.c

        c.setFillColor(COLORS['room_fill'])
        c.rect(x, y, w, h, fill=1, stroke=0)

        walls = {
            Wall.A: (x, y + h, x + w, y + h),
            Wall.B: (x + w, y + h, x + w, y),
            Wall.C: (x, y, x + w, y),
            Wall.D: (x, y + h, x, y),
        }
        for wall, (x1, y1, x2, y2) in walls.items():
            principal = env.principal_wall == wall
            c.setStrokeColor(COLORS['principal_wall'] if principal else COLORS['wall'])
            c.setLineWidth(PRINCIPAL_STROKE if principal else WALL_STROKE)
            c.line(x1, y1, x2, y2)

        c.setFillColor(COLORS['text'])
        c.setFont("Helvetica", WALL_LABEL_SIZE)
        c.drawCentredString(x + w / 2, y + h + WALL_LABEL_GAP, self._wall_label(env, Wall.A))
        c.drawCentredString(x + w / 2, y - 14, self._wall_label(env, Wall.C))
        c.drawString(x + w + WALL_LABEL_GAP, y + h / 2, self._wall_label(env, Wall.B))
        c.drawRightString(x - WALL_LABEL_GAP, y + h / 2, self._wall_label(env, Wall.D))

        c.setFont("Helvetica", 8)
        c.drawCentredString(x + w / 2, y + h / 2, f"{env.width_m:g} m x {env.length_m:g} m")
        c.setLineWidth(1)

        self.y = y - SCHEMATIC_LABEL_SPACE
        self.blocks_drawn.append(('walls', ""))
        return True

    def draw_floor_plan(self, room: Room) -> bool:
        """Placed elements at their percentage position, then a per-type legend"""
        env = room.environment
        if env is None or not env.has_floor_area or not room.elements:
            return False

        groups = room.elements_by_type
        legend_height = len(groups) * LEGEND_LINE
        self._block_title("Plan de la salle", SCHEMATIC_MAX_HEIGHT + 2 * SCHEMATIC_LABEL_SPACE)
        x, y, w, h = self.room_rect(env, self.side_label_space(env))
        c = self.c

        c.setFillColor(COLORS['room_fill'])
        c.setStrokeColor(COLORS['wall'])
        c.setLineWidth(WALL_STROKE)
        c.rect(x, y, w, h, fill=1, stroke=1)

        c.setFont("Helvetica", 7)
        for element_type, elements in groups.items():
            for i, element in enumerate(elements):
                px = x + element.x_pct / 100 * w
                py = y + h - element.y_pct / 100 * h  # y measured from wall A
                c.setFillColor(ELEMENT_COLORS[element_type])
                c.circle(px, py, 4, fill=1, stroke=0)
                c.setFillColor(COLORS['text'])
                label = element.label or f"{element_type.value} #{i + 1}"
                c.drawString(px + 6, py - 2, pdf_text(label))

        self.y = y - SCHEMATIC_LABEL_SPACE
        self.blocks_drawn.append(('floorplan', ""))

        # Legend
        self.ensure_space(legend_height)
        c.setFont("Helvetica", 9)
        for element_type, elements in groups.items():
            self.y -= LEGEND_LINE
            c.setFillColor(ELEMENT_COLORS[element_type])
            c.circle(self.margin + 4, self.y + 3, 4, fill=1, stroke=0)
            c.setFillColor(COLORS['text'])
            c.drawString(self.margin + 14, self.y, pdf_text(f"{element_type.value} : {len(elements)}"))
        self.blocks_drawn.append(('legend', ""))
        return True

    # -------------------------------------------------------------------------
    # Document
    # -------------------------------------------------------------------------

    def render(self, outline: str, room: Optional[Room] = None) -> bytes:
        environment_heading = f"{SECTION_NUMBERS['environment']}. {SECTION_NAMES['environment']}"
        schematics_done = False

        for raw in outline.splitlines():
            line = raw.rstrip()
            if not line:
                self.draw_blank()
                continue

            heading = HEADING_PATTERN.match(line)
            if heading:
                level = len(heading.group(1))
                self.draw_heading(level, _inline(heading.group(2)))
                if (level == 2 and heading.group(2).strip() == environment_heading
                        and room is not None and not schematics_done):
                    # Schematics open the Environment section, ahead of its fields
                    self.draw_wall_schematic(room.environment)
                    self.draw_floor_plan(room)
                    schematics_done = True
                continue

            bullet = BULLET_PATTERN.match(line)
            if bullet:
                depth = len(bullet.group(1)) // 2
                self.draw_paragraph(_inline(bullet.group(2)), indent=depth * BULLET_INDENT, bullet=True)
                continue

            self.draw_paragraph(_inline(line))

        self._draw_footer()
        self.c.save()
        return self.buffer.getvalue()


def render_report_pdf(outline: Optional[str], room: Optional[Room] = None,
                      page_size: str = 'a4') -> Optional[bytes]:
    """
    Paginated PDF of a Markdown outline.

    Returns None when there is no outline, so callers can report that there
    is nothing to render instead of writing an empty file.
    """
    if not outline or not outline.strip():
        return None
    title = outline.splitlines()[0].lstrip('#').strip()
    pdf = PaginatedReportPDF(PAGE_SIZES.get(page_size.lower(), DEFAULT_PAGE_SIZE), title=title)
    return pdf.render(outline, room)
