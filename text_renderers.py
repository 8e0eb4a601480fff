"""
Text Renderers
Fixed-width boxed text and Markdown outline renderings of a compiled document
"""

from typing import List, Optional

from document_model import Document, FieldLine, LinkLine, ListLine, SubSection, TextLine


BOX_WIDTH = 72
LABEL_WIDTH = 30
INDENT = "  "


# =============================================================================
# BOXED TEXT
# =============================================================================

def _box(title: str, width: int) -> List[str]:
    inner = width - 2
    text = f" {title}"[:inner]
    return [
        "╔" + "═" * inner + "╗",
        "║" + text.ljust(inner) + "║",
        "╚" + "═" * inner + "╝",
    ]


def _boxed_lines(lines, depth: int) -> List[str]:
    out = []
    pad = INDENT * depth
    label_width = max(LABEL_WIDTH - len(pad), 8)
    for line in lines:
        if isinstance(line, FieldLine):
            out.append(f"{pad}{line.label.ljust(label_width)}: {line.value}")
        elif isinstance(line, TextLine):
            out.append(f"{pad}{line.text}")
        elif isinstance(line, ListLine):
            if line.title:
                out.append(f"{pad}• {line.title}")
                out.extend(f"{pad}{INDENT}  - {item}" for item in line.items)
            else:
                out.extend(f"{pad}- {item}" for item in line.items)
        elif isinstance(line, LinkLine):
            out.append(f"{pad}- {line.label} : {line.url}")
        elif isinstance(line, SubSection):
            out.append(f"{pad}▸ {line.title}")
            out.append(f"{pad}{'─' * len(line.title) + '──'}")
            out.extend(_boxed_lines(line.lines, depth + 1))
    return out


def render_boxed_text(document: Optional[Document], width: int = BOX_WIDTH) -> Optional[str]:
    """Plain text report with each section title drawn inside a box"""
    if document is None:
        return None

    out = _box(document.title.upper(), width)
    out.append("")
    out.extend(_boxed_lines(document.header, 0))

    for section in document.sections:
        out.append("")
        out.extend(_box(section.heading.upper(), width))
        out.extend(_boxed_lines(section.lines, 1))

    return "\n".join(out) + "\n"


# =============================================================================
# MARKDOWN OUTLINE
# =============================================================================

def _outline_lines(lines, level: int) -> List[str]:
    out = []
    for line in lines:
        if isinstance(line, FieldLine):
            out.append(f"**{line.label} :** {line.value}")
        elif isinstance(line, TextLine):
            out.append(line.text)
        elif isinstance(line, ListLine):
            if line.title:
                out.append(f"- **{line.title}**")
                out.extend(f"  - {item}" for item in line.items)
            else:
                out.extend(f"- {item}" for item in line.items)
        elif isinstance(line, LinkLine):
            out.append(f"- [{line.label}]({line.url})")
        elif isinstance(line, SubSection):
            out.append("")
            out.append(f"{'#' * min(level + 1, 6)} {line.title}")
            out.append("")
            out.extend(_outline_lines(line.lines, level + 1))
            out.append("")
    return out


def render_outline(document: Optional[Document]) -> Optional[str]:
    """
    Markdown outline of the document.

    '#' for the title, '## N. Title' for sections, deeper headings for
    sub-sections, '**Label :** value' pairs, '- ' bullets (nested groups
    indented by two spaces) and '[name](url)' links.
    """
    if document is None:
        return None

    out = [f"# {document.title}", ""]
    out.extend(_outline_lines(document.header, 1))

    for section in document.sections:
        out.append("")
        out.append(f"## {section.heading}")
        out.append("")
        out.extend(_outline_lines(section.lines, 2))

    # Collapse runs of blank lines
    text = []
    for line in out:
        if line == "" and text and text[-1] == "":
            continue
        text.append(line)
    return "\n".join(text).strip() + "\n"
