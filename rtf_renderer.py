"""
RTF Renderer
Converts the Markdown outline into a Rich Text Format document (Word, LibreOffice)
"""

import re
from typing import List, Optional


# Windows-1252 escape codes for the accented characters used in French documents
RTF_ACCENT_CODES = {
    'à': "\\'e0", 'â': "\\'e2", 'ä': "\\'e4", 'á': "\\'e1",
    'À': "\\'c0", 'Â': "\\'c2", 'Ä': "\\'c4", 'Á': "\\'c1",
    'ç': "\\'e7", 'Ç': "\\'c7",
    'é': "\\'e9", 'è': "\\'e8", 'ê': "\\'ea", 'ë': "\\'eb",
    'É': "\\'c9", 'È': "\\'c8", 'Ê': "\\'ca", 'Ë': "\\'cb",
    'î': "\\'ee", 'ï': "\\'ef", 'í': "\\'ed",
    'Î': "\\'ce", 'Ï': "\\'cf", 'Í': "\\'cd",
    'ô': "\\'f4", 'ö': "\\'f6", 'ó': "\\'f3",
    'Ô': "\\'d4", 'Ö': "\\'d6", 'Ó': "\\'d3",
    'ù': "\\'f9", 'û': "\\'fb", 'ü': "\\'fc", 'ú': "\\'fa",
    'Ù': "\\'d9", 'Û': "\\'db", 'Ü': "\\'dc", 'Ú': "\\'da",
    'ÿ': "\\'ff", 'Ÿ': "\\'9f",
    'ñ': "\\'f1", 'Ñ': "\\'d1",
    'œ': "\\'9c", 'Œ': "\\'8c",
    'æ': "\\'e6", 'Æ': "\\'c6",
    '«': "\\'ab", '»': "\\'bb",
    '€': "\\'80", '°': "\\'b0",
    '’': "\\'92", '‘': "\\'91", '“': "\\'93", '”': "\\'94",
    '–': "\\'96", '—': "\\'97", '…': "\\'85",
    '\u00a0': "\\'a0",
}

# Heading level -> font size in half-points
HEADING_SIZES = {
    1: 36,
    2: 28,
    3: 24,
}
BODY_SIZE = 20
DEEP_HEADING_SIZE = 22
BULLET_INDENT = 360  # twips per nesting level

LINK_PATTERN = re.compile(r'\[([^\]]*)\]\(([^)]*)\)')
HEADING_PATTERN = re.compile(r'^(#{1,6})\s+(.*)$')
BULLET_PATTERN = re.compile(r'^(\s*)[-*]\s+(.*)$')

RTF_HEADER = (
    "{\\rtf1\\ansi\\ansicpg1252\\deff0"
    "{\\fonttbl{\\f0\\fswiss Helvetica;}}"
    "\\viewkind4\\uc1\\pard\\f0\\fs" + str(BODY_SIZE) + "\n"
)


def escape_rtf(text: str) -> str:
    """Escape RTF control characters and encode non-ASCII characters"""
    out = []
    for char in text:
        if char in ('\\', '{', '}'):
            out.append('\\' + char)
        elif char in RTF_ACCENT_CODES:
            out.append(RTF_ACCENT_CODES[char])
        elif ord(char) < 128:
            out.append(char)
        else:
            code = ord(char)
            if code > 0xFFFF:
                # Outside the BMP: UTF-16 surrogate pair
                code -= 0x10000
                high = 0xD800 + (code >> 10)
                low = 0xDC00 + (code & 0x3FF)
                out.append(f"\\u{_signed16(high)}?\\u{_signed16(low)}?")
            else:
                out.append(f"\\u{_signed16(code)}?")
    return ''.join(out)


def _signed16(code: int) -> int:
    """RTF \\u takes a signed 16-bit value"""
    return code - 0x10000 if code > 0x7FFF else code


def _inline(text: str) -> str:
    """Links become 'label (url)', **bold** toggles bold runs"""
    text = LINK_PATTERN.sub(lambda m: f"{m.group(1)} ({m.group(2)})", text)
    parts = text.split('**')
    out = []
    for i, part in enumerate(parts):
        if i > 0:
            out.append('\\b ' if i % 2 == 1 else '\\b0 ')
        out.append(escape_rtf(part))
    if len(parts) % 2 == 0:
        # Unbalanced marker, close the run
        out.append('\\b0 ')
    return ''.join(out)


def render_rtf(outline: Optional[str]) -> Optional[str]:
    """Render a Markdown outline as RTF; None when there is nothing to render"""
    if not outline:
        return None

    body: List[str] = []
    for raw in outline.splitlines():
        line = raw.rstrip()
        if not line:
            body.append("\\par")
            continue

        heading = HEADING_PATTERN.match(line)
        if heading:
            level = len(heading.group(1))
            size = HEADING_SIZES.get(level, DEEP_HEADING_SIZE)
            body.append(
                f"\\pard\\sb120\\sa60\\fs{size}\\b {_inline(heading.group(2))}\\b0\\fs{BODY_SIZE}\\par"
            )
            continue

        bullet = BULLET_PATTERN.match(line)
        if bullet:
            depth = len(bullet.group(1)) // 2 + 1
            indent = BULLET_INDENT * depth
            body.append(
                f"\\pard\\li{indent}\\fi-180 \\bullet  {_inline(bullet.group(2))}\\par"
            )
            continue

        body.append(f"\\pard {_inline(line)}\\par")

    return RTF_HEADER + "\n".join(body) + "\n}"
