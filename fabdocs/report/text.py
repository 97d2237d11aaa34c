from __future__ import annotations

import logging
from dataclasses import dataclass

from reportlab.pdfbase import pdfmetrics

from .geometry import pt_to_mm


logger = logging.getLogger(__name__)

# Line advance in mm per point of font size; 10pt text advances 5mm per line.
LINE_HEIGHT_FACTOR = 0.5


@dataclass(frozen=True)
class FontSpec:
    name: str = 'Helvetica'
    size: float = 10.0

    @property
    def line_height(self) -> float:
        return self.size * LINE_HEIGHT_FACTOR

    def with_size(self, size: float) -> 'FontSpec':
        return FontSpec(self.name, size)


def _approximate_width_pt(text: str, size: float) -> float:
    width = 0.0
    for char in text:
        if char.isspace():
            width += size * 0.28
        elif ord(char) > 127:
            width += size * 0.98
        else:
            width += size * 0.56
    return width


def measure_width(text: str, font: FontSpec) -> float:
    """Width of a single line of text in millimetres."""
    value = str(text or '')
    if not value:
        return 0.0
    size = max(1.0, float(font.size))
    try:
        width_pt = float(pdfmetrics.stringWidth(value, font.name, size))
    except Exception as exc:
        logger.debug('Font metrics unavailable for %s: %s', font.name, exc)
        width_pt = _approximate_width_pt(value, size)
    return pt_to_mm(width_pt)


def _wrap_paragraph(paragraph: str, font: FontSpec, max_width: float) -> list[str]:
    words = paragraph.split(' ')
    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f'{current} {word}'
        if measure_width(candidate, font) <= max_width:
            current = candidate
            continue
        lines.append(current)
        current = word
    lines.append(current)
    return lines


def wrap_to_width(text: str, font: FontSpec, max_width: float) -> list[str]:
    """Greedy word wrap on single spaces.

    Explicit newlines always start a new line. Words are never split, so a
    word wider than ``max_width`` occupies its own (overflowing) line. The
    wrap point consumes exactly one space, which keeps
    ``' '.join(lines)`` equal to the input for single-paragraph text.
    Always returns at least one line.
    """
    normalized = str(text or '').replace('\r\n', '\n').replace('\r', '\n')
    lines: list[str] = []
    for paragraph in normalized.split('\n'):
        lines.extend(_wrap_paragraph(paragraph, font, max_width))
    return lines or ['']
