from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from .cursor import FlowCursor
from .formatting import format_inr
from .geometry import PageGeometry, px_to_mm
from .images import fit_within
from .surface import BLACK, ColorValue, Surface
from .text import FontSpec, wrap_to_width


logger = logging.getLogger(__name__)

TITLE_COLOR = '#1e3a5f'
MARKER_COLOR = '#d92134'
ACCENT_COLOR = '#da2032'
BORDER_COLOR = '#eeb7b7'
HEADER_FILL = '#fff5f5'
ZEBRA_FILL: ColorValue = (245, 245, 245)

TITLE_GAP = 6.0
TITLE_HEIGHT = 8.0
TITLE_KEEP_WITH_NEXT = 15.0
TABLE_GAP_BEFORE = 3.0
TABLE_GAP_AFTER = 1.5

CELL_PAD = px_to_mm(3)


@dataclass(frozen=True)
class TableStyle:
    font_size: float = 9.0
    base_row_height: float = 8.0
    line_height: float = 4.0
    padding: float = 2.0
    text_offset: float = 4.0
    border: ColorValue = BORDER_COLOR
    header_fill: ColorValue = HEADER_FILL
    zebra_fill: ColorValue = ZEBRA_FILL
    line_width: float = 0.2


QUOTATION_TABLE = TableStyle()
COMPACT_TABLE = TableStyle(
    font_size=8.5,
    base_row_height=5.8,
    line_height=3.2,
    padding=1.2,
    text_offset=CELL_PAD + 2.5,
)


@dataclass
class TableSpec:
    headers: list[str]
    widths: list[float]
    bold_columns: frozenset[int] = field(default_factory=frozenset)
    style: TableStyle = QUOTATION_TABLE
    repeat_header: bool = False
    header_font_size: float | None = None


def normalize_widths(widths: Sequence[float], count: int, total: float) -> list[float]:
    """Column widths scaled so they sum to ``total``."""
    if count <= 0:
        return []
    values = [max(0.0, float(w)) for w in list(widths)[:count]]
    if len(values) != count or sum(values) <= 0:
        return [total / count] * count
    scale = total / sum(values)
    return [w * scale for w in values]


def normalize_cells(cells: Iterable[Any], count: int) -> list[str]:
    values = ['' if cell is None else str(cell) for cell in cells]
    values = values[:count]
    values.extend([''] * (count - len(values)))
    return values


def row_height(cell_lines: Sequence[Sequence[str]], style: TableStyle) -> float:
    """Uniform row height from the tallest wrapped cell."""
    max_lines = max((max(1, len(lines)) for lines in cell_lines), default=1)
    return max(style.base_row_height, max_lines * style.line_height + style.padding)


class Drawer:
    """Drawing primitives that reserve space through the flow cursor first."""

    def __init__(
        self,
        surface: Surface,
        cursor: FlowCursor,
        geometry: PageGeometry,
        *,
        font_name: str = 'Helvetica',
        bold_font_name: str = 'Helvetica-Bold',
    ):
        self.surface = surface
        self.cursor = cursor
        self.geometry = geometry
        self.font_name = font_name
        self.bold_font_name = bold_font_name

    def font(self, size: float, *, bold: bool = False) -> FontSpec:
        return FontSpec(self.bold_font_name if bold else self.font_name, size)

    # -- text ---------------------------------------------------------------

    def begin_section(self, keep_with_next: float = TITLE_KEEP_WITH_NEXT) -> int:
        """Settle where the next heading goes and return that page.

        After this call a heading plus ``keep_with_next`` mm fits on the
        current page, so the page cannot change before the heading is drawn.
        """
        cursor = self.cursor
        if not cursor.at_page_top:
            cursor.skip(TITLE_GAP)
        cursor.ensure(TITLE_HEIGHT + keep_with_next)
        return cursor.page

    def section_title(
        self,
        text: str,
        *,
        size: float = 14.0,
        color: ColorValue = TITLE_COLOR,
        marker: bool = True,
        keep_with_next: float = TITLE_KEEP_WITH_NEXT,
        prepared: bool = False,
    ) -> int:
        """Draw a heading and return the page it landed on."""
        cursor = self.cursor
        if not prepared:
            self.begin_section(keep_with_next)
        top = cursor.reserve(TITLE_HEIGHT)
        baseline = top + 5.5
        x = self.geometry.content_left
        if marker:
            self.surface.rect(x, top + 1.5, 4, 5, fill=MARKER_COLOR)
            x += 7
        self.surface.text(x, baseline, text, font=self.font(size, bold=True), color=color)
        return cursor.page

    def text_line(
        self,
        text: str,
        *,
        size: float = 10.0,
        bold: bool = False,
        color: ColorValue = BLACK,
        align: str = 'left',
        line_height: float | None = None,
        x: float | None = None,
    ) -> None:
        font = self.font(size, bold=bold)
        height = line_height if line_height is not None else font.line_height
        top = self.cursor.reserve(height)
        if x is None:
            if align == 'center':
                x = self.geometry.page_width / 2
            elif align == 'right':
                x = self.geometry.content_right
            else:
                x = self.geometry.content_left
        self.surface.text(x, top + font.line_height * 0.75, text, font=font, color=color, align=align)

    def split_line(
        self,
        left: str,
        right: str,
        *,
        size: float = 10.0,
        line_height: float | None = None,
    ) -> None:
        font = self.font(size)
        height = line_height if line_height is not None else font.line_height
        top = self.cursor.reserve(height)
        baseline = top + font.line_height * 0.75
        self.surface.text(self.geometry.content_left, baseline, left, font=font)
        self.surface.text(self.geometry.content_right, baseline, right, font=font, align='right')

    def paragraph(
        self,
        text: str,
        *,
        size: float = 10.0,
        indent: float = 0.0,
        bold: bool = False,
        color: ColorValue = BLACK,
    ) -> int:
        """Wrap and draw text line by line. Returns the number of lines."""
        font = self.font(size, bold=bold)
        width = max(1.0, self.geometry.content_width - indent)
        lines = wrap_to_width(text, font, width)
        x = self.geometry.content_left + indent
        for line in lines:
            top = self.cursor.reserve(font.line_height)
            self.surface.text(x, top + font.line_height * 0.75, line, font=font, color=color)
        return len(lines)

    def bullet_list(self, items: Iterable[str], *, size: float = 9.0, indent: float = 5.0) -> None:
        for item in items:
            self.paragraph(f'• {item}', size=size, indent=indent)

    def numbered_list(self, items: Iterable[str], *, size: float = 9.0, indent: float = 5.0) -> None:
        for number, item in enumerate(items, start=1):
            self.paragraph(f'{number}. {item}', size=size, indent=indent)

    # -- tables -------------------------------------------------------------

    def wrap_cells(self, cells: Sequence[str], widths: Sequence[float], style: TableStyle) -> list[list[str]]:
        font = self.font(style.font_size)
        return [
            wrap_to_width(cell, font, max(1.0, width - style.padding * 2))
            for cell, width in zip(cells, widths)
        ]

    def _draw_cells(
        self,
        top: float,
        widths: Sequence[float],
        cell_lines: Sequence[Sequence[str]],
        height: float,
        style: TableStyle,
        *,
        fill: ColorValue | None,
        bold_columns: Iterable[int] = (),
        font_size: float | None = None,
        x0: float | None = None,
    ) -> None:
        surface = self.surface
        left = self.geometry.content_left if x0 is None else x0
        total_width = sum(widths)
        if fill is not None:
            surface.rect(left, top, total_width, height, fill=fill)
        surface.rect(left, top, total_width, height, stroke=style.border, line_width=style.line_width)
        bold = set(bold_columns)
        size = style.font_size if font_size is None else font_size
        x = left
        for index, (width, lines) in enumerate(zip(widths, cell_lines)):
            surface.line(x, top, x, top + height, color=style.border, line_width=style.line_width)
            font = self.font(size, bold=index in bold)
            for line_index, line in enumerate(lines):
                surface.text(
                    x + style.padding,
                    top + style.text_offset + line_index * style.line_height,
                    line,
                    font=font,
                )
            x += width
        surface.line(x, top, x, top + height, color=style.border, line_width=style.line_width)

    def _table_header(self, spec: TableSpec, widths: Sequence[float]) -> None:
        style = spec.style
        header_size = spec.header_font_size or style.font_size
        header_lines = self.wrap_cells(spec.headers, widths, style)
        height = row_height(header_lines, style)
        self.cursor.ensure(height + 5)
        top = self.cursor.reserve(height)
        self._draw_cells(
            top,
            widths,
            header_lines,
            height,
            style,
            fill=style.header_fill,
            bold_columns=range(len(widths)),
            font_size=header_size,
        )

    def table(self, spec: TableSpec, rows: Iterable[Sequence[Any]]) -> float:
        """Bordered zebra table, page-break checked per row.

        Returns the y position after the table.
        """
        style = spec.style
        count = len(spec.headers)
        widths = normalize_widths(spec.widths, count, self.geometry.content_width)
        cursor = self.cursor
        cursor.skip(TABLE_GAP_BEFORE)
        self._table_header(spec, widths)
        for row_index, row in enumerate(rows):
            cells = normalize_cells(row, count)
            cell_lines = self.wrap_cells(cells, widths, style)
            height = row_height(cell_lines, style)
            if cursor.ensure(height) and spec.repeat_header:
                self._table_header(spec, widths)
            top = cursor.reserve(height)
            self._draw_cells(
                top,
                widths,
                cell_lines,
                height,
                style,
                fill=style.zebra_fill if row_index % 2 == 0 else None,
                bold_columns=spec.bold_columns,
            )
        cursor.skip(TABLE_GAP_AFTER)
        return cursor.y

    def total_row(self, spec: TableSpec, cells: Sequence[Any], *, bold_columns: Iterable[int] = ()) -> None:
        style = spec.style
        count = len(spec.headers)
        widths = normalize_widths(spec.widths, count, self.geometry.content_width)
        cell_lines = self.wrap_cells(normalize_cells(cells, count), widths, style)
        height = row_height(cell_lines, style)
        top = self.cursor.reserve(height)
        self._draw_cells(
            top,
            widths,
            cell_lines,
            height,
            style,
            fill=style.zebra_fill,
            bold_columns=bold_columns,
        )

    def total_callout(self, total: float, *, label: str = 'Total Amount', width: float = 75.0, height: float = 9.0) -> None:
        self.cursor.ensure(height + 9)
        top = self.cursor.reserve(height + 2)
        x = self.geometry.content_right - width
        self.surface.rect(x, top, width, height, fill=HEADER_FILL, stroke=BORDER_COLOR)
        self.surface.text(
            x + 3,
            top + 5.5,
            f'{label}: {format_inr(total)}.',
            font=self.font(10, bold=True),
        )

    def key_value_table(
        self,
        merged_rows: Sequence[tuple[str, str]],
        pair_rows: Sequence[tuple[tuple[str, str], tuple[str, str] | None]] = (),
        trailing_rows: Sequence[tuple[str, str]] = (),
        *,
        widths: Sequence[float] = (38.0, 57.0, 38.0, 57.0),
        style: TableStyle = COMPACT_TABLE,
    ) -> None:
        """Label/value grid: merged rows span the value columns, pair rows
        carry two label/value pairs side by side."""
        cols = normalize_widths(widths, 4, self.geometry.content_width)
        merged_widths = [cols[0], cols[1] + cols[2] + cols[3]]
        cursor = self.cursor
        cursor.ensure(style.base_row_height + 4)
        row_index = 0

        def draw(row_widths: list[float], cells: list[str], bold: Iterable[int]) -> None:
            nonlocal row_index
            cell_lines = self.wrap_cells(cells, row_widths, style)
            height = row_height(cell_lines, style)
            cursor.ensure(height + 2)
            top = cursor.reserve(height)
            self._draw_cells(
                top,
                row_widths,
                cell_lines,
                height,
                style,
                fill=style.zebra_fill if row_index % 2 == 0 else None,
                bold_columns=bold,
            )
            row_index += 1

        for label, value in merged_rows:
            draw(merged_widths, [label, value or '-'], (0,))
        for left, right in pair_rows:
            right = right or ('', '')
            draw(cols, [left[0], left[1] or '-', right[0], right[1]], (0, 2))
        for label, value in trailing_rows:
            draw(merged_widths, [label, value or '-'], (0,))

    def remark_box(self, text: str, *, min_height: float = 18.0, size: float = 9.0) -> None:
        font = self.font(size)
        lines = wrap_to_width(text or '-', font, self.geometry.content_width - 2 * CELL_PAD)
        height = max(min_height, len(lines) * 3.2 + 2 * CELL_PAD + 2)
        self.cursor.ensure(height + 5)
        top = self.cursor.reserve(height)
        left = self.geometry.content_left
        self.surface.rect(left, top, self.geometry.content_width, height, stroke=BORDER_COLOR)
        for index, line in enumerate(lines):
            self.surface.text(left + CELL_PAD, top + CELL_PAD + 3.0 + index * 3.2, line, font=font)

    def signature_boxes(
        self,
        signatures: Sequence[tuple[str, Any]],
        *,
        height: float = 22.0,
        gap: float = 3.0,
    ) -> None:
        """Equal-width boxes with an optional fitted image and a centred label."""
        if not signatures:
            return
        count = len(signatures)
        width = (self.geometry.content_width - gap * (count - 1)) / count
        self.cursor.ensure(height + 12)
        top = self.cursor.reserve(height)
        label_font = self.font(8, bold=True)
        for index, (label, image) in enumerate(signatures):
            x = self.geometry.content_left + index * (width + gap)
            self.surface.rect(x, top, width, height, stroke=BORDER_COLOR)
            if image is not None:
                try:
                    natural_w, natural_h = image.getSize()
                    draw_w, draw_h = fit_within(natural_w, natural_h, width - 2, height - 7)
                    draw_x = x + 1 + (width - 2 - draw_w) / 2
                    draw_y = top + 0.8 + (height - 7 - draw_h) / 2
                    self.surface.image(image, draw_x, draw_y, draw_w, draw_h)
                except Exception as exc:
                    logger.warning('Skipping unreadable signature image for %s: %s', label, exc)
            self.surface.text(x + width / 2, top + height - 1.2, label, font=label_font, align='center')
