from __future__ import annotations

import io
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Sequence

from pypdf import PdfReader, PdfWriter

from .cursor import FlowCursor
from .drawers import TITLE_COLOR, Drawer, TableSpec, TableStyle
from .geometry import PageGeometry
from .layout import PageLayout
from .surface import CanvasSurface, NullSurface, Surface
from .text import FontSpec


logger = logging.getLogger(__name__)

INDEX_HEADERS = ['Sl. No.', 'Subject', 'Page No.']
INDEX_WIDTHS = [25.0, 120.0, 35.0]
INDEX_STYLE = TableStyle(line_width=0.3)
INDEX_HEADING_SIZE = 16.0
INDEX_HEADING_HEIGHT = 15.0


@dataclass(frozen=True)
class IndexEntry:
    title: str
    page: int


@dataclass(frozen=True)
class IndexReservation:
    first_page: int
    page_count: int
    table_top: float

    @property
    def pages(self) -> list[int]:
        return list(range(self.first_page, self.first_page + self.page_count))


def disambiguate_titles(titles: Iterable[str]) -> list[str]:
    """Suffix repeated titles with their occurrence number: 'A', 'A (2)'."""
    seen: Counter[str] = Counter()
    result: list[str] = []
    for title in titles:
        seen[title] += 1
        count = seen[title]
        result.append(title if count == 1 else f'{title} ({count})')
    return result


class IndexBuilder:
    """Table of contents filled in two phases.

    Phase one reserves blank pages and collects ``(title, page)`` entries as
    blocks start. Phase two draws the table on an overlay document and merges
    each overlay page onto its reserved page.
    """

    def __init__(
        self,
        geometry: PageGeometry,
        *,
        heading: str = 'INDEX',
        font_name: str = 'Helvetica',
        bold_font_name: str = 'Helvetica-Bold',
    ):
        self.geometry = geometry
        self.heading = heading
        self.font_name = font_name
        self.bold_font_name = bold_font_name
        self.entries: list[IndexEntry] = []
        self._seen: Counter[str] = Counter()

    @property
    def table_top(self) -> float:
        return self.geometry.content_top + INDEX_HEADING_HEIGHT

    def record(self, title: str, page: int) -> IndexEntry:
        self._seen[title] += 1
        count = self._seen[title]
        entry = IndexEntry(title=title if count == 1 else f'{title} ({count})', page=int(page))
        self.entries.append(entry)
        return entry

    def _spec(self) -> TableSpec:
        return TableSpec(
            headers=list(INDEX_HEADERS),
            widths=list(INDEX_WIDTHS),
            style=INDEX_STYLE,
            repeat_header=True,
        )

    def _draw_table(self, surface: Surface, rows: Sequence[Sequence[str]]) -> int:
        cursor = FlowCursor(
            self.geometry,
            on_new_page=lambda _page: surface.show_page(),
            y=self.table_top,
        )
        drawer = Drawer(
            surface,
            cursor,
            self.geometry,
            font_name=self.font_name,
            bold_font_name=self.bold_font_name,
        )
        drawer.table(self._spec(), rows)
        return cursor.page

    def pages_required(self, titles: Sequence[str]) -> int:
        """Pages the index table needs for ``titles``, measured by a dry run."""
        rows = [
            (str(number), title, '000')
            for number, title in enumerate(disambiguate_titles(titles), start=1)
        ]
        return max(1, self._draw_table(NullSurface(), rows))

    def reserve(self, layout: PageLayout, titles: Sequence[str]) -> IndexReservation:
        page_count = self.pages_required(titles)
        first_page = layout.new_page()
        layout.surface.text(
            self.geometry.page_width / 2,
            self.geometry.content_top + 5.0,
            self.heading,
            font=FontSpec(self.bold_font_name, INDEX_HEADING_SIZE),
            color=TITLE_COLOR,
            align='center',
        )
        for _ in range(page_count - 1):
            layout.new_page()
        logger.debug('Reserved %s index page(s) starting at page %s', page_count, first_page)
        return IndexReservation(first_page=first_page, page_count=page_count, table_top=self.table_top)

    def render_overlay(self) -> tuple[bytes, int]:
        buffer = io.BytesIO()
        surface = CanvasSurface(buffer, self.geometry)
        rows = [
            (str(number), entry.title, str(entry.page) if entry.page else '-')
            for number, entry in enumerate(self.entries, start=1)
        ]
        pages = self._draw_table(surface, rows)
        surface.save()
        return buffer.getvalue(), pages

    def backfill(self, document_pdf: bytes, reservation: IndexReservation) -> bytes:
        overlay_pdf, overlay_pages = self.render_overlay()
        if overlay_pages > reservation.page_count:
            logger.warning(
                'Index needs %s page(s) but %s were reserved; extra rows dropped',
                overlay_pages,
                reservation.page_count,
            )

        writer = PdfWriter()
        for page in PdfReader(io.BytesIO(document_pdf)).pages:
            writer.add_page(page)

        overlay_reader = PdfReader(io.BytesIO(overlay_pdf))
        for offset, target_page in enumerate(reservation.pages):
            if offset >= len(overlay_reader.pages):
                break
            writer.pages[target_page - 1].merge_page(overlay_reader.pages[offset])

        output = io.BytesIO()
        writer.write(output)
        return output.getvalue()
