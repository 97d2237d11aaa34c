from __future__ import annotations

import io

from .cursor import FlowCursor
from .drawers import Drawer
from .furniture import PageFurniture
from .geometry import PageGeometry
from .surface import CanvasSurface


class PageLayout:
    """One render's canvas, cursor and drawer, stamped page by page.

    Page 1 is opened (and stamped) on construction. Every later page is
    opened through the cursor, so furniture and the page label follow any
    break, automatic or explicit.
    """

    def __init__(
        self,
        geometry: PageGeometry,
        *,
        furniture: PageFurniture | None = None,
        title: str | None = None,
        author: str | None = None,
        producer: str | None = None,
        font_name: str = 'Helvetica',
        bold_font_name: str = 'Helvetica-Bold',
    ):
        self.geometry = geometry
        self.furniture = furniture
        self._buffer = io.BytesIO()
        self.surface = CanvasSurface(
            self._buffer,
            geometry,
            title=title,
            author=author,
            producer=producer,
        )
        self.cursor = FlowCursor(geometry, on_new_page=self._open_page)
        self.drawer = Drawer(
            self.surface,
            self.cursor,
            geometry,
            font_name=font_name,
            bold_font_name=bold_font_name,
        )
        self._stamp(1)
        self._finished = False

    def _stamp(self, page_number: int) -> None:
        if self.furniture is not None:
            self.furniture.stamp(self.surface, page_number)

    def _open_page(self, page_number: int) -> None:
        self.surface.show_page()
        self._stamp(page_number)

    @property
    def page(self) -> int:
        return self.cursor.page

    @property
    def page_count(self) -> int:
        return self.cursor.page

    def new_page(self) -> int:
        return self.cursor.break_page()

    def finish(self) -> bytes:
        if not self._finished:
            self.surface.save()
            self._finished = True
        return self._buffer.getvalue()
