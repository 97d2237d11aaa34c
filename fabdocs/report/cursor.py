from __future__ import annotations

from typing import Callable

from .geometry import A4_GEOMETRY, PageGeometry


PageCallback = Callable[[int], None]


class FlowCursor:
    """Vertical write position for one render.

    ``y`` is the top of the free space on the current page, in millimetres
    from the top edge. It only moves down within a page; ``break_page`` is the
    one place it resets.
    """

    def __init__(
        self,
        geometry: PageGeometry = A4_GEOMETRY,
        *,
        on_new_page: PageCallback | None = None,
        page: int = 1,
        y: float | None = None,
    ):
        self.geometry = geometry
        self.on_new_page = on_new_page
        self.page = page
        self.y = geometry.content_top if y is None else float(y)
        self.breaks = 0

    @property
    def limit(self) -> float:
        return self.geometry.content_bottom

    @property
    def remaining(self) -> float:
        return max(0.0, self.limit - self.y)

    @property
    def at_page_top(self) -> bool:
        return self.y <= self.geometry.content_top

    def fits(self, height: float) -> bool:
        return self.y + max(0.0, height) <= self.limit

    def ensure(self, height: float) -> bool:
        """Break the page when ``height`` does not fit. Returns True on break."""
        if self.fits(height) or self.at_page_top:
            return False
        self.break_page()
        return True

    def reserve(self, height: float) -> float:
        """Claim ``height`` mm of vertical space and return its top edge."""
        height = max(0.0, float(height))
        self.ensure(height)
        top = self.y
        self.y += height
        return top

    def skip(self, height: float) -> None:
        if height > 0:
            self.y += height

    def move_to(self, y: float) -> None:
        if y > self.y:
            self.y = float(y)

    def break_page(self) -> int:
        self.page += 1
        self.breaks += 1
        self.y = self.geometry.content_top
        if self.on_new_page is not None:
            self.on_new_page(self.page)
        return self.page
