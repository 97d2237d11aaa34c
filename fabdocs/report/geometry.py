from __future__ import annotations

from dataclasses import dataclass

from reportlab.lib.units import mm


PX_TO_MM = 0.2646


def px_to_mm(px: float) -> float:
    return float(px) * PX_TO_MM


def mm_to_pt(value: float) -> float:
    return float(value) * mm


def pt_to_mm(value: float) -> float:
    return float(value) / mm


@dataclass(frozen=True)
class PageGeometry:
    page_width: float = 210.0
    page_height: float = 297.0
    margin: float = 15.0
    header_height: float = 35.0
    footer_height: float = 30.0
    top_pad: float = 10.0
    bottom_slack: float = 10.0

    @property
    def content_width(self) -> float:
        return max(0.0, self.page_width - 2 * self.margin)

    @property
    def content_left(self) -> float:
        return self.margin

    @property
    def content_right(self) -> float:
        return self.margin + self.content_width

    @property
    def content_top(self) -> float:
        return self.header_height + self.top_pad

    @property
    def content_bottom(self) -> float:
        return self.page_height - self.footer_height - self.bottom_slack

    @property
    def capacity(self) -> float:
        return max(0.0, self.content_bottom - self.content_top)

    @property
    def page_size_pt(self) -> tuple[float, float]:
        return mm_to_pt(self.page_width), mm_to_pt(self.page_height)


A4_GEOMETRY = PageGeometry()

# Stamp placement, measured in screen pixels on the letterhead artwork.
STAMP_SIZE = px_to_mm(80)
STAMP_RIGHT = px_to_mm(50)
STAMP_BOTTOM = px_to_mm(80)
PAGE_LABEL_OFFSET = 8.0
