from __future__ import annotations

import logging

from reportlab.lib.utils import ImageReader

from fabdocs.adapters.branding import BrandingAssets

from .geometry import PAGE_LABEL_OFFSET, STAMP_BOTTOM, STAMP_RIGHT, STAMP_SIZE, PageGeometry
from .images import load_image
from .surface import Surface
from .text import FontSpec


logger = logging.getLogger(__name__)

PAGE_LABEL_COLOR = (128, 128, 128)


class PageFurniture:
    """Fixed letterhead elements stamped on every page."""

    def __init__(
        self,
        geometry: PageGeometry,
        assets: BrandingAssets | None = None,
        *,
        font_name: str = 'Helvetica',
        show_page_label: bool = True,
    ):
        assets = assets or BrandingAssets()
        self.geometry = geometry
        self.font = FontSpec(font_name, 8)
        self.show_page_label = show_page_label
        self.header: ImageReader | None = load_image(assets.header, label='header image')
        self.footer: ImageReader | None = load_image(assets.footer, label='footer image')
        self.stamp_image: ImageReader | None = load_image(assets.stamp, label='stamp image')

    def _draw(self, surface: Surface, attr: str, x: float, y: float, width: float, height: float) -> None:
        image = getattr(self, attr)
        if image is None:
            return
        try:
            surface.image(image, x, y, width, height)
        except Exception as exc:
            logger.warning('Failed to draw %s; continuing without it: %s', attr, exc)
            setattr(self, attr, None)

    def stamp(self, surface: Surface, page_number: int) -> None:
        geometry = self.geometry
        self._draw(surface, 'header', 0, 0, geometry.page_width, geometry.header_height)
        self._draw(
            surface,
            'footer',
            0,
            geometry.page_height - geometry.footer_height,
            geometry.page_width,
            geometry.footer_height,
        )
        self._draw(
            surface,
            'stamp_image',
            geometry.page_width - STAMP_RIGHT - STAMP_SIZE,
            geometry.page_height - STAMP_BOTTOM - STAMP_SIZE,
            STAMP_SIZE,
            STAMP_SIZE,
        )
        if self.show_page_label:
            surface.text(
                geometry.page_width / 2,
                geometry.page_height - PAGE_LABEL_OFFSET,
                f'Page {page_number}',
                font=self.font,
                color=PAGE_LABEL_COLOR,
                align='center',
            )
