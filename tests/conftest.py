from __future__ import annotations

import base64
import io
from dataclasses import dataclass, field
from typing import Any

import pytest
from PIL import Image

from fabdocs.config import Settings


@dataclass
class RecordingSurface:
    """Surface double that keeps every call, grouped by page."""

    page: int = 1
    texts: list[dict[str, Any]] = field(default_factory=list)
    rects: list[dict[str, Any]] = field(default_factory=list)
    lines: list[dict[str, Any]] = field(default_factory=list)
    images: list[dict[str, Any]] = field(default_factory=list)

    def text(self, x, y, value, *, font, color=(0, 0, 0), align='left'):
        self.texts.append({'page': self.page, 'x': x, 'y': y, 'value': value, 'font': font, 'align': align})

    def rect(self, x, y, width, height, *, fill=None, stroke=None, line_width=0.2):
        self.rects.append(
            {'page': self.page, 'x': x, 'y': y, 'w': width, 'h': height, 'fill': fill, 'stroke': stroke}
        )

    def line(self, x1, y1, x2, y2, *, color, line_width=0.2):
        self.lines.append({'page': self.page, 'x1': x1, 'y1': y1, 'x2': x2, 'y2': y2})

    def image(self, image, x, y, width, height):
        self.images.append({'page': self.page, 'x': x, 'y': y, 'w': width, 'h': height, 'image': image})

    def show_page(self):
        self.page += 1

    def texts_on(self, page: int) -> list[dict[str, Any]]:
        return [item for item in self.texts if item['page'] == page]


def make_png(width: int = 40, height: int = 20, color: str = 'red') -> bytes:
    buffer = io.BytesIO()
    Image.new('RGB', (width, height), color).save(buffer, format='PNG')
    return buffer.getvalue()


def png_data_url(width: int = 40, height: int = 20) -> str:
    return 'data:image/png;base64,' + base64.b64encode(make_png(width, height)).decode('ascii')


class FakeRasterizer:
    def __init__(self, pages: int = 2):
        self.pages = pages
        self.calls: list[int] = []

    def rasterize(self, pdf_bytes: bytes, *, max_pages: int) -> list[bytes]:
        self.calls.append(max_pages)
        return [make_png(60, 80) for _ in range(min(self.pages, max_pages))]


class BrokenRasterizer:
    def rasterize(self, pdf_bytes: bytes, *, max_pages: int) -> list[bytes]:
        raise RuntimeError('renderer unavailable')


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()
