from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, Sequence

from fabdocs.adapters.rasterizer import PdfRasterizer
from fabdocs.types import UploadItem

from .drawers import ACCENT_COLOR
from .images import decode_data_url, fit_within, load_image
from .layout import PageLayout


logger = logging.getLogger(__name__)

CAPTION_COLOR = (30, 58, 95)
IMAGE_SUFFIXES = {'.png', '.jpg', '.jpeg', '.gif', '.bmp', '.webp', '.tif', '.tiff'}
PLACEHOLDER_TITLES = {
    'pdf': 'Uploaded PDF could not be rendered',
    'image': 'Uploaded image could not be rendered',
}
PLACEHOLDER_MESSAGES = {
    'pdf': 'PDF pages were skipped because the file could not be rasterized for this export.',
    'image': 'The image was skipped because its data could not be decoded.',
}


@dataclass(frozen=True)
class AttachmentAsset:
    name: str
    kind: str
    data: bytes

    @classmethod
    def from_file(cls, name: str, mime_type: str, data: bytes) -> 'AttachmentAsset | None':
        kind = classify_attachment(mime_type, name)
        if kind is None:
            logger.warning('Skipping attachment %s with unsupported type %r', name, mime_type)
            return None
        return cls(name=name, kind=kind, data=data)


def classify_attachment(mime_type: str | None, name: str | None = None) -> str | None:
    mime = str(mime_type or '').strip().lower()
    if mime == 'application/pdf':
        return 'pdf'
    if mime.startswith('image/'):
        return 'image'
    suffix = PurePosixPath(str(name or '')).suffix.lower()
    if suffix == '.pdf':
        return 'pdf'
    if suffix in IMAGE_SUFFIXES:
        return 'image'
    return None


def assets_from_uploads(uploads: Iterable[UploadItem]) -> list[AttachmentAsset]:
    assets: list[AttachmentAsset] = []
    for upload in uploads:
        if not upload.data_url:
            continue
        decoded = decode_data_url(upload.data_url)
        if decoded is None:
            logger.warning('Skipping attachment %s: not a data URL', upload.file_name or 'Attachment')
            continue
        mime, data = decoded
        asset = AttachmentAsset.from_file(upload.file_name, upload.mime_type or mime, data)
        if asset is not None:
            assets.append(asset)
    return assets


class AttachmentAppender:
    """Appends uploaded images and PDF pages after the document body."""

    def __init__(self, layout: PageLayout, *, rasterizer: PdfRasterizer | None, max_pdf_pages: int = 30):
        self.layout = layout
        self.rasterizer = rasterizer
        self.max_pdf_pages = max_pdf_pages

    def append(self, assets: Sequence[AttachmentAsset]) -> int | None:
        """Add one or more pages per asset. Returns the first appended page."""
        first_page: int | None = None
        for asset in assets:
            if asset.kind == 'pdf':
                page = self._append_pdf(asset)
            else:
                page = self._append_image(asset.data, asset.name or 'Uploaded image', asset.name)
            if first_page is None:
                first_page = page
        return first_page

    def _append_pdf(self, asset: AttachmentAsset) -> int:
        name = asset.name or 'Uploaded PDF'
        try:
            if self.rasterizer is None:
                raise RuntimeError('no PDF rasterizer configured')
            images = self.rasterizer.rasterize(asset.data, max_pages=self.max_pdf_pages)
            if not images:
                raise RuntimeError('no pages rendered')
        except Exception as exc:
            logger.warning('Failed to render PDF attachment %s: %s', name, exc)
            return self._placeholder(name, 'pdf')

        first_page: int | None = None
        for page_number, image in enumerate(images, start=1):
            page = self._append_image(image, f'{name} - Page {page_number}', name, kind='pdf')
            if first_page is None:
                first_page = page
        return first_page

    def _append_image(self, data: bytes, caption: str, name: str, *, kind: str = 'image') -> int:
        image = load_image(data, label=f'attachment {name}')
        if image is None:
            return self._placeholder(name, kind)

        layout = self.layout
        geometry = layout.geometry
        page = layout.new_page()
        layout.drawer.paragraph(caption, size=10, bold=True, color=CAPTION_COLOR)
        layout.cursor.skip(1)

        top = layout.cursor.y
        box_width = geometry.content_width
        box_height = geometry.page_height - geometry.footer_height - top - 8
        natural_width, natural_height = image.getSize()
        draw_width, draw_height = fit_within(natural_width, natural_height, box_width, box_height)
        if draw_width > 0 and draw_height > 0:
            left = geometry.content_left + (box_width - draw_width) / 2
            layout.surface.image(image, left, top, draw_width, draw_height)
            layout.cursor.skip(draw_height)
        return page

    def _placeholder(self, name: str, kind: str) -> int:
        layout = self.layout
        page = layout.new_page()
        drawer = layout.drawer
        drawer.text_line(PLACEHOLDER_TITLES[kind], size=11, bold=True, color=ACCENT_COLOR, line_height=7)
        drawer.text_line(f'File: {name or "Attachment"}', size=10, line_height=6)
        drawer.paragraph(PLACEHOLDER_MESSAGES[kind], size=10)
        return page
