from __future__ import annotations

import logging
from typing import Protocol

from fabdocs.config import Settings, get_settings


logger = logging.getLogger(__name__)


class RasterizationError(RuntimeError):
    pass


class PdfRasterizer(Protocol):
    """Turns PDF bytes into one PNG image per page."""

    def rasterize(self, pdf_bytes: bytes, *, max_pages: int) -> list[bytes]: ...


class PyMuPDFRasterizer:
    def __init__(self, scale: float = 1.5):
        self.scale = max(0.1, float(scale))

    def rasterize(self, pdf_bytes: bytes, *, max_pages: int) -> list[bytes]:
        try:
            import pymupdf as fitz
        except Exception as exc:
            raise RasterizationError(f'PyMuPDF unavailable: {exc}') from exc

        document = None
        try:
            document = fitz.open(stream=pdf_bytes, filetype='pdf')
            if document.is_encrypted:
                authenticated = False
                try:
                    authenticated = bool(document.authenticate(''))
                except Exception:
                    authenticated = False
                if not authenticated:
                    raise RasterizationError('PDF is encrypted')

            matrix = fitz.Matrix(self.scale, self.scale)
            limit = min(document.page_count, max(0, int(max_pages)))
            if document.page_count > limit:
                logger.info('Rasterizing first %s of %s PDF pages', limit, document.page_count)
            images: list[bytes] = []
            for page_index in range(limit):
                pixmap = document.load_page(page_index).get_pixmap(matrix=matrix, alpha=False)
                images.append(pixmap.tobytes('png'))
            return images
        except RasterizationError:
            raise
        except Exception as exc:
            raise RasterizationError(f'failed to rasterize PDF: {exc}') from exc
        finally:
            if document is not None:
                document.close()


def default_rasterizer(settings: Settings | None = None) -> PyMuPDFRasterizer:
    settings = settings or get_settings()
    return PyMuPDFRasterizer(scale=settings.attachment_raster_scale)
