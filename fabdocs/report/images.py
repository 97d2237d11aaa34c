from __future__ import annotations

import base64
import binascii
import io
import logging
import re

from PIL import Image as PILImage
from reportlab.lib.utils import ImageReader


logger = logging.getLogger(__name__)

_DATA_URL_PATTERN = re.compile(r'^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*),(?P<data>.*)$', re.DOTALL)


def decode_data_url(value: str) -> tuple[str, bytes] | None:
    match = _DATA_URL_PATTERN.match(str(value or '').strip())
    if match is None:
        return None
    mime = match.group('mime').strip().lower()
    params = match.group('params') or ''
    payload = match.group('data')
    try:
        if ';base64' in params.lower():
            data = base64.b64decode(payload, validate=False)
        else:
            data = payload.encode('utf-8')
    except (binascii.Error, ValueError) as exc:
        logger.warning('Failed to decode data URL payload: %s', exc)
        return None
    return mime, data


def load_image(data: bytes | None, *, label: str = 'image') -> ImageReader | None:
    if not data:
        return None
    try:
        with PILImage.open(io.BytesIO(data)) as probe:
            probe.verify()
        return ImageReader(io.BytesIO(data))
    except Exception as exc:
        logger.warning('Failed to decode %s: %s', label, exc)
        return None


def fit_within(
    natural_width: float,
    natural_height: float,
    box_width: float,
    box_height: float,
) -> tuple[float, float]:
    """Largest size with the natural aspect ratio that fits inside the box."""
    natural_width = max(1.0, float(natural_width))
    natural_height = max(1.0, float(natural_height))
    if box_width <= 0 or box_height <= 0:
        return 0.0, 0.0
    ratio = min(box_width / natural_width, box_height / natural_height)
    return natural_width * ratio, natural_height * ratio
