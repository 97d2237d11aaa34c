from __future__ import annotations

from typing import Any, BinaryIO, Protocol, Union

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from .geometry import PageGeometry, mm_to_pt
from .text import FontSpec


ColorValue = Union[str, tuple[int, int, int]]

BLACK: ColorValue = (0, 0, 0)


def to_color(value: ColorValue) -> colors.Color:
    if isinstance(value, str):
        return colors.HexColor(value)
    red, green, blue = value
    return colors.Color(red / 255.0, green / 255.0, blue / 255.0)


class Surface(Protocol):
    """Drawing target addressed in millimetres from the top-left corner."""

    def text(
        self,
        x: float,
        y: float,
        value: str,
        *,
        font: FontSpec,
        color: ColorValue = BLACK,
        align: str = 'left',
    ) -> None: ...

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        fill: ColorValue | None = None,
        stroke: ColorValue | None = None,
        line_width: float = 0.2,
    ) -> None: ...

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        color: ColorValue,
        line_width: float = 0.2,
    ) -> None: ...

    def image(self, image: Any, x: float, y: float, width: float, height: float) -> None: ...

    def show_page(self) -> None: ...


class NullSurface:
    """Discards drawing calls; used to measure a layout without emitting it."""

    def __init__(self) -> None:
        self.pages_emitted = 0

    def text(self, x: float, y: float, value: str, **kwargs: Any) -> None:
        return None

    def rect(self, x: float, y: float, width: float, height: float, **kwargs: Any) -> None:
        return None

    def line(self, x1: float, y1: float, x2: float, y2: float, **kwargs: Any) -> None:
        return None

    def image(self, image: Any, x: float, y: float, width: float, height: float) -> None:
        return None

    def show_page(self) -> None:
        self.pages_emitted += 1


class CanvasSurface:
    """reportlab canvas with a top-down millimetre coordinate system.

    Text ``y`` values are baselines; rectangle and image ``y`` values are top
    edges.
    """

    def __init__(
        self,
        output: BinaryIO,
        geometry: PageGeometry,
        *,
        title: str | None = None,
        author: str | None = None,
        producer: str | None = None,
    ):
        self.geometry = geometry
        self.canvas = Canvas(output, pagesize=geometry.page_size_pt, pageCompression=1)
        if title:
            self.canvas.setTitle(title)
        if author:
            self.canvas.setAuthor(author)
        self._producer = producer
        self._apply_producer()
        self.pages_emitted = 0
        self._page_has_content = False

    def _apply_producer(self) -> None:
        if self._producer:
            self.canvas.setProducer(self._producer)

    def _x(self, value: float) -> float:
        return mm_to_pt(value)

    def _y(self, value: float) -> float:
        return mm_to_pt(self.geometry.page_height - value)

    def text(
        self,
        x: float,
        y: float,
        value: str,
        *,
        font: FontSpec,
        color: ColorValue = BLACK,
        align: str = 'left',
    ) -> None:
        if not value:
            return
        canvas = self.canvas
        self._page_has_content = True
        canvas.setFillColor(to_color(color))
        canvas.setFont(font.name, font.size)
        if align == 'center':
            canvas.drawCentredString(self._x(x), self._y(y), value)
        elif align == 'right':
            canvas.drawRightString(self._x(x), self._y(y), value)
        else:
            canvas.drawString(self._x(x), self._y(y), value)

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        fill: ColorValue | None = None,
        stroke: ColorValue | None = None,
        line_width: float = 0.2,
    ) -> None:
        if fill is None and stroke is None:
            return
        canvas = self.canvas
        self._page_has_content = True
        canvas.saveState()
        if fill is not None:
            canvas.setFillColor(to_color(fill))
        if stroke is not None:
            canvas.setStrokeColor(to_color(stroke))
            canvas.setLineWidth(mm_to_pt(line_width))
        canvas.rect(
            self._x(x),
            self._y(y + height),
            mm_to_pt(width),
            mm_to_pt(height),
            stroke=1 if stroke is not None else 0,
            fill=1 if fill is not None else 0,
        )
        canvas.restoreState()

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        color: ColorValue,
        line_width: float = 0.2,
    ) -> None:
        canvas = self.canvas
        self._page_has_content = True
        canvas.saveState()
        canvas.setStrokeColor(to_color(color))
        canvas.setLineWidth(mm_to_pt(line_width))
        canvas.line(self._x(x1), self._y(y1), self._x(x2), self._y(y2))
        canvas.restoreState()

    def image(self, image: ImageReader, x: float, y: float, width: float, height: float) -> None:
        self._page_has_content = True
        self.canvas.drawImage(
            image,
            self._x(x),
            self._y(y + height),
            width=mm_to_pt(width),
            height=mm_to_pt(height),
            mask='auto',
        )

    def show_page(self) -> None:
        self.canvas.showPage()
        self.pages_emitted += 1
        self._page_has_content = False
        self._apply_producer()

    def save(self) -> None:
        # reportlab drops a trailing page with nothing drawn on it
        if not self._page_has_content:
            self.canvas.showPage()
        self.canvas.save()
