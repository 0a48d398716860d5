from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from PIL import Image


class ImageDecoder(Protocol):
    def decode(self, data: bytes) -> Image.Image:  # pragma: no cover - interface
        ...


class SvgRasterizer(Protocol):
    def intrinsic_size(self, data: bytes) -> tuple[int, int]:  # pragma: no cover - interface
        ...

    def rasterize(
        self,
        data: bytes,
        size: tuple[int, int],
        background: tuple[int, int, int] | None,
    ) -> Image.Image:  # pragma: no cover - interface
        ...


class PdfRasterizer(Protocol):
    def rasterize(
        self, data: bytes, width: int, pages: Sequence[int] | None
    ) -> Image.Image:  # pragma: no cover - interface
        ...


class HtmlScreenshotter(Protocol):
    def screenshot(self, data: bytes) -> bytes:  # pragma: no cover - interface
        ...


@dataclass(slots=True)
class RendererSet:
    """The external renderers the resolver delegates to."""

    image: ImageDecoder
    svg: SvgRasterizer
    pdf: PdfRasterizer
    html: HtmlScreenshotter


def stack_vertically(images: Sequence[Image.Image]) -> Image.Image:
    width = max(image.width for image in images)
    height = sum(image.height for image in images)
    combined = Image.new("RGBA", (width, height))
    offset = 0
    for image in images:
        combined.paste(image, (0, offset))
        offset += image.height
    return combined
