from __future__ import annotations

from io import BytesIO
from typing import Any

from PIL import Image

from ..errors import ConversionError, ParseError


def _cairosvg() -> Any:
    try:
        import cairosvg
    except (ModuleNotFoundError, OSError) as exc:  # pragma: no cover - import guard
        raise ConversionError("cairosvg and the Cairo library are required to render SVG") from exc
    return cairosvg


class CairoSvgRasterizer:
    def _render_png(self, data: bytes, **options: Any) -> bytes:
        cairosvg = _cairosvg()
        try:
            return cairosvg.svg2png(bytestring=data, **options)
        except Exception as exc:
            raise ParseError("Failed to parse SVG") from exc

    def intrinsic_size(self, data: bytes) -> tuple[int, int]:
        with Image.open(BytesIO(self._render_png(data))) as image:
            return image.size

    def rasterize(
        self,
        data: bytes,
        size: tuple[int, int],
        background: tuple[int, int, int] | None,
    ) -> Image.Image:
        options: dict[str, Any] = {}
        width, height = size
        if width and height:
            options["output_width"] = width
            options["output_height"] = height
        if background is not None:
            options["background_color"] = "#{:02x}{:02x}{:02x}".format(*background)
        with Image.open(BytesIO(self._render_png(data, **options))) as image:
            return image.convert("RGBA")
