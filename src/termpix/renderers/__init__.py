from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from .base import HtmlScreenshotter, ImageDecoder, PdfRasterizer, RendererSet, SvgRasterizer
from .html import ChromiumScreenshotter
from .image import PillowDecoder
from .pdf import PdfiumRasterizer
from .svg import CairoSvgRasterizer


@lru_cache(maxsize=4)
def get_renderers(browser_data_dir: Path | None = None) -> RendererSet:
    return RendererSet(
        image=PillowDecoder(),
        svg=CairoSvgRasterizer(),
        pdf=PdfiumRasterizer(),
        html=ChromiumScreenshotter(browser_data_dir),
    )


__all__ = [
    "RendererSet",
    "ImageDecoder",
    "SvgRasterizer",
    "PdfRasterizer",
    "HtmlScreenshotter",
    "get_renderers",
]
