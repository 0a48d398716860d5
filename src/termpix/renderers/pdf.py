from __future__ import annotations

from typing import Any, Sequence

from PIL import Image

from ..errors import ConversionError, PageRangeError, ParseError
from .base import stack_vertically


def _pdfium() -> Any:
    try:
        import pypdfium2
    except ModuleNotFoundError as exc:  # pragma: no cover - import guard
        raise ConversionError("pypdfium2 is required to render PDF documents") from exc
    return pypdfium2


class PdfiumRasterizer:
    """Renders the selected pages at ``width`` pixels and stacks them top to bottom."""

    def rasterize(self, data: bytes, width: int, pages: Sequence[int] | None) -> Image.Image:
        pdfium = _pdfium()
        try:
            document = pdfium.PdfDocument(data)
        except pdfium.PdfiumError as exc:
            raise ParseError(f"Failed to load PDF: {exc}") from exc

        try:
            page_count = len(document)
            if pages is None:
                selected: Sequence[int] = range(page_count)
            else:
                if any(index >= page_count for index in pages):
                    raise PageRangeError(f"Page index out of range (must be <= {page_count})")
                selected = pages
            if not selected:
                raise PageRangeError("No pages found in PDF")

            images = []
            for index in selected:
                page = document[index]
                try:
                    scale = width / page.get_width()
                    bitmap = page.render(scale=scale, may_draw_forms=True)
                    images.append(bitmap.to_pil().convert("RGBA"))
                except pdfium.PdfiumError as exc:
                    raise ParseError(f"Failed to render page {index + 1}: {exc}") from exc
                finally:
                    page.close()
        finally:
            document.close()

        return stack_vertically(images)
