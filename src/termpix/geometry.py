from __future__ import annotations

import math

from .models import (
    ClipTerminal,
    FitHeight,
    FitTerminal,
    FitWidth,
    Manual,
    RequestContext,
    ResizeMode,
)

DEFAULT_PDF_WIDTH = 800


def _round(value: float) -> int:
    # half away from zero, never negative
    return max(0, int(math.floor(value + 0.5)))


def _fit_terminal(src_w: float, src_h: float, term_w: int, term_h: int) -> tuple[int, int] | None:
    ratios = []
    if term_w > 0:
        ratios.append(term_w / src_w)
    if term_h > 0:
        ratios.append(term_h / src_h)
    if not ratios:
        return None
    ratio = min(ratios)
    return _round(src_w * ratio), _round(src_h * ratio)


def calculate_dimensions(
    source: tuple[int, int],
    mode: ResizeMode,
    term_size: tuple[int, int],
) -> tuple[int, int]:
    """Map a source size onto output pixels for the given resize policy.

    A zero in either returned axis tells the caller to skip resizing.
    """
    src_w, src_h = source
    term_w, term_h = term_size
    if src_w <= 0 or src_h <= 0:
        return src_w, src_h
    fw, fh = float(src_w), float(src_h)

    if isinstance(mode, FitTerminal):
        return _fit_terminal(fw, fh, term_w, term_h) or (src_w, src_h)

    if isinstance(mode, ClipTerminal):
        overflows = (term_w > 0 and src_w > term_w) or (term_h > 0 and src_h > term_h)
        if overflows:
            return _fit_terminal(fw, fh, term_w, term_h) or (src_w, src_h)
        return src_w, src_h

    if isinstance(mode, FitWidth):
        if term_w <= 0:
            return src_w, src_h
        return term_w, _round(fh * term_w / fw)

    if isinstance(mode, FitHeight):
        if term_h <= 0:
            return src_w, src_h
        return _round(fw * term_h / fh), term_h

    if isinstance(mode, Manual):
        if mode.width is not None and mode.height is not None:
            return max(0, mode.width), max(0, mode.height)
        if mode.width is not None:
            return max(0, mode.width), _round(fh * mode.width / fw)
        if mode.height is not None:
            return _round(fw * mode.height / fh), max(0, mode.height)

    return src_w, src_h


def pdf_target_width(ctx: RequestContext) -> int:
    """Width in pixels that PDF pages are rasterised at."""
    mode = ctx.resize_mode
    term_w = ctx.term_size[0]
    if isinstance(mode, Manual) and mode.width:
        return mode.width
    if isinstance(mode, (FitWidth, FitTerminal)) and term_w > 0:
        return term_w
    return term_w if term_w > 0 else DEFAULT_PDF_WIDTH


__all__ = ["calculate_dimensions", "pdf_target_width", "DEFAULT_PDF_WIDTH"]
