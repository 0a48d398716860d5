"""Domain models shared by the resolver, renderers and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from PIL import Image


class InputType(str, Enum):
    AUTO = "auto"
    IMAGE = "image"
    TEXT = "text"
    SVG = "svg"
    PDF = "pdf"
    HTML = "html"
    OFFICE = "office"


@dataclass(frozen=True, slots=True)
class Original:
    """Keep the source size."""


@dataclass(frozen=True, slots=True)
class FitTerminal:
    """Scale (up or down) to fit both terminal dimensions."""


@dataclass(frozen=True, slots=True)
class ClipTerminal:
    """Keep the source size unless it overflows the terminal."""


@dataclass(frozen=True, slots=True)
class FitWidth:
    """Fill the terminal width."""


@dataclass(frozen=True, slots=True)
class FitHeight:
    """Fill the terminal height."""


@dataclass(frozen=True, slots=True)
class Manual:
    """Explicit size; a missing side follows the aspect ratio."""

    width: int | None = None
    height: int | None = None


ResizeMode = Union[Original, FitTerminal, ClipTerminal, FitWidth, FitHeight, Manual]


@dataclass(frozen=True, slots=True)
class CacheDisabled:
    """Convert in a throwaway directory."""


@dataclass(frozen=True, slots=True)
class CacheDefault:
    """Use the platform cache directory."""


@dataclass(frozen=True, slots=True)
class CacheCustom:
    path: Path


CacheMode = Union[CacheDisabled, CacheDefault, CacheCustom]


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Per-invocation options, shared by every input of a batch."""

    input_type: InputType = InputType.AUTO
    resize_mode: ResizeMode = ClipTerminal()
    term_size: tuple[int, int] = (0, 0)
    page_indices: tuple[int, ...] | None = None
    cache_mode: CacheMode = CacheDefault()
    background: tuple[int, int, int] | None = None


@dataclass(slots=True)
class ImageResult:
    image: Image.Image


@dataclass(slots=True)
class DataResult:
    data: bytes
    path: Path | None = None


LoadResult = Union[ImageResult, DataResult]


__all__ = [
    "InputType",
    "Original",
    "FitTerminal",
    "ClipTerminal",
    "FitWidth",
    "FitHeight",
    "Manual",
    "ResizeMode",
    "CacheDisabled",
    "CacheDefault",
    "CacheCustom",
    "CacheMode",
    "RequestContext",
    "ImageResult",
    "DataResult",
    "LoadResult",
]
