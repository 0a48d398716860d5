from __future__ import annotations


class RenderError(RuntimeError):
    """Base error for everything that can go wrong while rendering one input."""

    code = "RENDER_FAILED"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class OpenError(RenderError):
    code = "OPEN_FAILED"


class DecodeError(RenderError):
    code = "DECODE_FAILED"


class ParseError(RenderError):
    code = "PARSE_FAILED"


class PageRangeError(RenderError):
    code = "PAGE_RANGE"


class PluginConfigError(RenderError):
    code = "PLUGIN_CONFIG"


class PluginExecutionError(RenderError):
    code = "PLUGIN_EXEC"


class ConversionError(RenderError):
    code = "CONVERSION_FAILED"


class ColorFormatError(RenderError):
    code = "COLOR_FORMAT"


__all__ = [
    "RenderError",
    "OpenError",
    "DecodeError",
    "ParseError",
    "PageRangeError",
    "PluginConfigError",
    "PluginExecutionError",
    "ConversionError",
    "ColorFormatError",
]
