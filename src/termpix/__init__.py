"""Display images, documents and web pages in kitty-compatible terminals."""

from .core import DisplayOptions, Resolver, Viewer
from .errors import RenderError
from .models import DataResult, ImageResult, InputType, RequestContext

__all__ = [
    "DataResult",
    "DisplayOptions",
    "ImageResult",
    "InputType",
    "RenderError",
    "RequestContext",
    "Resolver",
    "Viewer",
]
