from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import InputType
from .plugins import PluginDescriptor, PluginRegistry


class RenderPath(str, Enum):
    TEXT = "text"
    PLUGIN = "plugin"
    IMAGE = "image"
    SVG = "svg"
    PDF = "pdf"
    OFFICE = "office"
    HTML = "html"
    AUTO = "auto"


@dataclass(slots=True)
class Detection:
    path: RenderPath
    plugin: PluginDescriptor | None = None


OFFICE_EXTENSIONS = frozenset({"doc", "docx", "xls", "xlsx", "ppt", "pptx"})
HTML_EXTENSIONS = frozenset({"html", "htm"})
URL_PREFIXES = (b"http://", b"https://", b"file://")
SVG_PREFIXES = (b"<svg", b"<?xml")
HTML_PREFIXES = (b"<html", b"<!DOCTYPE html")
PDF_PREFIX = b"%PDF"


def is_url(data: bytes) -> bool:
    return data.startswith(URL_PREFIXES)


def looks_like_svg(input_type: InputType, extension: str, data: bytes) -> bool:
    return input_type is InputType.SVG or extension == "svg" or data.startswith(SVG_PREFIXES)


def looks_like_pdf(input_type: InputType, extension: str, data: bytes) -> bool:
    return input_type is InputType.PDF or extension == "pdf" or data.startswith(PDF_PREFIX)


def looks_like_office(input_type: InputType, extension: str) -> bool:
    return input_type is InputType.OFFICE or extension in OFFICE_EXTENSIONS


def is_html_target(input_type: InputType, extension: str, data: bytes) -> bool:
    """HTML by type, extension or URL; used for both paths and content."""
    return input_type is InputType.HTML or extension in HTML_EXTENSIONS or is_url(data)


def looks_like_html(input_type: InputType, extension: str, data: bytes) -> bool:
    return is_html_target(input_type, extension, data) or data.startswith(HTML_PREFIXES)


def detect_render_path(
    input_type: InputType,
    data: bytes,
    extension: str,
    registry: PluginRegistry,
) -> Detection:
    """Pick the render path for ``data``; the first matching rule wins."""
    if input_type is InputType.TEXT:
        return Detection(RenderPath.TEXT)
    plugin = registry.match(data, extension)
    if plugin is not None:
        return Detection(RenderPath.PLUGIN, plugin)
    if input_type is InputType.IMAGE:
        return Detection(RenderPath.IMAGE)
    if looks_like_svg(input_type, extension, data):
        return Detection(RenderPath.SVG)
    if looks_like_pdf(input_type, extension, data):
        return Detection(RenderPath.PDF)
    if looks_like_office(input_type, extension):
        return Detection(RenderPath.OFFICE)
    if looks_like_html(input_type, extension, data):
        return Detection(RenderPath.HTML)
    return Detection(RenderPath.AUTO)


__all__ = [
    "RenderPath",
    "Detection",
    "OFFICE_EXTENSIONS",
    "HTML_EXTENSIONS",
    "is_url",
    "is_html_target",
    "looks_like_svg",
    "looks_like_pdf",
    "looks_like_office",
    "looks_like_html",
    "detect_render_path",
]
