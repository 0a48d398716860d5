from termpix.detection import RenderPath, detect_render_path
from termpix.models import InputType
from termpix.plugins import PluginDescriptor, PluginRegistry

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"

GRAPHVIZ = PluginDescriptor.model_validate(
    {"name": "graphviz", "extensions": ["dot", "svg"], "output": "svg", "command": "dot -Tsvg"}
)
CAFE = PluginDescriptor.model_validate(
    {"name": "cafe", "magic_bytes": ["CAFEBABE"], "output": "image", "command": "cafe2png"}
)
REGISTRY = PluginRegistry((GRAPHVIZ, CAFE))


def detect(data: bytes, extension: str = "", input_type: InputType = InputType.AUTO) -> RenderPath:
    return detect_render_path(input_type, data, extension, REGISTRY).path


def test_text_type_wins_over_everything() -> None:
    assert detect(b"<svg/>", "dot", InputType.TEXT) is RenderPath.TEXT


def test_plugin_extension_wins_over_builtin_formats() -> None:
    result = detect_render_path(InputType.AUTO, b"<svg/>", "svg", REGISTRY)
    assert result.path is RenderPath.PLUGIN
    assert result.plugin == GRAPHVIZ


def test_plugin_magic_bytes_match() -> None:
    result = detect_render_path(InputType.AUTO, b"\xca\xfe\xba\xbe rest", "", REGISTRY)
    assert result.plugin == CAFE


def test_forced_image_skips_content_sniffing() -> None:
    assert detect(b"<svg/>", "", InputType.IMAGE) is RenderPath.IMAGE


def test_builtin_cascade_order() -> None:
    assert detect(b"<?xml version='1.0'?><svg/>") is RenderPath.SVG
    assert detect(b"<svg", "pdf") is RenderPath.SVG
    assert detect(b"%PDF-1.7") is RenderPath.PDF
    assert detect(b"anything", "pdf") is RenderPath.PDF
    assert detect(b"PK\x03\x04", "docx") is RenderPath.OFFICE
    assert detect(b"<p>hi</p>", "html") is RenderPath.HTML
    assert detect(b"https://example.com") is RenderPath.HTML
    assert detect(b"<!DOCTYPE html><html></html>") is RenderPath.HTML
    assert detect(PNG_MAGIC) is RenderPath.AUTO
    assert detect(b"plain text") is RenderPath.AUTO


def test_forced_types_route_regardless_of_content() -> None:
    assert detect(PNG_MAGIC, "", InputType.SVG) is RenderPath.SVG
    assert detect(PNG_MAGIC, "", InputType.PDF) is RenderPath.PDF
    assert detect(PNG_MAGIC, "", InputType.OFFICE) is RenderPath.OFFICE
    assert detect(PNG_MAGIC, "", InputType.HTML) is RenderPath.HTML


def test_empty_registry_falls_through() -> None:
    assert detect_render_path(InputType.AUTO, b"x", "dot", PluginRegistry()).path is RenderPath.AUTO
