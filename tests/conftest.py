from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from termpix.plugins import get_registry
from termpix.renderers import get_renderers
from termpix.settings import get_settings


def make_png(size: tuple[int, int] = (10, 10), color: tuple[int, ...] = (255, 0, 0, 255)) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_pdf(page_count: int = 1, size: tuple[int, int] = (200, 100)) -> bytes:
    pages = [Image.new("RGB", size, (255, 255, 255)) for _ in range(page_count)]
    buffer = BytesIO()
    pages[0].save(buffer, format="PDF", save_all=True, append_images=pages[1:])
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_file(tmp_path: Path, png_bytes: bytes) -> Path:
    path = tmp_path / "red.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every termpix directory into ``tmp_path`` and pin the terminal size."""
    home = tmp_path / "termpix-home"
    monkeypatch.setenv("TERMPIX_CONFIG_DIR", str(home / "config"))
    monkeypatch.setenv("TERMPIX_CACHE_DIR", str(home / "cache"))
    monkeypatch.setenv("TERMPIX_DATA_DIR", str(home / "data"))
    monkeypatch.setenv("TERMPIX_TERMINAL_WIDTH", "800")
    monkeypatch.setenv("TERMPIX_TERMINAL_HEIGHT", "400")
    get_settings.cache_clear()
    get_registry.cache_clear()
    get_renderers.cache_clear()
    yield home
    get_settings.cache_clear()
    get_registry.cache_clear()
    get_renderers.cache_clear()
