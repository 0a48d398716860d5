from __future__ import annotations

import base64
from pathlib import Path

from ..detection import is_url
from ..errors import ConversionError, ParseError


def build_url(data: bytes) -> str:
    """Turn HTML input into something a browser can navigate to.

    URLs are kept, existing file paths become ``file://`` URLs and anything else
    is treated as markup and wrapped in a data URI.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError("HTML input is not valid UTF-8") from exc
    if is_url(data):
        return text.strip()
    try:
        candidate = Path(text.strip())
        if text.strip() and candidate.exists():
            return candidate.resolve().as_uri()
    except (OSError, ValueError):
        pass
    encoded = base64.standard_b64encode(data).decode("ascii")
    return f"data:text/html;base64,{encoded}"


class ChromiumScreenshotter:
    """Full-page PNG screenshots through a headless Chromium driven by Playwright."""

    def __init__(self, user_data_dir: Path | None = None) -> None:
        self._user_data_dir = user_data_dir

    def screenshot(self, data: bytes) -> bytes:
        url = build_url(data)
        try:
            from playwright.sync_api import Error as PlaywrightError
            from playwright.sync_api import sync_playwright
        except ModuleNotFoundError as exc:  # pragma: no cover - import guard
            raise ConversionError("playwright is required to render HTML") from exc

        try:
            with sync_playwright() as playwright:
                if self._user_data_dir is not None:
                    self._user_data_dir.mkdir(parents=True, exist_ok=True)
                    context = playwright.chromium.launch_persistent_context(
                        str(self._user_data_dir), headless=True
                    )
                else:
                    context = playwright.chromium.launch(headless=True).new_context()
                try:
                    page = context.new_page()
                    page.goto(url)
                    page.wait_for_selector("body", state="attached")
                    return page.screenshot(full_page=True)
                finally:
                    context.close()
        except PlaywrightError as exc:
            raise ConversionError(f"Headless Chromium failed: {exc}") from exc
