from __future__ import annotations

import struct
import sys

from .settings import Settings

FALLBACK_SIZE = (800, 400)
CELL_WIDTH_ESTIMATE = 10
CELL_HEIGHT_ESTIMATE = 20


def _window_size(fd: int) -> tuple[int, int, int, int] | None:
    """``(rows, cols, xpixels, ypixels)`` for the terminal behind ``fd``."""
    if sys.platform == "win32":
        return None
    import fcntl
    import termios

    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
    except OSError:
        return None
    rows, cols, xpixels, ypixels = struct.unpack("HHHH", packed)
    return rows, cols, xpixels, ypixels


def _query_window() -> tuple[int, int, int, int] | None:
    for stream in (sys.stdout, sys.stderr, sys.stdin):
        try:
            fd = stream.fileno()
        except (AttributeError, OSError, ValueError):
            continue
        size = _window_size(fd)
        if size is not None and (size[0] or size[1]):
            return size
    return None


def get_term_size(settings: Settings | None = None) -> tuple[int, int]:
    """Terminal size in pixels, leaving two rows for the prompt and a blank line."""
    width, height = FALLBACK_SIZE
    size = _query_window()
    if size is not None:
        rows, cols, xpixels, ypixels = size
        if xpixels > 0:
            width = xpixels
        elif cols > 0:
            width = cols * CELL_WIDTH_ESTIMATE
        if ypixels > 0:
            height = ypixels
            if rows > 2:
                height = height * (rows - 2) // rows
        elif rows > 2:
            height = (rows - 2) * CELL_HEIGHT_ESTIMATE

    if settings is not None:
        width = settings.terminal_width or width
        height = settings.terminal_height or height
    return width, height


def stdin_has_data() -> bool:
    try:
        return not sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


__all__ = ["FALLBACK_SIZE", "get_term_size", "stdin_has_data"]
