"""Kitty graphics protocol framing.

Images are sent as base64 text split into ``CHUNK_SIZE`` pieces, each wrapped in
its own ``ESC _ G ... ESC \\`` control sequence. The first chunk carries the
control header; every chunk carries ``m=1`` while more data follows and ``m=0``
on the last one.
"""

from __future__ import annotations

import base64
import zlib
from enum import Enum
from io import BytesIO
from typing import BinaryIO, Iterator

from PIL import Image

CHUNK_SIZE = 4096
APC_START = b"\x1b_G"
APC_END = b"\x1b\\"
CLEAR_SEQUENCE = APC_START + b"a=d" + APC_END

PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA"}


class Mode(str, Enum):
    PNG = "png"
    ZLIB = "zlib"
    RAW = "raw"


def build_payload(image: Image.Image, mode: Mode) -> bytes:
    if mode is Mode.PNG:
        source = image if image.mode in PNG_MODES else image.convert("RGBA")
        buffer = BytesIO()
        source.save(buffer, format="PNG")
        return buffer.getvalue()
    raw = image.convert("RGBA").tobytes()
    if mode is Mode.ZLIB:
        return zlib.compress(raw)
    return raw


def build_header(mode: Mode, width: int, height: int) -> str:
    if mode is Mode.PNG:
        return "a=T,f=100"
    header = f"a=T,f=32,s={width},v={height}"
    if mode is Mode.ZLIB:
        header += ",o=z"
    return header


def iter_chunks(encoded: bytes, header: str, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Frame base64 ``encoded`` data as a sequence of control sequences."""
    total = len(encoded)
    for start in range(0, total, chunk_size):
        end = min(start + chunk_size, total)
        more = 1 if end < total else 0
        control = f"{header},m={more};" if start == 0 else f"m={more};"
        yield APC_START + control.encode("ascii") + encoded[start:end] + APC_END


def send_image(writer: BinaryIO, image: Image.Image, mode: Mode = Mode.PNG, *, dump: bool = False) -> None:
    """Write ``image`` to ``writer``.

    With ``dump`` the encoded payload is written as-is (for saving to a file);
    otherwise it is framed for the terminal.
    """
    payload = build_payload(image, mode)
    if dump:
        writer.write(payload)
        writer.flush()
        return

    encoded = base64.standard_b64encode(payload)
    header = build_header(mode, image.width, image.height)
    for chunk in iter_chunks(encoded, header):
        writer.write(chunk)
    writer.write(b"\n")
    writer.flush()


def clear_images(writer: BinaryIO) -> None:
    writer.write(CLEAR_SEQUENCE)
    writer.flush()


__all__ = [
    "CHUNK_SIZE",
    "CLEAR_SEQUENCE",
    "Mode",
    "build_payload",
    "build_header",
    "iter_chunks",
    "send_image",
    "clear_images",
]
