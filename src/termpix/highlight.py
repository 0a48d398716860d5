from __future__ import annotations

from io import StringIO
from pathlib import Path
from typing import BinaryIO

from rich.console import Console
from rich.syntax import Syntax

DEFAULT_THEME = "monokai"


def highlight_text(
    data: bytes,
    *,
    path: Path | None = None,
    language: str | None = None,
    theme: str = DEFAULT_THEME,
) -> str:
    """Return ``data`` as ANSI-coloured text; the lexer is guessed when no language is given."""
    code = data.decode("utf-8", errors="replace")
    lexer = language or Syntax.guess_lexer(str(path) if path else "", code=code)
    syntax = Syntax(code, lexer, theme=theme)
    buffer = StringIO()
    console = Console(file=buffer, force_terminal=True, color_system="truecolor", soft_wrap=True)
    console.print(syntax.highlight(code), end="")
    return buffer.getvalue()


def pretty_print(
    writer: BinaryIO,
    data: bytes,
    *,
    path: Path | None = None,
    language: str | None = None,
    newline: bool = True,
) -> None:
    output = highlight_text(data, path=path, language=language)
    if newline and not output.endswith("\n"):
        output += "\n"
    elif not newline and output.endswith("\n") and not data.endswith(b"\n"):
        output = output[:-1]
    writer.write(output.encode("utf-8"))
    writer.flush()


__all__ = ["highlight_text", "pretty_print"]
