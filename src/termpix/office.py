"""Office documents are converted to PDF with LibreOffice and cached by content hash."""

from __future__ import annotations

import os
import subprocess
import tempfile
from pathlib import Path
from typing import Callable

from .errors import ConversionError
from .models import CacheCustom, CacheDisabled, CacheMode
from .utils import content_digest

StatusCallback = Callable[[str], None]


class OfficeConverter:
    def __init__(
        self,
        default_cache_dir: Path,
        *,
        binary: str = "soffice",
        status: StatusCallback | None = None,
    ) -> None:
        self._default_cache_dir = default_cache_dir
        self._binary = binary
        self._status = status or (lambda _: None)

    def cache_dir(self, cache_mode: CacheMode) -> Path | None:
        if isinstance(cache_mode, CacheDisabled):
            return None
        if isinstance(cache_mode, CacheCustom):
            return cache_mode.path
        return self._default_cache_dir

    def convert_to_pdf(self, cache_mode: CacheMode, data: bytes, extension: str) -> bytes:
        """Return PDF bytes for an office document, reusing a cached conversion when present."""
        digest = content_digest(data)
        target = self.cache_dir(cache_mode)
        if target is None:
            with tempfile.TemporaryDirectory(prefix="termpix-office-") as workdir:
                return self._convert(Path(workdir), digest, data, extension)

        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConversionError(f"Failed to create cache directory {target}") from exc

        cached = target / f"{digest}.pdf"
        if cached.exists():
            try:
                return cached.read_bytes()
            except OSError as exc:
                raise ConversionError(f"Failed to read cached PDF {cached}") from exc

        # convert next to the cache entry and move it in once complete
        with tempfile.TemporaryDirectory(prefix=".convert-", dir=target) as scratch:
            pdf = self._convert(Path(scratch), digest, data, extension)
            os.replace(Path(scratch) / cached.name, cached)
        return pdf

    def _convert(self, workdir: Path, digest: str, data: bytes, extension: str) -> bytes:
        source = workdir / f"{digest}.{extension or 'bin'}"
        source.write_bytes(data)
        self._status("Converting office document to PDF...")
        try:
            completed = subprocess.run(
                [self._binary, "--headless", "--convert-to", "pdf", str(source), "--outdir", str(workdir)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as exc:
            raise ConversionError(f"Failed to run {self._binary}") from exc

        pdf_path = workdir / f"{digest}.pdf"
        try:
            return pdf_path.read_bytes()
        except OSError as exc:
            raise ConversionError(
                f"{self._binary} did not produce a PDF (exit code {completed.returncode})"
            ) from exc


__all__ = ["OfficeConverter", "StatusCallback"]
