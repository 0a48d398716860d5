from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class RunLogEntry:
    source: str
    status: str
    result: str | None
    error_code: str | None
    message: str | None
    elapsed_ms: float
    size_bytes: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RunLogger:
    """Appends one JSON line per processed input."""

    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file

    @property
    def log_file(self) -> Path:
        return self._log_file

    def append(self, entry: RunLogEntry) -> None:
        self._log_file.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._log_file.open("a", encoding="utf-8", errors="backslashreplace") as handle:
            handle.write(line + "\n")


@dataclass(slots=True)
class BatchSummary:
    total: int = 0
    successes: int = 0
    failures: int = 0
    errors: dict[str, int] = field(default_factory=dict)

    def record(self, entry: RunLogEntry) -> None:
        self.total += 1
        if entry.status == "success":
            self.successes += 1
            return
        self.failures += 1
        code = entry.error_code or "UNKNOWN"
        self.errors[code] = self.errors.get(code, 0) + 1

    @property
    def exit_code(self) -> int:
        return 1 if self.failures else 0


__all__ = ["RunLogEntry", "RunLogger", "BatchSummary"]
