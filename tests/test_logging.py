import json
from pathlib import Path

from termpix.logging import BatchSummary, RunLogEntry, RunLogger


def entry(status: str, code: str | None = None) -> RunLogEntry:
    return RunLogEntry(
        source="a.png",
        status=status,
        result="image" if status == "success" else None,
        error_code=code,
        message=None,
        elapsed_ms=1.5,
        size_bytes=10,
    )


def test_run_logger_appends_json_lines(tmp_path: Path) -> None:
    logger = RunLogger(tmp_path / "logs" / "run.jsonl")
    logger.append(entry("success"))
    logger.append(entry("failure", "DECODE_FAILED"))
    lines = logger.log_file.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["status"] for line in lines] == ["success", "failure"]
    assert json.loads(lines[1])["error_code"] == "DECODE_FAILED"


def test_batch_summary_counts_failures() -> None:
    summary = BatchSummary()
    assert summary.exit_code == 0
    summary.record(entry("success"))
    summary.record(entry("failure", "OPEN_FAILED"))
    summary.record(entry("failure", "OPEN_FAILED"))
    summary.record(entry("failure"))
    assert (summary.total, summary.successes, summary.failures) == (4, 1, 3)
    assert summary.errors == {"OPEN_FAILED": 2, "UNKNOWN": 1}
    assert summary.exit_code == 1
