import json
from pathlib import Path

import pytest
import typer
from PIL import Image
from typer.testing import CliRunner

from conftest import make_pdf
from termpix.cli import app, resize_mode_from_flags
from termpix.models import ClipTerminal, FitHeight, FitTerminal, FitWidth, Manual, Original

runner = CliRunner()


def test_resize_mode_from_flags() -> None:
    assert resize_mode_from_flags() == ClipTerminal()
    assert resize_mode_from_flags(width=10) == Manual(width=10)
    assert resize_mode_from_flags(width=10, height=20) == Manual(width=10, height=20)
    assert resize_mode_from_flags(fullwidth=True) == FitWidth()
    assert resize_mode_from_flags(fullheight=True) == FitHeight()
    assert resize_mode_from_flags(resize=True) == FitTerminal()
    assert resize_mode_from_flags(noresize=True) == Original()


def test_resize_flags_are_mutually_exclusive() -> None:
    with pytest.raises(typer.BadParameter):
        resize_mode_from_flags(fullwidth=True, noresize=True)


def test_show_file(isolated_env: Path, png_file: Path) -> None:
    result = runner.invoke(app, ["show", str(png_file)])
    assert result.exit_code == 0, result.output
    assert "\x1b_Ga=T,f=100,m=0;" in result.output


def test_show_stdin(isolated_env: Path, png_bytes: bytes) -> None:
    result = runner.invoke(app, ["show", "--mode", "raw"], input=png_bytes)
    assert result.exit_code == 0, result.output
    assert "\x1b_Ga=T,f=32,s=10,v=10,m=0;" in result.output


def test_tty_flag_ignores_stdin(isolated_env: Path, png_bytes: bytes) -> None:
    result = runner.invoke(app, ["show", "-t"], input=png_bytes)
    assert result.exit_code == 1
    assert "No input files provided" in result.output


def test_no_input(isolated_env: Path) -> None:
    result = runner.invoke(app, ["show"])
    assert result.exit_code == 1
    assert "Error: No input files provided and no data piped to stdin." in result.output


def test_pages_require_a_single_file(isolated_env: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["show", "--pages", "1", "a.pdf", "b.pdf"])
    assert result.exit_code == 1
    assert "Cannot specify multiple files with --pages" in result.output


def test_invalid_page_range(isolated_env: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["show", "--pages", "0", "a.pdf"])
    assert result.exit_code == 1
    assert "Invalid page range" in result.output


def test_conflicting_resize_flags(isolated_env: Path, png_file: Path) -> None:
    result = runner.invoke(app, ["show", "-f", "-F", str(png_file)])
    assert result.exit_code == 2


def test_invalid_color(isolated_env: Path, png_file: Path) -> None:
    result = runner.invoke(app, ["show", "-b", "-C", "nothex", str(png_file)])
    assert result.exit_code == 1
    assert "Invalid color format" in result.output


def test_batch_reports_failures_and_continues(isolated_env: Path, tmp_path: Path, png_file: Path) -> None:
    missing = tmp_path / "missing.png"
    log_file = tmp_path / "run.jsonl"
    result = runner.invoke(
        app, ["show", "--printname", "--log-file", str(log_file), str(missing), str(png_file)]
    )
    assert result.exit_code == 1
    assert "Error loading" in result.output
    assert "\x1b_Ga=T,f=100" in result.output
    statuses = [json.loads(line)["status"] for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert statuses == ["failure", "success"]


def test_directory_arguments_expand(isolated_env: Path, tmp_path: Path, png_bytes: bytes) -> None:
    folder = tmp_path / "pics"
    folder.mkdir()
    (folder / "a.png").write_bytes(png_bytes)
    (folder / "b.png").write_bytes(png_bytes)
    result = runner.invoke(app, ["show", str(folder)])
    assert result.exit_code == 0, result.output
    assert result.output.count("\x1b_Ga=T,f=100") == 2


def render_pdf_height(tmp_path: Path, *flags: str) -> int:
    pdf = tmp_path / "doc.pdf"
    pdf.write_bytes(make_pdf(page_count=3, size=(200, 100)))
    output = tmp_path / "doc.png"
    result = runner.invoke(app, ["show", "-w", "100", "--overwrite", "-o", str(output), *flags, str(pdf)])
    assert result.exit_code == 0, result.output
    with Image.open(output) as image:
        assert image.width == 100
        return image.height


def test_pdf_first_page_by_default(isolated_env: Path, tmp_path: Path) -> None:
    pytest.importorskip("pypdfium2")
    assert render_pdf_height(tmp_path) == pytest.approx(50, abs=2)


def test_pdf_all_pages(isolated_env: Path, tmp_path: Path) -> None:
    pytest.importorskip("pypdfium2")
    assert render_pdf_height(tmp_path, "--all") == pytest.approx(150, abs=4)


def test_pdf_page_selection(isolated_env: Path, tmp_path: Path) -> None:
    pytest.importorskip("pypdfium2")
    assert render_pdf_height(tmp_path, "--pages", "2-3") == pytest.approx(100, abs=3)


def test_pages_conflict_with_other_input_types(isolated_env: Path, png_file: Path) -> None:
    result = runner.invoke(app, ["show", "--pages", "1", "-i", "image", str(png_file)])
    assert result.exit_code == 2


def test_text_is_highlighted(isolated_env: Path, tmp_path: Path) -> None:
    source = tmp_path / "script.py"
    source.write_text("import os\nprint(os.sep)\n", encoding="utf-8")
    result = runner.invoke(app, ["show", str(source)])
    assert result.exit_code == 0, result.output
    assert "print" in result.output
    assert "\x1b[" in result.output


def test_clear(isolated_env: Path) -> None:
    result = runner.invoke(app, ["clear"])
    assert result.exit_code == 0
    assert result.output == "\x1b_Ga=d\x1b\\"


def test_plugins_creates_template(isolated_env: Path) -> None:
    result = runner.invoke(app, ["plugins"])
    assert result.exit_code == 0, result.output
    path = isolated_env / "config" / "plugins.toml"
    assert path.exists()
    assert str(path) in result.output


def test_config_reports_effective_settings(isolated_env: Path, tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text('[display]\nmode = "zlib"\n\n[runtime]\nmax_depth = 4\n', encoding="utf-8")
    result = runner.invoke(app, ["config", "--config", str(config)])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["display"]["mode"] == "zlib"
    assert payload["runtime"]["max_depth"] == 4
    assert payload["office"]["binary"] == "soffice"


def test_invalid_config_file(isolated_env: Path, tmp_path: Path, png_file: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text('[display]\nmode = "sixel"\n', encoding="utf-8")
    result = runner.invoke(app, ["show", "--config", str(config), str(png_file)])
    assert result.exit_code == 2
