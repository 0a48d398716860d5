import os
import stat
import sys
from pathlib import Path

import pytest

from termpix.errors import ConversionError
from termpix.models import CacheCustom, CacheDefault, CacheDisabled
from termpix.office import OfficeConverter
from termpix.utils import content_digest

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="fake soffice relies on a shebang script")

FAKE_SOFFICE = """#!{python}
import sys
from pathlib import Path

args = sys.argv[1:]
with open({counter!r}, "a") as handle:
    handle.write(" ".join(args[:3]) + "\\n")
source = Path(args[3])
outdir = Path(args[args.index("--outdir") + 1])
if {produce!r}:
    (outdir / (source.stem + ".pdf")).write_bytes(b"%PDF-fake " + source.read_bytes())
sys.exit({exit_code})
"""


def fake_soffice(tmp_path: Path, *, produce: bool = True, exit_code: int = 0) -> tuple[Path, Path]:
    script = tmp_path / "fake-soffice"
    counter = tmp_path / "invocations.log"
    script.write_text(
        FAKE_SOFFICE.format(python=sys.executable, counter=str(counter), produce=produce, exit_code=exit_code),
        encoding="utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return script, counter


def invocations(counter: Path) -> list[str]:
    if not counter.exists():
        return []
    return counter.read_text(encoding="utf-8").splitlines()


def test_conversion_is_cached_by_content(tmp_path: Path) -> None:
    script, counter = fake_soffice(tmp_path)
    messages: list[str] = []
    cache = tmp_path / "cache"
    converter = OfficeConverter(cache, binary=str(script), status=messages.append)

    first = converter.convert_to_pdf(CacheDefault(), b"report", "docx")
    second = converter.convert_to_pdf(CacheDefault(), b"report", "docx")

    assert first == second == b"%PDF-fake report"
    assert invocations(counter) == ["--headless --convert-to pdf"]
    assert messages == ["Converting office document to PDF..."]
    assert sorted(os.listdir(cache)) == [f"{content_digest(b'report')}.pdf"]


def test_different_content_converts_again(tmp_path: Path) -> None:
    script, counter = fake_soffice(tmp_path)
    converter = OfficeConverter(tmp_path / "cache", binary=str(script))
    converter.convert_to_pdf(CacheDefault(), b"one", "xlsx")
    converter.convert_to_pdf(CacheDefault(), b"two", "xlsx")
    assert len(invocations(counter)) == 2


def test_custom_cache_directory(tmp_path: Path) -> None:
    script, _ = fake_soffice(tmp_path)
    custom = tmp_path / "custom"
    converter = OfficeConverter(tmp_path / "default", binary=str(script))
    converter.convert_to_pdf(CacheCustom(custom), b"slides", "pptx")
    assert (custom / f"{content_digest(b'slides')}.pdf").exists()
    assert not (tmp_path / "default").exists()


def test_disabled_cache_converts_every_time(tmp_path: Path) -> None:
    script, counter = fake_soffice(tmp_path)
    cache = tmp_path / "cache"
    converter = OfficeConverter(cache, binary=str(script))
    assert converter.cache_dir(CacheDisabled()) is None
    converter.convert_to_pdf(CacheDisabled(), b"doc", "doc")
    converter.convert_to_pdf(CacheDisabled(), b"doc", "doc")
    assert len(invocations(counter)) == 2
    assert not cache.exists()


def test_missing_output_is_a_conversion_error(tmp_path: Path) -> None:
    script, _ = fake_soffice(tmp_path, produce=False, exit_code=1)
    converter = OfficeConverter(tmp_path / "cache", binary=str(script))
    with pytest.raises(ConversionError, match="exit code 1"):
        converter.convert_to_pdf(CacheDefault(), b"doc", "docx")
    assert os.listdir(tmp_path / "cache") == []


def test_missing_binary_is_a_conversion_error(tmp_path: Path) -> None:
    converter = OfficeConverter(tmp_path / "cache", binary=str(tmp_path / "no-soffice"))
    with pytest.raises(ConversionError):
        converter.convert_to_pdf(CacheDisabled(), b"doc", "docx")
