from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..compositing import parse_color
from ..config import AppConfig, ProjectDirs, dump_config, load_config, project_dirs
from ..core import DisplayOptions, Resolver, Viewer
from ..errors import ColorFormatError, PageRangeError, PluginConfigError
from ..logging import BatchSummary, RunLogger
from ..models import (
    CacheCustom,
    CacheDefault,
    CacheDisabled,
    CacheMode,
    ClipTerminal,
    FitHeight,
    FitTerminal,
    FitWidth,
    InputType,
    Manual,
    Original,
    RequestContext,
    ResizeMode,
)
from ..office import OfficeConverter
from ..plugins import EMPTY_REGISTRY, PluginRegistry, get_registry, write_plugins_template
from ..renderers import get_renderers
from ..settings import get_settings
from ..terminal import get_term_size, stdin_has_data
from ..transmit import Mode, clear_images
from ..utils import iter_files, parse_pages

console = Console(stderr=True)

app = typer.Typer(help="Display images, documents and web pages in the terminal")


def resize_mode_from_flags(
    *,
    width: int | None = None,
    height: int | None = None,
    fullwidth: bool = False,
    fullheight: bool = False,
    resize: bool = False,
    noresize: bool = False,
) -> ResizeMode:
    """Map the mutually exclusive sizing flags onto a resize mode."""
    chosen: list[ResizeMode] = []
    if width is not None or height is not None:
        chosen.append(Manual(width=width, height=height))
    if fullwidth:
        chosen.append(FitWidth())
    if fullheight:
        chosen.append(FitHeight())
    if resize:
        chosen.append(FitTerminal())
    if noresize:
        chosen.append(Original())
    if len(chosen) > 1:
        raise typer.BadParameter(
            "--width/--height, --fullwidth, --fullheight, --resize and --noresize are mutually exclusive"
        )
    return chosen[0] if chosen else ClipTerminal()


def _load_config(path: Path | None, dirs: ProjectDirs) -> AppConfig:
    try:
        return load_config(path or dirs.config_file)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Invalid configuration[/red]: {exc}")
        raise typer.Exit(2) from exc


def _load_registry(path: Path) -> PluginRegistry:
    try:
        return get_registry(path)
    except PluginConfigError as exc:
        console.print(f"[yellow]Ignoring plugins[/yellow]: {exc}")
        return EMPTY_REGISTRY


def _cache_mode(cfg: AppConfig, no_cache: bool, cache_dir: Path | None) -> CacheMode:
    if no_cache:
        return CacheDisabled()
    if cache_dir is not None:
        return CacheCustom(cache_dir)
    if not cfg.cache.enabled:
        return CacheDisabled()
    if cfg.cache.dir is not None:
        return CacheCustom(cfg.cache.dir)
    return CacheDefault()


def _fail(message: str) -> typer.Exit:
    console.print(message, markup=False, highlight=False, soft_wrap=True)
    return typer.Exit(1)


@app.command()
def show(
    files: list[str] | None = typer.Argument(None, help="Files, directories or URLs to display"),
    width: int | None = typer.Option(None, "-w", "--width", min=1, help="Width in pixels"),
    height: int | None = typer.Option(None, "-H", "--height", min=1, help="Height in pixels"),
    fullwidth: bool = typer.Option(False, "-f", "--fullwidth", help="Fill the terminal width"),
    fullheight: bool = typer.Option(False, "-F", "--fullheight", help="Fill the terminal height"),
    resize: bool = typer.Option(False, "-r", "--resize", help="Fit the terminal, scaling up if needed"),
    noresize: bool = typer.Option(False, "-n", "--noresize", help="Keep the original size"),
    background: bool = typer.Option(False, "-b", "--background", help="Composite over a solid color"),
    color: str | None = typer.Option(None, "-C", "--color", help="Background color as RRGGBB"),
    mode: Mode | None = typer.Option(None, "-m", "--mode", help="Transmission mode"),
    input_type: InputType = typer.Option(InputType.AUTO, "-i", "--input", help="Force the input type"),
    pages: str | None = typer.Option(None, "-P", "--pages", help="PDF pages, e.g. 1-3,5"),
    all_pages: bool = typer.Option(False, "-a", "--all", help="Render every PDF page"),
    language: str | None = typer.Option(None, "-l", "--language", help="Syntax highlighting language"),
    no_newline: bool = typer.Option(False, "--no-newline", help="Do not add a trailing newline to text"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Do not cache office conversions"),
    cache_dir: Path | None = typer.Option(None, "--cache-dir", help="Office conversion cache directory"),
    output: Path | None = typer.Option(None, "-o", "--output", help="Write the encoded output to a file"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace an existing output file"),
    printname: bool = typer.Option(False, "-p", "--printname", help="Print each input name to stderr"),
    tty: bool = typer.Option(False, "-t", "--tty", help="Ignore stdin"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Append a JSON line per input"),
) -> None:
    settings = get_settings()
    dirs = project_dirs(settings)
    cfg = _load_config(config, dirs)
    sources = list(files or [])

    resize_mode = resize_mode_from_flags(
        width=width,
        height=height,
        fullwidth=fullwidth,
        fullheight=fullheight,
        resize=resize,
        noresize=noresize,
    )

    page_indices: tuple[int, ...] | None = (0,)
    if pages is not None:
        if all_pages:
            raise typer.BadParameter("--pages and --all cannot be combined")
        if input_type not in (InputType.AUTO, InputType.PDF):
            raise typer.BadParameter(f"--pages only applies to PDF input, not --input {input_type.value}")
        try:
            page_indices = parse_pages(pages)
        except PageRangeError as exc:
            raise _fail(f"Error: Invalid page range: {exc}") from exc
        input_type = InputType.PDF
    elif all_pages:
        page_indices = None

    bg = None
    if background or cfg.display.background:
        try:
            bg = parse_color(color or cfg.display.color)
        except ColorFormatError as exc:
            raise _fail(f"Error: {exc}") from exc

    ctx = RequestContext(
        input_type=input_type,
        resize_mode=resize_mode,
        term_size=get_term_size(settings),
        page_indices=page_indices,
        cache_mode=_cache_mode(cfg, no_cache, cache_dir),
        background=bg,
    )

    office = OfficeConverter(
        dirs.cache_dir,
        binary=cfg.office.binary,
        status=lambda message: console.print(message, style="dim", markup=False),
    )
    resolver = Resolver(
        get_renderers(dirs.browser_data_dir),
        office,
        registry=_load_registry(dirs.plugins_file),
        max_depth=cfg.runtime.max_depth,
    )
    log_path = log_file or cfg.runtime.log_file
    viewer = Viewer(
        resolver,
        stdout=sys.stdout.buffer,
        console=console,
        options=DisplayOptions(
            mode=mode or cfg.display.mode,
            print_name=printname or cfg.display.print_name,
            language=language,
            newline=cfg.display.newline and not no_newline,
            output=output,
            overwrite=overwrite,
        ),
        logger=RunLogger(log_path) if log_path else None,
    )

    stdin_data = b""
    if not tty and stdin_has_data():
        stdin_data = sys.stdin.buffer.read()
    if stdin_data:
        entry = viewer.show_data(ctx, stdin_data)
        summary = BatchSummary()
        summary.record(entry)
        raise typer.Exit(summary.exit_code)

    if not sources:
        raise _fail("Error: No input files provided and no data piped to stdin.")
    if pages is not None and len(sources) > 1:
        raise _fail("Error: Cannot specify multiple files with --pages")

    expanded = _expand_sources(sources)
    if output is not None and len(expanded) > 1:
        raise _fail("Error: --output accepts a single input")

    summary = viewer.show_batch(ctx, expanded)
    if summary.total > 1 and summary.failures:
        _print_summary(summary)
    raise typer.Exit(summary.exit_code)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://", "file://"))


def _expand_sources(sources: list[str]) -> list[str]:
    """Expand directories to their files, passing URLs through in argument order."""
    result: list[str] = []
    for source in sources:
        if _is_url(source):
            result.append(source)
        else:
            result.extend(str(path) for path in iter_files([Path(source)]))
    return result


def _print_summary(summary: BatchSummary) -> None:
    table = Table(title="Failures")
    table.add_column("Error code")
    table.add_column("Count", justify="right")
    for code, count in sorted(summary.errors.items()):
        table.add_row(code, str(count))
    console.print(table)
    console.print(f"Displayed {summary.successes} of {summary.total} inputs.")


@app.command()
def clear() -> None:
    """Delete every image shown in the terminal."""
    clear_images(sys.stdout.buffer)


@app.command()
def plugins() -> None:
    """Create the plugin configuration template if missing and print its path."""
    path = project_dirs(get_settings()).plugins_file
    if write_plugins_template(path):
        console.print(f"Created default plugin config at {path}", markup=False, highlight=False)
    typer.echo(str(path))


@app.command(name="config")
def show_config(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Print the effective configuration as JSON."""
    cfg = _load_config(config, project_dirs(get_settings()))
    typer.echo(dump_config(cfg))


if __name__ == "__main__":
    app()
