from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Sequence

from PIL import Image
from rich.console import Console
from rich.markup import escape

from .compositing import finalize_image
from .detection import RenderPath, detect_render_path, is_html_target, is_url
from .errors import DecodeError, OpenError, RenderError
from .geometry import calculate_dimensions, pdf_target_width
from .highlight import pretty_print
from .logging import BatchSummary, RunLogEntry, RunLogger
from .models import DataResult, ImageResult, InputType, LoadResult, RequestContext
from .office import OfficeConverter
from .plugins import EMPTY_REGISTRY, PluginDescriptor, PluginExecutor, PluginRegistry
from .renderers import RendererSet
from .transmit import Mode, send_image
from .utils import normalize_extension

DEFAULT_MAX_DEPTH = 2


def _is_regular_file(path: Path) -> bool:
    try:
        return path.is_file()
    except (OSError, ValueError):
        return False


def _identity(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()


class Resolver:
    """Decides how an input is rendered and drives the matching renderer."""

    def __init__(
        self,
        renderers: RendererSet,
        office: OfficeConverter,
        *,
        registry: PluginRegistry = EMPTY_REGISTRY,
        executor: PluginExecutor | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._renderers = renderers
        self._office = office
        self._registry = registry
        self._executor = executor or PluginExecutor()
        self._max_depth = max_depth

    @property
    def registry(self) -> PluginRegistry:
        return self._registry

    def resolve(self, ctx: RequestContext, data: bytes, extension: str = "") -> LoadResult:
        return self._resolve(ctx, data, normalize_extension(extension), 0, frozenset())

    def resolve_path(self, ctx: RequestContext, source: str | Path) -> LoadResult:
        return self._resolve_path(ctx, source, 0, frozenset())

    def _resolve_path(
        self, ctx: RequestContext, source: str | Path, depth: int, seen: frozenset[Path]
    ) -> LoadResult:
        path = Path(source)
        extension = normalize_extension(path)
        location = os.fsencode(source)
        if (
            ctx.input_type is not InputType.TEXT
            and self._registry.match(b"", extension) is None
            and is_html_target(ctx.input_type, extension, location)
        ):
            if not is_url(location) and not _is_regular_file(path):
                raise OpenError("Failed to open file")
            # the browser loads the page itself so relative resources resolve
            return ImageResult(self.render_html(ctx, location))

        try:
            data = path.read_bytes()
        except OSError as exc:
            raise OpenError("Failed to open file") from exc

        result = self._resolve(ctx, data, extension, depth, seen | {_identity(path)})
        if isinstance(result, DataResult) and result.path is None:
            result.path = path
        return result

    def _resolve(
        self,
        ctx: RequestContext,
        data: bytes,
        extension: str,
        depth: int,
        seen: frozenset[Path],
    ) -> LoadResult:
        detection = detect_render_path(ctx.input_type, data, extension, self._registry)
        route = detection.path
        if route is RenderPath.TEXT:
            return DataResult(data)
        if detection.plugin is not None:
            return ImageResult(self.render_plugin(ctx, data, detection.plugin))
        if route is RenderPath.IMAGE:
            return ImageResult(finalize_image(ctx, self._renderers.image.decode(data)))
        if route is RenderPath.SVG:
            return ImageResult(self.render_svg(ctx, data))
        if route is RenderPath.PDF:
            return ImageResult(self.render_pdf(ctx, data))
        if route is RenderPath.OFFICE:
            return ImageResult(self.render_office(ctx, data, extension))
        if route is RenderPath.HTML:
            return ImageResult(self.render_html(ctx, data))
        return self._resolve_auto(ctx, data, depth, seen)

    def _resolve_auto(
        self, ctx: RequestContext, data: bytes, depth: int, seen: frozenset[Path]
    ) -> LoadResult:
        if not data:
            raise DecodeError("Failed to decode input: empty input")
        try:
            image = self._renderers.image.decode(data)
        except DecodeError as exc:
            decode_error = exc
        else:
            return ImageResult(finalize_image(ctx, image))

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            raise decode_error from None

        candidate = text.strip()
        if candidate and "\n" not in candidate and "\r" not in candidate:
            path = Path(candidate)
            if _is_regular_file(path):
                if depth >= self._max_depth:
                    raise DecodeError(f"Too many nested path references while resolving {candidate}")
                if _identity(path) in seen:
                    raise DecodeError(f"{candidate} refers back to a file already being resolved")
                return self._resolve_path(ctx, path, depth + 1, seen)
        return DataResult(data)

    def render_svg(self, ctx: RequestContext, data: bytes) -> Image.Image:
        svg = self._renderers.svg
        intrinsic = svg.intrinsic_size(data)
        width, height = calculate_dimensions(intrinsic, ctx.resize_mode, ctx.term_size)
        if not (width and height):
            width, height = intrinsic
        return svg.rasterize(data, (width, height), ctx.background)

    def render_pdf(self, ctx: RequestContext, data: bytes) -> Image.Image:
        image = self._renderers.pdf.rasterize(data, pdf_target_width(ctx), ctx.page_indices)
        return finalize_image(ctx, image)

    def render_office(self, ctx: RequestContext, data: bytes, extension: str) -> Image.Image:
        pdf = self._office.convert_to_pdf(ctx.cache_mode, data, extension)
        return self.render_pdf(ctx, pdf)

    def render_html(self, ctx: RequestContext, data: bytes) -> Image.Image:
        png = self._renderers.html.screenshot(data)
        return finalize_image(ctx, self._renderers.image.decode(png))

    def render_plugin(self, ctx: RequestContext, data: bytes, plugin: PluginDescriptor) -> Image.Image:
        output = self._executor.run(data, plugin)
        # dispatch on the declared output type only, never back through plugin matching
        if plugin.output is InputType.SVG:
            return self.render_svg(ctx, output)
        if plugin.output is InputType.PDF:
            return self.render_pdf(ctx, output)
        if plugin.output is InputType.HTML:
            return self.render_html(ctx, output)
        try:
            image = self._renderers.image.decode(output)
        except DecodeError as exc:
            raise DecodeError(f"Failed to decode output of plugin {plugin.name!r} as image") from exc
        return finalize_image(ctx, image)


@dataclass(slots=True)
class DisplayOptions:
    mode: Mode = Mode.PNG
    print_name: bool = False
    language: str | None = None
    newline: bool = True
    output: Path | None = None
    overwrite: bool = False


class Viewer:
    """Resolves inputs one by one and writes them to the terminal or an output file."""

    def __init__(
        self,
        resolver: Resolver,
        *,
        stdout: BinaryIO,
        console: Console,
        options: DisplayOptions | None = None,
        logger: RunLogger | None = None,
    ) -> None:
        self._resolver = resolver
        self._stdout = stdout
        self._console = console
        self._options = options or DisplayOptions()
        self._logger = logger

    def show_data(self, ctx: RequestContext, data: bytes, *, name: str = "stdin") -> RunLogEntry:
        return self._process(name, len(data), lambda: self._resolver.resolve(ctx, data))

    def show_path(self, ctx: RequestContext, source: str) -> RunLogEntry:
        return self._process(source, _size_of(source), lambda: self._resolver.resolve_path(ctx, source))

    def show_batch(self, ctx: RequestContext, sources: Sequence[str]) -> BatchSummary:
        summary = BatchSummary()
        for source in sources:
            summary.record(self.show_path(ctx, source))
        return summary

    def _process(self, name: str, size_bytes: int, load: Callable[[], LoadResult]) -> RunLogEntry:
        if self._options.print_name:
            self._console.print(name, markup=False, highlight=False, soft_wrap=True)
        start = time.perf_counter()
        stage = "loading"
        try:
            result = load()
            stage = "rendering"
            self._emit(result)
        except RenderError as exc:
            entry = self._entry(name, "failure", None, exc.code, str(exc), start, size_bytes)
            self._console.print(
                f"[red]Error {stage}[/red] {escape(name)}: {escape(str(exc))}", highlight=False, soft_wrap=True
            )
        except OSError as exc:
            entry = self._entry(name, "failure", None, "IO_ERROR", str(exc), start, size_bytes)
            self._console.print(
                f"[red]Error {stage}[/red] {escape(name)}: {escape(str(exc))}", highlight=False, soft_wrap=True
            )
        else:
            kind = "image" if isinstance(result, ImageResult) else "text"
            entry = self._entry(name, "success", kind, None, None, start, size_bytes)
        if self._logger is not None:
            self._logger.append(entry)
        return entry

    def _entry(
        self,
        name: str,
        status: str,
        result: str | None,
        code: str | None,
        message: str | None,
        start: float,
        size_bytes: int,
    ) -> RunLogEntry:
        return RunLogEntry(
            source=name,
            status=status,
            result=result,
            error_code=code,
            message=message,
            elapsed_ms=(time.perf_counter() - start) * 1000,
            size_bytes=size_bytes,
        )

    def _emit(self, result: LoadResult) -> None:
        options = self._options
        if options.output is not None:
            self._dump(result, options.output)
            return
        if isinstance(result, ImageResult):
            send_image(self._stdout, result.image, options.mode)
        else:
            pretty_print(
                self._stdout,
                result.data,
                path=result.path,
                language=options.language,
                newline=options.newline,
            )

    def _dump(self, result: LoadResult, output: Path) -> None:
        flags = "wb" if self._options.overwrite else "xb"
        try:
            handle = output.open(flags)
        except FileExistsError as exc:
            raise OpenError(f"Output file already exists: {output} (use --overwrite)") from exc
        with handle:
            if isinstance(result, ImageResult):
                send_image(handle, result.image, self._options.mode, dump=True)
            else:
                handle.write(result.data)


def _size_of(source: str) -> int:
    try:
        return Path(source).stat().st_size
    except (OSError, ValueError):
        return 0


__all__ = [
    "Resolver",
    "Viewer",
    "DisplayOptions",
    "DEFAULT_MAX_DEPTH",
]
