"""User-defined converter plugins: descriptors, registry and the executor."""

from __future__ import annotations

import re
import shlex
import subprocess
import tempfile
import tomllib
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import PluginConfigError, PluginExecutionError
from .models import InputType
from .utils import atomic_write_bytes

IMAGE_OUTPUT_ALIASES = {"png", "jpg", "jpeg", "gif", "webp", "bmp", "tiff"}
PLUGIN_OUTPUT_TYPES = {InputType.IMAGE, InputType.SVG, InputType.PDF, InputType.HTML}

PLUGINS_TEMPLATE = """# termpix plugins configuration
#
# Each table declares an external command that converts a file into a format
# termpix can display (image, svg, pdf or html).
#
# Example: render Graphviz sources through `dot`
# [graphviz]
# extensions = ["dot", "gv"]
# output = "svg"
# command = "dot -Tsvg"
#
# Example: read from and write to temporary files
# [custom-binary]
# extensions = ["bin"]
# magic_bytes = ["CAFEBABE"]
# output = "image"
# command = "my-converter --in {} --out {out}"
# input_placeholder = "{}"    # optional: if omitted, input is piped to stdin
# output_placeholder = "{out}" # optional: if omitted, stdout is read
"""


class PluginDescriptor(BaseModel):
    """One entry of ``plugins.toml``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    extensions: frozenset[str] = frozenset()
    magic_bytes: tuple[str, ...] = ()
    output: InputType = InputType.IMAGE
    command: str = Field(validation_alias=AliasChoices("command", "path"))
    argv: tuple[str, ...] = ()
    input_placeholder: str | None = Field(
        default=None, validation_alias=AliasChoices("input_placeholder", "placeholder")
    )
    output_placeholder: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _split_command(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        payload = dict(data)
        command = payload.get("command", payload.get("path"))
        if isinstance(command, str):
            payload["argv"] = tuple(shlex.split(command))
        return payload

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(item).lower().lstrip(".") for item in value)
        return value

    @field_validator("output", mode="before")
    @classmethod
    def _normalize_output(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in IMAGE_OUTPUT_ALIASES:
                return InputType.IMAGE
            return lowered
        return value

    @field_validator("output")
    @classmethod
    def _check_output(cls, value: InputType) -> InputType:
        if value not in PLUGIN_OUTPUT_TYPES:
            raise ValueError(f"plugin output must be one of image, svg, pdf, html (got {value.value})")
        return value

    def magic_prefixes(self) -> list[bytes]:
        prefixes: list[bytes] = []
        for hex_str in self.magic_bytes:
            try:
                prefixes.append(bytes.fromhex(hex_str))
            except ValueError:
                continue
        return prefixes

    def matches(self, data: bytes, extension: str) -> bool:
        if any(prefix and data.startswith(prefix) for prefix in self.magic_prefixes()):
            return True
        return bool(extension) and extension in self.extensions


@dataclass(frozen=True, slots=True)
class PluginRegistry:
    """Plugins in registration order; the first match wins."""

    plugins: tuple[PluginDescriptor, ...] = ()

    def match(self, data: bytes, extension: str) -> PluginDescriptor | None:
        for plugin in self.plugins:
            if plugin.matches(data, extension):
                return plugin
        return None

    def __iter__(self) -> Iterator[PluginDescriptor]:
        return iter(self.plugins)

    def __len__(self) -> int:
        return len(self.plugins)


EMPTY_REGISTRY = PluginRegistry()


def parse_registry(raw: Mapping[str, object]) -> PluginRegistry:
    plugins: list[PluginDescriptor] = []
    for name, table in raw.items():
        if not isinstance(table, Mapping):
            raise PluginConfigError(f"Plugin {name!r} must be a table")
        try:
            plugins.append(PluginDescriptor.model_validate({**table, "name": name}))
        except ValidationError as exc:
            raise PluginConfigError(f"Invalid plugin {name!r}: {exc}") from exc
    return PluginRegistry(tuple(plugins))


def load_registry(path: Path) -> PluginRegistry:
    if not path.exists():
        return EMPTY_REGISTRY
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise PluginConfigError(f"Failed to read {path}: {exc}") from exc
    return parse_registry(raw)


@lru_cache(maxsize=None)
def get_registry(path: Path) -> PluginRegistry:
    """Load the registry at ``path`` once per process."""
    return load_registry(path)


def write_plugins_template(path: Path) -> bool:
    """Create a commented ``plugins.toml``; returns False when one already exists."""
    if path.exists():
        return False
    atomic_write_bytes(path, PLUGINS_TEMPLATE.encode("utf-8"))
    return True


Substitution = tuple[str, str]


def substitute_arguments(
    args: Sequence[str], substitutions: Sequence[Substitution]
) -> tuple[list[str], set[str]]:
    """Replace placeholder tokens inside ``args`` in a single pass, longest token first.

    Replacement text is never rescanned, so a token that happens to occur in
    another token's replacement is left alone. Returns the new arguments and
    the set of tokens found in the original arguments.
    """
    replacements = dict(substitutions)
    if not replacements:
        return list(args), set()
    ordered = sorted(replacements, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(token) for token in ordered))
    used: set[str] = set()

    def _replace(match: re.Match[str]) -> str:
        used.add(match.group(0))
        return replacements[match.group(0)]

    return [pattern.sub(_replace, arg) for arg in args], used


class PluginExecutor:
    """Runs a plugin command and returns the bytes it produced."""

    def run(self, data: bytes, plugin: PluginDescriptor) -> bytes:
        if not plugin.argv:
            raise PluginConfigError(f"Plugin {plugin.name!r} command is empty")
        for placeholder in (plugin.input_placeholder, plugin.output_placeholder):
            if placeholder == "":
                raise PluginConfigError(f"Plugin {plugin.name!r} has an empty placeholder")
        if plugin.input_placeholder is not None and plugin.input_placeholder == plugin.output_placeholder:
            raise PluginConfigError("Input placeholder equals output placeholder")

        program, *args = plugin.argv
        with tempfile.TemporaryDirectory(prefix="termpix-plugin-") as workdir:
            input_path: Path | None = None
            output_path: Path | None = None
            substitutions: list[Substitution] = []
            if plugin.input_placeholder is not None:
                input_path = Path(workdir) / "input_tmp"
                substitutions.append((plugin.input_placeholder, str(input_path)))
            if plugin.output_placeholder is not None:
                output_path = Path(workdir) / "output_tmp"
                substitutions.append((plugin.output_placeholder, str(output_path)))

            final_args, used = substitute_arguments(args, substitutions)
            if plugin.input_placeholder is not None and plugin.input_placeholder not in used:
                raise PluginConfigError("Input placeholder not found in arguments")
            if plugin.output_placeholder is not None and plugin.output_placeholder not in used:
                raise PluginConfigError("Output placeholder not found in arguments")

            if input_path is not None:
                input_path.write_bytes(data)
            completed = self._spawn([program, *final_args], None if input_path else data, output_path is None)

            if completed.returncode != 0:
                raise PluginExecutionError(f"Plugin exited with error code: {completed.returncode}")
            if output_path is not None:
                try:
                    output = output_path.read_bytes()
                except OSError as exc:
                    raise PluginExecutionError("Failed to read plugin output file") from exc
            else:
                output = completed.stdout or b""

        if not output:
            raise PluginExecutionError("Plugin returned no output")
        return output

    def _spawn(
        self, argv: list[str], stdin_data: bytes | None, capture_stdout: bool
    ) -> subprocess.CompletedProcess[bytes]:
        kwargs: dict[str, Any] = {
            "stdout": subprocess.PIPE if capture_stdout else None,
            "stderr": None,
            "check": False,
        }
        if stdin_data is not None:
            kwargs["input"] = stdin_data
        else:
            kwargs["stdin"] = subprocess.DEVNULL
        try:
            return subprocess.run(argv, **kwargs)
        except OSError as exc:
            raise PluginExecutionError(f"Failed to spawn plugin command: {argv[0]}") from exc


__all__ = [
    "PluginDescriptor",
    "PluginRegistry",
    "PluginExecutor",
    "EMPTY_REGISTRY",
    "PLUGINS_TEMPLATE",
    "parse_registry",
    "load_registry",
    "get_registry",
    "write_plugins_template",
    "substitute_arguments",
]
