from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from platformdirs import user_cache_dir, user_config_dir, user_data_dir

from .settings import Settings
from .transmit import Mode

APP_NAME = "termpix"
CONFIG_FILENAME = "config.toml"
PLUGINS_FILENAME = "plugins.toml"


@dataclass(slots=True)
class ProjectDirs:
    cache_dir: Path
    data_dir: Path
    config_dir: Path

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILENAME

    @property
    def plugins_file(self) -> Path:
        return self.config_dir / PLUGINS_FILENAME

    @property
    def browser_data_dir(self) -> Path:
        return self.data_dir / "chromium"


def project_dirs(settings: Settings | None = None) -> ProjectDirs:
    settings = settings or Settings()
    return ProjectDirs(
        cache_dir=settings.cache_dir or Path(user_cache_dir(APP_NAME)),
        data_dir=settings.data_dir or Path(user_data_dir(APP_NAME)),
        config_dir=settings.config_dir or Path(user_config_dir(APP_NAME)),
    )


@dataclass(slots=True)
class DisplayConfig:
    mode: Mode = Mode.PNG
    background: bool = False
    color: str = "FFFFFF"
    print_name: bool = False
    newline: bool = True


@dataclass(slots=True)
class CacheConfig:
    enabled: bool = True
    dir: Path | None = None


@dataclass(slots=True)
class OfficeConfig:
    binary: str = "soffice"


@dataclass(slots=True)
class RuntimeConfig:
    max_depth: int = 2
    log_file: Path | None = None


@dataclass(slots=True)
class AppConfig:
    display: DisplayConfig = field(default_factory=DisplayConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    office: OfficeConfig = field(default_factory=OfficeConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    data = raw.get(name)
    return data if isinstance(data, Mapping) else None


def _optional_path(value: object | None) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value)).expanduser()


def _build_display(data: Mapping[str, object] | None) -> DisplayConfig:
    if not data:
        return DisplayConfig()
    return DisplayConfig(
        mode=Mode(str(data.get("mode", "png")).lower()),
        background=bool(data.get("background", False)),
        color=str(data.get("color", "FFFFFF")),
        print_name=bool(data.get("print_name", False)),
        newline=bool(data.get("newline", True)),
    )


def _build_cache(data: Mapping[str, object] | None) -> CacheConfig:
    if not data:
        return CacheConfig()
    return CacheConfig(
        enabled=bool(data.get("enabled", True)),
        dir=_optional_path(data.get("dir")),
    )


def _build_office(data: Mapping[str, object] | None) -> OfficeConfig:
    if not data:
        return OfficeConfig()
    return OfficeConfig(binary=str(data.get("binary", "soffice")))


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    return RuntimeConfig(
        max_depth=max(0, int(data.get("max_depth", 2))),
        log_file=_optional_path(data.get("log_file")),
    )


def load_config(path: Path | None = None) -> AppConfig:
    raw = _read_toml(path) if path is not None else {}
    return AppConfig(
        display=_build_display(_section(raw, "display")),
        cache=_build_cache(_section(raw, "cache")),
        office=_build_office(_section(raw, "office")),
        runtime=_build_runtime(_section(raw, "runtime")),
    )


def dump_config(config: AppConfig) -> str:
    payload = {
        "display": {
            "mode": config.display.mode.value,
            "background": config.display.background,
            "color": config.display.color,
            "print_name": config.display.print_name,
            "newline": config.display.newline,
        },
        "cache": {
            "enabled": config.cache.enabled,
            "dir": str(config.cache.dir) if config.cache.dir else None,
        },
        "office": {"binary": config.office.binary},
        "runtime": {
            "max_depth": config.runtime.max_depth,
            "log_file": str(config.runtime.log_file) if config.runtime.log_file else None,
        },
    }
    return json.dumps(payload, indent=2)


__all__ = [
    "APP_NAME",
    "AppConfig",
    "CacheConfig",
    "DisplayConfig",
    "OfficeConfig",
    "ProjectDirs",
    "RuntimeConfig",
    "dump_config",
    "load_config",
    "project_dirs",
]
