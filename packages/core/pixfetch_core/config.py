"""Settings schema, TOML file loading and flag merging."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

from pixfetch_facts import FactKind

_log = logging.getLogger("pixfetch.config")

DEFAULT_MAX_WIDTH = 30
DEFAULT_ALPHA_THRESHOLD = 50
DEFAULT_ALIASING = False
DEFAULT_SKIP_CACHE = False
DEFAULT_SHOW_COLONS = True
DEFAULT_GAP = 2


class ConfigError(ValueError):
    """Invalid flags or config file contents."""


@dataclass
class Settings:
    """Raw, partially specified settings from one source (flags or file)."""

    max_width: int | None = None
    alpha_threshold: int | None = None
    show_colons: bool | None = None
    skip_cache: bool | None = None
    aliasing: bool | None = None
    gap: int | None = None
    color_override: int | None = None
    image_override: str | None = None
    info_whitelist: list[FactKind] | None = None
    info_blacklist: list[FactKind] | None = None


@dataclass(frozen=True)
class RenderConfig:
    max_width: int = DEFAULT_MAX_WIDTH
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD
    aliasing: bool = DEFAULT_ALIASING
    gap: int = DEFAULT_GAP
    color_override: int | None = None
    show_colons: bool = DEFAULT_SHOW_COLONS
    skip_cache: bool = DEFAULT_SKIP_CACHE
    image_override: Path | None = None
    info_whitelist: tuple[FactKind, ...] | None = None
    info_blacklist: tuple[FactKind, ...] | None = None


_BOUNDS = {
    "max_width": (5, 50),
    "alpha_threshold": (0, 255),
    "gap": (0, 10),
    "color_override": (0, 7),
}
_INT_FIELDS = ("max_width", "alpha_threshold", "gap", "color_override")
_BOOL_FIELDS = ("show_colons", "skip_cache", "aliasing")
_KIND_FIELDS = ("info_whitelist", "info_blacklist")


def config_path(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    if env.get("XDG_CONFIG_HOME"):
        return Path(env["XDG_CONFIG_HOME"]) / "pixfetch" / "config.toml"
    if env.get("HOME"):
        return Path(env["HOME"]) / ".config" / "pixfetch" / "config.toml"
    raise OSError("Neither an XDG_CONFIG_HOME nor a HOME environment variable is set")


def default_config_text() -> str:
    return resources.files(__package__).joinpath("default_config.toml").read_text(encoding="utf-8")


def expand_path(path: str) -> Path:
    try:
        return Path(path).expanduser()
    except RuntimeError as exc:
        raise ConfigError(
            "Failed to determine HOME directory, please specify the full path in your config file."
        ) from exc


def parse_kinds(values: list[Any]) -> list[FactKind]:
    kinds: list[FactKind] = []
    for value in values:
        if not isinstance(value, str):
            raise ConfigError(f"info entries must be strings, got `{value!r}`")
        for part in value.split(","):
            if part.strip():
                try:
                    kinds.append(FactKind.parse(part))
                except ValueError as exc:
                    raise ConfigError(str(exc)) from exc
    return kinds


def settings_from_mapping(raw: Mapping[str, Any]) -> Settings:
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"unknown config key(s): {', '.join(unknown)}")

    out = Settings()
    for key, value in raw.items():
        if key in _INT_FIELDS:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"`{key}` must be an integer, got `{value!r}`")
        elif key in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ConfigError(f"`{key}` must be true or false, got `{value!r}`")
        elif key == "image_override":
            if not isinstance(value, str):
                raise ConfigError(f"`image_override` must be a string, got `{value!r}`")
        elif key in _KIND_FIELDS:
            if not isinstance(value, list):
                raise ConfigError(f"`{key}` must be a list, got `{value!r}`")
            value = parse_kinds(value)
        setattr(out, key, value)
    return out


def load_settings(path: Path | None = None) -> Settings:
    """Read the config file, writing the documented default when it is missing.

    A missing file is not an error. Any other I/O failure propagates as
    ``OSError``, bytes that are not UTF-8 as ``UnicodeDecodeError``;
    malformed contents raise ``ConfigError``.
    """
    path = path or config_path()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"\x1b[33mNo config file found, creating a default in `{path}`...\x1b[0m")
        save_default_config(path)
        return Settings()

    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    return settings_from_mapping(raw)


def save_default_config(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_config_text(), encoding="utf-8")
    _log.info("default config written to %s", path)
    return path


def merge_settings(flags: Settings, file: Settings) -> Settings:
    """Field by field: a flag that was given wins over the file value."""
    merged = Settings()
    for f in fields(Settings):
        flag_value = getattr(flags, f.name)
        setattr(merged, f.name, flag_value if flag_value is not None else getattr(file, f.name))
    return merged


def _check_bounds(settings: Settings) -> None:
    for name, (low, high) in _BOUNDS.items():
        value = getattr(settings, name)
        if value is not None and not low <= value <= high:
            raise ConfigError(f"The specified {name} `{value}` is not between {low} and {high}")


def validate(settings: Settings) -> RenderConfig:
    _check_bounds(settings)

    image_override = None
    if settings.image_override is not None:
        image_override = expand_path(settings.image_override)
        if not image_override.is_file():
            raise ConfigError(f"The specified image is not a file: `{settings.image_override}`")

    def _or(value, default):
        return default if value is None else value

    return RenderConfig(
        max_width=_or(settings.max_width, DEFAULT_MAX_WIDTH),
        alpha_threshold=_or(settings.alpha_threshold, DEFAULT_ALPHA_THRESHOLD),
        aliasing=_or(settings.aliasing, DEFAULT_ALIASING),
        gap=_or(settings.gap, DEFAULT_GAP),
        color_override=settings.color_override,
        show_colons=_or(settings.show_colons, DEFAULT_SHOW_COLONS),
        skip_cache=_or(settings.skip_cache, DEFAULT_SKIP_CACHE),
        image_override=image_override,
        info_whitelist=(tuple(settings.info_whitelist) if settings.info_whitelist is not None else None),
        info_blacklist=(tuple(settings.info_blacklist) if settings.info_blacklist is not None else None),
    )
