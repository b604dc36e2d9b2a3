"""Single-record render cache for the image pixel art."""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import tomllib
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Mapping

import tomli_w

from .config import RenderConfig

_log = logging.getLogger("pixfetch.cache")


@dataclass(frozen=True)
class CacheRecord:
    image_hash: int
    max_width: int
    alpha_threshold: int
    aliasing: bool
    image: str

    def matches(self, config: RenderConfig, image_hash: int) -> bool:
        return (
            self.image_hash == image_hash
            and self.max_width == config.max_width
            and self.alpha_threshold == config.alpha_threshold
            and self.aliasing == config.aliasing
        )


def image_fingerprint(image_bytes: bytes) -> int:
    """64-bit fingerprint of the raw bytes, as a signed integer (TOML ints are i64)."""
    digest = hashlib.blake2b(image_bytes, digest_size=8).digest()
    return int.from_bytes(digest, "little", signed=True)


def cache_path(env: Mapping[str, str] | None = None) -> Path | None:
    env = os.environ if env is None else env
    if env.get("XDG_CACHE_HOME"):
        return Path(env["XDG_CACHE_HOME"]) / "pixfetch" / "cache.toml"
    if env.get("HOME"):
        return Path(env["HOME"]) / ".cache" / "pixfetch" / "cache.toml"
    return None


def _parse_record(text: str) -> CacheRecord | None:
    raw = tomllib.loads(text)
    try:
        record = CacheRecord(
            image_hash=raw["image_hash"],
            max_width=raw["max_width"],
            alpha_threshold=raw["alpha_threshold"],
            aliasing=raw["aliasing"],
            image=raw["image"],
        )
    except KeyError:
        return None
    if not isinstance(record.image, str):
        return None
    return record


class RenderCache:
    """Memoizes the rendered image text keyed by image bytes and render parameters.

    Holds at most one record; storing a new one replaces it. Every I/O or
    parse failure degrades to a miss (lookup) or a skipped write (store).
    """

    def __init__(self, path: Path | None = None, env: Mapping[str, str] | None = None) -> None:
        self.path = path if path is not None else cache_path(env)

    def lookup(self, config: RenderConfig, image_bytes: bytes) -> str | None:
        if config.skip_cache or self.path is None:
            return None
        image_hash = image_fingerprint(image_bytes)
        try:
            record = _parse_record(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
            _log.debug("cache miss, unreadable record: %s", exc)
            return None
        if record is None or not record.matches(config, image_hash):
            _log.debug("cache miss, stale record at %s", self.path)
            return None
        _log.debug("cache hit at %s", self.path)
        return record.image

    def store(self, config: RenderConfig, image_bytes: bytes, rendered: str) -> None:
        if config.skip_cache or self.path is None:
            return
        record = CacheRecord(
            image_hash=image_fingerprint(image_bytes),
            max_width=config.max_width,
            alpha_threshold=config.alpha_threshold,
            aliasing=config.aliasing,
            image=rendered,
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".cache-", suffix=".toml")
            try:
                with os.fdopen(fd, "wb") as fh:
                    tomli_w.dump(asdict(record), fh)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            _log.debug("cache write skipped: %s", exc)
