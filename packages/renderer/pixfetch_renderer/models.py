"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LogoSelection:
    accent_color: int
    image_bytes: bytes
    name: str


@dataclass(frozen=True)
class ReportStyle:
    accent_color: int
    max_width: int
    gap: int = 2
    show_colons: bool = True
