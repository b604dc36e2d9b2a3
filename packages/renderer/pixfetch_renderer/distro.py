"""Distro name to (accent color, logo) resolution."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from importlib import resources

from .models import LogoSelection

EXACT = "="
CONTAINS = "~"

DEFAULT_COLOR = 3
DEFAULT_ASSET = "tux"


@dataclass(frozen=True)
class DistroRule:
    op: str
    pattern: str
    color: int
    asset: str

    def matches(self, os_name: str) -> bool:
        if self.op == EXACT:
            return os_name == self.pattern
        return self.pattern in os_name


# First match wins. Exact rules sit above the substring rules so a broad
# "contains" pattern can never shadow them.
DISTRO_RULES: tuple[DistroRule, ...] = (
    DistroRule(EXACT, "Arch Linux", 4, "arch"),
    DistroRule(EXACT, "EndeavourOS Linux", 4, "endeavour"),
    DistroRule(CONTAINS, "Android", 2, "android"),
    DistroRule(CONTAINS, "Debian", 1, "debian"),
    DistroRule(CONTAINS, "Ubuntu", 3, "ubuntu"),
    DistroRule(CONTAINS, "Fedora Linux", 4, "fedora"),
    DistroRule(CONTAINS, "Alpine Linux", 4, "alpine"),
)


@lru_cache(maxsize=None)
def load_logo(asset: str) -> bytes:
    return resources.files(__package__).joinpath("logos").joinpath(f"{asset}.png").read_bytes()


def resolve_rule(os_name: str | None, rules: tuple[DistroRule, ...] = DISTRO_RULES) -> tuple[int, str]:
    if os_name is not None:
        for rule in rules:
            if rule.matches(os_name):
                return rule.color, rule.asset
    return DEFAULT_COLOR, DEFAULT_ASSET


def resolve_distro(os_name: str | None) -> LogoSelection:
    color, asset = resolve_rule(os_name)
    return LogoSelection(accent_color=color, image_bytes=load_logo(asset), name=asset)
