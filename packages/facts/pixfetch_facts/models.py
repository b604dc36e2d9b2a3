"""Typed fact models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FactKind(Enum):
    """Report rows in display order. The value doubles as the printed label."""

    USER_AT_HOSTNAME = "UserAtHostname"
    OS = "OS"
    HOST = "Host"
    KERNEL = "Kernel"
    UPTIME = "Uptime"
    PACKAGES = "Packages"
    SHELL = "Shell"
    TERMINAL = "Terminal"
    CPU = "CPU"
    MEMORY = "Memory"
    SWAP = "Swap"
    BATTERY = "Battery"
    SEPARATOR = "Separator"
    COLORS1 = "Colors1"
    COLORS2 = "Colors2"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> "FactKind":
        key = text.strip().lower().replace("_", "").replace("-", "")
        if key == "seperator":
            key = "separator"
        for kind in cls:
            if kind.value.lower() == key or kind.name.lower().replace("_", "") == key:
                return kind
        choices = ", ".join(k.value for k in cls)
        raise ValueError(f"unknown info `{text}` (expected one of: {choices})")


@dataclass(frozen=True)
class Fact:
    kind: FactKind
    value: str | None


def select_kinds(
    whitelist: list[FactKind] | None = None,
    blacklist: list[FactKind] | None = None,
) -> list[FactKind]:
    """Apply the allow list, then the deny list. Deny wins when both name a kind."""
    kinds = list(FactKind)
    if whitelist is not None:
        kinds = [k for k in kinds if k in whitelist]
    if blacklist is not None:
        kinds = [k for k in kinds if k not in blacklist]
    return kinds
