"""Two-column report composition: image rows on the left, facts on the right."""

from __future__ import annotations

from typing import Sequence

from pixfetch_facts import Fact, FactKind

from .models import ReportStyle

LABEL_WIDTH = 9
_PALETTES = (FactKind.COLORS1, FactKind.COLORS2)


def split_image_lines(text: str) -> list[str]:
    trimmed = text.strip("\n")
    if not trimmed:
        return []
    return trimmed.split("\n")


def fact_cell(fact: Fact, style: ReportStyle) -> str:
    if fact.kind == FactKind.USER_AT_HOSTNAME:
        return f"\x1b[1;3{(style.accent_color + 1) % 8}m{fact.value}\x1b[0m"
    if fact.kind in _PALETTES:
        return fact.value or ""
    if fact.kind == FactKind.SEPARATOR:
        return ""
    label = fact.kind.label + (":" if style.show_colons else "")
    return f"\x1b[1;3{style.accent_color}m{label:<{LABEL_WIDTH}}\x1b[0m {fact.value}"


def compose(image_lines: Sequence[str], facts: Sequence[Fact], style: ReportStyle) -> list[str]:
    gap = " " * style.gap
    blank = " " * style.max_width
    out = []
    for i in range(max(len(image_lines), len(facts))):
        image = image_lines[i] if i < len(image_lines) else blank
        info = fact_cell(facts[i], style) if i < len(facts) else ""
        out.append(f"{gap}{image}{gap}{info}")
    return out
