"""Renderer package for pixfetch logos and report composition."""

from .compositor import compose, fact_cell, split_image_lines
from .distro import DISTRO_RULES, DistroRule, load_logo, resolve_distro, resolve_rule
from .halfblock import RenderError, render_image
from .models import LogoSelection, ReportStyle

__all__ = [
    "DISTRO_RULES",
    "DistroRule",
    "LogoSelection",
    "RenderError",
    "ReportStyle",
    "compose",
    "fact_cell",
    "load_logo",
    "render_image",
    "resolve_distro",
    "resolve_rule",
    "split_image_lines",
]
