"""Host fact providers for pixfetch."""

from .models import Fact, FactKind, select_kinds
from .packages import PACKAGE_MANAGERS, probe_packages
from .process import ProcessTable, PsutilProcessTable, StaticProcessTable, find_terminal
from .provider import AndroidFactProvider, FactProvider, build_provider, collect_facts, format_uptime

__all__ = [
    "AndroidFactProvider",
    "Fact",
    "FactKind",
    "FactProvider",
    "PACKAGE_MANAGERS",
    "ProcessTable",
    "PsutilProcessTable",
    "StaticProcessTable",
    "build_provider",
    "collect_facts",
    "find_terminal",
    "format_uptime",
    "probe_packages",
    "select_kinds",
]
