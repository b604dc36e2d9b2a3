"""Process ancestry lookups for terminal detection."""

from __future__ import annotations

from typing import Mapping, Protocol

import psutil

ProcessEntry = tuple[str, int | None]

# Ancestors checked above an "electron" terminal for a code editor host.
_ELECTRON_LOOKAHEAD = 2


class ProcessTable(Protocol):
    def lookup(self, pid: int) -> ProcessEntry | None:
        """Return ``(name, parent_pid)`` or ``None`` if the pid is unknown."""


class PsutilProcessTable:
    def lookup(self, pid: int) -> ProcessEntry | None:
        try:
            proc = psutil.Process(pid)
            return proc.name(), proc.ppid()
        except (psutil.Error, OSError):
            return None


class StaticProcessTable:
    """In-memory table, handy for tests and replaying captured process trees."""

    def __init__(self, entries: Mapping[int, ProcessEntry]) -> None:
        self._entries = dict(entries)

    def lookup(self, pid: int) -> ProcessEntry | None:
        return self._entries.get(pid)


def _parent(table: ProcessTable, entry: ProcessEntry) -> ProcessEntry | None:
    ppid = entry[1]
    if ppid is None:
        return None
    return table.lookup(ppid)


def find_terminal(pid: int, table: ProcessTable) -> str | None:
    """Walk self -> shell -> terminal and return the terminal's process name.

    An ``electron`` terminal is reported as ``vscode`` when one of the next
    two ancestors has ``code`` in its name.
    """
    current = table.lookup(pid)
    if current is None:
        return None
    shell = _parent(table, current)
    if shell is None:
        return None
    terminal = _parent(table, shell)
    if terminal is None:
        return None

    name = terminal[0]
    if name == "electron":
        ancestor = terminal
        for _ in range(_ELECTRON_LOOKAHEAD):
            ancestor = _parent(table, ancestor)
            if ancestor is None:
                break
            if "code" in ancestor[0]:
                return "vscode"
    return name
