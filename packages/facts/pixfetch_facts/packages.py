"""Installed package count via the first package manager that answers."""

from __future__ import annotations

import logging
import subprocess
from typing import Callable, Sequence

_log = logging.getLogger("pixfetch.facts")

# Probe order matters: the first command exiting 0 wins.
PACKAGE_MANAGERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("pacman", ("pacman", "-Qq")),
    ("dpkg", ("dpkg-query", "-f", ".\n", "-W")),
    ("bonsai", ("bonsai", "list")),
    ("crux", ("pkginfo", "-i")),
    ("rpm", ("rpm", "-qa")),
    ("xbps", ("xbps-query", "-l")),
    ("apk", ("apk", "info")),
    ("guix", ("guix", "package", "--list-installed")),
    ("opkg", ("opkg", "list-installed")),
    ("kiss", ("kiss", "l")),
    ("cpt", ("cpt-list",)),
    ("pacman-g2", ("pacman-g2", "-Q")),
    ("lvu", ("lvu", "installed")),
    ("tce", ("tce-status", "-i")),
    ("pkg_info", ("pkg_info",)),
    ("pkgin", ("pkgin", "list")),
    ("gaze", ("gaze", "installed")),
    ("alps", ("alps", "showinstalled")),
    ("butch", ("butch", "list")),
    ("swupd", ("swupd", "bundle-list", "--quiet")),
    ("pisi", ("pisi", "li")),
    ("pacstall", ("pacstall", "-L")),
)

Runner = Callable[[Sequence[str]], "subprocess.CompletedProcess[str]"]


def run_command(argv: Sequence[str]) -> "subprocess.CompletedProcess[str]":
    return subprocess.run(
        list(argv),
        capture_output=True,
        text=True,
        errors="replace",
        check=False,
    )


def count_lines(stdout: str) -> int:
    return len(stdout.strip("\n").split("\n"))


def probe_packages(
    runner: Runner = run_command,
    managers: Sequence[tuple[str, Sequence[str]]] = PACKAGE_MANAGERS,
) -> str | None:
    for manager, argv in managers:
        try:
            result = runner(argv)
        except OSError:
            continue
        if result.returncode != 0:
            continue
        count = count_lines(result.stdout or "")
        _log.debug("package count from %s: %d", manager, count)
        return f"{count} ({manager})"
    return None
