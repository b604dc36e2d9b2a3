"""Host fact providers with silent per-fact fallbacks."""

from __future__ import annotations

import json
import logging
import os
import platform
import socket
import subprocess
import sys
import time
from pathlib import Path
from typing import Callable, Mapping

import psutil

from .models import Fact, FactKind
from .packages import Runner, probe_packages, run_command
from .process import ProcessTable, PsutilProcessTable, find_terminal

_log = logging.getLogger("pixfetch.facts")

GIB = 1024**3

COLORS1 = "".join(f"\x1b[4{c}m   " for c in range(8)) + "\x1b[0m"
COLORS2 = "".join(f"\x1b[48;5;{c}m   " for c in range(8, 16)) + "\x1b[0m"

# Words vendors leave in DMI fields when they never filled them in.
HOST_BLACKLIST = frozenset(
    {
        "To",
        "to",
        "Be",
        "be",
        "Filled",
        "filled",
        "By",
        "by",
        "O.E.M.",
        "OEM",
        "Not",
        "Applicable",
        "Specified",
        "System",
        "Product",
        "Name",
        "Version",
        "Undefined",
        "Default",
        "string",
        "INVALID",
        "os",
        "Type1ProductConfigId",
    }
)

HOST_FILES = (
    "sys/devices/virtual/dmi/id/product_name",
    "sys/devices/virtual/dmi/id/product_version",
    "sys/firmware/devicetree/base/model",
)

_RESOLVE_ERRORS = (OSError, psutil.Error, subprocess.SubprocessError, ValueError, KeyError)


def format_uptime(seconds: float) -> str:
    total_minutes = int(seconds) // 60
    days, rem = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rem, 60)
    out = ""
    if days > 0:
        out += f"{days}d "
    if hours > 0:
        out += f"{hours}h "
    return f"{out}{minutes}m"


def format_usage(used: float, total: float) -> str:
    return f"{used / GIB:.2f}GB / {total / GIB:.2f}GB"


def filter_host(raw: str) -> str:
    return " ".join(word for word in raw.split() if word not in HOST_BLACKLIST)


def parse_release(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k, v = line.split("=", 1)
        data[k.strip()] = v.strip().strip('"').strip("'")
    return data


class FactProvider:
    """Generic POSIX provider.

    Every fact method returns ``None`` when the fact is unavailable on this
    host. ``resolve`` additionally turns host-level errors into ``None`` so a
    single broken source never aborts the report.
    """

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        runner: Runner = run_command,
        processes: ProcessTable | None = None,
        root: Path = Path("/"),
        pid: int | None = None,
    ) -> None:
        self.env = os.environ if env is None else env
        self.runner = runner
        self.processes = processes or PsutilProcessTable()
        self.root = root
        self.pid = os.getpid() if pid is None else pid
        self._dispatch: dict[FactKind, Callable[[], str | None]] = {
            FactKind.USER_AT_HOSTNAME: self.user_at_hostname,
            FactKind.OS: self.os,
            FactKind.HOST: self.host,
            FactKind.KERNEL: self.kernel,
            FactKind.UPTIME: self.uptime,
            FactKind.PACKAGES: self.packages,
            FactKind.SHELL: self.shell,
            FactKind.TERMINAL: self.terminal,
            FactKind.CPU: self.cpu,
            FactKind.MEMORY: self.memory,
            FactKind.SWAP: self.swap,
            FactKind.BATTERY: self.battery,
            FactKind.SEPARATOR: lambda: "",
            FactKind.COLORS1: lambda: COLORS1,
            FactKind.COLORS2: lambda: COLORS2,
        }

    def resolve(self, kind: FactKind) -> str | None:
        try:
            return self._dispatch[kind]()
        except _RESOLVE_ERRORS as exc:
            _log.debug("fact %s unavailable: %s", kind.label, exc)
            return None

    # -- helpers ---------------------------------------------------------

    def _read(self, relative: str) -> str | None:
        try:
            return (self.root / relative).read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None

    def _command_output(self, *argv: str) -> str | None:
        try:
            result = self.runner(argv)
        except OSError:
            return None
        return (result.stdout or "").replace("\n", "") or None

    def hostname(self) -> str | None:
        return socket.gethostname() or None

    def os_name_version(self) -> tuple[str | None, str | None]:
        for rel, name_key, version_key in (
            ("etc/os-release", "NAME", "VERSION_ID"),
            ("usr/lib/os-release", "NAME", "VERSION_ID"),
        ):
            text = self._read(rel)
            if text is None:
                continue
            data = parse_release(text)
            version = data.get(version_key)
            if version is None:
                lsb = parse_release(self._read("etc/lsb-release") or "")
                version = lsb.get("DISTRIB_RELEASE")
            return data.get(name_key), version
        lsb_text = self._read("etc/lsb-release")
        if lsb_text is not None:
            lsb = parse_release(lsb_text)
            return lsb.get("DISTRIB_ID"), lsb.get("DISTRIB_RELEASE")
        return platform.system() or None, platform.release() or None

    def uptime_seconds(self) -> float:
        return time.time() - psutil.boot_time()

    # -- facts -----------------------------------------------------------

    def user_at_hostname(self) -> str | None:
        host = self.hostname()
        if host is None:
            return None
        user = self.env.get("USER")
        if user is None:
            user = self._command_output("id", "-un")
            if user is None:
                return None
        return f"{user}@{host}"

    def os(self) -> str | None:
        name, version = self.os_name_version()
        if version and "rolling" not in version and name:
            return f"{name} {version}"
        return name

    def host(self) -> str | None:
        parts = [self._read(rel) for rel in HOST_FILES]
        if all(p is None for p in parts):
            return None
        raw = " ".join((p or "").replace("\n", "").replace("\x00", "") for p in parts)
        host = filter_host(raw)
        if not host:
            return self._command_output("uname", "-m")
        return host

    def kernel(self) -> str | None:
        return platform.release() or None

    def uptime(self) -> str | None:
        return format_uptime(self.uptime_seconds())

    def packages(self) -> str | None:
        return probe_packages(self.runner)

    def shell(self) -> str | None:
        path = self.env.get("SHELL")
        if not path or "/" not in path:
            return None
        return path.rsplit("/", 1)[1]

    def terminal(self) -> str | None:
        if "termux" in self.env.get("HOME", ""):
            return "termux"
        return find_terminal(self.pid, self.processes)

    def cpu(self) -> str | None:
        text = self._read("proc/cpuinfo")
        if text is not None:
            for line in text.splitlines():
                key, _, value = line.partition(":")
                if key.strip() in ("model name", "Hardware", "Processor") and value.strip():
                    return value.strip()
        return platform.processor() or None

    def memory(self) -> str | None:
        vm = psutil.virtual_memory()
        return format_usage(vm.total - vm.available, vm.total)

    def swap(self) -> str | None:
        sm = psutil.swap_memory()
        if sm.total == 0:
            return None
        return format_usage(sm.used, sm.total)

    def battery(self) -> str | None:
        if not hasattr(psutil, "sensors_battery"):
            return None
        bat = psutil.sensors_battery()
        if bat is None:
            return None
        if bat.power_plugged is None:
            suffix = ""
        elif bat.power_plugged:
            suffix = ", charging" if bat.percent < 100 else ""
        else:
            suffix = ", discharging"
        return f"{bat.percent:.0f}%{suffix}"


class AndroidFactProvider(FactProvider):
    """Termux flavor: getprop for the OS version, termux-api for the battery."""

    def os(self) -> str | None:
        version = self._command_output("getprop", "ro.build.version.release")
        if version:
            return f"Android {version}"
        return "Android"

    def host(self) -> str | None:
        model = self._command_output("getprop", "ro.product.model")
        return model or self.os()

    def battery(self) -> str | None:
        try:
            result = self.runner(("termux-battery-status",))
        except OSError:
            return None
        if result.returncode != 0:
            return None
        status = json.loads(result.stdout)
        if not isinstance(status, dict) or "percentage" not in status:
            return None
        suffix = {"CHARGING": ", charging", "DISCHARGING": ", discharging"}.get(status.get("status"), "")
        return f"{status['percentage']}%{suffix}"


def is_android(env: Mapping[str, str] | None = None) -> bool:
    env = os.environ if env is None else env
    return sys.platform == "android" or "ANDROID_ROOT" in env


def build_provider(env: Mapping[str, str] | None = None) -> FactProvider:
    if is_android(env):
        return AndroidFactProvider(env=env)
    return FactProvider(env=env)


def collect_facts(provider: FactProvider, kinds: list[FactKind]) -> list[Fact]:
    facts: list[Fact] = []
    for kind in kinds:
        value = provider.resolve(kind)
        if value is not None:
            facts.append(Fact(kind=kind, value=value))
    return facts
