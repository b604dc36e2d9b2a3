import json
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "facts"))

from pixfetch_facts.models import Fact, FactKind
from pixfetch_facts.process import StaticProcessTable
from pixfetch_facts.provider import (
    COLORS1,
    COLORS2,
    AndroidFactProvider,
    FactProvider,
    build_provider,
    collect_facts,
    filter_host,
    format_uptime,
    format_usage,
)

GIB = 1024**3


def fake_runner(outputs):
    def run(argv):
        argv = tuple(argv)
        if argv[0] not in outputs:
            raise FileNotFoundError(argv[0])
        code, stdout = outputs[argv[0]]
        return subprocess.CompletedProcess(list(argv), code, stdout=stdout, stderr="")

    return run


class FormattingTests(unittest.TestCase):
    def test_uptime_zero(self):
        self.assertEqual(format_uptime(0), "0m")

    def test_uptime_day_hour(self):
        self.assertEqual(format_uptime(90000), "1d 1h 0m")

    def test_uptime_hour_without_day(self):
        self.assertEqual(format_uptime(3600), "1h 0m")

    def test_uptime_skips_zero_hour(self):
        self.assertEqual(format_uptime(86400 + 300), "1d 5m")

    def test_uptime_ignores_seconds(self):
        self.assertEqual(format_uptime(179), "2m")

    def test_usage(self):
        self.assertEqual(format_usage(8 * GIB, 16 * GIB), "8.00GB / 16.00GB")
        self.assertEqual(format_usage(GIB // 2, 2 * GIB), "0.50GB / 2.00GB")

    def test_filter_host_drops_placeholders(self):
        self.assertEqual(filter_host("To Be Filled By O.E.M. To Be Filled By O.E.M."), "")
        self.assertEqual(filter_host("ThinkPad X1 Carbon Not Specified "), "ThinkPad X1 Carbon")
        self.assertEqual(filter_host("System Product Name Default string"), "")


class ProviderTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, relative, text):
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    def provider(self, env=None, outputs=None, processes=None, cls=FactProvider):
        return cls(
            env=env or {},
            runner=fake_runner(outputs or {}),
            processes=processes or StaticProcessTable({}),
            root=self.root,
            pid=100,
        )


class IdentityTests(ProviderTestCase):
    def test_user_from_environment(self):
        with patch("pixfetch_facts.provider.socket.gethostname", return_value="box"):
            self.assertEqual(self.provider(env={"USER": "alice"}).user_at_hostname(), "alice@box")

    def test_user_from_id_command(self):
        with patch("pixfetch_facts.provider.socket.gethostname", return_value="box"):
            p = self.provider(outputs={"id": (0, "bob\n")})
            self.assertEqual(p.user_at_hostname(), "bob@box")

    def test_no_hostname(self):
        with patch("pixfetch_facts.provider.socket.gethostname", return_value=""):
            self.assertIsNone(self.provider(env={"USER": "alice"}).user_at_hostname())


class OsTests(ProviderTestCase):
    def test_name_and_version(self):
        self.write("etc/os-release", 'NAME="Ubuntu"\nVERSION_ID="22.04"\nID=ubuntu\n')
        self.assertEqual(self.provider().os(), "Ubuntu 22.04")

    def test_rolling_release_reports_name_only(self):
        self.write("etc/os-release", 'NAME="Arch Linux"\nBUILD_ID=rolling\n')
        self.write("etc/lsb-release", 'DISTRIB_ID="Arch"\nDISTRIB_RELEASE="rolling"\n')
        self.assertEqual(self.provider().os(), "Arch Linux")

    def test_lsb_release_only(self):
        self.write("etc/lsb-release", "DISTRIB_ID=Gentoo\nDISTRIB_RELEASE=2.14\n")
        self.assertEqual(self.provider().os(), "Gentoo 2.14")

    def test_android_os_from_getprop(self):
        p = self.provider(outputs={"getprop": (0, "13\n")}, cls=AndroidFactProvider)
        self.assertEqual(p.os(), "Android 13")


class HostTests(ProviderTestCase):
    def test_dmi_product(self):
        self.write("sys/devices/virtual/dmi/id/product_name", "20KH006MUS\n")
        self.write("sys/devices/virtual/dmi/id/product_version", "ThinkPad X1 Carbon 6th\n")
        self.assertEqual(self.provider().host(), "20KH006MUS ThinkPad X1 Carbon 6th")

    def test_devicetree_model(self):
        self.write("sys/firmware/devicetree/base/model", "Raspberry Pi 4 Model B Rev 1.4\x00")
        self.assertEqual(self.provider().host(), "Raspberry Pi 4 Model B Rev 1.4")

    def test_placeholders_fall_back_to_machine(self):
        self.write("sys/devices/virtual/dmi/id/product_name", "To Be Filled By O.E.M.\n")
        self.write("sys/devices/virtual/dmi/id/product_version", "To Be Filled By O.E.M.\n")
        p = self.provider(outputs={"uname": (0, "x86_64\n")})
        self.assertEqual(p.host(), "x86_64")

    def test_no_files(self):
        self.assertIsNone(self.provider(outputs={"uname": (0, "x86_64\n")}).host())


class ShellAndTerminalTests(ProviderTestCase):
    def test_shell_basename(self):
        self.assertEqual(self.provider(env={"SHELL": "/usr/bin/zsh"}).shell(), "zsh")

    def test_shell_missing(self):
        self.assertIsNone(self.provider().shell())

    def test_termux_short_circuits_walk(self):
        p = self.provider(env={"HOME": "/data/data/com.termux/files/home"})
        self.assertEqual(p.terminal(), "termux")

    def test_terminal_from_process_table(self):
        table = StaticProcessTable({100: ("python3", 90), 90: ("fish", 80), 80: ("kitty", 1)})
        self.assertEqual(self.provider(processes=table).terminal(), "kitty")


class HardwareTests(ProviderTestCase):
    def test_cpu_model_name(self):
        self.write(
            "proc/cpuinfo",
            "processor\t: 0\nvendor_id\t: GenuineIntel\nmodel name\t: Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz\n",
        )
        self.assertEqual(self.provider().cpu(), "Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz")

    def test_memory(self):
        vm = SimpleNamespace(total=16 * GIB, available=12 * GIB)
        with patch("pixfetch_facts.provider.psutil.virtual_memory", return_value=vm):
            self.assertEqual(self.provider().memory(), "4.00GB / 16.00GB")

    def test_swap_absent(self):
        sm = SimpleNamespace(total=0, used=0)
        with patch("pixfetch_facts.provider.psutil.swap_memory", return_value=sm):
            self.assertIsNone(self.provider().swap())

    def test_swap_present(self):
        sm = SimpleNamespace(total=2 * GIB, used=GIB // 4)
        with patch("pixfetch_facts.provider.psutil.swap_memory", return_value=sm):
            self.assertEqual(self.provider().swap(), "0.25GB / 2.00GB")

    def test_battery_discharging(self):
        bat = SimpleNamespace(percent=57.4, secsleft=3600, power_plugged=False)
        with patch("pixfetch_facts.provider.psutil.sensors_battery", return_value=bat, create=True):
            self.assertEqual(self.provider().battery(), "57%, discharging")

    def test_battery_charging(self):
        bat = SimpleNamespace(percent=80.0, secsleft=-2, power_plugged=True)
        with patch("pixfetch_facts.provider.psutil.sensors_battery", return_value=bat, create=True):
            self.assertEqual(self.provider().battery(), "80%, charging")

    def test_no_battery(self):
        with patch("pixfetch_facts.provider.psutil.sensors_battery", return_value=None, create=True):
            self.assertIsNone(self.provider().battery())

    def test_android_battery(self):
        status = {"health": "GOOD", "percentage": 64, "plugged": "UNPLUGGED", "status": "DISCHARGING"}
        p = self.provider(outputs={"termux-battery-status": (0, json.dumps(status))}, cls=AndroidFactProvider)
        self.assertEqual(p.battery(), "64%, discharging")

    def test_android_battery_unexpected_json(self):
        for payload in ("[]", "null", "\"64\"", json.dumps({"status": "CHARGING"})):
            p = self.provider(outputs={"termux-battery-status": (0, payload)}, cls=AndroidFactProvider)
            self.assertIsNone(p.resolve(FactKind.BATTERY), payload)


class ResolveTests(ProviderTestCase):
    def test_static_rows(self):
        p = self.provider()
        self.assertEqual(p.resolve(FactKind.SEPARATOR), "")
        self.assertEqual(p.resolve(FactKind.COLORS1), COLORS1)
        self.assertEqual(p.resolve(FactKind.COLORS2), COLORS2)

    def test_palette_escape_sequences(self):
        self.assertEqual(
            COLORS1,
            "\x1b[40m   \x1b[41m   \x1b[42m   \x1b[43m   \x1b[44m   \x1b[45m   \x1b[46m   \x1b[47m   \x1b[0m",
        )
        self.assertTrue(COLORS2.startswith("\x1b[48;5;8m   \x1b[48;5;9m   "))
        self.assertTrue(COLORS2.endswith("\x1b[48;5;15m   \x1b[0m"))

    def test_resolve_swallows_host_errors(self):
        with patch("pixfetch_facts.provider.psutil.boot_time", side_effect=OSError("no /proc")):
            self.assertIsNone(self.provider().resolve(FactKind.UPTIME))

    def test_uptime_uses_boot_time(self):
        with patch("pixfetch_facts.provider.psutil.boot_time", return_value=1000.0), patch(
            "pixfetch_facts.provider.time.time", return_value=1000.0 + 3600 + 120
        ):
            self.assertEqual(self.provider().uptime(), "1h 2m")

    def test_collect_facts_drops_unavailable(self):
        p = self.provider(env={"SHELL": "/bin/bash"})
        facts = collect_facts(p, [FactKind.SHELL, FactKind.HOST, FactKind.SEPARATOR])
        self.assertEqual(facts, [Fact(FactKind.SHELL, "bash"), Fact(FactKind.SEPARATOR, "")])

    def test_build_provider_selects_android(self):
        self.assertIsInstance(build_provider({"ANDROID_ROOT": "/system"}), AndroidFactProvider)
        if sys.platform != "android":
            self.assertNotIsInstance(build_provider({}), AndroidFactProvider)


if __name__ == "__main__":
    unittest.main()
