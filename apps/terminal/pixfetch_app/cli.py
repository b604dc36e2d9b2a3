"""CLI entrypoint: gather facts, render the logo and print the report."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import TextIO

from pixfetch_core import (
    ConfigError,
    RenderCache,
    RenderConfig,
    Settings,
    configure_logging,
    get_logger,
    load_settings,
    merge_settings,
    validate,
)
from pixfetch_core.config import parse_kinds
from pixfetch_facts import FactKind, FactProvider, build_provider, collect_facts, select_kinds
from pixfetch_renderer import (
    LogoSelection,
    RenderError,
    ReportStyle,
    compose,
    render_image,
    resolve_distro,
    split_image_lines,
)

_log = get_logger().getChild("cli")

_TRUE = ("true", "yes", "on", "1")
_FALSE = ("false", "no", "off", "0")


def _installed_version() -> str:
    try:
        return metadata.version("pixfetch")
    except Exception:
        return "0.1.0"


def _parse_bool(text: str) -> bool:
    value = text.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got `{text}`")


def _print_error(context: str, exc: BaseException, stream: TextIO | None = None) -> int:
    print(f"\x1b[1;31m{context}:\x1b[22m {exc}\x1b[0m", file=stream or sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    kinds = ", ".join(k.value for k in FactKind)
    parser = argparse.ArgumentParser(
        prog="pixfetch",
        description="Another fetch program with variable sized pixel images",
    )
    parser.add_argument("--max-width", type=int, default=None, help="Maximum image width in pixels (5-50)")
    parser.add_argument(
        "--alpha-threshold", type=int, default=None, help="Minimum alpha value for pixels to be displayed (0-255)"
    )
    parser.add_argument(
        "--color-override",
        type=int,
        default=None,
        help="Override the main color (0-7); user@hostname uses this + 1",
    )
    parser.add_argument("--image-override", default=None, help="Path to a custom image to use instead of the OS logo")
    parser.add_argument("--gap", type=int, default=None, help="Spaces around the image (0-10)")
    for flag, text in (
        ("--show-colons", "Print a colon after each info label"),
        ("--skip-cache", "Never read or write the render cache"),
        ("--aliasing", "Smooth the image while scaling"),
    ):
        parser.add_argument(flag, type=_parse_bool, nargs="?", const=True, default=None, metavar="BOOL", help=text)
    parser.add_argument(
        "--info-whitelist",
        nargs="*",
        action="extend",
        default=None,
        metavar="INFO",
        help=f"Only show these infos, comma or space separated ({kinds})",
    )
    parser.add_argument(
        "--info-blacklist",
        nargs="*",
        action="extend",
        default=None,
        metavar="INFO",
        help="Never show these infos; wins over the whitelist",
    )
    parser.add_argument("--config", default=None, help="Config file path (default: XDG config dir)")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_installed_version()}")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings(
        max_width=args.max_width,
        alpha_threshold=args.alpha_threshold,
        show_colons=args.show_colons,
        skip_cache=args.skip_cache,
        aliasing=args.aliasing,
        gap=args.gap,
        color_override=args.color_override,
        image_override=args.image_override,
        info_whitelist=(parse_kinds(args.info_whitelist) if args.info_whitelist is not None else None),
        info_blacklist=(parse_kinds(args.info_blacklist) if args.info_blacklist is not None else None),
    )


def select_logo(config: RenderConfig, os_name: str | None) -> LogoSelection:
    logo = resolve_distro(os_name)
    if config.image_override is None:
        return logo
    return LogoSelection(
        accent_color=logo.accent_color,
        image_bytes=config.image_override.read_bytes(),
        name=str(config.image_override),
    )


@dataclass(frozen=True)
class Report:
    lines: list[str]
    image_bytes: bytes
    rendered: str
    from_cache: bool


def render_report(
    config: RenderConfig,
    provider: FactProvider,
    cache: RenderCache,
) -> Report:
    """Resolve facts, render (or reuse) the image and compose the report lines.

    The cache is only read here; ``store_report`` writes it once the
    report has been shown. Raises ``OSError`` when the override image
    cannot be read and ``RenderError`` when the image bytes cannot be
    rendered.
    """
    kinds = select_kinds(
        list(config.info_whitelist) if config.info_whitelist is not None else None,
        list(config.info_blacklist) if config.info_blacklist is not None else None,
    )
    facts = collect_facts(provider, kinds)

    logo = select_logo(config, provider.resolve(FactKind.OS))
    _log.debug("logo %s, accent %d", logo.name, logo.accent_color)

    rendered = cache.lookup(config, logo.image_bytes)
    from_cache = rendered is not None
    if rendered is None:
        rendered = render_image(logo.image_bytes, config.max_width, config.alpha_threshold, config.aliasing)

    accent = logo.accent_color if config.color_override is None else config.color_override
    style = ReportStyle(
        accent_color=accent,
        max_width=config.max_width,
        gap=config.gap,
        show_colons=config.show_colons,
    )
    lines = compose(split_image_lines(rendered), facts, style)
    return Report(lines=lines, image_bytes=logo.image_bytes, rendered=rendered, from_cache=from_cache)


def store_report(config: RenderConfig, cache: RenderCache, report: Report) -> None:
    if not report.from_cache:
        cache.store(config, report.image_bytes, report.rendered)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(console=args.verbose)

    try:
        flags = settings_from_args(args)
        file_settings = load_settings(Path(args.config).expanduser() if args.config else None)
        config = validate(merge_settings(flags, file_settings))
    except ConfigError as exc:
        return _print_error("Your configuration (flags and/or config file) is invalid", exc)
    except (OSError, UnicodeDecodeError) as exc:
        return _print_error("Failed to read config file", exc)

    cache = RenderCache()
    try:
        report = render_report(config, build_provider(), cache)
    except OSError as exc:
        return _print_error("Could not read custom image", exc)
    except RenderError as exc:
        return _print_error("Failed to create image pixel art", exc)

    for line in report.lines:
        print(line)
    sys.stdout.flush()
    store_report(config, cache, report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
