"""Command-line interface for mrs-matrix."""

from __future__ import annotations

import argparse
from importlib import metadata
import logging
import random
import sys
from typing import Iterable, Optional

from mrs_matrix.charsets import BUILTIN_CHARSETS
from mrs_matrix.color_algorithms import COLOR_PRESETS
from mrs_matrix.config import (
    ConfigError,
    RainConfig,
    ResolvedConfig,
    config_from_env,
    resolve,
)
from mrs_matrix.crashdump import dump_traceback, enable_faulthandler
from mrs_matrix.logging_setup import init_logging, set_console_level

logger = logging.getLogger(__name__)


def _version() -> str:
    try:
        return metadata.version("mrs-matrix")
    except metadata.PackageNotFoundError:
        return "unknown"


def framerate_in_range(value: str) -> int:
    """argparse type for ``--framerate``."""
    try:
        framerate = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'"{value}" isn\'t a valid integer') from None
    if framerate <= 0:
        raise argparse.ArgumentTypeError("framerate must be greater than zero")
    return framerate


def build_parser(defaults: RainConfig | None = None) -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    defaults = defaults or RainConfig()
    parser = argparse.ArgumentParser(
        prog="mrs-matrix",
        description="Digital rain for your terminal. Press any key to quit.",
    )
    parser.add_argument(
        "-c",
        "--color-mode",
        choices=sorted(COLOR_PRESETS),
        default=defaults.color_mode,
        help="How characters are colored (default: %(default)s)",
    )
    parser.add_argument(
        "--charset",
        choices=sorted(BUILTIN_CHARSETS),
        default=defaults.charset,
        help="Character set to draw from (default: %(default)s)",
    )
    parser.add_argument(
        "-s",
        "--sync-scrolling",
        action="store_true",
        default=defaults.sync_scrolling,
        help="Move every stream on every frame",
    )
    parser.add_argument(
        "-f",
        "--framerate",
        type=framerate_in_range,
        default=defaults.framerate,
        help="Target frames per second (default: %(default)s)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.seed,
        help="Seed for reproducible rain",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return parser


def _run_rain(resolved: ResolvedConfig) -> int:
    try:
        from mrs_matrix.rich_terminal import RichTerminal
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    from mrs_matrix.animation import RenderLoop

    rng = random.Random(resolved.seed) if resolved.seed is not None else None
    render_loop = RenderLoop(
        RichTerminal(),
        resolved.charset,
        resolved.color_algorithm,
        resolved.advance_chance,
        resolved.framerate,
        rng=rng,
    )
    # stderr shares the screen with the rain
    previous_level = set_console_level(logging.CRITICAL + 1)
    try:
        frames = render_loop.run()
    except OSError as exc:
        logger.exception("Terminal failure")
        print(f"mrs-matrix: terminal error: {exc}", file=sys.stderr)
        return 1
    finally:
        set_console_level(previous_level)
    logger.info("Rendered %s frames", frames)
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    log_path = init_logging()
    enable_faulthandler(log_path)

    def excepthook(exc_type, exc, tb) -> None:
        logger.exception("Uncaught exception", exc_info=(exc_type, exc, tb))
        dump_traceback("uncaught exception")

    sys.excepthook = excepthook

    parser = build_parser(config_from_env())
    args = parser.parse_args(list(argv) if argv is not None else None)
    cfg = RainConfig(
        charset=args.charset,
        color_mode=args.color_mode,
        sync_scrolling=args.sync_scrolling,
        framerate=args.framerate,
        seed=args.seed,
    )
    try:
        resolved = resolve(cfg)
    except ConfigError as exc:
        print(f"mrs-matrix: {exc}", file=sys.stderr)
        return 2

    logger.info("App start %s", cfg)
    exit_code = _run_rain(resolved)
    logger.info("App exit code=%s", exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
