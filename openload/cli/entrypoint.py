from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys

from rich import print as rprint
from rich.markup import escape

from openload.core.config import ConfigError, VersionCheckConfig
from openload.core.logger import setup_logging
from openload.version_check import (
    VersionChecker,
    VersionInfo,
    VersionStatus,
    build_version_checker,
)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Check whether this openload build is the latest release"
    )
    parser.add_argument(
        "-v",
        "--version",
        action="store_true",
        help="Print the running version and exit",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Forget the cached result before checking",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Print the raw version info as JSON",
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Read settings from this file instead of ~/.openload/config.toml",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def render(info: VersionInfo) -> None:
    match info.status:
        case VersionStatus.UPDATE_AVAILABLE:
            rprint(
                f"[yellow]Update available:[/] {info.current_version} -> "
                f"[bold]{info.latest_version}[/]"
            )
            if info.release_url:
                rprint(f"Release notes: {info.release_url}")
        case VersionStatus.LATEST:
            rprint(f"[green]openload {info.current_version} is up to date.[/]")
        case _:
            rprint(
                f"[red]Could not determine the latest version "
                f"(running {info.current_version}).[/]"
            )


async def run(checker: VersionChecker, *, clear_cache: bool) -> VersionInfo:
    if clear_cache:
        await checker.clear_cache()
    return await checker.check_for_updates()


def main(argv: list[str] | None = None) -> None:
    args = parse_arguments(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    try:
        config = VersionCheckConfig.load(args.config)
    except ConfigError as e:
        rprint(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(2)

    checker = build_version_checker(config)

    if args.version:
        print(checker.get_current_version())
        return

    info = asyncio.run(run(checker, clear_cache=args.clear_cache))

    if args.as_json:
        print(json.dumps(info.to_dict(), indent=2))
    else:
        render(info)

    if info.status is VersionStatus.ERROR:
        sys.exit(1)


if __name__ == "__main__":
    main()
