from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from dirmark import __version__
from dirmark.core.app import main as run_app
from dirmark.core.config import get_runtime_config
from dirmark.core.errors import DirmarkError
from dirmark.core.path_navigation import resolve_start_location


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirmark",
        description="dirmark - browse directories, mark files, copy them in one go",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Print version and exit.",
    )

    parser.add_argument(
        "--no-ui",
        action="store_true",
        help="Parse CLI arguments without launching the UI.",
    )

    parser.add_argument(
        "--start-path",
        dest="start_path",
        help="Directory to open first. Defaults to the working directory.",
    )

    subparsers = parser.add_subparsers(dest="command")

    config_parser = subparsers.add_parser(
        "print-config",
        help="Print the resolved runtime config and start location to stdout.",
    )
    config_parser.set_defaults(handler=handle_print_config)

    return parser


def handle_print_config(args: argparse.Namespace) -> None:
    config = get_runtime_config()
    start_path = args.start_path or config.start_path
    try:
        start_location: str | None = str(resolve_start_location(start_path))
    except DirmarkError as exc:
        start_location = None
        print(f"warning: {exc}", file=sys.stderr)
    payload = {
        "runtime": config.model_dump(mode="json"),
        "start_location": start_location,
    }
    print(json.dumps(payload, indent=2))


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "print-config":
        args.handler(args)
        return

    if args.no_ui:
        return

    start_path = Path(args.start_path).expanduser() if args.start_path else None
    run_app(start_path)


if __name__ == "__main__":
    main()
