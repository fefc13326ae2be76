from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Sequence

from donelist import __version__
from donelist.core.app import main as run_app
from donelist.core.config import get_runtime_config
from donelist.core.paths import resolve_paths
from donelist.core.settings_store import SettingsStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="donelist",
        description="donelist: a small task list for the terminal",
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
        "--data-dir",
        type=Path,
        default=None,
        help="Keep settings, tasks and logs in this directory instead of the user dirs.",
    )

    parser.add_argument(
        "--ephemeral",
        action="store_true",
        help="Keep tasks in memory only; nothing is written to disk.",
    )

    subparsers = parser.add_subparsers(dest="command")

    config_parser = subparsers.add_parser(
        "print-config",
        help="Print resolved runtime config, paths and settings to stdout.",
    )
    config_parser.set_defaults(handler=handle_print_config)

    return parser


def handle_print_config(args: argparse.Namespace) -> None:
    config = get_runtime_config()
    data_dir = args.data_dir if args.data_dir is not None else config.data_dir
    paths = resolve_paths(data_dir)
    settings: dict[str, object] = {}
    if paths.settings_file.exists():
        settings = SettingsStore(paths.settings_file).load()
    payload = {
        "runtime": config.model_dump(mode="json"),
        "paths": {
            "config_dir": str(paths.config_dir),
            "settings_file": str(paths.settings_file),
            "data_dir": str(paths.data_dir),
            "logs_dir": str(paths.logs_dir),
        },
        "settings": settings,
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

    run_app(data_dir=args.data_dir, ephemeral=args.ephemeral)


if __name__ == "__main__":
    main()
