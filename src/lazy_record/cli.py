"""
Command-line interface for the lazy-record demos.
"""

import argparse
import asyncio
import json
import logging
import sys

from lazy_record.clients.placeholder import PlaceholderClient
from lazy_record.demos import run_nested_todo, run_todo
from lazy_record.errors import ConfigurationError
from lazy_record.metrics import get_metrics_report
from lazy_record.utils.config import (
    get_config_file_path,
    get_settings,
    load_config,
)
from lazy_record.utils.logging_config import initialize_logging

DEMOS = {
    "todo": run_todo,
    "nested-todo": run_nested_todo,
}


async def run_demo(command: str, todo_id: int, api_base: str, timeout: float) -> None:
    """Run one demo walkthrough against the configured API."""
    async with PlaceholderClient(api_base=api_base, timeout=timeout) as client:
        await DEMOS[command](client, todo_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Batched lazy loading demos against a JSONPlaceholder-style API"
    )
    parser.add_argument("--api-base", help="Override the API base URL")
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Print loader metrics as JSON after the demo",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write logs to ~/.cache/lazy-record/logs",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    todo_parser = subparsers.add_parser(
        "todo", help="Lazy todo where every property triggers a load"
    )
    todo_parser.add_argument("id", type=int, nargs="?", default=1, help="Todo id")

    nested_parser = subparsers.add_parser(
        "nested-todo", help="Lazy todo with an allow list and a lazy nested user"
    )
    nested_parser.add_argument("id", type=int, nargs="?", default=1, help="Todo id")

    subparsers.add_parser("config", help="Show the effective configuration")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = load_config()
    if args.api_base:
        config = {**config, "api_base": args.api_base}

    try:
        settings = get_settings(config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    initialize_logging(
        level=logging.getLevelName(settings.log_level), file=args.log_file
    )

    if args.command == "config":
        print(f"Config file: {get_config_file_path()}")
        print(json.dumps(settings.model_dump(), indent=2))
        return 0

    asyncio.run(run_demo(args.command, args.id, settings.api_base, settings.timeout))

    if args.metrics:
        print(json.dumps(get_metrics_report(), indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
