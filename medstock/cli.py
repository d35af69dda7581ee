from __future__ import annotations

import argparse
import json
import sys
from typing import Iterable, TextIO

from medstock.commands import CommandContext, CommandResult, execute_command, parse_command
from medstock.core.errors import CommandError
from medstock.core.logging import configure_logging
from medstock.persistence.storage import InventoryStorage


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MedStock inventory CLI")
    parser.add_argument("--log-level", default=None, help="Override MS_LOG_LEVEL")
    top = parser.add_subparsers(dest="command", required=True)

    top.add_parser("repl", help="Read commands from stdin until EXIT")

    run = top.add_parser("exec", help="Run one or more commands and print the results as JSON")
    run.add_argument("lines", nargs="+", help="Command lines, e.g. 'list n/Panadol sort/q'")

    return parser


def _render(result: CommandResult) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)


def _render_error(exc: CommandError) -> str:
    return json.dumps(exc.to_dict(), ensure_ascii=False, indent=2)


def run_line(ctx: CommandContext, line: str) -> CommandResult:
    parsed = parse_command(line)
    return execute_command(ctx, parsed.name, parsed.parameters)


def run_lines(ctx: CommandContext, lines: Iterable[str], out: TextIO) -> int:
    status = 0
    for line in lines:
        if not line.strip():
            continue
        try:
            result = run_line(ctx, line)
        except CommandError as exc:
            print(_render_error(exc), file=out)
            status = 1
            continue
        print(_render(result), file=out)
        if result.exit:
            break
    return status


def _repl(ctx: CommandContext) -> int:
    print("Welcome to MedStock! Type HELP for the list of commands.")
    while True:
        try:
            line = input("> ")
        except EOFError:
            return 0
        if not line.strip():
            continue
        try:
            result = run_line(ctx, line)
        except CommandError as exc:
            print(_render_error(exc))
            continue
        print(_render(result))
        if result.exit:
            return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    storage = InventoryStorage()
    ctx = CommandContext(registry=storage.load(), storage=storage)

    if args.command == "repl":
        return _repl(ctx)
    if args.command == "exec":
        return run_lines(ctx, args.lines, sys.stdout)

    parser.error("unsupported command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
