#!/usr/bin/env python3
"""
Command-line runner for olang programs.

Usage:
    olang FILE
    olang -c SOURCE
    olang -c SOURCE FILE        # runs SOURCE, then FILE
    olang --debug FILE          # also dump tokens and AST

Environment:
    OLANG_LOG_LEVEL    logging level name (DEBUG, INFO, ...); -v forces DEBUG

Examples:
    python -m olang examples/fib.ol
    python -m olang -c 'printLn("2 ** 10 = " 2 ** 10)'
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger("olang")


def configure_logging(verbose: bool) -> None:
    """Set up logging from --verbose or OLANG_LOG_LEVEL."""
    level_name = "DEBUG" if verbose else os.environ.get("OLANG_LOG_LEVEL", "WARNING")
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def dump_debug(source: str, filename: Optional[str]) -> None:
    """Print the token stream and the AST of source."""
    from . import tokenize, parse, print_ast

    tokens = tokenize(source, filename)
    print("Tokens:")
    for token in tokens:
        print(f"  {token.span.start}: {token}")
    program = parse(tokens, source)
    print("AST:")
    print_ast(program)


def run_program(source: str, filename: Optional[str], debug: bool) -> int:
    """Evaluate one program in a fresh interpreter; returns an exit status."""
    from . import Interpreter, OlangError
    from .runtime.interpreter import recursion_headroom

    try:
        with recursion_headroom():
            if debug:
                dump_debug(source, filename)
            Interpreter().eval(source, filename)
    except OlangError as e:
        print(e, file=sys.stderr)
        return 1
    return 0


def cmd_command(args) -> int:
    """Run the inline -c program."""
    logger.debug("running inline program (%d chars)", len(args.command))
    return run_program(args.command, "<command>", args.debug)


def cmd_file(args) -> int:
    """Run a program file."""
    source_path = Path(args.file)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return 1

    try:
        source = source_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {source_path}: {e}", file=sys.stderr)
        return 1

    logger.debug("running %s", source_path)
    return run_program(source, str(source_path), args.debug)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='olang',
        description='Run olang programs',
    )
    parser.add_argument('file', nargs='?', help='olang source file')
    parser.add_argument('-c', '--command', metavar='SOURCE',
                        help='Program passed in as a string')
    parser.add_argument('--debug', action='store_true',
                        help='Print tokens and AST before running')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command is None and args.file is None:
        parser.print_usage(sys.stderr)
        return 2

    if args.command is not None:
        status = cmd_command(args)
        if status != 0:
            return status
    if args.file is not None:
        return cmd_file(args)
    return 0


if __name__ == '__main__':
    sys.exit(main())
