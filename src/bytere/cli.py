"""Command-line line scanner.

Prints the lines of each input that match a pattern, like a minimal
``grep``.

Exit codes:
    0   at least one line matched (or ``--dump`` succeeded)
    1   no line matched
    2   invalid pattern, evaluation error, or unreadable input
"""

import argparse
import logging
import sys
import textwrap
from typing import Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple

from bytere import __version__
from bytere.config import Config, Strategy
from bytere.exceptions import BytereError, EvalError
from bytere.matcher import Regex

EXIT_MATCH = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2

_log = logging.getLogger("bytere")


def _configure_logging(verbosity: int) -> None:
    """Set up the root ``bytere`` logger.

    0 -> WARNING, 1 -> INFO, 2+ -> DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("bytere")
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bytere",
        description="Print lines matching a pattern, using a backtracking regex VM.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              bytere '^(ab|cd)+$' words.txt
              bytere -n --strategy breadth 'a.c' notes.txt
              bytere --dump 'a**b'
        """),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    parser.add_argument(
        "-n", "--line-number",
        action="store_true",
        help="Prefix each matching line with its line number.",
    )
    parser.add_argument(
        "-c", "--count",
        action="store_true",
        help="Print only the number of matching lines per input.",
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in Strategy],
        default=Strategy.DEPTH_FIRST.value,
        help="VM evaluation strategy (default: %(default)s).",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=Config.max_depth,
        metavar="N",
        help="Nesting limit of the depth-first evaluator (default: %(default)s).",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the AST and bytecode of the pattern instead of scanning.",
    )
    parser.add_argument("pattern", help="Regular expression.")
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="Files to scan; '-' or nothing reads standard input.",
    )
    return parser


def match_lines(
    regex: Regex,
    lines: Iterable[str],
    errors: Optional[List[Tuple[int, EvalError]]] = None,
) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, line)`` for each matching line.

    If ``errors`` is given, a line whose evaluation fails is recorded there
    as ``(line_number, error)`` and scanning goes on with the next line.
    Otherwise the error propagates.
    """
    for number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        try:
            matched = regex.match_line(line)
        except EvalError as e:
            if errors is None:
                raise
            errors.append((number, e))
            continue
        if matched:
            yield number, line


def _scan(
    regex: Regex,
    stream: TextIO,
    path: str,
    label: Optional[str],
    args: argparse.Namespace,
) -> Tuple[int, int]:
    """Print the matches of one input; return ``(matches, failed_lines)``."""
    count = 0
    errors: List[Tuple[int, EvalError]] = []
    for number, line in match_lines(regex, stream, errors):
        count += 1
        if args.count:
            continue
        prefix = ""
        if label is not None:
            prefix += f"{label}:"
        if args.line_number:
            prefix += f"{number}:"
        print(f"{prefix}{line}")
    if args.count:
        print(f"{label}:{count}" if label is not None else count)
    for number, error in errors:
        _log.error("evaluation failed at %s:%d: %s", path, number, error)
    return count, len(errors)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the bytere CLI.

    Args:
        argv: Command-line arguments; ``None`` means ``sys.argv[1:]``.

    Returns:
        Exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = Config(strategy=Strategy(args.strategy), max_depth=args.max_depth)
    except ValueError as e:
        parser.error(str(e))
    try:
        regex = Regex(args.pattern, config)
    except BytereError as e:
        _log.error("invalid pattern %r: %s", args.pattern, e)
        return EXIT_ERROR

    if args.dump:
        print(regex.dump())
        return EXIT_MATCH

    files = args.files or ["-"]
    show_label = len(files) > 1
    total = 0
    failed = False
    for path in files:
        label = path if show_label else None
        try:
            if path == "-":
                count, failures = _scan(regex, sys.stdin, "<stdin>", label, args)
            else:
                with open(path, encoding="utf-8") as stream:
                    count, failures = _scan(regex, stream, path, label, args)
        except (OSError, UnicodeDecodeError) as e:
            _log.error("cannot read %s: %s", path, e)
            failed = True
            continue
        total += count
        if failures:
            failed = True

    _log.info("%d matching line(s)", total)
    if failed:
        return EXIT_ERROR
    return EXIT_MATCH if total else EXIT_NO_MATCH


if __name__ == "__main__":
    raise SystemExit(main())
