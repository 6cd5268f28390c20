#!/usr/bin/env python3
"""Check, normalize or dump documents in the diffable Bible text format.

Usage:
    python3 scripts/diffable_tool.py check bible.txt
    python3 scripts/diffable_tool.py normalize bible.txt -o bible.normalized.txt
    python3 scripts/diffable_tool.py dump-json bible.txt -o bible.json

``check`` parses the whole file (applying declarations and directives) and
prints document statistics. ``normalize`` re-exports the parsed document,
which folds merge/delete/reorder directives into plain content lines.
``dump-json`` writes the parsed model as JSON.

Structured JSON output goes to stdout; human messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from bmc.diffable import DiffableError, dumps, load
from bmc.io_utils import dump_json, save_json, write_text
from bmc.model import bible_stats, bible_to_dict

log = logging.getLogger("diffable_tool")


def _cmd_check(args: argparse.Namespace) -> int:
    bible = load(args.input)
    stats = bible_stats(bible)
    dump_json(
        {
            "name": bible.name,
            "books": [book.abbr for book in bible.books],
            **stats,
        },
        pretty=args.pretty,
    )
    return 0


def _cmd_normalize(args: argparse.Namespace) -> int:
    bible = load(args.input)
    text = dumps(bible)
    if args.output is None:
        sys.stdout.write(text)
    else:
        write_text(text, args.output)
        log.info("wrote %s", args.output)
    return 0


def _cmd_dump_json(args: argparse.Namespace) -> int:
    bible = load(args.input)
    payload = bible_to_dict(bible)
    if args.output is None:
        dump_json(payload, pretty=args.pretty)
    else:
        save_json(payload, args.output, pretty=args.pretty)
        log.info("wrote %s", args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Diffable Bible text format tool (one verse per line).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Parse a file and print statistics as JSON")
    check.add_argument("input", type=Path)
    check.add_argument("--pretty", action="store_true", help="Indent JSON output")
    check.set_defaults(handler=_cmd_check)

    normalize = sub.add_parser("normalize", help="Parse and re-export in canonical form")
    normalize.add_argument("input", type=Path)
    normalize.add_argument("-o", "--output", type=Path, default=None)
    normalize.set_defaults(handler=_cmd_normalize)

    dump = sub.add_parser("dump-json", help="Write the parsed document model as JSON")
    dump.add_argument("input", type=Path)
    dump.add_argument("-o", "--output", type=Path, default=None)
    dump.add_argument("--pretty", action="store_true", help="Indent JSON output")
    dump.set_defaults(handler=_cmd_dump_json)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if not args.input.exists():
        log.error("input not found: %s", args.input)
        return 2
    try:
        return args.handler(args)
    except DiffableError as exc:
        log.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
