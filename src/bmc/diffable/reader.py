"""Line router: imports a whole diffable document.

The first line carries the format magic and the document name. Every
further line is one of: blank or ``#`` comment (ignored), a declaration or
directive (book list edits), or a content line ``ABBR c[:v] markup`` that
is decoded into the addressed chapter prolog or verse.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from bmc.diffable.decoder import decode_content
from bmc.diffable.directives import DECLARE, DIRECTIVE_OPERATORS, BookIndex
from bmc.diffable.errors import (
    DiffableError,
    InvalidHeaderError,
    MalformedDeclarationError,
    MalformedLineError,
    MalformedNumericFieldError,
)
from bmc.diffable.grammar import HEADER_MAGIC, parse_int
from bmc.formatted_text import Span
from bmc.io_utils import read_text
from bmc.model import Bible, Book, Verse

logger = logging.getLogger(__name__)


def parse_address(field: str) -> tuple[int, str | None]:
    """Split ``c`` or ``c:v`` into chapter number and verse id (``None`` = prolog)."""
    chapter_text, sep, verse = field.partition(":")
    chapter = parse_int(chapter_text, "chapter number")
    if chapter < 1:
        raise MalformedNumericFieldError(f"Chapter number must be >= 1: {field}")
    return chapter, (verse if sep else None)


def _target_unit(book: Book, chapter_number: int, verse_number: str | None) -> list[Span]:
    chapter = book.chapter(chapter_number)
    if verse_number is None:
        if chapter.prolog is None:
            chapter.prolog = []
        return chapter.prolog
    idx = chapter.verse_index(verse_number)
    if idx >= 0:
        return chapter.verses[idx].content
    verse = Verse(verse_number)
    chapter.verses.append(verse)
    return verse.content


def _route_line(index: BookIndex, line: str) -> None:
    parts = line.split(" ", 2)
    if len(parts) < 2:
        raise MalformedLineError(f"Not enough fields: {line}")
    abbr, field = parts[0], parts[1]
    rest = parts[2] if len(parts) == 3 else None

    if field in DIRECTIVE_OPERATORS:
        if rest is None:
            if field == DECLARE:
                raise MalformedDeclarationError(f"Malformed declaration line (no fields): {line}")
            raise MalformedLineError(f"Directive without destination: {line}")
        index.apply(abbr, field, rest if field == DECLARE else rest.strip())
        return

    book = index.resolve(abbr)
    chapter_number, verse_number = parse_address(field)
    target = _target_unit(book, chapter_number, verse_number)
    decode_content(rest or "", target)


def read_bible(lines: Iterable[str]) -> Bible:
    """Import a document from an iterable of lines (newlines optional).

    Any failure aborts the import; the raised ``DiffableError`` carries the
    offending line and its 1-based number.
    """

    iterator = iter(lines)
    header = next(iterator, None)
    if header is None:
        raise InvalidHeaderError("Empty input, header line missing")
    header = header.rstrip("\r\n").removeprefix("\ufeff")
    if not header.startswith(HEADER_MAGIC):
        raise InvalidHeaderError(f"Invalid header line: {header}")

    bible = Bible(name=header[len(HEADER_MAGIC):])
    index = BookIndex(bible)
    routed_lines = 0
    for line_number, raw_line in enumerate(iterator, start=2):
        line = raw_line.rstrip("\r\n")
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            _route_line(index, line.lstrip())
        except DiffableError as exc:
            exc.attach_line(line, line_number)
            raise
        routed_lines += 1
    logger.info(
        "imported %r: %d books from %d lines",
        bible.name,
        len(bible.books),
        routed_lines,
    )
    return bible


def loads(text: str) -> Bible:
    return read_bible(text.split("\n"))


def load(path: Path) -> Bible:
    return loads(read_text(path))
