"""Encoder: writes span trees and whole documents as diffable text.

One addressed unit (a verse or a chapter prolog) becomes one physical line
``ABBR chapter[:verse] markup``. Root-level headlines and line breaks
continue the unit on a new line that repeats the same prefix, so that
independent edits land on separate lines of a diff.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TextIO

from bmc.diffable.errors import UnencodableValueError, UnsupportedAttributeValueError
from bmc.diffable.grammar import (
    CLOSING_TAG,
    ESCAPED_LT,
    HEADER_MAGIC,
    RAW_TAG_PREFIX,
    raw_closing_marker,
    spec_for_span,
)
from bmc.formatted_text import Headline, LineBreak, RawHtml, Span, Text
from bmc.io_utils import write_text
from bmc.model import Bible

logger = logging.getLogger(__name__)

# Characters that end a physical line on import.
_LINE_BREAK_CHARS = ("\n", "\r")
_FIELD_SEPARATOR = "\t"
_FIELD_FORBIDDEN = (_FIELD_SEPARATOR, *_LINE_BREAK_CHARS)
_ABBR_FORBIDDEN = (" ", *_FIELD_FORBIDDEN)
_VERSE_FORBIDDEN = (" ", *_LINE_BREAK_CHARS)


def _check_single_line(value: str, what: str, forbidden: tuple[str, ...] = _LINE_BREAK_CHARS) -> str:
    for ch in forbidden:
        if ch in value:
            raise UnencodableValueError(f"{what} contains {ch!r}: {value!r}")
    return value


def raw_marker(payload: str) -> int:
    """Smallest N >= 1 whose ``</raw:N>`` does not occur in ``payload``."""
    marker = 1
    while raw_closing_marker(f"{RAW_TAG_PREFIX}{marker}") in payload:
        marker += 1
    return marker


def escape_text(text: str) -> str:
    return _check_single_line(text, "Text").replace("<", ESCAPED_LT)


def format_tag(name: str, attrs: list[tuple[str, str]], *, self_closing: bool = False) -> str:
    parts = [name]
    for key, value in attrs:
        if '"' in value or any(ch in value for ch in _LINE_BREAK_CHARS):
            raise UnsupportedAttributeValueError(
                f"Attribute {key} of {name} tag contains a double quote or line break: {value!r}",
            )
        parts.append(f'{key}="{value}"')
    inner = " ".join(parts)
    return f"<{inner}/>" if self_closing else f"<{inner}>"


def _write_span(span: Span, out: TextIO) -> None:
    if isinstance(span, Text):
        out.write(escape_text(span.text))
        return
    spec = spec_for_span(span)
    name, attrs = spec.encode(span)
    if isinstance(span, RawHtml):
        name = f"{RAW_TAG_PREFIX}{raw_marker(span.raw)}"
        out.write(format_tag(name, attrs))
        out.write(_check_single_line(span.raw, "Raw block payload"))
        out.write(raw_closing_marker(name))
        return
    if not spec.container:
        out.write(format_tag(name, attrs, self_closing=True))
        return
    out.write(format_tag(name, attrs))
    for child in span.children:  # type: ignore[union-attr]
        _write_span(child, out)
    out.write(CLOSING_TAG)


def encode_spans(spans: list[Span]) -> str:
    """Markup for ``spans`` without address prefix or line splitting."""
    buf = io.StringIO()
    for span in spans:
        _write_span(span, buf)
    return buf.getvalue()


class _UnitWriter:
    """Tracks where a unit must continue on a fresh prefixed line."""

    def __init__(self, out: TextIO, prefix: str) -> None:
        self._out = out
        self._prefix = prefix
        self._new_line_pending = False
        self._in_main_content = False

    def _check_line(self) -> None:
        if self._new_line_pending:
            self._new_line_pending = False
            self._out.write("\n")
            self._out.write(self._prefix)

    def write(self, spans: list[Span]) -> None:
        self._out.write(self._prefix)
        for span in spans:
            if isinstance(span, Headline):
                if self._in_main_content:
                    self._new_line_pending = True
                self._check_line()
                self._new_line_pending = True
                _write_span(span, self._out)
                continue
            self._in_main_content = True
            self._check_line()
            _write_span(span, self._out)
            if isinstance(span, LineBreak):
                self._new_line_pending = True
        self._out.write("\n")


def encode_unit(spans: list[Span], prefix: str, out: TextIO) -> None:
    """Write one addressed unit; ``prefix`` includes its trailing space."""
    _UnitWriter(out, prefix).write(spans)


def dump_bible(bible: Bible, out: TextIO) -> None:
    """Write the header, every book declaration and every unit of ``bible``."""
    units = 0
    out.write(f"{HEADER_MAGIC}{_check_single_line(bible.name, 'Document name')}\n")
    for book in bible.books:
        abbr = _check_single_line(book.abbr, "Book abbreviation", _ABBR_FORBIDDEN)
        fields = [
            _check_single_line(value, "Book declaration field", _FIELD_FORBIDDEN)
            for value in (book.osis_id, book.short_name, book.long_name)
        ]
        out.write(f"{abbr} = {_FIELD_SEPARATOR.join(fields)}\n")
        for number, chapter in enumerate(book.chapters, start=1):
            if chapter.prolog is not None:
                encode_unit(chapter.prolog, f"{abbr} {number} ", out)
                units += 1
            for verse in chapter.verses:
                verse_number = _check_single_line(verse.number, "Verse number", _VERSE_FORBIDDEN)
                encode_unit(verse.content, f"{abbr} {number}:{verse_number} ", out)
                units += 1
    logger.info("exported %d books, %d units", len(bible.books), units)


def dumps(bible: Bible) -> str:
    buf = io.StringIO()
    dump_bible(bible, buf)
    return buf.getvalue()


def write_bible(bible: Bible, path: Path) -> None:
    """Encode ``bible`` completely, then write it; a failed encode leaves ``path`` untouched."""
    write_text(dumps(bible), path)
