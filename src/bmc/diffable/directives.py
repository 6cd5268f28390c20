"""Book-level header and directive lines.

Directive syntax (fields separated by single spaces)::

    ABBR = OSISID<TAB>short name<TAB>long name    declare / redeclare
    ABBR -> DEST                                  merge ABBR into DEST
    ABBR -> -                                     delete ABBR
    ABBR ^^ DEST                                  move ABBR before DEST

A declaration is the current binding of an abbreviation, not a permanent
identity: redeclaring an abbreviation moves the old book's chapters onto
the new book and drops the old book.
"""

from __future__ import annotations

import logging

from bmc.book_ids import is_known_book_id
from bmc.diffable.errors import (
    MalformedDeclarationError,
    UnknownBookIdError,
    UnknownBookReferenceError,
)
from bmc.formatted_text import CONTAINER_TYPES, CrossReference, Span, merge_adjacent_text
from bmc.model import Bible, Book

logger = logging.getLogger(__name__)

DECLARE = "="
MERGE = "->"
REORDER = "^^"
DELETE_TARGET = "-"
DIRECTIVE_OPERATORS: frozenset[str] = frozenset({DECLARE, MERGE, REORDER})


# ---------------------------------------------------------------------------
# Cross reference rewriting
# ---------------------------------------------------------------------------

def _rewrite_xrefs(spans: list[Span], old_abbr: str, new_abbr: str | None, book_id: str | None) -> int:
    """Retarget (or, with ``new_abbr=None``, unwrap) xrefs naming ``old_abbr``."""
    changed = 0
    unwrapped = False
    idx = 0
    while idx < len(spans):
        span = spans[idx]
        if isinstance(span, CONTAINER_TYPES):
            changed += _rewrite_xrefs(span.children, old_abbr, new_abbr, book_id)
        if isinstance(span, CrossReference) and span.book_abbr == old_abbr:
            changed += 1
            if new_abbr is None:
                spans[idx:idx + 1] = span.children
                idx += len(span.children)
                unwrapped = True
                continue
            span.book_abbr = new_abbr
            if book_id is not None:
                span.book_id = book_id
        idx += 1
    if unwrapped:
        merge_adjacent_text(spans)
    return changed


def rename_book_in_xrefs(bible: Bible, old_abbr: str, new_abbr: str, book_id: str | None = None) -> int:
    """Point every xref naming ``old_abbr`` at ``new_abbr``; returns the count."""
    return sum(_rewrite_xrefs(unit, old_abbr, new_abbr, book_id) for unit in bible.units())


def drop_book_xrefs(bible: Bible, abbr: str) -> int:
    """Unwrap xrefs naming ``abbr``, keeping their content in place."""
    return sum(_rewrite_xrefs(unit, abbr, None, None) for unit in bible.units())


# ---------------------------------------------------------------------------
# Book index
# ---------------------------------------------------------------------------

class BookIndex:
    """Current abbreviation bindings of a document being imported."""

    def __init__(self, bible: Bible) -> None:
        self.bible = bible
        self._by_abbr: dict[str, Book] = {}

    def resolve(self, abbr: str, role: str = "book") -> Book:
        book = self._by_abbr.get(abbr)
        if book is None:
            raise UnknownBookReferenceError(abbr, role)
        return book

    def declare(self, abbr: str, fields: str) -> Book:
        """Bind ``abbr`` to a new book built from ``OSISID\\tshort\\tlong``."""
        parts = fields.split("\t")
        if len(parts) != 3:
            raise MalformedDeclarationError(
                f"Malformed declaration line (not 3 fields): {fields}",
            )
        osis_id, short_name, long_name = parts
        if not is_known_book_id(osis_id):
            raise UnknownBookIdError(f"Unknown book ID: {osis_id}")
        try:
            new_book = Book(abbr=abbr, osis_id=osis_id, short_name=short_name, long_name=long_name)
        except ValueError as exc:
            raise MalformedDeclarationError(f"Invalid book declaration for {abbr!r}: {exc}") from exc
        self.bible.books.append(new_book)
        old_book = self._by_abbr.get(abbr)
        if old_book is not None:
            new_book.chapters.extend(old_book.chapters)
            self.bible.remove_book(old_book)
            logger.debug("redeclared %s (%s -> %s)", abbr, old_book.osis_id, osis_id)
        self._by_abbr[abbr] = new_book
        return new_book

    def merge(self, abbr: str, dest: str) -> None:
        """Append ``abbr``'s chapters to ``dest`` (or delete it for ``-``)."""
        book = self.resolve(abbr)
        if dest == DELETE_TARGET:
            dropped = drop_book_xrefs(self.bible, abbr)
            logger.debug("deleted %s (%d xrefs unwrapped)", abbr, dropped)
        else:
            dest_book = self.resolve(dest, "destination book")
            if dest_book is book:
                logger.warning("ignoring merge of %s into itself", abbr)
                return
            renamed = rename_book_in_xrefs(self.bible, abbr, dest, dest_book.osis_id)
            dest_book.chapters.extend(book.chapters)
            logger.debug("merged %s into %s (%d xrefs renamed)", abbr, dest, renamed)
        self.bible.remove_book(book)
        del self._by_abbr[abbr]

    def reorder(self, abbr: str, dest: str) -> None:
        """Move ``abbr`` to just before ``dest`` in book order."""
        book = self.resolve(abbr)
        dest_book = self.resolve(dest, "destination book")
        if dest_book is book:
            logger.warning("ignoring reorder of %s before itself", abbr)
            return
        self.bible.remove_book(book)
        self.bible.books.insert(self.bible.book_position(dest_book), book)
        logger.debug("moved %s before %s", abbr, dest)

    def apply(self, abbr: str, operator: str, argument: str) -> None:
        """Dispatch one header/directive line already split into fields."""
        if operator == DECLARE:
            self.declare(abbr, argument)
        elif operator == MERGE:
            self.merge(abbr, argument)
        elif operator == REORDER:
            self.reorder(abbr, argument)
        else:
            raise ValueError(f"not a directive operator: {operator!r}")
