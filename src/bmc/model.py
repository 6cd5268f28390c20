"""Bible / book / chapter / verse containers around formatted text."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from bmc.book_ids import is_known_book_id
from bmc.formatted_text import Span, iter_spans, span_to_dict


@dataclass(slots=True)
class Verse:
    """One verse; ``number`` is free-form (``"3"``, ``"3a"``, ``"1-2"``)."""

    number: str
    content: list[Span] = field(default_factory=list)


@dataclass(slots=True)
class Chapter:
    prolog: list[Span] | None = None
    verses: list[Verse] = field(default_factory=list)

    def verse_index(self, number: str) -> int:
        for idx, verse in enumerate(self.verses):
            if verse.number == number:
                return idx
        return -1

    def units(self) -> Iterator[list[Span]]:
        """Every span list owned by this chapter, prolog first."""
        if self.prolog is not None:
            yield self.prolog
        for verse in self.verses:
            yield verse.content


@dataclass(slots=True)
class Book:
    """A book bound to ``abbr`` within one document.

    ``abbr`` is the join key used by the diffable format and is independent
    of the canonical ``osis_id``.
    """

    abbr: str
    osis_id: str
    short_name: str
    long_name: str
    chapters: list[Chapter] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.abbr or any(ch.isspace() for ch in self.abbr):
            raise ValueError(f"book abbreviation must be a non-empty word, got {self.abbr!r}")
        if not is_known_book_id(self.osis_id):
            raise ValueError(f"unknown OSIS book id {self.osis_id!r}")

    def chapter(self, number: int) -> Chapter:
        """Return chapter ``number`` (1-based), creating missing chapters."""
        if number < 1:
            raise ValueError(f"chapter number must be >= 1, got {number}")
        while len(self.chapters) < number:
            self.chapters.append(Chapter())
        return self.chapters[number - 1]


@dataclass(slots=True)
class Bible:
    name: str
    books: list[Book] = field(default_factory=list)

    def book_position(self, book: Book) -> int:
        """Identity-based index of ``book`` in book order, ``-1`` when absent."""
        for idx, candidate in enumerate(self.books):
            if candidate is book:
                return idx
        return -1

    def remove_book(self, book: Book) -> None:
        idx = self.book_position(book)
        if idx >= 0:
            del self.books[idx]

    def units(self) -> Iterator[list[Span]]:
        for book in self.books:
            for chapter in book.chapters:
                yield from chapter.units()

    def iter_spans(self) -> Iterator[Span]:
        for unit in self.units():
            yield from iter_spans(unit)


def bible_to_dict(bible: Bible) -> dict[str, object]:
    """Serialize a whole document to a deterministic JSON-safe dict."""

    return {
        "name": bible.name,
        "books": [
            {
                "abbr": book.abbr,
                "osis_id": book.osis_id,
                "short_name": book.short_name,
                "long_name": book.long_name,
                "chapters": [
                    {
                        "number": number,
                        "prolog": (
                            None
                            if chapter.prolog is None
                            else [span_to_dict(span) for span in chapter.prolog]
                        ),
                        "verses": [
                            {
                                "number": verse.number,
                                "content": [span_to_dict(span) for span in verse.content],
                            }
                            for verse in chapter.verses
                        ],
                    }
                    for number, chapter in enumerate(book.chapters, start=1)
                ],
            }
            for book in bible.books
        ],
    }


def bible_stats(bible: Bible) -> dict[str, int]:
    chapters = sum(len(book.chapters) for book in bible.books)
    verses = sum(len(ch.verses) for book in bible.books for ch in book.chapters)
    prologs = sum(
        1 for book in bible.books for ch in book.chapters if ch.prolog is not None
    )
    return {
        "book_count": len(bible.books),
        "chapter_count": chapters,
        "verse_count": verses,
        "prolog_count": prologs,
        "span_count": sum(1 for _ in bible.iter_spans()),
    }
