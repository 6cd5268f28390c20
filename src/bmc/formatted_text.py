"""Formatted text span tree shared by every Bible format.

A verse or chapter prolog is an ordered list of spans. Leaf spans carry
text or a marker; container spans own an ordered ``children`` list. Parents
own their children by value and nothing points back up the tree.

Span variants:
  Text                 : plain text run
  FormattingInstruction : bold/italic/... keyed by a one-letter code
  Headline             : headline of depth 1-9
  Footnote             : footnote body
  CrossReference       : link to a verse range in some book
  CssFormatting        : opaque CSS style string
  VerseSeparator       : marker between merged verses
  LineBreak            : paragraph / newline marker
  GrammarInformation   : Strong's numbers, morphology codes, source indices
  DictionaryEntry      : link into a named dictionary
  VariationText        : text belonging to named variant sets
  ExtraAttribute       : format-specific key/value attribute
  RawHtml              : opaque embedded markup
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal, TypeAlias


FormattingKind: TypeAlias = Literal[
    "BOLD",
    "ITALIC",
    "UNDERLINE",
    "LINK",
    "FOOTNOTE_LINK",
    "SUBSCRIPT",
    "SUPERSCRIPT",
    "DIVINE_NAME",
    "STRIKE_THROUGH",
    "WORDS_OF_JESUS",
]
LineBreakKind: TypeAlias = Literal["PARAGRAPH", "NEWLINE", "NEWLINE_WITH_INDENT"]
RawHtmlMode: TypeAlias = Literal["ONLINE", "OFFLINE", "BOTH"]
ExtraAttributePriority: TypeAlias = Literal["KEEP_CONTENT", "SKIP", "ERROR"]

FORMATTING_CODES: dict[str, FormattingKind] = {
    "b": "BOLD",
    "i": "ITALIC",
    "u": "UNDERLINE",
    "l": "LINK",
    "f": "FOOTNOTE_LINK",
    "s": "SUBSCRIPT",
    "p": "SUPERSCRIPT",
    "d": "DIVINE_NAME",
    "t": "STRIKE_THROUGH",
    "w": "WORDS_OF_JESUS",
}
FORMATTING_KIND_CODES: dict[FormattingKind, str] = {
    kind: code for code, kind in FORMATTING_CODES.items()
}
LINE_BREAK_KINDS: frozenset[str] = frozenset({"PARAGRAPH", "NEWLINE", "NEWLINE_WITH_INDENT"})
RAW_HTML_MODES: frozenset[str] = frozenset({"ONLINE", "OFFLINE", "BOTH"})
EXTRA_ATTRIBUTE_PRIORITIES: frozenset[str] = frozenset({"KEEP_CONTENT", "SKIP", "ERROR"})


# ---------------------------------------------------------------------------
# Leaf spans
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Text:
    text: str


@dataclass(slots=True)
class VerseSeparator:
    """Marks the boundary between two verses merged into one unit."""


@dataclass(slots=True)
class LineBreak:
    kind: LineBreakKind

    def __post_init__(self) -> None:
        if self.kind not in LINE_BREAK_KINDS:
            raise ValueError(f"unknown line break kind {self.kind!r}")


@dataclass(slots=True)
class RawHtml:
    """Opaque markup passed through uninterpreted."""

    mode: RawHtmlMode
    raw: str

    def __post_init__(self) -> None:
        if self.mode not in RAW_HTML_MODES:
            raise ValueError(f"unknown raw html mode {self.mode!r}")


# ---------------------------------------------------------------------------
# Container spans
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class FormattingInstruction:
    kind: FormattingKind
    children: list[Span] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.kind not in FORMATTING_KIND_CODES:
            raise ValueError(f"unknown formatting kind {self.kind!r}")

    @property
    def code(self) -> str:
        return FORMATTING_KIND_CODES[self.kind]


@dataclass(slots=True)
class Headline:
    depth: int
    children: list[Span] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 1 <= self.depth <= 9:
            raise ValueError(f"headline depth must be in [1, 9], got {self.depth}")


@dataclass(slots=True)
class Footnote:
    children: list[Span] = field(default_factory=list)


@dataclass(slots=True)
class CrossReference:
    """Reference to ``first_chapter:first_verse`` .. ``last_chapter:last_verse``.

    ``book_abbr`` is the abbreviation of the target book inside the same
    document; ``book_id`` is its canonical OSIS id.
    """

    book_abbr: str
    book_id: str
    first_chapter: int
    first_verse: str
    last_chapter: int
    last_verse: str
    children: list[Span] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.first_chapter < 1 or self.last_chapter < 1:
            raise ValueError(
                f"chapter numbers must be >= 1, got {self.first_chapter}:{self.last_chapter}",
            )


@dataclass(slots=True)
class CssFormatting:
    css: str
    children: list[Span] = field(default_factory=list)


@dataclass(slots=True)
class GrammarInformation:
    """Grammar annotation; every attribute list is optional.

    ``strongs_prefixes`` holds one prefix letter per Strong's number
    (e.g. ``"GH"``).
    """

    strongs_prefixes: str | None = None
    strongs: tuple[int, ...] | None = None
    rmac: tuple[str, ...] | None = None
    source_indices: tuple[int, ...] | None = None
    children: list[Span] = field(default_factory=list)


@dataclass(slots=True)
class DictionaryEntry:
    dictionary: str
    entry: str
    children: list[Span] = field(default_factory=list)


@dataclass(slots=True)
class VariationText:
    variations: tuple[str, ...]
    children: list[Span] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.variations:
            raise ValueError("variation text needs at least one variation name")


@dataclass(slots=True)
class ExtraAttribute:
    prio: ExtraAttributePriority
    category: str
    key: str
    value: str
    children: list[Span] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.prio not in EXTRA_ATTRIBUTE_PRIORITIES:
            raise ValueError(f"unknown extra attribute priority {self.prio!r}")


LeafSpan: TypeAlias = Text | VerseSeparator | LineBreak | RawHtml
ContainerSpan: TypeAlias = (
    FormattingInstruction
    | Headline
    | Footnote
    | CrossReference
    | CssFormatting
    | GrammarInformation
    | DictionaryEntry
    | VariationText
    | ExtraAttribute
)
Span: TypeAlias = LeafSpan | ContainerSpan

CONTAINER_TYPES: tuple[type, ...] = (
    FormattingInstruction,
    Headline,
    Footnote,
    CrossReference,
    CssFormatting,
    GrammarInformation,
    DictionaryEntry,
    VariationText,
    ExtraAttribute,
)


def is_container(span: Span) -> bool:
    return isinstance(span, CONTAINER_TYPES)


def iter_spans(spans: list[Span]) -> Iterator[Span]:
    """Depth-first pre-order walk over ``spans`` and all descendants."""
    for span in spans:
        yield span
        if isinstance(span, CONTAINER_TYPES):
            yield from iter_spans(span.children)


def span_to_dict(span: Span) -> dict[str, object]:
    """Serialize one span (recursively) to a deterministic JSON-safe dict."""

    payload: dict[str, object] = {"type": type(span).__name__}
    match span:
        case Text(text=text):
            payload["text"] = text
        case VerseSeparator():
            pass
        case LineBreak(kind=kind):
            payload["kind"] = kind
        case RawHtml(mode=mode, raw=raw):
            payload["mode"] = mode
            payload["raw"] = raw
        case FormattingInstruction(kind=kind):
            payload["kind"] = kind
        case Headline(depth=depth):
            payload["depth"] = depth
        case CrossReference():
            payload["book_abbr"] = span.book_abbr
            payload["book_id"] = span.book_id
            payload["first"] = f"{span.first_chapter}:{span.first_verse}"
            payload["last"] = f"{span.last_chapter}:{span.last_verse}"
        case CssFormatting(css=css):
            payload["css"] = css
        case GrammarInformation():
            payload["strongs_prefixes"] = span.strongs_prefixes
            payload["strongs"] = None if span.strongs is None else list(span.strongs)
            payload["rmac"] = None if span.rmac is None else list(span.rmac)
            payload["source_indices"] = (
                None if span.source_indices is None else list(span.source_indices)
            )
        case DictionaryEntry(dictionary=dictionary, entry=entry):
            payload["dictionary"] = dictionary
            payload["entry"] = entry
        case VariationText(variations=variations):
            payload["variations"] = list(variations)
        case ExtraAttribute():
            payload["prio"] = span.prio
            payload["category"] = span.category
            payload["key"] = span.key
            payload["value"] = span.value
    if isinstance(span, CONTAINER_TYPES):
        payload["children"] = [span_to_dict(child) for child in span.children]
    return payload


def merge_adjacent_text(spans: list[Span]) -> None:
    """Join neighbouring text runs of ``spans`` in place (one level only)."""
    idx = 1
    while idx < len(spans):
        prev, cur = spans[idx - 1], spans[idx]
        if isinstance(prev, Text) and isinstance(cur, Text):
            spans[idx - 1] = Text(prev.text + cur.text)
            del spans[idx]
        else:
            idx += 1
