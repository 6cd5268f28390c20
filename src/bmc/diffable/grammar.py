"""Tag grammar of the diffable format, shared by encoder and decoder.

Each tag is described once by a ``TagSpec``: its required attributes,
whether it opens a container span, and the two conversions between
attribute dicts and span objects. The encoder looks specs up by
span type, the decoder by tag name, so both directions read the same
table.

Tag names::

    a-z        formatting instruction keyed by its one-letter code
    h1 .. h9   headline of that depth
    fn css grammar dict var extra xref    container spans
    vs br      self-closing leaves
    raw:N      raw block, payload runs verbatim up to ``</raw:N>``
    <          literal ``<`` (written as ``<<>``)
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeAlias

from bmc.book_ids import is_known_book_id
from bmc.diffable.errors import (
    MalformedNumericFieldError,
    MalformedTagError,
    MissingArgumentError,
    UnknownBookIdError,
    UnsupportedAttributeValueError,
)
from bmc.formatted_text import (
    FORMATTING_CODES,
    CrossReference,
    CssFormatting,
    DictionaryEntry,
    ExtraAttribute,
    Footnote,
    FormattingInstruction,
    GrammarInformation,
    Headline,
    LineBreak,
    RawHtml,
    Span,
    Text,
    VariationText,
    VerseSeparator,
)

HEADER_MAGIC = "BibleMultiConverter-1.0 Title: "
LITERAL_LT_TAG = "<"
ESCAPED_LT = f"<{LITERAL_LT_TAG}>"
CLOSING_TAG = "</>"
RAW_TAG_PREFIX = "raw:"
LIST_SEPARATOR = ","
RANGE_SEPARATOR = ":"

_HEADLINE_RE = re.compile(r"h[1-9]")

TagArgs: TypeAlias = dict[str, str]
EncodedTag: TypeAlias = tuple[str, list[tuple[str, str]]]


@dataclass(frozen=True, slots=True)
class TagSpec:
    """Grammar entry for one tag (or tag family)."""

    span_type: type
    decode: Callable[[str, TagArgs, str], Span]
    encode: Callable[[Span], EncodedTag]
    required: tuple[str, ...] = ()
    container: bool = True

    def validate(self, tag: str, args: TagArgs) -> None:
        for name in self.required:
            if name not in args:
                raise MissingArgumentError(tag, name, args)


# ---------------------------------------------------------------------------
# Attribute value helpers
# ---------------------------------------------------------------------------

def parse_int(value: str, what: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise MalformedNumericFieldError(f"Malformed {what}: {value!r}") from None


def _int_list(value: str, what: str) -> tuple[int, ...] | None:
    if not value:
        return None
    return tuple(parse_int(part, what) for part in value.split(LIST_SEPARATOR))


def _str_list(value: str) -> tuple[str, ...] | None:
    if not value:
        return None
    return tuple(value.split(LIST_SEPARATOR))


def _reject_separator(value: str, separator: str, what: str) -> str:
    if separator in value:
        raise UnsupportedAttributeValueError(
            f"{what} contains the separator {separator!r}: {value!r}",
        )
    return value


def _join(values: tuple[object, ...] | None, what: str) -> str:
    if values is None:
        return ""
    return LIST_SEPARATOR.join(_reject_separator(str(v), LIST_SEPARATOR, what) for v in values)


def _split_range(tag: str, args: TagArgs, name: str) -> tuple[str, str]:
    parts = args[name].split(RANGE_SEPARATOR)
    if len(parts) != 2:
        raise MalformedTagError(f'Malformed "{name}" argument in {tag} tag: {args}')
    return parts[0], parts[1]


# ---------------------------------------------------------------------------
# Per-tag conversions
# ---------------------------------------------------------------------------

def _decode_xref(tag: str, args: TagArgs, payload: str) -> Span:
    first_chapter, last_chapter = _split_range(tag, args, "chapters")
    first_verse, last_verse = _split_range(tag, args, "verses")
    if not is_known_book_id(args["id"]):
        raise UnknownBookIdError(f"Unknown book ID in xref: {args['id']}")
    return CrossReference(
        book_abbr=args["abbr"],
        book_id=args["id"],
        first_chapter=parse_int(first_chapter, "xref chapter"),
        first_verse=first_verse,
        last_chapter=parse_int(last_chapter, "xref chapter"),
        last_verse=last_verse,
    )


def _encode_xref(span: Span) -> EncodedTag:
    assert isinstance(span, CrossReference)
    first_verse = _reject_separator(span.first_verse, RANGE_SEPARATOR, "xref verse")
    last_verse = _reject_separator(span.last_verse, RANGE_SEPARATOR, "xref verse")
    return "xref", [
        ("abbr", span.book_abbr),
        ("id", span.book_id),
        ("chapters", f"{span.first_chapter}{RANGE_SEPARATOR}{span.last_chapter}"),
        ("verses", f"{first_verse}{RANGE_SEPARATOR}{last_verse}"),
    ]


def _decode_grammar(tag: str, args: TagArgs, payload: str) -> Span:
    return GrammarInformation(
        strongs_prefixes=args.get("strongpfx"),
        strongs=_int_list(args["strong"], "Strong's number"),
        rmac=_str_list(args["rmac"]),
        source_indices=_int_list(args["idx"], "source index"),
    )


def _encode_grammar(span: Span) -> EncodedTag:
    assert isinstance(span, GrammarInformation)
    attrs = [("strong", _join(span.strongs, "Strong's number"))]
    if span.strongs_prefixes is not None:
        attrs.append(("strongpfx", span.strongs_prefixes))
    attrs.append(("rmac", _join(span.rmac, "rmac code")))
    attrs.append(("idx", _join(span.source_indices, "source index")))
    return "grammar", attrs


def _decode_extra(tag: str, args: TagArgs, payload: str) -> Span:
    return ExtraAttribute(
        prio=args["prio"],  # type: ignore[arg-type]
        category=args["category"],
        key=args["key"],
        value=args["value"],
    )


def _encode_extra(span: Span) -> EncodedTag:
    assert isinstance(span, ExtraAttribute)
    return "extra", [
        ("prio", span.prio),
        ("category", span.category),
        ("key", span.key),
        ("value", span.value),
    ]


FORMATTING_SPEC = TagSpec(
    span_type=FormattingInstruction,
    decode=lambda tag, args, payload: FormattingInstruction(FORMATTING_CODES[tag]),
    encode=lambda span: (span.code, []),  # type: ignore[union-attr]
)

HEADLINE_SPEC = TagSpec(
    span_type=Headline,
    decode=lambda tag, args, payload: Headline(int(tag[1:])),
    encode=lambda span: (f"h{span.depth}", []),  # type: ignore[union-attr]
)

RAW_SPEC = TagSpec(
    span_type=RawHtml,
    decode=lambda tag, args, payload: RawHtml(args["mode"], payload),  # type: ignore[arg-type]
    encode=lambda span: (RAW_TAG_PREFIX, [("mode", span.mode)]),  # type: ignore[union-attr]
    required=("mode",),
    container=False,
)

LITERAL_LT_SPEC = TagSpec(
    span_type=Text,
    decode=lambda tag, args, payload: Text(LITERAL_LT_TAG),
    encode=lambda span: (LITERAL_LT_TAG, []),
    container=False,
)

_FIXED_TAGS: dict[str, TagSpec] = {
    LITERAL_LT_TAG: LITERAL_LT_SPEC,
    "fn": TagSpec(
        span_type=Footnote,
        decode=lambda tag, args, payload: Footnote(),
        encode=lambda span: ("fn", []),
    ),
    "css": TagSpec(
        span_type=CssFormatting,
        decode=lambda tag, args, payload: CssFormatting(args["style"]),
        encode=lambda span: ("css", [("style", span.css)]),  # type: ignore[union-attr]
        required=("style",),
    ),
    "vs": TagSpec(
        span_type=VerseSeparator,
        decode=lambda tag, args, payload: VerseSeparator(),
        encode=lambda span: ("vs", []),
        container=False,
    ),
    "br": TagSpec(
        span_type=LineBreak,
        decode=lambda tag, args, payload: LineBreak(args["kind"]),  # type: ignore[arg-type]
        encode=lambda span: ("br", [("kind", span.kind)]),  # type: ignore[union-attr]
        required=("kind",),
        container=False,
    ),
    "grammar": TagSpec(
        span_type=GrammarInformation,
        decode=_decode_grammar,
        encode=_encode_grammar,
        required=("strong", "rmac", "idx"),
    ),
    "dict": TagSpec(
        span_type=DictionaryEntry,
        decode=lambda tag, args, payload: DictionaryEntry(args["dictionary"], args["entry"]),
        encode=lambda span: (  # type: ignore[union-attr]
            "dict",
            [("dictionary", span.dictionary), ("entry", span.entry)],
        ),
        required=("dictionary", "entry"),
    ),
    "var": TagSpec(
        span_type=VariationText,
        decode=lambda tag, args, payload: VariationText(tuple(args["vars"].split(LIST_SEPARATOR))),
        encode=lambda span: ("var", [("vars", _join(span.variations, "variation name"))]),  # type: ignore[union-attr]
        required=("vars",),
    ),
    "extra": TagSpec(
        span_type=ExtraAttribute,
        decode=_decode_extra,
        encode=_encode_extra,
        required=("prio", "category", "key", "value"),
    ),
    "xref": TagSpec(
        span_type=CrossReference,
        decode=_decode_xref,
        encode=_encode_xref,
        required=("abbr", "id", "chapters", "verses"),
    ),
}

_SPEC_BY_TYPE: dict[type, TagSpec] = {
    spec.span_type: spec
    for spec in (*_FIXED_TAGS.values(), FORMATTING_SPEC, HEADLINE_SPEC, RAW_SPEC)
    if spec is not LITERAL_LT_SPEC
}


def lookup_tag(name: str) -> TagSpec | None:
    """Resolve a tag name to its grammar entry; ``None`` when unsupported."""
    spec = _FIXED_TAGS.get(name)
    if spec is not None:
        return spec
    if len(name) == 1:
        return FORMATTING_SPEC if name in FORMATTING_CODES else None
    if _HEADLINE_RE.fullmatch(name):
        return HEADLINE_SPEC
    if is_raw_tag(name):
        return RAW_SPEC
    return None


def spec_for_span(span: Span) -> TagSpec:
    """Grammar entry used to encode ``span`` (text runs have none)."""
    return _SPEC_BY_TYPE[type(span)]


def is_raw_tag(name: str) -> bool:
    return name.startswith(RAW_TAG_PREFIX)


def raw_closing_marker(name: str) -> str:
    return f"</{name}>"
