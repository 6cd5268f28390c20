"""Tests for the diffable encoder."""

from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from bmc.diffable.encoder import dumps, encode_spans, encode_unit, raw_marker, write_bible
from bmc.diffable.errors import UnencodableValueError, UnsupportedAttributeValueError
from bmc.formatted_text import (
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
from bmc.model import Bible, Book, Chapter, Verse


def _unit(spans: list[Span], prefix: str = "Gen 1:1 ") -> str:
    buf = io.StringIO()
    encode_unit(spans, prefix, buf)
    return buf.getvalue()


class TestSpanMarkup:
    def test_bold(self) -> None:
        assert encode_spans([FormattingInstruction("BOLD", [Text("God")])]) == "<b>God</>"

    def test_text_escapes_only_lt(self) -> None:
        assert encode_spans([Text('a<b > "c" & d')]) == 'a<<>b > "c" & d'

    def test_nested(self) -> None:
        spans: list[Span] = [
            Footnote([Text("Or "), FormattingInstruction("ITALIC", [Text("when")])]),
        ]
        assert encode_spans(spans) == "<fn>Or <i>when</></>"

    def test_leaves_self_close(self) -> None:
        assert encode_spans([VerseSeparator()]) == "<vs/>"
        assert encode_spans([LineBreak("PARAGRAPH")]) == '<br kind="PARAGRAPH"/>'

    def test_grammar_attributes(self) -> None:
        span = GrammarInformation(
            strongs_prefixes="G",
            strongs=(2316,),
            rmac=("N-NSM",),
            source_indices=(3,),
            children=[Text("God")],
        )
        assert encode_spans([span]) == '<grammar strong="2316" strongpfx="G" rmac="N-NSM" idx="3">God</>'

    def test_grammar_without_optional_lists(self) -> None:
        span = GrammarInformation(rmac=("V-PAI-3S", "X"))
        assert encode_spans([span]) == '<grammar strong="" rmac="V-PAI-3S,X" idx=""></>'

    def test_xref(self) -> None:
        span = CrossReference("Exo", "Exod", 3, "14", 3, "15", [Text("see")])
        assert encode_spans([span]) == '<xref abbr="Exo" id="Exod" chapters="3:3" verses="14:15">see</>'

    def test_other_containers(self) -> None:
        spans: list[Span] = [
            CssFormatting("color: red", [Text("r")]),
            DictionaryEntry("strongs", "H430", [Text("d")]),
            VariationText(("A", "B"), [Text("v")]),
            ExtraAttribute("SKIP", "osis", "type", "x-note", [Text("e")]),
        ]
        assert encode_spans(spans) == (
            '<css style="color: red">r</>'
            '<dict dictionary="strongs" entry="H430">d</>'
            '<var vars="A,B">v</>'
            '<extra prio="SKIP" category="osis" key="type" value="x-note">e</>'
        )

    def test_double_quote_in_attribute_is_rejected(self) -> None:
        with pytest.raises(UnsupportedAttributeValueError):
            encode_spans([CssFormatting('font-family: "Times"', [Text("x")])])

    def test_line_break_in_attribute_is_rejected(self) -> None:
        with pytest.raises(UnsupportedAttributeValueError):
            encode_spans([DictionaryEntry("strongs", "H430\nH431", [Text("x")])])

    def test_list_separator_in_item_is_rejected(self) -> None:
        with pytest.raises(UnsupportedAttributeValueError):
            encode_spans([VariationText(("a,b",), [Text("v")])])
        with pytest.raises(UnsupportedAttributeValueError):
            encode_spans([GrammarInformation(rmac=("N-NSM,X",))])

    def test_range_separator_in_xref_verse_is_rejected(self) -> None:
        with pytest.raises(UnsupportedAttributeValueError):
            encode_spans([CrossReference("Gen", "Gen", 1, "1:2", 1, "3")])


class TestUnencodableValues:
    def test_line_break_in_text_is_rejected(self) -> None:
        for text in ("a\nb", "a\rb", "trailing\n"):
            with pytest.raises(UnencodableValueError):
                encode_spans([Text(text)])

    def test_line_break_in_nested_text_is_rejected(self) -> None:
        with pytest.raises(UnencodableValueError):
            encode_spans([Footnote([Text("one\ntwo")])])

    def test_line_break_in_raw_payload_is_rejected(self) -> None:
        with pytest.raises(UnencodableValueError):
            encode_spans([RawHtml("BOTH", "<p>\n</p>")])

    def test_attribute_error_is_an_encode_error(self) -> None:
        assert issubclass(UnsupportedAttributeValueError, UnencodableValueError)

    def test_text_with_newline_never_reaches_output(self) -> None:
        bible = Bible(
            "T",
            [Book("Gen", "Gen", "Genesis", "Genesis", [Chapter(verses=[Verse("1", [Text("a\nb")])])])],
        )
        with pytest.raises(UnencodableValueError):
            dumps(bible)

    def test_declaration_fields_are_checked(self) -> None:
        for short_name, long_name in (("Gen\tesis", "Genesis"), ("Genesis", "Gene\nsis")):
            bible = Bible("T", [Book("Gen", "Gen", short_name, long_name)])
            with pytest.raises(UnencodableValueError):
                dumps(bible)

    def test_document_name_is_checked(self) -> None:
        with pytest.raises(UnencodableValueError):
            dumps(Bible("Two\nLines"))

    def test_verse_number_with_space_is_rejected(self) -> None:
        bible = Bible(
            "T",
            [Book("Gen", "Gen", "Genesis", "Genesis", [Chapter(verses=[Verse("1 a", [Text("x")])])])],
        )
        with pytest.raises(UnencodableValueError):
            dumps(bible)


class TestRawBlocks:
    def test_marker_is_smallest_free_number(self) -> None:
        assert raw_marker("plain") == 1
        assert raw_marker("x</raw:1>y") == 2
        assert raw_marker("</raw:1></raw:2>") == 3
        assert raw_marker("</raw:2>") == 1

    def test_marker_is_deterministic(self) -> None:
        payload = "<p>x</raw:1></raw:2></p>"
        assert raw_marker(payload) == raw_marker(payload) == 3

    def test_raw_block_markup(self) -> None:
        span = RawHtml("BOTH", "<p>x</raw:1></p>")
        assert encode_spans([span]) == '<raw:2 mode="BOTH"><p>x</raw:1></p></raw:2>'


class TestUnitLines:
    def test_single_line(self) -> None:
        assert _unit([Text("In the beginning")]) == "Gen 1:1 In the beginning\n"

    def test_empty_unit(self) -> None:
        assert _unit([]) == "Gen 1:1 \n"

    def test_leading_headline_gets_own_line(self) -> None:
        spans: list[Span] = [Headline(1, [Text("Title")]), Text("Verse text")]
        assert _unit(spans) == "Gen 1:1 <h1>Title</>\nGen 1:1 Verse text\n"

    def test_headline_inside_content_splits_both_sides(self) -> None:
        spans: list[Span] = [Text("a"), Headline(2, [Text("H")]), Text("b")]
        assert _unit(spans, "P ") == "P a\nP <h2>H</>\nP b\n"

    def test_consecutive_headlines(self) -> None:
        spans: list[Span] = [Headline(1, [Text("A")]), Headline(2, [Text("B")]), Text("c")]
        assert _unit(spans, "P ") == "P <h1>A</>\nP <h2>B</>\nP c\n"

    def test_line_break_continues_on_new_line(self) -> None:
        spans: list[Span] = [Text("a"), LineBreak("NEWLINE"), Text("b")]
        assert _unit(spans, "P ") == 'P a<br kind="NEWLINE"/>\nP b\n'

    def test_trailing_line_break_adds_no_line(self) -> None:
        spans: list[Span] = [Text("a"), LineBreak("PARAGRAPH")]
        assert _unit(spans, "P ") == 'P a<br kind="PARAGRAPH"/>\n'

    def test_nested_headline_does_not_split(self) -> None:
        spans: list[Span] = [Footnote([Headline(1, [Text("x")]), LineBreak("NEWLINE")])]
        assert _unit(spans, "P ") == 'P <fn><h1>x</><br kind="NEWLINE"/></>\n'


class TestDocumentExport:
    def test_single_verse_document(self) -> None:
        bible = Bible(
            "Test",
            [
                Book(
                    "Gen",
                    "Gen",
                    "Genesis",
                    "Genesis",
                    [Chapter(verses=[Verse("1", [Text("In the beginning")])])],
                ),
            ],
        )
        assert dumps(bible) == (
            "BibleMultiConverter-1.0 Title: Test\n"
            "Gen = Gen\tGenesis\tGenesis\n"
            "Gen 1:1 In the beginning\n"
        )

    def test_prolog_and_chapter_numbers(self) -> None:
        bible = Bible(
            "Test",
            [
                Book(
                    "Exo",
                    "Exod",
                    "Exodus",
                    "Second Book of Moses",
                    [
                        Chapter(verses=[Verse("1", [Text("one")])]),
                        Chapter(
                            prolog=[Headline(1, [Text("Chapter two")])],
                            verses=[Verse("3a", [Text("three")])],
                        ),
                    ],
                ),
            ],
        )
        assert dumps(bible).splitlines() == [
            "BibleMultiConverter-1.0 Title: Test",
            "Exo = Exod\tExodus\tSecond Book of Moses",
            "Exo 1:1 one",
            "Exo 2 <h1>Chapter two</>",
            "Exo 2:3a three",
        ]

    def test_write_bible(self, tmp_path: Path) -> None:
        bible = Bible("T", [Book("Gen", "Gen", "Genesis", "Genesis")])
        out = tmp_path / "out" / "bible.txt"
        write_bible(bible, out)
        assert out.read_text(encoding="utf-8") == (
            "BibleMultiConverter-1.0 Title: T\nGen = Gen\tGenesis\tGenesis\n"
        )

    def test_failed_write_keeps_existing_file(self, tmp_path: Path) -> None:
        out = tmp_path / "bible.txt"
        out.write_text("previous content\n", encoding="utf-8")
        bible = Bible(
            "T",
            [
                Book(
                    "Gen",
                    "Gen",
                    "G",
                    "G",
                    [
                        Chapter(
                            verses=[
                                Verse("1", [Text("ok")]),
                                Verse("2", [ExtraAttribute("SKIP", "osis", "type", 'a"b', [Text("x")])]),
                            ],
                        ),
                    ],
                ),
            ],
        )
        with pytest.raises(UnsupportedAttributeValueError):
            write_bible(bible, out)
        assert out.read_text(encoding="utf-8") == "previous content\n"

    def test_failed_write_creates_no_file(self, tmp_path: Path) -> None:
        out = tmp_path / "bible.txt"
        bible = Bible(
            "T",
            [Book("Gen", "Gen", "G", "G", [Chapter(verses=[Verse("1", [Text("a\nb")])])])],
        )
        with pytest.raises(UnencodableValueError):
            write_bible(bible, out)
        assert not out.exists()
