"""Diffable text format: one verse per line, formatting as HTML-like tags.

Every verse is put on its own line (similar to VPL); headlines and line
breaks continue on extra lines with the same address. The format is meant
for fixing and editing modules with ordinary text tools and diffs.
"""

from bmc.diffable.builder import SpanTreeBuilder
from bmc.diffable.decoder import decode_content
from bmc.diffable.directives import BookIndex, drop_book_xrefs, rename_book_in_xrefs
from bmc.diffable.encoder import (
    dump_bible,
    dumps,
    encode_spans,
    encode_unit,
    raw_marker,
    write_bible,
)
from bmc.diffable.errors import (
    DiffableError,
    InvalidHeaderError,
    MalformedDeclarationError,
    MalformedLineError,
    MalformedNumericFieldError,
    MalformedTagError,
    MissingArgumentError,
    StackUnderflowError,
    UnclosedTagError,
    UnclosedTagMarkerError,
    UnknownBookIdError,
    UnknownBookReferenceError,
    UnencodableValueError,
    UnsupportedAttributeValueError,
    UnsupportedTagError,
)
from bmc.diffable.grammar import HEADER_MAGIC, TagSpec, lookup_tag, spec_for_span
from bmc.diffable.reader import load, loads, parse_address, read_bible
from bmc.diffable.tokenizer import RawBlockToken, TagToken, TextToken, read_tag, tokenize

__all__ = [
    "BookIndex",
    "DiffableError",
    "HEADER_MAGIC",
    "InvalidHeaderError",
    "MalformedDeclarationError",
    "MalformedLineError",
    "MalformedNumericFieldError",
    "MalformedTagError",
    "MissingArgumentError",
    "RawBlockToken",
    "SpanTreeBuilder",
    "StackUnderflowError",
    "TagSpec",
    "TagToken",
    "TextToken",
    "UnclosedTagError",
    "UnclosedTagMarkerError",
    "UnknownBookIdError",
    "UnknownBookReferenceError",
    "UnencodableValueError",
    "UnsupportedAttributeValueError",
    "UnsupportedTagError",
    "decode_content",
    "drop_book_xrefs",
    "dump_bible",
    "dumps",
    "encode_spans",
    "encode_unit",
    "load",
    "loads",
    "lookup_tag",
    "parse_address",
    "raw_marker",
    "read_bible",
    "read_tag",
    "rename_book_in_xrefs",
    "spec_for_span",
    "tokenize",
    "write_bible",
]
