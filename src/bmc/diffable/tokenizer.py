"""Tag tokenizer: splits one content string into text runs and tags."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeAlias

from bmc.diffable.errors import MalformedNumericFieldError, MalformedTagError, UnclosedTagMarkerError
from bmc.diffable.grammar import RAW_TAG_PREFIX, is_raw_tag, parse_int, raw_closing_marker


# Tag header runs up to the first ``>`` that is not inside a quoted value.
_TAG_RE = re.compile(r'<((?:[^>"]|"[^"]*")*)>')
_ARG_RE = re.compile(r'\s*([^\s="]+)="([^"]*)"')


@dataclass(frozen=True, slots=True)
class TextToken:
    text: str


@dataclass(frozen=True, slots=True)
class TagToken:
    """Opening, closing or self-closing tag."""

    name: str
    args: dict[str, str]
    closing: bool
    self_closing: bool


@dataclass(frozen=True, slots=True)
class RawBlockToken:
    """``<raw:N mode="...">payload</raw:N>`` with the payload taken verbatim."""

    name: str
    args: dict[str, str]
    payload: str


Token: TypeAlias = TextToken | TagToken | RawBlockToken


def _parse_args(text: str, header: str) -> dict[str, str]:
    args: dict[str, str] = {}
    pos = 0
    while pos < len(text):
        m = _ARG_RE.match(text, pos)
        if m is None:
            if text[pos:].strip():
                raise MalformedTagError(f"Malformed tag: <{header}>")
            break
        args[m.group(1)] = m.group(2)
        pos = m.end()
    return args


def read_tag(content: str, pos: int) -> tuple[TagToken | RawBlockToken, int]:
    """Read the tag starting at ``content[pos] == '<'``.

    Returns the token and the position just after it. Raw blocks consume
    their payload and closing marker as part of the same token.
    """

    m = _TAG_RE.match(content, pos)
    if m is None:
        raise UnclosedTagMarkerError(f"Unclosed tag: {content[pos:]}")
    header = m.group(1)
    end = m.end()

    body = header
    self_closing = len(body) > 1 and body.endswith("/")
    if self_closing:
        body = body[:-1]
    name, _, rest = body.partition(" ")
    args = _parse_args(rest, header)
    closing = name.startswith("/")

    if closing or not is_raw_tag(name):
        token = TagToken(
            name=name,
            args=args,
            closing=closing,
            self_closing=self_closing,
        )
        return token, end

    marker_number = parse_int(name[len(RAW_TAG_PREFIX):], "raw block marker")
    if marker_number < 1:
        raise MalformedNumericFieldError(f"Raw block marker must be >= 1: {name}")
    marker = raw_closing_marker(name)
    marker_pos = content.find(marker, end)
    if marker_pos < 0:
        raise UnclosedTagMarkerError(f"Missing {marker} for raw block: {content[pos:]}")
    block_end = marker_pos + len(marker)
    raw_token = RawBlockToken(
        name=name,
        args=args,
        payload=content[end:marker_pos],
    )
    return raw_token, block_end


def tokenize(content: str) -> Iterator[Token]:
    """Yield text runs and tags of ``content`` in order."""
    pos = 0
    while True:
        lt = content.find("<", pos)
        if lt < 0:
            break
        if lt > pos:
            yield TextToken(text=content[pos:lt])
        token, pos = read_tag(content, lt)
        yield token
    if pos < len(content):
        yield TextToken(text=content[pos:])
