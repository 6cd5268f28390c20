"""Decoder: rebuilds a span list from one content string."""

from __future__ import annotations

from bmc.diffable.builder import SpanTreeBuilder
from bmc.diffable.errors import DiffableError, MalformedTagError, UnsupportedTagError
from bmc.diffable.grammar import TagSpec, lookup_tag
from bmc.diffable.tokenizer import RawBlockToken, TextToken, tokenize
from bmc.formatted_text import Span


def _build(spec: TagSpec, name: str, args: dict[str, str], payload: str) -> Span:
    spec.validate(name, args)
    try:
        return spec.decode(name, args, payload)
    except DiffableError:
        raise
    except ValueError as exc:
        raise MalformedTagError(f"Invalid arguments in {name} tag {args}: {exc}") from exc


def decode_content(content: str, target: list[Span] | None = None) -> list[Span]:
    """Decode tag markup into spans appended to ``target`` (or a new list).

    Text runs adjacent to existing text are merged, so ``A<<>B`` yields a
    single ``Text("A<B")``.
    """

    builder = SpanTreeBuilder(target)
    for token in tokenize(content):
        if isinstance(token, TextToken):
            builder.append_text(token.text)
            continue
        if isinstance(token, RawBlockToken):
            spec = lookup_tag(token.name)
            assert spec is not None
            builder.append_leaf(_build(spec, token.name, token.args, token.payload))
            continue
        if token.closing:
            builder.close()
            continue
        spec = lookup_tag(token.name)
        if spec is None:
            raise UnsupportedTagError(token.name)
        span = _build(spec, token.name, token.args, "")
        if spec.container and not token.self_closing:
            builder.open(span)
        else:
            builder.append_leaf(span)
    return builder.finish(content)
