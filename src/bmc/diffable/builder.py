"""Explicit span tree builder used by the decoder.

Every opened container gets an arena slot holding its child list; the
stack holds arena indices of the containers currently open, with slot 0
being the root unit. Appends always go to the child list on top of the
stack, so no span ever needs a handle back to its parent.
"""

from __future__ import annotations

from bmc.diffable.errors import StackUnderflowError, UnclosedTagError
from bmc.formatted_text import Span, Text, is_container


class SpanTreeBuilder:
    def __init__(self, root: list[Span] | None = None) -> None:
        self._root: list[Span] = root if root is not None else []
        self._arena: list[list[Span]] = [self._root]
        self._stack: list[int] = [0]

    @property
    def depth(self) -> int:
        """Number of open containers above the root."""
        return len(self._stack) - 1

    def _top(self) -> list[Span]:
        return self._arena[self._stack[-1]]

    def append_text(self, text: str) -> None:
        if not text:
            return
        children = self._top()
        if children and isinstance(children[-1], Text):
            children[-1] = Text(children[-1].text + text)
        else:
            children.append(Text(text))

    def append_leaf(self, span: Span) -> None:
        if isinstance(span, Text):
            self.append_text(span.text)
        else:
            self._top().append(span)

    def open(self, span: Span) -> None:
        if not is_container(span):
            raise TypeError(f"{type(span).__name__} cannot hold children")
        self._top().append(span)
        self._arena.append(span.children)  # type: ignore[union-attr]
        self._stack.append(len(self._arena) - 1)

    def close(self) -> None:
        if len(self._stack) == 1:
            raise StackUnderflowError("Closing tag without matching opening tag")
        self._stack.pop()

    def finish(self, content: str) -> list[Span]:
        """Return the root list; fails when containers are still open."""
        if len(self._stack) > 1:
            raise UnclosedTagError(content, self.depth)
        return self._root
