"""Typed failures raised while reading or writing the diffable format."""

from __future__ import annotations


class DiffableError(ValueError):
    """Base class for every diffable format failure.

    The line router attaches the offending physical line (and its 1-based
    number) before re-raising, so ``str(exc)`` always names the input that
    caused the failure.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.line: str | None = None
        self.line_number: int | None = None

    def attach_line(self, line: str, line_number: int) -> None:
        if self.line is None:
            self.line = line
            self.line_number = line_number

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (while parsing line {self.line_number}: {self.line})"


class InvalidHeaderError(DiffableError):
    """First line is missing or lacks the format magic."""


class MalformedLineError(DiffableError):
    """Line does not have the ``ABBR FIELD REST`` shape."""


class MalformedDeclarationError(DiffableError):
    """Book declaration does not have exactly three tab-separated fields."""


class UnknownBookIdError(DiffableError):
    """Canonical OSIS book id is not in the catalogue."""


class UnknownBookReferenceError(DiffableError):
    """Abbreviation used before any declaration bound it."""

    def __init__(self, abbr: str, role: str = "book") -> None:
        super().__init__(f"Unknown {role} abbreviation (declaration line missing?): {abbr}")
        self.abbr = abbr


class MalformedNumericFieldError(DiffableError):
    """Chapter, verse or index field is not a valid integer."""


class MalformedTagError(DiffableError):
    """Tag header attribute syntax is broken."""


class UnclosedTagMarkerError(DiffableError):
    """No ``>`` (or no raw block closing marker) after a tag start."""


class UnclosedTagError(DiffableError):
    """Content string ended with spans still open."""

    def __init__(self, content: str, open_count: int) -> None:
        super().__init__(f"Unclosed tags ({open_count} still open): {content}")
        self.content = content
        self.open_count = open_count


class StackUnderflowError(DiffableError):
    """Closing tag without a matching open span."""


class MissingArgumentError(DiffableError):
    def __init__(self, tag: str, missing: str, supplied: dict[str, str]) -> None:
        super().__init__(f"Missing argument {missing} in {tag} tag with args: {supplied}")
        self.tag = tag
        self.missing = missing
        self.supplied = dict(supplied)


class UnsupportedTagError(DiffableError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"Unsupported tag: {tag}")
        self.tag = tag


class UnencodableValueError(DiffableError):
    """Value cannot be written without breaking the line or field structure.

    Raised while encoding, e.g. for text containing a line break or a
    declaration field containing a tab.
    """


class UnsupportedAttributeValueError(UnencodableValueError):
    """Attribute value contains a character its attribute syntax cannot express."""
