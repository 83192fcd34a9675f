"""Enumerations for diagderive type-safe constants.

Uses StrEnum so members are strings themselves: attribute arguments may be
given either as the member or as its string value ("maybe-incorrect").

Python 3.13+.
"""

from enum import StrEnum


class Severity(StrEnum):
    """Level a diagnostic is emitted at.

    StrEnum provides automatic string conversion: str(Severity.ERROR) == "error"
    """

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    HELP = "help"


class Applicability(StrEnum):
    """Confidence that a suggested edit may be applied automatically."""

    MACHINE_APPLICABLE = "machine-applicable"
    """The edit is definitely what the user intended."""

    MAYBE_INCORRECT = "maybe-incorrect"
    """The edit may be what the user intended, but it is uncertain."""

    HAS_PLACEHOLDERS = "has-placeholders"
    """The edit contains placeholders like `(...)` the user must fill in."""

    UNSPECIFIED = "unspecified"
    """Applicability is unknown."""


class SuggestionStyle(StrEnum):
    """How a suggestion is presented to the user."""

    NORMAL = "normal"
    SHORT = "short"
    VERBOSE = "verbose"
    HIDDEN = "hidden"
    TOOL_ONLY = "tool-only"


class SubdiagnosticKind(StrEnum):
    """Kind of delta a derived sub-diagnostic attaches onto a diagnostic."""

    LABEL = "label"
    NOTE = "note"
    HELP = "help"
    WARNING = "warning"
    SUGGESTION = "suggestion"
    MULTIPART_SUGGESTION = "multipart_suggestion"


class DescriptorKind(StrEnum):
    """Whether a descriptor builds a whole diagnostic or a delta."""

    DIAGNOSTIC = "diagnostic"
    SUBDIAGNOSTIC = "subdiagnostic"


class Container(StrEnum):
    """Cardinality wrapper around a field's base type.

    ONE: ``T``; OPTIONAL: ``T | None``; SEQUENCE: ``list[T]``, ``tuple[T, ...]``
    or ``Sequence[T]`` (optionally ``| None``, treated as empty when None).
    """

    ONE = "one"
    OPTIONAL = "optional"
    SEQUENCE = "sequence"


class SuggestionSource(StrEnum):
    """Where a suggestion field's edit(s) come from.

    SPAN: the field holds the location; the replacement comes from ``code=``.
    SPAN_WITH_APPLICABILITY: the field holds ``(span, applicability)``.
    EDITS: the field holds a sequence of explicit ``Edit`` / ``(span, str)``.
    """

    SPAN = "span"
    SPAN_WITH_APPLICABILITY = "span-with-applicability"
    EDITS = "edits"


__all__ = [
    "Applicability",
    "Container",
    "DescriptorKind",
    "Severity",
    "SubdiagnosticKind",
    "SuggestionSource",
    "SuggestionStyle",
]
