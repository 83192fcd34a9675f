"""Capability interfaces between generated code, custom types and sinks.

Generated routines depend only on DiagnosticSink and DiagnosticBuilder, never
on a concrete sink. Hand-written types opt out of the attribute pipeline by
implementing IntoDiagnostic (whole diagnostics) or AddToDiagnostic (deltas);
nothing has to inherit from anything.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

from diagderive.enums import Applicability, Severity, SuggestionStyle

if TYPE_CHECKING:
    from diagderive.spans import Edit

    from .message import DiagMessage

__all__ = [
    "AddToDiagnostic",
    "DiagnosticBuilder",
    "DiagnosticSink",
    "IntoDiagnostic",
]

# pylint: disable=unnecessary-ellipsis
# Reason: Ellipsis (...) is the standard Protocol method body per PEP 544


@runtime_checkable
class DiagnosticBuilder(Protocol):
    """Operations generated code performs on a diagnostic under construction.

    ``span`` values are host location objects; the builder does not inspect them.
    ``args`` on sub-part methods are scoped to that part.
    """

    def code(self, code: str) -> Self: ...

    def span(self, span: object) -> Self: ...

    def span_label(
        self,
        span: object,
        message: DiagMessage | str,
        *,
        args: Mapping[str, object] | None = None,
    ) -> Self: ...

    def arg(self, name: str, value: object) -> Self: ...

    def span_suggestion(
        self,
        span: object,
        message: DiagMessage | str,
        snippet: str,
        applicability: Applicability,
        style: SuggestionStyle = SuggestionStyle.NORMAL,
        *,
        args: Mapping[str, object] | None = None,
    ) -> Self: ...

    def multipart_suggestion(
        self,
        message: DiagMessage | str,
        edits: Iterable[Edit],
        applicability: Applicability,
        style: SuggestionStyle = SuggestionStyle.NORMAL,
        *,
        args: Mapping[str, object] | None = None,
    ) -> Self: ...

    def note(
        self, message: DiagMessage | str, *, args: Mapping[str, object] | None = None
    ) -> Self: ...

    def span_note(
        self,
        span: object,
        message: DiagMessage | str,
        *,
        args: Mapping[str, object] | None = None,
    ) -> Self: ...

    def help(
        self, message: DiagMessage | str, *, args: Mapping[str, object] | None = None
    ) -> Self: ...

    def span_help(
        self,
        span: object,
        message: DiagMessage | str,
        *,
        args: Mapping[str, object] | None = None,
    ) -> Self: ...

    def warn(
        self,
        message: DiagMessage | str,
        span: object | None = None,
        *,
        args: Mapping[str, object] | None = None,
    ) -> Self: ...

    def subdiagnostic(self, delta: AddToDiagnostic) -> Self: ...

    def emit(self) -> None: ...


@runtime_checkable
class DiagnosticSink(Protocol):
    """Allocates diagnostics and accumulates the emitted ones."""

    def create_diagnostic(
        self, severity: Severity, message: DiagMessage | str
    ) -> DiagnosticBuilder: ...

    def emit_diagnostic(self, diag: DiagnosticBuilder) -> None: ...


@runtime_checkable
class IntoDiagnostic(Protocol):
    """A type that can produce a whole diagnostic given a sink and severity.

    Derived diagnostics get a generated implementation; hand-written types
    implement it directly when the message, severity or sub-messages depend
    on run-time branching.
    """

    def into_diagnostic(
        self, sink: DiagnosticSink, severity: Severity | None = None
    ) -> DiagnosticBuilder: ...


@runtime_checkable
class AddToDiagnostic(Protocol):
    """A delta (label, note, help, suggestion) attachable to a diagnostic."""

    def add_to_diagnostic(self, diag: DiagnosticBuilder) -> None: ...
