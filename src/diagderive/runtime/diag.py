"""Reference diagnostic builder.

``Diag`` is the concrete DiagnosticBuilder produced by ``DiagCtxt``. It only
records what routines attach; turning it into text is the host's concern.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Self

from diagderive.enums import Applicability, Severity, SuggestionStyle
from diagderive.spans import Edit

from .message import DiagArgValue, DiagMessage, into_diag_arg

if TYPE_CHECKING:
    from .protocols import AddToDiagnostic, DiagnosticSink

__all__ = [
    "CodeSuggestion",
    "Diag",
    "SpanLabel",
    "SubDiagnostic",
]

type Message = DiagMessage | str
type Args = Mapping[str, DiagArgValue]

_NO_ARGS: Args = MappingProxyType({})


def _freeze_args(args: Mapping[str, object] | None) -> Args:
    if not args:
        return _NO_ARGS
    return MappingProxyType({name: into_diag_arg(value) for name, value in args.items()})


@dataclass(frozen=True, slots=True)
class SpanLabel:
    """Secondary location with its own message."""

    span: object
    message: Message
    args: Args = field(default=_NO_ARGS)


@dataclass(frozen=True, slots=True)
class SubDiagnostic:
    """Note, help or warning attached under the main message.

    Attributes:
        severity: NOTE, HELP or WARNING
        message: Sub-message reference or literal text
        span: Location the sub-message points at, None for free-standing text
        args: Arguments scoped to this sub-message
    """

    severity: Severity
    message: Message
    span: object | None = None
    args: Args = field(default=_NO_ARGS)


@dataclass(frozen=True, slots=True)
class CodeSuggestion:
    """Suggested edit(s) with presentation and confidence.

    Attributes:
        edits: Replacements in declaration order
        message: Text describing the suggestion's intent
        applicability: Whether tools may apply it automatically
        style: Presentation hint
        args: Arguments scoped to this suggestion
    """

    edits: tuple[Edit, ...]
    message: Message
    applicability: Applicability
    style: SuggestionStyle = SuggestionStyle.NORMAL
    args: Args = field(default=_NO_ARGS)

    @property
    def is_multipart(self) -> bool:
        return len(self.edits) > 1


class Diag:
    """Diagnostic under construction.

    Every builder method returns the diagnostic so calls can be chained.

    Example:
        >>> diag = ctxt.create_diagnostic(Severity.ERROR, DiagMessage("borrowck_move"))
        >>> diag.code("E0505").span(span).arg("name", "x").emit()
    """

    __slots__ = (
        "_args",
        "_emitted",
        "_sink",
        "children",
        "labels",
        "message",
        "primary_span",
        "severity",
        "stable_code",
        "suggestions",
    )

    def __init__(self, sink: DiagnosticSink, severity: Severity, message: Message) -> None:
        self._sink = sink
        self._emitted = False
        self._args: dict[str, DiagArgValue] = {}
        self.severity = severity
        self.message = message
        self.stable_code: str | None = None
        self.primary_span: object | None = None
        self.labels: list[SpanLabel] = []
        self.suggestions: list[CodeSuggestion] = []
        self.children: list[SubDiagnostic] = []

    def __repr__(self) -> str:
        return (
            f"Diag(severity={self.severity!s}, message={self.message!s}, "
            f"code={self.stable_code})"
        )

    # ------------------------------------------------------------------
    # Builder operations
    # ------------------------------------------------------------------

    def code(self, code: str) -> Self:
        self.stable_code = code
        return self

    def span(self, span: object) -> Self:
        self.primary_span = span
        return self

    def span_label(
        self, span: object, message: Message, *, args: Mapping[str, object] | None = None
    ) -> Self:
        self.labels.append(SpanLabel(span, message, _freeze_args(args)))
        return self

    def arg(self, name: str, value: object) -> Self:
        """Register a named argument for the main message and its sub-keys.

        Registering the same name again overwrites the earlier value.
        """
        self._args[name] = into_diag_arg(value)
        return self

    def span_suggestion(
        self,
        span: object,
        message: Message,
        snippet: str,
        applicability: Applicability,
        style: SuggestionStyle = SuggestionStyle.NORMAL,
        *,
        args: Mapping[str, object] | None = None,
    ) -> Self:
        edit = Edit(span, snippet)  # type: ignore[arg-type]
        self.suggestions.append(
            CodeSuggestion((edit,), message, applicability, style, _freeze_args(args))
        )
        return self

    def multipart_suggestion(
        self,
        message: Message,
        edits: Iterable[Edit | tuple[object, str]],
        applicability: Applicability,
        style: SuggestionStyle = SuggestionStyle.NORMAL,
        *,
        args: Mapping[str, object] | None = None,
    ) -> Self:
        parts = tuple(Edit.coerce(edit) for edit in edits)  # type: ignore[arg-type]
        self.suggestions.append(
            CodeSuggestion(parts, message, applicability, style, _freeze_args(args))
        )
        return self

    def note(self, message: Message, *, args: Mapping[str, object] | None = None) -> Self:
        return self._child(Severity.NOTE, message, None, args)

    def span_note(
        self, span: object, message: Message, *, args: Mapping[str, object] | None = None
    ) -> Self:
        return self._child(Severity.NOTE, message, span, args)

    def help(self, message: Message, *, args: Mapping[str, object] | None = None) -> Self:
        return self._child(Severity.HELP, message, None, args)

    def span_help(
        self, span: object, message: Message, *, args: Mapping[str, object] | None = None
    ) -> Self:
        return self._child(Severity.HELP, message, span, args)

    def warn(
        self,
        message: Message,
        span: object | None = None,
        *,
        args: Mapping[str, object] | None = None,
    ) -> Self:
        return self._child(Severity.WARNING, message, span, args)

    def subdiagnostic(self, delta: AddToDiagnostic) -> Self:
        """Attach a derived or hand-written delta onto this diagnostic."""
        delta.add_to_diagnostic(self)
        return self

    def emit(self) -> None:
        """Hand the diagnostic to its sink.

        Raises:
            RuntimeError: If the diagnostic was already emitted
        """
        if self._emitted:
            msg = f"Diagnostic {self.message!s} was already emitted"
            raise RuntimeError(msg)
        self._emitted = True
        self._sink.emit_diagnostic(self)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def args(self) -> Args:
        """Read-only view of the registered arguments."""
        return MappingProxyType(self._args)

    @property
    def is_emitted(self) -> bool:
        return self._emitted

    def _child(
        self,
        severity: Severity,
        message: Message,
        span: object | None,
        args: Mapping[str, object] | None,
    ) -> Self:
        self.children.append(SubDiagnostic(severity, message, span, _freeze_args(args)))
        return self
