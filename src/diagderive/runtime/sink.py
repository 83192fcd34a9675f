"""Reference diagnostic sink.

``DiagCtxt`` allocates ``Diag`` builders, collects emitted diagnostics and,
when given a catalog, renders their messages. Compiler hosts usually bring
their own sink; this one backs tests and small tools.

Thread Safety:
    emit_diagnostic() appends under a Lock, so several threads may emit into
    one context.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from threading import Lock
from typing import TYPE_CHECKING

from diagderive.enums import Severity

from .diag import Diag
from .message import DiagMessage

if TYPE_CHECKING:
    from diagderive.catalog import MessageCatalog

    from .protocols import IntoDiagnostic

__all__ = ["DiagCtxt"]

logger = logging.getLogger(__name__)


class DiagCtxt:
    """Collects diagnostics emitted by derived and hand-written routines.

    Example:
        >>> ctxt = DiagCtxt(catalog)
        >>> ctxt.emit_err(MoveOutOfBorrow(span=span, name="x"))
        >>> ctxt.err_count
        1
    """

    __slots__ = ("_catalog", "_emitted", "_lock")

    def __init__(self, catalog: MessageCatalog | None = None) -> None:
        self._catalog = catalog
        self._emitted: list[Diag] = []
        self._lock = Lock()

    # ------------------------------------------------------------------
    # DiagnosticSink
    # ------------------------------------------------------------------

    def create_diagnostic(self, severity: Severity, message: DiagMessage | str) -> Diag:
        return Diag(self, severity, message)

    def emit_diagnostic(self, diag: Diag) -> None:  # type: ignore[override]
        with self._lock:
            self._emitted.append(diag)
        logger.debug("Emitted %s: %s", diag.severity, diag.message)

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    def create_err(self, value: IntoDiagnostic) -> Diag:
        return value.into_diagnostic(self, Severity.ERROR)  # type: ignore[return-value]

    def create_warn(self, value: IntoDiagnostic) -> Diag:
        return value.into_diagnostic(self, Severity.WARNING)  # type: ignore[return-value]

    def emit(self, value: IntoDiagnostic) -> None:
        """Build with the type's own severity and emit."""
        value.into_diagnostic(self).emit()

    def emit_err(self, value: IntoDiagnostic) -> None:
        self.create_err(value).emit()

    def emit_warn(self, value: IntoDiagnostic) -> None:
        self.create_warn(value).emit()

    def emit_note(self, value: IntoDiagnostic) -> None:
        value.into_diagnostic(self, Severity.NOTE).emit()

    @property
    def emitted(self) -> tuple[Diag, ...]:
        with self._lock:
            return tuple(self._emitted)

    @property
    def err_count(self) -> int:
        return sum(1 for diag in self.emitted if diag.severity is Severity.ERROR)

    @property
    def warn_count(self) -> int:
        return sum(1 for diag in self.emitted if diag.severity is Severity.WARNING)

    def has_errors(self) -> bool:
        return self.err_count > 0

    def clear(self) -> None:
        with self._lock:
            self._emitted.clear()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def translate(
        self, message: DiagMessage | str, args: Mapping[str, object] | None = None
    ) -> str:
        """Render one message reference with the given arguments.

        Literal strings pass through. Without a catalog, references render as
        their dotted key.
        """
        if isinstance(message, str):
            return message
        if self._catalog is None:
            return str(message)
        return self._catalog.format(message.key, message.attr, args)

    def render_message(self, diag: Diag) -> str:
        """Main message of a diagnostic with its own arguments substituted."""
        return self.translate(diag.message, diag.args)

    def render(self, diag: Diag) -> list[str]:
        """Flatten a diagnostic into display lines.

        Sub-parts render with their scoped arguments layered over the
        diagnostic's own.
        """
        head = f"{diag.severity}"
        if diag.stable_code is not None:
            head += f"[{diag.stable_code}]"
        lines = [f"{head}: {self.render_message(diag)}"]
        if diag.primary_span is not None:
            lines.append(f"  --> {diag.primary_span}")
        for label in diag.labels:
            text = self.translate(label.message, {**diag.args, **label.args})
            lines.append(f"  {label.span}: {text}")
        for child in diag.children:
            text = self.translate(child.message, {**diag.args, **child.args})
            where = "" if child.span is None else f" ({child.span})"
            lines.append(f"  = {child.severity}{where}: {text}")
        for suggestion in diag.suggestions:
            text = self.translate(suggestion.message, {**diag.args, **suggestion.args})
            edits = ", ".join(f"{edit.span} -> {edit.snippet!r}" for edit in suggestion.edits)
            lines.append(f"  = suggestion ({suggestion.applicability}): {text}: {edits}")
        return lines
