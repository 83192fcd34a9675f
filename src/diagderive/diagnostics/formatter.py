"""Authoring diagnostic formatting service.

Turns generation-time DeriveDiagnostic records into text for exception
messages and logs. This formats authoring errors only; diagnostics built by
generated routines are rendered by the host's sink.

Python 3.13+.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from .codes import DeriveDiagnostic

__all__ = [
    "DeriveFormatter",
    "OutputFormat",
]


class OutputFormat(StrEnum):
    """Output format options for authoring diagnostics."""

    RUST = "rust"  # Rust compiler-style output (default)
    SIMPLE = "simple"  # Single-line format


@dataclass(frozen=True, slots=True)
class DeriveFormatter:
    """Authoring diagnostic formatting service.

    Attributes:
        output_format: Output style (rust, simple)
        color: Enable ANSI color codes (for terminal output)

    Example:
        >>> formatter = DeriveFormatter()
        >>> print(formatter.format(ErrorTemplate.missing_slug("Foo")))
        error[MISSING_SLUG]: 'Foo' declares no message key
          = help: Pass the catalog key as the first decorator argument

        >>> formatter = DeriveFormatter(output_format=OutputFormat.SIMPLE)
        >>> print(formatter.format(ErrorTemplate.missing_slug("Foo")))
        MISSING_SLUG: 'Foo' declares no message key
    """

    output_format: OutputFormat = OutputFormat.RUST
    color: bool = False

    def format(self, diagnostic: DeriveDiagnostic) -> str:
        """Format a single diagnostic.

        Args:
            diagnostic: Diagnostic to format

        Returns:
            Formatted diagnostic string
        """
        match self.output_format:
            case OutputFormat.RUST:
                return self._format_rust(diagnostic)
            case OutputFormat.SIMPLE:
                return self._format_simple(diagnostic)

    def format_all(self, diagnostics: Iterable[DeriveDiagnostic]) -> str:
        """Format multiple diagnostics separated by blank lines."""
        return "\n\n".join(self.format(d) for d in diagnostics)

    def _format_rust(self, diagnostic: DeriveDiagnostic) -> str:
        """Format diagnostic in Rust compiler style.

        Example output:
            error[UNKNOWN_SUBKEY]: Sub-key '.label' not found in message 'foo'
              --> errors.py:12:5
              = type: Foo
              = field: span
              = help: Add '.label = ...' under 'foo' in the catalog
        """
        severity = diagnostic.severity
        if self.color:
            if severity == "error":
                severity_str = f"\033[1;31m{severity}\033[0m"  # Bold red
            else:
                severity_str = f"\033[1;33m{severity}\033[0m"  # Bold yellow
        else:
            severity_str = severity

        parts = [f"{severity_str}[{diagnostic.code.name}]: {diagnostic.message}"]

        if diagnostic.location is not None:
            parts.append(f"  --> {diagnostic.location}")

        if diagnostic.type_name:
            parts.append(f"  = type: {diagnostic.type_name}")

        if diagnostic.field_name:
            parts.append(f"  = field: {diagnostic.field_name}")

        if diagnostic.hint:
            parts.append(f"  = help: {diagnostic.hint}")

        return "\n".join(parts)

    def _format_simple(self, diagnostic: DeriveDiagnostic) -> str:
        """Format diagnostic in single-line format.

        Example output:
            MISSING_SLUG: 'Foo' declares no message key (errors.py:3:1)
        """
        line = f"{diagnostic.code.name}: {diagnostic.message}"
        if diagnostic.location is not None:
            line += f" ({diagnostic.location})"
        return line
