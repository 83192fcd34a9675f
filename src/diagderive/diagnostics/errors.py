"""diagderive exception hierarchy with structured diagnostics.

All exceptions can carry DeriveDiagnostic objects for located, coded error
information.

Python 3.13+.
"""

from collections.abc import Iterable

from .codes import DeriveDiagnostic

__all__ = [
    "CatalogError",
    "CatalogSyntaxError",
    "DeriveError",
    "DiagnosticDeriveError",
]


class DeriveError(Exception):
    """Base exception for all diagderive errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | DeriveDiagnostic) -> None:
        """Initialize DeriveError.

        Args:
            message: Error message string OR DeriveDiagnostic object
        """
        if isinstance(message, DeriveDiagnostic):
            self.diagnostic: DeriveDiagnostic | None = message
            super().__init__(message.format_error())
        else:
            self.diagnostic = None
            super().__init__(message)


class DiagnosticDeriveError(DeriveError):
    """Generation failed for one or more annotated types.

    Raised by the derive session when a declaration is malformed. Carries
    every error collected for the failing type(s), not just the first, so
    an author can fix all of them in one pass.

    Attributes:
        diagnostics: All error-severity diagnostics, in discovery order
        type_names: Qualified names of the failing types, deduplicated
    """

    def __init__(self, diagnostics: Iterable[DeriveDiagnostic]) -> None:
        self.diagnostics: tuple[DeriveDiagnostic, ...] = tuple(diagnostics)
        self.type_names: tuple[str, ...] = tuple(
            dict.fromkeys(d.type_name for d in self.diagnostics if d.type_name)
        )
        if len(self.diagnostics) == 1:
            super().__init__(self.diagnostics[0])
            return
        from .formatter import DeriveFormatter  # noqa: PLC0415 - circular

        summary = f"{len(self.diagnostics)} errors while deriving diagnostics"
        super().__init__(summary + "\n" + DeriveFormatter().format_all(self.diagnostics))

    def for_type(self, type_name: str) -> tuple[DeriveDiagnostic, ...]:
        """Diagnostics attributed to one type."""
        return tuple(d for d in self.diagnostics if d.type_name == type_name)


class CatalogError(DeriveError):
    """Message catalog could not be loaded or queried."""


class CatalogSyntaxError(CatalogError):
    """Catalog resource contains unparseable entries.

    Attributes:
        diagnostics: One CATALOG_SYNTAX diagnostic per rejected entry
    """

    def __init__(self, diagnostics: Iterable[DeriveDiagnostic]) -> None:
        self.diagnostics: tuple[DeriveDiagnostic, ...] = tuple(diagnostics)
        from .formatter import DeriveFormatter  # noqa: PLC0415 - circular

        super().__init__(DeriveFormatter().format_all(self.diagnostics))
