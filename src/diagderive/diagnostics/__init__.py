"""Generation-time diagnostic system.

Provides coded, located reports of authoring mistakes in annotated diagnostic
types, the exceptions that carry them, and a Rust-style formatter.

Python 3.13+.
"""

from .codes import DeriveCode, DeriveDiagnostic, SourceLocation
from .errors import (
    CatalogError,
    CatalogSyntaxError,
    DeriveError,
    DiagnosticDeriveError,
)
from .formatter import DeriveFormatter, OutputFormat
from .templates import ErrorTemplate

__all__ = [
    "CatalogError",
    "CatalogSyntaxError",
    "DeriveCode",
    "DeriveDiagnostic",
    "DeriveError",
    "DeriveFormatter",
    "DiagnosticDeriveError",
    "ErrorTemplate",
    "OutputFormat",
    "SourceLocation",
]
