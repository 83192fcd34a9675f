"""diagderive - derive structured compiler diagnostics from annotated dataclasses.

Authors declare the shape of a diagnostic as a dataclass whose fields carry
attribute markers in ``typing.Annotated``; a derive session turns each
declaration into a construction routine, checked against a Fluent message
catalog when the class is defined.

Public API:
    DeriveSession - Decorator front end (diagnostic, subdiagnostic, choices, batch)
    DeriveConfig - Generation options
    MessageCatalog - Fluent-subset catalog for key checks and placeholder substitution
    DiagCtxt - Reference sink collecting emitted diagnostics
    Span, Edit - Minimal location and replacement values
    primary_span, label, note, help, warning, suggestion, multipart_suggestion,
    suggestion_part, applicability, subdiagnostic, skip_arg, variant - Attribute markers

Exceptions:
    DeriveError - Base exception class
    DiagnosticDeriveError - Invalid diagnostic declarations
    CatalogError, CatalogSyntaxError - Unloadable catalog resources

Submodules:
    diagderive.derive - Classification, shape analysis and code generation
    diagderive.runtime - Sink/builder protocols and the reference implementation
    diagderive.catalog - FTL parser and message formatting
    diagderive.diagnostics - Coded generation-time errors and their formatter
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

from .catalog import MessageCatalog
from .config import DeriveConfig
from .derive import (
    DeriveSession,
    applicability,
    help,  # noqa: A004 - attribute name
    label,
    multipart_suggestion,
    note,
    primary_span,
    skip_arg,
    subdiagnostic,
    suggestion,
    suggestion_part,
    variant,
    warning,
)
from .diagnostics import CatalogError, CatalogSyntaxError, DeriveError, DiagnosticDeriveError
from .enums import Applicability, Severity, SuggestionStyle
from .runtime import (
    AddToDiagnostic,
    Diag,
    DiagCtxt,
    DiagMessage,
    DiagnosticBuilder,
    DiagnosticSink,
    IntoDiagArg,
    IntoDiagnostic,
)
from .spans import Edit, Span, register_location_type

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
try:
    __version__ = _get_version("diagderive")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "AddToDiagnostic",
    "Applicability",
    "CatalogError",
    "CatalogSyntaxError",
    "DeriveConfig",
    "DeriveError",
    "DeriveSession",
    "Diag",
    "DiagCtxt",
    "DiagMessage",
    "DiagnosticBuilder",
    "DiagnosticDeriveError",
    "DiagnosticSink",
    "Edit",
    "IntoDiagArg",
    "IntoDiagnostic",
    "MessageCatalog",
    "Severity",
    "Span",
    "SuggestionStyle",
    "__version__",
    "applicability",
    "help",
    "label",
    "multipart_suggestion",
    "note",
    "primary_span",
    "register_location_type",
    "skip_arg",
    "subdiagnostic",
    "suggestion",
    "suggestion_part",
    "variant",
    "warning",
]
