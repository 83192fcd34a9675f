"""Generation-time diagnostic codes and data structures.

Defines the codes, source locations and records used to report authoring
mistakes in annotated diagnostic types. These never reach run time.

Python 3.13+.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

__all__ = [
    "DeriveCode",
    "DeriveDiagnostic",
    "SourceLocation",
]


class DeriveCode(Enum):
    """Authoring error codes with unique identifiers.

    Organized by category:
        1000-1999: Attribute grammar (unknown names, malformed arguments)
        2000-2999: Field classification (role/type mismatches)
        3000-3999: Type shape (duplicate roles, missing keys, empty choices)
        4000-4999: Catalog (unresolved keys, placeholders, resource syntax)
    """

    # Attribute grammar (1000-1999)
    UNKNOWN_ATTRIBUTE = 1001
    MALFORMED_SLUG = 1002
    MALFORMED_CODE = 1003
    UNKNOWN_APPLICABILITY = 1004
    UNKNOWN_STYLE = 1005
    MALFORMED_TEMPLATE = 1006
    UNKNOWN_TEMPLATE_FIELD = 1007
    ATTRIBUTE_NOT_ALLOWED = 1008
    UNKNOWN_SEVERITY = 1009

    # Field classification (2000-2999)
    CONFLICTING_ATTRIBUTES = 2001
    LABEL_REQUIRES_LOCATION = 2002
    SUGGESTION_TYPE_INVALID = 2003
    UNKNOWN_APPLICABILITY_SOURCE = 2004
    NOTE_TYPE_INVALID = 2005
    SUBDIAGNOSTIC_TYPE_INVALID = 2006
    APPLICABILITY_TYPE_INVALID = 2007
    PRIMARY_SPAN_TYPE_INVALID = 2008
    SUGGESTION_PART_TYPE_INVALID = 2009
    UNRESOLVED_TYPE_HINTS = 2010

    # Type shape (3000-3999)
    NOT_A_DATACLASS = 3001
    DUPLICATE_PRIMARY_SPAN = 3002
    MISSING_SLUG = 3003
    MISSING_PRIMARY_SPAN = 3004
    MISSING_SUGGESTION_PARTS = 3005
    NO_VARIANTS = 3006
    DUPLICATE_APPLICABILITY = 3007

    # Catalog (4000-4999)
    UNKNOWN_MESSAGE_KEY = 4001
    UNKNOWN_SUBKEY = 4002
    UNKNOWN_PLACEHOLDER = 4003
    CATALOG_SYNTAX = 4004
    CATALOG_DUPLICATE_ENTRY = 4005


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Author source position of a type, field or catalog entry.

    Attributes:
        file: Source file path ("<unknown>" for dynamically created types)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    file: str
    line: int
    column: int = 1

    def __post_init__(self) -> None:
        """Validate SourceLocation invariants.

        Raises:
            ValueError: If line or column is less than 1 (both 1-indexed).
        """
        if self.line < 1:
            msg = f"SourceLocation.line must be >= 1 (1-indexed), got {self.line}"
            raise ValueError(msg)
        if self.column < 1:
            msg = f"SourceLocation.column must be >= 1 (1-indexed), got {self.column}"
            raise ValueError(msg)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class DeriveDiagnostic:
    """Structured report of one authoring mistake.

    Attributes:
        code: Unique error code
        message: Human-readable description of the violated constraint
        location: Where the offending attribute/field/type is declared
        type_name: Qualified name of the annotated type
        field_name: Offending field, None for type-level problems
        hint: Suggestion for fixing the declaration
        severity: "error" aborts generation; "warning" is logged only
    """

    code: DeriveCode
    message: str
    location: SourceLocation | None = None
    type_name: str | None = None
    field_name: str | None = None
    hint: str | None = None
    severity: Literal["error", "warning"] = "error"

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def format_error(self) -> str:
        """Format diagnostic like the Rust compiler.

        Example output:
            error[DUPLICATE_PRIMARY_SPAN]: field 'other' is a second primary span
              --> errors.py:14:5
              = type: MoveOutOfBorrow
              = field: other
              = help: Remove primary_span() from all but one field

        Returns:
            Formatted error message
        """
        from .formatter import DeriveFormatter  # noqa: PLC0415 - circular

        return DeriveFormatter().format(self)
