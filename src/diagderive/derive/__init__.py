"""Generation-time pipeline: attributes, classification, shape analysis, codegen.

Python 3.13+.
"""

from .attributes import (
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
    warning,
)
from .codegen import compile_routine, generate_source
from .fields import FieldContext, FieldRole, FieldSpec, classify_field
from .session import DeriveSession
from .shape import (
    ChoiceDescriptor,
    FieldDescriptor,
    TypeDescriptor,
    analyze_choice,
    analyze_diagnostic,
    analyze_subdiagnostic,
    variant,
)

__all__ = [
    "ChoiceDescriptor",
    "DeriveSession",
    "FieldContext",
    "FieldDescriptor",
    "FieldRole",
    "FieldSpec",
    "TypeDescriptor",
    "analyze_choice",
    "analyze_diagnostic",
    "analyze_subdiagnostic",
    "applicability",
    "classify_field",
    "compile_routine",
    "generate_source",
    "help",
    "label",
    "multipart_suggestion",
    "note",
    "primary_span",
    "skip_arg",
    "subdiagnostic",
    "suggestion",
    "suggestion_part",
    "variant",
    "warning",
]
