"""Hypothesis strategies for diagderive property-based testing.

Strategies are organized by domain:

- derive: synthetic annotated dataclasses and field values
- catalog: FTL message sources

Usage:
    from tests.strategies import diagnostic_fields, build_dataclass
    from tests.strategies.catalog import messages, render_message
"""

from .catalog import identifiers, messages, plain_text, render_message
from .derive import (
    build_dataclass,
    diagnostic_fields,
    field_names,
    plain_types,
    sample_value,
    spans,
    unique_names,
)

__all__ = [
    "build_dataclass",
    "diagnostic_fields",
    "field_names",
    "identifiers",
    "messages",
    "plain_text",
    "plain_types",
    "render_message",
    "sample_value",
    "spans",
    "unique_names",
]
