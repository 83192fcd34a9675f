"""Message references and argument values.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Set as AbstractSet
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol, runtime_checkable

__all__ = [
    "DiagArgValue",
    "DiagMessage",
    "IntoDiagArg",
    "into_diag_arg",
]


@dataclass(frozen=True, slots=True)
class DiagMessage:
    """Catalog reference: a message key, optionally one of its sub-keys.

    Attributes:
        key: Catalog message identifier
        attr: Sub-key (Fluent attribute) of that message, or None

    Example:
        >>> DiagMessage("borrowck_move").with_subkey("label")
        DiagMessage(key='borrowck_move', attr='label')
        >>> str(DiagMessage("borrowck_move", "label"))
        'borrowck_move.label'
    """

    key: str
    attr: str | None = None

    def with_subkey(self, attr: str) -> DiagMessage:
        return DiagMessage(self.key, attr)

    def __str__(self) -> str:
        return self.key if self.attr is None else f"{self.key}.{self.attr}"


# Catalog-compatible argument values. Numbers stay numbers so the catalog can
# format them per locale and select plural variants; sequences become lists.
type DiagArgValue = str | int | float | Decimal | tuple[str, ...] | None


@runtime_checkable
class IntoDiagArg(Protocol):
    """Types that choose their own argument representation."""

    def into_diag_arg(self) -> DiagArgValue:
        """Convert to a catalog-compatible value."""
        ...  # pylint: disable=unnecessary-ellipsis


def into_diag_arg(value: object) -> DiagArgValue:
    """Convert a field value to a catalog-compatible argument.

    Conversion rules:
        - objects implementing IntoDiagArg decide themselves
        - None stays None
        - bool becomes "true"/"false"
        - enum members become their value's string
        - int, float and Decimal pass through
        - str passes through
        - lists, tuples and sets become tuples of strings
        - everything else is stringified

    Example:
        >>> into_diag_arg(3)
        3
        >>> into_diag_arg(["a", "b"])
        ('a', 'b')
    """
    if isinstance(value, IntoDiagArg):
        return value.into_diag_arg()
    match value:
        case None:
            return None
        case bool():
            return "true" if value else "false"
        case Enum():
            return str(value.value)
        case int() | float() | Decimal() | str():
            return value
        case list() | tuple() | AbstractSet():
            items = sorted(value, key=str) if isinstance(value, AbstractSet) else value
            return tuple(str(into_diag_arg(item)) for item in items)
    return str(value)
