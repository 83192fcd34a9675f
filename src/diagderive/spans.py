"""Source locations and edits consumed by generated routines.

The host compiler owns its span representation. diagderive ships a minimal
``Span`` so the library is usable standalone, and lets hosts register their
own span classes as location types so fields typed with them are classified
as locations.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

__all__ = [
    "Edit",
    "Span",
    "is_location_type",
    "location_types",
    "register_location_type",
]


@dataclass(frozen=True, slots=True, order=True)
class Span:
    """Half-open character range in one source file.

    Attributes:
        lo: Starting offset (inclusive)
        hi: Ending offset (exclusive)
        file: Source file name (empty for anonymous sources)

    Example:
        >>> Span(4, 9, "main.rs")
        Span(lo=4, hi=9, file='main.rs')
    """

    lo: int
    hi: int
    file: str = ""

    def __post_init__(self) -> None:
        """Validate span invariants.

        Raises:
            ValueError: If lo is negative or hi precedes lo.
        """
        if self.lo < 0:
            msg = f"Span.lo must be >= 0, got {self.lo}"
            raise ValueError(msg)
        if self.hi < self.lo:
            msg = f"Span.hi ({self.hi}) must be >= lo ({self.lo})"
            raise ValueError(msg)

    def shrink_to_lo(self) -> Span:
        """Return the empty span at the start of this span."""
        return Span(self.lo, self.lo, self.file)

    def shrink_to_hi(self) -> Span:
        """Return the empty span at the end of this span."""
        return Span(self.hi, self.hi, self.file)


@dataclass(frozen=True, slots=True)
class Edit:
    """One replacement of a span's text, a single part of a suggestion.

    Attributes:
        span: Location being replaced (empty span for insertions)
        snippet: Replacement text
    """

    span: Span
    snippet: str

    @staticmethod
    def coerce(value: Edit | tuple[Span, str]) -> Edit:
        """Accept an Edit or a ``(span, snippet)`` pair.

        Raises:
            TypeError: If value is neither form.
        """
        if isinstance(value, Edit):
            return value
        match value:
            case (span, str() as snippet):
                return Edit(span, snippet)
        msg = f"Expected Edit or (span, str) pair, got {type(value).__name__}"
        raise TypeError(msg)


_registry_lock = Lock()
_location_types: list[type] = [Span]


def register_location_type(cls: type) -> type:
    """Register a host span class as a location type.

    Usable as a class decorator. Registration is idempotent.

    Args:
        cls: Host span class

    Returns:
        The class unchanged
    """
    with _registry_lock:
        if cls not in _location_types:
            _location_types.append(cls)
    return cls


def location_types() -> tuple[type, ...]:
    """Snapshot of the registered location types."""
    with _registry_lock:
        return tuple(_location_types)


def is_location_type(tp: object) -> bool:
    """Check whether a declared type denotes a source location."""
    return isinstance(tp, type) and issubclass(tp, location_types())
