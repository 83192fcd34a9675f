"""Derive configuration.

A single frozen dataclass carries every generation-time option so the derive
session and the analyzer share one typed object.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass

from diagderive.enums import Severity

__all__ = ["DeriveConfig"]


@dataclass(frozen=True, slots=True)
class DeriveConfig:
    """Immutable configuration for diagnostic generation.

    Constructing ``DeriveConfig()`` with no arguments produces a usable
    configuration. Pass an instance to ``DeriveSession(catalog, config=...)``.

    Attributes:
        default_severity: Severity for diagnostics whose declaration gives
            none and whose caller passes none (default: error).
        implicit_primary_span: Promote the first unannotated location field
            to the primary location when no field claims it (default: True).
        strict_placeholders: Treat catalog placeholders that no field of the
            type provides as errors instead of logged warnings
            (default: False). Sub-diagnostic slots and custom code can supply
            arguments the analyzer cannot see, so the check is advisory by
            default.
        register_linecache: Register generated source with ``linecache`` so
            tracebacks through generated routines show their code
            (default: True).

    Example:
        >>> config = DeriveConfig(default_severity=Severity.WARNING)
        >>> session = DeriveSession(catalog, config=config)
    """

    default_severity: Severity = Severity.ERROR
    implicit_primary_span: bool = True
    strict_placeholders: bool = False
    register_linecache: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        String values ("warning") are stored as their Severity member.

        Raises:
            ValueError: If default_severity is not a Severity value.
        """
        try:
            severity = Severity(self.default_severity)
        except ValueError:
            msg = f"default_severity must be a Severity, got {self.default_severity!r}"
            raise ValueError(msg) from None
        object.__setattr__(self, "default_severity", severity)
