"""Derive session: the decorator front end.

A session binds a message catalog and a configuration. Each decorator runs
the pipeline for one class (classification, shape analysis, catalog checks,
code generation) and installs the generated routine on it:

    - ``@session.diagnostic(slug, ...)`` adds ``into_diagnostic(sink, severity=None)``
    - ``@session.subdiagnostic(kind)`` adds ``add_to_diagnostic(diag)``
    - ``@session.diagnostic_choice`` / ``@session.subdiagnostic_choice`` do the
      same for every nested ``@variant(...)`` class

Errors abort generation for the type with DiagnosticDeriveError. Inside
``session.batch()`` they are collected instead and raised together when the
batch closes, so one run reports every broken declaration.

Thread Safety:
    A session is meant to be used at import time from one thread. Batch
    state is per session, not per thread.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from diagderive.config import DeriveConfig
from diagderive.diagnostics import DeriveDiagnostic, DiagnosticDeriveError, ErrorTemplate
from diagderive.enums import DescriptorKind, Severity

from .attributes import SubdiagnosticKindAttr, diagnostic_attr
from .codegen import compile_routine
from .fields import CHOICE_ATTRIBUTE
from .shape import (
    ChoiceDescriptor,
    TypeDescriptor,
    analyze_choice,
    analyze_diagnostic,
    analyze_subdiagnostic,
)
from .source import anchor

if TYPE_CHECKING:
    from diagderive.catalog import MessageCatalog

__all__ = ["DESCRIPTOR_ATTRIBUTE", "SOURCE_ATTRIBUTE", "DeriveSession"]

logger = logging.getLogger(__name__)

# Attributes set on every derived class.
DESCRIPTOR_ATTRIBUTE = "__diagnostic_descriptor__"
SOURCE_ATTRIBUTE = "__diagnostic_source__"


class DeriveSession:
    """Generates diagnostic construction routines checked against a catalog.

    Example:
        >>> session = DeriveSession(MessageCatalog.from_source(FTL))
        >>> @session.diagnostic("borrowck_move", code="E0505")
        ... @dataclass
        ... class MoveOutOfBorrow:
        ...     span: Annotated[Span, primary_span()]
        ...     first: Annotated[Span, label()]
        ...     name: str
        >>> ctxt = DiagCtxt(session.catalog)
        >>> ctxt.emit_err(MoveOutOfBorrow(span, first, "x"))
    """

    __slots__ = ("_batch", "_catalog", "_config")

    def __init__(self, catalog: MessageCatalog, *, config: DeriveConfig | None = None) -> None:
        """Initialize a session.

        Args:
            catalog: Catalog every referenced message key must resolve in
            config: Generation options (default: DeriveConfig())
        """
        self._catalog = catalog
        self._config = config or DeriveConfig()
        self._batch: list[DeriveDiagnostic] | None = None

    @property
    def catalog(self) -> MessageCatalog:
        return self._catalog

    @property
    def config(self) -> DeriveConfig:
        return self._config

    # ------------------------------------------------------------------
    # Decorators
    # ------------------------------------------------------------------

    def diagnostic[T: type](
        self,
        slug: str | None,
        *extras: object,
        code: str | None = None,
        severity: Severity | str | None = None,
    ) -> Callable[[T], T]:
        """Derive ``into_diagnostic`` for a dataclass.

        Args:
            slug: Catalog message key
            *extras: Type-level note()/help() markers
            code: Stable error code, e.g. "E0505"
            severity: Declared severity (default: config.default_severity)

        Raises:
            DiagnosticDeriveError: If the declaration is invalid (outside a batch)
        """
        attr = diagnostic_attr(slug, *extras, code=code, severity=severity)

        def derive(cls: T) -> T:
            result = analyze_diagnostic(cls, attr, self._config)
            return self._finish(cls, result)

        return derive

    def subdiagnostic[T: type](self, kind: SubdiagnosticKindAttr) -> Callable[[T], T]:
        """Derive ``add_to_diagnostic`` for a dataclass.

        Args:
            kind: label(), note(), help(), warning(), suggestion() or
                multipart_suggestion(), carrying the message key

        Raises:
            DiagnosticDeriveError: If the declaration is invalid (outside a batch)
        """

        def derive(cls: T) -> T:
            result = analyze_subdiagnostic(cls, kind, self._config)
            return self._finish(cls, result)

        return derive

    def diagnostic_choice[T: type](self, cls: T) -> T:
        """Derive ``into_diagnostic`` for every variant of a choice container."""
        result = analyze_choice(cls, DescriptorKind.DIAGNOSTIC, self._config)
        return self._finish_choice(cls, result)

    def subdiagnostic_choice[T: type](self, cls: T) -> T:
        """Derive ``add_to_diagnostic`` for every variant of a choice container.

        The container can then be used as the declared type of a
        subdiagnostic() field holding any of its variants.
        """
        result = analyze_choice(cls, DescriptorKind.SUBDIAGNOSTIC, self._config)
        return self._finish_choice(cls, result)

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Collect derive failures until the block exits.

        Types that derive cleanly inside the block are generated as usual;
        failing types are left untouched. Nested batches join the outer one.

        Raises:
            DiagnosticDeriveError: On exit, with every collected error
        """
        if self._batch is not None:
            yield
            return
        self._batch = []
        try:
            yield
        finally:
            collected, self._batch = self._batch, None
        if collected:
            raise DiagnosticDeriveError(collected)

    # ------------------------------------------------------------------
    # Catalog checks
    # ------------------------------------------------------------------

    def check_references(self, descriptor: TypeDescriptor) -> list[DeriveDiagnostic]:
        """Verify every key, sub-key and placeholder a descriptor uses.

        Returns:
            Anchored diagnostics; placeholder problems are warnings unless
            config.strict_placeholders is set
        """
        issues: list[DeriveDiagnostic] = []
        provided = set(descriptor.argument_names)
        locations = {f.name: f.location for f in descriptor.fields}
        missing_keys: set[str] = set()
        for ref in descriptor.references():
            key, attr = ref.message.key, ref.message.attr
            location = locations.get(ref.field_name or "", descriptor.location)
            found: list[DeriveDiagnostic] = []
            if not self._catalog.has_message(key):
                if key not in missing_keys:
                    missing_keys.add(key)
                    found.append(ErrorTemplate.unknown_message_key(key))
            elif attr is not None and not self._catalog.has_attribute(key, attr):
                found.append(ErrorTemplate.unknown_subkey(key, attr))
            else:
                unknown = self._catalog.variables(key, attr) - provided - ref.scoped_args
                found.extend(
                    ErrorTemplate.unknown_placeholder(
                        key, attr, name, strict=self._config.strict_placeholders
                    )
                    for name in sorted(unknown)
                )
            issues.extend(anchor(found, location, descriptor.type_name, ref.field_name))
        return issues

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _checked(self, descriptor: TypeDescriptor) -> list[DeriveDiagnostic]:
        issues = self.check_references(descriptor)
        for warning in (d for d in issues if not d.is_error):
            logger.warning("%s", warning.format_error())
        return [d for d in issues if d.is_error]

    def _finish[T: type](self, cls: T, result: TypeDescriptor | list[DeriveDiagnostic]) -> T:
        errors = result if isinstance(result, list) else self._checked(result)
        if errors:
            return self._fail(cls, errors)
        assert isinstance(result, TypeDescriptor)  # noqa: S101 - errors is empty
        self._install(cls, result)
        return cls

    def _finish_choice[T: type](
        self, cls: T, result: ChoiceDescriptor | list[DeriveDiagnostic]
    ) -> T:
        if isinstance(result, list):
            return self._fail(cls, result)
        errors = [error for variant in result.variants for error in self._checked(variant)]
        if errors:
            return self._fail(cls, errors)

        members = {
            member.__qualname__: member for member in vars(cls).values() if isinstance(member, type)
        }
        for descriptor in result.variants:
            self._install(members[descriptor.type_name], descriptor)
        setattr(cls, CHOICE_ATTRIBUTE, result)
        logger.debug("Derived choice %s with %d variants", result.type_name, len(result.variants))
        return cls

    def _install(self, cls: type, descriptor: TypeDescriptor) -> None:
        routine, source = compile_routine(
            descriptor,
            self._config.default_severity,
            register_linecache=self._config.register_linecache,
        )
        name = routine.__name__
        routine.__qualname__ = f"{cls.__qualname__}.{name}"
        routine.__module__ = cls.__module__
        setattr(cls, name, routine)
        setattr(cls, DESCRIPTOR_ATTRIBUTE, descriptor)
        setattr(cls, SOURCE_ATTRIBUTE, source)
        logger.debug("Derived %s.%s (%s)", descriptor.type_name, name, descriptor.slug)

    def _fail[T: type](self, cls: T, errors: list[DeriveDiagnostic]) -> T:
        if self._batch is None:
            raise DiagnosticDeriveError(errors)
        for error in errors:
            logger.error("%s", error.format_error())
        self._batch.extend(errors)
        return cls
