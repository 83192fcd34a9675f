"""Declared-type decomposition.

Splits a resolved field annotation into its base type and cardinality
(``T``, ``T | None``, ``list[T]`` ...) so the classifier can reason about
roles without re-walking typing constructs.

Python 3.13+.
"""

from __future__ import annotations

import types
import typing
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Union, get_args, get_origin

from diagderive.enums import Applicability, Container
from diagderive.spans import Edit, is_location_type

__all__ = [
    "TypeShape",
    "analyze_type",
    "is_applicability_type",
    "is_edit_type",
    "is_located_applicability",
    "split_annotated",
    "type_repr",
]

_SEQUENCE_ORIGINS = (list, tuple, Sequence)


@dataclass(frozen=True, slots=True)
class TypeShape:
    """Base type of a field and how many values it holds.

    Attributes:
        base: Element type (``Span`` for ``list[Span] | None``)
        container: ONE, OPTIONAL or SEQUENCE
        nullable: True when None is accepted (always True for OPTIONAL)
    """

    base: object
    container: Container = Container.ONE
    nullable: bool = False

    @property
    def is_location(self) -> bool:
        return is_location_type(self.base)


def split_annotated(hint: object) -> tuple[object, tuple[object, ...]]:
    """Separate an ``Annotated`` hint into (type, metadata).

    Metadata is also lifted out of union members and sequence element types,
    so ``Annotated[Span, label()] | None`` and ``list[Annotated[Span, label()]]``
    read the same as ``Annotated[Span | None, label()]`` and
    ``Annotated[list[Span], label()]``. Outer metadata comes first. Nested
    Annotated is flattened by typing itself.
    """
    metadata: tuple[object, ...] = ()
    if get_origin(hint) is Annotated:
        metadata = tuple(hint.__metadata__)  # type: ignore[attr-defined]
        hint = hint.__origin__  # type: ignore[attr-defined]
    inner, lifted = _lift_nested(hint)
    return inner, metadata + lifted


def _lift_nested(hint: object) -> tuple[object, tuple[object, ...]]:
    origin = get_origin(hint)
    args = get_args(hint)
    if origin is Union or origin is types.UnionType:
        members: list[object] = []
        lifted: list[object] = []
        for arg in args:
            member, found = split_annotated(arg)
            members.append(member)
            lifted.extend(found)
        if not lifted:
            return hint, ()
        return typing.Union[tuple(members)], tuple(lifted)  # noqa: UP007 - dynamic union

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            element, found = split_annotated(args[0])
            if found:
                return tuple[element, ...], found  # type: ignore[valid-type]
    elif origin in _SEQUENCE_ORIGINS and len(args) == 1:
        element, found = split_annotated(args[0])
        if found:
            return origin[element], found  # type: ignore[index]
    return hint, ()


def _strip_none(hint: object) -> tuple[object, bool]:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        nullable = len(members) != len(get_args(hint))
        if len(members) == 1:
            return members[0], nullable
        if nullable:
            return typing.Union[tuple(members)], True  # noqa: UP007 - dynamic union
    return hint, False


def analyze_type(hint: object) -> TypeShape:
    """Decompose a declared field type.

    Example:
        >>> analyze_type(list[Span] | None)
        TypeShape(base=<class 'Span'>, container=<Container.SEQUENCE: 'sequence'>, nullable=True)
        >>> analyze_type(tuple[Span, Applicability]).container
        <Container.ONE: 'one'>
    """
    hint, _ = split_annotated(hint)
    inner, nullable = _strip_none(hint)
    origin = get_origin(inner)
    args = get_args(inner)

    if origin in _SEQUENCE_ORIGINS:
        if origin is tuple:
            # Only homogeneous tuple[T, ...] is a sequence; fixed tuples are values.
            if len(args) == 2 and args[1] is Ellipsis:
                return TypeShape(args[0], Container.SEQUENCE, nullable)
        elif len(args) == 1:
            return TypeShape(args[0], Container.SEQUENCE, nullable)

    container = Container.OPTIONAL if nullable else Container.ONE
    return TypeShape(inner, container, nullable)


def is_applicability_type(base: object) -> bool:
    return isinstance(base, type) and issubclass(base, Applicability)


def is_located_applicability(base: object) -> bool:
    """``tuple[Span, Applicability]``: a location paired with its applicability."""
    args = get_args(base)
    return (
        get_origin(base) is tuple
        and len(args) == 2
        and is_location_type(args[0])
        and is_applicability_type(args[1])
    )


def is_edit_type(base: object) -> bool:
    """``Edit`` or ``tuple[Span, str]``."""
    if base is Edit:
        return True
    args = get_args(base)
    return (
        get_origin(base) is tuple
        and len(args) == 2
        and is_location_type(args[0])
        and args[1] is str
    )


def type_repr(hint: object) -> str:
    """Readable name of a declared type for error messages."""
    if isinstance(hint, type) and not get_args(hint):
        return hint.__qualname__
    return repr(hint).replace("typing.", "")
