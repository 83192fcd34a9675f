"""Attribute grammar for annotated diagnostic types.

Markers are small frozen dataclasses placed in ``typing.Annotated`` metadata
on dataclass fields, or passed to the derive decorators. They record raw
arguments only; ``check_*`` functions validate them and report problems as
DeriveDiagnostic values so the analyzer can collect every error of a type.

Example:
    >>> @session.diagnostic("borrowck_move", code="E0505")
    ... @dataclass
    ... class MoveOutOfBorrow:
    ...     span: Annotated[Span, primary_span(), label()]
    ...     name: str

Python 3.13+.
"""

from __future__ import annotations

import string
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from diagderive.constants import IDENTIFIER_PATTERN, STABLE_CODE_PATTERN
from diagderive.diagnostics import DeriveDiagnostic, ErrorTemplate
from diagderive.enums import Applicability, Severity, SuggestionStyle

# ruff: noqa: A001 - help() mirrors its attribute name
__all__ = [
    "ATTRIBUTE_NAMES",
    "SUBDIAGNOSTIC_KIND_TYPES",
    "ApplicabilityAttr",
    "Attribute",
    "DiagnosticAttr",
    "HelpAttr",
    "LabelAttr",
    "MultipartSuggestionAttr",
    "NoteAttr",
    "PrimarySpanAttr",
    "SkipArgAttr",
    "SubdiagnosticAttr",
    "SubdiagnosticKindAttr",
    "SuggestionAttr",
    "SuggestionPartAttr",
    "WarningAttr",
    "applicability",
    "check_code",
    "check_slug",
    "diagnostic_attr",
    "help",
    "label",
    "multipart_suggestion",
    "note",
    "parse_applicability",
    "parse_metadata",
    "parse_severity",
    "parse_style",
    "primary_span",
    "skip_arg",
    "subdiagnostic",
    "suggestion",
    "suggestion_part",
    "template_fields",
    "warning",
]


# ============================================================================
# MARKERS
# ============================================================================


@dataclass(frozen=True, slots=True)
class PrimarySpanAttr:
    """Field is the location the diagnostic is anchored at."""

    name = "primary_span"


@dataclass(frozen=True, slots=True)
class LabelAttr:
    """Secondary location with its own (sub-)message."""

    slug: str | None = None
    name = "label"


@dataclass(frozen=True, slots=True)
class NoteAttr:
    slug: str | None = None
    name = "note"


@dataclass(frozen=True, slots=True)
class HelpAttr:
    slug: str | None = None
    name = "help"


@dataclass(frozen=True, slots=True)
class WarningAttr:
    """Sub-diagnostic kind only: attaches a warning sub-message."""

    slug: str | None = None
    name = "warning"


@dataclass(frozen=True, slots=True)
class SuggestionAttr:
    """Suggested replacement.

    On a field, ``slug`` is a sub-key of the diagnostic's message. As a
    sub-diagnostic kind, it is a top-level key and the edit comes from the
    type's primary span.

    Attributes:
        slug: Message key or sub-key, None for the default sub-key
        code: Replacement text template with ``{field}`` placeholders
        style: SuggestionStyle member or its string value
        applicability: Applicability member or its string value, None when
            the applicability comes from a field or defaults to unspecified
        applicability_from: Sibling field holding the Applicability at run time
    """

    slug: str | None = None
    code: str | None = None
    style: object = SuggestionStyle.NORMAL
    applicability: object = None
    applicability_from: str | None = None
    name = "suggestion"


@dataclass(frozen=True, slots=True)
class MultipartSuggestionAttr:
    """Sub-diagnostic kind only: one suggestion built from suggestion_part fields."""

    slug: str | None = None
    style: object = SuggestionStyle.NORMAL
    applicability: object = None
    name = "multipart_suggestion"


@dataclass(frozen=True, slots=True)
class SuggestionPartAttr:
    """Field is one edit of a multipart suggestion sub-diagnostic."""

    code: str
    name = "suggestion_part"


@dataclass(frozen=True, slots=True)
class ApplicabilityAttr:
    """Field supplies the applicability of the type's suggestions at run time."""

    name = "applicability"


@dataclass(frozen=True, slots=True)
class SubdiagnosticAttr:
    """Field holds sub-diagnostic(s) to attach onto the diagnostic."""

    name = "subdiagnostic"


@dataclass(frozen=True, slots=True)
class SkipArgAttr:
    """Field is not registered as a message argument."""

    name = "skip_arg"


type Attribute = (
    PrimarySpanAttr
    | LabelAttr
    | NoteAttr
    | HelpAttr
    | WarningAttr
    | SuggestionAttr
    | MultipartSuggestionAttr
    | SuggestionPartAttr
    | ApplicabilityAttr
    | SubdiagnosticAttr
    | SkipArgAttr
)

type SubdiagnosticKindAttr = (
    LabelAttr | NoteAttr | HelpAttr | WarningAttr | SuggestionAttr | MultipartSuggestionAttr
)

_MARKER_TYPES = (
    PrimarySpanAttr,
    LabelAttr,
    NoteAttr,
    HelpAttr,
    WarningAttr,
    SuggestionAttr,
    MultipartSuggestionAttr,
    SuggestionPartAttr,
    ApplicabilityAttr,
    SubdiagnosticAttr,
    SkipArgAttr,
)

SUBDIAGNOSTIC_KIND_TYPES = (
    LabelAttr,
    NoteAttr,
    HelpAttr,
    WarningAttr,
    SuggestionAttr,
    MultipartSuggestionAttr,
)


@dataclass(frozen=True, slots=True)
class DiagnosticAttr:
    """Type-level declaration of a whole diagnostic.

    Attributes:
        slug: Catalog message key
        extras: Type-level note()/help() markers, attached unconditionally
        code: Stable error code, e.g. "E0505"
        severity: Declared severity, None for the configured default
    """

    slug: str | None
    extras: tuple[object, ...] = ()
    code: str | None = None
    severity: object = None


# ============================================================================
# CONSTRUCTORS
# ============================================================================


def primary_span() -> PrimarySpanAttr:
    return PrimarySpanAttr()


def label(slug: str | None = None) -> LabelAttr:
    return LabelAttr(slug)


def note(slug: str | None = None) -> NoteAttr:
    return NoteAttr(slug)


def help(slug: str | None = None) -> HelpAttr:
    return HelpAttr(slug)


def warning(slug: str | None = None) -> WarningAttr:
    return WarningAttr(slug)


def suggestion(
    slug: str | None = None,
    *,
    code: str | None = None,
    style: SuggestionStyle | str = SuggestionStyle.NORMAL,
    applicability: Applicability | str | None = None,
    applicability_from: str | None = None,
) -> SuggestionAttr:
    return SuggestionAttr(slug, code, style, applicability, applicability_from)


def multipart_suggestion(
    slug: str | None = None,
    *,
    style: SuggestionStyle | str = SuggestionStyle.NORMAL,
    applicability: Applicability | str | None = None,
) -> MultipartSuggestionAttr:
    return MultipartSuggestionAttr(slug, style, applicability)


def suggestion_part(code: str) -> SuggestionPartAttr:
    return SuggestionPartAttr(code)


def applicability() -> ApplicabilityAttr:
    return ApplicabilityAttr()


def subdiagnostic() -> SubdiagnosticAttr:
    return SubdiagnosticAttr()


def skip_arg() -> SkipArgAttr:
    return SkipArgAttr()


def diagnostic_attr(
    slug: str | None = None,
    *extras: object,
    code: str | None = None,
    severity: Severity | str | None = None,
) -> DiagnosticAttr:
    """Collect decorator arguments of a diagnostic (or diagnostic variant)."""
    return DiagnosticAttr(slug, extras, code, severity)


# Attribute names accepted as plain strings in Annotated metadata.
ATTRIBUTE_NAMES: Mapping[str, Callable[[], Attribute]] = MappingProxyType(
    {
        "primary_span": PrimarySpanAttr,
        "label": LabelAttr,
        "note": NoteAttr,
        "help": HelpAttr,
        "subdiagnostic": SubdiagnosticAttr,
        "applicability": ApplicabilityAttr,
        "skip_arg": SkipArgAttr,
    }
)


# ============================================================================
# PARSING AND VALIDATION
# ============================================================================


def parse_metadata(metadata: Iterable[object]) -> tuple[list[Attribute], list[DeriveDiagnostic]]:
    """Extract attribute markers from ``Annotated`` metadata.

    Markers are kept, strings are parsed as attribute names, and any other
    object is ignored so other libraries can share the annotation.

    Returns:
        Tuple of (attributes in declared order, errors)
    """
    attributes: list[Attribute] = []
    errors: list[DeriveDiagnostic] = []
    for item in metadata:
        if isinstance(item, _MARKER_TYPES):
            attributes.append(item)
        elif isinstance(item, str):
            factory = ATTRIBUTE_NAMES.get(item)
            if factory is None:
                errors.append(ErrorTemplate.unknown_attribute(item, ATTRIBUTE_NAMES))
            else:
                attributes.append(factory())
    return attributes, errors


def check_slug(slug: object) -> list[DeriveDiagnostic]:
    """Validate a message key or sub-key. None (default) is valid."""
    if slug is None:
        return []
    if not isinstance(slug, str) or IDENTIFIER_PATTERN.fullmatch(slug) is None:
        return [ErrorTemplate.malformed_slug(slug)]
    return []


def check_code(code: object) -> list[DeriveDiagnostic]:
    """Validate a stable diagnostic code. None (no code) is valid."""
    if code is None:
        return []
    if not isinstance(code, str) or STABLE_CODE_PATTERN.fullmatch(code) is None:
        return [ErrorTemplate.malformed_code(code)]
    return []


def parse_applicability(value: object) -> Applicability | DeriveDiagnostic:
    try:
        return Applicability(value)
    except ValueError:
        return ErrorTemplate.unknown_applicability(value, [a.value for a in Applicability])


def parse_style(value: object) -> SuggestionStyle | DeriveDiagnostic:
    try:
        return SuggestionStyle(value)
    except ValueError:
        return ErrorTemplate.unknown_style(value, [s.value for s in SuggestionStyle])


def parse_severity(value: object) -> Severity | DeriveDiagnostic:
    try:
        return Severity(value)
    except ValueError:
        return ErrorTemplate.unknown_severity(value, [s.value for s in Severity])


def template_fields(
    template: str, field_names: Iterable[str]
) -> tuple[str, ...] | list[DeriveDiagnostic]:
    """Names referenced by a ``{field}`` code template.

    Only bare placeholders are accepted: no attribute access, indexing,
    conversions or format specs.

    Args:
        template: Replacement text template
        field_names: Fields of the declaring type

    Returns:
        Referenced names in first-use order, or the errors found

    Example:
        >>> template_fields("{name}.clone()", ["name", "span"])
        ('name',)
    """
    if not isinstance(template, str):
        return [ErrorTemplate.malformed_template(repr(template), "expected a string")]
    try:
        parsed = list(string.Formatter().parse(template))
    except ValueError as e:
        return [ErrorTemplate.malformed_template(template, str(e))]

    known = set(field_names)
    names: dict[str, None] = {}
    errors: list[DeriveDiagnostic] = []
    for _literal, name, spec, conversion in parsed:
        if name is None:
            continue
        if not name or spec or conversion or not name.isidentifier():
            errors.append(
                ErrorTemplate.malformed_template(template, "only {field} placeholders are allowed")
            )
        elif name not in known:
            errors.append(ErrorTemplate.unknown_template_field(template, name))
        else:
            names[name] = None
    return errors or tuple(names)
