"""Field classification.

Maps one dataclass field (declared type plus attribute markers) to exactly
one FieldRole. Roles form a closed union of frozen dataclasses; consumers
dispatch on them with ``match``, and the final ``assert_never`` arms make a
missing case a type-check error.

Classification is a pure function of the field and its sibling types: it
needs no catalog and no sink, so it can be exercised over synthetic
dataclasses.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from diagderive.diagnostics import DeriveDiagnostic, ErrorTemplate
from diagderive.enums import (
    Applicability,
    Container,
    DescriptorKind,
    SuggestionSource,
    SuggestionStyle,
)
from diagderive.runtime.protocols import AddToDiagnostic

from .attributes import (
    ApplicabilityAttr,
    Attribute,
    HelpAttr,
    LabelAttr,
    MultipartSuggestionAttr,
    NoteAttr,
    PrimarySpanAttr,
    SkipArgAttr,
    SubdiagnosticAttr,
    SuggestionAttr,
    SuggestionPartAttr,
    WarningAttr,
    check_slug,
    parse_applicability,
    parse_metadata,
    parse_style,
    template_fields,
)
from .typeshape import (
    TypeShape,
    analyze_type,
    is_applicability_type,
    is_edit_type,
    is_located_applicability,
    type_repr,
)

__all__ = [
    "ApplicabilitySource",
    "FieldContext",
    "FieldRole",
    "FieldSpec",
    "Help",
    "InterpolationArg",
    "Label",
    "Note",
    "PrimaryLocation",
    "SkippedField",
    "SubdiagnosticSlot",
    "Suggestion",
    "SuggestionPart",
    "classify_field",
    "is_subdiagnostic_type",
]

# Attribute set on choice container classes by the derive session.
CHOICE_ATTRIBUTE = "__diagnostic_choice__"


# ============================================================================
# ROLES
# ============================================================================


@dataclass(frozen=True, slots=True)
class PrimaryLocation:
    """The location the diagnostic (or delta) is anchored at.

    ``label`` is set when a label() marker is stacked on primary_span().
    """

    shape: TypeShape
    label: LabelAttr | None = None


@dataclass(frozen=True, slots=True)
class Label:
    shape: TypeShape
    slug: str | None = None


@dataclass(frozen=True, slots=True)
class Suggestion:
    """Suggested edit(s) held by a field.

    Attributes:
        shape: Declared type of the field
        source: How edits are obtained from the field value
        slug: Sub-key, None for the default
        code: Replacement template (SPAN and SPAN_WITH_APPLICABILITY only)
        code_fields: Fields the template interpolates, in first-use order
        style: Presentation hint
        applicability: Literal applicability, None when not given
        applicability_field: Sibling field read at construction time
    """

    shape: TypeShape
    source: SuggestionSource
    slug: str | None = None
    code: str | None = None
    code_fields: tuple[str, ...] = ()
    style: SuggestionStyle = SuggestionStyle.NORMAL
    applicability: Applicability | None = None
    applicability_field: str | None = None


@dataclass(frozen=True, slots=True)
class Note:
    """Sub-message attached when a bool field is true, or at each span it holds."""

    shape: TypeShape
    slug: str | None = None

    @property
    def is_flag(self) -> bool:
        return self.shape.base is bool


@dataclass(frozen=True, slots=True)
class Help:
    shape: TypeShape
    slug: str | None = None

    @property
    def is_flag(self) -> bool:
        return self.shape.base is bool


@dataclass(frozen=True, slots=True)
class SubdiagnosticSlot:
    shape: TypeShape


@dataclass(frozen=True, slots=True)
class InterpolationArg:
    """Field value is registered as the message argument ``name``."""

    name: str
    shape: TypeShape


@dataclass(frozen=True, slots=True)
class ApplicabilitySource:
    """Field supplies suggestion applicability at construction time."""

    shape: TypeShape


@dataclass(frozen=True, slots=True)
class SuggestionPart:
    """One edit of a multipart suggestion sub-diagnostic."""

    shape: TypeShape
    code: str
    code_fields: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SkippedField:
    shape: TypeShape


type FieldRole = (
    PrimaryLocation
    | Label
    | Suggestion
    | Note
    | Help
    | SubdiagnosticSlot
    | InterpolationArg
    | ApplicabilitySource
    | SuggestionPart
    | SkippedField
)


# ============================================================================
# CLASSIFIER INPUT
# ============================================================================


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One dataclass field as seen by the classifier.

    Attributes:
        name: Field name
        index: Position in declared order
        hint: Resolved declared type, Annotated stripped
        metadata: Annotated metadata in declared order
    """

    name: str
    index: int
    hint: object
    metadata: tuple[object, ...] = ()


@dataclass(frozen=True, slots=True)
class FieldContext:
    """What the classifier may know about the declaring type.

    Attributes:
        kind: Whole diagnostic or sub-diagnostic
        field_types: Resolved declared type of every field, by name
    """

    kind: DescriptorKind
    field_types: Mapping[str, object]


# ============================================================================
# CLASSIFICATION
# ============================================================================


def is_subdiagnostic_type(base: object) -> bool:
    """Derived sub-diagnostic, sub-diagnostic choice, or hand-written delta."""
    if not isinstance(base, type):
        return False
    choice = base.__dict__.get(CHOICE_ATTRIBUTE)
    if choice is not None:
        return choice.kind is DescriptorKind.SUBDIAGNOSTIC
    return issubclass(base, AddToDiagnostic)


def classify_field(field: FieldSpec, context: FieldContext) -> FieldRole | list[DeriveDiagnostic]:
    """Assign one role to a field.

    Args:
        field: The field to classify
        context: Declaring type kind and sibling field types

    Returns:
        The field's role, or unanchored errors (the analyzer anchors them)

    Example:
        >>> spec = FieldSpec("span", 0, Span, (primary_span(), label()))
        >>> classify_field(spec, FieldContext(DescriptorKind.DIAGNOSTIC, {"span": Span}))
        PrimaryLocation(shape=TypeShape(base=<class 'Span'>, ...), label=LabelAttr(slug=None))
    """
    attributes, errors = parse_metadata(field.metadata)
    if errors:
        return errors

    shape = analyze_type(field.hint)
    if not attributes:
        return InterpolationArg(field.name, shape)

    attribute = _single_attribute(attributes)
    if isinstance(attribute, list):
        return attribute

    is_diagnostic = context.kind is DescriptorKind.DIAGNOSTIC
    match attribute:
        case (PrimarySpanAttr(), LabelAttr() as stacked):
            if not is_diagnostic:
                return [ErrorTemplate.attribute_not_allowed("label", "a sub-diagnostic field")]
            return _classify_primary(field, shape, stacked)
        case PrimarySpanAttr():
            return _classify_primary(field, shape, None)
        case LabelAttr(slug=slug) if is_diagnostic:
            if not shape.is_location:
                return [ErrorTemplate.label_requires_location(type_repr(field.hint))]
            return check_slug(slug) or Label(shape, slug)
        case NoteAttr(slug=slug) | HelpAttr(slug=slug) if is_diagnostic:
            return _classify_note(attribute, field, shape, slug)
        case SuggestionAttr() if is_diagnostic:
            return _classify_suggestion(attribute, field, shape, context)
        case SuggestionPartAttr(code=code) if not is_diagnostic:
            if not shape.is_location or shape.container is Container.SEQUENCE:
                return [ErrorTemplate.suggestion_part_type_invalid(type_repr(field.hint))]
            fields = template_fields(code, context.field_types)
            if isinstance(fields, list):
                return fields
            return SuggestionPart(shape, code, fields)
        case ApplicabilityAttr():
            if not is_applicability_type(shape.base) or shape.container is Container.SEQUENCE:
                return [ErrorTemplate.applicability_type_invalid(type_repr(field.hint))]
            return ApplicabilitySource(shape)
        case SubdiagnosticAttr():
            if not is_subdiagnostic_type(shape.base):
                return [ErrorTemplate.subdiagnostic_type_invalid(type_repr(field.hint))]
            return SubdiagnosticSlot(shape)
        case SkipArgAttr():
            return SkippedField(shape)
        case WarningAttr() | MultipartSuggestionAttr():
            return [ErrorTemplate.attribute_not_allowed(attribute.name, "a field")]

    owner = "a diagnostic field" if is_diagnostic else "a sub-diagnostic field"
    return [ErrorTemplate.attribute_not_allowed(attribute.name, owner)]  # type: ignore[union-attr]


def _single_attribute(
    attributes: list[Attribute],
) -> Attribute | tuple[PrimarySpanAttr, LabelAttr] | list[DeriveDiagnostic]:
    if len(attributes) == 1:
        return attributes[0]
    if len(attributes) == 2:
        primary = [a for a in attributes if isinstance(a, PrimarySpanAttr)]
        labels = [a for a in attributes if isinstance(a, LabelAttr)]
        if len(primary) == 1 and len(labels) == 1:
            return primary[0], labels[0]
    return [ErrorTemplate.conflicting_attributes([a.name for a in attributes])]


def _classify_primary(
    field: FieldSpec, shape: TypeShape, stacked: LabelAttr | None
) -> FieldRole | list[DeriveDiagnostic]:
    if not shape.is_location or shape.container is Container.SEQUENCE:
        return [ErrorTemplate.primary_span_type_invalid(type_repr(field.hint))]
    if stacked is not None and (errors := check_slug(stacked.slug)):
        return errors
    return PrimaryLocation(shape, stacked)


def _classify_note(
    attribute: NoteAttr | HelpAttr, field: FieldSpec, shape: TypeShape, slug: str | None
) -> FieldRole | list[DeriveDiagnostic]:
    is_flag = shape.base is bool and shape.container is Container.ONE
    if not (is_flag or shape.is_location):
        return [ErrorTemplate.note_type_invalid(attribute.name, type_repr(field.hint))]
    if errors := check_slug(slug):
        return errors
    if isinstance(attribute, NoteAttr):
        return Note(shape, slug)
    return Help(shape, slug)


def _classify_suggestion(
    attribute: SuggestionAttr, field: FieldSpec, shape: TypeShape, context: FieldContext
) -> FieldRole | list[DeriveDiagnostic]:
    errors = check_slug(attribute.slug)

    style = parse_style(attribute.style)
    if isinstance(style, DeriveDiagnostic):
        errors.append(style)

    literal: Applicability | None = None
    if attribute.applicability is not None:
        parsed = parse_applicability(attribute.applicability)
        if isinstance(parsed, DeriveDiagnostic):
            errors.append(parsed)
        else:
            literal = parsed

    single = shape.container is not Container.SEQUENCE
    if single and is_located_applicability(shape.base):
        source = SuggestionSource.SPAN_WITH_APPLICABILITY
    elif single and shape.is_location:
        source = SuggestionSource.SPAN
    elif not single and is_edit_type(shape.base):
        source = SuggestionSource.EDITS
    else:
        return [*errors, ErrorTemplate.suggestion_type_invalid(type_repr(field.hint))]

    code_fields: tuple[str, ...] = ()
    if source is SuggestionSource.EDITS:
        if attribute.code is not None:
            errors.append(
                ErrorTemplate.attribute_not_allowed("code=", "an edit-list suggestion field")
            )
    elif attribute.code is None:
        errors.append(ErrorTemplate.suggestion_without_code())
    else:
        fields = template_fields(attribute.code, context.field_types)
        if isinstance(fields, list):
            errors.extend(fields)
        else:
            code_fields = fields

    source_field = attribute.applicability_from
    if source_field is not None:
        errors.extend(_check_applicability_source(source_field, field.name, context))

    if errors or isinstance(style, DeriveDiagnostic):
        return errors
    return Suggestion(
        shape=shape,
        source=source,
        slug=attribute.slug,
        code=attribute.code,
        code_fields=code_fields,
        style=style,
        applicability=literal,
        applicability_field=source_field,
    )


def _check_applicability_source(
    source: str, own_name: str, context: FieldContext
) -> list[DeriveDiagnostic]:
    if source == own_name or source not in context.field_types:
        return [ErrorTemplate.unknown_applicability_source(source, "no such sibling field")]
    shape = analyze_type(context.field_types[source])
    if not is_applicability_type(shape.base) or shape.container is Container.SEQUENCE:
        return [
            ErrorTemplate.unknown_applicability_source(
                source, f"field is typed '{type_repr(context.field_types[source])}'"
            )
        ]
    return []
