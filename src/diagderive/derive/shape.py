"""Type shape analysis.

Turns an annotated dataclass (or a choice container of variant dataclasses)
into immutable descriptors the code generator consumes. Analysis is pure:
no catalog, no sink, no mutation of the analyzed class. Every error found
for a type is returned, each anchored at its field or class.

Choice variants are analyzed one by one with nothing carried between them;
a ChoiceDescriptor is just the tuple of the independent results.

Python 3.13+.
"""

from __future__ import annotations

import dataclasses
import typing
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace

from diagderive.config import DeriveConfig
from diagderive.constants import (
    DEFAULT_SUBKEY_HELP,
    DEFAULT_SUBKEY_LABEL,
    DEFAULT_SUBKEY_NOTE,
    DEFAULT_SUBKEY_SUGGESTION,
    EDIT_COUNT_ARG,
)
from diagderive.diagnostics import DeriveDiagnostic, ErrorTemplate, SourceLocation
from diagderive.enums import (
    Applicability,
    Container,
    DescriptorKind,
    Severity,
    SubdiagnosticKind,
    SuggestionSource,
    SuggestionStyle,
)
from diagderive.runtime.message import DiagMessage

from .attributes import (
    SUBDIAGNOSTIC_KIND_TYPES,
    DiagnosticAttr,
    HelpAttr,
    LabelAttr,
    MultipartSuggestionAttr,
    NoteAttr,
    SubdiagnosticKindAttr,
    SuggestionAttr,
    WarningAttr,
    check_code,
    check_slug,
    parse_applicability,
    parse_severity,
    parse_style,
    template_fields,
)
from .fields import (
    ApplicabilitySource,
    FieldContext,
    FieldRole,
    FieldSpec,
    Help,
    InterpolationArg,
    Label,
    Note,
    PrimaryLocation,
    Suggestion,
    SuggestionPart,
    classify_field,
)
from .source import DeclarationSource, anchor, declaration_source
from .typeshape import analyze_type, is_applicability_type, split_annotated, type_repr

__all__ = [
    "VARIANT_ATTRIBUTE",
    "ChoiceDescriptor",
    "FieldDescriptor",
    "MessageRef",
    "TypeDescriptor",
    "TypeExtra",
    "VariantDecl",
    "analyze_choice",
    "analyze_diagnostic",
    "analyze_subdiagnostic",
    "variant",
]

# Attribute set on variant classes by variant().
VARIANT_ATTRIBUTE = "__diagnostic_variant__"

_SUBKIND_BY_ATTR: dict[type, SubdiagnosticKind] = {
    LabelAttr: SubdiagnosticKind.LABEL,
    NoteAttr: SubdiagnosticKind.NOTE,
    HelpAttr: SubdiagnosticKind.HELP,
    WarningAttr: SubdiagnosticKind.WARNING,
    SuggestionAttr: SubdiagnosticKind.SUGGESTION,
    MultipartSuggestionAttr: SubdiagnosticKind.MULTIPART_SUGGESTION,
}

_DEFAULT_SUBKEYS: dict[type, str] = {
    PrimaryLocation: DEFAULT_SUBKEY_LABEL,
    Label: DEFAULT_SUBKEY_LABEL,
    Suggestion: DEFAULT_SUBKEY_SUGGESTION,
    Note: DEFAULT_SUBKEY_NOTE,
    Help: DEFAULT_SUBKEY_HELP,
}


# ============================================================================
# DESCRIPTORS
# ============================================================================


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A classified field.

    Attributes:
        name: Field name
        index: Position in declared order
        role: Assigned role
        location: Declaration position
        subkey: Catalog sub-key the field's part uses, None when it uses none
    """

    name: str
    index: int
    role: FieldRole
    location: SourceLocation
    subkey: str | None = None


@dataclass(frozen=True, slots=True)
class TypeExtra:
    """Note or help declared on the type itself, attached unconditionally."""

    kind: SubdiagnosticKind
    subkey: str


@dataclass(frozen=True, slots=True)
class MessageRef:
    """One catalog reference made by a generated routine.

    Attributes:
        message: Key and optional sub-key
        field_name: Field whose part references it, None for type-level
        scoped_args: Argument names supplied only to this part
    """

    message: DiagMessage
    field_name: str | None = None
    scoped_args: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Everything the code generator needs for one diagnostic shape.

    Attributes:
        kind: Whole diagnostic or sub-diagnostic
        type_name: Qualified name of the annotated class
        slug: Message key
        location: Class declaration position
        fields: Classified fields in declared order
        code: Stable error code (diagnostics)
        severity: Declared severity (diagnostics), None for the default
        extras: Type-level notes and helps (diagnostics)
        subkind: What the delta attaches (sub-diagnostics)
        style: Suggestion presentation (suggestion sub-diagnostics)
        applicability: Literal applicability (suggestion sub-diagnostics)
        applicability_field: Field read for applicability (suggestion sub-diagnostics)
        suggestion_code: Replacement template (suggestion sub-diagnostics)
        code_fields: Fields interpolated into suggestion_code
    """

    kind: DescriptorKind
    type_name: str
    slug: str
    location: SourceLocation
    fields: tuple[FieldDescriptor, ...]
    code: str | None = None
    severity: Severity | None = None
    extras: tuple[TypeExtra, ...] = ()
    subkind: SubdiagnosticKind | None = None
    style: SuggestionStyle = SuggestionStyle.NORMAL
    applicability: Applicability | None = None
    applicability_field: str | None = None
    suggestion_code: str | None = None
    code_fields: tuple[str, ...] = ()

    @property
    def primary(self) -> FieldDescriptor | None:
        return next(self.fields_with(PrimaryLocation), None)

    @property
    def argument_names(self) -> tuple[str, ...]:
        """Names registered as message arguments, in declared order."""
        return tuple(
            f.role.name for f in self.fields if isinstance(f.role, InterpolationArg)
        )

    def fields_with(self, *roles: type) -> Iterator[FieldDescriptor]:
        return (f for f in self.fields if isinstance(f.role, roles))

    def references(self) -> tuple[MessageRef, ...]:
        """Every catalog key and sub-key the generated routine uses."""
        main = DiagMessage(self.slug)
        if self.kind is DescriptorKind.SUBDIAGNOSTIC:
            return (MessageRef(main),)
        refs = [MessageRef(main)]
        refs.extend(MessageRef(main.with_subkey(extra.subkey)) for extra in self.extras)
        for f in self.fields:
            if f.subkey is None:
                continue
            scoped: frozenset[str] = frozenset()
            if isinstance(f.role, Suggestion) and f.role.source is SuggestionSource.EDITS:
                scoped = frozenset({EDIT_COUNT_ARG})
            refs.append(MessageRef(main.with_subkey(f.subkey), f.name, scoped))
        return tuple(refs)


@dataclass(frozen=True, slots=True)
class ChoiceDescriptor:
    """A choice container and the independent descriptors of its variants."""

    kind: DescriptorKind
    type_name: str
    location: SourceLocation
    variants: tuple[TypeDescriptor, ...]


# ============================================================================
# VARIANT DECLARATION
# ============================================================================


@dataclass(frozen=True, slots=True)
class VariantDecl:
    """Raw arguments given to variant()."""

    head: object
    extras: tuple[object, ...] = ()
    code: str | None = None
    severity: object = None


def variant[T: type](
    head: str | SubdiagnosticKindAttr | None = None,
    *extras: object,
    code: str | None = None,
    severity: Severity | str | None = None,
) -> Callable[[T], T]:
    """Mark a nested dataclass as one variant of a choice type.

    Diagnostic choices take the same arguments as ``session.diagnostic``;
    sub-diagnostic choices take one kind marker such as ``label("slug")``.

    Example:
        >>> @session.diagnostic_choice
        ... class BorrowError:
        ...     @variant("borrowck_move", code="E0505")
        ...     @dataclass
        ...     class Move:
        ...         span: Annotated[Span, primary_span()]
    """

    def mark(cls: T) -> T:
        setattr(cls, VARIANT_ATTRIBUTE, VariantDecl(head, extras, code, severity))
        return cls

    return mark


# ============================================================================
# ANALYSIS
# ============================================================================


def analyze_diagnostic(
    cls: type, attr: DiagnosticAttr, config: DeriveConfig | None = None
) -> TypeDescriptor | list[DeriveDiagnostic]:
    """Analyze a whole-diagnostic declaration.

    Args:
        cls: Annotated dataclass
        attr: Type-level declaration
        config: Generation options (default: DeriveConfig())

    Returns:
        The descriptor, or every error found (anchored)
    """
    config = config or DeriveConfig()
    collected = _collect_fields(cls)
    if isinstance(collected, list):
        return collected
    specs, source = collected
    type_name = cls.__qualname__
    here = source.type_location

    errors: list[DeriveDiagnostic] = []
    if attr.slug is None:
        errors.append(ErrorTemplate.missing_slug(type_name))
    errors.extend(check_slug(attr.slug))
    errors.extend(check_code(attr.code))

    severity: Severity | None = None
    if attr.severity is not None:
        parsed = parse_severity(attr.severity)
        if isinstance(parsed, DeriveDiagnostic):
            errors.append(parsed)
        else:
            severity = parsed

    extras: list[tuple[SubdiagnosticKind, str | None]] = []
    for extra in attr.extras:
        if isinstance(extra, NoteAttr | HelpAttr):
            errors.extend(check_slug(extra.slug))
            extras.append((_SUBKIND_BY_ATTR[type(extra)], extra.slug))
        else:
            name = getattr(extra, "name", type(extra).__name__)
            context = "a diagnostic declaration"
            errors.append(ErrorTemplate.attribute_not_allowed(str(name), context))
    errors = anchor(errors, here, type_name)

    fields = _classify_all(specs, source, type_name, DescriptorKind.DIAGNOSTIC, errors)
    if errors:
        return errors

    fields = _resolve_primary(fields, type_name, config.implicit_primary_span, errors)
    applicability_source = _single_applicability(fields, type_name, errors)
    if errors:
        return errors

    if applicability_source is not None:
        fields = [
            replace(f, role=replace(f.role, applicability_field=applicability_source))
            if isinstance(f.role, Suggestion) and f.role.applicability_field is None
            else f
            for f in fields
        ]

    resolved_extras, fields = _assign_subkeys(extras, fields)
    return TypeDescriptor(
        kind=DescriptorKind.DIAGNOSTIC,
        type_name=type_name,
        slug=typing.cast(str, attr.slug),
        location=here,
        fields=tuple(fields),
        code=attr.code,
        severity=severity,
        extras=resolved_extras,
    )


def analyze_subdiagnostic(
    cls: type, attr: object, config: DeriveConfig | None = None
) -> TypeDescriptor | list[DeriveDiagnostic]:
    """Analyze a sub-diagnostic (delta) declaration.

    Args:
        cls: Annotated dataclass
        attr: Kind marker: label(), note(), help(), warning(), suggestion()
            or multipart_suggestion(), carrying the top-level message key
        config: Generation options (default: DeriveConfig())

    Returns:
        The descriptor, or every error found (anchored)
    """
    config = config or DeriveConfig()
    collected = _collect_fields(cls)
    if isinstance(collected, list):
        return collected
    specs, source = collected
    type_name = cls.__qualname__
    here = source.type_location

    if not isinstance(attr, SUBDIAGNOSTIC_KIND_TYPES):
        name = getattr(attr, "name", type(attr).__name__)
        return anchor(
            [ErrorTemplate.attribute_not_allowed(str(name), "a sub-diagnostic declaration")],
            here,
            type_name,
        )

    subkind = _SUBKIND_BY_ATTR[type(attr)]
    errors: list[DeriveDiagnostic] = []
    if attr.slug is None:
        errors.append(ErrorTemplate.missing_slug(type_name))
    errors.extend(check_slug(attr.slug))

    style = SuggestionStyle.NORMAL
    literal: Applicability | None = None
    suggestion_code: str | None = None
    code_fields: tuple[str, ...] = ()
    applicability_from: str | None = None
    if isinstance(attr, SuggestionAttr | MultipartSuggestionAttr):
        parsed_style = parse_style(attr.style)
        if isinstance(parsed_style, DeriveDiagnostic):
            errors.append(parsed_style)
        else:
            style = parsed_style
        if attr.applicability is not None:
            parsed = parse_applicability(attr.applicability)
            if isinstance(parsed, DeriveDiagnostic):
                errors.append(parsed)
            else:
                literal = parsed
    if isinstance(attr, SuggestionAttr):
        field_types = {spec.name: spec.hint for spec in specs}
        if attr.code is None:
            errors.append(ErrorTemplate.suggestion_without_code())
        else:
            found = template_fields(attr.code, field_types)
            if isinstance(found, list):
                errors.extend(found)
            else:
                suggestion_code, code_fields = attr.code, found
        applicability_from = attr.applicability_from
        if applicability_from is not None:
            errors.extend(_check_type_applicability_source(applicability_from, field_types))
    errors = anchor(errors, here, type_name)

    fields = _classify_all(specs, source, type_name, DescriptorKind.SUBDIAGNOSTIC, errors)
    if errors:
        return errors

    is_multipart = subkind is SubdiagnosticKind.MULTIPART_SUGGESTION
    promote = config.implicit_primary_span and not is_multipart
    fields = _resolve_primary(fields, type_name, promote, errors)
    applicability_source = _single_applicability(fields, type_name, errors)
    errors.extend(_check_subkind_fields(subkind, fields, type_name))
    if not errors:
        if subkind in (SubdiagnosticKind.LABEL, SubdiagnosticKind.SUGGESTION) and not any(
            isinstance(f.role, PrimaryLocation) for f in fields
        ):
            errors.extend(
                anchor([ErrorTemplate.missing_primary_span(subkind.value)], here, type_name)
            )
        if is_multipart and not any(isinstance(f.role, SuggestionPart) for f in fields):
            errors.extend(anchor([ErrorTemplate.missing_suggestion_parts()], here, type_name))
    if errors:
        return errors

    return TypeDescriptor(
        kind=DescriptorKind.SUBDIAGNOSTIC,
        type_name=type_name,
        slug=typing.cast(str, attr.slug),
        location=here,
        fields=tuple(fields),
        subkind=subkind,
        style=style,
        applicability=literal,
        applicability_field=applicability_from or applicability_source,
        suggestion_code=suggestion_code,
        code_fields=code_fields,
    )


def analyze_choice(
    cls: type, kind: DescriptorKind, config: DeriveConfig | None = None
) -> ChoiceDescriptor | list[DeriveDiagnostic]:
    """Analyze every variant of a choice container independently.

    Variants are the nested classes marked with variant(), in definition
    order. Errors from all variants are returned together.
    """
    config = config or DeriveConfig()
    source = declaration_source(cls, ())
    variants = [
        member
        for member in vars(cls).values()
        if isinstance(member, type) and VARIANT_ATTRIBUTE in vars(member)
    ]
    if not variants:
        return anchor(
            [ErrorTemplate.no_variants(cls.__qualname__)], source.type_location, cls.__qualname__
        )

    descriptors: list[TypeDescriptor] = []
    errors: list[DeriveDiagnostic] = []
    for member in variants:
        result = _analyze_variant(member, vars(member)[VARIANT_ATTRIBUTE], kind, config)
        if isinstance(result, list):
            errors.extend(result)
        else:
            descriptors.append(result)
    if errors:
        return errors
    return ChoiceDescriptor(kind, cls.__qualname__, source.type_location, tuple(descriptors))


def _analyze_variant(
    member: type, decl: VariantDecl, kind: DescriptorKind, config: DeriveConfig
) -> TypeDescriptor | list[DeriveDiagnostic]:
    if kind is DescriptorKind.DIAGNOSTIC:
        if decl.head is not None and not isinstance(decl.head, str):
            name = getattr(decl.head, "name", type(decl.head).__name__)
            here = declaration_source(member, ()).type_location
            return anchor(
                [ErrorTemplate.attribute_not_allowed(str(name), "a diagnostic variant")],
                here,
                member.__qualname__,
            )
        attr = DiagnosticAttr(
            typing.cast(str | None, decl.head), decl.extras, decl.code, decl.severity
        )
        return analyze_diagnostic(member, attr, config)

    if decl.extras or decl.code is not None or decl.severity is not None:
        here = declaration_source(member, ()).type_location
        error = ErrorTemplate.attribute_not_allowed(
            "code/severity/extras", "a sub-diagnostic variant"
        )
        return anchor([error], here, member.__qualname__)
    return analyze_subdiagnostic(member, decl.head, config)


# ============================================================================
# HELPERS
# ============================================================================


def _collect_fields(
    cls: type,
) -> tuple[list[FieldSpec], DeclarationSource] | list[DeriveDiagnostic]:
    type_name = getattr(cls, "__qualname__", repr(cls))
    if not isinstance(cls, type) or not dataclasses.is_dataclass(cls):
        source = declaration_source(cls, ()) if isinstance(cls, type) else None
        location = source.type_location if source else None
        error = ErrorTemplate.not_a_dataclass(type_name)
        return [replace(error, location=location, type_name=type_name)]

    declared = dataclasses.fields(cls)
    source = declaration_source(cls, [f.name for f in declared])
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError, AttributeError) as e:
        return anchor(
            [ErrorTemplate.unresolved_type_hints(str(e))], source.type_location, type_name
        )

    specs = []
    for index, f in enumerate(declared):
        hint, metadata = split_annotated(hints.get(f.name, f.type))
        specs.append(FieldSpec(f.name, index, hint, metadata))
    return specs, source


def _classify_all(
    specs: list[FieldSpec],
    source: DeclarationSource,
    type_name: str,
    kind: DescriptorKind,
    errors: list[DeriveDiagnostic],
) -> list[FieldDescriptor]:
    context = FieldContext(kind, {spec.name: spec.hint for spec in specs})
    fields: list[FieldDescriptor] = []
    for spec in specs:
        location = source.field(spec.name)
        role = classify_field(spec, context)
        if isinstance(role, list):
            errors.extend(anchor(role, location, type_name, spec.name))
        else:
            fields.append(FieldDescriptor(spec.name, spec.index, role, location))
    return fields


def _resolve_primary(
    fields: list[FieldDescriptor],
    type_name: str,
    promote: bool,
    errors: list[DeriveDiagnostic],
) -> list[FieldDescriptor]:
    claimed = [f for f in fields if isinstance(f.role, PrimaryLocation)]
    for extra in claimed[1:]:
        errors.extend(
            anchor(
                [ErrorTemplate.duplicate_primary_span(extra.name, claimed[0].name)],
                extra.location,
                type_name,
                extra.name,
            )
        )
    if claimed or not promote:
        return fields

    for position, f in enumerate(fields):
        role = f.role
        if (
            isinstance(role, InterpolationArg)
            and role.shape.is_location
            and role.shape.container is not Container.SEQUENCE
        ):
            promoted = list(fields)
            promoted[position] = replace(f, role=PrimaryLocation(role.shape))
            return promoted
    return fields


def _single_applicability(
    fields: list[FieldDescriptor], type_name: str, errors: list[DeriveDiagnostic]
) -> str | None:
    sources = [f for f in fields if isinstance(f.role, ApplicabilitySource)]
    for extra in sources[1:]:
        errors.extend(
            anchor(
                [ErrorTemplate.duplicate_applicability(extra.name, sources[0].name)],
                extra.location,
                type_name,
                extra.name,
            )
        )
    return sources[0].name if sources else None


def _check_type_applicability_source(
    name: str, field_types: dict[str, object]
) -> list[DeriveDiagnostic]:
    if name not in field_types:
        return [ErrorTemplate.unknown_applicability_source(name, "no such field")]
    shape = analyze_type(field_types[name])
    if not is_applicability_type(shape.base) or shape.container is Container.SEQUENCE:
        reason = f"field is typed '{type_repr(field_types[name])}'"
        return [ErrorTemplate.unknown_applicability_source(name, reason)]
    return []


def _check_subkind_fields(
    subkind: SubdiagnosticKind, fields: list[FieldDescriptor], type_name: str
) -> list[DeriveDiagnostic]:
    is_suggestion = subkind in (
        SubdiagnosticKind.SUGGESTION,
        SubdiagnosticKind.MULTIPART_SUGGESTION,
    )
    context = f"a {subkind.value} sub-diagnostic"
    errors: list[DeriveDiagnostic] = []
    for f in fields:
        problem: str | None = None
        match f.role:
            case SuggestionPart() if subkind is not SubdiagnosticKind.MULTIPART_SUGGESTION:
                problem = "suggestion_part"
            case ApplicabilitySource() if not is_suggestion:
                problem = "applicability"
            case PrimaryLocation() if subkind is SubdiagnosticKind.MULTIPART_SUGGESTION:
                problem = "primary_span"
        if problem is not None:
            errors.extend(
                anchor(
                    [ErrorTemplate.attribute_not_allowed(problem, context)],
                    f.location,
                    type_name,
                    f.name,
                )
            )
    return errors


def _assign_subkeys(
    extras: list[tuple[SubdiagnosticKind, str | None]], fields: list[FieldDescriptor]
) -> tuple[tuple[TypeExtra, ...], list[FieldDescriptor]]:
    """Give every keyed part its catalog sub-key.

    Explicit slugs are kept. The first unnamed part of each role takes the
    role name; later unnamed type-level parts take ``<role>_<position>`` and
    later unnamed fields ``<role>_<field name>``.
    """
    used: set[str] = set()

    def default(role_name: str, suffix: str) -> str:
        if role_name not in used:
            used.add(role_name)
            return role_name
        return f"{role_name}_{suffix}"

    resolved_extras = tuple(
        TypeExtra(kind, slug if slug is not None else default(kind.value, str(position)))
        for position, (kind, slug) in enumerate(extras, start=1)
    )

    resolved: list[FieldDescriptor] = []
    for f in fields:
        role = f.role
        role_name = _DEFAULT_SUBKEYS.get(type(role))
        slug: str | None
        match role:
            case PrimaryLocation(label=None):
                role_name = None
                slug = None
            case PrimaryLocation(label=LabelAttr(slug=label_slug)):
                slug = label_slug
            case Label(slug=slug) | Suggestion(slug=slug) | Note(slug=slug) | Help(slug=slug):
                pass
            case _:
                role_name = None
                slug = None
        if role_name is None:
            resolved.append(f)
        else:
            subkey = slug if slug is not None else default(role_name, f.name)
            resolved.append(replace(f, subkey=subkey))
    return resolved_extras, resolved

