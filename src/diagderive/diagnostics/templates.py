"""Error message templates.

Centralized error message templates for testable, consistent authoring
errors. Templates produce unanchored diagnostics; the derive pipeline attaches
the type, field and source location of the offending declaration.

Python 3.13+.
"""

from collections.abc import Iterable

from .codes import DeriveCode, DeriveDiagnostic

__all__ = ["ErrorTemplate"]


def _names(values: Iterable[str]) -> str:
    return ", ".join(f"'{v}'" for v in values)


class ErrorTemplate:
    """Centralized authoring error templates.

    All generation-time messages are created here. NO f-strings in exception
    constructors! This keeps messages testable and documents every error case.
    """

    # ------------------------------------------------------------------
    # Attribute grammar
    # ------------------------------------------------------------------

    @staticmethod
    def unknown_attribute(name: str, known: Iterable[str]) -> DeriveDiagnostic:
        """Attribute name inside Annotated metadata is not recognized.

        Args:
            name: The unrecognized attribute name
            known: Recognized attribute names

        Returns:
            DeriveDiagnostic for UNKNOWN_ATTRIBUTE
        """
        return DeriveDiagnostic(
            code=DeriveCode.UNKNOWN_ATTRIBUTE,
            message=f"Unknown attribute '{name}'",
            hint=f"Expected one of: {_names(sorted(known))}",
        )

    @staticmethod
    def malformed_slug(slug: object) -> DeriveDiagnostic:
        """Message key or sub-key is not a Fluent identifier."""
        return DeriveDiagnostic(
            code=DeriveCode.MALFORMED_SLUG,
            message=f"Malformed message key {slug!r}",
            hint="Message keys must match [a-zA-Z][a-zA-Z0-9_-]*",
        )

    @staticmethod
    def malformed_code(code: object) -> DeriveDiagnostic:
        """Stable error code literal is malformed."""
        return DeriveDiagnostic(
            code=DeriveCode.MALFORMED_CODE,
            message=f"Malformed diagnostic code {code!r}",
            hint="Codes look like 'E0505': a capital letter, letters, then digits",
        )

    @staticmethod
    def unknown_applicability(value: object, known: Iterable[str]) -> DeriveDiagnostic:
        """Applicability literal is not an Applicability value."""
        return DeriveDiagnostic(
            code=DeriveCode.UNKNOWN_APPLICABILITY,
            message=f"Unknown applicability {value!r}",
            hint=f"Expected one of: {_names(known)}",
        )

    @staticmethod
    def unknown_style(value: object, known: Iterable[str]) -> DeriveDiagnostic:
        """Suggestion style literal is not a SuggestionStyle value."""
        return DeriveDiagnostic(
            code=DeriveCode.UNKNOWN_STYLE,
            message=f"Unknown suggestion style {value!r}",
            hint=f"Expected one of: {_names(known)}",
        )

    @staticmethod
    def unknown_severity(value: object, known: Iterable[str]) -> DeriveDiagnostic:
        """Severity override is not a Severity value."""
        return DeriveDiagnostic(
            code=DeriveCode.UNKNOWN_SEVERITY,
            message=f"Unknown severity {value!r}",
            hint=f"Expected one of: {_names(known)}",
        )

    @staticmethod
    def malformed_template(template: str, reason: str) -> DeriveDiagnostic:
        """Suggestion code template cannot be parsed."""
        return DeriveDiagnostic(
            code=DeriveCode.MALFORMED_TEMPLATE,
            message=f"Malformed code template {template!r}: {reason}",
            hint="Use {field} placeholders and double braces {{ }} for literal braces",
        )

    @staticmethod
    def unknown_template_field(template: str, name: str) -> DeriveDiagnostic:
        """Code template references a name that is not a field of the type."""
        return DeriveDiagnostic(
            code=DeriveCode.UNKNOWN_TEMPLATE_FIELD,
            message=f"Code template {template!r} references unknown field '{name}'",
            hint="Placeholders in code templates must name fields of the same type",
        )

    @staticmethod
    def attribute_not_allowed(attribute: str, context: str) -> DeriveDiagnostic:
        """Attribute is valid syntax but not in this position."""
        return DeriveDiagnostic(
            code=DeriveCode.ATTRIBUTE_NOT_ALLOWED,
            message=f"Attribute '{attribute}' is not allowed on {context}",
        )

    # ------------------------------------------------------------------
    # Field classification
    # ------------------------------------------------------------------

    @staticmethod
    def conflicting_attributes(attributes: Iterable[str]) -> DeriveDiagnostic:
        """Field carries more than one role attribute."""
        return DeriveDiagnostic(
            code=DeriveCode.CONFLICTING_ATTRIBUTES,
            message=f"Conflicting role attributes {_names(attributes)} on one field",
            hint="A field may carry one role; only label() may be stacked on primary_span()",
        )

    @staticmethod
    def label_requires_location(type_repr: str) -> DeriveDiagnostic:
        """label() on a field whose type carries no location."""
        return DeriveDiagnostic(
            code=DeriveCode.LABEL_REQUIRES_LOCATION,
            message=f"label() requires a location type, found '{type_repr}'",
            hint="Use Span, Span | None or a sequence of Span",
        )

    @staticmethod
    def primary_span_type_invalid(type_repr: str) -> DeriveDiagnostic:
        """primary_span() on a non-location field."""
        return DeriveDiagnostic(
            code=DeriveCode.PRIMARY_SPAN_TYPE_INVALID,
            message=f"primary_span() requires a location type, found '{type_repr}'",
            hint="Use Span or Span | None",
        )

    @staticmethod
    def suggestion_type_invalid(type_repr: str) -> DeriveDiagnostic:
        """suggestion() on a field of unsupported type."""
        return DeriveDiagnostic(
            code=DeriveCode.SUGGESTION_TYPE_INVALID,
            message=f"suggestion() cannot be applied to a field of type '{type_repr}'",
            hint=(
                "Use Span, tuple[Span, Applicability], or a sequence of Edit / "
                "tuple[Span, str], optionally | None"
            ),
        )

    @staticmethod
    def suggestion_without_code() -> DeriveDiagnostic:
        """Span-typed suggestion field without a code template."""
        return DeriveDiagnostic(
            code=DeriveCode.SUGGESTION_TYPE_INVALID,
            message="suggestion() on a span field requires code=...",
            hint="Give the replacement text, or hold explicit Edit values in the field",
        )

    @staticmethod
    def unknown_applicability_source(source: str, reason: str) -> DeriveDiagnostic:
        """applicability_from names no usable sibling field."""
        return DeriveDiagnostic(
            code=DeriveCode.UNKNOWN_APPLICABILITY_SOURCE,
            message=f"Unknown applicability source '{source}': {reason}",
            hint="Name a sibling field typed Applicability",
        )

    @staticmethod
    def note_type_invalid(role: str, type_repr: str) -> DeriveDiagnostic:
        """note()/help() on a field of unsupported type."""
        return DeriveDiagnostic(
            code=DeriveCode.NOTE_TYPE_INVALID,
            message=f"{role}() cannot be applied to a field of type '{type_repr}'",
            hint="Use bool, Span, Span | None or a sequence of Span",
        )

    @staticmethod
    def subdiagnostic_type_invalid(type_repr: str) -> DeriveDiagnostic:
        """subdiagnostic() on a field whose type is not a diagnostic delta."""
        return DeriveDiagnostic(
            code=DeriveCode.SUBDIAGNOSTIC_TYPE_INVALID,
            message=f"subdiagnostic() requires a sub-diagnostic type, found '{type_repr}'",
            hint="Derive the type with @session.subdiagnostic or implement add_to_diagnostic()",
        )

    @staticmethod
    def applicability_type_invalid(type_repr: str) -> DeriveDiagnostic:
        """applicability() on a field not typed Applicability."""
        return DeriveDiagnostic(
            code=DeriveCode.APPLICABILITY_TYPE_INVALID,
            message=f"applicability() requires an Applicability field, found '{type_repr}'",
        )

    @staticmethod
    def suggestion_part_type_invalid(type_repr: str) -> DeriveDiagnostic:
        """suggestion_part() on a non-location field."""
        return DeriveDiagnostic(
            code=DeriveCode.SUGGESTION_PART_TYPE_INVALID,
            message=f"suggestion_part() requires a location type, found '{type_repr}'",
            hint="Use Span or Span | None",
        )

    @staticmethod
    def unresolved_type_hints(error: str) -> DeriveDiagnostic:
        """Field annotations could not be evaluated."""
        return DeriveDiagnostic(
            code=DeriveCode.UNRESOLVED_TYPE_HINTS,
            message=f"Cannot resolve field annotations: {error}",
            hint="Make every annotation name importable from the defining module",
        )

    # ------------------------------------------------------------------
    # Type shape
    # ------------------------------------------------------------------

    @staticmethod
    def not_a_dataclass(type_name: str) -> DeriveDiagnostic:
        """Annotated type is not a dataclass."""
        return DeriveDiagnostic(
            code=DeriveCode.NOT_A_DATACLASS,
            message=f"'{type_name}' is not a dataclass",
            hint="Apply @dataclass below the derive decorator",
        )

    @staticmethod
    def duplicate_primary_span(field_name: str, first: str) -> DeriveDiagnostic:
        """Second field claims the primary location."""
        return DeriveDiagnostic(
            code=DeriveCode.DUPLICATE_PRIMARY_SPAN,
            message=(
                f"Duplicate primary location: field '{field_name}' and "
                f"field '{first}' both claim primary_span()"
            ),
            hint="Remove primary_span() from all but one field",
        )

    @staticmethod
    def missing_slug(type_name: str) -> DeriveDiagnostic:
        """Diagnostic declaration without a message key."""
        return DeriveDiagnostic(
            code=DeriveCode.MISSING_SLUG,
            message=f"'{type_name}' declares no message key",
            hint="Pass the catalog key as the first decorator argument",
        )

    @staticmethod
    def missing_primary_span(kind: str) -> DeriveDiagnostic:
        """Label/suggestion sub-diagnostic without a location."""
        return DeriveDiagnostic(
            code=DeriveCode.MISSING_PRIMARY_SPAN,
            message=f"A {kind} sub-diagnostic requires a primary_span() field",
        )

    @staticmethod
    def missing_suggestion_parts() -> DeriveDiagnostic:
        """Multipart suggestion sub-diagnostic without parts."""
        return DeriveDiagnostic(
            code=DeriveCode.MISSING_SUGGESTION_PARTS,
            message="A multipart suggestion requires at least one suggestion_part() field",
        )

    @staticmethod
    def no_variants(type_name: str) -> DeriveDiagnostic:
        """Choice type without any variant classes."""
        return DeriveDiagnostic(
            code=DeriveCode.NO_VARIANTS,
            message=f"Choice type '{type_name}' declares no variants",
            hint="Decorate nested dataclasses with @variant(...)",
        )

    @staticmethod
    def duplicate_applicability(field_name: str, first: str) -> DeriveDiagnostic:
        """Two fields tagged applicability()."""
        return DeriveDiagnostic(
            code=DeriveCode.DUPLICATE_APPLICABILITY,
            message=(
                f"Duplicate applicability source: fields '{first}' and "
                f"'{field_name}' are both tagged applicability()"
            ),
        )

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    @staticmethod
    def unknown_message_key(key: str) -> DeriveDiagnostic:
        """Referenced message key is absent from the catalog."""
        return DeriveDiagnostic(
            code=DeriveCode.UNKNOWN_MESSAGE_KEY,
            message=f"Message key '{key}' not found in catalog",
            hint="Check that the message is defined in the loaded resources",
        )

    @staticmethod
    def unknown_subkey(key: str, attr: str) -> DeriveDiagnostic:
        """Referenced sub-key is absent from the message."""
        return DeriveDiagnostic(
            code=DeriveCode.UNKNOWN_SUBKEY,
            message=f"Sub-key '.{attr}' not found in message '{key}'",
            hint=f"Add '.{attr} = ...' under '{key}' in the catalog",
        )

    @staticmethod
    def unknown_placeholder(
        key: str, attr: str | None, name: str, *, strict: bool
    ) -> DeriveDiagnostic:
        """Catalog text references a variable no field provides."""
        target = key if attr is None else f"{key}.{attr}"
        return DeriveDiagnostic(
            code=DeriveCode.UNKNOWN_PLACEHOLDER,
            message=f"Placeholder '${name}' in '{target}' is not provided by any field",
            hint="Add a field with this name or rename the placeholder",
            severity="error" if strict else "warning",
        )

    @staticmethod
    def catalog_syntax(detail: str) -> DeriveDiagnostic:
        """Catalog resource entry could not be parsed."""
        return DeriveDiagnostic(
            code=DeriveCode.CATALOG_SYNTAX,
            message=f"Catalog syntax error: {detail}",
        )

    @staticmethod
    def catalog_duplicate_entry(entry_id: str) -> DeriveDiagnostic:
        """Catalog entry redefined; the later definition wins."""
        return DeriveDiagnostic(
            code=DeriveCode.CATALOG_DUPLICATE_ENTRY,
            message=f"Catalog entry '{entry_id}' defined more than once",
            hint="The later definition overwrites the earlier one",
            severity="warning",
        )
