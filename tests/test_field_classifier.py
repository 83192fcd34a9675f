"""Tests for field classification: one role per field, or errors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

import pytest
from hypothesis import given

from diagderive import Applicability, Edit, Span
from diagderive.derive.attributes import (
    LabelAttr,
    applicability,
    help,  # noqa: A004 - attribute name
    label,
    multipart_suggestion,
    note,
    primary_span,
    skip_arg,
    subdiagnostic,
    suggestion,
    suggestion_part,
    warning,
)
from diagderive.derive.fields import (
    ApplicabilitySource,
    FieldContext,
    FieldSpec,
    Help,
    InterpolationArg,
    Label,
    Note,
    PrimaryLocation,
    SkippedField,
    SubdiagnosticSlot,
    Suggestion,
    SuggestionPart,
    classify_field,
)
from diagderive.derive.typeshape import TypeShape, analyze_type, split_annotated
from diagderive.diagnostics import DeriveCode
from diagderive.enums import Container, DescriptorKind, SuggestionSource, SuggestionStyle
from tests.strategies import field_names, plain_types


class HandWrittenDelta:
    """Implements AddToDiagnostic without deriving."""

    def add_to_diagnostic(self, diag: object) -> None:
        pass


def classify(
    hint: object,
    *metadata: object,
    kind: DescriptorKind = DescriptorKind.DIAGNOSTIC,
    name: str = "field",
    siblings: dict[str, object] | None = None,
) -> object:
    field_types = {name: hint, **(siblings or {})}
    return classify_field(FieldSpec(name, 0, hint, metadata), FieldContext(kind, field_types))


def codes(result: object) -> list[DeriveCode]:
    assert isinstance(result, list), f"expected errors, got {result!r}"
    return [error.code for error in result]


# ============================================================================
# INTERPOLATION ARGUMENTS
# ============================================================================


class TestInterpolationArg:
    """Unannotated fields become message arguments named after the field."""

    def test_plain_field(self) -> None:
        assert classify(str, name="name") == InterpolationArg("name", TypeShape(str))

    def test_location_field_without_marker_is_still_an_argument(self) -> None:
        result = classify(Span, name="other")
        assert result == InterpolationArg("other", TypeShape(Span))

    def test_foreign_metadata_ignored(self) -> None:
        result = classify(int, 7, {"unit": "bytes"}, name="count")
        assert result == InterpolationArg("count", TypeShape(int))

    @given(field_names, plain_types)
    def test_unannotated_fields_are_arguments(self, name: str, hint: object) -> None:
        """PROPERTY: a field without markers is an argument named after the field."""
        result = classify(hint, name=name)
        assert isinstance(result, InterpolationArg)
        assert result.name == name


# ============================================================================
# PRIMARY LOCATION AND LABELS
# ============================================================================


class TestPrimaryLocation:
    """primary_span() on location types."""

    def test_span(self) -> None:
        assert classify(Span, primary_span()) == PrimaryLocation(TypeShape(Span))

    def test_optional_span(self) -> None:
        result = classify(Span | None, primary_span())
        assert isinstance(result, PrimaryLocation)
        assert result.shape.container is Container.OPTIONAL

    def test_string_name_form(self) -> None:
        assert classify(Span, "primary_span") == PrimaryLocation(TypeShape(Span))

    @pytest.mark.parametrize("hint", [str, list[Span], tuple[Span, ...]])
    def test_invalid_types(self, hint: object) -> None:
        assert codes(classify(hint, primary_span())) == [DeriveCode.PRIMARY_SPAN_TYPE_INVALID]

    def test_stacked_label_folds_into_primary(self) -> None:
        result = classify(Span, primary_span(), label("here"))
        assert result == PrimaryLocation(TypeShape(Span), LabelAttr("here"))

    def test_stacked_label_order_irrelevant(self) -> None:
        result = classify(Span, label(), primary_span())
        assert result == PrimaryLocation(TypeShape(Span), LabelAttr())

    def test_stacked_label_not_allowed_in_subdiagnostic(self) -> None:
        result = classify(Span, primary_span(), label(), kind=DescriptorKind.SUBDIAGNOSTIC)
        assert codes(result) == [DeriveCode.ATTRIBUTE_NOT_ALLOWED]

    def test_stacked_label_slug_checked(self) -> None:
        result = classify(Span, primary_span(), label("not valid"))
        assert codes(result) == [DeriveCode.MALFORMED_SLUG]


class TestLabel:
    """label() needs a location type."""

    @pytest.mark.parametrize(
        ("hint", "container"),
        [
            (Span, Container.ONE),
            (Span | None, Container.OPTIONAL),
            (list[Span], Container.SEQUENCE),
            (tuple[Span, ...], Container.SEQUENCE),
        ],
    )
    def test_location_shapes(self, hint: object, container: Container) -> None:
        result = classify(hint, label())
        assert isinstance(result, Label)
        assert result.shape.container is container

    def test_explicit_slug(self) -> None:
        assert classify(Span, label("second")) == Label(TypeShape(Span), "second")

    def test_non_location_rejected(self) -> None:
        assert codes(classify(str, label())) == [DeriveCode.LABEL_REQUIRES_LOCATION]

    def test_not_allowed_on_subdiagnostic_field(self) -> None:
        result = classify(Span, label(), kind=DescriptorKind.SUBDIAGNOSTIC)
        assert codes(result) == [DeriveCode.ATTRIBUTE_NOT_ALLOWED]


# ============================================================================
# NOTES AND HELPS
# ============================================================================


class TestNoteHelp:
    """note()/help() on flags and locations."""

    def test_bool_flag(self) -> None:
        result = classify(bool, note())
        assert isinstance(result, Note)
        assert result.is_flag

    def test_spanned_note(self) -> None:
        result = classify(Span | None, note("moved"))
        assert isinstance(result, Note)
        assert not result.is_flag
        assert result.slug == "moved"

    def test_help_over_sequence(self) -> None:
        result = classify(list[Span], help())
        assert isinstance(result, Help)
        assert result.shape.container is Container.SEQUENCE

    @pytest.mark.parametrize("hint", [str, int, bool | None, list[bool]])
    def test_invalid_types(self, hint: object) -> None:
        assert codes(classify(hint, note())) == [DeriveCode.NOTE_TYPE_INVALID]

    def test_malformed_slug(self) -> None:
        assert codes(classify(bool, help("1x"))) == [DeriveCode.MALFORMED_SLUG]


# ============================================================================
# SUGGESTIONS
# ============================================================================


class TestSuggestion:
    """suggestion() field shapes and applicability sources."""

    def test_span_with_code(self) -> None:
        result = classify(Span, suggestion(code="&mut "))
        assert isinstance(result, Suggestion)
        assert result.source is SuggestionSource.SPAN
        assert result.code == "&mut "
        assert result.applicability is None

    def test_span_requires_code(self) -> None:
        assert codes(classify(Span, suggestion())) == [DeriveCode.SUGGESTION_TYPE_INVALID]

    def test_code_template_fields(self) -> None:
        result = classify(
            Span | None,
            suggestion(code="{name}.clone()"),
            siblings={"name": str},
        )
        assert isinstance(result, Suggestion)
        assert result.code_fields == ("name",)

    def test_code_template_unknown_field(self) -> None:
        result = classify(Span, suggestion(code="{nope}"))
        assert codes(result) == [DeriveCode.UNKNOWN_TEMPLATE_FIELD]

    def test_located_applicability(self) -> None:
        result = classify(tuple[Span, Applicability], suggestion(code="x"))
        assert isinstance(result, Suggestion)
        assert result.source is SuggestionSource.SPAN_WITH_APPLICABILITY

    def test_optional_located_applicability(self) -> None:
        result = classify(tuple[Span, Applicability] | None, suggestion(code="x"))
        assert isinstance(result, Suggestion)
        assert result.shape.container is Container.OPTIONAL

    @pytest.mark.parametrize(
        "hint", [list[Edit], tuple[Edit, ...], list[tuple[Span, str]], list[Edit] | None]
    )
    def test_edit_lists(self, hint: object) -> None:
        result = classify(hint, suggestion())
        assert isinstance(result, Suggestion)
        assert result.source is SuggestionSource.EDITS

    def test_edit_list_rejects_code(self) -> None:
        result = classify(list[Edit], suggestion(code="x"))
        assert codes(result) == [DeriveCode.ATTRIBUTE_NOT_ALLOWED]

    @pytest.mark.parametrize("hint", [str, Edit, list[Span], tuple[Span, str]])
    def test_invalid_types(self, hint: object) -> None:
        result = classify(hint, suggestion(code="x"))
        assert DeriveCode.SUGGESTION_TYPE_INVALID in codes(result)

    def test_literal_style_and_applicability(self) -> None:
        result = classify(
            Span, suggestion(code="x", style="verbose", applicability="machine-applicable")
        )
        assert isinstance(result, Suggestion)
        assert result.style is SuggestionStyle.VERBOSE
        assert result.applicability is Applicability.MACHINE_APPLICABLE

    def test_bad_literals_collected_together(self) -> None:
        result = classify(Span, suggestion(code="x", style="loud", applicability="sure"))
        assert sorted(codes(result), key=lambda c: c.value) == [
            DeriveCode.UNKNOWN_APPLICABILITY,
            DeriveCode.UNKNOWN_STYLE,
        ]

    def test_applicability_from_sibling(self) -> None:
        result = classify(
            Span,
            suggestion(code="x", applicability_from="confidence"),
            siblings={"confidence": Applicability},
        )
        assert isinstance(result, Suggestion)
        assert result.applicability_field == "confidence"

    def test_applicability_from_missing_field(self) -> None:
        result = classify(Span, suggestion(code="x", applicability_from="confidence"))
        assert codes(result) == [DeriveCode.UNKNOWN_APPLICABILITY_SOURCE]

    def test_applicability_from_wrong_type(self) -> None:
        result = classify(
            Span,
            suggestion(code="x", applicability_from="confidence"),
            siblings={"confidence": str},
        )
        assert codes(result) == [DeriveCode.UNKNOWN_APPLICABILITY_SOURCE]

    def test_applicability_from_itself(self) -> None:
        result = classify(
            Span, suggestion(code="x", applicability_from="field"), name="field"
        )
        assert codes(result) == [DeriveCode.UNKNOWN_APPLICABILITY_SOURCE]

    def test_not_allowed_on_subdiagnostic_field(self) -> None:
        result = classify(Span, suggestion(code="x"), kind=DescriptorKind.SUBDIAGNOSTIC)
        assert codes(result) == [DeriveCode.ATTRIBUTE_NOT_ALLOWED]


# ============================================================================
# AUXILIARY ROLES
# ============================================================================


class TestAuxiliaryRoles:
    """Applicability sources, suggestion parts, slots and skipped fields."""

    def test_applicability_source(self) -> None:
        assert classify(Applicability, applicability()) == ApplicabilitySource(
            TypeShape(Applicability)
        )

    def test_optional_applicability_source(self) -> None:
        result = classify(Applicability | None, "applicability")
        assert isinstance(result, ApplicabilitySource)
        assert result.shape.nullable

    @pytest.mark.parametrize("hint", [str, list[Applicability]])
    def test_applicability_source_type(self, hint: object) -> None:
        assert codes(classify(hint, applicability())) == [DeriveCode.APPLICABILITY_TYPE_INVALID]

    def test_suggestion_part(self) -> None:
        result = classify(
            Span,
            suggestion_part("{name}"),
            kind=DescriptorKind.SUBDIAGNOSTIC,
            siblings={"name": str},
        )
        assert result == SuggestionPart(TypeShape(Span), "{name}", ("name",))

    def test_suggestion_part_only_in_subdiagnostics(self) -> None:
        assert codes(classify(Span, suggestion_part("x"))) == [DeriveCode.ATTRIBUTE_NOT_ALLOWED]

    def test_suggestion_part_type(self) -> None:
        result = classify(str, suggestion_part("x"), kind=DescriptorKind.SUBDIAGNOSTIC)
        assert codes(result) == [DeriveCode.SUGGESTION_PART_TYPE_INVALID]

    @pytest.mark.parametrize(
        ("hint", "container"),
        [
            (HandWrittenDelta, Container.ONE),
            (HandWrittenDelta | None, Container.OPTIONAL),
            (list[HandWrittenDelta], Container.SEQUENCE),
        ],
    )
    def test_subdiagnostic_slot(self, hint: object, container: Container) -> None:
        result = classify(hint, subdiagnostic())
        assert isinstance(result, SubdiagnosticSlot)
        assert result.shape.container is container

    def test_subdiagnostic_slot_requires_delta(self) -> None:
        @dataclass
        class NotADelta:
            value: int

        assert codes(classify(NotADelta, subdiagnostic())) == [
            DeriveCode.SUBDIAGNOSTIC_TYPE_INVALID
        ]

    def test_skip_arg(self) -> None:
        assert classify(str, skip_arg()) == SkippedField(TypeShape(str))

    @pytest.mark.parametrize("marker", [warning(), multipart_suggestion()])
    def test_type_level_kinds_rejected_on_fields(self, marker: object) -> None:
        assert codes(classify(Span, marker)) == [DeriveCode.ATTRIBUTE_NOT_ALLOWED]


# ============================================================================
# CONFLICTS
# ============================================================================


class TestConflicts:
    """A field carries one role."""

    def test_two_roles(self) -> None:
        result = classify(Span, label(), note())
        assert codes(result) == [DeriveCode.CONFLICTING_ATTRIBUTES]
        assert "'label', 'note'" in result[0].message  # type: ignore[index]

    def test_primary_twice(self) -> None:
        assert codes(classify(Span, primary_span(), primary_span())) == [
            DeriveCode.CONFLICTING_ATTRIBUTES
        ]

    def test_primary_label_and_more(self) -> None:
        result = classify(Span, primary_span(), label(), note())
        assert codes(result) == [DeriveCode.CONFLICTING_ATTRIBUTES]

    def test_unknown_attribute_name(self) -> None:
        assert codes(classify(Span, "primary")) == [DeriveCode.UNKNOWN_ATTRIBUTE]

    def test_errors_are_unanchored(self) -> None:
        result = classify(str, label())
        assert isinstance(result, list)
        assert all(error.location is None and error.type_name is None for error in result)


# ============================================================================
# MARKERS INSIDE UNIONS AND SEQUENCES
# ============================================================================


def classify_declared(hint: object, **kwargs: object) -> object:
    base, metadata = split_annotated(hint)
    return classify(base, *metadata, **kwargs)  # type: ignore[arg-type]


class TestNestedAnnotated:
    """Markers on a union member or sequence element apply to the whole field."""

    def test_optional_member_metadata_lifted(self) -> None:
        base, metadata = split_annotated(Annotated[Span, label()] | None)
        assert metadata == (label(),)
        assert analyze_type(base) == TypeShape(Span, Container.OPTIONAL, nullable=True)

    def test_sequence_element_metadata_lifted(self) -> None:
        base, metadata = split_annotated(list[Annotated[Span, label()]])
        assert metadata == (label(),)
        assert analyze_type(base) == TypeShape(Span, Container.SEQUENCE)

    def test_optional_label(self) -> None:
        result = classify_declared(Annotated[Span, label()] | None, name="first")
        assert result == Label(TypeShape(Span, Container.OPTIONAL, nullable=True))

    @pytest.mark.parametrize(
        "hint",
        [
            list[Annotated[Span, label("second")]],
            tuple[Annotated[Span, label("second")], ...],
            list[Annotated[Span, label("second")]] | None,
        ],
    )
    def test_sequence_label(self, hint: object) -> None:
        result = classify_declared(hint)
        assert isinstance(result, Label)
        assert result.shape.base is Span
        assert result.shape.container is Container.SEQUENCE
        assert result.slug == "second"

    def test_optional_primary(self) -> None:
        result = classify_declared(Annotated[Span, primary_span()] | None)
        assert result == PrimaryLocation(TypeShape(Span, Container.OPTIONAL, nullable=True))

    def test_outer_and_inner_markers_combined(self) -> None:
        result = classify_declared(Annotated[Annotated[Span, label()] | None, note()])
        assert codes(result) == [DeriveCode.CONFLICTING_ATTRIBUTES]

    def test_fixed_tuple_left_alone(self) -> None:
        hint = tuple[Annotated[Span, label()], Applicability]
        assert split_annotated(hint) == (hint, ())
