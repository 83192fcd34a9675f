"""Tests for authoring diagnostics: codes, locations, errors and formatting."""

from __future__ import annotations

from dataclasses import replace

import pytest
from hypothesis import given
from hypothesis import strategies as st

from diagderive.diagnostics import (
    CatalogSyntaxError,
    DeriveCode,
    DeriveDiagnostic,
    DeriveError,
    DeriveFormatter,
    DiagnosticDeriveError,
    ErrorTemplate,
    OutputFormat,
    SourceLocation,
)

HERE = SourceLocation("errors.py", 14, 5)


def located(
    diagnostic: DeriveDiagnostic, type_name: str, field: str | None = None
) -> DeriveDiagnostic:
    return replace(diagnostic, location=HERE, type_name=type_name, field_name=field)


class TestDeriveCode:
    """Codes are unique and grouped by category."""

    def test_values_unique(self) -> None:
        values = [code.value for code in DeriveCode]
        assert len(values) == len(set(values))

    @pytest.mark.parametrize(
        ("code", "category"),
        [
            (DeriveCode.UNKNOWN_ATTRIBUTE, 1),
            (DeriveCode.CONFLICTING_ATTRIBUTES, 2),
            (DeriveCode.DUPLICATE_PRIMARY_SPAN, 3),
            (DeriveCode.UNKNOWN_MESSAGE_KEY, 4),
        ],
    )
    def test_category_ranges(self, code: DeriveCode, category: int) -> None:
        assert code.value // 1000 == category


class TestSourceLocation:
    """1-indexed positions."""

    def test_str(self) -> None:
        assert str(HERE) == "errors.py:14:5"
        assert str(SourceLocation("a.py", 3)) == "a.py:3:1"

    @pytest.mark.parametrize(("line", "column"), [(0, 1), (1, 0), (-3, 2)])
    def test_rejects_zero_based(self, line: int, column: int) -> None:
        with pytest.raises(ValueError, match="1-indexed"):
            SourceLocation("a.py", line, column)

    @given(st.integers(min_value=1), st.integers(min_value=1))
    def test_str_round_trip(self, line: int, column: int) -> None:
        """PROPERTY: the printed position splits back into its line and column."""
        text = str(SourceLocation("pkg/mod.py", line, column))
        file, printed_line, printed_column = text.rsplit(":", 2)
        assert (file, int(printed_line), int(printed_column)) == ("pkg/mod.py", line, column)


class TestDeriveDiagnostic:
    """Records and severity."""

    def test_str_is_message(self) -> None:
        diagnostic = ErrorTemplate.missing_slug("Foo")
        assert str(diagnostic) == "'Foo' declares no message key"

    def test_warning_is_not_error(self) -> None:
        warning = ErrorTemplate.unknown_placeholder("k", "a", "n", strict=False)
        assert not warning.is_error
        assert ErrorTemplate.unknown_placeholder("k", None, "n", strict=True).is_error
        assert warning.message == "Placeholder '$n' in 'k.a' is not provided by any field"

    def test_frozen(self) -> None:
        diagnostic = ErrorTemplate.missing_slug("Foo")
        with pytest.raises(AttributeError):
            diagnostic.message = "changed"  # type: ignore[misc]


class TestFormatter:
    """Rust-style and single-line output."""

    def test_rust_format(self) -> None:
        diagnostic = located(
            ErrorTemplate.duplicate_primary_span("other", "span"), "MoveOutOfBorrow", "other"
        )
        assert diagnostic.format_error() == "\n".join(
            [
                "error[DUPLICATE_PRIMARY_SPAN]: Duplicate primary location: field 'other' "
                "and field 'span' both claim primary_span()",
                "  --> errors.py:14:5",
                "  = type: MoveOutOfBorrow",
                "  = field: other",
                "  = help: Remove primary_span() from all but one field",
            ]
        )

    def test_rust_format_minimal(self) -> None:
        assert DeriveFormatter().format(ErrorTemplate.missing_suggestion_parts()) == (
            "error[MISSING_SUGGESTION_PARTS]: "
            "A multipart suggestion requires at least one suggestion_part() field"
        )

    def test_simple_format(self) -> None:
        formatter = DeriveFormatter(output_format=OutputFormat.SIMPLE)
        diagnostic = located(ErrorTemplate.missing_slug("Foo"), "Foo")
        assert formatter.format(diagnostic) == (
            "MISSING_SLUG: 'Foo' declares no message key (errors.py:14:5)"
        )

    def test_color(self) -> None:
        formatter = DeriveFormatter(color=True)
        error = formatter.format(ErrorTemplate.missing_slug("Foo"))
        warning = formatter.format(ErrorTemplate.catalog_duplicate_entry("a"))
        assert error.startswith("\033[1;31merror\033[0m[MISSING_SLUG]")
        assert warning.startswith("\033[1;33mwarning\033[0m[CATALOG_DUPLICATE_ENTRY]")

    def test_format_all(self) -> None:
        formatter = DeriveFormatter(output_format=OutputFormat.SIMPLE)
        text = formatter.format_all(
            [ErrorTemplate.missing_slug("A"), ErrorTemplate.no_variants("B")]
        )
        assert text == (
            "MISSING_SLUG: 'A' declares no message key\n\n"
            "NO_VARIANTS: Choice type 'B' declares no variants"
        )


class TestErrors:
    """Exceptions carry every collected diagnostic."""

    def test_derive_error_from_text(self) -> None:
        error = DeriveError("plain")
        assert str(error) == "plain"
        assert error.diagnostic is None

    def test_derive_error_from_diagnostic(self) -> None:
        diagnostic = ErrorTemplate.missing_slug("Foo")
        error = DeriveError(diagnostic)
        assert error.diagnostic is diagnostic
        assert str(error).startswith("error[MISSING_SLUG]")

    def test_single_diagnostic(self) -> None:
        diagnostic = located(ErrorTemplate.missing_slug("Foo"), "Foo")
        error = DiagnosticDeriveError([diagnostic])
        assert error.diagnostics == (diagnostic,)
        assert str(error) == diagnostic.format_error()

    def test_many_diagnostics(self) -> None:
        first = located(ErrorTemplate.missing_slug("Foo"), "Foo")
        second = located(ErrorTemplate.unknown_message_key("k"), "Bar", "span")
        third = located(ErrorTemplate.unknown_subkey("k", "label"), "Foo", "first")
        error = DiagnosticDeriveError([first, second, third])
        assert str(error).startswith("3 errors while deriving diagnostics\n")
        assert error.type_names == ("Foo", "Bar")
        assert error.for_type("Foo") == (first, third)
        assert error.for_type("Baz") == ()

    def test_catalog_syntax_error(self) -> None:
        diagnostic = ErrorTemplate.catalog_syntax("bad")
        error = CatalogSyntaxError([diagnostic])
        assert error.diagnostics == (diagnostic,)
        assert "Catalog syntax error: bad" in str(error)
        assert isinstance(error, DeriveError)
