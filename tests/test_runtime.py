"""Tests for the reference runtime: Diag builder, argument conversion and DiagCtxt."""

from __future__ import annotations

import threading
from decimal import Decimal
from enum import Enum

import pytest
from hypothesis import given
from hypothesis import strategies as st

from diagderive import Applicability, DiagCtxt, DiagMessage, Edit, MessageCatalog, Severity, Span
from diagderive.runtime import CodeSuggestion, SpanLabel, SubDiagnostic, into_diag_arg

S = Span(10, 14, "main.rs")
S2 = Span(2, 6, "main.rs")


class Mutability(Enum):
    MUT = "mut"
    NOT = "not"


class TestDiagMessage:
    """Catalog references."""

    def test_str(self) -> None:
        assert str(DiagMessage("borrowck_move")) == "borrowck_move"
        assert str(DiagMessage("borrowck_move", "label")) == "borrowck_move.label"

    def test_with_subkey(self) -> None:
        assert DiagMessage("a").with_subkey("note") == DiagMessage("a", "note")

    def test_hashable(self) -> None:
        assert len({DiagMessage("a"), DiagMessage("a"), DiagMessage("a", "b")}) == 2


class TestIntoDiagArg:
    """Field values become catalog-compatible arguments."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, None),
            (True, "true"),
            (False, "false"),
            (3, 3),
            (2.5, 2.5),
            (Decimal("1.25"), Decimal("1.25")),
            ("x", "x"),
            (Mutability.MUT, "mut"),
            (["a", 1], ("a", "1")),
            (("b",), ("b",)),
            ({"z", "a"}, ("a", "z")),
            (S, str(S)),
        ],
    )
    def test_conversion(self, value: object, expected: object) -> None:
        assert into_diag_arg(value) == expected

    @given(st.lists(st.one_of(st.text(), st.integers(), st.booleans())))
    def test_sequences_become_string_tuples(self, values: list[object]) -> None:
        """PROPERTY: sequence arguments are tuples of strings of the same length."""
        converted = into_diag_arg(values)
        assert isinstance(converted, tuple)
        assert len(converted) == len(values)
        assert all(isinstance(item, str) for item in converted)


class TestDiag:
    """Builder operations record parts grouped by kind."""

    def test_builder_chain(self) -> None:
        diag = DiagCtxt().create_diagnostic(Severity.ERROR, DiagMessage("borrowck_move"))
        result = (
            diag.code("E0505")
            .span(S)
            .span_label(S2, DiagMessage("borrowck_move", "label"))
            .arg("name", "x")
            .note(DiagMessage("borrowck_move", "note"))
            .span_help(S2, "literal help")
            .warn("careful", S)
        )
        assert result is diag
        assert diag.stable_code == "E0505"
        assert diag.primary_span == S
        assert diag.labels == [SpanLabel(S2, DiagMessage("borrowck_move", "label"))]
        assert [c.severity for c in diag.children] == [
            Severity.NOTE,
            Severity.HELP,
            Severity.WARNING,
        ]
        assert diag.children[1] == SubDiagnostic(Severity.HELP, "literal help", S2)

    def test_args_read_only_and_converted(self) -> None:
        diag = DiagCtxt().create_diagnostic(Severity.ERROR, "m")
        diag.arg("flag", True).arg("flag", False).arg("n", 2)
        assert dict(diag.args) == {"flag": "false", "n": 2}
        with pytest.raises(TypeError):
            diag.args["n"] = 3  # type: ignore[index]

    def test_part_args_scoped(self) -> None:
        diag = DiagCtxt().create_diagnostic(Severity.ERROR, "m")
        diag.note("n", args={"place": ["a", "b"]})
        assert dict(diag.children[0].args) == {"place": ("a", "b")}
        assert dict(diag.args) == {}

    def test_suggestions(self) -> None:
        diag = DiagCtxt().create_diagnostic(Severity.ERROR, "m")
        diag.span_suggestion(S, "clone", "x.clone()", Applicability.MACHINE_APPLICABLE)
        diag.multipart_suggestion("wrap", [(S, "Some("), Edit(S2, ")")], Applicability.UNSPECIFIED)
        single, multi = diag.suggestions
        assert single == CodeSuggestion(
            (Edit(S, "x.clone()"),), "clone", Applicability.MACHINE_APPLICABLE
        )
        assert not single.is_multipart
        assert multi.edits == (Edit(S, "Some("), Edit(S2, ")"))
        assert multi.is_multipart

    def test_double_emit_rejected(self) -> None:
        ctxt = DiagCtxt()
        diag = ctxt.create_diagnostic(Severity.ERROR, DiagMessage("use_of_moved"))
        diag.emit()
        assert diag.is_emitted
        with pytest.raises(RuntimeError, match="already emitted"):
            diag.emit()
        assert len(ctxt.emitted) == 1

    def test_repr(self) -> None:
        diag = DiagCtxt().create_diagnostic(Severity.WARNING, DiagMessage("a", "b"))
        assert repr(diag) == "Diag(severity=warning, message=a.b, code=None)"


class TestDiagCtxt:
    """Counting, clearing and rendering."""

    def test_counts(self) -> None:
        ctxt = DiagCtxt()
        for severity in (Severity.ERROR, Severity.ERROR, Severity.WARNING, Severity.NOTE):
            ctxt.create_diagnostic(severity, "m").emit()
        assert ctxt.err_count == 2
        assert ctxt.warn_count == 1
        assert ctxt.has_errors()
        ctxt.clear()
        assert ctxt.emitted == ()
        assert not ctxt.has_errors()

    def test_translate_without_catalog(self) -> None:
        ctxt = DiagCtxt()
        assert ctxt.translate(DiagMessage("borrowck_move", "label")) == "borrowck_move.label"
        assert ctxt.translate("literal") == "literal"

    def test_render_layers_part_args(self, catalog: MessageCatalog) -> None:
        ctxt = DiagCtxt(catalog)
        diag = ctxt.create_diagnostic(Severity.ERROR, DiagMessage("closure_kind_mismatch"))
        diag.code("E0525").span(S).arg("expected", "Fn").arg("found", "FnMut")
        diag.span_note(
            S2, DiagMessage("closure_fnmut_captured"), args={"place": "counter"}
        )
        diag.span_suggestion(
            S2,
            DiagMessage("borrow_suggestion"),
            "&counter",
            Applicability.MAYBE_INCORRECT,
        )
        assert ctxt.render(diag) == [
            "error[E0525]: expected a closure that implements `Fn`, found `FnMut`",
            f"  --> {S}",
            f"  = note ({S2}): closure is `FnMut` because it mutates `counter`",
            f"  = suggestion (maybe-incorrect): consider borrowing here: {S2} -> '&counter'",
        ]

    def test_concurrent_emit(self) -> None:
        ctxt = DiagCtxt()

        def emit_many() -> None:
            for _ in range(100):
                ctxt.create_diagnostic(Severity.WARNING, "m").emit()

        threads = [threading.Thread(target=emit_many) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert ctxt.warn_count == 400
