"""Quickstart example for diagderive.

Declares borrow-checker style diagnostics as annotated dataclasses, derives
their construction routines against a small Fluent catalog, and renders the
emitted diagnostics with the reference sink.

Python 3.13+.
"""

from dataclasses import dataclass
from typing import Annotated

from diagderive import (
    DeriveSession,
    DiagCtxt,
    DiagnosticDeriveError,
    Edit,
    MessageCatalog,
    Span,
    label,
    multipart_suggestion,
    note,
    primary_span,
    subdiagnostic,
    suggestion,
    suggestion_part,
)

CATALOG = MessageCatalog.from_source("""
borrowck_move = cannot move out of `{ $name }` because it is borrowed
    .label = borrow of `{ $name }` occurs here
    .note = move occurs because `{ $name }` has type `{ $ty }`
    .suggestion = consider cloning the value
unused_variable = unused variable: `{ $name }`
    .suggestion = if this is intentional, prefix it with an underscore
wrap_in_some = expected `Option<{ $ty }>`, found `{ $ty }`
wrap_in_some_suggestion = try wrapping the expression in `Some`
""")

session = DeriveSession(CATALOG)

# Example 1: Labels, notes and a templated suggestion
print("=" * 50)
print("Example 1: Move Out Of Borrow")
print("=" * 50)


@session.diagnostic("borrowck_move", code="E0505")
@dataclass
class MoveOutOfBorrow:
    span: Annotated[Span, primary_span()]
    borrow_span: Annotated[Span, label()]
    note_span: Annotated[Span | None, note()]
    clone_span: Annotated[
        Span, suggestion(code="{name}.clone()", applicability="machine-applicable")
    ]
    name: str
    ty: str


ctxt = DiagCtxt(CATALOG)
move_span = Span(120, 121, "src/main.rs")
ctxt.emit_err(
    MoveOutOfBorrow(move_span, Span(96, 98, "src/main.rs"), None, move_span, "x", "Vec<u8>")
)
print("\n".join(ctxt.render(ctxt.emitted[-1])))
# Output:
# error[E0505]: cannot move out of `x` because it is borrowed
#   --> Span(lo=120, hi=121, file='src/main.rs')
#   Span(lo=96, hi=98, file='src/main.rs'): borrow of `x` occurs here
#   = suggestion (machine-applicable): consider cloning the value: ... -> 'x.clone()'

# Example 2: Multipart suggestion sub-diagnostic
print("\n" + "=" * 50)
print("Example 2: Multipart Suggestion")
print("=" * 50)


@session.subdiagnostic(
    multipart_suggestion("wrap_in_some_suggestion", applicability="maybe-incorrect")
)
@dataclass
class WrapInSome:
    open_span: Annotated[Span, suggestion_part("Some(")]
    close_span: Annotated[Span, suggestion_part(")")]


@session.diagnostic("wrap_in_some", code="E0308")
@dataclass
class MismatchedOption:
    span: Span
    ty: str
    fix: Annotated[WrapInSome | None, subdiagnostic()]


expr = Span(40, 45, "src/lib.rs")
ctxt.emit_err(MismatchedOption(expr, "i32", WrapInSome(expr.shrink_to_lo(), expr.shrink_to_hi())))
diag = ctxt.emitted[-1]
print("\n".join(ctxt.render(diag)))
print(f"edits: {[edit.snippet for edit in diag.suggestions[0].edits]}")
# Output ends with:
# edits: ['Some(', ')']

# Example 3: Edit lists as suggestions
print("\n" + "=" * 50)
print("Example 3: Edit Lists")
print("=" * 50)


@session.diagnostic("unused_variable")
@dataclass
class UnusedVariable:
    span: Span
    name: str
    rename: Annotated[list[Edit], suggestion(applicability="machine-applicable")]


binding = Span(8, 9, "src/lib.rs")
ctxt.emit_warn(UnusedVariable(binding, "n", [Edit(binding, "_n")]))
print("\n".join(ctxt.render(ctxt.emitted[-1])))
print(f"errors: {ctxt.err_count}, warnings: {ctxt.warn_count}")
# Output ends with:
# errors: 2, warnings: 1

# Example 4: Declaration errors surface when the class is defined
print("\n" + "=" * 50)
print("Example 4: Generation-Time Errors")
print("=" * 50)

try:

    @session.diagnostic("borrowck_moved")
    @dataclass
    class Misspelled:
        span: Annotated[Span, primary_span()]
        other: Annotated[Span, primary_span()]

except DiagnosticDeriveError as error:
    print(error)
    # Output: one block per problem, with the declaring file and line

# Example 5: Batching collects errors across several declarations
print("\n" + "=" * 50)
print("Example 5: Batched Declarations")
print("=" * 50)

try:
    with session.batch():

        @session.diagnostic("no_such_key")
        @dataclass
        class First:
            span: Span

        @session.diagnostic("unused_variable")
        @dataclass
        class Second:
            span: Annotated[Span, label("missing_label")]

except DiagnosticDeriveError as error:
    print(f"types with errors: {error.type_names}")
    # Output: types with errors: ('First', 'Second')
