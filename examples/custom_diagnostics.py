"""Hand-written diagnostics alongside derived ones.

Shows the escape hatch for diagnostics whose shape depends on run-time
values: a type implements ``into_diagnostic`` itself, drives the builder
protocol directly, and still attaches derived sub-diagnostics. Also shows
session configuration and the generated source of a derived routine.

Python 3.13+.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from diagderive import (
    DeriveConfig,
    DeriveSession,
    DiagCtxt,
    DiagMessage,
    DiagnosticBuilder,
    DiagnosticSink,
    MessageCatalog,
    Severity,
    Span,
    label,
    primary_span,
)
from diagderive.derive.session import SOURCE_ATTRIBUTE

# Placeholder warnings from the derive session go through logging
logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

CATALOG = MessageCatalog.from_source("""
trait_impl_conflict = found both positive and negative implementation of trait `{ $trait_desc }`
    .positive = positive implementation here
    .negative = negative implementation here
closure_fnmut_captured = closure is `FnMut` because it mutates `{ $place }`
unused_import = unused import: `{ $path }`
    .label = imported as `{ $alias }`
""")

session = DeriveSession(CATALOG, config=DeriveConfig(default_severity=Severity.WARNING))
ctxt = DiagCtxt(CATALOG)

TRAIT_CONFLICT = DiagMessage("trait_impl_conflict")


@session.subdiagnostic(label("closure_fnmut_captured"))
@dataclass
class FnMutCaptured:
    span: Span
    place: str


# Example 1: Branching on a run-time flag
print("=" * 50)
print("Example 1: Hand-Written Diagnostic")
print("=" * 50)


@dataclass
class NegativePositiveConflict:
    span: Span
    trait_desc: str
    positive_span: Span
    negative_span: Span
    found_negative: bool
    captured: FnMutCaptured | None = None

    def into_diagnostic(
        self, sink: DiagnosticSink, severity: Severity | None = None
    ) -> DiagnosticBuilder:
        diag = sink.create_diagnostic(severity or Severity.ERROR, TRAIT_CONFLICT)
        diag.code("E0751").span(self.span).arg("trait_desc", self.trait_desc)
        if self.found_negative:
            diag.span_label(self.negative_span, TRAIT_CONFLICT.with_subkey("negative"))
        else:
            diag.span_label(self.positive_span, TRAIT_CONFLICT.with_subkey("positive"))
        if self.captured is not None:
            diag.subdiagnostic(self.captured)
        return diag


file = "src/lib.rs"
ctxt.emit_err(
    NegativePositiveConflict(
        Span(0, 30, file),
        "Send",
        Span(40, 60, file),
        Span(70, 95, file),
        found_negative=True,
        captured=FnMutCaptured(Span(100, 107, file), "counter"),
    )
)
print("\n".join(ctxt.render(ctxt.emitted[-1])))

# Example 2: Session default severity
print("\n" + "=" * 50)
print("Example 2: Configured Default Severity")
print("=" * 50)


@session.diagnostic("unused_import")
@dataclass
class UnusedImport:
    span: Annotated[Span, primary_span(), label()]
    path: str
    alias: str


ctxt.emit(UnusedImport(Span(4, 20, file), "std::fmt", "fmt"))
print("\n".join(ctxt.render(ctxt.emitted[-1])))
print(f"warnings: {ctxt.warn_count}")
# Output ends with:
# warnings: 1

# Example 3: Generated source
print("\n" + "=" * 50)
print("Example 3: Generated Routine")
print("=" * 50)

print(getattr(UnusedImport, SOURCE_ATTRIBUTE))
