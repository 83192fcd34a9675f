"""Run-time side of diagnostic construction.

Generated routines talk to a DiagnosticSink and DiagnosticBuilder; DiagCtxt
and Diag are the reference implementations.

Python 3.13+.
"""

from .diag import CodeSuggestion, Diag, SpanLabel, SubDiagnostic
from .message import DiagArgValue, DiagMessage, IntoDiagArg, into_diag_arg
from .protocols import AddToDiagnostic, DiagnosticBuilder, DiagnosticSink, IntoDiagnostic
from .sink import DiagCtxt

__all__ = [
    "AddToDiagnostic",
    "CodeSuggestion",
    "Diag",
    "DiagArgValue",
    "DiagCtxt",
    "DiagMessage",
    "DiagnosticBuilder",
    "DiagnosticSink",
    "IntoDiagArg",
    "IntoDiagnostic",
    "SpanLabel",
    "SubDiagnostic",
    "into_diag_arg",
]
