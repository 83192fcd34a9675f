"""Construction routine generation.

Emits Python source for one descriptor and compiles it, the way
``dataclasses`` builds ``__init__``: an outer ``__create_fn__`` binds the
constants (message references, templates, enum members) and returns the
routine. Source text depends only on the descriptor, so regenerating from an
unchanged declaration yields byte-identical code.

Fixed emission order for diagnostics:
    1. allocate at severity with the message key
    2. stable code
    3. primary span
    4. labels
    5. interpolation arguments
    6. suggestions
    7. type-level, then field-level notes and helps
    8. sub-diagnostic slots

Python 3.13+.
"""

from __future__ import annotations

import linecache
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import assert_never

from diagderive.constants import EDIT_COUNT_ARG
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
from diagderive.spans import Edit

from .fields import (
    ApplicabilitySource,
    Help,
    InterpolationArg,
    Label,
    Note,
    PrimaryLocation,
    SkippedField,
    SubdiagnosticSlot,
    Suggestion,
    SuggestionPart,
)
from .shape import FieldDescriptor, TypeDescriptor
from .typeshape import TypeShape

__all__ = [
    "DIAGNOSTIC_METHOD",
    "SUBDIAGNOSTIC_METHOD",
    "compile_routine",
    "generate_source",
    "method_name",
    "source_filename",
]

DIAGNOSTIC_METHOD = "into_diagnostic"
SUBDIAGNOSTIC_METHOD = "add_to_diagnostic"

_INDENT = "    "

# Names bound by __create_fn__ for the routine body.
_BINDINGS: dict[str, object] = {
    "Applicability": Applicability,
    "DiagMessage": DiagMessage,
    "Edit": Edit,
    "Severity": Severity,
    "SuggestionStyle": SuggestionStyle,
}


def method_name(descriptor: TypeDescriptor) -> str:
    if descriptor.kind is DescriptorKind.DIAGNOSTIC:
        return DIAGNOSTIC_METHOD
    return SUBDIAGNOSTIC_METHOD


def source_filename(descriptor: TypeDescriptor) -> str:
    """Pseudo file name under which generated source is registered."""
    return f"<diagderive {descriptor.type_name}.{method_name(descriptor)}>"


# ============================================================================
# SOURCE BUILDER
# ============================================================================


@dataclass
class _Writer:
    """Line buffer with indentation and hoisted constants."""

    lines: list[str] = field(default_factory=list)
    constants: list[str] = field(default_factory=list)
    _messages: dict[DiagMessage, str] = field(default_factory=dict)
    _templates: dict[str, str] = field(default_factory=dict)

    def emit(self, depth: int, text: str) -> None:
        self.lines.append(_INDENT * depth + text)

    def message(self, message: DiagMessage) -> str:
        name = self._messages.get(message)
        if name is None:
            name = f"_MSG_{len(self._messages)}"
            self._messages[message] = name
            if message.attr is None:
                self.constants.append(f"{name} = DiagMessage({message.key!r})")
            else:
                self.constants.append(f"{name} = DiagMessage({message.key!r}, {message.attr!r})")
        return name

    def snippet(self, template: str, code_fields: tuple[str, ...]) -> str:
        """Expression producing a suggestion's replacement text."""
        if not code_fields:
            return repr(template.format())
        name = self._templates.get(template)
        if name is None:
            name = f"_CODE_{len(self._templates)}"
            self._templates[template] = name
            self.constants.append(f"{name} = {template!r}")
        kwargs = ", ".join(f"{f}=self.{f}" for f in code_fields)
        return f"{name}.format({kwargs})"


def _each(
    out: _Writer, depth: int, access: str, shape: TypeShape, body: Callable[[int, str], None]
) -> None:
    """Emit ``body`` once per value the field holds."""
    match shape.container:
        case Container.ONE:
            body(depth, access)
        case Container.OPTIONAL:
            out.emit(depth, f"if {access} is not None:")
            body(depth + 1, access)
        case Container.SEQUENCE:
            iterable = f"{access} or ()" if shape.nullable else access
            out.emit(depth, f"for _item in {iterable}:")
            body(depth + 1, "_item")
        case _:
            assert_never(shape.container)


def _call(out: _Writer, method: str, *rest: str) -> Callable[[int, str], None]:
    """Body emitting ``diag.<method>(value, *rest)``."""
    tail = "".join(f", {arg}" for arg in rest)
    return lambda depth, value: out.emit(depth, f"diag.{method}({value}{tail})")


def _enum_member(value: Applicability | SuggestionStyle) -> str:
    return f"{type(value).__name__}.{value.name}"


def _applicability_expr(
    descriptor: TypeDescriptor, source_field: str | None, literal: Applicability | None
) -> str:
    """Sibling field beats literal; literal beats UNSPECIFIED."""
    fallback = _enum_member(literal or Applicability.UNSPECIFIED)
    if source_field is None:
        return fallback
    holder = next(f for f in descriptor.fields if f.name == source_field)
    access = f"self.{source_field}"
    if holder.role.shape.nullable:
        return f"({access} if {access} is not None else {fallback})"
    return access


# ============================================================================
# DIAGNOSTICS
# ============================================================================


def _diagnostic_body(descriptor: TypeDescriptor, out: _Writer, severity: Severity) -> None:
    main = DiagMessage(descriptor.slug)
    out.constants.append(f"_SEVERITY = Severity.{severity.name}")
    out.emit(
        2,
        "diag = sink.create_diagnostic("
        f"_SEVERITY if severity is None else severity, {out.message(main)})",
    )
    if descriptor.code is not None:
        out.emit(2, f"diag.code({descriptor.code!r})")

    primary = descriptor.primary
    if primary is not None:
        _each(out, 2, f"self.{primary.name}", primary.role.shape, _call(out, "span"))

    for f in descriptor.fields_with(PrimaryLocation, Label):
        if f.subkey is None:
            continue
        msg = out.message(main.with_subkey(f.subkey))
        _each(out, 2, f"self.{f.name}", f.role.shape, _call(out, "span_label", msg))

    for name in descriptor.argument_names:
        out.emit(2, f"diag.arg({name!r}, self.{name})")

    for f in descriptor.fields_with(Suggestion):
        _suggestion_field(descriptor, f, out, main)

    for extra in descriptor.extras:
        method = "note" if extra.kind is SubdiagnosticKind.NOTE else "help"
        out.emit(2, f"diag.{method}({out.message(main.with_subkey(extra.subkey))})")
    for f in descriptor.fields_with(Note, Help):
        _note_field(f, out, main)

    _slots(descriptor, out)
    out.emit(2, "return diag")


def _suggestion_field(
    descriptor: TypeDescriptor, f: FieldDescriptor, out: _Writer, main: DiagMessage
) -> None:
    role = f.role
    assert isinstance(role, Suggestion)  # noqa: S101 - narrowed by fields_with
    assert f.subkey is not None  # noqa: S101
    msg = out.message(main.with_subkey(f.subkey))
    style = _enum_member(role.style)
    access = f"self.{f.name}"

    match role.source:
        case SuggestionSource.SPAN:
            applicability = _applicability_expr(
                descriptor, role.applicability_field, role.applicability
            )
            snippet = out.snippet(role.code or "", role.code_fields)
            body = _call(out, "span_suggestion", msg, snippet, applicability, style)
            _each(out, 2, access, role.shape, body)
        case SuggestionSource.SPAN_WITH_APPLICABILITY:
            snippet = out.snippet(role.code or "", role.code_fields)

            def carried(depth: int, value: str) -> None:
                out.emit(depth, f"_span, _applicability = {value}")
                out.emit(
                    depth,
                    f"diag.span_suggestion(_span, {msg}, {snippet}, _applicability, {style})",
                )

            _each(out, 2, access, role.shape, carried)
        case SuggestionSource.EDITS:
            applicability = _applicability_expr(
                descriptor, role.applicability_field, role.applicability
            )
            iterable = f"{access} or ()" if role.shape.nullable else access
            count = repr(EDIT_COUNT_ARG)
            out.emit(2, f"_edits = [Edit.coerce(_edit) for _edit in {iterable}]")
            out.emit(2, "if len(_edits) == 1:")
            out.emit(
                3,
                f"diag.span_suggestion(_edits[0].span, {msg}, _edits[0].snippet, "
                f"{applicability}, {style}, args={{{count}: 1}})",
            )
            out.emit(2, "elif _edits:")
            out.emit(
                3,
                f"diag.multipart_suggestion({msg}, _edits, {applicability}, {style}, "
                f"args={{{count}: len(_edits)}})",
            )
        case _:
            assert_never(role.source)


def _note_field(f: FieldDescriptor, out: _Writer, main: DiagMessage) -> None:
    role = f.role
    assert isinstance(role, Note | Help)  # noqa: S101 - narrowed by fields_with
    assert f.subkey is not None  # noqa: S101
    method = "note" if isinstance(role, Note) else "help"
    msg = out.message(main.with_subkey(f.subkey))
    if role.is_flag:
        out.emit(2, f"if self.{f.name}:")
        out.emit(3, f"diag.{method}({msg})")
        return
    _each(out, 2, f"self.{f.name}", role.shape, _call(out, f"span_{method}", msg))


def _slots(descriptor: TypeDescriptor, out: _Writer) -> None:
    for f in descriptor.fields_with(SubdiagnosticSlot):
        _each(out, 2, f"self.{f.name}", f.role.shape, _call(out, "subdiagnostic"))


# ============================================================================
# SUB-DIAGNOSTICS
# ============================================================================


def _subdiagnostic_body(descriptor: TypeDescriptor, out: _Writer) -> None:
    msg = out.message(DiagMessage(descriptor.slug))
    names = descriptor.argument_names
    if names:
        out.emit(2, "args = {")
        for name in names:
            out.emit(3, f"{name!r}: self.{name},")
        out.emit(2, "}")
    else:
        out.emit(2, "args = {}")

    primary = descriptor.primary
    subkind = descriptor.subkind
    style = _enum_member(descriptor.style)
    match subkind:
        case SubdiagnosticKind.LABEL | SubdiagnosticKind.SUGGESTION:
            assert primary is not None  # noqa: S101 - checked by the analyzer
            body = _call(out, "span_label", msg, "args=args")
            if subkind is SubdiagnosticKind.SUGGESTION:
                applicability = _applicability_expr(
                    descriptor, descriptor.applicability_field, descriptor.applicability
                )
                snippet = out.snippet(descriptor.suggestion_code or "", descriptor.code_fields)
                body = _call(
                    out, "span_suggestion", msg, snippet, applicability, style, "args=args"
                )
            _each(out, 2, f"self.{primary.name}", primary.role.shape, body)
        case SubdiagnosticKind.NOTE | SubdiagnosticKind.HELP:
            method = subkind.value
            if primary is None:
                out.emit(2, f"diag.{method}({msg}, args=args)")
            else:
                access = f"self.{primary.name}"
                spanned = f"diag.span_{method}({access}, {msg}, args=args)"
                if primary.role.shape.container is Container.OPTIONAL:
                    out.emit(2, f"if {access} is not None:")
                    out.emit(3, spanned)
                    out.emit(2, "else:")
                    out.emit(3, f"diag.{method}({msg}, args=args)")
                else:
                    out.emit(2, spanned)
        case SubdiagnosticKind.WARNING:
            if primary is None:
                out.emit(2, f"diag.warn({msg}, args=args)")
            else:
                out.emit(2, f"diag.warn({msg}, self.{primary.name}, args=args)")
        case SubdiagnosticKind.MULTIPART_SUGGESTION:
            out.emit(2, "parts = []")
            for f in descriptor.fields_with(SuggestionPart):
                role = f.role
                assert isinstance(role, SuggestionPart)  # noqa: S101
                snippet = out.snippet(role.code, role.code_fields)
                _each(
                    out,
                    2,
                    f"self.{f.name}",
                    role.shape,
                    lambda d, v, s=snippet: out.emit(d, f"parts.append(Edit({v}, {s}))"),
                )
            applicability = _applicability_expr(
                descriptor, descriptor.applicability_field, descriptor.applicability
            )
            out.emit(2, "if parts:")
            out.emit(
                3, f"diag.multipart_suggestion({msg}, parts, {applicability}, {style}, args=args)"
            )
        case None:
            msg_text = f"Sub-diagnostic descriptor {descriptor.type_name} has no kind"
            raise ValueError(msg_text)
        case _:
            assert_never(subkind)

    _slots(descriptor, out)


# ============================================================================
# ENTRY POINTS
# ============================================================================


def _role_names(descriptor: TypeDescriptor) -> Iterator[str]:
    for f in descriptor.fields:
        match f.role:
            case (
                PrimaryLocation()
                | Label()
                | Suggestion()
                | Note()
                | Help()
                | SubdiagnosticSlot()
                | InterpolationArg()
                | ApplicabilitySource()
                | SuggestionPart()
                | SkippedField()
            ):
                yield f"{f.name}: {type(f.role).__name__}"
            case _:
                assert_never(f.role)


def generate_source(
    descriptor: TypeDescriptor, default_severity: Severity = Severity.ERROR
) -> str:
    """Python source of the construction routine for one descriptor.

    Args:
        descriptor: Analyzed type
        default_severity: Severity used when neither the declaration nor the
            caller gives one (diagnostics only)

    Returns:
        Source defining ``__create_fn__``, which returns the routine
    """
    out = _Writer()
    name = method_name(descriptor)
    if descriptor.kind is DescriptorKind.DIAGNOSTIC:
        out.emit(1, f"def {name}(self, sink, severity=None):")
        _diagnostic_body(descriptor, out, descriptor.severity or default_severity)
    else:
        out.emit(1, f"def {name}(self, diag):")
        _subdiagnostic_body(descriptor, out)

    header = [
        f"# {descriptor.kind.value} {descriptor.type_name} ({descriptor.slug})",
        *(f"#   {line}" for line in _role_names(descriptor)),
        f"def __create_fn__({', '.join(_BINDINGS)}):",
    ]
    body = [_INDENT + constant for constant in out.constants]
    footer = [f"{_INDENT}return {name}"]
    return "\n".join([*header, *body, *out.lines, *footer]) + "\n"


def compile_routine(
    descriptor: TypeDescriptor,
    default_severity: Severity = Severity.ERROR,
    *,
    register_linecache: bool = True,
) -> tuple[Callable[..., object], str]:
    """Generate, compile and instantiate the routine for a descriptor.

    Returns:
        Tuple of (routine function, its source)
    """
    source = generate_source(descriptor, default_severity)
    filename = source_filename(descriptor)
    code = compile(source, filename, "exec")
    if register_linecache:
        linecache.cache[filename] = (len(source), None, source.splitlines(keepends=True), filename)
    namespace: dict[str, object] = {}
    exec(code, {}, namespace)  # noqa: S102 - source built from a validated descriptor
    create = namespace["__create_fn__"]
    routine = create(**_BINDINGS)  # type: ignore[operator]
    return routine, source
