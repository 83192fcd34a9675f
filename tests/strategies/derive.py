"""Hypothesis strategies for synthetic annotated dataclasses.

Classification and shape analysis are pure functions of a type definition,
so properties are checked over dataclasses built with make_dataclass rather
than hand-written fixtures.

Event-Emitting Strategies (HypoFuzz-Optimized):
    - derive_field_mix: which roles a generated type carries
    - derive_primary: how the primary location is declared (explicit|implicit|none)
"""

from __future__ import annotations

import keyword
from dataclasses import make_dataclass
from typing import Annotated

from hypothesis import event
from hypothesis import strategies as st

from diagderive import Span, help, label, note, primary_span, skip_arg

# Names a generated field must not take: Python keywords, and names the
# generated routine binds itself.
_RESERVED = frozenset({"self", "sink", "severity", "diag", "args", "parts"})

field_names = st.from_regex(r"[a-z][a-z0-9_]{0,8}", fullmatch=True).filter(
    lambda name: not keyword.iskeyword(name) and name not in _RESERVED
)

plain_types = st.sampled_from([str, int, float, bool, list[str], str | None])

spans = st.builds(
    lambda lo, width, file: Span(lo, lo + width, file),
    st.integers(min_value=0, max_value=10_000),
    st.integers(min_value=0, max_value=200),
    st.sampled_from(["", "main.rs", "lib.rs"]),
)


@st.composite
def unique_names(draw: st.DrawFn, min_size: int = 1, max_size: int = 8) -> list[str]:
    return draw(st.lists(field_names, min_size=min_size, max_size=max_size, unique=True))


@st.composite
def diagnostic_fields(draw: st.DrawFn) -> list[tuple[str, object, str]]:
    """Field declarations for a diagnostic type.

    Returns:
        List of (name, annotation, role) where role is one of "arg", "skip",
        "label", "note", "help" or "primary"

    Events emitted:
    - derive_field_mix={args_only|with_parts}
    - derive_primary={explicit|none}
    """
    names = draw(unique_names(min_size=1, max_size=10))
    fields: list[tuple[str, object, str]] = []
    has_primary = draw(st.booleans())
    for index, name in enumerate(names):
        if has_primary and index == 0:
            fields.append((name, Annotated[Span, primary_span()], "primary"))
            continue
        role = draw(st.sampled_from(["arg", "arg", "skip", "label", "note", "help"]))
        match role:
            case "arg":
                fields.append((name, draw(plain_types), role))
            case "skip":
                fields.append((name, Annotated[str, skip_arg()], role))
            case "label":
                fields.append((name, Annotated[Span, label()], role))
            case "note":
                fields.append((name, Annotated[bool, note()], role))
            case _:
                fields.append((name, Annotated[list[Span], help()], role))
    roles = {role for _, _, role in fields}
    event(f"derive_field_mix={'args_only' if roles <= {'arg'} else 'with_parts'}")
    event(f"derive_primary={'explicit' if has_primary else 'none'}")
    return fields


def build_dataclass(name: str, fields: list[tuple[str, object, str]]) -> type:
    """Dataclass with the given (name, annotation, role) fields."""
    return make_dataclass(name, [(field_name, hint) for field_name, hint, _ in fields])


def sample_value(hint: object, role: str) -> object:
    """A value valid for a field of the given annotation and role."""
    match role:
        case "primary" | "label":
            return Span(0, 1)
        case "note":
            return True
        case "help":
            return [Span(2, 3)]
        case "skip":
            return "skipped"
    if hint is int:
        return 1
    if hint is float:
        return 1.5
    if hint is bool:
        return False
    if hint == list[str]:
        return ["a", "b"]
    return "text"
