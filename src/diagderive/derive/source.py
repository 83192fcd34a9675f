"""Source positions of annotated declarations.

Generation-time errors are anchored at the class or field that caused them.
Class positions come from ``inspect`` and field positions from the class
body parsed with ``ast``. Types created dynamically (``make_dataclass``,
``exec``) have no source and fall back to line 1 of their module file.

Python 3.13+.
"""

from __future__ import annotations

import ast
import inspect
import sys
import textwrap
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

from diagderive.diagnostics import DeriveDiagnostic, SourceLocation

__all__ = ["DeclarationSource", "anchor", "declaration_source"]

_UNKNOWN_FILE = "<unknown>"


@dataclass(frozen=True, slots=True)
class DeclarationSource:
    """Where a class and each of its fields are declared."""

    type_location: SourceLocation
    field_locations: Mapping[str, SourceLocation]

    def field(self, name: str) -> SourceLocation:
        return self.field_locations.get(name, self.type_location)


def _module_file(cls: type) -> str:
    module = sys.modules.get(cls.__module__)
    return getattr(module, "__file__", None) or _UNKNOWN_FILE


def declaration_source(cls: type, field_names: Iterable[str]) -> DeclarationSource:
    """Locate a class and its fields in source.

    Args:
        cls: Annotated class
        field_names: Fields to locate, in declared order

    Returns:
        Locations; unlocatable fields map to the class location
    """
    try:
        lines, start = inspect.getsourcelines(cls)
        filename = inspect.getsourcefile(cls) or _module_file(cls)
    except (OSError, TypeError):
        return DeclarationSource(SourceLocation(_module_file(cls), 1), {})

    start = max(start, 1)
    class_line = lines[0] if lines else ""
    type_location = SourceLocation(filename, start, len(class_line) - len(class_line.lstrip()) + 1)
    return DeclarationSource(type_location, _field_locations(lines, start, filename, field_names))


def _field_locations(
    lines: list[str], start: int, filename: str, field_names: Iterable[str]
) -> dict[str, SourceLocation]:
    """Positions of the annotated assignments directly in the class body.

    Docstrings, methods and nested classes are never matched. Unparseable
    source yields no positions.
    """
    source = textwrap.dedent("".join(lines))
    removed = len(lines[0]) - len(source.splitlines(keepends=True)[0]) if lines else 0
    try:
        module = ast.parse(source)
    except SyntaxError:
        return {}
    classes = [node for node in module.body if isinstance(node, ast.ClassDef)]
    if not classes:
        return {}

    wanted = set(field_names)
    locations: dict[str, SourceLocation] = {}
    for node in classes[0].body:
        match node:
            case ast.AnnAssign(target=ast.Name(id=name)) if name in wanted:
                line = start + node.lineno - 1
                locations.setdefault(
                    name, SourceLocation(filename, line, node.col_offset + removed + 1)
                )
    return locations


def anchor(
    diagnostics: Iterable[DeriveDiagnostic],
    location: SourceLocation,
    type_name: str,
    field_name: str | None = None,
) -> list[DeriveDiagnostic]:
    """Attach declaration position and names to unanchored diagnostics."""
    return [
        replace(d, location=location, type_name=type_name, field_name=field_name)
        for d in diagnostics
    ]
