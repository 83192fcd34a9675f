"""Catalog resource parser.

Parses the Fluent subset used by diagnostic catalogs:

    # comments
    borrowck_move_out_of_borrow = cannot move out of { $name } because it is borrowed
        .label = cannot move out of borrow
        .first_borrow_label = `{ $ty }` first borrowed here

    trait_selection_adjust_signature_borrow = consider adjusting the signature so it borrows its {
        $len ->
            [one] argument
           *[other] arguments
        }

Entries are grouped line by line (an entry starts in column 0, continuation
lines are indented), then each pattern is parsed with the immutable Cursor.
Unparseable entries become Junk rather than aborting the whole resource.

Python 3.13+.
"""

import re

from .ast import (
    Attribute,
    Entry,
    Expression,
    InlineExpression,
    Junk,
    MessageReference,
    NumberLiteral,
    Pattern,
    PatternElement,
    Placeable,
    Resource,
    SelectExpression,
    StringLiteral,
    TermReference,
    TextElement,
    VariableReference,
    Variant,
)
from .cursor import Cursor, PatternSyntaxError

__all__ = ["parse_pattern_text", "parse_resource"]

_ENTRY_START = re.compile(r"(-?)([a-zA-Z][a-zA-Z0-9_-]*) *=(.*)")
_ATTRIBUTE_START = re.compile(r" +\.([a-zA-Z][a-zA-Z0-9_-]*) *=(.*)")
_IDENTIFIER_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
_IDENTIFIER_CHARS = _IDENTIFIER_START | frozenset("0123456789_-")
_DIGITS = frozenset("0123456789")


def parse_resource(source: str) -> Resource:
    """Parse catalog source into entries and junk.

    Args:
        source: FTL source text (LF or CRLF line endings)

    Returns:
        Resource with parsed entries and rejected blocks
    """
    lines = source.replace("\r\n", "\n").split("\n")
    entries: list[Entry] = []
    junk: list[Junk] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        if not line.strip() or line.startswith("#"):
            index += 1
            continue

        start = index
        index += 1
        while index < len(lines) and (not lines[index].strip() or lines[index][0] == " "):
            index += 1
        block = lines[start:index]

        if line[0] == " ":
            junk.append(Junk("\n".join(block).rstrip(), "Unexpected indented line", start + 1))
            continue

        try:
            entries.append(_parse_entry(block, start + 1))
        except PatternSyntaxError as e:
            junk.append(Junk("\n".join(block).rstrip(), e.message, start + 1))

    return Resource(entries=tuple(entries), junk=tuple(junk))


def _parse_entry(block: list[str], line: int) -> Entry:
    match = _ENTRY_START.fullmatch(block[0])
    if match is None:
        msg = f"Expected an entry definition like 'key = text', found {block[0]!r}"
        raise PatternSyntaxError(msg, 0)
    is_term = match.group(1) == "-"
    entry_id = match.group(2)

    segments: list[tuple[str | None, str, list[str]]] = [(None, match.group(3), [])]
    depth = _brace_delta(match.group(3))
    for text in block[1:]:
        attr_match = _ATTRIBUTE_START.fullmatch(text) if depth == 0 else None
        if attr_match is not None:
            segments.append((attr_match.group(1), attr_match.group(2), []))
            depth = _brace_delta(attr_match.group(2))
        else:
            segments[-1][2].append(text)
            depth += _brace_delta(text)

    value: Pattern | None = None
    attributes: list[Attribute] = []
    for name, inline, rest in segments:
        pattern_text = _join_pattern_lines(inline, rest)
        if name is None:
            value = parse_pattern_text(pattern_text) if pattern_text else None
        else:
            if not pattern_text:
                msg = f"Attribute '.{name}' of '{entry_id}' has no value"
                raise PatternSyntaxError(msg, 0)
            attributes.append(Attribute(name, parse_pattern_text(pattern_text)))

    if value is None and (is_term or not attributes):
        msg = f"Entry '{entry_id}' has no value"
        raise PatternSyntaxError(msg, 0)
    return Entry(entry_id, value, tuple(attributes), is_term=is_term, line=line)


def _brace_delta(text: str) -> int:
    # Quoted literals like { "{" } must not affect the balance.
    stripped = re.sub(r'"(?:[^"\\]|\\.)*"', "", text)
    return stripped.count("{") - stripped.count("}")


def _join_pattern_lines(inline: str, rest: list[str]) -> str:
    """Apply Fluent block-text rules: strip common indent, trim blank edges."""
    indents = [len(text) - len(text.lstrip(" ")) for text in rest if text.strip()]
    common = min(indents, default=0)
    lines = [text[common:] for text in rest]
    first = inline.strip(" ")
    if first:
        lines.insert(0, first)
    return "\n".join(lines).strip("\n").rstrip()


def parse_pattern_text(text: str) -> Pattern:
    """Parse one pattern's text.

    Raises:
        PatternSyntaxError: On malformed placeables
    """
    pattern, cursor = _parse_pattern(Cursor(text, 0), in_variant=False)
    if not cursor.is_eof:
        msg = "Unbalanced '}' in text"
        raise PatternSyntaxError(msg, cursor.pos)
    return pattern


def _parse_pattern(cursor: Cursor, *, in_variant: bool) -> tuple[Pattern, Cursor]:
    elements: list[PatternElement] = []
    text: list[str] = []
    while not cursor.is_eof:
        char = cursor.current
        if char == "{":
            if text:
                elements.append(TextElement("".join(text)))
                text = []
            placeable, cursor = _parse_placeable(cursor.advance())
            elements.append(placeable)
        elif char == "}":
            break
        elif char == "\n" and in_variant and _variant_ends_at(cursor):
            break
        else:
            text.append(char)
            cursor = cursor.advance()
    if text:
        elements.append(TextElement("".join(text)))
    return Pattern(tuple(elements)), cursor


def _variant_ends_at(cursor: Cursor) -> bool:
    nxt = cursor.advance().skip_blank()
    return nxt.is_eof or nxt.current in ("[", "*", "}")


def _parse_placeable(cursor: Cursor) -> tuple[Placeable, Cursor]:
    cursor = cursor.skip_blank()
    selector, cursor = _parse_inline_expression(cursor)
    cursor = cursor.skip_blank()
    expression: Expression = selector
    if cursor.startswith("->"):
        variants, cursor = _parse_variants(cursor.advance(2))
        expression = SelectExpression(selector, variants)
        cursor = cursor.skip_blank()
    return Placeable(expression), cursor.expect("}")


def _parse_inline_expression(cursor: Cursor) -> tuple[InlineExpression, Cursor]:
    char = cursor.current
    if char == "$":
        name, cursor = _parse_identifier(cursor.advance())
        return VariableReference(name), cursor
    if char == '"':
        return _parse_string_literal(cursor.advance())
    if char in _DIGITS or (char == "-" and cursor.peek(1) in _DIGITS):
        return _parse_number_literal(cursor)
    if char == "-":
        term_id, cursor = _parse_identifier(cursor.advance())
        attribute, cursor = _parse_optional_attribute(cursor)
        return TermReference(term_id, attribute), cursor
    if char in _IDENTIFIER_START:
        message_id, cursor = _parse_identifier(cursor)
        if cursor.peek() == "(":
            msg = f"Function calls are not supported: {message_id}()"
            raise PatternSyntaxError(msg, cursor.pos)
        attribute, cursor = _parse_optional_attribute(cursor)
        return MessageReference(message_id, attribute), cursor
    msg = f"Expected an expression, found {char!r}"
    raise PatternSyntaxError(msg, cursor.pos)


def _parse_identifier(cursor: Cursor) -> tuple[str, Cursor]:
    if cursor.is_eof or cursor.current not in _IDENTIFIER_START:
        msg = "Expected an identifier"
        raise PatternSyntaxError(msg, cursor.pos)
    start = cursor.pos
    while not cursor.is_eof and cursor.current in _IDENTIFIER_CHARS:
        cursor = cursor.advance()
    return cursor.source[start : cursor.pos], cursor


def _parse_optional_attribute(cursor: Cursor) -> tuple[str | None, Cursor]:
    if cursor.peek() != ".":
        return None, cursor
    return _parse_identifier(cursor.advance())


def _parse_string_literal(cursor: Cursor) -> tuple[StringLiteral, Cursor]:
    chars: list[str] = []
    while True:
        char = cursor.current
        if char == '"':
            return StringLiteral("".join(chars)), cursor.advance()
        if char == "\n":
            msg = "Unterminated string literal"
            raise PatternSyntaxError(msg, cursor.pos)
        if char == "\\":
            cursor = cursor.advance()
            escaped = cursor.current
            if escaped not in ('"', "\\"):
                msg = f"Unknown escape sequence \\{escaped}"
                raise PatternSyntaxError(msg, cursor.pos)
            char = escaped
        chars.append(char)
        cursor = cursor.advance()


def _parse_number_literal(cursor: Cursor) -> tuple[NumberLiteral, Cursor]:
    start = cursor.pos
    if cursor.current == "-":
        cursor = cursor.advance()
    while not cursor.is_eof and cursor.current in _DIGITS:
        cursor = cursor.advance()
    if cursor.peek() == "." and cursor.peek(1) in _DIGITS:
        cursor = cursor.advance()
        while not cursor.is_eof and cursor.current in _DIGITS:
            cursor = cursor.advance()
    return NumberLiteral(cursor.source[start : cursor.pos]), cursor


def _parse_variants(cursor: Cursor) -> tuple[tuple[Variant, ...], Cursor]:
    variants: list[Variant] = []
    while True:
        cursor = cursor.skip_blank()
        if cursor.is_eof or cursor.current == "}":
            break
        default = cursor.current == "*"
        if default:
            cursor = cursor.advance()
        cursor = cursor.expect("[").skip_spaces()
        if cursor.current in _DIGITS or cursor.current == "-":
            number, cursor = _parse_number_literal(cursor)
            key = number.raw
        else:
            key, cursor = _parse_identifier(cursor)
        cursor = cursor.skip_spaces().expect("]")
        value, cursor = _parse_pattern(cursor, in_variant=True)
        variants.append(Variant(key, _trim(value), default=default))

    defaults = sum(1 for v in variants if v.default)
    if not variants or defaults != 1:
        msg = "Select expression needs variants with exactly one *[default]"
        raise PatternSyntaxError(msg, cursor.pos)
    return tuple(variants), cursor


def _trim(pattern: Pattern) -> Pattern:
    elements = list(pattern.elements)
    if elements and isinstance(elements[0], TextElement):
        elements[0] = TextElement(elements[0].value.lstrip())
    if elements and isinstance(elements[-1], TextElement):
        elements[-1] = TextElement(elements[-1].value.rstrip())
    return Pattern(tuple(e for e in elements if not (isinstance(e, TextElement) and not e.value)))
