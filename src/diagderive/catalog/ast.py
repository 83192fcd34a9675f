"""Catalog AST node definitions.

The subset of the Fluent 1.0 AST that diagnostic catalogs use: messages and
terms with attributes, text, variable/message/term references, literals and
select expressions.

Python 3.13+.
"""

from dataclasses import dataclass

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Resource structure
    "Resource",
    "Entry",
    "Attribute",
    "Junk",
    # Pattern elements
    "Pattern",
    "TextElement",
    "Placeable",
    # Expressions
    "SelectExpression",
    "Variant",
    "StringLiteral",
    "NumberLiteral",
    "VariableReference",
    "MessageReference",
    "TermReference",
    # Type aliases
    "InlineExpression",
    "Expression",
    "PatternElement",
]


@dataclass(frozen=True, slots=True)
class TextElement:
    """Literal text inside a pattern."""

    value: str


@dataclass(frozen=True, slots=True)
class StringLiteral:
    """Quoted literal: { "{" }"""

    value: str


@dataclass(frozen=True, slots=True)
class NumberLiteral:
    """Numeric literal, kept as its source text: { 42 }"""

    raw: str


@dataclass(frozen=True, slots=True)
class VariableReference:
    """Argument placeholder: { $name }"""

    name: str


@dataclass(frozen=True, slots=True)
class MessageReference:
    """Reference to another message: { other } or { other.attr }"""

    id: str
    attribute: str | None = None


@dataclass(frozen=True, slots=True)
class TermReference:
    """Reference to a term: { -brand }"""

    id: str
    attribute: str | None = None


type InlineExpression = (
    StringLiteral | NumberLiteral | VariableReference | MessageReference | TermReference
)


@dataclass(frozen=True, slots=True)
class Variant:
    """One arm of a select expression: [one] text, or *[other] text for the default."""

    key: str
    value: "Pattern"
    default: bool = False


@dataclass(frozen=True, slots=True)
class SelectExpression:
    """{ $selector -> [key] ... *[other] ... }"""

    selector: InlineExpression
    variants: tuple[Variant, ...]

    @property
    def default_variant(self) -> Variant:
        for variant in self.variants:
            if variant.default:
                return variant
        return self.variants[-1]


type Expression = InlineExpression | SelectExpression


@dataclass(frozen=True, slots=True)
class Placeable:
    """Braced expression inside a pattern."""

    expression: Expression


type PatternElement = TextElement | Placeable


@dataclass(frozen=True, slots=True)
class Pattern:
    """Sequence of text and placeables."""

    elements: tuple[PatternElement, ...]


@dataclass(frozen=True, slots=True)
class Attribute:
    """Sub-message of an entry: .label = text"""

    id: str
    value: Pattern


@dataclass(frozen=True, slots=True)
class Entry:
    """Message or term definition.

    Attributes:
        id: Entry identifier (without the leading '-' for terms)
        value: Main pattern, None for attribute-only messages
        attributes: Sub-messages in source order
        is_term: True for '-id = ...' definitions
        line: 1-indexed line of the definition
    """

    id: str
    value: Pattern | None
    attributes: tuple[Attribute, ...] = ()
    is_term: bool = False
    line: int = 1

    def get_attribute(self, name: str) -> Attribute | None:
        for attribute in self.attributes:
            if attribute.id == name:
                return attribute
        return None


@dataclass(frozen=True, slots=True)
class Junk:
    """Unparseable source kept for error reporting.

    Attributes:
        content: The rejected source lines
        message: Why the lines were rejected
        line: 1-indexed line where the rejected block starts
    """

    content: str
    message: str
    line: int


@dataclass(frozen=True, slots=True)
class Resource:
    """Parsed catalog resource."""

    entries: tuple[Entry, ...]
    junk: tuple[Junk, ...] = ()
