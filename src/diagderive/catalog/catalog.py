"""Message catalog: key lookup and placeholder substitution.

The derive session consults the catalog at generation time to prove every
message key and sub-key a routine references exists. Sinks may use it at run
time to substitute arguments into message text.

Thread Safety:
    add_resource() mutates under an RLock; lookups read an immutable snapshot
    of the entry maps, so formatting never blocks on loading.

Python 3.13+. Uses Babel for i18n.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import replace
from decimal import Decimal
from pathlib import Path
from threading import RLock
from types import MappingProxyType

from babel import Locale

from diagderive.constants import (
    FALLBACK_MISSING_MESSAGE,
    FALLBACK_MISSING_TERM,
    FALLBACK_MISSING_VARIABLE,
    MAX_DEPTH,
    MAX_SOURCE_SIZE,
)
from diagderive.diagnostics import (
    CatalogError,
    CatalogSyntaxError,
    DeriveDiagnostic,
    ErrorTemplate,
    SourceLocation,
)

from .ast import (
    Entry,
    MessageReference,
    NumberLiteral,
    Pattern,
    Placeable,
    SelectExpression,
    StringLiteral,
    TermReference,
    TextElement,
    VariableReference,
    Variant,
)
from .locale import format_list_value, format_number, plural_category, resolve_locale
from .parser import parse_resource

__all__ = ["MessageCatalog"]

logger = logging.getLogger(__name__)

type _Args = Mapping[str, object]


class MessageCatalog:
    """Fluent-subset message catalog for one locale.

    Example:
        >>> catalog = MessageCatalog.from_source('''
        ... borrowck_move = cannot move out of { $name }
        ...     .label = value moved here
        ... ''')
        >>> catalog.has_attribute("borrowck_move", "label")
        True
        >>> catalog.format("borrowck_move", args={"name": "x"})
        'cannot move out of x'
    """

    __slots__ = ("_locale", "_locale_code", "_lock", "_messages", "_strict", "_terms")

    def __init__(self, locale: str = "en-US", *, strict: bool = True) -> None:
        """Initialize an empty catalog.

        Args:
            locale: BCP-47 locale code used for number, list and plural formatting
            strict: Raise CatalogSyntaxError when a resource contains junk
                (default: True). When False, junk is logged and skipped.
        """
        self._locale_code = locale
        self._locale: Locale = resolve_locale(locale)
        self._strict = strict
        self._lock = RLock()
        self._messages: Mapping[str, Entry] = MappingProxyType({})
        self._terms: Mapping[str, Entry] = MappingProxyType({})

    @classmethod
    def from_source(
        cls, source: str, locale: str = "en-US", *, strict: bool = True
    ) -> MessageCatalog:
        """Create a catalog from one FTL resource string."""
        catalog = cls(locale, strict=strict)
        catalog.add_resource(source)
        return catalog

    @classmethod
    def from_paths(
        cls, paths: Sequence[str | Path], locale: str = "en-US", *, strict: bool = True
    ) -> MessageCatalog:
        """Create a catalog from FTL files, loaded in order (later entries win)."""
        catalog = cls(locale, strict=strict)
        for path in paths:
            catalog.add_resource(Path(path).read_text(encoding="utf-8"), source_path=str(path))
        return catalog

    @property
    def locale(self) -> str:
        return self._locale_code

    def add_resource(
        self, source: str, *, source_path: str | None = None
    ) -> tuple[DeriveDiagnostic, ...]:
        """Parse and register entries from FTL source.

        Args:
            source: FTL source text
            source_path: File the source came from, used in diagnostics

        Returns:
            Warnings (duplicate entries, and junk when not strict)

        Raises:
            CatalogError: If source exceeds the maximum size
            CatalogSyntaxError: If strict and the source contains junk
        """
        if len(source) > MAX_SOURCE_SIZE:
            msg = f"Catalog source exceeds maximum size ({len(source)} > {MAX_SOURCE_SIZE})"
            raise CatalogError(msg)

        origin = source_path or "<catalog>"
        resource = parse_resource(source)
        junk = tuple(
            replace(
                ErrorTemplate.catalog_syntax(j.message),
                location=SourceLocation(origin, j.line),
                severity="error" if self._strict else "warning",
            )
            for j in resource.junk
        )
        if junk and self._strict:
            raise CatalogSyntaxError(junk)
        for issue in junk:
            logger.warning("Skipping unparseable catalog entry at %s: %s", issue.location, issue)

        warnings: list[DeriveDiagnostic] = list(junk)
        with self._lock:
            messages = dict(self._messages)
            terms = dict(self._terms)
            for entry in resource.entries:
                target = terms if entry.is_term else messages
                if entry.id in target:
                    warnings.append(
                        replace(
                            ErrorTemplate.catalog_duplicate_entry(entry.id),
                            location=SourceLocation(origin, entry.line),
                        )
                    )
                    logger.warning("Overwriting catalog entry '%s' (%s)", entry.id, origin)
                target[entry.id] = entry
                logger.debug("Registered catalog entry: %s", entry.id)
            self._messages = MappingProxyType(messages)
            self._terms = MappingProxyType(terms)

        logger.info(
            "Loaded catalog resource %s: %d entries, %d junk",
            origin,
            len(resource.entries),
            len(resource.junk),
        )
        return tuple(warnings)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return key in self._messages

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def has_message(self, key: str) -> bool:
        return key in self._messages

    def has_attribute(self, key: str, attr: str) -> bool:
        entry = self._messages.get(key)
        return entry is not None and entry.get_attribute(attr) is not None

    def get_entry(self, key: str) -> Entry | None:
        return self._messages.get(key)

    def lookup(self, key: str, attr: str | None = None) -> Pattern | None:
        """Pattern of a message or one of its sub-keys, None when absent."""
        entry = self._messages.get(key)
        if entry is None:
            return None
        if attr is None:
            return entry.value
        attribute = entry.get_attribute(attr)
        return None if attribute is None else attribute.value

    def variables(self, key: str, attr: str | None = None) -> frozenset[str]:
        """Names of the $variables a message (or sub-key) references directly.

        Example:
            >>> catalog.variables("borrowck_move")
            frozenset({'name'})
        """
        pattern = self.lookup(key, attr)
        if pattern is None:
            return frozenset()
        return frozenset(_collect_variables(pattern))

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def format(self, key: str, attr: str | None = None, args: _Args | None = None) -> str:
        """Substitute arguments into a message.

        Missing messages render as '{key}' and missing arguments as '{$name}';
        both are logged, neither raises.

        Args:
            key: Message key
            attr: Optional sub-key
            args: Argument values (str, numbers, string sequences)

        Returns:
            Formatted text
        """
        pattern = self.lookup(key, attr)
        if pattern is None:
            target = key if attr is None else f"{key}.{attr}"
            logger.warning("Message '%s' not found", target)
            return FALLBACK_MISSING_MESSAGE.format(id=target)
        return self._format_pattern(pattern, args or {}, 0)

    def _format_pattern(self, pattern: Pattern, args: _Args, depth: int) -> str:
        if depth > MAX_DEPTH:
            logger.warning("Maximum reference depth (%d) exceeded", MAX_DEPTH)
            return ""
        parts: list[str] = []
        for element in pattern.elements:
            match element:
                case TextElement(value=value):
                    parts.append(value)
                case Placeable(expression=expression):
                    parts.append(self._format_expression(expression, args, depth))
        return "".join(parts)

    def _format_expression(self, expression: object, args: _Args, depth: int) -> str:
        match expression:
            case StringLiteral(value=value):
                return value
            case NumberLiteral(raw=raw):
                return raw
            case VariableReference(name=name):
                if name not in args:
                    logger.warning("Variable '$%s' not provided", name)
                    return FALLBACK_MISSING_VARIABLE.format(name=name)
                return self._format_value(args[name])
            case MessageReference(id=ref_id, attribute=attr):
                pattern = self.lookup(ref_id, attr)
                if pattern is None:
                    target = ref_id if attr is None else f"{ref_id}.{attr}"
                    return FALLBACK_MISSING_MESSAGE.format(id=target)
                return self._format_pattern(pattern, args, depth + 1)
            case TermReference(id=term_id, attribute=attr):
                term = self._terms.get(term_id)
                if term is None:
                    return FALLBACK_MISSING_TERM.format(name=term_id)
                term_pattern = term.value
                if attr is not None:
                    attribute = term.get_attribute(attr)
                    term_pattern = None if attribute is None else attribute.value
                if term_pattern is None:
                    return FALLBACK_MISSING_TERM.format(name=term_id)
                return self._format_pattern(term_pattern, args, depth + 1)
            case SelectExpression():
                variant = self._select_variant(expression, args, depth)
                return self._format_pattern(variant.value, args, depth + 1)
        msg = f"Unknown expression type: {type(expression).__name__}"
        raise CatalogError(msg)

    def _select_variant(self, select: SelectExpression, args: _Args, depth: int) -> Variant:
        selector = select.selector
        value: object
        if isinstance(selector, VariableReference):
            value = args.get(selector.name)
        elif isinstance(selector, NumberLiteral):
            value = Decimal(selector.raw)
        else:
            value = self._format_expression(selector, args, depth)

        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            for variant in select.variants:
                if _is_number_key(variant.key) and Decimal(variant.key) == Decimal(str(value)):
                    return variant
            category = plural_category(value, self._locale)
            for variant in select.variants:
                if variant.key == category:
                    return variant
        elif value is not None:
            text = str(value)
            for variant in select.variants:
                if variant.key == text:
                    return variant
        return select.default_variant

    def _format_value(self, value: object) -> str:
        match value:
            case None:
                return ""
            case bool():
                return "true" if value else "false"
            case int() | float() | Decimal():
                return format_number(value, self._locale)
            case str():
                return value
            case list() | tuple():
                return format_list_value([str(v) for v in value], self._locale)
        return str(value)


def _is_number_key(key: str) -> bool:
    stripped = key.removeprefix("-")
    return bool(stripped) and stripped.replace(".", "", 1).isdigit()


def _collect_variables(pattern: Pattern) -> Iterator[str]:
    for element in pattern.elements:
        if isinstance(element, Placeable):
            yield from _expression_variables(element.expression)


def _expression_variables(expression: object) -> Iterator[str]:
    match expression:
        case VariableReference(name=name):
            yield name
        case SelectExpression(selector=selector, variants=variants):
            yield from _expression_variables(selector)
            for variant in variants:
                yield from _collect_variables(variant.value)
