"""Babel-backed locale handling for catalog formatting.

Python 3.13+. Uses Babel for CLDR data.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Sequence
from decimal import Decimal

from babel import Locale, UnknownLocaleError
from babel.lists import format_list
from babel.numbers import format_decimal

from diagderive.constants import DEFAULT_LOCALE

__all__ = [
    "format_list_value",
    "format_number",
    "normalize_locale",
    "plural_category",
    "resolve_locale",
]

logger = logging.getLogger(__name__)


def normalize_locale(locale_code: str) -> str:
    """Convert a BCP-47 locale code to the POSIX form Babel expects.

    Example:
        >>> normalize_locale("en-US")
        'en_US'
    """
    return locale_code.replace("-", "_")


@functools.lru_cache(maxsize=128)
def resolve_locale(locale_code: str) -> Locale:
    """Parse a locale code, falling back to en_US for unknown locales.

    Unlike a hard failure, an unknown catalog locale only degrades number and
    plural formatting, so a warning is logged and formatting continues.

    Args:
        locale_code: BCP-47 or POSIX locale code

    Returns:
        Babel Locale (en_US when the code is unknown or malformed)
    """
    try:
        return Locale.parse(normalize_locale(locale_code))
    except UnknownLocaleError as e:
        logger.warning(
            "Unknown locale '%s': %s. Falling back to %s", locale_code, e, DEFAULT_LOCALE
        )
    except ValueError as e:
        logger.warning(
            "Invalid locale format '%s': %s. Falling back to %s", locale_code, e, DEFAULT_LOCALE
        )
    return Locale.parse(DEFAULT_LOCALE)


def format_number(value: int | float | Decimal, locale: Locale) -> str:
    """Format a numeric argument with locale separators."""
    return format_decimal(value, locale=locale)


def format_list_value(values: Sequence[str], locale: Locale) -> str:
    """Join list arguments the locale's way: 'a, b, and c'."""
    return format_list(list(values), locale=locale)


def plural_category(value: int | float | Decimal, locale: Locale) -> str:
    """CLDR plural category ('one', 'few', 'other', ...) of a number."""
    return locale.plural_form(value)
