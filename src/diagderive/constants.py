"""Shared constants for diagderive.

Centralized tunables used by the catalog, the derive pipeline and the runtime
sink. Placing them here avoids circular imports between subpackages.

Constants are grouped by domain:
- Grammar: identifier and stable-code syntax
- Sub-keys: default catalog attribute names per role
- Catalog limits: recursion and input size protection
- Fallback strings: placeholders rendered for unresolvable references

Python 3.13+.
"""

import re

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Grammar
    "IDENTIFIER_PATTERN",
    "STABLE_CODE_PATTERN",
    # Sub-keys
    "DEFAULT_SUBKEY_LABEL",
    "DEFAULT_SUBKEY_NOTE",
    "DEFAULT_SUBKEY_HELP",
    "DEFAULT_SUBKEY_SUGGESTION",
    "EDIT_COUNT_ARG",
    # Catalog limits
    "MAX_DEPTH",
    "MAX_SOURCE_SIZE",
    "DEFAULT_LOCALE",
    # Fallback strings
    "FALLBACK_MISSING_MESSAGE",
    "FALLBACK_MISSING_VARIABLE",
    "FALLBACK_MISSING_TERM",
]

# ============================================================================
# GRAMMAR
# ============================================================================

# Fluent identifier: message keys, sub-keys and argument names.
IDENTIFIER_PATTERN: re.Pattern[str] = re.compile(r"[a-zA-Z][a-zA-Z0-9_-]*")

# Stable diagnostic code, e.g. E0505 or W12.
STABLE_CODE_PATTERN: re.Pattern[str] = re.compile(r"[A-Z][A-Za-z]*[0-9]+")

# ============================================================================
# SUB-KEYS
# ============================================================================

# Catalog attribute used when a field-level role gives no explicit slug.
# Only the first unnamed field of each role gets the bare name; later ones
# are suffixed with the field name (see derive.shape).
DEFAULT_SUBKEY_LABEL: str = "label"
DEFAULT_SUBKEY_NOTE: str = "note"
DEFAULT_SUBKEY_HELP: str = "help"
DEFAULT_SUBKEY_SUGGESTION: str = "suggestion"

# Part-scoped argument carrying the number of edits of an edit-list suggestion.
EDIT_COUNT_ARG: str = "len"

# ============================================================================
# CATALOG LIMITS
# ============================================================================

# Maximum message/term reference depth during formatting.
MAX_DEPTH: int = 100

# Maximum catalog resource size in characters (10 MB).
MAX_SOURCE_SIZE: int = 10 * 1024 * 1024

# Locale used when a catalog locale is unknown to Babel.
DEFAULT_LOCALE: str = "en_US"

# ============================================================================
# FALLBACK STRINGS
# ============================================================================

FALLBACK_MISSING_MESSAGE: str = "{{{id}}}"  # e.g., {borrowck_move}
FALLBACK_MISSING_VARIABLE: str = "{{${name}}}"  # e.g., {$name}
FALLBACK_MISSING_TERM: str = "{{-{name}}}"  # e.g., {-brand}
