"""Message catalog for diagnostic text.

Loads Fluent (FTL) resources, answers key/sub-key existence queries for the
derive session, and substitutes arguments into message text.

Python 3.13+. Uses Babel for i18n.
"""

from .catalog import MessageCatalog
from .parser import parse_resource

__all__ = [
    "MessageCatalog",
    "parse_resource",
]
