"""Core SQL utilities package."""

from .identifier import quote_identifier, quote_table_name
from .placeholders import placeholder_for

__all__ = [
    "quote_identifier",
    "quote_table_name",
    "placeholder_for",
]
