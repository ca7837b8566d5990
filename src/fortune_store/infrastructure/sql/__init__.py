"""
SQL module for centralized SQL generation.

This module provides reusable utilities for building SQL statements with
proper identifier quoting and driver-specific placeholder syntax.
"""

from .core.identifier import quote_identifier, quote_table_name
from .core.placeholders import placeholder_for
from .operations.insert import InsertBuilder, build_insert_query

__all__ = [
    "quote_identifier",
    "quote_table_name",
    "placeholder_for",
    "InsertBuilder",
    "build_insert_query",
]
