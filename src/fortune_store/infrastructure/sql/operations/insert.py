"""
Multi-row INSERT statement builders.

One statement carries one placeholder group per row, an optional conflict
clause appended verbatim, and an optional RETURNING list.
"""

from typing import List, Optional, Sequence

from ..core.identifier import quote_identifier, quote_table_name


def build_insert_query(
    table: str,
    columns: Sequence[str],
    row_count: int,
    conflict_action: str = "",
    returning: Optional[Sequence[str]] = None,
    dialect: str = "mysql",
    placeholder: str = "?",
) -> str:
    """
    Build a parameterized multi-row INSERT statement.

    Args:
        table: Target table name, optionally schema-qualified as ``schema.table``
        columns: Column names in value order
        row_count: Number of placeholder groups to emit
        conflict_action: SQL fragment appended after the VALUES list
        returning: Columns to read back per inserted row
        dialect: Dialect used for identifier quoting
        placeholder: Driver placeholder for one positional parameter

    Returns:
        INSERT SQL statement

    Example:
        >>> build_insert_query("fortune_cookies", ["value"], 2)
        'INSERT INTO `fortune_cookies` (`value`) VALUES (?), (?)'
    """
    if not columns:
        raise ValueError("Column list cannot be empty")
    if row_count < 1:
        raise ValueError("row_count must be positive")

    quoted_table = quote_table_name(table, dialect)
    quoted_cols = ", ".join(quote_identifier(col, dialect) for col in columns)
    group = "(" + ",".join([placeholder] * len(columns)) + ")"

    sql = f"INSERT INTO {quoted_table} ({quoted_cols}) VALUES " + ", ".join(
        [group] * row_count
    )
    if conflict_action:
        sql += " " + conflict_action
    if returning:
        quoted_returning = ", ".join(quote_identifier(col, dialect) for col in returning)
        sql += f" RETURNING {quoted_returning}"
    return sql


class InsertBuilder:
    """
    Statement builder bound to one dialect and placeholder style.

    Example:
        >>> builder = InsertBuilder("sqlite", "?")
        >>> builder.insert("t", ["a", "b"], 1, conflict_action="ON CONFLICT DO NOTHING")
        'INSERT INTO "t" ("a", "b") VALUES (?,?) ON CONFLICT DO NOTHING'
    """

    def __init__(self, dialect: str, placeholder: str):
        self.dialect = dialect
        self.placeholder = placeholder

    def insert(
        self,
        table: str,
        columns: Sequence[str],
        row_count: int,
        conflict_action: str = "",
        returning: Optional[List[str]] = None,
    ) -> str:
        return build_insert_query(
            table,
            columns,
            row_count,
            conflict_action=conflict_action,
            returning=returning,
            dialect=self.dialect,
            placeholder=self.placeholder,
        )
