"""
SQL identifier handling utilities.

Provides proper quoting of SQL identifiers (table names, column names) for
the dialects the database layer talks to.
"""


def quote_identifier(name: str, dialect: str = "mysql") -> str:
    """
    Quote a SQL identifier (table or column name).

    Args:
        name: The identifier to quote
        dialect: Database dialect ("mysql", "postgresql", "sqlite")

    Returns:
        Properly quoted identifier

    Raises:
        ValueError: If name is empty

    Examples:
        >>> quote_identifier("fortune_cookies")
        '`fortune_cookies`'
        >>> quote_identifier("value", dialect="sqlite")
        '"value"'
    """
    if not name or not isinstance(name, str):
        raise ValueError("Identifier name must be non-empty string")

    if dialect == "mysql":
        # Escape backticks in MySQL
        escaped = name.replace("`", "``")
        return f"`{escaped}`"
    # PostgreSQL and SQLite use double quotes
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def quote_table_name(name: str, dialect: str = "mysql") -> str:
    """
    Quote a table name that may be schema-qualified, one part per segment.

    Examples:
        >>> quote_table_name("fortune_db.fortune_cookies")
        '`fortune_db`.`fortune_cookies`'
        >>> quote_table_name("fortune_cookies", dialect="postgresql")
        '"fortune_cookies"'
    """
    if not name or not isinstance(name, str):
        raise ValueError("Identifier name must be non-empty string")
    return ".".join(quote_identifier(part, dialect) for part in name.split("."))
