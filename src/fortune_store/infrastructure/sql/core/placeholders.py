"""
Positional parameter placeholders.

Statements are sent with ``exec_driver_sql`` so they reach the DB-API driver
untouched; the placeholder therefore follows the driver's ``paramstyle``.
"""

_PLACEHOLDERS = {
    "qmark": "?",
    "format": "%s",
    "pyformat": "%s",
}


def placeholder_for(paramstyle: str) -> str:
    """
    Return the positional placeholder for a DB-API paramstyle.

    Examples:
        >>> placeholder_for("qmark")
        '?'
        >>> placeholder_for("pyformat")
        '%s'
    """
    try:
        return _PLACEHOLDERS[paramstyle]
    except KeyError:
        raise ValueError(f"unsupported paramstyle: {paramstyle!r}") from None
