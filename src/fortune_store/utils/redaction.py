"""Credential masking for connection strings."""

import re

_DSN_PASSWORD = re.compile(r"(?P<user>[^:/@\s]+):(?P<password>(?!//)[^@\s]+)@")


def redact_password(dsn: str) -> str:
    """
    Mask the password of any ``user:password@`` segment in a connection string.

    Examples:
        >>> redact_password("user:password@host")
        'user:REDACTED@host'
        >>> redact_password("mysql+pymysql://root:s3cret@db:3306/fortune")
        'mysql+pymysql://root:REDACTED@db:3306/fortune'
        >>> redact_password("mysql+pymysql://root:pa/ss@db:3306/fortune")
        'mysql+pymysql://root:REDACTED@db:3306/fortune'
        >>> redact_password("root:example@tcp(localhost:3306)/fortune_db?parseTime=true")
        'root:REDACTED@tcp(localhost:3306)/fortune_db?parseTime=true'
    """
    return _DSN_PASSWORD.sub(r"\g<user>:REDACTED@", dsn)
