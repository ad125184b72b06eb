"""Shape checks for machine-written progress queries.

A compiled query is only ever run if it looks like one read-only
statement that yields a ``count`` column. Checked when compiling and
again right before execution (rows written before these checks existed
are held to the same rule).
"""

from __future__ import annotations

import re

_LEADING = re.compile(r"^\s*(select|with)\b", re.IGNORECASE)
_WRITE_KEYWORDS = re.compile(
    r"\b(insert|update|delete|merge|drop|alter|create|truncate|grant|revoke|"
    r"copy|call|execute|vacuum|reindex|cluster|listen|notify|set|reset|lock|"
    r"comment|into)\b",
    re.IGNORECASE,
)
_COUNT_ALIAS = re.compile(r"(\bas\s+count\b|\)\s*count\b)", re.IGNORECASE)
_DOLLAR_LITERAL = re.compile(r"\$((?:[A-Za-z_][A-Za-z0-9_]*)?)\$.*?\$\1\$", re.DOTALL)


def strip_dollar_literals(sql: str) -> str:
    """Replace ``$$...$$`` and ``$tag$...$tag$`` literals with an empty literal."""
    return _DOLLAR_LITERAL.sub("$$$$", sql)


def check_query_shape(sql: str) -> str | None:
    """Return a reason the query is refused, or None if it may run.

    Text inside dollar-quoted literals is not inspected.
    """
    if not sql or not sql.strip():
        return "query is empty"
    code = strip_dollar_literals(sql)
    if ";" in code.strip().rstrip(";"):
        return "query contains more than one statement"
    if not _LEADING.match(code):
        return "query must start with SELECT or WITH"
    forbidden = _WRITE_KEYWORDS.search(code)
    if forbidden:
        return f"query uses forbidden keyword {forbidden.group(1).upper()}"
    if not _COUNT_ALIAS.search(code):
        return "query does not expose a column named count"
    return None
