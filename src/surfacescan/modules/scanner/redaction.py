"""Display-time redaction of sampled backend rows."""

import json
from collections.abc import Iterable
from typing import Any

MASK = "●●●●●●●●"
NULL_DISPLAY = "—"
ELLIPSIS = "…"

SENSITIVE_COLUMN_MARKERS = ("password", "hash", "secret", "token")


def _is_id_column(column: str) -> bool:
    return column == "id" or column.endswith("_id") or "uuid" in column


def _redact_email(value: str) -> str:
    name, _, domain = value.partition("@")
    return f"{name[:2]}***@{domain}"


def redact_value(column: str, value: Any) -> str:
    """Render one cell safely.

    Credential-like columns always become a fixed mask, emails keep only the
    first two characters and the domain, long identifiers and strings are
    truncated.
    """
    lowered = column.lower()
    if any(marker in lowered for marker in SENSITIVE_COLUMN_MARKERS):
        return MASK
    if value is None:
        return NULL_DISPLAY

    if isinstance(value, str):
        if "@" in value and "." in value.partition("@")[2]:
            return _redact_email(value)
        if len(value) > 20 and _is_id_column(lowered):
            return value[:8] + ELLIPSIS
        if len(value) > 40:
            return value[:38] + ELLIPSIS
        return value

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        rendered = json.dumps(value, separators=(",", ":"), default=str)
        return rendered if len(rendered) <= 40 else rendered[:38] + ELLIPSIS
    return str(value)


def redact_rows(
    columns: Iterable[str], rows: Iterable[dict[str, Any]]
) -> list[dict[str, str]]:
    """Apply :func:`redact_value` to every cell of *rows*."""
    column_list = list(columns)
    return [
        {column: redact_value(column, row.get(column)) for column in column_list} for row in rows
    ]
