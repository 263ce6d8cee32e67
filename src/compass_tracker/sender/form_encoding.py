"""Form encoding for ingest request bodies.

Values are percent-escaped with alphanumerics and ``-._*`` left as they are,
spaces written as ``+``, and each pair joined as ``key=value`` with ``&``.
"""

from __future__ import annotations

import string
from typing import Any, Mapping
from urllib.parse import parse_qsl

_UNESCAPED = frozenset(string.ascii_letters + string.digits + "-._*")


def percent_escape(value: str) -> str:
    """Escape a single form value."""
    escaped = []
    for char in value:
        if char in _UNESCAPED:
            escaped.append(char)
        elif char == " ":
            escaped.append("+")
        else:
            escaped.extend(f"%{byte:02X}" for byte in char.encode("utf-8"))
    return "".join(escaped)


def encode_form(fields: Mapping[str, Any]) -> str:
    """Join fields into a ``key=value&...`` body, skipping null values."""
    return "&".join(f"{key}={percent_escape(str(value))}" for key, value in fields.items() if value is not None)


def decode_form(body: str) -> dict[str, str]:
    """Parse a ``key=value&...`` body back into its fields."""
    return dict(parse_qsl(body, keep_blank_values=True))
