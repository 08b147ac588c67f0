"""
Resource paths

Key literals, entry paths, link paths and content-id placeholders.

The string representation of an entity key is wrapped with parentheses,
such as (2), ('foo') or (a=1,foo='bar'). A single-field key is written
without the field name.
"""

import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from ..schema.interface import Collection
from .wire import format_datetime

_INTEGER = re.compile(r"^[+-]?\d+$")
_DECIMAL = re.compile(r"^[+-]?(\d+\.\d*|\.\d+)([eE][+-]?\d+)?$|^[+-]?\d+[eE][+-]?\d+$")


def format_literal(value: Any) -> str:
    """Format a value as an OData v4 URL literal"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    text = str(value).replace("'", "''")
    return f"'{text}'"


def parse_literal(text: str) -> Any:
    """Inverse of format_literal for the literal kinds used in keys"""
    text = text.strip()
    if len(text) >= 2 and text[0] == "'" and text[-1] == "'":
        return text[1:-1].replace("''", "'")
    if text == "null":
        return None
    if text in ("true", "false"):
        return text == "true"
    if _INTEGER.match(text):
        return int(text)
    if _DECIMAL.match(text):
        return Decimal(text)
    return text


def format_key(collection: Collection, key: Mapping[str, Any]) -> str:
    """
    Format the key segment of an entry path.

    Only the collection's declared key fields are used; other fields in
    ``key`` are ignored.

    Raises:
        ValueError: If a declared key field is missing from ``key``
    """
    key_names = collection.get_key_names()
    for key_name in key_names:
        if key_name not in key:
            raise ValueError(f"Missing value for key property {key_name} of {collection.name}")

    if len(key_names) == 1:
        return f"({format_literal(key[key_names[0]])})"
    pairs = ",".join(f"{name}={format_literal(key[name])}" for name in key_names)
    return f"({pairs})"


def entry_path(collection: Collection, key: Mapping[str, Any]) -> str:
    return f"{collection.actual_name}{format_key(collection, key)}"


def content_id_path(content_id: int) -> str:
    """Placeholder path for the result of a command queued earlier in a batch"""
    return f"${content_id}"


def link_path(entry: str, association_name: str) -> str:
    """Path of the reference between an entry and its associated entries"""
    return f"{entry}/{association_name}/$ref"


def function_path(name: str, parameters: Mapping[str, Any]) -> str:
    args = ",".join(f"{k}={format_literal(v)}" for k, v in parameters.items())
    return f"{name}({args})"


def _split_key_segment(segment: str) -> List[str]:
    parts = []
    current = []
    quoted = False
    for char in segment:
        if char == "'":
            quoted = not quoted
        if char == "," and not quoted:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def extract_key_from_command_text(
    collection: Collection, command_text: str
) -> Optional[Dict[str, Any]]:
    """
    Return the key if command text addresses exactly one entry of the
    collection, such as ``Orders(5)`` or ``Orders(OrderId=5)``; otherwise None.
    """
    text = command_text.strip().lstrip("/")
    if "?" in text:
        return None

    for name in (collection.actual_name, collection.name):
        if text.startswith(name + "(") and text.endswith(")"):
            segment = text[len(name) + 1:-1]
            break
    else:
        return None

    if not segment or "/" in segment:
        return None

    key_names = collection.get_key_names()
    parts = _split_key_segment(segment)

    if len(parts) == 1 and "=" not in parts[0].split("'", 1)[0]:
        if len(key_names) != 1:
            return None
        return {key_names[0]: parse_literal(parts[0])}

    key: Dict[str, Any] = {}
    for part in parts:
        name, sep, literal = part.partition("=")
        if not sep:
            return None
        key[name.strip()] = parse_literal(literal)

    if set(key) != set(key_names):
        return None
    return key
