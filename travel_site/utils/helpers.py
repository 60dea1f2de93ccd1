"""
Utility helper functions for safe data handling.
"""
import json
from typing import Any, Optional


def safe_str(value: Any, default: str = "") -> str:
    """
    Safely convert value to string, handling None.

    Args:
        value: Any value to convert
        default: Default string if value is None

    Returns:
        String representation or default
    """
    if value is None:
        return default
    return str(value)


def safe_list(value: Any) -> list:
    """
    Coerce a list-like column to a list.

    Args:
        value: A list, a JSON-encoded list, or None

    Returns:
        The list, or an empty list if the value is missing or malformed
    """
    parsed = parse_json_field(value, [])
    return parsed if isinstance(parsed, list) else []


def parse_json_field(value: Any, default: Any = None) -> Any:
    """
    Decode a JSON column that may arrive as text.

    Args:
        value: Decoded value, JSON text, or None
        default: Returned for None or undecodable text

    Returns:
        Decoded value or default
    """
    if value is None:
        return default
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return default
    return value


def slugify(value: Optional[str]) -> str:
    """Lowercase, hyphen-separated slug ("Sri Lanka" -> "sri-lanka")."""
    if not value:
        return ""
    return "-".join(safe_str(value).lower().split())
