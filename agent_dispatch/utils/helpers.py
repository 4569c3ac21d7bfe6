"""
Helper utilities for the agent dispatch system.

This module provides general utility functions used across the application.
"""

import uuid
from datetime import UTC, date, datetime, time, timedelta
from typing import Any


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with an optional prefix.

    Args:
        prefix: Optional prefix for the ID

    Returns:
        A unique ID string
    """
    unique_id = str(uuid.uuid4()).replace("-", "")
    if prefix:
        return f"{prefix}-{unique_id}"
    return unique_id


def generate_session_id() -> str:
    """
    Generate a unique session ID.

    Returns:
        A unique session ID string
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    unique_part = str(uuid.uuid4())[:8]
    return f"session-{timestamp}-{unique_part}"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def safe_serialize(obj: Any) -> Any:
    """
    Safely serialize an object to a JSON-compatible format.

    Args:
        obj: Object to serialize

    Returns:
        JSON-compatible representation of the object
    """
    if obj is None or isinstance(obj, str | int | float | bool):
        return obj

    if isinstance(obj, datetime | date | time):
        return obj.isoformat()

    if isinstance(obj, list | tuple):
        return [safe_serialize(item) for item in obj]

    if isinstance(obj, dict):
        return {k: safe_serialize(v) for k, v in obj.items()}

    if hasattr(obj, "model_dump"):
        return safe_serialize(obj.model_dump())

    result = safe_serialize(obj.__dict__) if hasattr(obj, "__dict__") else str(obj)
    return result


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length, adding a suffix if truncated.

    Args:
        text: Text to truncate
        max_length: Maximum length of the text
        suffix: Suffix to add if text is truncated

    Returns:
        Truncated text
    """
    if not text or len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix


def parse_iso_date(value: str | None) -> date | None:
    """
    Parse the date part of an ISO date or datetime string.

    Args:
        value: String such as ``2024-12-15`` or ``2024-12-15T08:00:00``

    Returns:
        The parsed date, or None when the value is empty or malformed
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value.split("T", 1)[0])
    except ValueError:
        return None


def add_days(value: date, days: int) -> str:
    """Shift a date by a number of days and return it in ISO format."""
    return (value + timedelta(days=days)).isoformat()


def format_price(price: float, currency: str = "USD") -> str:
    """
    Format a price with a currency symbol.

    Args:
        price: Price amount
        currency: Currency code

    Returns:
        Formatted price string
    """
    symbols = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}
    symbol = symbols.get(currency.upper(), f"{currency.upper()} ")
    return f"{symbol}{price:,.2f}"
