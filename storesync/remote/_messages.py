"""
Error body decoding — human-readable message from whatever the server sent.
"""

from __future__ import annotations

import json
from typing import Any


NETWORK_MESSAGE = "Network connection error. Please check your internet connection or try again later."
TIMEOUT_MESSAGE = "The server is taking too long to respond. Please try again later."
SERVER_MESSAGE = (
    "The server encountered an error processing your request. This might be due to "
    "invalid data or a server issue. Please try again or contact support."
)


def field_errors(errors: Any) -> dict[str, list[str]]:
    """`errors` map of a validation problem body to field → messages."""
    if not isinstance(errors, dict):
        return {}
    out: dict[str, list[str]] = {}
    for name, messages in errors.items():
        if isinstance(messages, list):
            out[str(name)] = [str(m) for m in messages]
        else:
            out[str(name)] = [str(messages)]
    return out


def format_field_errors(errors: dict[str, list[str]]) -> str:
    joined = "; ".join(f"{name}: {', '.join(msgs)}" for name, msgs in errors.items())
    return f"Validation errors: {joined}"


def extract_message(text: str, status: int) -> tuple[str, dict[str, list[str]]]:
    """
    Decode an error body.

    Order: `message`, then `title` (replaced by the formatted `errors` map if
    one is present), then `detail`, then a JSON string body, then the raw text.
    Falls back to a generic status line for an empty body.
    """
    default = f"API request failed with status {status}"
    try:
        data = json.loads(text)
    except ValueError:
        return (text or default), {}

    if isinstance(data, str):
        return (data or default), {}
    if not isinstance(data, dict):
        return (text or default), {}

    errors = field_errors(data.get("errors"))
    if data.get("message"):
        return str(data["message"]), errors
    if data.get("title"):
        if errors:
            return format_field_errors(errors), errors
        return str(data["title"]), errors
    if data.get("detail"):
        return str(data["detail"]), errors
    return (text or default), errors


__all__ = (
    "NETWORK_MESSAGE",
    "TIMEOUT_MESSAGE",
    "SERVER_MESSAGE",
    "field_errors",
    "format_field_errors",
    "extract_message",
)
