"""JSON/text helpers for bounded logging output."""

from __future__ import annotations

from typing import Any

from .errors import DepthExceededError, EncodingError
from .truncator import stringify

LOG_MARKER = "...<truncated>"


def to_bounded_json(payload: Any, max_len: int = 8000) -> str:
    """Serialize arbitrary values into bounded JSON-like text for logging.

    The helper never raises for unencodable payloads: those fall back to a
    hard-cut `repr`.
    """
    try:
        return stringify(
            payload,
            {
                "max_length": max_len,
                "max_item_length": max_len,
                "max_items": 50,
                "ellipsis": "...(%overage% more)",
            },
        )
    except (EncodingError, DepthExceededError):
        raw = repr(payload)
    if len(raw) <= max_len:
        return raw
    if max_len <= len(LOG_MARKER):
        return raw[:max_len]
    return raw[: max_len - len(LOG_MARKER)] + LOG_MARKER
