"""Encode a value as JSON within a byte budget, shrinking it until it fits.

The attempt loop encodes the current tree; when the output is too long it runs
one shrink pass, tightens the limits and tries again. Once the retry budget is
spent the last encoding is cut to exactly `max_length` bytes, which may break
JSON well-formedness. Callers that need valid JSON must check `Report.gave_up`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .config import TruncationConfig, build_config, decay
from .encoder import encode, to_value
from .shrinker import shrink

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Report:
    """Outcome of one truncation call."""

    data: bytes
    retry_count: int
    gave_up: bool
    final_config: TruncationConfig

    @property
    def byte_length(self) -> int:
        """Length of `data`; after a hard cut this can exceed `len(text.encode())`."""
        return len(self.data)

    @property
    def text(self) -> str:
        """Decoded output; a character split by a hard cut is dropped."""
        return self.data.decode("utf-8", errors="ignore")


def report(value: Any, overrides: TruncationConfig | dict[str, Any] | None = None) -> Report:
    """Encode `value` within the configured byte budget and describe how it went.

    Raises ConfigurationError for rejected overrides and EncodingError when the
    value cannot be represented as JSON at all.
    """
    config = build_config(overrides)
    tree = to_value(value)
    retries = 0
    while True:
        data = encode(tree, config.format_flags, config.depth_limit)
        LOG.debug(
            "truncation attempt=%s byte_length=%s max_length=%s max_items=%s max_item_length=%s",
            retries,
            len(data),
            config.max_length,
            config.max_items,
            config.max_item_length,
            extra={"attempt": retries, "byte_length": len(data)},
        )
        if len(data) <= config.max_length:
            return Report(data, retry_count=retries, gave_up=False, final_config=config)

        retries += 1
        tree = shrink(tree, config)
        config = decay(config)
        if retries < config.max_retries:
            continue

        data = encode(tree, config.format_flags, config.depth_limit)
        if len(data) <= config.max_length:
            return Report(data, retry_count=retries, gave_up=False, final_config=config)
        LOG.warning(
            "truncation gave up after retries=%s byte_length=%s; hard-cut to max_length=%s",
            retries,
            len(data),
            config.max_length,
            extra={"attempt": retries, "byte_length": len(data)},
        )
        return Report(data[: config.max_length], retry_count=retries, gave_up=True, final_config=config)


def stringify(value: Any, overrides: TruncationConfig | dict[str, Any] | None = None) -> str:
    """Return only the bounded JSON text for `value`."""
    return report(value, overrides).text
