"""Adapter between native Python data, the value tree and JSON bytes."""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import json
from typing import Any

from pydantic import BaseModel

from .errors import EncodingError
from .values import (
    VALUE_TYPES,
    Bool,
    Mapping,
    Null,
    Number,
    Sequence,
    String,
    Value,
    check_depth,
)


class FormatFlags(enum.IntFlag):
    """Output options understood by `encode`."""

    NONE = 0
    ESCAPE_UNICODE = 1
    ESCAPE_SLASHES = 2
    PRETTY_PRINT = 4


ALL_FORMAT_FLAGS = FormatFlags.ESCAPE_UNICODE | FormatFlags.ESCAPE_SLASHES | FormatFlags.PRETTY_PRINT


def is_valid_format_flags(flags: int) -> bool:
    """Return true when `flags` only sets bits known to the encoder."""
    return isinstance(flags, int) and not isinstance(flags, bool) and flags >= 0 and not int(flags) & ~int(ALL_FORMAT_FLAGS)


def _normalize_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    raise EncodingError(f"unsupported mapping key type: {type(key).__name__}")


def _object_fields(obj: Any) -> dict[str, Any] | None:
    """Return the public fields of a record-like object, or None when it has none."""
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {field.name: getattr(obj, field.name) for field in dataclasses.fields(obj)}
    attrs = getattr(obj, "__dict__", None)
    if isinstance(attrs, dict) and not isinstance(obj, type):
        return {name: item for name, item in attrs.items() if not name.startswith("_")}
    return None


def to_value(native: Any, *, _depth: int = 0) -> Value:
    """Convert native Python data into a fresh value tree.

    The input is only read, never modified. Value nodes pass through unchanged.
    """
    if isinstance(native, VALUE_TYPES):
        return native
    if native is None:
        return Null()
    if isinstance(native, bool):
        return Bool(native)
    if isinstance(native, (int, float)):
        return Number(native)
    if isinstance(native, str):
        return String(native)
    if isinstance(native, (bytes, bytearray)):
        try:
            return String(bytes(native).decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise EncodingError("malformed UTF-8 in byte string", exc) from exc

    level = _depth + 1
    if isinstance(native, (list, tuple)):
        check_depth(level)
        items: list[Value] = []
        for item in native:
            items.append(to_value(item, _depth=level))
        return Sequence(tuple(items))

    if isinstance(native, collections.abc.Mapping):
        source = native
    else:
        source = _object_fields(native)
        if source is None:
            raise EncodingError(f"unsupported value type: {type(native).__name__}")
    check_depth(level)
    pairs: list[tuple[str, Value]] = []
    seen: set[str] = set()
    for raw_key, item in source.items():
        key = _normalize_key(raw_key)
        if key in seen:
            raise EncodingError(f"duplicate mapping key after normalization: {key!r}")
        seen.add(key)
        pairs.append((key, to_value(item, _depth=level)))
    return Mapping(tuple(pairs))


def _checked_text(text: str) -> str:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError("malformed text: string is not valid unicode", exc) from exc
    return text


def to_native(value: Value, depth_limit: int, *, _depth: int = 0) -> Any:
    """Render a value tree into plain lists/dicts/scalars, markers included."""
    if isinstance(value, Null):
        return None
    if isinstance(value, (Bool, Number)):
        return value.value
    if isinstance(value, String):
        return _checked_text(value.rendered)

    level = _depth + 1
    check_depth(level)
    if level > depth_limit:
        raise EncodingError(f"maximum nesting depth {depth_limit} exceeded")
    if isinstance(value, Sequence):
        out_list: list[Any] = []
        for item in value.items:
            out_list.append(to_native(item, depth_limit, _depth=level))
        if value.marker is not None:
            out_list.append(to_native(value.marker, depth_limit, _depth=level))
        return out_list
    if isinstance(value, Mapping):
        out_dict: dict[str, Any] = {}
        for key, item in value.pairs:
            out_dict[_checked_text(key)] = to_native(item, depth_limit, _depth=level)
        if value.marker is not None:
            marker_key, marker = value.marker
            out_dict[marker_key] = to_native(marker, depth_limit, _depth=level)
        return out_dict
    raise EncodingError(f"not a value node: {type(value).__name__}")


def encode(value: Value, format_flags: int = FormatFlags.NONE, depth_limit: int = 256) -> bytes:
    """Encode a value tree as UTF-8 JSON.

    Deterministic; mapping key order and sequence order are kept as-is.
    """
    flags = FormatFlags(format_flags)
    native = to_native(value, depth_limit)
    pretty = bool(flags & FormatFlags.PRETTY_PRINT)
    try:
        text = json.dumps(
            native,
            ensure_ascii=bool(flags & FormatFlags.ESCAPE_UNICODE),
            allow_nan=False,
            indent=4 if pretty else None,
            separators=(",", ": ") if pretty else (",", ":"),
        )
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"value is not representable as JSON: {exc}", exc) from exc
    if flags & FormatFlags.ESCAPE_SLASHES:
        # "/" can only occur inside string literals of JSON text.
        text = text.replace("/", "\\/")
    return text.encode("utf-8")
