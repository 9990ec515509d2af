"""One structural shrink pass over a value tree.

A pass never mutates its input. Strings are cut to the current item length,
containers keep their first `max_items` entries and long mapping keys are cut.
Removed characters and entries are accumulated on the rebuilt nodes, so the
count rendered into an ellipsis marker always refers to the original value.
"""

from __future__ import annotations

from .config import TruncationConfig
from .values import Bool, Mapping, Null, Number, Sequence, String, Value, check_depth

OVERAGE_PLACEHOLDER = "%overage%"
# Room for the two quote characters around a JSON string.
QUOTE_RESERVE = 2
# Minimum text kept in front of a marker when the marker alone exceeds the budget.
MIN_KEPT_CHARS = 3


def render_ellipsis(template: str, overage: int) -> str:
    """Substitute the overage count into an ellipsis template."""
    return template.replace(OVERAGE_PLACEHOLDER, str(overage))


def _cut_length(config: TruncationConfig) -> int:
    """Number of characters a string keeps when it has to be cut."""
    budget = config.max_item_length - len(config.ellipsis) - QUOTE_RESERVE
    if config.ellipsis:
        return max(budget, MIN_KEPT_CHARS)
    return budget


def shrink_string(node: String, config: TruncationConfig) -> String:
    """Cut a string to the current item length, carrying the prior overage."""
    cut = _cut_length(config)
    if len(node.text) <= cut:
        return node
    overage = node.overage + len(node.text) - cut
    marker = render_ellipsis(config.ellipsis, overage) if config.ellipsis else ""
    if cut + len(marker) >= len(node.rendered):
        # The marker would eat up everything the cut saves.
        return node
    return String(node.text[:cut], overage=overage, marker=marker)


def shrink_key(key: str, config: TruncationConfig) -> str:
    """Cut a mapping key without any memory of earlier passes."""
    if len(key) <= config.max_item_length - QUOTE_RESERVE:
        return key
    cut = _cut_length(config)
    if len(key) <= cut:
        return key
    if not config.ellipsis:
        return key[:cut]
    short = key[:cut] + render_ellipsis(config.ellipsis, len(key) - cut)
    return short if len(short) < len(key) else key


def _trailing_marker(dropped: int, config: TruncationConfig) -> String | None:
    if not dropped or not config.ellipsis:
        return None
    return String(render_ellipsis(config.ellipsis, dropped))


def _shrink_sequence(node: Sequence, config: TruncationConfig, depth: int) -> Sequence:
    kept = node.items[: config.max_items]
    dropped = node.dropped + len(node.items) - len(kept)
    items: list[Value] = []
    for item in kept:
        items.append(shrink(item, config, _depth=depth))
    return Sequence(tuple(items), dropped=dropped, marker=_trailing_marker(dropped, config))


def _marker_key(size: int, taken: set[str]) -> str:
    """Key for the synthetic trailing entry: the kept size, or the next free index."""
    index = size
    while str(index) in taken:
        index += 1
    return str(index)


def _shrink_mapping(node: Mapping, config: TruncationConfig, depth: int) -> Mapping:
    dropped = node.dropped + max(len(node.pairs) - config.max_items, 0)
    pairs: list[tuple[str, Value]] = []
    taken: set[str] = set()
    for key, item in node.pairs[: config.max_items]:
        new_key = shrink_key(key, config)
        if new_key in taken:
            # Two keys collapsed into one; the later entry is removed.
            dropped += 1
            continue
        taken.add(new_key)
        pairs.append((new_key, shrink(item, config, _depth=depth)))
    marker = _trailing_marker(dropped, config)
    return Mapping(
        tuple(pairs),
        dropped=dropped,
        marker=(_marker_key(len(pairs), taken), marker) if marker is not None else None,
    )


def shrink(value: Value, config: TruncationConfig, *, _depth: int = 0) -> Value:
    """Return a new tree that respects the limits of `config`."""
    if isinstance(value, (Null, Bool, Number)):
        return value
    if isinstance(value, String):
        return shrink_string(value, config)
    level = _depth + 1
    check_depth(level)
    if isinstance(value, Sequence):
        return _shrink_sequence(value, config, level)
    if isinstance(value, Mapping):
        return _shrink_mapping(value, config, level)
    raise TypeError(f"not a value node: {type(value).__name__}")
