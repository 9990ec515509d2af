"""Canonical value tree operated on by the shrinker and the encoder.

Every node is immutable. Truncation bookkeeping lives on the nodes themselves:
strings remember how many characters were cut from the original text and the
marker rendered for that count, containers remember how many entries were
dropped and the synthetic trailing entry announcing it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .errors import DepthExceededError

# Hard ceiling for every recursive walk over a value tree. Independent of the
# configured encoder depth limit; keeps adversarial input from blowing the stack.
MAX_TREE_DEPTH = 400


@dataclass(frozen=True)
class Null:
    """JSON null."""


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Number:
    value: int | float


@dataclass(frozen=True)
class String:
    """A string, possibly cut down from a longer original.

    `text` is the kept prefix, `overage` the total number of characters removed
    from the original so far and `marker` the rendered ellipsis appended on output.
    """

    text: str
    overage: int = 0
    marker: str = ""

    @property
    def rendered(self) -> str:
        return self.text + self.marker


@dataclass(frozen=True)
class Sequence:
    """An ordered list; `dropped` counts entries removed from the original."""

    items: tuple[Value, ...] = ()
    dropped: int = 0
    marker: String | None = None


@dataclass(frozen=True)
class Mapping:
    """Ordered key/value pairs with unique keys; `dropped` counts removed entries."""

    pairs: tuple[tuple[str, Value], ...] = ()
    dropped: int = 0
    marker: tuple[str, String] | None = None

    def keys(self) -> list[str]:
        return [key for key, _ in self.pairs]


Value = Union[Null, Bool, Number, String, Sequence, Mapping]
VALUE_TYPES = (Null, Bool, Number, String, Sequence, Mapping)


def check_depth(depth: int) -> None:
    """Fail when a recursive walk goes past the hard nesting ceiling."""
    if depth > MAX_TREE_DEPTH:
        raise DepthExceededError(depth, MAX_TREE_DEPTH)
