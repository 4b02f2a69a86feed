"""
Rich-Text Flattening

Spell descriptions arrive as an irregular ``entries`` tree: plain strings,
lists of further entries, and objects (tables, lists, inset blocks, ...)
that carry their own nested ``entries`` field. This module converts that
tree into a small tagged variant and flattens it into one plain-text string
suitable for indexing.

Parsing and flattening are both depth-capped, so self-referential or
absurdly deep input terminates with an empty contribution instead of
exhausting the stack.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, FrozenSet, Tuple, Union

MAX_DEPTH = 64


# ---------------------------------------------------------------------
# Entry Node Variant
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Leaf:
    """A text leaf."""
    text: str


@dataclass(frozen=True)
class Sequence:
    """An ordered list of child nodes."""
    nodes: Tuple["EntryNode", ...]


@dataclass(frozen=True)
class Wrapper:
    """An object whose only indexed content is its nested ``entries`` field."""
    node: "EntryNode"


@dataclass(frozen=True)
class Unrecognized:
    """Anything else: missing values, null, objects without ``entries``."""


UNRECOGNIZED = Unrecognized()

EntryNode = Union[Leaf, Sequence, Wrapper, Unrecognized]


# ---------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------

def parse_entries(
    raw: Any,
    depth: int = 0,
    _path: FrozenSet[int] = frozenset(),
) -> EntryNode:
    """
    Convert a raw JSON ``entries`` value into an :data:`EntryNode`.

    Values nested deeper than :data:`MAX_DEPTH`, and containers that contain
    themselves, are parsed as :class:`Unrecognized`.
    """
    if depth > MAX_DEPTH:
        return UNRECOGNIZED

    if isinstance(raw, str):
        return Leaf(raw)

    if id(raw) in _path:
        return UNRECOGNIZED

    if isinstance(raw, (list, tuple)):
        path = _path | {id(raw)}
        return Sequence(
            tuple(parse_entries(item, depth + 1, path) for item in raw)
        )

    if isinstance(raw, dict) and raw.get("entries"):
        return Wrapper(parse_entries(raw["entries"], depth + 1, _path | {id(raw)}))

    return UNRECOGNIZED


# ---------------------------------------------------------------------
# Flattening
# ---------------------------------------------------------------------

def flatten(node: EntryNode, depth: int = 0) -> str:
    """
    Flatten a parsed node into plain text.

    Sequence members are joined with a single space, so words from adjacent
    entries may run together without punctuation. That is fine for search,
    not for display.
    """
    if depth > MAX_DEPTH:
        return ""

    if isinstance(node, Leaf):
        return node.text

    if isinstance(node, Sequence):
        return " ".join(flatten(child, depth + 1) for child in node.nodes)

    if isinstance(node, Wrapper):
        return flatten(node.node, depth + 1)

    return ""


def extract_text(entries: Any) -> str:
    """Flatten a raw ``entries`` value straight from the source JSON."""
    return flatten(parse_entries(entries))
