"""Flattening of directory listings into key paths and values."""

from dataclasses import dataclass, field
from typing import Dict, List

from .nodes import Directory, Leaf, Node

ROOT_KEY = "/"


@dataclass
class FlattenedTree:
    """Result of one traversal; never shared between calls."""

    dirs: List[str] = field(default_factory=list)
    values: Dict[str, str] = field(default_factory=dict)


def flatten(node: Node) -> FlattenedTree:
    """Walk ``node`` depth-first and collect its keys and leaf values.

    Every key other than the root ``/`` is appended to ``dirs`` in traversal
    order: a parent precedes its descendants and siblings keep listing order.
    A leaf value is recorded under the most recently seen key, which is
    passed down the recursion explicitly.
    """
    tree = FlattenedTree()
    _walk(node, "", tree)
    return tree


def _walk(node: Node, last_key: str, tree: FlattenedTree) -> None:
    if node.key != ROOT_KEY:
        tree.dirs.append(node.key)
        last_key = node.key
    if isinstance(node, Leaf):
        if node.value is not None:
            tree.values[last_key] = node.value
    elif isinstance(node, Directory):
        for child in node.nodes:
            _walk(child, last_key, tree)


__all__ = ["FlattenedTree", "ROOT_KEY", "flatten"]
