"""
Hierarchical in-process cache store.

Entries live in a tree of dicts. Each node maps the next key segment to a
child node, and may also hold one entry under a private marker that can
never collide with a real segment.
"""
from typing import Any, Dict, Optional, Tuple

from .base import BaseCacheStore
from .core import CacheEntry, KeySegment


class _EntryMarker:
    """Sentinel key under which a node keeps its entry."""

    def __repr__(self) -> str:
        return "<entry>"


ENTRY = _EntryMarker()

Node = Dict[Any, Any]


class InMemoryCacheStore(BaseCacheStore):
    """
    Tree-shaped store.

    - Invalidation detaches a whole subtree in one operation
    - Garbage collection walks depth-first and deletes expired entries
    - Emptied nodes are left in place; nothing relies on pruning them
    """

    def __init__(self, *args, **kwargs):
        self._root: Node = {}
        super().__init__(*args, **kwargs)

    def _get_or_create_node(self, key: Tuple[KeySegment, ...]) -> Node:
        current = self._root
        for part in key:
            child = current.get(part)
            if child is None:
                child = {}
                current[part] = child
            current = child
        return current

    def _get_node(self, key: Tuple[KeySegment, ...]) -> Optional[Node]:
        current = self._root
        for part in key:
            current = current.get(part)
            if current is None:
                return None
        return current

    def _write(self, key: Tuple[KeySegment, ...], entry: CacheEntry) -> None:
        self._get_or_create_node(key)[ENTRY] = entry

    def _read(self, key: Tuple[KeySegment, ...]) -> Optional[CacheEntry]:
        node = self._get_node(key)
        if node is None:
            return None
        return node.get(ENTRY)

    def _remove_tree(self, key: Tuple[KeySegment, ...]) -> int:
        parent = self._get_node(key[:-1])
        if parent is None:
            return 0
        subtree = parent.pop(key[-1], None)
        if subtree is None:
            return 0
        return _count_entries(subtree)

    def _sweep_expired(self, now: float) -> int:
        return self._sweep_node(self._root, (), now)

    def _sweep_node(self, node: Node, path: Tuple[KeySegment, ...], now: float) -> int:
        removed = 0
        entry = node.get(ENTRY)
        if entry is not None and entry.is_expired(now):
            del node[ENTRY]
            removed += 1
            self._debug_log("Garbage collected:", list(path))

        # Snapshot children so deletions deeper down can't disturb iteration
        for part, child in list(node.items()):
            if part is ENTRY:
                continue
            removed += self._sweep_node(child, path + (part,), now)
        return removed


def _count_entries(node: Node) -> int:
    count = 1 if ENTRY in node else 0
    for part, child in node.items():
        if part is not ENTRY:
            count += _count_entries(child)
    return count
