"""
Mutation engine for Sortboard: append new parents and sub-items.

Both operations are append-only.  They never reorder or rewrite existing
elements, and the items they do not touch are carried into the new
snapshot as the same objects.

Id generation
-------------
New ids come from an injectable *id provider*:

  - ``TokenIdProvider``   — random uuid4 token (the default)
  - ``CounterIdProvider`` — monotonic counter, handy in tests and demos

A provider is asked for ids until it returns one not already used anywhere
in the hierarchy, so a counter seeded below existing ids still never
collides.
"""

from __future__ import annotations

import itertools
import uuid
from typing import Optional, Protocol

from .errors import UnknownParentError
from .models import Hierarchy, Item, SubItem

DEFAULT_PARENT_CONTENT = "New Parent Item"
DEFAULT_SUB_ITEM_CONTENT = "New SubItem"

ITEM_KIND = "item"
SUB_ITEM_KIND = "sub-item"


class IdProvider(Protocol):
    def next_id(self, kind: str) -> str:
        ...


class TokenIdProvider:
    """Random, collision-resistant ids such as ``item-5f0c1e9a2b7d``."""

    def __init__(self, length: int = 12):
        self.length = length

    def next_id(self, kind: str) -> str:
        return f"{kind}-{uuid.uuid4().hex[:self.length]}"


class CounterIdProvider:
    """Monotonic ids such as ``item-1``, ``sub-item-2``.

    One counter is shared by all kinds, so ids stay unique across levels.
    """

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def next_id(self, kind: str) -> str:
        return f"{kind}-{next(self._counter)}"


def _fresh_id(provider: IdProvider, kind: str, taken: set[str], attempts: int = 1000) -> str:
    for _ in range(attempts):
        candidate = provider.next_id(kind)
        if candidate not in taken:
            return candidate
    raise RuntimeError(f"Id provider {provider!r} produced no unused {kind} id")


def add_parent(
    hierarchy: Hierarchy,
    content: str = DEFAULT_PARENT_CONTENT,
    id_provider: Optional[IdProvider] = None,
) -> Hierarchy:
    """Append a new, empty item to the end of the hierarchy."""
    provider = id_provider or TokenIdProvider()
    new_item = Item(
        id=_fresh_id(provider, ITEM_KIND, hierarchy.all_ids()),
        content=content,
    )
    return hierarchy.with_items(hierarchy.items + (new_item,))


def add_sub_item(
    hierarchy: Hierarchy,
    parent_id: str,
    content: str = DEFAULT_SUB_ITEM_CONTENT,
    id_provider: Optional[IdProvider] = None,
) -> Hierarchy:
    """Append a new sub-item to the item whose id is ``parent_id``.

    Raises:
        UnknownParentError: If no item has ``parent_id``.  The hierarchy is
            immutable, so the caller's snapshot is untouched.
    """
    index = hierarchy.index_of(parent_id)
    if index is None:
        raise UnknownParentError(parent_id)

    provider = id_provider or TokenIdProvider()
    parent = hierarchy.items[index]
    new_sub = SubItem(
        id=_fresh_id(provider, SUB_ITEM_KIND, hierarchy.all_ids()),
        content=content,
    )
    return hierarchy.with_item(index, parent.with_sub_items(parent.sub_items + (new_sub,)))
