"""
Data models for Sortboard — the board hierarchy.

The board is a two-level ordered hierarchy:

    Hierarchy
    └── Item        — a parent row (ordered, draggable)
        └── SubItem     — a leaf row owned by exactly one Item

Every level carries an opaque ``id`` and a ``content`` label.  Position is
never stored on the entities themselves: the order of ``Hierarchy.items``
is the only record of parent position, and the order of
``Item.sub_items`` is the only record of sub-item position.

All models are frozen.  Operations never edit a snapshot in place; they
build new tuples and new models, so two snapshots can be held side by side
(e.g. for diagnostics) without aliasing.

This module also defines ``MoveInstruction``, the plain data record that a
completed drag gesture is translated into before it reaches the reorder
engine.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# SubItem (leaf)
# ---------------------------------------------------------------------------

class SubItem(BaseModel):
    """A sub-item — the leaf of the hierarchy.

    The ``id`` only has to be unique within the owning item; two different
    items may hold sub-items with the same id.  ``Item`` rejects a run of
    sub-items that repeats an id.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    content: str = ""


# ---------------------------------------------------------------------------
# Item (parent)
# ---------------------------------------------------------------------------

class Item(BaseModel):
    """A parent item owning an ordered run of sub-items."""
    model_config = ConfigDict(frozen=True)

    id: str
    content: str = ""
    sub_items: tuple[SubItem, ...] = ()

    @model_validator(mode="after")
    def _check_unique_sub_item_ids(self) -> "Item":
        seen: set[str] = set()
        for sub in self.sub_items:
            if sub.id in seen:
                raise ValueError(f"Duplicate sub-item id '{sub.id}' in item '{self.id}'")
            seen.add(sub.id)
        return self

    def sub_item_ids(self) -> list[str]:
        return [sub.id for sub in self.sub_items]

    def with_sub_items(self, sub_items: tuple[SubItem, ...]) -> "Item":
        """Return a copy of this item owning ``sub_items`` instead."""
        return self.model_copy(update={"sub_items": tuple(sub_items)})


# ---------------------------------------------------------------------------
# Hierarchy (root)
# ---------------------------------------------------------------------------

class Hierarchy(BaseModel):
    """The complete board state: an ordered tuple of items.

    Lookup
    ------
    ``get_item(id)`` and ``index_of(id)`` resolve a parent by identity,
    which is what the engines track across a mutation.  ``all_sub_items()``
    flattens the second level in display order.

    Updating
    --------
    ``with_item(index, item)`` and ``with_items(items)`` return new
    hierarchies.  Items that are not replaced are carried over as the very
    same objects, so callers can check "untouched" with ``is``.
    """
    model_config = ConfigDict(frozen=True)

    items: tuple[Item, ...] = ()

    @model_validator(mode="after")
    def _check_unique_item_ids(self) -> "Hierarchy":
        seen: set[str] = set()
        for item in self.items:
            if item.id in seen:
                raise ValueError(f"Duplicate item id '{item.id}'")
            seen.add(item.id)
        return self

    def item_ids(self) -> list[str]:
        return [item.id for item in self.items]

    def index_of(self, item_id: str) -> Optional[int]:
        """Position of the item with ``item_id``, or None."""
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None

    def get_item(self, item_id: str) -> Optional[Item]:
        """Look up an item by id."""
        index = self.index_of(item_id)
        return None if index is None else self.items[index]

    def all_sub_items(self) -> list[SubItem]:
        """Return every sub-item, parent by parent, in display order."""
        subs: list[SubItem] = []
        for item in self.items:
            subs.extend(item.sub_items)
        return subs

    def sub_item_count(self) -> int:
        return sum(len(item.sub_items) for item in self.items)

    def all_ids(self) -> set[str]:
        """Every id in use at either level."""
        ids = set(self.item_ids())
        ids.update(sub.id for sub in self.all_sub_items())
        return ids

    def with_items(self, items) -> "Hierarchy":
        return Hierarchy(items=tuple(items))

    def with_item(self, index: int, item: Item) -> "Hierarchy":
        items = list(self.items)
        items[index] = item
        return Hierarchy(items=tuple(items))


# ---------------------------------------------------------------------------
# Move instruction
# ---------------------------------------------------------------------------

class Scope(str, Enum):
    """Which ordered sequence a move acts on."""
    PARENTS = "parents"
    SUB_ITEMS = "sub_items"


class MoveInstruction(BaseModel):
    """One completed drag, as plain data.

    Indices use splice semantics: ``destination_index`` is the position the
    moved element occupies *after* it has been removed from its source.

    ``destination_index`` is None when the drag was released outside any
    drop target.  Such an instruction is a valid no-op.

    For ``Scope.SUB_ITEMS`` the parent ids name the item owning the source
    list and the item owning the destination list; they are equal for a
    move within one parent.
    """
    model_config = ConfigDict(frozen=True)

    scope: Scope
    source_index: int = Field(ge=0)
    destination_index: Optional[int] = Field(default=None, ge=0)
    source_parent_id: Optional[str] = None
    destination_parent_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_parent_ids(self) -> "MoveInstruction":
        if self.scope is Scope.SUB_ITEMS:
            if self.source_parent_id is None:
                raise ValueError("sub-item moves need a source_parent_id")
            if self.destination_index is not None and self.destination_parent_id is None:
                raise ValueError("sub-item moves with a destination need a destination_parent_id")
        return self

    @property
    def is_noop(self) -> bool:
        return self.destination_index is None

    @property
    def crosses_parents(self) -> bool:
        return (
            self.scope is Scope.SUB_ITEMS
            and not self.is_noop
            and self.source_parent_id != self.destination_parent_id
        )

    @classmethod
    def parents(cls, source_index: int, destination_index: Optional[int]) -> "MoveInstruction":
        return cls(
            scope=Scope.PARENTS,
            source_index=source_index,
            destination_index=destination_index,
        )

    @classmethod
    def sub_items(
        cls,
        source_parent_id: str,
        source_index: int,
        destination_parent_id: Optional[str],
        destination_index: Optional[int],
    ) -> "MoveInstruction":
        return cls(
            scope=Scope.SUB_ITEMS,
            source_index=source_index,
            destination_index=destination_index,
            source_parent_id=source_parent_id,
            destination_parent_id=destination_parent_id,
        )


# ---------------------------------------------------------------------------
# Board (document wrapper)
# ---------------------------------------------------------------------------

class Board(BaseModel):
    """A board document: display settings plus the hierarchy itself.

    Only ``hierarchy`` is engine state.  ``title`` and ``theme`` ("dark" or
    "light") are read by the renderer and round-tripped by the YAML format.
    """
    model_config = ConfigDict(frozen=True)

    title: str = "Untitled Board"
    theme: str = "dark"
    hierarchy: Hierarchy = Field(default_factory=Hierarchy)

    def with_hierarchy(self, hierarchy: Hierarchy) -> "Board":
        return self.model_copy(update={"hierarchy": hierarchy})
