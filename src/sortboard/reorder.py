"""
Reorder engine for Sortboard.

Given a hierarchy snapshot and a ``MoveInstruction``, compute the next
snapshot.  Three cases:

  1. Parents      — splice one item within the top-level sequence
  2. Same parent  — splice one sub-item within a single item's list
  3. Cross parent — remove a sub-item from one item and insert the very
                    same value into another item's list

Splice semantics
----------------
Every move is "splice-out, splice-in": the element is removed first, then
inserted at ``destination_index`` of the *shortened* sequence.  For a move
within one list the valid destinations are therefore ``0..len-1``; for a
cross-parent move the destination list has not lost anything, so
``0..len`` is valid (``len`` appends).

Indices are checked before anything is built.  Out-of-range indices raise
``InvalidIndexError``, unknown parent ids raise ``UnknownParentError``, and
a sub-item whose id the destination item already holds raises
``DuplicateIdError``.  No clamping is attempted.

The engine is pure: no logging, no I/O, no state between calls.  Items
that a move does not touch are carried into the new snapshot as the same
objects.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

from .errors import DuplicateIdError, InvalidIndexError, UnknownParentError
from .models import Hierarchy, Item, MoveInstruction, Scope

T = TypeVar("T")


def _check_source(index: int, length: int, where: str) -> None:
    if not 0 <= index < length:
        raise InvalidIndexError(index, length, role="source", where=where)


def _check_destination(index: int, slots: int, where: str) -> None:
    if not 0 <= index < slots:
        raise InvalidIndexError(index, slots, role="destination", where=where)


def splice(sequence: Sequence[T], source_index: int, destination_index: int) -> tuple[T, ...]:
    """Move one element of ``sequence`` and return the result as a new tuple.

    ``destination_index`` is evaluated against the sequence *after* the
    element at ``source_index`` has been removed.
    """
    _check_source(source_index, len(sequence), "sequence")
    _check_destination(destination_index, len(sequence), "sequence")

    result = list(sequence)
    moved = result.pop(source_index)
    result.insert(destination_index, moved)
    return tuple(result)


def _resolve_parent(hierarchy: Hierarchy, parent_id) -> tuple[int, Item]:
    index = hierarchy.index_of(parent_id) if parent_id is not None else None
    if index is None:
        raise UnknownParentError(parent_id)
    return index, hierarchy.items[index]


def _move_parent(hierarchy: Hierarchy, instruction: MoveInstruction) -> Hierarchy:
    count = len(hierarchy.items)
    _check_source(instruction.source_index, count, "items")
    _check_destination(instruction.destination_index, count, "items")
    if instruction.source_index == instruction.destination_index:
        return hierarchy
    return hierarchy.with_items(
        splice(hierarchy.items, instruction.source_index, instruction.destination_index)
    )


def _move_within_parent(hierarchy: Hierarchy, instruction: MoveInstruction) -> Hierarchy:
    index, item = _resolve_parent(hierarchy, instruction.source_parent_id)
    where = f"item '{item.id}'"
    count = len(item.sub_items)
    _check_source(instruction.source_index, count, where)
    _check_destination(instruction.destination_index, count, where)
    if instruction.source_index == instruction.destination_index:
        return hierarchy

    moved = splice(item.sub_items, instruction.source_index, instruction.destination_index)
    return hierarchy.with_item(index, item.with_sub_items(moved))


def _move_across_parents(hierarchy: Hierarchy, instruction: MoveInstruction) -> Hierarchy:
    source_pos, source = _resolve_parent(hierarchy, instruction.source_parent_id)
    dest_pos, dest = _resolve_parent(hierarchy, instruction.destination_parent_id)

    _check_source(instruction.source_index, len(source.sub_items), f"item '{source.id}'")
    # The destination list loses nothing, so appending at len() is allowed.
    _check_destination(instruction.destination_index, len(dest.sub_items) + 1, f"item '{dest.id}'")
    moved_id = source.sub_items[instruction.source_index].id
    if moved_id in dest.sub_item_ids():
        raise DuplicateIdError(moved_id, dest.id)

    remaining = list(source.sub_items)
    moved = remaining.pop(instruction.source_index)
    received = list(dest.sub_items)
    received.insert(instruction.destination_index, moved)

    items = list(hierarchy.items)
    items[source_pos] = source.with_sub_items(tuple(remaining))
    items[dest_pos] = dest.with_sub_items(tuple(received))
    return hierarchy.with_items(items)


def reorder(hierarchy: Hierarchy, instruction: MoveInstruction) -> Hierarchy:
    """Apply one move instruction and return the next hierarchy.

    Returns ``hierarchy`` itself when the instruction has no destination or
    when the element is dropped back where it started.

    Raises:
        InvalidIndexError: If an index is outside its sequence.
        UnknownParentError: If a parent id is not in the hierarchy.
        DuplicateIdError: If a cross-parent move would repeat a sub-item id
            inside the destination item.
    """
    if instruction.is_noop:
        return hierarchy

    if instruction.scope is Scope.PARENTS:
        return _move_parent(hierarchy, instruction)

    if instruction.source_parent_id == instruction.destination_parent_id:
        return _move_within_parent(hierarchy, instruction)

    return _move_across_parents(hierarchy, instruction)
