"""Error types raised by the Sortboard engines.

A drag released outside any drop target is *not* an error: the reorder
engine simply hands back the hierarchy it was given.  The exceptions below
cover caller-contract violations only.  The engines raise them before
building anything, so a failed call never yields a half-updated hierarchy.
"""

from __future__ import annotations

from typing import Optional


class ReorderError(Exception):
    """Base class for instructions the engines refuse to apply."""


class InvalidIndexError(ReorderError):
    """A source or destination index falls outside its sequence.

    Attributes:
        index:  The offending index.
        length: The number of valid positions at call time.
        role:   "source" or "destination".
    """

    def __init__(self, index: int, length: int, role: str = "source", where: str = ""):
        self.index = index
        self.length = length
        self.role = role
        where = f" in {where}" if where else ""
        super().__init__(
            f"{role} index {index} is out of range{where} (valid: 0..{length - 1})"
            if length > 0
            else f"{role} index {index} is out of range{where} (sequence is empty)"
        )


class UnknownParentError(ReorderError):
    """A referenced parent id does not exist in the hierarchy."""

    def __init__(self, parent_id: Optional[str]):
        self.parent_id = parent_id
        super().__init__(f"Unknown parent item '{parent_id}'")


class DuplicateIdError(ReorderError):
    """A sub-item would land in an item that already holds its id."""

    def __init__(self, sub_item_id: str, parent_id: str):
        self.sub_item_id = sub_item_id
        self.parent_id = parent_id
        super().__init__(f"Item '{parent_id}' already has a sub-item with id '{sub_item_id}'")


class StaleSnapshotError(ReorderError):
    """An instruction was computed against an older board revision."""

    def __init__(self, expected: int, current: int):
        self.expected = expected
        self.current = current
        super().__init__(
            f"Instruction targets revision {expected} but the board is at revision {current}"
        )
