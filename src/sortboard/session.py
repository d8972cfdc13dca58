"""
Board session — the one place that holds "the current hierarchy".

The engines are pure; something still has to own the latest snapshot,
apply instructions against it one at a time, and tell interested parties
about each new state.  ``BoardSession`` does that for the MCP server and
the web API.

Commit discipline
-----------------
Instructions are relative to a specific snapshot.  Each call computes and
commits its result while holding a lock, so a second instruction never
runs against a snapshot that is about to be replaced.  Callers that
computed an instruction earlier (e.g. a browser that rendered revision 4)
can pass ``expected_revision``; if the board has moved on, the instruction
is refused instead of silently targeting the wrong element.

Refused instructions (bad index, unknown parent, stale revision) are
logged and leave the board as it was.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import ReorderError, StaleSnapshotError
from .models import Hierarchy, MoveInstruction
from .mutations import (
    DEFAULT_PARENT_CONTENT,
    DEFAULT_SUB_ITEM_CONTENT,
    IdProvider,
    add_parent,
    add_sub_item,
)
from .reorder import reorder

logger = logging.getLogger(__name__)

Observer = Callable[[Hierarchy, int], None]


@dataclass
class Outcome:
    """Result of one session operation."""
    hierarchy: Hierarchy
    revision: int
    changed: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BoardSession:
    """Holds the current board snapshot and applies operations to it."""

    def __init__(
        self,
        hierarchy: Optional[Hierarchy] = None,
        id_provider: Optional[IdProvider] = None,
        parent_label: str = DEFAULT_PARENT_CONTENT,
        sub_item_label: str = DEFAULT_SUB_ITEM_CONTENT,
    ):
        self._hierarchy = hierarchy if hierarchy is not None else Hierarchy()
        self._revision = 0
        self._lock = threading.Lock()
        self._observers: list[Observer] = []
        self.id_provider = id_provider
        self.parent_label = parent_label
        self.sub_item_label = sub_item_label

    @property
    def current(self) -> Hierarchy:
        return self._hierarchy

    @property
    def revision(self) -> int:
        return self._revision

    def subscribe(self, observer: Observer) -> None:
        """Call ``observer(hierarchy, revision)`` after every committed change."""
        self._observers.append(observer)

    def reset(self, hierarchy: Hierarchy) -> Outcome:
        """Replace the whole board, e.g. after loading a template."""
        return self._apply(lambda current: hierarchy, "reset")

    def move(self, instruction: MoveInstruction, expected_revision: Optional[int] = None) -> Outcome:
        return self._apply(lambda current: reorder(current, instruction), "move", expected_revision)

    def add_parent(self, content: Optional[str] = None) -> Outcome:
        label = content if content is not None else self.parent_label
        return self._apply(
            lambda current: add_parent(current, label, id_provider=self.id_provider),
            "add_parent",
        )

    def add_sub_item(self, parent_id: str, content: Optional[str] = None) -> Outcome:
        label = content if content is not None else self.sub_item_label
        return self._apply(
            lambda current: add_sub_item(current, parent_id, label, id_provider=self.id_provider),
            "add_sub_item",
        )

    def _apply(
        self,
        operation: Callable[[Hierarchy], Hierarchy],
        name: str,
        expected_revision: Optional[int] = None,
    ) -> Outcome:
        with self._lock:
            current = self._hierarchy
            try:
                if expected_revision is not None and expected_revision != self._revision:
                    raise StaleSnapshotError(expected_revision, self._revision)
                updated = operation(current)
            except ReorderError as e:
                logger.warning(f"Ignored {name}: {e}")
                return Outcome(
                    current,
                    self._revision,
                    changed=False,
                    error=str(e),
                    error_kind=type(e).__name__,
                )

            if updated is current:
                return Outcome(current, self._revision, changed=False)

            self._hierarchy = updated
            self._revision += 1
            revision = self._revision

        logger.debug(f"Updated items (revision {revision}): {updated.model_dump()}")
        for observer in list(self._observers):
            try:
                observer(updated, revision)
            except Exception:
                logger.exception(f"Observer {observer!r} failed on revision {revision}")
        return Outcome(updated, revision, changed=True)
