"""
Drag gesture translation for Sortboard.

Two ways to turn a finished drag into a ``MoveInstruction``:

  - ``instruction_from_drop_result`` — the browser front end reports drops
    in its drag library's shape::

        {"type": "droppableSubItem",
         "source": {"droppableId": "1-asd", "index": 0},
         "destination": {"droppableId": "2-qwe", "index": 1}}

    ``type`` is ``"droppableItem"`` for the top-level list and
    ``"droppableSubItem"`` for sub-item lists, whose droppable ids are the
    owning item ids.  Its destination indices are already splice indices.

  - ``DragSession`` — a pointer-level session over a ``BoardLayout``, used
    by headless clients that only know coordinates.

Neither touches the hierarchy; they only describe the move.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .layout import BoardLayout, drop_slot_at
from .models import MoveInstruction, Scope

ITEM_DROPPABLE = "droppableItem"
SUB_ITEM_DROPPABLE = "droppableSubItem"


def instruction_from_drop_result(result: Mapping[str, Any]) -> MoveInstruction:
    """Translate a front-end drop result into a MoveInstruction.

    Raises:
        ValueError: If ``type`` is not a known droppable type.
    """
    drop_type = result.get("type")
    source = result["source"]
    destination = result.get("destination")

    dest_index = destination["index"] if destination else None
    dest_id = destination.get("droppableId") if destination else None

    if drop_type == ITEM_DROPPABLE:
        return MoveInstruction.parents(source["index"], dest_index)
    if drop_type == SUB_ITEM_DROPPABLE:
        return MoveInstruction.sub_items(
            source_parent_id=source["droppableId"],
            source_index=source["index"],
            destination_parent_id=dest_id,
            destination_index=dest_index,
        )
    raise ValueError(f"Unknown droppable type: {drop_type!r}")


@dataclass
class DragSource:
    """What a drag picked up."""
    scope: Scope
    index: int
    parent_id: Optional[str] = None


class DragSession:
    """Track one pointer drag across a board layout.

    ``begin`` picks up the card under the pointer: any sub-item card, or an
    item by its "Drag" handle.  ``drop`` hit-tests the drop slot of the same
    scope under the pointer and returns the resulting instruction.  A drop
    outside every slot yields an instruction with no destination.

    Only one gesture is tracked at a time; the layout must be rebuilt from
    the committed hierarchy before the next gesture begins.
    """

    def __init__(self, layout: BoardLayout):
        self.layout = layout
        self.active: Optional[DragSource] = None

    @property
    def dragging(self) -> bool:
        return self.active is not None

    def begin(self, x: float, y: float) -> Optional[DragSource]:
        """Pick up whatever is draggable at (x, y).  Returns None if nothing is."""
        if self.active is not None:
            raise RuntimeError("A drag is already in progress")

        for item in self.layout.items:
            for index, box in enumerate(item.sub_cards):
                if box.contains(x, y):
                    self.active = DragSource(Scope.SUB_ITEMS, index, item.item_id)
                    return self.active
        for item in self.layout.items:
            if item.handle.contains(x, y):
                self.active = DragSource(Scope.PARENTS, item.index)
                return self.active
        return None

    def cancel(self) -> None:
        self.active = None

    def drop(self, x: float, y: float) -> MoveInstruction:
        """Release the drag at (x, y) and describe the move."""
        if self.active is None:
            raise RuntimeError("No drag in progress")
        source, self.active = self.active, None

        slot = drop_slot_at(self.layout, x, y, source.scope)
        dest_index = None
        dest_parent = None
        if slot is not None:
            dest_parent = slot.parent_id
            dest_index = slot.index
            # Slots count positions as drawn; splice indices are relative
            # to the list with the dragged card already removed.
            if dest_parent == source.parent_id and dest_index > source.index:
                dest_index -= 1

        if source.scope is Scope.PARENTS:
            return MoveInstruction.parents(source.index, dest_index)
        return MoveInstruction.sub_items(
            source_parent_id=source.parent_id,
            source_index=source.index,
            destination_parent_id=dest_parent,
            destination_index=dest_index,
        )
