"""
Board layout for Sortboard.

Computes where every card, drag handle, list and drop slot sits on the
board, in unscaled board coordinates.  The renderer draws from this
layout and the drag session hit-tests against it, so both always agree on
what is under the pointer.

Geometry follows an 8px grid:

    top-level list          padding 8
    └── item card           padding 16, gap 8 below
        ├── header row      content label + "Drag" handle
        └── sub-item list   padding 8
            └── sub card    gap 8 below

Drop slots
----------
Every list (the top-level list and each item's sub-item list) gets one
slot per gap: slot ``i`` means "insert before the card currently at index
i", for i in ``0..len``.  A slot's region runs from the vertical midpoint
of card ``i-1`` to the midpoint of card ``i``; the first and last slots
extend to the list edges.  An empty list is a single slot covering the
whole list.

Slot indices count positions in the list *as drawn*.  Converting a slot to
a splice destination (which is relative to the list after the dragged
card is removed) is the drag session's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .models import Hierarchy, Scope


# --- Spacing constants ---

GRID = 8

BOARD_PADDING = 24
TITLE_HEIGHT = 48
LIST_PADDING = GRID
CARD_PADDING = GRID * 2
CARD_GAP = GRID

HEADER_HEIGHT = 28
HANDLE_WIDTH = 56
HANDLE_MARGIN = 10
SUB_CARD_HEIGHT = 36
EMPTY_LIST_HEIGHT = 32

DEFAULT_BOARD_WIDTH = 480


@dataclass
class Box:
    """An axis-aligned rectangle."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.right, self.bottom)


@dataclass
class DropSlot:
    """An "insert before index" target inside one list.

    ``parent_id`` is None for the top-level list.
    """
    scope: Scope
    parent_id: Optional[str]
    index: int
    box: Box


@dataclass
class ItemLayout:
    """Placement of one item card and everything inside it."""
    item_id: str
    index: int
    card: Box
    handle: Box
    sub_list: Box
    sub_cards: list[Box] = field(default_factory=list)


@dataclass
class BoardLayout:
    """The full placement of a board."""
    width: float
    height: float
    list_box: Box
    items: list[ItemLayout] = field(default_factory=list)
    slots: list[DropSlot] = field(default_factory=list)

    def item_layout(self, item_id: str) -> Optional[ItemLayout]:
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None


def _sub_list_height(count: int) -> float:
    if count == 0:
        return EMPTY_LIST_HEIGHT
    return 2 * LIST_PADDING + count * (SUB_CARD_HEIGHT + CARD_GAP) - CARD_GAP


def _slots_for_list(
    scope: Scope, parent_id: Optional[str], list_box: Box, cards: list[Box]
) -> list[DropSlot]:
    if not cards:
        return [DropSlot(scope, parent_id, 0, Box(list_box.x, list_box.y, list_box.width, list_box.height))]

    bounds = [list_box.y] + [card.center_y for card in cards] + [list_box.bottom]
    slots = []
    for index in range(len(cards) + 1):
        top, bottom = bounds[index], bounds[index + 1]
        slots.append(DropSlot(scope, parent_id, index, Box(list_box.x, top, list_box.width, bottom - top)))
    return slots


def layout_board(hierarchy: Hierarchy, width: float = DEFAULT_BOARD_WIDTH) -> BoardLayout:
    """Place every card of ``hierarchy`` on a board ``width`` units wide."""
    list_x = BOARD_PADDING
    list_y = BOARD_PADDING + TITLE_HEIGHT
    list_width = width - 2 * BOARD_PADDING

    card_x = list_x + LIST_PADDING
    card_width = list_width - 2 * LIST_PADDING
    inner_x = card_x + CARD_PADDING
    inner_width = card_width - 2 * CARD_PADDING

    y = list_y + LIST_PADDING
    item_layouts: list[ItemLayout] = []
    slots: list[DropSlot] = []

    for index, item in enumerate(hierarchy.items):
        header_y = y + CARD_PADDING
        handle = Box(
            inner_x + inner_width - HANDLE_WIDTH,
            header_y,
            HANDLE_WIDTH,
            HEADER_HEIGHT,
        )

        sub_list_y = header_y + HEADER_HEIGHT + GRID
        sub_list = Box(inner_x, sub_list_y, inner_width, _sub_list_height(len(item.sub_items)))

        sub_cards = []
        sub_y = sub_list_y + LIST_PADDING
        for _ in item.sub_items:
            sub_cards.append(Box(inner_x + LIST_PADDING, sub_y, inner_width - 2 * LIST_PADDING, SUB_CARD_HEIGHT))
            sub_y += SUB_CARD_HEIGHT + CARD_GAP

        card_height = CARD_PADDING + HEADER_HEIGHT + GRID + sub_list.height + CARD_PADDING
        card = Box(card_x, y, card_width, card_height)

        item_layouts.append(ItemLayout(item.id, index, card, handle, sub_list, sub_cards))
        slots.extend(_slots_for_list(Scope.SUB_ITEMS, item.id, sub_list, sub_cards))
        y += card_height + CARD_GAP

    if hierarchy.items:
        y -= CARD_GAP
    list_height = max(y + LIST_PADDING - list_y, EMPTY_LIST_HEIGHT)
    list_box = Box(list_x, list_y, list_width, list_height)

    top_slots = _slots_for_list(Scope.PARENTS, None, list_box, [il.card for il in item_layouts])

    return BoardLayout(
        width=width,
        height=list_box.bottom + BOARD_PADDING,
        list_box=list_box,
        items=item_layouts,
        slots=top_slots + slots,
    )


def drop_slot_at(layout: BoardLayout, x: float, y: float, scope: Scope) -> Optional[DropSlot]:
    """Return the ``scope`` drop slot under (x, y), or None."""
    for slot in layout.slots:
        if slot.scope is scope and slot.box.contains(x, y):
            return slot
    return None
