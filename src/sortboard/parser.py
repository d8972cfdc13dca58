"""YAML board parser for Sortboard.

Supports two formats:
1. Full board YAML (a ``board:`` mapping with title, theme and items)
2. Simplified format (top-level ``items:``, or just a bare list of items)

In either format a sub-item may be written as a mapping (``id`` and
``content``) or as a plain string.  A string is taken as the content, and
the id is derived from the parent id and its 1-based position, e.g.
``groceries-2``.  A derived id that another sub-item of the same item
already uses is bumped to the next free number.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .models import Board, Hierarchy, Item, SubItem


def parse_yaml(yaml_str: str) -> Board:
    """Parse a YAML string into a Board."""
    data = yaml.safe_load(yaml_str)
    if not data:
        raise ValueError("Empty YAML input")

    if isinstance(data, list):
        return Board(hierarchy=parse_items(data))

    if "board" in data:
        return _parse_full_format(data["board"])

    return _parse_simple_format(data)


def parse_file(path: str) -> Board:
    """Parse a YAML file into a Board."""
    content = Path(path).read_text()
    return parse_yaml(content)


def _parse_full_format(data: dict) -> Board:
    return Board(
        title=data.get("title", "Untitled Board"),
        theme=data.get("theme", "dark"),
        hierarchy=parse_items(data.get("items", [])),
    )


def _parse_simple_format(data: dict) -> Board:
    """Parse the simplified format.

    Example:
        title: Weekend
        items:
          - id: groceries
            content: Groceries
            sub_items: [Milk, Eggs]
          - id: chores
            content: Chores
    """
    if "items" not in data:
        raise ValueError("Board YAML needs a 'board' or 'items' key")
    return Board(
        title=data.get("title", "Untitled Board"),
        theme=data.get("theme", "dark"),
        hierarchy=parse_items(data["items"] or []),
    )


def parse_items(items_data: list) -> Hierarchy:
    """Build a Hierarchy from a list of plain item mappings."""
    items = []
    for position, item_data in enumerate(items_data, start=1):
        items.append(_parse_item(item_data, position))
    return Hierarchy(items=tuple(items))


def _parse_item(data: Any, position: int) -> Item:
    if isinstance(data, str):
        return Item(id=f"item-{position}", content=data)

    item_id = str(data["id"])
    # camelCase is accepted for boards exported from the browser UI
    raw_subs = data.get("sub_items", data.get("subItems")) or []
    # Derived ids must not collide with ids written out in the same item
    taken = {str(sub["id"]) for sub in raw_subs if not isinstance(sub, str)}
    sub_items = []
    for index, sub_data in enumerate(raw_subs, start=1):
        if isinstance(sub_data, str):
            sub_id = _derive_sub_item_id(item_id, index, taken)
            taken.add(sub_id)
            sub_items.append(SubItem(id=sub_id, content=sub_data))
        else:
            sub_items.append(SubItem(id=str(sub_data["id"]), content=str(sub_data.get("content", ""))))
    return Item(id=item_id, content=str(data.get("content", "")), sub_items=tuple(sub_items))


def _derive_sub_item_id(parent_id: str, position: int, taken: set[str]) -> str:
    """``<parent>-<position>``, bumped past any id already in use."""
    candidate = position
    while f"{parent_id}-{candidate}" in taken:
        candidate += 1
    return f"{parent_id}-{candidate}"


def hierarchy_to_dict(hierarchy: Hierarchy) -> list[dict]:
    """Serialize a Hierarchy to JSON-ready plain data."""
    return [
        {
            "id": item.id,
            "content": item.content,
            "sub_items": [{"id": sub.id, "content": sub.content} for sub in item.sub_items],
        }
        for item in hierarchy.items
    ]


def board_to_yaml(board: Board) -> str:
    """Serialize a Board back to the full YAML format."""
    data = {
        "board": {
            "title": board.title,
            "theme": board.theme,
            "items": hierarchy_to_dict(board.hierarchy),
        }
    }
    return yaml.dump(data, default_flow_style=False, sort_keys=False)
