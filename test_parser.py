"""Tests for the YAML board format."""

from pathlib import Path

import pytest
import yaml

from sortboard.models import Hierarchy, Item, SubItem
from sortboard.parser import board_to_yaml, hierarchy_to_dict, parse_file, parse_yaml

TEMPLATES = Path(__file__).parent / "templates"


FULL_YAML = """
board:
  title: Release
  theme: light
  items:
    - id: build
      content: Build
      sub_items:
        - id: compile
          content: Compile
        - id: package
          content: Package
    - id: ship
      content: Ship
"""

SIMPLE_YAML = """
title: Weekend
items:
  - id: groceries
    content: Groceries
    sub_items: [Milk, Eggs]
  - id: chores
    content: Chores
"""


class TestParseYaml:
    def test_full_format(self):
        board = parse_yaml(FULL_YAML)

        assert board.title == "Release"
        assert board.theme == "light"
        assert board.hierarchy.item_ids() == ["build", "ship"]
        assert board.hierarchy.get_item("build").sub_item_ids() == ["compile", "package"]
        assert board.hierarchy.get_item("ship").sub_items == ()

    def test_simple_format_derives_sub_item_ids(self):
        board = parse_yaml(SIMPLE_YAML)

        groceries = board.hierarchy.get_item("groceries")
        assert groceries.sub_item_ids() == ["groceries-1", "groceries-2"]
        assert [s.content for s in groceries.sub_items] == ["Milk", "Eggs"]
        assert board.theme == "dark"

    def test_bare_list(self):
        board = parse_yaml("- id: a\n  content: A\n- Loose item\n")
        assert board.hierarchy.item_ids() == ["a", "item-2"]
        assert board.hierarchy.items[1].content == "Loose item"

    def test_camel_case_sub_items(self):
        board = parse_yaml("items:\n  - id: a\n    subItems:\n      - id: a1\n        content: One\n")
        assert board.hierarchy.get_item("a").sub_item_ids() == ["a1"]

    def test_numeric_ids_become_strings(self):
        board = parse_yaml("items:\n  - id: 1\n    sub_items:\n      - id: 2\n")
        assert board.hierarchy.item_ids() == ["1"]
        assert board.hierarchy.items[0].sub_item_ids() == ["2"]

    def test_empty_input(self):
        with pytest.raises(ValueError):
            parse_yaml("")

    def test_mapping_without_items(self):
        with pytest.raises(ValueError):
            parse_yaml("title: nothing here\n")

    def test_duplicate_item_ids(self):
        with pytest.raises(ValueError):
            parse_yaml("items:\n  - id: a\n  - id: a\n")

    def test_derived_sub_item_ids_skip_explicit_ones(self):
        board = parse_yaml(
            "items:\n"
            "  - id: a\n"
            "    sub_items:\n"
            "      - {id: a-2, content: X}\n"
            "      - Y\n"
            "      - {id: a-3, content: Z}\n"
        )
        item = board.hierarchy.get_item("a")
        assert item.sub_item_ids() == ["a-2", "a-4", "a-3"]
        assert item.sub_items[1].content == "Y"

    def test_duplicate_sub_item_ids(self):
        with pytest.raises(ValueError):
            parse_yaml("items:\n  - id: a\n    sub_items:\n      - id: s\n      - id: s\n")


class TestSerialization:
    def test_hierarchy_to_dict(self):
        hierarchy = Hierarchy(items=(Item(id="a", content="A", sub_items=(SubItem(id="a1", content="x"),)),))
        assert hierarchy_to_dict(hierarchy) == [
            {"id": "a", "content": "A", "sub_items": [{"id": "a1", "content": "x"}]}
        ]

    def test_board_to_yaml_is_readable_back(self):
        board = parse_yaml(FULL_YAML)
        dumped = board_to_yaml(board)

        assert yaml.safe_load(dumped)["board"]["title"] == "Release"
        assert parse_yaml(dumped) == board


class TestTemplates:
    def test_sample_board(self):
        board = parse_file(str(TEMPLATES / "sample-board.yaml"))
        assert board.hierarchy.items[0].id == "1-asd"
        assert board.hierarchy.sub_item_count() == 5

    def test_weekend_board(self):
        board = parse_file(str(TEMPLATES / "weekend.yaml"))
        assert board.theme == "light"
        assert board.hierarchy.get_item("errands").sub_items == ()
