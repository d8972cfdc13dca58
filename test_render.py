"""Tests for PNG board rendering."""

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from sortboard.layout import layout_board
from sortboard.models import Hierarchy
from sortboard.parser import parse_file, parse_yaml
from sortboard.renderer import BoardRenderer
from sortboard.themes import LIGHT_THEME, get_theme

TEMPLATES = Path(__file__).parent / "templates"

SIMPLE_YAML = """
title: Test Board
items:
  - id: todo
    content: To do
    sub_items: [Write tests, "A rather long sub-item label that will not fit on a single card line at all"]
  - id: done
    content: Done
"""


def _open(png_bytes: bytes) -> Image.Image:
    return Image.open(BytesIO(png_bytes))


class TestBoardRenderer:
    def test_renders_png(self):
        board = parse_yaml(SIMPLE_YAML)
        png = BoardRenderer().render_board(board)

        img = _open(png)
        assert img.format == "PNG"
        layout = layout_board(board.hierarchy)
        assert img.size == (int(layout.width), int(layout.height))

    def test_scale(self):
        board = parse_yaml(SIMPLE_YAML)
        small = _open(BoardRenderer(scale=1.0).render_board(board))
        large = _open(BoardRenderer(scale=2.0).render_board(board))
        assert large.size == (small.size[0] * 2, small.size[1] * 2)

    def test_writes_file(self, tmp_path):
        board = parse_file(str(TEMPLATES / "sample-board.yaml"))
        output = tmp_path / "board.png"
        png = BoardRenderer(scale=1.5).render_board(board, output_path=str(output))
        assert output.read_bytes() == png

    def test_empty_board(self):
        png = BoardRenderer().render(Hierarchy(), title="Empty")
        assert _open(png).size[0] > 0

    def test_unknown_theme(self):
        with pytest.raises(ValueError):
            BoardRenderer().render(Hierarchy(), theme="sepia")

    def test_dragging_highlight(self):
        board = parse_yaml(SIMPLE_YAML)
        renderer = BoardRenderer()
        card = renderer.layout(board.hierarchy).item_layout("done").card
        point = (int(card.x + 8), int(card.bottom - 8))

        idle = _open(renderer.render(board.hierarchy, theme="light")).convert("RGB")
        dragging = _open(
            renderer.render(board.hierarchy, theme="light", dragging_id="done")
        ).convert("RGB")

        assert idle.getpixel(point) == (0x80, 0x80, 0x80)
        assert dragging.getpixel(point) == (0x90, 0xEE, 0x90)

    def test_list_over_highlight(self):
        board = parse_yaml(SIMPLE_YAML)
        renderer = BoardRenderer()
        sub_list = renderer.layout(board.hierarchy).item_layout("done").sub_list
        point = (int(sub_list.x + 2), int(sub_list.y + 2))

        img = _open(renderer.render(board.hierarchy, theme="light", over_list="done")).convert("RGB")
        assert img.getpixel(point) == (0xAD, 0xD8, 0xE6)


class TestThemes:
    def test_lookup(self):
        assert get_theme("light") is LIGHT_THEME

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_theme("neon")
