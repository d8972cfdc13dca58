"""Tests for the Sortboard MCP tools."""

import asyncio
import base64
import json

import pytest

from sortboard import config, server
from sortboard.models import Board, Hierarchy, Item, SubItem


def _board() -> Board:
    return Board(
        title="Ops",
        hierarchy=Hierarchy(items=(
            Item(id="1", content="One", sub_items=(SubItem(id="1a"), SubItem(id="1b"))),
            Item(id="2", content="Two", sub_items=(SubItem(id="2a"),)),
        )),
    )


def call(name: str, arguments: dict | None = None):
    return asyncio.run(server.call_tool(name, arguments or {}))


def call_json(name: str, arguments: dict | None = None) -> dict:
    return json.loads(call(name, arguments)[0].text)


@pytest.fixture(autouse=True)
def fresh_session(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "OUTPUT_DIR", tmp_path)
    server.init_session(_board())
    yield
    server._session = None
    server._board = None


class TestTools:
    def test_tool_list(self):
        tools = asyncio.run(server.list_tools())
        names = {t.name for t in tools}
        assert names == {
            "get_board", "move", "add_parent", "add_sub_item",
            "render_board", "list_templates", "load_template",
        }

    def test_get_board(self):
        data = call_json("get_board")
        assert data["title"] == "Ops"
        assert data["revision"] == 0
        assert [i["id"] for i in data["items"]] == ["1", "2"]

    def test_move_with_fields(self):
        data = call_json("move", {
            "scope": "sub_items",
            "source_parent_id": "1",
            "source_index": 0,
            "destination_parent_id": "2",
            "destination_index": 1,
        })
        assert data["status"] == "success"
        assert data["revision"] == 1
        items = {i["id"]: [s["id"] for s in i["sub_items"]] for i in data["items"]}
        assert items == {"1": ["1b"], "2": ["2a", "1a"]}

    def test_move_with_drop_result(self):
        data = call_json("move", {"drop_result": {
            "type": "droppableItem",
            "source": {"droppableId": "droppable", "index": 0},
            "destination": {"droppableId": "droppable", "index": 1},
        }})
        assert [i["id"] for i in data["items"]] == ["2", "1"]

    def test_move_without_destination(self):
        data = call_json("move", {"scope": "parents", "source_index": 0})
        assert data["status"] == "success"
        assert data["changed"] is False

    def test_invalid_index(self):
        data = call_json("move", {"scope": "parents", "source_index": 0, "destination_index": 9})
        assert data["status"] == "error"
        assert call_json("get_board")["revision"] == 0

    def test_malformed_instruction(self):
        data = call_json("move", {"scope": "sideways", "source_index": 0})
        assert data["status"] == "error"
        assert "Invalid move instruction" in data["error"]

    def test_drop_result_must_be_a_mapping(self):
        data = call_json("move", {"drop_result": [0, 1]})
        assert data["status"] == "error"

    def test_revision_must_be_an_integer(self):
        data = call_json("move", {"scope": "parents", "source_index": 0, "destination_index": 1, "revision": "0"})
        assert data["status"] == "error"
        assert "revision" in data["error"]
        assert call_json("get_board")["revision"] == 0

    def test_content_must_be_a_string(self):
        assert call_json("add_parent", {"content": 5})["status"] == "error"
        assert call_json("add_sub_item", {"parent_id": "1", "content": 5})["status"] == "error"
        assert call_json("get_board")["revision"] == 0

    def test_stale_revision(self):
        call_json("add_parent")
        data = call_json("move", {"scope": "parents", "source_index": 0, "destination_index": 1, "revision": 0})
        assert data["status"] == "error"

    def test_add_parent_and_sub_item(self):
        data = call_json("add_parent", {"content": "Three"})
        new_id = data["items"][-1]["id"]
        assert data["items"][-1]["content"] == "Three"

        data = call_json("add_sub_item", {"parent_id": new_id})
        assert data["items"][-1]["sub_items"][0]["content"] == config.SUB_ITEM_LABEL

    def test_add_sub_item_unknown_parent(self):
        data = call_json("add_sub_item", {"parent_id": "nope"})
        assert data["status"] == "error"
        assert "nope" in data["error"]

    def test_add_sub_item_requires_parent(self):
        assert call_json("add_sub_item")["status"] == "error"

    def test_render_board(self, tmp_path):
        result = call("render_board", {"scale": 1.0, "filename": "snap", "theme": "light"})
        data = json.loads(result[0].text)

        assert data["path"] == str(tmp_path / "snap.png")
        assert data["items"] == 2 and data["sub_items"] == 3
        assert base64.b64decode(result[1].data) == (tmp_path / "snap.png").read_bytes()

    def test_templates(self):
        names = {t["name"] for t in call_json("list_templates")["templates"]}
        assert {"sample-board", "weekend"} <= names

        data = call_json("load_template", {"name": "weekend"})
        assert data["title"] == "Weekend"
        assert data["revision"] == 1
        assert [i["id"] for i in data["items"]] == ["groceries", "chores", "errands"]

    @pytest.mark.parametrize("name", ["../templates/weekend", "..", "sub/\\weekend", ""])
    def test_template_name_must_be_a_plain_stem(self, name):
        data = call_json("load_template", {"name": name})
        assert data["status"] == "error"
        assert call_json("get_board")["revision"] == 0

    def test_render_filename_must_stay_in_output_dir(self, tmp_path):
        data = call_json("render_board", {"filename": "../escaped"})
        assert data["status"] == "error"
        assert not (tmp_path.parent / "escaped.png").exists()

    def test_missing_template(self):
        assert "Template not found" in call("load_template", {"name": "nope"})[0].text

    def test_unknown_tool(self):
        assert "Unknown tool" in call("explode")[0].text
