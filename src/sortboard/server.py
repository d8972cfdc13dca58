"""Sortboard MCP server — MCP tools for reordering a two-level board."""

from __future__ import annotations

import base64
import json
import logging
import uuid
from pathlib import Path
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, ImageContent, Tool
from pydantic import ValidationError

from . import config
from .gestures import instruction_from_drop_result
from .models import Board, MoveInstruction
from .parser import hierarchy_to_dict, parse_file
from .renderer import BoardRenderer
from .session import BoardSession, Outcome

logger = logging.getLogger(__name__)

server = Server("sortboard")

_board: Optional[Board] = None
_session: Optional[BoardSession] = None


def get_session() -> BoardSession:
    """Return the shared session, loading the configured board on first use."""
    if _session is None:
        board = Board()
        if Path(config.BOARD_PATH).exists():
            board = parse_file(config.BOARD_PATH)
            logger.info(f"Loaded board from {config.BOARD_PATH}")
        init_session(board)
    return _session


def init_session(board: Board) -> BoardSession:
    global _board, _session
    _board = board
    _session = BoardSession(
        board.hierarchy,
        id_provider=config.make_id_provider(),
        parent_label=config.PARENT_LABEL,
        sub_item_label=config.SUB_ITEM_LABEL,
    )
    return _session


def _board_payload(session: BoardSession) -> dict:
    return {
        "title": _board.title if _board else "Untitled Board",
        "revision": session.revision,
        "items": hierarchy_to_dict(session.current),
    }


def _outcome_payload(outcome: Outcome) -> dict:
    if outcome.error:
        return {"status": "error", "error": outcome.error, "revision": outcome.revision}
    return {
        "status": "success",
        "changed": outcome.changed,
        "revision": outcome.revision,
        "items": hierarchy_to_dict(outcome.hierarchy),
    }


def _json(payload: dict) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload))]


def _error(message: str) -> list[TextContent]:
    return _json({"status": "error", "error": message})


def _is_plain_name(name) -> bool:
    """True for a bare file stem with no directory parts."""
    return (
        isinstance(name, str)
        and name not in ("", ".", "..")
        and "/" not in name
        and "\\" not in name
    )


# --- Tool definitions ---

@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="get_board",
            description="Return the current board: its items, their sub-items, and the board revision.",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="move",
            description=(
                "Move a parent item or a sub-item. Either pass a browser drop result "
                "(type droppableItem/droppableSubItem with source/destination), or the "
                "instruction fields directly. Indices use splice semantics: the "
                "destination index is the position after the moved element is removed. "
                "Omit the destination to model a drop outside any list (no change)."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "drop_result": {
                        "type": "object",
                        "description": "Drop result as reported by the browser front end.",
                    },
                    "scope": {
                        "type": "string",
                        "enum": ["parents", "sub_items"],
                        "description": "Which sequence the move acts on.",
                    },
                    "source_index": {"type": "integer", "minimum": 0},
                    "destination_index": {"type": "integer", "minimum": 0},
                    "source_parent_id": {
                        "type": "string",
                        "description": "Item owning the source list (sub_items scope).",
                    },
                    "destination_parent_id": {
                        "type": "string",
                        "description": "Item owning the destination list (sub_items scope).",
                    },
                    "revision": {
                        "type": "integer",
                        "description": "Board revision the move was computed against. Stale moves are refused.",
                    },
                },
            },
        ),
        Tool(
            name="add_parent",
            description="Append a new, empty parent item to the end of the board.",
            inputSchema={
                "type": "object",
                "properties": {
                    "content": {"type": "string", "description": "Label for the new item."},
                },
            },
        ),
        Tool(
            name="add_sub_item",
            description="Append a new sub-item to the end of a parent item's list.",
            inputSchema={
                "type": "object",
                "properties": {
                    "parent_id": {"type": "string", "description": "Id of the owning item."},
                    "content": {"type": "string", "description": "Label for the new sub-item."},
                },
                "required": ["parent_id"],
            },
        ),
        Tool(
            name="render_board",
            description="Render the current board to PNG. Returns the file path and the image.",
            inputSchema={
                "type": "object",
                "properties": {
                    "theme": {"type": "string", "enum": ["dark", "light"]},
                    "scale": {
                        "type": "number",
                        "description": "Render scale factor (default 2.0)",
                        "default": 2.0,
                    },
                    "filename": {
                        "type": "string",
                        "description": "Output filename (without extension). Default: auto-generated.",
                    },
                },
            },
        ),
        Tool(
            name="list_templates",
            description="List the board templates that can be loaded.",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="load_template",
            description="Replace the current board with a template by name.",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Template name (from list_templates)"},
                },
                "required": ["name"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent | ImageContent]:
    arguments = arguments or {}
    if name == "get_board":
        return await _get_board(arguments)
    elif name == "move":
        return await _move(arguments)
    elif name == "add_parent":
        return await _add_parent(arguments)
    elif name == "add_sub_item":
        return await _add_sub_item(arguments)
    elif name == "render_board":
        return await _render_board(arguments)
    elif name == "list_templates":
        return await _list_templates(arguments)
    elif name == "load_template":
        return await _load_template(arguments)
    else:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]


async def _get_board(args: dict) -> list[TextContent]:
    return _json(_board_payload(get_session()))


def _instruction_from_args(args: dict) -> MoveInstruction:
    if "drop_result" in args:
        return instruction_from_drop_result(args["drop_result"])
    fields = {
        key: args[key]
        for key in (
            "scope",
            "source_index",
            "destination_index",
            "source_parent_id",
            "destination_parent_id",
        )
        if key in args
    }
    return MoveInstruction(**fields)


async def _move(args: dict) -> list[TextContent]:
    """Apply one move instruction to the shared board."""
    try:
        instruction = _instruction_from_args(args)
    except (ValidationError, ValueError, KeyError, TypeError, AttributeError) as e:
        return _error(f"Invalid move instruction: {e}")

    revision = args.get("revision")
    if revision is not None and (isinstance(revision, bool) or not isinstance(revision, int)):
        return _error("revision must be an integer")

    outcome = get_session().move(instruction, expected_revision=revision)
    return _json(_outcome_payload(outcome))


async def _add_parent(args: dict) -> list[TextContent]:
    content = args.get("content")
    if content is not None and not isinstance(content, str):
        return _error("content must be a string")
    return _json(_outcome_payload(get_session().add_parent(content)))


async def _add_sub_item(args: dict) -> list[TextContent]:
    parent_id = args.get("parent_id")
    if not parent_id or not isinstance(parent_id, str):
        return _error("parent_id is required")
    content = args.get("content")
    if content is not None and not isinstance(content, str):
        return _error("content must be a string")
    return _json(_outcome_payload(get_session().add_sub_item(parent_id, content)))


async def _render_board(args: dict) -> list[TextContent | ImageContent]:
    """Render the current board to PNG."""
    output_dir = config.ensure_output_dir()
    session = get_session()

    theme = args.get("theme") or (_board.theme if _board else "dark")
    scale = args.get("scale", 2.0)
    filename = args.get("filename", f"board-r{session.revision}-{str(uuid.uuid4())[:8]}")
    if not _is_plain_name(filename):
        return _error(f"Invalid filename: {filename!r}")
    output_path = str(output_dir / f"{filename}.png")

    renderer = BoardRenderer(scale=scale)
    try:
        png_bytes = renderer.render(
            session.current,
            title=_board.title if _board else "Untitled Board",
            theme=theme,
            output_path=output_path,
        )
    except Exception as e:
        logger.error(f"Render error: {e}")
        return [TextContent(type="text", text=f"Rendering failed: {e}")]

    return [
        TextContent(
            type="text",
            text=json.dumps({
                "status": "success",
                "path": output_path,
                "revision": session.revision,
                "items": len(session.current.items),
                "sub_items": session.current.sub_item_count(),
            }),
        ),
        ImageContent(
            type="image",
            data=base64.b64encode(png_bytes).decode("ascii"),
            mimeType="image/png",
        ),
    ]


async def _list_templates(args: dict) -> list[TextContent]:
    """List available template files."""
    templates = []

    if config.TEMPLATES_DIR.exists():
        for f in sorted(config.TEMPLATES_DIR.glob("*.yaml")) + sorted(config.TEMPLATES_DIR.glob("*.yml")):
            templates.append({
                "name": f.stem,
                "path": str(f),
            })

    return _json({"templates": templates})


async def _load_template(args: dict) -> list[TextContent]:
    """Replace the board with a template by name."""
    global _board
    name = args.get("name")
    if not _is_plain_name(name):
        return _error(f"Invalid template name: {name!r}")

    for ext in [".yaml", ".yml"]:
        path = config.TEMPLATES_DIR / f"{name}{ext}"
        if path.exists():
            try:
                board = parse_file(str(path))
            except (ValidationError, ValueError) as e:
                return _json({"status": "error", "error": f"Failed to parse template: {e}"})
            session = get_session()
            _board = board
            session.reset(board.hierarchy)
            return _json({"status": "success", **_board_payload(session)})

    return [TextContent(type="text", text=f"Template not found: {name}")]


def main():
    """Entry point for the MCP server."""
    import asyncio
    config.setup_logging()
    asyncio.run(_run())


async def _run():
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    main()
