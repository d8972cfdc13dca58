"""
Sortboard Web - JSON API for a drag-and-drop board

A lightweight aiohttp server that the browser board talks to. The browser
captures drags and button clicks; this server owns the board state and
answers every change with the new snapshot.

Usage:
    sortboard-web [--port 8766] [--host 0.0.0.0] [--board templates/sample-board.yaml]
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

from aiohttp import web
from pydantic import ValidationError

from . import config
from .gestures import instruction_from_drop_result
from .models import Board, MoveInstruction
from .parser import hierarchy_to_dict, parse_file
from .renderer import BoardRenderer
from .session import BoardSession, Outcome

logger = logging.getLogger(__name__)

SESSION_KEY = web.AppKey("session", BoardSession)
BOARD_KEY = web.AppKey("board", Board)


def _board_response(request: web.Request) -> dict:
    session = request.app[SESSION_KEY]
    return {
        "title": request.app[BOARD_KEY].title,
        "revision": session.revision,
        "items": hierarchy_to_dict(session.current),
    }


ERROR_STATUS = {
    "InvalidIndexError": 400,
    "UnknownParentError": 404,
    "DuplicateIdError": 409,
    "StaleSnapshotError": 409,
}


def _outcome_response(outcome: Outcome) -> web.Response:
    if outcome.error:
        return web.json_response(
            {"error": outcome.error, "kind": outcome.error_kind, "revision": outcome.revision},
            status=ERROR_STATUS.get(outcome.error_kind, 400),
        )
    return web.json_response({
        "changed": outcome.changed,
        "revision": outcome.revision,
        "items": hierarchy_to_dict(outcome.hierarchy),
    })


def _bad_request(message: str) -> web.HTTPBadRequest:
    return web.HTTPBadRequest(
        text=json.dumps({"error": message}),
        content_type="application/json",
    )


async def _read_json(request: web.Request) -> dict:
    if not request.can_read_body:
        return {}
    try:
        data = await request.json()
    except ValueError:
        raise _bad_request("Request body is not valid JSON")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _bad_request("Request body must be a JSON object")
    return data


def _optional_content(data: dict) -> Optional[str]:
    content = data.get("content")
    if content is not None and not isinstance(content, str):
        raise _bad_request("content must be a string")
    return content


def _optional_revision(data: dict) -> Optional[int]:
    revision = data.get("revision")
    if revision is not None and (isinstance(revision, bool) or not isinstance(revision, int)):
        raise _bad_request("revision must be an integer")
    return revision


async def handle_status(request):
    """Health check."""
    session = request.app[SESSION_KEY]
    return web.json_response({
        "status": "ok",
        "revision": session.revision,
        "items": len(session.current.items),
        "sub_items": session.current.sub_item_count(),
    })


async def handle_board(request):
    """Current board snapshot."""
    return web.json_response(_board_response(request))


async def handle_move(request):
    """Apply one completed drag.

    The body is either a drop result straight from the browser drag library
    (``type``/``source``/``destination``) or explicit instruction fields.
    An optional ``revision`` names the snapshot the drag was made on.
    """
    data = await _read_json(request)
    revision = _optional_revision(data)
    try:
        if "type" in data and "source" in data:
            instruction = instruction_from_drop_result(data)
        else:
            fields = {k: v for k, v in data.items() if k != "revision"}
            instruction = MoveInstruction(**fields)
    except (ValidationError, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Rejected move: {e}")
        return web.json_response({"error": f"Invalid move instruction: {e}"}, status=400)

    session = request.app[SESSION_KEY]
    outcome = session.move(instruction, expected_revision=revision)
    return _outcome_response(outcome)


async def handle_add_parent(request):
    """Append a new parent item."""
    data = await _read_json(request)
    outcome = request.app[SESSION_KEY].add_parent(_optional_content(data))
    return _outcome_response(outcome)


async def handle_add_sub_item(request):
    """Append a new sub-item to an existing item."""
    item_id = request.match_info["item_id"]
    data = await _read_json(request)
    outcome = request.app[SESSION_KEY].add_sub_item(item_id, _optional_content(data))
    return _outcome_response(outcome)


async def handle_render(request):
    """PNG snapshot of the current board."""
    board = request.app[BOARD_KEY]
    theme = request.query.get("theme", board.theme)
    try:
        scale = float(request.query.get("scale", "1.0"))
    except ValueError:
        return web.json_response({"error": "scale must be a number"}, status=400)

    renderer = BoardRenderer(scale=scale)
    try:
        png_bytes = renderer.render(request.app[SESSION_KEY].current, title=board.title, theme=theme)
    except ValueError as e:
        return web.json_response({"error": str(e)}, status=400)

    return web.Response(body=png_bytes, content_type="image/png")


def _log_update(hierarchy, revision):
    logger.info(f"Board revision {revision}: {len(hierarchy.items)} items, {hierarchy.sub_item_count()} sub-items")


def create_app(session: BoardSession = None, board: Board = None):
    """Create the aiohttp application."""
    board = board or Board()
    if session is None:
        session = BoardSession(
            board.hierarchy,
            id_provider=config.make_id_provider(),
            parent_label=config.PARENT_LABEL,
            sub_item_label=config.SUB_ITEM_LABEL,
        )
    session.subscribe(_log_update)

    app = web.Application()
    app[SESSION_KEY] = session
    app[BOARD_KEY] = board

    # API routes
    app.router.add_get('/api/status', handle_status)
    app.router.add_get('/api/board', handle_board)
    app.router.add_post('/api/move', handle_move)
    app.router.add_post('/api/items', handle_add_parent)
    app.router.add_post('/api/items/{item_id}/sub-items', handle_add_sub_item)
    app.router.add_get('/api/render', handle_render)

    return app


async def serve(board: Board, host: str = '0.0.0.0', port: int = 8766):
    """Run the web server."""
    app = create_app(board=board)

    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Sortboard running at http://{host}:{port}")
    logger.info(f"Board: {board.title} ({len(board.hierarchy.items)} items)")

    # Keep running
    while True:
        await asyncio.sleep(3600)


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Sortboard Web Server')
    parser.add_argument('--host', default='0.0.0.0', help='Host to bind to')
    parser.add_argument('--port', type=int, default=8766, help='Port to listen on')
    parser.add_argument('--board', default=config.BOARD_PATH, help='Board YAML to start from')
    args = parser.parse_args()

    config.setup_logging()

    board = Board()
    if Path(args.board).exists():
        board = parse_file(args.board)
    else:
        logger.warning(f"Board file not found, starting empty: {args.board}")

    try:
        asyncio.run(serve(board, host=args.host, port=args.port))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == '__main__':
    main()
