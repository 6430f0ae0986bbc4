from __future__ import annotations

import logging
import os
import threading
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from flask import Flask, jsonify, request

from game import (
    BUILTIN_LEVELS,
    Direction,
    LevelFormatError,
    MoveOutcome,
    PlayerAndBoxMoved,
    PuzzleEngine,
    Rejected,
    builtin_level,
    parse_level,
)
from tilesheet import BOX_FRAMES, frame_grid, outcome_to_animations, parse_tile_rows, player_frame

logging.basicConfig(
    level=getattr(logging, os.getenv("SOKOBAN_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

DEFAULT_LEVEL = os.getenv("SOKOBAN_LEVEL", "original")
MAX_GAMES = int(os.getenv("SOKOBAN_MAX_GAMES", "256"))

app = Flask(__name__)

# Games live in memory only, oldest evicted first past MAX_GAMES.
# Engine calls are serialized under one lock.
GAMES: OrderedDict[str, PuzzleEngine] = OrderedDict()
_lock = threading.Lock()


def _coord(c: Tuple[int, int]) -> list:
    return [int(c[0]), int(c[1])]


def _outcome_to_json(o: MoveOutcome) -> Dict[str, Any]:
    out: Dict[str, Any] = {"kind": o.kind, "direction": o.direction.value}
    if isinstance(o, Rejected):
        out["reason"] = o.reason.value
        return out
    out["playerFrom"] = _coord(o.player_from)
    out["playerTo"] = _coord(o.player_to)
    if isinstance(o, PlayerAndBoxMoved):
        out["boxId"] = o.box_id
        out["boxColor"] = o.box_color.value
        out["boxFrom"] = _coord(o.box_from)
        out["boxTo"] = _coord(o.box_to)
    return out


def _state_to_json(game_id: str, engine: PuzzleEngine) -> Dict[str, Any]:
    player = engine.entities.player
    return {
        "gameId": game_id,
        "level": engine.level.name if engine.level else None,
        "width": engine.grid.width,
        "height": engine.grid.height,
        "tiles": frame_grid(engine.grid),
        "player": {
            "pos": _coord(player.position),
            "facing": player.facing.value if player.facing else None,
            "frame": player_frame(player.facing),
        },
        "boxes": [
            {"id": b.id, "color": b.color.value, "pos": _coord(b.position), "frame": BOX_FRAMES[b.color]}
            for b in engine.entities.boxes()
        ],
        "coverage": {c.value: n for c, n in engine.coverage_snapshot().items()},
        "solved": engine.is_solved(),
        "moving": engine.is_move_in_progress(),
        "moves": engine.moves_count,
        "pushes": engine.pushes_count,
        "legalDirections": [d.value for d in engine.legal_directions()],
    }


def _json_body() -> Optional[Dict[str, Any]]:
    """Request JSON as a dict; None when it parses to something other than an object."""
    body = request.get_json(force=True, silent=True)
    if body is None:
        return {}
    return body if isinstance(body, dict) else None


def _bad_body() -> Any:
    return jsonify({"ok": False, "error": "request body must be a JSON object"}), 400


def _lookup(body: Dict[str, Any]) -> Tuple[Optional[str], Optional[PuzzleEngine]]:
    game_id = body.get("gameId")
    if not isinstance(game_id, str):
        return None, None
    return game_id, GAMES.get(game_id)


def _not_found(game_id: Optional[str]) -> Any:
    return jsonify({"ok": False, "error": f"unknown game: {game_id}"}), 404


@app.get("/api/levels")
def api_levels() -> Any:
    return jsonify({"ok": True, "levels": sorted(BUILTIN_LEVELS), "default": DEFAULT_LEVEL})


@app.post("/api/new")
def api_new() -> Any:
    body = _json_body()
    if body is None:
        return _bad_body()
    try:
        if isinstance(body.get("tiles"), list):
            level = parse_tile_rows(body["tiles"], name=str(body.get("name", "tiles")))
        elif isinstance(body.get("text"), str):
            level = parse_level(body["text"], name=str(body.get("name", "custom")))
        else:
            level = builtin_level(str(body.get("level", DEFAULT_LEVEL)))
    except (LevelFormatError, TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": f"bad level: {e}"}), 400
    engine = PuzzleEngine.from_level(level, await_settle=True)
    game_id = str(uuid4())
    with _lock:
        GAMES[game_id] = engine
        while len(GAMES) > MAX_GAMES:
            evicted, _ = GAMES.popitem(last=False)
            logger.info("Evicted game %s (limit %d)", evicted, MAX_GAMES)
    logger.info("New game %s on level %r", game_id, level.name)
    return jsonify({"ok": True, "state": _state_to_json(game_id, engine)})


@app.post("/api/move")
def api_move() -> Any:
    body = _json_body()
    if body is None:
        return _bad_body()
    game_id, engine = _lookup(body)
    if engine is None:
        return _not_found(game_id)
    try:
        direction = Direction.parse(body.get("direction", ""))
    except ValueError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    with _lock:
        outcome = engine.request_move(direction)
        state = _state_to_json(game_id, engine)
    return jsonify({
        "ok": True,
        "outcome": _outcome_to_json(outcome),
        "animations": outcome_to_animations(outcome),
        "state": state,
    })


@app.post("/api/settle")
def api_settle() -> Any:
    body = _json_body()
    if body is None:
        return _bad_body()
    game_id, engine = _lookup(body)
    if engine is None:
        return _not_found(game_id)
    with _lock:
        engine.settle()
        state = _state_to_json(game_id, engine)
    return jsonify({"ok": True, "state": state})


@app.post("/api/state")
def api_state() -> Any:
    body = _json_body()
    if body is None:
        return _bad_body()
    game_id, engine = _lookup(body)
    if engine is None:
        return _not_found(game_id)
    with _lock:
        state = _state_to_json(game_id, engine)
    return jsonify({"ok": True, "state": state})


@app.post("/api/reset")
def api_reset() -> Any:
    body = _json_body()
    if body is None:
        return _bad_body()
    game_id, engine = _lookup(body)
    if engine is None:
        return _not_found(game_id)
    with _lock:
        engine.reset()
        state = _state_to_json(game_id, engine)
    return jsonify({"ok": True, "state": state})


@app.post("/api/delete")
def api_delete() -> Any:
    body = _json_body()
    if body is None:
        return _bad_body()
    game_id, engine = _lookup(body)
    if engine is None:
        return _not_found(game_id)
    with _lock:
        GAMES.pop(game_id, None)
    logger.info("Deleted game %s", game_id)
    return jsonify({"ok": True, "gameId": game_id})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
