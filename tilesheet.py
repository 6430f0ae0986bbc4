from __future__ import annotations

# Presentation-side lookup for the 64x64 sokoban tile sheet.
# Frame numbers live here only; the core never sees them.

from typing import Any, Dict, List, Optional, Sequence, Tuple

from sokoban_core.board import FLOOR, WALL, Cell, CellKind, Coord, Direction, Grid
from sokoban_core.colors import Color
from sokoban_core.levels import Level, LevelFormatError, validate_level
from sokoban_core.moves import MoveOutcome, PlayerAndBoxMoved, Rejected

TILE_SIZE = 64
TWEEN_MS = 500

FRAME_FLOOR = 0
FRAME_WALL = 100
FRAME_PLAYER = 52

BOX_FRAMES: Dict[Color, int] = {
    Color.ORANGE: 6,
    Color.RED: 7,
    Color.BLUE: 8,
    Color.GREEN: 9,
    Color.GREY: 10,
}

TARGET_FRAMES: Dict[Color, int] = {
    Color.ORANGE: 25,
    Color.RED: 38,
    Color.BLUE: 51,
    Color.GREEN: 64,
    Color.GREY: 77,
}

# Idle frame and walk-cycle frame range per facing direction.
IDLE_FRAMES: Dict[Direction, int] = {
    Direction.DOWN: 52,
    Direction.UP: 55,
    Direction.LEFT: 81,
    Direction.RIGHT: 78,
}

WALK_FRAMES: Dict[Direction, Tuple[int, int]] = {
    Direction.DOWN: (52, 54),
    Direction.UP: (55, 57),
    Direction.LEFT: (81, 83),
    Direction.RIGHT: (78, 80),
}

_BOX_BY_FRAME = {frame: color for color, frame in BOX_FRAMES.items()}
_TARGET_BY_FRAME = {frame: color for color, frame in TARGET_FRAMES.items()}


def parse_tile_rows(rows: Sequence[Sequence[int]], name: str = "tiles") -> Level:
    """Resolves a table of tile-sheet frame numbers into a Level."""
    cells: List[List[Cell]] = []
    player: Optional[Coord] = None
    boxes: List[Tuple[Color, Coord]] = []
    width = len(rows[0]) if rows else 0
    for r, row in enumerate(rows):
        if len(row) != width:
            raise LevelFormatError(f"tile row {r} has {len(row)} cells, expected {width}")
        out: List[Cell] = []
        for c, frame in enumerate(row):
            frame = int(frame)
            if frame == FRAME_WALL:
                out.append(WALL)
            elif frame == FRAME_FLOOR:
                out.append(FLOOR)
            elif frame == FRAME_PLAYER:
                if player is not None:
                    raise LevelFormatError(f"second player tile at ({c},{r})")
                player = (c, r)
                out.append(FLOOR)
            elif frame in _BOX_BY_FRAME:
                boxes.append((_BOX_BY_FRAME[frame], (c, r)))
                out.append(FLOOR)
            elif frame in _TARGET_BY_FRAME:
                out.append(Cell(CellKind.FLOOR, _TARGET_BY_FRAME[frame]))
            else:
                raise LevelFormatError(f"unknown tile frame {frame} at ({c},{r})")
        cells.append(out)
    if not cells:
        raise LevelFormatError("tile table is empty")
    if player is None:
        raise LevelFormatError("tile table has no player")
    level = Level(name=name, grid=Grid.from_rows(cells), player=player, boxes=tuple(boxes))
    validate_level(level)
    return level


def frame_grid(grid: Grid) -> List[List[int]]:
    """Static-layer frame numbers, row by row."""
    out: List[List[int]] = []
    for row in range(grid.height):
        line: List[int] = []
        for col in range(grid.width):
            cell = grid.cell_at(col, row)
            if cell.is_wall:
                line.append(FRAME_WALL)
            elif cell.target_color is not None:
                line.append(TARGET_FRAMES[cell.target_color])
            else:
                line.append(FRAME_FLOOR)
        out.append(line)
    return out


def player_frame(facing: Optional[Direction]) -> int:
    return IDLE_FRAMES[facing or Direction.DOWN]


def outcome_to_animations(outcome: MoveOutcome) -> List[Dict[str, Any]]:
    """Tween commands for a move outcome; a rejected move animates nothing."""
    if isinstance(outcome, Rejected):
        return []
    dc, dr = outcome.direction.delta
    commands: List[Dict[str, Any]] = []
    if isinstance(outcome, PlayerAndBoxMoved):
        commands.append({
            "sprite": "box",
            "id": outcome.box_id,
            "dx": dc * TILE_SIZE,
            "dy": dr * TILE_SIZE,
            "duration": TWEEN_MS,
        })
    d = outcome.direction.value
    commands.append({
        "sprite": "player",
        "dx": dc * TILE_SIZE,
        "dy": dr * TILE_SIZE,
        "duration": TWEEN_MS,
        "clip": d,
        "frames": list(WALK_FRAMES[outcome.direction]),
        "idleClip": f"idle-{d}",
        "idleFrame": IDLE_FRAMES[outcome.direction],
    })
    return commands
