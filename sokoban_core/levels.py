from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .board import FLOOR, WALL, Cell, CellKind, Coord, Grid
from .colors import Color
from .state import Box, EntityState, Player

logger = logging.getLogger(__name__)


class LevelFormatError(ValueError):
    """Raised when level text cannot be resolved into a grid and placements."""


@dataclass(frozen=True)
class Level:
    """A grid plus the initial player and box placements, as read from a level description."""
    name: str
    grid: Grid
    player: Coord
    boxes: Tuple[Tuple[Color, Coord], ...]  # box ids are the indices

    def new_entities(self) -> EntityState:
        return EntityState(
            Player(self.player),
            [Box(id=i, color=color, position=pos) for i, (color, pos) in enumerate(self.boxes)],
        )


# Level text legend:
#   #  wall             .  floor            @  player
#   o r b g y  target (orange, red, blue, green, grey)
#   O R B G Y  box on plain floor
#   *  box on a target  +  player on a target
# After a blank line, placement lines put entities on any floor/target cell
# and give "*" and "+" cells their target and box:
#   player C,R
#   box <color> C,R
#   target <color> C,R
BUILTIN_LEVELS: Dict[str, str] = {
    "original": (
        "##########\n"
        "#........#\n"
        "#........#\n"
        "#...bB.@.#\n"
        "#........#\n"
        "#........#\n"
        "#........#\n"
        "##########\n"
    ),
    "spectrum": (
        "#########\n"
        "#.......#\n"
        "#.o.O...#\n"
        "#...@...#\n"
        "#.r.R.b.#\n"
        "#.......#\n"
        "#########\n"
        "\n"
        "; the blue box starts on its target\n"
        "box blue 6,4\n"
    ),
}


def _parse_coord(text: str, lineno: int) -> Coord:
    try:
        c_s, r_s = [t.strip() for t in text.split(",")]
        return int(c_s), int(r_s)
    except ValueError:
        raise LevelFormatError(f"line {lineno}: bad coordinate {text!r}, expected C,R") from None


def _split_sections(text: str) -> Tuple[List[Tuple[int, str]], List[Tuple[int, str]]]:
    layout: List[Tuple[int, str]] = []
    placements: List[Tuple[int, str]] = []
    in_layout = True
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip()
        if line.lstrip().startswith(";"):
            continue
        if not line:
            if layout:
                in_layout = False
            continue
        (layout if in_layout else placements).append((lineno, line))
    return layout, placements


def _place_target(rows: List[List[Cell]], pos: Coord, color: Color, lineno: int) -> None:
    col, row = pos
    if not (0 <= row < len(rows) and 0 <= col < len(rows[row])):
        raise LevelFormatError(f"line {lineno}: target at {pos} is outside the grid")
    cell = rows[row][col]
    if cell.is_wall:
        raise LevelFormatError(f"line {lineno}: target at {pos} is on a wall")
    if cell.target_color is not None:
        raise LevelFormatError(f"line {lineno}: cell {pos} already has a target")
    rows[row][col] = Cell(CellKind.FLOOR, color)


def parse_level(text: str, name: str = "level") -> Level:
    """Parses level text into a Level. Raises LevelFormatError when malformed."""
    layout, placements = _split_sections(text)
    if not layout:
        raise LevelFormatError("level has no layout rows")
    width = len(layout[0][1])
    rows: List[List[Cell]] = []
    players: List[Coord] = []
    boxes: List[Tuple[Color, Coord]] = []
    # cells drawn as "*" or "+" take their target (and box) from placement lines
    covered: Dict[Coord, str] = {}
    for row, (lineno, line) in enumerate(layout):
        if len(line) != width:
            raise LevelFormatError(f"line {lineno}: row has {len(line)} cells, expected {width}")
        cells: List[Cell] = []
        for col, ch in enumerate(line):
            if ch == "#":
                cells.append(WALL)
            elif ch == ".":
                cells.append(FLOOR)
            elif ch == "@":
                cells.append(FLOOR)
                players.append((col, row))
            elif ch == "+":
                cells.append(FLOOR)
                players.append((col, row))
                covered[(col, row)] = ch
            elif ch == "*":
                cells.append(FLOOR)
                covered[(col, row)] = ch
            elif ch.isalpha():
                try:
                    color = Color.from_code(ch)
                except ValueError:
                    raise LevelFormatError(f"line {lineno}: unknown cell code {ch!r}") from None
                if ch.islower():
                    cells.append(Cell(CellKind.FLOOR, color))
                else:
                    cells.append(FLOOR)
                    boxes.append((color, (col, row)))
            else:
                raise LevelFormatError(f"line {lineno}: unknown cell code {ch!r}")
        rows.append(cells)

    for lineno, line in placements:
        parts = line.split()
        if parts[0] == "player" and len(parts) == 2:
            players.append(_parse_coord(parts[1], lineno))
        elif parts[0] in ("box", "target") and len(parts) == 3:
            try:
                color = Color.parse(parts[1])
            except ValueError:
                raise LevelFormatError(f"line {lineno}: unknown color {parts[1]!r}") from None
            pos = _parse_coord(parts[2], lineno)
            if parts[0] == "box":
                boxes.append((color, pos))
            else:
                _place_target(rows, pos, color, lineno)
        else:
            raise LevelFormatError(f"line {lineno}: cannot read placement {line!r}")

    box_positions = {pos for _, pos in boxes}
    for (col, row), ch in sorted(covered.items()):
        if rows[row][col].target_color is None:
            raise LevelFormatError(f"{ch!r} at ({col},{row}) has no target placement")
        if ch == "*" and (col, row) not in box_positions:
            raise LevelFormatError(f"'*' at ({col},{row}) has no box placement")

    grid = Grid.from_rows(rows)
    if len(players) != 1:
        raise LevelFormatError(f"expected exactly one player, found {len(players)}")
    level = Level(name=name, grid=grid, player=players[0], boxes=tuple(boxes))
    validate_level(level)
    return level


def validate_level(level: Level) -> None:
    grid = level.grid
    seen: Dict[Coord, str] = {}
    entities = [("player", level.player)] + [(f"{c.value} box", p) for c, p in level.boxes]
    for label, pos in entities:
        if not grid.in_bounds(*pos):
            raise LevelFormatError(f"{label} at {pos} is outside the grid")
        if grid.is_wall(*pos):
            raise LevelFormatError(f"{label} at {pos} is on a wall")
        if pos in seen:
            raise LevelFormatError(f"{label} at {pos} overlaps the {seen[pos]}")
        seen[pos] = label

    edge = [(c, r) for (c, r) in grid.coords()
            if c in (0, grid.width - 1) or r in (0, grid.height - 1)]
    if not all(grid.is_wall(*pos) for pos in edge):
        logger.warning("Level %r: boundary is not fully walled", level.name)

    box_counts: Dict[Color, int] = {}
    for color, _ in level.boxes:
        box_counts[color] = box_counts.get(color, 0) + 1
    for color, n_targets in grid.target_counts().items():
        if box_counts.get(color, 0) < n_targets:
            logger.warning("Level %r: %d %s target(s) but only %d box(es); it cannot be solved",
                           level.name, n_targets, color.value, box_counts.get(color, 0))


def load_level(path: str, name: Optional[str] = None) -> Level:
    """Reads and parses a level file."""
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    level = parse_level(text, name or os.path.splitext(os.path.basename(path))[0])
    logger.info("Loaded level %r (%dx%d, %d boxes) from %s",
                level.name, level.grid.width, level.grid.height, len(level.boxes), path)
    return level


def builtin_level(name: str) -> Level:
    if name not in BUILTIN_LEVELS:
        raise LevelFormatError(
            f"unknown level {name!r}; choose from {', '.join(sorted(BUILTIN_LEVELS))}"
        )
    return parse_level(BUILTIN_LEVELS[name], name)
