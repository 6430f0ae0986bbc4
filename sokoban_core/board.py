from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .colors import Color

Coord = Tuple[int, int]  # (col, row)


class Direction(Enum):
    """The four move directions; rows grow downward."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> Coord:
        return _DELTAS[self]

    def step(self, coord: Coord) -> Coord:
        """Returns the cell immediately adjacent to coord in this direction."""
        dc, dr = _DELTAS[self]
        return coord[0] + dc, coord[1] + dr

    @classmethod
    def parse(cls, text: str) -> "Direction":
        """Parses "left" or "L" etc. Raises ValueError for anything else."""
        t = str(text).strip().lower()
        if t in _KEYS:
            return _KEYS[t]
        raise ValueError(f"unknown direction: {text!r}")


_DELTAS: Dict[Direction, Coord] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_KEYS: Dict[str, Direction] = {
    "up": Direction.UP, "u": Direction.UP,
    "down": Direction.DOWN, "d": Direction.DOWN,
    "left": Direction.LEFT, "l": Direction.LEFT,
    "right": Direction.RIGHT, "r": Direction.RIGHT,
}


class CellKind(Enum):
    FLOOR = "floor"
    WALL = "wall"


class OutOfBounds(IndexError):
    """Raised when a coordinate outside the grid is queried directly."""

    def __init__(self, col: int, row: int, width: int, height: int) -> None:
        super().__init__(f"({col},{row}) is outside the {width}x{height} grid")
        self.col = col
        self.row = row


@dataclass(frozen=True)
class Cell:
    """One grid position: a wall, or a floor that may also be a colored target."""
    kind: CellKind
    target_color: Optional[Color] = None

    def __post_init__(self) -> None:
        if self.kind is CellKind.WALL and self.target_color is not None:
            raise ValueError("a wall cell cannot be a target")

    @property
    def is_wall(self) -> bool:
        return self.kind is CellKind.WALL


WALL = Cell(CellKind.WALL)
FLOOR = Cell(CellKind.FLOOR)


@dataclass(frozen=True)
class Grid:
    """Represents the static level layout: dimensions and the row-major grid of cells."""
    width: int
    height: int
    cells: Tuple[Cell, ...]  # row-major, length == width * height

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("grid dimensions must be positive")
        if len(self.cells) != self.width * self.height:
            raise ValueError(
                f"expected {self.width * self.height} cells, got {len(self.cells)}"
            )

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[Cell]]) -> "Grid":
        materialized = [tuple(r) for r in rows]
        if not materialized:
            raise ValueError("grid needs at least one row")
        width = len(materialized[0])
        if any(len(r) != width for r in materialized):
            raise ValueError("grid rows must all have the same length")
        flat: List[Cell] = [cell for r in materialized for cell in r]
        return cls(width=width, height=len(materialized), cells=tuple(flat))

    def index(self, col: int, row: int) -> int:
        """Calculates the 1D index for a given column and row."""
        return row * self.width + col

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def cell_at(self, col: int, row: int) -> Cell:
        if not self.in_bounds(col, row):
            raise OutOfBounds(col, row, self.width, self.height)
        return self.cells[self.index(col, row)]

    def is_wall(self, col: int, row: int) -> bool:
        """True for wall cells and for anything outside the grid."""
        if not self.in_bounds(col, row):
            return True
        return self.cells[self.index(col, row)].is_wall

    def target_color_at(self, col: int, row: int) -> Optional[Color]:
        return self.cell_at(col, row).target_color

    def coords(self) -> Iterable[Coord]:
        """Iterates over all coordinates, row by row."""
        for row in range(self.height):
            for col in range(self.width):
                yield (col, row)

    @cached_property
    def _targets(self) -> Dict[Coord, Color]:
        out: Dict[Coord, Color] = {}
        for coord in self.coords():
            color = self.cells[self.index(*coord)].target_color
            if color is not None:
                out[coord] = color
        return out

    def targets(self) -> Dict[Coord, Color]:
        """Maps each target cell to its color."""
        return dict(self._targets)

    def target_counts(self) -> Dict[Color, int]:
        counts: Dict[Color, int] = {}
        for color in self._targets.values():
            counts[color] = counts.get(color, 0) + 1
        return counts

    def pretty(
        self,
        player: Optional[Coord] = None,
        boxes: Optional[Mapping[Coord, Color]] = None,
    ) -> str:
        """Generates a human-readable string of the grid in level-text notation.

        A box on a target is drawn as ``*`` and the player on a target as ``+``.
        Those cells are then spelled out in placement lines after a blank line,
        so the output parses back into the same level.
        """
        lines: List[str] = []
        covered: List[str] = []
        bmap = boxes or {}
        for row in range(self.height):
            out: List[str] = []
            for col in range(self.width):
                cell = self.cells[self.index(col, row)]
                target = cell.target_color
                if (col, row) in bmap:
                    if target is None:
                        out.append(bmap[(col, row)].code.upper())
                    else:
                        out.append("*")
                        covered.append(f"target {target.value} {col},{row}")
                        covered.append(f"box {bmap[(col, row)].value} {col},{row}")
                elif player == (col, row):
                    if target is None:
                        out.append("@")
                    else:
                        out.append("+")
                        covered.append(f"target {target.value} {col},{row}")
                elif cell.is_wall:
                    out.append("#")
                elif target is not None:
                    out.append(target.code)
                else:
                    out.append(".")
            lines.append("".join(out))
        if covered:
            lines.append("")
            lines.extend(covered)
        return "\n".join(lines)
