from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

from .board import Direction, Grid
from .colors import Color
from .coverage import CoverageTracker, rescan_coverage
from .levels import Level
from .moves import MoveOutcome, PlayerAndBoxMoved, legal_directions, resolve
from .state import EntityState

logger = logging.getLogger(__name__)


class PuzzleEngine:
    """Owns one level's grid, entity state and coverage, and is the only mutator of them.

    Adapters call request_move() once per directional input edge and read
    is_solved() / coverage_snapshot() for feedback. When the adapter animates
    moves, construct with await_settle=True: every successful move then raises
    the moving flag and further requests are rejected with ALREADY_MOVING until
    the adapter calls settle().

    Example:
        >>> engine = PuzzleEngine.from_level(builtin_level("original"))
        >>> outcome = engine.request_move(Direction.LEFT)
        >>> outcome.player_to
        (6, 3)
    """

    def __init__(self, grid: Grid, entities: EntityState, await_settle: bool = False,
                 level: Optional[Level] = None) -> None:
        self.grid = grid
        self.entities = entities
        self.await_settle = await_settle
        self.level = level
        self._initial = entities.copy()
        self.coverage = CoverageTracker.from_entities(grid, entities)
        self._moving = False
        self.moves_count = 0
        self.pushes_count = 0
        self._was_solved = self.is_solved()

    @classmethod
    def from_level(cls, level: Level, await_settle: bool = False) -> "PuzzleEngine":
        return cls(level.grid, level.new_entities(), await_settle=await_settle, level=level)

    # ---- concurrency guard ----

    def is_move_in_progress(self) -> bool:
        return self._moving

    def mark_moving(self) -> None:
        self._moving = True

    def settle(self) -> None:
        """Called by the adapter once the previous move's animation is at rest."""
        self._moving = False

    # ---- mutation ----

    def request_move(self, direction: Union[Direction, str]) -> MoveOutcome:
        if not isinstance(direction, Direction):
            direction = Direction.parse(direction)
        outcome = resolve(self.grid, self.entities, direction, move_in_progress=self._moving)
        if not outcome.moved:
            return outcome
        self.moves_count += 1
        if isinstance(outcome, PlayerAndBoxMoved):
            self.pushes_count += 1
            self.coverage.on_box_moved(outcome.box_color, outcome.box_from, outcome.box_to)
        if self.await_settle:
            self._moving = True
        solved = self.is_solved()
        if solved and not self._was_solved:
            logger.info("Puzzle solved after %d moves (%d pushes)", self.moves_count, self.pushes_count)
        self._was_solved = solved
        return outcome

    def reset(self) -> None:
        """Puts every entity back at its initial placement."""
        self.entities = self._initial.copy()
        self.coverage = CoverageTracker.from_entities(self.grid, self.entities)
        self._moving = False
        self.moves_count = 0
        self.pushes_count = 0
        self._was_solved = self.is_solved()

    # ---- queries ----

    def is_solved(self) -> bool:
        """True when every target is covered by a box of its color."""
        return all(
            self.coverage.coverage_count(color) == total
            for color, total in self.grid.target_counts().items()
        )

    def coverage_count(self, color: Color) -> int:
        return self.coverage.coverage_count(color)

    def coverage_snapshot(self) -> Dict[Color, int]:
        return self.coverage.snapshot()

    def total_satisfied(self) -> int:
        return self.coverage.total_satisfied()

    def legal_directions(self) -> List[Direction]:
        if self._moving:
            return []
        return legal_directions(self.grid, self.entities)

    def verify(self) -> None:
        """Raises AssertionError if entity placement or coverage is inconsistent."""
        seen = {self.entities.player_position()}
        assert not self.grid.is_wall(*self.entities.player_position()), "player on a wall"
        for box in self.entities.boxes():
            assert not self.grid.is_wall(*box.position), f"box {box.id} on a wall"
            assert box.position not in seen, f"box {box.id} shares cell {box.position}"
            seen.add(box.position)
        rescanned = rescan_coverage(self.grid, self.entities.boxes())
        assert rescanned == self.coverage.snapshot(), (
            f"coverage drift: tracked {self.coverage.snapshot()} vs rescan {rescanned}"
        )

    def pretty(self) -> str:
        return self.grid.pretty(self.entities.player_position(),
                                self.entities.box_colors_by_position())
