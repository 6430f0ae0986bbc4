from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Union

from .board import Coord, Direction, Grid
from .colors import Color
from .state import PLAYER_ID, EntityState

logger = logging.getLogger(__name__)


class RejectReason(Enum):
    ALREADY_MOVING = "already_moving"
    WALL = "wall"
    BOX_BLOCKED = "box_blocked"


@dataclass(frozen=True)
class Rejected:
    """The move had no effect; nothing was mutated."""
    direction: Direction
    reason: RejectReason

    kind = "rejected"
    moved = False


@dataclass(frozen=True)
class PlayerMoved:
    direction: Direction
    player_from: Coord
    player_to: Coord

    kind = "player_moved"
    moved = True


@dataclass(frozen=True)
class PlayerAndBoxMoved:
    """The player pushed exactly one box one cell ahead of it."""
    direction: Direction
    player_from: Coord
    player_to: Coord
    box_id: int
    box_color: Color
    box_from: Coord
    box_to: Coord

    kind = "player_and_box_moved"
    moved = True


MoveOutcome = Union[Rejected, PlayerMoved, PlayerAndBoxMoved]


def _blocked(grid: Grid, cell: Coord) -> bool:
    if not grid.in_bounds(*cell):
        logger.warning("Probe at %s is outside the %dx%d grid; level boundary is not walled",
                       cell, grid.width, grid.height)
        return True
    return grid.is_wall(*cell)


def plan_move(grid: Grid, entities: EntityState, direction: Direction,
              move_in_progress: bool = False) -> MoveOutcome:
    """Computes the outcome of a move without mutating anything."""
    if move_in_progress:
        return Rejected(direction, RejectReason.ALREADY_MOVING)
    here = entities.player_position()
    target = direction.step(here)
    if _blocked(grid, target):
        return Rejected(direction, RejectReason.WALL)
    box = entities.box_at(target)
    if box is None:
        return PlayerMoved(direction, here, target)
    # Only the single cell beyond the box is checked: one box per push.
    box_target = direction.step(target)
    if _blocked(grid, box_target) or entities.box_at(box_target) is not None:
        return Rejected(direction, RejectReason.BOX_BLOCKED)
    return PlayerAndBoxMoved(
        direction=direction,
        player_from=here,
        player_to=target,
        box_id=box.id,
        box_color=box.color,
        box_from=target,
        box_to=box_target,
    )


def apply_outcome(entities: EntityState, outcome: MoveOutcome) -> None:
    """Applies a planned outcome to the entity state. Rejections are a no-op."""
    if isinstance(outcome, Rejected):
        return
    if isinstance(outcome, PlayerAndBoxMoved):
        # Box first so the player never shares its cell.
        entities.move_entity(outcome.box_id, outcome.box_to)
    entities.move_entity(PLAYER_ID, outcome.player_to)
    entities.set_facing(outcome.direction)


def resolve(grid: Grid, entities: EntityState, direction: Direction,
            move_in_progress: bool = False) -> MoveOutcome:
    """Decides legality of a move and, when legal, performs it on entities."""
    outcome = plan_move(grid, entities, direction, move_in_progress)
    apply_outcome(entities, outcome)
    logger.debug("resolve %s -> %s", direction.value, outcome)
    return outcome


def legal_directions(grid: Grid, entities: EntityState) -> List[Direction]:
    """Lists the directions a move would currently succeed in."""
    return [d for d in Direction if plan_move(grid, entities, d).moved]
