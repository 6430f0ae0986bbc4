from __future__ import annotations

# Facade module that re-exports the Sokoban core API.
# Adapters (app.py, tools) and tests import from here.
# Single-responsibility modules live under sokoban_core/*.

from sokoban_core.colors import Color, box_color_to_target_color
from sokoban_core.board import (
    Cell,
    CellKind,
    Coord,
    Direction,
    FLOOR,
    Grid,
    OutOfBounds,
    WALL,
)
from sokoban_core.state import PLAYER_ID, Box, EntityState, Player
from sokoban_core.moves import (
    MoveOutcome,
    PlayerAndBoxMoved,
    PlayerMoved,
    RejectReason,
    Rejected,
    apply_outcome,
    legal_directions,
    plan_move,
    resolve,
)
from sokoban_core.coverage import CoverageTracker, rescan_coverage
from sokoban_core.levels import (
    BUILTIN_LEVELS,
    Level,
    LevelFormatError,
    builtin_level,
    load_level,
    parse_level,
)
from sokoban_core.engine import PuzzleEngine


def new_game(level_name: str = "original", await_settle: bool = False) -> PuzzleEngine:
    """Builds an engine for one of the builtin levels."""
    return PuzzleEngine.from_level(builtin_level(level_name), await_settle=await_settle)


def main() -> None:
    # CLI driver delegated to sokoban_core.cli
    from sokoban_core.cli import main as _main
    raise SystemExit(_main())


if __name__ == '__main__':
    main()
