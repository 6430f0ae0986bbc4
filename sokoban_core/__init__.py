"""
Sokoban core Python package.

This package contains the puzzle rules as pure logic, independent of any
rendering or input layer, so that adapters (CLI, Flask app, tile sheet)
stay thin and the rules are testable on their own.
Modules:
- colors.py: Color, box_color_to_target_color
- board.py: Grid, Cell, Coord, Direction
- state.py: EntityState, Box, Player
- moves.py: movement resolution and MoveOutcome types
- coverage.py: CoverageTracker
- levels.py: Level text format
- engine.py: PuzzleEngine
"""
