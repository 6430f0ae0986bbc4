from __future__ import annotations

import argparse
import logging
import os
from typing import Dict, List, Optional

from .board import Direction
from .engine import PuzzleEngine
from .levels import BUILTIN_LEVELS, LevelFormatError, builtin_level, load_level
from .moves import MoveOutcome, PlayerAndBoxMoved, PlayerMoved, Rejected

_WASD: Dict[str, str] = {"w": "up", "a": "left", "s": "down", "d": "right"}


def describe(outcome: MoveOutcome) -> str:
    if isinstance(outcome, Rejected):
        return f"{outcome.direction.value}: blocked ({outcome.reason.value})"
    if isinstance(outcome, PlayerAndBoxMoved):
        return (f"{outcome.direction.value}: pushed {outcome.box_color.value} box "
                f"{outcome.box_from} -> {outcome.box_to}")
    assert isinstance(outcome, PlayerMoved)
    return f"{outcome.direction.value}: {outcome.player_from} -> {outcome.player_to}"


def coverage_line(engine: PuzzleEngine) -> str:
    parts = [
        f"{color.value} {count}/{engine.coverage.target_total(color)}"
        for color, count in engine.coverage_snapshot().items()
    ]
    return "Coverage: " + (", ".join(parts) if parts else "no targets")


def _print_state(engine: PuzzleEngine) -> None:
    print(engine.pretty())
    print(coverage_line(engine))


def run_script(engine: PuzzleEngine, moves: str) -> bool:
    """Plays a string of u/d/l/r letters. Returns whether the puzzle ended solved."""
    for ch in moves:
        if ch.isspace() or ch == ",":
            continue
        outcome = engine.request_move(Direction.parse(ch))
        print(describe(outcome))
    _print_state(engine)
    return engine.is_solved()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Colored-box Sokoban in the terminal')
    parser.add_argument('--level', default=os.getenv('SOKOBAN_LEVEL', 'original'),
                        help=f"Builtin level name ({', '.join(sorted(BUILTIN_LEVELS))})")
    parser.add_argument('--file', default=None, help='Load the level from a text file instead')
    parser.add_argument('--moves', default=None,
                        help='Play a scripted string of u/d/l/r letters such as "LLUR" and exit. '
                             'Here d is down; w/a/s/d apply only to interactive play.')
    parser.add_argument('--log-level', default=os.getenv('SOKOBAN_LOG_LEVEL', 'WARNING'),
                        help='Logging level name')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        level = load_level(args.file) if args.file else builtin_level(args.level)
    except (OSError, LevelFormatError) as e:
        print(f"error: {e}")
        return 2
    engine = PuzzleEngine.from_level(level)

    if args.moves is not None:
        try:
            solved = run_script(engine, args.moves)
        except ValueError as e:
            print(f"error: {e} (script letters are u/d/l/r)")
            return 2
        print('Solved!' if solved else 'Not solved.')
        return 0

    print(f"Level: {level.name}")
    _print_state(engine)
    print("Move with w/a/s/d or up/down/left/right; q quits.")
    while True:
        try:
            text = input('> ').strip().lower()
        except EOFError:
            return 0
        if text in ('q', 'quit'):
            return 0
        if not text:
            continue
        try:
            direction = Direction.parse(_WASD.get(text, text))
        except ValueError:
            print('Could not parse. Try again.')
            continue
        print(describe(engine.request_move(direction)))
        _print_state(engine)
        if engine.is_solved():
            print(f"Solved in {engine.moves_count} moves ({engine.pushes_count} pushes)!")
            return 0
