import argparse
import random
import sys
sys.path.append('.')
import game  # type: ignore


def walk(level_name: str, steps: int, rng: random.Random) -> int:
    """Random walk on one level; returns the number of invariant failures seen."""
    engine = game.new_game(level_name)
    directions = list(game.Direction)
    failures = 0
    for i in range(steps):
        before = engine.entities.snapshot()
        covered = engine.coverage_snapshot()
        outcome = engine.request_move(rng.choice(directions))
        if isinstance(outcome, game.Rejected):
            if engine.entities.snapshot() != before or engine.coverage_snapshot() != covered:
                print(f"  step {i}: rejected {outcome.reason.value} but state changed")
                failures += 1
        try:
            engine.verify()
        except AssertionError as e:
            print(f"  step {i}: {e}")
            failures += 1
    print(f"level={level_name} steps={steps} moves={engine.moves_count} "
          f"pushes={engine.pushes_count} covered={engine.total_satisfied()} failures={failures}")
    return failures


def main():
    parser = argparse.ArgumentParser(description='Random-walk check: incremental coverage vs full rescan')
    parser.add_argument('--seed', type=int, default=0)
    parser.add_argument('--walks', type=int, default=10)
    parser.add_argument('--steps', type=int, default=500)
    args = parser.parse_args()

    rng = random.Random(args.seed)
    total = 0
    for name in sorted(game.BUILTIN_LEVELS):
        for _ in range(args.walks):
            total += walk(name, args.steps, rng)
    print(f"Checked {len(game.BUILTIN_LEVELS) * args.walks} walks, failures={total}")
    sys.exit(1 if total else 0)


if __name__ == '__main__':
    main()
