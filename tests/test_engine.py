import random
import unittest

from game import (
    Color,
    Direction,
    PLAYER_ID,
    PlayerAndBoxMoved,
    PlayerMoved,
    PuzzleEngine,
    RejectReason,
    Rejected,
    builtin_level,
    new_game,
    parse_level,
)

SPECTRUM_SOLUTION = "rullrrddll"


def _engine(rows, placements="", await_settle=False):
    text = "\n".join(rows) + "\n"
    if placements:
        text += "\n" + placements + "\n"
    return PuzzleEngine.from_level(parse_level(text), await_settle=await_settle)


class TestPuzzleEngineScenarios(unittest.TestCase):
    def test_given_floor_ahead_when_request_move_then_player_moved(self):
        e = _engine(["##########", "#........#", "#........#", "#...@....#", "##########"])
        out = e.request_move(Direction.RIGHT)
        self.assertEqual(out, PlayerMoved(Direction.RIGHT, (4, 3), (5, 3)))
        self.assertEqual(e.moves_count, 1)
        self.assertEqual(e.pushes_count, 0)

    def test_given_box_pushed_onto_matching_target_when_request_move_then_coverage_up(self):
        e = _engine(["#########", "#.......#", "#.......#", "#..@Bb..#", "#########"])
        self.assertEqual(e.coverage_count(Color.BLUE), 0)
        self.assertFalse(e.is_solved())
        out = e.request_move(Direction.RIGHT)
        self.assertIsInstance(out, PlayerAndBoxMoved)
        self.assertEqual((out.box_from, out.box_to), ((4, 3), (5, 3)))
        self.assertEqual(e.coverage_count(Color.BLUE), 1)
        self.assertTrue(e.is_solved())
        self.assertEqual(e.pushes_count, 1)
        e.verify()

    def test_given_wall_beyond_box_when_request_move_then_rejected_box_blocked(self):
        e = _engine(["#########", "#.......#", "#.......#", "#..@B#b.#", "#########"])
        before = e.entities.snapshot()
        out = e.request_move(Direction.RIGHT)
        self.assertEqual(out, Rejected(Direction.RIGHT, RejectReason.BOX_BLOCKED))
        self.assertEqual(e.entities.snapshot(), before)
        self.assertEqual(e.moves_count, 0)

    def test_given_box_on_target_when_pushed_off_then_coverage_down_and_consistent(self):
        e = _engine(["#########", "#.......#", "#.......#", "#...@b..#", "#########"],
                    placements="box blue 5,3")
        self.assertEqual(e.coverage_count(Color.BLUE), 1)
        self.assertTrue(e.is_solved())
        e.request_move(Direction.RIGHT)
        self.assertEqual(e.coverage_count(Color.BLUE), 0)
        self.assertFalse(e.is_solved())
        e.verify()

    def test_given_move_in_flight_when_request_again_then_already_moving(self):
        e = _engine(["##########", "#........#", "#...@....#", "##########"], await_settle=True)
        first = e.request_move(Direction.RIGHT)
        self.assertTrue(first.moved)
        self.assertTrue(e.is_move_in_progress())
        before = e.entities.snapshot()
        second = e.request_move(Direction.RIGHT)
        self.assertEqual(second, Rejected(Direction.RIGHT, RejectReason.ALREADY_MOVING))
        self.assertEqual(e.entities.snapshot(), before)
        self.assertEqual(e.legal_directions(), [])
        e.settle()
        self.assertFalse(e.is_move_in_progress())
        self.assertTrue(e.request_move(Direction.RIGHT).moved)

    def test_given_rejected_move_when_await_settle_then_flag_stays_down(self):
        e = _engine(["####", "#@.#", "####"], await_settle=True)
        self.assertIsInstance(e.request_move(Direction.UP), Rejected)
        self.assertFalse(e.is_move_in_progress())

    def test_given_adapter_marks_moving_when_request_then_rejected(self):
        e = _engine(["####", "#@.#", "####"])
        e.mark_moving()
        self.assertEqual(e.request_move("right").reason, RejectReason.ALREADY_MOVING)
        e.settle()
        self.assertEqual(e.request_move("right").player_to, (2, 1))

    def test_given_all_targets_covered_when_queried_then_solved(self):
        e = PuzzleEngine.from_level(builtin_level("spectrum"))
        self.assertEqual(e.coverage_snapshot(), {Color.ORANGE: 0, Color.RED: 0, Color.BLUE: 1})
        for ch in SPECTRUM_SOLUTION:
            self.assertTrue(e.request_move(ch).moved, ch)
        self.assertTrue(e.is_solved())
        self.assertEqual(e.coverage_snapshot(), {Color.ORANGE: 1, Color.RED: 1, Color.BLUE: 1})
        self.assertEqual(e.total_satisfied(), 3)
        self.assertEqual((e.moves_count, e.pushes_count), (10, 4))
        e.verify()


class TestPuzzleEngineProperties(unittest.TestCase):
    def test_given_random_walk_when_moving_then_invariants_hold_each_step(self):
        rng = random.Random(7)
        for name in ("original", "spectrum"):
            e = new_game(name)
            for _ in range(400):
                positions = dict((b.id, b.position) for b in e.entities.boxes())
                before = e.entities.snapshot()
                covered = e.coverage_snapshot()
                out = e.request_move(rng.choice(list(Direction)))
                moved_boxes = [b.id for b in e.entities.boxes() if positions[b.id] != b.position]
                self.assertLessEqual(len(moved_boxes), 1)
                if isinstance(out, Rejected):
                    self.assertEqual(e.entities.snapshot(), before)
                    self.assertEqual(e.coverage_snapshot(), covered)
                elif isinstance(out, PlayerAndBoxMoved):
                    self.assertEqual(moved_boxes, [out.box_id])
                else:
                    self.assertEqual(moved_boxes, [])
                e.verify()

    def test_given_played_engine_when_reset_then_initial_placements_back(self):
        e = new_game("spectrum")
        start = e.entities.snapshot()
        for ch in "rull":
            e.request_move(ch)
        self.assertEqual(e.coverage_count(Color.ORANGE), 1)
        e.reset()
        self.assertEqual(e.entities.snapshot(), start)
        self.assertEqual(e.coverage_count(Color.ORANGE), 0)
        self.assertEqual(e.moves_count, 0)
        self.assertIsNone(e.entities.player.facing)

    def test_given_level_without_targets_when_queried_then_trivially_solved(self):
        e = _engine(["####", "#@.#", "####"])
        self.assertTrue(e.is_solved())
        self.assertEqual(e.coverage_snapshot(), {})

    def test_given_bad_direction_text_when_request_move_then_value_error(self):
        e = _engine(["####", "#@.#", "####"])
        with self.assertRaises(ValueError):
            e.request_move("sideways")

    def test_given_engine_when_pretty_then_entities_drawn(self):
        e = new_game("original")
        self.assertEqual(e.pretty().splitlines()[3], "#...bB.@.#")
        e.request_move(Direction.LEFT)
        e.request_move(Direction.LEFT)
        lines = e.pretty().splitlines()
        self.assertEqual(lines[3], "#...*@...#")
        self.assertEqual(lines[-2:], ["target blue 4,3", "box blue 4,3"])

    def test_given_played_engine_when_pretty_reparsed_then_same_level(self):
        e = new_game("spectrum")
        for ch in "rul":
            e.request_move(ch)
        # player onto the orange target; the blue box already covers its target
        e.entities.move_entity(PLAYER_ID, (2, 2))
        text = e.pretty()
        self.assertIn("+", text)
        self.assertIn("*", text)

        level = parse_level(text)
        self.assertEqual(level.grid.targets(), e.grid.targets())
        self.assertEqual(level.player, (2, 2))
        self.assertEqual(sorted(level.boxes, key=lambda b: b[1]),
                         sorted(((b.color, b.position) for b in e.entities.boxes()),
                                key=lambda b: b[1]))


if __name__ == '__main__':
    unittest.main()
