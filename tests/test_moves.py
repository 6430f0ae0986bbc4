import unittest

from game import (
    Box,
    Color,
    Direction,
    EntityState,
    Player,
    PlayerAndBoxMoved,
    PlayerMoved,
    PLAYER_ID,
    RejectReason,
    Rejected,
    legal_directions,
    parse_level,
    plan_move,
    resolve,
)


def _mk(rows):
    level = parse_level("\n".join(rows) + "\n")
    return level.grid, level.new_entities()


def _row3(middle):
    # 9 wide, 5 tall, with the interesting row at index 3
    return [
        "#########",
        "#.......#",
        "#.......#",
        middle,
        "#########",
    ]


class TestResolve(unittest.TestCase):
    def test_given_open_floor_when_moving_right_then_player_moved(self):
        grid, ents = _mk(_row3("#...@...#"))
        out = resolve(grid, ents, Direction.RIGHT)
        self.assertEqual(out, PlayerMoved(Direction.RIGHT, (4, 3), (5, 3)))
        self.assertEqual(ents.player_position(), (5, 3))
        self.assertIs(ents.player.facing, Direction.RIGHT)

    def test_given_box_with_floor_beyond_when_pushing_then_both_move(self):
        grid, ents = _mk(_row3("#..@B...#"))
        out = resolve(grid, ents, Direction.RIGHT)
        self.assertIsInstance(out, PlayerAndBoxMoved)
        self.assertEqual((out.player_from, out.player_to), ((3, 3), (4, 3)))
        self.assertEqual((out.box_from, out.box_to), ((4, 3), (5, 3)))
        self.assertEqual(out.box_color, Color.BLUE)
        self.assertEqual(ents.player_position(), (4, 3))
        self.assertIsNone(ents.box_at((4, 3)))
        self.assertEqual(ents.box_at((5, 3)).id, out.box_id)

    def test_given_wall_beyond_box_when_pushing_then_box_blocked_and_unchanged(self):
        grid, ents = _mk(_row3("#..@B#..#"))
        before = ents.snapshot()
        out = resolve(grid, ents, Direction.RIGHT)
        self.assertEqual(out, Rejected(Direction.RIGHT, RejectReason.BOX_BLOCKED))
        self.assertEqual(ents.snapshot(), before)
        self.assertIsNone(ents.player.facing)

    def test_given_box_beyond_box_when_pushing_then_box_blocked(self):
        grid, ents = _mk(_row3("#..@BR..#"))
        before = ents.snapshot()
        out = resolve(grid, ents, Direction.RIGHT)
        self.assertIsInstance(out, Rejected)
        self.assertIs(out.reason, RejectReason.BOX_BLOCKED)
        self.assertEqual(ents.snapshot(), before)

    def test_given_wall_ahead_when_moving_then_wall_rejection(self):
        grid, ents = _mk(_row3("#@......#"))
        out = resolve(grid, ents, Direction.LEFT)
        self.assertEqual(out, Rejected(Direction.LEFT, RejectReason.WALL))
        self.assertEqual(ents.player_position(), (1, 3))

    def test_given_move_in_progress_when_resolving_then_already_moving(self):
        grid, ents = _mk(_row3("#...@...#"))
        out = resolve(grid, ents, Direction.RIGHT, move_in_progress=True)
        self.assertEqual(out, Rejected(Direction.RIGHT, RejectReason.ALREADY_MOVING))
        self.assertEqual(ents.player_position(), (4, 3))

    def test_given_grid_edge_when_moving_off_then_same_as_wall(self):
        with self.assertLogs("sokoban_core", level="WARNING"):
            grid, ents = _mk(["@.."])
        with self.assertLogs("sokoban_core.moves", level="WARNING"):
            out = resolve(grid, ents, Direction.LEFT)
        self.assertEqual(out, Rejected(Direction.LEFT, RejectReason.WALL))
        with self.assertLogs("sokoban_core.moves", level="WARNING"):
            self.assertEqual(resolve(grid, ents, Direction.UP).reason, RejectReason.WALL)

    def test_given_box_at_grid_edge_when_pushing_off_then_box_blocked(self):
        with self.assertLogs("sokoban_core", level="WARNING"):
            grid, ents = _mk([".@B"])
        with self.assertLogs("sokoban_core.moves", level="WARNING"):
            out = resolve(grid, ents, Direction.RIGHT)
        self.assertEqual(out, Rejected(Direction.RIGHT, RejectReason.BOX_BLOCKED))
        self.assertEqual(ents.box_at((2, 0)).color, Color.BLUE)

    def test_given_vertical_push_when_moving_up_then_box_moves_up(self):
        grid, ents = _mk([
            "#####",
            "#...#",
            "#.G.#",
            "#.@.#",
            "#####",
        ])
        out = resolve(grid, ents, Direction.UP)
        self.assertIsInstance(out, PlayerAndBoxMoved)
        self.assertEqual(out.box_to, (2, 1))
        self.assertEqual(ents.player_position(), (2, 2))


class TestPlanAndLegal(unittest.TestCase):
    def test_given_push_when_planning_then_nothing_mutates(self):
        grid, ents = _mk(_row3("#..@B...#"))
        before = ents.snapshot()
        out = plan_move(grid, ents, Direction.RIGHT)
        self.assertIsInstance(out, PlayerAndBoxMoved)
        self.assertEqual(ents.snapshot(), before)

    def test_given_corner_with_box_when_listing_legal_then_blocked_sides_excluded(self):
        grid, ents = _mk([
            "#####",
            "#@B##",
            "#...#",
            "#####",
        ])
        self.assertEqual(legal_directions(grid, ents), [Direction.DOWN])

    def test_given_entity_state_when_move_entity_then_unconditional(self):
        grid, ents = _mk(_row3("#..@B...#"))
        box = ents.box_at((4, 3))
        # no legality checks: even a wall cell is accepted
        ents.move_entity(box.id, (0, 0))
        self.assertEqual(ents.box(box.id).position, (0, 0))
        ents.move_entity(PLAYER_ID, (4, 3))
        self.assertEqual(ents.player_position(), (4, 3))
        with self.assertRaises(KeyError):
            ents.move_entity(99, (1, 1))

    def test_given_overlapping_or_duplicate_boxes_when_building_state_then_rejected(self):
        with self.assertRaises(ValueError):
            EntityState(Player((1, 1)), [Box(0, Color.RED, (1, 1))])
        with self.assertRaises(ValueError):
            EntityState(Player((1, 1)), [Box(0, Color.RED, (2, 1)), Box(1, Color.RED, (2, 1))])
        with self.assertRaises(ValueError):
            EntityState(Player((1, 1)), [Box(0, Color.RED, (2, 1)), Box(0, Color.RED, (3, 1))])


if __name__ == '__main__':
    unittest.main()
