import random
import unittest

from lightup.core.constants import CellType
from lightup.core.exceptions import BoardFormatError, PlacementError
from lightup.engine.board import Board
from lightup.utils.pretty import format_board


def random_layout(rng: random.Random, rows: int, cols: int) -> Board:
    board = Board(rows, cols)
    for r in range(rows):
        for c in range(cols):
            roll = rng.random()
            if roll < 0.15:
                board.set_wall(r, c)
            elif roll < 0.25:
                board.set_wall(r, c, number=rng.randint(0, 2))
    return board


class BoardParsingTests(unittest.TestCase):
    def test_from_rows_reads_walls_numbers_and_marks(self) -> None:
        board = Board.from_rows(["*.#", "x2."])
        self.assertEqual((board.rows, board.cols), (2, 3))
        self.assertTrue(board.cell(0, 0).bulb)
        self.assertEqual(board.cell(0, 2).type, CellType.WALL)
        self.assertEqual(board.cell(1, 1).type, CellType.NUMBER)
        self.assertEqual(board.cell(1, 1).number, 2)
        self.assertTrue(board.cell(1, 0).dot)
        # The bulb lights its row up to the wall and its column.
        self.assertTrue(board.cell(0, 1).lit)
        self.assertTrue(board.cell(1, 0).lit)
        self.assertFalse(board.cell(1, 2).lit)

    def test_ragged_rows_are_rejected(self) -> None:
        with self.assertRaises(BoardFormatError):
            Board.from_rows(["...", ".."])

    def test_unknown_symbol_is_rejected(self) -> None:
        with self.assertRaises(BoardFormatError):
            Board.from_rows(["..?"])

    def test_non_positive_dimensions_are_rejected(self) -> None:
        with self.assertRaises(BoardFormatError):
            Board(0, 3)

    def test_format_board_parses_back(self) -> None:
        board = Board.from_rows(["*.#.", "x1..", "...0"])
        clone = Board.from_rows(format_board(board).splitlines())
        self.assertEqual(clone.layout_key, board.layout_key)
        self.assertEqual(clone.bulb_positions(), board.bulb_positions())
        self.assertEqual(clone.dot_positions(), board.dot_positions())

    def test_format_board_with_light_and_header(self) -> None:
        board = Board.from_rows(["*..", "..#"])
        self.assertEqual(format_board(board, show_light=True), "*++\n+.#")
        lines = format_board(board, header=True).splitlines()
        self.assertEqual(len(lines), 4)
        self.assertTrue(lines[2].startswith(" 0 |"))


class BoardMutationTests(unittest.TestCase):
    def test_place_bulb_clears_dot_and_lights_rays(self) -> None:
        board = Board.from_rows(["x..", "...", "..."])
        board.place_bulb(0, 0)
        cell = board.cell(0, 0)
        self.assertTrue(cell.bulb)
        self.assertFalse(cell.dot)
        self.assertTrue(board.cell(0, 2).lit)
        self.assertTrue(board.cell(2, 0).lit)
        self.assertFalse(board.cell(1, 1).lit)

    def test_place_dot_removes_bulb_and_relights(self) -> None:
        board = Board.from_rows(["*.."])
        board.place_dot(0, 0)
        self.assertFalse(board.cell(0, 0).bulb)
        self.assertTrue(board.cell(0, 0).dot)
        self.assertEqual(board.unlit_cells(), [board.cell(0, 0), board.cell(0, 1), board.cell(0, 2)])

    def test_marking_a_wall_raises(self) -> None:
        board = Board.from_rows([".#"])
        with self.assertRaises(PlacementError):
            board.place_bulb(0, 1)
        with self.assertRaises(PlacementError):
            board.place_dot(0, 1)

    def test_trial_bulb_is_retracted_on_error(self) -> None:
        board = Board.from_rows(["x.."])
        with self.assertRaises(RuntimeError):
            with board.trial_bulb(0, 0):
                self.assertTrue(board.cell(0, 2).lit)
                raise RuntimeError("boom")
        self.assertFalse(board.cell(0, 0).bulb)
        self.assertTrue(board.cell(0, 0).dot)
        self.assertFalse(board.cell(0, 2).lit)

    def test_trial_dots_only_removes_what_it_added(self) -> None:
        board = Board.from_rows(["x.."])
        with board.trial_dots([(0, 0), (0, 1)]):
            self.assertTrue(board.cell(0, 1).dot)
        self.assertTrue(board.cell(0, 0).dot)
        self.assertFalse(board.cell(0, 1).dot)

    def test_dot_replaces_bulb_and_relights(self) -> None:
        board = Board.from_rows(["*.."])
        board.place_dot(0, 0)
        self.assertEqual(board.bulb_positions(), frozenset())
        self.assertEqual(board.dot_positions(), frozenset({(0, 0)}))
        self.assertFalse(board.cell(0, 2).lit)

    def test_remove_dot(self) -> None:
        board = Board.from_rows(["x.*"])
        board.remove_dot(0, 0)
        self.assertEqual(board.dot_positions(), frozenset())
        # Removing a missing dot is a no-op; bulbs are untouched.
        board.remove_dot(0, 2)
        self.assertEqual(board.bulb_positions(), frozenset({(0, 2)}))
        self.assertTrue(board.cell(0, 0).lit)
        with self.assertRaises(PlacementError):
            Board.from_rows(["#."]).remove_dot(0, 0)

    def test_snapshot_restore(self) -> None:
        board = Board.from_rows(["*.x", "..."])
        snapshot = board.snapshot()
        board.clear_marks()
        self.assertEqual(board.bulb_positions(), frozenset())
        board.restore(snapshot)
        self.assertEqual(board.bulb_positions(), frozenset({(0, 0)}))
        self.assertEqual(board.dot_positions(), frozenset({(0, 2)}))
        self.assertTrue(board.cell(1, 0).lit)

    def test_copy_is_independent(self) -> None:
        board = Board(2, 2)
        clone = board.copy()
        clone.place_bulb(1, 1)
        self.assertFalse(board.cell(1, 1).bulb)
        self.assertEqual(clone.layout_key, board.layout_key)


class BoardQueryTests(unittest.TestCase):
    def test_recompute_lighting_is_idempotent(self) -> None:
        rng = random.Random(7)
        for _ in range(25):
            board = random_layout(rng, 5, 5)
            for cell in list(board.blank_cells()):
                if rng.random() < 0.3:
                    board.place_bulb(cell.row, cell.col)
            board.recompute_lighting()
            first = [cell.lit for cell in board.iter_cells()]
            board.recompute_lighting()
            second = [cell.lit for cell in board.iter_cells()]
            self.assertEqual(first, second)

    def test_legal_placement_never_violates(self) -> None:
        rng = random.Random(11)
        for _ in range(25):
            board = random_layout(rng, 5, 5)
            for _ in range(6):
                row, col = rng.randrange(5), rng.randrange(5)
                if board.can_place_bulb(row, col):
                    board.place_bulb(row, col)
                    self.assertFalse(board.is_violating_bulb(row, col))

    def test_can_place_bulb_respects_numbers_and_sight(self) -> None:
        board = Board.from_rows(["*..", "#1.", "..."])
        self.assertFalse(board.can_place_bulb(0, 2))  # sees (0,0)
        self.assertTrue(board.can_place_bulb(2, 1))
        board.place_bulb(2, 1)
        self.assertFalse(board.can_place_bulb(1, 2))  # would give the 1 two bulbs
        self.assertFalse(board.can_place_bulb(5, 5))

    def test_violating_bulb_and_conflict(self) -> None:
        board = Board.from_rows(["*.*"])
        self.assertTrue(board.is_violating_bulb(0, 0))
        self.assertTrue(board.has_conflict())
        self.assertFalse(board.is_violating_bulb(0, 1))

    def test_number_deficit_goes_negative_when_over_satisfied(self) -> None:
        board = Board.from_rows(["*1*"])
        self.assertEqual(board.number_deficit(0, 1), -1)
        self.assertTrue(board.has_over_satisfied_number())

    def test_light_sources_include_the_cell_itself(self) -> None:
        board = Board.from_rows(["..#."])
        positions = [cell.position for cell in board.light_sources(0, 0)]
        self.assertEqual(positions, [(0, 0), (0, 1)])

    def test_fingerprint_tracks_marks_and_layout_key_ignores_them(self) -> None:
        board = Board.from_rows(["...", ".#."])
        key = board.layout_key
        fingerprint = board.fingerprint()
        board.place_bulb(0, 0)
        self.assertNotEqual(board.fingerprint(), fingerprint)
        self.assertEqual(board.layout_key, key)
        board.set_wall(0, 2, number=1)
        self.assertNotEqual(board.layout_key, key)


if __name__ == "__main__":
    unittest.main()
