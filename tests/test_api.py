import unittest

import lightup
from lightup import Board, MoveKind, Strategy


class PublicApiTests(unittest.TestCase):
    def test_solve_and_validate(self) -> None:
        board = Board(1, 1)
        self.assertTrue(lightup.is_solvable(board))
        self.assertTrue(lightup.solve(board))
        self.assertEqual(len(board.bulb_positions()), 1)
        self.assertTrue(lightup.validate(board).valid)

    def test_failed_solve_is_a_no_op(self) -> None:
        board = Board.from_rows([".0."])
        self.assertFalse(lightup.solve(board))
        self.assertEqual(board.bulb_positions(), frozenset())

    def test_placement_queries(self) -> None:
        board = Board.from_rows(["*.."])
        self.assertFalse(lightup.can_place_bulb(board, 0, 2))
        self.assertFalse(lightup.is_violating(board, 0, 0))
        board.place_bulb(0, 2)
        self.assertTrue(lightup.is_violating(board, 0, 2))

    def test_generate_then_play_greedy(self) -> None:
        board = lightup.generate(5, 5, seed=11)
        move = lightup.choose_move(board, Strategy.GREEDY)
        self.assertIn(move.kind, (MoveKind.PLACE_BULB, MoveKind.PLACE_DOT))


if __name__ == "__main__":
    unittest.main()
