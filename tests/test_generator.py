import unittest

from lightup.engine.generator import FALLBACK_LAYOUT, GeneratorConfig, PuzzleGenerator, fallback_board, generate
from lightup.engine.solver import is_solvable


class GeneratorTests(unittest.TestCase):
    def test_generated_puzzles_are_solvable(self) -> None:
        for seed in range(4):
            with self.subTest(seed=seed):
                board = generate(7, 7, seed=seed)
                self.assertEqual((board.rows, board.cols), (7, 7))
                self.assertTrue(is_solvable(board))

    def test_same_seed_same_layout(self) -> None:
        self.assertEqual(generate(5, 5, seed=42).layout_key, generate(5, 5, seed=42).layout_key)

    def test_output_has_no_marks(self) -> None:
        board = generate(6, 6, seed=3)
        self.assertEqual(board.bulb_positions(), frozenset())
        self.assertEqual(board.dot_positions(), frozenset())
        self.assertFalse(any(cell.lit for cell in board.iter_cells()))

    def test_numbers_fit_their_blank_neighbours(self) -> None:
        generator = PuzzleGenerator(GeneratorConfig(rows=7, cols=7, seed=8))
        for _ in range(20):
            board = generator._random_layout()
            walls = sum(1 for cell in board.iter_cells() if cell.is_wall)
            self.assertGreaterEqual(walls, 5)
            self.assertLessEqual(walls, 8)
            for number in board.number_cells():
                blanks = sum(1 for cell in board.neighbors(number.row, number.col) if cell.is_blank)
                self.assertLessEqual(number.number, blanks)

    def test_tiny_board_keeps_a_blank(self) -> None:
        board = generate(2, 2, seed=1)
        self.assertGreaterEqual(sum(1 for _ in board.blank_cells()), 1)
        self.assertTrue(is_solvable(board))

    def test_exhaustion_returns_fallback(self) -> None:
        board = PuzzleGenerator(GeneratorConfig(max_attempts=0)).generate()
        self.assertEqual(board.layout_key, fallback_board().layout_key)
        self.assertEqual(board.rows, len(FALLBACK_LAYOUT))
        self.assertTrue(is_solvable(board))

    def test_fallback_for_other_shapes_is_blank(self) -> None:
        board = PuzzleGenerator(GeneratorConfig(rows=4, cols=5, max_attempts=0)).generate()
        self.assertEqual((board.rows, board.cols), (4, 5))
        self.assertFalse(any(cell.is_wall for cell in board.iter_cells()))
        self.assertTrue(is_solvable(board))


if __name__ == "__main__":
    unittest.main()
