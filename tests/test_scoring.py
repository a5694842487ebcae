import unittest

from lightup.core.constants import MIN_SCORE
from lightup.engine.board import Board
from lightup.engine.scoring import (SHARED_TABLE_CACHE, DPScorer, TableCache, build_future_block,
                                    build_light_gain, build_number_score, build_tables, clear_table_cache)


class TableTests(unittest.TestCase):
    def test_light_gain_counts_each_unlit_cell_once(self) -> None:
        board = Board.from_rows(["..."])
        self.assertEqual(build_light_gain(board), [[3, 3, 3]])

    def test_light_gain_ignores_lit_cells(self) -> None:
        board = Board.from_rows(["*..", "..#"])
        table = build_light_gain(board)
        # Row 1 run has (1,0) lit by the bulb and (1,1) unlit.
        self.assertEqual(table[1][1], 1)
        self.assertEqual(table[1][0], 1)

    def test_future_block_counts_other_placeable_cells(self) -> None:
        board = Board.from_rows(["..."])
        self.assertEqual(build_future_block(board), [[2, 2, 2]])

    def test_number_score_weights_deficit_and_excess(self) -> None:
        board = Board.from_rows(["2.", ".."])
        table = build_number_score(board)
        self.assertEqual(table[0][1], 20)
        self.assertEqual(table[1][0], 20)
        self.assertEqual(table[1][1], 0)

        board = Board.from_rows(["*0."])
        self.assertEqual(build_number_score(board)[0][2], -15)


class TableCacheTests(unittest.TestCase):
    def test_hits_return_the_same_tables(self) -> None:
        cache = TableCache(maxsize=4)
        board = Board(2, 2)
        first = build_tables(board, cache)
        second = build_tables(board, cache)
        self.assertIs(first, second)
        self.assertEqual((cache.hits, cache.misses), (1, 1))

    def test_new_marks_miss_the_cache(self) -> None:
        cache = TableCache(maxsize=4)
        board = Board(2, 2)
        first = build_tables(board, cache)
        board.place_bulb(0, 0)
        self.assertIsNot(build_tables(board, cache), first)

    def test_lru_eviction(self) -> None:
        cache = TableCache(maxsize=1)
        board = Board(2, 2)
        build_tables(board, cache)
        board.place_bulb(0, 0)
        build_tables(board, cache)
        self.assertEqual(len(cache), 1)

    def test_clear_table_cache(self) -> None:
        build_tables(Board(3, 1))
        self.assertGreater(len(SHARED_TABLE_CACHE), 0)
        clear_table_cache()
        self.assertEqual(len(SHARED_TABLE_CACHE), 0)


class DPScorerTests(unittest.TestCase):
    def test_combined_score(self) -> None:
        board = Board.from_rows(["..."])
        scorer = DPScorer(board, cache=None)
        # 3*3 light gain - 2*2 future block + 5 unlit + 10 for a top-ten rank.
        self.assertEqual(scorer.score(0, 1), 20)

    def test_unplaceable_cells_score_min(self) -> None:
        board = Board.from_rows(["*.#", "..."])
        scorer = DPScorer(board, cache=None)
        self.assertEqual(scorer.score(0, 1), MIN_SCORE)
        self.assertEqual(scorer.score(0, 2), MIN_SCORE)
        self.assertGreater(scorer.score(1, 1), MIN_SCORE)

    def test_scorer_follows_live_board(self) -> None:
        board = Board.from_rows(["....", "...."])
        scorer = DPScorer(board, cache=None)
        before = scorer.score(1, 3)
        board.place_bulb(0, 0)
        self.assertLess(scorer.score(1, 3), before)


if __name__ == "__main__":
    unittest.main()
