"""Dynamic-programming heuristic tables and the combined placement score."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from ..core.constants import DEFAULT_WEIGHTS, MIN_SCORE, ScoreWeights
from ..core.models import Cell
from .board import Board, LayoutKey
from .graph import VisibilityGraph, graph_for
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

Table = List[List[int]]


@dataclass(frozen=True)
class DPTables:
    light_gain: Table
    number_score: Table
    future_block: Table


class TableCache:
    """LRU memo of DP tables keyed by layout and bit-packed mark state."""

    def __init__(self, maxsize: int = 256) -> None:
        self.maxsize = maxsize
        self._entries: "OrderedDict[Tuple[LayoutKey, int], DPTables]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: Tuple[LayoutKey, int]) -> Optional[DPTables]:
        tables = self._entries.get(key)
        if tables is None:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return tables

    def put(self, key: Tuple[LayoutKey, int], tables: DPTables) -> None:
        self._entries[key] = tables
        self._entries.move_to_end(key)
        while len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


SHARED_TABLE_CACHE = TableCache()


def clear_table_cache() -> None:
    """Drop every memoized table; call when a board was mutated behind the scorer's back."""

    SHARED_TABLE_CACHE.clear()


# ----------------------------------------------------------------------
# Run helpers
# ----------------------------------------------------------------------
def iter_runs(board: Board) -> Iterator[List[Cell]]:
    """Maximal horizontal then vertical runs of non-wall cells."""

    for r in range(board.rows):
        run: List[Cell] = []
        for c in range(board.cols):
            cell = board.cell(r, c)
            if cell.is_wall:
                if run:
                    yield run
                run = []
            else:
                run.append(cell)
        if run:
            yield run
    for c in range(board.cols):
        run = []
        for r in range(board.rows):
            cell = board.cell(r, c)
            if cell.is_wall:
                if run:
                    yield run
                run = []
            else:
                run.append(cell)
        if run:
            yield run


def _zeros(board: Board) -> Table:
    return [[0] * board.cols for _ in range(board.rows)]


# ----------------------------------------------------------------------
# Table builders
# ----------------------------------------------------------------------
def build_light_gain(board: Board) -> Table:
    """Unlit cells a bulb at each position would newly light.

    Each cell receives the unlit count of its row run and of its column run;
    an unlit cell appears in both runs, so it is decremented once.
    """

    table = _zeros(board)
    for run in iter_runs(board):
        unlit = sum(1 for cell in run if not cell.lit)
        for cell in run:
            table[cell.row][cell.col] += unlit
    for cell in board.blank_cells():
        if not cell.lit:
            table[cell.row][cell.col] -= 1
    return table


def build_number_score(board: Board, weights: ScoreWeights = DEFAULT_WEIGHTS) -> Table:
    table = _zeros(board)
    for number in board.number_cells():
        deficit = board.number_deficit(number.row, number.col)
        if deficit == 0:
            continue
        weight = weights.number_deficit if deficit > 0 else weights.number_excess
        for empty in board.empty_neighbors(number.row, number.col):
            table[empty.row][empty.col] += deficit * weight
    return table


def build_future_block(board: Board) -> Table:
    """Other currently-placeable cells sharing the row run and column run."""

    table = _zeros(board)
    placeable = [[board.can_place_bulb(r, c) for c in range(board.cols)] for r in range(board.rows)]
    for run in iter_runs(board):
        count = sum(1 for cell in run if placeable[cell.row][cell.col])
        for cell in run:
            table[cell.row][cell.col] += count - (1 if placeable[cell.row][cell.col] else 0)
    return table


def build_tables(board: Board, cache: Optional[TableCache] = SHARED_TABLE_CACHE) -> DPTables:
    """Build the three tables, serving them from ``cache`` when the state was seen."""

    key = (board.layout_key, board.fingerprint())
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return cached
    tables = DPTables(
        light_gain=build_light_gain(board),
        number_score=build_number_score(board),
        future_block=build_future_block(board),
    )
    if cache is not None:
        cache.put(key, tables)
    return tables


class DPScorer:
    """Scores candidate bulb positions on a live board.

    Tables are looked up lazily per board state, so the scorer stays correct
    while the board is mutated between calls.
    """

    def __init__(
        self,
        board: Board,
        graph: Optional[VisibilityGraph] = None,
        weights: ScoreWeights = DEFAULT_WEIGHTS,
        cache: Optional[TableCache] = SHARED_TABLE_CACHE,
    ) -> None:
        self.board = board
        self.graph = graph if graph is not None else graph_for(board)
        self.weights = weights
        self.cache = cache

    def tables(self) -> DPTables:
        return build_tables(self.board, self.cache)

    def score(self, row: int, col: int, tables: Optional[DPTables] = None) -> int:
        """Combined score, or ``MIN_SCORE`` when no bulb can go there."""

        board = self.board
        if not board.can_place_bulb(row, col):
            return MIN_SCORE
        tables = tables or self.tables()
        weights = self.weights
        score = tables.light_gain[row][col] * weights.light_gain
        score += tables.number_score[row][col]
        score -= tables.future_block[row][col] * weights.future_block
        if not board.cell(row, col).lit:
            score += weights.unlit_bonus
        score += self.graph.centrality_bonus(row, col, weights)
        return score

