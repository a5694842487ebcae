"""AI move selection.

Every strategy returns a single ``Move`` for the live board and never mutates
it. All three share the same prelude: repair a rule violation first, then
take a forced placement next to a numbered wall.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from ..core.constants import LEAF_AREA, MIN_SCORE, ORTHOGONAL_STEPS, MoveKind, Strategy
from ..core.models import Cell, Move, Region
from .board import Board, LayoutKey
from .decompose import find_regions
from .scoring import DPScorer, DPTables, clear_table_cache
from .solver import Solution, find_solution, greedy_score
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

# (score, row, col, unlit cells in the area that produced it)
Candidate = Tuple[int, int, int, int]


# ----------------------------------------------------------------------
# Shared prelude
# ----------------------------------------------------------------------
def find_violating_bulb(board: Board) -> Optional[Cell]:
    for cell in board.iter_cells():
        if cell.bulb and board.is_violating_bulb(cell.row, cell.col):
            return cell
    return None


def find_forced_placement(board: Board) -> Optional[Cell]:
    """A number one bulb short with exactly one empty neighbour, which can take the bulb."""

    for number in board.number_cells():
        if board.number_deficit(number.row, number.col) != 1:
            continue
        empties = board.empty_neighbors(number.row, number.col)
        if len(empties) == 1 and board.can_place_bulb(empties[0].row, empties[0].col):
            return empties[0]
    return None


def prelude_move(board: Board) -> Optional[Move]:
    violating = find_violating_bulb(board)
    if violating is not None:
        return Move(MoveKind.REMOVE_BULB, violating.row, violating.col)
    forced = find_forced_placement(board)
    if forced is not None:
        return Move(MoveKind.PLACE_BULB, forced.row, forced.col)
    return None


def strategic_dot(board: Board) -> Optional[Cell]:
    """First empty cell that sees a placeable cell in more than one direction."""

    for cell in board.blank_cells():
        if not cell.is_empty():
            continue
        directions = sum(
            1
            for dr, dc in ORTHOGONAL_STEPS
            if any(board.can_place_bulb(seen.row, seen.col) for seen in board.ray(cell.row, cell.col, dr, dc))
        )
        if directions > 1:
            return cell
    return None


def _dot_or_nothing(board: Board) -> Move:
    dot = strategic_dot(board)
    if dot is not None:
        return Move(MoveKind.PLACE_DOT, dot.row, dot.col)
    return Move.none()


# ----------------------------------------------------------------------
# Greedy
# ----------------------------------------------------------------------
def greedy_move(board: Board) -> Move:
    prelude = prelude_move(board)
    if prelude is not None:
        return prelude

    best: Optional[Cell] = None
    best_score = MIN_SCORE
    for cell in board.blank_cells():
        if not board.can_place_bulb(cell.row, cell.col):
            continue
        score = greedy_score(board, cell.row, cell.col)
        if best is None or score > best_score:
            best, best_score = cell, score
    if best is not None:
        return Move(MoveKind.PLACE_BULB, best.row, best.col)
    return _dot_or_nothing(board)


# ----------------------------------------------------------------------
# Backtracking with a cached plan
# ----------------------------------------------------------------------
class MovePlanner:
    """Remembers a full solution across turns and plays it out bulb by bulb.

    The plan stays valid while every bulb on the board belongs to it; dots
    are not consulted. A bulb outside the plan, or a different layout,
    triggers a re-solve from the live board.
    """

    def __init__(self) -> None:
        self.plan: Optional[Solution] = None
        self.layout_key: Optional[LayoutKey] = None
        self.solves = 0

    def clear(self) -> None:
        self.plan = None
        self.layout_key = None

    def is_valid(self, board: Board) -> bool:
        if self.plan is None or self.layout_key != board.layout_key:
            return False
        return board.bulb_positions() <= self.plan

    def next_move(self, board: Board) -> Move:
        prelude = prelude_move(board)
        if prelude is not None:
            return prelude

        if not self.is_valid(board):
            self.solves += 1
            solution = find_solution(board, keep_marks=True)
            if solution is None:
                LOGGER.warning("No solution extends the current board; using the greedy move")
                self.clear()
                return greedy_move(board)
            self.plan = solution
            self.layout_key = board.layout_key
            LOGGER.debug("Cached a %d-bulb plan", len(solution))

        for row, col in sorted(self.plan):
            if not board.cell(row, col).bulb:
                return Move(MoveKind.PLACE_BULB, row, col)
        return Move.none()


_DEFAULT_PLANNER = MovePlanner()


def clear_move_cache() -> None:
    """Forget the cached plan; call on new game or restart."""

    _DEFAULT_PLANNER.clear()


def backtracking_move(board: Board, planner: Optional[MovePlanner] = None) -> Move:
    return (planner or _DEFAULT_PLANNER).next_move(board)


# ----------------------------------------------------------------------
# Divide & Conquer + DP
# ----------------------------------------------------------------------
def _count_unlit(board: Board, cells: List[Cell]) -> int:
    return sum(1 for cell in cells if cell.is_blank and not cell.lit)


def _better(candidate: Optional[Candidate], best: Optional[Candidate]) -> bool:
    if candidate is None:
        return False
    if best is None or candidate[0] > best[0]:
        return True
    # Equal scores: the more urgent area, with more unlit cells, wins.
    return candidate[0] == best[0] and candidate[3] > best[3]


def best_in_leaf(board: Board, region: Region, scorer: DPScorer, tables: DPTables) -> Optional[Candidate]:
    """Best scored cell of a leaf rectangle, comparing its wall-bounded pockets."""

    best: Optional[Candidate] = None
    for pocket in find_regions(board, bounds=region):
        pocket_best: Optional[Candidate] = None
        unlit = _count_unlit(board, pocket)
        for cell in pocket:
            score = scorer.score(cell.row, cell.col, tables)
            if score == MIN_SCORE:
                continue
            if pocket_best is None or score > pocket_best[0]:
                pocket_best = (score, cell.row, cell.col, unlit)
        if _better(pocket_best, best):
            best = pocket_best
    return best


def best_in_region(board: Board, region: Region, scorer: DPScorer, tables: DPTables) -> Optional[Candidate]:
    """Split on the longer axis until below ``LEAF_AREA``, then combine by score and urgency."""

    if region.area() < LEAF_AREA:
        return best_in_leaf(board, region, scorer, tables)

    first, second = region.split()
    left = best_in_region(board, first, scorer, tables)
    right = best_in_region(board, second, scorer, tables)
    if left is None or right is None:
        return left if right is None else right
    # Compare halves by their own urgency, not that of the winning pocket.
    left = left[:3] + (_count_unlit(board, [board.cell(r, c) for r, c in first.positions()]),)
    right = right[:3] + (_count_unlit(board, [board.cell(r, c) for r, c in second.positions()]),)
    return right if _better(right, left) else left


def divide_and_conquer_move(board: Board) -> Move:
    prelude = prelude_move(board)
    if prelude is not None:
        return prelude

    scorer = DPScorer(board)
    tables = scorer.tables()
    best = best_in_region(board, Region(0, 0, board.rows - 1, board.cols - 1), scorer, tables)
    if best is not None:
        return Move(MoveKind.PLACE_BULB, best[1], best[2])
    return _dot_or_nothing(board)


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------
def choose_move(board: Board, strategy: Union[Strategy, str] = Strategy.GREEDY) -> Move:
    """Pick one move for the live board with the given strategy."""

    strategy = Strategy(strategy)
    # Memoized tables live for one turn only.
    clear_table_cache()
    if strategy == Strategy.GREEDY:
        move = greedy_move(board)
    elif strategy == Strategy.BACKTRACKING:
        move = backtracking_move(board)
    else:
        move = divide_and_conquer_move(board)
    LOGGER.debug("%s chose %s at (%d,%d)", strategy.value, move.kind.value, move.row, move.col)
    return move
