"""Complete backtracking solver for Light-Up puzzles.

Search works on a private copy of the caller's board. Every blank cell moves
from unassigned to bulb or dot; bulbs are placed through
``Board.trial_bulb`` so each branch is retracted on every exit path.
"""

from __future__ import annotations

from typing import FrozenSet, List, Optional

from ..core.constants import DEFAULT_WEIGHTS, ScoreWeights
from ..core.models import Cell, Position
from .board import Board
from .propagation import apply_deductions, propagate
from .validator import validate
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

Solution = FrozenSet[Position]


# ----------------------------------------------------------------------
# Pruning
# ----------------------------------------------------------------------
def has_dead_cell(board: Board) -> bool:
    """An unlit cell that no legal bulb can reach any more."""

    for cell in board.blank_cells():
        if cell.lit:
            continue
        if not any(board.can_place_bulb(src.row, src.col) for src in board.light_sources(cell.row, cell.col)):
            return True
    return False


def has_starved_number(board: Board) -> bool:
    """A number needing more bulbs than it has placeable neighbours."""

    for number in board.number_cells():
        deficit = board.number_deficit(number.row, number.col)
        if deficit <= 0:
            continue
        placeable = sum(1 for cell in board.neighbors(number.row, number.col) if board.can_place_bulb(cell.row, cell.col))
        if placeable < deficit:
            return True
    return False


def is_pruned(board: Board) -> bool:
    return board.has_conflict() or has_dead_cell(board) or has_starved_number(board)


# ----------------------------------------------------------------------
# Search
# ----------------------------------------------------------------------
def select_target(board: Board) -> Optional[Cell]:
    """First unlit, undotted blank in row-major order; else the first unlit dotted one."""

    fallback: Optional[Cell] = None
    for cell in board.blank_cells():
        if cell.lit:
            continue
        if not cell.dot:
            return cell
        if fallback is None:
            fallback = cell
    return fallback


def candidates_for(board: Board, target: Cell) -> List[Cell]:
    """Legal bulb positions that would light ``target``."""

    return [cell for cell in board.light_sources(target.row, target.col) if board.can_place_bulb(cell.row, cell.col)]


class BacktrackingSearch:
    """Depth-first search over the cells able to light the next unlit target."""

    def __init__(self, board: Board) -> None:
        self.board = board
        self.nodes = 0
        self.solution: Optional[Solution] = None

    def run(self) -> bool:
        board = self.board
        if board.has_conflict():
            return False
        return self._search()

    def _search(self) -> bool:
        board = self.board
        self.nodes += 1
        target = select_target(board)
        if target is None:
            if not validate(board).valid:
                return False
            # Captured before the trial guards unwind and retract the bulbs.
            self.solution = board.bulb_positions()
            return True

        forbidden: List[Position] = []
        for candidate in candidates_for(board, target):
            # Earlier siblings failed, so they are forbidden here (assign-or-forbid).
            with board.trial_dots(forbidden):
                if not board.can_place_bulb(candidate.row, candidate.col):
                    forbidden.append(candidate.position)
                    continue
                with board.trial_bulb(candidate.row, candidate.col):
                    if not is_pruned(board) and self._search():
                        return True
            forbidden.append(candidate.position)

        # Leave the target dotted: every source is now forbidden, so only the
        # dead-cell check can decide this branch.
        with board.trial_dots(forbidden + ([] if target.dot else [target.position])):
            if is_pruned(board):
                return False
            return self._search()


def find_solution(board: Board, keep_marks: bool = False) -> Optional[Solution]:
    """Return the bulb set of a solution, or None. Never mutates ``board``.

    With ``keep_marks`` the search extends the bulbs and dots already on the
    board; otherwise it starts from an empty layout.
    """

    work = board.copy()
    if not keep_marks:
        work.clear_marks()
    else:
        work.recompute_lighting()
    propagate(work)
    if work.has_conflict():
        LOGGER.debug("Propagation produced a conflict; layout is unsolvable")
        return None

    search = BacktrackingSearch(work)
    if not search.run() or search.solution is None:
        LOGGER.debug("Backtracking exhausted after %d nodes", search.nodes)
        return None
    LOGGER.debug("Backtracking found a solution after %d nodes", search.nodes)
    return search.solution


def solve_board(board: Board) -> bool:
    """Solve in place. On failure the board is left untouched."""

    solution = find_solution(board)
    if solution is None:
        LOGGER.info("No solution for %dx%d board", board.rows, board.cols)
        return False
    board.apply_bulbs(solution)
    return True


def is_solvable(board: Board) -> bool:
    """Run the full search on a disposable copy; the caller's board is never mutated."""

    return find_solution(board) is not None


# ----------------------------------------------------------------------
# Greedy solver
# ----------------------------------------------------------------------
def ray_light_gain(board: Board, row: int, col: int) -> int:
    """Currently-unlit cells a bulb at (row, col) would light, itself included."""

    gain = 0 if board.cell(row, col).lit else 1
    return gain + sum(1 for cell in board.visible_cells(row, col) if not cell.lit)


def number_help(board: Board, row: int, col: int) -> int:
    """Sum of the deficits of unsatisfied numbers adjacent to (row, col)."""

    return sum(
        board.number_deficit(cell.row, cell.col)
        for cell in board.neighbors(row, col)
        if cell.is_number and board.number_deficit(cell.row, cell.col) > 0
    )


def greedy_score(board: Board, row: int, col: int, weights: ScoreWeights = DEFAULT_WEIGHTS) -> int:
    score = ray_light_gain(board, row, col) * weights.light_gain
    score += number_help(board, row, col) * weights.number_help
    if not board.cell(row, col).lit:
        score += weights.unlit_bonus
    return score


def solve_greedy(board: Board) -> bool:
    """Fast, incomplete solver: deductions first, then the best greedy bulb, repeated.

    Works on a copy and commits only a valid result.
    """

    work = board.copy()
    work.clear_marks()
    while True:
        if apply_deductions(work):
            continue
        best: Optional[Cell] = None
        best_score = 0
        for cell in work.blank_cells():
            if not work.can_place_bulb(cell.row, cell.col):
                continue
            score = greedy_score(work, cell.row, cell.col)
            if best is None or score > best_score:
                best, best_score = cell, score
        if best is None:
            break
        work.place_bulb(best.row, best.col)

    if not validate(work).valid:
        LOGGER.debug("Greedy solver stalled without a valid solution")
        return False
    board.apply_bulbs(work.bulb_positions())
    return True
