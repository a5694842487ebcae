"""Divide-and-conquer solver.

DIVIDE: walls split the blank cells into connected components; a bulb in one
component can never light a cell of another.

CONQUER: each component is searched on its own, with its cells ordered by
descending DP score so high-impact placements are tried first.

COMBINE: components never share blank cells, but a number on a component
boundary counts bulbs from both sides, so the merged board is validated as a
whole. When decomposition cannot produce a valid board the full
backtracking solver takes over, so correctness never depends on it.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from ..core.constants import ORTHOGONAL_STEPS
from ..core.models import Cell, Position, Region
from .board import Board
from .propagation import propagate
from .scoring import DPScorer
from .solver import Solution, solve_board
from .validator import validate
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


def find_regions(board: Board, bounds: Optional[Region] = None) -> List[List[Cell]]:
    """Flood-fill the non-wall cells into 4-connected components, in row-major discovery order.

    With ``bounds`` only cells inside the rectangle are considered.
    """

    visited: Set[Position] = set()
    regions: List[List[Cell]] = []
    for start in board.iter_cells():
        if start.is_wall or start.position in visited:
            continue
        if bounds is not None and not bounds.contains(start.row, start.col):
            continue
        region: List[Cell] = []
        queue = deque([start])
        visited.add(start.position)
        while queue:
            current = queue.popleft()
            region.append(current)
            for dr, dc in ORTHOGONAL_STEPS:
                nr, nc = current.row + dr, current.col + dc
                if not board.in_bounds(nr, nc) or (nr, nc) in visited:
                    continue
                if bounds is not None and not bounds.contains(nr, nc):
                    continue
                neighbor = board.cell(nr, nc)
                if neighbor.is_wall:
                    continue
                visited.add((nr, nc))
                queue.append(neighbor)
        regions.append(region)
    return regions


class RegionSearch:
    """Bulb-or-skip search over one component's cells in DP order."""

    def __init__(self, board: Board, blanks: List[Cell], settled: Set[Position]) -> None:
        self.board = board
        self.blanks = blanks
        self.index_of: Dict[Position, int] = {cell.position: i for i, cell in enumerate(blanks)}
        self.memo: Set[Tuple[int, int]] = set()
        self.solution: Optional[FrozenSet[Position]] = None
        self.nodes = 0
        members = settled | set(self.index_of)
        self.owned_numbers: List[Cell] = []
        self.shared_numbers: List[Cell] = []
        seen: Set[Position] = set()
        for cell in blanks:
            for neighbor in board.neighbors(cell.row, cell.col):
                if not neighbor.is_number or neighbor.position in seen:
                    continue
                seen.add(neighbor.position)
                blanks_around = [n.position for n in board.neighbors(neighbor.row, neighbor.col) if n.is_blank]
                if all(pos in members for pos in blanks_around):
                    self.owned_numbers.append(neighbor)
                else:
                    self.shared_numbers.append(neighbor)

    def run(self) -> bool:
        return self._search(0, 0)

    def _search(self, idx: int, assignment: int) -> bool:
        board = self.board
        self.nodes += 1
        if self._over_satisfied():
            return False
        if idx == len(self.blanks):
            if not self._satisfied():
                return False
            self.solution = frozenset(cell.position for cell in self.blanks if cell.bulb)
            return True

        key = (assignment, idx)
        if key in self.memo:
            return False
        self.memo.add(key)
        if self._dead(idx):
            return False

        cell = self.blanks[idx]
        if board.can_place_bulb(cell.row, cell.col):
            with board.trial_bulb(cell.row, cell.col):
                if self._search(idx + 1, assignment | (1 << idx)):
                    return True
        return self._search(idx + 1, assignment)

    def _undecided_placeable(self, cell: Cell, idx: int) -> bool:
        return self.index_of.get(cell.position, -1) >= idx and self.board.can_place_bulb(cell.row, cell.col)

    def _dead(self, idx: int) -> bool:
        """Some unlit cell, or some owned number, can no longer be satisfied."""

        board = self.board
        for cell in self.blanks:
            if cell.lit:
                continue
            if not any(self._undecided_placeable(src, idx) for src in board.light_sources(cell.row, cell.col)):
                return True
        for number in self.owned_numbers:
            deficit = board.number_deficit(number.row, number.col)
            if deficit <= 0:
                continue
            available = sum(1 for n in board.neighbors(number.row, number.col) if self._undecided_placeable(n, idx))
            if available < deficit:
                return True
        return False

    def _over_satisfied(self) -> bool:
        return any(
            self.board.number_deficit(n.row, n.col) < 0 for n in self.owned_numbers + self.shared_numbers
        )

    def _satisfied(self) -> bool:
        board = self.board
        if any(not cell.lit for cell in self.blanks):
            return False
        return all(board.number_deficit(n.row, n.col) == 0 for n in self.owned_numbers)


def order_by_score(scorer: DPScorer, cells: List[Cell]) -> List[Cell]:
    """Cells sorted by descending DP score; unplaceable cells sink to the end."""

    tables = scorer.tables()
    return sorted(cells, key=lambda cell: scorer.score(cell.row, cell.col, tables), reverse=True)


def solve_regions(board: Board) -> Optional[Solution]:
    """Solve every component independently and validate the merged board.

    Returns None when a component has no solution or the combined board is
    invalid. Never mutates ``board``.
    """

    work = board.copy()
    work.clear_marks()
    # Deductions are sound, so the components start from the forced bulbs and dots.
    propagate(work)
    if work.has_conflict():
        LOGGER.debug("Propagation produced a conflict before decomposition")
        return None
    scorer = DPScorer(work)
    regions = find_regions(work)
    settled: Set[Position] = set()

    for index, region in enumerate(regions):
        blanks = order_by_score(scorer, [cell for cell in region if cell.is_blank])
        search = RegionSearch(work, blanks, settled)
        if not search.run() or search.solution is None:
            LOGGER.debug("Region %d (%d cells) has no local solution", index, len(blanks))
            return None
        LOGGER.debug("Region %d solved after %d nodes", index, search.nodes)
        for row, col in search.solution:
            work.place_bulb(row, col)
        settled.update(cell.position for cell in blanks)

    result = validate(work)
    if not result.valid:
        LOGGER.debug("Combined regions failed validation: %s", result.reason)
        return None
    return work.bulb_positions()


def solve_divide_and_conquer(board: Board) -> bool:
    """Solve in place via decomposition, falling back to full backtracking."""

    solution = solve_regions(board)
    if solution is None:
        LOGGER.warning("Decomposition failed; falling back to full backtracking")
        return solve_board(board)
    board.apply_bulbs(solution)
    return True
