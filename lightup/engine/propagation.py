"""Deterministic deduction rules applied to a fixpoint.

The rules only establish local consistency: they may settle parts of a
solution, but the search in ``solver`` is still required for a verdict.
Bulbs forced here are placed without a legality check, so a contradictory
layout shows up as a conflict the caller can detect with
``Board.has_conflict``.
"""

from __future__ import annotations

from typing import List

from .board import Board
from ..core.models import Cell
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

MAX_PASSES = 1000


def complete_number_cells(board: Board) -> bool:
    """Fill numbers whose deficit equals their empty neighbours; dot around satisfied ones."""

    changed = False
    for number in board.number_cells():
        deficit = board.number_deficit(number.row, number.col)
        empties = board.empty_neighbors(number.row, number.col)
        if deficit > 0 and len(empties) == deficit:
            for cell in empties:
                board.place_bulb(cell.row, cell.col)
            changed = True
        elif deficit == 0 and empties:
            for cell in empties:
                board.place_dot(cell.row, cell.col)
            changed = True
    return changed


def possible_sources(board: Board, cell: Cell) -> List[Cell]:
    """Cells that could still light ``cell`` with a legal bulb."""

    return [source for source in board.light_sources(cell.row, cell.col) if board.can_place_bulb(source.row, source.col)]


def force_single_light_sources(board: Board) -> bool:
    changed = False
    for cell in board.blank_cells():
        if cell.lit or cell.dot or cell.bulb:
            continue
        sources = possible_sources(board, cell)
        if len(sources) == 1:
            only = sources[0]
            board.place_bulb(only.row, only.col)
            changed = True
    return changed


def forbid_conflicting_placements(board: Board) -> bool:
    changed = False
    for cell in board.blank_cells():
        if not cell.is_empty():
            continue
        if not board.can_place_bulb(cell.row, cell.col):
            board.place_dot(cell.row, cell.col)
            changed = True
    return changed


def apply_deductions(board: Board) -> bool:
    """Run one pass of the three rules, relighting afterwards."""

    changed = complete_number_cells(board)
    changed |= force_single_light_sources(board)
    changed |= forbid_conflicting_placements(board)
    board.recompute_lighting()
    return changed


def propagate(board: Board) -> bool:
    """Apply the deduction rules until nothing changes; return whether anything did."""

    changed_any = False
    for passes in range(1, MAX_PASSES + 1):
        if not apply_deductions(board):
            LOGGER.debug("Propagation reached a fixpoint after %d passes", passes)
            return changed_any
        changed_any = True
        if board.has_over_satisfied_number():
            # Contradiction: further passes cannot make the board consistent.
            return changed_any
    return changed_any
