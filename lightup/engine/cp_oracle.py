"""CP-SAT reference solver using OR-Tools.

Independent of the search solvers, so it doubles as an oracle for them.
Existing marks on the board are ignored.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ortools.sat.python import cp_model

from ..core.models import Position
from .board import Board
from .scoring import iter_runs
from .solver import Solution
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


def solve_with_cp_sat(board: Board, timeout: float = 10.0) -> Optional[Solution]:
    """Return a bulb set solving the layout, or None if CP-SAT finds none.

    Args:
        board: Board whose walls and numbers define the puzzle.
        timeout: Solver time limit in seconds.
    """
    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: One boolean per blank cell
    # ------------------------------------------------------------------
    bulb_vars: Dict[Position, cp_model.IntVar] = {}
    for cell in board.blank_cells():
        bulb_vars[cell.position] = model.new_bool_var(f"B_{cell.row}_{cell.col}")

    if not bulb_vars:
        if any(number.number for number in board.number_cells()):
            return None
        return frozenset()

    # ------------------------------------------------------------------
    # Step 2: Bulbs never see each other
    # ------------------------------------------------------------------
    # Two bulbs see each other exactly when they share a row or column run.
    for run in iter_runs(board):
        if len(run) > 1:
            model.add_at_most_one([bulb_vars[cell.position] for cell in run])

    # ------------------------------------------------------------------
    # Step 3: Every blank is lit
    # ------------------------------------------------------------------
    for cell in board.blank_cells():
        sources = [bulb_vars[src.position] for src in board.light_sources(cell.row, cell.col)]
        model.add_bool_or(sources)

    # ------------------------------------------------------------------
    # Step 4: Numbers are exact
    # ------------------------------------------------------------------
    for number in board.number_cells():
        around: List[cp_model.IntVar] = [
            bulb_vars[n.position] for n in board.neighbors(number.row, number.col) if n.is_blank
        ]
        target = number.number or 0
        if len(around) < target:
            LOGGER.debug("CP-SAT: number at (%d,%d) cannot be satisfied", number.row, number.col)
            return None
        if around:
            model.add(sum(around) == target)

    # ------------------------------------------------------------------
    # Step 5: Solve
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = 4

    LOGGER.debug("CP-SAT: %d bulb vars, solving (timeout=%0.1fs)...", len(bulb_vars), timeout)

    status = solver.solve(model)

    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.debug("CP-SAT: no solution found (status=%s)", solver.status_name(status))
        return None

    LOGGER.debug("CP-SAT: solution found in %.2fs", solver.wall_time)
    return frozenset(pos for pos, var in bulb_vars.items() if solver.value(var))
