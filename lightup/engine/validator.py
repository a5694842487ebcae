"""Deterministic rule validation for Light-Up boards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from .board import Board
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

SOLVED_REASON = "Puzzle solved"


@dataclass
class ValidationResult:
    valid: bool
    reason: str

    def __bool__(self) -> bool:
        return self.valid


class BoardValidator:
    """Runs the three Light-Up rules over a board, reporting the first failure."""

    def __init__(self) -> None:
        self._checks: List[Callable[[Board], Optional[str]]] = [
            self._check_all_lit,
            self._check_bulbs_hidden,
            self._check_numbers,
        ]

    def validate(self, board: Board) -> ValidationResult:
        for check in self._checks:
            reason = check(board)
            if reason is not None:
                LOGGER.debug("Validation failed: %s", reason)
                return ValidationResult(valid=False, reason=reason)
        return ValidationResult(valid=True, reason=SOLVED_REASON)

    @staticmethod
    def _check_all_lit(board: Board) -> Optional[str]:
        for cell in board.blank_cells():
            if not cell.lit:
                return f"Unlit cell at ({cell.row},{cell.col})"
        return None

    @staticmethod
    def _check_bulbs_hidden(board: Board) -> Optional[str]:
        for cell in board.iter_cells():
            if not cell.bulb:
                continue
            for seen in board.visible_cells(cell.row, cell.col):
                if seen.bulb:
                    return f"Bulbs see each other at ({cell.row},{cell.col}) & ({seen.row},{seen.col})"
        return None

    @staticmethod
    def _check_numbers(board: Board) -> Optional[str]:
        for cell in board.number_cells():
            count = board.adjacent_bulbs(cell.row, cell.col)
            if count != cell.number:
                return f"Number mismatch at ({cell.row},{cell.col}): expected {cell.number}, found {count}"
        return None


_VALIDATOR = BoardValidator()


def validate(board: Board) -> ValidationResult:
    """Validate ``board`` against every Light-Up rule."""

    return _VALIDATOR.validate(board)
