"""Light-Up (Akari) puzzle engine.

This package exposes the public API surface via:

- ``lightup.engine.generator``: random puzzle generation gated on solvability.
- ``lightup.engine.solver`` and ``lightup.engine.decompose``: complete solvers.
- ``lightup.engine.strategies.choose_move``: one AI move per call.
- ``lightup.engine.validator.validate``: rule checking with a reason string.

The engine is synchronous and in-process; presentation, input and undo
stacks belong to the caller.
"""

from .core.constants import MoveKind, Strategy
from .core.models import Move
from .engine.board import Board
from .engine.generator import GeneratorConfig, PuzzleGenerator, generate
from .engine.solver import is_solvable, solve_board
from .engine.strategies import choose_move, clear_move_cache
from .engine.validator import ValidationResult, validate


def solve(board: Board) -> bool:
    """Solve in place; the board is left untouched when no solution exists."""
    return solve_board(board)


def can_place_bulb(board: Board, row: int, col: int) -> bool:
    return board.can_place_bulb(row, col)


def is_violating(board: Board, row: int, col: int) -> bool:
    return board.is_violating_bulb(row, col)


__all__ = [
    "Board",
    "GeneratorConfig",
    "Move",
    "MoveKind",
    "PuzzleGenerator",
    "Strategy",
    "ValidationResult",
    "can_place_bulb",
    "choose_move",
    "clear_move_cache",
    "generate",
    "is_solvable",
    "is_violating",
    "solve",
    "validate",
]

__version__ = "0.1.0"
