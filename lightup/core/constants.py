"""Shared constants and enumerations for the Light-Up engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class CellType(str, Enum):
    """All supported cell types on the board."""

    BLANK = "BLANK"
    WALL = "WALL"
    NUMBER = "NUMBER"


class MoveKind(str, Enum):
    """Kinds of move an AI strategy can return."""

    PLACE_BULB = "PLACE_BULB"
    REMOVE_BULB = "REMOVE_BULB"
    PLACE_DOT = "PLACE_DOT"
    NONE = "NONE"


class Strategy(str, Enum):
    """Move-selection strategies understood by ``choose_move``."""

    GREEDY = "greedy"
    BACKTRACKING = "backtracking"
    DIVIDE_AND_CONQUER = "divide_and_conquer"


ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))

DEFAULT_ROWS = 7
DEFAULT_COLS = 7
MAX_NUMBER = 4

# Score returned for cells that cannot take a bulb; callers must skip them.
MIN_SCORE = -(2 ** 31)

# Rectangles at or above this area are split again by the D&C move strategy.
LEAF_AREA = 8


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols


@dataclass(frozen=True)
class ScoreWeights:
    """Weights of the combined DP score and the greedy score."""

    light_gain: int = 3
    future_block: int = 2
    unlit_bonus: int = 5
    number_deficit: int = 10
    number_excess: int = 15
    number_help: int = 10
    top10_centrality: int = 10
    top20_centrality: int = 5


DEFAULT_WEIGHTS = ScoreWeights()
