"""Random puzzle generation gated on solvability."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.constants import DEFAULT_COLS, DEFAULT_ROWS, MAX_NUMBER
from ..core.models import Position
from .board import Board
from .solver import is_solvable
from ..utils.pretty import format_board
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

# Hand-authored layout with a known solution; used when every attempt fails.
FALLBACK_LAYOUT: Tuple[str, ...] = (
    "...1...",
    ".0...#.",
    ".......",
    "1..0..#",
    ".......",
    ".#...0.",
    "...1...",
)


@dataclass
class GeneratorConfig:
    rows: int = DEFAULT_ROWS
    cols: int = DEFAULT_COLS
    seed: Optional[int] = None
    max_attempts: int = 50
    min_walls: int = 5
    max_walls: int = 8
    number_probability: float = 0.6


def fallback_board(rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS) -> Board:
    """The hand-authored 7x7 puzzle, or an all-blank board for other shapes."""

    if (rows, cols) == (len(FALLBACK_LAYOUT), len(FALLBACK_LAYOUT[0])):
        return Board.from_rows(FALLBACK_LAYOUT)
    return Board(rows, cols)


class PuzzleGenerator:
    """Scatters walls and numbers at random until the layout is solvable."""

    def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
        self.config = config or GeneratorConfig()
        self.rng = random.Random(self.config.seed)

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def generate(self) -> Board:
        config = self.config
        for attempt in range(1, config.max_attempts + 1):
            LOGGER.debug("Generation attempt %s/%s", attempt, config.max_attempts)
            board = self._random_layout()
            if is_solvable(board):
                LOGGER.info(
                    "Generated %dx%d puzzle on attempt %d with %d walls",
                    config.rows,
                    config.cols,
                    attempt,
                    sum(1 for cell in board.iter_cells() if cell.is_wall),
                )
                LOGGER.debug("Accepted layout:\n%s", format_board(board))
                return board
        LOGGER.warning("No solvable layout after %d attempts; using the fallback puzzle", config.max_attempts)
        return fallback_board(config.rows, config.cols)

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------
    def _wall_positions(self) -> List[Position]:
        config = self.config
        cells = config.rows * config.cols
        low = min(config.min_walls, config.max_walls)
        count = self.rng.randint(low, config.max_walls)
        # At least one blank must remain.
        count = min(count, max(0, cells - 1))
        picked = self.rng.sample(range(cells), count)
        return [divmod(index, config.cols) for index in picked]

    def _random_layout(self) -> Board:
        config = self.config
        board = Board(config.rows, config.cols)
        walls = self._wall_positions()
        for row, col in walls:
            board.set_wall(row, col)
        for row, col in walls:
            if self.rng.random() >= config.number_probability:
                continue
            blanks = sum(1 for cell in board.neighbors(row, col) if cell.is_blank)
            board.set_wall(row, col, number=self.rng.randint(0, min(blanks, MAX_NUMBER)))
        board.clear_marks()
        return board


def generate(rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS, seed: Optional[int] = None) -> Board:
    """Generate a solvable puzzle; never fails."""

    return PuzzleGenerator(GeneratorConfig(rows=rows, cols=cols, seed=seed)).generate()
