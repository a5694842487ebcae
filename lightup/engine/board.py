"""Board representation, legality queries and lighting."""

from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.constants import DEFAULT_COLS, DEFAULT_ROWS, MAX_NUMBER, ORTHOGONAL_STEPS, Bounds, CellType
from ..core.exceptions import BoardFormatError, PlacementError
from ..core.models import Cell, Position
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

LayoutKey = Tuple[Tuple[int, int, int], ...]

_BULB_BIT = 4
_DOT_BIT = 2
_LIT_BIT = 1


@dataclass
class BoardSnapshot:
    """Bulb/dot bitmaps, as kept by callers that own undo/redo."""

    bulbs: FrozenSet[Position]
    dots: FrozenSet[Position]


class Board:
    """Rectangular Light-Up grid with placement helpers.

    ``lit`` flags are derived state: every bulb toggle recomputes them from
    scratch, so they are never patched incrementally.
    """

    def __init__(self, rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS) -> None:
        if rows <= 0 or cols <= 0:
            raise BoardFormatError(f"Board dimensions must be positive, got {rows}x{cols}")
        self.bounds = Bounds(rows=rows, cols=cols)
        self.cells: List[List[Cell]] = [
            [Cell(row=r, col=c) for c in range(cols)] for r in range(rows)
        ]
        self._layout_key: Optional[LayoutKey] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_rows(cls, lines: Iterable[str]) -> "Board":
        """Parse a text layout.

        ``.``/``+`` blank, ``#``/``X`` wall, ``0``-``4`` numbered wall,
        ``*``/``B`` bulb and ``x`` dot. Spaces and empty lines are ignored.
        """

        grid: List[str] = []
        for raw in lines:
            line = raw.replace(" ", "").rstrip("\n")
            if line:
                grid.append(line)
        if not grid:
            raise BoardFormatError("Empty board layout")
        width = len(grid[0])
        if any(len(line) != width for line in grid):
            raise BoardFormatError("Rows have different lengths; the board must be rectangular")

        board = cls(len(grid), width)
        bulbs: List[Position] = []
        for r, line in enumerate(grid):
            for c, ch in enumerate(line):
                if ch in ".+":
                    continue
                if ch in "#X":
                    board.set_wall(r, c)
                elif ch.isdigit() and int(ch) <= MAX_NUMBER:
                    board.set_wall(r, c, number=int(ch))
                elif ch in "*B":
                    bulbs.append((r, c))
                elif ch == "x":
                    board.cells[r][c].dot = True
                else:
                    raise BoardFormatError(f"Unknown symbol {ch!r} at ({r},{c})")
        for r, c in bulbs:
            board.cells[r][c].bulb = True
        board.recompute_lighting()
        return board

    def set_wall(self, row: int, col: int, number: Optional[int] = None) -> None:
        """Turn a cell into a plain wall, or a numbered wall when ``number`` is given."""

        cell = self.cells[row][col]
        cell.type = CellType.WALL if number is None else CellType.NUMBER
        cell.number = number
        cell.bulb = cell.dot = cell.lit = False
        self._layout_key = None

    # ------------------------------------------------------------------
    # Basic queries
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self.bounds.rows

    @property
    def cols(self) -> int:
        return self.bounds.cols

    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]

    def in_bounds(self, row: int, col: int) -> bool:
        return self.bounds.contains(row, col)

    def iter_cells(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def blank_cells(self) -> Iterator[Cell]:
        return (cell for cell in self.iter_cells() if cell.is_blank)

    def number_cells(self) -> Iterator[Cell]:
        return (cell for cell in self.iter_cells() if cell.is_number)

    def neighbors(self, row: int, col: int) -> Iterator[Cell]:
        for dr, dc in ORTHOGONAL_STEPS:
            nr, nc = row + dr, col + dc
            if self.bounds.contains(nr, nc):
                yield self.cells[nr][nc]

    def ray(self, row: int, col: int, dr: int, dc: int) -> Iterator[Cell]:
        """Cells seen from (row, col) in one direction, stopping before a wall."""

        r, c = row + dr, col + dc
        while self.bounds.contains(r, c):
            cell = self.cells[r][c]
            if cell.is_wall:
                return
            yield cell
            r += dr
            c += dc

    def visible_cells(self, row: int, col: int) -> Iterator[Cell]:
        for dr, dc in ORTHOGONAL_STEPS:
            yield from self.ray(row, col, dr, dc)

    def light_sources(self, row: int, col: int) -> List[Cell]:
        """Cells whose bulb would light (row, col): the cell itself plus its rays."""

        sources = [self.cells[row][col]]
        sources.extend(self.visible_cells(row, col))
        return sources

    def adjacent_bulbs(self, row: int, col: int) -> int:
        return sum(1 for cell in self.neighbors(row, col) if cell.bulb)

    def number_deficit(self, row: int, col: int) -> int:
        """Target minus adjacent bulbs; negative when over-satisfied."""

        cell = self.cells[row][col]
        if not cell.is_number:
            return 0
        return (cell.number or 0) - self.adjacent_bulbs(row, col)

    def empty_neighbors(self, row: int, col: int) -> List[Cell]:
        return [cell for cell in self.neighbors(row, col) if cell.is_empty()]

    def unlit_cells(self) -> List[Cell]:
        return [cell for cell in self.blank_cells() if not cell.lit]

    def bulb_positions(self) -> FrozenSet[Position]:
        return frozenset(cell.position for cell in self.iter_cells() if cell.bulb)

    def dot_positions(self) -> FrozenSet[Position]:
        return frozenset(cell.position for cell in self.iter_cells() if cell.dot)

    # ------------------------------------------------------------------
    # Legality
    # ------------------------------------------------------------------
    def sees_bulb(self, row: int, col: int) -> bool:
        return any(cell.bulb for cell in self.visible_cells(row, col))

    def can_place_bulb(self, row: int, col: int) -> bool:
        """Blank, unmarked, no bulb in sight and no adjacent number pushed past its target."""

        if not self.bounds.contains(row, col):
            return False
        cell = self.cells[row][col]
        if not cell.is_empty():
            return False
        if self.sees_bulb(row, col):
            return False
        for neighbor in self.neighbors(row, col):
            # The candidate itself counts toward the neighbour's total.
            if neighbor.is_number and self.adjacent_bulbs(neighbor.row, neighbor.col) + 1 > neighbor.number:
                return False
        return True

    def is_violating_bulb(self, row: int, col: int) -> bool:
        """True if the bulb at (row, col) sees another bulb or over-satisfies a number."""

        if not self.bounds.contains(row, col) or not self.cells[row][col].bulb:
            return False
        if self.sees_bulb(row, col):
            return True
        return any(
            neighbor.is_number and self.adjacent_bulbs(neighbor.row, neighbor.col) > neighbor.number
            for neighbor in self.neighbors(row, col)
        )

    def has_over_satisfied_number(self) -> bool:
        return any(self.number_deficit(cell.row, cell.col) < 0 for cell in self.number_cells())

    def has_conflict(self) -> bool:
        """Any bulb seeing another bulb, or any number over-satisfied."""

        if self.has_over_satisfied_number():
            return True
        return any(self.sees_bulb(cell.row, cell.col) for cell in self.iter_cells() if cell.bulb)

    def is_solved(self) -> bool:
        if any(not cell.lit for cell in self.blank_cells()):
            return False
        if any(self.number_deficit(cell.row, cell.col) != 0 for cell in self.number_cells()):
            return False
        return not any(self.sees_bulb(cell.row, cell.col) for cell in self.iter_cells() if cell.bulb)

    # ------------------------------------------------------------------
    # Lighting
    # ------------------------------------------------------------------
    def recompute_lighting(self) -> None:
        """Clear every ``lit`` flag, then cast the four rays of every bulb."""

        for cell in self.iter_cells():
            cell.lit = False
        for cell in self.iter_cells():
            if not cell.bulb:
                continue
            cell.lit = True
            for seen in self.visible_cells(cell.row, cell.col):
                seen.lit = True

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def _require_blank(self, row: int, col: int) -> Cell:
        if not self.bounds.contains(row, col):
            raise PlacementError(f"Cell {(row, col)} is outside the board")
        cell = self.cells[row][col]
        if not cell.is_blank:
            raise PlacementError(f"Cell {(row, col)} is a wall and cannot be marked")
        return cell

    def place_bulb(self, row: int, col: int) -> None:
        """Put a bulb on a blank cell (clearing any dot) and relight.

        Legality is not enforced here; callers that need it ask
        ``can_place_bulb`` first, mirroring a player who may place a bulb that
        breaks the rules.
        """

        cell = self._require_blank(row, col)
        cell.bulb = True
        cell.dot = False
        self.recompute_lighting()

    def remove_bulb(self, row: int, col: int) -> None:
        cell = self._require_blank(row, col)
        if not cell.bulb:
            return
        cell.bulb = False
        self.recompute_lighting()

    def place_dot(self, row: int, col: int) -> None:
        cell = self._require_blank(row, col)
        cell.dot = True
        if cell.bulb:
            cell.bulb = False
            self.recompute_lighting()

    def remove_dot(self, row: int, col: int) -> None:
        cell = self._require_blank(row, col)
        cell.dot = False

    def place_bulb_undoable(self, row: int, col: int) -> Callable[[], None]:
        """Place a bulb and return an undo callable for backtracking."""

        cell = self._require_blank(row, col)
        had_dot = cell.dot
        self.place_bulb(row, col)

        def undo() -> None:
            cell.bulb = False
            cell.dot = had_dot
            self.recompute_lighting()

        return undo

    @contextmanager
    def trial_bulb(self, row: int, col: int) -> Iterator[None]:
        """Place a bulb for the duration of the block; always retracted on exit."""

        undo = self.place_bulb_undoable(row, col)
        try:
            yield
        finally:
            undo()

    @contextmanager
    def trial_dots(self, positions: Sequence[Position]) -> Iterator[None]:
        """Dot the given cells for the duration of the block."""

        added = [pos for pos in positions if not self.cells[pos[0]][pos[1]].dot]
        for r, c in added:
            self.cells[r][c].dot = True
        try:
            yield
        finally:
            for r, c in added:
                self.cells[r][c].dot = False

    def clear_marks(self) -> None:
        """Remove every bulb and dot."""

        for cell in self.iter_cells():
            cell.bulb = False
            cell.dot = False
        self.recompute_lighting()

    def apply_bulbs(self, bulbs: Iterable[Position]) -> None:
        """Replace all marks with exactly the given bulbs."""

        for cell in self.iter_cells():
            cell.bulb = False
            cell.dot = False
        for row, col in bulbs:
            self._require_blank(row, col).bulb = True
        self.recompute_lighting()

    # ------------------------------------------------------------------
    # Copies, snapshots and fingerprints
    # ------------------------------------------------------------------
    def copy(self) -> "Board":
        clone = Board.__new__(Board)
        clone.bounds = self.bounds
        clone.cells = copy.deepcopy(self.cells)
        clone._layout_key = self._layout_key
        return clone

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(bulbs=self.bulb_positions(), dots=self.dot_positions())

    def restore(self, snapshot: BoardSnapshot) -> None:
        self.apply_bulbs(snapshot.bulbs)
        for row, col in snapshot.dots:
            self.cells[row][col].dot = True

    @property
    def layout_key(self) -> LayoutKey:
        """Hashable description of walls and numbers (marks excluded)."""

        if self._layout_key is None:
            self._layout_key = tuple(
                (cell.row, cell.col, -1 if cell.type == CellType.WALL else cell.number)
                for cell in self.iter_cells()
                if cell.is_wall
            ) + ((self.rows, self.cols, -2),)
        return self._layout_key

    def fingerprint(self) -> int:
        """Bit-packed bulb/dot/lit state, three bits per cell in row-major order."""

        key = 0
        for cell in self.iter_cells():
            bits = (_BULB_BIT if cell.bulb else 0) | (_DOT_BIT if cell.dot else 0) | (_LIT_BIT if cell.lit else 0)
            key = (key << 3) | bits
        return key

    def __repr__(self) -> str:
        return f"Board(rows={self.rows}, cols={self.cols}, bulbs={len(self.bulb_positions())})"
