"""Data models supporting the Light-Up engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .constants import CellType, MoveKind

Position = Tuple[int, int]


@dataclass
class Cell:
    """Represents a board cell with its mutable marks."""

    row: int
    col: int
    type: CellType = CellType.BLANK
    number: Optional[int] = None
    bulb: bool = False
    dot: bool = False
    lit: bool = False

    @property
    def is_wall(self) -> bool:
        return self.type in (CellType.WALL, CellType.NUMBER)

    @property
    def is_blank(self) -> bool:
        return self.type == CellType.BLANK

    @property
    def is_number(self) -> bool:
        return self.type == CellType.NUMBER

    @property
    def position(self) -> Position:
        return self.row, self.col

    def is_empty(self) -> bool:
        """Blank and carrying neither a bulb nor a dot."""
        return self.type == CellType.BLANK and not self.bulb and not self.dot


@dataclass(frozen=True)
class Move:
    """A single AI decision."""

    kind: MoveKind
    row: int = -1
    col: int = -1

    @classmethod
    def none(cls) -> "Move":
        return cls(MoveKind.NONE)

    @property
    def position(self) -> Optional[Position]:
        if self.kind == MoveKind.NONE:
            return None
        return self.row, self.col


@dataclass
class GraphNode:
    """Visibility-graph node for one blank cell."""

    id: int
    row: int
    col: int
    neighbors: List["GraphNode"] = field(default_factory=list, repr=False)
    centrality: float = 0.0

    @property
    def degree(self) -> int:
        return len(self.neighbors)


@dataclass(frozen=True)
class Region:
    """Inclusive bounding rectangle used during recursive partitioning."""

    r0: int
    c0: int
    r1: int
    c1: int

    @property
    def height(self) -> int:
        return self.r1 - self.r0 + 1

    @property
    def width(self) -> int:
        return self.c1 - self.c0 + 1

    def area(self) -> int:
        return self.height * self.width

    def contains(self, row: int, col: int) -> bool:
        return self.r0 <= row <= self.r1 and self.c0 <= col <= self.c1

    def split(self) -> Tuple["Region", "Region"]:
        """Halve the rectangle across its longer axis."""
        if self.height >= self.width:
            mid = self.r0 + (self.height - 1) // 2
            return Region(self.r0, self.c0, mid, self.c1), Region(mid + 1, self.c0, self.r1, self.c1)
        mid = self.c0 + (self.width - 1) // 2
        return Region(self.r0, self.c0, self.r1, mid), Region(self.r0, mid + 1, self.r1, self.c1)

    def positions(self) -> Iterator[Position]:
        for r in range(self.r0, self.r1 + 1):
            for c in range(self.c0, self.c1 + 1):
                yield r, c
