"""Pretty-print helpers for Light-Up boards."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.constants import CellType

if TYPE_CHECKING:
    from ..engine.board import Board
    from ..core.models import Cell


SYMBOLS = {
    CellType.WALL: "#",
    CellType.BLANK: ".",
}


def cell_symbol(cell: Cell, show_light: bool = False) -> str:
    if cell.type == CellType.NUMBER:
        return str(cell.number)
    if cell.bulb:
        return "*"
    if cell.dot:
        return "x"
    if show_light and cell.lit:
        return "+"
    return SYMBOLS.get(cell.type, ".")


def format_board(board: Board, *, show_light: bool = False, header: bool = False) -> str:
    """Render the board as text.

    Without ``header`` the output is one line per row using the same symbols
    ``Board.from_rows`` accepts, so a rendered board can be parsed back.
    """

    rows = [
        "".join(cell_symbol(board.cell(r, c), show_light) for c in range(board.cols))
        for r in range(board.rows)
    ]
    if not header:
        return "\n".join(rows)

    lines = ["    " + " ".join(f"{c:>2}" for c in range(board.cols))]
    lines.append("    " + "-" * (3 * board.cols - 1))
    for r, row in enumerate(rows):
        lines.append(f"{r:>2} | " + " ".join(f"{symbol:>2}" for symbol in row))
    return "\n".join(lines)

