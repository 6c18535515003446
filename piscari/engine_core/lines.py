"""
Line Catalog - The 8 winning lines of the grid.

Lines are fixed at import time and shared read-only:
- 3 columns (a, b, c)
- 3 rows (1, 2, 3)
- 2 diagonals (/ is a1-b2-c3, \\ is a3-b2-c1)

The reverse index CELL_TO_LINES gives the lines through a cell:
4 for the center, 3 for corners, 2 for edges.
"""

from __future__ import annotations

from .board import CELLS, CENTER, CORNERS, EDGES

Line = tuple[str, str, str]


COLUMNS: tuple[Line, ...] = (
    ("a1", "a2", "a3"),
    ("b1", "b2", "b3"),
    ("c1", "c2", "c3"),
)

ROWS: tuple[Line, ...] = (
    ("a1", "b1", "c1"),
    ("a2", "b2", "c2"),
    ("a3", "b3", "c3"),
)

DIAGONALS: tuple[Line, ...] = (
    ("a1", "b2", "c3"),
    ("a3", "b2", "c1"),
)

BOARD_LINES: tuple[Line, ...] = COLUMNS + ROWS + DIAGONALS

CELL_TO_LINES: dict[str, tuple[Line, ...]] = {
    cell: tuple(line for line in BOARD_LINES if cell in line)
    for cell in CELLS
}

LINE_NAMES: dict[Line, str] = {
    COLUMNS[0]: "a",
    COLUMNS[1]: "b",
    COLUMNS[2]: "c",
    ROWS[0]: "1",
    ROWS[1]: "2",
    ROWS[2]: "3",
    DIAGONALS[0]: "/",
    DIAGONALS[1]: "\\",
}


def all_lines() -> tuple[Line, ...]:
    return BOARD_LINES


def lines_through(cell: str) -> tuple[Line, ...]:
    """Lines containing a cell (empty tuple for unknown cells)."""
    return CELL_TO_LINES.get(cell, ())


def line_count(cell: str) -> int:
    return len(lines_through(cell))


def cell_type(cell: str) -> str:
    """Return 'center', 'corner' or 'edge'."""
    if cell == CENTER:
        return "center"
    if cell in CORNERS:
        return "corner"
    if cell in EDGES:
        return "edge"
    raise ValueError(f"Unknown cell: {cell!r}")


def columns() -> tuple[Line, ...]:
    return COLUMNS


def rows() -> tuple[Line, ...]:
    return ROWS


def diagonals() -> tuple[Line, ...]:
    return DIAGONALS


def line_name(line: Line) -> str:
    """Short display name of a line, or its cells joined by commas."""
    return LINE_NAMES.get(tuple(line), ",".join(line))


def common_lines(cell_a: str, cell_b: str) -> list[Line]:
    """Lines containing both cells."""
    return [line for line in lines_through(cell_a) if cell_b in line]


def third_cell(cell_a: str, cell_b: str) -> str | None:
    """
    The remaining cell of the line through two cells.

    Returns None if the cells share no line (or are the same cell).
    """
    if cell_a == cell_b:
        return None
    shared = common_lines(cell_a, cell_b)
    if not shared:
        return None
    for cell in shared[0]:
        if cell not in (cell_a, cell_b):
            return cell
    return None


def validate_configuration() -> bool:
    """Check the catalog is internally consistent."""
    if len(BOARD_LINES) != 8:
        return False
    if any(len(set(line)) != 3 for line in BOARD_LINES):
        return False
    if line_count(CENTER) != 4:
        return False
    if any(line_count(corner) != 3 for corner in CORNERS):
        return False
    if any(line_count(edge) != 2 for edge in EDGES):
        return False
    return True
