"""
Board Model - Cells, icons, colors and cell contents.

Design principles:
- The board is a plain dict of cell -> CellContent owned by the host
- The engine never mutates a board it was given: hypothetical moves
  are applied to private copies (see with_move)
- Icons form a cyclic food chain; the relation is total and irreflexive
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class Icon(Enum):
    """Die faces / piece types."""
    FISHERMAN = "fisherman"
    FISH = "fish"
    FLY = "fly"


class Color(Enum):
    """Player colors."""
    BLUE = "blue"
    RED = "red"

    @property
    def opponent(self) -> Color:
        return Color.RED if self is Color.BLUE else Color.BLUE


# Food chain: each icon catches exactly one other icon.
#   fisherman catches fish
#   fish eats fly
#   fly stings fisherman
FOOD_CHAIN: dict[Icon, Icon] = {
    Icon.FISHERMAN: Icon.FISH,
    Icon.FISH: Icon.FLY,
    Icon.FLY: Icon.FISHERMAN,
}


# Columns are letters, rows are digits. b2 is the center.
CELLS: tuple[str, ...] = (
    "a1", "a2", "a3",
    "b1", "b2", "b3",
    "c1", "c2", "c3",
)

CENTER = "b2"
CORNERS: tuple[str, ...] = ("a1", "a3", "c1", "c3")
EDGES: tuple[str, ...] = ("a2", "b1", "b3", "c2")


@dataclass(frozen=True)
class CellContent:
    """
    What occupies a cell.

    Icon and color are both set or both None, never only one.
    Use validate_board() to build these from untrusted host input.
    """
    icon: Icon | None = None
    color: Color | None = None

    @property
    def is_empty(self) -> bool:
        return self.icon is None

    def __str__(self) -> str:
        if self.icon is None or self.color is None:
            return "empty"
        return f"{self.color.value} {self.icon.value}"


EMPTY = CellContent()

Board = dict[str, CellContent]


def can_capture(attacker: Icon, defender: Icon) -> bool:
    """Check if attacker may replace defender under the food chain."""
    return FOOD_CHAIN[attacker] is defender


def coerce_icon(value: Icon | str) -> Icon:
    """
    Convert an icon name to Icon.

    Raises ValueError for unknown values.
    """
    if isinstance(value, Icon):
        return value
    if isinstance(value, str):
        return Icon(value.strip().lower())
    raise ValueError(f"Unrecognized icon: {value!r}")


def coerce_color(value: Color | str) -> Color:
    """
    Convert a color name to Color.

    Raises ValueError for unknown values.
    """
    if isinstance(value, Color):
        return value
    if isinstance(value, str):
        return Color(value.strip().lower())
    raise ValueError(f"Unrecognized color: {value!r}")


def empty_board() -> Board:
    """Create a board with all 9 cells empty."""
    return {cell: EMPTY for cell in CELLS}


def with_move(board: Mapping[str, CellContent], cell: str, icon: Icon, color: Color) -> Board:
    """Return a copy of the board with one cell overwritten."""
    new_board = dict(board)
    new_board[cell] = CellContent(icon=icon, color=color)
    return new_board


def board_from_pieces(pieces: Mapping[str, tuple[Icon | str, Color | str]]) -> Board:
    """
    Build a board from a sparse mapping of occupied cells.

    Usage:
        board = board_from_pieces({"a1": ("fish", "red"), "b2": (Icon.FLY, Color.BLUE)})
    """
    board = empty_board()
    for cell, (icon, color) in pieces.items():
        if cell not in board:
            raise ValueError(f"Unknown cell: {cell!r}")
        board[cell] = CellContent(icon=coerce_icon(icon), color=coerce_color(color))
    return board


def occupied_cells(board: Mapping[str, CellContent]) -> list[str]:
    """Cells holding a piece, in fixed cell order."""
    return [cell for cell in CELLS if not board[cell].is_empty]


def board_to_dict(board: Mapping[str, CellContent]) -> dict[str, Any]:
    """Serialize to the plain {"icon", "color"} shape accepted by validate_board."""
    return {
        cell: {
            "icon": board[cell].icon.value if board[cell].icon else None,
            "color": board[cell].color.value if board[cell].color else None,
        }
        for cell in CELLS
    }
