"""Engine core - board model, winning lines, legality and validation."""

from .board import (
    Icon,
    Color,
    CellContent,
    Board,
    EMPTY,
    CELLS,
    CENTER,
    CORNERS,
    EDGES,
    FOOD_CHAIN,
    can_capture,
    coerce_icon,
    coerce_color,
    empty_board,
    board_from_pieces,
    with_move,
)
from .lines import Line, BOARD_LINES, CELL_TO_LINES, lines_through, line_name
from .legality import legal_cells, is_legal_move, categorize_moves, illegal_move_reason
from .validation import validate_board, is_valid_board

__all__ = [
    "Icon",
    "Color",
    "CellContent",
    "Board",
    "EMPTY",
    "CELLS",
    "CENTER",
    "CORNERS",
    "EDGES",
    "FOOD_CHAIN",
    "can_capture",
    "coerce_icon",
    "coerce_color",
    "empty_board",
    "board_from_pieces",
    "with_move",
    "Line",
    "BOARD_LINES",
    "CELL_TO_LINES",
    "lines_through",
    "line_name",
    "legal_cells",
    "is_legal_move",
    "categorize_moves",
    "illegal_move_reason",
    "validate_board",
    "is_valid_board",
]
