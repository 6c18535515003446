"""
Board Validation - Structural checks on host-supplied boards.

Validates that:
1. The board is a mapping holding exactly the 9 cells
2. Every cell has both an icon and a color, or neither
3. Icons and colors are recognized values

Problems are collected rather than reported one at a time, so a
rejected board lists everything that is wrong with it.
"""

from __future__ import annotations
from typing import Any, Mapping

from ..errors import InvalidBoardError
from .board import CELLS, EMPTY, Board, CellContent, Color, Icon, coerce_color, coerce_icon


def validate_board(raw: Any) -> Board:
    """
    Validate and normalize a board.

    Accepts a mapping of cell -> CellContent, -> {"icon": ..., "color": ...}
    (enum members or their string values), or -> None for an empty cell.

    Returns a fresh dict[str, CellContent].
    Raises InvalidBoardError listing every problem found.
    """
    if not isinstance(raw, Mapping):
        raise InvalidBoardError([f"Board must be a mapping, got {type(raw).__name__}"])

    errors: list[str] = []
    board: Board = {}

    for cell in CELLS:
        if cell not in raw:
            errors.append(f"Cell '{cell}' is missing")
            continue
        content, cell_errors = _normalize_cell(cell, raw[cell])
        errors.extend(cell_errors)
        if content is not None:
            board[cell] = content

    extra = sorted(str(key) for key in raw.keys() if key not in CELLS)
    for key in extra:
        errors.append(f"Unknown cell '{key}'")

    if errors:
        raise InvalidBoardError(errors)

    return board


def is_valid_board(raw: Any) -> bool:
    """Check a board without raising."""
    try:
        validate_board(raw)
    except InvalidBoardError:
        return False
    return True


def _normalize_cell(cell: str, value: Any) -> tuple[CellContent | None, list[str]]:
    """Normalize one cell value, returning (content, errors)."""
    if value is None:
        return EMPTY, []

    if isinstance(value, CellContent):
        icon, color = value.icon, value.color
    elif isinstance(value, Mapping):
        icon, color = value.get("icon"), value.get("color")
    else:
        return None, [f"Cell '{cell}' has unsupported content {value!r}"]

    if icon is None and color is None:
        return EMPTY, []
    if icon is not None and color is None:
        return None, [f"Cell '{cell}' has an icon without a color"]
    if icon is None and color is not None:
        return None, [f"Cell '{cell}' has a color without an icon"]

    errors: list[str] = []
    parsed_icon: Icon | None = None
    parsed_color: Color | None = None
    try:
        parsed_icon = coerce_icon(icon)
    except ValueError:
        errors.append(f"Cell '{cell}' has unknown icon {icon!r}")
    try:
        parsed_color = coerce_color(color)
    except ValueError:
        errors.append(f"Cell '{cell}' has unknown color {color!r}")

    if errors:
        return None, errors
    return CellContent(icon=parsed_icon, color=parsed_color), []
