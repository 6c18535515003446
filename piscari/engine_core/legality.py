"""
Move Legality - Which cells the rolled icon may be played on.

A cell is legal if it is empty, or if the rolled icon catches the
occupant's icon under the food chain. The occupant's color does not
matter: a player may capture their own pieces.

Used by:
1. The wizard evaluator to enumerate candidates
2. The host to validate human moves and explain refusals
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping

from .board import CELLS, FOOD_CHAIN, CellContent, Color, Icon, can_capture


@dataclass(frozen=True)
class Capture:
    """A legal move that replaces an existing piece."""
    cell: str
    captured_icon: Icon
    captured_color: Color


@dataclass
class CategorizedMoves:
    """Legal moves split by kind."""
    placements: list[str]
    captures: list[Capture]


def is_legal_move(cell: str, icon: Icon, board: Mapping[str, CellContent]) -> bool:
    """Check if icon may be played on cell."""
    content = board[cell]
    if content.is_empty:
        return True
    return can_capture(icon, content.icon)


def legal_cells(icon: Icon, board: Mapping[str, CellContent]) -> list[str]:
    """All legal cells for icon, in fixed cell order (a1 ... c3)."""
    return [cell for cell in CELLS if is_legal_move(cell, icon, board)]


def has_legal_moves(icon: Icon, board: Mapping[str, CellContent]) -> bool:
    return any(is_legal_move(cell, icon, board) for cell in CELLS)


def categorize_moves(icon: Icon, board: Mapping[str, CellContent]) -> CategorizedMoves:
    """Split legal cells into empty placements and captures."""
    placements: list[str] = []
    captures: list[Capture] = []

    for cell in legal_cells(icon, board):
        content = board[cell]
        if content.is_empty:
            placements.append(cell)
        else:
            captures.append(
                Capture(
                    cell=cell,
                    captured_icon=content.icon,
                    captured_color=content.color,
                )
            )

    return CategorizedMoves(placements=placements, captures=captures)


def legal_cells_by_icon(board: Mapping[str, CellContent]) -> dict[Icon, list[str]]:
    """Legal cells for every possible die roll."""
    return {icon: legal_cells(icon, board) for icon in Icon}


_CHAIN_EXPLANATIONS: dict[Icon, str] = {
    Icon.FISHERMAN: "the fisherman only catches the fish",
    Icon.FISH: "the fish only eats the fly",
    Icon.FLY: "the fly only stings the fisherman",
}


def illegal_move_reason(cell: str, icon: Icon, board: Mapping[str, CellContent]) -> str | None:
    """
    Explain why a move is refused.

    Returns None when the move is legal.
    """
    content = board[cell]
    if content.is_empty or can_capture(icon, content.icon):
        return None

    if content.icon is icon:
        return f"Cell {cell} already holds a {icon.value}; {_CHAIN_EXPLANATIONS[icon]}"

    return (
        f"Cannot play {icon.value} on {cell}: {_CHAIN_EXPLANATIONS[icon]}, "
        f"not the {content.icon.value} (the {content.icon.value} "
        f"catches the {FOOD_CHAIN[content.icon].value})"
    )
