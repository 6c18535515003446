"""
Debug formatting for boards, line states and evaluations.

Line states are shown as "blue digits, red digits" in fisherman, fish,
fly order: "100 010" is one blue fisherman and one red fish.
"""

from __future__ import annotations
from typing import Mapping, Sequence

from ..engine_core.board import CellContent, Color, Icon
from ..engine_core.lines import line_name
from .encoder import count_occupants
from .line_evaluator import MoveEvaluation

_ICON_CODES = {
    Icon.FISHERMAN: "FM",
    Icon.FISH: "FI",
    Icon.FLY: "FL",
}

_COLOR_CODES = {
    Color.BLUE: "b",
    Color.RED: "r",
}


def format_state_id(state_id: int) -> str:
    digits = f"{state_id:06d}"
    return f"{digits[:3]} {digits[3:]}"


def format_line_state(line: Sequence[str], board: Mapping[str, CellContent]) -> str:
    counts = list(count_occupants(line, board).values())
    blue = "".join(str(count) for count in counts[:3])
    red = "".join(str(count) for count in counts[3:])
    return f"{blue} {red}"


def cell_code(content: CellContent) -> str:
    if content.icon is None or content.color is None:
        return "."
    return f"{_ICON_CODES[content.icon]}{_COLOR_CODES[content.color]}"


def format_board(board: Mapping[str, CellContent]) -> str:
    """
    Render the board as a grid, rows 1-3 top to bottom:

           a    b    c
        1  FMb  .    .
        2  .    FLr  .
        3  .    .    .
    """
    lines = [("   " + "".join(f"{column:<5}" for column in "abc")).rstrip()]
    for row in "123":
        codes = "".join(f"{cell_code(board[column + row]):<5}" for column in "abc")
        lines.append(f"{row}  {codes}".rstrip())
    return "\n".join(lines)


def describe_evaluation(evaluation: MoveEvaluation) -> str:
    """One line per touched line, e.g. 'a: 000 000 -> 100 000; gain: +1080'."""
    parts = [f"{evaluation.cell}: total gain {evaluation.total_gain:+d}"]
    for line_gain in evaluation.line_gains:
        parts.append(
            f"  {line_name(line_gain.line)}: "
            f"{format_state_id(line_gain.before_state)} -> "
            f"{format_state_id(line_gain.after_state)}; gain: {line_gain.gain:+d}"
        )
    return "\n".join(parts)
