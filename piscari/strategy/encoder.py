"""
State Encoder - Turns the contents of one line into a state id.

Each (icon, color) combination has its own decimal digit:

    blue fisherman  100000
    blue fish        10000
    blue fly          1000
    red fisherman      100
    red fish            10
    red fly              1

A line holds at most 3 pieces, so no digit can overflow into its
neighbour and distinct occupancy multisets never share an id. The id
reads as "blue digits, red digits": 102000 is one blue fisherman and
two blue flies. Cell order within the line does not matter.
"""

from __future__ import annotations
from typing import Mapping, Sequence

from ..engine_core.board import CellContent, Color, Icon, with_move

STATE_WEIGHTS: dict[tuple[Icon, Color], int] = {
    (Icon.FISHERMAN, Color.BLUE): 100000,
    (Icon.FISH, Color.BLUE): 10000,
    (Icon.FLY, Color.BLUE): 1000,
    (Icon.FISHERMAN, Color.RED): 100,
    (Icon.FISH, Color.RED): 10,
    (Icon.FLY, Color.RED): 1,
}


def count_occupants(line: Sequence[str], board: Mapping[str, CellContent]) -> dict[tuple[Icon, Color], int]:
    """Count each (icon, color) combination among the cells of a line."""
    counts = {combo: 0 for combo in STATE_WEIGHTS}
    for cell in line:
        content = board[cell]
        if content.icon is not None and content.color is not None:
            counts[(content.icon, content.color)] += 1
    return counts


class StateEncoder:
    """
    Pure, total encoder of line contents.

    Usage:
        encoder = StateEncoder()
        state_id = encoder.encode(("a1", "b2", "c3"), board)
        after_id = encoder.encode_after_move(line, board, "b2", Icon.FISH, Color.RED)
    """

    def encode(self, line: Sequence[str], board: Mapping[str, CellContent]) -> int:
        """State id of a line. An empty line is 0."""
        counts = count_occupants(line, board)
        return sum(count * STATE_WEIGHTS[combo] for combo, count in counts.items())

    def encode_after_move(
        self,
        line: Sequence[str],
        board: Mapping[str, CellContent],
        target_cell: str,
        icon: Icon,
        color: Color,
    ) -> int:
        """
        State id of a line once target_cell holds (icon, color).

        The caller's board is left untouched.
        """
        return self.encode(line, with_move(board, target_cell, icon, color))

    @staticmethod
    def decode(state_id: int) -> dict[tuple[Icon, Color], int]:
        """Split a state id back into per-combination counts."""
        counts: dict[tuple[Icon, Color], int] = {}
        remaining = state_id
        for combo, weight in STATE_WEIGHTS.items():
            counts[combo], remaining = divmod(remaining, weight)
        return counts
