"""
Line Evaluator - Gain of a hypothetical move, line by line.

    gain = value(line after the move) - value(line before the move)

measured from the mover's color. This is the only arithmetic primitive
of the wizard: a move's score is the sum of its gains over the lines
through the target cell.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from ..engine_core.board import CellContent, Color, Icon, with_move
from ..engine_core.lines import Line
from .cache import EvaluationCache, line_state_key
from .encoder import StateEncoder
from .value_table import StateValueTable

# A line whose gain exceeds this is considered an attacking move
OFFENSIVE_THRESHOLD = 1000
# An opponent line valued above this is a threat worth answering
DEFENSIVE_THRESHOLD = 10000


@dataclass(frozen=True)
class LineGain:
    """Gain of one move on one line."""
    line: Line
    before_state: int
    after_state: int
    before_value: int
    after_value: int

    @property
    def gain(self) -> int:
        return self.after_value - self.before_value


@dataclass(frozen=True)
class MoveEvaluation:
    """
    Score of playing one icon on one cell.

    total_gain is the sum of line_gains; the breakdown is kept for
    diagnostics and tests.
    """
    cell: str
    total_gain: int
    line_gains: tuple[LineGain, ...] = field(default_factory=tuple)

    @property
    def gains(self) -> list[int]:
        return [line_gain.gain for line_gain in self.line_gains]


@dataclass
class MoveProfile:
    """Offensive / defensive character of a move."""
    is_offensive: bool
    is_defensive: bool
    offensive_lines: int
    defensive_lines: int
    total_gain: int


class LineEvaluator:
    """
    Computes per-line gains against a state value table.

    Usage:
        evaluator = LineEvaluator(table)
        evaluator.gain(("a1", "a2", "a3"), "a3", Icon.FISH, Color.BLUE, board)
        evaluation = evaluator.total_gain("b2", Icon.FISH, Color.BLUE, board, lines_through("b2"))
    """

    def __init__(
        self,
        table: StateValueTable,
        encoder: StateEncoder | None = None,
        cache: EvaluationCache | None = None,
    ):
        self.table = table
        self.encoder = encoder or StateEncoder()
        self.cache = cache

    def encode(self, line: Sequence[str], board: Mapping[str, CellContent]) -> int:
        """Encode a line, going through the cache when there is one."""
        if self.cache is None:
            return self.encoder.encode(line, board)

        key = line_state_key(line, board)
        state_id = self.cache.get_line_state(key)
        if state_id is None:
            state_id = self.encoder.encode(line, board)
            self.cache.put_line_state(key, state_id)
        return state_id

    def line_gain(
        self,
        line: Line,
        target_cell: str,
        icon: Icon,
        color: Color,
        board: Mapping[str, CellContent],
        after_board: Mapping[str, CellContent] | None = None,
    ) -> LineGain:
        """Full before/after record of one line."""
        if after_board is None:
            after_board = with_move(board, target_cell, icon, color)

        before_state = self.encode(line, board)
        after_state = self.encode(line, after_board)
        return LineGain(
            line=tuple(line),
            before_state=before_state,
            after_state=after_state,
            before_value=self.table.value_for(before_state, color),
            after_value=self.table.value_for(after_state, color),
        )

    def gain(
        self,
        line: Line,
        target_cell: str,
        icon: Icon,
        color: Color,
        board: Mapping[str, CellContent],
    ) -> int:
        """
        Gain of playing (icon, color) on target_cell, for one line.

        Returns 0 when target_cell is not on the line, so callers may
        apply it uniformly over every line of the board.
        """
        if target_cell not in line:
            return 0
        return self.line_gain(line, target_cell, icon, color, board).gain

    def total_gain(
        self,
        target_cell: str,
        icon: Icon,
        color: Color,
        board: Mapping[str, CellContent],
        lines: Iterable[Line],
    ) -> MoveEvaluation:
        """Fold gain() over the given lines, keeping the breakdown."""
        after_board = with_move(board, target_cell, icon, color)
        line_gains = []
        for line in lines:
            if target_cell not in line:
                continue
            line_gains.append(self.line_gain(line, target_cell, icon, color, board, after_board))

        return MoveEvaluation(
            cell=target_cell,
            total_gain=sum(line_gain.gain for line_gain in line_gains),
            line_gains=tuple(line_gains),
        )

    def is_offensive(
        self,
        line: Line,
        target_cell: str,
        icon: Icon,
        color: Color,
        board: Mapping[str, CellContent],
    ) -> bool:
        """True if the move gains significantly on this line."""
        return self.gain(line, target_cell, icon, color, board) > OFFENSIVE_THRESHOLD

    def is_defensive(
        self,
        line: Line,
        target_cell: str,
        icon: Icon,
        color: Color,
        board: Mapping[str, CellContent],
    ) -> bool:
        """True if the opponent currently holds a strong position on this line."""
        if target_cell not in line:
            return False
        state_id = self.encode(line, board)
        return self.table.value_for(state_id, color.opponent) > DEFENSIVE_THRESHOLD

    def classify_move(
        self,
        target_cell: str,
        icon: Icon,
        color: Color,
        board: Mapping[str, CellContent],
        lines: Iterable[Line],
    ) -> MoveProfile:
        """Count attacking and defending lines of a move."""
        offensive_lines = 0
        defensive_lines = 0
        total = 0

        for line in lines:
            line_gain = self.gain(line, target_cell, icon, color, board)
            total += line_gain
            if line_gain > OFFENSIVE_THRESHOLD:
                offensive_lines += 1
            if self.is_defensive(line, target_cell, icon, color, board):
                defensive_lines += 1

        return MoveProfile(
            is_offensive=offensive_lines > 0,
            is_defensive=defensive_lines > 0,
            offensive_lines=offensive_lines,
            defensive_lines=defensive_lines,
            total_gain=total,
        )
