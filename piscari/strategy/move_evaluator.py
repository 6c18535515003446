"""
Move Evaluator - The wizard's move selection.

Given a board, the rolled icon and the wizard's color:
1. List legal cells (empty, or holding an icon the roll catches)
2. Score each cell: sum of line gains over the lines through it
   (4 for the center, 3 for corners, 2 for edges)
3. Keep every cell reaching the best score
4. Pick one of them uniformly at random

The random tie-break is deliberate: on symmetric positions the wizard
should not be perfectly predictable. The generator is injected so tests
can reproduce a given choice.

select_best_move always answers (a cell, or None when no legal move
exists); failures are absorbed by the FailureGuard.
"""

from __future__ import annotations
import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ..config import EngineSettings
from ..engine_core.board import Board, CellContent, Color, Icon, coerce_color, coerce_icon
from ..engine_core.legality import legal_cells
from ..engine_core.lines import lines_through
from ..errors import ErrorKind, InvalidBoardError, NoValidMovesError, ValueTableNotLoadedError
from .cache import EvaluationCache, evaluation_key
from .formatting import describe_evaluation, format_board
from .guard import ErrorStats, FailureGuard
from .line_evaluator import LineEvaluator, MoveEvaluation
from .value_table import StateValueTable, file_source

logger = logging.getLogger(__name__)

DEFAULT_SLOW_MOVE_MS = 100


@dataclass
class StrategyAnalysis:
    """Full ranking of a position, for tests and introspection."""
    legal_cells: list[str]
    evaluations: list[MoveEvaluation]
    best_cell: str | None
    max_gain: int
    tie_count: int

    @property
    def has_legal_moves(self) -> bool:
        return bool(self.legal_cells)

    @property
    def tied_cells(self) -> list[str]:
        return [e.cell for e in self.evaluations if e.total_gain == self.max_gain]


@dataclass
class StrategyStats:
    """Distribution of gains over the legal moves of a position."""
    total_legal_moves: int = 0
    positive_gain_moves: int = 0
    negative_gain_moves: int = 0
    neutral_moves: int = 0
    average_gain: float = 0.0
    best_gain: int = 0
    worst_gain: int = 0


class MoveEvaluator:
    """
    Wizard engine facade.

    Usage:
        wizard = MoveEvaluator(rng=random.Random(7))
        await wizard.initialize()
        cell = await wizard.select_best_move(board, Icon.FISH, Color.RED)

        analysis = wizard.analyze(board, Icon.FISH, Color.RED)
        print(analysis.max_gain, analysis.tied_cells)
    """

    def __init__(
        self,
        table: StateValueTable | None = None,
        cache: EvaluationCache | None = None,
        guard: FailureGuard | None = None,
        rng: random.Random | None = None,
        slow_move_ms: int = DEFAULT_SLOW_MOVE_MS,
    ):
        self.table = table or StateValueTable()
        self.cache = cache if cache is not None else EvaluationCache()
        self.guard = guard or FailureGuard()
        self.rng = rng or random.Random()
        self.slow_move_ms = slow_move_ms

        self.line_evaluator = LineEvaluator(self.table, cache=self.cache)
        # Uncached twin for read-only diagnostics
        self._plain_evaluator = LineEvaluator(self.table)

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
    ) -> MoveEvaluator:
        """Build an engine from EngineSettings (environment by default)."""
        settings = settings or EngineSettings.from_env()
        source = file_source(settings.value_table_path) if settings.value_table_path else None
        return cls(
            table=StateValueTable(source),
            cache=EvaluationCache(max_size=settings.cache_size, enabled=settings.cache_enabled),
            guard=FailureGuard(timeout_ms=settings.timeout_ms),
            rng=rng,
            slow_move_ms=settings.slow_move_ms,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self) -> None:
        """Load the state value table. Safe to call repeatedly."""
        await self.table.load()

    def is_ready(self) -> bool:
        return self.table.is_loaded()

    # =========================================================================
    # Move selection
    # =========================================================================

    async def select_best_move(self, board: Any, icon: Icon | str, color: Color | str) -> str | None:
        """
        Choose the wizard's cell.

        Returns None only when the roll has no legal cell (the turn is
        forfeit). Never raises.
        """
        return await self.guard.execute(
            lambda: self._select_best_move(board, icon, color),
            fallback=lambda: self.guard.fallback_move(board, icon),
        )

    async def _select_best_move(self, raw_board: Any, icon: Icon | str, color: Color | str) -> str:
        board = self.guard.validate(raw_board)
        icon, color = _coerce_roll(icon, color)

        if not self.is_ready():
            raise ValueTableNotLoadedError("State table not loaded for wizard strategy")

        started = time.perf_counter()

        candidates = legal_cells(icon, board)
        if not candidates:
            raise NoValidMovesError(f"No valid moves available for {color.value} {icon.value}")

        evaluations: list[MoveEvaluation] = []
        for cell in candidates:
            evaluations.append(self._evaluate_cached(cell, icon, color, board))
            # Yield so the guard's time budget can interrupt us
            await asyncio.sleep(0)

        chosen, max_gain, tied = self._choose(evaluations)

        elapsed_ms = (time.perf_counter() - started) * 1000
        if elapsed_ms > self.slow_move_ms:
            logger.warning(
                "Wizard evaluation for %s %s took %.2fms (>%dms)",
                color.value, icon.value, elapsed_ms, self.slow_move_ms,
            )
        self._log_choice(board, icon, color, evaluations, chosen, tied)

        return chosen.cell

    def _choose(self, evaluations: list[MoveEvaluation]) -> tuple[MoveEvaluation, int, list[MoveEvaluation]]:
        """Best evaluation, the best gain, and every evaluation tied with it."""
        max_gain = max(e.total_gain for e in evaluations)
        tied = [e for e in evaluations if e.total_gain == max_gain]
        if len(tied) == 1:
            return tied[0], max_gain, tied
        return self.rng.choice(tied), max_gain, tied

    def _evaluate_cached(self, cell: str, icon: Icon, color: Color, board: Board) -> MoveEvaluation:
        key = evaluation_key(cell, icon, color, board)
        evaluation = self.cache.get_evaluation(key)
        if evaluation is None:
            evaluation = self.line_evaluator.total_gain(cell, icon, color, board, lines_through(cell))
            self.cache.put_evaluation(key, evaluation)
        return evaluation

    def _log_choice(
        self,
        board: Board,
        icon: Icon,
        color: Color,
        evaluations: list[MoveEvaluation],
        chosen: MoveEvaluation,
        tied: list[MoveEvaluation],
    ) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        logger.debug("Evaluating %d moves for %s %s\n%s", len(evaluations), color.value, icon.value, format_board(board))
        for evaluation in evaluations:
            logger.debug("%s", describe_evaluation(evaluation))
        if len(tied) > 1:
            logger.debug(
                "Random pick %s among %s (gain %d)",
                chosen.cell, ", ".join(e.cell for e in tied), chosen.total_gain,
            )
        else:
            logger.debug("Best move: %s with gain %d", chosen.cell, chosen.total_gain)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def evaluate_move(
        self,
        cell: str,
        icon: Icon,
        color: Color,
        board: Mapping[str, CellContent],
    ) -> MoveEvaluation:
        """Score one cell without touching the cache."""
        return self._plain_evaluator.total_gain(cell, icon, color, board, lines_through(cell))

    def evaluate_all(
        self,
        cells: Iterable[str],
        icon: Icon,
        color: Color,
        board: Mapping[str, CellContent],
    ) -> list[MoveEvaluation]:
        """Score several cells, best first (ties keep cell order)."""
        evaluations = [self.evaluate_move(cell, icon, color, board) for cell in cells]
        return sorted(evaluations, key=lambda e: -e.total_gain)

    def analyze(self, board: Any, icon: Icon | str, color: Color | str) -> StrategyAnalysis:
        """
        Rank every legal cell of a position.

        Unlike select_best_move this is not guarded: it raises
        InvalidBoardError or ValueTableNotLoadedError. The chosen cell
        uses the same tie-break generator as select_best_move.
        """
        board = self.guard.validate(board)
        icon, color = _coerce_roll(icon, color)

        if not self.is_ready():
            raise ValueTableNotLoadedError("State table not loaded for wizard strategy")

        candidates = legal_cells(icon, board)
        if not candidates:
            return StrategyAnalysis(
                legal_cells=[],
                evaluations=[],
                best_cell=None,
                max_gain=0,
                tie_count=0,
            )

        evaluations = self.evaluate_all(candidates, icon, color, board)
        chosen, max_gain, tied = self._choose(evaluations)

        return StrategyAnalysis(
            legal_cells=candidates,
            evaluations=evaluations,
            best_cell=chosen.cell,
            max_gain=max_gain,
            tie_count=len(tied),
        )

    def strategy_stats(self, board: Any, icon: Icon | str, color: Color | str) -> StrategyStats:
        """Summarize the gains available to a roll."""
        analysis = self.analyze(board, icon, color)
        gains = [e.total_gain for e in analysis.evaluations]
        if not gains:
            return StrategyStats()

        return StrategyStats(
            total_legal_moves=len(gains),
            positive_gain_moves=sum(1 for g in gains if g > 0),
            negative_gain_moves=sum(1 for g in gains if g < 0),
            neutral_moves=sum(1 for g in gains if g == 0),
            average_gain=sum(gains) / len(gains),
            best_gain=max(gains),
            worst_gain=min(gains),
        )

    # =========================================================================
    # Fallback, errors and cache
    # =========================================================================

    def fallback_move(self, board: Any, icon: Icon | str) -> str | None:
        return self.guard.fallback_move(board, icon)

    def get_error_stats(self) -> ErrorStats:
        return self.guard.get_error_stats()

    def reset_error_stats(self) -> None:
        self.guard.reset_error_stats()

    def is_error_too_frequent(self, kind: ErrorKind, max_count: int = 5, window_ms: int = 60000) -> bool:
        return self.guard.is_error_too_frequent(kind, max_count, window_ms)

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> dict[str, Any]:
        return self.cache.stats()


def _coerce_roll(icon: Icon | str, color: Color | str) -> tuple[Icon, Color]:
    """Parse the rolled icon and mover color, reporting both problems at once."""
    errors: list[str] = []
    parsed_icon: Icon | None = None
    parsed_color: Color | None = None
    try:
        parsed_icon = coerce_icon(icon)
    except ValueError:
        errors.append(f"Unrecognized rolled icon {icon!r}")
    try:
        parsed_color = coerce_color(color)
    except ValueError:
        errors.append(f"Unrecognized player color {color!r}")
    if errors:
        raise InvalidBoardError(errors)
    return parsed_icon, parsed_color
