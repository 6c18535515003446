"""
Wizard Service - Business logic layer between the API and the engine.

The service:
1. Loads the state value table once, at startup
2. Translates requests into engine calls
3. Formats engine results into response models

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

from .. import __version__
from ..engine_core.lines import line_name
from ..errors import ValueTableLoadError
from ..strategy.line_evaluator import MoveEvaluation
from ..strategy.move_evaluator import MoveEvaluator
from .schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    CacheClearedResponse,
    ErrorStatsResponse,
    EvaluationInfo,
    HealthResponse,
    LineGainInfo,
    MoveRequest,
    MoveResponse,
)

logger = logging.getLogger(__name__)


def evaluation_info(evaluation: MoveEvaluation) -> EvaluationInfo:
    return EvaluationInfo(
        cell=evaluation.cell,
        total_gain=evaluation.total_gain,
        line_gains=[
            LineGainInfo(
                line=line_name(line_gain.line),
                cells=list(line_gain.line),
                before_state=line_gain.before_state,
                after_state=line_gain.after_state,
                gain=line_gain.gain,
            )
            for line_gain in evaluation.line_gains
        ],
    )


@dataclass
class WizardService:
    """
    Wizard API service.

    Usage:
        service = WizardService()
        await service.initialize()

        response = await service.suggest_move(MoveRequest(board=..., icon="fish", color="red"))
    """
    engine: MoveEvaluator = field(default_factory=MoveEvaluator.from_settings)

    async def initialize(self) -> bool:
        """
        Load the state table.

        A failed load is logged, not raised: the service stays up and
        the engine answers with its fallback until a later load works.
        """
        try:
            await self.engine.initialize()
        except ValueTableLoadError as exc:
            logger.error("Wizard starting without state table: %s", exc)
            return False
        return True

    async def suggest_move(self, request: MoveRequest) -> MoveResponse:
        cell = await self.engine.select_best_move(request.board_payload(), request.icon, request.color)
        return MoveResponse(
            cell=cell,
            forfeit=cell is None,
            icon=request.icon,
            color=request.color,
        )

    def analyze(self, request: AnalyzeRequest) -> AnalyzeResponse:
        """Raises InvalidBoardError or ValueTableNotLoadedError."""
        analysis = self.engine.analyze(request.board_payload(), request.icon, request.color)
        return AnalyzeResponse(
            best_cell=analysis.best_cell,
            max_gain=analysis.max_gain,
            tie_count=analysis.tie_count,
            has_legal_moves=analysis.has_legal_moves,
            legal_cells=analysis.legal_cells,
            evaluations=[evaluation_info(e) for e in analysis.evaluations],
        )

    def error_stats(self) -> ErrorStatsResponse:
        stats = self.engine.get_error_stats()
        return ErrorStatsResponse(
            total_errors=stats.total_errors,
            by_kind={kind.value: count for kind, count in stats.by_kind.items()},
            last_seen_by_kind={kind.value: seen for kind, seen in stats.last_seen_by_kind.items()},
        )

    def clear_cache(self) -> CacheClearedResponse:
        self.engine.clear_cache()
        return CacheClearedResponse(cleared=True, cache=self.engine.cache_stats())

    def health(self) -> HealthResponse:
        return HealthResponse(version=__version__, table_loaded=self.engine.is_ready())
