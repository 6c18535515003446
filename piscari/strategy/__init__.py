"""Strategy - line encoding, state values, gains and the wizard engine."""

from .encoder import StateEncoder, STATE_WEIGHTS
from .value_table import (
    StateValueTable,
    StateValues,
    bundled_source,
    file_source,
    records_source,
)
from .cache import EvaluationCache, FifoMap
from .line_evaluator import LineEvaluator, LineGain, MoveEvaluation, MoveProfile
from .guard import FailureGuard, ErrorStats, FALLBACK_PRIORITY, fallback_move
from .move_evaluator import MoveEvaluator, StrategyAnalysis, StrategyStats

__all__ = [
    "StateEncoder",
    "STATE_WEIGHTS",
    "StateValueTable",
    "StateValues",
    "bundled_source",
    "file_source",
    "records_source",
    "EvaluationCache",
    "FifoMap",
    "LineEvaluator",
    "LineGain",
    "MoveEvaluation",
    "MoveProfile",
    "FailureGuard",
    "ErrorStats",
    "FALLBACK_PRIORITY",
    "fallback_move",
    "MoveEvaluator",
    "StrategyAnalysis",
    "StrategyStats",
]
