"""
API Module - HTTP interface to the wizard.

The game host:
1. Sends the board, the rolled icon and the wizard's color
2. Receives the chosen cell (or a forfeit)
3. Optionally inspects the ranking, error counters and cache

FastAPI is an optional dependency; schemas and the service work without it.
"""

from .schemas import (
    # Requests
    MoveRequest,
    AnalyzeRequest,
    # Responses
    MoveResponse,
    AnalyzeResponse,
    ErrorStatsResponse,
    CacheClearedResponse,
    HealthResponse,
    ErrorResponse,
    # Shared
    CellPayload,
    EvaluationInfo,
    LineGainInfo,
    ErrorCode,
)
from .service import WizardService
from .app import create_app

__all__ = [
    # Requests
    "MoveRequest",
    "AnalyzeRequest",
    # Responses
    "MoveResponse",
    "AnalyzeResponse",
    "ErrorStatsResponse",
    "CacheClearedResponse",
    "HealthResponse",
    "ErrorResponse",
    # Shared
    "CellPayload",
    "EvaluationInfo",
    "LineGainInfo",
    "ErrorCode",
    # Service
    "WizardService",
    "create_app",
]
