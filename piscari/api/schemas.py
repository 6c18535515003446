"""
Pydantic Schemas for API - Request/response models for the wizard endpoints.

Boards are sent as a mapping of the 9 cell names to {"icon", "color"}
(or null for an empty cell). Cell icon and color accept any
JSON value: the engine, not the HTTP layer, decides what a malformed
board means (fallback for /move, 422 for /analyze). Only a body whose
shape is wrong (a missing field, a cell that is not an object or null)
is rejected by FastAPI itself.

Error Codes:
- INVALID_BOARD: The board (or rolled icon / color) failed validation
- TABLE_NOT_LOADED: The state value table is unavailable
- INTERNAL_ERROR: Anything else
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_BOARD = "INVALID_BOARD"
    TABLE_NOT_LOADED = "TABLE_NOT_LOADED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CellPayload(BaseModel):
    """Contents of one cell as sent by the host."""
    icon: Optional[Any] = Field(None, description="fisherman, fish or fly")
    color: Optional[Any] = Field(None, description="blue or red")


class LineGainInfo(BaseModel):
    """Gain of a move on one line."""
    line: str = Field(description="Line name: a, b, c, 1, 2, 3, / or \\")
    cells: list[str]
    before_state: int
    after_state: int
    gain: int


class EvaluationInfo(BaseModel):
    """Score of one candidate cell."""
    cell: str
    total_gain: int
    line_gains: list[LineGainInfo] = Field(default_factory=list)


# =============================================================================
# Request Models
# =============================================================================

class MoveRequest(BaseModel):
    """Ask the wizard where to play its roll."""
    board: dict[str, Optional[CellPayload]] = Field(
        description="All 9 cells, a1..c3; null for an empty cell"
    )
    icon: str = Field(description="Rolled icon")
    color: str = Field(description="Wizard color")

    def board_payload(self) -> dict[str, Any]:
        """Board as plain dicts, the shape validate_board accepts."""
        return {
            cell: content.model_dump() if content is not None else None
            for cell, content in self.board.items()
        }


class AnalyzeRequest(MoveRequest):
    """Rank every legal cell of a position."""


# =============================================================================
# Response Models
# =============================================================================

class MoveResponse(BaseModel):
    """The wizard's answer."""
    cell: Optional[str] = Field(None, description="Chosen cell; null when the turn is forfeit")
    forfeit: bool = False
    icon: str
    color: str


class AnalyzeResponse(BaseModel):
    """Full ranking of a position."""
    best_cell: Optional[str] = None
    max_gain: int = 0
    tie_count: int = 0
    has_legal_moves: bool = False
    legal_cells: list[str] = Field(default_factory=list)
    evaluations: list[EvaluationInfo] = Field(default_factory=list)


class ErrorStatsResponse(BaseModel):
    """Counted engine errors."""
    total_errors: int = 0
    by_kind: dict[str, int] = Field(default_factory=dict)
    last_seen_by_kind: dict[str, datetime] = Field(default_factory=dict)


class CacheClearedResponse(BaseModel):
    """Result of a cache flush."""
    cleared: bool = True
    cache: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "piscari-wizard"
    version: str
    table_loaded: bool = False


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None
