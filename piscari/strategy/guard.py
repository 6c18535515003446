"""
Failure Guard - Keeps the wizard answering no matter what.

Three safety nets, applied in order:
1. Validation: malformed boards are rejected before any computation
2. Timeout: the evaluation races a wall-clock budget and is abandoned
   when it runs over
3. Fallback: a cheap, table-free and cache-free heuristic picks the
   first legal cell in a fixed priority order

Every fallback is logged with its error kind. Malfunctions (everything
except NO_VALID_MOVES) are counted so callers can decide to switch the
wizard off when errors become too frequent.
"""

from __future__ import annotations
import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from ..engine_core.board import CENTER, CORNERS, EDGES, Board, CellContent, Icon, can_capture, coerce_icon
from ..engine_core.validation import validate_board
from ..errors import (
    COUNTED_KINDS,
    ComputationTimeoutError,
    ErrorKind,
    UnexpectedWizardError,
    WizardError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 1000
DEFAULT_RETENTION_MS = 3600000

# Center first, then corners, then edges
FALLBACK_PRIORITY: tuple[str, ...] = (CENTER,) + CORNERS + EDGES


@dataclass
class ErrorStats:
    """Snapshot of counted errors."""
    total_errors: int = 0
    by_kind: dict[ErrorKind, int] = field(default_factory=dict)
    last_seen_by_kind: dict[ErrorKind, datetime] = field(default_factory=dict)


def fallback_move(board: Any, icon: Any) -> str | None:
    """
    First legal cell in priority order, or None.

    Uses only the food chain rule. Tolerates malformed boards: missing
    cells and unreadable contents are simply skipped.
    """
    try:
        rolled = coerce_icon(icon)
    except ValueError:
        logger.warning("Fallback cannot read rolled icon %r", icon)
        return None

    if not isinstance(board, Mapping):
        return None

    for cell in FALLBACK_PRIORITY:
        if cell in board and _fallback_is_legal(board[cell], rolled):
            return cell
    return None


def _fallback_is_legal(value: Any, rolled: Icon) -> bool:
    if value is None:
        return True
    if isinstance(value, CellContent):
        occupant = value.icon
    elif isinstance(value, Mapping):
        occupant = value.get("icon")
    else:
        return False

    if occupant is None:
        return True
    try:
        return can_capture(rolled, coerce_icon(occupant))
    except ValueError:
        return False


class FailureGuard:
    """
    Wraps an evaluation with validation, a timeout and a fallback.

    Usage:
        guard = FailureGuard(timeout_ms=1000)
        cell = await guard.execute(
            lambda: evaluate(board, icon, color),
            fallback=lambda: fallback_move(board, icon),
        )
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        retention_ms: int = DEFAULT_RETENTION_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout_ms = timeout_ms
        self.clock = clock
        self.retention_ms = retention_ms
        self._counts: dict[ErrorKind, int] = {}
        self._last_seen: dict[ErrorKind, datetime] = {}
        self._recent: dict[ErrorKind, deque[float]] = {}

    def validate(self, raw: Any) -> Board:
        """Validate a host board (raises InvalidBoardError)."""
        return validate_board(raw)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
    ) -> T:
        """
        Run operation under the time budget.

        Never raises: any failure is recorded and answered by fallback().
        A timed-out operation is cancelled and its result discarded.
        """
        try:
            return await asyncio.wait_for(operation(), timeout=self.timeout_ms / 1000)
        except asyncio.TimeoutError:
            error: WizardError = ComputationTimeoutError(
                f"Operation timed out after {self.timeout_ms}ms"
            )
        except WizardError as exc:
            error = exc
        except Exception as exc:
            error = UnexpectedWizardError(f"Unexpected error in wizard strategy: {exc}", original=exc)
            error.__cause__ = exc

        self.record_error(error)
        return fallback()

    def fallback_move(self, board: Any, icon: Any) -> str | None:
        return fallback_move(board, icon)

    def record_error(self, error: WizardError) -> None:
        """Log an error and update statistics for counted kinds."""
        kind = error.kind
        if kind not in COUNTED_KINDS:
            logger.info("Wizard strategy [%s]: %s", kind.value, error)
            return

        self._counts[kind] = self._counts.get(kind, 0) + 1
        self._last_seen[kind] = datetime.now()
        now = self.clock()
        recent = self._recent.setdefault(kind, deque())
        recent.append(now)
        self._prune(recent, now)

        if kind is ErrorKind.UNEXPECTED:
            logger.error("Wizard strategy error [%s]: %s", kind.value, error, exc_info=error.__cause__)
        else:
            logger.error("Wizard strategy error [%s]: %s", kind.value, error)

    def get_error_stats(self) -> ErrorStats:
        by_kind = {kind: self._counts.get(kind, 0) for kind in COUNTED_KINDS}
        return ErrorStats(
            total_errors=sum(by_kind.values()),
            by_kind=by_kind,
            last_seen_by_kind=dict(self._last_seen),
        )

    def reset_error_stats(self) -> None:
        self._counts.clear()
        self._last_seen.clear()
        self._recent.clear()

    def is_error_too_frequent(
        self,
        kind: ErrorKind,
        max_count: int = 5,
        window_ms: int = 60000,
    ) -> bool:
        """
        True if at least max_count errors of kind happened within the window.

        Timestamps are kept for retention_ms, so longer windows are rejected.
        """
        if window_ms > self.retention_ms:
            raise ValueError(f"window_ms {window_ms} exceeds retention of {self.retention_ms}ms")
        recent = self._recent.get(kind)
        if not recent:
            return False
        now = self.clock()
        self._prune(recent, now)
        window_s = window_ms / 1000
        in_window = sum(1 for seen in recent if now - seen < window_s)
        return in_window >= max_count

    def _prune(self, recent: deque[float], now: float) -> None:
        horizon = now - self.retention_ms / 1000
        while recent and recent[0] <= horizon:
            recent.popleft()
