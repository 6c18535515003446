"""
Wizard Errors - Exception taxonomy for the move engine.

Every error carries an ErrorKind so the failure guard can classify it.
None of these escape select_best_move: the guard catches them and
answers with the fallback heuristic instead.

NO_VALID_MOVES is an expected terminal condition (the turn is forfeit),
not a malfunction; it is never counted in the error statistics.
"""

from __future__ import annotations
from enum import Enum


class ErrorKind(str, Enum):
    """Classification used for logging and error statistics."""
    TABLE_NOT_LOADED = "state_table_not_loaded"
    INVALID_BOARD = "invalid_board"
    NO_VALID_MOVES = "no_valid_moves"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"


# Kinds that represent genuine engine malfunction
COUNTED_KINDS: tuple[ErrorKind, ...] = (
    ErrorKind.TABLE_NOT_LOADED,
    ErrorKind.INVALID_BOARD,
    ErrorKind.TIMEOUT,
    ErrorKind.UNEXPECTED,
)


class WizardError(Exception):
    """Base class for wizard engine errors."""
    kind: ErrorKind = ErrorKind.UNEXPECTED


class ValueTableNotLoadedError(WizardError):
    """Raised when an evaluation is attempted before the table is loaded."""
    kind = ErrorKind.TABLE_NOT_LOADED


class InvalidBoardError(WizardError):
    """Raised when board validation fails."""
    kind = ErrorKind.INVALID_BOARD

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Board validation failed with {len(errors)} error(s): {'; '.join(errors)}")


class NoValidMovesError(WizardError):
    """Raised when the rolled icon has no legal cell."""
    kind = ErrorKind.NO_VALID_MOVES


class ComputationTimeoutError(WizardError):
    """Raised when the evaluation exceeds its wall-clock budget."""
    kind = ErrorKind.TIMEOUT


class UnexpectedWizardError(WizardError):
    """Wraps any other exception raised during evaluation."""
    kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, original: BaseException | None = None):
        self.original = original
        super().__init__(message)


class ValueTableLoadError(WizardError):
    """Raised when the state value document cannot be fetched or parsed."""
    kind = ErrorKind.TABLE_NOT_LOADED
