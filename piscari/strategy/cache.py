"""
Evaluation Cache - Memoizes line encodings and move evaluations.

The cache:
- Keeps two independent maps (line states, move evaluations)
- Uses deterministic string fingerprints as keys
- Is bounded per map; the oldest entry is evicted first (FIFO)
- Is purely an optimization: results are identical with it disabled

Design decisions:
- FIFO rather than LRU: a turn never evaluates more than 9 cells,
  so recency tracking buys nothing
- Fingerprints serialize occupied cells only; empty cells are implicit
"""

from __future__ import annotations
from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Hashable, Mapping, Sequence

from ..engine_core.board import CELLS, CellContent, Color, Icon

if TYPE_CHECKING:
    from .line_evaluator import MoveEvaluation

DEFAULT_MAX_SIZE = 1000


def _token(content: CellContent) -> str:
    if content.icon is None or content.color is None:
        return "-"
    return f"{content.icon.value}/{content.color.value}"


def line_state_key(line: Sequence[str], board: Mapping[str, CellContent]) -> str:
    """Fingerprint of a line's contents, e.g. 'line:a1b2c3:fish/red,-,-'."""
    contents = ",".join(_token(board[cell]) for cell in line)
    return f"line:{''.join(line)}:{contents}"


def board_fingerprint(board: Mapping[str, CellContent]) -> str:
    """Canonical serialization of occupied cells, e.g. 'a1=fish/red|b2=fly/blue'."""
    return "|".join(
        f"{cell}={_token(board[cell])}"
        for cell in CELLS
        if not board[cell].is_empty
    )


def evaluation_key(cell: str, icon: Icon, color: Color, board: Mapping[str, CellContent]) -> str:
    """Fingerprint of a (cell, icon, color, board) evaluation request."""
    return f"eval:{cell}:{icon.value}:{color.value}:{board_fingerprint(board)}"


class FifoMap:
    """Size-bounded mapping evicting the oldest insertion first."""

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        self.max_size = max_size
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: Hashable) -> Any | None:
        if key in self._entries:
            self.hits += 1
            return self._entries[key]
        self.misses += 1
        return None

    def put(self, key: Hashable, value: Any) -> None:
        """Insert a value; re-inserting an existing key keeps its age."""
        if key not in self._entries:
            self.trim(self.max_size - 1)
        self._entries[key] = value

    def trim(self, size: int) -> None:
        """Evict oldest entries until at most size remain."""
        while len(self._entries) > max(size, 0):
            self._entries.popitem(last=False)
            self.evictions += 1

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[Hashable]:
        """Keys from oldest to newest."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def stats(self) -> dict[str, Any]:
        lookups = self.hits + self.misses
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": self.hits / lookups if lookups else 0.0,
        }


class EvaluationCache:
    """
    Memoization for the move evaluator.

    Usage:
        cache = EvaluationCache(max_size=500)

        key = evaluation_key("b2", Icon.FISH, Color.BLUE, board)
        evaluation = cache.get_evaluation(key)
        if evaluation is None:
            evaluation = compute()
            cache.put_evaluation(key, evaluation)

        cache.clear()  # between games
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, enabled: bool = True):
        self.enabled = enabled
        self.line_states = FifoMap(max_size)
        self.evaluations = FifoMap(max_size)

    @property
    def max_size(self) -> int:
        return self.line_states.max_size

    def get_line_state(self, key: str) -> int | None:
        if not self.enabled:
            return None
        return self.line_states.get(key)

    def put_line_state(self, key: str, state_id: int) -> None:
        if self.enabled:
            self.line_states.put(key, state_id)

    def get_evaluation(self, key: str) -> MoveEvaluation | None:
        if not self.enabled:
            return None
        return self.evaluations.get(key)

    def put_evaluation(self, key: str, evaluation: MoveEvaluation) -> None:
        if self.enabled:
            self.evaluations.put(key, evaluation)

    def set_max_size(self, max_size: int) -> None:
        """Change capacity, evicting the oldest entries if needed."""
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        for entries in (self.line_states, self.evaluations):
            entries.max_size = max_size
            entries.trim(max_size)

    def clear(self) -> None:
        """Reset both maps (between games, or for test isolation)."""
        self.line_states.clear()
        self.evaluations.clear()

    def stats(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "line_states": self.line_states.stats(),
            "evaluations": self.evaluations.stats(),
        }
