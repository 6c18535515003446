"""
State Value Table - Precomputed value of every line state.

The table maps a state id (see encoder.py) to two signed integers:
the value of that line from blue's and from red's point of view.

The table:
- Is built from an injectable source (bundled JSON, file, or records)
- Is loaded once, asynchronously, and is read-only afterwards
- Rejects corrupt documents atomically (prior contents are kept)
- Answers 0 for unknown ids: impossible occupancies are simply absent

Document format (a JSON array):
    [{"state_id": 0, "blue": 0, "red": 0}, {"state_id": "100 000", ...}]

The legacy French keys "etat", "bleu" and "rouge" are accepted too.
"""

from __future__ import annotations
import inspect
import json
import logging
import re
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, field_validator

from ..engine_core.board import Color
from ..errors import ValueTableLoadError

logger = logging.getLogger(__name__)

ValueTableSource = Callable[[], Union[Iterable[Any], Awaitable[Iterable[Any]]]]

BUNDLED_TABLE = "state_values.json"

_SEPARATORS = re.compile(r"[\s,]")


class StateValueRecord(BaseModel):
    """One record of the state value document."""
    state_id: int = Field(ge=0, validation_alias=AliasChoices("state_id", "etat"))
    blue: int = Field(validation_alias=AliasChoices("blue", "bleu"))
    red: int = Field(validation_alias=AliasChoices("red", "rouge"))

    @field_validator("state_id", mode="before")
    @classmethod
    def _normalize_state_id(cls, value: Any) -> Any:
        """Accept digit strings with separators, e.g. "100 010" or "1,000"."""
        if isinstance(value, str):
            digits = _SEPARATORS.sub("", value)
            if not digits.isdigit():
                raise ValueError(f"state id {value!r} is not a non-negative integer")
            return int(digits)
        return value


_RECORDS = TypeAdapter(list[StateValueRecord])


@dataclass(frozen=True)
class StateValues:
    """Values of one line state for both colors."""
    blue: int = 0
    red: int = 0

    def for_color(self, color: Color) -> int:
        return self.blue if color is Color.BLUE else self.red


NEUTRAL = StateValues()


def parse_records(raw: Any) -> dict[int, StateValues]:
    """
    Validate a raw record list into an id -> values map.

    Raises pydantic.ValidationError on any malformed record.
    Later records win over earlier ones with the same id.
    """
    records = _RECORDS.validate_python(list(raw))
    return {record.state_id: StateValues(blue=record.blue, red=record.red) for record in records}


# =============================================================================
# Sources
# =============================================================================

def bundled_source() -> ValueTableSource:
    """Source reading the table shipped inside the package."""

    def _read() -> list[Any]:
        document = resources.files("piscari") / "data" / BUNDLED_TABLE
        return json.loads(document.read_text(encoding="utf-8"))

    return _read


def file_source(path: str | Path) -> ValueTableSource:
    """Source reading a JSON document from disk."""
    path = Path(path).expanduser()

    def _read() -> list[Any]:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    return _read


def records_source(records: Iterable[Any]) -> ValueTableSource:
    """Source serving an in-memory record list."""
    snapshot = list(records)
    return lambda: snapshot


# =============================================================================
# Table
# =============================================================================

class StateValueTable:
    """
    Lookup of line state values.

    Usage:
        table = StateValueTable()          # bundled document
        await table.load()
        table.value_for(100000, Color.BLUE)  # -> 1080

        table = StateValueTable.from_records([{"state_id": 0, "blue": 0, "red": 0}])
    """

    def __init__(self, source: ValueTableSource | None = None):
        self.source = source or bundled_source()
        self._values: dict[int, StateValues] = {}
        self._loaded = False

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> StateValueTable:
        """Build an already-loaded table from raw records."""
        table = cls(source=records_source(records))
        try:
            table._install(parse_records(table.source()))
        except (TypeError, ValueError) as exc:
            raise ValueTableLoadError(f"Invalid state value records: {exc}") from exc
        return table

    async def load(self) -> None:
        """
        Fetch and parse the table.

        A no-op once loaded. On failure raises ValueTableLoadError and
        leaves the table exactly as it was.
        """
        if self._loaded:
            return

        try:
            raw = self.source()
            if inspect.isawaitable(raw):
                raw = await raw
            values = parse_records(raw)
        except Exception as exc:
            logger.error("Failed to load state value table: %s", exc)
            raise ValueTableLoadError(f"Failed to load state value table: {exc}") from exc

        self._install(values)

    def _install(self, values: dict[int, StateValues]) -> None:
        self._values = values
        self._loaded = True
        logger.info("Loaded %d line states", len(values))

    def is_loaded(self) -> bool:
        return self._loaded

    def values_for(self, state_id: int) -> StateValues:
        """Both values of a state; neutral when unknown or not loaded."""
        if not self._loaded:
            logger.warning("State table not loaded, returning neutral value for state %d", state_id)
            return NEUTRAL

        values = self._values.get(state_id)
        if values is None:
            logger.warning("State %d not found in table, using neutral value", state_id)
            return NEUTRAL
        return values

    def value_for(self, state_id: int, color: Color) -> int:
        """Value of a state from one color's point of view."""
        return self.values_for(state_id).for_color(color)

    @property
    def state_count(self) -> int:
        return len(self._values)

    def has_state(self, state_id: int) -> bool:
        return state_id in self._values

    def all_states(self) -> list[int]:
        """All known state ids, ascending."""
        return sorted(self._values)

    def reset(self) -> None:
        """Forget everything (test isolation only)."""
        self._values = {}
        self._loaded = False
