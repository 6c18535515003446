"""
Pytest fixtures for Piscari tests.
"""

import random

import pytest

from ..engine_core.board import Board, board_from_pieces, empty_board as make_empty_board
from ..strategy.move_evaluator import MoveEvaluator
from ..strategy.value_table import StateValueTable, bundled_source


@pytest.fixture
def state_records() -> list:
    """Raw records of the bundled state value document."""
    return bundled_source()()


@pytest.fixture
def table(state_records) -> StateValueTable:
    """Loaded state value table."""
    return StateValueTable.from_records(state_records)


@pytest.fixture
def engine(table: StateValueTable) -> MoveEvaluator:
    """Wizard engine with a loaded table and a seeded tie-break."""
    return MoveEvaluator(table=table, rng=random.Random(42))


@pytest.fixture
def empty_board() -> Board:
    """All 9 cells empty."""
    return make_empty_board()


@pytest.fixture
def two_blue_fishermen() -> Board:
    """Blue fishermen on a1 and a2: a3 completes column a."""
    return board_from_pieces({"a1": ("fisherman", "blue"), "a2": ("fisherman", "blue")})


@pytest.fixture
def two_red_fish() -> Board:
    """Red fish on a1 and a2: red threatens column a."""
    return board_from_pieces({"a1": ("fish", "red"), "a2": ("fish", "red")})


@pytest.fixture
def blue_fisherman_center() -> Board:
    """Blue fisherman on b2: the four corners tie for a blue fisherman."""
    return board_from_pieces({"b2": ("fisherman", "blue")})
