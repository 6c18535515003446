"""
Tests for the wizard move evaluator.

Tests:
- Reference scenarios (empty board, winning move, block, forfeit, bad board)
- The chosen cell is always legal and the board is never mutated
- Seeded tie-breaking
- Cache on/off and cold/warm equivalence
- Timeout and unexpected failures fall back
- Configuration
"""

import copy
import logging
import random
import time

import pytest

from ..config import EngineSettings
from ..engine_core.board import CELLS, CORNERS, Color, Icon, board_from_pieces, board_to_dict, empty_board
from ..engine_core.legality import legal_cells
from ..errors import ErrorKind, InvalidBoardError, ValueTableNotLoadedError
from ..strategy.cache import EvaluationCache
from ..strategy.guard import FailureGuard
from ..strategy.move_evaluator import MoveEvaluator
from ..strategy.value_table import StateValueTable


SAMPLE_POSITIONS = [
    {},
    {"a1": ("fisherman", "blue"), "a2": ("fisherman", "blue")},
    {"a1": ("fish", "red"), "a2": ("fish", "red")},
    {"b2": ("fisherman", "blue")},
    {"a1": ("fly", "red"), "b2": ("fish", "blue"), "c3": ("fisherman", "red"), "b1": ("fly", "blue")},
    {"a3": ("fish", "blue"), "b2": ("fish", "red"), "c1": ("fly", "red"), "c2": ("fisherman", "blue")},
]


class TestReferenceScenarios:
    """Tests for the documented reference positions."""

    @pytest.mark.asyncio
    async def test_empty_board_takes_center(self, engine, empty_board):
        """The center touches 4 lines and wins for every roll."""
        for icon in Icon:
            for color in Color:
                assert await engine.select_best_move(empty_board, icon, color) == "b2"

    def test_empty_board_gains(self, engine, empty_board):
        analysis = engine.analyze(empty_board, Icon.FISH, Color.BLUE)
        gains = {e.cell: e.total_gain for e in analysis.evaluations}

        assert analysis.max_gain == 4320
        assert analysis.tie_count == 1
        assert gains["a1"] == gains["c3"] == 3240
        assert gains["a2"] == gains["b3"] == 2160

    @pytest.mark.asyncio
    async def test_completes_own_line(self, engine, two_blue_fishermen):
        """Two blue fishermen on column a: the third one goes on a3."""
        assert await engine.select_best_move(two_blue_fishermen, Icon.FISHERMAN, Color.BLUE) == "a3"

        analysis = engine.analyze(two_blue_fishermen, Icon.FISHERMAN, Color.BLUE)
        gains = {e.cell: e.total_gain for e in analysis.evaluations}
        assert gains["a3"] == 41040
        assert gains["b2"] == 15120

    @pytest.mark.asyncio
    async def test_breaks_opponent_line(self, engine, two_red_fish):
        """Capturing a red fish beats blocking the empty third cell."""
        assert await engine.select_best_move(two_red_fish, Icon.FISHERMAN, Color.BLUE) == "a1"

        ranking = [(e.cell, e.total_gain) for e in engine.analyze(two_red_fish, Icon.FISHERMAN, Color.BLUE).evaluations]
        assert ranking[:3] == [("a1", 12960), ("a2", 10800), ("a3", 9720)]

    @pytest.mark.asyncio
    async def test_forfeit(self, engine):
        """No legal cell: None, and nothing is counted as an error."""
        board = board_from_pieces({cell: ("fly", "red") for cell in CELLS})

        assert await engine.select_best_move(board, Icon.FISHERMAN, Color.BLUE) is None
        assert engine.get_error_stats().total_errors == 0

        analysis = engine.analyze(board, Icon.FISHERMAN, Color.BLUE)
        assert not analysis.has_legal_moves
        assert analysis.best_cell is None

    @pytest.mark.asyncio
    async def test_invalid_board_falls_back(self, engine):
        """An icon without a color: fallback answers, one error is counted."""
        raw = board_to_dict(empty_board())
        raw["a1"] = {"icon": "fisherman", "color": None}

        assert await engine.select_best_move(raw, "fish", "blue") == "b2"

        stats = engine.get_error_stats()
        assert stats.by_kind[ErrorKind.INVALID_BOARD] == 1
        assert stats.total_errors == 1

    @pytest.mark.asyncio
    async def test_unknown_roll(self, engine, empty_board):
        assert await engine.select_best_move(empty_board, "dragon", "blue") is None
        assert engine.get_error_stats().by_kind[ErrorKind.INVALID_BOARD] == 1

    @pytest.mark.asyncio
    async def test_table_not_loaded(self, empty_board, two_blue_fishermen):
        """Before initialize() the fallback answers; afterwards the engine does."""
        wizard = MoveEvaluator(table=StateValueTable(), rng=random.Random(0))

        assert not wizard.is_ready()
        assert await wizard.select_best_move(two_blue_fishermen, "fisherman", "blue") == "b2"
        assert wizard.get_error_stats().by_kind[ErrorKind.TABLE_NOT_LOADED] == 1

        await wizard.initialize()

        assert wizard.is_ready()
        assert await wizard.select_best_move(two_blue_fishermen, "fisherman", "blue") == "a3"


class TestSelectionProperties:
    """Tests for invariants of every answer."""

    @pytest.mark.asyncio
    async def test_answer_is_legal(self, engine):
        for pieces in SAMPLE_POSITIONS:
            board = board_from_pieces(pieces)
            for icon in Icon:
                cell = await engine.select_best_move(board, icon, Color.RED)
                legal = legal_cells(icon, board)
                if legal:
                    assert cell in legal
                else:
                    assert cell is None

    @pytest.mark.asyncio
    async def test_answer_reaches_max_gain(self, engine):
        for pieces in SAMPLE_POSITIONS:
            board = board_from_pieces(pieces)
            analysis = engine.analyze(board, Icon.FISH, Color.BLUE)
            if not analysis.has_legal_moves:
                continue
            cell = await engine.select_best_move(board, Icon.FISH, Color.BLUE)
            assert cell in analysis.tied_cells

    @pytest.mark.asyncio
    async def test_board_not_mutated(self, engine, two_red_fish):
        raw = board_to_dict(two_red_fish)
        snapshot = copy.deepcopy(raw)

        await engine.select_best_move(raw, Icon.FISHERMAN, Color.BLUE)
        engine.analyze(raw, Icon.FISHERMAN, Color.BLUE)

        assert raw == snapshot


class TestTieBreak:
    """Tests for the random choice among equal moves."""

    def test_four_corners_tie(self, engine, blue_fisherman_center):
        analysis = engine.analyze(blue_fisherman_center, Icon.FISHERMAN, Color.BLUE)

        assert analysis.tie_count == 4
        assert analysis.tied_cells == ["a1", "a3", "c1", "c3"]
        assert analysis.max_gain == 8640

    @pytest.mark.asyncio
    async def test_same_seed_same_choices(self, table, blue_fisherman_center):
        first = MoveEvaluator(table=table, rng=random.Random(7))
        second = MoveEvaluator(table=table, rng=random.Random(7))

        picks_first = [await first.select_best_move(blue_fisherman_center, "fisherman", "blue") for _ in range(10)]
        picks_second = [await second.select_best_move(blue_fisherman_center, "fisherman", "blue") for _ in range(10)]

        assert picks_first == picks_second
        assert set(picks_first) <= set(CORNERS)

    @pytest.mark.asyncio
    async def test_every_corner_reachable(self, table, blue_fisherman_center):
        picks = set()
        for seed in range(200):
            wizard = MoveEvaluator(table=table, rng=random.Random(seed))
            picks.add(await wizard.select_best_move(blue_fisherman_center, "fisherman", "blue"))

        assert picks == set(CORNERS)


class TestCacheEquivalence:
    """The cache never changes an answer."""

    @pytest.mark.asyncio
    async def test_enabled_and_disabled_agree(self, table):
        cached = MoveEvaluator(table=table, cache=EvaluationCache(), rng=random.Random(3))
        uncached = MoveEvaluator(table=table, cache=EvaluationCache(enabled=False), rng=random.Random(3))
        tiny = MoveEvaluator(table=table, cache=EvaluationCache(max_size=1), rng=random.Random(3))

        for pieces in SAMPLE_POSITIONS:
            board = board_from_pieces(pieces)
            for icon in Icon:
                expected = await uncached.select_best_move(board, icon, Color.BLUE)
                assert await cached.select_best_move(board, icon, Color.BLUE) == expected
                assert await tiny.select_best_move(board, icon, Color.BLUE) == expected

        assert uncached.cache_stats()["evaluations"]["size"] == 0

    @pytest.mark.asyncio
    async def test_cold_and_warm_agree(self, engine, two_blue_fishermen):
        cold = await engine.select_best_move(two_blue_fishermen, "fisherman", "blue")
        warm = await engine.select_best_move(two_blue_fishermen, "fisherman", "blue")

        assert cold == warm == "a3"
        assert engine.cache_stats()["evaluations"]["hits"] == 7

    @pytest.mark.asyncio
    async def test_clear_cache(self, engine, empty_board):
        await engine.select_best_move(empty_board, "fish", "red")
        assert engine.cache_stats()["evaluations"]["size"] == 9

        engine.clear_cache()

        assert engine.cache_stats()["evaluations"]["size"] == 0
        assert await engine.select_best_move(empty_board, "fish", "red") == "b2"


class TestFailures:
    """Tests for guarded failures inside the evaluation."""

    @pytest.mark.asyncio
    async def test_timeout_uses_fallback(self, table, two_blue_fishermen, monkeypatch):
        """A slow evaluation is abandoned for the fallback cell."""
        wizard = MoveEvaluator(table=table, guard=FailureGuard(timeout_ms=5), rng=random.Random(0))
        original = wizard.line_evaluator.total_gain

        def slow_total_gain(*args, **kwargs):
            time.sleep(0.02)
            return original(*args, **kwargs)

        monkeypatch.setattr(wizard.line_evaluator, "total_gain", slow_total_gain)

        assert await wizard.select_best_move(two_blue_fishermen, "fisherman", "blue") == "b2"
        assert wizard.get_error_stats().by_kind[ErrorKind.TIMEOUT] == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_uses_fallback(self, engine, two_blue_fishermen, monkeypatch, caplog):
        def broken(*args, **kwargs):
            raise RuntimeError("corrupted evaluator")

        monkeypatch.setattr(engine.line_evaluator, "total_gain", broken)

        with caplog.at_level(logging.ERROR, logger="piscari"):
            assert await engine.select_best_move(two_blue_fishermen, "fisherman", "blue") == "b2"

        assert engine.get_error_stats().by_kind[ErrorKind.UNEXPECTED] == 1
        assert "corrupted evaluator" in caplog.text

    @pytest.mark.asyncio
    async def test_error_frequency(self, engine):
        for _ in range(5):
            await engine.select_best_move({"a1": None}, "fish", "red")

        assert engine.is_error_too_frequent(ErrorKind.INVALID_BOARD)

        engine.reset_error_stats()

        assert not engine.is_error_too_frequent(ErrorKind.INVALID_BOARD)

    @pytest.mark.asyncio
    async def test_slow_move_warning(self, table, empty_board, caplog):
        wizard = MoveEvaluator(table=table, slow_move_ms=-1)

        with caplog.at_level(logging.WARNING, logger="piscari"):
            await wizard.select_best_move(empty_board, "fly", "blue")

        assert "took" in caplog.text


class TestDiagnostics:
    """Tests for analysis helpers."""

    def test_analyze_rejects_bad_board(self, engine):
        with pytest.raises(InvalidBoardError):
            engine.analyze({"a1": None}, Icon.FISH, Color.RED)

    def test_analyze_requires_table(self, empty_board):
        with pytest.raises(ValueTableNotLoadedError):
            MoveEvaluator(table=StateValueTable()).analyze(empty_board, Icon.FISH, Color.RED)

    def test_evaluate_all_sorted(self, engine, empty_board):
        evaluations = engine.evaluate_all(["a2", "a1", "b2"], Icon.FISH, Color.RED, empty_board)

        assert [e.cell for e in evaluations] == ["b2", "a1", "a2"]

    def test_evaluate_move_skips_cache(self, engine, empty_board):
        evaluation = engine.evaluate_move("c1", Icon.FLY, Color.BLUE, empty_board)

        assert evaluation.total_gain == 3240
        assert engine.cache_stats()["evaluations"]["size"] == 0

    def test_strategy_stats(self, engine, empty_board):
        stats = engine.strategy_stats(empty_board, Icon.FISHERMAN, Color.RED)

        assert stats.total_legal_moves == 9
        assert stats.positive_gain_moves == 9
        assert stats.best_gain == 4320
        assert stats.worst_gain == 2160
        assert stats.average_gain == pytest.approx((4320 + 4 * 3240 + 4 * 2160) / 9)

    def test_fallback_move(self, engine, two_blue_fishermen):
        assert engine.fallback_move(two_blue_fishermen, Icon.FISHERMAN) == "b2"


class TestConfiguration:
    """Tests for settings-driven construction."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PISCARI_TIMEOUT_MS", "250")
        monkeypatch.setenv("PISCARI_CACHE_ENABLED", "false")
        monkeypatch.setenv("PISCARI_CACHE_SIZE", "64")
        monkeypatch.setenv("PISCARI_LOG_LEVEL", "debug")

        settings = EngineSettings.from_env()

        assert settings.timeout_ms == 250
        assert settings.cache_enabled is False
        assert settings.cache_size == 64
        assert settings.log_level == "DEBUG"

    def test_invalid_env_int(self, monkeypatch):
        monkeypatch.setenv("PISCARI_TIMEOUT_MS", "soon")

        with pytest.raises(ValueError):
            EngineSettings.from_env()

    @pytest.mark.asyncio
    async def test_from_settings(self, tmp_path):
        path = tmp_path / "values.json"
        path.write_text('[{"state_id": 0, "blue": 0, "red": 0}]', encoding="utf-8")
        settings = EngineSettings(timeout_ms=300, cache_size=16, cache_enabled=False, value_table_path=str(path))

        wizard = MoveEvaluator.from_settings(settings, rng=random.Random(1))
        await wizard.initialize()

        assert wizard.guard.timeout_ms == 300
        assert wizard.cache.max_size == 16
        assert not wizard.cache.enabled
        assert wizard.table.state_count == 1
