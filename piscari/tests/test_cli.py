"""
Tests for the command-line interface.
"""

import json

import pytest

from ..cli import main, parse_board


class TestParseBoard:
    """Tests for the cell=icon:color board syntax."""

    def test_occupied_cells(self):
        board = parse_board("a1=fish:red, B2=fly:blue")

        assert board["a1"] == {"icon": "fish", "color": "red"}
        assert board["b2"] == {"icon": "fly", "color": "blue"}
        assert board["c3"] is None
        assert len(board) == 9

    def test_empty(self):
        assert all(value is None for value in parse_board("").values())

    def test_syntax_error(self):
        with pytest.raises(ValueError):
            parse_board("a1fish")
        with pytest.raises(ValueError):
            parse_board("a1=fish")


class TestCommands:
    """Tests for CLI commands."""

    def test_suggest(self, capsys):
        main([
            "suggest",
            "--board", "a1=fisherman:blue,a2=fisherman:blue",
            "--icon", "fisherman",
            "--color", "blue",
            "--seed", "1",
        ])

        assert "on a3" in capsys.readouterr().out

    def test_suggest_forfeit(self, capsys):
        board = ",".join(f"{c}{r}=fly:red" for c in "abc" for r in "123")

        main(["suggest", "--board", board, "--icon", "fisherman", "--color", "blue"])

        assert "turn forfeit" in capsys.readouterr().out

    def test_suggest_invalid_board_reports_error(self, capsys):
        main(["suggest", "--board", "a1=dragon:blue", "--icon", "fish", "--color", "red"])

        out = capsys.readouterr().out
        assert "on b2" in out
        assert "invalid_board: 1" in out

    def test_analyze(self, capsys):
        main(["analyze", "--board", "a1=fish:red,a2=fish:red", "--icon", "fisherman", "--color", "blue"])

        out = capsys.readouterr().out
        assert "a1: total gain +12960" in out
        assert "Wizard plays: a1" in out

    def test_analyze_invalid_board(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["analyze", "--board", "a1=dragon:blue", "--icon", "fish", "--color", "red"])

        assert exc_info.value.code == 1
        assert "unknown icon 'dragon'" in capsys.readouterr().out

    def test_bad_board_syntax(self, capsys):
        with pytest.raises(SystemExit):
            main(["suggest", "--board", "a1:fish", "--icon", "fish", "--color", "red"])

        assert "Expected cell=icon:color" in capsys.readouterr().out

    def test_table(self, capsys):
        main(["table", "--state", "100 000"])

        out = capsys.readouterr().out
        assert "States: 84" in out
        assert "State 100 000: blue +1080, red -1080" in out

    def test_table_unknown_state(self, capsys):
        with pytest.raises(SystemExit):
            main(["table", "--state", "400000"])

        assert "not in the table" in capsys.readouterr().out

    def test_custom_table(self, tmp_path, capsys):
        path = tmp_path / "values.json"
        path.write_text(json.dumps([{"state_id": 0, "blue": 0, "red": 0}]), encoding="utf-8")

        main(["--table", str(path), "table"])

        assert "States: 1" in capsys.readouterr().out

    def test_missing_table(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["--table", str(tmp_path / "missing.json"), "table"])

        assert "Error:" in capsys.readouterr().out

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit):
            main([])
