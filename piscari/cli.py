"""
Piscari CLI - Command-line interface for the wizard.

Usage:
    piscari suggest --board a1=fish:red,b2=fly:blue --icon fisherman --color blue
    piscari analyze --board a1=fish:red --icon fly --color red
    piscari table [--state "100 000"]

Boards list occupied cells only, as cell=icon:color pairs separated by
commas. Unlisted cells are empty.
"""

import argparse
import asyncio
import random
import sys

from .config import EngineSettings, configure_logging
from .engine_core.board import CELLS


def parse_board(text):
    """
    Parse 'a1=fish:red,b2=fly:blue' into the raw board shape.

    Raises ValueError on syntax errors. Cell names and values are not
    checked here; the engine validates them.
    """
    board = {cell: None for cell in CELLS}
    if not text:
        return board

    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        cell, sep, piece = item.partition("=")
        icon, sep2, color = piece.partition(":")
        if not sep or not sep2:
            raise ValueError(f"Expected cell=icon:color, got {item!r}")
        board[cell.strip().lower()] = {"icon": icon.strip(), "color": color.strip()}
    return board


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Piscari - Wizard opponent engine",
        prog="piscari",
    )
    parser.add_argument("--table", help="Path to a state value document (bundled if omitted)")
    parser.add_argument("--log-level", help="Logging level (default from PISCARI_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Suggest command
    suggest_parser = subparsers.add_parser("suggest", help="Choose the wizard's cell")
    _add_position_arguments(suggest_parser)
    suggest_parser.add_argument("--seed", type=int, help="Seed for the tie-break")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Rank every legal cell")
    _add_position_arguments(analyze_parser)
    analyze_parser.add_argument("--seed", type=int, help="Seed for the tie-break")

    # Table command
    table_parser = subparsers.add_parser("table", help="Inspect the state value table")
    table_parser.add_argument("--state", help="State id to look up, e.g. '100 000'")

    args = parser.parse_args(argv)

    settings = EngineSettings.from_env()
    if args.table:
        settings.value_table_path = args.table
    if args.log_level:
        settings.log_level = args.log_level.upper()
    configure_logging(settings.log_level)

    if args.command == "suggest":
        return cmd_suggest(args, settings)
    elif args.command == "analyze":
        return cmd_analyze(args, settings)
    elif args.command == "table":
        return cmd_table(args, settings)
    else:
        parser.print_help()
        sys.exit(1)


def _add_position_arguments(subparser):
    subparser.add_argument("--board", default="", help="Occupied cells, e.g. a1=fish:red,b2=fly:blue")
    subparser.add_argument("--icon", required=True, help="Rolled icon: fisherman, fish or fly")
    subparser.add_argument("--color", required=True, help="Wizard color: blue or red")


def _build_engine(args, settings):
    from .strategy.move_evaluator import MoveEvaluator

    seed = getattr(args, "seed", None)
    rng = random.Random(seed) if seed is not None else None
    return MoveEvaluator.from_settings(settings, rng=rng)


def _read_board(args):
    try:
        return parse_board(args.board)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


def cmd_suggest(args, settings):
    """Choose the wizard's cell."""
    from .errors import ValueTableLoadError

    board = _read_board(args)
    engine = _build_engine(args, settings)

    async def run():
        try:
            await engine.initialize()
        except ValueTableLoadError as e:
            print(f"Warning: {e}; using fallback heuristic")
        return await engine.select_best_move(board, args.icon, args.color)

    cell = asyncio.run(run())
    if cell is None:
        print(f"No legal cell for {args.color} {args.icon}: turn forfeit")
    else:
        print(f"Wizard plays {args.color} {args.icon} on {cell}")

    stats = engine.get_error_stats()
    if stats.total_errors:
        print("\nErrors:")
        for kind, count in stats.by_kind.items():
            if count:
                print(f"  - {kind.value}: {count}")
    return 0


def cmd_analyze(args, settings):
    """Rank every legal cell."""
    from .errors import InvalidBoardError, ValueTableLoadError
    from .strategy.formatting import describe_evaluation, format_board

    board = _read_board(args)
    engine = _build_engine(args, settings)

    try:
        asyncio.run(engine.initialize())
    except ValueTableLoadError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        analysis = engine.analyze(board, args.icon, args.color)
    except InvalidBoardError as e:
        print("Invalid board:")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)

    print(format_board(engine.guard.validate(board)))
    print()

    if not analysis.has_legal_moves:
        print(f"No legal cell for {args.color} {args.icon}: turn forfeit")
        return 0

    for evaluation in analysis.evaluations:
        print(describe_evaluation(evaluation))

    print(f"\nBest gain: {analysis.max_gain:+d} ({analysis.tie_count} cell(s))")
    print(f"Wizard plays: {analysis.best_cell}")
    return 0


def cmd_table(args, settings):
    """Inspect the state value table."""
    from .errors import ValueTableLoadError
    from .strategy.formatting import format_state_id
    from .strategy.value_table import StateValueRecord, StateValueTable, file_source

    source = file_source(settings.value_table_path) if settings.value_table_path else None
    table = StateValueTable(source)
    try:
        asyncio.run(table.load())
    except ValueTableLoadError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"States: {table.state_count}")
    if not args.state:
        return 0

    try:
        state_id = StateValueRecord.model_validate({"state_id": args.state, "blue": 0, "red": 0}).state_id
    except ValueError:
        print(f"Error: Invalid state id {args.state!r}")
        sys.exit(1)

    if not table.has_state(state_id):
        print(f"State {format_state_id(state_id)} is not in the table")
        sys.exit(1)

    values = table.values_for(state_id)
    print(f"State {format_state_id(state_id)}: blue {values.blue:+d}, red {values.red:+d}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
