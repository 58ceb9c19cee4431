"""Command-line host for the bingo move advisor."""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import asdict
from typing import List, Optional, Sequence

import numpy as np
from loguru import logger

from .board import BingoBoard
from .config import EngineConfig, load_config
from .evaluator import recommend
from .rollout import compare_estimators, estimate_success_frequency, standard_error
from .session import BingoSession, Snapshot, TurnPhase

PLAY_HELP = "Enter a cell number, u = undo, r = reset, q = quit"


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def parse_cells(raw: str, cell_count: int) -> List[int]:
    """Parse comma-separated 1-based cell numbers into 0-based indices."""
    cells: List[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        number = int(part)
        if not 1 <= number <= cell_count:
            raise ValueError(f"Cell {number} is outside 1..{cell_count}")
        cells.append(number - 1)
    return cells


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Load the config file, then apply command-line overrides."""
    base = load_config(args.config)
    overrides = {
        "board_size": args.size,
        "max_moves": args.moves,
        "target_lines": args.target,
        "trials": args.trials,
        "seed": args.seed,
    }
    merged = asdict(base)
    if args.size is not None and args.moves is None:
        merged["max_moves"] = min(base.max_moves, args.size * args.size)
    merged.update({key: value for key, value in overrides.items() if value is not None})
    return EngineConfig.from_mapping(merged)


def render_board(snapshot: Snapshot) -> str:
    """Grid of cell numbers, ✓ for marked cells and * for the recommendation."""
    board = snapshot.board
    best = snapshot.recommendation.cell if snapshot.recommendation else None
    width = len(str(board.cell_count))
    rows = []
    for r in range(board.size):
        row = []
        for c in range(board.size):
            cell = r * board.size + c
            if board.occupied[cell]:
                text = "✓"
            elif cell == best:
                text = "*"
            else:
                text = str(cell + 1)
            row.append(text.rjust(width))
        rows.append(" ".join(row))
    return "\n".join(rows)


def render_status(snapshot: Snapshot, config: EngineConfig) -> str:
    turn = "your move" if snapshot.phase is TurnPhase.ADVISED else "external draw"
    return "\n".join(
        [
            render_board(snapshot),
            f"Moves: {snapshot.moves_made} / {config.max_moves} ({turn})",
            f"Lines: {len(snapshot.completed_lines)} / {config.target_lines}",
            snapshot.message,
        ]
    )


def play(config: EngineConfig, input_fn=input, output_fn=print, sleep_fn=time.sleep) -> None:
    """Interactive play-through loop."""
    session = BingoSession(config)
    snapshot = session.reset()
    output_fn(PLAY_HELP)
    output_fn(render_status(snapshot, config))

    while True:
        try:
            command = input_fn("> ").strip().lower()
        except EOFError:
            return

        if command in ("q", "quit"):
            return
        if command in ("u", "undo"):
            snapshot = session.undo()
        elif command in ("r", "reset"):
            snapshot = session.reset()
        else:
            try:
                cells = parse_cells(command, config.cell_count)
            except ValueError:
                output_fn(PLAY_HELP)
                continue
            if len(cells) != 1:
                output_fn(PLAY_HELP)
                continue
            snapshot = session.mark(cells[0])

        output_fn(render_status(snapshot, config))
        if snapshot.finished:
            sleep_fn(snapshot.reset_after or 0)
            snapshot = session.reset()
            output_fn(render_status(snapshot, config))


def cmd_recommend(args: argparse.Namespace, config: EngineConfig, parser) -> None:
    try:
        cells = parse_cells(args.cells, config.cell_count)
    except ValueError as e:
        parser.error(str(e))
    board = BingoBoard.from_cells(cells, config.board_size)
    if board.is_full():
        parser.error("Every cell is already marked")

    remaining = args.remaining
    if remaining is None:
        remaining = max(config.max_moves - board.occupied_count(), 0)

    rng = np.random.default_rng(config.seed)
    rec = recommend(board, remaining, config, rng)
    print(f"Recommendation: cell {rec.cell + 1} ({rec.tier.value})")
    print(f"  {rec.label}")
    if rec.line is not None:
        print(f"  Line: {rec.line}")
    else:
        print(f"  Score: {rec.score:g}")


def cmd_estimate(args: argparse.Namespace, config: EngineConfig, parser) -> None:
    try:
        cells = parse_cells(args.cells, config.cell_count)
    except ValueError as e:
        parser.error(str(e))
    board = BingoBoard.from_cells(cells, config.board_size)

    print(f"Bingo Board: {board.size}×{board.size}, {board.occupied_count()} marked")
    print(f"Moves remaining: {args.remaining}, target lines: {config.target_lines}")
    print()

    if args.compare:
        results = compare_estimators(
            board, args.remaining, config.target_lines, trials=config.trials, seed=config.seed
        )
        ro = results["rollout"]
        print(f"Rollout ({ro['trials']:,} trials):")
        print(f"  Probability: {ro['probability']:.6f} ± {ro['std_error']:.6f}")
        print(f"  95% CI: [{ro['95_ci'][0]:.6f}, {ro['95_ci'][1]:.6f}]")

        exact = results["exact"]
        if "error" in exact:
            print(f"\nExact enumeration: {exact['error']}")
            return
        print(f"\nExact enumeration ({exact['subsets']:,} fills):")
        print(f"  Probability: {exact['probability']:.6f} (exact)")
        print(f"  Within 2σ: {'✓' if results['within_2_std'] else '✗'}")
        return

    rng = np.random.default_rng(config.seed)
    prob = estimate_success_frequency(board, args.remaining, config.target_lines, config.trials, rng)
    std = standard_error(prob, config.trials)
    print(f"Rollout ({config.trials:,} trials):")
    print(f"  P(success) = {prob:.6f} ± {std:.6f}")
    print(f"  95% CI: [{prob - 1.96*std:.6f}, {prob + 1.96*std:.6f}]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recommend bingo moves using line heuristics and random rollouts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s play
  %(prog)s recommend --cells 1,7,13
  %(prog)s --trials 100000 estimate --cells 1,2,3 --remaining 4 --compare
        """,
    )
    parser.add_argument("--size", "-n", type=int, default=None, help="Board size (n×n). Default: 5")
    parser.add_argument("--moves", type=int, default=None, help="Move cap. Default: 16")
    parser.add_argument("--target", "-t", type=int, default=None, help="Target line count. Default: 4")
    parser.add_argument("--trials", type=int, default=None, help="Rollouts per evaluation. Default: 1000")
    parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--config", "-c", default=None, help="YAML configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("play", help="Play a session interactively")

    rec = sub.add_parser("recommend", help="Recommend a move for a board")
    rec.add_argument("--cells", default="", help="Marked cells as 1-based numbers, e.g. 1,7,13")
    rec.add_argument("--remaining", type=int, default=None, help="Moves remaining. Default: cap minus marked")

    est = sub.add_parser("estimate", help="Estimate the chance to reach the target")
    est.add_argument("--cells", default="", help="Marked cells as 1-based numbers")
    est.add_argument("--remaining", type=int, required=True, help="Random marks still to come")
    est.add_argument("--compare", action="store_true", help="Also compute the exact probability")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    if args.command == "play":
        play(config)
    elif args.command == "recommend":
        cmd_recommend(args, config, parser)
    elif args.command == "estimate":
        cmd_estimate(args, config, parser)


if __name__ == "__main__":
    main()
