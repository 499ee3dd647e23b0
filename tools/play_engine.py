#!/usr/bin/env python3
"""
CLI tool for playing or analysing against a UCI engine in the terminal.

Usage:
    python tools/play_engine.py --engine /usr/bin/stockfish --mode black --time 300

    python tools/play_engine.py --mode analysis --show-info

Moves are typed in coordinate notation (e2e4, e7e8q). Type "quit" to exit.
The adapter does not check legality; the engine will ignore illegal moves.
"""

import argparse
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import chess

from uci_adapter import Clock, EngineAdapter, EngineConfig, GameListener, Mode
from uci_adapter.utils.log import setup_logger

MODES = {
    "white": Mode.ENGINE_WHITE,
    "black": Mode.ENGINE_BLACK,
    "analysis": Mode.ANALYSIS,
}


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure logging."""
    if log_file:
        setup_logger(debug=verbose, log_file=Path(log_file))
        return
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class WallClock(Clock):
    """Two-sided chess clock on the monotonic wall clock."""

    def __init__(self, seconds_per_side: int):
        self._remaining = [seconds_per_side * 1000.0, seconds_per_side * 1000.0]
        self._running: Optional[int] = None
        self._started_at = 0.0
        self._lock = threading.Lock()

    def remaining_time(self, side: int) -> int:
        with self._lock:
            remaining = self._remaining[side]
            if self._running == side:
                remaining -= (time.monotonic() - self._started_at) * 1000
            return max(0, int(remaining))

    def start_one(self, side: int):
        with self._lock:
            self._running = side
            self._started_at = time.monotonic()

    def start_one_stop_other(self, side: int, lock_threads: bool):
        with self._lock:
            if self._running is not None:
                elapsed = (time.monotonic() - self._started_at) * 1000
                self._remaining[self._running] -= elapsed
            self._running = side
            self._started_at = time.monotonic()


class ConsoleListener(GameListener):
    """Prints engine moves (in SAN where possible) and search updates."""

    def __init__(self, show_info: bool = False):
        self.show_info = show_info
        self.board = chess.Board()

    def on_game_started(self, engine_name: str, time_budget: int, relation: int):
        self.board.reset()
        side = "White" if relation == -1 else "Black"
        print(f"New game against {engine_name or 'engine'} ({side}), {time_budget}s per side")

    def record_user_move(self, move: str):
        try:
            self.board.push_uci(move)
        except ValueError:
            print(f"Note: {move} is not legal here, the engine may ignore it")

    def on_engine_move(self, move: str, promotion):
        text = move
        try:
            parsed = chess.Move.from_uci(move)
            text = self.board.san(parsed)
            self.board.push(parsed)
        except ValueError:
            pass
        suffix = f" (promotes to {chess.piece_name(promotion)})" if promotion else ""
        print(f"\nEngine plays {text}{suffix}")
        print("> ", end="", flush=True)

    def set_score(self, score: str):
        if self.show_info:
            print(f"  score {score}")

    def set_best_line(self, line: str, san: Optional[str]):
        if self.show_info:
            print(f"  line  {san or line}")

    def set_nodes_per_second(self, nps: str):
        if self.show_info:
            print(f"  speed {nps}")

    def on_engine_unavailable(self, reason: str):
        print(f"\nEngine unavailable: {reason}")


def play(args):
    """Run an interactive game."""
    config = EngineConfig(
        engine_path=Path(args.engine),
        threads=args.threads,
        hash_mb=args.hash,
        ponder=not args.no_ponder,
        skill_level=args.skill,
    )
    clock = WallClock(args.time)
    listener = ConsoleListener(show_info=args.show_info)

    with EngineAdapter(config, clock=clock, listener=listener) as engine:
        print(f"Connected to {engine.engine_name or args.engine}")
        engine.start_new_game(args.time, MODES[args.mode])

        while True:
            try:
                line = input("> ").strip()
            except EOFError:
                break
            if not line:
                continue
            if line == "quit":
                break
            listener.record_user_move(line)
            engine.submit_user_move(line)


def main():
    parser = argparse.ArgumentParser(
        description="Play or analyse against a UCI engine in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--engine",
        type=str,
        default="/usr/bin/stockfish",
        help="Path to the UCI engine binary",
    )
    parser.add_argument(
        "--mode",
        choices=sorted(MODES),
        default="black",
        help="Side the engine plays, or analysis",
    )
    parser.add_argument(
        "--time",
        type=int,
        default=300,
        help="Seconds per side",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=1,
        help="Engine Threads option",
    )
    parser.add_argument(
        "--hash",
        type=int,
        default=512,
        help="Engine Hash option in MB",
    )
    parser.add_argument(
        "--skill",
        type=int,
        default=0,
        help="Engine Skill Level option (0-20)",
    )
    parser.add_argument(
        "--no-ponder",
        action="store_true",
        help="Disable pondering",
    )
    parser.add_argument(
        "--show-info",
        action="store_true",
        help="Print score, best line and speed updates",
    )
    parser.add_argument(
        "--log-file",
        help="Write the log to this file instead of the console",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        play(args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\n\nError: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
