"""
Game Session

State machine for one game (or analysis session) against a UCI engine.

The session is touched by two threads:
    - the caller (GUI) thread: start_new_game(), submit_user_move()
    - the reader thread: on_best_move(), on_best_move_with_ponder(), on_info()

All state lives behind a single re-entrant lock. Commands that must reach
the engine in a fixed order relative to a state change are written while
the lock is held. The lock is never held while waiting for readyok, so the
reader can always deliver it.

States:
    IDLE            no game started yet
    NEW_GAME        history cleared, waiting for the human's first move
    AWAITING_REPLY  a timed "go" is outstanding
    AWAITING_USER   the engine moved, waiting for the human
    PONDERING       the engine searches on its predicted reply
    ANALYSING       unbounded "go infinite" search

Listener and clock callbacks are made without the lock held, from whichever
thread caused them (the reader thread for engine moves and search info).
The GUI may hold its own lock while calling into the session, and the clock
takes that lock when driven from the reader thread.
"""

import logging
import threading
from enum import Enum
from functools import partial
from typing import Callable, List, Optional, Tuple

import chess

from uci_adapter.engine.channel import CommandChannel
from uci_adapter.engine.rendezvous import ReadyRendezvous
from uci_adapter.game.interfaces import Clock, GameListener
from uci_adapter.game.notation import pv_to_san
from uci_adapter.protocol.parser import SearchInfo, format_centipawns, format_mate, format_nps

logger = logging.getLogger(__name__)


POSITION_PREFIX = "position startpos"


class Mode(Enum):
    """Who the engine plays for."""
    ENGINE_WHITE = 0
    ENGINE_BLACK = 1
    ANALYSIS = 2


class SessionState(Enum):
    """What the session is waiting for."""
    IDLE = 0
    NEW_GAME = 1
    AWAITING_REPLY = 2
    AWAITING_USER = 3
    PONDERING = 4
    ANALYSING = 5


def promotion_piece(move: str) -> Optional[chess.PieceType]:
    """
    Promotion piece carried by a coordinate move token.

    UCI appends the promotion piece as a lowercase fifth character
    (e7e8q). The character is upper-cased and read as a piece symbol.

    Args:
        move: Move token, e.g. "e2e4" or "a7a8n"

    Returns:
        python-chess piece type, or None for tokens of 4 characters or
        fewer and for unknown piece letters
    """
    if len(move) <= 4:
        return None

    symbol = move[4].upper()
    try:
        return chess.Piece.from_symbol(symbol).piece_type
    except ValueError:
        logger.debug(f"Unknown promotion piece '{move[4]}' in move {move}")
        return None


def score_sign(mode: Mode, side_to_move: int) -> int:
    """
    Sign applied to engine scores before display.

    Engine scores are relative to the engine's side. The display shows
    them from the human's point of view: flipped when the engine plays
    Black, and in analysis flipped whenever Black is to move.
    """
    if mode == Mode.ENGINE_BLACK:
        return -1
    if mode == Mode.ANALYSIS and side_to_move == 1:
        return -1
    return 1


def display_score(info: SearchInfo, mode: Mode, side_to_move: int) -> Optional[str]:
    """Format the score of an info snapshot, or None if it has none."""
    if not info.has_score:
        return None
    sign = score_sign(mode, side_to_move)
    if info.score_cp is not None:
        return format_centipawns(sign * info.score_cp)
    return format_mate(sign * info.score_mate)


class GameSession:
    """
    Move history, side to move and search mode for one engine.

    Attributes:
        channel: Command channel to the engine
        rendezvous: isready/readyok handshake
        clock: Game clock (optional)
        listener: GUI notifications (optional)
        engine_name: Engine name shown to the GUI at game start
    """

    def __init__(
        self,
        channel: CommandChannel,
        rendezvous: ReadyRendezvous,
        clock: Optional[Clock] = None,
        listener: Optional[GameListener] = None,
        engine_name: str = "",
    ):
        self.channel = channel
        self.rendezvous = rendezvous
        self.clock = clock
        self.listener = listener
        self.engine_name = engine_name

        self._lock = threading.RLock()
        self._mode: Optional[Mode] = None
        self._state = SessionState.IDLE
        self._history: List[str] = []
        self._ply = 1
        self._side_to_move = 0
        self._pondering = False
        self._analysing = False
        self._ponder_move: Optional[str] = None
        self._discard_best_moves = False
        self._engine_available = True

        self.last_info: Optional[SearchInfo] = None
        self.last_move: Optional[str] = None
        self.promotion: Optional[chess.PieceType] = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def mode(self) -> Optional[Mode]:
        return self._mode

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def history(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._history)

    @property
    def ply(self) -> int:
        return self._ply

    @property
    def side_to_move(self) -> int:
        return self._side_to_move

    @property
    def pondering(self) -> bool:
        return self._pondering

    @property
    def analysing(self) -> bool:
        return self._analysing

    @property
    def engine_available(self) -> bool:
        return self._engine_available

    def position_command(self, extra_move: Optional[str] = None) -> str:
        """
        Build the position command for the current history.

        Args:
            extra_move: Move appended after the history (the ponder move)

        Returns:
            "position startpos" or "position startpos moves e2e4 ..."
        """
        with self._lock:
            moves = list(self._history)
        if extra_move:
            moves.append(extra_move)
        if not moves:
            return POSITION_PREFIX
        return f"{POSITION_PREFIX} moves {' '.join(moves)}"

    def go_command(self) -> str:
        """Timed search command with both clocks' remaining time."""
        if self.clock is None:
            return "go wtime 0 btime 0"
        return f"go wtime {self.clock.remaining_time(0)} btime {self.clock.remaining_time(1)}"

    # ------------------------------------------------------------------
    # Caller-side operations
    # ------------------------------------------------------------------

    def start_new_game(self, time_budget: int, mode: Mode):
        """
        Reset the session and start a game or an analysis.

        Args:
            time_budget: Time per side, passed through to the GUI
            mode: ENGINE_WHITE, ENGINE_BLACK or ANALYSIS
        """
        logger.info(f"Start UCI game, mode: {mode.name}")

        with self._lock:
            self._engine_available = True
            if self._state == SessionState.AWAITING_REPLY:
                # readyok arrives after any bestmove of the search being stopped
                self._discard_best_moves = True
            if self._pondering or self._analysing or self._discard_best_moves:
                self.channel.send("stop")
        self._wait_for_engine()

        with self._lock:
            self._discard_best_moves = False
            self._mode = mode
            self._history.clear()
            self._ply = 1
            self._side_to_move = 0
            self._pondering = False
            self._analysing = False
            self._ponder_move = None
            self.last_info = None
            self.last_move = None
            self.promotion = None
            self._state = SessionState.NEW_GAME
            self.channel.send("ucinewgame")
        self._wait_for_engine()

        relation = None
        with self._lock:
            if mode == Mode.ENGINE_WHITE:
                relation = -1
                self._state = SessionState.AWAITING_REPLY
                self.channel.send(self.position_command())
                self.channel.send(self.go_command())
            elif mode == Mode.ENGINE_BLACK:
                relation = 1
            elif mode == Mode.ANALYSIS:
                self._analysing = True
                self._state = SessionState.ANALYSING
                self.channel.send(self.position_command())
                self.channel.send("go infinite")

        if relation is not None and self.listener:
            self.listener.on_game_started(self.engine_name, time_budget, relation)

    def submit_user_move(self, move: str):
        """
        Play the human's move and let the engine answer (or re-analyse).

        Args:
            move: Coordinate move token, e.g. "e2e4"

        Raises:
            RuntimeError: If no game has been started
        """
        logger.debug(f"User move to UCI: '{move}'")

        with self._lock:
            if self._mode is None:
                raise RuntimeError("No game in progress, call start_new_game() first")
            clock_action = self._append_move(move, lock_threads=False)
            if self._pondering or self._mode == Mode.ANALYSIS:
                self.channel.send("stop")
        self._drive_clock(clock_action)
        self._wait_for_engine()

        with self._lock:
            self.channel.send(self.position_command())
            if self._mode == Mode.ANALYSIS:
                self._analysing = True
                self._state = SessionState.ANALYSING
                self.channel.send("go infinite")
            else:
                self._state = SessionState.AWAITING_REPLY
                self.channel.send(self.go_command())

    def stop(self) -> bool:
        """
        Stop a running ponder or analysis search.

        The bestmove the engine answers with is discarded as usual.

        Returns:
            True if a stop command was sent
        """
        with self._lock:
            if not (self._pondering or self._analysing):
                return False
            self._analysing = False
            return self.channel.send("stop")

    def mark_engine_unavailable(self, reason: str):
        """Flag the engine as gone and tell the GUI (once)."""
        with self._lock:
            if not self._engine_available:
                return
            self._engine_available = False

        logger.error(f"UCI engine unavailable: {reason}")
        if self.listener:
            self.listener.on_engine_unavailable(reason)

    # ------------------------------------------------------------------
    # Reader-side events
    # ------------------------------------------------------------------

    def on_best_move(self, move: str):
        """Handle ``bestmove MOVE``."""
        with self._lock:
            if self._skip_best_move(move):
                return
            promotion, clock_action = self._accept_engine_move(move)

        self._drive_clock(clock_action)
        if self.listener:
            self.listener.on_engine_move(move, promotion)

    def on_best_move_with_ponder(self, move: str, ponder_move: str):
        """
        Handle ``bestmove MOVE ponder PONDER`` and start pondering.

        The GUI hears about the move before the ponder search starts. If
        the human has moved in the meantime, there is nothing left to
        ponder on and the search is not started.
        """
        with self._lock:
            if self._skip_best_move(move):
                return
            promotion, clock_action = self._accept_engine_move(move)
            ply = self._ply

        self._drive_clock(clock_action)
        if self.listener:
            self.listener.on_engine_move(move, promotion)

        with self._lock:
            if self._ply != ply or self._state != SessionState.AWAITING_USER:
                logger.debug(f"Position changed, not pondering on {ponder_move}")
                return
            logger.debug(f"Pondering on {ponder_move}")
            self._pondering = True
            self._ponder_move = ponder_move
            self._state = SessionState.PONDERING
            self.channel.send(self.position_command(extra_move=ponder_move))
            self.channel.send("go ponder")

    def on_info(self, info: SearchInfo):
        """Publish score, principal variation and speed of a search update."""
        with self._lock:
            self.last_info = info
            mode = self._mode
            side_to_move = self._side_to_move
            root = list(self._history)
            if self._pondering and self._ponder_move:
                root.append(self._ponder_move)

        if self.listener is None:
            return

        if mode is not None:
            score = display_score(info, mode, side_to_move)
            if score is not None:
                self.listener.set_score(score)

        if info.pv:
            self.listener.set_best_line(" ".join(info.pv), pv_to_san(root, info.pv))

        if info.nps is not None:
            self.listener.set_nodes_per_second(format_nps(info.nps))

    # ------------------------------------------------------------------
    # Internals (lock held)
    # ------------------------------------------------------------------

    def _skip_best_move(self, move: str) -> bool:
        # A bestmove after a ponder or analysis search answers a position
        # that is no longer current.
        if self._pondering:
            logger.debug(f"Skip pondering best move: {move}")
            self._pondering = False
            self._ponder_move = None
            if self._state == SessionState.PONDERING:
                self._state = SessionState.AWAITING_USER
            return True

        if self._mode == Mode.ANALYSIS:
            logger.debug(f"Skip analysis best move: {move}")
            return True

        if self._discard_best_moves:
            logger.debug(f"Skip best move of abandoned game: {move}")
            return True

        if self._mode is None:
            logger.warning(f"Best move {move} received with no game in progress")
            return True

        return False

    def _accept_engine_move(self, move: str):
        promotion = promotion_piece(move)
        if promotion is not None:
            logger.debug(f"Handling promotion from engine {move[4]} -> {chess.piece_name(promotion)}")
            self.promotion = promotion
        clock_action = self._append_move(move, lock_threads=True)
        self.last_move = move
        self._state = SessionState.AWAITING_USER
        return promotion, clock_action

    def _append_move(self, move: str, lock_threads: bool) -> Optional[Callable[[], None]]:
        """Record a move; returns the clock call to make once the lock is released."""
        self._history.append(move)
        self._side_to_move = 1 - self._side_to_move

        clock_action = None
        if self.clock is not None:
            if self._ply == 1:
                clock_action = partial(self.clock.start_one, self._side_to_move)
            else:
                clock_action = partial(
                    self.clock.start_one_stop_other, self._side_to_move, lock_threads
                )

        self._ply += 1
        logger.debug(f"append_move: {self.position_command()}")
        return clock_action

    @staticmethod
    def _drive_clock(clock_action: Optional[Callable[[], None]]):
        if clock_action is not None:
            clock_action()

    def _wait_for_engine(self) -> bool:
        ready = self.rendezvous.wait_for_engine_ready()
        if not ready:
            self.mark_engine_unavailable("no readyok answer, engine crashed?")
        return ready
