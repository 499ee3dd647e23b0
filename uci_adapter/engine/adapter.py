"""
UCI Engine Adapter

Owns one engine subprocess and wires the pieces together:

    GameSession -> CommandChannel -> engine stdin
    engine stdout -> ReaderLoop -> Scanner -> dispatch() -> GameSession

Startup Sequence:
    1. Spawn the engine with stdin/stdout/stderr pipes
    2. Start the reader thread
    3. Send "uci", wait for "uciok" (id/option lines are recorded)
    4. Send the configured setoption commands
    5. isready / readyok

Shutdown sends "quit", waits for the process and joins the reader. A new
start() after close() spawns a fresh process with a fresh identity.
"""

import logging
import subprocess
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Dict, List, Optional

from uci_adapter.engine.channel import CommandChannel
from uci_adapter.engine.config import EngineConfig
from uci_adapter.engine.reader import ReaderLoop
from uci_adapter.engine.rendezvous import ReadyRendezvous
from uci_adapter.game.interfaces import Clock, GameListener
from uci_adapter.game.session import GameSession, Mode
from uci_adapter.protocol.parser import (
    OptionDeclaration,
    parse_best_move,
    parse_best_move_with_ponder,
    parse_info,
    parse_option,
)
from uci_adapter.protocol.scanner import EventKind, ScanEvent

logger = logging.getLogger(__name__)


class EngineError(RuntimeError):
    """The engine could not be started or used."""


class EngineHandshakeError(EngineError):
    """The engine never answered "uci" with "uciok"."""


@dataclass
class EngineIdentity:
    """What the engine told us about itself during the handshake."""

    name: str = ""
    author: str = ""
    options: Dict[str, OptionDeclaration] = field(default_factory=dict)


Launcher = Callable[[List[str], Path], subprocess.Popen]


def popen_engine(argv: List[str], cwd: Path) -> subprocess.Popen:
    """
    Spawn an engine with three independent pipes.

    Args:
        argv: Command line
        cwd: Working directory

    Returns:
        Process handle
    """
    return subprocess.Popen(
        argv,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=str(cwd),
    )


class EngineAdapter:
    """
    Client side of the UCI protocol for one engine process.

    Attributes:
        config: Engine configuration
        identity: Name, author and options announced by the engine
        session: Game state machine (None until start())
        process: Engine process handle (None when stopped)
        running: Liveness flag shared with the reader thread
        handshake_ok: Set once "uciok" has been received
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Clock] = None,
        listener: Optional[GameListener] = None,
        launcher: Optional[Launcher] = None,
    ):
        """
        Initialize adapter (the engine is not spawned yet).

        Args:
            config: Engine configuration (default: EngineConfig())
            clock: Game clock handed to the session
            listener: GUI notifications handed to the session
            launcher: Process factory (default: popen_engine)
        """
        self.config = config if config else EngineConfig()
        self.clock = clock
        self.listener = listener
        self.launcher = launcher if launcher else popen_engine

        self.identity = EngineIdentity()
        self.running = threading.Event()
        self.handshake_ok = threading.Event()

        self.process: Optional[subprocess.Popen] = None
        self.channel: Optional[CommandChannel] = None
        self.rendezvous: Optional[ReadyRendezvous] = None
        self.session: Optional[GameSession] = None
        self.reader: Optional[ReaderLoop] = None
        self._stderr_thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.process is not None and self.process.poll() is None

    @property
    def engine_name(self) -> str:
        return self.identity.name

    def start(self):
        """
        Spawn the engine and complete the UCI handshake.

        Raises:
            FileNotFoundError: If the engine binary does not exist
            EngineError: If the process cannot be spawned
            EngineHandshakeError: If "uciok" does not arrive in time
        """
        if self.process is not None:
            logger.debug("Engine already started")
            return

        engine_path = self.config.engine_path
        if not engine_path.exists():
            raise FileNotFoundError(
                f"UCI engine binary not found at: {engine_path}\n"
                "Install with: brew install stockfish (macOS) or apt install stockfish (Linux)"
            )

        cwd = self.config.working_dir if self.config.working_dir else Path.home()
        logger.info(f"Spawning UCI engine: {engine_path}")
        try:
            self.process = self.launcher([str(engine_path)], cwd)
        except OSError as e:
            raise EngineError(f"Failed to spawn UCI engine {engine_path}: {e}") from e

        self.identity = EngineIdentity()
        self.handshake_ok.clear()

        self.channel = CommandChannel(self.process.stdin)
        self.rendezvous = ReadyRendezvous(self.channel, timeout=self.config.ready_timeout)
        self.session = GameSession(
            self.channel,
            self.rendezvous,
            clock=self.clock,
            listener=self.listener,
        )

        self.running.set()
        self.reader = ReaderLoop(
            self.process.stdout,
            self.dispatch,
            self.running,
            chunk_size=self.config.read_chunk_size,
            retry_delay=self.config.read_retry_delay,
            exit_code=self.process.poll,
            on_exit=self._on_engine_exit,
        )
        self.reader.start()

        if self.process.stderr is not None:
            self._stderr_thread = threading.Thread(
                target=self._drain_stderr,
                args=(self.process.stderr,),
                name="uci-stderr",
                daemon=True,
            )
            self._stderr_thread.start()

        self.channel.send("uci")
        if not self.handshake_ok.wait(self.config.handshake_timeout):
            self.close()
            raise EngineHandshakeError(
                f"No uciok from {engine_path} within {self.config.handshake_timeout}s"
            )
        logger.info(f"UCI OK: {self.identity.name or 'unnamed engine'}")

        for command in self.config.setoption_commands():
            self.channel.send(command)
        if not self.rendezvous.wait_for_engine_ready():
            self.session.mark_engine_unavailable("no readyok after setoption")

    def close(self):
        """Quit the engine and join the reader thread. Safe to call twice."""
        if self.process is None:
            return

        logger.info("Stopping UCI engine")
        if self.session:
            self.session.stop()
        # cleared first so the reader treats the coming EOF as a shutdown
        self.running.clear()
        self.channel.send("quit")
        self.channel.close()

        try:
            self.process.wait(timeout=self.config.shutdown_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("UCI engine did not quit in time, killing it")
            self.process.kill()
            self.process.wait()

        self.reader.join(timeout=self.config.shutdown_timeout + self.config.read_retry_delay)
        if self._stderr_thread:
            self._stderr_thread.join(timeout=self.config.shutdown_timeout)

        for stream in (self.process.stdout, self.process.stderr):
            if stream is not None:
                stream.close()

        logger.info(f"UCI engine stopped (exit code {self.process.returncode})")
        self.process = None
        self._stderr_thread = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ------------------------------------------------------------------
    # Game operations
    # ------------------------------------------------------------------

    def start_new_game(self, time_budget: int, mode: Mode):
        """See GameSession.start_new_game."""
        self._require_session().start_new_game(time_budget, mode)

    def submit_user_move(self, move: str):
        """See GameSession.submit_user_move."""
        self._require_session().submit_user_move(move)

    def _require_session(self) -> GameSession:
        if self.session is None or self.process is None:
            raise EngineError("Engine not started, call start() first")
        return self.session

    # ------------------------------------------------------------------
    # Reader callbacks
    # ------------------------------------------------------------------

    def dispatch(self, event: ScanEvent):
        """
        Route one scanned line.

        Called on the reader thread for every event, in arrival order.

        Args:
            event: Classified engine output line
        """
        kind = event.kind

        if kind == EventKind.UCI_OK:
            self.handshake_ok.set()

        elif kind == EventKind.READY_OK:
            self.rendezvous.signal_ready()

        elif kind == EventKind.ID_NAME:
            logger.info(f"Got UCI name: {event.text}")
            if not self.identity.name:
                self.identity.name = event.text[len("id name "):].strip()
                self.session.engine_name = self.identity.name

        elif kind == EventKind.ID_AUTHOR:
            logger.info(f"Got UCI author: {event.text}")
            self.identity.author = event.text[len("id author "):].strip()

        elif kind == EventKind.OPTION:
            option = parse_option(event.text)
            if option:
                self.identity.options[option.name] = option

        elif kind == EventKind.BEST_MOVE_NONE:
            logger.info("Engine has no move in this position")

        elif kind == EventKind.BEST_MOVE_WITH_PONDER:
            moves = parse_best_move_with_ponder(event.text)
            if moves:
                self.session.on_best_move_with_ponder(*moves)

        elif kind == EventKind.BEST_MOVE:
            move = parse_best_move(event.text)
            if move:
                self.session.on_best_move(move)

        elif kind == EventKind.INFO:
            self.session.on_info(parse_info(event.text))

        elif kind in (EventKind.LINE_FEED, EventKind.EMPTY_LINE, EventKind.UNKNOWN):
            pass

    def _on_engine_exit(self, code: int):
        self.session.mark_engine_unavailable(f"engine exited with code {code}")

    @staticmethod
    def _drain_stderr(stream: BinaryIO):
        for line in iter(stream.readline, b""):
            logger.debug(f"[stderr] {line.decode('utf-8', errors='replace').rstrip()}")
