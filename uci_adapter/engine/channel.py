"""
Command channel to the engine's stdin.

Writes are fire-and-forget: a failing write is logged and dropped. The
engine is a best-effort companion process, so the game never stops
because a command could not be delivered.
"""

import logging
import threading
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)


class CommandChannel:
    """
    Writes UCI commands to the engine.

    Both the GUI thread and the reader thread send commands (the reader
    answers a bestmove with a ponder search), so writes are serialized.

    Attributes:
        stream: Binary stream connected to the engine's stdin
    """

    def __init__(self, stream: Optional[BinaryIO], encoding: str = "utf-8"):
        self.stream = stream
        self.encoding = encoding
        self._write_lock = threading.Lock()

    def send(self, command: str) -> bool:
        """
        Send one command, newline-terminated.

        Args:
            command: Protocol command (e.g. "go wtime 300000 btime 300000")

        Returns:
            True if the command was written, False if the write failed
        """
        line = command if command.endswith("\n") else command + "\n"

        with self._write_lock:
            if self.stream is None:
                logger.error(f"Cannot write to UCI engine, no stdin: {command.strip()}")
                return False
            try:
                self.stream.write(line.encode(self.encoding))
                self.stream.flush()
            except (OSError, ValueError) as e:
                logger.error(f"Failed to write to UCI engine: {e}")
                return False

        logger.debug(f">>> {command.strip()}")
        return True

    def close(self):
        """Close the stdin stream; the engine sees EOF."""
        with self._write_lock:
            if self.stream is None:
                return
            try:
                self.stream.close()
            except OSError as e:
                logger.debug(f"Error closing engine stdin: {e}")
            self.stream = None
