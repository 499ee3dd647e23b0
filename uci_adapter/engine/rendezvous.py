"""
Readiness rendezvous (isready / readyok).

UCI engines process commands in order, so an ``isready`` answered by
``readyok`` proves every earlier command has been handled. The caller
blocks for at most ``timeout`` seconds; a silent engine is logged as a
suspected crash and the caller carries on.
"""

import logging
import threading

from uci_adapter.engine.channel import CommandChannel

logger = logging.getLogger(__name__)


class ReadyRendezvous:
    """Blocking isready handshake, signalled from the reader thread."""

    def __init__(self, channel: CommandChannel, timeout: float = 3.0):
        self.channel = channel
        self.timeout = timeout
        self._ready = threading.Event()

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def signal_ready(self):
        """Called by the reader when readyok arrives."""
        self._ready.set()

    def wait_for_engine_ready(self) -> bool:
        """
        Send isready and wait for readyok.

        Returns:
            True if the engine answered in time, False on timeout
        """
        self._ready.clear()
        self.channel.send("isready")

        if self._ready.wait(self.timeout):
            return True

        logger.warning(f"UCI engine did not answer isready within {self.timeout}s, crashed?")
        return False
