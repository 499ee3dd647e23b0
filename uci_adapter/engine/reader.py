"""
Background reader for the engine's stdout.

The loop pulls raw chunks, feeds them to the scanner and hands every
resulting event to a dispatch callback, in order. It runs until the
shared ``running`` event is cleared.

Failure Handling:
    - Empty read or OSError: logged, sleep ``retry_delay``, retry
    - Engine process gone: logged once, ``on_exit`` called, loop ends
    - Exception from dispatch: logged with traceback, loop continues
"""

import logging
import threading
import time
from typing import BinaryIO, Callable, Optional

from uci_adapter.protocol.scanner import ScanEvent, Scanner

logger = logging.getLogger(__name__)


class ReaderLoop:
    """
    Reads engine output on a dedicated thread.

    Attributes:
        stream: Binary stream connected to the engine's stdout
        scanner: Line scanner carrying partial lines across reads
        dispatch: Callback receiving every ScanEvent
        running: Liveness flag; the loop exits once it is cleared
        thread: The background thread (None until start())
    """

    def __init__(
        self,
        stream: BinaryIO,
        dispatch: Callable[[ScanEvent], None],
        running: threading.Event,
        scanner: Optional[Scanner] = None,
        chunk_size: int = 8192,
        retry_delay: float = 1.0,
        exit_code: Optional[Callable[[], Optional[int]]] = None,
        on_exit: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize reader.

        Args:
            stream: Engine stdout
            dispatch: Event callback
            running: Liveness flag shared with the owner
            scanner: Scanner to use (default: a fresh one)
            chunk_size: Maximum bytes per read
            retry_delay: Seconds to wait after a failed read
            exit_code: Returns the process exit code, or None while it runs
            on_exit: Called once with the exit code when the process is gone
        """
        self.stream = stream
        self.dispatch = dispatch
        self.running = running
        self.scanner = scanner if scanner else Scanner()
        self.chunk_size = chunk_size
        self.retry_delay = retry_delay
        self.exit_code = exit_code
        self.on_exit = on_exit
        self.thread: Optional[threading.Thread] = None

    def start(self):
        """Run the loop on a daemon thread."""
        self.thread = threading.Thread(
            target=self.run,
            name="uci-reader",
            daemon=True,
        )
        self.thread.start()

    def join(self, timeout: Optional[float] = None):
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=timeout)

    def run(self):
        """Main read loop."""
        logger.info("[reader] Starting UCI parser")

        while self.running.is_set():
            if self.read_once():
                continue
            if not self.running.is_set() or self._process_exited():
                break
            time.sleep(self.retry_delay)

        logger.info("[reader] Closing UCI parser")

    def read_once(self) -> bool:
        """
        Read one chunk and dispatch its events.

        Returns:
            False if nothing could be read
        """
        try:
            read = getattr(self.stream, "read1", None) or self.stream.read
            data = read(self.chunk_size)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read data from UCI engine pipe: {e}")
            return False

        if not data:
            if self.running.is_set():
                logger.warning("Failed to read data from UCI engine pipe")
            return False

        for event in self.scanner.feed(data):
            self._dispatch(event)
        return True

    def _dispatch(self, event: ScanEvent):
        logger.debug(f"<<< {event.text}")
        try:
            self.dispatch(event)
        except Exception as e:
            logger.error(f"Error handling engine line '{event.text}': {e}", exc_info=True)

    def _process_exited(self) -> bool:
        if self.exit_code is None:
            return False

        code = self.exit_code()
        if code is None:
            return False

        logger.error(f"UCI engine exited with code {code}, stopping reader")
        for event in self.scanner.flush():
            self._dispatch(event)
        if self.on_exit:
            self.on_exit(code)
        return True
