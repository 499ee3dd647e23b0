"""
UCI Output Scanner

Splits the raw byte stream coming from the engine's stdout into lines and
classifies each line by its shape.

Engine output arrives in arbitrary chunks; a line may be split across two
reads. The scanner keeps the bytes after the last newline and prepends them
to the next chunk, so every event corresponds to one complete line.

Line Kinds:
    uciok                          -> UCI_OK
    readyok                        -> READY_OK
    id name Stockfish 16           -> ID_NAME
    id author the Stockfish devs   -> ID_AUTHOR
    option name Hash type spin ... -> OPTION
    bestmove (none)                -> BEST_MOVE_NONE
    bestmove e2e4 ponder e7e5      -> BEST_MOVE_WITH_PONDER
    bestmove e2e4                  -> BEST_MOVE
    info depth 12 score cp 31 ...  -> INFO
    <nothing before the newline>   -> LINE_FEED
    <only whitespace>              -> EMPTY_LINE
    <anything else>                -> UNKNOWN
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Pattern, Tuple

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Lexical kind of one engine output line."""
    UCI_OK = 0
    READY_OK = 1
    ID_NAME = 2
    ID_AUTHOR = 3
    OPTION = 4
    BEST_MOVE_NONE = 5
    BEST_MOVE_WITH_PONDER = 6
    BEST_MOVE = 7
    INFO = 8
    LINE_FEED = 9
    EMPTY_LINE = 10
    UNKNOWN = 11


@dataclass(frozen=True)
class ScanEvent:
    """A classified line with its text (surrounding whitespace removed)."""
    kind: EventKind
    text: str


# Order matters: the ponder shape must be tried before the bare bestmove.
LINE_PATTERNS: List[Tuple[EventKind, Pattern]] = [
    (EventKind.UCI_OK, re.compile(r"^uciok\b")),
    (EventKind.READY_OK, re.compile(r"^readyok\b")),
    (EventKind.ID_NAME, re.compile(r"^id name\b")),
    (EventKind.ID_AUTHOR, re.compile(r"^id author\b")),
    (EventKind.OPTION, re.compile(r"^option name\b")),
    (EventKind.BEST_MOVE_NONE, re.compile(r"^bestmove (\(none\)|0000)(\s|$)")),
    (EventKind.BEST_MOVE_WITH_PONDER, re.compile(r"^bestmove \S+ ponder \S+")),
    (EventKind.BEST_MOVE, re.compile(r"^bestmove \S+")),
    (EventKind.INFO, re.compile(r"^info\b")),
]


def classify_line(line: str) -> ScanEvent:
    """
    Classify a single line (without its newline terminator).

    Args:
        line: One line of engine output

    Returns:
        ScanEvent with the detected kind
    """
    if not line:
        return ScanEvent(EventKind.LINE_FEED, "")

    text = line.strip()
    if not text:
        return ScanEvent(EventKind.EMPTY_LINE, "")

    for kind, pattern in LINE_PATTERNS:
        if pattern.match(text):
            return ScanEvent(kind, text)

    return ScanEvent(EventKind.UNKNOWN, text)


class Scanner:
    """
    Incremental line scanner for engine output.

    A line longer than ``max_pending`` bytes is dropped (with a warning)
    instead of being buffered forever; scanning resumes after its newline.

    Attributes:
        pending: Bytes received after the last newline, waiting for the
            rest of their line
        max_pending: Largest partial line kept, in bytes
    """

    def __init__(self, encoding: str = "utf-8", max_pending: int = 65536):
        self.encoding = encoding
        self.max_pending = max_pending
        self.pending = b""
        self._overflow = False

    def feed(self, data: bytes) -> Iterator[ScanEvent]:
        """
        Scan a chunk of bytes and yield one event per complete line.

        Args:
            data: Raw bytes as read from the engine

        Yields:
            ScanEvent for every line terminated inside this chunk
        """
        buffer = self.pending + data
        *lines, self.pending = buffer.split(b"\n")

        if lines and self._overflow:
            # tail of the line dropped earlier
            lines.pop(0)
            self._overflow = False

        if len(self.pending) > self.max_pending:
            logger.warning(f"Dropping engine output line longer than {self.max_pending} bytes")
            self.pending = b""
            self._overflow = True

        for raw in lines:
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            yield classify_line(raw.decode(self.encoding, errors="replace"))

    def flush(self) -> Iterator[ScanEvent]:
        """Yield the unterminated remainder as a final line, if any."""
        raw, self.pending = self.pending, b""
        if self._overflow:
            self._overflow = False
            return
        if raw:
            yield classify_line(raw.rstrip(b"\r").decode(self.encoding, errors="replace"))

    def reset(self):
        """Drop any partially received line."""
        self.pending = b""
        self._overflow = False
