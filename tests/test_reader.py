"""
Unit Tests for the Reader Loop

Tests chunked reading, ordered dispatch, retry on empty reads and
detection of an exited engine.
"""

import io
import logging
import threading

import pytest

from uci_adapter.engine.reader import ReaderLoop
from uci_adapter.protocol.scanner import EventKind


class ScriptedStream:
    """Stream returning a scripted sequence of read results."""

    def __init__(self, results):
        self.results = list(results)

    def read1(self, size):
        if not self.results:
            return b""
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def running():
    event = threading.Event()
    event.set()
    return event


class TestReaderLoop:
    """Tests for ReaderLoop."""

    def test_dispatches_events_in_order(self, running):
        """Test that every line reaches dispatch, in arrival order."""
        events = []
        exits = []
        reader = ReaderLoop(
            io.BufferedReader(io.BytesIO(b"id name FakeFish\nuciok\nreadyok\n")),
            events.append,
            running,
            exit_code=lambda: 0,
            on_exit=exits.append,
        )

        reader.run()

        assert [e.kind for e in events] == [
            EventKind.ID_NAME,
            EventKind.UCI_OK,
            EventKind.READY_OK,
        ]
        assert exits == [0]

    def test_small_chunks(self, running):
        """Test that lines split by the chunk size are reassembled."""
        events = []
        reader = ReaderLoop(
            io.BufferedReader(io.BytesIO(b"bestmove e2e4 ponder e7e5\nuciok\n")),
            events.append,
            running,
            chunk_size=3,
            exit_code=lambda: 0,
        )

        reader.run()

        assert [e.kind for e in events] == [EventKind.BEST_MOVE_WITH_PONDER, EventKind.UCI_OK]
        assert events[0].text == "bestmove e2e4 ponder e7e5"

    def test_unterminated_line_flushed_on_exit(self, running):
        events = []
        reader = ReaderLoop(
            ScriptedStream([b"bestmove e7e8q"]),
            events.append,
            running,
            exit_code=lambda: 1,
        )

        reader.run()

        assert [e.text for e in events] == ["bestmove e7e8q"]

    def test_empty_read_retries_while_process_alive(self, running, caplog):
        """Test that an empty read is logged and retried, not fatal."""
        events = []
        codes = iter([None, None, 0])
        reader = ReaderLoop(
            ScriptedStream([b"", b"uciok\n", b""]),
            events.append,
            running,
            retry_delay=0.01,
            exit_code=lambda: next(codes),
        )

        with caplog.at_level(logging.WARNING):
            reader.run()

        assert [e.kind for e in events] == [EventKind.UCI_OK]
        assert "Failed to read data from UCI engine pipe" in caplog.text

    def test_read_error_is_not_fatal(self, running):
        events = []
        codes = iter([None, 0])
        reader = ReaderLoop(
            ScriptedStream([OSError("pipe hiccup"), b"readyok\n"]),
            events.append,
            running,
            retry_delay=0.01,
            exit_code=lambda: next(codes),
        )

        reader.run()

        assert [e.kind for e in events] == [EventKind.READY_OK]

    def test_dispatch_error_does_not_stop_loop(self, running, caplog):
        """Test that a failing handler is logged and later lines still arrive."""
        seen = []

        def dispatch(event):
            seen.append(event.kind)
            if event.kind == EventKind.INFO:
                raise RuntimeError("listener blew up")

        reader = ReaderLoop(
            io.BufferedReader(io.BytesIO(b"info depth 1\nreadyok\n")),
            dispatch,
            running,
            exit_code=lambda: 0,
        )

        with caplog.at_level(logging.ERROR):
            reader.run()

        assert seen == [EventKind.INFO, EventKind.READY_OK]
        assert "listener blew up" in caplog.text

    def test_stream_with_read1_only(self, running):
        """Test that a stream without read() is read through read1()."""
        events = []
        reader = ReaderLoop(
            ScriptedStream([b"readyok\n"]),
            events.append,
            running,
            exit_code=lambda: 0,
        )

        reader.run()

        assert [e.kind for e in events] == [EventKind.READY_OK]

    def test_stream_with_read_only(self, running):
        """Test that a stream without read1() falls back to read()."""

        class PlainStream:
            def __init__(self):
                self.chunks = [b"uciok\n"]

            def read(self, size):
                return self.chunks.pop(0) if self.chunks else b""

        events = []
        reader = ReaderLoop(PlainStream(), events.append, running, exit_code=lambda: 0)

        reader.run()

        assert [e.kind for e in events] == [EventKind.UCI_OK]

    def test_cleared_flag_stops_loop(self):
        """Test that the loop does not read once the liveness flag is cleared."""
        stream = ScriptedStream([b"uciok\n"])
        events = []
        reader = ReaderLoop(stream, events.append, threading.Event())

        reader.run()

        assert events == []
        assert stream.results == [b"uciok\n"]

    def test_runs_on_background_thread(self, running):
        done = threading.Event()
        reader = ReaderLoop(
            io.BufferedReader(io.BytesIO(b"uciok\n")),
            lambda event: done.set(),
            running,
            exit_code=lambda: 0,
        )

        reader.start()
        reader.join(timeout=5.0)

        assert done.is_set()
        assert not reader.thread.is_alive()
        assert reader.thread.daemon
