"""
Shared test fakes for the UCI adapter.

Fixtures:
    channel     - FakeChannel recording every command sent
    rendezvous  - FakeRendezvous answering immediately (configurable)
    clock       - FakeClock recording start/stop calls
    listener    - RecordingListener collecting GUI notifications
    session     - GameSession wired to the fakes above
"""

import threading
from typing import Callable, List, Optional

import pytest

from uci_adapter.game.interfaces import Clock, GameListener
from uci_adapter.game.session import GameSession


class FakeChannel:
    """Stands in for CommandChannel; records commands instead of writing."""

    def __init__(self):
        self.commands: List[str] = []

    def send(self, command: str) -> bool:
        self.commands.append(command)
        return True

    def close(self):
        pass


class FakeRendezvous:
    """
    Stands in for ReadyRendezvous.

    Attributes:
        ready: Value returned by wait_for_engine_ready()
        on_wait: Hook run inside the wait, to simulate engine output
            arriving before readyok
        waits: Number of rendezvous performed
    """

    def __init__(self, channel: FakeChannel):
        self.channel = channel
        self.ready = True
        self.on_wait: Optional[Callable[[], None]] = None
        self.waits = 0

    def wait_for_engine_ready(self) -> bool:
        self.waits += 1
        self.channel.send("isready")
        if self.on_wait:
            self.on_wait()
        return self.ready

    def signal_ready(self):
        pass


class FakeClock(Clock):
    """Clock with fixed remaining time that records how it was driven."""

    def __init__(self, white_ms: int = 300000, black_ms: int = 300000):
        self.remaining = [white_ms, black_ms]
        self.calls = []

    def remaining_time(self, side: int) -> int:
        return self.remaining[side]

    def start_one(self, side: int):
        self.calls.append(("start_one", side))

    def start_one_stop_other(self, side: int, lock_threads: bool):
        self.calls.append(("start_one_stop_other", side, lock_threads))


class RecordingListener(GameListener):
    """Collects every notification; ``moved`` is set on each engine move."""

    def __init__(self):
        self.moves = []
        self.scores = []
        self.lines = []
        self.nps = []
        self.games = []
        self.unavailable = []
        self.moved = threading.Event()
        self.gone = threading.Event()

    def on_engine_move(self, move, promotion):
        self.moves.append((move, promotion))
        self.moved.set()

    def set_score(self, score):
        self.scores.append(score)

    def set_best_line(self, line, san):
        self.lines.append((line, san))

    def set_nodes_per_second(self, nps):
        self.nps.append(nps)

    def on_game_started(self, engine_name, time_budget, relation):
        self.games.append((engine_name, time_budget, relation))

    def on_engine_unavailable(self, reason):
        self.unavailable.append(reason)
        self.gone.set()


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def rendezvous(channel):
    return FakeRendezvous(channel)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def session(channel, rendezvous, clock, listener):
    """A GameSession wired to recording fakes."""
    return GameSession(channel, rendezvous, clock=clock, listener=listener, engine_name="FakeFish")
