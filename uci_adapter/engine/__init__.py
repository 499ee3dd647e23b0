"""
Engine Subprocess Plumbing

Everything that touches the engine process directly.

Threading:
    - Caller thread: writes commands, blocks in the isready rendezvous
    - Reader thread: reads stdout, dispatches events to the session
    - stderr thread: drains stderr into the debug log

Protocol Flow:
    Adapter -> "uci"
    Engine  -> "id name Stockfish 16" / "option name ..." / "uciok"
    Adapter -> "setoption name Hash value 512" ...
    Adapter -> "isready"
    Engine  -> "readyok"
"""

from uci_adapter.engine.channel import CommandChannel
from uci_adapter.engine.config import EngineConfig
from uci_adapter.engine.reader import ReaderLoop
from uci_adapter.engine.rendezvous import ReadyRendezvous
from uci_adapter.engine.adapter import (
    EngineAdapter,
    EngineError,
    EngineHandshakeError,
    EngineIdentity,
    popen_engine,
)

__all__ = [
    'CommandChannel',
    'EngineConfig',
    'ReaderLoop',
    'ReadyRendezvous',
    'EngineAdapter',
    'EngineError',
    'EngineHandshakeError',
    'EngineIdentity',
    'popen_engine',
]
