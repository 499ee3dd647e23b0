"""
UCI Adapter

Drives a UCI chess engine (Stockfish and friends) as a subprocess and turns
its text output into structured game events for a GUI.

## Architecture

The adapter is organized into several key modules:

1. **protocol**: Engine output handling
   - Scanner: splits the raw byte stream into classified protocol lines
   - Parser: extracts option, best move and search info fields

2. **engine**: Subprocess plumbing
   - CommandChannel: writes commands to the engine's stdin
   - ReadyRendezvous: the blocking isready/readyok handshake
   - ReaderLoop: background thread feeding stdout to the scanner
   - EngineAdapter: spawn, uci handshake, options, teardown

3. **game**: Game state
   - GameSession: move history, side to move, pondering and analysis
   - Clock / GameListener: interfaces the GUI side implements

4. **utils**: Logging setup

## Quick Start

```python
from uci_adapter import EngineAdapter, EngineConfig, Mode

with EngineAdapter(EngineConfig(engine_path="/usr/bin/stockfish")) as engine:
    engine.start_new_game(300, Mode.ENGINE_BLACK)
    engine.submit_user_move("e2e4")
```

## Version

0.1.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

from uci_adapter.engine.adapter import EngineAdapter, EngineError, EngineHandshakeError
from uci_adapter.engine.config import EngineConfig
from uci_adapter.game.interfaces import Clock, GameListener
from uci_adapter.game.session import GameSession, Mode, SessionState, promotion_piece
from uci_adapter.protocol.parser import SearchInfo

__all__ = [
    'EngineAdapter',
    'EngineError',
    'EngineHandshakeError',
    'EngineConfig',
    'Clock',
    'GameListener',
    'GameSession',
    'Mode',
    'SessionState',
    'promotion_piece',
    'SearchInfo',
]
