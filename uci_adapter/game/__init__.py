"""
Game state for a session against a UCI engine.

Key Components:
    - GameSession: move history, side to move, ponder/analysis flags
    - Clock, GameListener: interfaces implemented by the application
    - pv_to_san: display helper for engine lines
"""

from uci_adapter.game.interfaces import Clock, GameListener
from uci_adapter.game.notation import pv_to_san
from uci_adapter.game.session import (
    GameSession,
    Mode,
    SessionState,
    promotion_piece,
    score_sign,
    display_score,
)

__all__ = [
    'Clock',
    'GameListener',
    'pv_to_san',
    'GameSession',
    'Mode',
    'SessionState',
    'promotion_piece',
    'score_sign',
    'display_score',
]
