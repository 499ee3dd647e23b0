"""
Display notation for engine lines.

The engine speaks coordinate notation (g1f3); people read SAN (Nf3).
This module replays the game so far with python-chess and renders a
principal variation in SAN. It is display-only: a line that cannot be
replayed yields None and the raw line is shown instead.
"""

import logging
from typing import Iterable, Optional

import chess

logger = logging.getLogger(__name__)


def pv_to_san(history: Iterable[str], pv: Iterable[str]) -> Optional[str]:
    """
    Render a principal variation in SAN with move numbers.

    Args:
        history: Moves played from the start position (coordinate notation)
        pv: Principal variation from the current position

    Returns:
        e.g. "1...e5 2. Nf3", or None if any move cannot be replayed

    Example:
        >>> pv_to_san(["e2e4"], ["e7e5", "g1f3"])
        '1...e5 2. Nf3'
    """
    board = chess.Board()
    try:
        for token in history:
            board.push_uci(token)
        moves = [chess.Move.from_uci(token) for token in pv]
        if not moves:
            return None
        return board.variation_san(moves)
    except ValueError as e:
        logger.debug(f"Could not render line in SAN: {e}")
        return None
