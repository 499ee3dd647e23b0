"""
Collaborator Interfaces

The session does not own a clock or a display. It drives whatever the
application plugs in through these two interfaces.

Side Convention:
    0 = first mover (White), 1 = second mover (Black)
"""

from abc import ABC, abstractmethod
from typing import Optional

import chess


class Clock(ABC):
    """
    Game clock driven by the session.

    Methods:
        remaining_time(side): Milliseconds left for a side
        start_one(side): Start a side's clock (first move of the game)
        start_one_stop_other(side, lock_threads): Start one side, stop the other
    """

    @abstractmethod
    def remaining_time(self, side: int) -> int:
        """Milliseconds left on ``side``'s clock."""
        pass

    @abstractmethod
    def start_one(self, side: int):
        """Start ``side``'s clock."""
        pass

    @abstractmethod
    def start_one_stop_other(self, side: int, lock_threads: bool):
        """
        Start ``side``'s clock and stop the opponent's.

        Args:
            side: Side whose clock starts
            lock_threads: True when called from the engine reader thread,
                which must take the GUI's lock before touching widgets
        """
        pass


class GameListener(ABC):
    """
    Receives one-way notifications from the session.

    Everything is fire-and-forget; return values are ignored.
    """

    @abstractmethod
    def on_engine_move(self, move: str, promotion: Optional[chess.PieceType]):
        """The engine's best move was accepted into the game."""
        pass

    @abstractmethod
    def set_score(self, score: str):
        """New evaluation to display ("0.35", "-1.20", "#3")."""
        pass

    @abstractmethod
    def set_best_line(self, line: str, san: Optional[str]):
        """New principal variation, raw and (when it could be rendered) in SAN."""
        pass

    @abstractmethod
    def set_nodes_per_second(self, nps: str):
        """New search speed label ("240 kNps")."""
        pass

    def on_game_started(self, engine_name: str, time_budget: int, relation: int):
        """
        A new game against the engine has started.

        Args:
            engine_name: Name announced by the engine
            time_budget: Time per side, as given to start_new_game
            relation: -1 if the engine plays White, 1 if it plays Black
        """

    def on_engine_unavailable(self, reason: str):
        """The engine stopped answering or exited."""
