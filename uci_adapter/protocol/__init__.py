"""
UCI Protocol Input

Turns what the engine prints into something the game can use.

Flow:
    stdout bytes -> Scanner -> ScanEvent(kind, text) -> parser -> typed fields

Reference:
    UCI Protocol: https://www.chessprogramming.org/UCI
"""

from uci_adapter.protocol.scanner import EventKind, ScanEvent, Scanner, classify_line
from uci_adapter.protocol.parser import (
    OptionDeclaration,
    SearchInfo,
    parse_option,
    parse_best_move,
    parse_best_move_with_ponder,
    parse_info,
    format_centipawns,
    format_mate,
    format_nps,
)

__all__ = [
    'EventKind',
    'ScanEvent',
    'Scanner',
    'classify_line',
    'OptionDeclaration',
    'SearchInfo',
    'parse_option',
    'parse_best_move',
    'parse_best_move_with_ponder',
    'parse_info',
    'format_centipawns',
    'format_mate',
    'format_nps',
]
