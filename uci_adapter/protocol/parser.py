"""
UCI Response Parser

Extracts typed fields from the lines classified by the scanner.

The engine's output format is fixed by the UCI protocol, so the field
grammars below are matched literally:

    option name (NAME) type (TYPE)
    bestmove (MOVE)
    bestmove (MOVE) ponder (PONDER)
    depth (N)  seldepth (N)  time (N)
    score cp (-N)  score mate (-N)
    nps (N)
    " pv ([a-h1-8 ]+)"

Every info field is optional. A field whose pattern does not match is
simply absent from the result; nothing here raises on malformed input.

References:
    - UCI Protocol: https://www.chessprogramming.org/UCI
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


OPTION_PATTERN = re.compile(r"option name (.*?) type (\S+)")
OPTION_DEFAULT_PATTERN = re.compile(r" default (.*?)(?= min | max | var |$)")
OPTION_MIN_PATTERN = re.compile(r" min (-?[0-9]+)")
OPTION_MAX_PATTERN = re.compile(r" max (-?[0-9]+)")
OPTION_VAR_PATTERN = re.compile(r" var (.*?)(?= var |$)")

BEST_MOVE_PATTERN = re.compile(r"bestmove (\S+)")
BEST_MOVE_PONDER_PATTERN = re.compile(r"bestmove (\S+) ponder (\S+)")

INFO_DEPTH_PATTERN = re.compile(r"\bdepth ([0-9]+)")
INFO_SELDEPTH_PATTERN = re.compile(r"\bseldepth ([0-9]+)")
INFO_TIME_PATTERN = re.compile(r"\btime ([0-9]+)")
INFO_SCORE_CP_PATTERN = re.compile(r"\bscore cp (-?[0-9]+)")
INFO_SCORE_MATE_PATTERN = re.compile(r"\bscore mate (-?[0-9]+)")
INFO_NPS_PATTERN = re.compile(r"\bnps ([0-9]+)")
INFO_PV_PATTERN = re.compile(r" pv ([a-h1-8 ]+)")


@dataclass
class OptionDeclaration:
    """An engine option announced during the uci handshake."""

    name: str
    type: str
    default: Optional[str] = None
    min: Optional[int] = None
    max: Optional[int] = None
    vars: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SearchInfo:
    """
    Snapshot of one ``info`` line.

    Attributes:
        depth: Search depth in plies
        seldepth: Selective search depth
        time_ms: Time searched so far
        score_cp: Centipawn score from the engine's point of view
        score_mate: Moves to mate (negative when the engine is getting mated)
        nps: Nodes per second
        pv: Principal variation as coordinate move tokens
    """

    depth: Optional[int] = None
    seldepth: Optional[int] = None
    time_ms: Optional[int] = None
    score_cp: Optional[int] = None
    score_mate: Optional[int] = None
    nps: Optional[int] = None
    pv: Tuple[str, ...] = ()

    @property
    def has_score(self) -> bool:
        return self.score_cp is not None or self.score_mate is not None


def _int_field(pattern, text: str) -> Optional[int]:
    match = pattern.search(text)
    if match is None:
        return None
    return int(match.group(1))


def parse_option(text: str) -> Optional[OptionDeclaration]:
    """
    Parse an ``option name ... type ...`` line.

    Args:
        text: Full option line

    Returns:
        OptionDeclaration, or None if the line does not match
    """
    match = OPTION_PATTERN.search(text)
    if match is None:
        logger.debug(f"No match for option line: {text}")
        return None

    option = OptionDeclaration(name=match.group(1), type=match.group(2))

    default = OPTION_DEFAULT_PATTERN.search(text)
    if default:
        option.default = default.group(1)
    option.min = _int_field(OPTION_MIN_PATTERN, text)
    option.max = _int_field(OPTION_MAX_PATTERN, text)
    option.vars = [var.strip() for var in OPTION_VAR_PATTERN.findall(text)]

    logger.debug(f"Option {option.name}, type: {option.type}")
    return option


def parse_best_move(text: str) -> Optional[str]:
    """Extract MOVE from ``bestmove MOVE``."""
    match = BEST_MOVE_PATTERN.search(text)
    if match is None:
        logger.debug(f"No match for bestmove line: {text}")
        return None
    return match.group(1)


def parse_best_move_with_ponder(text: str) -> Optional[Tuple[str, str]]:
    """Extract (MOVE, PONDER) from ``bestmove MOVE ponder PONDER``."""
    match = BEST_MOVE_PONDER_PATTERN.search(text)
    if match is None:
        logger.debug(f"No match for bestmove/ponder line: {text}")
        return None
    return match.group(1), match.group(2)


def parse_info(text: str) -> SearchInfo:
    """
    Parse an ``info`` line into a SearchInfo snapshot.

    A centipawn score takes precedence over a mate score when a line
    carries both.

    Args:
        text: Full info line

    Returns:
        SearchInfo with every matched field filled in
    """
    score_cp = _int_field(INFO_SCORE_CP_PATTERN, text)
    score_mate = None
    if score_cp is None:
        score_mate = _int_field(INFO_SCORE_MATE_PATTERN, text)

    pv: Tuple[str, ...] = ()
    pv_match = INFO_PV_PATTERN.search(text)
    if pv_match:
        pv = tuple(pv_match.group(1).split())

    return SearchInfo(
        depth=_int_field(INFO_DEPTH_PATTERN, text),
        seldepth=_int_field(INFO_SELDEPTH_PATTERN, text),
        time_ms=_int_field(INFO_TIME_PATTERN, text),
        score_cp=score_cp,
        score_mate=score_mate,
        nps=_int_field(INFO_NPS_PATTERN, text),
        pv=pv,
    )


# ============================================================================
# Display formatting
# ============================================================================

def format_centipawns(value: int) -> str:
    """Render centipawns as pawns with two decimals (-35 -> "-0.35")."""
    return f"{value / 100:.2f}"


def format_mate(moves: int) -> str:
    """Render a mate score as ``#N`` (sign kept: "#-3")."""
    return f"#{moves}"


def format_nps(nps: int) -> str:
    """Render nodes per second in thousands (240000 -> "240 kNps")."""
    return f"{nps // 1000} kNps"
