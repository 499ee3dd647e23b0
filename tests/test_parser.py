"""
Unit Tests for the Response Parser

Tests the field grammars for option, bestmove and info lines, and the
display formatting helpers.
"""

import pytest

from uci_adapter.protocol.parser import (
    SearchInfo,
    format_centipawns,
    format_mate,
    format_nps,
    parse_best_move,
    parse_best_move_with_ponder,
    parse_info,
    parse_option,
)


class TestOptionParsing:
    """Tests for option declarations."""

    def test_spin_option(self):
        """Test a spin option with default and bounds."""
        option = parse_option("option name Hash type spin default 16 min 1 max 1024")

        assert option.name == "Hash"
        assert option.type == "spin"
        assert option.default == "16"
        assert option.min == 1
        assert option.max == 1024

    def test_name_with_spaces(self):
        """Test that multi-word option names are kept whole."""
        option = parse_option("option name Skill Level type spin default 20 min 0 max 20")

        assert option.name == "Skill Level"
        assert option.type == "spin"

    def test_check_option(self):
        option = parse_option("option name Ponder type check default false")

        assert option.type == "check"
        assert option.default == "false"
        assert option.min is None

    def test_combo_option_vars(self):
        """Test that combo choices are collected."""
        option = parse_option(
            "option name Style type combo default Normal var Solid var Normal var Risky"
        )

        assert option.default == "Normal"
        assert option.vars == ["Solid", "Normal", "Risky"]

    def test_button_option(self):
        option = parse_option("option name Clear Hash type button")

        assert option.name == "Clear Hash"
        assert option.type == "button"
        assert option.default is None

    def test_no_match(self):
        """Test that a malformed option line yields None."""
        assert parse_option("option name Broken") is None


class TestBestMoveParsing:
    """Tests for bestmove lines."""

    def test_bare_best_move(self):
        assert parse_best_move("bestmove e2e4") == "e2e4"

    def test_promotion_kept_verbatim(self):
        assert parse_best_move("bestmove e7e8q") == "e7e8q"

    def test_best_move_with_ponder(self):
        assert parse_best_move_with_ponder("bestmove g1f3 ponder d7d5") == ("g1f3", "d7d5")

    def test_no_match(self):
        assert parse_best_move("info depth 1") is None
        assert parse_best_move_with_ponder("bestmove e2e4") is None


class TestInfoParsing:
    """Tests for info lines."""

    def test_full_info_line(self):
        """Test that every supported field is extracted."""
        info = parse_info(
            "info depth 12 seldepth 17 multipv 1 score cp -35 nodes 480000 "
            "nps 240000 time 2000 pv e7e5 g1f3 b8c6"
        )

        assert info.depth == 12
        assert info.seldepth == 17
        assert info.time_ms == 2000
        assert info.score_cp == -35
        assert info.score_mate is None
        assert info.nps == 240000
        assert info.pv == ("e7e5", "g1f3", "b8c6")

    def test_depth_not_taken_from_seldepth(self):
        """Test that 'depth' inside 'seldepth' is not matched."""
        info = parse_info("info seldepth 20 depth 12")

        assert info.depth == 12
        assert info.seldepth == 20

    def test_mate_score(self):
        info = parse_info("info depth 30 score mate -4 pv e1e2")

        assert info.score_mate == -4
        assert info.score_cp is None

    def test_centipawns_win_over_mate(self):
        info = parse_info("info score cp 50 score mate 3")

        assert info.score_cp == 50
        assert info.score_mate is None

    def test_missing_fields_are_absent(self):
        """Test that a sparse info line leaves other fields empty."""
        info = parse_info("info string NNUE evaluation enabled")

        assert info == SearchInfo()
        assert not info.has_score

    def test_pv_stops_at_promotion_suffix(self):
        """Test that the pv grammar only admits [a-h1-8 ] characters."""
        info = parse_info("info depth 5 score cp 900 pv e7e8q d8d1")

        assert info.pv == ("e7e8",)

    def test_multipv_is_not_a_pv(self):
        """Test that ' pv ' requires its own token."""
        info = parse_info("info depth 5 multipv 2 score cp 10")

        assert info.pv == ()


class TestFormatting:
    """Tests for display formatting."""

    @pytest.mark.parametrize(
        "value, text",
        [(-35, "-0.35"), (0, "0.00"), (120, "1.20"), (-1234, "-12.34"), (5, "0.05")],
    )
    def test_centipawns(self, value, text):
        assert format_centipawns(value) == text

    def test_mate(self):
        assert format_mate(3) == "#3"
        assert format_mate(-2) == "#-2"

    def test_nps(self):
        assert format_nps(240000) == "240 kNps"
        assert format_nps(999) == "0 kNps"
        assert format_nps(1234567) == "1234 kNps"
