"""
Tests for the chat win rate query parser.
"""

from datetime import datetime, timezone

import pytest

from ladder_bot.data.metadata import SEASONS
from ladder_bot.data_models.winrate import WinRateOptions
from ladder_bot.utils.exceptions import (
    InvalidCivilizationError, InvalidMapError, InvalidTimespanError
)
from ladder_bot.utils.winrate_query import parse_winrate_query


def test_empty_query_keeps_defaults():
    parsed = parse_winrate_query('')

    assert parsed.player_query == ''
    assert parsed.opponent_query is None
    assert parsed.options.timespan_seconds is None
    assert parsed.options.idle_gap_seconds == 4 * 3600


@pytest.mark.parametrize("query, hours", [
    ("last 3 days", 72),
    ("last 12h", 12),
    ("last 2 weeks", 336),
    ("last 1 month", 720),
    ("last 1 y", 8760),
])
def test_last_timespan(query, hours):
    parsed = parse_winrate_query(query)

    assert parsed.player_query == ''
    assert parsed.options.timespan_seconds == hours * 3600


def test_unknown_timespan_unit():
    with pytest.raises(InvalidTimespanError):
        parse_winrate_query("beasty last 3 parsecs")


def test_player_versus_opponent_with_timespan():
    parsed = parse_winrate_query("beasty vs marinelord last 2 days")

    assert parsed.player_query == 'beasty'
    assert parsed.opponent_query == 'marinelord'
    assert parsed.options.timespan_seconds == 48 * 3600


def test_versus_without_player_uses_caller():
    parsed = parse_winrate_query("vs #1")

    assert parsed.player_query == ''
    assert parsed.opponent_query == '#1'


def test_last_session_clears_timespan():
    base = WinRateOptions(timespan_seconds=3600)

    parsed = parse_winrate_query("last session", base)

    assert parsed.options.timespan_seconds is None
    assert base.timespan_seconds == 3600


def test_last_season_window():
    now = datetime(2024, 8, 10, tzinfo=timezone.utc)
    season = [s for s in SEASONS if s.started_at <= now][-1]

    parsed = parse_winrate_query("last season", now=now)

    assert parsed.options.season == season.number
    assert parsed.options.timespan_seconds == (now - season.started_at).total_seconds()


def test_map_and_civilization_suffixes():
    parsed = parse_winrate_query("beasty with hre on arabia last 3 days")

    assert parsed.player_query == 'beasty'
    assert parsed.options.civilization == 'holy_roman_empire'
    assert parsed.options.map == 'Dry Arabia'
    assert parsed.options.timespan_seconds == 72 * 3600


def test_unknown_map():
    with pytest.raises(InvalidMapError):
        parse_winrate_query("on atlantis")


def test_unknown_civilization():
    with pytest.raises(InvalidCivilizationError) as excinfo:
        parse_winrate_query("with elves")
    assert excinfo.value.user_message == "❌ Invalid civ specified"


def test_plain_player_query():
    parsed = parse_winrate_query("'Beasty'")

    assert parsed.player_query == "'Beasty'"
    assert parsed.opponent_query is None
