"""
Parser for chat win rate queries.

Understands an optional chain of suffixes after the player part:

    "<player> [vs <opponent>] [with <civ>] [on <map>] [last <N> <unit> | last session | last season]"

Suffixes are stripped from the right, so they must appear in that order.
"""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from ladder_bot.data import metadata
from ladder_bot.data_models.winrate import WinRateOptions
from ladder_bot.utils.exceptions import (
    InvalidCivilizationError, InvalidMapError, InvalidTimespanError
)
from ladder_bot.utils.time_parser import parse_timespan_hours

_LAST_TIMESPAN_RE = re.compile(r'^(?:(.+?) )?last (\d+) ?([a-z]+)$')
_LAST_PERIOD_RE = re.compile(r'^(?:(.+?) )?last (session|season)$')
_ON_MAP_RE = re.compile(r'^(?:(.+?) )?on (\w+)$')
_WITH_CIV_RE = re.compile(r'^(?:(.+?) )?with (\w+)$')
_VERSUS_RE = re.compile(r' ?vs ')


@dataclass
class WinRateQuery:
    """Parsed form of a win rate query."""
    player_query: str = ''          # Empty means "the caller's own profiles"
    opponent_query: Optional[str] = None
    options: WinRateOptions = field(default_factory=WinRateOptions)


def season_timespan(now: Optional[datetime] = None):
    """Season number and seconds elapsed since the current season started."""
    now = now or datetime.now(timezone.utc)
    season = metadata.current_season(now)
    return season.number, (now - season.started_at).total_seconds()


def parse_winrate_query(query: str, options: Optional[WinRateOptions] = None,
                        now: Optional[datetime] = None) -> WinRateQuery:
    """
    Split a chat query into player/opponent lookups and win rate options.
    
    Args:
        query: Raw query text, e.g. "vs beasty last 3 days on arabia"
        options: Defaults to start from (not modified)
        now: Reference time for 'last season'
        
    Returns:
        WinRateQuery with the remaining player and opponent queries
        
    Raises:
        InvalidTimespanError: Unknown 'last N <unit>' unit
        InvalidMapError: Unknown 'on <map>' map
        InvalidCivilizationError: Unknown 'with <civ>' civilization
    """
    options = replace(options) if options else WinRateOptions()
    query = (query or '').strip()
    
    match = _LAST_TIMESPAN_RE.match(query) if query else None
    if match:
        query = match.group(1) or ''
        hours = parse_timespan_hours(match.group(2), match.group(3))
        if hours is None:
            raise InvalidTimespanError(f"last {match.group(2)} {match.group(3)}")
        options.timespan_seconds = hours * 3600
        options.season = None
    
    match = _LAST_PERIOD_RE.match(query) if query else None
    if match:
        query = match.group(1) or ''
        if match.group(2) == 'session':
            options.season = None
            options.timespan_seconds = None
        else:
            options.season, options.timespan_seconds = season_timespan(now)
    
    match = _ON_MAP_RE.match(query) if query else None
    if match:
        query = match.group(1) or ''
        game_map = metadata.parse_map(match.group(2))
        if game_map is None:
            raise InvalidMapError(match.group(2))
        options.map = game_map.name
    
    match = _WITH_CIV_RE.match(query) if query else None
    if match:
        query = match.group(1) or ''
        civ = metadata.parse_civ(match.group(2))
        if civ is None:
            raise InvalidCivilizationError(match.group(2))
        options.civilization = civ.id
    
    result = WinRateQuery(player_query=query, options=options)
    if query:
        versus = _VERSUS_RE.split(query)
        if len(versus) == 2 and versus[1]:
            result.player_query = versus[0]
            result.opponent_query = versus[1]
    
    return result
