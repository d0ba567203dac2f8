"""
Ladder service: answers rank, last match and win rate questions.

Resolves the players named in a query (by name, '#rank' or linked profile
ids) through the aoe4world client and delegates win rate math to
WinRateService.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from ladder_bot.api.client import Aoe4WorldClient, is_valid_leaderboard
from ladder_bot.config import Config
from ladder_bot.data_models.game import GameRecord
from ladder_bot.data_models.player import PlayerProfile
from ladder_bot.data_models.winrate import WinRateOptions, WinRateStats
from ladder_bot.services.game_history import GameHistoryService
from ladder_bot.services.winrate import WinRateService
from ladder_bot.utils.exceptions import (
    InvalidLeaderboardError, NoMatchesError, PlayerNotFoundError
)
from ladder_bot.utils.winrate_query import parse_winrate_query, season_timespan

logger = logging.getLogger(__name__)


class LadderService:
    """Service orchestrating player lookups and ladder statistics."""

    def __init__(self, client: Aoe4WorldClient, winrate_service: Optional[WinRateService] = None):
        self.client = client
        self.winrate_service = winrate_service or WinRateService(
            GameHistoryService(client.fetch_games_page)
        )

    @staticmethod
    def _check_leaderboard(leaderboard: Optional[str]):
        if leaderboard and not is_valid_leaderboard(leaderboard):
            raise InvalidLeaderboardError(leaderboard)

    async def _resolve_player(self, query: str, leaderboard: Optional[str], role: str = "player") -> PlayerProfile:
        # Ranks only exist per leaderboard; names can be searched across all
        if query.startswith('#') and not leaderboard:
            leaderboard = Config.DEFAULT_LEADERBOARD
        player = await self.client.find_player_by_query(query, leaderboard)
        if not player:
            raise PlayerNotFoundError(query, role)
        return player

    async def _resolve_profiles(self, profile_ids: Sequence[int]) -> List[PlayerProfile]:
        """Full lookup for the main profile only; alts are bare ids."""
        if not profile_ids:
            raise PlayerNotFoundError()
        main = await self.client.get_player(profile_ids[0])
        if not main:
            raise PlayerNotFoundError(str(profile_ids[0]))
        return [main] + [PlayerProfile(profile_id=p) for p in profile_ids[1:]]

    async def get_rank(self, query: str = '', default_profile_ids: Sequence[int] = (),
                       leaderboard: Optional[str] = None) -> PlayerProfile:
        """
        Look up a player's standing.

        Args:
            query: '#N' rank or player name; empty to use default_profile_ids
            default_profile_ids: Caller's linked profiles, main account first
            leaderboard: Leaderboard key, defaults to Config.DEFAULT_LEADERBOARD

        Raises:
            InvalidLeaderboardError, PlayerNotFoundError
        """
        leaderboard = leaderboard or Config.DEFAULT_LEADERBOARD
        self._check_leaderboard(leaderboard)

        if query:
            return await self._resolve_player(query, leaderboard)
        players = await self._resolve_profiles(default_profile_ids[:1])
        return players[0]

    async def get_last_match(self, query: str = '', default_profile_ids: Sequence[int] = (),
                             leaderboard: Optional[str] = None) -> GameRecord:
        """
        Most recent game across a player's profiles.

        With several default profiles (a streamer's alts) the latest game of
        any of them is returned.

        Raises:
            InvalidLeaderboardError, PlayerNotFoundError, NoMatchesError
        """
        self._check_leaderboard(leaderboard)

        if query:
            player = await self._resolve_player(query, leaderboard or Config.DEFAULT_LEADERBOARD)
            profile_ids = [player.profile_id]
        else:
            profile_ids = list(default_profile_ids)
            if not profile_ids:
                raise PlayerNotFoundError()

        matches = await asyncio.gather(*(self.client.get_last_match(p) for p in profile_ids))
        matches = [m for m in matches if m is not None]
        if matches:
            return max(matches, key=lambda m: m.started_at)

        player = await self.client.get_player(profile_ids[0])
        raise NoMatchesError(player.name if player else str(profile_ids[0]))

    async def get_win_rate(self, query: str = '', default_profile_ids: Sequence[int] = (),
                           leaderboard: Optional[str] = None,
                           timespan_hours: Optional[float] = None,
                           idle_hours: Optional[float] = None,
                           include_team_games: bool = False,
                           season: bool = False) -> WinRateStats:
        """
        Win rate for the player and filters described by a chat query.

        Args:
            query: e.g. "beasty vs marinelord last 2 weeks with english"
            default_profile_ids: Caller's linked profiles, used when the query
                names no player (including "vs xyz")
            leaderboard: Leaderboard used for name/rank lookups
            timespan_hours: Explicit window; overridden by 'last ...' in query
            idle_hours: Session idle gap; 0 ends the session at any gap
            include_team_games: Count games with more than two players
            season: Window from the start of the current season; overridden
                by 'last ...' in query

        Raises:
            PlayerNotFoundError, InvalidLeaderboardError, InvalidTimespanError,
            InvalidMapError, InvalidCivilizationError
        """
        self._check_leaderboard(leaderboard)

        options = WinRateOptions(
            idle_gap_seconds=(Config.DEFAULT_IDLE_HOURS if idle_hours is None else idle_hours) * 3600,
            timespan_seconds=timespan_hours * 3600 if timespan_hours else None,
            include_team_games=include_team_games,
        )
        if season:
            options.season, options.timespan_seconds = season_timespan()
        parsed = parse_winrate_query(query, options)

        if parsed.player_query:
            subject = [await self._resolve_player(parsed.player_query, leaderboard)]
        else:
            subject = await self._resolve_profiles(list(default_profile_ids))

        opponent = None
        if parsed.opponent_query:
            opponent = await self._resolve_player(parsed.opponent_query, leaderboard, role="opponent")

        return await self.winrate_service.compute_win_rate(subject, opponent, parsed.options)
