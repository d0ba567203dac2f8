"""
Win rate aggregation over a play session or an explicit time window.

Walks the merged game history newest first and stops either at the first
idle gap longer than the session threshold, or at the first game older than
the requested timespan.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence, Union

from ladder_bot.constants import WinRateConstants
from ladder_bot.data_models.game import GameRecord, Participant
from ladder_bot.data_models.player import PlayerProfile
from ladder_bot.data_models.winrate import WinRateOptions, WinRateStats
from ladder_bot.services.game_history import GameHistoryService

logger = logging.getLogger(__name__)


def calculate_win_rate(wins: int, losses: int) -> float:
    """Win percentage with one decimal; 100 when nothing was lost."""
    if not losses:
        return WinRateConstants.UNDEFEATED_WIN_RATE
    # Round half up, not to even
    return math.floor(1000 * wins / (wins + losses) + 0.5) / 10


class WinRateService:
    """Service computing session or window win rates from game history."""
    
    def __init__(self, history_service: GameHistoryService,
                 clock: Optional[Callable[[], datetime]] = None):
        self.history_service = history_service
        self.clock = clock or (lambda: datetime.now(timezone.utc))
    
    @staticmethod
    def _find_sides(game: GameRecord, profile_ids: Sequence[int],
                    opponent_id: Optional[int]):
        """Locate the subject's and the opponent's entries on different teams."""
        player_state: Optional[Participant] = None
        opponent_state: Optional[Participant] = None
        
        for team in game.teams:
            team_player = next((p for p in team if p.profile_id in profile_ids), None)
            team_opponent = None
            if opponent_id is not None:
                team_opponent = next((p for p in team if p.profile_id == opponent_id), None)
            
            if team_player:
                player_state = team_player
            elif team_opponent:
                # An opponent sharing the subject's team is not an opponent
                opponent_state = team_opponent
        
        return player_state, opponent_state
    
    async def compute_win_rate(self, subject: Union[PlayerProfile, Sequence[PlayerProfile]],
                               opponent: Optional[PlayerProfile] = None,
                               options: Optional[WinRateOptions] = None) -> WinRateStats:
        """
        Compute win rate statistics for the subject's latest session or window.
        
        Args:
            subject: Player, or several profiles of the same person (alts)
            opponent: Only count games against this player
            options: Filters and window parameters
            
        Returns:
            WinRateStats, zero-valued when no game qualifies
        """
        options = options or WinRateOptions()
        players = [subject] if isinstance(subject, PlayerProfile) else list(subject)
        profile_ids = [p.profile_id for p in players]
        opponent_id = opponent.profile_id if opponent else None
        
        now = self.clock()
        timespan = options.timespan_seconds
        since = now - timedelta(seconds=timespan) if timespan else None
        pending_cutoff = now - timedelta(seconds=WinRateConstants.PENDING_GAME_CUTOFF_SECONDS)
        
        stats = WinRateStats(
            player=players[0] if players else None,
            opponent=opponent,
            timespan_seconds=timespan,
            idle_gap_seconds=options.idle_gap_seconds,
            options=options,
        )
        
        # Session detection needs every game, so the opponent filter is only
        # pushed upstream when a fixed window is requested
        games = self.history_service.enumerate_games(
            profile_ids,
            opponent_id if since else None,
            since,
        )
        
        last_game: Optional[datetime] = None
        pending_game: Optional[GameRecord] = None

        try:
            async for game in games:
                game_time = game.started_at

                if not timespan:
                    if last_game and (last_game - game_time).total_seconds() > options.idle_gap_seconds:
                        break
                elif (now - game_time).total_seconds() > timespan:
                    break

                # Updated before any content filter: skipped team games still
                # keep the session alive
                last_game = game_time

                if game.player_count > WinRateConstants.MAX_SOLO_PARTICIPANTS and not options.include_team_games:
                    continue

                player_state, opponent_state = self._find_sides(game, profile_ids, opponent_id)
                if not player_state:
                    continue
                if opponent_id is not None and not opponent_state:
                    continue

                if not game.duration:
                    # Older ongoing games are most likely canceled ones
                    if game_time > pending_cutoff:
                        if pending_game is None:
                            pending_game = game
                        stats.pending_games += 1
                    continue

                if options.civilization and player_state.civilization != options.civilization:
                    continue
                if options.map and game.map != options.map:
                    continue

                if not stats.last_game_at:
                    stats.last_game_at = game.finished_at
                stats.first_game_at = game_time
                stats.games_count += 1
                stats.duration += game.duration

                if player_state.result == 'win':
                    stats.wins_count += 1
                elif player_state.result == 'loss':
                    stats.losses_count += 1
        finally:
            await games.aclose()

        if pending_game:
            stats.pending_game_started_at = pending_game.started_at
        
        stats.win_rate = calculate_win_rate(stats.wins_count, stats.losses_count)
        
        logger.debug(
            f"Win rate for {profile_ids}: {stats.wins_count}W/{stats.losses_count}L "
            f"over {stats.games_count} games, {stats.pending_games} pending"
        )
        return stats
