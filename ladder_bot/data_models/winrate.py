"""
Win rate request options and result accumulator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ladder_bot.constants import WinRateConstants
from ladder_bot.data_models.player import PlayerProfile


@dataclass
class WinRateOptions:
    """Filters and window parameters for one win rate request."""
    civilization: Optional[str] = None
    map: Optional[str] = None
    idle_gap_seconds: float = WinRateConstants.DEFAULT_IDLE_GAP_SECONDS
    timespan_seconds: Optional[float] = None  # Overrides idle gap session detection
    include_team_games: bool = False
    season: Optional[int] = None  # Display only


@dataclass
class WinRateStats:
    """Statistics accumulated over one session or time window."""
    player: Optional[PlayerProfile] = None
    opponent: Optional[PlayerProfile] = None
    timespan_seconds: Optional[float] = None
    idle_gap_seconds: Optional[float] = None
    games_count: int = 0
    wins_count: int = 0
    losses_count: int = 0
    duration: int = 0
    first_game_at: Optional[datetime] = None
    last_game_at: Optional[datetime] = None
    win_rate: float = WinRateConstants.UNDEFEATED_WIN_RATE
    pending_games: int = 0
    pending_game_started_at: Optional[datetime] = None
    options: WinRateOptions = field(default_factory=WinRateOptions)

    def to_dict(self) -> Dict[str, Any]:
        def iso(dt):
            return dt.isoformat() if dt else None

        return {
            'player': {'profile_id': self.player.profile_id, 'name': self.player.name} if self.player else None,
            'opponent': {'profile_id': self.opponent.profile_id, 'name': self.opponent.name} if self.opponent else None,
            'timespan': self.timespan_seconds,
            'idletime': self.idle_gap_seconds,
            'games_count': self.games_count,
            'wins_count': self.wins_count,
            'losses_count': self.losses_count,
            'duration': self.duration,
            'first_game_at': iso(self.first_game_at),
            'last_game_at': iso(self.last_game_at),
            'win_rate': self.win_rate,
            'pending_games': self.pending_games,
            'pending_game_started_at': iso(self.pending_game_started_at),
            'civilization': self.options.civilization,
            'map': self.options.map,
            'season': self.options.season,
        }
