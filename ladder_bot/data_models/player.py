"""
Player data models for ladder lookups.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ladder_bot.utils.time_parser import parse_timestamp


@dataclass(frozen=True)
class LeaderboardMode:
    """A player's standing on one leaderboard (rm_1v1, qm_2v2, ...)."""
    rating: Optional[int] = None
    rank: Optional[int] = None
    streak: Optional[int] = None
    games_count: int = 0
    wins_count: int = 0
    losses_count: int = 0
    last_game_at: Optional[datetime] = None
    win_rate: Optional[float] = None
    rank_level: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LeaderboardMode':
        return cls(
            rating=data.get('rating'),
            rank=data.get('rank'),
            streak=data.get('streak'),
            games_count=data.get('games_count') or 0,
            wins_count=data.get('wins_count') or 0,
            losses_count=data.get('losses_count') or 0,
            last_game_at=parse_timestamp(data.get('last_game_at')),
            win_rate=data.get('win_rate'),
            rank_level=data.get('rank_level'),
        )


@dataclass(frozen=True)
class PlayerProfile:
    """An upstream player account with its per-leaderboard standings."""
    profile_id: int
    name: str = ''
    country: Optional[str] = None
    modes: Dict[str, LeaderboardMode] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], modes_key: str = 'modes') -> 'PlayerProfile':
        modes = data.get(modes_key) or {}
        return cls(
            profile_id=data['profile_id'],
            name=data.get('name') or '',
            country=data.get('country'),
            modes={
                key: LeaderboardMode.from_dict(value)
                for key, value in modes.items()
                if isinstance(value, dict)
            },
        )

    @classmethod
    def from_leaderboard_entry(cls, data: Dict[str, Any], leaderboard: str) -> 'PlayerProfile':
        """Fold a flat leaderboard row into the standard per-mode shape."""
        return cls(
            profile_id=data['profile_id'],
            name=data.get('name') or '',
            country=data.get('country'),
            modes={leaderboard: LeaderboardMode.from_dict(data)},
        )

    def mode(self, leaderboard: str) -> Optional[LeaderboardMode]:
        return self.modes.get(leaderboard)
