"""
Game history data models.

Immutable snapshots of upstream games plus the request-scoped cursor used to
walk a single profile's paginated history.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from ladder_bot.utils.time_parser import parse_timestamp


@dataclass(frozen=True)
class Participant:
    """One player's entry in a game team."""
    profile_id: int
    name: str
    civilization: Optional[str] = None
    result: Optional[str] = None  # 'win', 'loss', None while undetermined
    rating: Optional[int] = None
    rating_diff: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Participant':
        # Team entries are wrapped as {"player": {...}}
        player = data.get('player', data)
        return cls(
            profile_id=player['profile_id'],
            name=player.get('name') or '',
            civilization=player.get('civilization'),
            result=player.get('result'),
            rating=player.get('rating'),
            rating_diff=player.get('rating_diff'),
        )


@dataclass(frozen=True)
class GameRecord:
    """A completed or in-progress match."""
    game_id: int
    started_at: datetime
    duration: Optional[int]
    map: str
    teams: Tuple[Tuple[Participant, ...], ...]
    kind: Optional[str] = None
    leaderboard: Optional[str] = None
    server: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameRecord':
        return cls(
            game_id=data.get('game_id'),
            started_at=parse_timestamp(data['started_at']),
            duration=data.get('duration'),
            map=data.get('map') or '',
            teams=tuple(
                tuple(Participant.from_dict(entry) for entry in team)
                for team in data.get('teams') or []
            ),
            kind=data.get('kind'),
            leaderboard=data.get('leaderboard'),
            server=data.get('server'),
        )

    @property
    def participants(self) -> List[Participant]:
        return [p for team in self.teams for p in team]

    @property
    def player_count(self) -> int:
        return sum(len(team) for team in self.teams)

    @property
    def is_ongoing(self) -> bool:
        return not self.duration

    @property
    def finished_at(self) -> datetime:
        return self.started_at + timedelta(seconds=self.duration or 0)


@dataclass
class GamesPage:
    """Result of one games page fetch."""
    games: List[GameRecord]
    offset: int
    total_count: int
    page: int = 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any], page: int = 1) -> 'GamesPage':
        games = [GameRecord.from_dict(g) for g in data.get('games') or []]
        offset = data.get('offset') or 0
        total_count = data.get('total_count')
        if not isinstance(total_count, int) or isinstance(total_count, bool):
            # Unknown total: treat this page as the last one
            total_count = offset + len(games)
        return cls(
            games=games,
            offset=offset,
            total_count=total_count,
            page=data.get('page') or page,
        )


@dataclass
class FetchState:
    """
    Cursor over one profile's paginated game history.
    
    Created per request and mutated in place as the merge advances. Holds
    0 <= index <= len(games); when index == len(games) and
    offset + index < total_count, the next page must be fetched before the
    profile counts as exhausted.
    """
    profile_id: int
    opponent_profile_id: Optional[int] = None
    since: Optional[datetime] = None
    page: int = 1
    offset: int = 0
    total_count: int = 0
    games: List[GameRecord] = field(default_factory=list)
    index: int = 0

    @property
    def has_current(self) -> bool:
        return self.index < len(self.games)

    @property
    def current(self) -> GameRecord:
        return self.games[self.index]

    @property
    def needs_next_page(self) -> bool:
        return self.index >= len(self.games) and self.offset + self.index < self.total_count

    def advance(self) -> GameRecord:
        game = self.games[self.index]
        self.index += 1
        return game

    def mark_exhausted(self):
        """Drop any remaining pages, e.g. after a failed fetch."""
        self.offset += len(self.games)
        self.games = []
        self.index = 0
        self.total_count = self.offset
