"""
Builders and fakes shared by the test modules.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from ladder_bot.data_models.game import GameRecord, GamesPage, Participant
from ladder_bot.data_models.player import PlayerProfile

NOW = datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc)


def hours_ago(hours: float) -> datetime:
    return NOW - timedelta(hours=hours)


def participant(profile_id: int, result: Optional[str] = None, civ: str = 'english',
                name: Optional[str] = None, rating: Optional[int] = None) -> Participant:
    return Participant(
        profile_id=profile_id,
        name=name or f"player{profile_id}",
        civilization=civ,
        result=result,
        rating=rating,
    )


def make_game(game_id: int, started_at: datetime, teams, duration: Optional[int] = 1200,
              map_name: str = 'Dry Arabia') -> GameRecord:
    return GameRecord(
        game_id=game_id,
        started_at=started_at,
        duration=duration,
        map=map_name,
        teams=tuple(tuple(team) for team in teams),
        kind='rm_1v1',
        leaderboard='rm_solo',
    )


def duel(game_id: int, started_at: datetime, subject: int = 1, opponent: int = 2,
         result: Optional[str] = 'win', duration: Optional[int] = 1200,
         civ: str = 'english', map_name: str = 'Dry Arabia') -> GameRecord:
    """1v1 from the subject's point of view."""
    other = {'win': 'loss', 'loss': 'win'}.get(result)
    return make_game(
        game_id,
        started_at,
        [[participant(subject, result, civ)], [participant(opponent, other, 'french')]],
        duration=duration,
        map_name=map_name,
    )


def profile(profile_id: int, name: Optional[str] = None) -> PlayerProfile:
    return PlayerProfile(profile_id=profile_id, name=name or f"player{profile_id}")


class FakeGamesSource:
    """
    In-memory stand-in for the games page endpoint.

    Serves each profile's newest-first history in pages of page_size and
    records every call. Profiles in failing always return None; pages in
    failing_pages ((profile_id, page) pairs) return None.
    """

    def __init__(self, histories: Dict[int, List[GameRecord]], page_size: int = 2,
                 failing: Iterable[int] = (), failing_pages: Iterable = (),
                 honor_since: bool = True):
        self.histories = histories
        self.page_size = page_size
        self.failing = set(failing)
        self.failing_pages = set(failing_pages)
        self.honor_since = honor_since
        self.calls = []

    async def fetch_page(self, profile_id, opponent_profile_id=None, since=None, page=1):
        self.calls.append((profile_id, opponent_profile_id, since, page))
        await asyncio.sleep(0)

        if profile_id in self.failing or (profile_id, page) in self.failing_pages:
            return None

        games = self.histories.get(profile_id, [])
        if opponent_profile_id:
            games = [g for g in games if any(p.profile_id == opponent_profile_id for p in g.participants)]
        if since and self.honor_since:
            games = [g for g in games if g.started_at >= since]

        start = (page - 1) * self.page_size
        return GamesPage(
            games=games[start:start + self.page_size],
            offset=start,
            total_count=len(games),
            page=page,
        )

    def pages_requested(self, profile_id: int) -> List[int]:
        return [page for pid, _, _, page in self.calls if pid == profile_id]


async def collect(games) -> List[GameRecord]:
    return [game async for game in games]


def run(coro):
    return asyncio.run(coro)
