"""
Chronological game history across several profiles.

Merges the independently paginated, newest-first game lists of a set of
profiles into a single newest-first stream, fetching further pages only when
the merge actually needs them.
"""

import asyncio
import logging
from datetime import datetime
from typing import AsyncIterator, Awaitable, Callable, Iterable, List, Optional, Union

from ladder_bot.data_models.game import FetchState, GameRecord, GamesPage
from ladder_bot.utils.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

# fetch_page(profile_id, opponent_profile_id, since, page) -> GamesPage | None
FetchGamesPage = Callable[[int, Optional[int], Optional[datetime], int], Awaitable[Optional[GamesPage]]]


def _check_profile_id(value):
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgumentError(value)


class GameHistoryService:
    """Service producing a merged, time-ordered game stream for several profiles."""
    
    def __init__(self, fetch_page: FetchGamesPage):
        """
        Initialize with the page fetch collaborator.
        
        Args:
            fetch_page: Awaitable returning one GamesPage (or None when the
                upstream has no usable data) for a profile and 1-based page
        """
        self.fetch_page = fetch_page
    
    def enumerate_games(self, profile_ids: Union[int, Iterable[int]],
                        opponent_profile_id: Optional[int] = None,
                        since: Optional[datetime] = None) -> AsyncIterator[GameRecord]:
        """
        Lazily enumerate the games of all profiles, newest first.
        
        Arguments are validated here, before anything is fetched.
        
        Args:
            profile_ids: One profile id or several (duplicates are ignored)
            opponent_profile_id: Only games against this profile (server-side)
            since: Only games started after this time (server-side)
            
        Returns:
            Async iterator of GameRecord, non-increasing in started_at
            
        Raises:
            InvalidArgumentError: If any id is not an integer
        """
        if isinstance(profile_ids, int) and not isinstance(profile_ids, bool):
            profile_ids = [profile_ids]
        profile_ids = list(dict.fromkeys(profile_ids))
        for profile_id in profile_ids:
            _check_profile_id(profile_id)
        if opponent_profile_id is not None:
            _check_profile_id(opponent_profile_id)
        
        return self._merge(profile_ids, opponent_profile_id, since)
    
    async def _fetch_state(self, profile_id: int, opponent_profile_id: Optional[int],
                           since: Optional[datetime], page: int, offset: int) -> FetchState:
        state = FetchState(
            profile_id=profile_id,
            opponent_profile_id=opponent_profile_id,
            since=since,
            page=page,
            offset=offset,
        )
        result = await self.fetch_page(profile_id, opponent_profile_id, since, page)
        if result is None or not result.games:
            # Upstream failure or a short last page: nothing more from this profile
            if result is None:
                logger.debug(f"No data for profile {profile_id} page {page}, treating as exhausted")
            state.mark_exhausted()
            return state
        
        state.games = list(result.games)
        state.total_count = result.total_count
        return state
    
    async def _next_page(self, state: FetchState) -> FetchState:
        return await self._fetch_state(
            state.profile_id,
            state.opponent_profile_id,
            state.since,
            state.page + 1,
            state.offset + len(state.games),
        )
    
    async def _merge(self, profile_ids: List[int], opponent_profile_id: Optional[int],
                     since: Optional[datetime]) -> AsyncIterator[GameRecord]:
        states = list(await asyncio.gather(*(
            self._fetch_state(p, opponent_profile_id, since, 1, 0) for p in profile_ids
        )))
        
        while True:
            # Refill every drained profile that still has pages left, all at once
            refill = [i for i, s in enumerate(states) if s.needs_next_page]
            if refill:
                pages = await asyncio.gather(*(self._next_page(states[i]) for i in refill))
                for i, state in zip(refill, pages):
                    states[i] = state
            
            # Pick the latest current game; earlier states win ties
            latest = None
            for state in states:
                if not state.has_current:
                    continue
                if latest is None or latest.current.started_at < state.current.started_at:
                    latest = state
            
            if latest is None:
                return
            
            yield latest.advance()
