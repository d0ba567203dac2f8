"""
Async client for the aoe4world statistics API.

Every request is best-effort: failures are logged and surfaced to callers as
None ("no data"), never as network exceptions.
"""

import asyncio
import logging
import re
import time
from datetime import datetime
from typing import Any, Dict, Optional

import aiohttp

from ladder_bot.config import Config
from ladder_bot.constants import LeaderboardConstants
from ladder_bot.data_models.game import GameRecord, GamesPage
from ladder_bot.data_models.player import LeaderboardMode, PlayerProfile
from ladder_bot.utils.exceptions import UpstreamUnavailableError
from ladder_bot.utils.time_parser import format_timestamp

logger = logging.getLogger(__name__)

_LEADERBOARD_RE = re.compile(LeaderboardConstants.LEADERBOARD_PATTERN)


def is_valid_leaderboard(leaderboard: Optional[str]) -> bool:
    """Check a leaderboard key such as 'rm_1v1' or 'qm_4v4'."""
    return bool(leaderboard and _LEADERBOARD_RE.match(leaderboard))


def _is_profile_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _chat_player(leaderboard: str) -> PlayerProfile:
    """Stand-in for "#0": stream chat, sitting above rank 1."""
    return PlayerProfile(
        profile_id=0,
        name='Twitch Chat',
        modes={leaderboard: LeaderboardMode(
            rating=9999,
            rank=0,
            games_count=0,
            rank_level='conqueror_4' if leaderboard == 'rm_1v1' else None,
        )},
    )


class Aoe4WorldClient:
    """Thin wrapper around the aoe4world REST endpoints used by the bot."""
    
    def __init__(self, session: Optional[aiohttp.ClientSession] = None,
                 base_url: str = None, timeout: float = None):
        self.base_url = (base_url or Config.AOE4WORLD_API_URL).rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout or Config.HTTP_TIMEOUT_SECONDS)
        self._session = session
        self._owns_session = session is None
    
    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session
    
    async def close(self):
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
    
    async def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """
        Perform one GET request.
        
        Returns:
            Decoded JSON payload, or None for a 404
            
        Raises:
            UpstreamUnavailableError: On network errors, timeouts, non-200
                statuses or undecodable bodies
        """
        url = self.base_url + path
        session = await self._get_session()
        start = time.perf_counter()
        logger.info(f"  Req: {url} {params or ''}")
        try:
            async with session.get(url, params=params) as resp:
                elapsed = (time.perf_counter() - start) * 1000
                logger.info(f"  Res: {url} ({resp.status}, {elapsed:.0f} msec)")
                # 404 is expected for e.g. /games/last on a player without games
                if resp.status == 404:
                    return None
                if resp.status != 200:
                    raise UpstreamUnavailableError(url, f"status {resp.status}")
                return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            elapsed = (time.perf_counter() - start) * 1000
            raise UpstreamUnavailableError(url, f"{type(e).__name__}: {e}, {elapsed:.0f} msec") from e
    
    async def _fetch_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Best-effort GET: any upstream failure is logged and reported as None."""
        try:
            return await self._request(path, params)
        except UpstreamUnavailableError as e:
            logger.warning(f"  Err: {e}")
            return None
    
    async def fetch_games_page(self, profile_id: int, opponent_profile_id: Optional[int] = None,
                               since: Optional[datetime] = None, page: int = 1) -> Optional[GamesPage]:
        """Fetch one page (1-based, newest first) of a profile's game history."""
        params: Dict[str, Any] = {'page': page}
        if opponent_profile_id:
            params['opponent_profile_id'] = opponent_profile_id
        if since:
            params['since'] = format_timestamp(since)
        
        json = await self._fetch_json(f"/players/{profile_id}/games", params)
        if not json or 'games' not in json:
            return None
        
        try:
            return GamesPage.from_dict(json, page=page)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"  Err: malformed games page {page} for profile {profile_id}: {e}")
            return None
    
    async def find_player_by_name(self, name: str, leaderboard: Optional[str] = None) -> Optional[PlayerProfile]:
        """
        Search for a player by name.
        
        A name wrapped in single quotes ('xyz') is searched exactly. With a
        leaderboard only players ranked on it are considered.
        """
        if leaderboard and not is_valid_leaderboard(leaderboard):
            return None
        
        params: Dict[str, Any] = {}
        match_exact = re.match(r"^'(.*)'$", name)
        if match_exact:
            params['query'] = match_exact.group(1)
            params['exact'] = 'true'
        else:
            params['query'] = name
        
        if leaderboard:
            json = await self._fetch_json(f"/leaderboards/{leaderboard}", params)
            if json and json.get('count') and json.get('players'):
                return PlayerProfile.from_leaderboard_entry(json['players'][0], leaderboard)
        else:
            json = await self._fetch_json('/players/search', params)
            if json and json.get('count') and json.get('players'):
                return PlayerProfile.from_dict(json['players'][0], modes_key='leaderboards')
        
        return None
    
    async def find_player_by_rank(self, rank: int, leaderboard: str) -> Optional[PlayerProfile]:
        """Find the player holding a rank on a leaderboard."""
        if not is_valid_leaderboard(leaderboard) or rank < 0:
            return None
        if rank == 0:
            return _chat_player(leaderboard)
        
        page = 1 + (rank - 1) // LeaderboardConstants.PAGE_SIZE
        json = await self._fetch_json(f"/leaderboards/{leaderboard}", {'page': page})
        
        if json and json.get('count') and json.get('players'):
            for entry in json['players']:
                if entry.get('rank') == rank:
                    return PlayerProfile.from_leaderboard_entry(entry, leaderboard)
        
        return None
    
    async def find_player_by_query(self, query: str, leaderboard: str) -> Optional[PlayerProfile]:
        """Resolve '#N' as a rank and anything else as a name."""
        if query.startswith('#'):
            try:
                rank = int(query[1:])
            except ValueError:
                return None
            return await self.find_player_by_rank(rank, leaderboard)
        return await self.find_player_by_name(query, leaderboard)
    
    async def get_player(self, profile_id: int) -> Optional[PlayerProfile]:
        if not _is_profile_id(profile_id):
            return None
        
        json = await self._fetch_json(f"/players/{profile_id}")
        if json:
            return PlayerProfile.from_dict(json, modes_key='modes')
        return None
    
    async def get_last_match(self, profile_id: int) -> Optional[GameRecord]:
        """Most recent game of a profile, ongoing or finished."""
        if not _is_profile_id(profile_id):
            return None
        
        json = await self._fetch_json(f"/players/{profile_id}/games/last")
        if json:
            return GameRecord.from_dict(json)
        return None
