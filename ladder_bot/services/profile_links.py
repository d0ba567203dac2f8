"""
Profile link service.

Remembers which aoe4world profiles a Discord user plays on, so commands
without a player argument can answer for "me". The first linked profile is
the main account; the rest are alts merged into win rate queries.
"""

import logging
import re
from typing import List, Optional

from sqlalchemy import delete, select

from ladder_bot.database.models import ProfileLink
from ladder_bot.services.base import BaseService
from ladder_bot.utils.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

# aoe4world profile URLs look like /players/8139502-beasty
_PROFILE_URL_RE = re.compile(r'players/(\d+)')


def parse_profile_ids(text: str) -> List[int]:
    """
    Parse a comma-separated list of profile ids or aoe4world profile URLs.

    Raises:
        InvalidArgumentError: If an entry is neither
    """
    profile_ids = []
    for part in (text or '').split(','):
        part = part.strip()
        if not part:
            continue
        url_match = _PROFILE_URL_RE.search(part)
        if url_match:
            part = url_match.group(1)
        if not part.isdigit():
            raise InvalidArgumentError(part)
        profile_ids.append(int(part))
    return list(dict.fromkeys(profile_ids))


class ProfileLinkService(BaseService):
    """Service for Discord user to aoe4world profile links."""

    MAX_LINKED_PROFILES = 5

    async def get_profile_ids(self, discord_id: int) -> List[int]:
        """Linked profile ids of a user, main account first (empty if none)."""
        link = await self.get_link(discord_id)
        return link.get_profile_ids() if link else []

    async def get_link(self, discord_id: int) -> Optional[ProfileLink]:
        async def _load(session):
            result = await session.execute(
                select(ProfileLink).where(ProfileLink.discord_id == discord_id)
            )
            return result.scalar_one_or_none()

        return await self.run_in_transaction(_load)

    async def link(self, discord_id: int, profile_ids: List[int],
                   default_leaderboard: Optional[str] = None) -> ProfileLink:
        """Create or replace a user's linked profiles."""
        if not profile_ids:
            raise ValueError("At least one profile id is required")
        if len(profile_ids) > self.MAX_LINKED_PROFILES:
            raise ValueError(f"At most {self.MAX_LINKED_PROFILES} profiles can be linked")

        async def _upsert(session):
            result = await session.execute(
                select(ProfileLink).where(ProfileLink.discord_id == discord_id)
            )
            link = result.scalar_one_or_none()
            if link is None:
                link = ProfileLink(discord_id=discord_id)
                session.add(link)
            link.set_profile_ids(profile_ids)
            if default_leaderboard is not None:
                link.default_leaderboard = default_leaderboard
            await session.flush()
            return link

        link = await self.run_in_transaction(_upsert)
        logger.info(f"Linked Discord user {discord_id} to profiles {profile_ids}")
        return link

    async def unlink(self, discord_id: int) -> bool:
        """Remove a user's link. Returns True if there was one."""
        async def _delete(session):
            result = await session.execute(
                delete(ProfileLink).where(ProfileLink.discord_id == discord_id)
            )
            return result.rowcount > 0

        removed = await self.run_in_transaction(_delete)
        if removed:
            logger.info(f"Unlinked Discord user {discord_id}")
        return removed
