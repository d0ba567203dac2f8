"""
Centralized error embeds for consistent error handling across the ladder bot.
"""

import discord
from typing import Optional

from ladder_bot.utils.exceptions import LadderException


class ErrorEmbeds:
    """Centralized error embed factory for consistent error handling."""
    
    @staticmethod
    def ladder_error(error: LadderException) -> discord.Embed:
        """Create embed for an expected ladder query error."""
        return discord.Embed(
            title="Query Failed",
            description=error.user_message,
            color=discord.Color.red()
        )
    
    @staticmethod
    def no_linked_profiles(member: Optional[discord.abc.User] = None) -> discord.Embed:
        """Create embed for when a query needs the caller's profiles but none are linked."""
        who = member.mention if member else "This user"
        return discord.Embed(
            title="No Linked Profile",
            description=f"{who} has not linked an aoe4world profile yet!\n\n"
                        "Use `/link` with your profile id, or pass a player name.",
            color=discord.Color.orange()
        )
    
    @staticmethod
    def command_error(error: str) -> discord.Embed:
        """Create embed for general command errors."""
        return discord.Embed(
            title="Command Error",
            description=f"An error occurred: {error}\n\nPlease try again or contact an administrator.",
            color=discord.Color.red()
        )
    
    @staticmethod
    def invalid_input(message: str) -> discord.Embed:
        """Create embed for invalid user input."""
        return discord.Embed(
            title="Invalid Input",
            description=message,
            color=discord.Color.red()
        )
    
    @staticmethod
    def timed_out() -> discord.Embed:
        """Create embed for when the statistics provider is too slow."""
        return discord.Embed(
            title="Timed Out",
            description="aoe4world is taking too long to answer. Please try again in a moment.",
            color=discord.Color.orange()
        )
