"""
Ladder commands: rank, last match and win rate.

Slash commands answer with embeds; the prefix commands answer with a single
line of chat text, in the style of stream chat bots.
"""

import asyncio
import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from ladder_bot.config import Config
from ladder_bot.constants import TimeoutConstants
from ladder_bot.services.ladder import LadderService
from ladder_bot.utils.embeds import build_match_embed, build_rank_embed, build_winrate_embed
from ladder_bot.utils.error_embeds import ErrorEmbeds
from ladder_bot.utils.exceptions import LadderException, PlayerNotFoundError
from ladder_bot.utils.formatters import format_match_text, format_rank_text, format_winrate_text

logger = logging.getLogger(__name__)

LEADERBOARD_CHOICES = [
    app_commands.Choice(name=key, value=key)
    for key in ('rm_1v1', 'rm_2v2', 'rm_3v3', 'rm_4v4', 'qm_1v1', 'qm_2v2', 'qm_3v3', 'qm_4v4')
]


class LadderCog(commands.Cog):
    """AoE4 ladder lookups backed by aoe4world."""

    def __init__(self, bot):
        self.bot = bot
        self.ladder_service: LadderService = bot.ladder_service
        self.profile_links = bot.profile_link_service

    async def _default_profile_ids(self, user: discord.abc.User):
        return await self.profile_links.get_profile_ids(user.id)

    async def _default_leaderboard(self, user: discord.abc.User) -> Optional[str]:
        link = await self.profile_links.get_link(user.id)
        return link.default_leaderboard if link else None

    async def _run(self, coro):
        return await asyncio.wait_for(coro, timeout=TimeoutConstants.COMMAND_TIMEOUT)

    async def _send_failure(self, interaction: discord.Interaction, command: str, error: Exception):
        """Reply to a failed slash command with the matching error embed."""
        if isinstance(error, PlayerNotFoundError) and error.query is None:
            embed = ErrorEmbeds.no_linked_profiles(interaction.user)
        elif isinstance(error, LadderException):
            embed = ErrorEmbeds.ladder_error(error)
        elif isinstance(error, asyncio.TimeoutError):
            logger.warning(f"/{command} for {interaction.user.id} timed out")
            embed = ErrorEmbeds.timed_out()
        else:
            logger.error(f"Error in {command} command: {error}", exc_info=error)
            embed = ErrorEmbeds.command_error("Could not reach the ladder right now. Please try again later.")
        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(name="rank", description="Show a player's ladder rank and rating")
    @app_commands.describe(
        query="Player name, 'exact name' in quotes, or #rank (defaults to your linked profile)",
        leaderboard="Leaderboard to look at (defaults to rm_1v1)"
    )
    @app_commands.choices(leaderboard=LEADERBOARD_CHOICES)
    @app_commands.checks.cooldown(rate=3, per=15.0, key=lambda i: i.user.id)
    async def rank(self, interaction: discord.Interaction, query: Optional[str] = None,
                   leaderboard: Optional[app_commands.Choice[str]] = None):
        """Display a player's standing on a leaderboard."""
        await interaction.response.defer()

        try:
            board = leaderboard.value if leaderboard else await self._default_leaderboard(interaction.user)
            player = await self._run(self.ladder_service.get_rank(
                query or '',
                await self._default_profile_ids(interaction.user),
                board
            ))
            await interaction.followup.send(embed=build_rank_embed(player, board or Config.DEFAULT_LEADERBOARD))
        except Exception as e:
            await self._send_failure(interaction, "rank", e)

    @app_commands.command(name="match", description="Show a player's most recent match")
    @app_commands.describe(query="Player name or #rank (defaults to your linked profiles)")
    @app_commands.checks.cooldown(rate=3, per=15.0, key=lambda i: i.user.id)
    async def match(self, interaction: discord.Interaction, query: Optional[str] = None):
        """Display the latest game of a player or of any linked profile."""
        await interaction.response.defer()

        try:
            game = await self._run(self.ladder_service.get_last_match(
                query or '',
                await self._default_profile_ids(interaction.user),
                await self._default_leaderboard(interaction.user)
            ))
            await interaction.followup.send(embed=build_match_embed(game))
        except Exception as e:
            await self._send_failure(interaction, "match", e)

    @app_commands.command(name="winrate", description="Win rate over the last session or a time window")
    @app_commands.describe(
        query="e.g. 'vs beasty', 'last 3 days', 'with english on arabia' (defaults to your session)",
        timespan_hours="Count games from the last N hours instead of the last session",
        idle_hours="Hours without games that end a session (default 4)",
        team_games="Also count team games",
        season="Count every game of the current season"
    )
    @app_commands.checks.cooldown(rate=2, per=20.0, key=lambda i: i.user.id)
    async def winrate(self, interaction: discord.Interaction, query: Optional[str] = None,
                      timespan_hours: Optional[app_commands.Range[int, 1, 24 * 365]] = None,
                      idle_hours: Optional[app_commands.Range[int, 1, 48]] = None,
                      team_games: bool = False, season: bool = False):
        """Display session or window win rate, optionally against one opponent."""
        await interaction.response.defer()

        try:
            stats = await self._run(self.ladder_service.get_win_rate(
                query or '',
                await self._default_profile_ids(interaction.user),
                await self._default_leaderboard(interaction.user),
                timespan_hours=timespan_hours,
                idle_hours=idle_hours,
                include_team_games=team_games,
                season=season,
            ))
            await interaction.followup.send(embed=build_winrate_embed(stats))
        except Exception as e:
            await self._send_failure(interaction, "winrate", e)

    # Chat text commands

    async def _reply_text(self, ctx: commands.Context, command: str, coro_factory, render):
        try:
            async with ctx.typing():
                result = await self._run(coro_factory())
            await ctx.send(render(result))
        except PlayerNotFoundError as e:
            if e.query is None:
                await ctx.send(f"❌ No player given and no profile linked. Use `{ctx.prefix}{command} <name>` or `/link`.")
            else:
                await ctx.send(e.user_message)
        except LadderException as e:
            await ctx.send(e.user_message)
        except asyncio.TimeoutError:
            await ctx.send("⏰ aoe4world is taking too long to answer. Please try again in a moment.")

    @commands.command(name='rank')
    @commands.cooldown(3, 15, commands.BucketType.user)
    async def rank_text(self, ctx, *, query: str = ''):
        """!rank [name|#rank] - ladder rank and rating"""
        profile_ids = await self._default_profile_ids(ctx.author)
        leaderboard = await self._default_leaderboard(ctx.author) or Config.DEFAULT_LEADERBOARD
        await self._reply_text(
            ctx, 'rank',
            lambda: self.ladder_service.get_rank(query, profile_ids, leaderboard),
            lambda player: format_rank_text(player, leaderboard)
        )

    @commands.command(name='match', aliases=['lastmatch'])
    @commands.cooldown(3, 15, commands.BucketType.user)
    async def match_text(self, ctx, *, query: str = ''):
        """!match [name|#rank] - most recent match"""
        profile_ids = await self._default_profile_ids(ctx.author)
        await self._reply_text(
            ctx, 'match',
            lambda: self.ladder_service.get_last_match(query, profile_ids),
            format_match_text
        )

    @commands.command(name='winrate', aliases=['wr'])
    @commands.cooldown(2, 20, commands.BucketType.user)
    async def winrate_text(self, ctx, *, query: str = ''):
        """!winrate [name] [vs name] [with civ] [on map] [last N days|last session|last season]"""
        profile_ids = await self._default_profile_ids(ctx.author)
        leaderboard = await self._default_leaderboard(ctx.author)
        await self._reply_text(
            ctx, 'winrate',
            lambda: self.ladder_service.get_win_rate(query, profile_ids, leaderboard),
            format_winrate_text
        )


async def setup(bot):
    await bot.add_cog(LadderCog(bot))
