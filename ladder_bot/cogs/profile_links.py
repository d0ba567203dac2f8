"""
Profile link commands: tell the bot which aoe4world profiles are yours.
"""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from ladder_bot.api.client import is_valid_leaderboard
from ladder_bot.services.profile_links import ProfileLinkService, parse_profile_ids
from ladder_bot.utils.error_embeds import ErrorEmbeds
from ladder_bot.utils.exceptions import InvalidLeaderboardError, LadderException

logger = logging.getLogger(__name__)


class ProfileLinksCog(commands.Cog):
    """Link Discord users to aoe4world profiles."""
    
    def __init__(self, bot):
        self.bot = bot
        self.profile_links: ProfileLinkService = bot.profile_link_service
        self.client = bot.aoe4world_client
    
    @app_commands.command(name="link", description="Link your aoe4world profile(s) to your Discord account")
    @app_commands.describe(
        profiles="Profile ids or aoe4world profile URLs, comma-separated, main account first",
        leaderboard="Default leaderboard for your rank (e.g. rm_1v1)"
    )
    @app_commands.checks.cooldown(rate=2, per=30.0, key=lambda i: i.user.id)
    async def link(self, interaction: discord.Interaction, profiles: str, leaderboard: Optional[str] = None):
        """Store the caller's profile ids after checking the main one exists."""
        await interaction.response.defer(ephemeral=True)
        
        try:
            profile_ids = parse_profile_ids(profiles)
            if not profile_ids:
                await interaction.followup.send(embed=ErrorEmbeds.invalid_input("Give at least one profile id."), ephemeral=True)
                return
            if leaderboard and not is_valid_leaderboard(leaderboard):
                raise InvalidLeaderboardError(leaderboard)
            
            main = await self.client.get_player(profile_ids[0])
            if not main:
                await interaction.followup.send(
                    embed=ErrorEmbeds.invalid_input(f"No aoe4world player with profile id {profile_ids[0]}."),
                    ephemeral=True
                )
                return
            
            await self.profile_links.link(interaction.user.id, profile_ids, leaderboard)
            
            embed = discord.Embed(
                title="🔗 Profile Linked",
                description=f"You are now **{main.name}** ({profile_ids[0]}).",
                color=discord.Color.green()
            )
            if len(profile_ids) > 1:
                embed.add_field(
                    name="Alt accounts",
                    value=", ".join(str(p) for p in profile_ids[1:]),
                    inline=False
                )
            if leaderboard:
                embed.add_field(name="Default leaderboard", value=f"`{leaderboard}`", inline=False)
            await interaction.followup.send(embed=embed, ephemeral=True)
            
        except LadderException as e:
            await interaction.followup.send(embed=ErrorEmbeds.ladder_error(e), ephemeral=True)
        except ValueError as e:
            await interaction.followup.send(embed=ErrorEmbeds.invalid_input(str(e)), ephemeral=True)
        except Exception as e:
            logger.error(f"Error in link command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("Could not save your profile link."), ephemeral=True)
    
    @app_commands.command(name="unlink", description="Forget your linked aoe4world profiles")
    async def unlink(self, interaction: discord.Interaction):
        removed = await self.profile_links.unlink(interaction.user.id)
        message = "🔗 Your profiles were unlinked." if removed else "You had no linked profiles."
        await interaction.response.send_message(message, ephemeral=True)
    
    @app_commands.command(name="linked", description="Show which aoe4world profiles are linked to you")
    async def linked(self, interaction: discord.Interaction):
        link = await self.profile_links.get_link(interaction.user.id)
        if not link:
            await interaction.response.send_message(embed=ErrorEmbeds.no_linked_profiles(interaction.user), ephemeral=True)
            return
        
        profile_ids = link.get_profile_ids()
        lines = [f"**Main:** [{profile_ids[0]}](https://aoe4world.com/players/{profile_ids[0]})"]
        lines += [f"**Alt:** [{p}](https://aoe4world.com/players/{p})" for p in profile_ids[1:]]
        if link.default_leaderboard:
            lines.append(f"**Default leaderboard:** `{link.default_leaderboard}`")
        embed = discord.Embed(title="🔗 Linked Profiles", description="\n".join(lines), color=discord.Color.blue())
        await interaction.response.send_message(embed=embed, ephemeral=True)


async def setup(bot):
    await bot.add_cog(ProfileLinksCog(bot))
