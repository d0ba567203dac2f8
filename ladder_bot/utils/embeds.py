"""
Shared embed utilities for the ladder bot.

Builds the Discord embeds for rank, last match and win rate answers so every
cog presents them the same way.
"""

import discord
from datetime import datetime, timezone
from typing import Optional

from ladder_bot.constants import UIConstants
from ladder_bot.data.metadata import civ_name
from ladder_bot.data_models.game import GameRecord
from ladder_bot.data_models.player import PlayerProfile
from ladder_bot.data_models.winrate import WinRateStats
from ladder_bot.utils.formatters import (
    format_play_time, format_rank_level, format_timespan, format_winrate_text
)
from ladder_bot.utils.time_parser import format_seconds_to_time


def build_rank_embed(player: PlayerProfile, leaderboard: str) -> discord.Embed:
    """
    Build the rank embed for one leaderboard.
    
    Args:
        player: Player with per-leaderboard standings
        leaderboard: Leaderboard key to show (rm_1v1, ...)
        
    Returns:
        Formatted Discord embed ready for display
    """
    mode = player.mode(leaderboard)
    color = UIConstants.GOLD_RANK_COLOR if mode and mode.rank == 1 else UIConstants.DEFAULT_EMBED_COLOR
    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} {player.name}",
        description=f"Leaderboard: `{leaderboard}`",
        color=color
    )
    
    if not mode or mode.rating is None:
        embed.add_field(name="Rank", value="Unranked", inline=False)
        return embed
    
    embed.add_field(
        name="📊 Standing",
        value=(
            f"**Rank:** #{mode.rank:,}\n"
            f"**Rating:** {mode.rating:,}\n"
            f"**Division:** {format_rank_level(mode.rank_level)}"
        ),
        inline=True
    )
    win_rate = f"{mode.win_rate:.1f}%" if mode.win_rate is not None else "-"
    embed.add_field(
        name=f"{UIConstants.SWORDS_EMOJI} Games",
        value=(
            f"**Played:** {mode.games_count}\n"
            f"**Wins:** {mode.wins_count} | **Losses:** {mode.losses_count}\n"
            f"**Win Rate:** {win_rate}\n"
            f"**Streak:** {mode.streak if mode.streak is not None else '-'}"
        ),
        inline=True
    )
    footer = f"Profile {player.profile_id}"
    if mode.last_game_at:
        embed.timestamp = mode.last_game_at
        footer += " • Last game"
    embed.set_footer(text=footer)
    return embed


def build_match_embed(game: GameRecord) -> discord.Embed:
    """Build the last match embed, one field per team."""
    if game.is_ongoing:
        status = f"{UIConstants.HOURGLASS_EMOJI} In progress"
        color = UIConstants.DEFAULT_EMBED_COLOR
    else:
        status = f"Duration {format_seconds_to_time(game.duration)}"
        color = UIConstants.WIN_COLOR
    
    embed = discord.Embed(
        title=f"{UIConstants.SWORDS_EMOJI} {game.map or 'Unknown map'}",
        description=f"{status} • {game.leaderboard or game.kind or 'custom'}",
        color=color,
        timestamp=game.started_at
    )
    
    for i, team in enumerate(game.teams, start=1):
        lines = []
        for p in team:
            marker = {"win": "🟢", "loss": "🔴"}.get(p.result, "⚪")
            rating = f" ({p.rating})" if p.rating else ""
            diff = f" {p.rating_diff:+d}" if p.rating_diff else ""
            lines.append(f"{marker} **{p.name}**{rating}{diff} - {civ_name(p.civilization)}")
        embed.add_field(name=f"Team {i}", value="\n".join(lines) or "-", inline=True)
    
    embed.set_footer(text=f"Game {game.game_id}")
    return embed


def build_winrate_embed(stats: WinRateStats, now: Optional[datetime] = None) -> discord.Embed:
    """Build the win rate embed for a session or window."""
    now = now or datetime.now(timezone.utc)
    title = stats.player.name if stats.player else "Win Rate"
    if stats.opponent:
        title += f" vs {stats.opponent.name}"
    
    if not stats.games_count:
        color = UIConstants.DEFAULT_EMBED_COLOR
    elif stats.win_rate >= 50:
        color = UIConstants.WIN_COLOR
    else:
        color = UIConstants.LOSS_COLOR
    
    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} {title}",
        description=format_winrate_text(stats),
        color=color
    )
    embed.add_field(
        name="Record",
        value=(
            f"**Wins:** {stats.wins_count} | **Losses:** {stats.losses_count}\n"
            f"**Win Rate:** {stats.win_rate}%"
        ),
        inline=True
    )
    embed.add_field(
        name="Window",
        value=(
            f"**Period:** {format_timespan(stats)}\n"
            f"**Games:** {stats.games_count}\n"
            f"**Time played:** {format_play_time(stats.duration)}"
        ),
        inline=True
    )
    
    filters = []
    if stats.options.civilization:
        filters.append(f"Civ: {civ_name(stats.options.civilization)}")
    if stats.options.map:
        filters.append(f"Map: {stats.options.map}")
    if stats.options.include_team_games:
        filters.append("Team games included")
    if filters:
        embed.add_field(name="Filters", value="\n".join(filters), inline=False)
    
    if stats.pending_games:
        embed.add_field(
            name=f"{UIConstants.HOURGLASS_EMOJI} In progress",
            value=f"{stats.pending_games} game(s), latest started <t:{int(stats.pending_game_started_at.timestamp())}:R>",
            inline=False
        )
    
    if stats.first_game_at:
        embed.set_footer(text=f"First counted game {stats.first_game_at:%Y-%m-%d %H:%M} UTC")
    embed.timestamp = stats.last_game_at or now
    return embed
