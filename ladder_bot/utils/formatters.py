"""
Plain chat text renderings of ladder results.

These are the single-line answers sent for prefix commands, in the style of
stream chat bots.
"""

from datetime import datetime, timezone
from typing import List, Optional

from ladder_bot.data.metadata import civ_name
from ladder_bot.data_models.game import GameRecord, Participant
from ladder_bot.data_models.player import PlayerProfile
from ladder_bot.data_models.winrate import WinRateStats
from ladder_bot.utils.time_parser import format_seconds_to_time, format_time_ago


def format_rank_level(rank_level: Optional[str]) -> str:
    """'conqueror_3' -> 'Conqueror 3'"""
    if not rank_level:
        return 'Unranked'
    return rank_level.replace('_', ' ').title()


def format_play_time(seconds: int) -> str:
    """Total time played as '2h 15m' or '45m'."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_timespan(stats: WinRateStats) -> str:
    """Describe the window the stats cover."""
    if stats.options.season:
        return f"in season {stats.options.season}"
    if stats.timespan_seconds:
        hours = int(stats.timespan_seconds // 3600)
        if hours and hours % 24 == 0:
            days = hours // 24
            return f"in the last {days} day{'s' if days != 1 else ''}"
        return f"in the last {hours} hour{'s' if hours != 1 else ''}"
    return "this session"


def format_rank_text(player: PlayerProfile, leaderboard: str) -> str:
    mode = player.mode(leaderboard)
    if not mode or mode.rating is None:
        return f"{player.name} is unranked on {leaderboard}"
    
    text = f"{player.name} is #{mode.rank} on {leaderboard} ({format_rank_level(mode.rank_level)}, {mode.rating} rating)"
    if mode.games_count:
        text += f" - {mode.wins_count}W-{mode.losses_count}L"
        if mode.win_rate is not None:
            text += f" ({mode.win_rate:.1f}%)"
    if mode.streak:
        text += f", streak {mode.streak:+d}"
    return text


def _participant_text(p: Participant) -> str:
    rating = f", {p.rating}" if p.rating else ""
    return f"{p.name} ({civ_name(p.civilization)}{rating})"


def _team_text(team) -> str:
    return " + ".join(_participant_text(p) for p in team)


def format_match_text(game: GameRecord, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    sides = " vs ".join(_team_text(team) for team in game.teams)
    text = f"{sides} on {game.map or 'unknown map'}"
    
    if game.is_ongoing:
        return f"{text} - in progress, started {format_time_ago(game.started_at, now)}"
    
    winners: List[str] = [p.name for p in game.participants if p.result == 'win']
    text += f" - {format_seconds_to_time(game.duration)}"
    if winners:
        text += f", won by {' + '.join(winners)}"
    return f"{text} ({format_time_ago(game.finished_at, now)})"


def format_winrate_text(stats: WinRateStats) -> str:
    name = stats.player.name if stats.player else 'Player'
    subject = name
    if stats.opponent:
        subject += f" vs {stats.opponent.name}"
    if stats.options.civilization:
        subject += f" with {civ_name(stats.options.civilization)}"
    if stats.options.map:
        subject += f" on {stats.options.map}"
    
    window = format_timespan(stats)
    if not stats.games_count:
        text = f"{subject}: no games {window}"
    else:
        text = (
            f"{subject}: {stats.wins_count}W-{stats.losses_count}L ({stats.win_rate}%) {window}, "
            f"{stats.games_count} game{'s' if stats.games_count != 1 else ''} in {format_play_time(stats.duration)}"
        )
    if stats.pending_games:
        text += f" - {stats.pending_games} game{'s' if stats.pending_games != 1 else ''} in progress"
    return text
