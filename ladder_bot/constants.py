"""
Bot-wide constants for the AoE4 ladder bot.

Groups the magic numbers used by the game history merge, the win rate
aggregation and the Discord presentation layer.
"""

class WinRateConstants:
    """Constants related to session detection and win rate math."""
    
    # A gap longer than this between two games ends a play session
    DEFAULT_IDLE_GAP_SECONDS = 4 * 3600
    
    # Ongoing games older than this are treated as abandoned/canceled
    PENDING_GAME_CUTOFF_SECONDS = 3 * 3600
    
    # Reported when no game was lost (including no games at all)
    UNDEFEATED_WIN_RATE = 100
    
    # Games with more participants than this are team games
    MAX_SOLO_PARTICIPANTS = 2

class LeaderboardConstants:
    """Constants describing the upstream leaderboards."""
    
    # Upstream leaderboard page size, used to locate a rank
    PAGE_SIZE = 50
    
    # rm_1v1, qm_2v2, ...
    LEADERBOARD_PATTERN = r'^[qr]m_\dv\d$'

class TimeoutConstants:
    """Time budgets for Discord interactions."""
    
    # Max time a command may spend talking to the statistics provider
    COMMAND_TIMEOUT = 20.0

class UIConstants:
    """Constants for Discord UI elements."""
    
    # Embed colors
    DEFAULT_EMBED_COLOR = 0x3498db  # Blue
    GOLD_RANK_COLOR = 0xffd700     # Gold for #1 ranked players
    WIN_COLOR = 0x2ecc71           # Green
    LOSS_COLOR = 0xe67e22          # Orange
    
    TROPHY_EMOJI = "🏆"
    SWORDS_EMOJI = "⚔️"
    HOURGLASS_EMOJI = "⏳"
