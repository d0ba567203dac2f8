"""
Services package for the ladder bot.

- GameHistoryService: merged, time-ordered game stream across profiles
- WinRateService: session/window win rate aggregation
- LadderService: rank, last match and win rate request orchestration
- ProfileLinkService: Discord user to aoe4world profile links
"""

from .base import BaseService
from .game_history import GameHistoryService
from .winrate import WinRateService
from .ladder import LadderService
from .profile_links import ProfileLinkService

__all__ = ['BaseService', 'GameHistoryService', 'WinRateService', 'LadderService', 'ProfileLinkService']
