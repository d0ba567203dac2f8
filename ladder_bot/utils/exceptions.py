"""
Custom exceptions for the ladder bot with user-friendly error messages.
"""

class LadderException(Exception):
    """Base exception for ladder query errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class InvalidArgumentError(LadderException):
    """Raised when a profile identifier is not an integer."""
    def __init__(self, value):
        super().__init__(
            f"Invalid profile id {value!r}",
            "❌ Profile ids must be whole numbers!"
        )
        self.value = value

class UpstreamUnavailableError(LadderException):
    """Raised when the statistics provider cannot serve a request."""
    def __init__(self, url: str, details: str = None):
        super().__init__(
            f"Upstream request failed for {url}: {details}",
            "❌ aoe4world is not responding. Please try again later."
        )
        self.url = url

class PlayerNotFoundError(LadderException):
    """Raised when a name, rank or profile id does not resolve to a player."""
    def __init__(self, query: str = None, role: str = "player"):
        if query:
            message = f"No {role} found for '{query}'"
        else:
            message = f"No {role} found"
        super().__init__(message, f"❌ {message}")
        self.query = query

class NoMatchesError(LadderException):
    """Raised when a player exists but has no recorded matches."""
    def __init__(self, player_name: str):
        super().__init__(
            f"Player '{player_name}' has no matches",
            f"❌ \"{player_name}\" has no matches"
        )

class InvalidTimespanError(LadderException):
    """Raised when a 'last N <unit>' suffix uses an unknown unit."""
    def __init__(self, text: str):
        super().__init__(
            f"Invalid timespan '{text}'",
            "❌ Invalid timespan specified"
        )

class InvalidMapError(LadderException):
    """Raised when an 'on <map>' suffix names an unknown map."""
    def __init__(self, name: str):
        super().__init__(
            f"Unknown map '{name}'",
            "❌ Invalid map specified"
        )

class InvalidCivilizationError(LadderException):
    """Raised when a 'with <civ>' suffix names an unknown civilization."""
    def __init__(self, name: str):
        super().__init__(
            f"Unknown civilization '{name}'",
            "❌ Invalid civ specified"
        )

class InvalidLeaderboardError(LadderException):
    """Raised when a leaderboard key is not one of rm_XvX / qm_XvX."""
    def __init__(self, leaderboard: str):
        super().__init__(
            f"Invalid leaderboard '{leaderboard}'",
            f"❌ Unknown leaderboard `{leaderboard}`. Use e.g. `rm_1v1` or `qm_2v2`."
        )
