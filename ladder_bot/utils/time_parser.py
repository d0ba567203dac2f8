"""
Time parsing utilities for ladder queries.

Handles timespan suffixes ("last 3 days"), upstream ISO-8601 timestamps and
human-readable durations.
"""

import re
from datetime import datetime, timezone
from typing import Optional, Union


_TIMESPAN_UNITS = (
    (re.compile(r'^(h|hour|hours)$'), 1),
    (re.compile(r'^(d|day|days)$'), 24),
    (re.compile(r'^(w|wk|wks|week|weeks)$'), 24 * 7),
    (re.compile(r'^(m|month|months)$'), 24 * 30),   # Approximate, no calendar math
    (re.compile(r'^(y|year|years)$'), 24 * 365),
)


def parse_timespan_hours(number: Union[int, str], suffix: str) -> Optional[int]:
    """
    Convert a number and unit suffix into hours.
    
    Supported units:
    - h, hour, hours
    - d, day, days
    - w, wk, wks, week, weeks
    - m, month, months (30 days)
    - y, year, years (365 days)
    
    Args:
        number: Amount of units
        suffix: Unit name
        
    Returns:
        Total hours, or None if the unit is not recognised
    """
    number = int(number)
    for pattern, hours in _TIMESPAN_UNITS:
        if pattern.match(suffix):
            return number * hours
    return None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an upstream ISO-8601 timestamp into an aware UTC datetime."""
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip()
        # fromisoformat() only accepts the 'Z' suffix on newer interpreters
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime the way the upstream API expects (ISO-8601, UTC, 'Z')."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def format_seconds_to_time(seconds: float) -> str:
    """
    Format seconds into a game-clock string.
    
    Args:
        seconds: Total seconds
        
    Returns:
        Formatted time string (e.g., "23:05" or "1:23:45")
    """
    if seconds < 0:
        raise ValueError("Negative seconds not allowed")
    
    total_seconds = int(seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_time_ago(dt: datetime, now: Optional[datetime] = None) -> str:
    """Render the distance between dt and now as '5m ago', '3h ago', '2d ago'."""
    now = now or datetime.now(timezone.utc)
    delta = max(0, int((now - dt).total_seconds()))
    if delta < 60:
        return "just now"
    if delta < 3600:
        return f"{delta // 60}m ago"
    if delta < 86400:
        return f"{delta // 3600}h ago"
    return f"{delta // 86400}d ago"
