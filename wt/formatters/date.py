"""Date and time formatting utilities."""

from datetime import datetime, timezone
from typing import Optional


def format_age(created_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Format the time since created_at as a short relative age.

    Args:
        created_at: Creation time (naive values are taken as UTC)
        now: Reference time, defaults to the current time

    Returns:
        "12m ago", "3h ago", "2d ago", "5w ago", or "" when unknown
    """
    if created_at is None:
        return ""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = max(0.0, (now - created_at).total_seconds())
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    return f"{days // 7}w ago"
