"""API route modules."""

from neighborguard.api.routes import (
    circles,
    events,
    home,
    media,
    metrics,
    notifications,
    system,
    users,
)

__all__ = ["circles", "events", "home", "media", "metrics", "notifications", "system", "users"]
