"""SQLAlchemy models."""

from src.models.subscription import Subscription
from src.models.user import User
from src.models.video import Video
from src.models.watch_history import WatchHistoryEntry

__all__ = [
    "User",
    "Video",
    "Subscription",
    "WatchHistoryEntry",
]
