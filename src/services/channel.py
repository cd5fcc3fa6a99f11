"""Channel profile and watch history queries."""

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session, joinedload

from src.errors import BadRequestError, NotFoundError
from src.models.subscription import Subscription
from src.models.user import User
from src.models.video import Video
from src.models.watch_history import WatchHistoryEntry
from src.schemas.channel import ChannelProfileResponse, WatchHistoryVideo


def get_channel_profile(db: Session, username: str, viewer_id: int) -> ChannelProfileResponse:
    """Get a channel with its subscription counts, computed by the database.

    Returns subscribers_count (users subscribed to this channel),
    subscribed_to_count (channels this user subscribes to) and whether the
    viewer is one of the subscribers.
    """
    username = (username or "").strip().lower()
    if not username:
        raise BadRequestError("Username is missing")

    subscribers_count = (
        select(func.count(Subscription.id))
        .where(Subscription.channel_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    subscribed_to_count = (
        select(func.count(Subscription.id))
        .where(Subscription.subscriber_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    is_subscribed = exists().where(
        Subscription.channel_id == User.id,
        Subscription.subscriber_id == viewer_id,
    )

    row = db.execute(
        select(
            User,
            subscribers_count.label("subscribers_count"),
            subscribed_to_count.label("subscribed_to_count"),
            is_subscribed.label("is_subscribed"),
        ).where(User.username == username)
    ).first()

    if row is None:
        raise NotFoundError("Channel does not exist")

    channel = row.User
    return ChannelProfileResponse(
        id=channel.id,
        username=channel.username,
        fullname=channel.fullname,
        email=channel.email,
        avatar=channel.avatar,
        cover_image=channel.cover_image or "",
        subscribers_count=row.subscribers_count,
        subscribed_to_count=row.subscribed_to_count,
        is_subscribed=bool(row.is_subscribed),
    )


def get_watch_history(db: Session, user_id: int) -> list[WatchHistoryVideo]:
    """Get the user's watched videos in order, each with its owner joined in."""
    entries = (
        db.query(WatchHistoryEntry)
        .options(joinedload(WatchHistoryEntry.video).joinedload(Video.owner))
        .filter(WatchHistoryEntry.user_id == user_id)
        .order_by(WatchHistoryEntry.position, WatchHistoryEntry.watched_at, WatchHistoryEntry.id)
        .all()
    )
    return [WatchHistoryVideo.model_validate(entry.video) for entry in entries]
