#!/usr/bin/env python3
"""Seed demo data for local development.

Creates a demo channel with videos, a handful of subscribers, and a demo
viewer whose watch history points at those videos, so the channel profile
and watch history endpoints return something.

Usage:
    DATABASE_URL=sqlite:///./videotube.db python scripts/seed_demo_data.py
"""

import os
import sys
from datetime import UTC, datetime, timedelta

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.database import SessionLocal, init_db
from src.models import Subscription, User, Video, WatchHistoryEntry
from src.services.auth import get_password_hash

# Demo credentials
DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demopass123"
DEMO_CHANNEL = "democreator"
PLACEHOLDER_IMAGE = "https://res.cloudinary.com/demo/image/upload/sample.jpg"

SUBSCRIBERS = ["viewer1", "viewer2", "viewer3"]

VIDEOS = [
    ("Getting started with FastAPI", 612.0, 1520),
    ("SQLAlchemy relationships explained", 845.5, 980),
    ("JWT refresh token rotation", 433.0, 2210),
]


def _user(username: str, fullname: str) -> User:
    return User(
        username=username,
        email=f"{username}@example.com",
        fullname=fullname,
        password_hash=get_password_hash(DEMO_PASSWORD),
        avatar=PLACEHOLDER_IMAGE,
        cover_image="",
    )


def seed_demo_data():
    """Seed the database with a demo channel, subscribers and history."""
    init_db()
    session = SessionLocal()

    usernames = [DEMO_USERNAME, DEMO_CHANNEL, *SUBSCRIBERS]

    try:
        existing = session.query(User).filter(User.username.in_(usernames)).all()
        if existing:
            print("Demo data already exists. Clearing and re-seeding...")
            ids = [u.id for u in existing]
            session.query(WatchHistoryEntry).filter(WatchHistoryEntry.user_id.in_(ids)).delete(
                synchronize_session=False
            )
            session.query(Subscription).filter(
                Subscription.subscriber_id.in_(ids) | Subscription.channel_id.in_(ids)
            ).delete(synchronize_session=False)
            session.query(Video).filter(Video.owner_id.in_(ids)).delete(
                synchronize_session=False
            )
            for user in existing:
                session.delete(user)
            session.commit()

        print("Creating demo users...")
        viewer = _user(DEMO_USERNAME, "Demo Viewer")
        channel = _user(DEMO_CHANNEL, "Demo Creator")
        followers = [_user(name, name.title()) for name in SUBSCRIBERS]
        session.add_all([viewer, channel, *followers])
        session.flush()

        print("Creating videos...")
        videos = [
            Video(
                owner_id=channel.id,
                video_file=f"https://res.cloudinary.com/demo/video/upload/{i}.mp4",
                thumbnail=PLACEHOLDER_IMAGE,
                title=title,
                description=f"Demo video: {title}",
                duration=duration,
                views=views,
            )
            for i, (title, duration, views) in enumerate(VIDEOS)
        ]
        session.add_all(videos)
        session.flush()

        print("Creating subscriptions...")
        session.add_all(
            [Subscription(subscriber_id=f.id, channel_id=channel.id) for f in followers]
        )
        session.add(Subscription(subscriber_id=viewer.id, channel_id=channel.id))
        session.add(Subscription(subscriber_id=channel.id, channel_id=followers[0].id))

        print("Creating watch history...")
        now = datetime.now(UTC)
        session.add_all(
            [
                WatchHistoryEntry(
                    user_id=viewer.id,
                    video_id=video.id,
                    position=position,
                    watched_at=now - timedelta(hours=len(videos) - position),
                )
                for position, video in enumerate(videos)
            ]
        )

        session.commit()
        print("Demo data seeded successfully!")
        print(f"Log in as '{DEMO_USERNAME}' / '{DEMO_PASSWORD}'")

    except Exception as e:
        session.rollback()
        print(f"Error seeding demo data: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    seed_demo_data()
