import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


def get_utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_id() -> str:
    return str(uuid.uuid4())


class User(SQLModel, table=True):
    id: str = Field(default_factory=generate_id, primary_key=True, max_length=36)
    username: str = Field(index=True, unique=True)
    email: str = Field(index=True, unique=True)
    full_name: str = Field(default="", max_length=100)
    avatar: Optional[str] = Field(default=None, max_length=500)
    hashed_password: str
    created_at: datetime = Field(default_factory=get_utc_now)

    def public_profile(self) -> dict:
        """Display fields exposed wherever a user is embedded in a response."""
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "avatar": self.avatar,
        }


class Video(SQLModel, table=True):
    """An uploaded video. Media bytes live in the object store."""
    id: str = Field(default_factory=generate_id, primary_key=True, max_length=36)
    owner_id: str = Field(foreign_key="user.id", index=True)
    title: str = Field(max_length=255)
    description: str = Field(default="", max_length=5000)
    video_file: str = Field(max_length=500)
    thumbnail: str = Field(max_length=500)
    duration: float = Field(default=0)
    views: int = Field(default=0)
    is_published: bool = Field(default=True)
    created_at: datetime = Field(default_factory=get_utc_now, index=True)
    updated_at: datetime = Field(default_factory=get_utc_now)

    __table_args__ = {'extend_existing': True}


class Comment(SQLModel, table=True):
    """Stores comments on videos."""
    id: str = Field(default_factory=generate_id, primary_key=True, max_length=36)
    owner_id: str = Field(foreign_key="user.id", index=True)
    # No foreign key: comments outlive the video they were written on
    video_id: str = Field(index=True, max_length=36)
    content: str = Field(max_length=1000)
    created_at: datetime = Field(default_factory=get_utc_now)
    updated_at: datetime = Field(default_factory=get_utc_now)

    __table_args__ = {'extend_existing': True}


class Tweet(SQLModel, table=True):
    """Short text update posted by a user."""
    id: str = Field(default_factory=generate_id, primary_key=True, max_length=36)
    owner_id: str = Field(foreign_key="user.id", index=True)
    content: str = Field(max_length=280)
    created_at: datetime = Field(default_factory=get_utc_now, index=True)
    updated_at: datetime = Field(default_factory=get_utc_now)

    __table_args__ = {'extend_existing': True}


class LikeTarget(str, Enum):
    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"


class Like(SQLModel, table=True):
    """A user's like on exactly one video, comment or tweet."""
    id: str = Field(default_factory=generate_id, primary_key=True, max_length=36)
    liked_by: str = Field(foreign_key="user.id", index=True)
    target_kind: LikeTarget = Field(index=True)
    target_id: str = Field(index=True, max_length=36)
    created_at: datetime = Field(default_factory=get_utc_now, index=True)

    __table_args__ = (
        UniqueConstraint("liked_by", "target_kind", "target_id", name="uq_like_actor_target"),
        {'extend_existing': True},
    )


class Subscription(SQLModel, table=True):
    """A subscriber following another user's channel."""
    id: str = Field(default_factory=generate_id, primary_key=True, max_length=36)
    subscriber_id: str = Field(foreign_key="user.id", index=True)
    channel_id: str = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=get_utc_now, index=True)

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscription_pair"),
        {'extend_existing': True},
    )


class Playlist(SQLModel, table=True):
    """User-created playlists for organizing videos."""
    id: str = Field(default_factory=generate_id, primary_key=True, max_length=36)
    owner_id: str = Field(foreign_key="user.id", index=True)
    name: str = Field(max_length=100)
    description: str = Field(default="", max_length=500)
    created_at: datetime = Field(default_factory=get_utc_now)
    updated_at: datetime = Field(default_factory=get_utc_now)

    __table_args__ = {'extend_existing': True}


class PlaylistItem(SQLModel, table=True):
    """One entry of a playlist's ordered video sequence."""
    id: str = Field(default_factory=generate_id, primary_key=True, max_length=36)
    playlist_id: str = Field(foreign_key="playlist.id", index=True)
    video_id: str = Field(index=True, max_length=36)
    position: int = Field(default=0)  # For ordering items in playlist
    added_at: datetime = Field(default_factory=get_utc_now)

    __table_args__ = (
        UniqueConstraint("playlist_id", "video_id", name="uq_playlist_video"),
        {'extend_existing': True},
    )
