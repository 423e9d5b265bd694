"""
VidShare ORM Models - accounts, media, social graph and playlists.
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, Enum, Float, ForeignKey, Index,
    Integer, String, Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from vidshare.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════

class PlaylistVisibility(str, enum.Enum):
    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"


class LikeKind(str, enum.Enum):
    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class MediaKind(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"


# ═══════════════════════════════════════════════════════════════════════
# Accounts
# ═══════════════════════════════════════════════════════════════════════

class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(256), index=True)
    avatar: Mapped[str] = mapped_column(String(1024))
    avatar_public_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    cover_image_public_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    hashed_password: Mapped[str] = mapped_column(String(256))
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


# ═══════════════════════════════════════════════════════════════════════
# Content
# ═══════════════════════════════════════════════════════════════════════

class Video(Base):
    __tablename__ = "videos"
    __table_args__ = (
        Index("ix_videos_owner_created", "owner_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(512))
    description: Mapped[str] = mapped_column(Text)
    video_file: Mapped[str] = mapped_column(String(1024))
    video_public_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    thumbnail: Mapped[str] = mapped_column(String(1024))
    thumbnail_public_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    duration: Mapped[float] = mapped_column(Float, default=0.0)
    views: Mapped[int] = mapped_column(Integer, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True)
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_video_created", "video_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(Text)
    video_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"))
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Tweet(Base):
    __tablename__ = "tweets"
    __table_args__ = (
        Index("ix_tweets_owner_created", "owner_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(Text)
    is_retweet: Mapped[bool] = mapped_column(Boolean, default=False)
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


# ═══════════════════════════════════════════════════════════════════════
# Social graph
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LikeTarget:
    """The one thing a Like points at: a video, a comment or a tweet."""

    kind: LikeKind
    id: uuid.UUID

    def __post_init__(self):
        if not isinstance(self.kind, LikeKind):
            object.__setattr__(self, "kind", LikeKind(self.kind))
        if not isinstance(self.id, uuid.UUID):
            raise TypeError(f"LikeTarget id must be a UUID, got {type(self.id).__name__}")

    @property
    def column(self) -> str:
        return f"{self.kind.value}_id"


class Like(Base):
    """A (liker, target) pair. Presence means liked, absence means not liked."""
    __tablename__ = "likes"
    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_likes_exactly_one_target",
        ),
        Index("ix_likes_liker_video", "liked_by_id", "video_id"),
        Index("ix_likes_liker_comment", "liked_by_id", "comment_id"),
        Index("ix_likes_liker_tweet", "liked_by_id", "tweet_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    liked_by_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"))
    video_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"), nullable=True)
    comment_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)
    tweet_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("tweets.id", ondelete="CASCADE"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    @classmethod
    def for_target(cls, liked_by_id: uuid.UUID, target: LikeTarget) -> "Like":
        return cls(liked_by_id=liked_by_id, **{target.column: target.id})

    @property
    def target(self) -> LikeTarget:
        populated = [
            LikeTarget(kind, getattr(self, f"{kind.value}_id"))
            for kind in LikeKind
            if getattr(self, f"{kind.value}_id") is not None
        ]
        if len(populated) != 1:
            raise ValueError(f"Like {self.id} must reference exactly one target, found {len(populated)}")
        return populated[0]


class Subscription(Base):
    __tablename__ = "subscriptions"
    __table_args__ = (
        Index("ix_subscriptions_pair", "subscriber_id", "channel_id"),
        Index("ix_subscriptions_channel", "channel_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    subscriber_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"))
    channel_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


# ═══════════════════════════════════════════════════════════════════════
# Playlists
# ═══════════════════════════════════════════════════════════════════════

class Playlist(Base):
    __tablename__ = "playlists"
    __table_args__ = (
        Index("ix_playlists_owner_name", "owner_id", "name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(256))
    description: Mapped[str] = mapped_column(Text)
    visibility: Mapped[PlaylistVisibility] = mapped_column(
        Enum(PlaylistVisibility, values_callable=lambda e: [m.value for m in e]),
        default=PlaylistVisibility.PUBLIC,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class PlaylistVideo(Base):
    """Ordered membership of a video in a playlist."""
    __tablename__ = "playlist_videos"
    __table_args__ = (
        UniqueConstraint("playlist_id", "video_id", name="uq_playlist_videos_member"),
        Index("ix_playlist_videos_position", "playlist_id", "position"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    playlist_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("playlists.id", ondelete="CASCADE"))
    video_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"))
    position: Mapped[int] = mapped_column(Integer, default=0)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class PlaylistLike(Base):
    __tablename__ = "playlist_likes"
    __table_args__ = (
        Index("ix_playlist_likes_pair", "playlist_id", "account_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    playlist_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("playlists.id", ondelete="CASCADE"))
    account_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
