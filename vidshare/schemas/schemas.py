"""
VidShare API Schemas - Pydantic v2 models for request/response validation.

Wire format is camelCase; Python code uses the snake_case field names.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from vidshare.models.models import PlaylistVisibility


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )


# ═══════════════════════════════════════════════════════════════════════
# Envelope
# ═══════════════════════════════════════════════════════════════════════

class ApiResponse(CamelModel):
    """Uniform success envelope: ``{statusCode, data, message, success}``."""
    status_code: int = 200
    data: Any = None
    message: str = "Success"
    success: bool = True

    @model_validator(mode="after")
    def _derive_success(self) -> "ApiResponse":
        self.success = self.status_code < 400
        return self


# ═══════════════════════════════════════════════════════════════════════
# Accounts
# ═══════════════════════════════════════════════════════════════════════

class OwnerSummary(CamelModel):
    """Denormalized owner decoration attached to videos, tweets, comments, playlists."""
    id: UUID
    username: str
    full_name: str
    avatar: Optional[str] = None


class AccountSchema(CamelModel):
    id: UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class LoginRequest(CamelModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class RefreshTokenRequest(CamelModel):
    refresh_token: Optional[str] = None


class SessionTokens(CamelModel):
    user: Optional[AccountSchema] = None
    access_token: str
    refresh_token: str


# ═══════════════════════════════════════════════════════════════════════
# Videos
# ═══════════════════════════════════════════════════════════════════════

class VideoSchema(CamelModel):
    id: UUID
    title: str
    description: str
    video_file: str
    thumbnail: str
    duration: float
    views: int
    is_published: bool
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class VideoWithOwner(VideoSchema):
    owner: Optional[OwnerSummary] = None


class VideoPage(CamelModel):
    videos: List[VideoWithOwner]
    total_videos: int
    page: int
    limit: int
    total_pages: int


class PublishState(CamelModel):
    is_published: bool


# ═══════════════════════════════════════════════════════════════════════
# Comments & Tweets
# ═══════════════════════════════════════════════════════════════════════

class ContentBody(CamelModel):
    content: Optional[str] = None


class CommentSchema(CamelModel):
    id: UUID
    content: str
    video_id: UUID
    owner_id: UUID
    owner: Optional[OwnerSummary] = None
    created_at: datetime
    updated_at: datetime


class CommentPage(CamelModel):
    comments: List[CommentSchema]
    total_comments: int
    page: int
    limit: int
    total_pages: int


class TweetCreate(ContentBody):
    is_retweet: bool = False


class TweetSchema(CamelModel):
    id: UUID
    content: str
    is_retweet: bool
    owner_id: UUID
    owner: Optional[OwnerSummary] = None
    created_at: datetime
    updated_at: datetime


class TweetPage(CamelModel):
    tweets: List[TweetSchema]
    total_tweets: int
    page: int
    limit: int
    total_pages: int


# ═══════════════════════════════════════════════════════════════════════
# Likes & Subscriptions
# ═══════════════════════════════════════════════════════════════════════

class LikeState(CamelModel):
    liked: bool


class LikedVideo(CamelModel):
    liked_at: datetime
    video: VideoWithOwner


class SubscriptionSchema(CamelModel):
    id: UUID
    subscriber_id: UUID
    channel_id: UUID
    created_at: datetime


class SubscriptionState(CamelModel):
    subscribed: bool
    subscription: Optional[SubscriptionSchema] = None


# ═══════════════════════════════════════════════════════════════════════
# Playlists
# ═══════════════════════════════════════════════════════════════════════

class PlaylistCreate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class PlaylistUpdate(PlaylistCreate):
    pass


class VisibilityUpdate(CamelModel):
    visibility: Optional[str] = None


class PlaylistSchema(CamelModel):
    id: UUID
    name: str
    description: str
    visibility: PlaylistVisibility
    owner_id: UUID
    owner: Optional[OwnerSummary] = None
    videos: List[VideoWithOwner] = []
    likes_count: int = 0
    liked: bool = False
    created_at: datetime
    updated_at: datetime


class ShareLink(CamelModel):
    share_link: str


# ═══════════════════════════════════════════════════════════════════════
# Dashboard & Health
# ═══════════════════════════════════════════════════════════════════════

class ChannelStats(CamelModel):
    total_videos: int = 0
    total_subscribers: int = 0
    total_views: int = 0
    total_likes: int = 0


class ChannelTweetStats(CamelModel):
    total_tweets: int = 0
    total_tweet_likes: int = 0
    total_retweets: int = 0


class HealthStatus(CamelModel):
    version: str
    uptime: float
