"""
VidShare API - Channel dashboard routes.

Each route reports on the channel given by ``channelId`` and falls back to
the authenticated actor's own channel.
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_current_account
from vidshare.api.routes.tweets import tweet_listing
from vidshare.core.database import Database, get_database, get_db
from vidshare.core.errors import NotFound, parse_id
from vidshare.models.models import Account, Tweet, Video
from vidshare.schemas.schemas import ApiResponse, TweetPage, TweetSchema, VideoPage, VideoWithOwner
from vidshare.services.dashboard.stats_service import stats_service
from vidshare.services.query.pagination import PageParams, page_params
from vidshare.services.query.projection import ListQuery, OwnerProjection, resolve_sort

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


async def _channel_id(db: AsyncSession, account: Account, channel_id: Optional[str]) -> uuid.UUID:
    if channel_id is None:
        return account.id
    cid = parse_id(channel_id, "channel")
    if cid != account.id and await db.get(Account, cid) is None:
        raise NotFound("Channel not found")
    return cid


@router.get("/channel-stats", response_model=ApiResponse)
async def get_channel_stats(
    channel_id: Optional[str] = Query(None, alias="channelId"),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    database: Database = Depends(get_database),
):
    cid = await _channel_id(db, account, channel_id)
    stats = await stats_service.channel_stats(database, cid)
    return ApiResponse(status_code=200, data=stats, message="Channel stats fetched successfully")


@router.get("/videos", response_model=ApiResponse)
async def get_channel_videos(
    channel_id: Optional[str] = Query(None, alias="channelId"),
    page: PageParams = Depends(page_params),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Newest first; unpublished videos are included only for the channel itself."""
    cid = await _channel_id(db, account, channel_id)
    owner = OwnerProjection(Video.owner_id)
    listing = ListQuery(Video).where(Video.owner_id == cid).decorate(owner).sort(Video.created_at)
    if cid != account.id:
        listing.where(Video.is_published.is_(True))

    rows, total = await listing.fetch_page(db, page)
    videos = [owner.decorate(VideoWithOwner, row[0], row) for row in rows]
    return ApiResponse(
        status_code=200,
        data=VideoPage(
            videos=videos,
            total_videos=total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages(total),
        ),
        message="Videos fetched successfully" if videos else "No videos found for this channel",
    )


@router.get("/tweets-stats", response_model=ApiResponse)
async def get_channel_tweet_stats(
    channel_id: Optional[str] = Query(None, alias="channelId"),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    database: Database = Depends(get_database),
):
    cid = await _channel_id(db, account, channel_id)
    stats = await stats_service.tweet_stats(database, cid)
    return ApiResponse(status_code=200, data=stats, message="Channel tweet stats fetched successfully")


@router.get("/tweets", response_model=ApiResponse)
async def get_channel_tweets(
    channel_id: Optional[str] = Query(None, alias="channelId"),
    sort_type: Optional[str] = Query(None, alias="sortType"),
    page: PageParams = Depends(page_params),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    cid = await _channel_id(db, account, channel_id)
    _, descending = resolve_sort(None, sort_type, {"createdAt": None})
    owner = OwnerProjection(Tweet.owner_id)
    rows, total = await tweet_listing(cid, owner, descending).fetch_page(db, page)
    tweets = [owner.decorate(TweetSchema, row[0], row) for row in rows]
    return ApiResponse(
        status_code=200,
        data=TweetPage(
            tweets=tweets,
            total_tweets=total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages(total),
        ),
        message="Channel tweets fetched successfully" if tweets else "No tweets found for this channel",
    )
