"""
VidShare Dashboard Stats - per-channel counters computed by independent queries.

Each statistic runs on its own session so the queries can be in flight at
the same time; ``asyncio.gather`` waits for every one of them to settle,
so no query is left running on its session when the request fails. An
empty aggregate counts as 0. Any failing sub-query fails the whole request.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Awaitable, Callable, Dict

from sqlalchemy import Select, func, select

from vidshare.core.database import Database
from vidshare.core.errors import InternalError
from vidshare.models.models import Like, Subscription, Tweet, Video
from vidshare.schemas.schemas import ChannelStats, ChannelTweetStats

logger = logging.getLogger(__name__)


def channel_stat_queries(channel_id: uuid.UUID) -> Dict[str, Select]:
    return {
        "total_videos": select(func.count(Video.id)).where(Video.owner_id == channel_id),
        "total_subscribers": select(func.count(Subscription.id)).where(Subscription.channel_id == channel_id),
        "total_views": select(func.coalesce(func.sum(Video.views), 0)).where(Video.owner_id == channel_id),
        "total_likes": (
            select(func.count(Like.id))
            .join(Video, Video.id == Like.video_id)
            .where(Video.owner_id == channel_id)
        ),
    }


def tweet_stat_queries(channel_id: uuid.UUID) -> Dict[str, Select]:
    return {
        "total_tweets": select(func.count(Tweet.id)).where(Tweet.owner_id == channel_id),
        "total_tweet_likes": (
            select(func.count(Like.id))
            .join(Tweet, Tweet.id == Like.tweet_id)
            .where(Tweet.owner_id == channel_id)
        ),
        "total_retweets": (
            select(func.count(Tweet.id))
            .where(Tweet.owner_id == channel_id, Tweet.is_retweet.is_(True))
        ),
    }


class StatsService:

    def __init__(self, scalar_runner: Callable[[Database, Select], Awaitable[object]] | None = None):
        self._run = scalar_runner or self._scalar

    @staticmethod
    async def _scalar(database: Database, stmt: Select) -> object:
        async with database.session() as session:
            return await session.scalar(stmt)

    async def _gather(self, database: Database, queries: Dict[str, Select], failure: str) -> Dict[str, int]:
        names = list(queries)
        values = await asyncio.gather(
            *(self._run(database, queries[name]) for name in names), return_exceptions=True,
        )
        errors = [value for value in values if isinstance(value, BaseException)]
        if errors:
            logger.error("Stats aggregation failed: %s (%d of %d queries)", failure, len(errors), len(names),
                         exc_info=errors[0])
            raise InternalError(failure) from errors[0]
        return {name: int(value or 0) for name, value in zip(names, values)}

    async def channel_stats(self, database: Database, channel_id: uuid.UUID) -> ChannelStats:
        values = await self._gather(database, channel_stat_queries(channel_id), "Failed to get channel stats")
        return ChannelStats(**values)

    async def tweet_stats(self, database: Database, channel_id: uuid.UUID) -> ChannelTweetStats:
        values = await self._gather(database, tweet_stat_queries(channel_id), "Failed to get channel tweet stats")
        return ChannelTweetStats(**values)


stats_service = StatsService()
