"""
VidShare Subscription Service - subscribe/unsubscribe and the two listing directions.
"""
from __future__ import annotations

import uuid
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.core.errors import NotFound
from vidshare.models.models import Account, Subscription
from vidshare.schemas.schemas import OwnerSummary
from vidshare.services.query.projection import ListQuery, OwnerProjection
from vidshare.services.social.toggle import ToggleResult, toggle_membership


class SubscriptionService:

    async def toggle(self, db: AsyncSession, subscriber_id: uuid.UUID, channel_id: uuid.UUID) -> ToggleResult:
        if await db.get(Account, channel_id) is None:
            raise NotFound("Channel not found")
        return await toggle_membership(
            db, Subscription, subscriber_id=subscriber_id, channel_id=channel_id,
        )

    async def subscribers(self, db: AsyncSession, channel_id: uuid.UUID) -> List[OwnerSummary]:
        if await db.get(Account, channel_id) is None:
            raise NotFound("Channel not found")
        return await self._accounts(db, Subscription.subscriber_id, Subscription.channel_id == channel_id)

    async def subscribed_channels(self, db: AsyncSession, subscriber_id: uuid.UUID) -> List[OwnerSummary]:
        if await db.get(Account, subscriber_id) is None:
            raise NotFound("Subscriber not found")
        return await self._accounts(db, Subscription.channel_id, Subscription.subscriber_id == subscriber_id)

    @staticmethod
    async def _accounts(db: AsyncSession, account_column, criterion) -> List[OwnerSummary]:
        # The joined account is the payload here, so dangling rows are skipped
        projection = OwnerProjection(account_column, name="account")
        query = ListQuery(Subscription).where(criterion).decorate(projection).sort(Subscription.created_at)
        rows = await query.fetch(db)
        return [summary for summary in (projection.summary(row) for row in rows) if summary is not None]


subscription_service = SubscriptionService()
