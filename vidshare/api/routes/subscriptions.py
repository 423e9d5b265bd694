"""
VidShare API - Subscription routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_current_account
from vidshare.core.database import get_db
from vidshare.core.errors import ValidationError, parse_id
from vidshare.models.models import Account
from vidshare.schemas.schemas import ApiResponse, SubscriptionSchema, SubscriptionState
from vidshare.services.social.subscription_service import subscription_service

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("/c/{channel_id}", response_model=ApiResponse)
async def toggle_subscription(
    channel_id: str,
    response: Response,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Subscribe to a channel, or unsubscribe when already subscribed."""
    cid = parse_id(channel_id, "channel")
    if cid == account.id:
        raise ValidationError("You cannot subscribe to your own channel")

    result = await subscription_service.toggle(db, account.id, cid)
    await db.commit()

    if result.active:
        response.status_code = 201
        return ApiResponse(
            status_code=201,
            data=SubscriptionState(subscribed=True, subscription=SubscriptionSchema.model_validate(result.record)),
            message="Channel subscribed successfully",
        )
    return ApiResponse(
        status_code=200,
        data=SubscriptionState(subscribed=False),
        message="Channel unsubscribed successfully",
    )


@router.get("/c/{channel_id}", response_model=ApiResponse)
async def get_channel_subscribers(
    channel_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    subscribers = await subscription_service.subscribers(db, parse_id(channel_id, "channel"))
    return ApiResponse(status_code=200, data=subscribers, message="Subscribers fetched successfully")


@router.get("/u/{subscriber_id}", response_model=ApiResponse)
async def get_subscribed_channels(
    subscriber_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    channels = await subscription_service.subscribed_channels(db, parse_id(subscriber_id, "subscriber"))
    return ApiResponse(status_code=200, data=channels, message="Subscribed channels fetched successfully")
