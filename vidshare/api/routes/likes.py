"""
VidShare API - Like routes.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_current_account
from vidshare.core.database import get_db
from vidshare.core.errors import parse_id
from vidshare.models.models import Account, LikeKind, LikeTarget
from vidshare.schemas.schemas import ApiResponse, LikeState
from vidshare.services.social.like_service import like_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/likes", tags=["Likes"])


async def _toggle(db: AsyncSession, account: Account, kind: LikeKind, raw_id: str) -> ApiResponse:
    target = LikeTarget(kind, parse_id(raw_id, kind.value))
    result = await like_service.toggle(db, account.id, target)
    await db.commit()

    verb = "liked" if result.active else "unliked"
    logger.info("%s %s %s %s", account.username, verb, kind.value, target.id)
    return ApiResponse(
        status_code=200,
        data=LikeState(liked=result.active),
        message=f"{kind.label} {verb} successfully",
    )


@router.post("/toggle/v/{video_id}", response_model=ApiResponse)
async def toggle_video_like(
    video_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle(db, account, LikeKind.VIDEO, video_id)


@router.post("/toggle/c/{comment_id}", response_model=ApiResponse)
async def toggle_comment_like(
    comment_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle(db, account, LikeKind.COMMENT, comment_id)


@router.post("/toggle/t/{tweet_id}", response_model=ApiResponse)
async def toggle_tweet_like(
    tweet_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle(db, account, LikeKind.TWEET, tweet_id)


@router.get("/videos", response_model=ApiResponse)
async def get_liked_videos(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    liked = await like_service.liked_videos(db, account.id)
    return ApiResponse(status_code=200, data=liked, message="Liked videos fetched successfully")
