"""
VidShare API - Comment routes.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_current_account
from vidshare.core.database import get_db
from vidshare.core.errors import NotFound, ValidationError, parse_id
from vidshare.models.models import Account, Comment, Video
from vidshare.schemas.schemas import ApiResponse, CommentPage, CommentSchema, ContentBody
from vidshare.services.guards import assert_owner
from vidshare.services.query.pagination import PageParams, page_params
from vidshare.services.query.projection import ListQuery, OwnerProjection

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/comments", tags=["Comments"])


def _content(body: ContentBody) -> str:
    content = (body.content or "").strip()
    if not content:
        raise ValidationError("Missing content! Comment content is required")
    return content


async def _get_comment(db: AsyncSession, comment_id: str) -> Comment:
    comment = await db.get(Comment, parse_id(comment_id, "comment"))
    if comment is None:
        raise NotFound("Comment not found")
    return comment


@router.get("/{video_id}", response_model=ApiResponse)
async def get_video_comments(
    video_id: str,
    page: PageParams = Depends(page_params),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    vid = parse_id(video_id, "video")
    if await db.get(Video, vid) is None:
        raise NotFound("Video not found")

    owner = OwnerProjection(Comment.owner_id)
    listing = (
        ListQuery(Comment)
        .join(Video, Video.id == Comment.video_id)
        .where(Comment.video_id == vid)
        .decorate(owner)
        .sort(Comment.created_at)
    )
    rows, total = await listing.fetch_page(db, page)
    return ApiResponse(
        status_code=200,
        data=CommentPage(
            comments=[owner.decorate(CommentSchema, row[0], row) for row in rows],
            total_comments=total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages(total),
        ),
        message="Comments fetched successfully",
    )


@router.post("/{video_id}", response_model=ApiResponse, status_code=201)
async def add_comment(
    video_id: str,
    body: ContentBody,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    vid = parse_id(video_id, "video")
    content = _content(body)
    if await db.get(Video, vid) is None:
        raise NotFound("Video not found")

    comment = Comment(content=content, video_id=vid, owner_id=account.id)
    db.add(comment)
    await db.commit()
    return ApiResponse(status_code=201, data=CommentSchema.model_validate(comment), message="Comment added successfully")


@router.patch("/c/{comment_id}", response_model=ApiResponse)
async def update_comment(
    comment_id: str,
    body: ContentBody,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    content = _content(body)
    comment = await _get_comment(db, comment_id)
    assert_owner(comment, account.id, "You are not authorized to update this comment")

    comment.content = content
    await db.commit()
    return ApiResponse(status_code=200, data=CommentSchema.model_validate(comment), message="Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse)
async def delete_comment(
    comment_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    comment = await _get_comment(db, comment_id)
    assert_owner(comment, account.id, "You are not authorized to delete this comment")

    await db.delete(comment)
    await db.commit()
    logger.info("Comment %s deleted by %s", comment.id, account.username)
    return ApiResponse(status_code=200, data={}, message="Comment deleted successfully")
