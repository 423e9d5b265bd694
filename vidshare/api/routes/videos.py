"""
VidShare API - Video routes.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_app_settings, get_current_account
from vidshare.core.config import Settings
from vidshare.core.database import get_db
from vidshare.core.errors import InternalError, NotFound, ValidationError, parse_id
from vidshare.models.models import Account, MediaKind, Video
from vidshare.schemas.schemas import ApiResponse, PublishState, VideoPage, VideoSchema, VideoWithOwner
from vidshare.services.guards import assert_owner, can_watch
from vidshare.services.media.storage_service import (
    MediaStorage,
    MediaStorageError,
    discard_uploads,
    get_media_storage,
    has_content,
    store_upload,
)
from vidshare.services.query.pagination import PageParams, page_params
from vidshare.services.query.projection import ListQuery, OwnerProjection, resolve_sort

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/videos", tags=["Videos"])

SORTABLE = {
    "createdAt": Video.created_at,
    "updatedAt": Video.updated_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}


async def _get_video(db: AsyncSession, video_id: str) -> Video:
    video = await db.get(Video, parse_id(video_id, "video"))
    if video is None:
        raise NotFound("Video not found")
    return video


@router.get("", response_model=ApiResponse)
async def list_videos(
    page: PageParams = Depends(page_params),
    query: Optional[str] = None,
    user_id: Optional[str] = Query(None, alias="userId"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_type: Optional[str] = Query(None, alias="sortType"),
    db: AsyncSession = Depends(get_db),
):
    """List published videos with text search, owner filter, sorting and pagination."""
    sort_column, descending = resolve_sort(sort_by, sort_type, SORTABLE)
    owner = OwnerProjection(Video.owner_id)
    listing = ListQuery(Video).where(Video.is_published.is_(True)).decorate(owner).sort(sort_column, descending)
    if query:
        pattern = f"%{query}%"
        listing.where(or_(Video.title.ilike(pattern), Video.description.ilike(pattern)))
    if user_id:
        listing.where(Video.owner_id == parse_id(user_id, "user"))

    rows, total = await listing.fetch_page(db, page)
    return ApiResponse(
        status_code=200,
        data=VideoPage(
            videos=[owner.decorate(VideoWithOwner, row[0], row) for row in rows],
            total_videos=total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages(total),
        ),
        message="Videos fetched successfully",
    )


@router.post("", response_model=ApiResponse, status_code=201)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
    settings: Settings = Depends(get_app_settings),
):
    """Upload a video and its thumbnail, then record the video as published."""
    if not (title or "").strip() or not (description or "").strip():
        raise ValidationError("Title and description are required")
    if not has_content(video_file) or not has_content(thumbnail):
        raise ValidationError("Video and thumbnail are required")

    video_upload = thumbnail_upload = None
    try:
        video_upload = await store_upload(storage, video_file, settings.temp_dir, MediaKind.VIDEO)
        thumbnail_upload = await store_upload(storage, thumbnail, settings.temp_dir, MediaKind.IMAGE)

        video = Video(
            title=title.strip(),
            description=description.strip(),
            video_file=video_upload.url,
            video_public_id=video_upload.public_id,
            thumbnail=thumbnail_upload.url,
            thumbnail_public_id=thumbnail_upload.public_id,
            duration=video_upload.duration or 0.0,
            owner_id=account.id,
            is_published=True,
        )
        db.add(video)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Publishing video failed, discarding uploaded media: {e}")
        await discard_uploads(storage, (video_upload, thumbnail_upload))
        if isinstance(e, MediaStorageError):
            raise InternalError("Failed to upload video or thumbnail") from e
        raise

    logger.info("Video %s published by %s", video.id, account.username)
    return ApiResponse(status_code=201, data=VideoSchema.model_validate(video), message="Video created successfully")


@router.get("/{video_id}", response_model=ApiResponse)
async def get_video(
    video_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Fetch one video with its owner summary; counts as a view."""
    vid = parse_id(video_id, "video")
    owner = OwnerProjection(Video.owner_id)
    rows = await ListQuery(Video).where(Video.id == vid).decorate(owner).fetch(db)
    if not rows or not can_watch(rows[0][0], account.id):
        raise NotFound("Video not found")
    item = owner.decorate(VideoWithOwner, rows[0][0], rows[0])

    await db.execute(
        update(Video).where(Video.id == vid).values(views=Video.views + 1),
        execution_options={"synchronize_session": False},
    )
    await db.commit()
    item.views += 1
    return ApiResponse(status_code=200, data=item, message="Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse)
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
    settings: Settings = Depends(get_app_settings),
):
    """Edit title/description and optionally replace the thumbnail."""
    vid = parse_id(video_id, "video")
    title = (title or "").strip()
    description = (description or "").strip()
    new_thumbnail = has_content(thumbnail)
    if not title and not description and not new_thumbnail:
        raise ValidationError("At least one field (title, description, or thumbnail) is required for update")

    video = await _get_video(db, str(vid))
    assert_owner(video, account.id, "You are not authorized to update this video")

    previous_thumbnail = None
    uploaded = None
    if new_thumbnail:
        try:
            uploaded = await store_upload(storage, thumbnail, settings.temp_dir, MediaKind.IMAGE)
        except MediaStorageError as e:
            raise InternalError("Failed to upload thumbnail") from e
        previous_thumbnail = video.thumbnail_public_id
        video.thumbnail = uploaded.url
        video.thumbnail_public_id = uploaded.public_id

    if title:
        video.title = title
    if description:
        video.description = description

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        await discard_uploads(storage, (uploaded,))
        raise

    if previous_thumbnail:
        await storage.delete(previous_thumbnail, MediaKind.IMAGE)
    return ApiResponse(status_code=200, data=VideoSchema.model_validate(video), message="Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse)
async def delete_video(
    video_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    video = await _get_video(db, video_id)
    assert_owner(video, account.id, "You are not authorized to delete this video")

    media = ((video.video_public_id, MediaKind.VIDEO), (video.thumbnail_public_id, MediaKind.IMAGE))
    await db.delete(video)
    await db.commit()

    for public_id, kind in media:
        await storage.delete(public_id, kind)
    return ApiResponse(status_code=200, data={}, message="Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse)
async def toggle_publish_status(
    video_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    video = await _get_video(db, video_id)
    assert_owner(video, account.id, "You are not authorized to toggle publish status")

    video.is_published = not video.is_published
    await db.commit()
    return ApiResponse(
        status_code=200,
        data=PublishState(is_published=video.is_published),
        message="Publish status toggled successfully",
    )

