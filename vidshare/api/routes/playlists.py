"""
VidShare API - Playlist routes.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_app_settings, get_current_account
from vidshare.core.config import Settings
from vidshare.core.database import get_db
from vidshare.core.errors import Conflict, Forbidden, NotFound, ValidationError, parse_id
from vidshare.models.models import Account, Playlist, PlaylistVisibility
from vidshare.schemas.schemas import (
    ApiResponse,
    PlaylistCreate,
    PlaylistUpdate,
    ShareLink,
    VisibilityUpdate,
)
from vidshare.services.guards import assert_visible, is_owner
from vidshare.services.playlists.playlist_service import playlist_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/playlist", tags=["Playlists"])


def _visibility(raw, message: str) -> PlaylistVisibility:
    try:
        return PlaylistVisibility((raw or "").strip().lower())
    except ValueError:
        raise ValidationError(message)


@router.post("", response_model=ApiResponse, status_code=201)
async def create_playlist(
    body: PlaylistCreate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    name = (body.name or "").strip()
    description = (body.description or "").strip()
    if not name or not description:
        raise ValidationError("Name and description are required")

    existing = await db.scalar(
        select(Playlist.id).where(Playlist.owner_id == account.id, Playlist.name == name).limit(1)
    )
    if existing is not None:
        raise Conflict("Playlist already exists")

    playlist = Playlist(name=name, description=description, owner_id=account.id)
    db.add(playlist)
    await db.commit()
    logger.info("Playlist %s created by %s", playlist.id, account.username)
    return ApiResponse(
        status_code=201,
        data=await playlist_service.render_one(db, playlist.id, account.id),
        message="Playlist created successfully",
    )


@router.get("/user/{user_id}", response_model=ApiResponse)
async def get_user_playlists(
    user_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Playlists of one user; other actors only see the public ones."""
    uid = parse_id(user_id, "user")
    if await db.get(Account, uid) is None:
        raise NotFound("User not found")

    query = playlist_service.listing(Playlist.owner_id == uid)
    if uid != account.id:
        query.where(Playlist.visibility == PlaylistVisibility.PUBLIC)
    playlists = await playlist_service.render(db, query, account.id)
    return ApiResponse(
        status_code=200,
        data=playlists,
        message="User playlists fetched" if playlists else "No playlist found",
    )


@router.get("/visibility/{visibility}", response_model=ApiResponse)
async def get_playlists_by_visibility(
    visibility: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    wanted = _visibility(visibility, "Invalid or missing visibility parameter")
    if wanted == PlaylistVisibility.PUBLIC:
        query = playlist_service.listing(Playlist.visibility == wanted)
    elif wanted == PlaylistVisibility.UNLISTED:
        query = playlist_service.listing(Playlist.visibility == wanted, Playlist.owner_id == account.id)
    else:
        raise ValidationError("Invalid or missing visibility parameter")

    playlists = await playlist_service.render(db, query, account.id)
    return ApiResponse(
        status_code=200,
        data=playlists,
        message="Playlists fetched" if playlists else "No playlists found",
    )


@router.get("/{playlist_id}", response_model=ApiResponse)
async def get_playlist(
    playlist_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    pid = parse_id(playlist_id, "playlist")
    playlist = await playlist_service.get(db, pid)
    assert_visible(playlist, account.id)
    return ApiResponse(
        status_code=200,
        data=await playlist_service.render_one(db, pid, account.id),
        message="Playlist fetched",
    )


@router.patch("/visibility/{playlist_id}", response_model=ApiResponse)
async def update_playlist_visibility(
    playlist_id: str,
    body: VisibilityUpdate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    pid = parse_id(playlist_id, "playlist")
    visibility = _visibility(body.visibility, "Invalid visibility option")
    playlist = await playlist_service.get_owned(db, pid, account.id)

    playlist.visibility = visibility
    await db.commit()
    return ApiResponse(
        status_code=200,
        data=await playlist_service.render_one(db, pid, account.id),
        message="Visibility updated",
    )


@router.patch("/add/{video_id}/{playlist_id}", response_model=ApiResponse)
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    pid = parse_id(playlist_id, "playlist")
    vid = parse_id(video_id, "video")
    await playlist_service.add_video(db, pid, vid, account.id)
    await db.commit()
    return ApiResponse(
        status_code=200,
        data=await playlist_service.render_one(db, pid, account.id),
        message="Video added to playlist",
    )


@router.patch("/remove/{video_id}/{playlist_id}", response_model=ApiResponse)
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    pid = parse_id(playlist_id, "playlist")
    vid = parse_id(video_id, "video")
    await playlist_service.remove_video(db, pid, vid, account.id)
    await db.commit()
    return ApiResponse(
        status_code=200,
        data=await playlist_service.render_one(db, pid, account.id),
        message="Video removed from playlist",
    )


@router.patch("/{playlist_id}/like", response_model=ApiResponse)
async def toggle_playlist_like(
    playlist_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    pid = parse_id(playlist_id, "playlist")
    playlist = await playlist_service.get(db, pid)
    assert_visible(playlist, account.id)

    result = await playlist_service.toggle_like(db, playlist, account.id)
    await db.commit()
    return ApiResponse(
        status_code=200,
        data=await playlist_service.render_one(db, pid, account.id),
        message="Playlist liked" if result.active else "Playlist disliked",
    )


@router.post("/{playlist_id}/share", response_model=ApiResponse)
async def share_playlist(
    playlist_id: str,
    request: Request,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    pid = parse_id(playlist_id, "playlist")
    playlist = await playlist_service.get(db, pid)
    if playlist.visibility == PlaylistVisibility.PRIVATE and not is_owner(playlist, account.id):
        raise Forbidden("You are not allowed to share this playlist")

    base = (settings.share_base_url or str(request.base_url)).rstrip("/")
    return ApiResponse(
        status_code=200,
        data=ShareLink(share_link=f"{base}/playlists/{playlist.id}"),
        message="Playlist shared",
    )


@router.patch("/{playlist_id}", response_model=ApiResponse)
async def update_playlist(
    playlist_id: str,
    body: PlaylistUpdate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    pid = parse_id(playlist_id, "playlist")
    name = (body.name or "").strip()
    description = (body.description or "").strip()
    if not name and not description:
        raise ValidationError("Missing name or description")

    playlist = await playlist_service.get_owned(
        db, pid, account.id,
        forbidden="You are not allowed to update this playlist",
        not_found="No playlist found with this ID",
    )
    if name:
        playlist.name = name
    if description:
        playlist.description = description
    await db.commit()
    return ApiResponse(
        status_code=200,
        data=await playlist_service.render_one(db, pid, account.id),
        message="Playlist updated",
    )


@router.delete("/{playlist_id}", response_model=ApiResponse)
async def delete_playlist(
    playlist_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.get_owned(
        db, parse_id(playlist_id, "playlist"), account.id,
        forbidden="You are not allowed to delete this playlist",
        not_found="No playlist found with this ID",
    )
    await playlist_service.delete(db, playlist)
    await db.commit()
    return ApiResponse(status_code=200, data={}, message="Playlist deleted")
