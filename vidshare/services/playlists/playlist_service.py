"""
VidShare Playlist Service - ordered video membership and nested projections.

A playlist renders with its owner summary, then its videos in insertion
order, each video carrying its own owner summary.
"""
from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.core.errors import Conflict, NotFound
from vidshare.models.models import Playlist, PlaylistLike, PlaylistVideo, Video
from vidshare.schemas.schemas import PlaylistSchema, VideoWithOwner
from vidshare.services.guards import assert_owner, can_watch, watchable_by
from vidshare.services.query.projection import ListQuery, OwnerProjection
from vidshare.services.social.toggle import ToggleResult, find_membership, toggle_membership

logger = logging.getLogger(__name__)


class PlaylistService:

    # ── Lookup ───────────────────────────────────────────────────────────

    async def get(self, db: AsyncSession, playlist_id: uuid.UUID, message: str = "Playlist not found") -> Playlist:
        playlist = await db.get(Playlist, playlist_id)
        if playlist is None:
            raise NotFound(message)
        return playlist

    async def get_owned(
        self, db: AsyncSession, playlist_id: uuid.UUID, actor_id: uuid.UUID,
        forbidden: str = "Unauthorized", not_found: str = "Playlist not found",
    ) -> Playlist:
        playlist = await self.get(db, playlist_id, not_found)
        assert_owner(playlist, actor_id, forbidden)
        return playlist

    # ── Membership ───────────────────────────────────────────────────────

    async def add_video(
        self, db: AsyncSession, playlist_id: uuid.UUID, video_id: uuid.UUID, actor_id: uuid.UUID,
    ) -> Playlist:
        playlist = await self.get_owned(db, playlist_id, actor_id)
        video = await db.get(Video, video_id)
        if video is None or not can_watch(video, actor_id):
            raise NotFound("Video not found")
        if await find_membership(db, PlaylistVideo, playlist_id=playlist_id, video_id=video_id):
            raise Conflict("Video already exists in playlist")

        last = await db.scalar(
            select(func.max(PlaylistVideo.position)).where(PlaylistVideo.playlist_id == playlist_id)
        )
        db.add(PlaylistVideo(
            playlist_id=playlist_id, video_id=video_id,
            position=0 if last is None else last + 1,
        ))
        await db.flush()
        logger.info("Added video %s to playlist %s", video_id, playlist_id)
        return playlist

    async def remove_video(
        self, db: AsyncSession, playlist_id: uuid.UUID, video_id: uuid.UUID, actor_id: uuid.UUID,
    ) -> Playlist:
        playlist = await self.get_owned(
            db, playlist_id, actor_id,
            forbidden="You are not allowed to remove video from this playlist",
            not_found="No such playlist found",
        )
        if await db.get(Video, video_id) is None:
            raise NotFound("Video not found")
        member = await find_membership(db, PlaylistVideo, playlist_id=playlist_id, video_id=video_id)
        if member is None:
            raise Conflict("Video not found in playlist")

        await db.delete(member)
        await db.flush()
        logger.info("Removed video %s from playlist %s", video_id, playlist_id)
        return playlist

    async def delete(self, db: AsyncSession, playlist: Playlist) -> None:
        """Delete a playlist together with its memberships and likes."""
        await db.execute(delete(PlaylistVideo).where(PlaylistVideo.playlist_id == playlist.id))
        await db.execute(delete(PlaylistLike).where(PlaylistLike.playlist_id == playlist.id))
        await db.delete(playlist)
        await db.flush()
        logger.info("Deleted playlist %s", playlist.id)

    async def toggle_like(self, db: AsyncSession, playlist: Playlist, actor_id: uuid.UUID) -> ToggleResult:
        return await toggle_membership(db, PlaylistLike, playlist_id=playlist.id, account_id=actor_id)

    # ── Projection ───────────────────────────────────────────────────────

    async def _videos_by_playlist(
        self, db: AsyncSession, playlist_ids: Sequence[uuid.UUID], viewer_id: Optional[uuid.UUID],
    ) -> Dict[uuid.UUID, List[VideoWithOwner]]:
        owner = OwnerProjection(Video.owner_id)
        query = (
            ListQuery(PlaylistVideo)
            .join(Video, Video.id == PlaylistVideo.video_id)
            .where(PlaylistVideo.playlist_id.in_(playlist_ids), watchable_by(viewer_id))
            .add_columns(Video)
            .decorate(owner)
            .sort(PlaylistVideo.position, descending=False)
        )
        grouped: Dict[uuid.UUID, List[VideoWithOwner]] = defaultdict(list)
        for row in await query.fetch(db):
            grouped[row[0].playlist_id].append(owner.decorate(VideoWithOwner, row[1], row))
        return grouped

    async def _like_counts(self, db: AsyncSession, playlist_ids: Sequence[uuid.UUID]) -> Dict[uuid.UUID, int]:
        result = await db.execute(
            select(PlaylistLike.playlist_id, func.count(PlaylistLike.id))
            .where(PlaylistLike.playlist_id.in_(playlist_ids))
            .group_by(PlaylistLike.playlist_id)
        )
        return {playlist_id: count for playlist_id, count in result}

    async def _liked_by(
        self, db: AsyncSession, playlist_ids: Sequence[uuid.UUID], actor_id: Optional[uuid.UUID],
    ) -> set:
        if actor_id is None:
            return set()
        result = await db.scalars(
            select(PlaylistLike.playlist_id).where(
                PlaylistLike.playlist_id.in_(playlist_ids), PlaylistLike.account_id == actor_id,
            )
        )
        return set(result)

    async def render(
        self, db: AsyncSession, query: ListQuery, actor_id: Optional[uuid.UUID] = None,
    ) -> List[PlaylistSchema]:
        """Run a playlist listing and attach owners, nested videos and like state."""
        owner = OwnerProjection(Playlist.owner_id)
        rows = await query.decorate(owner).fetch(db)
        ids = [row[0].id for row in rows]
        if not ids:
            return []

        videos = await self._videos_by_playlist(db, ids, actor_id)
        likes = await self._like_counts(db, ids)
        liked = await self._liked_by(db, ids, actor_id)

        rendered = []
        for row in rows:
            item = owner.decorate(PlaylistSchema, row[0], row)
            item.videos = videos.get(item.id, [])
            item.likes_count = likes.get(item.id, 0)
            item.liked = item.id in liked
            rendered.append(item)
        return rendered

    async def render_one(
        self, db: AsyncSession, playlist_id: uuid.UUID, actor_id: Optional[uuid.UUID] = None,
    ) -> PlaylistSchema:
        rendered = await self.render(db, ListQuery(Playlist).where(Playlist.id == playlist_id), actor_id)
        if not rendered:
            raise NotFound("Playlist not found")
        return rendered[0]

    @staticmethod
    def listing(*criteria: Iterable) -> ListQuery:
        return ListQuery(Playlist).where(*criteria).sort(Playlist.created_at)


playlist_service = PlaylistService()
