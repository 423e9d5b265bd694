"""
VidShare Like Service - toggles likes on videos, comments and tweets.
"""
from __future__ import annotations

import uuid
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.core.errors import NotFound
from vidshare.models.models import Comment, Like, LikeKind, LikeTarget, Tweet, Video
from vidshare.schemas.schemas import LikedVideo, VideoWithOwner
from vidshare.services.guards import can_watch, watchable_by
from vidshare.services.query.projection import ListQuery, OwnerProjection
from vidshare.services.social.toggle import ToggleResult, toggle_membership

TARGET_MODELS = {
    LikeKind.VIDEO: Video,
    LikeKind.COMMENT: Comment,
    LikeKind.TWEET: Tweet,
}


class LikeService:

    async def toggle(self, db: AsyncSession, actor_id: uuid.UUID, target: LikeTarget) -> ToggleResult:
        """Like the target if the actor has not yet, unlike it otherwise."""
        model = TARGET_MODELS[target.kind]
        found = await db.get(model, target.id)
        if found is None or (target.kind == LikeKind.VIDEO and not can_watch(found, actor_id)):
            raise NotFound(f"{target.kind.label} not found")

        return await toggle_membership(
            db, Like,
            record=Like.for_target(actor_id, target),
            liked_by_id=actor_id,
            **{target.column: target.id},
        )

    async def liked_videos(self, db: AsyncSession, actor_id: uuid.UUID) -> List[LikedVideo]:
        """Videos the actor liked, newest like first; likes on vanished or hidden drafts drop out."""
        owner = OwnerProjection(Video.owner_id)
        query = (
            ListQuery(Like)
            .join(Video, Video.id == Like.video_id)
            .where(Like.liked_by_id == actor_id, Like.video_id.is_not(None), watchable_by(actor_id))
            .add_columns(Video)
            .decorate(owner)
            .sort(Like.created_at)
        )
        rows = await query.fetch(db)
        return [
            LikedVideo(liked_at=row[0].created_at, video=owner.decorate(VideoWithOwner, row[1], row))
            for row in rows
        ]


like_service = LikeService()
