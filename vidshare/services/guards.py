"""
Ownership and visibility checks applied before mutations and private reads.
"""
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import or_

from vidshare.core.errors import Forbidden
from vidshare.models.models import PlaylistVisibility, Video


def is_owner(resource, actor_id: Optional[uuid.UUID]) -> bool:
    return actor_id is not None and resource.owner_id == actor_id


def assert_owner(resource, actor_id: Optional[uuid.UUID], message: str = "You are not the owner of this resource") -> None:
    if not is_owner(resource, actor_id):
        raise Forbidden(message)


def can_view(playlist, actor_id: Optional[uuid.UUID]) -> bool:
    return playlist.visibility != PlaylistVisibility.PRIVATE or is_owner(playlist, actor_id)


def assert_visible(playlist, actor_id: Optional[uuid.UUID], message: str = "Unauthorized Access") -> None:
    if not can_view(playlist, actor_id):
        raise Forbidden(message)


def can_watch(video, actor_id: Optional[uuid.UUID]) -> bool:
    """Drafts are visible to their owner only."""
    return bool(video.is_published) or is_owner(video, actor_id)


def watchable_by(actor_id: Optional[uuid.UUID]):
    """SQL criterion matching the videos ``can_watch`` allows for ``actor_id``."""
    if actor_id is None:
        return Video.is_published.is_(True)
    return or_(Video.is_published.is_(True), Video.owner_id == actor_id)
