"""
Generic membership toggle: flip a (subject, actor) record between present and absent.

The existence check and the insert/delete are two statements with no
isolation between them. Two concurrent toggles by the same actor on the
same target can both observe the same state; the final state is then
whichever write lands last. Callers rely on the store's per-row atomicity
only.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass
class ToggleResult:
    active: bool
    record: Optional[Any] = None


async def find_membership(db: AsyncSession, model, **match) -> Optional[Any]:
    criteria = [getattr(model, column) == value for column, value in match.items()]
    return await db.scalar(select(model).where(*criteria).limit(1))


async def toggle_membership(db: AsyncSession, model, record: Optional[Any] = None, **match) -> ToggleResult:
    """
    Delete the record matching ``match`` if it exists, otherwise create one.

    ``record`` lets callers supply a prebuilt instance (e.g. a tagged Like)
    for the insert branch; it must agree with ``match``.
    """
    existing = await find_membership(db, model, **match)
    if existing is not None:
        await db.delete(existing)
        await db.flush()
        logger.debug("Removed %s %s", model.__tablename__, match)
        return ToggleResult(active=False)

    created = record if record is not None else model(**match)
    db.add(created)
    await db.flush()
    logger.debug("Added %s %s", model.__tablename__, match)
    return ToggleResult(active=True, record=created)
