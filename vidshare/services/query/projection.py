"""
Relational projection and listing builders.

``OwnerProjection`` decorates a primary entity with its owner's summary
(id, username, full name, avatar) through an OUTER join, so a missing or
dangling owner yields ``owner = None`` instead of dropping the record.
Joins that must resolve (a comment's video, a like's video) are added to a
``ListQuery`` as INNER joins. Sorting is applied after the joins and before
the page is sliced.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from vidshare.core.errors import ValidationError
from vidshare.models.models import Account
from vidshare.schemas.schemas import OwnerSummary
from vidshare.services.query.pagination import PageParams

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class OwnerProjection:
    """Outer-joins an Account alias on ``owner_column`` and reads it back as an OwnerSummary."""

    def __init__(self, owner_column, name: str = "owner"):
        self.owner_column = owner_column
        self.name = name
        self.account = aliased(Account, name=f"{name}_account")

    def _key(self, attr: str) -> str:
        return f"{self.name}__{attr}"

    @property
    def columns(self) -> Tuple:
        return (
            self.account.id.label(self._key("id")),
            self.account.username.label(self._key("username")),
            self.account.full_name.label(self._key("full_name")),
            self.account.avatar.label(self._key("avatar")),
        )

    def apply(self, stmt: Select) -> Select:
        return stmt.add_columns(*self.columns).outerjoin(
            self.account, self.account.id == self.owner_column,
        )

    def summary(self, row) -> Optional[OwnerSummary]:
        mapping = row._mapping
        owner_id = mapping[self._key("id")]
        if owner_id is None:
            return None
        return OwnerSummary(
            id=owner_id,
            username=mapping[self._key("username")],
            full_name=mapping[self._key("full_name")],
            avatar=mapping[self._key("avatar")],
        )

    def decorate(self, schema: Type[SchemaT], entity: Any, row) -> SchemaT:
        item = schema.model_validate(entity)
        item.owner = self.summary(row)
        return item


def resolve_sort(
    sort_by: Optional[str],
    sort_type: Optional[str],
    allowed: Dict[str, Any],
    default: str = "createdAt",
) -> Tuple[Any, bool]:
    """Map a public sort key onto a column; unknown keys and directions are rejected."""
    key = sort_by or default
    if key not in allowed:
        raise ValidationError(f"Invalid sortBy. Must be one of: {', '.join(sorted(allowed))}")
    direction = (sort_type or "desc").lower()
    if direction not in ("asc", "desc"):
        raise ValidationError("Invalid sortType. Must be 'asc' or 'desc'")
    return allowed[key], direction == "desc"


@dataclass
class ListQuery:
    """Typed builder for ``filter -> join -> project -> sort -> paginate`` listings."""

    entity: Any
    filters: List[Any] = field(default_factory=list)
    required_joins: List[Tuple[Any, Any]] = field(default_factory=list)
    projections: List[OwnerProjection] = field(default_factory=list)
    extra_columns: List[Any] = field(default_factory=list)
    order: List[Any] = field(default_factory=list)

    def where(self, *criteria) -> "ListQuery":
        self.filters.extend(c for c in criteria if c is not None)
        return self

    def join(self, target, onclause) -> "ListQuery":
        self.required_joins.append((target, onclause))
        return self

    def decorate(self, projection: OwnerProjection) -> "ListQuery":
        self.projections.append(projection)
        return self

    def add_columns(self, *columns) -> "ListQuery":
        self.extra_columns.extend(columns)
        return self

    def sort(self, column, descending: bool = True) -> "ListQuery":
        self.order.append(column.desc() if descending else column.asc())
        return self

    def _base(self, stmt: Select) -> Select:
        for target, onclause in self.required_joins:
            stmt = stmt.join(target, onclause)
        if self.filters:
            stmt = stmt.where(*self.filters)
        return stmt

    def statement(self, page: Optional[PageParams] = None) -> Select:
        stmt = self._base(select(self.entity, *self.extra_columns))
        for projection in self.projections:
            stmt = projection.apply(stmt)
        # Primary key as tie-breaker keeps page boundaries stable
        stmt = stmt.order_by(*self.order, self.entity.id)
        if page is not None:
            stmt = stmt.offset(page.skip).limit(page.limit)
        return stmt

    def count_statement(self) -> Select:
        return self._base(select(func.count(self.entity.id)).select_from(self.entity))

    async def fetch(self, db: AsyncSession, page: Optional[PageParams] = None) -> Sequence:
        result = await db.execute(self.statement(page))
        return result.all()

    async def fetch_page(self, db: AsyncSession, page: PageParams) -> Tuple[Sequence, int]:
        rows = await self.fetch(db, page)
        total = await db.scalar(self.count_statement()) or 0
        return rows, total
