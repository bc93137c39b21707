"""Public catalogue: facet filters, sorting and pagination.

``build_filter_spec`` turns the user-facing ``ListingFilters`` into a plain
``FilterSpec`` (predicates + sort) that ``list_resources`` applies in SQL.
Keeping ``FilterSpec`` a value object means it can be inspected without a database.
"""

import operator
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resourcehub.models.resource import Category, Framework, Resource, ResourceStatus, ResourceType
from resourcehub.schemas.listing import ListingFilters

RECENCY_WINDOWS = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "3months": timedelta(days=90),
}
OLDER_THAN = timedelta(days=90)

# (inclusive lower bound, exclusive upper bound) on download_count
POPULARITY_BANDS = {
    "high": (100, None),
    "medium": (10, 100),
    "new": (None, 10),
}


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str  # eq | lt | lte | gte
    value: Any


@dataclass(frozen=True)
class SortClause:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class FilterSpec:
    predicates: tuple[Predicate, ...]
    sort: SortClause


SORTS = {
    "newest": SortClause("created_at", descending=True),
    "oldest": SortClause("created_at"),
    "price-asc": SortClause("price"),
    "price-desc": SortClause("price", descending=True),
    "popular": SortClause("download_count", descending=True),
    "alphabetical": SortClause("title"),
}

_OPS = {
    "eq": operator.eq,
    "lt": operator.lt,
    "lte": operator.le,
    "gte": operator.ge,
}


def build_filter_spec(filters: ListingFilters, now: datetime | None = None) -> FilterSpec:
    """Compose the predicates for a catalogue query. Only approved resources are listed."""
    now = now or datetime.now(timezone.utc)
    predicates = [Predicate("status", "eq", ResourceStatus.APPROVED)]

    if filters.framework != "all":
        predicates.append(Predicate("framework", "eq", Framework(filters.framework)))
    if filters.category != "all":
        predicates.append(Predicate("category", "eq", Category(filters.category)))
    if filters.resource_type != "all":
        predicates.append(Predicate("resource_type", "eq", ResourceType(filters.resource_type)))

    if filters.free_only:
        predicates.append(Predicate("price", "eq", Decimal("0")))
    elif filters.price_ceiling is not None:
        predicates.append(Predicate("price", "lte", Decimal(str(filters.price_ceiling))))

    if filters.recency == "older":
        predicates.append(Predicate("created_at", "lt", now - OLDER_THAN))
    elif filters.recency != "all":
        predicates.append(Predicate("created_at", "gte", now - RECENCY_WINDOWS[filters.recency]))

    if filters.popularity != "all":
        low, high = POPULARITY_BANDS[filters.popularity]
        if low is not None:
            predicates.append(Predicate("download_count", "gte", low))
        if high is not None:
            predicates.append(Predicate("download_count", "lt", high))

    return FilterSpec(predicates=tuple(predicates), sort=SORTS[filters.sort])


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user input matches literally (escape char ``\\``)."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _conditions(spec: FilterSpec) -> list:
    return [_OPS[p.op](getattr(Resource, p.field), p.value) for p in spec.predicates]


def _order_by(sort: SortClause) -> tuple:
    column = getattr(Resource, sort.field)
    return (column.desc() if sort.descending else column.asc(), Resource.id.asc())


async def list_resources(
    db: AsyncSession,
    filters: ListingFilters,
    q: str | None = None,
    page: int = 1,
    page_size: int = 20,
    now: datetime | None = None,
) -> tuple[list[Resource], int]:
    """Apply a filter spec with offset/limit pagination."""
    spec = build_filter_spec(filters, now)
    conditions = _conditions(spec)
    if q:
        pattern = f"%{escape_like(q)}%"
        conditions.append(
            Resource.title.ilike(pattern, escape="\\") | Resource.description.ilike(pattern, escape="\\")
        )

    total = (await db.execute(select(func.count(Resource.id)).where(*conditions))).scalar() or 0

    query = (
        select(Resource)
        .where(*conditions)
        .order_by(*_order_by(spec.sort))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(query)
    return list(result.scalars().all()), total


def search_page(resources: list[Resource], text: str | None) -> list[Resource]:
    """Narrow an already-fetched page by title/description substring.

    Only filters what was loaded; use ``q`` on ``list_resources`` for a
    catalogue-wide search.
    """
    needle = (text or "").strip().lower()
    if not needle:
        return list(resources)
    return [
        resource for resource in resources
        if needle in (resource.title or "").lower() or needle in (resource.description or "").lower()
    ]
