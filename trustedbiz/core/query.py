# =========================================================
# QUERY BUILDER
#
# Filters are small predicate objects. Each one renders a
# SQLAlchemy clause with bound parameters, so user input is
# never spliced into SQL text.
#
# An absent filter is simply not in the list.
# =========================================================

import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from sqlalchemy import and_, or_, true
from sqlalchemy.orm import Query

from trustedbiz.core.config import settings

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match on any of the given columns."""

    columns: Sequence[Any]
    term: str

    def clause(self):
        pattern = f"%{escape_like(self.term)}%"
        return or_(
            *(column.ilike(pattern, escape=LIKE_ESCAPE) for column in self.columns)
        )


@dataclass(frozen=True)
class Equals:
    column: Any
    value: Any

    def clause(self):
        return self.column == self.value


def contains(columns, term: str | None):
    if not term or not term.strip():
        return None
    if not isinstance(columns, (list, tuple)):
        columns = (columns,)
    return Contains(tuple(columns), term.strip())


def equals(column, value):
    if value is None:
        return None
    return Equals(column, value)


def combine(predicates: Iterable):
    """AND the given predicates together, skipping None."""
    clauses = [p.clause() for p in predicates if p is not None]
    if not clauses:
        return true()
    return and_(*clauses)


def apply_filters(query: Query, predicates: Iterable) -> Query:
    return query.filter(combine(predicates))


# =========================================================
# PAGINATION
# =========================================================

@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @classmethod
    def build(cls, page: int | None, limit: int | None, default_limit: int | None = None):
        default_limit = default_limit or settings.DEFAULT_PAGE_SIZE

        if page is None or page < 1:
            page = 1

        if limit is None or limit < 1:
            limit = default_limit

        if limit > settings.MAX_PAGE_SIZE:
            limit = settings.MAX_PAGE_SIZE

        return cls(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def total_pages(total_count: int, limit: int) -> int:
    return math.ceil(total_count / limit)


def pagination_meta(page_request: PageRequest, total_count: int) -> dict:
    return {
        "current_page": page_request.page,
        "total_pages": total_pages(total_count, page_request.limit),
        "total_count": total_count,
        "limit": page_request.limit,
    }


def paginate(query: Query, page_request: PageRequest):
    """
    Run the count query and the page query for the same filters.

    Returns (rows, pagination). A page past the end yields no rows
    but the same pagination metadata.
    """
    total_count = query.order_by(None).count()

    rows = (
        query
        .offset(page_request.offset)
        .limit(page_request.limit)
        .all()
    )

    return rows, pagination_meta(page_request, total_count)
