# =========================================================
# SEARCH SUGGESTIONS (TYPEAHEAD)
#
# type=business | location | industry, anything else = mixed.
# Queries shorter than 2 characters return nothing.
# This endpoint never fails: errors yield an empty list.
# =========================================================

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from trustedbiz.database import get_db
from trustedbiz.core.query import apply_filters, contains, equals
from trustedbiz.models.business import Business, BusinessStatus
from trustedbiz.schemas.search import SuggestionResponse

router = APIRouter(prefix="/api/search", tags=["Search"])

logger = logging.getLogger("trustedbiz")

MIN_QUERY_LENGTH = 2
SINGLE_TYPE_LIMIT = 10
MIXED_TYPE_LIMIT = 5


def _active():
    return equals(Business.status, BusinessStatus.ACTIVE)


def business_suggestions(db: Session, term: str, limit: int) -> list[dict]:
    rows = (
        apply_filters(
            db.query(Business.name, Business.address, Business.location),
            [contains(Business.name, term), _active()],
        )
        .order_by(Business.name.asc(), Business.id.asc())
        .limit(limit)
        .all()
    )

    return [
        {
            "type": "business",
            "label": name,
            "sublabel": location or address,
            "value": name,
        }
        for name, address, location in rows
    ]


def location_suggestions(db: Session, term: str, limit: int) -> list[dict]:
    rows = (
        apply_filters(
            db.query(Business.location).distinct(),
            [contains(Business.location, term), _active()],
        )
        .order_by(Business.location.asc())
        .limit(limit)
        .all()
    )

    return [
        {"type": "location", "label": location, "value": location}
        for (location,) in rows
    ]


def industry_suggestions(db: Session, term: str, limit: int) -> list[dict]:
    business_count = func.count(Business.id).label("business_count")

    rows = (
        apply_filters(
            db.query(Business.industry, business_count),
            [contains(Business.industry, term), _active()],
        )
        .group_by(Business.industry)
        .order_by(business_count.desc(), Business.industry.asc())
        .limit(limit)
        .all()
    )

    return [
        {
            "type": "industry",
            "label": industry,
            "sublabel": f"{count} businesses",
            "value": industry,
        }
        for industry, count in rows
    ]


SUGGESTERS = {
    "business": business_suggestions,
    "location": location_suggestions,
    "industry": industry_suggestions,
}


def build_suggestions(db: Session, term: str, suggestion_type: str) -> list[dict]:
    suggester = SUGGESTERS.get(suggestion_type)
    if suggester is not None:
        return suggester(db, term, SINGLE_TYPE_LIMIT)

    suggestions = []
    for suggester in SUGGESTERS.values():
        suggestions.extend(suggester(db, term, MIXED_TYPE_LIMIT))
    return suggestions


@router.get("/suggestions", response_model=SuggestionResponse)
def search_suggestions(
    q: str | None = None,
    type: str = "business",
    db: Session = Depends(get_db),
):
    term = (q or "").strip()

    if len(term) < MIN_QUERY_LENGTH:
        return {"suggestions": []}

    try:
        suggestions = build_suggestions(db, term, type)
    except Exception:
        logger.exception(f"Search suggestions failed for {term!r}")
        return {"suggestions": []}

    return {"suggestions": suggestions}
