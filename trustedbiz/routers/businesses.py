# =========================================================
# PUBLIC BUSINESS DIRECTORY
#
# - Search listing (active businesses only)
# - Industry listing (exact industry match)
# - Detail by numeric id or slug, with approved reviews
# =========================================================

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from trustedbiz.database import get_db
from trustedbiz.core.businesses import (
    business_listing_query,
    business_predicates,
    reviewer_display_name,
    serialize_business,
    serialize_listing_rows,
)
from trustedbiz.core.moderation import get_business_or_404
from trustedbiz.core.query import PageRequest, apply_filters, equals, paginate
from trustedbiz.core.slug import resolve_business_identifier
from trustedbiz.models.business import Business, BusinessStatus
from trustedbiz.models.review import Review, ReviewStatus
from trustedbiz.schemas.business import BusinessDetailResponse, BusinessListResponse

router = APIRouter(prefix="/api/businesses", tags=["Businesses"])

INDUSTRY_PAGE_SIZE = 20


# =========================================================
# SEARCH
# =========================================================
@router.get("", response_model=BusinessListResponse)
def search_businesses(
    query: str | None = None,
    location: str | None = None,
    industry: str | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
):
    page_request = PageRequest.build(page, limit)

    # Public search never shows inactive listings
    predicates = business_predicates(
        query=query,
        location=location,
        industry=industry,
        status=BusinessStatus.ACTIVE,
    )

    rows, pagination = paginate(
        apply_filters(business_listing_query(db), predicates),
        page_request,
    )

    return {
        "businesses": serialize_listing_rows(rows),
        "pagination": pagination,
    }


# =========================================================
# BY INDUSTRY
# =========================================================
@router.get("/industry/{industry}", response_model=BusinessListResponse)
def businesses_by_industry(
    industry: str,
    page: int = 1,
    db: Session = Depends(get_db),
):
    page_request = PageRequest.build(page, INDUSTRY_PAGE_SIZE)

    predicates = [
        equals(Business.industry, industry),
        equals(Business.status, BusinessStatus.ACTIVE),
    ]

    rows, pagination = paginate(
        apply_filters(business_listing_query(db), predicates),
        page_request,
    )

    return {
        "businesses": serialize_listing_rows(rows),
        "pagination": pagination,
    }


# =========================================================
# DETAIL
# =========================================================
@router.get("/{identifier}", response_model=BusinessDetailResponse)
def get_business(
    identifier: str,
    db: Session = Depends(get_db),
):
    business_id = resolve_business_identifier(identifier)
    business = get_business_or_404(db, business_id)

    reviews = (
        db.query(Review)
        .options(joinedload(Review.user))
        .filter(
            Review.business_id == business.id,
            Review.status == ReviewStatus.APPROVED,
        )
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )

    review_count = len(reviews)
    average_rating = (
        sum(review.rating for review in reviews) / review_count
        if review_count else 0
    )

    return {
        "business": serialize_business(business, average_rating, review_count),
        "reviews": [
            {
                "id": review.id,
                "rating": review.rating,
                "review_text": review.review_text,
                "reviewer_name": reviewer_display_name(review),
                "created_at": review.created_at,
            }
            for review in reviews
        ],
    }
