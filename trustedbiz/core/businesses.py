# trustedbiz/core/businesses.py

from sqlalchemy import func
from sqlalchemy.orm import Session

from trustedbiz.core.query import contains, equals
from trustedbiz.core.slug import create_business_slug
from trustedbiz.models.business import Business, BusinessStatus
from trustedbiz.models.review import Review, ReviewStatus


def business_listing_query(db: Session):
    """
    Businesses joined with their approved-review stats.

    Rows are (Business, average_rating, review_count); businesses
    without approved reviews carry NULLs for both.
    """
    stats = (
        db.query(
            Review.business_id.label("business_id"),
            func.avg(Review.rating).label("average_rating"),
            func.count(Review.id).label("review_count"),
        )
        .filter(Review.status == ReviewStatus.APPROVED)
        .group_by(Review.business_id)
        .subquery()
    )

    return (
        db.query(Business, stats.c.average_rating, stats.c.review_count)
        .outerjoin(stats, stats.c.business_id == Business.id)
        .order_by(Business.name.asc(), Business.id.asc())
    )


def business_predicates(
    query: str | None = None,
    location: str | None = None,
    industry: str | None = None,
    status: BusinessStatus | None = None,
):
    return [
        contains((Business.name, Business.industry), query),
        contains((Business.location, Business.address), location),
        contains(Business.industry, industry),
        equals(Business.status, status),
    ]


def serialize_business(
    business: Business,
    average_rating=None,
    review_count=None,
    include_status: bool = False,
) -> dict:
    data = {
        "id": business.id,
        "name": business.name,
        "phone": business.phone,
        "address": business.address,
        "location": business.location,
        "industry": business.industry,
        "timezone": business.timezone,
        "average_rating": round(float(average_rating or 0), 2),
        "review_count": int(review_count or 0),
        "slug": create_business_slug(business.name, business.id),
    }

    if include_status:
        data["status"] = business.status

    return data


def serialize_listing_rows(rows, include_status: bool = False) -> list[dict]:
    return [
        serialize_business(business, average_rating, review_count, include_status)
        for business, average_rating, review_count in rows
    ]


def reviewer_display_name(review: Review) -> str:
    if review.is_anonymous:
        return "Anonymous"

    if review.reviewer_name:
        return review.reviewer_name

    if review.user is not None and review.user.full_name:
        return review.user.full_name

    return "Anonymous"
