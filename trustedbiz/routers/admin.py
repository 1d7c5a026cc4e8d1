# trustedbiz/routers/admin.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from datetime import datetime, timezone
import logging

from trustedbiz.database import get_db
from trustedbiz.core.auth import get_admin_user
from trustedbiz.core.businesses import (
    business_listing_query,
    business_predicates,
    serialize_listing_rows,
)
from trustedbiz.core.location import count_by_state
from trustedbiz.core.moderation import (
    BusinessAction,
    delete_business,
    get_business_or_404,
    parse_action,
    set_business_status,
)
from trustedbiz.core.query import PageRequest, apply_filters, paginate
from trustedbiz.models.business import Business, BusinessStatus
from trustedbiz.models.review import Review, ReviewStatus
from trustedbiz.models.users import User
from trustedbiz.schemas.business import (
    AdminBusinessListResponse,
    BusinessActionRequest,
    BusinessDeleteRequest,
)


router = APIRouter(prefix="/api/admin", tags=["Admin"])

logger = logging.getLogger("trustedbiz")

STATUS_FILTERS = {
    "all": None,
    "active": BusinessStatus.ACTIVE,
    "inactive": BusinessStatus.INACTIVE,
}

# States need more than this many listings to show in analytics
LOCATION_MIN_BUSINESSES = 100


# =========================================================
# HELPERS
# =========================================================

def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def time_ago(created_at: datetime | None, now: datetime | None = None) -> str:
    if created_at is None:
        return "Just now"

    now = now or datetime.now(timezone.utc)
    hours_ago = max(int((now - _as_utc(created_at)).total_seconds() // 3600), 0)
    days_ago = hours_ago // 24

    if days_ago > 0:
        return f"{days_ago} day{'s' if days_ago > 1 else ''} ago"
    if hours_ago > 0:
        return f"{hours_ago} hour{'s' if hours_ago > 1 else ''} ago"
    return "Just now"


STATUS_ACTIVITY = {
    ReviewStatus.APPROVED: ("Review approved", "green"),
    ReviewStatus.REJECTED: ("Review rejected", "red"),
    ReviewStatus.PENDING: ("New review submitted", "blue"),
}


def _recent_reviews(db: Session, limit: int = 10):
    return (
        db.query(Review)
        .options(joinedload(Review.business))
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
        .all()
    )


def _average_approved_rating(db: Session) -> float:
    average = (
        db.query(func.avg(Review.rating))
        .filter(Review.status == ReviewStatus.APPROVED)
        .scalar()
    )
    return round(float(average or 0), 2)


def _overview(db: Session) -> dict:
    return {
        "totalBusinesses": db.query(func.count(Business.id)).scalar(),
        "totalUsers": db.query(func.count(User.id)).scalar(),
        "totalReviews": db.query(func.count(Review.id)).scalar(),
        "averageRating": _average_approved_rating(db),
    }


# =========================================================
# DASHBOARD STATS
# =========================================================

@router.get("/stats")
def platform_stats(
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    start_of_today = datetime.now(timezone.utc).replace(
        hour=0, minute=0, second=0, microsecond=0
    )

    pending_reviews = db.query(func.count(Review.id)).filter(
        Review.status == ReviewStatus.PENDING
    ).scalar()

    reviews_today = db.query(func.count(Review.id)).filter(
        Review.created_at >= start_of_today
    ).scalar()

    stats = _overview(db)
    stats.update({
        "pendingReviews": pending_reviews,
        "reviewsToday": reviews_today,
    })

    return {"stats": stats}


@router.get("/activity")
def recent_activity(
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    activities = []

    for review in _recent_reviews(db):
        status_text, color = STATUS_ACTIVITY[review.status]
        activities.append({
            "type": "review",
            "description": f"{status_text} for {review.business.name}",
            "time": time_ago(review.created_at),
            "color": color,
            "details": {
                "businessName": review.business.name,
                "reviewerName": review.reviewer_name or "Anonymous",
                "rating": review.rating,
            },
        })

    return {"activities": activities}


@router.get("/analytics")
def platform_analytics(
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    business_count = func.count(Business.id).label("business_count")

    top_industries = (
        db.query(Business.industry, business_count)
        .filter(Business.industry.isnot(None), Business.industry != "")
        .group_by(Business.industry)
        .order_by(business_count.desc(), Business.industry.asc())
        .limit(5)
        .all()
    )

    location_counts = (
        db.query(Business.location, func.count(Business.id))
        .filter(Business.location.isnot(None), Business.location != "")
        .group_by(Business.location)
        .all()
    )

    top_locations = count_by_state(location_counts, min_count=LOCATION_MIN_BUSINESSES)[:10]

    recent = []
    for review in _recent_reviews(db):
        status_text, _ = STATUS_ACTIVITY[review.status]
        recent.append({
            "type": "review",
            "message": f"{status_text} for {review.business.name}",
            "timestamp": time_ago(review.created_at),
        })

    return {
        "analytics": {
            "overview": _overview(db),
            "topIndustries": [
                {"name": industry, "count": count}
                for industry, count in top_industries
            ],
            "topLocations": [
                {"name": state, "count": count}
                for state, count in top_locations
            ],
            "recentActivity": recent,
        }
    }


# =========================================================
# BUSINESS MANAGEMENT
# =========================================================

@router.get("/businesses", response_model=AdminBusinessListResponse)
def list_businesses(
    query: str | None = None,
    status: str = "all",
    industry: str | None = None,
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    page_request = PageRequest.build(page, limit)

    # Unknown status values behave like "all"
    predicates = business_predicates(
        query=query,
        industry=industry,
        status=STATUS_FILTERS.get(status),
    )

    rows, pagination = paginate(
        apply_filters(business_listing_query(db), predicates),
        page_request,
    )

    return {
        "businesses": serialize_listing_rows(rows, include_status=True),
        "pagination": pagination,
    }


# =========================================================
# ACTIVATE / DEACTIVATE / DELETE BUSINESS
# =========================================================

@router.post("/businesses/action")
def business_action(
    action_data: BusinessActionRequest,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    if not action_data.business_id or not action_data.action:
        raise HTTPException(status_code=400, detail="Business ID and action are required")

    business = get_business_or_404(db, action_data.business_id)

    action = parse_action(
        BusinessAction,
        action_data.action,
        detail='Invalid action. Use "activate" or "deactivate"',
    )

    set_business_status(db, business, action)

    logger.info(f"Admin {admin.id} set business {business.id} to {business.status.value}")

    verb = "activated" if action == BusinessAction.ACTIVATE else "deactivated"
    return {"message": f"Successfully {verb} {business.name}"}


@router.delete("/businesses/action")
def remove_business(
    delete_data: BusinessDeleteRequest,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    if not delete_data.business_id:
        raise HTTPException(status_code=400, detail="Business ID is required")

    business = get_business_or_404(db, delete_data.business_id)
    business_name = business.name

    delete_business(db, business)

    logger.info(f"Admin {admin.id} deleted business {delete_data.business_id}")

    return {"message": f"Successfully deleted {business_name}"}
