# trustedbiz/routers/admin_reviews.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload
import logging

from trustedbiz.database import get_db
from trustedbiz.core.auth import get_admin_user
from trustedbiz.core.moderation import ReviewAction, apply_review_action, get_business_or_404, parse_action
from trustedbiz.core.query import PageRequest, apply_filters, equals, paginate
from trustedbiz.models.review import Review, ReviewStatus
from trustedbiz.routers.reviews import build_review, save_review, validate_review_fields
from trustedbiz.schemas.review import AdminReviewCreate, AdminReviewListResponse, ReviewActionRequest

router = APIRouter(prefix="/api/admin/reviews", tags=["Admin"])

logger = logging.getLogger("trustedbiz")

ADMIN_PAGE_SIZE = 50


def _admin_reviewer_name(review: Review) -> str:
    if review.reviewer_name:
        return review.reviewer_name
    if review.user is not None and review.user.full_name:
        return review.user.full_name
    return "Anonymous"


@router.get("", response_model=AdminReviewListResponse)
def list_reviews(
    status: str = "pending",
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    page_request = PageRequest.build(page, limit, default_limit=ADMIN_PAGE_SIZE)

    # "all" and unknown values skip the status predicate
    try:
        status_filter = ReviewStatus(status)
    except ValueError:
        status_filter = None

    query = (
        db.query(Review)
        .options(joinedload(Review.business), joinedload(Review.user))
        .order_by(Review.created_at.desc(), Review.id.desc())
    )

    reviews, pagination = paginate(
        apply_filters(query, [equals(Review.status, status_filter)]),
        page_request,
    )

    return {
        "reviews": [
            {
                "id": review.id,
                "business_id": review.business_id,
                "business_name": review.business.name,
                "rating": review.rating,
                "review_text": review.review_text,
                "reviewer_name": _admin_reviewer_name(review),
                "reviewer_email": review.reviewer_email,
                "status": review.status,
                "is_anonymous": review.is_anonymous,
                "created_at": review.created_at,
            }
            for review in reviews
        ],
        "pagination": pagination,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_review(
    review_data: AdminReviewCreate,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    validate_review_fields(review_data, admin)

    get_business_or_404(db, review_data.business_id)

    # Admin-entered reviews are not tied to the admin's own account
    review = build_review(review_data, None, review_data.status)
    review.reviewer_name = review.reviewer_name or admin.full_name or admin.email

    review = save_review(db, review)

    logger.info(f"Admin {admin.id} created review {review.id}")

    return {"message": "Review created successfully", "id": review.id}


@router.post("/action")
def review_action(
    action_data: ReviewActionRequest,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    if not action_data.review_id or not action_data.action:
        raise HTTPException(status_code=400, detail="Review ID and action are required")

    action = parse_action(ReviewAction, action_data.action)

    apply_review_action(db, action_data.review_id, action)

    logger.info(f"Admin {admin.id} applied {action.value} to review {action_data.review_id}")

    return {"success": True}
