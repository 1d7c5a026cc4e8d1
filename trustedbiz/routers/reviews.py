# =========================================================
# REVIEW SUBMISSION
#
# Anyone can submit. Visitors without an account must give a
# name and email; signed-in users get one review per business.
# Reviews from admins are approved immediately, everything
# else waits in the moderation queue.
# =========================================================

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from trustedbiz.database import get_db
from trustedbiz.core.auth import get_optional_user
from trustedbiz.core.email import notify_admin_of_pending_review
from trustedbiz.core.moderation import get_business_or_404, initial_review_status
from trustedbiz.core.rate_limiter import limiter
from trustedbiz.models.review import Review, ReviewStatus
from trustedbiz.models.users import User
from trustedbiz.schemas.review import ReviewCreate

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])

logger = logging.getLogger("trustedbiz")

DUPLICATE_REVIEW_DETAIL = "You have already reviewed this business"


def validate_review_fields(review_data: ReviewCreate, author: User | None):
    review_text = (review_data.review_text or "").strip()

    if not review_data.business_id or not review_data.rating or not review_text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Business ID, rating, and review text are required",
        )

    if review_data.rating < 1 or review_data.rating > 5:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Rating must be between 1 and 5",
        )

    if author is None and (not review_data.reviewer_name or not review_data.reviewer_email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and email are required when not logged in",
        )


def ensure_first_review(db: Session, business_id: int, author: User | None):
    if author is None:
        return

    existing_review = (
        db.query(Review.id)
        .filter(Review.business_id == business_id, Review.user_id == author.id)
        .first()
    )

    if existing_review:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_REVIEW_DETAIL)


def build_review(review_data: ReviewCreate, author: User | None, review_status: ReviewStatus) -> Review:
    reviewer_name = review_data.reviewer_name
    reviewer_email = review_data.reviewer_email

    if author is not None:
        reviewer_name = reviewer_name or author.full_name or author.email
        reviewer_email = reviewer_email or author.email

    return Review(
        business_id=review_data.business_id,
        user_id=author.id if author is not None else None,
        rating=review_data.rating,
        review_text=review_data.review_text,
        reviewer_name=reviewer_name,
        reviewer_email=reviewer_email,
        is_anonymous=review_data.is_anonymous,
        status=review_status,
    )


def save_review(db: Session, review: Review) -> Review:
    try:
        db.add(review)
        db.commit()
    except IntegrityError:
        # Lost the race against a concurrent submission by the same user
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_REVIEW_DETAIL)

    db.refresh(review)
    return review


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def submit_review(
    request: Request,
    review_data: ReviewCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    validate_review_fields(review_data, current_user)

    business = get_business_or_404(db, review_data.business_id)

    ensure_first_review(db, business.id, current_user)

    review = save_review(
        db,
        build_review(review_data, current_user, initial_review_status(current_user)),
    )

    logger.info(f"Review {review.id} submitted for business {business.id} ({review.status.value})")

    if review.status == ReviewStatus.PENDING:
        background_tasks.add_task(
            notify_admin_of_pending_review,
            business.name,
            review.rating,
            review.reviewer_name,
        )

    return {"message": "Review submitted successfully"}
