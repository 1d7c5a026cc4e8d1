# schemas/review.py

from pydantic import EmailStr
from datetime import datetime
from typing import List

from trustedbiz.models.review import ReviewStatus
from trustedbiz.schemas.common import CamelModel, Pagination


class ReviewCreate(CamelModel):
    # Required fields are checked by the handler so the error order is fixed
    business_id: int | None = None
    rating: int | None = None
    review_text: str | None = None
    reviewer_name: str | None = None
    reviewer_email: EmailStr | None = None
    is_anonymous: bool = False


class AdminReviewCreate(ReviewCreate):
    status: ReviewStatus = ReviewStatus.APPROVED


class AdminReviewResponse(CamelModel):
    id: int
    business_id: int
    business_name: str
    rating: int
    review_text: str
    reviewer_name: str
    reviewer_email: str | None = None
    status: ReviewStatus
    is_anonymous: bool
    created_at: datetime | None = None


class AdminReviewListResponse(CamelModel):
    reviews: List[AdminReviewResponse]
    pagination: Pagination


class ReviewActionRequest(CamelModel):
    review_id: int | None = None
    action: str | None = None
