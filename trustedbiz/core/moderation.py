# =========================================================
# MODERATION WORKFLOWS
#
# Review:   pending -> approved | rejected, any -> deleted
# Business: active <-> inactive, any -> deleted
# User:     admin flag on/off, never on yourself
#
# Every transition is an explicit admin action. Validation
# happens before the session is touched.
# =========================================================

import enum

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from trustedbiz.models.business import Business, BusinessStatus
from trustedbiz.models.review import Review, ReviewStatus
from trustedbiz.models.users import User


class ReviewAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    DELETE = "delete"


class BusinessAction(str, enum.Enum):
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"


class UserAction(str, enum.Enum):
    MAKE_ADMIN = "make_admin"
    REMOVE_ADMIN = "remove_admin"


REVIEW_TRANSITIONS = {
    ReviewAction.APPROVE: ReviewStatus.APPROVED,
    ReviewAction.REJECT: ReviewStatus.REJECTED,
}

BUSINESS_TRANSITIONS = {
    BusinessAction.ACTIVATE: BusinessStatus.ACTIVE,
    BusinessAction.DEACTIVATE: BusinessStatus.INACTIVE,
}


def parse_action(enum_cls, raw: str | None, detail: str = "Invalid action"):
    try:
        return enum_cls(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def initial_review_status(author: User | None) -> ReviewStatus:
    # Admin-authored reviews skip the moderation queue
    if author is not None and author.is_admin:
        return ReviewStatus.APPROVED
    return ReviewStatus.PENDING


# =========================================================
# REVIEWS
# =========================================================

def apply_review_action(db: Session, review_id: int, action: ReviewAction) -> Review | None:
    review = db.query(Review).filter(Review.id == review_id).first()

    if not review:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")

    if action == ReviewAction.DELETE:
        db.delete(review)
        db.commit()
        return None

    review.status = REVIEW_TRANSITIONS[action]
    db.commit()
    db.refresh(review)

    return review


# =========================================================
# BUSINESSES
# =========================================================

def get_business_or_404(db: Session, business_id: int) -> Business:
    business = db.query(Business).filter(Business.id == business_id).first()

    if not business:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    return business


def set_business_status(db: Session, business: Business, action: BusinessAction) -> Business:
    business.status = BUSINESS_TRANSITIONS[action]
    db.commit()
    db.refresh(business)
    return business


def delete_business(db: Session, business: Business) -> None:
    # Reviews go with it through the relationship cascade
    db.delete(business)
    db.commit()


# =========================================================
# USERS
# =========================================================

def ensure_not_self_demotion(admin: User, user_id: int, action: UserAction):
    if action == UserAction.REMOVE_ADMIN and user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot remove admin access from your own account",
        )


def set_admin_flag(db: Session, user_id: int, action: UserAction) -> User:
    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user.is_admin = action == UserAction.MAKE_ADMIN
    db.commit()
    db.refresh(user)

    return user
