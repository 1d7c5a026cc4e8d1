# trustedbiz/models/review.py

import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from trustedbiz.database import Base


class ReviewStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)

    business_id = Column(
        Integer,
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # NULL for reviews submitted without an account
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    rating = Column(Integer, nullable=False)
    review_text = Column(Text, nullable=False)

    reviewer_name = Column(String, nullable=True)
    reviewer_email = Column(String, nullable=True)
    is_anonymous = Column(Boolean, default=False, nullable=False)

    status = Column(
        Enum(
            ReviewStatus,
            name="review_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=ReviewStatus.PENDING,
        nullable=False,
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    business = relationship("Business", back_populates="reviews")
    user = relationship("User", back_populates="reviews")

    __table_args__ = (
        # NULL user ids never collide, so anonymous reviews are unaffected
        UniqueConstraint("business_id", "user_id", name="uq_review_business_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
        Index("ix_reviews_business_status", "business_id", "status"),
    )
