# trustedbiz/models/business.py

import enum

from sqlalchemy import Column, Enum, Index, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from trustedbiz.database import Base


class BusinessStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)

    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    location = Column(String, nullable=True)
    industry = Column(String, nullable=True, index=True)
    timezone = Column(String, nullable=True)

    status = Column(
        Enum(
            BusinessStatus,
            name="business_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=BusinessStatus.ACTIVE,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Deleting a business removes its reviews with it
    reviews = relationship(
        "Review",
        back_populates="business",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_businesses_status_name", "status", "name"),
    )
