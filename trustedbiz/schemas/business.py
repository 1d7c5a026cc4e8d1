# schemas/business.py

from datetime import datetime
from typing import List

from trustedbiz.models.business import BusinessStatus
from trustedbiz.schemas.common import CamelModel, Pagination


class BusinessSummary(CamelModel):
    id: int
    name: str
    phone: str | None = None
    address: str | None = None
    location: str | None = None
    industry: str | None = None
    timezone: str | None = None
    average_rating: float = 0
    review_count: int = 0
    slug: str


class AdminBusinessSummary(BusinessSummary):
    status: BusinessStatus


class BusinessListResponse(CamelModel):
    businesses: List[BusinessSummary]
    pagination: Pagination


class AdminBusinessListResponse(CamelModel):
    businesses: List[AdminBusinessSummary]
    pagination: Pagination


class PublicReview(CamelModel):
    id: int
    rating: int
    review_text: str
    reviewer_name: str
    created_at: datetime | None = None


class BusinessDetailResponse(CamelModel):
    business: BusinessSummary
    reviews: List[PublicReview]


class BusinessActionRequest(CamelModel):
    business_id: int | None = None
    action: str | None = None


class BusinessDeleteRequest(CamelModel):
    business_id: int | None = None
