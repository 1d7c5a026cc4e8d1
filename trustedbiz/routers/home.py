# trustedbiz/routers/home.py

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from trustedbiz.database import get_db
from trustedbiz.core.location import UNCLASSIFIED, classify_state
from trustedbiz.models.business import Business
from trustedbiz.models.review import Review, ReviewStatus
from trustedbiz.models.users import User

router = APIRouter(prefix="/api/home", tags=["Home"])

logger = logging.getLogger("trustedbiz")

TOP_CATEGORIES = 8

EMPTY_HOME_DATA = {
    "topCategories": [],
    "stats": {
        "totalBusinesses": 0,
        "totalUsers": 0,
        "totalReviews": 0,
        "uniqueStates": 0,
    },
}


def _home_data(db: Session) -> dict:
    business_count = func.count(Business.id).label("business_count")

    categories = (
        db.query(Business.industry, business_count)
        .filter(Business.industry.isnot(None), Business.industry != "")
        .group_by(Business.industry)
        .order_by(business_count.desc(), Business.industry.asc())
        .limit(TOP_CATEGORIES)
        .all()
    )

    locations = (
        db.query(Business.location)
        .filter(Business.location.isnot(None), Business.location != "")
        .distinct()
        .all()
    )
    states = {classify_state(location) for (location,) in locations} - {UNCLASSIFIED}

    return {
        "topCategories": [
            {"name": industry, "count": count}
            for industry, count in categories
        ],
        "stats": {
            "totalBusinesses": db.query(func.count(Business.id)).scalar() or 0,
            "totalUsers": db.query(func.count(User.id)).scalar() or 0,
            "totalReviews": db.query(func.count(Review.id)).filter(
                Review.status == ReviewStatus.APPROVED
            ).scalar() or 0,
            "uniqueStates": len(states),
        },
    }


@router.get("")
def home(db: Session = Depends(get_db)):
    # The landing page renders zeros rather than an error page
    try:
        home_data = _home_data(db)
    except SQLAlchemyError:
        logger.exception("Home page data fetch failed")
        home_data = EMPTY_HOME_DATA

    return {"homeData": home_data}
