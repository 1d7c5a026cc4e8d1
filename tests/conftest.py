"""
Pytest Configuration and Shared Fixtures.

Every test gets its own in-memory SQLite database behind a real
FastAPI app, so no external services are needed.

- client: TestClient with the app lifespan running
- make_user / make_business / make_review: insert rows directly
- auth_headers: bearer token headers for a user id
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient

from trustedbiz.core.hashing import hash_password
from trustedbiz.core.jwt import create_access_token
from trustedbiz.database import Database
from trustedbiz.main import create_app
from trustedbiz.models.business import Business, BusinessStatus
from trustedbiz.models.review import Review, ReviewStatus
from trustedbiz.models.users import User

DEFAULT_PASSWORD = "s3cure-enough"


@pytest.fixture
def app():
    """App wired to a fresh in-memory database."""
    return create_app(database=Database("sqlite://"))


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def database(app, client):
    """The connected Database behind the running app."""
    return app.state.database


@pytest.fixture
def make_user(database):
    def _make_user(
        email: str = "user@example.com",
        password: str = DEFAULT_PASSWORD,
        is_admin: bool = False,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> int:
        db = database.session()
        try:
            user = User(
                email=email,
                password_hash=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                is_admin=is_admin,
            )
            db.add(user)
            db.commit()
            return user.id
        finally:
            db.close()

    return _make_user


@pytest.fixture
def make_business(database):
    def _make_business(
        name: str = "Forte Enterprises",
        location: str | None = "Austin, TX",
        industry: str | None = "Plumbing",
        address: str | None = "100 Congress Ave",
        status: BusinessStatus = BusinessStatus.ACTIVE,
        phone: str | None = None,
    ) -> int:
        db = database.session()
        try:
            business = Business(
                name=name,
                location=location,
                industry=industry,
                address=address,
                status=status,
                phone=phone,
            )
            db.add(business)
            db.commit()
            return business.id
        finally:
            db.close()

    return _make_business


@pytest.fixture
def make_review(database):
    def _make_review(
        business_id: int,
        rating: int = 4,
        review_text: str = "Solid work, fair price.",
        status: ReviewStatus = ReviewStatus.PENDING,
        reviewer_name: str | None = "Jordan",
        reviewer_email: str | None = "jordan@example.com",
        user_id: int | None = None,
        is_anonymous: bool = False,
    ) -> int:
        db = database.session()
        try:
            review = Review(
                business_id=business_id,
                user_id=user_id,
                rating=rating,
                review_text=review_text,
                reviewer_name=reviewer_name,
                reviewer_email=reviewer_email,
                is_anonymous=is_anonymous,
                status=status,
            )
            db.add(review)
            db.commit()
            return review.id
        finally:
            db.close()

    return _make_review


@pytest.fixture
def fetch(database):
    """Load a row in a fresh session; returns None if it is gone."""

    def _fetch(model, row_id):
        db = database.session()
        try:
            return db.get(model, row_id)
        finally:
            db.close()

    return _fetch


@pytest.fixture
def auth_headers():
    def _auth_headers(user_id: int) -> dict:
        token = create_access_token({"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def admin_headers(make_user, auth_headers):
    admin_id = make_user(email="admin@example.com", is_admin=True, first_name="Avery", last_name="Admin")
    return auth_headers(admin_id)


@pytest.fixture
def user_headers(make_user, auth_headers):
    user_id = make_user(email="member@example.com", first_name="Morgan", last_name="Lee")
    return auth_headers(user_id)
