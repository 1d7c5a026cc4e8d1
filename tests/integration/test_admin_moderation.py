"""Integration tests for the admin moderation endpoints."""

import pytest

from trustedbiz.models.business import Business, BusinessStatus
from trustedbiz.models.review import Review, ReviewStatus
from trustedbiz.models.users import User


class TestAdminAccess:

    @pytest.mark.parametrize(
        "method,url",
        [
            ("GET", "/api/admin/stats"),
            ("GET", "/api/admin/activity"),
            ("GET", "/api/admin/analytics"),
            ("GET", "/api/admin/businesses"),
            ("GET", "/api/admin/reviews"),
            ("GET", "/api/admin/users"),
            ("POST", "/api/admin/reviews/action"),
            ("POST", "/api/admin/users/action"),
        ],
    )
    def test_requires_login(self, client, method, url):
        response = client.request(method, url, json={})

        assert response.status_code == 401

    def test_regular_users_are_forbidden(self, client, user_headers):
        response = client.get("/api/admin/stats", headers=user_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden: Admin access required"

    def test_admin_flag_is_read_from_database(self, client, database, make_user, auth_headers):
        user_id = make_user(email="was-admin@example.com", is_admin=True)
        headers = auth_headers(user_id)

        db = database.session()
        try:
            db.get(User, user_id).is_admin = False
            db.commit()
        finally:
            db.close()

        assert client.get("/api/admin/stats", headers=headers).status_code == 403


class TestReviewModeration:

    @pytest.fixture
    def review_id(self, make_business, make_review):
        return make_review(make_business(name="Forte Enterprises"))

    def _act(self, client, headers, review_id, action):
        return client.post(
            "/api/admin/reviews/action",
            json={"reviewId": review_id, "action": action},
            headers=headers,
        )

    def test_approve(self, client, fetch, admin_headers, review_id):
        response = self._act(client, admin_headers, review_id, "approve")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert fetch(Review, review_id).status is ReviewStatus.APPROVED

    def test_last_action_wins(self, client, fetch, admin_headers, review_id):
        self._act(client, admin_headers, review_id, "approve")
        self._act(client, admin_headers, review_id, "reject")

        assert fetch(Review, review_id).status is ReviewStatus.REJECTED

    def test_delete(self, client, fetch, admin_headers, review_id):
        response = self._act(client, admin_headers, review_id, "delete")

        assert response.status_code == 200
        assert fetch(Review, review_id) is None

    def test_invalid_action_leaves_review_alone(self, client, fetch, admin_headers, review_id):
        response = self._act(client, admin_headers, review_id, "publish")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid action"
        assert fetch(Review, review_id).status is ReviewStatus.PENDING

    @pytest.mark.parametrize("body", [{"action": "approve"}, {"reviewId": 1}, {}])
    def test_missing_fields(self, client, admin_headers, body):
        response = client.post("/api/admin/reviews/action", json=body, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Review ID and action are required"

    def test_unknown_review(self, client, admin_headers):
        response = self._act(client, admin_headers, 999999, "approve")

        assert response.status_code == 404

    def test_regular_user_cannot_moderate(self, client, fetch, user_headers, review_id):
        response = self._act(client, user_headers, review_id, "approve")

        assert response.status_code == 403
        assert fetch(Review, review_id).status is ReviewStatus.PENDING


class TestReviewQueue:

    def test_defaults_to_pending(self, client, admin_headers, make_business, make_review):
        business_id = make_business(name="Forte Enterprises")
        pending_id = make_review(business_id, status=ReviewStatus.PENDING)
        make_review(business_id, status=ReviewStatus.APPROVED)

        body = client.get("/api/admin/reviews", headers=admin_headers).json()

        assert [r["id"] for r in body["reviews"]] == [pending_id]
        review = body["reviews"][0]
        assert review["businessName"] == "Forte Enterprises"
        assert review["status"] == "pending"
        assert body["pagination"]["limit"] == 50

    @pytest.mark.parametrize("status_filter,expected", [("all", 3), ("approved", 1), ("rejected", 1)])
    def test_status_filter(self, client, admin_headers, make_business, make_review, status_filter, expected):
        business_id = make_business()
        for review_status in ReviewStatus:
            make_review(business_id, status=review_status)

        body = client.get(
            "/api/admin/reviews",
            params={"status": status_filter},
            headers=admin_headers,
        ).json()

        assert body["pagination"]["totalCount"] == expected


class TestModerationFlow:

    def test_submit_moderate_publish(self, client, admin_headers, make_business):
        business_id = make_business(name="Forte Enterprises")

        submitted = client.post(
            "/api/reviews",
            json={
                "businessId": business_id,
                "rating": 5,
                "reviewText": "Great",
                "reviewerName": "A",
                "reviewerEmail": "a@example.com",
            },
        )
        assert submitted.status_code == 201

        queue = client.get("/api/admin/reviews", headers=admin_headers).json()["reviews"]
        assert len(queue) == 1
        review_id = queue[0]["id"]

        approved = client.post(
            "/api/admin/reviews/action",
            json={"reviewId": review_id, "action": "approve"},
            headers=admin_headers,
        )
        assert approved.status_code == 200

        detail = client.get(f"/api/businesses/{business_id}").json()
        assert detail["business"]["averageRating"] == 5
        assert detail["business"]["reviewCount"] == 1
        assert detail["reviews"][0]["reviewerName"] == "A"

        queue = client.get("/api/admin/reviews", headers=admin_headers).json()["reviews"]
        assert queue == []

        client.post(
            "/api/admin/businesses/action",
            json={"businessId": business_id, "action": "deactivate"},
            headers=admin_headers,
        )

        public = client.get("/api/businesses", params={"status": "active"}).json()
        assert business_id not in [b["id"] for b in public["businesses"]]

        inactive = client.get(
            "/api/admin/businesses",
            params={"status": "inactive"},
            headers=admin_headers,
        ).json()
        assert [b["id"] for b in inactive["businesses"]] == [business_id]


class TestAdminReviewCreate:

    def test_defaults_to_approved_with_admin_name(self, client, fetch, admin_headers, make_business):
        business_id = make_business()

        response = client.post(
            "/api/admin/reviews",
            json={"businessId": business_id, "rating": 4, "reviewText": "Imported from phone survey"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        review = fetch(Review, response.json()["id"])
        assert review.status is ReviewStatus.APPROVED
        assert review.reviewer_name == "Avery Admin"
        assert review.user_id is None

    def test_explicit_status(self, client, fetch, admin_headers, make_business):
        business_id = make_business()

        response = client.post(
            "/api/admin/reviews",
            json={
                "businessId": business_id,
                "rating": 2,
                "reviewText": "Needs a second look",
                "reviewerName": "Kim",
                "status": "pending",
            },
            headers=admin_headers,
        )

        review = fetch(Review, response.json()["id"])
        assert review.status is ReviewStatus.PENDING
        assert review.reviewer_name == "Kim"

    def test_invalid_rating(self, client, admin_headers, make_business):
        response = client.post(
            "/api/admin/reviews",
            json={"businessId": make_business(), "rating": 9, "reviewText": "Too good"},
            headers=admin_headers,
        )

        assert response.status_code == 400


class TestBusinessModeration:

    def _act(self, client, headers, business_id, action):
        return client.post(
            "/api/admin/businesses/action",
            json={"businessId": business_id, "action": action},
            headers=headers,
        )

    def test_deactivate_hides_from_search(self, client, fetch, admin_headers, make_business):
        business_id = make_business(name="Forte Enterprises")

        response = self._act(client, admin_headers, business_id, "deactivate")

        assert response.status_code == 200
        assert response.json()["message"] == "Successfully deactivated Forte Enterprises"
        assert fetch(Business, business_id).status is BusinessStatus.INACTIVE
        assert client.get("/api/businesses").json()["businesses"] == []

    def test_activate(self, client, fetch, admin_headers, make_business):
        business_id = make_business(name="Bloom Florist", status=BusinessStatus.INACTIVE)

        response = self._act(client, admin_headers, business_id, "activate")

        assert response.json()["message"] == "Successfully activated Bloom Florist"
        assert fetch(Business, business_id).status is BusinessStatus.ACTIVE

    def test_invalid_action(self, client, fetch, admin_headers, make_business):
        business_id = make_business()

        response = self._act(client, admin_headers, business_id, "archive")

        assert response.status_code == 400
        assert response.json()["detail"] == 'Invalid action. Use "activate" or "deactivate"'
        assert fetch(Business, business_id).status is BusinessStatus.ACTIVE

    def test_unknown_business(self, client, admin_headers):
        response = self._act(client, admin_headers, 999999, "activate")

        assert response.status_code == 404

    def test_missing_fields(self, client, admin_headers):
        response = client.post(
            "/api/admin/businesses/action",
            json={"action": "activate"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Business ID and action are required"

    def test_delete_cascades_to_reviews(self, client, fetch, admin_headers, make_business, make_review):
        business_id = make_business(name="Forte Enterprises")
        review_id = make_review(business_id, status=ReviewStatus.APPROVED)

        response = client.request(
            "DELETE",
            "/api/admin/businesses/action",
            json={"businessId": business_id},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Successfully deleted Forte Enterprises"
        assert fetch(Business, business_id) is None
        assert fetch(Review, review_id) is None
        assert client.get("/api/businesses").json()["pagination"]["totalCount"] == 0

    def test_delete_requires_id(self, client, admin_headers):
        response = client.request(
            "DELETE",
            "/api/admin/businesses/action",
            json={},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Business ID is required"

    def test_delete_unknown_business(self, client, admin_headers):
        response = client.request(
            "DELETE",
            "/api/admin/businesses/action",
            json={"businessId": 999999},
            headers=admin_headers,
        )

        assert response.status_code == 404


class TestAdminBusinessList:

    @pytest.fixture(autouse=True)
    def businesses(self, make_business):
        make_business(name="Acme Plumbing")
        make_business(name="Closed Cafe", industry="Cafe", status=BusinessStatus.INACTIVE)

    @pytest.mark.parametrize(
        "status_filter,expected",
        [
            ("all", ["Acme Plumbing", "Closed Cafe"]),
            ("active", ["Acme Plumbing"]),
            ("inactive", ["Closed Cafe"]),
            ("bogus", ["Acme Plumbing", "Closed Cafe"]),
        ],
    )
    def test_status_filter(self, client, admin_headers, status_filter, expected):
        body = client.get(
            "/api/admin/businesses",
            params={"status": status_filter},
            headers=admin_headers,
        ).json()

        assert [b["name"] for b in body["businesses"]] == expected

    def test_items_include_status(self, client, admin_headers):
        body = client.get(
            "/api/admin/businesses",
            params={"query": "cafe"},
            headers=admin_headers,
        ).json()

        assert body["businesses"][0]["status"] == "inactive"


class TestUserManagement:

    def _act(self, client, headers, user_id, action):
        return client.post(
            "/api/admin/users/action",
            json={"userId": user_id, "action": action},
            headers=headers,
        )

    @pytest.fixture
    def admin_id(self, make_user):
        return make_user(email="root@example.com", is_admin=True, first_name="Rae")

    @pytest.mark.parametrize("as_string", [False, True])
    def test_cannot_demote_self(self, client, fetch, auth_headers, admin_id, as_string):
        user_id = str(admin_id) if as_string else admin_id

        response = self._act(client, auth_headers(admin_id), user_id, "remove_admin")

        assert response.status_code == 400
        assert response.json()["detail"] == "You cannot remove admin access from your own account"
        assert fetch(User, admin_id).is_admin is True

    def test_make_and_remove_admin(self, client, fetch, auth_headers, admin_id, make_user):
        member_id = make_user(email="someone@example.com")
        headers = auth_headers(admin_id)

        assert self._act(client, headers, member_id, "make_admin").json() == {"success": True}
        assert fetch(User, member_id).is_admin is True

        self._act(client, headers, member_id, "remove_admin")
        assert fetch(User, member_id).is_admin is False

    def test_unknown_user(self, client, auth_headers, admin_id):
        response = self._act(client, auth_headers(admin_id), 999999, "make_admin")

        assert response.status_code == 404

    def test_invalid_action(self, client, auth_headers, admin_id):
        response = self._act(client, auth_headers(admin_id), admin_id, "promote")

        assert response.status_code == 400

    def test_missing_fields(self, client, auth_headers, admin_id):
        response = client.post(
            "/api/admin/users/action",
            json={"action": "make_admin"},
            headers=auth_headers(admin_id),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "User ID and action are required"

    @pytest.mark.parametrize("user_filter,expected", [("all", 2), ("admin", 1), ("regular", 1)])
    def test_list_filter(self, client, auth_headers, admin_id, make_user, user_filter, expected):
        make_user(email="plain@example.com")

        body = client.get(
            "/api/admin/users",
            params={"filter": user_filter},
            headers=auth_headers(admin_id),
        ).json()

        assert body["pagination"]["totalCount"] == expected

    def test_list_names_fall_back_to_unknown(self, client, auth_headers, admin_id, make_user):
        make_user(email="noname@example.com")

        users = client.get(
            "/api/admin/users",
            params={"filter": "regular"},
            headers=auth_headers(admin_id),
        ).json()["users"]

        assert users[0]["name"] == "Unknown"
        assert users[0]["isAdmin"] is False

    def test_create_user(self, client, fetch, auth_headers, admin_id):
        response = client.post(
            "/api/admin/users",
            json={
                "email": "staff@example.com",
                "password": "another-s3cret",
                "firstName": "Sky",
                "isAdmin": True,
            },
            headers=auth_headers(admin_id),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "staff@example.com"
        assert body["isAdmin"] is True
        assert "passwordHash" not in body

    def test_create_duplicate_user(self, client, auth_headers, admin_id):
        response = client.post(
            "/api/admin/users",
            json={"email": "root@example.com", "password": "another-s3cret"},
            headers=auth_headers(admin_id),
        )

        assert response.status_code == 409


class TestDashboard:

    @pytest.fixture(autouse=True)
    def platform(self, make_business, make_review):
        forte = make_business(name="Forte Enterprises", industry="Plumbing")
        make_business(name="Acme Plumbing", industry="Plumbing")
        make_business(name="Bloom Florist", industry="Florist", location="Miami, FL")
        make_review(forte, rating=4, status=ReviewStatus.APPROVED)
        make_review(forte, rating=2, status=ReviewStatus.APPROVED)
        make_review(forte, rating=1, status=ReviewStatus.PENDING, reviewer_name=None)

    def test_stats(self, client, admin_headers):
        stats = client.get("/api/admin/stats", headers=admin_headers).json()["stats"]

        assert stats["totalBusinesses"] == 3
        assert stats["totalUsers"] == 1
        assert stats["totalReviews"] == 3
        assert stats["averageRating"] == 3
        assert stats["pendingReviews"] == 1
        assert stats["reviewsToday"] == 3

    def test_activity(self, client, admin_headers):
        activities = client.get("/api/admin/activity", headers=admin_headers).json()["activities"]

        assert len(activities) == 3
        newest = activities[0]
        assert newest["description"] == "New review submitted for Forte Enterprises"
        assert newest["color"] == "blue"
        assert newest["time"] == "Just now"
        assert newest["details"]["reviewerName"] == "Anonymous"

    def test_analytics(self, client, admin_headers):
        analytics = client.get("/api/admin/analytics", headers=admin_headers).json()["analytics"]

        assert analytics["overview"]["totalBusinesses"] == 3
        assert analytics["topIndustries"] == [
            {"name": "Plumbing", "count": 2},
            {"name": "Florist", "count": 1},
        ]
        # No state has enough listings to qualify
        assert analytics["topLocations"] == []
        assert len(analytics["recentActivity"]) == 3
