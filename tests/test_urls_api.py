import re

from fastapi.testclient import TestClient

from main import app
from shortlink_app.dependencies import get_link_enricher
from shortlink_app.enrichment.strategies import NullLinkEnricher
from shortlink_app.models import ClickEvent, ShortLink


class TitleEnricher(NullLinkEnricher):
    def fetch_title(self, url):
        return "Fetched Title"


class TestCreateUrl:
    """Test POST /api/v1/urls/"""

    def test_create_short_url(self, client: TestClient, auth_headers):
        url_data = {"original_url": "https://www.google.com/"}

        response = client.post("/api/v1/urls/", json=url_data, headers=auth_headers)
        assert response.status_code == 201

        data = response.json()
        assert re.match(r"^[A-Za-z0-9]{6}$", data["short_code"])
        assert data["short_url"].endswith(f"/{data['short_code']}")
        assert data["original_url"] == url_data["original_url"]
        assert data["click_count"] == 0
        assert data["is_active"] is True
        assert data["title"] is None

    def test_same_target_gets_distinct_codes(self, client: TestClient, auth_headers):
        url_data = {"original_url": "https://www.test.com/"}

        first = client.post("/api/v1/urls/", json=url_data, headers=auth_headers).json()
        second = client.post("/api/v1/urls/", json=url_data, headers=auth_headers).json()

        assert first["short_code"] != second["short_code"]

    def test_custom_code(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/v1/urls/",
            json={"original_url": "https://www.python.org/", "custom_code": "py2025", "title": "Python"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["short_code"] == "py2025"
        assert response.json()["title"] == "Python"

    def test_duplicate_custom_code_is_rejected(self, client: TestClient, db_session, auth_headers):
        payload = {"original_url": "https://www.python.org/", "custom_code": "dupe01"}
        client.post("/api/v1/urls/", json=payload, headers=auth_headers)

        response = client.post("/api/v1/urls/", json=payload, headers=auth_headers)

        assert response.status_code == 422
        assert db_session.query(ShortLink).count() == 1

    def test_reserved_custom_code_is_rejected(self, client: TestClient, db_session, auth_headers):
        response = client.post(
            "/api/v1/urls/",
            json={"original_url": "https://www.python.org/", "custom_code": "health"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert db_session.query(ShortLink).count() == 0

    def test_malformed_custom_code(self, client: TestClient, auth_headers):
        for code in ["ab", "no-dashes", "x" * 21]:
            response = client.post(
                "/api/v1/urls/",
                json={"original_url": "https://www.python.org/", "custom_code": code},
                headers=auth_headers,
            )
            assert response.status_code == 422

    def test_invalid_url(self, client: TestClient, auth_headers):
        response = client.post("/api/v1/urls/", json={"original_url": "not-a-valid-url"}, headers=auth_headers)
        assert response.status_code == 422

    def test_oversized_url(self, client: TestClient, auth_headers):
        long_url = "https://example.com/" + "a" * 2100
        response = client.post("/api/v1/urls/", json={"original_url": long_url}, headers=auth_headers)
        assert response.status_code == 422

    def test_past_expiry_is_rejected(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/v1/urls/",
            json={"original_url": "https://example.com/", "expires_at": "2000-01-01T00:00:00Z"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_title_is_fetched_when_missing(self, client: TestClient, auth_headers):
        app.dependency_overrides[get_link_enricher] = lambda: TitleEnricher()

        untitled = client.post("/api/v1/urls/", json={"original_url": "https://example.com/"}, headers=auth_headers)
        titled = client.post(
            "/api/v1/urls/",
            json={"original_url": "https://example.com/", "title": "Mine"},
            headers=auth_headers,
        )

        assert untitled.json()["title"] == "Fetched Title"
        assert titled.json()["title"] == "Mine"

    def test_requires_token(self, client: TestClient):
        response = client.post("/api/v1/urls/", json={"original_url": "https://example.com/"})
        assert response.status_code == 401

    def test_rejects_unknown_token(self, client: TestClient):
        response = client.post(
            "/api/v1/urls/",
            json={"original_url": "https://example.com/"},
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401


class TestListUrls:

    def test_lists_own_links_newest_first(self, client: TestClient, auth_headers, make_user, make_link):
        other, _ = make_user(email="other@example.com")
        make_link(other, short_code="theirs")
        for code in ["first1", "second"]:
            client.post(
                "/api/v1/urls/",
                json={"original_url": "https://example.com/", "custom_code": code},
                headers=auth_headers,
            )
        client.get("/second", follow_redirects=False)

        response = client.get("/api/v1/urls/", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert [item["short_code"] for item in data] == ["second", "first1"]
        assert data[0]["clicks_count"] == 1
        assert data[0]["click_count"] == 1
        assert data[1]["clicks_count"] == 0


class TestUrlStats:

    def test_stats(self, client: TestClient, auth_headers, user, make_link):
        link = make_link(user, short_code="stats1")
        client.get("/stats1", follow_redirects=False, headers={
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0) Chrome/120.0",
            "Referer": "https://twitter.com/",
        })
        client.get("/stats1", follow_redirects=False, headers={
            "User-Agent": "Mozilla/5.0 (iPhone) Mobile",
            "Referer": "https://twitter.com/",
        })

        response = client.get(f"/api/v1/urls/{link.id}/stats", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["url"]["short_code"] == "stats1"
        assert data["url"]["click_count"] == 2
        assert sum(point["count"] for point in data["clicks_over_time"]) == 2
        assert len(data["recent_clicks"]) == 2
        assert data["clicks_by_device"] == {"desktop": 1, "mobile": 1}
        assert data["clicks_by_country"] == {"unknown": 2}
        assert data["top_referers"] == [{"referer": "https://twitter.com/", "count": 2}]

    def test_stats_of_unknown_link(self, client: TestClient, auth_headers):
        response = client.get("/api/v1/urls/9999/stats", headers=auth_headers)
        assert response.status_code == 404

    def test_stats_of_someone_elses_link(self, client: TestClient, auth_headers, make_user, make_link):
        other, _ = make_user(email="other@example.com")
        link = make_link(other, short_code="theirs")

        response = client.get(f"/api/v1/urls/{link.id}/stats", headers=auth_headers)

        assert response.status_code == 403


class TestDeleteUrl:

    def test_delete_removes_link_and_clicks(self, client: TestClient, db_session, auth_headers, user, make_link):
        link = make_link(user, short_code="gone12")
        client.get("/gone12", follow_redirects=False)
        client.get("/gone12", follow_redirects=False)
        assert db_session.query(ClickEvent).count() == 2

        response = client.delete(f"/api/v1/urls/{link.id}", headers=auth_headers)

        assert response.status_code == 204
        assert db_session.query(ShortLink).count() == 0
        assert db_session.query(ClickEvent).count() == 0
        assert client.get("/gone12", follow_redirects=False).status_code == 404

    def test_cannot_delete_someone_elses_link(self, client: TestClient, db_session, auth_headers, make_user, make_link):
        other, _ = make_user(email="other@example.com")
        link = make_link(other, short_code="theirs")

        response = client.delete(f"/api/v1/urls/{link.id}", headers=auth_headers)

        assert response.status_code == 403
        assert db_session.query(ShortLink).count() == 1

    def test_delete_unknown_link(self, client: TestClient, auth_headers):
        assert client.delete("/api/v1/urls/9999", headers=auth_headers).status_code == 404
