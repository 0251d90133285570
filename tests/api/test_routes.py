import httpx
import pytest
from fastapi.testclient import TestClient

from merchai.main import create_app
from merchai.services.studio import build_studio

from tests.conftest import RecordingDocumentStore

LOGO = "data:image/png;base64," + "iVBORw0KGgo" * 20
SESSION = {
    "user_id": "user123",
    "email": "test@example.com",
    "name": "Test User",
    "provider": "google",
    "access_token": "access-abc",
    "refresh_token": "refresh-abc",
    "expires_in": 3600,
}
AUTH = {"Authorization": "Bearer access-abc"}


class FakeGemini:
    """Stands in for the generateContent endpoint."""

    def __init__(self):
        self.status_code = 200
        self.body = {
            "candidates": [
                {"content": {"parts": [{"inlineData": {"data": "TU9DS1VQ"}}]}}
            ]
        }
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def store():
    return RecordingDocumentStore()


@pytest.fixture
def client(gemini, store):
    studio = build_studio(
        document_store=store,
        gemini_api_key="test-key",
        gemini_transport=httpx.MockTransport(gemini),
    )
    with TestClient(create_app(studio)) as test_client:
        yield test_client


@pytest.fixture
def signed_in_client(client):
    response = client.post("/api/v1/auth/session", json=SESSION)
    assert response.status_code == 200
    return client


def _generate(client, product_id="tshirt", logo=LOGO):
    return client.post(
        "/api/v1/mockups",
        json={"logo": logo, "product_id": product_id},
        headers=AUTH,
    )


class TestPublicEndpoints:
    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_products(self, client):
        response = client.get("/api/v1/products")

        assert response.status_code == 200
        ids = [product["id"] for product in response.json()]
        assert ids == ["tshirt", "hoodie", "cap", "tote", "mug", "iphone"]


class TestSession:
    def test_start_session_records_login(self, client, store):
        response = client.post("/api/v1/auth/session", json=SESSION)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["onboarding_required"] is True
        assert [collection for collection, _ in store.inserted] == ["logins"]
        assert store.inserted[0][1]["email"] == "test@example.com"

    def test_invalid_provider_rejected(self, client):
        response = client.post(
            "/api/v1/auth/session", json={**SESSION, "provider": "facebook"}
        )

        assert response.status_code == 422

    def test_me(self, signed_in_client):
        response = signed_in_client.get("/api/v1/auth/me", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "user_id": "user123",
            "token_expired": False,
        }

    @pytest.mark.parametrize(
        "headers,detail",
        [
            ({}, "Authorization header required"),
            ({"Authorization": "Token access-abc"}, "Invalid authorization header format"),
            ({"Authorization": "Bearer wrong"}, "Invalid or expired token"),
        ],
    )
    def test_me_requires_matching_token(self, signed_in_client, headers, detail):
        response = signed_in_client.get("/api/v1/auth/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["detail"] == detail

    def test_logout(self, signed_in_client):
        assert signed_in_client.delete("/api/v1/auth/session", headers=AUTH).status_code == 200

        assert signed_in_client.get("/api/v1/auth/me", headers=AUTH).status_code == 401

    def test_onboarding_pro(self, signed_in_client, store):
        response = signed_in_client.post(
            "/api/v1/auth/onboarding", json={"selected_plan": "pro"}, headers=AUTH
        )

        assert response.status_code == 200
        assert "Pro" in response.json()["message"]
        collection, document = store.inserted[-1]
        assert collection == "onboarding"
        assert document["trial_info"]["started"] is True

        again = signed_in_client.post("/api/v1/auth/session", json=SESSION)
        assert again.json()["onboarding_required"] is False

    def test_onboarding_skipped(self, signed_in_client, store):
        response = signed_in_client.post(
            "/api/v1/auth/onboarding",
            json={"selected_plan": "pro", "skipped": True},
            headers=AUTH,
        )

        assert response.json()["message"] == "Onboarding complete"
        _, document = store.inserted[-1]
        assert document["selected_plan"] == "free"
        assert document["skipped"] is True


class TestMockups:
    def test_requires_auth(self, client):
        response = client.post(
            "/api/v1/mockups", json={"logo": LOGO, "product_id": "tshirt"}
        )

        assert response.status_code == 401

    def test_generate(self, signed_in_client, gemini, store):
        response = _generate(signed_in_client)

        assert response.status_code == 200
        mockup = response.json()["mockup"]
        assert mockup["image_reference"] == "data:image/png;base64,TU9DS1VQ"
        assert mockup["product_id"] == "tshirt"
        assert response.headers["X-RateLimit-Remaining"] == "9"
        assert len(gemini.requests) == 1
        assert store.inserted[-1][0] == "mockup_generations"

    def test_unknown_product(self, signed_in_client, gemini):
        response = _generate(signed_in_client, product_id="sofa")

        assert response.status_code == 404
        assert gemini.requests == []

    def test_invalid_logo(self, signed_in_client, gemini):
        response = _generate(signed_in_client, logo="data:image/gif;base64," + "A" * 200)

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid logo")
        assert gemini.requests == []

    def test_generation_rate_limited(self, signed_in_client, gemini):
        for _ in range(10):
            assert _generate(signed_in_client).status_code == 200

        response = _generate(signed_in_client)

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) >= 1
        assert len(gemini.requests) == 10

    def test_quota_error(self, signed_in_client, gemini):
        gemini.status_code = 429
        gemini.body = {"error": {"message": "Quota exceeded for this project"}}

        response = _generate(signed_in_client)

        assert response.status_code == 429
        assert "quota exceeded" in response.json()["detail"].lower()

    def test_no_image_exposes_raw_response(self, signed_in_client, gemini):
        gemini.body = {"candidates": [{"content": {"parts": [{"text": "nope"}]}}]}

        response = _generate(signed_in_client)

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["message"] == "No image in generate response"
        assert '"nope"' in detail["raw_response"]

    def test_edit_and_list(self, signed_in_client, store):
        mockup_id = _generate(signed_in_client).json()["mockup"]["id"]

        response = signed_in_client.post(
            f"/api/v1/mockups/{mockup_id}/edit",
            json={"prompt": "Make the logo smaller"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert store.inserted[-1][0] == "mockup_edits"

        listing = signed_in_client.get("/api/v1/mockups", headers=AUTH).json()
        assert [m["id"] for m in listing["results"]] == [mockup_id]

    def test_edit_rejects_long_prompt(self, signed_in_client):
        mockup_id = _generate(signed_in_client).json()["mockup"]["id"]

        response = signed_in_client.post(
            f"/api/v1/mockups/{mockup_id}/edit",
            json={"prompt": "a" * 501},
            headers=AUTH,
        )

        assert response.status_code == 400

    def test_edit_unknown_mockup(self, signed_in_client):
        response = signed_in_client.post(
            "/api/v1/mockups/missing/edit", json={"prompt": "brighter"}, headers=AUTH
        )

        assert response.status_code == 404

    def test_export(self, signed_in_client, store):
        mockup_id = _generate(signed_in_client).json()["mockup"]["id"]

        response = signed_in_client.post(
            f"/api/v1/mockups/{mockup_id}/export",
            json={"export_path": "/photos/mockup.png"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["recorded"] is True
        assert store.inserted[-1][0] == "mockup_exports"

    def test_export_unknown_mockup(self, signed_in_client):
        response = signed_in_client.post(
            "/api/v1/mockups/missing/export", json={}, headers=AUTH
        )

        assert response.status_code == 404

    def test_rate_limit_status(self, signed_in_client):
        _generate(signed_in_client)

        response = signed_in_client.get("/api/v1/ratelimit", headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["generation"]["remaining"] == 9
        assert body["generation"]["limit"] == 10
        assert body["edit"]["remaining"] == 20
