"""Pytest configuration and fixtures."""

import json
import re
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_media_store
from app.api.gallery_utils.session_store import SessionStore
from app.api.media_utils.media_store import MediaStore
from app.core.config import Settings, get_settings

ACCESS_CODE = "mariage-2024"
CLOUD_NAME = "demo"

_EQUALITY_TERM = re.compile(r'public_id="((?:[^"\\]|\\.)*)"')


class FakeCloudinary:
    """In-memory stand-in for the Cloudinary search, upload and CDN endpoints."""

    def __init__(self):
        self.resources: list[dict] = []
        self.failing_assets: set[str] = set()
        self.search_down = False
        self.upload_down = False
        self.requests: list[httpx.Request] = []
        self._uploads = 0
        self._epoch = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def add_image(self, public_id: str, tags=("mariage",), minutes: int | None = None):
        if minutes is None:
            minutes = len(self.resources)
        created = self._epoch + timedelta(minutes=minutes)
        self.resources.append(
            {
                "public_id": public_id,
                "secure_url": f"https://res.cloudinary.com/{CLOUD_NAME}/image/upload/v1/{public_id}.jpg",
                "created_at": created.strftime("%Y-%m-%dT%H:%M:%SZ"),
                "tags": list(tags),
            }
        )

    def searches(self) -> list[dict]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.url.path.endswith("/resources/search")
        ]

    def fetches(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "res.cloudinary.com"]

    # --- handlers ---

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "res.cloudinary.com":
            return self._asset(request)
        if request.url.path.endswith("/resources/search"):
            return self._search(json.loads(request.content))
        if request.url.path.endswith("/image/upload"):
            return self._upload(request)
        return httpx.Response(404)

    def _asset(self, request: httpx.Request) -> httpx.Response:
        for resource in self.resources:
            if resource["secure_url"] == str(request.url):
                if resource["public_id"] in self.failing_assets:
                    return httpx.Response(404)
                return httpx.Response(200, content=f"bytes:{resource['public_id']}".encode())
        return httpx.Response(404)

    def _search(self, body: dict) -> httpx.Response:
        if self.search_down:
            return httpx.Response(502, json={"error": {"message": "Bad gateway"}})

        expression = body["expression"]
        max_results = body.get("max_results", 50)

        if "public_id=" in expression:
            wanted = {m.replace('\\"', '"') for m in _EQUALITY_TERM.findall(expression)}
            matches = [r for r in self.resources if r["public_id"] in wanted]
        elif "tags:" in expression:
            tag = expression.split("tags:")[1].strip()
            matches = [r for r in self.resources if tag in r["tags"]]
        else:
            matches = list(self.resources)

        if body.get("sort_by"):
            matches = sorted(matches, key=lambda r: r["created_at"], reverse=True)

        offset = int(body.get("next_cursor") or 0)
        window = matches[offset : offset + max_results]
        result = {
            "total_count": len(matches),
            "time": 3,
            "resources": [
                {k: v for k, v in r.items() if k != "tags"} for r in window
            ],
        }
        if offset + max_results < len(matches):
            result["next_cursor"] = str(offset + max_results)
        return httpx.Response(200, json=result)

    def _upload(self, request: httpx.Request) -> httpx.Response:
        if self.upload_down:
            return httpx.Response(500, json={"error": {"message": "Upload failed"}})
        self._uploads += 1
        public_id = f"wedding/upload-{self._uploads}"
        self.add_image(public_id, minutes=1000 + self._uploads)
        resource = {k: v for k, v in self.resources[-1].items() if k != "tags"}
        return httpx.Response(200, json=resource)


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def access_code():
    return ACCESS_CODE


@pytest.fixture
def settings():
    return Settings(
        cloudinary_cloud_name=CLOUD_NAME,
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
        cloudinary_upload_preset="preset",
        gallery_tag="mariage",
        secret_key="test-secret-key",
        access_code=ACCESS_CODE,
        frontend_url="http://localhost:3000",
    )


@pytest.fixture
def fake_cloudinary():
    return FakeCloudinary()


@pytest.fixture
def media_store(fake_cloudinary):
    return MediaStore(
        cloud_name=CLOUD_NAME,
        api_key="key",
        api_secret="secret",
        upload_preset="preset",
        transport=httpx.MockTransport(fake_cloudinary.handler),
    )


@pytest.fixture
def client(settings, media_store):
    """Test client wired to the fake media host."""
    from main import app

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_media_store] = lambda: media_store
    app.state.session_store = SessionStore(ttl_seconds=settings.session_ttl_seconds)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    del app.state.session_store


@pytest.fixture
def guest_client(client):
    """Client holding an authenticated session cookie."""
    response = client.post("/api/auth/login", json={"code": ACCESS_CODE})
    assert response.status_code == 200
    return client
