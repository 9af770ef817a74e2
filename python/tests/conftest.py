import json
from collections.abc import Callable

import httpx
import pytest
from dotenv import load_dotenv
from nocloud import NoCloud

API_URL = "https://api.nocloud.test"


def pytest_configure(config):
    """Configure pytest with global settings."""
    load_dotenv()


class FakeNoCloud:
    """In-memory NoCloud API and object store, served through an httpx.MockTransport.

    Control-plane requests go to API_URL; every PUT is treated as an object store upload.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.uploads: list[httpx.Request] = []
        self.bulk_deletes: list[list[str]] = []
        self.single_deletes: list[str] = []
        self.signed_url_status = 200
        self.signed_url_body: dict | None = None
        self.put_status = 200
        self.put_text = ""
        self.bulk_statuses: dict[int, int] = {}
        self.missing_ids: set[str] = set()
        self.network_failures = 0
        self.before: Callable[[httpx.Request], httpx.Response | None] | None = None
        self._media_count = 0

    @property
    def control_plane_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == httpx.URL(API_URL).host]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.network_failures > 0:
            self.network_failures -= 1
            raise httpx.ConnectError("Connection refused", request=request)

        if self.before is not None:
            res = self.before(request)
            if res is not None:
                return res

        if request.method == "PUT":
            self.uploads.append(request)
            return httpx.Response(self.put_status, text=self.put_text)

        path = request.url.path
        if request.method == "GET" and path == "/cloud/storage/signed-url":
            if self.signed_url_status != 200:
                return httpx.Response(self.signed_url_status, json={"message": "Signed url rejected"})
            self._media_count += 1
            n = self._media_count
            body = self.signed_url_body or {
                "url": f"https://store.nocloud.test/uploads/m{n}?X-Signature=secret",
                "expiresAt": "2025-01-01T00:00:00Z",
                "mediaId": f"m{n}",
                "mediaUrl": f"https://cdn.nocloud.test/m{n}",
            }
            return httpx.Response(200, json=body)

        if request.method == "DELETE" and path == "/cloud/storage/bulk":
            ids = json.loads(request.content)["ids"]
            index = len(self.bulk_deletes)
            self.bulk_deletes.append(ids)
            status = self.bulk_statuses.get(index, 200)
            if status != 200:
                return httpx.Response(status, json={"message": f"Batch {index} rejected"})
            return httpx.Response(200, json={"deleted": len(ids)})

        if request.method == "DELETE" and path.startswith("/cloud/storage/"):
            media_id = path.rsplit("/", 1)[-1]
            self.single_deletes.append(media_id)
            if media_id in self.missing_ids:
                return httpx.Response(404, json={"message": "Media not found"})
            return httpx.Response(200, json={"success": True})

        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture
def fake() -> FakeNoCloud:
    return FakeNoCloud()


@pytest.fixture
def cloud(fake: FakeNoCloud, monkeypatch: pytest.MonkeyPatch) -> NoCloud:
    for name in ("NOCLOUD_API_KEY", "NOCLOUD_API_URL", "NOCLOUD_BASE_PATH", "NOCLOUD_PROFILE"):
        monkeypatch.delenv(name, raising=False)
    return NoCloud(
        {
            "api_key": "test-key",
            "base_url": API_URL,
            "base_path": "/cloud",
            "retries": 2,
            "retry_delay": 0,
        },
        transport=httpx.MockTransport(fake.handler),
    )
