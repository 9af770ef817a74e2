"""Live tests against a NoCloud deployment. Set NOCLOUD_API_KEY (and optionally NOCLOUD_API_URL) to run them."""
import os

import pytest
from nocloud import Blob, NoCloud
from nocloud.errors import ControlPlaneError

pytestmark = pytest.mark.skipif(
    not os.getenv("NOCLOUD_API_KEY"),
    reason="NOCLOUD_API_KEY environment variable is required for live tests.",
)


@pytest.fixture
def live_cloud() -> NoCloud:
    return NoCloud()


@pytest.mark.asyncio
async def test_live_generate_signed_url(live_cloud: NoCloud) -> None:
    res = await live_cloud.storage.generate_signed_url("image/png", 1024, {"test": True})

    assert res.url
    assert res.media_id
    assert res.media_url


@pytest.mark.asyncio
async def test_live_upload_and_delete(live_cloud: NoCloud) -> None:
    res = await live_cloud.storage.upload(Blob("File to delete", type="text/plain"))
    assert res.id
    assert res.url

    await live_cloud.storage.delete(res.id)


@pytest.mark.asyncio
async def test_live_upload_base64_image(live_cloud: NoCloud) -> None:
    data_url = (
        "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIAX8jx0gAAAABJRU5ErkJggg=="
    )
    res = await live_cloud.storage.upload(data_url)

    await live_cloud.storage.delete([res.id])


@pytest.mark.asyncio
async def test_live_upload_stream(live_cloud: NoCloud) -> None:
    encoded = "Stream content for upload".encode()

    async def stream():
        yield encoded

    res = await live_cloud.storage.upload_stream(stream(), "text/plain", len(encoded))

    await live_cloud.storage.delete(res.id)


@pytest.mark.asyncio
async def test_live_delete_missing(live_cloud: NoCloud) -> None:
    with pytest.raises(ControlPlaneError):
        await live_cloud.storage.delete("non-existent-media-id")
