import asyncio
from typing import Any, Literal

import httpx
import structlog

from .config import NoCloudConfig
from .errors import TransportError

logger = structlog.get_logger("nocloud.transport")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class Transport:
    """Authenticated HTTP access to the NoCloud API with bounded retries.

    Every attempt opens its own client; nothing is pooled or shared between calls.
    """

    def __init__(
        self,
        config: NoCloudConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport


    def client(self) -> httpx.AsyncClient:
        """Create a client with the configured timeouts and transport."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout, read=None),
            transport=self._transport,
        )


    async def send(
        self,
        path: str,
        method: Literal["GET", "POST", "PUT", "PATCH", "DELETE"] = "GET",
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
        content: bytes | None = None,
        retries: int | None = None,
        retry_delay: float | None = None,
    ) -> httpx.Response:
        """Send a request to the NoCloud API and return the raw response.

        The bearer header is injected first so that caller headers can override it.
        Network failures are retried; 429 and 5xx responses are retried only when
        the config enables retry_on_status. The final attempt's response is returned
        as-is, whatever its status.

        Raises:
            TransportError: If the last attempt fails at the network level.
        """
        url = self.config.endpoint_url(path)
        headers = {**self.config.auth_header, **(headers or {})}
        max_retries = self.config.retries if retries is None else retries
        delay = self.config.retry_delay if retry_delay is None else retry_delay

        payload_kwargs = {}
        if json is not None:
            payload_kwargs["json"] = json
        elif content is not None:
            payload_kwargs["content"] = content

        for attempt in range(max_retries + 1):
            try:
                async with self.client() as client:
                    res = await client.request(
                        method,
                        url,
                        headers=headers,
                        params=params,
                        **payload_kwargs,
                    )
            except httpx.TransportError as exc:
                if attempt == max_retries:
                    raise TransportError(f"{method} {url} failed: {exc!r}") from exc
                logger.warning(
                    f"Request failed, retrying in {delay:.1f}s",
                    event_name="retry",
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    error=str(exc),
                )
                await asyncio.sleep(delay)
                continue

            if (
                self.config.retry_on_status
                and res.status_code in RETRYABLE_STATUS_CODES
                and attempt < max_retries
            ):
                logger.warning(
                    f"Request failed, retrying in {delay:.1f}s",
                    event_name="retry",
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    status_code=res.status_code,
                )
                await asyncio.sleep(delay)
                continue

            logger.debug("Request completed.", method=method, path=path, status_code=res.status_code)
            return res
