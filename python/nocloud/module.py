from typing import Any

import httpx

from .transport import Transport


class SDKModule:
    """Base class for API modules sharing the client's transport."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def _fetch(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self._transport.send(endpoint, **kwargs)
