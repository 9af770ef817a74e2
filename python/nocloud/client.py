from collections.abc import Mapping
from functools import cached_property
from typing import Any

import httpx

from .config import NoCloudConfig
from .config_loader import resolve_config
from .storage import Storage
from .transport import Transport


class NoCloud:
    """Main entry point for interacting with NoCloud services.

    Examples:
        >>> cloud = NoCloud("your-api-key")
        >>> cloud = NoCloud({"api_key": "your-api-key", "retries": 5, "retry_delay": 2.0})
        >>> res = await cloud.storage.upload(b"...")

    Fields not given explicitly are read from the NOCLOUD_* environment variables and
    from the ~/.nocloud/ config files.
    """

    def __init__(
        self,
        options: str | NoCloudConfig | Mapping[str, Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = resolve_config(options)
        self._transport = Transport(self.config, transport=transport)

    def __repr__(self) -> str:
        return f"NoCloud(base_url={self.config.base_url!r})"

    @cached_property
    def storage(self) -> Storage:
        """Storage module for handling file storage operations."""
        return Storage(self._transport)
