from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..config import AppSettings, get_settings
from ..protocol import CalDavClient, HttpCalDavClient
from .handler import CalDavRequestHandler


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root for services to share settings, the CalDAV client and the handler."""

    settings: AppSettings = field(default_factory=get_settings)
    handler: CalDavRequestHandler = field(init=False)
    _client: Optional[CalDavClient] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.handler = CalDavRequestHandler(
            default_timeout_ms=self.settings.requests.timeout_ms,
            cache_ttl_seconds=self.settings.requests.discovery_ttl_seconds,
        )

    def client(self) -> CalDavClient:
        if self._client is None:
            self._client = HttpCalDavClient.from_settings(
                self.settings.caldav,
                timeout=self.settings.requests.http_timeout_seconds,
            )
        return self._client

    def set_client(self, client: CalDavClient) -> None:
        self._client = client
        self.handler.clear_discovery_cache()

    async def aclose(self) -> None:
        client, self._client = self._client, None
        if isinstance(client, HttpCalDavClient):
            await client.aclose()
