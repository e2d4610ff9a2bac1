"""Capabilities the save core depends on."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from spsave.models import RemoteResponse
from spsave.notifications import SaveEvent


@runtime_checkable
class RemoteRequestClient(Protocol):
    """Authenticated request capability.

    Implementations raise ``RequestError`` for HTTP error statuses. The core
    never looks past this surface, so any transport can be plugged in.
    """

    async def get(self, url: str) -> RemoteResponse:
        """GET an absolute URL."""
        ...

    async def post(
        self,
        url: str,
        *,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> RemoteResponse:
        """POST to an absolute URL. ``bytes`` bodies are sent raw, others as JSON."""
        ...

    async def request_digest(self, site_url: str) -> str:
        """Fetch a fresh request-validation token for the site."""
        ...


@runtime_checkable
class NotificationSink(Protocol):
    """Receives the structured events emitted while saving."""

    def emit(self, event: SaveEvent) -> None:
        ...
