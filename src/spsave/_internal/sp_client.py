"""httpx based request client with request-digest handling required by SharePoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from spsave._internal.urls import context_info_url
from spsave.exceptions import MalformedResponseError, RequestError
from spsave.models import RemoteResponse

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "spsave-python"
ODATA_VERBOSE = "application/json;odata=verbose"


class SharePointRequestClient:
    """Authenticated GET/POST capability for the SharePoint REST API.

    Authentication is delegated: pass a ready ``access_token`` (sent as a
    bearer token) or any ``httpx.Auth`` implementation.

    Example:
        async with SharePointRequestClient(access_token=token) as client:
            digest = await client.request_digest("https://contoso.sharepoint.com/sites/dev")
    """

    def __init__(
        self,
        *,
        access_token: str | None = None,
        auth: httpx.Auth | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        default_headers = {"Accept": ODATA_VERBOSE, "User-Agent": DEFAULT_USER_AGENT}
        if access_token:
            default_headers["Authorization"] = f"Bearer {access_token}"
        default_headers.update(headers or {})
        self._client = httpx.AsyncClient(
            headers=default_headers,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> SharePointRequestClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str) -> RemoteResponse:
        response = await self._client.get(url)
        return self._handle(response)

    async def post(
        self,
        url: str,
        *,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> RemoteResponse:
        request_headers = dict(headers or {})
        if body is None:
            response = await self._client.post(url, headers=request_headers)
        elif isinstance(body, (bytes, bytearray)):
            response = await self._client.post(url, content=bytes(body), headers=request_headers)
        else:
            request_headers.setdefault("Content-Type", ODATA_VERBOSE)
            response = await self._client.post(url, json=body, headers=request_headers)
        return self._handle(response)

    async def request_digest(self, site_url: str) -> str:
        """Fetch a form digest from the site's contextinfo endpoint."""
        response = await self.post(context_info_url(site_url))
        body = response.body if isinstance(response.body, dict) else {}
        info = body.get("d", {}).get("GetContextWebInformation", body)
        digest = info.get("FormDigestValue") if isinstance(info, dict) else None
        if not digest:
            raise MalformedResponseError(
                "Failed to obtain request digest from contextinfo", response.body
            )
        return str(digest)

    def _handle(self, response: httpx.Response) -> RemoteResponse:
        body = self._parse_body(response)
        if response.is_error:
            method = response.request.method
            logger.debug(f"{method} {response.request.url} -> {response.status_code}")
            raise RequestError(
                f"{response.status_code} - {response.text}",
                status_code=response.status_code,
                body=body,
                url=str(response.request.url),
                method=method,
            )
        return RemoteResponse(
            status_code=response.status_code,
            body=body,
            headers=dict(response.headers),
        )

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        if "json" in response.headers.get("content-type", ""):
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text
