"""Tests for the httpx request client."""

from __future__ import annotations

import json

import httpx
import pytest

from spsave import MalformedResponseError, RequestError, SharePointRequestClient

SITE = "https://contoso.sharepoint.com/sites/dev"


def make_client(handler, **kwargs) -> SharePointRequestClient:  # type: ignore[no-untyped-def]
    return SharePointRequestClient(transport=httpx.MockTransport(handler), **kwargs)


class TestRequests:
    """Tests for get and post."""

    @pytest.mark.asyncio
    async def test_get_returns_parsed_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"d": {"CheckOutType": 0}})

        async with make_client(handler) as client:
            response = await client.get(f"{SITE}/_api/web")

        assert response.status_code == 200
        assert response.body == {"d": {"CheckOutType": 0}}

    @pytest.mark.asyncio
    async def test_requests_carry_token_and_odata_accept(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        async with make_client(handler, access_token="secret") as client:
            response = await client.get(f"{SITE}/_api/web")

        assert response.body is None
        assert seen[0].headers["Authorization"] == "Bearer secret"
        assert seen[0].headers["Accept"] == "application/json;odata=verbose"

    @pytest.mark.asyncio
    async def test_error_status_raises_request_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": {"code": "-2130246326, SPException"}})

        async with make_client(handler) as client:
            with pytest.raises(RequestError) as exc_info:
                await client.post(f"{SITE}/_api/web/folders", body={"a": 1})

        error = exc_info.value
        assert error.status_code == 500
        assert error.body == {"error": {"code": "-2130246326, SPException"}}
        assert error.method == "POST"
        assert error.url == f"{SITE}/_api/web/folders"

    @pytest.mark.asyncio
    async def test_error_with_text_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="Not Found")

        async with make_client(handler) as client:
            with pytest.raises(RequestError) as exc_info:
                await client.get(f"{SITE}/_api/web")

        assert exc_info.value.status_code == 404
        assert exc_info.value.body == "Not Found"

    @pytest.mark.asyncio
    async def test_post_bytes_are_sent_raw(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async with make_client(handler) as client:
            await client.post(f"{SITE}/upload", body=b"\x00\x01data", headers={"X-RequestDigest": "d"})

        assert seen[0].content == b"\x00\x01data"
        assert seen[0].headers["X-RequestDigest"] == "d"

    @pytest.mark.asyncio
    async def test_post_mapping_is_sent_as_json(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={})

        async with make_client(handler) as client:
            await client.post(f"{SITE}/_api/web/folders", body={"ServerRelativeUrl": "A"})

        assert json.loads(seen[0].content) == {"ServerRelativeUrl": "A"}
        assert seen[0].headers["Content-Type"] == "application/json;odata=verbose"


class TestRequestDigest:
    """Tests for request_digest."""

    @pytest.mark.asyncio
    async def test_verbose_contextinfo(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={"d": {"GetContextWebInformation": {"FormDigestValue": "0x1234"}}}
            )

        async with make_client(handler) as client:
            digest = await client.request_digest(f"{SITE}/")

        assert digest == "0x1234"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == f"{SITE}/_api/contextinfo"

    @pytest.mark.asyncio
    async def test_nometadata_contextinfo(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"FormDigestValue": "0xabcd"})

        async with make_client(handler) as client:
            assert await client.request_digest(SITE) == "0xabcd"

    @pytest.mark.asyncio
    async def test_missing_digest_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"d": {}})

        async with make_client(handler) as client:
            with pytest.raises(MalformedResponseError):
                await client.request_digest(SITE)
