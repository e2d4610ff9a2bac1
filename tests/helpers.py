"""Shared test helpers for spsave tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

from spsave import RemoteResponse, RequestError

SITE_URL = "http://sp.url"


def make_request_error(
    status_code: int = 500,
    code: str | None = None,
    body: Any = None,
) -> RequestError:
    """Build the error a request client raises for an HTTP failure."""
    if code is not None and body is None:
        body = {
            "error": {
                "code": f"{code}, Microsoft.SharePoint.SPException",
                "message": {"lang": "en-US", "value": "remote failure"},
            }
        }
    return RequestError(f"{status_code} - {body}", status_code=status_code, body=body)


class FakeSPRequest:
    """Request client fake with per-URL scripted results.

    Results registered for a URL are consumed in order; the last one is
    repeated. Unregistered URLs answer 200 with an empty JSON object.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], list[Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self.get = AsyncMock(side_effect=self._get)
        self.post = AsyncMock(side_effect=self._post)
        self.request_digest = AsyncMock(return_value="digest")

    def on_get(self, url: str, *results: Any) -> None:
        self._routes[("GET", url)] = list(results)

    def on_post(self, url: str, *results: Any) -> None:
        self._routes[("POST", url)] = list(results)

    def post_urls(self) -> list[str]:
        return [url for method, url in self.calls if method == "POST"]

    def post_count(self, url: str) -> int:
        return self.post_urls().count(url)

    async def _get(self, url: str) -> RemoteResponse:
        return self._respond("GET", url)

    async def _post(
        self,
        url: str,
        *,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> RemoteResponse:
        return self._respond("POST", url)

    def _respond(self, method: str, url: str) -> RemoteResponse:
        self.calls.append((method, url))
        results = self._routes.get((method, url))
        if not results:
            return RemoteResponse(status_code=200, body={})
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, BaseException):
            raise result
        return result


def checkout_status(checkout_type: int) -> RemoteResponse:
    return RemoteResponse(status_code=200, body={"d": {"CheckOutType": checkout_type}})


FILE_URL = "%2FAssets%2Ffile.txt"
UPLOAD_URL = (
    f"{SITE_URL}/_api/web/GetFolderByServerRelativeUrl(@FolderName)"
    "/Files/add(url=@FileName,overwrite=true)?@FolderName='Assets'&@FileName='file.txt'"
)
GET_FILE_URL = f"{SITE_URL}/_api/web/GetFileByServerRelativeUrl(@FileUrl)?@FileUrl='{FILE_URL}'"
CHECKOUT_URL = (
    f"{SITE_URL}/_api/web/GetFileByServerRelativeUrl(@FileUrl)/CheckOut()?@FileUrl='{FILE_URL}'"
)
CHECKIN_URL = (
    f"{SITE_URL}/_api/web/GetFileByServerRelativeUrl(@FileUrl)"
    f"/CheckIn(comment=@Comment,checkintype=@Type)?@FileUrl='{FILE_URL}'"
    "&@Comment='spsave'&@Type='0'"
)
METADATA_URL = (
    f"{SITE_URL}/_api/web/GetFileByServerRelativeUrl(@FileUrl)/ListItemAllFields"
    f"?@FileUrl='{FILE_URL}'"
)
GET_ASSETS_FOLDER_URL = (
    f"{SITE_URL}/_api/web/GetFolderByServerRelativeUrl(@FolderName)?@FolderName='Assets'"
)
CREATE_FOLDER_URL = f"{SITE_URL}/_api/web/folders"
