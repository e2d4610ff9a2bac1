"""Folder hierarchy materialization."""

from __future__ import annotations

import asyncio
import logging

from spsave._internal.urls import create_folder_url, get_folder_url, trim_slashes
from spsave.exceptions import RequestError
from spsave.notifications import EventKind, LoggingSink, SaveEvent
from spsave.protocols import NotificationSink, RemoteRequestClient

logger = logging.getLogger(__name__)

# SharePoint Online sometimes answers 500 instead of 404 for a missing folder
MISSING_FOLDER_STATUSES = frozenset({404, 500})


def folder_prefixes(folder: str) -> list[str]:
    """Cumulative prefixes of a folder path: ``a``, ``a/b``, ``a/b/c``."""
    prefixes: list[str] = []
    for segment in trim_slashes(folder).split("/"):
        if not segment:
            continue
        prefixes.append(f"{prefixes[-1]}/{segment}" if prefixes else segment)
    return prefixes


class FolderHierarchyCreator:
    """Ensures every folder of a path exists on the remote site."""

    def __init__(
        self,
        client: RemoteRequestClient,
        site_url: str,
        *,
        sink: NotificationSink | None = None,
    ) -> None:
        self._client = client
        self._site_url = site_url.rstrip("/")
        self._sink = sink or LoggingSink()

    async def ensure_hierarchy(self, folder: str) -> None:
        """Create the missing folders of ``folder``, shallowest first.

        Raises:
            RequestError: If a probe fails for a reason other than the folder
                being missing, or if a create call fails.
        """
        prefixes = folder_prefixes(folder)
        if not prefixes:
            return

        results = await asyncio.gather(
            *(self._client.get(get_folder_url(self._site_url, p)) for p in prefixes),
            return_exceptions=True,
        )

        missing: list[str] = []
        for prefix, result in zip(prefixes, results):
            if not isinstance(result, BaseException):
                continue
            if isinstance(result, RequestError) and result.status_code in MISSING_FOLDER_STATUSES:
                missing.append(prefix)
                continue
            raise result

        if not missing:
            return

        logger.info(f"Creating folder or full folders hierarchy: '{trim_slashes(folder)}'")
        await self._create_folders(missing)

    async def _create_folders(self, folders: list[str]) -> None:
        for folder in folders:
            digest = await self._client.request_digest(self._site_url)
            await self._client.post(
                create_folder_url(self._site_url),
                body={"__metadata": {"type": "SP.Folder"}, "ServerRelativeUrl": folder},
                headers={"X-RequestDigest": digest},
            )
            self._sink.emit(
                SaveEvent(kind=EventKind.FOLDER_CREATED, message=f"Created folder: {folder}")
            )
