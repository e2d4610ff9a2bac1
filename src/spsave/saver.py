"""Single file save: folders, checkout, upload with conflict retry, checkin, metadata."""

from __future__ import annotations

import logging
from typing import Any

from spsave._internal.urls import (
    checkin_file_url,
    checkout_file_url,
    file_server_relative_url,
    get_file_url,
    list_item_fields_url,
    trim_slashes,
    upload_file_url,
)
from spsave.errors import FILE_NOT_FOUND_ON_WRITE, ErrorKind, classify, parse_error_code
from spsave.exceptions import FileCheckedOutError, MalformedResponseError, RequestError
from spsave.folders import FolderHierarchyCreator
from spsave.models import (
    CheckoutState,
    CoreOptions,
    FileUploadSpec,
    LockPolicy,
    RemoteResponse,
    SaveResult,
    SaveSession,
    SaveState,
)
from spsave.notifications import EventKind, LoggingSink, SaveEvent
from spsave.protocols import NotificationSink, RemoteRequestClient

logger = logging.getLogger(__name__)

# The first attempt plus exactly one retry
MAX_UPLOAD_ATTEMPTS = 2

# Other values, including the 2 some servers report for a free file, mean another user
CHECKOUT_TYPE_NONE = 0
CHECKOUT_TYPE_CURRENT_USER = 1


class FileSaver:
    """Saves files to a site one at a time.

    ``updated_metadata`` is the set of file names whose metadata was already
    patched. Pass the same set to several savers (or keep one saver alive) to
    patch each file's metadata only once.

    Example:
        saver = FileSaver(client, CoreOptions(site_url="https://contoso.sharepoint.com/sites/dev"))
        result = await saver.save(FileUploadSpec("Shared Documents", "a.txt", b"hello"))
    """

    def __init__(
        self,
        client: RemoteRequestClient,
        options: CoreOptions,
        *,
        sink: NotificationSink | None = None,
        updated_metadata: set[str] | None = None,
        folders: FolderHierarchyCreator | None = None,
    ) -> None:
        self._client = client
        self._options = options
        self._site_url = options.site_url
        self._sink = sink or LoggingSink()
        self.updated_metadata = updated_metadata if updated_metadata is not None else set()
        self._folders = folders or FolderHierarchyCreator(client, options.site_url, sink=self._sink)

    async def save(self, spec: FileUploadSpec) -> SaveResult:
        """Save one file.

        Returns:
            SaveResult carrying the upload response

        Raises:
            The first error hit by any step, unchanged.
        """
        session = SaveSession(spec=spec)
        folder = trim_slashes(spec.folder)

        if spec.is_empty:
            self._emit(EventKind.FILE_SKIPPED, f"Content of {spec.file_name} is empty, skipping", spec)
            return SaveResult(success=True, file_name=spec.file_name, folder=folder, skipped=True)

        file_url = file_server_relative_url(folder, spec.file_name)
        try:
            session.state = SaveState.FOLDERS_ENSURING
            await self._folders.ensure_hierarchy(folder)

            if self._options.checkin:
                session.state = SaveState.CHECKOUT_CHECK
                await self._checkout(session, file_url)

            session.state = SaveState.UPLOADING
            response = await self._upload(session)

            if self._options.checkin and session.checkout_state is not CheckoutState.CHECKED_OUT_BY_OTHER:
                session.state = SaveState.CHECKING_IN
                await self._checkin(session, file_url)

            metadata = self._pending_metadata(spec)
            if metadata is not None:
                session.state = SaveState.METADATA_PATCHING
                await self._update_metadata(session, file_url, metadata)
        except Exception as e:
            session.state = SaveState.FAILED
            session.last_error = e
            logger.debug(f"Save of {file_url} failed after {session.attempts} upload attempt(s)")
            raise

        session.state = SaveState.DONE
        return SaveResult(success=True, file_name=spec.file_name, folder=folder, response=response)

    async def _checkout(self, session: SaveSession, file_url: str) -> None:
        try:
            response = await self._client.get(get_file_url(self._site_url, file_url))
        except RequestError as e:
            if classify(e) is not ErrorKind.RESOURCE_NOT_FOUND:
                raise
            # New file, nothing to check out
            session.checkout_state = CheckoutState.FILE_NOT_FOUND
            logger.debug(f"{file_url} does not exist yet, uploading without checkout")
            return

        checkout_type = _checkout_type(response.body)
        if checkout_type == CHECKOUT_TYPE_CURRENT_USER:
            session.checkout_state = CheckoutState.CHECKED_OUT_BY_SELF
            logger.debug(f"{file_url} is already checked out by the current user")
            return

        if checkout_type == CHECKOUT_TYPE_NONE:
            session.checkout_state = CheckoutState.NOT_CHECKED_OUT
            digest = await self._client.request_digest(self._site_url)
            await self._client.post(
                checkout_file_url(self._site_url, file_url),
                headers={"X-RequestDigest": digest},
            )
            self._emit(EventKind.FILE_CHECKED_OUT, f"Checked out file {file_url}", session.spec)
            return

        session.checkout_state = CheckoutState.CHECKED_OUT_BY_OTHER
        if self._options.lock_policy is LockPolicy.FAIL:
            raise FileCheckedOutError(f"File {file_url} is checked out by another user", file_url)
        logger.warning(f"{file_url} is checked out by another user, uploading anyway")

    async def _upload(self, session: SaveSession) -> RemoteResponse:
        spec = session.spec
        url = upload_file_url(self._site_url, spec.folder, spec.file_name)
        while True:
            session.attempts += 1
            digest = await self._client.request_digest(self._site_url)
            try:
                response = await self._client.post(
                    url, body=spec.payload, headers={"X-RequestDigest": digest}
                )
            except RequestError as e:
                session.last_error = e
                if session.attempts >= MAX_UPLOAD_ATTEMPTS or not _should_retry(session, e):
                    raise
                logger.warning(
                    f"Upload of {spec.file_name} failed with code {parse_error_code(e)}, retrying"
                )
                continue

            folder = trim_slashes(spec.folder)
            self._emit(EventKind.FILE_UPLOADED, f"File {spec.file_name} uploaded to {folder}", spec)
            return response

    async def _checkin(self, session: SaveSession, file_url: str) -> None:
        digest = await self._client.request_digest(self._site_url)
        await self._client.post(
            checkin_file_url(
                self._site_url,
                file_url,
                self._options.checkin_message,
                self._options.checkin_type,
            ),
            headers={"X-RequestDigest": digest},
        )
        self._emit(
            EventKind.FILE_CHECKED_IN,
            f"Checked in file {file_url} ({self._options.checkin_type.name.lower()})",
            session.spec,
        )

    def _pending_metadata(self, spec: FileUploadSpec) -> dict[str, Any] | None:
        if spec.file_name in self.updated_metadata:
            return None
        if spec.metadata is not None:
            return spec.metadata
        return self._options.metadata_for(spec.file_name)

    async def _update_metadata(
        self, session: SaveSession, file_url: str, metadata: dict[str, Any]
    ) -> None:
        digest = await self._client.request_digest(self._site_url)
        await self._client.post(
            list_item_fields_url(self._site_url, file_url),
            body=metadata,
            headers={
                "X-RequestDigest": digest,
                "IF-MATCH": "*",
                "X-HTTP-Method": "MERGE",
            },
        )
        self.updated_metadata.add(session.spec.file_name)
        self._emit(EventKind.METADATA_UPDATED, f"Updated metadata of {file_url}", session.spec)

    def _emit(self, kind: EventKind, message: str, spec: FileUploadSpec) -> None:
        self._sink.emit(SaveEvent(kind=kind, message=message, file_name=spec.file_name))


def _should_retry(session: SaveSession, error: RequestError) -> bool:
    kind = classify(error)
    if kind is ErrorKind.TRANSIENT_WRITE_CONFLICT:
        return True
    if kind is ErrorKind.RESOURCE_NOT_FOUND:
        # Only the write variant of not-found, and only for a new file
        return parse_error_code(error) == FILE_NOT_FOUND_ON_WRITE and not session.file_known_to_exist
    if kind is ErrorKind.MALFORMED_RESPONSE:
        logger.warning(f"Unable to parse remote error payload: {error.body!r}")
    return False


def _checkout_type(body: Any) -> int:
    data = body.get("d", body) if isinstance(body, dict) else None
    if not isinstance(data, dict) or "CheckOutType" not in data:
        raise MalformedResponseError("File response has no CheckOutType", body)
    try:
        return int(data["CheckOutType"])
    except (TypeError, ValueError):
        raise MalformedResponseError("File response has an invalid CheckOutType", body) from None
