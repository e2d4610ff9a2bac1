"""Sequential batch saves and the top level ``spsave`` entry point."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from spsave.exceptions import NoFilesError
from spsave.models import CoreOptions, FileUploadSpec, SaveResult
from spsave.notifications import EventKind, LoggingSink, SaveEvent, describe_error
from spsave.protocols import NotificationSink, RemoteRequestClient
from spsave.saver import FileSaver

logger = logging.getLogger(__name__)

NO_FILES_MESSAGE = "No files were uploaded. No files were found which match your criteria."


class BatchCoordinator:
    """Saves files strictly one after another.

    The first failing save stops the batch; files after it are never
    attempted and the failure is raised unchanged.
    """

    def __init__(
        self,
        client: RemoteRequestClient,
        options: CoreOptions,
        *,
        sink: NotificationSink | None = None,
        updated_metadata: set[str] | None = None,
        saver: FileSaver | None = None,
    ) -> None:
        self._options = options
        self._sink = sink or LoggingSink()
        self._saver = saver or FileSaver(
            client, options, sink=self._sink, updated_metadata=updated_metadata
        )

    async def save_all(self, specs: Sequence[FileUploadSpec]) -> list[SaveResult]:
        """Save every spec in order.

        Raises:
            NoFilesError: If ``specs`` is empty
            The first save error, after it has been reported to the sink
        """
        if not specs:
            raise NoFilesError(NO_FILES_MESSAGE)

        try:
            if len(specs) == 1:
                results = [await self._saver.save(specs[0])]
            else:
                results = await self._save_sequentially(specs)
        except Exception as e:
            self._report_error(e)
            raise

        self._notify_success(specs)
        return results

    async def _save_sequentially(self, specs: Sequence[FileUploadSpec]) -> list[SaveResult]:
        results: list[SaveResult] = []
        for index, spec in enumerate(specs):
            logger.debug(f"Saving file {index + 1}/{len(specs)}: {spec.file_name}")
            results.append(await self._saver.save(spec))
        return results

    def _notify_success(self, specs: Sequence[FileUploadSpec]) -> None:
        if not self._options.notification:
            return
        self._sink.emit(
            SaveEvent(
                kind=EventKind.NOTIFICATION,
                title=f"spsave: {len(specs)} file(s) uploaded",
                message="Uploaded:",
                details=tuple(spec.file_name for spec in specs),
            )
        )

    def _report_error(self, error: BaseException) -> None:
        if self._options.notification:
            self._sink.emit(
                SaveEvent(
                    kind=EventKind.NOTIFICATION,
                    title="spsave: error occured",
                    message="For details see console log",
                    error=error,
                )
            )
        self._sink.emit(describe_error(error))


async def spsave(
    client: RemoteRequestClient,
    options: CoreOptions,
    files: FileUploadSpec | Sequence[FileUploadSpec],
    *,
    sink: NotificationSink | None = None,
    updated_metadata: set[str] | None = None,
) -> list[SaveResult]:
    """Upload one or more files.

    Example:
        async with SharePointRequestClient(access_token=token) as client:
            await spsave(client, CoreOptions(site_url=url), FileUploadSpec("Docs", "a.txt", b"hi"))
    """
    specs = [files] if isinstance(files, FileUploadSpec) else list(files)
    coordinator = BatchCoordinator(client, options, sink=sink, updated_metadata=updated_metadata)
    return await coordinator.save_all(specs)
