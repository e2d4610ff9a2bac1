"""Structured save events and the default logging sink."""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    FOLDER_CREATED = "folder_created"
    FILE_CHECKED_OUT = "file_checked_out"
    FILE_UPLOADED = "file_uploaded"
    FILE_CHECKED_IN = "file_checked_in"
    METADATA_UPDATED = "metadata_updated"
    FILE_SKIPPED = "file_skipped"
    SAVE_FAILED = "save_failed"
    NOTIFICATION = "notification"


@dataclass(frozen=True)
class SaveEvent:
    """Something that happened while saving.

    ``details`` holds extra lines (remote body, stack trace) for failures and
    the file names for batch notifications.
    """

    kind: EventKind
    message: str
    file_name: str | None = None
    title: str | None = None
    details: tuple[str, ...] = ()
    error: BaseException | None = None


class LoggingSink:
    """Writes events to the ``spsave`` logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def emit(self, event: SaveEvent) -> None:
        if event.kind is EventKind.SAVE_FAILED:
            self._log.error(event.message)
            for line in event.details:
                self._log.error(line)
        elif event.kind is EventKind.NOTIFICATION:
            names = ", ".join(event.details)
            self._log.info(f"{event.title}: {event.message}{' ' + names if names else ''}")
        else:
            self._log.info(event.message)


class RecordingSink:
    """Keeps every event in memory. Handy for embedding tools and tests."""

    def __init__(self) -> None:
        self.events: list[SaveEvent] = []

    def emit(self, event: SaveEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[SaveEvent]:
        return [e for e in self.events if e.kind is kind]


def describe_error(error: BaseException | None) -> SaveEvent:
    """Build the human readable failure summary for an error."""
    if error is None or not str(error):
        details: list[str] = []
        if error is not None:
            details.extend(["Stack trace:", _format_trace(error)])
        return SaveEvent(
            kind=EventKind.SAVE_FAILED,
            message="Unknown error occured",
            details=tuple(details),
            error=error,
        )

    details = [str(error)]
    body = getattr(error, "body", None)
    if body:
        details.append(str(body))
    details.extend(["Stack trace:", _format_trace(error)])
    return SaveEvent(
        kind=EventKind.SAVE_FAILED,
        message="Error occured:",
        details=tuple(details),
        error=error,
    )


def _format_trace(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
