"""Exception hierarchy for the spsave library."""

from __future__ import annotations

from typing import Any


class SPSaveError(Exception):
    """Base exception for all spsave errors."""

    pass


class RequestError(SPSaveError):
    """Raised when the remote service answers with an HTTP error status.

    The parsed response body (dict for JSON payloads, str otherwise) is kept
    so callers can inspect the remote error code.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: Any = None,
        url: str | None = None,
        method: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.url = url
        self.method = method


class MalformedResponseError(SPSaveError):
    """Raised when a successful response lacks an expected field."""

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(message)
        self.body = body


class FileCheckedOutError(SPSaveError):
    """Raised when the target file is checked out by another user."""

    def __init__(self, message: str, file_url: str) -> None:
        super().__init__(message)
        self.file_url = file_url


class NoFilesError(SPSaveError):
    """Raised when a batch is started without any file to upload."""

    pass


class ConfigurationError(SPSaveError):
    """Raised when options or the metadata file are invalid."""

    pass
