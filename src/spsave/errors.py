"""Parsing and classification of remote error payloads.

SharePoint reports failures as JSON bodies such as::

    {"error": {"code": "-2130246326, Microsoft.SharePoint.SPException", ...}}
    {"odata.error": {"code": "-1597308888, ...", ...}}

Only the numeric part of ``code`` is significant.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

from spsave.exceptions import FileCheckedOutError, MalformedResponseError, RequestError

logger = logging.getLogger(__name__)

SAVE_CONFLICT = "-2130246326"
COBALT_ERROR = "-1597308888"
# Seen on the first write of a new file under some folder states
FILE_NOT_FOUND_ON_WRITE = "-2147024893"
FILE_NOT_FOUND = "-2146232832"
FILE_NOT_FOUND_IO = "-2147024894"

TRANSIENT_WRITE_CODES = frozenset({SAVE_CONFLICT, COBALT_ERROR})
NOT_FOUND_CODES = frozenset({FILE_NOT_FOUND, FILE_NOT_FOUND_IO, FILE_NOT_FOUND_ON_WRITE})


class ErrorKind(str, Enum):
    TRANSIENT_WRITE_CONFLICT = "transient_write_conflict"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHORIZATION_CONFLICT = "authorization_conflict"
    MALFORMED_RESPONSE = "malformed_response"
    FATAL = "fatal"


class _Unparseable(Exception):
    pass


def _error_object(body: Any) -> dict[str, Any]:
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            raise _Unparseable() from None
    if not isinstance(body, dict):
        raise _Unparseable()
    error = body.get("error", body.get("odata.error"))
    if not isinstance(error, dict):
        raise _Unparseable()
    return error


def parse_error_code(error: BaseException) -> str | None:
    """Return the numeric remote error code carried by an error, if any."""
    body = getattr(error, "body", None)
    if body is None:
        return None
    try:
        code = _error_object(body).get("code")
    except _Unparseable:
        return None
    if code is None:
        return None
    return str(code).split(",", 1)[0].strip() or None


def is_malformed(error: BaseException) -> bool:
    """True when an HTTP error carries no parseable error payload."""
    if isinstance(error, MalformedResponseError):
        return True
    if not isinstance(error, RequestError):
        return False
    try:
        _error_object(error.body)
    except _Unparseable:
        return True
    return False


def is_not_found(error: BaseException) -> bool:
    if parse_error_code(error) in NOT_FOUND_CODES:
        return True
    return isinstance(error, RequestError) and error.status_code == 404


def classify(error: BaseException) -> ErrorKind:
    """Map an error onto the save error taxonomy."""
    if isinstance(error, FileCheckedOutError):
        return ErrorKind.AUTHORIZATION_CONFLICT
    code = parse_error_code(error)
    if code in TRANSIENT_WRITE_CODES:
        return ErrorKind.TRANSIENT_WRITE_CONFLICT
    if is_not_found(error):
        return ErrorKind.RESOURCE_NOT_FOUND
    if is_malformed(error):
        return ErrorKind.MALFORMED_RESPONSE
    return ErrorKind.FATAL
