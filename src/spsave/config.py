"""Option building and loading of the metadata file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from spsave.exceptions import ConfigurationError
from spsave.models import CheckinType, CoreOptions, FileMetadata, LockPolicy


def load_environment(env_file: str | Path | None = None) -> None:
    """Load ``.env`` values into the process environment without overriding it."""
    load_dotenv(env_file, override=False)


def load_files_metadata(path: str | Path) -> tuple[FileMetadata, ...]:
    """Read a JSON list of ``{"fileName": ..., "metadata": {...}}`` entries.

    Raises:
        ConfigurationError: If the file is missing or has the wrong shape
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read metadata file {path}: {e}") from e
    except ValueError as e:
        raise ConfigurationError(f"Metadata file {path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ConfigurationError(f"Metadata file {path} must contain a JSON list")
    return tuple(_parse_metadata_entry(entry, path) for entry in data)


def _parse_metadata_entry(entry: Any, path: Path) -> FileMetadata:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Invalid entry in {path}: {entry!r}")
    file_name = entry.get("fileName") or entry.get("file_name")
    metadata = entry.get("metadata", {})
    if not file_name or not isinstance(metadata, dict):
        raise ConfigurationError(f"Invalid entry in {path}: {entry!r}")
    return FileMetadata(file_name=str(file_name), metadata=metadata)


def build_core_options(
    site_url: str | None,
    *,
    checkin: bool = False,
    checkin_type: CheckinType | int | str = CheckinType.MINOR,
    checkin_message: str | None = None,
    notification: bool = False,
    files_metadata: tuple[FileMetadata, ...] | list[FileMetadata] = (),
    lock_policy: LockPolicy | str = LockPolicy.FAIL,
) -> CoreOptions:
    """Validate raw option values and build ``CoreOptions``.

    Raises:
        ConfigurationError: If a value is missing or invalid
    """
    if not site_url:
        raise ConfigurationError("Site URL is required")
    if not site_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"Site URL must be absolute: {site_url}")
    try:
        policy = LockPolicy(lock_policy)
    except ValueError:
        raise ConfigurationError(f"Unknown lock policy: {lock_policy!r}") from None

    return CoreOptions(
        site_url=site_url,
        checkin=checkin,
        checkin_type=CheckinType.parse(checkin_type),
        checkin_message=checkin_message or "",
        notification=notification,
        files_metadata=tuple(files_metadata),
        lock_policy=policy,
    )
