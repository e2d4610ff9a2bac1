"""Data models for the spsave library."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any

from spsave.exceptions import ConfigurationError


class CheckinType(IntEnum):
    """Check-in type understood by the CheckIn endpoint."""

    MINOR = 0
    MAJOR = 1
    OVERWRITE = 2

    @classmethod
    def parse(cls, value: CheckinType | int | str) -> CheckinType:
        """Accept an enum member, its integer value or its name."""
        if isinstance(value, CheckinType):
            return value
        if isinstance(value, str) and not value.isdigit():
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ConfigurationError(f"Unknown checkin type: {value!r}") from None
        try:
            return cls(int(value))
        except ValueError:
            raise ConfigurationError(f"Unknown checkin type: {value!r}") from None


class LockPolicy(str, Enum):
    """What to do when the file is checked out by somebody else."""

    FAIL = "fail"
    PROCEED = "proceed"


class CheckoutState(Enum):
    """Checkout state of a file as observed during one save."""

    UNKNOWN = "unknown"
    NOT_CHECKED_OUT = "not_checked_out"
    CHECKED_OUT_BY_SELF = "checked_out_by_self"
    CHECKED_OUT_BY_OTHER = "checked_out_by_other"
    FILE_NOT_FOUND = "file_not_found"


class SaveState(Enum):
    """Steps of a single file save."""

    IDLE = "idle"
    FOLDERS_ENSURING = "folders_ensuring"
    CHECKOUT_CHECK = "checkout_check"
    UPLOADING = "uploading"
    CHECKING_IN = "checking_in"
    METADATA_PATCHING = "metadata_patching"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class RemoteResponse:
    """Response envelope returned by a request client."""

    status_code: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FileMetadata:
    """List item fields to set on an uploaded file."""

    file_name: str
    metadata: dict[str, Any]


@dataclass(frozen=True)
class FileUploadSpec:
    """A single file to upload."""

    folder: str
    file_name: str
    content: bytes | str
    metadata: dict[str, Any] | None = None

    @property
    def is_empty(self) -> bool:
        return len(self.content) == 0

    @property
    def payload(self) -> bytes:
        if isinstance(self.content, str):
            return self.content.encode("utf-8")
        return self.content

    @classmethod
    def from_path(cls, path: str | Path, folder: str) -> FileUploadSpec:
        """Read a local file into an upload spec."""
        path = Path(path)
        return cls(folder=folder, file_name=path.name, content=path.read_bytes())


@dataclass(frozen=True)
class CoreOptions:
    """Options shared by every save of a batch."""

    site_url: str
    checkin: bool = False
    checkin_type: CheckinType = CheckinType.MINOR
    checkin_message: str = ""
    notification: bool = False
    files_metadata: tuple[FileMetadata, ...] = ()
    lock_policy: LockPolicy = LockPolicy.FAIL

    def __post_init__(self) -> None:
        if not self.site_url:
            raise ConfigurationError("site_url is required")
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "site_url", self.site_url.rstrip("/"))
        object.__setattr__(self, "checkin_type", CheckinType.parse(self.checkin_type))
        object.__setattr__(self, "lock_policy", LockPolicy(self.lock_policy))
        object.__setattr__(self, "files_metadata", tuple(self.files_metadata))

    def metadata_for(self, file_name: str) -> dict[str, Any] | None:
        """Return the configured metadata for a file name, if any."""
        for entry in self.files_metadata:
            if entry.file_name == file_name:
                return entry.metadata
        return None


@dataclass
class SaveSession:
    """Transient state of one save. Never persisted."""

    spec: FileUploadSpec
    state: SaveState = SaveState.IDLE
    attempts: int = 0
    last_error: BaseException | None = None
    checkout_state: CheckoutState = CheckoutState.UNKNOWN

    @property
    def file_known_to_exist(self) -> bool:
        return self.checkout_state in (
            CheckoutState.NOT_CHECKED_OUT,
            CheckoutState.CHECKED_OUT_BY_SELF,
            CheckoutState.CHECKED_OUT_BY_OTHER,
        )


@dataclass(frozen=True)
class SaveResult:
    """Result of a successful save."""

    success: bool
    file_name: str
    folder: str
    response: RemoteResponse | None = None
    skipped: bool = False
