"""spsave - Save files to SharePoint document libraries over REST.

Example usage:
    from spsave import CoreOptions, FileUploadSpec, SharePointRequestClient, spsave

    async with SharePointRequestClient(access_token=token) as client:
        options = CoreOptions(
            site_url="https://contoso.sharepoint.com/sites/dev",
            checkin=True,
            checkin_message="Nightly build",
        )
        await spsave(client, options, FileUploadSpec("Shared Documents/out", "app.js", b"..."))
"""

from spsave._internal.sp_client import SharePointRequestClient
from spsave.batch import BatchCoordinator, spsave
from spsave.exceptions import (
    ConfigurationError,
    FileCheckedOutError,
    MalformedResponseError,
    NoFilesError,
    RequestError,
    SPSaveError,
)
from spsave.folders import FolderHierarchyCreator
from spsave.models import (
    CheckinType,
    CheckoutState,
    CoreOptions,
    FileMetadata,
    FileUploadSpec,
    LockPolicy,
    RemoteResponse,
    SaveResult,
)
from spsave.notifications import EventKind, LoggingSink, RecordingSink, SaveEvent
from spsave.saver import FileSaver

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "spsave",
    "BatchCoordinator",
    "FileSaver",
    "FolderHierarchyCreator",
    "SharePointRequestClient",
    # Models
    "CheckinType",
    "CheckoutState",
    "CoreOptions",
    "FileMetadata",
    "FileUploadSpec",
    "LockPolicy",
    "RemoteResponse",
    "SaveResult",
    # Events
    "EventKind",
    "LoggingSink",
    "RecordingSink",
    "SaveEvent",
    # Exceptions
    "SPSaveError",
    "RequestError",
    "MalformedResponseError",
    "FileCheckedOutError",
    "NoFilesError",
    "ConfigurationError",
]
