"""REST URL builders for the SharePoint file and folder endpoints."""

from __future__ import annotations

from urllib.parse import quote


def trim_slashes(path: str) -> str:
    return path.replace("\\", "/").strip("/")


def encode(value: str) -> str:
    """Encode a value for use inside a quoted ``@alias='...'`` parameter.

    Single quotes are doubled, as required by OData string literals, before
    percent-encoding the way ``encodeURIComponent`` does.
    """
    return quote(value.replace("'", "''"), safe="-_.!~*'()")


def file_server_relative_url(folder: str, file_name: str) -> str:
    folder = trim_slashes(folder)
    return f"/{folder}/{file_name}" if folder else f"/{file_name}"


def get_folder_url(site_url: str, folder: str) -> str:
    return (
        f"{site_url}/_api/web/GetFolderByServerRelativeUrl(@FolderName)"
        f"?@FolderName='{encode(folder)}'"
    )


def create_folder_url(site_url: str) -> str:
    return f"{site_url}/_api/web/folders"


def upload_file_url(site_url: str, folder: str, file_name: str) -> str:
    return (
        f"{site_url}/_api/web/GetFolderByServerRelativeUrl(@FolderName)"
        "/Files/add(url=@FileName,overwrite=true)"
        f"?@FolderName='{encode(trim_slashes(folder))}'&@FileName='{encode(file_name)}'"
    )


def _file_endpoint(site_url: str, file_url: str, action: str = "") -> str:
    return (
        f"{site_url}/_api/web/GetFileByServerRelativeUrl(@FileUrl){action}"
        f"?@FileUrl='{encode(file_url)}'"
    )


def get_file_url(site_url: str, file_url: str) -> str:
    return _file_endpoint(site_url, file_url)


def checkout_file_url(site_url: str, file_url: str) -> str:
    return _file_endpoint(site_url, file_url, "/CheckOut()")


def checkin_file_url(site_url: str, file_url: str, comment: str, checkin_type: int) -> str:
    return (
        _file_endpoint(site_url, file_url, "/CheckIn(comment=@Comment,checkintype=@Type)")
        + f"&@Comment='{encode(comment)}'&@Type='{int(checkin_type)}'"
    )


def list_item_fields_url(site_url: str, file_url: str) -> str:
    return _file_endpoint(site_url, file_url, "/ListItemAllFields")


def context_info_url(site_url: str) -> str:
    return f"{site_url.rstrip('/')}/_api/contextinfo"
