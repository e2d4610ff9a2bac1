"""Command-line interface for spsave."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from spsave import (
    CheckinType,
    ConfigurationError,
    FileUploadSpec,
    FolderHierarchyCreator,
    LockPolicy,
    SharePointRequestClient,
    spsave,
)
from spsave.config import build_core_options, load_environment, load_files_metadata
from spsave.notifications import EventKind, SaveEvent

CHECKIN_TYPES = [t.name.lower() for t in CheckinType]


class ClickSink:
    """Prints save events to the terminal."""

    def __init__(self) -> None:
        self.reported: list[BaseException] = []

    def emit(self, event: SaveEvent) -> None:
        if event.kind is EventKind.SAVE_FAILED:
            if event.error is not None:
                self.reported.append(event.error)
            click.echo(click.style(event.message, fg="red"), err=True)
            for line in event.details:
                click.echo(line, err=True)
        elif event.kind is EventKind.NOTIFICATION:
            click.echo(click.style(event.title or "", bold=True))
            click.echo(f"  {event.message}")
            for name in event.details:
                click.echo(f"    {name}")
        elif event.kind is EventKind.FILE_UPLOADED:
            click.echo(click.style("✓ ", fg="green") + event.message)
        elif event.kind is EventKind.FILE_SKIPPED:
            click.echo(click.style("- ", fg="yellow") + event.message)
        else:
            click.echo(event.message)


def _site_url_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--site-url",
        "-s",
        envvar="SPSAVE_SITE_URL",
        required=True,
        help="SharePoint site URL, e.g. https://contoso.sharepoint.com/sites/dev",
    )(func)


def _access_token_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--access-token",
        "-t",
        envvar="SPSAVE_ACCESS_TOKEN",
        required=True,
        help="Bearer token used to authenticate requests",
    )(func)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@click.group()
@click.version_option(package_name="spsave")
def main() -> None:
    """spsave - Save files to SharePoint document libraries."""
    load_environment()


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_site_url_option
@_access_token_option
@click.option(
    "--folder",
    "-f",
    envvar="SPSAVE_FOLDER",
    required=True,
    help="Target folder, relative to the site (e.g. 'Shared Documents/out')",
)
@click.option("--checkin", is_flag=True, help="Check the file out before upload and in after")
@click.option(
    "--checkin-type",
    type=click.Choice(CHECKIN_TYPES, case_sensitive=False),
    default="minor",
    show_default=True,
    help="Version created by the check-in",
)
@click.option(
    "--checkin-message",
    envvar="SPSAVE_CHECKIN_MESSAGE",
    default="",
    help="Check-in comment",
)
@click.option("--notification", is_flag=True, help="Print a summary notification")
@click.option(
    "--metadata-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='JSON list of {"fileName": ..., "metadata": {...}} entries',
)
@click.option(
    "--force-checked-out",
    is_flag=True,
    help=(
        "Upload even when the file is checked out by another user. "
        "Any CheckOutType other than 0 or 1 counts as another user, "
        "including the 2 (None) some SharePoint versions report for a free file"
    ),
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def upload(
    files: tuple[Path, ...],
    site_url: str,
    access_token: str,
    folder: str,
    checkin: bool,
    checkin_type: str,
    checkin_message: str,
    notification: bool,
    metadata_file: Path | None,
    force_checked_out: bool,
    verbose: bool,
) -> None:
    """Upload files to a SharePoint folder.

    FILES: One or more local files to upload.

    Examples:

        spsave upload report.pdf -s https://contoso.sharepoint.com/sites/dev -f "Shared Documents"

        spsave upload app.js app.css -f "Style Library/app" --checkin --checkin-type major
    """
    _configure_logging(verbose)
    try:
        options = build_core_options(
            site_url,
            checkin=checkin,
            checkin_type=checkin_type,
            checkin_message=checkin_message,
            notification=notification,
            files_metadata=load_files_metadata(metadata_file) if metadata_file else (),
            lock_policy=LockPolicy.PROCEED if force_checked_out else LockPolicy.FAIL,
        )
        specs = [FileUploadSpec.from_path(path, folder) for path in files]
    except ConfigurationError as e:
        click.echo(click.style(f"Configuration error: {e}", fg="red"), err=True)
        sys.exit(1)

    sink = ClickSink()

    async def run() -> int:
        async with SharePointRequestClient(access_token=access_token) as client:
            results = await spsave(client, options, specs, sink=sink)
        return len(results)

    try:
        total = asyncio.run(run())
    except Exception as e:
        if not any(e is reported for reported in sink.reported):
            click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style(f"\nAll {total} file(s) uploaded successfully!", fg="green"))


@main.command()
@click.argument("path")
@_site_url_option
@_access_token_option
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def mkdir(path: str, site_url: str, access_token: str, verbose: bool) -> None:
    """Create a folder and all of its missing parents.

    PATH: Folder path relative to the site

    Examples:

        spsave mkdir "Shared Documents/Reports/2024"
    """
    _configure_logging(verbose)
    try:
        options = build_core_options(site_url)
    except ConfigurationError as e:
        click.echo(click.style(f"Configuration error: {e}", fg="red"), err=True)
        sys.exit(1)

    async def run() -> None:
        async with SharePointRequestClient(access_token=access_token) as client:
            creator = FolderHierarchyCreator(client, options.site_url, sink=ClickSink())
            await creator.ensure_hierarchy(path)

    try:
        asyncio.run(run())
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style(f"Folder ready: {path}", fg="green"))


if __name__ == "__main__":
    main()
