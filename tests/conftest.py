"""Pytest fixtures for spsave tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from helpers import SITE_URL, FakeSPRequest

from spsave import CheckinType, CoreOptions, FileUploadSpec, RecordingSink


@pytest.fixture
def fake_client() -> FakeSPRequest:
    """Create a scripted request client."""
    return FakeSPRequest()


@pytest.fixture
def core_options() -> CoreOptions:
    """Options without checkin, notification or metadata."""
    return CoreOptions(
        site_url=SITE_URL,
        checkin_message="spsave",
        checkin_type=CheckinType.MINOR,
    )


@pytest.fixture
def checkin_options() -> CoreOptions:
    """Options with checkout/checkin enabled."""
    return CoreOptions(
        site_url=SITE_URL,
        checkin=True,
        checkin_message="spsave",
        checkin_type=CheckinType.MINOR,
    )


@pytest.fixture
def file_spec() -> FileUploadSpec:
    """A small text file going to the Assets folder."""
    return FileUploadSpec(folder="Assets", file_name="file.txt", content="spsave")


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def temp_file(tmp_path: Path) -> Path:
    """Create a temporary file for CLI tests."""
    path = tmp_path / "report.txt"
    path.write_bytes(b"report content")
    return path
