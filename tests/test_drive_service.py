"""Tests for Google Drive attachment archival"""
import json
from datetime import date

import httpx
import pytest

from vendor_intake.config import Settings
from vendor_intake.models.vendor import AttachedFile, UploadResult
from vendor_intake.services.drive_service import (
    DRIVE_UPLOAD_URL,
    DriveNotConfiguredError,
    DriveService,
    folder_name_for,
    load_credentials,
    summarize_uploads,
)


class FakeCredentials:
    def __init__(self, valid=True):
        self.valid = valid
        self.token = "drive-token"
        self.refreshed = False

    def refresh(self, request):
        self.refreshed = True
        self.valid = True


class FakeDrive:
    """MockTransport handler emulating the Drive v3 endpoints used"""

    def __init__(self, existing_folder=None, failing_files=(), folder_error=False):
        self.existing_folder = existing_folder
        self.failing_files = set(failing_files)
        self.folder_error = folder_error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            if self.folder_error:
                return httpx.Response(500, json={"error": "backend"})
            files = [{"id": self.existing_folder, "name": "x"}] if self.existing_folder else []
            return httpx.Response(200, json={"files": files})
        if str(request.url).startswith(DRIVE_UPLOAD_URL):
            body = request.content
            for name in self.failing_files:
                if name.encode() in body:
                    return httpx.Response(403, json={"error": "quota"})
            return httpx.Response(200, json={"id": "file-1", "webViewLink": "https://drive.test/view/file-1"})
        return httpx.Response(200, json={"id": "new-folder"})

    def uploads(self):
        return [r for r in self.requests if str(r.url).startswith(DRIVE_UPLOAD_URL)]


def attachment(field, name):
    return AttachedFile(field=field, file_name=name, content_type="application/pdf", content=b"%PDF-1.4 data")


def make_service(handler, credentials=None, shared_drive_id="shared-1"):
    return DriveService(
        credentials or FakeCredentials(),
        shared_drive_id=shared_drive_id,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_archive_creates_folder_and_uploads():
    drive = FakeDrive()

    results = await make_service(drive).archive(
        "Acme", [attachment("w9Form", "w9.pdf")], submitted_on=date(2026, 3, 10)
    )

    assert len(results) == 1
    assert results[0].success
    assert results[0].display_name == "W9 Form"
    assert results[0].link == "https://drive.test/view/file-1"

    search = drive.requests[0]
    assert "Acme - 2026-03-10" in search.url.params["q"]
    assert search.url.params["driveId"] == "shared-1"
    create_folder = drive.requests[1]
    assert json.loads(create_folder.content)["parents"] == ["shared-1"]
    upload = drive.uploads()[0]
    assert upload.headers["Authorization"] == "Bearer drive-token"
    assert upload.headers["Content-Type"].startswith("multipart/related; boundary=")
    assert b'"parents": ["new-folder"]' in upload.content


@pytest.mark.asyncio
async def test_archive_reuses_existing_folder():
    drive = FakeDrive(existing_folder="folder-9")

    await make_service(drive).archive("Acme", [attachment("w9Form", "w9.pdf")])

    assert len(drive.requests) == 2
    assert b'"parents": ["folder-9"]' in drive.uploads()[0].content


@pytest.mark.asyncio
async def test_partial_failure_is_reported_per_file():
    drive = FakeDrive(failing_files=["gl.pdf"])

    results = await make_service(drive).archive("Acme", [
        attachment("w9Form", "w9.pdf"),
        attachment("glInsurance", "gl.pdf"),
        attachment("wcInsurance", "wc.pdf"),
    ])

    assert [result.success for result in results] == [True, False, True]
    assert results[1].error
    assert results[1].display_name == "General Liability Insurance"


@pytest.mark.asyncio
async def test_folder_failure_falls_back_to_shared_drive_root():
    drive = FakeDrive(folder_error=True)

    results = await make_service(drive).archive("Acme", [attachment("w9Form", "w9.pdf")])

    assert results[0].success
    assert b'"parents": ["shared-1"]' in drive.uploads()[0].content


@pytest.mark.asyncio
async def test_expired_credentials_are_refreshed():
    credentials = FakeCredentials(valid=False)

    await make_service(FakeDrive(), credentials=credentials).archive("Acme", [attachment("w9Form", "w9.pdf")])

    assert credentials.refreshed


@pytest.mark.asyncio
async def test_no_files_makes_no_calls():
    drive = FakeDrive()

    assert await make_service(drive).archive("Acme", []) == []
    assert drive.requests == []


def test_load_credentials_requires_configuration():
    with pytest.raises(DriveNotConfiguredError):
        load_credentials(Settings(_env_file=None))


def test_folder_name():
    assert folder_name_for("Acme", date(2026, 1, 2)) == "Acme - 2026-01-02"


def test_summarize_uploads_is_one_line():
    drive_results = [
        {"field": "w9Form", "display_name": "W9 Form", "file_name": "w9.pdf", "success": True, "link": "L"},
        {"field": "glInsurance", "display_name": "GL", "file_name": "gl.pdf", "success": False, "error": "quota"},
    ]

    text = summarize_uploads([UploadResult(**result) for result in drive_results])

    assert text == "1 of 2 file(s) archived to Google Drive: w9.pdf; failed: gl.pdf (quota)"
    assert "\n" not in text


def test_summarize_uploads_with_nothing_archived():
    assert summarize_uploads([]) == "0 of 0 file(s) archived to Google Drive"
