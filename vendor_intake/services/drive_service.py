"""
Google Drive archival for vendor application attachments.

Files go to a per-vendor folder on the shared drive. Each file is uploaded
independently: one failed upload is recorded in its result and does not stop
the others.
"""
import asyncio
import json
import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from vendor_intake.config import Settings, get_settings
from vendor_intake.models.vendor import AttachedFile, UploadResult

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.file"]
DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

FILE_LABELS = {
    "w9Form": "W9 Form",
    "glInsurance": "General Liability Insurance",
    "wcInsurance": "Workers Compensation Insurance",
    "businessLicense": "Business License",
}


class DriveError(Exception):
    """Drive API call failed"""


class DriveNotConfiguredError(DriveError):
    """No service-account credential is configured"""


def load_credentials(settings: Settings) -> service_account.Credentials:
    """
    Build service-account credentials from configuration

    The inline JSON key (GOOGLE_SERVICE_ACCOUNT_KEY) is used when set,
    otherwise the key file path (GOOGLE_SERVICE_ACCOUNT_KEY_FILE).

    Raises:
        DriveNotConfiguredError: If neither is set
    """
    if settings.google_service_account_key:
        info = json.loads(settings.google_service_account_key)
        return service_account.Credentials.from_service_account_info(info, scopes=DRIVE_SCOPES)
    if settings.google_service_account_key_file:
        return service_account.Credentials.from_service_account_file(
            settings.google_service_account_key_file, scopes=DRIVE_SCOPES
        )
    raise DriveNotConfiguredError(
        "Google Drive credentials not configured. "
        "Set GOOGLE_SERVICE_ACCOUNT_KEY or GOOGLE_SERVICE_ACCOUNT_KEY_FILE"
    )


def folder_name_for(vendor_name: str, submitted_on: date) -> str:
    return f"{vendor_name} - {submitted_on.isoformat()}"


def _escape_query_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveService:
    """Uploads attachments to a shared drive through the Drive v3 REST API"""

    def __init__(
        self,
        credentials: Any,
        shared_drive_id: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.shared_drive_id = shared_drive_id
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "DriveService":
        return cls(load_credentials(settings), shared_drive_id=settings.google_shared_drive_id)

    async def _access_token(self) -> str:
        if not self.credentials.valid:
            # google-auth refresh is blocking
            await asyncio.to_thread(self.credentials.refresh, Request())
        return self.credentials.token

    def _shared_drive_params(self) -> Dict[str, Any]:
        return {"supportsAllDrives": "true"} if self.shared_drive_id else {}

    async def _find_or_create_folder(self, client: httpx.AsyncClient, name: str) -> Optional[str]:
        """Folder id for ``name``; the shared drive root if the folder cannot be made"""
        query = f"name='{_escape_query_value(name)}' and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        params: Dict[str, Any] = {"q": query, "fields": "files(id, name)"}
        if self.shared_drive_id:
            params.update({
                "driveId": self.shared_drive_id,
                "corpora": "drive",
                "includeItemsFromAllDrives": "true",
                "supportsAllDrives": "true",
            })

        try:
            response = await client.get(DRIVE_FILES_URL, params=params)
            response.raise_for_status()
            existing = response.json().get("files") or []
            if existing:
                logger.info(f"Using existing folder: {name}")
                return existing[0]["id"]

            metadata: Dict[str, Any] = {"name": name, "mimeType": FOLDER_MIME_TYPE}
            if self.shared_drive_id:
                metadata["parents"] = [self.shared_drive_id]
            response = await client.post(
                DRIVE_FILES_URL,
                params={"fields": "id, name", **self._shared_drive_params()},
                json=metadata,
            )
            response.raise_for_status()
            logger.info(f"Created new folder: {name}")
            return response.json()["id"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error(f"Error creating/finding folder '{name}': {e}")
            return self.shared_drive_id or None

    async def _upload_one(
        self, client: httpx.AsyncClient, attached: AttachedFile, folder_id: Optional[str]
    ) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"name": attached.file_name}
        if folder_id:
            metadata["parents"] = [folder_id]
        if self.shared_drive_id:
            metadata["driveId"] = self.shared_drive_id

        boundary = uuid.uuid4().hex
        body = (
            f"--{boundary}\r\n"
            "Content-Type: application/json; charset=UTF-8\r\n\r\n"
            f"{json.dumps(metadata)}\r\n"
            f"--{boundary}\r\n"
            f"Content-Type: {attached.content_type}\r\n\r\n"
        ).encode() + attached.content + f"\r\n--{boundary}--\r\n".encode()

        response = await client.post(
            DRIVE_UPLOAD_URL,
            params={
                "uploadType": "multipart",
                "fields": "id, name, webViewLink, webContentLink",
                **self._shared_drive_params(),
            },
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
            content=body,
        )
        response.raise_for_status()
        return response.json()

    async def archive(
        self,
        vendor_name: str,
        files: List[AttachedFile],
        submitted_on: Optional[date] = None,
    ) -> List[UploadResult]:
        """
        Upload attachments to the vendor's folder

        Args:
            vendor_name: Vendor company name, used for the folder name
            files: Attachments from the submission
            submitted_on: Date used in the folder name

        Returns:
            One result per file, successful or not
        """
        if not files:
            return []

        token = await self._access_token()
        folder = folder_name_for(vendor_name, submitted_on or date.today())
        results: List[UploadResult] = []

        async with httpx.AsyncClient(
            transport=self._transport,
            headers={"Authorization": f"Bearer {token}"},
        ) as client:
            folder_id = await self._find_or_create_folder(client, folder)

            for attached in files:
                label = FILE_LABELS.get(attached.field, attached.field)
                logger.info(f"Uploading {label} ({attached.file_name}, {len(attached.content)} bytes) to Google Drive")
                try:
                    uploaded = await self._upload_one(client, attached, folder_id)
                except (httpx.HTTPError, ValueError) as e:
                    logger.error(f"Failed to upload {label}: {e}")
                    results.append(UploadResult(
                        field=attached.field,
                        display_name=label,
                        file_name=attached.file_name,
                        success=False,
                        error=str(e),
                    ))
                    continue

                results.append(UploadResult(
                    field=attached.field,
                    display_name=label,
                    file_name=attached.file_name,
                    success=True,
                    link=uploaded.get("webViewLink"),
                    file_id=uploaded.get("id"),
                    size=len(attached.content),
                ))
                logger.info(f"Uploaded {label}: {attached.file_name}")

        return results


def summarize_uploads(results: List[UploadResult]) -> str:
    """One-line summary of an archival run"""
    archived = [result.file_name for result in results if result.success]
    failed = [f"{result.file_name} ({result.error})" for result in results if not result.success]
    summary = f"{len(archived)} of {len(results)} file(s) archived to Google Drive"
    if archived:
        summary += f": {', '.join(archived)}"
    if failed:
        summary += f"; failed: {', '.join(failed)}"
    return summary


def get_drive_service() -> Optional[DriveService]:
    """Dependency returning the archival client, or None when Drive is not configured"""
    settings = get_settings()
    if not settings.drive_configured:
        return None
    try:
        return DriveService.from_settings(settings)
    except (ValueError, OSError) as e:
        # Attachments are optional; a broken credential must not fail submissions
        logger.error(f"Google Drive credentials could not be loaded: {e}")
        return None
