"""Vendor application endpoints"""
from datetime import date
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, UploadFile
import logging

from vendor_intake.config import Settings, get_settings
from vendor_intake.models.vendor import (
    AttachedFile,
    ErrorResponse,
    FieldError,
    RawSubmission,
    UploadResult,
    VendorApplicationResponse,
    VendorItem,
)
from vendor_intake.services.drive_service import DriveService, get_drive_service, summarize_uploads
from vendor_intake.services.email_service import emails_enabled, send_confirmation_email, send_team_notification
from vendor_intake.services.monday_client import MondayClient, MondayError, get_monday_client
from vendor_intake.services.transformer import display_name, first_value, is_complete, transform_form_data
from vendor_intake.services.validator import validate_vendor_data
from vendor_intake.utils.timezone import local_timestamp

logger = logging.getLogger(__name__)
router = APIRouter()

FILE_FIELDS = ("w9Form", "glInsurance", "wcInsurance", "businessLicense")

SUCCESS_MESSAGE = "Your vendor application has been successfully submitted!"
UPDATED_MESSAGE = "Your vendor application has been updated successfully!"
DUPLICATE_MESSAGE = "A vendor with this Tax ID already exists in our system."
GENERIC_ERROR_MESSAGE = "An error occurred while processing your application. Please try again."
REMOTE_RATE_LIMIT_MESSAGE = "Too many requests. Please wait a few minutes and try again."


class AttachmentError(Exception):
    """Attachment rejected before any remote call"""


def error_response(
    status_code: int,
    error: str,
    errors: Optional[List[FieldError]] = None,
    details: Optional[str] = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, errors=errors, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def form_to_submission(form: FormData) -> RawSubmission:
    """
    Collapse form fields into a submission

    Repeated keys (checkbox groups) become lists; ``name[]`` is read as ``name``.
    File parts are skipped.
    """
    raw: RawSubmission = {}
    for key, value in form.multi_items():
        if not isinstance(value, str):
            continue
        if key.endswith("[]"):
            key = key[:-2]
            raw.setdefault(key, [])

        if key not in raw:
            raw[key] = value
        elif isinstance(raw[key], list):
            raw[key].append(value)
        else:
            raw[key] = [raw[key], value]
    return raw


async def read_attachments(form: FormData, settings: Settings) -> List[AttachedFile]:
    """
    Read and check uploaded files

    Raises:
        AttachmentError: Unknown field, more than one file per field, disallowed
            extension or file over the size cap
    """
    attachments: List[AttachedFile] = []
    seen = set()
    allowed = [ext.lower().lstrip(".") for ext in settings.allowed_file_types]

    for field, value in form.multi_items():
        if not isinstance(value, UploadFile) or not value.filename:
            continue
        if field not in FILE_FIELDS:
            raise AttachmentError(f"Unexpected file field: {field}")
        if field in seen:
            raise AttachmentError(f"Only one file is allowed for {field}")
        seen.add(field)

        extension = value.filename.rsplit(".", 1)[-1].lower() if "." in value.filename else ""
        if extension not in allowed:
            raise AttachmentError(f"File type .{extension} not allowed. Allowed types: {', '.join(allowed)}")

        content = await value.read()
        if len(content) > settings.max_file_size_bytes:
            raise AttachmentError(f"File too large. Maximum size is {settings.max_file_size_mb}MB")

        attachments.append(AttachedFile(
            field=field,
            file_name=value.filename,
            content_type=value.content_type or "application/octet-stream",
            content=content,
        ))

    return attachments


async def save_to_board(
    monday: MondayClient,
    raw: RawSubmission,
    vendor_name: str,
    today: date,
    existing: Optional[VendorItem],
) -> Tuple[VendorItem, bool]:
    """Create the vendor item, or update and rename the existing one"""
    column_values = transform_form_data(raw, today=today)
    complete = is_complete(raw)

    if existing is None:
        item = await monday.create_item(vendor_name, column_values, complete)
        logger.info(f"Created Monday.com item: {item.id}")
        return item, False

    await monday.update_item(existing.id, column_values)
    new_name = display_name(vendor_name, complete)
    if existing.name != new_name:
        await monday.rename_item(existing.id, new_name)
    return VendorItem(id=existing.id, name=new_name), True


async def archive_attachments(
    monday: MondayClient,
    drive: Optional[DriveService],
    item_id: str,
    vendor_name: str,
    attachments: List[AttachedFile],
    today: date,
) -> List[UploadResult]:
    """Upload files and link them on the item; failures are logged, never raised"""
    if not attachments:
        return []
    if drive is None:
        logger.warning(f"Google Drive not configured, {len(attachments)} attachment(s) for {vendor_name} not archived")
        return []

    try:
        uploads = await drive.archive(vendor_name, attachments, submitted_on=today)
    except Exception as e:
        logger.error(f"Attachment archival failed for {vendor_name}: {e}")
        return []

    logger.info(f"Archived attachments for {vendor_name}: {summarize_uploads(uploads)}")
    await monday.attach_file_links(item_id, uploads)
    return uploads


async def send_notifications(raw: RawSubmission, item_id: str, settings: Settings) -> None:
    """Send the vendor confirmation and the team notification; each is attempted on its own"""
    if not emails_enabled(settings):
        return

    contact_email = first_value(raw.get("mainContactEmail"))
    if contact_email:
        await send_confirmation_email(contact_email, first_value(raw.get("vendorName")) or "", settings)
    await send_team_notification(raw, item_id, settings)


@router.post("/vendor-application", response_model=VendorApplicationResponse)
async def submit_vendor_application(
    request: Request,
    settings: Settings = Depends(get_settings),
    monday: MondayClient = Depends(get_monday_client),
    drive: Optional[DriveService] = Depends(get_drive_service),
):
    """Receive a vendor application, push it to the board and archive its files (PUBLIC endpoint)"""
    form = await request.form()
    raw = form_to_submission(form)
    vendor_name = (first_value(raw.get("vendorName")) or "").strip()
    today = date.today()

    logger.info(
        f"Received vendor application: vendor={vendor_name!r} "
        f"email={first_value(raw.get('mainContactEmail'))!r} at {local_timestamp()}"
    )

    try:
        attachments = await read_attachments(form, settings)
    except AttachmentError as e:
        logger.info(f"Attachment rejected for {vendor_name!r}: {e}")
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))

    validation_errors = validate_vendor_data(raw, today=today)
    if validation_errors:
        logger.info(f"Validation failed for {vendor_name!r}: {[error.field for error in validation_errors]}")
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Please correct the highlighted fields and try again.",
            errors=validation_errors,
        )

    try:
        existing = None
        if settings.enable_duplicate_check:
            existing = await monday.find_by_tax_id(first_value(raw.get("taxId")))
            if existing and not settings.update_existing_vendors:
                logger.info(f"Duplicate vendor rejected: {existing.name} (ID: {existing.id})")
                return error_response(status.HTTP_409_CONFLICT, DUPLICATE_MESSAGE)

        item, updated = await save_to_board(monday, raw, vendor_name, today, existing)

    except MondayError as e:
        logger.error(f"Error processing vendor application for {vendor_name!r}: {e}")
        if "rate limit" in str(e).lower():
            return error_response(status.HTTP_429_TOO_MANY_REQUESTS, REMOTE_RATE_LIMIT_MESSAGE)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            GENERIC_ERROR_MESSAGE,
            details=str(e) if settings.is_development else None,
        )

    await archive_attachments(monday, drive, item.id, vendor_name, attachments, today)
    await send_notifications(raw, item.id, settings)

    return VendorApplicationResponse(
        message=UPDATED_MESSAGE if updated else SUCCESS_MESSAGE,
        item_id=item.id,
        vendor_name=vendor_name,
        updated=updated,
    )
