"""Vendor confirmation and team notification emails via Resend"""
import html
import logging
from typing import Dict, Optional

import httpx
from pydantic import ValidationError

from vendor_intake.config import Settings, get_settings
from vendor_intake.models.notification import EmailNotification
from vendor_intake.models.vendor import RawSubmission
from vendor_intake.services.transformer import as_list, first_value
from vendor_intake.utils.timezone import local_readable

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


def emails_enabled(settings: Settings) -> bool:
    return settings.enable_auto_email and settings.send_emails


def _email_id(response: httpx.Response) -> Optional[str]:
    """Resend message id, None when the reply body is not the expected JSON"""
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("id") if isinstance(body, dict) else None


async def send_email(
    email: EmailNotification,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict:
    """
    Send one email via Resend.
    Returns dict with success status and optional error. Never raises, never retries.
    """
    settings = settings or get_settings()
    if not settings.resend_api_key:
        logger.warning(f"RESEND_API_KEY not set, skipping email to {email.to_email}")
        return {"success": False, "error": "Email delivery is not configured"}

    try:
        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.post(
                RESEND_API_URL,
                headers={
                    "Authorization": f"Bearer {settings.resend_api_key}",
                    "Content-Type": "application/json"
                },
                json={
                    "from": email.from_address or settings.email_from,
                    "to": [email.to_email],
                    "subject": email.subject,
                    "html": email.html_content
                }
            )

        if response.status_code == 200:
            logger.info(f"Email '{email.subject}' sent to {email.to_email}")
            return {"success": True, "id": _email_id(response)}

        error_msg = f"Failed to send email: {response.status_code} - {response.text}"
        logger.error(error_msg)
        return {"success": False, "error": error_msg}

    except httpx.HTTPError as e:
        logger.error(f"Email error: {e}")
        return {"success": False, "error": str(e)}


async def send_confirmation_email(
    to_email: str,
    vendor_name: str,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict:
    """Tell the vendor their application arrived"""
    name = html.escape(vendor_name)
    html_content = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <p>Dear {name},</p>
        <p>Thank you for submitting your vendor application. Our team will review it and reach out
        if anything else is needed.</p>
        <p style="color: #6b7280; font-size: 12px;">Received {local_readable()}</p>
    </div>
    """
    try:
        email = EmailNotification(
            to_email=to_email,
            subject="BuildCore Vendor Application Received",
            html_content=html_content,
        )
    except ValidationError as e:
        logger.error(f"Confirmation email not sent, rejected recipient {to_email!r}: {e}")
        return {"success": False, "error": f"Invalid recipient address: {to_email}"}
    return await send_email(email, settings, transport)


async def send_team_notification(
    raw: RawSubmission,
    item_id: str,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict:
    """Tell the vendor team a new application is on the board"""
    settings = settings or get_settings()
    if not settings.team_email:
        logger.warning("TEAM_EMAIL not set, skipping team notification")
        return {"success": False, "error": "Team email is not configured"}

    vendor_name = first_value(raw.get("vendorName")) or "Unknown vendor"
    rows = [
        ("Vendor", vendor_name),
        ("Contact", first_value(raw.get("mainContactName")) or ""),
        ("Email", first_value(raw.get("mainContactEmail")) or ""),
        ("Phone", first_value(raw.get("mainContactPhone")) or ""),
        ("Primary Market", first_value(raw.get("primaryMarket")) or ""),
        ("Primary Trade", first_value(raw.get("primaryTrade")) or ""),
        ("Services", ", ".join(as_list(raw.get("services")))),
        ("Monday.com Item", item_id),
    ]
    table = "".join(
        f"<p><strong>{label}:</strong> {html.escape(value)}</p>" for label, value in rows
    )

    try:
        email = EmailNotification(
            to_email=settings.team_email,
            subject=f"New Vendor Application: {vendor_name}",
            html_content=f"<h2>New Vendor Application</h2>{table}<p>Submitted {local_readable()}</p>",
        )
    except ValidationError as e:
        logger.error(f"Team notification not sent, rejected recipient {settings.team_email!r}: {e}")
        return {"success": False, "error": f"Invalid recipient address: {settings.team_email}"}
    return await send_email(email, settings, transport)
