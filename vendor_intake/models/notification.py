"""Notification-related Pydantic models"""
from pydantic import BaseModel, EmailStr
from typing import Optional


class EmailNotification(BaseModel):
    """Basic email notification"""
    to_email: EmailStr
    subject: str
    html_content: str
    # Falls back to EMAIL_FROM
    from_address: Optional[str] = None
