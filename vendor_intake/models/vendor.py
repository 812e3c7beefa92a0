"""Vendor application Pydantic models"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union


# Form field name -> single value or ordered values of a multi-select
FormValue = Union[str, List[str]]
RawSubmission = Dict[str, FormValue]

# Column id -> value payload in the shape the board expects
ColumnValues = Dict[str, Any]


class FieldError(BaseModel):
    """A single violated validation rule"""
    field: str
    message: str


class VendorItem(BaseModel):
    """Board item created for or matched to a vendor"""
    id: str
    name: str


class ColumnDescriptor(BaseModel):
    """Board column as reported by the board API"""
    id: str
    title: str
    type: str
    settings_str: Optional[str] = None


class UploadResult(BaseModel):
    """Outcome of archiving one attached file"""
    field: str
    display_name: str
    file_name: str
    success: bool
    link: Optional[str] = None
    file_id: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None


class AttachedFile(BaseModel):
    """Attachment read from the multipart request"""
    field: str
    file_name: str
    content_type: str = "application/octet-stream"
    content: bytes


class VendorApplicationResponse(BaseModel):
    """Successful submission response"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    item_id: str = Field(alias="itemId")
    vendor_name: str = Field(alias="vendorName")
    updated: bool = False


class ErrorResponse(BaseModel):
    """Failed submission response"""
    success: bool = False
    error: str
    errors: Optional[List[FieldError]] = None
    details: Optional[str] = None
