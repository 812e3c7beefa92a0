"""Validation rules for vendor application data"""
import re
from datetime import date
from typing import List, Optional

from vendor_intake.models.vendor import FieldError, RawSubmission
from vendor_intake.services.column_mappings import PAYMENT_METHOD_LABELS
from vendor_intake.services.transformer import as_list, first_value

REQUIRED_FIELDS = (
    ("vendorName", "Company name is required"),
    ("taxId", "Business Tax ID is required"),
    ("mainContactName", "Main contact name is required"),
    ("mainContactEmail", "Main contact email is required"),
    ("mainContactPhone", "Main contact phone is required"),
    ("vendorAddress", "Business address is required"),
    ("primaryMarket", "Primary market is required"),
    ("primaryTrade", "Primary trade is required"),
    ("numCrews", "Number of crews is required"),
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
EIN_PATTERN = re.compile(r"^[0-9]{2}-[0-9]{7}$")
SSN_PATTERN = re.compile(r"^[0-9]{3}-[0-9]{2}-[0-9]{4}$")
NUMBER_PATTERN = re.compile(r"^\s*[0-9]+(\.[0-9]+)?\s*$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.fullmatch(email))


def is_valid_phone(phone: str) -> bool:
    """Exactly 10 digits once separators are stripped"""
    return len(re.sub(r"\D", "", phone)) == 10


def is_valid_tax_id(tax_id: str) -> bool:
    """EIN (XX-XXXXXXX) or SSN (XXX-XX-XXXX)"""
    return bool(EIN_PATTERN.fullmatch(tax_id) or SSN_PATTERN.fullmatch(tax_id))


def is_number(value: str) -> bool:
    return bool(NUMBER_PATTERN.fullmatch(value))


def is_future_date(value: str, today: Optional[date] = None) -> bool:
    """Strictly after today; unparseable dates are not in the future"""
    today = today or date.today()
    try:
        parsed = date.fromisoformat(value.strip()[:10])
    except ValueError:
        return False
    return parsed > today


def validate_vendor_data(raw: RawSubmission, today: Optional[date] = None) -> List[FieldError]:
    """
    Validate a vendor application

    Every rule runs; the result holds one error per violated rule.

    Args:
        raw: Form field name -> value (string or list of strings)
        today: Date expiration dates are compared against

    Returns:
        List of field errors, empty when the submission is acceptable
    """
    today = today or date.today()
    errors: List[FieldError] = []

    for field, message in REQUIRED_FIELDS:
        if not first_value(raw.get(field)):
            errors.append(FieldError(field=field, message=message))

    main_email = first_value(raw.get("mainContactEmail"))
    if main_email and not is_valid_email(main_email):
        errors.append(FieldError(field="mainContactEmail", message="Please enter a valid email address"))

    additional_email = first_value(raw.get("additionalContactEmail"))
    if additional_email and not is_valid_email(additional_email):
        errors.append(FieldError(
            field="additionalContactEmail",
            message="Please enter a valid additional email address"
        ))

    main_phone = first_value(raw.get("mainContactPhone"))
    if main_phone and not is_valid_phone(main_phone):
        errors.append(FieldError(field="mainContactPhone", message="Please enter a valid 10-digit phone number"))

    additional_phone = first_value(raw.get("additionalPhone"))
    if additional_phone and not is_valid_phone(additional_phone):
        errors.append(FieldError(field="additionalPhone", message="Please enter a valid additional phone number"))

    tax_id = first_value(raw.get("taxId"))
    if tax_id and not is_valid_tax_id(tax_id):
        errors.append(FieldError(
            field="taxId",
            message="Tax ID must be in format XX-XXXXXXX (EIN) or XXX-XX-XXXX (SSN)"
        ))

    if not as_list(raw.get("serviceLine")):
        errors.append(FieldError(field="serviceLine", message="Please select at least one service line"))

    if not as_list(raw.get("services")):
        errors.append(FieldError(field="services", message="Please select at least one service"))

    payment_method = first_value(raw.get("paymentMethod"))
    if payment_method and payment_method not in PAYMENT_METHOD_LABELS:
        errors.append(FieldError(field="paymentMethod", message="Please select a valid payment method"))

    num_crews = first_value(raw.get("numCrews"))
    if num_crews and (not is_number(num_crews) or float(num_crews) < 1):
        errors.append(FieldError(field="numCrews", message="Number of crews must be at least 1"))

    travel_radius = first_value(raw.get("travelRadius"))
    if travel_radius and not is_number(travel_radius):
        errors.append(FieldError(field="travelRadius", message="Travel radius must be a number"))

    travel_people = first_value(raw.get("travelPeople"))
    if travel_people and not is_number(travel_people):
        errors.append(FieldError(
            field="travelPeople",
            message="Number of people available to travel must be a number"
        ))

    gl_expiration = first_value(raw.get("glExpiration"))
    if gl_expiration and not is_future_date(gl_expiration, today):
        errors.append(FieldError(field="glExpiration", message="GL insurance expiration date must be in the future"))

    wc_expiration = first_value(raw.get("wcExpiration"))
    if wc_expiration and not is_future_date(wc_expiration, today):
        errors.append(FieldError(field="wcExpiration", message="WC insurance expiration date must be in the future"))

    if raw.get("certification") != "true":
        errors.append(FieldError(
            field="certification",
            message="You must certify that all information is accurate"
        ))

    return errors
