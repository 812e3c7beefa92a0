"""
Transform vendor application form data into Monday.com column values.

The transform is a pure function of the submission, the static mapping table in
``column_mappings`` and the submission date. It never raises: values it cannot
interpret are omitted or replaced by the column's default.
"""
import re
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

from vendor_intake.models.vendor import ColumnValues, FormValue, RawSubmission
from vendor_intake.services import column_mappings
from vendor_intake.services.column_mappings import (
    DATE_CREATED_COLUMN,
    DEFAULT_STATUS_LABEL,
    FIELD_MAPPINGS,
    NOTES_COLUMN,
    OTHER_SERVICE,
    SERVICE_COLUMNS,
    SOURCE_COLUMN,
    SOURCE_LABEL,
    STATUS_COLUMN,
    FieldMapping,
    Shape,
)

INCOMPLETE_PREFIX = "(Incomplete)"

# Fields that must all be filled for an item to be named without the incomplete prefix
COMPLETENESS_FIELDS = (
    "vendorName",
    "taxId",
    "mainContactName",
    "mainContactEmail",
    "mainContactPhone",
    "vendorAddress",
    "primaryMarket",
    "primaryTrade",
    "numCrews",
    "glExpiration",
    "wcExpiration",
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# (payload, notes line)
ShapeResult = Tuple[Optional[object], Optional[str]]


def as_list(value: Optional[FormValue]) -> List[str]:
    """Normalize a form value to its non-empty string items"""
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    return [item for item in items if isinstance(item, str) and item.strip()]


def first_value(value: Optional[FormValue]) -> Optional[str]:
    items = as_list(value)
    return items[0] if items else None


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse the leading integer of a string ("12 crews" -> 12), None if there is none"""
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def is_complete(raw: RawSubmission) -> bool:
    """Whether every core field of the submission is filled"""
    return all(first_value(raw.get(field)) for field in COMPLETENESS_FIELDS)


def display_name(vendor_name: str, complete: bool) -> str:
    """Item name encoding the completeness state"""
    name = vendor_name.strip()
    return name if complete else f"{INCOMPLETE_PREFIX} {name}"


def strip_incomplete_prefix(item_name: str) -> str:
    if item_name.startswith(INCOMPLETE_PREFIX):
        return item_name[len(INCOMPLETE_PREFIX):].strip()
    return item_name


def _missing_label(mapping: FieldMapping) -> ShapeResult:
    if mapping.default is not None and column_mappings.MISSING_FIELD_POLICY == "default":
        return {"label": mapping.default}, None
    return None, None


def _text(mapping: FieldMapping, raw: RawSubmission) -> ShapeResult:
    return first_value(raw.get(mapping.field)), None


def _label(mapping: FieldMapping, raw: RawSubmission) -> ShapeResult:
    value = first_value(raw.get(mapping.field))
    if value is None:
        return _missing_label(mapping)

    if mapping.other_field and value == "Other":
        value = first_value(raw.get(mapping.other_field)) or value
    if mapping.value_map:
        value = mapping.value_map.get(value, value)
    return {"label": value}, None


def _multi_label(mapping: FieldMapping, raw: RawSubmission) -> ShapeResult:
    values = as_list(raw.get(mapping.field))
    if not values:
        return _missing_label(mapping)

    if mapping.max_labels <= 1:
        # Single-label column: keep the first, record the full selection in notes
        note = f"{mapping.notes_prefix}: {', '.join(values)}" if len(values) > 1 else None
        return {"label": values[0]}, note

    kept, overflow = values[:mapping.max_labels], values[mapping.max_labels:]
    note = f"{mapping.notes_prefix}: {', '.join(overflow)}" if overflow else None
    return {"labels": kept}, note


def _email(mapping: FieldMapping, raw: RawSubmission) -> ShapeResult:
    value = first_value(raw.get(mapping.field))
    if value is None:
        return None, None
    return {"email": value, "text": value}, None


def _date(mapping: FieldMapping, raw: RawSubmission) -> ShapeResult:
    value = first_value(raw.get(mapping.field))
    if value is None:
        return None, None
    return {"date": value.strip()}, None


def _numeric(mapping: FieldMapping, raw: RawSubmission) -> ShapeResult:
    value = first_value(raw.get(mapping.field))
    if value is None:
        return None, None
    number = parse_int(value)
    return (number if number is not None else mapping.default), None


def _boolean_label(mapping: FieldMapping, raw: RawSubmission) -> ShapeResult:
    value = first_value(raw.get(mapping.field))
    if value is None:
        return None, None
    if mapping.when_present:
        return {"label": mapping.true_label}, None

    answer = value.strip().lower()
    if answer in ("yes", "true"):
        return {"label": mapping.true_label}, None
    if answer in ("no", "false"):
        return {"label": mapping.false_label}, None
    return None, None


_SHAPE_HANDLERS: Dict[Shape, Callable[[FieldMapping, RawSubmission], ShapeResult]] = {
    Shape.TEXT: _text,
    Shape.LABEL: _label,
    Shape.MULTI_LABEL: _multi_label,
    Shape.EMAIL: _email,
    Shape.DATE: _date,
    Shape.NUMERIC: _numeric,
    Shape.BOOLEAN_LABEL: _boolean_label,
}


def _service_flags(raw: RawSubmission) -> Tuple[ColumnValues, List[str]]:
    """Fan the services multi-select out to one checkbox column per trade"""
    services = as_list(raw.get("services"))
    if not services:
        return {}, []

    # Unselected trades are cleared so an update drops stale flags
    flags: ColumnValues = {column_id: {"checked": False} for column_id in SERVICE_COLUMNS.values()}
    notes = []
    unknown = []

    for service in services:
        if service == OTHER_SERVICE:
            other = first_value(raw.get("servicesOther"))
            if other:
                notes.append(f"Other Services: {other}")
        elif service in SERVICE_COLUMNS:
            flags[SERVICE_COLUMNS[service]] = {"checked": True}
        else:
            unknown.append(service)

    if unknown and column_mappings.UNKNOWN_VALUE_POLICY == "note":
        notes.append(f"Unrecognized Services: {', '.join(unknown)}")

    return flags, notes


def _referral_line(raw: RawSubmission) -> Optional[str]:
    referral = first_value(raw.get("referralSource"))
    if not referral:
        return None

    if referral == "Employee" and first_value(raw.get("referralEmployeeName")):
        referral = f"Employee - {first_value(raw.get('referralEmployeeName'))}"
    elif referral == "Other" and first_value(raw.get("referralSourceOther")):
        referral = f"Other - {first_value(raw.get('referralSourceOther'))}"
    return f"Referral: {referral}"


def transform_form_data(raw: RawSubmission, today: Optional[date] = None) -> ColumnValues:
    """
    Transform a vendor application into Monday.com column values

    Args:
        raw: Form field name -> value (string or list of strings)
        today: Submission date, defaults to the server's local date

    Returns:
        Column id -> value payload
    """
    today = today or date.today()

    column_values: ColumnValues = {
        STATUS_COLUMN: {"label": DEFAULT_STATUS_LABEL},
        SOURCE_COLUMN: {"label": SOURCE_LABEL},
        DATE_CREATED_COLUMN: {"date": today.isoformat()},
    }
    note_lines: List[str] = []

    for mapping in FIELD_MAPPINGS:
        payload, note = _SHAPE_HANDLERS[mapping.shape](mapping, raw)
        if payload is not None:
            column_values[mapping.column_id] = payload
        if note:
            note_lines.append(note)

    flags, service_notes = _service_flags(raw)
    column_values.update(flags)
    note_lines.extend(service_notes)

    # Free-text contributions, in fixed order
    user_notes = first_value(raw.get("notes"))
    if user_notes:
        note_lines.append(user_notes)
    gl_policy = first_value(raw.get("glPolicyNumber"))
    if gl_policy:
        note_lines.append(f"GL Policy #: {gl_policy}")
    wc_policy = first_value(raw.get("wcPolicyNumber"))
    if wc_policy:
        note_lines.append(f"WC Policy #: {wc_policy}")
    referral = _referral_line(raw)
    if referral:
        note_lines.append(referral)

    if note_lines:
        column_values[NOTES_COLUMN] = "\n".join(note_lines)

    return column_values
