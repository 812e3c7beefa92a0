"""
Static mapping between vendor application form fields and Monday.com board columns.

Column ids are specific to the vendor board. Run ``python -m vendor_intake.verify_columns``
after editing the board to check they still exist.
"""
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict


# What the transformer does with a value it has no column for ("drop" or "note")
UNKNOWN_VALUE_POLICY = "drop"

# What the transformer does with an absent label field ("default" or "omit")
MISSING_FIELD_POLICY = "default"


class Shape(str, Enum):
    """Value-wrapping convention a column type requires on write"""
    TEXT = "text"
    LABEL = "label"
    MULTI_LABEL = "multi_label"
    EMAIL = "email"
    DATE = "date"
    NUMERIC = "numeric"
    BOOLEAN_LABEL = "boolean_label"


class FieldMapping(BaseModel):
    """One form field -> board column rule"""
    model_config = ConfigDict(frozen=True)

    key: str
    field: str
    column_id: str
    shape: Shape
    default: Optional[Any] = None
    # MULTI_LABEL: 1 means the column takes a single label
    max_labels: int = 1
    notes_prefix: Optional[str] = None
    # LABEL: form value -> board label
    value_map: Optional[Dict[str, str]] = None
    # LABEL: write-in field used when the selected value is "Other"
    other_field: Optional[str] = None
    # BOOLEAN_LABEL: any non-empty value means yes
    when_present: bool = False
    true_label: str = "Yes"
    false_label: str = "No"


# System columns
STATUS_COLUMN = "status_mknbjepv"
SOURCE_COLUMN = "color_mkw8j9vt"
DATE_CREATED_COLUMN = "date_mknj9jy0"
NOTES_COLUMN = "notes_mknbkfs0"
FILES_COLUMN = "long_text_mkwgnz91"
TAX_ID_COLUMN = "business_tax___mknb862c"

DEFAULT_STATUS_LABEL = "Pending"
SOURCE_LABEL = "BC Website"

DEFAULT_MARKET = "Dallas"
DEFAULT_TRADE = "General Contractor"
DEFAULT_PAYMENT_METHOD = "ACH"
DEFAULT_SERVICE_LINE = "SFR"
DEFAULT_CREW_COUNT = 1

MAX_DROPDOWN_LABELS = 10

PAYMENT_METHOD_LABELS = {
    "ACH": "ACH",
    "Check": "CHECK",
    "Virtual Card": "Virtual Card",
}


FIELD_MAPPINGS: Tuple[FieldMapping, ...] = (
    # Text
    FieldMapping(key="businessTaxId", field="taxId", column_id=TAX_ID_COLUMN, shape=Shape.TEXT),
    FieldMapping(key="mainContactName", field="mainContactName", column_id="contact_name_mknb7bpw", shape=Shape.TEXT),
    FieldMapping(key="additionalContactName", field="additionalContactName", column_id="text_mknbhej1", shape=Shape.TEXT),
    FieldMapping(key="address", field="vendorAddress", column_id="address_mknbb1r0", shape=Shape.TEXT),
    FieldMapping(key="certifications", field="certifications", column_id="certifications_mknb9hp6", shape=Shape.TEXT),
    FieldMapping(key="travelNotes", field="travelNotes", column_id="long_text_mkq15as", shape=Shape.TEXT),
    # Phones are plain text columns on this board
    FieldMapping(key="mainPhone", field="mainContactPhone", column_id="phone___mknbzy27", shape=Shape.TEXT),
    FieldMapping(key="additionalPhone", field="additionalPhone", column_id="additional_phone___mknb9e36", shape=Shape.TEXT),

    # Email
    FieldMapping(key="mainEmail", field="mainContactEmail", column_id="email_mknbjaey", shape=Shape.EMAIL),
    FieldMapping(key="additionalEmail", field="additionalContactEmail", column_id="office_email_mknb9g20", shape=Shape.EMAIL),

    # Numbers
    FieldMapping(key="numCrews", field="numCrews", column_id="__of_crews_mknb728w", shape=Shape.NUMERIC,
                 default=DEFAULT_CREW_COUNT),
    FieldMapping(key="travelRadius", field="travelRadius", column_id="text_mkq1gg2q", shape=Shape.NUMERIC, default=0),
    FieldMapping(key="travelPeople", field="travelPeople", column_id="text_mkq1h1bg", shape=Shape.NUMERIC, default=0),

    # Single labels
    FieldMapping(key="primaryMarket", field="primaryMarket", column_id="market_mknbpdg8", shape=Shape.LABEL,
                 default=DEFAULT_MARKET),
    FieldMapping(key="primaryTrade", field="primaryTrade", column_id="color_mkp06wz8", shape=Shape.LABEL,
                 default=DEFAULT_TRADE, other_field="primaryTradeOther"),
    FieldMapping(key="paymentMethod", field="paymentMethod", column_id="color_mknbqdny", shape=Shape.LABEL,
                 default=DEFAULT_PAYMENT_METHOD, value_map=PAYMENT_METHOD_LABELS),

    # Multi-select fields; table order is the order of their notes lines
    FieldMapping(key="serviceLine", field="serviceLine", column_id="color_mknsnftt", shape=Shape.MULTI_LABEL,
                 default=DEFAULT_SERVICE_LINE, max_labels=1, notes_prefix="Service Lines"),
    FieldMapping(key="secondaryMarkets", field="secondaryMarkets", column_id="additional_markets_mknb88ce",
                 shape=Shape.MULTI_LABEL, max_labels=MAX_DROPDOWN_LABELS, notes_prefix="Secondary Markets"),

    # Dates
    FieldMapping(key="glExpiration", field="glExpiration", column_id="coi_expiration_date__mknbah9e", shape=Shape.DATE),
    FieldMapping(key="wcExpiration", field="wcExpiration", column_id="date_mknt4qgc", shape=Shape.DATE),

    # Yes/No labels
    FieldMapping(key="willTravel", field="willTravel", column_id="color_mkq1qzbz", shape=Shape.BOOLEAN_LABEL),
    FieldMapping(key="glReceived", field="glExpiration", column_id="cois_received__mknbnv4c",
                 shape=Shape.BOOLEAN_LABEL, when_present=True),
    FieldMapping(key="wcReceived", field="wcExpiration", column_id="color_mknt71s4",
                 shape=Shape.BOOLEAN_LABEL, when_present=True),
)

COLUMN_MAPPINGS: Dict[str, FieldMapping] = {mapping.key: mapping for mapping in FIELD_MAPPINGS}


# Trade checkbox columns, one per service the form offers
SERVICE_COLUMNS: Dict[str, str] = {
    "Cabinets": "cabinets_mknb8tjp",
    "Carpentry": "carpentry_mknb4fh7",
    "Carpets": "color_mkp0h6dx",
    "Cleaning": "cleaning_mknb7sn1",
    "Countertops": "color_mknzjyg6",
    "Demo": "demo_mknb3j9z",
    "Drywall": "drywall_mknbkyqp",
    "Duct Cleaning": "color_mkp0y8ek",
    "Electrical": "electrical_mknb3c41",
    "Flooring": "flooring_mknb8cd",
    "Foundation": "color_mkp0tq8h",
    "Garage Door": "color_mkp0h6g",
    "General Contractor": "color_mknpfcry",
    "Glass/Windows": "color_mkp0daf8",
    "Handyman/Small Jobs": "color_mkp0mq7g",
    "HVAC": "hvac_mknbd7gd",
    "Landscaping": "color_mkp0t492",
    "Painting": "paint_mknb1j8g",
    "Pest Control": "pest_control_mknbnz61",
    "Plumbing": "plumbing_mknb347f",
    "Roofing": "roofing_mknbcej7",
    "Rain Gutters": "color_mkp07dhg",
    "Septic": "color_mkp0vqta",
    "Tile": "tile_mknby26b",
    "Water Restoration": "color_mkp06rfe",
}

OTHER_SERVICE = "Other"


# Columns written outside the field table
SYSTEM_COLUMNS: Dict[str, str] = {
    "status": STATUS_COLUMN,
    "source": SOURCE_COLUMN,
    "dateCreated": DATE_CREATED_COLUMN,
    "notes": NOTES_COLUMN,
    "files": FILES_COLUMN,
}


def all_column_ids() -> Dict[str, str]:
    """Readable name -> column id for every column this service writes"""
    columns = dict(SYSTEM_COLUMNS)
    columns.update({mapping.key: mapping.column_id for mapping in FIELD_MAPPINGS})
    columns.update({f"service:{name}": column_id for name, column_id in SERVICE_COLUMNS.items()})
    return columns
