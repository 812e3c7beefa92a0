"""
Test configuration and fixtures.

Provides:
- A complete, valid vendor submission
- In-memory fakes for the Monday.com board and the Drive archive
- HTTPX AsyncClient wired to the app with dependency overrides
"""
from datetime import date, timedelta
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from vendor_intake.config import Settings, get_settings
from vendor_intake.main import app, rate_limiter
from vendor_intake.models.vendor import ColumnDescriptor, UploadResult, VendorItem
from vendor_intake.services.drive_service import get_drive_service
from vendor_intake.services.monday_client import MondayAPIError, get_monday_client
from vendor_intake.services.transformer import display_name


# =============================================================================
# Submission fixtures
# =============================================================================

TODAY = date(2026, 3, 10)


@pytest.fixture
def today() -> date:
    return TODAY


def build_submission(expires: date) -> Dict:
    return {
        "vendorName": "Acme Plumbing LLC",
        "taxId": "12-3456789",
        "numCrews": "3",
        "primaryTrade": "Plumbing",
        "mainContactName": "John Smith",
        "mainContactPhone": "(555) 123-4567",
        "mainContactEmail": "john@acmeplumbing.com",
        "additionalContactName": "Jane Doe",
        "additionalContactEmail": "jane@acmeplumbing.com",
        "additionalPhone": "555.987.6543",
        "vendorAddress": "123 Main St, Dallas, TX 75201",
        "primaryMarket": "Dallas",
        "secondaryMarkets": ["Houston", "San Antonio"],
        "serviceLine": ["SFR", "Commercial"],
        "services": ["Plumbing", "HVAC", "Water Restoration"],
        "willTravel": "Yes",
        "travelRadius": "50",
        "travelPeople": "2",
        "travelNotes": "Weekends with advance notice",
        "glExpiration": expires.isoformat(),
        "glPolicyNumber": "GL123456789",
        "wcExpiration": expires.isoformat(),
        "wcPolicyNumber": "WC987654321",
        "certifications": "Licensed Master Plumber",
        "paymentMethod": "Check",
        "referralSource": "Website",
        "notes": "Available immediately",
        "certification": "true",
    }


@pytest.fixture
def submission(today: date) -> Dict:
    """Fully populated, valid submission relative to the fixed test date"""
    return build_submission(today + timedelta(days=365))


@pytest.fixture
def live_submission() -> Dict:
    """Valid submission relative to the real current date, for HTTP tests"""
    return build_submission(date.today() + timedelta(days=365))


# =============================================================================
# Remote fakes
# =============================================================================

class FakeMondayClient:
    """In-memory board with the MondayClient interface"""

    board_id = "123"

    def __init__(self):
        self.items: List[Dict] = []
        self.calls: List[str] = []
        self.file_links: Dict[str, List[UploadResult]] = {}
        self.fail_with: Optional[str] = None
        self._next_id = 1000

    def _check(self, call: str):
        self.calls.append(call)
        if self.fail_with:
            raise MondayAPIError(self.fail_with)

    async def test_connection(self):
        self._check("test_connection")
        return {"user": {"name": "Test User", "email": "test@example.com"}, "board": {"id": self.board_id}}

    async def find_by_tax_id(self, tax_id):
        self._check("find_by_tax_id")
        for item in self.items:
            if tax_id and item["tax_id"] == tax_id.strip():
                return VendorItem(id=item["id"], name=item["name"])
        return None

    async def create_item(self, vendor_name, column_values, complete=True):
        self._check("create_item")
        self._next_id += 1
        item = {
            "id": str(self._next_id),
            "name": display_name(vendor_name, complete),
            "tax_id": column_values.get("business_tax___mknb862c", ""),
            "columns": dict(column_values),
        }
        self.items.append(item)
        return VendorItem(id=item["id"], name=item["name"])

    def _item(self, item_id):
        return next(item for item in self.items if item["id"] == item_id)

    async def update_item(self, item_id, column_values):
        self._check("update_item")
        self._item(item_id)["columns"].update(column_values)

    async def rename_item(self, item_id, name):
        self._check("rename_item")
        self._item(item_id)["name"] = name

    async def list_columns(self):
        self._check("list_columns")
        return [ColumnDescriptor(id="name", title="Name", type="name")]

    async def attach_file_links(self, item_id, uploads):
        self.calls.append("attach_file_links")
        self.file_links[item_id] = list(uploads)
        return True


class FakeDriveService:
    """Records archived files; files named ``fail.*`` fail to upload"""

    def __init__(self, raise_error: Optional[Exception] = None):
        self.archived: List = []
        self.raise_error = raise_error

    async def archive(self, vendor_name, files, submitted_on=None):
        if self.raise_error:
            raise self.raise_error
        results = []
        for attached in files:
            self.archived.append((vendor_name, attached))
            if attached.file_name.startswith("fail"):
                results.append(UploadResult(
                    field=attached.field, display_name=attached.field,
                    file_name=attached.file_name, success=False, error="quota exceeded",
                ))
            else:
                results.append(UploadResult(
                    field=attached.field, display_name=attached.field, file_name=attached.file_name,
                    success=True, link=f"https://drive.example.com/{attached.file_name}",
                ))
        return results


# =============================================================================
# App fixtures
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        monday_api_key="test-key",
        monday_board_id="123",
        enable_duplicate_check=True,
        update_existing_vendors=True,
        max_file_size_mb=1,
    )


@pytest.fixture
def monday() -> FakeMondayClient:
    return FakeMondayClient()


@pytest.fixture
def drive() -> FakeDriveService:
    return FakeDriveService()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
async def client(settings, monday, drive) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient against the app with remote services replaced by fakes"""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_monday_client] = lambda: monday
    app.dependency_overrides[get_drive_service] = lambda: drive

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as c:
        yield c

    app.dependency_overrides.clear()
