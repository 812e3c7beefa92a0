"""Monday.com GraphQL API client"""
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from vendor_intake.config import Settings, get_settings
from vendor_intake.models.vendor import ColumnDescriptor, ColumnValues, UploadResult, VendorItem
from vendor_intake.services.column_mappings import FILES_COLUMN, TAX_ID_COLUMN
from vendor_intake.services.transformer import display_name

logger = logging.getLogger(__name__)

# The board is scanned, not queried by key; this is the page the scan covers
DUPLICATE_SCAN_LIMIT = 500


class MondayError(Exception):
    """Base error for board API calls"""


class MondayAPIError(MondayError):
    """The board API answered with a GraphQL error"""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class MondayTransportError(MondayError):
    """The board API could not be reached or answered with a bad status"""


TEST_CONNECTION_QUERY = """
query TestConnection($boardId: [ID!]) {
  me { name email }
  boards(ids: $boardId) {
    id
    name
    columns { id title type }
  }
}
"""

FIND_BY_TAX_ID_QUERY = """
query FindVendor($boardId: [ID!], $limit: Int!, $columnIds: [String!]) {
  boards(ids: $boardId) {
    items_page(limit: $limit) {
      items {
        id
        name
        column_values(ids: $columnIds) { id text }
      }
    }
  }
}
"""

CREATE_ITEM_MUTATION = """
mutation CreateVendorItem($boardId: ID!, $itemName: String!, $columnValues: JSON!) {
  create_item(board_id: $boardId, item_name: $itemName, column_values: $columnValues) {
    id
    name
  }
}
"""

UPDATE_ITEM_MUTATION = """
mutation UpdateVendorItem($boardId: ID!, $itemId: ID!, $columnValues: JSON!) {
  change_multiple_column_values(board_id: $boardId, item_id: $itemId, column_values: $columnValues) {
    id
    name
  }
}
"""

RENAME_ITEM_MUTATION = """
mutation RenameVendorItem($boardId: ID!, $itemId: ID!, $name: String!) {
  change_simple_column_value(board_id: $boardId, item_id: $itemId, column_id: "name", value: $name) {
    id
    name
  }
}
"""

LIST_COLUMNS_QUERY = """
query BoardColumns($boardId: [ID!]) {
  boards(ids: $boardId) {
    columns { id title type settings_str }
  }
}
"""


class MondayClient:
    """
    Thin wrapper over the board's GraphQL endpoint.

    Every method is one round trip with no retry. Remote GraphQL errors raise
    MondayAPIError with the remote message; network failures and non-2xx
    statuses raise MondayTransportError.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        board_id: str,
        api_version: str = "2024-01",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.board_id = board_id
        self.api_version = api_version
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "MondayClient":
        return cls(
            api_url=settings.monday_api_url,
            api_key=settings.monday_api_key,
            board_id=settings.monday_board_id,
            api_version=settings.monday_api_version,
        )

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a query or mutation and return its ``data`` object"""
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    headers={
                        "Authorization": self.api_key,
                        "Content-Type": "application/json",
                        "API-Version": self.api_version,
                    },
                    json={"query": query, "variables": variables or {}},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Monday.com API returned {e.response.status_code}: {e.response.text}")
            raise MondayTransportError(f"Monday.com API returned status {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Monday.com API request failed: {e}")
            raise MondayTransportError(f"Could not reach Monday.com API: {e}") from e
        except ValueError as e:
            raise MondayTransportError("Monday.com API returned a non-JSON response") from e

        errors = payload.get("errors") or payload.get("error_message")
        if errors:
            if isinstance(errors, str):
                errors = [{"message": errors}]
            logger.error(f"Monday.com API errors: {errors}")
            raise MondayAPIError(errors[0].get("message", "Unknown Monday.com error"), errors)

        return payload.get("data") or {}

    def _board(self, data: Dict[str, Any]) -> Dict[str, Any]:
        boards = data.get("boards") or []
        if not boards:
            raise MondayAPIError(f"Board {self.board_id} not found")
        return boards[0]

    async def test_connection(self) -> Dict[str, Any]:
        """Current user and board summary"""
        data = await self.execute(TEST_CONNECTION_QUERY, {"boardId": [self.board_id]})
        return {"user": data.get("me"), "board": self._board(data)}

    async def find_by_tax_id(self, tax_id: Optional[str]) -> Optional[VendorItem]:
        """
        Find an existing vendor by Tax ID

        Scans the first page of board items and compares the tax column by exact
        trimmed equality.

        Args:
            tax_id: Business Tax ID to search for

        Returns:
            Matching item or None
        """
        if not tax_id or not tax_id.strip():
            return None
        wanted = tax_id.strip()

        data = await self.execute(FIND_BY_TAX_ID_QUERY, {
            "boardId": [self.board_id],
            "limit": DUPLICATE_SCAN_LIMIT,
            "columnIds": [TAX_ID_COLUMN],
        })
        items = (self._board(data).get("items_page") or {}).get("items") or []

        for item in items:
            for column in item.get("column_values") or []:
                text = column.get("text")
                if column.get("id") == TAX_ID_COLUMN and text and text.strip() == wanted:
                    logger.info(f"Found existing vendor: {item['name']} (ID: {item['id']})")
                    return VendorItem(id=str(item["id"]), name=item["name"])

        return None

    async def create_item(self, vendor_name: str, column_values: ColumnValues, complete: bool = True) -> VendorItem:
        """Create a vendor item, prefixing the name when the submission is incomplete"""
        item_name = display_name(vendor_name, complete)
        logger.info(
            f"Creating Monday.com item '{item_name}' on board {self.board_id} "
            f"with {len(column_values)} column values"
        )

        data = await self.execute(CREATE_ITEM_MUTATION, {
            "boardId": self.board_id,
            "itemName": item_name,
            "columnValues": json.dumps(column_values),
        })
        item = data.get("create_item")
        if not item or not item.get("id"):
            raise MondayAPIError(f"Monday.com did not return the created item for '{item_name}'")
        return VendorItem(id=str(item["id"]), name=item.get("name") or item_name)

    async def update_item(self, item_id: str, column_values: ColumnValues) -> None:
        await self.execute(UPDATE_ITEM_MUTATION, {
            "boardId": self.board_id,
            "itemId": item_id,
            "columnValues": json.dumps(column_values),
        })
        logger.info(f"Updated Monday.com item: {item_id}")

    async def rename_item(self, item_id: str, name: str) -> None:
        await self.execute(RENAME_ITEM_MUTATION, {
            "boardId": self.board_id,
            "itemId": item_id,
            "name": name,
        })
        logger.info(f"Updated item name to: {name}")

    async def list_columns(self) -> List[ColumnDescriptor]:
        data = await self.execute(LIST_COLUMNS_QUERY, {"boardId": [self.board_id]})
        return [ColumnDescriptor(**column) for column in self._board(data).get("columns") or []]

    async def attach_file_links(self, item_id: str, uploads: List[UploadResult]) -> bool:
        """
        Write archived file links to the item's Files column

        Links are HTML anchors, which render as clickable in long text columns.
        Failures are logged and reported through the return value only.
        """
        archived = [upload for upload in uploads if upload.success and upload.link]
        if not archived:
            return False
        links = "<br>".join(
            f'<a href="{upload.link}" target="_blank">{upload.file_name or upload.display_name}</a>'
            for upload in archived
        )

        try:
            await self.update_item(item_id, {FILES_COLUMN: links})
        except MondayError as e:
            logger.error(f"Failed to add file links to Files column: {e}")
            return False

        logger.info(f"Added {len(archived)} file links to Monday.com item {item_id}")
        return True


def get_monday_client() -> MondayClient:
    """Dependency returning a client for the configured board"""
    return MondayClient.from_settings(get_settings())
