"""
Check that every column id in the mapping table exists on the configured board.

Usage:
    python -m vendor_intake.verify_columns
"""
import asyncio
import logging
import sys
from typing import Dict, List

from vendor_intake.config import get_settings
from vendor_intake.models.vendor import ColumnDescriptor
from vendor_intake.services.column_mappings import all_column_ids
from vendor_intake.services.monday_client import MondayClient, MondayError

logger = logging.getLogger(__name__)


def find_missing_columns(columns: List[ColumnDescriptor]) -> Dict[str, str]:
    """Readable name -> column id for mapped columns the board does not have"""
    present = {column.id for column in columns}
    return {name: column_id for name, column_id in all_column_ids().items() if column_id not in present}


async def verify_columns(monday: MondayClient) -> int:
    columns = await monday.list_columns()

    print(f"Board {monday.board_id}: {len(columns)} columns")
    print("-" * 80)
    for column in columns:
        print(f"{column.title:<40} | {column.id:<30} | {column.type}")
    print("-" * 80)

    missing = find_missing_columns(columns)
    if not missing:
        print("All mapped columns exist on the board.")
        return 0

    print(f"{len(missing)} mapped column(s) missing from the board:")
    for name, column_id in sorted(missing.items()):
        print(f"  {name:<40} {column_id}")
    return 1


def main() -> int:
    logging.basicConfig(level=logging.WARNING)
    monday = MondayClient.from_settings(get_settings())
    try:
        return asyncio.run(verify_columns(monday))
    except MondayError as e:
        print(f"Failed to verify columns: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
