"""Board connection check"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
import logging

from vendor_intake.services.monday_client import MondayClient, MondayError, get_monday_client

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/test-connection")
async def test_connection(monday: MondayClient = Depends(get_monday_client)):
    """Check the API key and board id against Monday.com"""
    try:
        result = await monday.test_connection()
    except MondayError as e:
        logger.error(f"Monday.com connection test failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": str(e),
                "details": "Check your MONDAY_API_KEY and MONDAY_BOARD_ID in .env file"
            }
        )

    return {"success": True, "data": result}
