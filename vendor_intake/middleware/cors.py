"""CORS middleware configuration"""
from fastapi.middleware.cors import CORSMiddleware
from vendor_intake.config import get_settings

settings = get_settings()


def setup_cors(app):
    """
    Configure CORS middleware for the application

    The vendor form only reads and posts, so only GET and POST are allowed.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )
