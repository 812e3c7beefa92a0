"""Main FastAPI application"""
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from vendor_intake.config import get_settings
from vendor_intake.middleware.cors import setup_cors
from vendor_intake.middleware.error_handler import ErrorHandlerMiddleware
from vendor_intake.middleware.rate_limit import RateLimitExceeded, enforce_rate_limit
from vendor_intake.utils.rate_limiter import RateLimiter
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)
settings = get_settings()

# One limiter per process, shared by every /api request
rate_limiter = RateLimiter(
    max_requests=settings.rate_limit_max_requests,
    window_seconds=settings.rate_limit_window_ms // 1000,
    storage_uri=settings.rate_limit_storage_uri,
)

# APScheduler setup
scheduler = None


def setup_scheduler():
    """Initialize the background scheduler that resets the rate-limit window"""
    global scheduler
    try:
        from apscheduler.schedulers.background import BackgroundScheduler

        scheduler = BackgroundScheduler()

        scheduler.add_job(
            rate_limiter.reset,
            'interval',
            seconds=rate_limiter.window_seconds,
            id='reset_rate_limit',
            name='Reset API rate-limit window',
            replace_existing=True
        )

        scheduler.start()
        logger.info(f"Background scheduler started - resetting rate limit every {rate_limiter.window_seconds:.0f}s")
    except Exception as e:
        logger.error(f"Failed to start scheduler: {e}")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully"""
    global scheduler
    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(
        f"Vendor intake backend starting - environment: {settings.environment}, "
        f"Monday.com API: {'configured' if settings.monday_api_key else 'NOT configured'}, "
        f"board: {settings.monday_board_id or 'NOT set'}, CORS: {settings.cors_origins}"
    )
    setup_scheduler()
    yield
    # Shutdown
    shutdown_scheduler()


# Create FastAPI app with lifespan
app = FastAPI(
    title="BuildCore Vendor Intake API",
    description="Receives vendor applications and pushes them to the Monday.com vendor board",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)
app.state.rate_limiter = rate_limiter

# Setup CORS
setup_cors(app)

# Add error handling middleware
app.add_middleware(ErrorHandlerMiddleware)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    current = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": current.environment,
        "monday_connected": bool(current.monday_api_key),
        "board_configured": bool(current.monday_board_id),
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "BuildCore Vendor Intake API",
        "version": "1.0.0",
        "docs": "/docs"
    }


# Import and include routers
from vendor_intake.routers import connection, vendor_applications

api_dependencies = [Depends(enforce_rate_limit)]
app.include_router(connection.router, prefix="/api", tags=["Monday.com"], dependencies=api_dependencies)
app.include_router(vendor_applications.router, prefix="/api", tags=["Vendor Applications"], dependencies=api_dependencies)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3001)
