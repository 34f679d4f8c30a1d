"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from glass_mapper.config import settings
from glass_mapper.api.limiter import limiter
from glass_mapper.middleware.error_handler import ErrorHandlerMiddleware
from glass_mapper.api.v1.routers import projects, sites

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Drawing config: snap_threshold_px={settings.snap_threshold_px}, "
                f"walk_speed_m_per_min={settings.walk_speed_m_per_min}")
    logger.info(f"Site storage: {settings.site_store_base_url}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    from glass_mapper.infrastructure.site_store_client import get_store_client
    logger.info("Shutting down application...")
    client = get_store_client()
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Site tracing and progress tracking API

    Trace a path or polygon over a map, derive its length and walk time,
    and track construction progress against it.

    ## Features

    - **Shape capture**: Add, undo and clear vertices, finish the shape and
      toggle between open path and closed polygon
    - **Snapping**: Clicks close to an existing vertex on screen reuse its
      exact coordinates, at any zoom level
    - **Metrics**: Great-circle length, vertex count and walk time, recomputed
      on every edit
    - **Progress ledger**: Daily progress claims reviewed once, with completion
      percentage and days remaining from the contractor commitment
    - **Rate Limiting**: Protects the API from abuse

    Edits happen in an in-memory session per site and reach storage only on save.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(projects.router, prefix="/api/v1")
app.include_router(sites.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
