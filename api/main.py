"""
FastAPI Backend for ICEROUTE Great Lakes Ice Navigation.

Provides REST API endpoints for:
- Ice concentration lookups and overlay images per forecast day
- Timeline playback (slider position to day)
- Chokepoint hazards and icebreaker stations
- Route drawing, ice analysis along routes and GPX export

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from api.config import settings
from api.middleware import get_request_id, setup_middleware
from api.routers import ice, routes
from api.schemas import HealthResponse
from api.state import get_app_state
from iceroute import __version__
from iceroute.errors import DrawingInactiveError, IceRouteError, MalformedGridError, OffWaterError

# JSON request logs are self-contained
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(message)s',
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Load every configured day before serving the first request."""
    state = get_app_state()
    logger.info(f"ICEROUTE API ready, days loaded: {state.catalog.days}")
    yield


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """
    Application factory for ICEROUTE API.

    Creates and configures the FastAPI application with middleware,
    exception handlers and routers.

    Returns:
        FastAPI: Configured application instance
    """
    application = FastAPI(
        title="ICEROUTE API",
        description="""
## Great Lakes Ice Navigation API

Daily ice concentration grids, overlay images and icebreaker route
planning for the Great Lakes.

### Features
- Point lookup of ice concentration per forecast day
- Georeferenced RGBA overlay images
- Chokepoint ice hazard assessment
- Route drawing with on-water validation
- Route ice analysis and GPX export
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    setup_middleware(application, debug=settings.is_development or settings.debug)

    # CORS middleware - use configured origins only (NO WILDCARDS)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_credentials,
        allow_methods=settings.cors_methods_list,
        allow_headers=settings.cors_headers_list,
    )

    register_exception_handlers(application)

    application.include_router(ice.router)
    application.include_router(routes.router)
    application.add_api_route("/", root, methods=["GET"], tags=["System"])
    application.add_api_route(
        "/api/health", health_check, methods=["GET"], tags=["System"],
        response_model=HealthResponse,
    )

    return application


def register_exception_handlers(application: FastAPI) -> None:
    """Map domain errors to HTTP responses."""

    @application.exception_handler(OffWaterError)
    async def off_water_handler(request: Request, exc: OffWaterError):
        return JSONResponse(
            status_code=422,
            content={
                "error": "Off water",
                "detail": str(exc),
                "points": [list(p) for p in exc.points],
            },
        )

    @application.exception_handler(DrawingInactiveError)
    async def drawing_inactive_handler(request: Request, exc: DrawingInactiveError):
        return JSONResponse(
            status_code=409,
            content={"error": "Drawing not active", "detail": str(exc)},
        )

    @application.exception_handler(MalformedGridError)
    async def malformed_grid_handler(request: Request, exc: MalformedGridError):
        logger.error(f"Malformed ice grid on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "Malformed ice data", "detail": str(exc), "request_id": get_request_id()},
        )

    @application.exception_handler(IceRouteError)
    async def iceroute_error_handler(request: Request, exc: IceRouteError):
        return JSONResponse(status_code=400, content={"error": type(exc).__name__, "detail": str(exc)})

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": exc.errors()})


# ============================================================================
# API Endpoints - Core
# ============================================================================

async def root():
    """
    API root endpoint.

    Returns basic API information and available endpoint categories.
    """
    return {
        "name": "ICEROUTE API",
        "version": __version__,
        "status": "operational",
        "docs": "/api/docs",
        "endpoints": {
            "health": "/api/health",
            "days": "/api/days",
            "ice": "/api/ice/{day}/...",
            "timeline": "/api/timeline/resolve",
            "chokepoints": "/api/chokepoints",
            "icebreakers": "/api/icebreakers",
            "water": "/api/water",
            "route": "/api/route/...",
        },
    }


async def health_check():
    """
    Health check endpoint.

    Returns:
        - status: healthy when at least one day is loaded, else degraded
        - timestamp: Current UTC timestamp
        - version: API version
        - component details (loaded days, raster cache, route state)
    """
    result = get_app_state().health_check()
    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        **result,
    )


# Create the application
app = create_app()


# ============================================================================
# Run Server
# ============================================================================

def main():
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
