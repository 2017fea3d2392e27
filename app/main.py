# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the SiteOps API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.exceptions import (
    SiteOpsException,
    siteops_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    admin,
    health,
    material,
    public,
    reserve,
    settlement,
    sheet_access,
    sheets,
    sites,
    trackers,
)
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown. The Supabase client is created lazily
    on first use, so startup only reports configuration.
    """
    logger.info(f"Starting SiteOps API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.SUPABASE_JWT_SECRET:
        logger.warning("SUPABASE_JWT_SECRET is not set; only JWKS-signed tokens will verify")

    yield

    logger.info("Shutting down SiteOps API")


# Create FastAPI application
app = FastAPI(
    title="SiteOps API",
    description="""
## Site Operations API

Backend for site/asset tracking: spreadsheet-style data sheets, trackers,
reserve and settlement MR lists, material inventory, site folders and user
administration. Data lives in Supabase (Postgres, Auth, Storage); this API
verifies Supabase access tokens and performs the table reads and writes.

### Authentication

Send the Supabase access token as `Authorization: Bearer <token>`.
Public sheet links (`/api/v1/public/sheets/{access_key}`) need no token.

### Errors

Every error is JSON: `{"error": "...", "code": "...", "suggestion"?: "..."}`.
""",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Current user profile and token checks"},
        {"name": "Sheets", "description": "Spreadsheet sheets, columns, rows and cells"},
        {"name": "Sharing", "description": "Sheet access grants and public links"},
        {"name": "Public", "description": "Read-only shared sheets (no sign-in)"},
        {"name": "Trackers", "description": "Habit and goal trackers"},
        {"name": "Reserve", "description": "Personal reserve MR-number list"},
        {"name": "Settlement", "description": "Shared settlement MR-number list"},
        {"name": "Material", "description": "Material inventory"},
        {"name": "Sites", "description": "Site folders and permissions"},
        {"name": "Admin", "description": "Read-only user administration"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(SiteOpsException)
async def handle_siteops_exception(request: Request, exc: SiteOpsException):
    """Handle custom SiteOps exceptions."""
    return await siteops_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request body/path/query validation failures."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Sheet endpoints
app.include_router(
    sheets.router,
    prefix="/api/v1/sheets",
    tags=["Sheets"]
)

# Sheet sharing endpoints
app.include_router(
    sheet_access.router,
    prefix="/api/v1/sheets",
    tags=["Sharing"]
)

# Public sheet views
app.include_router(
    public.router,
    prefix="/api/v1/public",
    tags=["Public"]
)

# Tracker endpoints
app.include_router(
    trackers.router,
    prefix="/api/v1/trackers",
    tags=["Trackers"]
)

# Reserve list endpoints
app.include_router(
    reserve.router,
    prefix="/api/v1/reserve",
    tags=["Reserve"]
)

# Settlement list endpoints
app.include_router(
    settlement.router,
    prefix="/api/v1/settlement",
    tags=["Settlement"]
)

# Material inventory endpoints
app.include_router(
    material.router,
    prefix="/api/v1/material",
    tags=["Material"]
)

# Site folder endpoints
app.include_router(
    sites.router,
    prefix="/api/v1/sites",
    tags=["Sites"]
)

# Admin endpoints
app.include_router(
    admin.router,
    prefix="/api/v1/admin",
    tags=["Admin"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "SiteOps API",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
