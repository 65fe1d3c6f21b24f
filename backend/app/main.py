"""
Main Application Entry Point
============================

Responsibilities:
- Initialize FastAPI application
- Configure middleware stack
- Register API routers
- Set up exception handlers
- Provide health check endpoints

IMPORTANT:
    Database tables are managed via Alembic migrations.
    Do NOT use Base.metadata.create_all() in production.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import InbmException
from app.core.logging import configure_logging, get_logger
from app.db.session import check_database_connection

# Import models so every table is registered on the metadata
from app import models  # noqa: F401

from app.middleware.request_middleware import (
    LoginRateLimitMiddleware,
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)
from app.routes import (
    auth_routes,
    client_routes,
    dashboard_routes,
    document_routes,
    lookup_routes,
    organization_routes,
    policy_routes,
    report_routes,
    user_routes,
    vehicle_routes,
)

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Application Lifespan Handler
# =====================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: configure logging and check the database.
    Shutdown: log completion.
    """
    configure_logging()
    logger.info(
        "Application starting",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    if not check_database_connection():
        logger.error("Database connection failed on startup")
    else:
        logger.info("Database connection established")

    yield

    logger.info("Application shutdown complete")


# =====================================
# FastAPI App Initialization
# =====================================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    INBM - Administrative console backend

    ## Features

    * **Registrations**: clients, organizations, vehicles, insurance policies
    * **Lookup tables**: insurers, coverages, assistances, entity types, vehicle models
    * **Documents**: uploads kept in Supabase Storage
    * **Reports**: filtered listings with export requests

    ## Authentication

    Use `/auth/login` to obtain a Supabase access token and send it in the
    `Authorization` header as `Bearer <token>`.

    ## Authorization

    Roles (in order of increasing permissions):
    * `client`: no console access
    * `operator`: read and edit records, run reports
    * `supervisor`: delete records, manage lookup tables
    * `admin`: manage users
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)


# =====================================
# Middleware
# =====================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.cors_methods_list,
    allow_headers=settings.cors_headers_list,
    expose_headers=["X-Request-ID", "Content-Disposition"],
    max_age=3600,
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(LoginRateLimitMiddleware)
app.add_middleware(RequestContextMiddleware)


# =====================================
# Exception Handlers
# =====================================

@app.exception_handler(InbmException)
async def inbm_exception_handler(request: Request, exc: InbmException):
    """Convert domain exceptions to the standard error body."""
    logger.warning(
        "Request failed",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    logger.warning("Request validation error", path=request.url.path, errors=errors)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": "Validation error", "details": {"errors": errors}},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.

    The exception text is only returned outside production.
    """
    logger.error(
        "Unhandled exception",
        exception_type=type(exc).__name__,
        message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    if settings.is_production:
        content = {"message": "An unexpected error occurred", "details": {}}
    else:
        content = {"message": str(exc), "details": {"type": type(exc).__name__}}
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


# =====================================
# Register Routers
# =====================================

app.include_router(auth_routes.router)
app.include_router(user_routes.router)
app.include_router(client_routes.router)
app.include_router(organization_routes.router)
app.include_router(vehicle_routes.router)
app.include_router(policy_routes.router)
app.include_router(document_routes.router)
app.include_router(lookup_routes.router)
app.include_router(report_routes.router)
app.include_router(dashboard_routes.router)


# =====================================
# Health Check Endpoints
# =====================================

@app.get("/", tags=["Health"], summary="Basic Health Check")
def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get(
    "/health",
    tags=["Health"],
    summary="Detailed Health Check",
    description="Returns health status including database connectivity.",
)
def detailed_health_check():
    db_healthy = check_database_connection()
    return {
        "status": "healthy" if db_healthy else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "checks": {
            "database": "healthy" if db_healthy else "unhealthy",
        },
    }


@app.get(
    "/ready",
    tags=["Health"],
    summary="Readiness Check",
    description="200 when the database is reachable, 503 otherwise.",
)
def readiness_check():
    if not check_database_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready"}
