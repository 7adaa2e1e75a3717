"""
Transit Incident Desk - FastAPI Application Entry Point

Members of the public report transport incidents; officials triage them.

DESIGN PRINCIPLES:
- One authorization policy; no role checks inlined in routes
- Validate before writing; no partial writes
- Side effects of creation (notifications) are best-effort
- Clients poll for notifications; nothing is pushed
"""

import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import IncidentDeskError
from app.core.settings import settings
from app.config.firebase import initialize_firestore
from app.routes import analytics, facilities, health, incidents, notifications

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Incident reporting and triage for transport-related incidents",
    debug=settings.DEBUG
)


@app.exception_handler(IncidentDeskError)
async def domain_exception_handler(request: Request, exc: IncidentDeskError):
    """Render domain errors with their stable kind."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.kind}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Kinds for framework-raised HTTP errors (unknown routes, readiness check)
HTTP_ERROR_KINDS = {
    status.HTTP_401_UNAUTHORIZED: "unauthenticated",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "invalid_argument",
    status.HTTP_503_SERVICE_UNAVAILABLE: "dependency",
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Give HTTPException bodies the same {"kind", "detail"} shape as domain errors."""
    if exc.status_code >= 500:
        default_kind = "internal"
    else:
        default_kind = "invalid_argument"
    kind = HTTP_ERROR_KINDS.get(exc.status_code, default_kind)
    return JSONResponse(
        status_code=exc.status_code,
        content={"kind": kind, "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Catch Pydantic validation errors and log them."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"kind": "invalid_argument", "detail": jsonable_encoder(exc.errors())}
    )


# Global exception handler to catch ALL exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(f"🔥 Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"kind": "internal", "detail": f"Internal server error: {str(exc)}"}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: Firestore connection
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        initialize_firestore()
    except Exception as e:
        logger.warning(f"Firestore initialization failed: {e}")
        logger.warning("The app will start but database operations may fail.")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(incidents.router)
app.include_router(notifications.router)
app.include_router(facilities.router)
app.include_router(analytics.router)

# Locally stored photos (used when no Firebase Storage bucket is configured)
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "incidents": "/incidents",
    }
