# control-plane/main.py
"""
Spider Subnet Control Plane - Main Application
FastAPI application entry point
"""

import uvicorn
import logging
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from kubernetes.client.exceptions import ApiException

from api.v1 import webhook, pods, subnets
from database.session import init_db, db_manager
from config import settings
from core.exceptions import SubnetControlPlaneError
from k8s.client import is_not_found
from schemas.base import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Track startup time
startup_time = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events
    - Startup: Initialize the admission audit database
    - Shutdown: Cleanup resources
    """
    global startup_time

    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENV}")
    logger.info(f"IPv4 enabled: {settings.ENABLE_IPV4}, IPv6 enabled: {settings.ENABLE_IPV6}")

    init_db()
    startup_time = datetime.utcnow()

    logger.info("Application started successfully")

    yield

    # Shutdown
    logger.info("Shutting down application")


# Initialize FastAPI App
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Spider Subnet Control Plane API

    Control-plane logic of the SpiderSubnet IPAM feature:
    - Admission webhook guarding SpiderSubnet create/update/delete
    - Pod subnet resolution (annotations, top controller, auto IPPool names)
    - Subnet free capacity

    ## Architecture

    - **Webhook API**: AdmissionReview endpoints called by the Kubernetes API server
    - **Pods API**: Subnet decision for a live pod
    - **Subnets API**: Free IPs of a SpiderSubnet
    """,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)


# === Exception Handlers ===

def _error_content(error: str, error_code: str, details=None) -> dict:
    return {
        "success": False,
        "error": error,
        "error_code": error_code,
        "details": details,
        "timestamp": datetime.utcnow().isoformat()
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=422,
        content=_error_content("Validation error", "VALIDATION_ERROR", {"errors": errors})
    )


@app.exception_handler(SubnetControlPlaneError)
async def control_plane_exception_handler(request: Request, exc: SubnetControlPlaneError):
    """Handle domain errors that escaped a route"""
    logger.warning(f"{exc.error_code}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc.message, exc.error_code, exc.details or None)
    )


@app.exception_handler(ApiException)
async def kubernetes_exception_handler(request: Request, exc: ApiException):
    """Handle Kubernetes API errors"""
    if is_not_found(exc):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_content("Resource not found", "NOT_FOUND")
        )

    logger.error(f"Kubernetes API error: {exc.status} {exc.reason}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=_error_content(
            "Kubernetes API error",
            "KUBERNETES_API_ERROR",
            {"status": exc.status, "reason": exc.reason}
        )
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.exception(f"Unexpected error: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_content(
            "Internal server error",
            "INTERNAL_ERROR",
            {"message": str(exc)} if settings.DEBUG else None
        )
    )


# === Include Routers ===

# Admission webhooks, paths registered in the webhook configurations
app.include_router(
    webhook.router,
    tags=["Webhook"]
)

# Pods API
app.include_router(
    pods.router,
    prefix=f"{settings.API_PREFIX}/pods",
    tags=["Pods"]
)

# Subnets API
app.include_router(
    subnets.router,
    prefix=f"{settings.API_PREFIX}/subnets",
    tags=["Subnets"]
)


# === Root Endpoints ===

@app.get(
    "/",
    summary="Root endpoint",
    description="Welcome message and API info"
)
async def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health"
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check application and audit database health"
)
async def health_check():
    """Health check endpoint for monitoring"""
    global startup_time

    # Check database connection
    db_status = "connected" if db_manager.check_connection() else "disconnected"

    # Calculate uptime
    uptime = None
    if startup_time:
        uptime = (datetime.utcnow() - startup_time).total_seconds()

    return HealthResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        version=settings.APP_VERSION,
        uptime_seconds=uptime,
        database=db_status,
        audit_enabled=settings.ENABLE_AUDIT_LOG
    )


# === Run Application ===

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
        ssl_certfile=settings.TLS_CERT_FILE,
        ssl_keyfile=settings.TLS_KEY_FILE
    )
