"""
Main FastAPI application.

This file wires together all layers:
- Domain: Business entities and rules
- Repositories: Data access
- Services: Business logic orchestration
- Routers: HTTP endpoints
"""

import uuid
from contextlib import asynccontextmanager
from typing import Tuple

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import settings
from .database import dispose_engine, init_db
from .domain.exceptions import (ConflictException, InsufficientStockException,
                                NotFoundException, OrderServiceException,
                                StorageException, ValidationException)
from .logging_config import get_logger, setup_logging
from .metrics import metrics_endpoint, track_request_metrics
from .metrics_middleware import PrometheusMiddleware
from .routers import health_router, order_router, product_router, user_router

setup_logging(settings.LOG_LEVEL, settings.SERVICE_NAME)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Order Service", version=__version__)

    try:
        init_db()
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    logger.info("Order Service started")

    yield

    logger.info("Shutting down Order Service")
    dispose_engine()
    logger.info("Order Service stopped")


app = FastAPI(
    title=settings.APP_NAME,
    description="Users, products and orders with atomic order placement",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(PrometheusMiddleware, track_func=track_request_metrics)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Bind a request ID to the log context and echo it back."""
    request_id = request.headers.get("X-Request-ID") or f"req-{uuid.uuid4().hex}"

    structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()

    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(user_router.router)
app.include_router(product_router.router)
app.include_router(order_router.router)
app.include_router(health_router.router)


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return await metrics_endpoint()


@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.APP_NAME,
        "version": __version__,
        "status": "operational",
        "health": "/health",
        "ready": "/ready",
    }


def classify_exception(exc: OrderServiceException) -> Tuple[int, str]:
    """
    Map a domain exception to an HTTP status and error code.

    Args:
        exc: Domain exception raised while handling a request

    Returns:
        Tuple of (status code, error code)
    """
    if isinstance(exc, ValidationException):
        return status.HTTP_400_BAD_REQUEST, "validation_error"
    if isinstance(exc, InsufficientStockException):
        return status.HTTP_400_BAD_REQUEST, "insufficient_stock"
    if isinstance(exc, ConflictException):
        return status.HTTP_400_BAD_REQUEST, "conflict"
    if isinstance(exc, NotFoundException):
        return status.HTTP_404_NOT_FOUND, "not_found"
    if isinstance(exc, StorageException):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "storage_error"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_server_error"


def error_body(error: str, message: str, details: dict) -> dict:
    return {"success": False, "error": error, "message": message, "details": details}


@app.exception_handler(OrderServiceException)
async def domain_exception_handler(request: Request, exc: OrderServiceException):
    """Translate domain exceptions into error responses."""
    status_code, error = classify_exception(exc)

    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request failed",
        path=request.url.path,
        method=request.method,
        status_code=status_code,
        error=error,
        message=exc.message,
    )

    return JSONResponse(
        status_code=status_code, content=error_body(error, exc.message, exc.details)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Schema violations in body, path or query are client errors."""
    errors = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    message = "; ".join(f"{'.'.join(err['loc'])}: {err['msg']}" for err in errors)

    logger.info("Request validation failed", path=request.url.path, message=message)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("validation_error", message, {"errors": errors}),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "internal_server_error", "An unexpected error occurred", {}
        ),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "order_service.app:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
