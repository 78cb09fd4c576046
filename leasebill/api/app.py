"""FastAPI application: routers, error handlers and lifecycle."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from leasebill.api.billing import router as billing_router
from leasebill.api.leases import router as leases_router
from leasebill.config import get_settings
from leasebill.models import Base
from leasebill.services import async_engine
from leasebill.services.errors import AppError, ConflictError, error_response

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialized")
    yield
    await async_engine.dispose()
    logger.info("Application shutting down")


app = FastAPI(
    title=get_settings().api_title,
    description="Recurring rent charge generation and automatic payment dispatch",
    version=get_settings().api_version,
    lifespan=lifespan,
)

app.include_router(billing_router)
app.include_router(leases_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render AppError as {"error": {"code", "message", "details"}}."""
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Unique constraint violations surface as 409."""
    logger.warning("%s %s integrity error: %s", request.method, request.url.path, exc.orig)
    error = ConflictError()
    return JSONResponse(status_code=error.http_status, content=error_response(error))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Structural failures abort the request with a generic 500."""
    logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Unexpected error."}},
    )


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {"status": "ok"}


__all__ = ["app"]
