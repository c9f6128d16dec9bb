import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from inventory_app.core.exceptions import AppError

logger = logging.getLogger(__name__)


def setup_exception_handlers(app: FastAPI):
    """Answer domain errors with ``{"status": "Failure", "message": ...}``."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "Failure", "message": exc.message or exc.__class__.__name__},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"status": "Failure", "message": "Internal server error"},
        )
