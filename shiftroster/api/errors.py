import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shiftroster.core.errors import RosterError

logger = logging.getLogger(__name__)


async def roster_error_handler(request: Request, exc: RosterError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {type(exc).__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RosterError, roster_error_handler)
