"""Map domain errors onto JSON HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from campus_connect.core.errors import DomainError, Forbidden, Internal, Unauthenticated

logger = logging.getLogger(__name__)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        if isinstance(exc, Internal):
            logger.exception(
                "Internal error on %s %s", request.method, request.url.path, exc_info=exc
            )
            message = Internal.default_message
        else:
            if isinstance(exc, Forbidden):
                logger.warning("Forbidden %s %s", request.method, request.url.path)
            else:
                logger.info(
                    "%s on %s %s", type(exc).__name__, request.method, request.url.path
                )
            message = exc.message
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": message},
            headers=headers,
        )
