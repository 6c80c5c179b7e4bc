import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from studytimer.services.errors import CollaboratorError, StudyTimerError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI):
    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        sentry_sdk.capture_exception(exc)
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )

    @app.exception_handler(CollaboratorError)
    async def collaborator_error_handler(request: Request, exc: CollaboratorError):
        # Upstream dashboard API failures are logged, not sent to Sentry.
        logger.warning("Upstream failure on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "type": type(exc).__name__},
        )

    @app.exception_handler(StudyTimerError)
    async def study_timer_error_handler(request: Request, exc: StudyTimerError):
        sentry_sdk.capture_exception(exc)
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc), "type": type(exc).__name__},
        )

    @app.exception_handler(ValueError)
    async def invalid_value_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})
