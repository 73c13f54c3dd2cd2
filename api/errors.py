"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from clients.booking_client import BookingServiceError
from core.exceptions import (
    DraftValidationError,
    GuardRejectedError,
    NoActiveQuotationError,
    PreconditionError,
)

logger = logging.getLogger(__name__)


def _json_error(status_code: int, code: str, message: str, data=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, data).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(PreconditionError)
    async def precondition_error_handler(request: Request, exc: PreconditionError):
        return _json_error(400, ErrorCodes.OPERATOR_MISSING, str(exc))

    @app.exception_handler(DraftValidationError)
    async def draft_validation_error_handler(request: Request, exc: DraftValidationError):
        violations = [
            {"field": v.field, "message": v.message, "target_selector": v.target_selector}
            for v in exc.violations
        ]
        return _json_error(422, ErrorCodes.VALIDATION_ERROR, str(exc), {"violations": violations})

    @app.exception_handler(GuardRejectedError)
    async def guard_rejected_handler(request: Request, exc: GuardRejectedError):
        return _json_error(409, ErrorCodes.ACTION_REJECTED, str(exc), {"action": exc.action})

    @app.exception_handler(NoActiveQuotationError)
    async def no_active_quotation_handler(request: Request, exc: NoActiveQuotationError):
        return _json_error(409, ErrorCodes.NO_ACTIVE_QUOTATION, str(exc))

    @app.exception_handler(BookingServiceError)
    async def service_error_handler(request: Request, exc: BookingServiceError):
        return _json_error(502, ErrorCodes.SERVICE_UNAVAILABLE, str(exc))

    @app.exception_handler(IndexError)
    async def index_error_handler(request: Request, exc: IndexError):
        return _json_error(404, ErrorCodes.NOT_FOUND, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        if "not found" in message.lower():
            return _json_error(404, ErrorCodes.NOT_FOUND, message)
        return _json_error(400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(ValidationError)
    async def model_validation_error_handler(request: Request, exc: ValidationError):
        return _json_error(422, ErrorCodes.VALIDATION_ERROR, str(exc.errors(include_url=False)))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _json_error(422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _json_error(500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
