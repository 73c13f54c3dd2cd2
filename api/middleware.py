"""Request-scoped middleware for API requests."""

from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from utils.operator_context import clear_current_operator, set_current_operator


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a unique request ID to every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class OperatorContextMiddleware(BaseHTTPMiddleware):
    """
    Sets the operator (hotel + login) for the request from its headers.

    Missing headers are not rejected here: reads work without an operator,
    and submissions fail with a precondition error when they need one.
    """

    HOTEL_HEADER = "X-Hotel-Id"
    LOGIN_HEADER = "X-Login-Id"

    async def dispatch(self, request: Request, call_next):
        hotel_id = request.headers.get(self.HOTEL_HEADER)
        login_id = request.headers.get(self.LOGIN_HEADER)
        if hotel_id is None and login_id is None:
            clear_current_operator()
        else:
            set_current_operator(hotel_id, login_id)
        try:
            return await call_next(request)
        finally:
            clear_current_operator()
