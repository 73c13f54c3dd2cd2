"""Propagate the operator identity (hotel + login) through the call stack using contextvars."""

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass

from core.exceptions import PreconditionError


@dataclass(frozen=True)
class Operator:
    """Who is submitting: the hotel the booking belongs to and the logged-in user."""

    hotel_id: str
    login_id: str


_current_operator: ContextVar[Operator | None] = ContextVar("current_operator", default=None)


def get_current_operator() -> Operator:
    """
    Get the current operator from context.

    Raises PreconditionError if no operator is set, or if either id is blank.
    Every submission to the booking service needs both, so a missing id is
    fatal to the action and is never retried.
    """
    operator = _current_operator.get()
    if operator is None:
        raise PreconditionError("No hotel / login set. Please login again.")
    if not operator.hotel_id:
        raise PreconditionError("No hotel ID found. Please login again.")
    if not operator.login_id:
        raise PreconditionError("Login ID missing. Please login again.")
    return operator


def get_current_hotel_id() -> str:
    """Hotel id of the current operator (raises PreconditionError if missing)."""
    return get_current_operator().hotel_id


def set_current_operator(hotel_id: str | None, login_id: str | None) -> None:
    """
    Set the current operator in context.

    Called by the API middleware from the request headers.
    """
    _current_operator.set(Operator(hotel_id=str(hotel_id or ""), login_id=str(login_id or "")))


def clear_current_operator() -> None:
    """
    Clear the operator context.

    Must be called in a finally block to prevent context leakage.
    """
    _current_operator.set(None)


@contextmanager
def operator_context(hotel_id: str, login_id: str):
    """
    Context manager for temporarily setting the operator.

    Example:
        with operator_context("290", "17"):
            await controller.save()
    """
    previous = _current_operator.get()
    set_current_operator(hotel_id, login_id)
    try:
        yield
    finally:
        _current_operator.set(previous)
