"""Typed exceptions for booking failures."""


class BookingError(Exception):
    """Base class for booking draft / lifecycle errors."""


class PreconditionError(BookingError):
    """
    Hotel id or login id is missing.

    Fatal to any submission. Surfaced immediately, never retried.
    """


class DraftValidationError(BookingError):
    """
    The draft failed validation; the transition never reached the network.

    Carries the full ordered violation list. Only the first one is meant to
    be shown to the operator.
    """

    def __init__(self, violations: list):
        self.violations = list(violations)
        message = self.violations[0].message if self.violations else "Draft is invalid"
        super().__init__(message)

    @property
    def first(self):
        """The violation to surface (None if the list is somehow empty)."""
        return self.violations[0] if self.violations else None


class GuardRejectedError(BookingError):
    """
    An action was refused before any network call.

    Raised for overlapping same-kind submissions and for receipts against a
    settled bill. Informational, not an error the operator caused.
    """

    def __init__(self, action: str, message: str):
        self.action = action
        super().__init__(message)


class ReceiptRejectedError(GuardRejectedError):
    """Receipt amount is zero/negative or exceeds the remaining balance."""

    def __init__(self, message: str):
        super().__init__("receipt", message)


class NoActiveQuotationError(BookingError):
    """A receipt action was requested but no quotation is being edited."""
