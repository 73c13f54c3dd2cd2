"""
Domain events for the booking screen.

Immutable records of what the lifecycle controller did. The controller
publishes; the screen (toasts, navigation) and the session mirror subscribe
without the controller knowing who listens.

Event Categories:
- QuotationEvent: quotation load/save
- InvoiceEvent: invoice create/modify
- ReceiptEvent: receipt create/delete/refresh
- ScreenEvent: notifications meant only for the screen (guards, date range)

Events carry the ids and figures handlers need, so no handler re-reads the
store to find out what happened.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class BookingEvent:
    """Base class for all booking events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


# =============================================================================
# QUOTATION EVENTS
# =============================================================================


@dataclass(frozen=True)
class QuotationEvent(BookingEvent):
    """Events related to the quotation record."""
    quotation_id: str | None = None


@dataclass(frozen=True)
class QuotationLoaded(QuotationEvent):
    """An existing quotation was fetched and hydrated into the draft."""
    bill_id: str | None = None
    receipt_count: int = 0


@dataclass(frozen=True)
class QuotationSaved(QuotationEvent):
    """A plain quotation save succeeded."""
    created: bool = True


# =============================================================================
# INVOICE EVENTS
# =============================================================================


@dataclass(frozen=True)
class InvoiceSaved(QuotationEvent):
    """The booking was saved with invoice semantics."""
    bill_id: str | None = None
    created: bool = True
    bill_amount: float = 0
    balance: float = 0


# =============================================================================
# RECEIPT EVENTS
# =============================================================================


@dataclass(frozen=True)
class ReceiptEvent(BookingEvent):
    """Events related to receipts of one quotation."""
    quotation_id: str | None = None
    receipts: tuple[Any, ...] = ()


@dataclass(frozen=True)
class ReceiptCreated(ReceiptEvent):
    """A receipt was accepted by the service."""
    net_amount: float = 0


@dataclass(frozen=True)
class ReceiptDeleted(ReceiptEvent):
    """The service confirmed a receipt deletion."""
    voucher_id: str = ""


@dataclass(frozen=True)
class ReceiptsRefreshed(ReceiptEvent):
    """The receipt list was re-read from the service."""
    pass


# =============================================================================
# SCREEN EVENTS
# =============================================================================


@dataclass(frozen=True)
class ScreenEvent(BookingEvent):
    """Notifications that only matter while the screen is showing."""
    pass


@dataclass(frozen=True)
class SubmissionRejected(ScreenEvent):
    """A guard refused an action before any network call."""
    action: str = ""
    message: str = ""


@dataclass(frozen=True)
class SubmissionFailed(ScreenEvent):
    """A submission reached the service and failed; the draft is untouched."""
    action: str = ""
    message: str = ""


@dataclass(frozen=True)
class DateRangeChecked(ScreenEvent):
    """Date-range validity was recomputed after a date/time edit."""
    valid: bool = True
    message: str | None = None
