"""A quotation as fetched from the booking service, already normalized."""

from pydantic import BaseModel, ConfigDict

from core.models.booking import BookingDraft
from core.models.receipt import Receipt


class QuotationDetail(BaseModel):
    """Header, first event block and receipts of a stored quotation."""

    model_config = ConfigDict(frozen=True)

    quotation_id: str
    bill_id: str | None = None
    ledger_id: str | None = None
    draft: BookingDraft
    receipts: tuple[Receipt, ...] = ()
