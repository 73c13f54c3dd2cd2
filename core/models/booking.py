"""
Booking draft models.

The draft is immutable: every edit produces a new BookingDraft, and an edit
that changes nothing produces an equal one. The draft store relies on that
to skip re-renders and persistence writes for no-op edits.
"""

from datetime import date, time

from pydantic import BaseModel, ConfigDict

from core.models.item import ItemDraft
from utils.dates import DateRange


class CustomerInfo(BaseModel):
    """Party, company and function. Ids are empty for typed-in (unresolved) names."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    party_id: str = ""
    party_name: str = ""
    company_id: str = ""
    company_name: str = ""
    function_id: str = ""
    function_name: str = ""
    phone: str = ""
    email: str = ""


class EventDetails(BaseModel):
    """Where the event happens and for how many people."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    venue_id: str = ""
    venue_name: str = ""
    serving_id: str = ""
    serving_name: str = ""
    serving_address: str = ""
    min_people: str = ""
    max_people: str = ""


class BookingDraft(BaseModel):
    """The locally held, not-yet-committed booking."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    entry_date: date | None = None
    entry_time: time | None = None
    from_date: date | None = None
    from_time: time | None = None
    to_date: date | None = None
    to_time: time | None = None

    billing_company_id: str = ""
    billing_company_name: str = ""
    status_id: str = ""
    status_name: str = ""
    attended_by: str = ""

    customer: CustomerInfo = CustomerInfo()
    event: EventDetails = EventDetails()
    items: tuple[ItemDraft, ...] = ()

    other_charges: str = ""
    settlement_discount: str = ""
    from_enquiry: bool = False

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.from_date, self.from_time, self.to_date, self.to_time)

    def with_date_range(self, value: DateRange) -> "BookingDraft":
        """Copy with the four range fields replaced."""
        return self.model_copy(update={
            "from_date": value.from_date,
            "from_time": value.from_time,
            "to_date": value.to_date,
            "to_time": value.to_time,
        })
