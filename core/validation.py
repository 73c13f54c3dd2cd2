"""
Draft validation.

Rules run in a fixed report order. Every violated rule is listed so tests
can see the whole picture; the screen shows only the first one. Validation
never changes the draft and can run any number of times.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from core.models import BookingDraft
from utils.dates import is_valid_range
from utils.money import is_blank


@dataclass(frozen=True)
class Violation:
    """One failed rule, with the element the screen should highlight."""

    field: str
    message: str
    target_selector: str


@dataclass(frozen=True)
class ValidationResult:
    violations: list[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def first(self) -> Violation | None:
        return self.violations[0] if self.violations else None


@dataclass(frozen=True)
class _Rule:
    field: str
    message: str
    target_selector: str
    failed: Callable[[BookingDraft], bool]


DATE_RANGE_MESSAGE = "Booking To date/time cannot be earlier than Booking From date/time"

_RULES: tuple[_Rule, ...] = (
    _Rule("dateRange", DATE_RANGE_MESSAGE, ".pickers",
          lambda d: not is_valid_range(d.date_range)),
    _Rule("entryDate", "Please select Entry Date", "#entry-date",
          lambda d: d.entry_date is None),
    _Rule("entryTime", "Please select Entry Time", "#entry-time",
          lambda d: d.entry_time is None),
    _Rule("billingCompany", "Please select Billing Company", "#billing-company",
          lambda d: is_blank(d.billing_company_name) and is_blank(d.billing_company_id)),
    _Rule("attendedBy", "Please select Attended By", "#attended-by",
          lambda d: is_blank(d.attended_by)),
    _Rule("status", "Please select Status", "#status",
          lambda d: is_blank(d.status_name) and is_blank(d.status_id)),
    _Rule("partyName", "Please enter Party Name", "#party-name",
          lambda d: is_blank(d.customer.party_name)),
    _Rule("companyName", "Please enter Company Name", "#company-name",
          lambda d: is_blank(d.customer.company_name)),
    _Rule("functionName", "Please enter Function Name", "#function-name",
          lambda d: is_blank(d.customer.function_name)),
    _Rule("venue", "Please select Venue", "#venue",
          lambda d: is_blank(d.event.venue_name)),
    _Rule("servingName", "Please select Serving Name", "#serving-name",
          lambda d: is_blank(d.event.serving_name)),
    _Rule("minPeople", "Please enter Min People", "#min-people",
          lambda d: is_blank(d.event.min_people)),
    _Rule("maxPeople", "Please enter Max People", "#max-people",
          lambda d: is_blank(d.event.max_people)),
    _Rule("bookingFromDate", "Please select Booking From Date", ".booking-date",
          lambda d: d.from_date is None),
    _Rule("bookingFromTime", "Please select Booking From Time", ".booking-date",
          lambda d: d.from_time is None),
    _Rule("bookingToDate", "Please select Booking To Date", ".booking-to",
          lambda d: d.to_date is None),
    _Rule("bookingToTime", "Please select Booking To Time", ".booking-to",
          lambda d: d.to_time is None),
    _Rule("itemDetails", "Please add at least one Item", ".item-details-container",
          lambda d: len(d.items) == 0),
)


def validate(draft: BookingDraft) -> ValidationResult:
    """
    Evaluate every rule against the draft.

    Item rows are checked after the aggregate "has items" rule, one
    violation per incomplete row (name, quantity and rate are required).
    """
    violations = [
        Violation(rule.field, rule.message, rule.target_selector)
        for rule in _RULES
        if rule.failed(draft)
    ]

    for index, item in enumerate(draft.items):
        if is_blank(item.name) or is_blank(item.quantity) or is_blank(item.rate):
            violations.append(Violation(
                field=f"items[{index}]",
                message=f"Please complete Item Row {index + 1}",
                target_selector=f'.item-row[data-index="{index}"]',
            ))

    return ValidationResult(violations)
