"""
Bill totals calculator.

Pure functions only: identical inputs give identical outputs, nothing is
raised for bad numbers (free-text fields coerce to 0), nothing is stored.
"""

from typing import Any, Iterable, Sequence

from core.models import BookingDraft, ItemDraft, Receipt, Totals
from utils.money import round_half_up, to_number


def item_breakdown(item: ItemDraft) -> dict[str, float]:
    """Amount, discount, taxable, tax and total for one line."""
    return {
        "quantity": to_number(item.quantity),
        "rate": to_number(item.rate),
        "amount": item.amount,
        "discount": item.discount_amount,
        "taxable": item.taxable,
        "tax_percent": to_number(item.tax_percent),
        "tax_amount": item.tax_amount,
        "total": item.total,
    }


def compute_totals(
    items: Sequence[ItemDraft],
    other_charges: Any = 0,
    settlement_discount: Any = 0,
    receipts: Iterable[Receipt] = (),
) -> Totals:
    """
    Derive the bill figures from the item lines, adjustments and receipts.

    Args:
        items: Item lines in any order
        other_charges: Signed adjustment added to the bill (free text accepted)
        settlement_discount: Signed adjustment subtracted from the bill
        receipts: Payments already recorded against the invoice

    Returns:
        Totals with round_off bringing bill_amount to a whole unit
    """
    sub_total = sum(item.amount for item in items)
    total_discount = sum(item.discount_amount for item in items)
    tax_amount = sum(item.tax_amount for item in items)
    taxable = sub_total - total_discount

    other = to_number(other_charges)
    settlement = to_number(settlement_discount)

    gross = taxable + tax_amount + other - settlement
    round_off = round_half_up(gross) - gross
    bill_amount = gross + round_off

    total_received = sum(receipt.amount for receipt in receipts)
    balance = max(0.0, bill_amount - total_received)

    return Totals(
        sub_total=sub_total,
        total_discount=total_discount,
        taxable=taxable,
        tax_amount=tax_amount,
        other_charges=other,
        settlement_discount=settlement,
        gross=gross,
        round_off=round_off,
        bill_amount=bill_amount,
        total_received=total_received,
        balance=balance,
    )


def totals_for_draft(draft: BookingDraft, receipts: Iterable[Receipt] = ()) -> Totals:
    """compute_totals over a whole draft."""
    return compute_totals(draft.items, draft.other_charges, draft.settlement_discount, receipts)


class TotalsMemo:
    """
    Remembers the last computed totals.

    Reading totals on every render is cheap to ask for but should not redo
    the sums when nothing changed. Inputs are compared structurally.
    """

    def __init__(self):
        self._key: tuple | None = None
        self._value: Totals | None = None
        self.computations = 0

    def get(self, draft: BookingDraft, receipts: Sequence[Receipt]) -> Totals:
        key = (draft.items, draft.other_charges, draft.settlement_discount, tuple(receipts))
        if self._value is None or key != self._key:
            self._value = totals_for_draft(draft, receipts)
            self._key = key
            self.computations += 1
        return self._value
