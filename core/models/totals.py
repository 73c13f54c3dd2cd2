"""Bill totals derived from a draft and its receipts."""

from pydantic import BaseModel, ConfigDict


class Totals(BaseModel):
    """
    Derived bill figures. Never persisted; recomputed on every read.

    taxable       = sub_total - total_discount
    gross         = taxable + tax_amount + other_charges - settlement_discount
    round_off     = round(gross) - gross
    bill_amount   = gross + round_off
    balance       = max(0, bill_amount - total_received)
    """

    model_config = ConfigDict(frozen=True)

    sub_total: float = 0
    total_discount: float = 0
    taxable: float = 0
    tax_amount: float = 0
    other_charges: float = 0
    settlement_discount: float = 0
    gross: float = 0
    round_off: float = 0
    bill_amount: float = 0
    total_received: float = 0
    balance: float = 0
