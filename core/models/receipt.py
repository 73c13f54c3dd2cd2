"""Receipt models: payments recorded against an invoice."""

from datetime import date

from pydantic import BaseModel, ConfigDict, field_validator

from utils.money import to_number


class Receipt(BaseModel):
    """A payment the booking service already holds. Read-mostly on the client."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    voucher_id: str
    voucher_no: str = ""
    date: str = ""
    amount: float = 0
    discount: float = 0
    tds: float = 0
    pay_mode: str = ""
    account: str = ""

    @field_validator("amount", "discount", "tds", mode="before")
    @classmethod
    def coerce_amounts(cls, value):
        return to_number(value)


class ReceiptRequest(BaseModel):
    """What the operator enters in the receipt dialog."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    amount: float = 0
    discount: float = 0
    tds: float = 0
    account_id: str = ""
    paymode_id: str = ""
    note: str = ""
    receipt_date: date | None = None
    ledger_id: str | None = None

    @field_validator("amount", "discount", "tds", mode="before")
    @classmethod
    def coerce_amounts(cls, value):
        return to_number(value)

    @property
    def net_amount(self) -> float:
        """amount - discount - tds"""
        return self.amount - self.discount - self.tds
