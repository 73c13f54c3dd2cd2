"""
Item line models.

Numeric fields hold whatever the operator typed. Derived amounts are computed
on read from the coerced values and are never stored.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict

from utils.money import to_number


class SelectedMenu(BaseModel):
    """A menu chosen for one category of a package (at most one per category)."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    category_id: str
    category_name: str = ""
    menu_id: str
    menu_name: str = ""
    cat_srno: str = ""
    unit: str = ""
    quantity: float = 0
    rate: float = 0
    amount: float = 0
    instructions: str = ""
    include_in_package: str = "0"
    status: str = "0"


class ItemDraft(BaseModel):
    """One line of the booking (a package or a free-form item)."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    item_date: date | None = None
    name: str = ""
    unit: str = ""
    quantity: str = "1"
    rate: str = ""
    discount: str = ""
    tax_percent: str = ""
    tax_name: str = ""
    note: str = ""
    package_id: str | None = None
    selected_menus: dict[str, SelectedMenu] = {}

    @property
    def amount(self) -> float:
        """quantity * rate"""
        return to_number(self.quantity) * to_number(self.rate)

    @property
    def discount_amount(self) -> float:
        return to_number(self.discount)

    @property
    def taxable(self) -> float:
        """Amount after discount, never negative."""
        return max(0.0, self.amount - self.discount_amount)

    @property
    def tax_amount(self) -> float:
        return self.taxable * to_number(self.tax_percent) / 100

    @property
    def total(self) -> float:
        return self.taxable + self.tax_amount

    def bound_errors(self) -> list[str]:
        """
        Range problems with the typed numbers.

        Returns an empty list when quantity is positive, rate is not negative
        and the discount lies between 0 and the line amount. Blank fields are
        not range errors (completeness is checked by draft validation).
        """
        errors = []
        if self.quantity.strip() and to_number(self.quantity) <= 0:
            errors.append("Quantity must be greater than zero")
        if to_number(self.rate) < 0:
            errors.append("Rate cannot be negative")
        discount = self.discount_amount
        if discount < 0:
            errors.append("Discount cannot be negative")
        elif discount > self.amount:
            errors.append("Discount cannot exceed the item amount")
        return errors
