"""Catalog references: the canonical {id, name} pair for picker selections."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class CatalogKind(str, Enum):
    """Kinds of records the pickers search for."""

    PARTY = "party"
    COMPANY = "company"
    FUNCTION = "function"
    VENUE = "venue"
    SERVING = "serving"
    ITEM = "item"
    MENU = "menu"
    BILLING_COMPANY = "billing_company"
    STATUS = "status"
    ATTENDEE = "attendee"
    ACCOUNT = "account"
    PAYMODE = "paymode"


class CatalogRef(BaseModel):
    """
    A record picked from a catalog, reduced to id and name.

    A name-only reference (id None) is an unresolved, typed-in entry. It is
    allowed everywhere; it just carries no id to the booking service.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str = ""
    extra: dict[str, str] = {}

    @property
    def is_resolved(self) -> bool:
        """Whether this reference points at a catalog record by id."""
        return bool(self.id)


class ReferenceData(BaseModel):
    """Dropdown data loaded once per booking screen."""

    model_config = ConfigDict(frozen=True)

    server_date: str | None = None
    billing_companies: tuple[CatalogRef, ...] = ()
    attendees: tuple[CatalogRef, ...] = ()
    statuses: tuple[CatalogRef, ...] = ()
