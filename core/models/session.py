"""Typed snapshots written to the session key-value store."""

from pydantic import BaseModel, ConfigDict

from core.models.booking import BookingDraft
from core.models.item import ItemDraft


class EditMarkers(BaseModel):
    """
    Which quotation/invoice the screen is editing.

    Stored apart from the draft so it survives a draft clear while the
    operator visits a picker screen and comes back.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    is_edit_mode: bool = False
    editing_quotation_id: str | None = None
    editing_invoice_id: str | None = None


class DraftSessionSnapshot(BaseModel):
    """Everything needed to rebuild the booking screen, written atomically."""

    model_config = ConfigDict(frozen=True)

    draft: BookingDraft = BookingDraft()
    current_item: ItemDraft = ItemDraft()
    editing_item_index: int | None = None
    item_date_overridden: bool = False
