"""Core domain models."""

from core.models.catalog import CatalogKind, CatalogRef, ReferenceData
from core.models.item import ItemDraft, SelectedMenu
from core.models.booking import BookingDraft, CustomerInfo, EventDetails
from core.models.receipt import Receipt, ReceiptRequest
from core.models.totals import Totals
from core.models.session import DraftSessionSnapshot, EditMarkers
from core.models.quotation import QuotationDetail

__all__ = [
    # Catalog
    "CatalogKind", "CatalogRef", "ReferenceData",
    # Item
    "ItemDraft", "SelectedMenu",
    # Booking
    "BookingDraft", "CustomerInfo", "EventDetails",
    # Receipt
    "Receipt", "ReceiptRequest",
    # Totals
    "Totals",
    # Session
    "DraftSessionSnapshot", "EditMarkers",
    # Quotation
    "QuotationDetail",
]
