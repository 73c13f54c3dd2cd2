"""
Handlers that mirror receipt changes into the session store.

Receipts are financial history: the cached list for a quotation is kept
under its own key and survives draft clears while the quotation is being
edited.
"""

import logging
from typing import Callable

from core.events import QuotationLoaded, ReceiptEvent

logger = logging.getLogger(__name__)


def handle_receipts_changed(session_store) -> Callable:
    """
    Factory that returns a handler for ReceiptCreated/ReceiptDeleted/ReceiptsRefreshed.

    Args:
        session_store: SessionStore of the screen

    Returns:
        Handler callable that writes the event's receipt list
    """

    def handler(event: ReceiptEvent):
        if not event.quotation_id:
            return
        session_store.save_receipts(event.quotation_id, event.receipts)
        logger.debug(f"Mirrored {len(event.receipts)} receipts for quotation {event.quotation_id}")

    return handler


def handle_quotation_loaded(session_store, draft_store) -> Callable:
    """
    Factory that returns a QuotationLoaded handler.

    The event carries only the count, so the list is read from the draft
    store, which the controller hydrated before publishing.
    """

    def handler(event: QuotationLoaded):
        if not event.quotation_id:
            return
        session_store.save_receipts(event.quotation_id, draft_store.receipts)

    return handler
