"""Tests for the receipt cache handlers."""

from core.events import QuotationLoaded, ReceiptCreated, ReceiptsRefreshed
from core.handlers.receipt_cache_handler import handle_quotation_loaded, handle_receipts_changed
from core.models import Receipt
from core.services.draft_store import DraftStore
from core.services.session_store import SessionStore


def test_receipt_event_writes_list(valkey):
    session_store = SessionStore(valkey, "s1")
    receipts = (Receipt(voucher_id="700", amount=1000),)

    handle_receipts_changed(session_store)(ReceiptCreated(quotation_id="4410", receipts=receipts, net_amount=1000))

    assert session_store.load_receipts("4410") == receipts


def test_event_without_quotation_is_ignored(valkey):
    session_store = SessionStore(valkey, "s1")
    handle_receipts_changed(session_store)(ReceiptsRefreshed(quotation_id=None))
    assert valkey.set_calls == 0


def test_loaded_quotation_caches_store_receipts(valkey):
    session_store = SessionStore(valkey, "s1")
    draft_store = DraftStore()
    draft_store.set_receipts([Receipt(voucher_id="700", amount=500)])

    handle_quotation_loaded(session_store, draft_store)(QuotationLoaded(quotation_id="4410", receipt_count=1))

    assert [r.voucher_id for r in session_store.load_receipts("4410")] == ["700"]
