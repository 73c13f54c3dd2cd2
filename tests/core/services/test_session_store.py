"""Tests for the session key-value mirror."""

import json

import pytest

from core.models import DraftSessionSnapshot, EditMarkers, Receipt
from core.services.session_store import SessionStore


@pytest.fixture
def session_store(valkey):
    return SessionStore(valkey, "abc123", ttl_seconds=3600)


EDITING = EditMarkers(is_edit_mode=True, editing_quotation_id="4410", editing_invoice_id="9001")


class TestDraftSnapshot:

    def test_save_and_load(self, session_store, valkey, complete_draft):
        snapshot = DraftSessionSnapshot(draft=complete_draft, editing_item_index=0)

        assert session_store.save_draft(snapshot)

        assert "banquet:session:abc123:draft" in valkey.data
        assert valkey.ttls["banquet:session:abc123:draft"] == 3600
        assert session_store.load_draft() == snapshot

    def test_missing_draft(self, session_store):
        assert session_store.load_draft() is None

    def test_unreadable_snapshot_discarded(self, session_store, valkey):
        valkey.data["banquet:session:abc123:draft"] = json.dumps({"draft": {"from_date": "garbage"}})

        assert session_store.load_draft() is None
        assert "banquet:session:abc123:draft" not in valkey.data

    def test_store_failures_are_swallowed(self, session_store, valkey, complete_draft):
        valkey.fail = True

        assert not session_store.save_draft(DraftSessionSnapshot(draft=complete_draft))
        assert session_store.load_draft() is None
        assert session_store.load_edit_markers() == EditMarkers()
        assert session_store.writes == 0


class TestEditMarkers:

    def test_round_trip(self, session_store):
        session_store.save_edit_markers(EDITING)
        assert session_store.load_edit_markers() == EDITING

    def test_default_when_absent(self, session_store):
        assert not session_store.load_edit_markers().is_edit_mode


class TestReceiptCache:

    def test_round_trip(self, session_store):
        receipts = (Receipt(voucher_id="700", amount=1000, pay_mode="Cash"),)
        session_store.save_receipts("4410", receipts)
        assert session_store.load_receipts("4410") == receipts

    def test_unknown_quotation(self, session_store):
        assert session_store.load_receipts("1") == ()


class TestClearing:

    def test_clear_draft_keeps_markers_and_receipts_in_edit_mode(self, session_store, complete_draft):
        session_store.save_edit_markers(EDITING)
        session_store.save_receipts("4410", [Receipt(voucher_id="700", amount=1000)])
        session_store.save_draft(DraftSessionSnapshot(draft=complete_draft))

        session_store.clear_draft()

        assert session_store.load_draft() is None
        assert session_store.load_edit_markers() == EDITING
        assert len(session_store.load_receipts("4410")) == 1

    def test_end_session_forgets_everything(self, session_store, valkey, complete_draft):
        session_store.save_edit_markers(EDITING)
        session_store.save_receipts("4410", [Receipt(voucher_id="700", amount=1000)])
        session_store.save_draft(DraftSessionSnapshot(draft=complete_draft))

        session_store.end_session()

        assert valkey.data == {}
