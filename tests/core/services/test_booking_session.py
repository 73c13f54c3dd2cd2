"""Tests for the booking session wiring (draft store + session mirror + controller)."""

import asyncio
from datetime import date, datetime, time
from unittest.mock import Mock

import pytest

from clients.booking_client import BookingClient, SubmitResult
from core.config import BookingConfig
from core.models import EditMarkers, QuotationDetail, Receipt
from core.services.booking_session import BookingSession
from core.services.session_store import SessionStore

NOW = datetime(2026, 3, 10, 18, 30, 0)


@pytest.fixture
def booking_client(complete_draft):
    client = Mock(spec=BookingClient)
    client.fetch_quotation_detail.return_value = QuotationDetail(
        quotation_id="4410",
        bill_id="9001",
        ledger_id="501",
        draft=complete_draft,
        receipts=(Receipt(voucher_id="700", amount=1000),),
    )
    return client


@pytest.fixture
def make_session(booking_client, valkey):
    def factory(session_id="s1"):
        return BookingSession(session_id, booking_client, valkey, clock=lambda: NOW)
    return factory


@pytest.fixture
def session(make_session):
    return make_session()


class TestPersistence:

    def test_edits_written_once_per_burst(self, session, valkey):
        for name in ("A", "An", "Ani", "Anita"):
            session.store.update_draft({"customer": {"party_name": name}})

        assert valkey.set_calls == 0
        session.flush()
        assert valkey.set_calls == 1

        saved = SessionStore(valkey, "s1").load_draft()
        assert saved.draft.customer.party_name == "Anita"

    def test_no_op_edit_writes_nothing(self, session, valkey):
        session.store.update_draft({"attended_by": "Ravi"})
        session.flush()
        session.store.update_draft({"attended_by": "Ravi"})
        session.flush()

        assert valkey.set_calls == 1

    def test_returning_to_screen_restores_draft(self, make_session):
        first = make_session()
        first.store.update_draft({"attended_by": "Ravi"})
        first.store.update_current_item({"item_date": date(2026, 3, 22)})
        first.close()

        second = make_session()

        assert second.store.get_draft().attended_by == "Ravi"
        assert second.store.item_date_overridden
        assert not second.store.is_dirty

    def test_sessions_are_isolated(self, make_session):
        make_session("s1").store.update_draft({"attended_by": "Ravi"})
        other = make_session("s2")
        assert other.store.get_draft().attended_by == ""

    def test_store_outage_does_not_break_editing(self, session, valkey):
        valkey.fail = True
        session.store.update_draft({"attended_by": "Ravi"})
        session.flush()
        assert session.store.get_draft().attended_by == "Ravi"

    def test_ttl_from_config(self, booking_client, valkey):
        config = BookingConfig(session_ttl_seconds=600)
        session = BookingSession("s1", booking_client, valkey, config=config, clock=lambda: NOW)
        session.store.update_draft({"attended_by": "Ravi"})
        session.flush()
        assert valkey.ttls["banquet:session:s1:draft"] == 600


class TestDateStatus:

    def test_inverted_range_reported(self, session):
        session.store.update_draft({"to_time": time(17, 0)})

        status = session.current_date_status()

        assert not status.valid
        assert "cannot be earlier" in status.message

    def test_corrected_range_clears_message(self, session):
        session.store.update_draft({"to_time": time(17, 0)})
        session.store.update_draft({"to_time": time(23, 0)})
        assert session.current_date_status().valid

    def test_published_while_screen_showing(self, session):
        seen = []
        session.event_bus.subscribe("DateRangeChecked", seen.append)

        session.store.update_draft({"to_time": time(17, 0)})
        session.close()
        session.store.update_draft({"to_time": time(16, 0)})

        assert len(seen) == 1


class TestEditMode:

    def test_load_caches_markers_and_receipts(self, session, valkey, as_operator):
        asyncio.run(session.controller.load_quotation("4410"))

        mirror = SessionStore(valkey, "s1")
        assert mirror.load_edit_markers().editing_invoice_id == "9001"
        assert [r.voucher_id for r in mirror.load_receipts("4410")] == ["700"]

    def test_restored_session_keeps_edit_mode_and_receipts(self, session, make_session, as_operator):
        asyncio.run(session.controller.load_quotation("4410"))
        session.close()

        restored = make_session()

        assert restored.controller.markers.editing_quotation_id == "4410"
        assert [r.voucher_id for r in restored.store.receipts] == ["700"]

    def test_calendar_date_ignored_in_edit_mode(self, session, as_operator):
        asyncio.run(session.controller.load_quotation("4410"))
        assert not session.seed_calendar_date(date(2026, 5, 1))
        assert session.store.get_draft().from_date == date(2026, 3, 20)

    def test_calendar_date_seeds_new_booking(self, session):
        assert session.seed_calendar_date(date(2026, 5, 1))
        assert session.store.get_draft().to_date == date(2026, 5, 1)

    def test_reset_preserving_edit_mode(self, session, valkey, as_operator):
        asyncio.run(session.controller.load_quotation("4410"))

        session.reset(preserve_edit_mode=True)

        mirror = SessionStore(valkey, "s1")
        assert mirror.load_draft() is None
        assert mirror.load_edit_markers().is_edit_mode
        assert len(mirror.load_receipts("4410")) == 1
        assert len(session.store.receipts) == 1

    def test_full_reset_ends_edit_mode(self, session, valkey, as_operator):
        asyncio.run(session.controller.load_quotation("4410"))

        session.reset()

        assert not session.controller.markers.is_edit_mode
        assert session.store.receipts == ()
        assert valkey.data == {}

    def test_successful_save_clears_session(self, session, booking_client, valkey, as_operator):
        asyncio.run(session.controller.load_quotation("4410"))
        booking_client.submit_booking.return_value = SubmitResult(quotation_id="4410", bill_id="9001")

        asyncio.run(session.controller.save())
        session.flush()

        mirror = SessionStore(valkey, "s1")
        assert mirror.load_edit_markers() == EditMarkers()
        assert mirror.load_receipts("4410") == ()
