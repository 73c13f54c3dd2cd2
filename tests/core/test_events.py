"""Tests for booking event records."""

import dataclasses

import pytest

from core.events import InvoiceSaved, ReceiptDeleted, SubmissionRejected


def test_events_get_unique_ids_and_timestamps():
    first = SubmissionRejected(action="save", message="busy")
    second = SubmissionRejected(action="save", message="busy")

    assert first.event_id != second.event_id
    assert first.occurred_at.tzinfo is not None


def test_events_are_immutable():
    event = ReceiptDeleted(quotation_id="4410", voucher_id="700")
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.voucher_id = "701"


def test_invoice_event_carries_figures():
    event = InvoiceSaved(quotation_id="4410", bill_id="9001", created=False, bill_amount=2045, balance=1045)
    assert event.created is False
    assert event.balance == 1045
