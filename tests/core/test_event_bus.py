"""Tests for the in-process event bus."""

from core.event_bus import EventBus
from core.events import QuotationSaved, ReceiptCreated


def test_publish_reaches_subscribers_of_that_type_only():
    bus = EventBus()
    saved, receipts = [], []
    bus.subscribe("QuotationSaved", saved.append)
    bus.subscribe("ReceiptCreated", receipts.append)

    event = QuotationSaved(quotation_id="4410")
    bus.publish(event)

    assert saved == [event]
    assert receipts == []


def test_handlers_run_in_subscription_order():
    bus = EventBus()
    order = []
    bus.subscribe("ReceiptCreated", lambda e: order.append("first"))
    bus.subscribe("ReceiptCreated", lambda e: order.append("second"))

    bus.publish(ReceiptCreated(quotation_id="4410"))

    assert order == ["first", "second"]


def test_failing_handler_does_not_stop_others(caplog):
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("cache down")

    bus.subscribe("QuotationSaved", broken)
    bus.subscribe("QuotationSaved", seen.append)

    bus.publish(QuotationSaved(quotation_id="1"))

    assert len(seen) == 1
    assert "Handler broken failed for QuotationSaved" in caplog.text


def test_unsubscribe():
    bus = EventBus()
    seen = []
    bus.subscribe("QuotationSaved", seen.append)
    bus.unsubscribe("QuotationSaved", seen.append)
    bus.unsubscribe("QuotationSaved", print)

    bus.publish(QuotationSaved())

    assert seen == []
