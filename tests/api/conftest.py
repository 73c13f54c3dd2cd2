"""API test fixtures: the booking app over a mocked booking service and in-memory Valkey."""

from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from clients.booking_client import BookingClient
from core.models import QuotationDetail, Receipt


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def booking_client(complete_draft):
    """Booking service mock; quotation 4410 is invoiced as bill 9001 (bill amount 2045)."""
    mock = Mock(spec=BookingClient)
    mock.fetch_quotation_detail.return_value = QuotationDetail(
        quotation_id="4410",
        bill_id="9001",
        ledger_id="501",
        draft=complete_draft,
        receipts=(Receipt(voucher_id="700", amount=1000),),
    )
    return mock


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


OPERATOR_HEADERS = {"X-Hotel-Id": "290", "X-Login-Id": "17"}


@pytest.fixture
def app(booking_client, valkey):
    return create_app(client=booking_client, valkey=valkey)


@pytest.fixture
def client(app):
    """Client for screen session 'screen-1', logged in as hotel 290 / login 17."""
    return TestClient(
        app,
        raise_server_exceptions=False,
        headers={"X-Session-Id": "screen-1", **OPERATOR_HEADERS},
    )


@pytest.fixture
def anonymous_client(app):
    """Same screen session, no operator headers."""
    return TestClient(app, raise_server_exceptions=False, headers={"X-Session-Id": "screen-1"})


@pytest.fixture
def sessionless_client(app):
    return TestClient(app, raise_server_exceptions=False, headers=OPERATOR_HEADERS)


@pytest.fixture
def act(client):
    """POST one action and return the response."""
    def post(domain: str, action: str, data: dict | None = None, via=None):
        return (via or client).post("/api/actions", json={
            "domain": domain,
            "action": action,
            "data": data or {},
        })
    return post
