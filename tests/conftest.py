"""Shared test fixtures for the booking test suite."""

import json
from datetime import date, datetime, time
from pathlib import Path

import pytest
import redis
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

# Reset vault client singleton to pick up env vars
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from core.models import BookingDraft, CustomerInfo, EventDetails, ItemDraft
from utils.operator_context import clear_current_operator, operator_context


# =============================================================================
# OPERATOR CONSTANTS
# =============================================================================

TEST_HOTEL_ID = "290"
TEST_LOGIN_ID = "17"

# Fixed "now" used by draft stores under test
FIXED_NOW = datetime(2026, 3, 10, 18, 30, 0)


# =============================================================================
# OPERATOR CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_operator_context():
    """Ensure clean operator context before and after each test."""
    clear_current_operator()
    yield
    clear_current_operator()


@pytest.fixture
def as_operator():
    """Run the test as hotel 290 / login 17."""
    with operator_context(TEST_HOTEL_ID, TEST_LOGIN_ID):
        yield


# =============================================================================
# IN-MEMORY VALKEY
# =============================================================================


class FakeValkey:
    """
    In-memory stand-in exposing the ValkeyClient surface.

    Set `fail = True` to make every call raise like an unreachable server.
    """

    def __init__(self, namespace: str = "banquet"):
        self.namespace = namespace
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.set_calls = 0
        self.fail = False

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("Valkey unavailable")

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def ping(self) -> bool:
        self._check()
        return True

    def get(self, key):
        self._check()
        return self.data.get(self._key(key))

    def set(self, key, value, expire_seconds=None):
        self._check()
        self.set_calls += 1
        self.data[self._key(key)] = value
        self.ttls[self._key(key)] = expire_seconds

    def delete(self, key) -> bool:
        self._check()
        self.ttls.pop(self._key(key), None)
        return self.data.pop(self._key(key), None) is not None

    def exists(self, key) -> bool:
        self._check()
        return self._key(key) in self.data

    def set_json(self, key, value, expire_seconds=None):
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key):
        value = self.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}")

    def close(self):
        pass


@pytest.fixture
def valkey():
    return FakeValkey()


# =============================================================================
# DRAFT FACTORIES
# =============================================================================


def make_item(**overrides) -> ItemDraft:
    values = {
        "item_date": date(2026, 3, 20),
        "name": "Veg Buffet",
        "unit": "Plate",
        "quantity": "2",
        "rate": "1000",
        "discount": "100",
        "tax_percent": "5",
        "tax_name": "GST 5%",
    }
    values.update(overrides)
    return ItemDraft(**values)


def make_complete_draft(**overrides) -> BookingDraft:
    """A draft that passes every validation rule."""
    values = {
        "entry_date": date(2026, 3, 10),
        "entry_time": time(18, 30),
        "from_date": date(2026, 3, 20),
        "from_time": time(19, 0),
        "to_date": date(2026, 3, 20),
        "to_time": time(23, 0),
        "billing_company_id": "3",
        "billing_company_name": "Grand Banquets Pvt Ltd",
        "status_id": "1",
        "status_name": "Confirmed",
        "attended_by": "Ravi",
        "customer": CustomerInfo(
            party_id="501", party_name="Anita Sharma",
            company_id="77", company_name="Sharma Textiles",
            function_id="12", function_name="Reception",
            phone="9876543210", email="anita@example.com",
        ),
        "event": EventDetails(
            venue_id="8", venue_name="Crystal Hall",
            serving_id="4", serving_name="Main Dining", serving_address="Ground floor",
            min_people="150", max_people="200",
        ),
        "items": (make_item(),),
        "other_charges": "50",
        "settlement_discount": "0",
    }
    values.update(overrides)
    return BookingDraft(**values)


@pytest.fixture
def complete_draft() -> BookingDraft:
    return make_complete_draft()


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def draft_factory():
    return make_complete_draft
