"""Tests for booking screen configuration bounds."""

import pytest
from pydantic import ValidationError

from core.config import BookingConfig


def test_defaults():
    config = BookingConfig()
    assert config.debounce_seconds == 0.4
    assert config.receipt_epsilon == 0.0001
    assert config.request_timeout_seconds == 15.0
    assert config.service_base_url is None


@pytest.mark.parametrize("field, value", [
    ("debounce_seconds", 1.5),
    ("debounce_seconds", -0.1),
    ("request_timeout_seconds", 0),
    ("session_ttl_seconds", 10),
    ("receipt_epsilon", 0.5),
])
def test_out_of_bounds_rejected(field, value):
    with pytest.raises(ValidationError):
        BookingConfig(**{field: value})
