"""Tests for utils/operator_context.py - hotel/login propagation via contextvars."""

import pytest

from core.exceptions import PreconditionError
from utils.operator_context import (
    Operator,
    clear_current_operator,
    get_current_hotel_id,
    get_current_operator,
    operator_context,
    set_current_operator,
)


class TestGetCurrentOperator:

    def test_unset_raises_precondition(self):
        with pytest.raises(PreconditionError, match="No hotel / login set"):
            get_current_operator()

    def test_missing_hotel_raises(self):
        set_current_operator(None, "17")
        with pytest.raises(PreconditionError, match="No hotel ID found"):
            get_current_operator()

    def test_missing_login_raises(self):
        set_current_operator("290", "")
        with pytest.raises(PreconditionError, match="Login ID missing"):
            get_current_operator()

    def test_returns_operator_when_set(self):
        set_current_operator("290", "17")
        assert get_current_operator() == Operator(hotel_id="290", login_id="17")
        assert get_current_hotel_id() == "290"

    def test_ids_are_strings(self):
        set_current_operator(290, 17)
        assert get_current_operator() == Operator(hotel_id="290", login_id="17")


class TestOperatorContextManager:

    def test_sets_and_restores(self):
        with operator_context("290", "17"):
            assert get_current_operator().login_id == "17"
        with pytest.raises(PreconditionError):
            get_current_operator()

    def test_nested_restores_outer(self):
        with operator_context("290", "17"):
            with operator_context("291", "18"):
                assert get_current_hotel_id() == "291"
            assert get_current_hotel_id() == "290"

    def test_clear(self):
        set_current_operator("290", "17")
        clear_current_operator()
        with pytest.raises(PreconditionError):
            get_current_operator()
