"""Tests for draft validation."""

from datetime import date, time

from core.models import BookingDraft, ItemDraft
from core.validation import DATE_RANGE_MESSAGE, validate


class TestEmptyDraft:

    def test_first_violation_is_entry_date(self):
        result = validate(BookingDraft())

        assert not result.ok
        assert result.first.field == "entryDate"
        assert result.first.message == "Please select Entry Date"
        assert result.first.target_selector == "#entry-date"

    def test_reports_every_rule_in_order(self):
        fields = [v.field for v in validate(BookingDraft()).violations]

        assert fields == [
            "entryDate", "entryTime", "billingCompany", "attendedBy", "status",
            "partyName", "companyName", "functionName", "venue", "servingName",
            "minPeople", "maxPeople", "bookingFromDate", "bookingFromTime",
            "bookingToDate", "bookingToTime", "itemDetails",
        ]


class TestCompleteDraft:

    def test_complete_draft_is_ok(self, complete_draft):
        result = validate(complete_draft)
        assert result.ok
        assert result.first is None

    def test_validation_is_idempotent_and_pure(self, complete_draft):
        before = complete_draft.model_copy()
        first = validate(complete_draft)
        second = validate(complete_draft)
        assert first == second
        assert complete_draft == before


class TestDateRangeRule:

    def test_inverted_range_reported_first(self, draft_factory):
        draft = draft_factory(to_date=date(2026, 3, 19), attended_by="")

        result = validate(draft)

        assert result.first.field == "dateRange"
        assert result.first.message == DATE_RANGE_MESSAGE
        assert result.first.target_selector == ".pickers"
        assert [v.field for v in result.violations] == ["dateRange", "attendedBy"]

    def test_same_day_earlier_to_time(self, draft_factory):
        draft = draft_factory(to_time=time(18, 59))
        assert validate(draft).first.field == "dateRange"


class TestResolvedOrNamed:

    def test_billing_company_by_id_only_is_enough(self, draft_factory):
        draft = draft_factory(billing_company_name="")
        assert validate(draft).ok

    def test_name_only_party_is_enough(self, draft_factory, complete_draft):
        customer = complete_draft.customer.model_copy(update={"party_id": ""})
        assert validate(draft_factory(customer=customer)).ok

    def test_blank_min_people_reported(self, draft_factory, complete_draft):
        event = complete_draft.event.model_copy(update={"min_people": "  "})
        assert validate(draft_factory(event=event)).first.field == "minPeople"


class TestItemRules:

    def test_no_items(self, draft_factory):
        result = validate(draft_factory(items=()))
        assert [v.field for v in result.violations] == ["itemDetails"]
        assert result.first.target_selector == ".item-details-container"

    def test_each_incomplete_row_reported_after_aggregate_rules(self, draft_factory, item_factory):
        items = (
            item_factory(),
            item_factory(name=""),
            item_factory(),
            item_factory(rate=""),
        )
        result = validate(draft_factory(items=items, status_name="", status_id=""))

        assert [v.field for v in result.violations] == ["status", "items[1]", "items[3]"]
        assert result.violations[1].message == "Please complete Item Row 2"
        assert result.violations[2].target_selector == '.item-row[data-index="3"]'

    def test_zero_rate_is_complete(self, draft_factory):
        item = ItemDraft(name="Hall decoration (complimentary)", quantity="1", rate="0")
        assert validate(draft_factory(items=(item,))).ok
