"""
Request builders for the booking service's save endpoint.

Quotation save, invoice creation and invoice modification all go to one
endpoint and differ only in invoice_flag and bill_id. Create versus update
is a separate axis, driven by whether a quotation id is being edited.
"""

from dataclasses import dataclass
from typing import Any, Union

from core.calculator import compute_totals
from core.models import BookingDraft, ItemDraft
from utils.dates import format_wire_date, format_wire_time
from utils.money import format_amount, to_number
from utils.operator_context import Operator

# Per-head tax splits the service expects on every event block; it
# recomputes the amounts itself.
_PACKAGE_CGST_PER = 2.5
_PACKAGE_SGST_PER = 2.5
_VENUE_CGST_PER = 9
_VENUE_SGST_PER = 9


@dataclass(frozen=True)
class SaveDraft:
    """Plain quotation save (invoice_flag "0")."""

    quotation_id: str | None = None

    invoice_flag = "0"

    @property
    def bill_id(self) -> str:
        return "0"


@dataclass(frozen=True)
class CreateInvoice:
    """Promote the booking to a new invoice (invoice_flag "1", bill_id "0")."""

    quotation_id: str | None = None

    invoice_flag = "1"

    @property
    def bill_id(self) -> str:
        return "0"


@dataclass(frozen=True)
class ModifyInvoice:
    """Re-save an existing invoice under its bill id."""

    existing_bill_id: str
    quotation_id: str | None = None

    invoice_flag = "1"

    @property
    def bill_id(self) -> str:
        return self.existing_bill_id


BookingRequest = Union[SaveDraft, CreateInvoice, ModifyInvoice]


def _menu_item_line(item: ItemDraft) -> dict[str, Any]:
    return {
        "Date": format_wire_date(item.item_date),
        "ItemName": item.name,
        "Unit": item.unit,
        "Quantity": to_number(item.quantity),
        "Rate": to_number(item.rate),
        "Amount": item.amount,
        "Discount": item.discount_amount,
        "Taxable": item.taxable,
        "TaxName": item.tax_name,
        "TaxPer": to_number(item.tax_percent),
        "TaxAmount": item.tax_amount,
        "TotalAmount": item.total,
        "EventId": "",
        "ItemId": item.package_id or "",
        "ItemNote": item.note,
        "IsPackage": "1" if item.package_id else "0",
    }


def _event_menus(items: tuple[ItemDraft, ...]) -> list[dict[str, Any]]:
    """Flatten every item's chosen menus; tax breakdown left for the service."""
    entries = []
    for item in items:
        for index, (category_id, menu) in enumerate(item.selected_menus.items()):
            entries.append({
                "cat_id": menu.category_id or category_id,
                "cat_name": menu.category_name,
                "menu_id": menu.menu_id,
                "menu_name": menu.menu_name,
                "menu_qty": menu.quantity,
                "menu_rate": menu.rate,
                "unit": menu.unit,
                "menu_amount": menu.amount,
                "igst_per": 0,
                "igst_amt": 0,
                "cgst_per": 0,
                "cgst_amt": 0,
                "sgst_per": 0,
                "sgst_amt": 0,
                "tot_amt": 0,
                "includeinpk": menu.include_in_package,
                "menu_instructions": menu.instructions,
                "menu_status": menu.status,
                "package_id": item.package_id or "",
                "cat_srno": menu.cat_srno or str(index + 1),
                "added_from": "1",
                "display_index": "0",
            })
    return entries


def build_booking_payload(
    request: BookingRequest,
    draft: BookingDraft,
    operator: Operator,
) -> dict[str, Any]:
    """
    Build the JSON body for the save endpoint.

    Bill-level aggregates are computed here from the draft with the same
    formulas as the on-screen totals; the service re-validates them.

    Args:
        request: Which kind of save this is
        draft: The validated draft
        operator: Hotel and login submitting

    Returns:
        Payload dict ready for JSON encoding
    """
    totals = compute_totals(draft.items, draft.other_charges, draft.settlement_discount)
    customer = draft.customer
    event = draft.event

    from_day = format_wire_date(draft.from_date)
    from_time = format_wire_time(draft.from_time)

    event_block = {
        "sel_event_id": "",
        "event_name": "",
        "event_date": from_day,
        "from_time": from_time,
        "to_time": format_wire_time(draft.to_time),
        "serving_id": event.serving_id,
        "serving_name": event.serving_name,
        "venue_id": event.venue_id,
        "venue_name": event.venue_name,
        "pax": event.max_people,
        "veg_pax": "",
        "non_veg_pax": "",
        "rate_per_pax": "",
        "instructions": "",
        "status_id": draft.status_id,
        "status_name": draft.status_name,
        "venue_address": event.serving_address,
        "subtotal": totals.sub_total,
        "package_igst_per": 0,
        "package_igst_amt": 0,
        "package_cgst_per": _PACKAGE_CGST_PER,
        "package_cgst_amt": 0,
        "package_sgst_per": _PACKAGE_SGST_PER,
        "package_sgst_amt": 0,
        "package_roundoff": 0,
        "package_total": totals.bill_amount,
        "venue_charges": 0,
        "venue_igst_per": 0,
        "venue_igst_amt": 0,
        "venue_cgst_per": _VENUE_CGST_PER,
        "venue_cgst_amt": 0,
        "venue_sgst_per": _VENUE_SGST_PER,
        "venue_sgst_amt": 0,
        "venue_roundoff": 0,
        "venue_total": 0,
        "other_charges": totals.other_charges,
        "other_igst_per": 0,
        "other_igst_amt": 0,
        "other_cgst_per": 0,
        "other_cgst_amt": 0,
        "other_sgst_per": 0,
        "other_sgst_amt": 0,
        "other_roundoff": 0,
        "other_total": 0,
        "total_amt": totals.bill_amount,
        "package_id": "",
        "eventquot_id": "",
        "tax_per_id": "0",
        "min_pax": event.min_people,
        "max_pax": event.max_people,
        "event_menus": _event_menus(draft.items),
        "event_package_menus": [],
        "menu_itms_arr": [_menu_item_line(item) for item in draft.items],
    }

    return {
        "user_id": operator.login_id,
        "hotel_id": operator.hotel_id,
        "booking_date": from_day,
        "booking_date_to": format_wire_date(draft.to_date),
        "comp_id": customer.company_id,
        "comp_name": customer.company_name,
        "quot_status_id": draft.status_id,
        "function_id": customer.function_id,
        "function_name": customer.function_name,
        "party_details": {
            "party_id": customer.party_id,
            "party_name": customer.party_name,
            "contact1": customer.phone,
            "contact2": "",
            "whatsapp1": "",
            "whatsapp2": "",
            "email1": customer.email,
            "email2": "",
            "addressline1": "",
            "addressline2": "",
            "zipcode": "",
            "country": "",
            "state": "",
            "city": "",
        },
        "function_details": {
            "occasion": customer.function_name,
            "function_time": from_time,
            "guest_name": customer.party_name,
            "designation": "Host",
            "arrival_time": from_time,
            "instruction": "",
        },
        "events": [event_block],
        "quot_id": request.quotation_id or "0",
        "package_amount": format_amount(totals.sub_total),
        "venue_amount": "0.00",
        "other_amount": format_amount(totals.other_charges),
        "subtotal_all": format_amount(totals.sub_total),
        "discount": format_amount(totals.total_discount),
        "fright": "0.00",
        "taxable": format_amount(totals.taxable),
        "tax": format_amount(totals.tax_amount),
        "charges": "0.00",
        "roundoff": format_amount(totals.round_off),
        "bill_amount": format_amount(totals.bill_amount),
        "bill_comp_id": draft.billing_company_id,
        "single_event": "1",
        "invoice_flag": request.invoice_flag,
        "bill_id": request.bill_id,
        "attended_by": draft.attended_by,
        "from_list": 1,
        "entry_date": format_wire_date(draft.entry_date),
        "entry_time": format_wire_time(draft.entry_time),
        "other_ch_bill": format_amount(totals.other_charges),
        "settl_disc_bill": format_amount(totals.settlement_discount),
        "enquiry": 1 if draft.from_enquiry else 0,
        "AddedFrom": "E" if draft.from_enquiry else "Q",
    }


def build_receipt_form(
    operator: Operator,
    quotation_id: str,
    ledger_id: str,
    receipt_date: str,
    amount: float,
    discount: float,
    tds: float,
    account_id: str,
    paymode_id: str,
    note: str,
    bill_amount: float,
    already_received: float,
    remaining_before: float,
) -> dict[str, str]:
    """Form fields for the receipt endpoint (all values as strings)."""
    return {
        "hotel_id": operator.hotel_id,
        "login_id": operator.login_id,
        "str_date": receipt_date,
        "str_ledger_id": ledger_id,
        "str_amount": str(amount),
        "str_ac_id": account_id,
        "str_paymode_id": paymode_id,
        "str_note": note,
        "str_discount": str(discount),
        "str_tds": str(tds),
        "quot_id": quotation_id,
        "bill_amount": str(bill_amount),
        "already_received": str(already_received),
        "remaining_before": str(remaining_before),
        "net_receipt": str(amount - discount - tds),
    }
