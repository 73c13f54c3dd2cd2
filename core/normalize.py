"""
Normalization of booking-service records.

The booking service names the same thing differently from endpoint to
endpoint (LedgerName, VenueName, Name, name, venue_name...). Every raw record
is mapped here, once, on receipt, into the canonical models; nothing past
this module looks at raw field names.
"""

import logging
from datetime import date
from typing import Any, Iterable

from core.models import (
    BookingDraft,
    CatalogKind,
    CatalogRef,
    CustomerInfo,
    EventDetails,
    ItemDraft,
    QuotationDetail,
    Receipt,
    ReferenceData,
    SelectedMenu,
)
from utils.dates import parse_wire_date, parse_wire_time

logger = logging.getLogger(__name__)

# Alternate field names tried in order, per catalog kind.
_ID_FIELDS: dict[CatalogKind, tuple[str, ...]] = {
    CatalogKind.PARTY: ("PartyId", "party_id", "LedgerId", "CustomerId", "Id", "id"),
    CatalogKind.COMPANY: ("CompanyId", "CompId", "comp_id", "LedgerId", "Id", "id"),
    CatalogKind.FUNCTION: ("FunctionId", "function_id", "LedgerId", "Id", "id"),
    CatalogKind.VENUE: ("VenueId", "VauneId", "venue_id", "LedgerId", "Id", "id"),
    CatalogKind.SERVING: ("ServingId", "serving_id", "LedgerId", "Id", "id"),
    CatalogKind.ITEM: ("PackageId", "ItemId", "PackId", "LedgerId", "Id", "id"),
    CatalogKind.MENU: ("MenuId", "menu_id", "Id", "id"),
    CatalogKind.BILLING_COMPANY: ("BillingCompanyId", "CompanyId", "LedgerId", "Id", "id"),
    CatalogKind.STATUS: ("LedgerId", "StatusId", "Id", "id"),
    CatalogKind.ATTENDEE: ("UserId", "LedgerId", "Id", "id"),
    CatalogKind.ACCOUNT: ("AccountId", "LedgerId", "Id", "id"),
    CatalogKind.PAYMODE: ("PaymodeId", "PayModeId", "PayId", "Id", "id"),
}

_NAME_FIELDS: dict[CatalogKind, tuple[str, ...]] = {
    CatalogKind.PARTY: ("PartyName", "LedgerName", "CustomerName", "Name", "name", "party_name"),
    CatalogKind.COMPANY: ("CompName", "CompanyName", "LedgerName", "Name", "name", "company_name"),
    CatalogKind.FUNCTION: ("FunctionName", "Occasion", "LedgerName", "Name", "name", "function_name"),
    CatalogKind.VENUE: ("VenueName", "LedgerName", "Name", "name", "venue_name"),
    CatalogKind.SERVING: ("ServingName", "LedgerName", "Name", "name", "serving_name"),
    CatalogKind.ITEM: ("PackageName", "ItemName", "PackName", "LedgerName", "Name", "name"),
    CatalogKind.MENU: ("MenuName", "Name", "name", "menu_name"),
    CatalogKind.BILLING_COMPANY: ("Name", "CompanyName", "LedgerName", "name"),
    CatalogKind.STATUS: ("LedgerName", "StatusName", "Name", "name"),
    CatalogKind.ATTENDEE: ("Name", "UserName", "LedgerName", "name"),
    CatalogKind.ACCOUNT: ("AccountName", "LedgerName", "Name", "name"),
    CatalogKind.PAYMODE: ("PayName", "PaymodeName", "PayMode", "Name", "name"),
}

# Extra attributes worth keeping on a reference, per kind.
_EXTRA_FIELDS: dict[CatalogKind, dict[str, tuple[str, ...]]] = {
    CatalogKind.PARTY: {"phone": ("PhoneNo", "Mobile", "Contact1", "phone"), "email": ("Email", "Email1", "email")},
    CatalogKind.SERVING: {"address": ("Address", "ServingAddress", "address")},
    CatalogKind.ITEM: {
        "rate": ("Rate", "PackageRate", "rate"),
        "tax_percent": ("TaxPer", "TaxPercent", "tax_per"),
        "tax_name": ("TaxName", "tax_name"),
        "unit": ("Unit", "unit"),
    },
}


def _first(record: dict[str, Any], names: Iterable[str]) -> str:
    """First non-empty value among the candidate field names, as a stripped string."""
    for name in names:
        value = record.get(name)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def normalize_ref(kind: CatalogKind, record: dict[str, Any] | str | None) -> CatalogRef:
    """
    Map a raw catalog record to a CatalogRef.

    A plain string (typed-in name) or a record whose id cannot be found
    degrades to a name-only reference instead of failing. An id of "0" is
    the service's "none" marker and counts as missing.
    """
    if record is None:
        return CatalogRef()
    if isinstance(record, str):
        return CatalogRef(id=None, name=record.strip())

    ref_id = _first(record, _ID_FIELDS[kind])
    if ref_id == "0":
        ref_id = ""
    name = _first(record, _NAME_FIELDS[kind])

    extra = {
        key: value
        for key, candidates in _EXTRA_FIELDS.get(kind, {}).items()
        if (value := _first(record, candidates))
    }

    if not ref_id:
        logger.debug(f"Unresolved {kind.value} selection '{name}' kept as name-only reference")

    return CatalogRef(id=ref_id or None, name=name, extra=extra)


def normalize_refs(kind: CatalogKind, records: Iterable[dict[str, Any]] | None) -> list[CatalogRef]:
    """Normalize a list of raw records, skipping non-dict entries."""
    return [normalize_ref(kind, record) for record in records or [] if isinstance(record, dict)]


def result_list(payload: Any, *keys: str) -> list[dict[str, Any]]:
    """
    Pull the record list out of a response body.

    Accepts a bare list or a dict carrying the list under the first matching
    key (default "result").
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    for key in keys or ("result",):
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return []


def normalize_receipt(record: dict[str, Any]) -> Receipt | None:
    """Map a raw receipt row. Rows without a voucher id are dropped."""
    voucher_id = _first(record, ("VoucherId", "VoId", "vo_id", "voucher_id"))
    if not voucher_id:
        logger.warning("Dropping receipt row without a voucher id")
        return None

    return Receipt(
        voucher_id=voucher_id,
        voucher_no=_first(record, ("VoucherNo", "voucher_no")),
        date=_first(record, ("Date", "VoucherDate", "date")),
        amount=record.get("Amount", record.get("amount")),
        discount=record.get("Discount", record.get("discount")),
        tds=record.get("TDS", record.get("Tds", record.get("tds"))),
        pay_mode=_first(record, ("PayName", "PayMode", "pay_mode")),
        account=_first(record, ("AccountName", "account")),
    )


def normalize_receipts(records: Iterable[dict[str, Any]] | None) -> tuple[Receipt, ...]:
    receipts = (normalize_receipt(r) for r in records or [] if isinstance(r, dict))
    return tuple(r for r in receipts if r is not None)


def normalize_menu_categories(payload: Any) -> list[dict[str, Any]]:
    """
    Package menu categories offered for selection.

    Only categories with serial number 1 are offered; the placeholder menus
    (id "0", "OTHER") are dropped, and categories left without menus go too.
    """
    categories = result_list(payload, "category", "result")
    offered = []
    for category in categories:
        if str(category.get("CatSrNo", "")).strip() != "1":
            continue
        menus = [
            SelectedMenu(
                category_id=str(category.get("CategoryId", "")),
                category_name=str(category.get("CategoryName", "")),
                menu_id=str(menu.get("MenuId", "")),
                menu_name=str(menu.get("MenuName", "")),
                cat_srno=str(category.get("CatSrNo", "")),
                unit=str(menu.get("Unit", "") or ""),
            )
            for menu in category.get("menus") or []
            if str(menu.get("MenuId", "")) != "0" and menu.get("MenuName") != "OTHER"
        ]
        if menus:
            offered.append({
                "category_id": str(category.get("CategoryId", "")),
                "category_name": str(category.get("CategoryName", "")),
                "menus": menus,
            })
    return offered


def normalize_reference_data(server_payload: Any, status_payload: Any) -> ReferenceData:
    """Reference dropdowns from the server-date and status responses."""
    server_date = None
    if isinstance(server_payload, dict):
        rows = result_list(server_payload, "result")
        if rows:
            server_date = _first(rows[0], ("ServerDate",)) or None

    return ReferenceData(
        server_date=server_date,
        billing_companies=tuple(normalize_refs(
            CatalogKind.BILLING_COMPANY, result_list(server_payload, "result2"))),
        attendees=tuple(normalize_refs(CatalogKind.ATTENDEE, result_list(server_payload, "result3"))),
        statuses=tuple(normalize_refs(CatalogKind.STATUS, result_list(status_payload, "result"))),
    )


def _item_from_line(line: dict[str, Any], fallback_date: date | None) -> ItemDraft:
    return ItemDraft(
        item_date=parse_wire_date(line.get("Date")) or fallback_date,
        name=_first(line, ("ItemName",)),
        unit=_first(line, ("Unit",)),
        quantity=_first(line, ("Quantity",)) or "1",
        rate=_first(line, ("Rate",)),
        discount=_first(line, ("Discount",)),
        tax_percent=_first(line, ("TaxPer",)),
        tax_name=_first(line, ("TaxName",)),
        note=_first(line, ("ItemNote",)),
        package_id=_first(line, ("ItemId",)) or None,
    )


def normalize_quotation(quotation_id: str, payload: Any) -> QuotationDetail:
    """
    Map a quotation detail response onto a draft plus its receipts.

    Reads the header from result[0] and the first event block from
    events[0]. Missing dates stay None; validation reports them.

    Raises:
        ValueError: If the response has no header record
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Quotation {quotation_id} not found")

    headers = result_list(payload, "result")
    if not headers:
        raise ValueError(f"Quotation {quotation_id} not found")

    main = headers[0]
    events = result_list(payload, "events")
    event = events[0] if events else {}

    from_date = parse_wire_date(main.get("QuotationDate"))
    items = tuple(
        _item_from_line(line, from_date)
        for line in event.get("items_arr") or []
        if isinstance(line, dict)
    )

    draft = BookingDraft(
        entry_date=parse_wire_date(main.get("EntryDate")),
        entry_time=parse_wire_time(main.get("EntryTime")),
        from_date=from_date,
        from_time=parse_wire_time(event.get("TimeFrom")),
        to_date=parse_wire_date(main.get("QuotationDateTo")),
        to_time=parse_wire_time(event.get("TimeTo")),
        billing_company_id=_first(main, ("BillingCompanyId", "BillCompId")),
        billing_company_name=_first(main, ("BillingCompany",)),
        status_id=_first(main, ("StatusId",)) or _first(event, ("EventStatusId", "StatusId")),
        status_name=_first(main, ("Status",)) or _first(event, ("EventStatusName",)),
        attended_by=_first(main, ("AttendedByName", "AttendedBy")),
        customer=CustomerInfo(
            party_id=_first(main, ("PartyId",)),
            party_name=_first(main, ("PartyName",)),
            company_id=_first(main, ("CompanyId",)),
            company_name=_first(main, ("CompName", "CompanyName")),
            function_id=_first(main, ("FunctionId",)),
            function_name=_first(main, ("Occasion", "FunctionName")),
            phone=_first(main, ("PhoneNo",)),
            email=_first(main, ("Email",)),
        ),
        event=EventDetails(
            venue_id=_first(event, ("VauneId", "VenueId")),
            venue_name=_first(event, ("VenueName",)),
            serving_id=_first(event, ("ServingId",)),
            serving_name=_first(event, ("ServingName",)),
            serving_address=_first(event, ("Address",)),
            min_people=_first(event, ("MinPax",)) or _first(main, ("MinPax",)),
            max_people=_first(event, ("MaxPax", "Pax")),
        ),
        items=items,
        other_charges=_first(main, ("OtherchBill", "OtherCharges", "OtherChBill", "other_ch_bill")),
        settlement_discount=_first(main, ("SettleDiscBill", "SettlementDiscount", "SettlDiscBill", "settl_disc_bill")),
    )

    bill_id = _first(main, ("BillId", "bill_id", "InvoiceId"))
    ledger_id = _first(main, ("PartyLedgerId", "LedgerId", "PartyId"))

    return QuotationDetail(
        quotation_id=str(quotation_id),
        bill_id=bill_id if bill_id and bill_id != "0" else None,
        ledger_id=ledger_id or None,
        draft=draft,
        receipts=normalize_receipts(payload.get("receipts")),
    )
