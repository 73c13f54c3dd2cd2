"""
Booking service client (quotations, invoices, receipts, catalog search).

Synchronous requests-based calls against the hotel's banquet API. Every
failure (connection, timeout, non-2xx, malformed body, missing success
marker) is raised as BookingServiceError; nothing is retried. Responses are
normalized into core models before they leave this module.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import requests

from clients.vault_client import get_booking_service_config
from core.models import CatalogKind, CatalogRef, QuotationDetail, ReferenceData
from core.normalize import (
    normalize_menu_categories,
    normalize_quotation,
    normalize_reference_data,
    normalize_refs,
    result_list,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0

# Search endpoints per catalog kind: (method, path, search parameter name)
_SEARCH_ENDPOINTS: dict[CatalogKind, tuple[str, str, str]] = {
    CatalogKind.PARTY: ("POST", "/search_cust_exp.php", "search_param"),
    CatalogKind.COMPANY: ("POST", "/search_comp.php", "search_param"),
    CatalogKind.FUNCTION: ("POST", "/search_function.php", "search_param"),
    CatalogKind.VENUE: ("GET", "/search_venue.php", "search_para"),
    CatalogKind.SERVING: ("POST", "/search_serving.php", "search_param"),
    CatalogKind.ITEM: ("POST", "/search_pack.php", "search_param"),
}

_TRUE_MARKERS = {"1", "true", "yes"}
_OK_STATUSES = {"success", "ok"}


class BookingServiceError(Exception):
    """Raised when a booking service request fails or its answer is not a clear success."""


@dataclass(frozen=True)
class SubmitResult:
    """Ids the service assigned to a saved booking."""

    quotation_id: str | None
    bill_id: str | None


def _is_success_flag(value: Any) -> bool:
    if value is True:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 1
    return isinstance(value, str) and value.strip().lower() in _TRUE_MARKERS


def _clean_id(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text if text and text != "0" else None


class BookingClient:
    """Client for the banquet booking service."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        """
        Initialize with the service location.

        Args:
            base_url: Service root (e.g. https://host/banquetapi). If None, fetched from Vault.
            timeout: Per-request timeout in seconds. If None, from Vault or 15s.
            session: Optional requests.Session to reuse connections

        Raises:
            ValueError: If base_url resolves to empty
        """
        if base_url is None:
            config = get_booking_service_config()
            base_url = config["base_url"]
            if timeout is None and config.get("timeout_seconds"):
                timeout = float(config["timeout_seconds"])

        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else DEFAULT_TIMEOUT_SECONDS
        self._session = session or requests.Session()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            logger.error(f"Booking service timed out: {method} {path}")
            raise BookingServiceError(f"Request timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Booking service connection failed: {method} {path}: {e}")
            raise BookingServiceError(f"Connection failed: {e}") from e

        if not response.ok:
            logger.error(f"Booking service returned {response.status_code} for {method} {path}")
            raise BookingServiceError(f"Booking service returned HTTP {response.status_code}")

        return response

    def _json(self, method: str, path: str, **kwargs) -> Any:
        response = self._send(method, path, **kwargs)
        try:
            return response.json()
        except (ValueError, json.JSONDecodeError) as e:
            logger.error(f"Malformed JSON from {path}: {response.text[:200]!r}")
            raise BookingServiceError(f"Malformed response from {path}") from e

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def fetch_reference_data(self, hotel_id: str) -> ReferenceData:
        """Server date, billing companies, attendees and quotation statuses."""
        params = {"hotel_id": hotel_id}
        server = self._json("POST", "/get_server_date.php", params=params)
        statuses = self._json(
            "POST", "/search_status.php",
            params={**params, "search_param": "", "para": "single_quot"},
        )
        return normalize_reference_data(server, statuses)

    def search_catalog(self, kind: CatalogKind, term: str = "", hotel_id: str | None = None) -> list[CatalogRef]:
        """
        Search one catalog for picker candidates.

        Raises:
            ValueError: For kinds that have no search endpoint
        """
        if kind not in _SEARCH_ENDPOINTS:
            raise ValueError(f"No search endpoint for catalog kind '{kind.value}'")

        method, path, param = _SEARCH_ENDPOINTS[kind]
        params = {param: term}
        if hotel_id:
            params["hotel_id"] = hotel_id

        payload = self._json(method, path, params=params)
        return normalize_refs(kind, result_list(payload, "result"))

    def fetch_package_menus(self, package_id: str) -> list[dict[str, Any]]:
        """Menu categories selectable for a package."""
        payload = self._json(
            "GET", "/get_pack_menus_disp.php",
            params={"pack_id": package_id, "sub_cat_id": 0, "pass_srno": 0},
        )
        return normalize_menu_categories(payload)

    def list_accounts(self, hotel_id: str) -> list[CatalogRef]:
        """Accounts a receipt can be posted to."""
        payload = self._json("GET", "/get_all_account.php", params={"hotel_id": hotel_id})
        return normalize_refs(CatalogKind.ACCOUNT, result_list(payload, "result", "accounts"))

    def list_paymodes(self, account_id: str) -> list[CatalogRef]:
        """Payment modes available for an account."""
        payload = self._json("GET", "/get_paymodes_from_account.php", params={"acc_id": account_id})
        return normalize_refs(CatalogKind.PAYMODE, result_list(payload, "result", "paymodes"))

    # -------------------------------------------------------------------------
    # Quotation / invoice
    # -------------------------------------------------------------------------

    def fetch_quotation_detail(self, quotation_id: str, hotel_id: str) -> QuotationDetail:
        """
        Fetch a stored quotation with its first event block and receipts.

        Raises:
            BookingServiceError: On transport failure or when the quotation is missing
        """
        payload = self._json(
            "GET", "/get_quot_details.php",
            params={"quot_id": quotation_id, "hotel_id": hotel_id},
        )
        try:
            return normalize_quotation(quotation_id, payload)
        except ValueError as e:
            raise BookingServiceError(str(e)) from e

    def submit_booking(self, payload: dict[str, Any]) -> SubmitResult:
        """
        Save a quotation or invoice (the payload's invoice_flag decides which).

        The service answers {"success": ..., "quot_id": ..., "bill_id": ...};
        older deployments put the quotation id in "success" itself.

        Raises:
            BookingServiceError: If the response is not an unambiguous success
        """
        body = self._json("POST", "/save_quot_new.php", json=payload)
        if not isinstance(body, dict):
            raise BookingServiceError("Unexpected response shape from save")

        success = body.get("success")
        status = str(body.get("status", "")).strip().lower()
        success_id = _clean_id(success) if not isinstance(success, bool) else None
        if success_id is not None and not success_id.isdigit():
            # Only a numeric id in "success" counts; "false", "error" etc. are failures
            success_id = None

        if not (_is_success_flag(success) or success_id or status in _OK_STATUSES):
            message = body.get("message") or body.get("error") or "Failed to save booking"
            raise BookingServiceError(str(message))

        quotation_id = _clean_id(body.get("quot_id")) or _clean_id(body.get("quotation_id"))
        if quotation_id is None and success_id and not _is_success_flag(success):
            quotation_id = success_id

        result = SubmitResult(quotation_id=quotation_id, bill_id=_clean_id(body.get("bill_id")))
        logger.info(f"Booking saved: quotation={result.quotation_id} bill={result.bill_id}")
        return result

    # -------------------------------------------------------------------------
    # Receipts
    # -------------------------------------------------------------------------

    def create_receipt(self, form: dict[str, str]) -> None:
        """
        Record a receipt (form-encoded).

        The endpoint answers with a bare text body. Only "1" (or a JSON body
        with a success flag) counts as success; anything else is a failure,
        since a false success would hide a payment that was never recorded.

        Raises:
            BookingServiceError: If the body is not an unambiguous success
        """
        response = self._send(
            "POST", "/save_inward.php",
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded;charset=UTF-8"},
        )
        text = response.text.strip()

        if text == "1":
            return

        try:
            body = json.loads(text) if text else None
        except json.JSONDecodeError:
            body = None

        if isinstance(body, dict) and (
            _is_success_flag(body.get("success"))
            or str(body.get("status", "")).lower() == "success"
        ):
            return
        if _is_success_flag(body):
            return

        logger.error(f"Receipt not confirmed by service: {text[:200]!r}")
        raise BookingServiceError("Failed to save receipt")

    def delete_receipt(self, voucher_id: str) -> None:
        """
        Delete a receipt voucher.

        Raises:
            BookingServiceError: Unless result[0] carries a success flag or status
        """
        body = self._json(
            "GET", "/delete_or_active_inward.php",
            params={"vo_id": voucher_id, "action": "delete"},
        )
        rows = result_list(body, "result")
        row = rows[0] if rows and isinstance(rows[0], dict) else {}

        if _is_success_flag(row.get("success")) or str(row.get("status", "")).lower() == "success":
            return

        message = row.get("message") or (body.get("message") if isinstance(body, dict) else None)
        raise BookingServiceError(f"Delete failed: {message or 'Failed to delete receipt'}")

    def fetch_receipt_print_detail(self, hotel_id: str, voucher_id: str, quotation_id: str | None) -> dict[str, Any]:
        """
        One receipt record for display/printing.

        Raises:
            BookingServiceError: If the service returns no record
        """
        body = self._json(
            "GET", "/get_receipt_details.php",
            params={"hotel_id": hotel_id, "vo_id": voucher_id, "quot_id": quotation_id or ""},
        )
        rows = result_list(body, "result")
        if not rows or not isinstance(rows[0], dict):
            raise BookingServiceError("No receipt details found to print")
        return rows[0]

    def close(self) -> None:
        self._session.close()
