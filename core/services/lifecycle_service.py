"""
Lifecycle controller: quotation -> invoice -> receipts.

Decides which request a save becomes, gates every submission kind so only
one of each is in flight, and applies the service's answer to the draft
store. Network calls run in a worker thread (the client is synchronous) so
the screen's event loop keeps taking edits while a submission is out.

Failure never touches the draft: a rejected or failed submission leaves
everything as it was, ready to resubmit.
"""

import asyncio
import logging
import time
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable

from clients.booking_client import BookingClient, BookingServiceError, SubmitResult
from core.calculator import TotalsMemo
from core.config import BookingConfig
from core.concurrency import ActionGate
from core.event_bus import EventBus
from core.events import (
    InvoiceSaved,
    QuotationLoaded,
    QuotationSaved,
    ReceiptCreated,
    ReceiptDeleted,
    ReceiptsRefreshed,
    ScreenEvent,
    SubmissionFailed,
    SubmissionRejected,
)
from core.exceptions import (
    DraftValidationError,
    GuardRejectedError,
    NoActiveQuotationError,
    ReceiptRejectedError,
)
from core.models import BookingDraft, EditMarkers, ReceiptRequest, Totals
from core.payloads import (
    BookingRequest,
    CreateInvoice,
    ModifyInvoice,
    SaveDraft,
    build_booking_payload,
    build_receipt_form,
)
from core.services.draft_store import DraftStore
from core.validation import validate
from utils.money import format_currency
from utils.operator_context import Operator, get_current_operator
from utils.timezone import today_local

logger = logging.getLogger(__name__)

SUBMISSION_KINDS = ("load", "save", "invoice", "receipt", "delete_receipt")


class LifecycleState(str, Enum):
    """Where the booking on screen stands."""

    DRAFTING_NEW = "drafting_new"
    DRAFTING_EDIT = "drafting_edit"
    INVOICED = "invoiced"
    PARTIALLY_RECEIVED = "partially_received"
    FULLY_RECEIVED = "fully_received"


class LifecycleController:
    """Orchestrates loads, saves, invoices and receipts for one booking screen."""

    def __init__(
        self,
        client: BookingClient,
        store: DraftStore,
        event_bus: EventBus,
        config: BookingConfig | None = None,
        is_current: Callable[[], bool] = lambda: True,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            client: Booking service client
            store: Draft store of the screen
            event_bus: Where lifecycle events are published
            config: Timeouts and tolerances (defaults if None)
            is_current: Whether the owning screen is still showing; screen-only
                events are dropped once it returns False
            clock: Monotonic clock for the submission gates
        """
        self.client = client
        self.store = store
        self.event_bus = event_bus
        self.config = config or BookingConfig()
        self.is_current = is_current
        self.totals_memo = TotalsMemo()
        self.gates = {
            kind: ActionGate(
                kind,
                safety_timeout=self.config.busy_safety_timeout_seconds,
                cooldown=self.config.cooldown_seconds,
                clock=clock,
            )
            for kind in SUBMISSION_KINDS
        }
        self._markers = EditMarkers()
        self._ledger_id: str | None = None
        self._marker_listeners: list[Callable[[EditMarkers], None]] = []

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def markers(self) -> EditMarkers:
        return self._markers

    def subscribe_markers(self, callback: Callable[[EditMarkers], None]) -> None:
        self._marker_listeners.append(callback)

    def set_markers(self, markers: EditMarkers, ledger_id: str | None = None) -> None:
        """Replace the edit markers (also used when restoring a session)."""
        if ledger_id is not None:
            self._ledger_id = ledger_id
        if markers == self._markers:
            return
        self._markers = markers
        for callback in list(self._marker_listeners):
            callback(markers)

    def totals(self) -> Totals:
        return self.totals_memo.get(self.store.get_draft(), self.store.receipts)

    @property
    def state(self) -> LifecycleState:
        if not self._markers.is_edit_mode:
            return LifecycleState.DRAFTING_NEW
        if not self._markers.editing_invoice_id:
            return LifecycleState.DRAFTING_EDIT

        totals = self.totals()
        epsilon = self.config.receipt_epsilon
        if totals.balance <= epsilon:
            return LifecycleState.FULLY_RECEIVED
        if totals.total_received > epsilon:
            return LifecycleState.PARTIALLY_RECEIVED
        return LifecycleState.INVOICED

    @property
    def can_create_receipt(self) -> bool:
        return bool(self._markers.editing_quotation_id) and self.totals().balance > self.config.receipt_epsilon

    def busy_flags(self) -> dict[str, bool]:
        return {kind: gate.busy for kind, gate in self.gates.items()}

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def notify_screen(self, event: ScreenEvent) -> None:
        if self.is_current():
            self.event_bus.publish(event)
        else:
            logger.debug(f"Screen gone; dropping {event.__class__.__name__}")

    def _reject(self, error: GuardRejectedError) -> GuardRejectedError:
        logger.info(f"{error.action} rejected: {error}")
        self.notify_screen(SubmissionRejected(action=error.action, message=str(error)))
        return error

    @contextmanager
    def _claim(self, kind: str):
        try:
            with self.gates[kind].claim(f"Please wait, {kind.replace('_', ' ')} is already in progress") as token:
                yield token
        except GuardRejectedError as e:
            if e.action != kind:
                raise
            raise self._reject(e)

    def _validated_draft(self) -> BookingDraft:
        draft = self.store.get_draft()
        result = validate(draft)
        if not result.ok:
            logger.info(f"Draft invalid: {result.first.field} ({len(result.violations)} violations)")
            raise DraftValidationError(result.violations)
        return draft

    def _active_quotation_id(self) -> str:
        quotation_id = self._markers.editing_quotation_id
        if not quotation_id:
            raise NoActiveQuotationError("No saved quotation is open for receipts")
        return quotation_id

    async def _call(self, action: str, fn: Callable, *args) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except BookingServiceError as e:
            self.notify_screen(SubmissionFailed(action=action, message=str(e)))
            raise

    # -------------------------------------------------------------------------
    # Quotation
    # -------------------------------------------------------------------------

    async def load_quotation(self, quotation_id: str) -> None:
        """
        Enter edit mode for a stored quotation.

        Fetches the detail, hydrates the draft and the receipt cache and sets
        the edit markers. Nothing changes if the fetch fails.

        Raises:
            PreconditionError: If no operator is set
            GuardRejectedError: If a load is already in flight
            BookingServiceError: If the fetch fails
        """
        operator = get_current_operator()
        with self._claim("load"):
            detail = await self._call(
                "load", self.client.fetch_quotation_detail, quotation_id, operator.hotel_id,
            )

        self.store.set_receipts(detail.receipts)
        self.store.hydrate(detail.draft)
        self.set_markers(
            EditMarkers(
                is_edit_mode=True,
                editing_quotation_id=detail.quotation_id,
                editing_invoice_id=detail.bill_id,
            ),
            ledger_id=detail.ledger_id,
        )

        logger.info(f"Loaded quotation {detail.quotation_id} (bill {detail.bill_id}, {len(detail.receipts)} receipts)")
        self.event_bus.publish(QuotationLoaded(
            quotation_id=detail.quotation_id,
            bill_id=detail.bill_id,
            receipt_count=len(detail.receipts),
        ))

    def _save_request(self) -> BookingRequest:
        quotation_id = self._markers.editing_quotation_id
        if self._markers.editing_invoice_id:
            # A plain save of an invoiced booking re-saves the invoice
            return ModifyInvoice(existing_bill_id=self._markers.editing_invoice_id, quotation_id=quotation_id)
        return SaveDraft(quotation_id=quotation_id)

    def _invoice_request(self) -> BookingRequest:
        quotation_id = self._markers.editing_quotation_id
        if self._markers.editing_invoice_id:
            return ModifyInvoice(existing_bill_id=self._markers.editing_invoice_id, quotation_id=quotation_id)
        return CreateInvoice(quotation_id=quotation_id)

    async def _submit(self, kind: str, request: BookingRequest, operator: Operator, draft: BookingDraft) -> SubmitResult:
        payload = build_booking_payload(request, draft, operator)
        with self._claim(kind):
            return await self._call(kind, self.client.submit_booking, payload)

    def _after_save(self, result: SubmitResult, request: BookingRequest, continue_editing: bool) -> tuple[str | None, str | None]:
        quotation_id = result.quotation_id or request.quotation_id
        bill_id = result.bill_id or (request.bill_id if request.bill_id != "0" else None)

        if continue_editing:
            self.store.mark_saved()
            self.set_markers(EditMarkers(
                is_edit_mode=bool(quotation_id),
                editing_quotation_id=quotation_id,
                editing_invoice_id=bill_id if request.invoice_flag == "1" else self._markers.editing_invoice_id,
            ))
        else:
            self.discard()
        return quotation_id, bill_id

    async def save(self, continue_editing: bool = False) -> SubmitResult:
        """
        Save the draft as a quotation (new or updated).

        When an invoice is being edited the save goes out with invoice
        semantics under the existing bill id, and shares the invoice gate so
        it cannot overlap an invoice submission for the same bill.

        Args:
            continue_editing: Keep the draft open (now in edit mode) instead of clearing it

        Raises:
            PreconditionError: If no operator is set
            DraftValidationError: If the draft is incomplete
            GuardRejectedError: If a save (or, for an invoice, an invoice submission) is already in flight
            BookingServiceError: If the service does not confirm the save
        """
        operator = get_current_operator()
        draft = self._validated_draft()
        request = self._save_request()
        totals = self.totals()

        kind = "invoice" if request.invoice_flag == "1" else "save"
        result = await self._submit(kind, request, operator, draft)
        quotation_id, bill_id = self._after_save(result, request, continue_editing)

        if request.invoice_flag == "1":
            self.event_bus.publish(InvoiceSaved(
                quotation_id=quotation_id, bill_id=bill_id, created=False,
                bill_amount=totals.bill_amount, balance=totals.balance,
            ))
        else:
            self.event_bus.publish(QuotationSaved(
                quotation_id=quotation_id, created=request.quotation_id is None,
            ))
        return result

    async def make_invoice(self, continue_editing: bool = False) -> SubmitResult:
        """
        Save the draft with invoice semantics: a new invoice, or the existing one modified.

        Raises:
            PreconditionError: If no operator is set
            DraftValidationError: If the draft is incomplete
            GuardRejectedError: If an invoice submission is already in flight
            BookingServiceError: If the service does not confirm the save
        """
        operator = get_current_operator()
        draft = self._validated_draft()
        request = self._invoice_request()
        totals = self.totals()

        result = await self._submit("invoice", request, operator, draft)
        quotation_id, bill_id = self._after_save(result, request, continue_editing)

        self.event_bus.publish(InvoiceSaved(
            quotation_id=quotation_id,
            bill_id=bill_id,
            created=isinstance(request, CreateInvoice),
            bill_amount=totals.bill_amount,
            balance=totals.balance,
        ))
        return result

    def discard(self) -> None:
        """Drop the draft and leave edit mode."""
        self.store.reset_draft(preserve_edit_mode=False)
        self._ledger_id = None
        self.set_markers(EditMarkers())

    # -------------------------------------------------------------------------
    # Receipts
    # -------------------------------------------------------------------------

    def _check_receipt(self, request: ReceiptRequest, totals: Totals) -> None:
        epsilon = self.config.receipt_epsilon
        balance = totals.balance

        if balance <= epsilon:
            raise ReceiptRejectedError("This bill is already fully settled. No further receipts allowed.")
        if request.amount <= 0:
            raise ReceiptRejectedError("Please enter a valid Received Amount")
        if request.net_amount <= 0:
            raise ReceiptRejectedError("Net receipt amount must be greater than zero")
        if request.net_amount > balance + epsilon:
            raise ReceiptRejectedError(f"You can receive maximum {format_currency(balance)} for this bill")
        if not request.account_id:
            raise ReceiptRejectedError("Please select Account")
        if not request.paymode_id:
            raise ReceiptRejectedError("Please select Paymode")

    async def _reload_receipts(self, quotation_id: str, operator: Operator) -> tuple:
        detail = await asyncio.to_thread(self.client.fetch_quotation_detail, quotation_id, operator.hotel_id)
        self.store.set_receipts(detail.receipts)
        return self.store.receipts

    async def make_receipt(self, request: ReceiptRequest) -> None:
        """
        Record a payment against the open quotation's bill.

        Rejected before any network call when the bill is settled, the net
        amount (amount - discount - tds) is not positive or exceeds the
        balance, or account/paymode/ledger are missing. After the service
        confirms, the receipt list is re-read.

        Raises:
            PreconditionError: If no operator is set
            NoActiveQuotationError: If no saved quotation is open
            ReceiptRejectedError: If the receipt fails the checks above
            GuardRejectedError: If a receipt submission is already in flight
            BookingServiceError: If the service does not confirm the receipt
        """
        operator = get_current_operator()
        quotation_id = self._active_quotation_id()
        totals = self.totals()

        try:
            self._check_receipt(request, totals)
        except ReceiptRejectedError as e:
            raise self._reject(e)

        ledger_id = request.ledger_id or self._ledger_id or self.store.get_draft().customer.party_id
        if not ledger_id:
            raise self._reject(ReceiptRejectedError("Party ledger id missing for receipt."))

        form = build_receipt_form(
            operator,
            quotation_id=quotation_id,
            ledger_id=ledger_id,
            receipt_date=(request.receipt_date or today_local()).isoformat(),
            amount=request.amount,
            discount=request.discount,
            tds=request.tds,
            account_id=request.account_id,
            paymode_id=request.paymode_id,
            note=request.note,
            bill_amount=totals.bill_amount,
            already_received=totals.total_received,
            remaining_before=totals.balance,
        )

        with self._claim("receipt"):
            await self._call("receipt", self.client.create_receipt, form)
            logger.info(f"Receipt of {request.net_amount} recorded on quotation {quotation_id}")
            try:
                receipts = await self._reload_receipts(quotation_id, operator)
            except BookingServiceError as e:
                logger.warning(f"Receipt saved but the list could not be refreshed: {e}")
                receipts = self.store.receipts

        self.event_bus.publish(ReceiptCreated(
            quotation_id=quotation_id, receipts=receipts, net_amount=request.net_amount,
        ))

    async def delete_receipt(self, voucher_id: str) -> None:
        """
        Delete a receipt and drop it from the cache once the service confirms.

        Raises:
            NoActiveQuotationError: If no saved quotation is open
            GuardRejectedError: If a delete is already in flight
            BookingServiceError: If the service does not confirm the delete
        """
        get_current_operator()
        quotation_id = self._active_quotation_id()

        with self._claim("delete_receipt"):
            await self._call("delete_receipt", self.client.delete_receipt, voucher_id)

        self.store.remove_receipt(voucher_id)
        logger.info(f"Receipt {voucher_id} deleted from quotation {quotation_id}")
        self.event_bus.publish(ReceiptDeleted(
            quotation_id=quotation_id, receipts=self.store.receipts, voucher_id=str(voucher_id),
        ))

    async def refresh_receipts(self) -> tuple:
        """Re-read the receipt list of the open quotation."""
        operator = get_current_operator()
        quotation_id = self._active_quotation_id()
        try:
            receipts = await self._reload_receipts(quotation_id, operator)
        except BookingServiceError as e:
            self.notify_screen(SubmissionFailed(action="refresh", message=str(e)))
            raise

        self.event_bus.publish(ReceiptsRefreshed(quotation_id=quotation_id, receipts=receipts))
        return receipts

    async def fetch_receipt_print(self, voucher_id: str) -> dict[str, Any]:
        """Printable detail of one receipt of the open quotation."""
        operator = get_current_operator()
        return await asyncio.to_thread(
            self.client.fetch_receipt_print_detail,
            operator.hotel_id,
            voucher_id,
            self._markers.editing_quotation_id,
        )
