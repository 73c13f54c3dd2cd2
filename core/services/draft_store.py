"""
Draft store: the one mutable home of the booking draft.

All edits go through here. Each edit builds a new immutable draft; an edit
that yields an equal draft is dropped before any listener hears about it, so
no-op edits never re-render and never write to the session store.

Besides the draft itself the store owns the item being composed (current
item), the receipts of the edited quotation, and the baseline used to tell
whether there are unsaved changes.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Callable

from core.concurrency import OneShotFlag
from core.models import (
    BookingDraft,
    CatalogKind,
    CatalogRef,
    DraftSessionSnapshot,
    ItemDraft,
    Receipt,
)
from core.normalize import normalize_ref
from utils.dates import reconcile_date_range
from utils.timezone import now_local

logger = logging.getLogger(__name__)

Patch = dict[str, Any] | Callable[[BookingDraft], BookingDraft]
ItemPatch = dict[str, Any] | Callable[[ItemDraft], ItemDraft]

_NESTED_FIELDS = ("customer", "event")


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | None = None,
) -> dict[str, dict[str, Any]]:
    """
    Field-level differences between two JSON-dumped states.

    Returns:
        {field: {"old": old_val, "new": new_val}} for changed fields; empty if equal.
    """
    exclude = exclude_fields or set()
    changes = {}
    for key in set(old) | set(new):
        if key in exclude:
            continue
        if old.get(key) != new.get(key):
            changes[key] = {"old": old.get(key), "new": new.get(key)}
    return changes


def default_draft(now: datetime | None = None) -> BookingDraft:
    """A fresh draft: entry and booking instants all set to now."""
    now = now or now_local()
    return BookingDraft(
        entry_date=now.date(),
        entry_time=now.time(),
        from_date=now.date(),
        from_time=now.time(),
        to_date=now.date(),
        to_time=now.time(),
    )


class DraftStore:
    """
    Owner of the booking draft and the item composer.

    Listeners registered with subscribe() receive a DraftSessionSnapshot after
    every effective change; date listeners receive the draft whenever its
    from/to range moved.
    """

    def __init__(
        self,
        initial: BookingDraft | None = None,
        item_flag_timeout: float = 5.0,
        clock: Callable[[], datetime] = now_local,
    ):
        self._clock = clock
        self._draft = initial or default_draft(clock())
        self._current_item = ItemDraft(item_date=self._draft.from_date)
        self._editing_index: int | None = None
        self._item_date_overridden = False
        self._receipts: tuple[Receipt, ...] = ()
        self._baseline = self._draft
        self._hydrating = 0
        self._listeners: list[Callable[[DraftSessionSnapshot], None]] = []
        self._date_listeners: list[Callable[[BookingDraft], None]] = []
        self.item_in_progress = OneShotFlag("item add in progress", item_flag_timeout)

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Callable[[DraftSessionSnapshot], None]) -> None:
        self._listeners.append(callback)

    def subscribe_dates(self, callback: Callable[[BookingDraft], None]) -> None:
        self._date_listeners.append(callback)

    def _notify(self, dates_moved: bool = False) -> None:
        snapshot = self.snapshot()
        for callback in list(self._listeners):
            callback(snapshot)
        if dates_moved:
            for callback in list(self._date_listeners):
                callback(self._draft)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_draft(self) -> BookingDraft:
        return self._draft

    def get_current_item(self) -> ItemDraft:
        return self._current_item

    @property
    def editing_item_index(self) -> int | None:
        return self._editing_index

    @property
    def item_date_overridden(self) -> bool:
        return self._item_date_overridden

    @property
    def receipts(self) -> tuple[Receipt, ...]:
        return self._receipts

    def snapshot(self) -> DraftSessionSnapshot:
        return DraftSessionSnapshot(
            draft=self._draft,
            current_item=self._current_item,
            editing_item_index=self._editing_index,
            item_date_overridden=self._item_date_overridden,
        )

    def unsaved_changes(self) -> dict[str, dict[str, Any]]:
        """Differences between the draft and the last loaded/saved state."""
        return compute_changes(
            self._baseline.model_dump(mode="json"),
            self._draft.model_dump(mode="json"),
        )

    @property
    def is_dirty(self) -> bool:
        return self._draft != self._baseline

    # -------------------------------------------------------------------------
    # Draft edits
    # -------------------------------------------------------------------------

    def _apply_patch(self, patch: Patch) -> BookingDraft:
        if callable(patch):
            return patch(self._draft)

        merged = self._draft.model_dump()
        for key, value in patch.items():
            if key in _NESTED_FIELDS and isinstance(value, dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
        return BookingDraft.model_validate(merged)

    def update_draft(self, patch: Patch) -> BookingDraft:
        """
        Apply an edit to the draft.

        Accepts a partial dict (nested "customer"/"event" dicts are merged
        field by field) or a function from draft to draft. Booking range edits
        go through the date corrections; a from-date move also carries the
        composed item's date along until the operator has set an item date.

        Returns:
            The resulting draft (the same object when nothing changed)

        Raises:
            pydantic.ValidationError: If the patch has values of the wrong type
        """
        current = self._draft
        candidate = self._apply_patch(patch)

        dates_moved = candidate.date_range != current.date_range
        if dates_moved:
            candidate = candidate.with_date_range(
                reconcile_date_range(current.date_range, candidate.date_range)
            )

        if candidate == current:
            return current

        self._draft = candidate
        if self._hydrating:
            self._baseline = candidate

        if candidate.from_date != current.from_date and not self._item_date_overridden:
            self._current_item = self._current_item.model_copy(update={"item_date": candidate.from_date})

        self._notify(dates_moved=dates_moved)
        return candidate

    def apply_selection(self, kind: CatalogKind, record: dict[str, Any] | str | CatalogRef | None) -> BookingDraft:
        """
        Apply a picker selection.

        The raw record is normalized to {id, name}; an unresolved selection
        keeps the name and clears the id.
        """
        ref = record if isinstance(record, CatalogRef) else normalize_ref(kind, record)
        ref_id = ref.id or ""

        if kind == CatalogKind.PARTY:
            customer = {"party_id": ref_id, "party_name": ref.name}
            if ref.extra.get("phone"):
                customer["phone"] = ref.extra["phone"]
            if ref.extra.get("email"):
                customer["email"] = ref.extra["email"]
            return self.update_draft({"customer": customer})
        if kind == CatalogKind.COMPANY:
            return self.update_draft({"customer": {"company_id": ref_id, "company_name": ref.name}})
        if kind == CatalogKind.FUNCTION:
            return self.update_draft({"customer": {"function_id": ref_id, "function_name": ref.name}})
        if kind == CatalogKind.VENUE:
            return self.update_draft({"event": {"venue_id": ref_id, "venue_name": ref.name}})
        if kind == CatalogKind.SERVING:
            event = {"serving_id": ref_id, "serving_name": ref.name}
            if ref.extra.get("address"):
                event["serving_address"] = ref.extra["address"]
            return self.update_draft({"event": event})
        if kind == CatalogKind.BILLING_COMPANY:
            return self.update_draft({"billing_company_id": ref_id, "billing_company_name": ref.name})
        if kind == CatalogKind.STATUS:
            return self.update_draft({"status_id": ref_id, "status_name": ref.name})
        if kind == CatalogKind.ATTENDEE:
            return self.update_draft({"attended_by": ref.name})
        if kind == CatalogKind.ITEM:
            self.update_current_item(_item_patch_from_ref(ref))
            return self._draft

        raise ValueError(f"Selections of kind '{kind.value}' do not apply to the draft")

    def seed_calendar_date(self, day: date) -> BookingDraft:
        """Put both booking dates on a calendar-picked day, keeping the times."""
        return self.update_draft({"from_date": day, "to_date": day})

    # -------------------------------------------------------------------------
    # Item composer
    # -------------------------------------------------------------------------

    def _fresh_item(self) -> ItemDraft:
        if self._item_date_overridden:
            return ItemDraft(item_date=self._current_item.item_date)
        return ItemDraft(item_date=self._draft.from_date)

    def begin_item(self, index: int | None = None) -> bool:
        """
        Start composing an item: a new one (index None) or a copy of an existing row.

        Returns False if another add/edit is already in progress.

        Raises:
            IndexError: If index does not name an existing row
        """
        if index is not None and not 0 <= index < len(self._draft.items):
            raise IndexError(f"No item at index {index}")
        if not self.item_in_progress.set():
            return False

        self._editing_index = index
        self._current_item = self._draft.items[index] if index is not None else self._fresh_item()
        self._notify()
        return True

    def update_current_item(self, patch: ItemPatch) -> ItemDraft:
        """
        Edit the item being composed.

        Setting its date is an explicit choice: from then on the item date no
        longer follows the booking from-date.
        """
        current = self._current_item
        if callable(patch):
            candidate = patch(current)
        else:
            candidate = ItemDraft.model_validate({**current.model_dump(), **patch})

        if candidate == current:
            return current

        if candidate.item_date != current.item_date:
            self._item_date_overridden = True

        self._current_item = candidate
        self._notify()
        return candidate

    def add_or_replace_item(self, index: int | None, item: ItemDraft) -> BookingDraft:
        """
        Append an item (index None) or replace the row at index.

        Raises:
            ValueError: If quantity, rate or discount are out of range
            IndexError: If index does not name an existing row
        """
        errors = item.bound_errors()
        if errors:
            raise ValueError("; ".join(errors))

        items = list(self._draft.items)
        if index is None:
            items.append(item)
        else:
            if not 0 <= index < len(items):
                raise IndexError(f"No item at index {index}")
            items[index] = item

        before = self._draft
        self.item_in_progress.clear()
        self._editing_index = None
        self._current_item = self._fresh_item()
        updated = self.update_draft(lambda d: d.model_copy(update={"items": tuple(items)}))
        if updated is before:
            # Same rows; the composer still reset
            self._notify()
        return updated

    def commit_current_item(self) -> BookingDraft:
        """Store the composed item at its editing position (or append it)."""
        return self.add_or_replace_item(self._editing_index, self._current_item)

    def cancel_item(self) -> None:
        self.item_in_progress.clear()
        self._editing_index = None
        self._current_item = self._fresh_item()
        self._notify()

    def remove_item(self, index: int) -> BookingDraft:
        """
        Remove the row at index. Later rows shift up; index is their only identity.

        Raises:
            IndexError: If index does not name an existing row
        """
        items = list(self._draft.items)
        if not 0 <= index < len(items):
            raise IndexError(f"No item at index {index}")
        del items[index]
        if self._editing_index is not None:
            self._editing_index = None
            self.item_in_progress.clear()
        return self.update_draft(lambda d: d.model_copy(update={"items": tuple(items)}))

    # -------------------------------------------------------------------------
    # Receipts
    # -------------------------------------------------------------------------

    def set_receipts(self, receipts: tuple[Receipt, ...] | list[Receipt]) -> None:
        self._receipts = tuple(receipts)

    def remove_receipt(self, voucher_id: str) -> bool:
        """Drop one receipt from the cache. True if it was there."""
        remaining = tuple(r for r in self._receipts if str(r.voucher_id) != str(voucher_id))
        removed = len(remaining) != len(self._receipts)
        self._receipts = remaining
        return removed

    # -------------------------------------------------------------------------
    # Whole-draft transitions
    # -------------------------------------------------------------------------

    @contextmanager
    def hydrating(self):
        """Edits inside this block move the baseline too (they are not unsaved changes)."""
        self._hydrating += 1
        try:
            yield
        finally:
            self._hydrating -= 1

    def hydrate(self, draft: BookingDraft) -> None:
        """Replace the whole draft with a loaded quotation. Receipts are kept."""
        with self.hydrating():
            self._draft = draft
            self._baseline = draft
            self._editing_index = None
            self.item_in_progress.clear()
            self._current_item = self._fresh_item()
            self._notify(dates_moved=True)

    def restore(self, snapshot: DraftSessionSnapshot) -> None:
        """Rebuild from a session snapshot (returning from a picker screen)."""
        with self.hydrating():
            self._draft = snapshot.draft
            self._baseline = snapshot.draft
            self._current_item = snapshot.current_item
            self._editing_index = snapshot.editing_item_index
            self._item_date_overridden = self._item_date_overridden or snapshot.item_date_overridden
        logger.debug("Draft restored from session snapshot")

    def mark_saved(self) -> None:
        self._baseline = self._draft

    def reset_draft(self, preserve_edit_mode: bool = False) -> BookingDraft:
        """
        Start over with a fresh draft.

        With preserve_edit_mode the receipts of the edited quotation stay
        cached; otherwise they are dropped with everything else.
        """
        fresh = default_draft(self._clock())
        self._draft = fresh
        self._baseline = fresh
        self._editing_index = None
        self.item_in_progress.clear()
        self._current_item = self._fresh_item()
        if not preserve_edit_mode:
            self._receipts = ()
        self._notify(dates_moved=True)
        return fresh


def _item_patch_from_ref(ref: CatalogRef) -> dict[str, Any]:
    """Fields of the composed item filled from a picked package/item."""
    patch: dict[str, Any] = {"name": ref.name, "package_id": ref.id}
    for field in ("rate", "tax_percent", "tax_name", "unit"):
        if ref.extra.get(field):
            patch[field] = ref.extra[field]
    return patch
