"""
One booking screen: draft store, session mirror and lifecycle controller wired together.

Edits reach the session store through a debouncer; booking range edits
trigger a date-range check at most once per frame. Receipt events are
mirrored into the session store by the receipt cache handlers.
"""

import logging
from datetime import date, datetime
from typing import Callable

from clients.booking_client import BookingClient
from clients.valkey_client import ValkeyClient
from core.concurrency import Debouncer, FrameThrottle
from core.config import BookingConfig
from core.event_bus import EventBus
from core.events import DateRangeChecked
from core.handlers.receipt_cache_handler import handle_quotation_loaded, handle_receipts_changed
from core.models import BookingDraft, EditMarkers
from core.services.draft_store import DraftStore
from core.services.lifecycle_service import LifecycleController
from core.services.session_store import SessionStore
from core.validation import DATE_RANGE_MESSAGE, ValidationResult, validate
from utils.dates import is_valid_range
from utils.timezone import now_local

logger = logging.getLogger(__name__)


class BookingSession:
    """
    The single active booking screen for a session id.

    Construction restores whatever the session store holds for the id (draft
    snapshot, edit markers, cached receipts), so leaving for a picker screen
    and coming back yields the same logical session.
    """

    def __init__(
        self,
        session_id: str,
        client: BookingClient,
        valkey: ValkeyClient,
        config: BookingConfig | None = None,
        event_bus: EventBus | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self.session_id = session_id
        self.config = config or BookingConfig()
        self.event_bus = event_bus or EventBus()
        self._current = True

        self.session_store = SessionStore(valkey, session_id, ttl_seconds=self.config.session_ttl_seconds)
        self.store = DraftStore(item_flag_timeout=self.config.one_shot_timeout_seconds, clock=clock)
        self.controller = LifecycleController(
            client,
            self.store,
            self.event_bus,
            config=self.config,
            is_current=lambda: self._current,
        )

        self.date_status = DateRangeChecked(valid=True)
        self._persist = Debouncer(self.session_store.save_draft, self.config.debounce_seconds)
        self._check_dates = FrameThrottle(self._publish_date_range, self.config.frame_interval_seconds)

        self._restore()

        self.store.subscribe(self._persist.trigger)
        self.store.subscribe_dates(self._check_dates)
        self.controller.subscribe_markers(self._on_markers)

        receipts_changed = handle_receipts_changed(self.session_store)
        for event_type in ("ReceiptCreated", "ReceiptDeleted", "ReceiptsRefreshed"):
            self.event_bus.subscribe(event_type, receipts_changed)
        self.event_bus.subscribe("QuotationLoaded", handle_quotation_loaded(self.session_store, self.store))

    # -------------------------------------------------------------------------
    # Session mirror
    # -------------------------------------------------------------------------

    def _restore(self) -> None:
        markers = self.session_store.load_edit_markers()
        snapshot = self.session_store.load_draft()

        if snapshot is not None:
            self.store.restore(snapshot)
        if markers.is_edit_mode and markers.editing_quotation_id:
            self.store.set_receipts(self.session_store.load_receipts(markers.editing_quotation_id))
        self.controller.set_markers(markers)

        if snapshot is not None or markers.is_edit_mode:
            logger.info(
                f"Session {self.session_id} restored "
                f"(draft={'yes' if snapshot else 'no'}, editing={markers.editing_quotation_id})"
            )

    def _on_markers(self, markers: EditMarkers) -> None:
        if markers.is_edit_mode:
            self.session_store.save_edit_markers(markers)
        else:
            self.session_store.end_session()

    def _publish_date_range(self, draft: BookingDraft) -> None:
        valid = is_valid_range(draft.date_range)
        self.date_status = DateRangeChecked(valid=valid, message=None if valid else DATE_RANGE_MESSAGE)
        self.controller.notify_screen(self.date_status)

    # -------------------------------------------------------------------------
    # Screen operations
    # -------------------------------------------------------------------------

    @property
    def is_current(self) -> bool:
        return self._current

    def current_date_status(self) -> DateRangeChecked:
        """Latest date-range check, running a pending one first."""
        self._check_dates.flush()
        return self.date_status

    def validation(self) -> ValidationResult:
        return validate(self.store.get_draft())

    def seed_calendar_date(self, day: date) -> bool:
        """Start a new booking on a calendar-picked day. Ignored in edit mode."""
        if self.controller.markers.is_edit_mode:
            logger.debug(f"Calendar date {day} ignored while editing {self.controller.markers.editing_quotation_id}")
            return False
        self.store.seed_calendar_date(day)
        return True

    def reset(self, preserve_edit_mode: bool = False) -> None:
        """
        Clear the draft here and in the session store.

        With preserve_edit_mode the screen stays on the edited quotation and
        its cached receipts are kept; otherwise edit mode ends too.
        """
        if preserve_edit_mode:
            self.store.reset_draft(preserve_edit_mode=True)
        else:
            self.controller.discard()
        self._persist.cancel()
        self.session_store.clear_draft()

    def flush(self) -> None:
        """Write any pending snapshot and run any pending date check now."""
        self._check_dates.flush()
        self._persist.flush()

    def close(self) -> None:
        """
        The screen goes away.

        Pending writes are flushed. Submissions still in flight complete
        against the draft, but no screen events are published for them.
        """
        self._current = False
        self.flush()
