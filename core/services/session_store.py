"""
Session persistence for the booking screen.

Mirrors the draft, the edit markers and the receipt cache into a key-value
store so the screen can be rebuilt after the operator visits a picker screen
and comes back. The store is best-effort: every failure is logged and
swallowed, and a load that fails reads as "nothing saved".

Key layout (per screen session):
    session:<sid>:draft            DraftSessionSnapshot
    session:<sid>:edit             EditMarkers (survives draft clears)
    session:<sid>:receipts:<qid>   cached receipts of one quotation
"""

import logging
from typing import Any

import redis
from pydantic import ValidationError

from clients.valkey_client import ValkeyClient
from core.models import DraftSessionSnapshot, EditMarkers, Receipt

logger = logging.getLogger(__name__)

_STORE_ERRORS = (redis.RedisError, ValueError, TypeError, OSError)


class SessionStore:
    """Best-effort key-value persistence scoped to one screen session."""

    def __init__(self, valkey: ValkeyClient, session_id: str, ttl_seconds: int | None = None):
        self._valkey = valkey
        self.session_id = session_id
        self._ttl = ttl_seconds
        self.writes = 0

    def _key(self, *parts: str) -> str:
        return ":".join(("session", self.session_id, *parts))

    # -------------------------------------------------------------------------
    # Generic port
    # -------------------------------------------------------------------------

    def save(self, key: str, value: dict | list) -> bool:
        """Write a JSON value. Returns False (after logging) if the store refused."""
        try:
            self._valkey.set_json(key, value, expire_seconds=self._ttl)
        except _STORE_ERRORS as e:
            logger.error(f"Error writing {key} to session store: {e}")
            return False
        self.writes += 1
        return True

    def load(self, key: str) -> Any:
        """Read a JSON value; None when missing or unreadable."""
        try:
            return self._valkey.get_json(key)
        except _STORE_ERRORS as e:
            logger.error(f"Error reading {key} from session store: {e}")
            return None

    def remove(self, key: str) -> bool:
        try:
            self._valkey.delete(key)
        except _STORE_ERRORS as e:
            logger.error(f"Error removing {key} from session store: {e}")
            return False
        return True

    # -------------------------------------------------------------------------
    # Draft snapshot
    # -------------------------------------------------------------------------

    def save_draft(self, snapshot: DraftSessionSnapshot) -> bool:
        return self.save(self._key("draft"), snapshot.model_dump(mode="json"))

    def load_draft(self) -> DraftSessionSnapshot | None:
        raw = self.load(self._key("draft"))
        if raw is None:
            return None
        try:
            return DraftSessionSnapshot.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable draft snapshot for session {self.session_id}: {e}")
            self.remove(self._key("draft"))
            return None

    # -------------------------------------------------------------------------
    # Edit markers
    # -------------------------------------------------------------------------

    def save_edit_markers(self, markers: EditMarkers) -> bool:
        return self.save(self._key("edit"), markers.model_dump(mode="json"))

    def load_edit_markers(self) -> EditMarkers:
        raw = self.load(self._key("edit"))
        if raw is None:
            return EditMarkers()
        try:
            return EditMarkers.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable edit markers for session {self.session_id}: {e}")
            return EditMarkers()

    def clear_edit_markers(self) -> bool:
        return self.remove(self._key("edit"))

    # -------------------------------------------------------------------------
    # Receipt cache
    # -------------------------------------------------------------------------

    def save_receipts(self, quotation_id: str, receipts: tuple[Receipt, ...] | list[Receipt]) -> bool:
        return self.save(
            self._key("receipts", str(quotation_id)),
            [receipt.model_dump(mode="json") for receipt in receipts],
        )

    def load_receipts(self, quotation_id: str) -> tuple[Receipt, ...]:
        raw = self.load(self._key("receipts", str(quotation_id)))
        if not isinstance(raw, list):
            return ()
        try:
            return tuple(Receipt.model_validate(row) for row in raw)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable receipt cache for quotation {quotation_id}: {e}")
            return ()

    def remove_receipts(self, quotation_id: str) -> bool:
        return self.remove(self._key("receipts", str(quotation_id)))

    # -------------------------------------------------------------------------
    # Clearing
    # -------------------------------------------------------------------------

    def clear_draft(self) -> None:
        """
        Drop the draft snapshot.

        Edit markers are never touched here. The receipt cache of the edited
        quotation is kept while in edit mode; outside edit mode there is no
        financial history to keep.
        """
        self.remove(self._key("draft"))

        markers = self.load_edit_markers()
        if not markers.is_edit_mode and markers.editing_quotation_id:
            self.remove_receipts(markers.editing_quotation_id)

    def end_session(self) -> None:
        """Forget everything: draft, edit markers and the edited quotation's receipts."""
        markers = self.load_edit_markers()
        self.remove(self._key("draft"))
        if markers.editing_quotation_id:
            self.remove_receipts(markers.editing_quotation_id)
        self.clear_edit_markers()
