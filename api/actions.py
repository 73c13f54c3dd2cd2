"""POST /api/actions: unified mutation endpoint for the booking screen."""

from datetime import date

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import success_response
from api.data import screen_state
from api.sessions import SessionRegistry
from core.models import CatalogKind, ReceiptRequest
from core.services.booking_session import BookingSession


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict = {}


def create_actions_router(sessions: SessionRegistry) -> APIRouter:
    router = APIRouter()

    handlers = {
        "draft": DraftHandler(),
        "item": ItemHandler(),
        "booking": BookingHandler(),
        "receipt": ReceiptHandler(),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        session = sessions.get(request)
        method = getattr(handler, f"_handle_{body.action}")
        result = await method(session, dict(body.data))
        return success_response(result).model_dump(mode="json")

    @router.delete("/session")
    async def close_session(request: Request):
        closed = sessions.close(sessions.session_id(request))
        return success_response({"closed": closed}).model_dump(mode="json")

    return router


def _index(data: dict) -> int | None:
    value = data.get("index")
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid item index '{value}'") from None


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class DraftHandler:
    ALLOWED_ACTIONS = {"update", "select", "reset", "discard"}

    async def _handle_update(self, session: BookingSession, data: dict):
        session.store.update_draft(data)
        return screen_state(session)

    async def _handle_select(self, session: BookingSession, data: dict):
        if "kind" not in data:
            raise ValueError("'kind' is required")
        session.store.apply_selection(CatalogKind(data["kind"]), data.get("record"))
        return screen_state(session)

    async def _handle_reset(self, session: BookingSession, data: dict):
        session.reset(preserve_edit_mode=bool(data.get("preserve_edit_mode", False)))
        if data.get("calendar_date"):
            session.seed_calendar_date(date.fromisoformat(str(data["calendar_date"])))
        return screen_state(session)

    async def _handle_discard(self, session: BookingSession, data: dict):
        session.reset(preserve_edit_mode=False)
        return screen_state(session)


class ItemHandler:
    ALLOWED_ACTIONS = {"begin", "update", "commit", "remove"}

    async def _handle_begin(self, session: BookingSession, data: dict):
        started = session.store.begin_item(_index(data))
        if not started:
            raise ValueError("An item is already being added or edited")
        return screen_state(session)

    async def _handle_update(self, session: BookingSession, data: dict):
        session.store.update_current_item(data)
        return screen_state(session)

    async def _handle_commit(self, session: BookingSession, data: dict):
        session.store.commit_current_item()
        return screen_state(session)

    async def _handle_remove(self, session: BookingSession, data: dict):
        index = _index(data)
        if index is None:
            raise ValueError("'index' is required")
        session.store.remove_item(index)
        return screen_state(session)


class BookingHandler:
    ALLOWED_ACTIONS = {"load", "save", "invoice"}

    async def _handle_load(self, session: BookingSession, data: dict):
        if not data.get("quotation_id"):
            raise ValueError("'quotation_id' is required")
        await session.controller.load_quotation(str(data["quotation_id"]))
        return screen_state(session)

    async def _handle_save(self, session: BookingSession, data: dict):
        result = await session.controller.save(continue_editing=bool(data.get("continue_editing", False)))
        return {
            "quotation_id": result.quotation_id,
            "bill_id": result.bill_id,
            "screen": screen_state(session),
        }

    async def _handle_invoice(self, session: BookingSession, data: dict):
        result = await session.controller.make_invoice(continue_editing=bool(data.get("continue_editing", False)))
        return {
            "quotation_id": result.quotation_id,
            "bill_id": result.bill_id,
            "screen": screen_state(session),
        }


class ReceiptHandler:
    ALLOWED_ACTIONS = {"create", "delete", "refresh", "print"}

    async def _handle_create(self, session: BookingSession, data: dict):
        await session.controller.make_receipt(ReceiptRequest(**data))
        return screen_state(session)

    async def _handle_delete(self, session: BookingSession, data: dict):
        if not data.get("voucher_id"):
            raise ValueError("'voucher_id' is required")
        await session.controller.delete_receipt(str(data["voucher_id"]))
        return screen_state(session)

    async def _handle_refresh(self, session: BookingSession, data: dict):
        await session.controller.refresh_receipts()
        return screen_state(session)

    async def _handle_print(self, session: BookingSession, data: dict):
        if not data.get("voucher_id"):
            raise ValueError("'voucher_id' is required")
        return await session.controller.fetch_receipt_print(str(data["voucher_id"]))
