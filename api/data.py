"""GET /api/data: read endpoints for the booking screen."""

import asyncio

from fastapi import APIRouter, Query, Request

from api.base import success_response
from api.sessions import SessionRegistry
from core.calculator import item_breakdown
from core.models import CatalogKind
from core.services.booking_session import BookingSession
from utils.operator_context import get_current_hotel_id


def screen_state(session: BookingSession) -> dict:
    """Everything the booking screen renders, as JSON-ready data."""
    store = session.store
    controller = session.controller
    draft = store.get_draft()
    date_status = session.current_date_status()

    return {
        "draft": draft.model_dump(mode="json"),
        "item_totals": [item_breakdown(item) for item in draft.items],
        "current_item": store.get_current_item().model_dump(mode="json"),
        "editing_item_index": store.editing_item_index,
        "item_in_progress": store.item_in_progress.is_set,
        "totals": controller.totals().model_dump(mode="json"),
        "receipts": [r.model_dump(mode="json") for r in store.receipts],
        "state": controller.state.value,
        "edit": controller.markers.model_dump(mode="json"),
        "busy": controller.busy_flags(),
        "can_create_receipt": controller.can_create_receipt,
        "unsaved_changes": store.unsaved_changes(),
        "date_range": {"valid": date_status.valid, "message": date_status.message},
    }


def create_data_router(sessions: SessionRegistry) -> APIRouter:
    router = APIRouter()
    client = sessions.client

    @router.get("/data/booking")
    async def get_booking(request: Request):
        session = sessions.get(request)
        return success_response(screen_state(session)).model_dump(mode="json")

    @router.get("/data/validation")
    async def get_validation(request: Request):
        result = sessions.get(request).validation()
        return success_response({
            "ok": result.ok,
            "violations": [
                {"field": v.field, "message": v.message, "target_selector": v.target_selector}
                for v in result.violations
            ],
        }).model_dump(mode="json")

    @router.get("/data/reference")
    async def get_reference(request: Request):
        reference = await asyncio.to_thread(client.fetch_reference_data, get_current_hotel_id())
        return success_response(reference.model_dump(mode="json")).model_dump(mode="json")

    @router.get("/data/catalog/{kind}")
    async def get_catalog(request: Request, kind: str, q: str = Query("")):
        try:
            catalog_kind = CatalogKind(kind)
        except ValueError:
            raise ValueError(
                f"Unknown catalog kind '{kind}'. "
                f"Valid kinds: {', '.join(sorted(k.value for k in CatalogKind))}"
            ) from None

        if catalog_kind == CatalogKind.MENU:
            if not q:
                raise ValueError("'menu' catalog requires the package id as 'q'")
            menus = await asyncio.to_thread(client.fetch_package_menus, q)
            return success_response(menus).model_dump(mode="json")

        if catalog_kind == CatalogKind.ACCOUNT:
            refs = await asyncio.to_thread(client.list_accounts, get_current_hotel_id())
        elif catalog_kind == CatalogKind.PAYMODE:
            if not q:
                raise ValueError("'paymode' catalog requires the account id as 'q'")
            refs = await asyncio.to_thread(client.list_paymodes, q)
        else:
            refs = await asyncio.to_thread(client.search_catalog, catalog_kind, q, get_current_hotel_id())

        return success_response([r.model_dump(mode="json") for r in refs]).model_dump(mode="json")

    return router
