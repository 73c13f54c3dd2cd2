"""FastAPI application for the headless booking screen."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.actions import create_actions_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.middleware import OperatorContextMiddleware, RequestIDMiddleware
from api.sessions import SessionRegistry
from clients.booking_client import BookingClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_valkey_url
from core.config import BookingConfig

logger = logging.getLogger(__name__)


def create_app(
    client: BookingClient | None = None,
    valkey: ValkeyClient | None = None,
    config: BookingConfig | None = None,
) -> FastAPI:
    """
    Build the app with middleware, error handlers and routes.

    Args:
        client: Booking service client (from Vault config if None)
        valkey: Session store connection (from Vault URL if None)
        config: Screen configuration (defaults if None)
    """
    config = config or BookingConfig()
    if client is None:
        client = BookingClient(base_url=config.service_base_url, timeout=config.request_timeout_seconds)
    if valkey is None:
        valkey = ValkeyClient(get_valkey_url(), namespace=config.session_key_prefix)

    sessions = SessionRegistry(client, valkey, config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        sessions.close_all()
        logger.info("Booking screens closed")

    app = FastAPI(title="Banquet Booking", lifespan=lifespan)
    app.state.sessions = sessions
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(OperatorContextMiddleware)
    register_error_handlers(app)

    app.include_router(create_data_router(sessions), prefix="/api")
    app.include_router(create_actions_router(sessions), prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
