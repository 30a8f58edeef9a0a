"""FastAPI dependencies."""
from fastapi import Depends, Request

from app.core.config import Settings, settings
from app.services.call_session.manager import CallSessionManager
from app.services.call_session.store import SessionStore


def build_session_store(config: Settings = settings) -> SessionStore:
    """Build the process-wide session store from settings."""
    return SessionStore(
        config.redis_url,
        prefix=config.session_prefix,
        ttl_seconds=config.session_ttl_seconds,
        socket_timeout_seconds=config.redis_socket_timeout_seconds,
    )


def get_session_store(request: Request) -> SessionStore:
    """Get the session store owned by the application."""
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        store = build_session_store()
        request.app.state.session_store = store
    return store


def get_session_manager(
    store: SessionStore = Depends(get_session_store),
) -> CallSessionManager:
    """Get call session manager."""
    return CallSessionManager(store)
