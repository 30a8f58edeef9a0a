"""Main FastAPI application."""
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from app.api import health
from app.api.webhooks import voice
from app.core.config import settings
from app.core.dependencies import build_session_store
from app.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: the Redis connection itself is opened on first use
    setup_logging(settings.log_level)
    app.state.session_store = build_session_store(settings)
    yield
    # Shutdown
    await app.state.session_store.close()


app = FastAPI(
    title="Telephony Receptionist",
    description="Provider-agnostic call-flow webhooks for the chatbot builder",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(voice.router, tags=["telephony"])
app.include_router(voice.router, prefix="/api/telephony", tags=["telephony"])


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
