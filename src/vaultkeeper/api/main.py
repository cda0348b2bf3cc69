# Vault Backend - FastAPI application
#
# Local REST API for a desktop front end. Binds to localhost by default;
# every route requires the per-process session token.

import json
import logging
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import get_settings
from ..core import EventSeverity, EventType, get_event_logger
from .generator_routes import router as generator_router
from .security import ensure_session_token, initialize_session_token
from .vault_routes import current_session, router as vault_router

logger = logging.getLogger(__name__)


class VaultJSONResponse(JSONResponse):
    """JSONResponse that escapes lone surrogates in stored text as \\uXXXX."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=None,
            separators=(",", ":"),
        ).encode("utf-8", "backslashreplace")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the session token on startup; lock the vault on shutdown."""
    ensure_session_token()
    get_event_logger().log_event(
        event_type=EventType.SYSTEM_START,
        severity=EventSeverity.INFO,
        message="Vault backend started",
        details={"version": __version__},
    )
    yield
    session = current_session()
    if session is not None:
        session.lock()
    get_event_logger().log_event(
        event_type=EventType.SYSTEM_STOP,
        severity=EventSeverity.INFO,
        message="Vault backend stopped",
    )


app = FastAPI(
    title="vaultkeeper API",
    description="Local encrypted credential vault",
    version=__version__,
    lifespan=lifespan,
    default_response_class=VaultJSONResponse,
)

_allowed_origins = [
    "http://localhost:3000", "http://127.0.0.1:3000",
    "http://localhost:8000", "http://127.0.0.1:8000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(vault_router)
app.include_router(generator_router)


def start_api_server(host: str = "127.0.0.1", port: int = 8000):
    """
    Start FastAPI server.

    Args:
        host: Host to bind to (default: localhost only for security)
        port: Port to listen on
    """
    token = initialize_session_token()
    if not get_settings().api_token:
        print(f"[OK] API token: {token}")
    logger.info("Starting vault API on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_level="info")
