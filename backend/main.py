"""
English Tutor Relay - Backend
FastAPI application relaying learner messages to a chat-completion provider.
"""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from tutor_relay import __version__
from tutor_relay.api.routers import api_router
from tutor_relay.config.settings import get_settings
from tutor_relay.middleware import (
    CorsHeadersMiddleware,
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    register_error_handlers,
)
from tutor_relay.services.credentials import SettingsCredentialProvider
from tutor_relay.services.providers import build_provider_adapter
from tutor_relay.services.upstream_client import ChatCompletionClient


API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    # Startup
    settings = get_settings()
    logging.info(f"Starting {settings.app_name} ({settings.environment})")

    # Validate provider configuration
    adapter = build_provider_adapter(
        settings.tutor_provider,
        model=settings.tutor_model,
        base_url=settings.upstream_base_url,
    )
    if SettingsCredentialProvider().get_credential(adapter.credential_name) is None:
        logging.error(
            f"{adapter.credential_name} is not set; chat requests will fail until it is configured"
        )
    else:
        logging.info(f"Relaying to provider {adapter.name} with model {adapter.model}")

    # Shared connection pool for upstream calls
    http_client = httpx.AsyncClient(timeout=settings.upstream_timeout_seconds)
    app.state.chat_client = ChatCompletionClient(
        timeout=settings.upstream_timeout_seconds,
        http_client=http_client,
    )

    yield

    # Shutdown
    logging.info("Shutting down...")
    await http_client.aclose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="English Tutor Relay API",
        description="Relays learner messages to an English tutor persona on a chat-completion provider",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # Middleware added last runs first: CORS headers wrap every response,
    # including the ones produced by the error handler
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorsHeadersMiddleware)

    app.include_router(api_router, prefix=API_PREFIX)
    register_error_handlers(app, relay_paths=(f"{API_PREFIX}/chat",))

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().is_local,
    )
