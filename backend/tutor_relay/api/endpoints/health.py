"""
Health check endpoint.
Reports liveness and whether the upstream provider is configured.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tutor_relay import __version__
from tutor_relay.config.settings import Settings, get_settings
from tutor_relay.services.credentials import SettingsCredentialProvider
from tutor_relay.services.providers import build_provider_adapter

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: datetime
    version: str
    environment: str
    provider: str
    model: str
    credential_configured: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic health check endpoint."""
    adapter = build_provider_adapter(
        settings.tutor_provider,
        model=settings.tutor_model,
        base_url=settings.upstream_base_url,
    )
    credential = SettingsCredentialProvider().get_credential(adapter.credential_name)

    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.environment,
        provider=adapter.name,
        model=adapter.model,
        credential_configured=credential is not None,
    )
