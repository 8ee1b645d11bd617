"""
Tutor chat endpoint.

Relays a single learner message to the configured chat-completion provider.
"""
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from tutor_relay.api.models import ErrorResponse, TutorChatResponse
from tutor_relay.config.settings import Settings, get_settings
from tutor_relay.controllers import TutorRelayController
from tutor_relay.services.credentials import SettingsCredentialProvider
from tutor_relay.services.providers import ProviderAdapter, build_provider_adapter
from tutor_relay.services.upstream_client import ChatCompletionClient

# ============================================================================
# Dependency Injection
# ============================================================================


def get_provider_adapter(settings: Settings = Depends(get_settings)) -> ProviderAdapter:
    """Adapter for the provider selected by TUTOR_PROVIDER."""
    return build_provider_adapter(
        settings.tutor_provider,
        model=settings.tutor_model,
        base_url=settings.upstream_base_url,
    )


def get_chat_client(request: Request) -> ChatCompletionClient:
    """Chat-completion client created in the application lifespan."""
    return request.app.state.chat_client


def get_relay_controller(
    adapter: ProviderAdapter = Depends(get_provider_adapter),
    chat_client: ChatCompletionClient = Depends(get_chat_client),
    settings: Settings = Depends(get_settings),
) -> TutorRelayController:
    """Dependency injection for TutorRelayController."""
    return TutorRelayController(
        adapter=adapter,
        credentials=SettingsCredentialProvider(),
        chat_client=chat_client,
        is_production=settings.is_production,
    )


# ============================================================================
# Router
# ============================================================================

router = APIRouter()


# ============================================================================
# Endpoints
# ============================================================================


@router.api_route(
    "/chat",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_model=TutorChatResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request body or message"},
        401: {"model": ErrorResponse, "description": "Upstream rejected the API key"},
        405: {"model": ErrorResponse, "description": "Method not allowed"},
        429: {"model": ErrorResponse, "description": "Upstream rate limit"},
        500: {"model": ErrorResponse, "description": "Configuration or internal error"},
    },
)
async def tutor_chat(
    request: Request,
    controller: TutorRelayController = Depends(get_relay_controller),
) -> Response:
    """
    English tutor chat endpoint.

    Accepts ``{"message": "..."}`` and returns the tutor's reply in chat
    completion layout. OPTIONS answers CORS preflight; other methods get 405.
    """
    body = await request.body()
    result = await controller.handle(request.method, body)

    if result.content is None:
        return Response(status_code=result.status_code, headers=result.headers)

    return JSONResponse(
        status_code=result.status_code,
        content=result.content,
        headers=result.headers,
    )
