"""
Registry of supported upstream chat-completion providers.
"""
from typing import Dict, NamedTuple, Optional

from .base import ProviderAdapter
from .openai_compatible import OpenAICompatibleAdapter


class ProviderSpec(NamedTuple):
    base_url: str
    default_model: str
    #: Environment variable holding the API key
    credential_name: str
    key_help_url: str


PROVIDERS: Dict[str, ProviderSpec] = {
    "deepseek": ProviderSpec(
        base_url="https://api.deepseek.com",
        default_model="deepseek-chat",
        credential_name="DEEPSEEK_API_KEY",
        key_help_url="https://platform.deepseek.com/api_keys",
    ),
    "openai": ProviderSpec(
        base_url="https://api.openai.com/v1",
        default_model="gpt-4o-mini",
        credential_name="OPENAI_API_KEY",
        key_help_url="https://platform.openai.com/api-keys",
    ),
}


class UnknownProviderError(ValueError):
    pass


def get_provider_spec(name: str) -> ProviderSpec:
    try:
        return PROVIDERS[name.lower()]
    except KeyError:
        raise UnknownProviderError(
            f"Unknown provider {name!r}; expected one of {sorted(PROVIDERS)}"
        ) from None


def build_provider_adapter(
    name: str,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
) -> ProviderAdapter:
    """Create the adapter for a configured provider, applying any overrides."""
    spec = get_provider_spec(name)

    return OpenAICompatibleAdapter(
        name=name.lower(),
        base_url=base_url or spec.base_url,
        model=model or spec.default_model,
        credential_name=spec.credential_name,
        key_help_url=spec.key_help_url,
    )


__all__ = [
    "PROVIDERS",
    "OpenAICompatibleAdapter",
    "ProviderAdapter",
    "ProviderSpec",
    "UnknownProviderError",
    "build_provider_adapter",
    "get_provider_spec",
]
