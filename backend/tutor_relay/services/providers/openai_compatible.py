"""
Adapter for providers that speak the OpenAI chat completion format.

DeepSeek and OpenAI both accept the same request body and return the same
``choices[].message`` layout, so one adapter covers them with different
endpoints, models and credentials.
"""
from typing import Any, Dict, List, Optional

from tutor_relay.api.models import TutorChatResponse, TutorChoice, TutorMessage
from tutor_relay.services.prompts import TUTOR_SYSTEM_PROMPT

from .base import ProviderAdapter

MAX_TOKENS = 500
TEMPERATURE = 0.7


def _coerce_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        parts: List[str] = []
        for item in value:
            if isinstance(item, dict):
                item = item.get("text")
            if isinstance(item, str) and item:
                parts.append(item)
        return "".join(parts)
    return ""


class OpenAICompatibleAdapter(ProviderAdapter):
    def __init__(
        self,
        name: str,
        base_url: str,
        model: str,
        credential_name: str,
        key_help_url: str,
        system_prompt: str = TUTOR_SYSTEM_PROMPT,
    ):
        self.name = name
        self.base_url = base_url
        self.model = model
        self.credential_name = credential_name
        self.key_help_url = key_help_url
        self.system_prompt = system_prompt

    def build_request(self, message: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": message},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
            "stream": False,
        }

    def normalize_response(self, raw: Any) -> Optional[TutorChatResponse]:
        if not isinstance(raw, dict):
            return None

        choices = raw.get("choices")
        if not isinstance(choices, list) or not choices:
            return None

        first = choices[0]
        if not isinstance(first, dict) or not isinstance(first.get("message"), dict):
            return None

        content = _coerce_text(first["message"].get("content"))
        model = raw.get("model")
        usage = raw.get("usage")

        return TutorChatResponse(
            choices=[TutorChoice(message=TutorMessage(content=content))],
            model=model if isinstance(model, str) else None,
            usage=usage if isinstance(usage, dict) else None,
        )

    def __repr__(self) -> str:
        return f"OpenAICompatibleAdapter(name={self.name!r}, model={self.model!r})"
