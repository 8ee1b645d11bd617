"""
Request and response models for the tutor chat endpoint.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, field_validator


class TutorChatRequest(BaseModel):
    """Payload accepted by the relay.

    - message: the learner's text, sent to the tutor as a single user turn
    """
    message: str

    @field_validator("message")
    @classmethod
    def strip_message(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message cannot be empty")
        return value


class TutorMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class TutorChoice(BaseModel):
    message: TutorMessage


class TutorChatResponse(BaseModel):
    """Normalized chat completion returned to the caller.

    Mirrors the OpenAI chat completion layout so existing front ends can keep
    reading ``choices[0].message.content``.
    """
    choices: List[TutorChoice]
    model: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None

    @property
    def content(self) -> str:
        return self.choices[0].message.content
