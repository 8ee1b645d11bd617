from .tutor_prompts import TUTOR_SYSTEM_PROMPT

__all__ = [
    "TUTOR_SYSTEM_PROMPT",
]
