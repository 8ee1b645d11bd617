from .chat import TutorChatRequest, TutorChatResponse, TutorChoice, TutorMessage
from .error import ErrorKind, ErrorResponse

__all__ = [
    "ErrorKind",
    "ErrorResponse",
    "TutorChatRequest",
    "TutorChatResponse",
    "TutorChoice",
    "TutorMessage",
]
