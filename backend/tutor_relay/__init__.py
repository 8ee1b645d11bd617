"""English tutor relay: forwards learner messages to a chat-completion provider."""

__version__ = "1.0.0"
