"""
Read-only access to provider credentials.
"""
from typing import Callable, Optional, Protocol

from tutor_relay.config.settings import Settings


class CredentialProvider(Protocol):
    def get_credential(self, name: str) -> Optional[str]:
        """Return the secret stored under ``name``, or None if it is not configured."""


class SettingsCredentialProvider:
    """Looks credentials up in the application settings.

    A fresh ``Settings`` is loaded on every lookup so a rotated key is picked up
    without restarting the process.
    """

    def __init__(self, settings_factory: Callable[[], Settings] = Settings):
        self._settings_factory = settings_factory

    def get_credential(self, name: str) -> Optional[str]:
        settings = self._settings_factory()
        value = getattr(settings, name.lower(), None)
        if not isinstance(value, str):
            return None
        return value.strip() or None


REDACTED = "***REDACTED***"


def redact(text: str, *secrets: Optional[str]) -> str:
    """Replace every occurrence of the given secrets in ``text``."""
    for secret in secrets:
        if secret and text:
            text = text.replace(secret, REDACTED)
    return text
