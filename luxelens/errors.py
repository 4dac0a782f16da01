"""Failure taxonomy shared by the builder, the provider client and the orchestrator."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "LuxeLensError",
    "MissingInput",
    "InvalidInput",
    "ConfigurationError",
    "GenerationRefused",
    "EmptyResponse",
    "ProviderError",
    "PersistenceFailure",
    "AuthenticationError",
]


class LuxeLensError(RuntimeError):
    """Base class for classified workflow failures."""

    message_key = "generic"


class MissingInput(LuxeLensError):
    """Raised before any network call when a mode's required fields are absent."""

    message_key = "missing_input"

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = tuple(fields)
        super().__init__(f"missing required input: {', '.join(self.fields)}")


class InvalidInput(LuxeLensError):
    """Raised when an input is present but not acceptable for the selected mode."""

    message_key = "invalid_input"


class ConfigurationError(LuxeLensError):
    """Raised when provider credentials are unavailable."""

    message_key = "configuration"


class GenerationRefused(LuxeLensError):
    """The provider answered with an explanation instead of an image."""

    message_key = "refused"

    def __init__(self, explanation: str) -> None:
        self.explanation = explanation
        super().__init__(explanation)


class EmptyResponse(LuxeLensError):
    """The provider returned neither an image nor an explanation."""

    message_key = "empty_response"


class ProviderError(LuxeLensError):
    """The provider SDK rejected the call (quota, auth, invalid argument...)."""

    message_key = "provider"


class PersistenceFailure(LuxeLensError):
    """A history write or read failed. Logged, never shown to the user."""

    message_key = "persistence"


class AuthenticationError(LuxeLensError):
    """The auth service rejected the supplied credentials or could not be reached."""

    message_key = "authentication"
