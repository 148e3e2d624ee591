"""Error taxonomy shared by the generator, the store and the HTTP layer."""

from __future__ import annotations

from typing import Dict


class CompanionError(Exception):
    """Base class for every error raised by StartUP Companion."""


class ConfigurationError(CompanionError):
    """A required credential is missing. Not retriable."""


class UpstreamError(CompanionError):
    """The completion gateway answered with a non-success status."""

    def __init__(self, status: int | None, detail: str = "") -> None:
        self.status = status
        self.detail = detail
        label = status if status is not None else "unavailable"
        message = f"API_ERROR: {label}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class MalformedResponseError(CompanionError):
    """The completion body lacks ``choices[0].message.content``."""


class StorageError(CompanionError):
    """A PDF could not be rendered or uploaded. Degrades to a warning."""


class PersistenceError(CompanionError):
    """A store read or write failed."""


class ProfileNotFoundError(CompanionError):
    """No business profile exists for the session."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"No business profile found for session '{session_id}'")


class SessionNotFoundError(CompanionError):
    """The wizard has no state for the session."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Unknown wizard session '{session_id}'")


CONFIGURATION_USER_MESSAGE = "Configuration error: API key missing. Please contact support."
UPSTREAM_USER_MESSAGE = "AI service temporarily unavailable. Please try again in a moment."


def to_error_payload(error: BaseException, title: str = "document") -> Dict[str, str]:
    """Map an exception onto the ``{error, userMessage, details}`` body."""

    details = str(error)
    if isinstance(error, ConfigurationError):
        return {
            "error": "OpenRouter API key not configured",
            "userMessage": CONFIGURATION_USER_MESSAGE,
            "details": details,
        }
    if isinstance(error, UpstreamError):
        return {"error": str(error), "userMessage": UPSTREAM_USER_MESSAGE, "details": details}
    if isinstance(error, MalformedResponseError):
        return {"error": "Invalid API response", "userMessage": UPSTREAM_USER_MESSAGE, "details": details}
    return {
        "error": "Internal server error",
        "userMessage": f"Failed to generate {title.lower()}. Please try again.",
        "details": details,
    }
