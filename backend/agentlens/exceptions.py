"""Typed domain exceptions mapped to HTTP status codes by the app's handlers.

Services raise these; ``agentlens.main`` renders every one of them as
``{"error": message}`` with the matching ``status_code``.
"""


class AgentLensError(Exception):
    """Base exception for all domain errors. Maps to HTTP 500."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AgentLensError):
    """Malformed or incomplete request. Maps to HTTP 400."""

    status_code = 400


class SessionError(AgentLensError):
    """Missing, unknown or expired demo session. Maps to HTTP 401."""

    status_code = 401


class NotFoundError(AgentLensError):
    """Resource was not found. Maps to HTTP 404."""

    status_code = 404


class QuotaExceededError(AgentLensError):
    """Run quota or replay limit reached. Maps to HTTP 429."""

    status_code = 429
