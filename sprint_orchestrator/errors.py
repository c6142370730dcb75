"""Error taxonomy shared by both API clients."""

from .models import ClientErrorBody


class SprintOrchestratorError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(SprintOrchestratorError):
    """Malformed token or base URL; the client could not be built."""

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description


class TransportError(SprintOrchestratorError):
    """Network failure before any response was received."""


class DeserializationError(SprintOrchestratorError):
    """Response body did not match the expected shape."""

    def __init__(self, description: str, status: int | None = None):
        super().__init__(description)
        self.description = description
        self.status = status


class BackendClientError(SprintOrchestratorError):
    """A 4xx response carrying the backend's structured error body."""

    def __init__(self, status: int, body: ClientErrorBody):
        super().__init__(f"Backend client error {status}: {body.message}")
        self.status = status
        self.body = body


class UnexpectedStatusError(SprintOrchestratorError):
    """Any response status that is neither 2xx nor 4xx."""

    def __init__(self, status: int, description: str = "Unexpected response status code."):
        super().__init__(f"{description} ({status})")
        self.status = status
        self.description = description


class NotFoundError(SprintOrchestratorError):
    """A lookup that the backend answered successfully but with no match."""
