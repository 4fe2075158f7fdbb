"""Generation failures, classified by the HTTP-style status the transport layer should return."""

from __future__ import annotations


class GenerationError(Exception):
    """Raised when no reply could be produced.

    ``status_code`` mirrors what the HTTP layer should answer with; ``None``
    means a generic failure. Retryability is not stored here, it is derived
    from the message by ``orchestrator.is_retryable_error``.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ProviderConnectError(GenerationError):
    """Network failure or timeout while talking to a provider."""

    def __init__(self, message: str):
        super().__init__(message, status_code=503)


class ProviderResponseError(GenerationError):
    """The provider answered with a non-success status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message, status_code=status_code)


class ConfigurationError(GenerationError):
    """No provider is usable from the current environment."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class EmptyResponseError(GenerationError):
    """The provider produced no usable text."""

    def __init__(self, message: str):
        super().__init__(message, status_code=None)
