"""
Custom exceptions for the dispatcher.
"""


class DispatcherError(Exception):
    """Base exception for dispatcher errors."""

    pass


class NoAvailableModelError(DispatcherError):
    """Raised when no registered model can serve a request."""

    pass


class ProviderError(DispatcherError):
    """Raised when a provider adapter call fails."""

    pass


class RequestTimeoutError(DispatcherError, TimeoutError):
    """Raised when a request exceeds its allotted timeout."""

    pass


class ConfigurationError(DispatcherError):
    """Raised when configuration is invalid."""

    pass
