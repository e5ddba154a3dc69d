"""Exceptions for the Core AI client SDK."""


class CoreAIError(Exception):
    """Base exception for Core AI client errors."""
    pass


class CoreAIUnavailableError(CoreAIError):
    """The requested capability is not configured on the server (HTTP 503)."""
    pass


class CoreAIConnectionError(CoreAIError):
    """Connection to the gateway failed."""
    pass


class CoreAIValidationError(CoreAIError):
    """The gateway rejected the request as invalid (HTTP 400/413)."""
    pass
