"""Core AI Client SDK - talk to the scoped retirement assistant gateway."""

from .client import CoreAIClient, ClientConfig
from .exceptions import CoreAIError, CoreAIUnavailableError, CoreAIConnectionError, CoreAIValidationError

__version__ = "1.0.0"
__all__ = [
    "CoreAIClient",
    "ClientConfig",
    "CoreAIError",
    "CoreAIUnavailableError",
    "CoreAIConnectionError",
    "CoreAIValidationError",
]
