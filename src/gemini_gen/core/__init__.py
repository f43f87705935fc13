"""Core settings and exception modules."""

from gemini_gen.core.exceptions import (
    APIError,
    APIKeyNotFoundError,
    ConfigurationError,
    GenerationError,
    ImageDecodeError,
    InvalidPathError,
    InvalidRequestError,
    InvalidResponseError,
    NetworkError,
    NoResultsFoundError,
)
from gemini_gen.core.settings import (
    TransportSettings,
    get_transport_settings,
    reset_settings,
)

__all__ = [
    # Exceptions (sorted alphabetically)
    "APIError",
    "APIKeyNotFoundError",
    "ConfigurationError",
    "GenerationError",
    "ImageDecodeError",
    "InvalidPathError",
    "InvalidRequestError",
    "InvalidResponseError",
    "NetworkError",
    "NoResultsFoundError",
    # Settings
    "TransportSettings",
    "get_transport_settings",
    "reset_settings",
]
