"""Gemini image generation client.

A resilient async client for Gemini-compatible image generation APIs.

Features:
    - Retrying HTTP transport with bounded, fixed-delay retries
    - Model-tier aware request shaping (flash vs. pro image config)
    - Reference images sent as inline base64 parts
    - Typed error taxonomy with provider messages passed through verbatim
    - Atomic persistence of the generated image

Models:
    - flash: Gemini 2.5 Flash Image (fixed ~1024px output)
    - pro: Gemini 3 Pro Image (1K/2K/4K output, Google Search grounding)

Example:
    >>> import asyncio
    >>> from gemini_gen import generate_image
    >>> path = asyncio.run(generate_image("A futuristic city at sunset"))
    >>> print(f"Image saved to: {path}")

"""

import logging

from gemini_gen.config import AppConfig, ConfigManager, ConfigStore, ProviderConfig
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
from gemini_gen.core.settings import TransportSettings, get_transport_settings
from gemini_gen.models import (
    ASPECT_RATIOS,
    DEFAULT_MODEL,
    DEFAULT_MODEL_ID,
    IMAGE_SIZES,
    MODELS,
    GenerationRequest,
    ModelTier,
    classify_model,
)
from gemini_gen.provider import GenerationProvider, describe_resolution, generate_image
from gemini_gen.resolution import get_resolution_for_flash, get_resolution_for_pro
from gemini_gen.retry import NetworkErrorKind, RetryDecision, RetryPolicy
from gemini_gen.secret_store import (
    EnvironmentSecretStore,
    InMemorySecretStore,
    SecretStore,
    mask_api_key,
)
from gemini_gen.transport import TransportClient, TransportResponse

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "APIError",
    "APIKeyNotFoundError",
    "ASPECT_RATIOS",
    "AppConfig",
    "ConfigManager",
    "ConfigStore",
    "ConfigurationError",
    "DEFAULT_MODEL",
    "DEFAULT_MODEL_ID",
    "EnvironmentSecretStore",
    "GenerationError",
    "GenerationProvider",
    "GenerationRequest",
    "IMAGE_SIZES",
    "ImageDecodeError",
    "InMemorySecretStore",
    "InvalidPathError",
    "InvalidRequestError",
    "InvalidResponseError",
    "MODELS",
    "ModelTier",
    "NetworkError",
    "NetworkErrorKind",
    "NoResultsFoundError",
    "ProviderConfig",
    "RetryDecision",
    "RetryPolicy",
    "SecretStore",
    "TransportClient",
    "TransportResponse",
    "TransportSettings",
    "classify_model",
    "describe_resolution",
    "generate_image",
    "get_resolution_for_flash",
    "get_resolution_for_pro",
    "get_transport_settings",
    "mask_api_key",
]

__version__ = "0.1.0"
