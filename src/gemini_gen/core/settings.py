"""Transport configuration settings.

Environment-based configuration for the retrying HTTP transport. Settings are
immutable once constructed; build a new instance to change them.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TransportSettings(BaseSettings):
    """Configuration for TransportClient.

    All settings can be configured via environment variables or .env file.

    Attributes:
        request_timeout: Per-attempt timeout in seconds
        resource_timeout: Upper bound in seconds for a whole call, retries included
        wait_for_connectivity: Let connection setup wait up to resource_timeout
        max_retries: Maximum number of retries after the first attempt
        retry_delay: Fixed delay in seconds between attempts
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        frozen=True,
    )

    request_timeout: float = Field(
        default=60.0,
        gt=0,
        alias="GEMINI_GEN_REQUEST_TIMEOUT",
        description="Per-attempt timeout in seconds",
    )
    resource_timeout: float = Field(
        default=600.0,
        gt=0,
        alias="GEMINI_GEN_RESOURCE_TIMEOUT",
        description="Timeout in seconds for a whole call including retries",
    )
    wait_for_connectivity: bool = Field(
        default=True,
        alias="GEMINI_GEN_WAIT_FOR_CONNECTIVITY",
        description="Allow connection setup to wait up to resource_timeout",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        alias="GEMINI_GEN_MAX_RETRIES",
        description="Maximum retries for retryable failures",
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        alias="GEMINI_GEN_RETRY_DELAY",
        description="Seconds to wait between attempts",
    )


_settings_instance: TransportSettings | None = None


def get_transport_settings() -> TransportSettings:
    """Get default settings (singleton, reads from environment).

    Returns:
        TransportSettings instance.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = TransportSettings()
    return _settings_instance


def reset_settings() -> None:
    """Reset singleton (for testing)."""
    global _settings_instance
    _settings_instance = None
