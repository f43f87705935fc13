"""Per-provider configuration stored as JSON.

The file lives at ``~/.config/gemini-gen/config.json`` by default and holds a
``{base_url, model, custom_headers}`` record per provider. Providers missing
from the file fall back to compiled-in defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gemini_gen.core.exceptions import ConfigurationError
from gemini_gen.models import DEFAULT_MODEL_ID

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_PROVIDER = "gemini"


class ProviderConfig(BaseModel):
    """Settings for one provider.

    Attributes:
        base_url: API base URL; None means the compiled-in default
        model: Default model id; None means the compiled-in default
        custom_headers: Extra headers sent with every request
    """

    model_config = ConfigDict(extra="ignore")

    base_url: str | None = None
    model: str | None = None
    custom_headers: dict[str, str] | None = None


class AppConfig(BaseModel):
    """Whole configuration file."""

    model_config = ConfigDict(extra="ignore")

    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
    default_provider: str | None = DEFAULT_PROVIDER


DEFAULT_PROVIDER_CONFIGS: dict[str, ProviderConfig] = {
    DEFAULT_PROVIDER: ProviderConfig(base_url=DEFAULT_BASE_URL, model=DEFAULT_MODEL_ID),
}


def default_config_file() -> Path:
    """Default config file location."""
    return Path.home() / ".config" / "gemini-gen" / "config.json"


@runtime_checkable
class ConfigStore(Protocol):
    """Source of provider configuration."""

    def get_provider_config(self, provider: str) -> ProviderConfig:
        """Return the configuration for a provider (never None)."""
        ...


class ConfigManager:
    """Reads and writes the JSON configuration file.

    Example:
        ```python
        manager = ConfigManager()
        manager.update_provider_config("gemini", model="gemini-2.5-flash-image")
        config = manager.get_provider_config("gemini")
        ```
    """

    def __init__(self, config_file: Path | None = None) -> None:
        """Initialize the manager.

        Args:
            config_file: Custom config file path. Defaults to
                ``~/.config/gemini-gen/config.json``.
        """
        self.config_file = config_file or default_config_file()

    @property
    def config_file_path(self) -> str:
        """Config file path for display."""
        return str(self.config_file)

    def load_config(self) -> AppConfig:
        """Load the configuration, merging compiled-in provider defaults.

        Returns:
            AppConfig; defaults only if the file does not exist.

        Raises:
            ConfigurationError: If the file cannot be read or parsed.
        """
        if not self.config_file.exists():
            return AppConfig(
                providers={
                    name: config.model_copy() for name, config in DEFAULT_PROVIDER_CONFIGS.items()
                }
            )

        try:
            config = AppConfig.model_validate_json(self.config_file.read_bytes())
        except OSError as e:
            msg = f"Failed to read config file: {self.config_file}"
            raise ConfigurationError(msg, details={"path": str(self.config_file)}) from e
        except ValidationError as e:
            msg = f"Invalid config file: {self.config_file}"
            raise ConfigurationError(
                msg, details={"path": str(self.config_file), "errors": e.error_count()}
            ) from e

        for name, default in DEFAULT_PROVIDER_CONFIGS.items():
            if name not in config.providers:
                config.providers[name] = default.model_copy()
        return config

    def save_config(self, config: AppConfig) -> None:
        """Write the configuration file, creating its directory.

        Raises:
            ConfigurationError: If the file cannot be written.
        """
        data = json.dumps(
            config.model_dump(exclude_none=True), indent=2, sort_keys=True
        )
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            self.config_file.write_text(data + "\n", encoding="utf-8")
        except OSError as e:
            msg = f"Failed to write config file: {self.config_file}"
            raise ConfigurationError(msg, details={"path": str(self.config_file)}) from e
        logger.debug("Saved config to %s", self.config_file)

    def get_provider_config(self, provider: str) -> ProviderConfig:
        """Get a provider's configuration.

        Unknown providers get an empty record so callers fall back to their
        own defaults.
        """
        config = self.load_config()
        if provider in config.providers:
            return config.providers[provider]
        default = DEFAULT_PROVIDER_CONFIGS.get(provider)
        return default.model_copy() if default else ProviderConfig()

    def update_provider_config(
        self,
        provider: str,
        base_url: str | None = None,
        model: str | None = None,
    ) -> ProviderConfig:
        """Update selected fields of a provider's configuration.

        Args:
            provider: Provider name.
            base_url: New base URL, or None to keep the current one.
            model: New default model, or None to keep the current one.

        Returns:
            The updated provider configuration.
        """
        config = self.load_config()
        current = config.providers.get(provider) or DEFAULT_PROVIDER_CONFIGS.get(
            provider, ProviderConfig()
        )
        updates: dict[str, str] = {}
        if base_url is not None:
            updates["base_url"] = base_url
        if model is not None:
            updates["model"] = model
        updated = current.model_copy(update=updates)

        config.providers[provider] = updated
        self.save_config(config)
        logger.info("Updated %s config: %s", provider, sorted(updates))
        return updated

    def reset_provider_config(self, provider: str) -> None:
        """Restore a provider's compiled-in defaults (or drop it if it has none)."""
        config = self.load_config()
        default = DEFAULT_PROVIDER_CONFIGS.get(provider)
        if default is None:
            config.providers.pop(provider, None)
        else:
            config.providers[provider] = default.model_copy()
        self.save_config(config)
        logger.info("Reset %s config to defaults", provider)
