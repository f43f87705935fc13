"""API key lookup.

The provider never reads credentials itself; it asks a SecretStore, keyed by
provider name. Two stores ship with the package: one backed by environment
variables (and an optional .env file) and one backed by a dict.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from gemini_gen.core.exceptions import APIKeyNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@runtime_checkable
class SecretStore(Protocol):
    """Per-provider API key storage."""

    def get_api_key(self, provider: str) -> str:
        """Return the key, raising APIKeyNotFoundError if absent."""
        ...

    def set_api_key(self, provider: str, key: str) -> None:
        """Store or replace the key."""
        ...

    def delete_api_key(self, provider: str) -> None:
        """Remove the key; removing a missing key is not an error."""
        ...

    def has_api_key(self, provider: str) -> bool:
        """Whether a key is stored."""
        ...


def env_var_for(provider: str) -> str:
    """Environment variable holding a provider's key, e.g. GEMINI_API_KEY."""
    return f"{provider.upper().replace('-', '_')}_API_KEY"


def mask_api_key(key: str) -> str:
    """Mask a key for display, keeping the first and last four characters.

    Keys of eight characters or fewer are masked entirely.
    """
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}{'*' * (len(key) - 8)}{key[-4:]}"


class EnvironmentSecretStore:
    """Keys from ``<PROVIDER>_API_KEY`` environment variables or a .env file.

    Example:
        ```python
        store = EnvironmentSecretStore(env_file=Path(".env"))
        key = store.get_api_key("gemini")  # reads GEMINI_API_KEY
        ```
    """

    def __init__(self, env_file: Path | None = None) -> None:
        """Initialize the store.

        Args:
            env_file: Optional .env file consulted when the variable is unset.
        """
        self.env_file = env_file

    def _read_env_file(self, name: str) -> str | None:
        if self.env_file is None or not self.env_file.exists():
            return None
        with open(self.env_file, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line.startswith(f"{name}="):
                    return line.split("=", 1)[1].strip().strip('"').strip("'")
        return None

    def get_api_key(self, provider: str) -> str:
        """Get the API key for a provider.

        Raises:
            APIKeyNotFoundError: If neither the environment nor the .env file
                has a non-empty value.
        """
        name = env_var_for(provider)
        api_key = os.environ.get(name) or self._read_env_file(name)
        if not api_key:
            raise APIKeyNotFoundError(provider)
        return api_key

    def set_api_key(self, provider: str, key: str) -> None:
        """Set the key for the current process only."""
        os.environ[env_var_for(provider)] = key
        logger.info("API key for %s set in process environment", provider)

    def delete_api_key(self, provider: str) -> None:
        os.environ.pop(env_var_for(provider), None)

    def has_api_key(self, provider: str) -> bool:
        try:
            self.get_api_key(provider)
        except APIKeyNotFoundError:
            return False
        return True


class InMemorySecretStore:
    """Dict-backed store, safe to share between threads."""

    def __init__(self, keys: dict[str, str] | None = None) -> None:
        self._keys = dict(keys or {})
        self._lock = threading.Lock()

    def get_api_key(self, provider: str) -> str:
        with self._lock:
            key = self._keys.get(provider)
        if not key:
            raise APIKeyNotFoundError(provider)
        return key

    def set_api_key(self, provider: str, key: str) -> None:
        with self._lock:
            self._keys[provider] = key

    def delete_api_key(self, provider: str) -> None:
        with self._lock:
            self._keys.pop(provider, None)

    def has_api_key(self, provider: str) -> bool:
        with self._lock:
            return bool(self._keys.get(provider))
