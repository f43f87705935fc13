"""Pytest configuration and fixtures for gemini-gen tests."""

from __future__ import annotations

import base64
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from gemini_gen.config import ConfigManager
from gemini_gen.core.settings import TransportSettings, reset_settings
from gemini_gen.secret_store import InMemorySecretStore
from gemini_gen.transport import TransportClient

if TYPE_CHECKING:
    from pathlib import Path

TEST_API_KEY = "test-api-key-secret"

Handler = Callable[[httpx.Request], Any]


@pytest.fixture(autouse=True)
def reset_settings_after_test():
    """Reset settings singleton after each test."""
    yield
    reset_settings()


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Return sample PNG image bytes (1x1 red pixel)."""
    # Minimal valid PNG: 1x1 red pixel
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIA"
        "X8jx0gAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def sample_image_path(tmp_path: Path, sample_image_bytes: bytes) -> Path:
    """Create a temporary sample image file."""
    image_path = tmp_path / "sample.png"
    image_path.write_bytes(sample_image_bytes)
    return image_path


@pytest.fixture
def image_response_body(sample_image_bytes: bytes) -> dict[str, Any]:
    """A generateContent response with one text part and one image part."""
    return {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"text": "Here is your image."},
                        {
                            "inlineData": {
                                "mimeType": "image/png",
                                "data": base64.b64encode(sample_image_bytes).decode(),
                            }
                        },
                    ]
                }
            }
        ]
    }


@pytest.fixture
def text_only_response_body() -> dict[str, Any]:
    """A generateContent response where the model declined to draw."""
    return {
        "candidates": [
            {"content": {"parts": [{"text": "I can't generate that image."}]}}
        ]
    }


@pytest.fixture
def fast_settings() -> TransportSettings:
    """Transport settings with no retry delay."""
    return TransportSettings(
        request_timeout=5.0,
        resource_timeout=30.0,
        max_retries=3,
        retry_delay=0.0,
    )


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the transport under test."""
    return []


@pytest.fixture
def make_transport(
    fast_settings: TransportSettings, sleeps: list[float]
) -> Callable[..., TransportClient]:
    """Factory for a TransportClient backed by httpx.MockTransport."""

    async def record_sleep(delay: float) -> None:
        sleeps.append(delay)

    def factory(
        handler: Handler, settings: TransportSettings | None = None
    ) -> TransportClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return TransportClient(
            settings or fast_settings,
            client=client,
            sleep=record_sleep,
        )

    return factory


@pytest.fixture
def secret_store() -> InMemorySecretStore:
    """Secret store holding a key for the gemini provider."""
    return InMemorySecretStore({"gemini": TEST_API_KEY})


@pytest.fixture
def config_manager(tmp_path: Path) -> ConfigManager:
    """Config manager writing to a temporary file."""
    return ConfigManager(config_file=tmp_path / "config" / "config.json")
