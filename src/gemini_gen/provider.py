"""Image generation provider.

Orchestrates one generation call: precondition checks, request building,
the HTTP call and response parsing. The provider keeps no per-call state,
so one instance can serve concurrent calls.

Collaborators (transport, secret store, config store) are passed to the
constructor; defaults are created locally when omitted.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from gemini_gen.config import DEFAULT_BASE_URL, ConfigManager, ConfigStore
from gemini_gen.core.exceptions import InvalidRequestError
from gemini_gen.models import (
    DEFAULT_MODEL_ID,
    GenerationRequest,
    ModelTier,
    classify_model,
    resolve_model_id,
)
from gemini_gen.request_builder import RequestBuilder, build_endpoint
from gemini_gen.resolution import get_resolution_for_flash, get_resolution_for_pro
from gemini_gen.response_parser import ResponseParser
from gemini_gen.secret_store import EnvironmentSecretStore, SecretStore
from gemini_gen.transport import TransportClient

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-goog-api-key"


def describe_resolution(model: str, aspect_ratio: str, image_size: str) -> str:
    """Expected output resolution for display, e.g. "2K (2752×1536)".

    Never raises; unknown combinations produce a fallback description.
    """
    if classify_model(model) is ModelTier.FLASH:
        return f"1024px ({get_resolution_for_flash(aspect_ratio)})"
    size = image_size.upper()
    return f"{size} ({get_resolution_for_pro(aspect_ratio, size)})"


class GenerationProvider:
    """Generates images through a Gemini-compatible generateContent API.

    Example:
        ```python
        async with GenerationProvider() as provider:
            path = await provider.generate(
                GenerationRequest(prompt="A lighthouse at dusk", aspect_ratio="16:9")
            )
        ```
    """

    def __init__(
        self,
        provider_name: str = "gemini",
        *,
        transport: TransportClient | None = None,
        secret_store: SecretStore | None = None,
        config_store: ConfigStore | None = None,
        builder: RequestBuilder | None = None,
        parser: ResponseParser | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            provider_name: Name used for key lookup, config and error messages.
            transport: HTTP transport. A default one is created (and owned).
            secret_store: API key source. Defaults to environment variables.
            config_store: Provider configuration. Defaults to the JSON config file.
            builder: Request builder.
            parser: Response parser.
        """
        self.provider_name = provider_name
        self._owns_transport = transport is None
        self.transport = transport or TransportClient()
        self.secret_store = secret_store or EnvironmentSecretStore()
        self.config_store = config_store or ConfigManager()
        self.builder = builder or RequestBuilder()
        self.parser = parser or ResponseParser(provider_name)

    async def __aenter__(self) -> GenerationProvider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this provider created it."""
        if self._owns_transport:
            await self.transport.aclose()

    def get_resolution_for_flash(self, aspect_ratio: str) -> str:
        """Flash-tier resolution for display; never fails."""
        return get_resolution_for_flash(aspect_ratio)

    async def generate(self, request: GenerationRequest) -> Path:
        """Generate an image and write it to disk.

        Args:
            request: What to generate and where to save it.

        Returns:
            Path of the saved image.

        Raises:
            InvalidRequestError: If the prompt is blank.
            APIKeyNotFoundError: If no API key is stored; no request is sent.
            InvalidPathError: For a malformed base URL or unreadable reference.
            NetworkError: If the transport failed.
            APIError: If the provider returned an error.
            InvalidResponseError: If the response could not be decoded.
            NoResultsFoundError: If the response carried no image.
            ImageDecodeError: If the image payload was not valid base64.
        """
        if not request.prompt or not request.prompt.strip():
            msg = "Prompt must not be empty"
            raise InvalidRequestError(msg, field="prompt")

        api_key = self.secret_store.get_api_key(self.provider_name)
        provider_config = self.config_store.get_provider_config(self.provider_name)

        model = resolve_model_id(request.model or provider_config.model or DEFAULT_MODEL_ID)
        endpoint = build_endpoint(provider_config.base_url or DEFAULT_BASE_URL, model)

        self._log_parameters(request, model)

        wire_request = await asyncio.to_thread(self.builder.build, request, model)

        headers = {
            name: value
            for name, value in (provider_config.custom_headers or {}).items()
            if name.lower() != API_KEY_HEADER
        }
        headers[API_KEY_HEADER] = api_key

        logger.info("Requesting image from %s", self.provider_name)
        response = await self.transport.post_json(endpoint, wire_request, headers=headers)

        return self.parser.parse(
            response,
            output_path=request.output_path,
            output_dir=request.output_dir,
        )

    def _log_parameters(self, request: GenerationRequest, model: str) -> None:
        prompt = request.prompt
        logger.info("Model: %s", model)
        logger.info("Prompt: %s%s", prompt[:100], "..." if len(prompt) > 100 else "")
        logger.info("Aspect ratio: %s", request.aspect_ratio)
        logger.info(
            "Resolution: %s",
            describe_resolution(model, request.aspect_ratio, request.image_size),
        )
        if request.references:
            logger.info(
                "Reference images: %s",
                ", ".join(reference.name for reference in request.references),
            )
        logger.info("Output: %s", request.output_path or "auto-generated")
        if request.enable_search:
            logger.info("Google Search grounding: enabled")


async def generate_image(
    prompt: str,
    *,
    references: list[Path] | None = None,
    model: str | None = None,
    aspect_ratio: str = "1:1",
    image_size: str = "2K",
    output_path: Path | None = None,
    output_dir: Path | None = None,
    enable_search: bool = False,
    provider: GenerationProvider | None = None,
) -> Path:
    """Generate one image with keyword arguments.

    Args:
        prompt: Text description of the image to generate.
        references: Optional reference images for editing or style.
        model: Model id or catalogue key ("flash", "pro").
        aspect_ratio: Aspect ratio such as "16:9".
        image_size: Size tier ("1K", "2K", "4K"); pro models only.
        output_path: Output file path; timestamped name when omitted.
        output_dir: Directory for auto-generated or relative output paths.
        enable_search: Enable Google Search grounding.
        provider: Provider to use. A default one is created and closed
            when omitted.

    Returns:
        Path to the generated image.
    """
    request = GenerationRequest(
        prompt=prompt,
        references=list(references or []),
        model=model,
        aspect_ratio=aspect_ratio,
        image_size=image_size,
        output_path=output_path,
        output_dir=output_dir,
        enable_search=enable_search,
    )
    if provider is not None:
        return await provider.generate(request)

    async with GenerationProvider() as default_provider:
        return await default_provider.generate(request)
