"""Translate a GenerationRequest into a generateContent request body."""

from __future__ import annotations

import logging

import httpx

from gemini_gen.codec import load_image_as_base64
from gemini_gen.core.exceptions import InvalidPathError
from gemini_gen.models import GenerationRequest, ModelTier, classify_model
from gemini_gen.wire import (
    GenerationConfig,
    ImageConfig,
    RequestContent,
    RequestInlineData,
    RequestPart,
    Tool,
    WireRequest,
)

logger = logging.getLogger(__name__)

API_VERSION = "v1beta"
RESPONSE_MODALITIES = ["TEXT", "IMAGE"]


def build_endpoint(base_url: str, model: str) -> str:
    """Build the generateContent URL for a model.

    Args:
        base_url: Provider base URL, e.g. "https://generativelanguage.googleapis.com".
        model: API model id.

    Returns:
        Full endpoint URL.

    Raises:
        InvalidPathError: If the resulting URL is not an absolute http(s) URL.
    """
    endpoint = f"{base_url.rstrip('/')}/{API_VERSION}/models/{model}:generateContent"
    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as e:
        raise InvalidPathError(endpoint, reason=str(e)) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidPathError(endpoint, reason="expected an absolute http(s) URL")
    return endpoint


class RequestBuilder:
    """Builds wire requests, shaping the image config per model tier."""

    def build(self, request: GenerationRequest, resolved_model: str) -> WireRequest:
        """Build the request body.

        The prompt is always the first part; reference images follow in
        the order given.

        Args:
            request: The client-facing request.
            resolved_model: Model id the request will be sent to.

        Returns:
            WireRequest ready for serialization.

        Raises:
            InvalidPathError: If a reference image cannot be read.
        """
        parts = [RequestPart(text=request.prompt)]
        for reference in request.references:
            data, mime_type = load_image_as_base64(reference)
            logger.debug("Including reference image %s (%s)", reference, mime_type)
            parts.append(
                RequestPart(inline_data=RequestInlineData(mime_type=mime_type, data=data))
            )

        return WireRequest(
            contents=[RequestContent(parts=parts)],
            generation_config=GenerationConfig(
                response_modalities=list(RESPONSE_MODALITIES),
                image_config=self.build_image_config(request, resolved_model),
            ),
            tools=[Tool()] if request.enable_search else None,
        )

    @staticmethod
    def build_image_config(request: GenerationRequest, resolved_model: str) -> ImageConfig:
        """Image config for the model tier; flash models never get image_size."""
        if classify_model(resolved_model) is ModelTier.PRO:
            return ImageConfig(
                aspect_ratio=request.aspect_ratio,
                image_size=request.image_size.upper(),
            )
        return ImageConfig(aspect_ratio=request.aspect_ratio)
