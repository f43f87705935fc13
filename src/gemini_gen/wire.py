"""Wire schemas for the generateContent API.

The request and response schemas are deliberately separate: the request
body uses snake_case keys below the top level (``inline_data``,
``response_modalities``, ``image_config``) while responses use camelCase
(``inlineData``, ``mimeType``). Both are kept exactly as the API expects.

Requests are serialized with ``model_dump(by_alias=True, exclude_none=True)``
so optional fields that are unset are omitted rather than sent as null.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# =========================================================================
# Request schema (snake_case)
# =========================================================================


class RequestInlineData(BaseModel):
    """Base64 image payload attached to a request part."""

    mime_type: str
    data: str


class RequestPart(BaseModel):
    """One request fragment: either text or inline image data."""

    text: str | None = None
    inline_data: RequestInlineData | None = None


class RequestContent(BaseModel):
    """Ordered parts of one request message."""

    parts: list[RequestPart]


class ImageConfig(BaseModel):
    """Image output options; ``image_size`` is only sent to pro models."""

    aspect_ratio: str | None = None
    image_size: str | None = None


class GenerationConfig(BaseModel):
    """Generation options."""

    response_modalities: list[str] = Field(default_factory=lambda: ["TEXT", "IMAGE"])
    image_config: ImageConfig | None = None


class GoogleSearch(BaseModel):
    """Empty marker object enabling Google Search grounding."""


class Tool(BaseModel):
    """Tool declaration."""

    google_search: GoogleSearch = Field(default_factory=GoogleSearch)


class WireRequest(BaseModel):
    """Complete generateContent request body."""

    model_config = ConfigDict(populate_by_name=True)

    contents: list[RequestContent]
    generation_config: GenerationConfig = Field(alias="generationConfig")
    tools: list[Tool] | None = None

    def to_payload(self) -> dict:
        """Return the JSON-ready request body."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =========================================================================
# Response schema (camelCase)
# =========================================================================


class ResponseInlineData(BaseModel):
    """Base64 image payload returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    mime_type: str = Field(default="image/png", alias="mimeType")
    data: str


class ResponsePart(BaseModel):
    """One response fragment; may carry text, image data or both."""

    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    inline_data: ResponseInlineData | None = Field(default=None, alias="inlineData")


class ResponseContent(BaseModel):
    """Parts of a candidate."""

    parts: list[ResponsePart] = Field(default_factory=list)


class Candidate(BaseModel):
    """One generated candidate."""

    content: ResponseContent = Field(default_factory=ResponseContent)


class WireResponse(BaseModel):
    """Complete generateContent response body."""

    candidates: list[Candidate] = Field(default_factory=list)


class ProviderErrorDetail(BaseModel):
    """The ``error`` object of an API error response."""

    code: int | None = None
    message: str
    status: str | None = None


class ProviderErrorEnvelope(BaseModel):
    """API error response: ``{"error": {"code", "message", "status"}}``."""

    error: ProviderErrorDetail
