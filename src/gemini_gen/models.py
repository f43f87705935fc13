"""Model catalogue, tier classification and the client-facing request type."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal, TypedDict

# Type aliases for model configuration
ModelKey = Literal["flash", "pro"]
AspectRatio = Literal[
    "1:1", "2:3", "3:2", "3:4", "4:3", "4:5", "5:4", "9:16", "16:9", "21:9"
]
ImageSize = Literal["1K", "2K", "4K"]


class ModelTier(str, Enum):
    """Capability class of an image model."""

    FLASH = "flash"
    PRO = "pro"


class ModelConfig(TypedDict):
    """Configuration for a known image generation model."""

    id: str
    name: str
    description: str
    tier: ModelTier


MODELS: dict[ModelKey, ModelConfig] = {
    "flash": {
        "id": "gemini-2.5-flash-image",
        "name": "Nano Banana (Gemini 2.5 Flash)",
        "description": "Fast image generation at a fixed ~1024px budget",
        "tier": ModelTier.FLASH,
    },
    "pro": {
        "id": "gemini-3-pro-image-preview",
        "name": "Nano Banana Pro (Gemini 3 Pro)",
        "description": "Up to 4K output, better text rendering, Google Search grounding",
        "tier": ModelTier.PRO,
    },
}

DEFAULT_MODEL: ModelKey = "pro"
DEFAULT_MODEL_ID = MODELS[DEFAULT_MODEL]["id"]

# Name tokens that mark a model as pro-tier; names are split on non-alphanumerics
PRO_TIER_MARKERS: tuple[str, ...] = ("pro",)

ASPECT_RATIOS: list[AspectRatio] = [
    "1:1", "2:3", "3:2", "3:4", "4:3", "4:5", "5:4", "9:16", "16:9", "21:9"
]

IMAGE_SIZES: list[ImageSize] = ["1K", "2K", "4K"]


def classify_model(model: str) -> ModelTier:
    """Classify a model name as pro or flash tier.

    A name is pro when one of its tokens (split on "-", ".", "_" and other
    separators) is a pro-tier marker, so "gemini-3-pro-image" is pro while
    "flash-proxy" is not. Everything else is flash.
    """
    tokens = re.split(r"[^a-z0-9]+", model.lower())
    if any(marker in tokens for marker in PRO_TIER_MARKERS):
        return ModelTier.PRO
    return ModelTier.FLASH


def resolve_model_id(model: str) -> str:
    """Expand a catalogue key ("flash", "pro") to its API model id.

    Names that are not catalogue keys are returned unchanged.
    """
    config = MODELS.get(model)  # type: ignore[call-overload]
    return config["id"] if config else model


@dataclass
class GenerationRequest:
    """A single image generation request.

    Attributes:
        prompt: Text description of the image. Must not be blank.
        references: Reference images, sent in order after the prompt.
        model: Model name or catalogue key; falls back to configuration.
        aspect_ratio: Aspect ratio token such as "16:9".
        image_size: Size tier hint such as "2k"; ignored by flash models.
        output_path: Where to write the image; auto-generated when omitted.
        output_dir: Base directory for auto-generated or relative paths.
        enable_search: Enable Google Search grounding.
    """

    prompt: str
    references: list[Path] = field(default_factory=list)
    model: str | None = None
    aspect_ratio: str = "1:1"
    image_size: str = "2K"
    output_path: Path | None = None
    output_dir: Path | None = None
    enable_search: bool = False
