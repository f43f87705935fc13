"""Decode generateContent responses and persist the generated image.

A non-2xx response is turned into APIError before any candidate is looked
at; a 2xx response must contain at least one inline image part, otherwise
the call fails with NoResultsFoundError even if the model replied with text.
"""

from __future__ import annotations

import logging
import os
import tempfile
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from gemini_gen.codec import decode_base64_image, get_file_extension
from gemini_gen.core.exceptions import (
    APIError,
    ImageDecodeError,
    InvalidPathError,
    InvalidResponseError,
    NoResultsFoundError,
)
from gemini_gen.wire import ProviderErrorEnvelope, ResponseInlineData, WireResponse

if TYPE_CHECKING:
    from gemini_gen.transport import TransportResponse

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"


def _sanitize_value(value: Any) -> Any:
    """Recursively replace base64 data with placeholder."""
    if isinstance(value, dict):
        if "data" in value and ("mimeType" in value or "mime_type" in value):
            return {k: (REDACTED if k == "data" else v) for k, v in value.items()}
        return {k: _sanitize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_sanitize_value(v) for v in value]
    return value


def sanitize_response_for_log(payload: Any) -> Any:
    """Return a copy of a request or response body safe for logging.

    Inline image data is replaced with a placeholder; everything else is
    kept as-is.
    """
    return _sanitize_value(payload)


def generate_output_path(output_dir: Path, mime_type: str, prefix: str = "generated_") -> Path:
    """Build a collision-resistant output file name.

    Args:
        output_dir: Directory for the file.
        mime_type: MIME type of the image, used for the extension.
        prefix: File name prefix.

    Returns:
        Path like ``generated_20250101_120000_1a2b3c4d.png``.
    """
    timestamp = datetime.now(tz=UTC).strftime("%Y%m%d_%H%M%S")
    suffix = uuid.uuid4().hex[:8]
    return output_dir / f"{prefix}{timestamp}_{suffix}{get_file_extension(mime_type)}"


def _default_file_mode() -> int:
    """Mode a plain ``open(path, "wb")`` would create under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_image_atomic(path: Path, data: bytes) -> None:
    """Write bytes to ``path`` without ever leaving a partial file there.

    The file gets the same permissions as a plain write would (0644 under
    the usual 022 umask), not the owner-only mode of the temporary file.

    Raises:
        InvalidPathError: If the destination cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise InvalidPathError(str(path), reason=e.strerror or str(e)) from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise InvalidPathError(str(path), reason=e.strerror or str(e)) from e


class ResponseParser:
    """Turns a transport response into a saved image file."""

    def __init__(self, provider_name: str = "gemini") -> None:
        self.provider_name = provider_name

    def parse(
        self,
        response: TransportResponse,
        output_path: Path | None = None,
        output_dir: Path | None = None,
    ) -> Path:
        """Validate the response and write the first inline image.

        Args:
            response: Final transport response.
            output_path: Destination; relative paths resolve against output_dir.
            output_dir: Base directory, defaults to the current directory.

        Returns:
            Path of the written image.

        Raises:
            APIError: For non-2xx responses.
            InvalidResponseError: If a 2xx body is not a generation response.
            NoResultsFoundError: If no candidate carries image data.
            ImageDecodeError: If the image payload is not valid base64.
            InvalidPathError: If the output file cannot be written.
        """
        if not response.is_success:
            raise self.error_for_status(response)

        wire_response = self.decode(response)
        inline_data = self.find_inline_data(wire_response)

        image_bytes = decode_base64_image(inline_data.data)
        if not image_bytes:
            raise ImageDecodeError("Image payload is empty")

        base_dir = output_dir or Path.cwd()
        if output_path is None:
            destination = generate_output_path(base_dir, inline_data.mime_type)
        elif output_path.is_absolute():
            destination = output_path
        else:
            destination = base_dir / output_path

        write_image_atomic(destination, image_bytes)
        logger.info("Image saved to %s (%d bytes)", destination, len(image_bytes))
        return destination

    def error_for_status(self, response: TransportResponse) -> APIError:
        """Build the APIError for a non-2xx response.

        The provider's error envelope message is used verbatim when present.
        """
        try:
            envelope = ProviderErrorEnvelope.model_validate_json(response.body)
        except ValidationError:
            logger.debug("HTTP %d without error envelope", response.status)
            return APIError(
                self.provider_name,
                f"HTTP {response.status}",
                status_code=response.status,
            )

        logger.debug(
            "Provider error %s (%s): %s",
            envelope.error.code,
            envelope.error.status,
            envelope.error.message,
        )
        return APIError(
            self.provider_name,
            envelope.error.message,
            status_code=response.status,
            status=envelope.error.status,
        )

    def decode(self, response: TransportResponse) -> WireResponse:
        """Decode a 2xx body.

        Raises:
            InvalidResponseError: If the body is not a generation response.
        """
        try:
            wire_response = WireResponse.model_validate_json(response.body)
        except ValidationError as e:
            raise InvalidResponseError(
                status_code=response.status,
                details={"errors": e.error_count()},
            ) from e

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Response: %s",
                sanitize_response_for_log(wire_response.model_dump(by_alias=True)),
            )
        return wire_response

    @staticmethod
    def find_inline_data(wire_response: WireResponse) -> ResponseInlineData:
        """Return the first inline image across candidates.

        Raises:
            NoResultsFoundError: If there are no candidates or no image parts.
        """
        if not wire_response.candidates:
            raise NoResultsFoundError(details={"reason": "no candidates"})

        texts: list[str] = []
        for candidate in wire_response.candidates:
            for part in candidate.content.parts:
                if part.inline_data is not None:
                    return part.inline_data
                if part.text:
                    texts.append(part.text)

        model_text = "\n".join(texts) or None
        if model_text:
            logger.warning("No image returned; model replied: %s", model_text)
        raise NoResultsFoundError(model_text=model_text)
