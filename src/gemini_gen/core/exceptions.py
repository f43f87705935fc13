"""Exception hierarchy for gemini-gen.

Every failure a generation call can surface derives from GenerationError so
callers can catch one type and still inspect a machine-readable code.

Exception Hierarchy:
    GenerationError (base for all project exceptions)
    ├── InvalidRequestError (caller supplied an unusable request)
    ├── InvalidPathError (malformed endpoint URL or unreadable reference file)
    ├── APIKeyNotFoundError (secret store has no key for the provider)
    ├── ConfigurationError (provider configuration could not be loaded)
    ├── NetworkError (transport failure, after retries where applicable)
    ├── InvalidResponseError (2xx body that is not a generation response)
    ├── APIError (provider returned a structured error)
    ├── NoResultsFoundError (valid response without an image payload)
    └── ImageDecodeError (inline payload is not valid base64)

Cancellation is never wrapped: ``asyncio.CancelledError`` propagates as-is.

Usage:
    from gemini_gen.core.exceptions import APIError, GenerationError

    try:
        path = await provider.generate(request)
    except APIError as e:
        print(f"{e.provider}: {e.message}")
    except GenerationError as e:
        print(e.to_dict())
"""

from __future__ import annotations

from typing import Any


class GenerationError(Exception):
    """Base exception for all gemini-gen errors.

    Attributes:
        message: Human-readable error message.
        details: Additional context about the error (optional).
        error_code: Machine-readable error code (optional).

    Example:
        >>> raise GenerationError("Something went wrong", error_code="ERR001")
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Additional context as key-value pairs.
            error_code: Machine-readable error code.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for structured output.

        Returns:
            Dictionary with error details suitable for JSON serialization.
        """
        result: dict[str, Any] = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.error_code:
            result["code"] = self.error_code
        if self.details:
            result["details"] = self.details
        return result


class InvalidRequestError(GenerationError):
    """The generation request failed a precondition.

    Example:
        >>> raise InvalidRequestError("Prompt must not be empty", field="prompt")
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize invalid request error.

        Args:
            message: Description of the violated precondition.
            field: Name of the offending request field.
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(
            message, details=details, error_code=error_code or "INVALID_REQUEST"
        )


class InvalidPathError(GenerationError):
    """A path or URL could not be used.

    Raised for a malformed provider base URL (before any network call) and
    for reference images that cannot be read.
    """

    def __init__(
        self,
        path: str,
        *,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize invalid path error.

        Args:
            path: The path or URL that was rejected.
            reason: Optional explanation appended to the message.
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        details["path"] = path
        message = f"Invalid path: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, details=details, error_code=error_code or "INVALID_PATH")
        self.path = path


class APIKeyNotFoundError(GenerationError):
    """No API key is stored for the provider."""

    def __init__(
        self,
        provider: str,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize missing API key error.

        Args:
            provider: Provider name the key was looked up for.
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        details["provider"] = provider
        super().__init__(
            f"API key not found for provider: {provider}",
            details=details,
            error_code=error_code or "API_KEY_NOT_FOUND",
        )
        self.provider = provider

    @property
    def recovery_suggestion(self) -> str:
        """How the user can fix the missing key."""
        env_var = f"{self.provider.upper().replace('-', '_')}_API_KEY"
        return f"Set it with: export {env_var}='your-api-key'"

    def to_dict(self) -> dict[str, Any]:
        """Include the recovery hint in the serialized form."""
        result = super().to_dict()
        result["recovery"] = self.recovery_suggestion
        return result


class ConfigurationError(GenerationError):
    """Provider configuration could not be read or written.

    Example:
        >>> raise ConfigurationError(
        ...     "Config file is not valid JSON",
        ...     details={"path": "~/.config/gemini-gen/config.json"},
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(
            message, details=details, error_code=error_code or "CONFIGURATION_ERROR"
        )


class NetworkError(GenerationError):
    """Transport-level failure.

    Raised immediately for non-retryable transport errors and after the
    retry budget is exhausted for retryable ones.

    Attributes:
        kind: Classified network error kind (a ``NetworkErrorKind`` value).
        underlying: The original transport exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        underlying: BaseException | None = None,
        attempts: int | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize network error.

        Args:
            message: Description of the failure.
            kind: Classified error kind.
            underlying: Original exception raised by the HTTP library.
            attempts: Number of attempts made before giving up.
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        if kind:
            details["kind"] = kind
        if attempts is not None:
            details["attempts"] = attempts
        super().__init__(
            f"Network error: {message}",
            details=details,
            error_code=error_code or "NETWORK_ERROR",
        )
        self.kind = kind
        self.underlying = underlying
        self.attempts = attempts


class InvalidResponseError(GenerationError):
    """The server returned something that is not a generation response."""

    def __init__(
        self,
        message: str = "Invalid response from server",
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            message, details=details, error_code=error_code or "INVALID_RESPONSE"
        )
        self.status_code = status_code


class APIError(GenerationError):
    """The provider reported an error.

    The provider's own message is passed through verbatim so it can be shown
    to the user.

    Example:
        >>> raise APIError("gemini", "overloaded", status_code=503, status="UNAVAILABLE")
    """

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        status_code: int | None = None,
        status: str | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            provider: Provider name.
            message: Provider-supplied error message.
            status_code: HTTP status code of the response.
            status: Provider status string (e.g. "UNAVAILABLE").
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        details["provider"] = provider
        if status_code is not None:
            details["status_code"] = status_code
        if status:
            details["status"] = status
        super().__init__(message, details=details, error_code=error_code or "API_ERROR")
        self.provider = provider
        self.status_code = status_code
        self.status = status

    def __str__(self) -> str:
        return f"{self.provider} API error: {self.message}"


class NoResultsFoundError(GenerationError):
    """The response was valid but carried no image.

    Attributes:
        model_text: Text the model returned instead of an image, if any.
    """

    def __init__(
        self,
        message: str = "No results found",
        *,
        model_text: str | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        details = details or {}
        if model_text:
            details["model_text"] = model_text
        super().__init__(message, details=details, error_code=error_code or "NO_RESULTS")
        self.model_text = model_text


class ImageDecodeError(GenerationError):
    """An inline image payload could not be decoded."""

    def __init__(
        self,
        message: str = "Failed to decode image",
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(
            message, details=details, error_code=error_code or "IMAGE_DECODE_FAILED"
        )


__all__ = [
    "APIError",
    "APIKeyNotFoundError",
    "ConfigurationError",
    "GenerationError",
    "ImageDecodeError",
    "InvalidPathError",
    "InvalidRequestError",
    "InvalidResponseError",
    "NetworkError",
    "NoResultsFoundError",
]
