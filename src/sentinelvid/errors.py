"""Error hierarchy for the analysis pipeline."""

from __future__ import annotations


class AnalysisError(Exception):
    """Base exception for all analysis pipeline errors.

    Compatible with error-as-value pattern: instances are returned from
    run_analysis() instead of raised. Preserves stack traces via exception
    chaining.
    """

    def __init__(self, message: str, stage: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.cause = cause
        self.__cause__ = cause  # Python's exception chaining


# -----------------------------------------------------------------------------
# Preconditions (problems with the invocation itself, never retried)
# -----------------------------------------------------------------------------


class PreconditionError(AnalysisError):
    """Invocation rejected before any network activity."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message, stage="precondition", cause=cause)


class MissingCredentialError(PreconditionError):
    """No credential was supplied for the invocation."""

    def __init__(self) -> None:
        super().__init__("API key is missing. Provide a Gemini API key and try again.")


class UnsupportedMediaTypeError(PreconditionError):
    """Asset media type is not a recognized video type."""

    def __init__(self, mime_type: str) -> None:
        super().__init__(f"Unsupported media type {mime_type!r}: please provide a valid video file.")
        self.mime_type = mime_type


class FileTooLargeError(PreconditionError):
    """Asset exceeds the absolute size ceiling."""

    def __init__(self, size: int, limit: int, size_text: str, limit_text: str) -> None:
        super().__init__(
            f"Video is {size_text} ({size} bytes); the maximum accepted size is "
            f"{limit_text} ({limit} bytes)."
        )
        self.size = size
        self.limit = limit


class EmptyAssetError(PreconditionError):
    """Asset contains no data."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Video {name!r} is empty.")
        self.name = name


class AnalysisInProgressError(PreconditionError):
    """Another invocation is already running on this pipeline."""

    def __init__(self) -> None:
        super().__init__("An analysis is already in progress; wait for it or cancel it first.")


class PipelineShutdownError(PreconditionError):
    """The pipeline was shut down and no longer accepts invocations."""

    def __init__(self) -> None:
        super().__init__("The analysis pipeline has been shut down.")


class AssetReadError(PreconditionError):
    """Local video data could not be read."""

    def __init__(self, name: str, cause: OSError) -> None:
        super().__init__(f"Could not read video {name!r}: {cause}", cause=cause)
        self.name = name


# -----------------------------------------------------------------------------
# Remote failures
# -----------------------------------------------------------------------------


class TransportError(AnalysisError):
    """Network failure or non-auth rejection by the remote endpoint."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, stage="transport", cause=cause)
        self.status = status


class PayloadTooLargeError(TransportError):
    """Remote endpoint rejected the request body size."""


class AuthError(AnalysisError):
    """Remote endpoint rejected the credential.

    Kept separate from TransportError: callers should re-request a credential
    rather than retry transmission.
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message, stage="auth")
        self.status = status


class ProcessingError(AnalysisError):
    """Staged asset did not become ready for inference."""

    def __init__(self, message: str, *, state: str | None = None) -> None:
        super().__init__(message, stage="processing")
        self.state = state


class ProcessingTimeoutError(ProcessingError):
    """Staged asset stayed in processing past the polling bound."""

    def __init__(self, name: str, attempts: int, elapsed_s: float) -> None:
        super().__init__(
            f"File processing timed out for {name} after {attempts} status checks "
            f"({elapsed_s:.1f}s)",
            state="PROCESSING",
        )
        self.attempts = attempts
        self.elapsed_s = elapsed_s


# -----------------------------------------------------------------------------
# Response parsing
# -----------------------------------------------------------------------------


class ParseError(AnalysisError):
    """Model output could not be turned into an AnalysisResult."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message, stage="parse", cause=cause)


class EmptyResponseError(ParseError):
    """Model returned no text."""

    def __init__(self) -> None:
        super().__init__("No response from model")


class MalformedResponseError(ParseError):
    """Model text is not valid JSON or does not match the response shape."""

    def __init__(self, detail: str, raw_excerpt: str, cause: Exception | None = None) -> None:
        super().__init__(f"Malformed response from model: {detail}", cause=cause)
        self.raw_excerpt = raw_excerpt
