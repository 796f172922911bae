"""Domain exceptions for synthesis orchestration and CLI diagnostics.

Hierarchy:
- `VoiceDeskError`: base for every failure surfaced to the generation lifecycle.
- `AuthError` / `CredentialMissingError`: credential problems detected locally.
- `NetworkError` / `UpstreamError`: transport and non-2xx HTTP failures.
- `DecodeError`: malformed base64 audio payloads.
- `ValidationError`: rejected request input (empty text, out-of-range tuning).
- `CommandError`: stage-scoped CLI failure with an optional hint.
"""

from __future__ import annotations


class VoiceDeskError(RuntimeError):
    """Base class for failures raised by Voicedesk components."""

    def __init__(self, message: str) -> None:
        """Initialize the error with a user-facing message."""

        super().__init__(message)
        self.message = message


class AuthError(VoiceDeskError):
    """Raised when a request cannot be authorized."""


class CredentialMissingError(AuthError):
    """Raised when DirectClient mode has no API key to attach."""

    def __init__(self, message: str = "API Key required in Direct mode.") -> None:
        """Initialize with the default credential-required message."""

        super().__init__(message)


class NetworkError(VoiceDeskError):
    """Raised when the provider or proxy cannot be reached."""


class UpstreamError(NetworkError):
    """Raised when the provider or proxy answers with a non-success status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize with the upstream message and HTTP status."""

        super().__init__(message)
        self.status = status


class DecodeError(VoiceDeskError):
    """Raised when returned audio content is not valid base64."""


class ValidationError(VoiceDeskError, ValueError):
    """Raised when a generation request fails local validation."""


class GenerationInProgressError(VoiceDeskError):
    """Raised when a generate action arrives while another one is running."""

    def __init__(self, message: str = "A generation is already in progress.") -> None:
        """Initialize with the default busy message."""

        super().__init__(message)


class ResourceRevokedError(VoiceDeskError):
    """Raised when reading audio whose backing reference was released."""


class CommandError(RuntimeError):
    """Raised when a specific CLI stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
