"""Execution-mode routing for voice-list and synthesis calls.

Responsibilities:
- Issue each call directly to the provider (client-held key) or through the
  local proxy (server-held key), based on the active `ExecutionMode`.
- Normalize both synthesis responses to one base64 `audioContent` string.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from ..errors import CredentialMissingError, UpstreamError
from ..models.datatypes import ExecutionMode, ProviderPayload
from ..parsing import normalize_optional_string
from ..provider.google_client import (
    DEFAULT_PROVIDER_BASE_URL,
    DEFAULT_PROXY_BASE_URL,
    GoogleTTSClient,
    ProxyClient,
)
from .request_builder import build_target, to_proxy_body


class SpeechTransport(Protocol):
    """Protocol shared by the provider and proxy HTTP clients."""

    def list_voices(self) -> dict[str, Any]:
        """Return the provider `voices` envelope."""

    def synthesize(self, body: dict[str, Any]) -> dict[str, Any]:
        """Return a synthesis response envelope."""


class ExecutionModeRouter:
    """Route provider calls through DirectClient or BackendProxy transports."""

    def __init__(
        self,
        provider_base_url: str = DEFAULT_PROVIDER_BASE_URL,
        proxy_base_url: str = DEFAULT_PROXY_BASE_URL,
        timeout_seconds: float = 60.0,
        provider_client_factory: Callable[..., SpeechTransport] = GoogleTTSClient,
        proxy_client_factory: Callable[..., SpeechTransport] = ProxyClient,
    ) -> None:
        """Initialize endpoint base URLs and client factories."""

        self.provider_base_url = provider_base_url
        self.proxy_base_url = proxy_base_url
        self.timeout_seconds = timeout_seconds
        self._provider_client_factory = provider_client_factory
        self._proxy_client_factory = proxy_client_factory

    def transport_for(self, mode: ExecutionMode, credential: str | None) -> SpeechTransport:
        """Create the transport for `mode`, requiring a key in DirectClient mode."""

        if not build_target(mode).credential_in_query:
            return self._proxy_client_factory(
                base_url=self.proxy_base_url,
                timeout_seconds=self.timeout_seconds,
            )

        api_key = normalize_optional_string(credential)
        if api_key is None:
            raise CredentialMissingError()
        return self._provider_client_factory(
            api_key=api_key,
            base_url=self.provider_base_url,
            timeout_seconds=self.timeout_seconds,
        )

    def list_voices(self, mode: ExecutionMode, credential: str | None) -> dict[str, Any]:
        """Return the raw voice-list envelope for the active mode."""

        return self.transport_for(mode, credential).list_voices()

    def dispatch(
        self,
        payload: ProviderPayload,
        mode: ExecutionMode,
        credential: str | None,
    ) -> str:
        """Send a synthesis payload and return its base64 `audioContent`.

        Raises:
            CredentialMissingError: DirectClient mode without a key; no call is made.
            NetworkError: Transport failure.
            UpstreamError: Non-success status, or a success body without audio.
        """

        target = build_target(mode)
        transport = self.transport_for(target.mode, credential)
        body = to_proxy_body(payload) if target.proxy_body else payload.as_json()
        response = transport.synthesize(body)

        audio_content = response.get("audioContent")
        if not isinstance(audio_content, str) or not audio_content:
            raise UpstreamError("Response did not include audio content.")
        return audio_content
