"""HTTP clients for the speech provider and the local proxy.

Responsibilities:
- Send voice-list and synthesis requests to Google Cloud Text-to-Speech with
  a query-parameter API key (DirectClient mode).
- Send the same requests to the local proxy, which injects its own key
  (BackendProxy mode).
- Map transport failures and non-success statuses to `NetworkError` and
  `UpstreamError`, extracting the message from each side's error envelope.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any

import requests

from ..errors import CredentialMissingError, NetworkError, UpstreamError


DEFAULT_PROVIDER_BASE_URL = "https://texttospeech.googleapis.com/v1"
DEFAULT_PROXY_BASE_URL = "http://localhost:3000"


class _HTTPBaseClient:
    """Shared HTTP settings and error mapping used by provider and proxy clients."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180
    _SERVICE_LABEL = "Provider"
    _GENERIC_ERROR_MESSAGE = "API Error"

    def __init__(self, *, base_url: str, timeout_seconds: float = 60.0) -> None:
        """Initialize base URL and transport timeout."""

        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _get_json(
        self,
        *,
        endpoint_path: str,
        params: dict[str, str] | None = None,
        fallback_message: str | None = None,
    ) -> dict[str, Any]:
        """Execute a GET request and return the decoded JSON object."""

        endpoint = f"{self.base_url}{endpoint_path}"
        try:
            response = requests.get(endpoint, params=params, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise self._transport_error(exc) from exc
        return self._decode_response(response, fallback_message)

    def _post_json(
        self,
        *,
        endpoint_path: str,
        payload: dict[str, Any],
        params: dict[str, str] | None = None,
        fallback_message: str | None = None,
    ) -> dict[str, Any]:
        """Execute a JSON POST request and return the decoded JSON object."""

        endpoint = f"{self.base_url}{endpoint_path}"
        try:
            response = requests.post(
                endpoint,
                params=params,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise self._transport_error(exc) from exc
        return self._decode_response(response, fallback_message)

    def _decode_response(
        self, response: requests.Response, fallback_message: str | None
    ) -> dict[str, Any]:
        """Raise `UpstreamError` for non-2xx responses, else parse the JSON body."""

        status_code = int(response.status_code)
        if not 200 <= status_code < 300:
            message = self._extract_error_message(self._decode_body(response))
            raise UpstreamError(
                message or fallback_message or self._GENERIC_ERROR_MESSAGE,
                status=status_code,
            )

        try:
            payload = json.loads(self._decode_body(response) or "{}")
        except json.JSONDecodeError as exc:
            raise UpstreamError(
                f"{self._SERVICE_LABEL} returned invalid JSON payload.",
                status=status_code,
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamError(
                f"{self._SERVICE_LABEL} response must be a JSON object.",
                status=status_code,
            )
        return payload

    @staticmethod
    def _decode_body(response: requests.Response) -> str:
        """Decode a response body into a best-effort UTF-8 string."""

        try:
            return bytes(response.content).decode("utf-8", errors="replace").strip()
        except (TypeError, ValueError):
            return ""

    def _extract_error_message(self, body: str) -> str:
        """Extract a user-facing message from an error body; empty when absent."""

        raise NotImplementedError

    def _transport_error(self, exc: BaseException) -> NetworkError:
        """Convert a transport exception into a `NetworkError`."""

        if self._classify_transport_failure(exc) == "timeout":
            return NetworkError(f"{self._SERVICE_LABEL} request timed out.")
        return NetworkError(
            f"{self._SERVICE_LABEL} request transport error: "
            f"{self._short_message(self._redact_sensitive_tokens(str(exc)))}"
        )

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into `timeout` or `transport`."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider and transport messages."""

        redacted = re.sub(r"\bAIza[0-9A-Za-z_-]{20,}", "[redacted-key]", text)
        redacted = re.sub(r"(?i)([?&]key=)[^&\s'\"]+", r"\1[redacted-key]", redacted)
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."


class GoogleTTSClient(_HTTPBaseClient):
    """Minimal requests-based Google Cloud Text-to-Speech REST client."""

    _SERVICE_LABEL = "Google TTS"
    VOICES_PATH = "/voices"
    SYNTHESIZE_PATH = "/text:synthesize"

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_PROVIDER_BASE_URL,
        timeout_seconds: float = 60.0,
    ) -> None:
        """Initialize provider URL, timeout, and the query-parameter key."""

        super().__init__(base_url=base_url, timeout_seconds=timeout_seconds)
        self.api_key = api_key.strip() if isinstance(api_key, str) else ""

    def _require_api_key(self) -> dict[str, str]:
        """Return key query params, raising before any call when the key is absent."""

        if not self.api_key:
            raise CredentialMissingError()
        return {"key": self.api_key}

    def list_voices(self) -> dict[str, Any]:
        """Return the provider `voices` envelope."""

        params = self._require_api_key()
        return self._get_json(
            endpoint_path=self.VOICES_PATH,
            params=params,
            fallback_message="Failed to fetch voices",
        )

    def synthesize(self, body: dict[str, Any]) -> dict[str, Any]:
        """POST a `text:synthesize` body and return the `{audioContent}` envelope."""

        params = self._require_api_key()
        return self._post_json(
            endpoint_path=self.SYNTHESIZE_PATH,
            payload=body,
            params=params,
            fallback_message="API Error",
        )

    def _extract_error_message(self, body: str) -> str:
        """Read `error.message` from a Google error envelope."""

        if not body:
            return ""
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return self._short_message(self._redact_sensitive_tokens(body))

        message: str | None = None
        if isinstance(payload, dict):
            error_payload = payload.get("error")
            if isinstance(error_payload, dict):
                message_value = error_payload.get("message")
                if isinstance(message_value, str) and message_value.strip():
                    message = message_value.strip()
            elif isinstance(error_payload, str) and error_payload.strip():
                message = error_payload.strip()
        if message is None:
            return ""
        return self._short_message(self._redact_sensitive_tokens(message))


class ProxyClient(_HTTPBaseClient):
    """Requests-based client for the local proxy endpoints."""

    _SERVICE_LABEL = "Proxy"
    _GENERIC_ERROR_MESSAGE = "Server Error"
    VOICES_PATH = "/api/voices"
    SYNTHESIZE_PATH = "/api/tts"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_PROXY_BASE_URL,
        timeout_seconds: float = 60.0,
    ) -> None:
        """Initialize proxy URL and timeout."""

        super().__init__(base_url=base_url, timeout_seconds=timeout_seconds)

    def list_voices(self) -> dict[str, Any]:
        """Return the provider `voices` envelope relayed by the proxy."""

        return self._get_json(
            endpoint_path=self.VOICES_PATH,
            fallback_message="Failed to fetch voices from server",
        )

    def synthesize(self, body: dict[str, Any]) -> dict[str, Any]:
        """POST `{text, voiceSettings}` and return the `{audioContent, message}` envelope."""

        return self._post_json(
            endpoint_path=self.SYNTHESIZE_PATH,
            payload=body,
            fallback_message="Server Error",
        )

    def _extract_error_message(self, body: str) -> str:
        """Read the proxy `{error}` envelope verbatim."""

        if not body:
            return ""
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return ""
        if not isinstance(payload, dict):
            return ""
        error_payload = payload.get("error")
        if isinstance(error_payload, str) and error_payload:
            return error_payload
        if isinstance(error_payload, dict):
            message_value = error_payload.get("message")
            if isinstance(message_value, str) and message_value:
                return message_value
        return ""
