"""Synthesis request construction for both execution modes.

Responsibilities:
- Validate a `GenerationRequest` and turn it into one mode-independent
  `ProviderPayload`.
- Describe per-mode transport metadata separately from the payload.
- Derive the proxy `{text, voiceSettings}` body from the same payload.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any

from ..errors import ValidationError
from ..models.datatypes import (
    DEFAULT_PITCH,
    DEFAULT_SPEED,
    MAX_PITCH,
    MAX_SPEED,
    MIN_PITCH,
    MIN_SPEED,
    ExecutionMode,
    GenerationRequest,
    ProviderPayload,
)
from ..provider.google_client import GoogleTTSClient, ProxyClient


@dataclass(frozen=True, slots=True)
class TransportTarget:
    """Endpoint and credential placement for one execution mode.

    Attributes:
        mode: Execution mode this target belongs to.
        endpoint_path: Path appended to the mode's base URL.
        credential_in_query: Whether a client-held key is sent as `?key=`.
        proxy_body: Whether the payload is wrapped as `{text, voiceSettings}`.
    """

    mode: ExecutionMode
    endpoint_path: str
    credential_in_query: bool
    proxy_body: bool


_TARGETS = {
    ExecutionMode.DIRECT_CLIENT: TransportTarget(
        mode=ExecutionMode.DIRECT_CLIENT,
        endpoint_path=GoogleTTSClient.SYNTHESIZE_PATH,
        credential_in_query=True,
        proxy_body=False,
    ),
    ExecutionMode.BACKEND_PROXY: TransportTarget(
        mode=ExecutionMode.BACKEND_PROXY,
        endpoint_path=ProxyClient.SYNTHESIZE_PATH,
        credential_in_query=False,
        proxy_body=True,
    ),
}


def build(request: GenerationRequest, mode: ExecutionMode) -> ProviderPayload:
    """Build the provider payload for a request.

    The returned payload does not depend on `mode`; only `build_target(mode)`
    differs between modes.

    Raises:
        ValidationError: If text is empty or speed/pitch fall outside the
            provider-supported ranges.
    """

    ExecutionMode.parse(mode)
    if not request.text or not request.text.strip():
        raise ValidationError("Text is required.")

    settings = request.settings
    speed = _coalesce(settings.speed, DEFAULT_SPEED, "speed")
    pitch = _coalesce(settings.pitch, DEFAULT_PITCH, "pitch")
    if not MIN_SPEED <= speed <= MAX_SPEED:
        raise ValidationError(f"Speed must be between {MIN_SPEED} and {MAX_SPEED}, got {speed}.")
    if not MIN_PITCH <= pitch <= MAX_PITCH:
        raise ValidationError(f"Pitch must be between {MIN_PITCH} and {MAX_PITCH}, got {pitch}.")

    return ProviderPayload(
        text=request.text,
        language_code=settings.language_code,
        voice_name=settings.voice_name,
        ssml_gender=settings.ssml_gender,
        speaking_rate=speed,
        pitch=pitch,
    )


def build_target(mode: ExecutionMode) -> TransportTarget:
    """Return transport metadata for an execution mode."""

    return _TARGETS[ExecutionMode.parse(mode)]


def to_proxy_body(payload: ProviderPayload) -> dict[str, Any]:
    """Return the proxy `/api/tts` body carrying the same fields as `payload`."""

    return {
        "text": payload.text,
        "voiceSettings": {
            "languageCode": payload.language_code,
            "voiceName": payload.voice_name,
            "ssmlGender": payload.ssml_gender.value,
            "speed": payload.speaking_rate,
            "pitch": payload.pitch,
        },
    }


def _coalesce(value: float | None, default: float, field_name: str) -> float:
    """Return `value` as float, or `default` when unset."""

    if value is None:
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"`{field_name}` must be a number.") from exc
    if math.isnan(parsed):
        raise ValidationError(f"`{field_name}` must be a number.")
    return parsed
