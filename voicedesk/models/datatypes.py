"""Core datatypes shared across Voicedesk modules.

Responsibilities:
- Represent voice catalog entries, user-tunable synthesis settings, and
  per-action generation records.
- Provide explicit typing for the provider payload exchanged with both
  execution modes.

Key types:
- `VoiceDescriptor`, `SynthesisSettings`, `GenerationRequest`,
  `GenerationResult`, `ProviderPayload`, and `Notification`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..tts.audio import PlayableAudioResource


MAX_TEXT_CHARS = 5000
TEXT_WARNING_CHARS = 4500
MIN_SPEED = 0.25
MAX_SPEED = 4.0
MIN_PITCH = -20.0
MAX_PITCH = 20.0
DEFAULT_SPEED = 1.0
DEFAULT_PITCH = 0.0


class SsmlGender(str, Enum):
    """Voice gender reported by the provider."""

    MALE = "MALE"
    FEMALE = "FEMALE"
    NEUTRAL = "NEUTRAL"

    @classmethod
    def parse(cls, value: object) -> SsmlGender:
        """Map a provider gender token to an enum member, defaulting to NEUTRAL."""

        if isinstance(value, cls):
            return value
        token = str(value or "").strip().upper()
        try:
            return cls(token)
        except ValueError:
            return cls.NEUTRAL


class ExecutionMode(str, Enum):
    """Credential path used for provider calls."""

    DIRECT_CLIENT = "direct"
    BACKEND_PROXY = "proxy"

    @classmethod
    def parse(cls, value: object) -> ExecutionMode:
        """Parse a mode token such as `direct`, `proxy`, or `backend`."""

        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower()
        if token in {"direct", "direct_client", "client", "demo"}:
            return cls.DIRECT_CLIENT
        if token in {"proxy", "backend", "backend_proxy", "server"}:
            return cls.BACKEND_PROXY
        raise ValueError(f"Unsupported execution mode `{value}`; supported: direct, proxy.")


@dataclass(frozen=True, slots=True)
class VoiceDescriptor:
    """One provider voice.

    Attributes:
        name: Provider-unique voice identifier, e.g. `en-US-Journey-D`.
        language_codes: Ordered BCP-47 language codes the voice supports.
        ssml_gender: Reported voice gender.
        natural_sample_rate_hertz: Native sample rate, when reported.
    """

    name: str
    language_codes: tuple[str, ...]
    ssml_gender: SsmlGender = SsmlGender.NEUTRAL
    natural_sample_rate_hertz: int | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> VoiceDescriptor | None:
        """Build a descriptor from one provider `voices[]` entry, or `None` if malformed."""

        if not isinstance(payload, dict):
            return None
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            return None
        raw_codes = payload.get("languageCodes")
        codes: tuple[str, ...] = ()
        if isinstance(raw_codes, list):
            codes = tuple(code for code in raw_codes if isinstance(code, str) and code)
        sample_rate = payload.get("naturalSampleRateHertz")
        return cls(
            name=name.strip(),
            language_codes=codes,
            ssml_gender=SsmlGender.parse(payload.get("ssmlGender")),
            natural_sample_rate_hertz=sample_rate if isinstance(sample_rate, int) else None,
        )


@dataclass(slots=True)
class SynthesisSettings:
    """User-tunable synthesis settings.

    Attributes:
        language_code: Selected language code.
        voice_name: Selected voice name, or empty when no voice is available.
        ssml_gender: Gender of the selected voice.
        speed: Speaking rate multiplier; `None` means provider default.
        pitch: Pitch shift in semitones; `None` means provider default.
    """

    language_code: str = "en-US"
    voice_name: str = ""
    ssml_gender: SsmlGender = SsmlGender.NEUTRAL
    speed: float | None = DEFAULT_SPEED
    pitch: float | None = DEFAULT_PITCH


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Text plus a settings snapshot for one generate action."""

    text: str
    settings: SynthesisSettings


@dataclass(frozen=True, slots=True)
class ProviderPayload:
    """Provider synthesis body, identical for both execution modes.

    Attributes:
        text: Input text.
        language_code: Voice language code.
        voice_name: Provider voice name.
        ssml_gender: Voice gender token.
        speaking_rate: Speaking rate multiplier.
        pitch: Pitch shift in semitones.
        audio_encoding: Output container, always `MP3`.
    """

    text: str
    language_code: str
    voice_name: str
    ssml_gender: SsmlGender
    speaking_rate: float
    pitch: float
    audio_encoding: str = "MP3"

    def as_json(self) -> dict[str, Any]:
        """Return the provider `text:synthesize` JSON body."""

        return {
            "input": {"text": self.text},
            "voice": {
                "languageCode": self.language_code,
                "name": self.voice_name,
                "ssmlGender": self.ssml_gender.value,
            },
            "audioConfig": {
                "audioEncoding": self.audio_encoding,
                "speakingRate": self.speaking_rate,
                "pitch": self.pitch,
            },
        }


@dataclass(slots=True)
class GenerationResult:
    """Decoded audio from one successful generation.

    Attributes:
        audio_bytes: Raw MP3 bytes.
        voice_name: Voice used for synthesis.
        generated_at: Generation instant (UTC).
        resource: Playable handle created for this result.
    """

    audio_bytes: bytes
    voice_name: str
    generated_at: datetime
    resource: PlayableAudioResource | None = None


@dataclass(frozen=True, slots=True)
class Notification:
    """User-visible message emitted by the generation lifecycle."""

    level: str
    message: str
