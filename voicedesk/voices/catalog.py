"""Voice catalog fetching and language indexing.

Responsibilities:
- Fetch the provider voice list for the active execution mode.
- Index voices by supported language code.
- Decouple selection logic from the provider's JSON shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Protocol

from ..models.datatypes import ExecutionMode, VoiceDescriptor


class VoiceListSource(Protocol):
    """Protocol for anything that can return a voice-list envelope per mode."""

    def list_voices(self, mode: ExecutionMode, credential: str | None) -> dict[str, Any]:
        """Return the raw `{voices: [...]}` envelope."""


@dataclass(frozen=True, slots=True)
class VoiceCatalog:
    """All fetched voices plus a language-code index.

    Attributes:
        voices: Provider voices in response order.
        by_language: Language code to the set of voices supporting it.
    """

    voices: tuple[VoiceDescriptor, ...] = ()
    by_language: Mapping[str, frozenset[VoiceDescriptor]] = field(default_factory=dict)

    @classmethod
    def from_voices(cls, voices: Iterable[VoiceDescriptor]) -> VoiceCatalog:
        """Build a catalog and its index from scratch."""

        ordered = tuple(voices)
        index: dict[str, set[VoiceDescriptor]] = {}
        for voice in ordered:
            for code in voice.language_codes:
                index.setdefault(code, set()).add(voice)
        return cls(
            voices=ordered,
            by_language={code: frozenset(members) for code, members in index.items()},
        )

    def voices_for_code(self, language_code: str) -> frozenset[VoiceDescriptor]:
        """Return the indexed voices for a language, empty when unknown."""

        return self.by_language.get(language_code, frozenset())

    def find(self, voice_name: str) -> VoiceDescriptor | None:
        """Return the voice with `voice_name`, if present."""

        for voice in self.voices:
            if voice.name == voice_name:
                return voice
        return None

    def __len__(self) -> int:
        return len(self.voices)


def parse_voice_list(payload: Mapping[str, Any]) -> tuple[VoiceDescriptor, ...]:
    """Convert a `{voices: [...]}` envelope into descriptors, skipping malformed entries."""

    raw_voices = payload.get("voices")
    if not isinstance(raw_voices, list):
        return ()
    descriptors: list[VoiceDescriptor] = []
    for entry in raw_voices:
        descriptor = VoiceDescriptor.from_payload(entry)
        if descriptor is not None:
            descriptors.append(descriptor)
    return tuple(descriptors)


def fetch_voices(
    mode: ExecutionMode,
    credential: str | None,
    *,
    source: VoiceListSource,
) -> tuple[VoiceDescriptor, ...]:
    """Fetch the voice list for a mode.

    Raises:
        CredentialMissingError: DirectClient mode without a key; no call is made.
        NetworkError: Transport failure or, as `UpstreamError`, a non-success status.
    """

    return parse_voice_list(source.list_voices(mode, credential))
