"""Language and voice selection policy.

Premium voices are surfaced first. Classification and sort priority share one
ordered pattern table so the two never drift apart.
"""

from __future__ import annotations

from .catalog import VoiceCatalog
from ..models.datatypes import VoiceDescriptor


PREMIUM_LABEL = "High-Res (GenAI)"
DEFAULT_LABEL = "Standard"

# Ordered: first match wins.
VOICE_CLASS_PATTERNS: tuple[tuple[str, str], ...] = (
    ("Journey", PREMIUM_LABEL),
    ("Neural2", "Neural2"),
)


def classify(descriptor: VoiceDescriptor) -> str:
    """Return the human category for a voice name."""

    for pattern, label in VOICE_CLASS_PATTERNS:
        if pattern in descriptor.name:
            return label
    return DEFAULT_LABEL


def is_premium(descriptor: VoiceDescriptor) -> bool:
    return classify(descriptor) == PREMIUM_LABEL


def voice_label(descriptor: VoiceDescriptor) -> str:
    """Return the display label `<name> (<category>, <gender>)`."""

    return f"{descriptor.name} ({classify(descriptor)}, {descriptor.ssml_gender.value})"


def languages_of(catalog: VoiceCatalog) -> list[str]:
    """Return distinct language codes across the catalog, sorted."""

    codes = {code for voice in catalog.voices for code in voice.language_codes}
    return sorted(codes)


def _sort_key(descriptor: VoiceDescriptor) -> tuple[int, str, str]:
    """Premium first, then case-insensitive name, then raw name."""

    return (0 if is_premium(descriptor) else 1, descriptor.name.casefold(), descriptor.name)


def voices_for(catalog: VoiceCatalog, language_code: str) -> list[VoiceDescriptor]:
    """Return voices supporting `language_code` in selection order.

    An unknown language yields an empty list.
    """

    candidates = [
        voice for voice in catalog.voices if language_code in voice.language_codes
    ]
    return sorted(candidates, key=_sort_key)


def default_voice(catalog: VoiceCatalog, language_code: str) -> VoiceDescriptor | None:
    """Return the first voice in selection order, or `None` when there is none."""

    ordered = voices_for(catalog, language_code)
    return ordered[0] if ordered else None
