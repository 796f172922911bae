"""Voice catalog and selection policy.

This package fetches provider voices, indexes them by language, and orders
them for selection.
"""

from .catalog import VoiceCatalog, fetch_voices, parse_voice_list
from .selector import classify, default_voice, languages_of, voice_label, voices_for

__all__ = [
    "VoiceCatalog",
    "classify",
    "default_voice",
    "fetch_voices",
    "languages_of",
    "parse_voice_list",
    "voice_label",
    "voices_for",
]
