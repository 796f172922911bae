"""Synthesis request, routing, and audio result handling.

This package turns a `GenerationRequest` into a provider payload, sends it
through the active execution mode, and materializes the returned audio.
"""

from .audio import AudioResourceRegistry, AudioResultHandler, PlayableAudioResource
from .request_builder import TransportTarget, build, build_target, to_proxy_body
from .router import ExecutionModeRouter

__all__ = [
    "AudioResourceRegistry",
    "AudioResultHandler",
    "ExecutionModeRouter",
    "PlayableAudioResource",
    "TransportTarget",
    "build",
    "build_target",
    "to_proxy_body",
]
