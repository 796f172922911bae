"""Shared typed data models for Voicedesk.

This package contains dataclasses and enums used across catalog, request,
and lifecycle modules to avoid cross-module coupling and circular imports.
"""

from .datatypes import (
    ExecutionMode,
    GenerationRequest,
    GenerationResult,
    Notification,
    ProviderPayload,
    SsmlGender,
    SynthesisSettings,
    VoiceDescriptor,
)

__all__ = [
    "ExecutionMode",
    "GenerationRequest",
    "GenerationResult",
    "Notification",
    "ProviderPayload",
    "SsmlGender",
    "SynthesisSettings",
    "VoiceDescriptor",
]
