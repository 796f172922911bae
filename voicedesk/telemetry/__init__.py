"""Runtime logging for voice-list and synthesis stages."""

from .logger import RunLogger

__all__ = ["RunLogger"]
