"""Top-level package for Voicedesk.

This package drives Google Cloud Text-to-Speech from a client, either directly
with a client-held API key or through a local proxy that holds the key
server-side. The main orchestration entry point is `VoiceDeskSession`.
"""

__version__ = "0.1.0"

from .session import VoiceDeskSession

__all__ = ["VoiceDeskSession", "__version__"]
