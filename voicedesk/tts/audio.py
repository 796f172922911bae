"""Decoded audio handling for playback and download.

Responsibilities:
- Decode base64 `audioContent` into MP3 bytes.
- Hold decoded bytes behind revocable in-memory references.
- Derive deterministic download filenames and write downloads to disk.
- Release the previous resource when a newer one supersedes it.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
import re
from uuid import uuid4

from ..errors import DecodeError, ResourceRevokedError


MP3_MIME_TYPE = "audio/mpeg"


class AudioResourceRegistry:
    """In-memory store mapping resource URIs to audio bytes."""

    _URI_PREFIX = "memory://audio/"

    def __init__(self) -> None:
        """Initialize an empty registry."""

        self._blobs: dict[str, bytes] = {}

    def create(self, data: bytes) -> str:
        """Register bytes and return a new resource URI."""

        uri = f"{self._URI_PREFIX}{uuid4().hex}"
        self._blobs[uri] = bytes(data)
        return uri

    def read(self, uri: str) -> bytes:
        """Return bytes for a live URI."""

        try:
            return self._blobs[uri]
        except KeyError as exc:
            raise ResourceRevokedError(f"Audio resource `{uri}` has been released.") from exc

    def revoke(self, uri: str) -> bool:
        """Release a URI and report whether it was live."""

        return self._blobs.pop(uri, None) is not None

    def is_live(self, uri: str) -> bool:
        """Return whether a URI still has backing bytes."""

        return uri in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)


@dataclass(slots=True)
class PlayableAudioResource:
    """Revocable handle to decoded MP3 audio.

    Attributes:
        uri: Registry URI used for playback and download.
        filename: Suggested download filename.
        voice_name: Voice used for synthesis.
        generated_at: Generation instant.
        registry: Registry that owns the backing bytes.
        mime_type: Media type of the audio bytes.
    """

    uri: str
    filename: str
    voice_name: str
    generated_at: datetime
    registry: AudioResourceRegistry
    mime_type: str = MP3_MIME_TYPE

    @property
    def data(self) -> bytes:
        """Return the audio bytes, raising once the resource is revoked."""

        return self.registry.read(self.uri)

    @property
    def revoked(self) -> bool:
        return not self.registry.is_live(self.uri)

    def revoke(self) -> bool:
        """Release the backing bytes."""

        return self.registry.revoke(self.uri)

    def save(self, directory: Path) -> Path:
        """Write the audio under `filename` in `directory` and return the path."""

        directory.mkdir(parents=True, exist_ok=True)
        output_path = directory / self.filename
        output_path.write_bytes(self.data)
        return output_path


def decode_audio_content(audio_content_base64: str) -> bytes:
    """Strictly decode base64 audio content.

    Raises:
        DecodeError: If the input is not valid base64.
    """

    if not isinstance(audio_content_base64, str):
        raise DecodeError("Audio content must be a base64 string.")
    try:
        return base64.b64decode(audio_content_base64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("Audio content is not valid base64.") from exc


def format_timestamp(generated_at: datetime) -> str:
    """Format an instant as compact UTC `YYYYMMDDTHHMMSS`."""

    if generated_at.tzinfo is None:
        generated_at = generated_at.replace(tzinfo=timezone.utc)
    return generated_at.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%S")


def build_filename(generated_at: datetime, voice_name: str) -> str:
    """Return `tts_<timestamp>_<voiceName>.mp3` for a generation."""

    safe_voice = re.sub(r"[^A-Za-z0-9._-]", "_", voice_name)
    return f"tts_{format_timestamp(generated_at)}_{safe_voice}.mp3"


class AudioResultHandler:
    """Materialize provider audio and keep at most one live resource."""

    def __init__(self, registry: AudioResourceRegistry | None = None) -> None:
        """Initialize with an optional shared registry."""

        self.registry = registry if registry is not None else AudioResourceRegistry()
        self.current: PlayableAudioResource | None = None

    def materialize(
        self,
        audio_content_base64: str,
        voice_name: str = "",
        generated_at: datetime | None = None,
    ) -> PlayableAudioResource:
        """Decode audio into a new playable resource, releasing the previous one.

        Raises:
            DecodeError: If the input is not valid base64. The previous
                resource stays live in that case.
        """

        resource = self.create(audio_content_base64, voice_name, generated_at)
        self.supersede(resource)
        return resource

    def create(
        self,
        audio_content_base64: str,
        voice_name: str = "",
        generated_at: datetime | None = None,
    ) -> PlayableAudioResource:
        """Decode audio into a new resource without touching `current`."""

        audio_bytes = decode_audio_content(audio_content_base64)
        instant = generated_at if generated_at is not None else datetime.now(timezone.utc)
        return PlayableAudioResource(
            uri=self.registry.create(audio_bytes),
            filename=build_filename(instant, voice_name),
            voice_name=voice_name,
            generated_at=instant,
            registry=self.registry,
        )

    def supersede(self, resource: PlayableAudioResource) -> None:
        """Make `resource` current and revoke the one it replaces."""

        previous = self.current
        self.current = resource
        if previous is not None and previous.uri != resource.uri:
            previous.revoke()

    def release(self) -> None:
        """Revoke the current resource, if any."""

        if self.current is not None:
            self.current.revoke()
            self.current = None
