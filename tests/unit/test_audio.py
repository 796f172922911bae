"""Unit tests for audio decoding, filenames, and resource lifetime."""

from __future__ import annotations

import base64
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from voicedesk.errors import DecodeError, ResourceRevokedError
from voicedesk.tts.audio import (
    AudioResultHandler,
    build_filename,
    decode_audio_content,
    format_timestamp,
)

_MP3_BYTES = b"ID3\x04\x00\x00\x00\x00\x00\x00\xff\xfb\x90\x00"


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_decode_audio_content_returns_exact_bytes() -> None:
    """Decoding should yield exactly the bytes that were encoded."""

    assert decode_audio_content(_b64(_MP3_BYTES)) == _MP3_BYTES
    assert decode_audio_content("") == b""


@pytest.mark.parametrize("value", ["not base64!!", "SUQz$", "abc"])
def test_decode_audio_content_rejects_invalid_base64(value: str) -> None:
    """Non-base64 input should raise `DecodeError`."""

    with pytest.raises(DecodeError):
        decode_audio_content(value)


def test_format_timestamp_is_compact_utc() -> None:
    """Timestamps should render as UTC `YYYYMMDDTHHMMSS`, converting offsets."""

    aware = datetime(2024, 3, 5, 14, 7, 9, 123456, tzinfo=timezone(timedelta(hours=2)))
    naive = datetime(2024, 3, 5, 12, 7, 9)

    assert format_timestamp(aware) == "20240305T120709"
    assert format_timestamp(naive) == "20240305T120709"


def test_build_filename_combines_timestamp_and_voice() -> None:
    """Filename should follow `tts_<timestamp>_<voice>.mp3` with a safe voice token."""

    generated_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    assert build_filename(generated_at, "en-US-Journey-D") == "tts_20240102T030405_en-US-Journey-D.mp3"
    assert build_filename(generated_at, "a/b c") == "tts_20240102T030405_a_b_c.mp3"


def test_materialize_creates_playable_resource() -> None:
    """A materialized resource should expose bytes, MIME type, and filename."""

    handler = AudioResultHandler()
    generated_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    resource = handler.materialize(_b64(_MP3_BYTES), "en-US-Neural2-C", generated_at)

    assert resource.data == _MP3_BYTES
    assert resource.mime_type == "audio/mpeg"
    assert resource.uri.startswith("memory://audio/")
    assert resource.filename == "tts_20240102T030405_en-US-Neural2-C.mp3"
    assert handler.current is resource
    assert resource.revoked is False


def test_materialize_revokes_superseded_resource() -> None:
    """Only the newest resource should stay live after a second generation."""

    handler = AudioResultHandler()
    first = handler.materialize(_b64(b"first"), "v")
    second = handler.materialize(_b64(b"second"), "v")

    assert first.revoked is True
    assert second.data == b"second"
    assert len(handler.registry) == 1
    with pytest.raises(ResourceRevokedError):
        _ = first.data


def test_failed_decode_keeps_previous_resource_live() -> None:
    """A decode failure should not release the current resource."""

    handler = AudioResultHandler()
    first = handler.materialize(_b64(b"first"), "v")

    with pytest.raises(DecodeError):
        handler.materialize("***", "v")

    assert handler.current is first
    assert first.data == b"first"


def test_create_does_not_touch_current_until_superseded() -> None:
    """`create` should register audio without replacing the current resource."""

    handler = AudioResultHandler()
    current = handler.materialize(_b64(b"current"), "v")
    pending = handler.create(_b64(b"pending"), "v")

    assert handler.current is current
    assert current.revoked is False

    handler.supersede(pending)

    assert handler.current is pending
    assert current.revoked is True


def test_release_revokes_current() -> None:
    """Releasing should revoke and clear the current resource."""

    handler = AudioResultHandler()
    resource = handler.materialize(_b64(b"x"), "v")

    handler.release()

    assert handler.current is None
    assert resource.revoked is True
    assert resource.revoke() is False


def test_save_writes_mp3_under_filename(tmp_path: Path) -> None:
    """Saving should create the directory and write the exact bytes."""

    handler = AudioResultHandler()
    resource = handler.materialize(
        _b64(_MP3_BYTES),
        "en-US-Standard-A",
        datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )

    output_path = resource.save(tmp_path / "nested" / "out")

    assert output_path == tmp_path / "nested" / "out" / "tts_20240102T030405_en-US-Standard-A.mp3"
    assert output_path.read_bytes() == _MP3_BYTES


@pytest.mark.parametrize(
    "payload",
    [b"", b"\x00", b"ID3", _MP3_BYTES, bytes(range(256)), b"\xff" * 1024],
)
def test_materialize_preserves_base64_input(payload: bytes) -> None:
    """Re-encoding materialized bytes should reproduce the provider's base64 string."""

    audio_content = _b64(payload)

    resource = AudioResultHandler().materialize(audio_content, "v")

    assert base64.b64encode(resource.data).decode("ascii") == audio_content
