"""Unit tests for CLI rendering helpers."""

from __future__ import annotations

import pytest
import typer

from voicedesk.cli_rendering import echo_voice_list, exit_with_command_error
from voicedesk.errors import CommandError, UpstreamError
from voicedesk.models.datatypes import SsmlGender, VoiceDescriptor


def test_exit_with_command_error_prints_stage_and_hint(capsys: pytest.CaptureFixture[str]) -> None:
    """Command errors should print the stage, detail, and hint, then exit 1."""

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error(
            "speak",
            CommandError(stage="voices", detail="No voices.", hint="Check the key."),
        )

    assert exc_info.value.exit_code == 1
    err = capsys.readouterr().err
    assert "speak failed at stage `voices`: No voices." in err
    assert "Hint: Check the key." in err


def test_exit_with_command_error_includes_http_status(capsys: pytest.CaptureFixture[str]) -> None:
    """Upstream errors should show their HTTP status."""

    with pytest.raises(typer.Exit):
        exit_with_command_error("voices", UpstreamError("Forbidden", status=403))

    assert "voices failed (HTTP 403): Forbidden" in capsys.readouterr().err


def test_echo_voice_list_numbers_labels(capsys: pytest.CaptureFixture[str]) -> None:
    """Voice rows should be numbered with their display labels."""

    echo_voice_list(
        [
            VoiceDescriptor("en-US-Journey-D", ("en-US",), SsmlGender.MALE),
            VoiceDescriptor("en-US-Standard-A", ("en-US",), SsmlGender.FEMALE),
        ]
    )

    assert capsys.readouterr().out.splitlines() == [
        "1. en-US-Journey-D (High-Res (GenAI), MALE)",
        "2. en-US-Standard-A (Standard, FEMALE)",
    ]


def test_echo_voice_list_reports_empty_language(capsys: pytest.CaptureFixture[str]) -> None:
    """An empty voice list should print a single notice."""

    echo_voice_list([])

    assert capsys.readouterr().out.strip() == "No voices available for this language."
