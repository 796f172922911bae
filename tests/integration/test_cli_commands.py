"""Integration tests for CLI commands with mocked HTTP and credential storage."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from voicedesk.cli import app
from voicedesk.models.datatypes import ExecutionMode


class InMemoryCredentialStore:
    """Simple in-memory credential store used for CLI tests."""

    def __init__(self, initial_api_key: str | None = None) -> None:
        """Initialize the store with an optional pre-seeded API key."""

        self._api_key = initial_api_key
        self._mode: ExecutionMode | None = None

    def is_available(self) -> bool:
        """Return availability flag expected by the CLI status command."""

        return True

    def get_api_key(self) -> str | None:
        """Return currently stored API key value."""

        return self._api_key

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key value."""

        self._api_key = api_key.strip()

    def clear_api_key(self) -> bool:
        """Clear API key and return whether one existed."""

        existed = self._api_key is not None
        self._api_key = None
        return existed

    def get_execution_mode(self) -> ExecutionMode | None:
        """Return the stored execution mode."""

        return self._mode

    def set_execution_mode(self, mode: ExecutionMode) -> None:
        """Persist the execution mode."""

        self._mode = mode


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Route CLI credential access to an in-memory store and clear env overrides."""

    credential_store = InMemoryCredentialStore()
    monkeypatch.setattr("voicedesk.cli.create_credential_store", lambda: credential_store)
    for name in ("GOOGLE_API_KEY", "VOICEDESK_EXECUTION_MODE", "PORT"):
        monkeypatch.delenv(name, raising=False)
    return credential_store


def test_sample_prints_paragraph() -> None:
    """`sample` should print the sample text."""

    result = CliRunner().invoke(app, ["sample"])

    assert result.exit_code == 0
    assert result.output.startswith("Artificial intelligence (AI)")


def test_voices_lists_premium_first(
    http: Any, store: InMemoryCredentialStore, voices_envelope: dict[str, Any]
) -> None:
    """`voices` should list the language's voices with premium voices first."""

    http.queue(voices_envelope)

    result = CliRunner().invoke(app, ["voices", "--api-key", "AIza-cli", "--language", "en-US"])

    assert result.exit_code == 0, result.output
    assert "Language: en-US" in result.output
    assert "1. en-US-Journey-D (High-Res (GenAI), MALE)" in result.output
    assert "3. en-US-Standard-A (Standard, MALE)" in result.output
    assert http.calls[0]["params"] == {"key": "AIza-cli"}


def test_languages_uses_stored_key(
    http: Any, store: InMemoryCredentialStore, voices_envelope: dict[str, Any]
) -> None:
    """`languages` should fall back to the securely stored key."""

    store.set_api_key("AIza-stored")
    http.queue(voices_envelope)

    result = CliRunner().invoke(app, ["languages"])

    assert result.exit_code == 0, result.output
    assert "de-DE\nen-US" in result.output
    assert http.calls[0]["params"] == {"key": "AIza-stored"}


def test_voices_without_key_in_direct_mode_fails(http: Any, store: InMemoryCredentialStore) -> None:
    """Direct mode with no key should fail without any HTTP call."""

    result = CliRunner().invoke(app, ["voices"])

    assert result.exit_code == 1
    assert "Enter API Key to load voices in Direct mode." in result.output
    assert http.calls == []


def test_speak_via_proxy_writes_mp3(
    http: Any,
    store: InMemoryCredentialStore,
    voices_envelope: dict[str, Any],
    tmp_path: Path,
) -> None:
    """`speak --mode proxy` should synthesize through the proxy and save the MP3."""

    http.queue(voices_envelope)
    http.queue({"audioContent": base64.b64encode(b"mp3-bytes").decode(), "message": "Success"})

    result = CliRunner().invoke(
        app,
        [
            "speak",
            "Hello there",
            "--mode",
            "proxy",
            "--voice",
            "en-US-Neural2-C",
            "--speed",
            "1.25",
            "--out",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Audio generated successfully!" in result.output
    assert "Mode: proxy" in result.output
    assert "Voice: en-US-Neural2-C" in result.output
    assert [call["url"] for call in http.calls] == [
        "http://localhost:3000/api/voices",
        "http://localhost:3000/api/tts",
    ]
    assert http.calls[1]["json"]["voiceSettings"]["speed"] == 1.25
    saved = list(tmp_path.glob("tts_*_en-US-Neural2-C.mp3"))
    assert len(saved) == 1
    assert saved[0].read_bytes() == b"mp3-bytes"


def test_speak_surfaces_proxy_error(http: Any, store: InMemoryCredentialStore, tmp_path: Path) -> None:
    """Proxy errors should be reported verbatim with a non-zero exit."""

    http.queue({"error": "Server API Key missing"}, status_code=500)
    http.queue({"error": "Server API key not configured."}, status_code=500)

    result = CliRunner().invoke(
        app, ["speak", "Hello", "--mode", "proxy", "--out", str(tmp_path)]
    )

    assert result.exit_code == 1
    assert "Server API key not configured." in result.output
    assert list(tmp_path.iterdir()) == []


def test_speak_rejects_text_over_limit(http: Any, store: InMemoryCredentialStore) -> None:
    """Text over 5000 characters should be refused before any HTTP call."""

    result = CliRunner().invoke(app, ["speak", "a" * 5001, "--mode", "proxy"])

    assert result.exit_code == 1
    assert "the limit is 5000" in result.output
    assert http.calls == []


def test_speak_rejects_invalid_speed(
    http: Any, store: InMemoryCredentialStore, voices_envelope: dict[str, Any]
) -> None:
    """Out-of-range tuning should fail at the input stage."""

    http.queue(voices_envelope)

    result = CliRunner().invoke(app, ["speak", "Hi", "--mode", "proxy", "--speed", "9"])

    assert result.exit_code == 1
    assert "failed at stage `input`" in result.output


def test_credentials_status_and_mode(store: InMemoryCredentialStore) -> None:
    """`credentials` should persist the mode and report storage status."""

    runner = CliRunner()

    switched = runner.invoke(app, ["credentials", "--mode", "proxy"])
    status = runner.invoke(app, ["credentials"])

    assert switched.exit_code == 0
    assert "Switched to Backend Proxy mode" in switched.output
    assert store.get_execution_mode() is ExecutionMode.BACKEND_PROXY
    assert "Secure credential storage: available" in status.output
    assert "Stored Google API key: not set" in status.output
    assert "Execution mode: proxy" in status.output


def test_credentials_set_and_clear_api_key(store: InMemoryCredentialStore) -> None:
    """`--set-api-key` should store the prompted key and `--clear-api-key` remove it."""

    runner = CliRunner()

    saved = runner.invoke(app, ["credentials", "--set-api-key"], input="AIza-new\n")
    assert saved.exit_code == 0
    assert "API Key saved!" in saved.output
    assert store.get_api_key() == "AIza-new"

    cleared = runner.invoke(app, ["credentials", "--clear-api-key"])
    assert "Stored API key cleared" in cleared.output
    assert store.get_api_key() is None


def test_stored_proxy_mode_is_used_by_default(
    http: Any, store: InMemoryCredentialStore, voices_envelope: dict[str, Any]
) -> None:
    """A persisted proxy mode should apply when `--mode` is omitted."""

    store.set_execution_mode(ExecutionMode.BACKEND_PROXY)
    http.queue(voices_envelope)

    result = CliRunner().invoke(app, ["languages"])

    assert result.exit_code == 0, result.output
    assert http.calls[0]["url"] == "http://localhost:3000/api/voices"


def test_missing_config_file_reports_stage(store: InMemoryCredentialStore, tmp_path: Path) -> None:
    """A missing config path should fail at the config stage with a hint."""

    result = CliRunner().invoke(app, ["languages", "--config", str(tmp_path / "nope.yaml")])

    assert result.exit_code == 1
    assert "failed at stage `config`" in result.output


@pytest.mark.parametrize("content", ["", "  \n\t"])
def test_speak_rejects_empty_text_file(
    http: Any, store: InMemoryCredentialStore, tmp_path: Path, content: str
) -> None:
    """An empty `--file` should fail at the input stage before any HTTP call."""

    text_file = tmp_path / "empty.txt"
    text_file.write_text(content, encoding="utf-8")

    result = CliRunner().invoke(app, ["speak", "--file", str(text_file), "--mode", "proxy"])

    assert result.exit_code == 1
    assert "failed at stage `input`: Text is required." in result.output
    assert http.calls == []


def test_speak_reports_generation_failure_message(
    http: Any, store: InMemoryCredentialStore, voices_envelope: dict[str, Any], tmp_path: Path
) -> None:
    """A failed generation should report its own message rather than a generic one."""

    http.queue(voices_envelope)
    http.queue({"audioContent": "%%%not-base64%%%"})

    result = CliRunner().invoke(
        app, ["speak", "Hello", "--mode", "proxy", "--out", str(tmp_path)]
    )

    assert result.exit_code == 1
    assert "failed at stage `synthesize`: Audio content is not valid base64." in result.output
