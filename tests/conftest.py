"""Shared pytest fixtures for the full Voicedesk test suite."""

from __future__ import annotations

import json
from typing import Any

import pytest


class MockRequestsResponse:
    """Minimal requests response mock for HTTP transport patching."""

    def __init__(self, *, payload: Any = None, status_code: int = 200, raw: bytes | None = None) -> None:
        """Initialize response with a JSON payload (or raw bytes) and HTTP status."""

        if raw is not None:
            self.content = raw
        else:
            self.content = json.dumps(payload if payload is not None else {}).encode("utf-8")
        self.status_code = status_code


class HttpRecorder:
    """Queue canned responses for `requests.get`/`requests.post` and record calls."""

    def __init__(self) -> None:
        """Initialize empty call log and response queue."""

        self.calls: list[dict[str, Any]] = []
        self._responses: list[MockRequestsResponse | Exception] = []

    def queue(self, payload: Any = None, status_code: int = 200, raw: bytes | None = None) -> None:
        """Queue one response."""

        self._responses.append(
            MockRequestsResponse(payload=payload, status_code=status_code, raw=raw)
        )

    def queue_error(self, exc: Exception) -> None:
        """Queue one transport exception."""

        self._responses.append(exc)

    def handle(self, method: str, url: str, **kwargs: Any) -> MockRequestsResponse:
        """Record the call and return (or raise) the next queued item."""

        self.calls.append({"method": method, "url": url, **kwargs})
        if not self._responses:
            raise AssertionError(f"Unexpected HTTP call: {method} {url}")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def http(monkeypatch: pytest.MonkeyPatch) -> HttpRecorder:
    """Patch the provider client's HTTP calls with a recorder."""

    recorder = HttpRecorder()
    monkeypatch.setattr(
        "voicedesk.provider.google_client.requests.get",
        lambda url, **kwargs: recorder.handle("GET", url, **kwargs),
    )
    monkeypatch.setattr(
        "voicedesk.provider.google_client.requests.post",
        lambda url, **kwargs: recorder.handle("POST", url, **kwargs),
    )
    return recorder


@pytest.fixture
def voices_envelope() -> dict[str, Any]:
    """Provider voice list spanning two languages and three voice families."""

    return {
        "voices": [
            {
                "name": "en-US-Standard-A",
                "languageCodes": ["en-US"],
                "ssmlGender": "MALE",
                "naturalSampleRateHertz": 24000,
            },
            {
                "name": "en-US-Neural2-C",
                "languageCodes": ["en-US"],
                "ssmlGender": "FEMALE",
                "naturalSampleRateHertz": 24000,
            },
            {
                "name": "en-US-Journey-D",
                "languageCodes": ["en-US"],
                "ssmlGender": "MALE",
                "naturalSampleRateHertz": 24000,
            },
            {
                "name": "de-DE-Standard-B",
                "languageCodes": ["de-DE"],
                "ssmlGender": "MALE",
                "naturalSampleRateHertz": 24000,
            },
        ]
    }
