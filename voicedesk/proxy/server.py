"""Local proxy that holds the provider key server-side.

Endpoints:
- `GET /api/voices`: relay the provider voice list.
- `POST /api/tts`: accept `{text, voiceSettings}`, call the provider, and
  answer `{audioContent, message}` or `{error}` with a matching status.
"""

from __future__ import annotations

from typing import Any, Callable

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from .. import __version__
from ..config import ProxyServerSettings
from ..errors import NetworkError, UpstreamError, ValidationError
from ..models.datatypes import (
    DEFAULT_PITCH,
    DEFAULT_SPEED,
    MAX_TEXT_CHARS,
    ExecutionMode,
    GenerationRequest,
    ProviderPayload,
    SsmlGender,
    SynthesisSettings,
)
from ..provider.google_client import GoogleTTSClient
from ..tts.request_builder import build
from ..tts.router import SpeechTransport


class VoiceSettingsBody(BaseModel):
    """`voiceSettings` object sent by clients."""

    languageCode: str | None = None
    voiceName: str | None = None
    ssmlGender: str | None = None
    speed: float | None = None
    pitch: float | None = None


class SynthesizeBody(BaseModel):
    """`POST /api/tts` request body."""

    text: str | None = None
    voiceSettings: VoiceSettingsBody = Field(default_factory=VoiceSettingsBody)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _failure_status(exc: UpstreamError) -> int:
    """Return a non-success status for an upstream failure."""

    if exc.status is None or exc.status < 400:
        return 502
    return exc.status


def _settings_from_body(voice: VoiceSettingsBody) -> SynthesisSettings:
    """Apply the proxy defaults to client voice settings."""

    return SynthesisSettings(
        language_code=voice.languageCode or "en-US",
        voice_name=voice.voiceName or "",
        ssml_gender=SsmlGender.parse(voice.ssmlGender or "NEUTRAL"),
        speed=voice.speed or DEFAULT_SPEED,
        pitch=voice.pitch or DEFAULT_PITCH,
    )


def build_router(
    settings: ProxyServerSettings,
    client_factory: Callable[..., SpeechTransport],
) -> APIRouter:
    """Create the `/api` routes bound to `settings`."""

    router = APIRouter(prefix="/api", tags=["tts"])

    def _client() -> SpeechTransport:
        return client_factory(
            api_key=settings.api_key,
            base_url=settings.provider_base_url,
            timeout_seconds=settings.timeout_seconds,
        )

    @router.post("/tts")
    def synthesize(body: SynthesizeBody) -> Any:
        """Synthesize speech with the server-held key."""

        if not settings.api_key:
            return _error(500, "Server API key not configured.")
        if not body.text:
            return _error(400, "Text is required.")

        voice_settings = _settings_from_body(body.voiceSettings)
        if settings.validate_requests:
            if len(body.text) > MAX_TEXT_CHARS:
                return _error(400, f"Text exceeds {MAX_TEXT_CHARS} characters.")
            try:
                payload = build(
                    GenerationRequest(text=body.text, settings=voice_settings),
                    ExecutionMode.BACKEND_PROXY,
                )
            except ValidationError as exc:
                return _error(400, exc.message)
        else:
            payload = ProviderPayload(
                text=body.text,
                language_code=voice_settings.language_code,
                voice_name=voice_settings.voice_name,
                ssml_gender=voice_settings.ssml_gender,
                speaking_rate=float(voice_settings.speed or DEFAULT_SPEED),
                pitch=float(voice_settings.pitch or DEFAULT_PITCH),
            )

        try:
            response = _client().synthesize(payload.as_json())
        except UpstreamError as exc:
            logger.error("[proxy] endpoint=tts status={} error_type={}", exc.status, type(exc).__name__)
            return _error(_failure_status(exc), exc.message)
        except NetworkError as exc:
            logger.error("[proxy] endpoint=tts error_type={}", type(exc).__name__)
            return _error(500, exc.message or "Failed to generate speech")

        return {"audioContent": response.get("audioContent"), "message": "Success"}

    @router.get("/voices")
    def voices() -> Any:
        """Relay the provider voice list."""

        if not settings.api_key:
            return _error(500, "Server API Key missing")
        try:
            return _client().list_voices()
        except UpstreamError as exc:
            logger.error("[proxy] endpoint=voices status={} error_type={}", exc.status, type(exc).__name__)
            return _error(_failure_status(exc), exc.message)
        except NetworkError as exc:
            logger.error("[proxy] endpoint=voices error_type={}", type(exc).__name__)
            return _error(500, "Failed to fetch voices")

    return router


def create_app(
    settings: ProxyServerSettings,
    client_factory: Callable[..., SpeechTransport] = GoogleTTSClient,
) -> FastAPI:
    """Create and configure the proxy application."""

    app = FastAPI(
        title="Voicedesk proxy",
        description="Forwards speech synthesis requests with a server-held key.",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(_request: Request, _exc: RequestValidationError) -> JSONResponse:
        return _error(400, "Invalid request body.")

    app.include_router(build_router(settings, client_factory))
    return app
