"""Session context for voice selection and speech generation.

Responsibilities:
- Hold the execution mode, credential, voice catalog, and synthesis settings
  for one user session, each written only through this object.
- Keep settings consistent with the catalog when languages or voices change.
- Drive one generation end to end inside the `GenerationLifecycle`, turning
  every component failure into an error notification.

Key types:
- `VoiceDeskSession`: orchestration entry point used by the CLI.
- `CatalogStatus`: voice-list availability shown to the user.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from .errors import (
    CredentialMissingError,
    GenerationInProgressError,
    ValidationError,
    VoiceDeskError,
)
from .lifecycle import GenerationLifecycle, LifecycleStatus
from .models.datatypes import (
    MAX_PITCH,
    MAX_SPEED,
    MAX_TEXT_CHARS,
    MIN_PITCH,
    MIN_SPEED,
    TEXT_WARNING_CHARS,
    ExecutionMode,
    GenerationRequest,
    GenerationResult,
    SynthesisSettings,
    VoiceDescriptor,
)
from .parsing import normalize_optional_string
from .telemetry.logger import RunLogger
from .tts.audio import AudioResultHandler, PlayableAudioResource
from .tts.request_builder import build
from .tts.router import ExecutionModeRouter
from .voices.catalog import VoiceCatalog, fetch_voices
from .voices.selector import default_voice, languages_of, voices_for


SAMPLE_TEXT = (
    "Artificial intelligence (AI) is intelligence associated with computational "
    "devices. It stands in contrast to natural intelligence, which is the province "
    "of humans and animals."
)
CATALOG_ERROR_MESSAGE = "Could not load voice list. Check API Key."


class CatalogStatus(str, Enum):
    """Availability of the voice list."""

    NOT_LOADED = "not_loaded"
    READY = "ready"
    CREDENTIAL_REQUIRED = "credential_required"
    UNAVAILABLE = "unavailable"


def text_length_warning(text: str) -> str | None:
    """Return a warning when text nears or exceeds the character ceiling."""

    count = len(text)
    if count > MAX_TEXT_CHARS:
        return f"Text is {count} characters; the limit is {MAX_TEXT_CHARS}."
    if count > TEXT_WARNING_CHARS:
        return f"Text is {count} / {MAX_TEXT_CHARS} characters; approaching the limit."
    return None


class VoiceDeskSession:
    """Orchestrate catalog, settings, and generation for one session."""

    def __init__(
        self,
        mode: ExecutionMode = ExecutionMode.DIRECT_CLIENT,
        credential: str | None = None,
        settings: SynthesisSettings | None = None,
        router: ExecutionModeRouter | None = None,
        audio_handler: AudioResultHandler | None = None,
        lifecycle: GenerationLifecycle | None = None,
        run_logger: RunLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize collaborators; all are replaceable for tests."""

        self.mode = ExecutionMode.parse(mode)
        self.credential = normalize_optional_string(credential)
        self.settings = settings if settings is not None else SynthesisSettings()
        self.router = router if router is not None else ExecutionModeRouter()
        self.audio_handler = audio_handler if audio_handler is not None else AudioResultHandler()
        self.lifecycle = lifecycle if lifecycle is not None else GenerationLifecycle()
        self.catalog = VoiceCatalog()
        self.catalog_status = CatalogStatus.NOT_LOADED
        self.catalog_error: str | None = None
        self._run_logger = run_logger
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def status(self) -> LifecycleStatus:
        return self.lifecycle.status

    @property
    def result(self) -> GenerationResult | None:
        """Last successful result; survives later failures."""

        return self.lifecycle.result

    @property
    def resource(self) -> PlayableAudioResource | None:
        return self.audio_handler.current

    def refresh_voices(self) -> VoiceCatalog:
        """Fetch and index voices, then re-derive the voice selection.

        Failures never raise: they set `catalog_status` and leave text,
        settings, and prior audio untouched.
        """

        self._log_start("voices", mode=self.mode.value)
        try:
            descriptors = fetch_voices(self.mode, self.credential, source=self.router)
        except CredentialMissingError as exc:
            self.catalog_status = CatalogStatus.CREDENTIAL_REQUIRED
            self.catalog_error = exc.message
            self._log_failure("voices", exc)
            return self.catalog
        except VoiceDeskError as exc:
            self.catalog_status = CatalogStatus.UNAVAILABLE
            self.catalog_error = exc.message
            self._log_failure("voices", exc)
            self.lifecycle.notify("error", CATALOG_ERROR_MESSAGE)
            return self.catalog

        self.catalog = VoiceCatalog.from_voices(descriptors)
        self.catalog_status = CatalogStatus.READY
        self.catalog_error = None
        self._log_complete("voices", count=len(self.catalog))

        languages = languages_of(self.catalog)
        if self.settings.language_code not in languages and languages:
            self.settings.language_code = languages[0]
        self.select_language(self.settings.language_code)
        return self.catalog

    def languages(self) -> list[str]:
        return languages_of(self.catalog)

    def voices(self) -> list[VoiceDescriptor]:
        """Voices for the selected language in selection order."""

        return voices_for(self.catalog, self.settings.language_code)

    def select_language(self, language_code: str) -> list[VoiceDescriptor]:
        """Select a language and make its first voice current.

        With no voices for the language, the voice selection is cleared.
        """

        self.settings.language_code = language_code
        selected = default_voice(self.catalog, language_code)
        if selected is not None:
            self._apply_voice(selected)
        else:
            self.settings.voice_name = ""
        return voices_for(self.catalog, language_code)

    def select_voice(self, voice_name: str) -> VoiceDescriptor:
        """Select a voice available for the current language.

        Raises:
            ValidationError: If the voice is not offered for the language.
        """

        for candidate in self.voices():
            if candidate.name == voice_name:
                self._apply_voice(candidate)
                return candidate
        raise ValidationError(
            f"Voice `{voice_name}` is not available for `{self.settings.language_code}`."
        )

    def set_speed(self, speed: float) -> None:
        if not MIN_SPEED <= speed <= MAX_SPEED:
            raise ValidationError(f"Speed must be between {MIN_SPEED} and {MAX_SPEED}.")
        self.settings.speed = speed

    def set_pitch(self, pitch: float) -> None:
        if not MIN_PITCH <= pitch <= MAX_PITCH:
            raise ValidationError(f"Pitch must be between {MIN_PITCH} and {MAX_PITCH}.")
        self.settings.pitch = pitch

    def generate(self, text: str) -> GenerationResult | None:
        """Run one generation and return its result, or `None` on failure.

        The outcome is also reflected in `status`, `lifecycle.message`, and
        `lifecycle.notifications`.
        """

        try:
            token = self.lifecycle.begin(text)
        except (ValidationError, GenerationInProgressError) as exc:
            self.lifecycle.notify("error", exc.message)
            return None

        settings = replace(self.settings)
        self._log_start("synthesize", mode=self.mode.value, voice=settings.voice_name)
        try:
            payload = build(GenerationRequest(text=text, settings=settings), self.mode)
            audio_content = self.router.dispatch(payload, self.mode, self.credential)
            generated_at = self._clock()
            resource = self.audio_handler.create(
                audio_content,
                voice_name=settings.voice_name,
                generated_at=generated_at,
            )
        except VoiceDeskError as exc:
            self.lifecycle.fail(token, exc)
            self._log_failure("synthesize", exc)
            return None
        except Exception as exc:
            self.lifecycle.fail(token, exc)
            self._log_failure("synthesize", exc)
            raise

        result = GenerationResult(
            audio_bytes=resource.data,
            voice_name=settings.voice_name,
            generated_at=generated_at,
            resource=resource,
        )
        if not self.lifecycle.succeed(token, result):
            resource.revoke()
            return None
        self.audio_handler.supersede(resource)
        self._log_complete("synthesize", bytes=len(result.audio_bytes))
        return result

    def _apply_voice(self, descriptor: VoiceDescriptor) -> None:
        self.settings.voice_name = descriptor.name
        self.settings.ssml_gender = descriptor.ssml_gender

    def _log_start(self, stage: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage, **context)

    def _log_complete(self, stage: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage, **context)

    def _log_failure(self, stage: str, exc: BaseException) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage, type(exc).__name__)
