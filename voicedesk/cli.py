"""Command-line interface for Voicedesk.

Responsibilities:
- Expose user-facing commands for voice discovery, speech generation,
  credential management, and the local proxy.
- Convert CLI arguments into `VoiceDeskConfig` and drive a `VoiceDeskSession`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import uvicorn

from .cli_rendering import (
    echo_language_list,
    echo_notification,
    echo_voice_list,
    exit_with_command_error,
)
from .cli_runtime import build_session, resolve_runtime_sources
from .config import ConfigLoader, ProxyServerSettings, VoiceDeskConfig
from .credentials import create_credential_store
from .errors import CommandError, ValidationError
from .models.datatypes import MAX_TEXT_CHARS, ExecutionMode
from .parsing import normalize_optional_string
from .proxy.server import create_app
from .session import SAMPLE_TEXT, CatalogStatus, VoiceDeskSession, text_length_warning
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="voicedesk",
    no_args_is_help=True,
    help="Voicedesk text-to-speech CLI.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="YAML config file (defaults come from the environment)."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option("--api-key", help="Google API key for Direct mode (not stored by default)."),
]
ModeOption = Annotated[
    str | None,
    typer.Option("--mode", help="Execution mode: `direct` (client key) or `proxy`."),
]
PromptApiKeyOption = Annotated[
    bool,
    typer.Option("--prompt-api-key", help="Prompt for the API key with hidden input."),
]
StoreApiKeyOption = Annotated[
    bool,
    typer.Option(
        "--store-api-key/--no-store-api-key",
        help="Persist an API key entered in this run to secure storage.",
    ),
]


def _load_config(config_path: Path | None) -> VoiceDeskConfig:
    """Load YAML or environment config and map failures to command errors."""

    if config_path is None:
        try:
            return ConfigLoader.from_env()
        except ValueError as exc:
            raise CommandError(
                stage="config",
                detail=f"Invalid environment configuration: {exc}",
                hint="Fix the `VOICEDESK_*` variables and rerun.",
            ) from exc

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise CommandError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _open_session(
    config_file: Path | None,
    api_key: str | None,
    mode: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
) -> tuple[VoiceDeskConfig, VoiceDeskSession]:
    """Resolve config and runtime sources, then open a session."""

    config = _load_config(config_file)
    runtime_cli_values, runtime_secure_values = resolve_runtime_sources(
        api_key=api_key,
        mode=mode,
        prompt_api_key=prompt_api_key,
        store_api_key=store_api_key,
        credential_store_factory=create_credential_store,
    )
    session = build_session(
        config,
        runtime_cli_values,
        runtime_secure_values,
        run_logger=RunLogger(),
    )
    return config, session


def _require_catalog(session: VoiceDeskSession) -> None:
    """Fetch voices and raise a command error when they are unavailable."""

    session.refresh_voices()
    if session.catalog_status is CatalogStatus.CREDENTIAL_REQUIRED:
        raise CommandError(
            stage="voices",
            detail="Enter API Key to load voices in Direct mode.",
            hint="Pass `--api-key`, run `voicedesk credentials --set-api-key`, or use `--mode proxy`.",
        )
    if session.catalog_status is not CatalogStatus.READY:
        raise CommandError(
            stage="voices",
            detail=f"Could not load voice list: {session.catalog_error}",
            hint="Check the API key, or that the proxy is running in proxy mode.",
        )


@app.command("languages")
def languages_command(
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    mode: ModeOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = False,
) -> None:
    """List language codes offered by the voice catalog."""

    try:
        _, session = _open_session(config_file, api_key, mode, prompt_api_key, store_api_key)
        _require_catalog(session)
    except Exception as exc:
        exit_with_command_error("languages", exc)

    echo_language_list(session.languages())


@app.command("voices")
def voices_command(
    language: Annotated[
        str | None, typer.Option("--language", "-l", help="Language code, e.g. `en-US`.")
    ] = None,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    mode: ModeOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = False,
) -> None:
    """List voices for a language, premium voices first."""

    try:
        config, session = _open_session(
            config_file, api_key, mode, prompt_api_key, store_api_key
        )
        _require_catalog(session)
        voices = session.select_language(language or config.language_code)
    except Exception as exc:
        exit_with_command_error("voices", exc)

    typer.echo(f"Language: {session.settings.language_code}")
    echo_voice_list(voices)


def _read_text(text: str | None, text_file: Path | None) -> str:
    """Return text from the argument or a UTF-8 file."""

    if text_file is not None:
        try:
            text = text_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise CommandError(
                stage="input",
                detail=f"Failed to read text file `{text_file}`: {exc}",
            ) from exc
    if text is None or not text.strip():
        raise CommandError(
            stage="input",
            detail="Text is required.",
            hint="Pass text as an argument or use `--file <path>`.",
        )
    return text


def _last_error_message(session: VoiceDeskSession) -> str:
    """Return the most recent error notification, which covers rejected and failed runs."""

    for notification in reversed(session.lifecycle.notifications):
        if notification.level == "error":
            return notification.message
    return "Generation failed."


def _apply_voice_selection(
    session: VoiceDeskSession,
    config: VoiceDeskConfig,
    language: str | None,
    voice: str | None,
) -> None:
    """Pick language and voice, degrading to raw settings when voices are unavailable."""

    language_code = language or config.language_code
    voice_name = voice or config.voice_name
    session.refresh_voices()
    if session.catalog_status is CatalogStatus.READY:
        session.select_language(language_code)
        if voice_name:
            session.select_voice(voice_name)
        return

    session.settings.language_code = language_code
    session.settings.voice_name = voice_name or ""


@app.command("speak")
def speak_command(
    text: Annotated[str | None, typer.Argument(help="Text to synthesize.")] = None,
    text_file: Annotated[
        Path | None, typer.Option("--file", "-f", help="Read text from a UTF-8 file.")
    ] = None,
    language: Annotated[
        str | None, typer.Option("--language", "-l", help="Language code, e.g. `en-US`.")
    ] = None,
    voice: Annotated[str | None, typer.Option("--voice", "-v", help="Voice name.")] = None,
    speed: Annotated[
        float | None, typer.Option("--speed", help="Speaking rate, 0.25 to 4.0.")
    ] = None,
    pitch: Annotated[
        float | None, typer.Option("--pitch", help="Pitch in semitones, -20 to 20.")
    ] = None,
    out: Annotated[
        Path | None, typer.Option("--out", help="Output directory for the MP3 file.")
    ] = None,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    mode: ModeOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = False,
) -> None:
    """Synthesize text to an MP3 file."""

    try:
        source_text = _read_text(text, text_file)
        if len(source_text) > MAX_TEXT_CHARS:
            raise CommandError(
                stage="input",
                detail=f"Text is {len(source_text)} characters; the limit is {MAX_TEXT_CHARS}.",
                hint="Split the text into shorter parts.",
            )
        warning = text_length_warning(source_text)
        if warning is not None:
            typer.secho(warning, fg=typer.colors.YELLOW, err=True)

        config, session = _open_session(
            config_file, api_key, mode, prompt_api_key, store_api_key
        )
        _apply_voice_selection(session, config, language, voice)
        if speed is not None:
            session.set_speed(speed)
        if pitch is not None:
            session.set_pitch(pitch)

        result = session.generate(source_text)
        if result is None or result.resource is None:
            raise CommandError(
                stage="synthesize",
                detail=_last_error_message(session),
            )
        output_path = result.resource.save(out if out is not None else config.output_dir)
    except ValidationError as exc:
        exit_with_command_error("speak", CommandError(stage="input", detail=exc.message))
    except Exception as exc:
        exit_with_command_error("speak", exc)

    for notification in session.lifecycle.notifications:
        if notification.level == "success":
            echo_notification(notification)
    typer.echo(f"Mode: {session.mode.value}")
    typer.echo(f"Voice: {result.voice_name or '(provider default)'}")
    typer.echo(f"Generated at: {result.generated_at.isoformat(timespec='seconds')}")
    typer.echo(f"Audio file: {output_path}")


@app.command("sample")
def sample_command() -> None:
    """Print a sample paragraph to try voices with."""

    typer.echo(SAMPLE_TEXT)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
    mode: Annotated[
        str | None,
        typer.Option("--mode", help="Persist the default execution mode (`direct` or `proxy`)."),
    ] = None,
) -> None:
    """Manage the stored API key and execution mode."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            CommandError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if mode is not None:
        try:
            parsed_mode = ExecutionMode.parse(mode)
            credential_store.set_execution_mode(parsed_mode)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                CommandError(stage="credentials", detail=f"Failed to store mode: {exc}"),
            )
        if parsed_mode is ExecutionMode.BACKEND_PROXY:
            typer.echo("Switched to Backend Proxy mode")
        else:
            typer.echo("Switched to Direct mode (Client Key)")

    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "Google API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                CommandError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                CommandError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API Key saved!")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key()
        if removed:
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    if mode is not None:
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    status = "present" if credential_store.get_api_key() is not None else "not set"
    stored_mode = credential_store.get_execution_mode()
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored Google API key: {status}")
    typer.echo(f"Execution mode: {stored_mode.value if stored_mode else 'not set'}")


@app.command("serve")
def serve_command(
    host: Annotated[str | None, typer.Option("--host", help="Bind host.")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port.")] = None,
    config_file: ConfigOption = None,
) -> None:
    """Run the local proxy that holds the API key server-side."""

    try:
        config = _load_config(config_file)
        settings = ProxyServerSettings.from_config(config)
    except Exception as exc:
        exit_with_command_error("serve", exc)

    bind_host = host or config.proxy_host
    bind_port = port or config.proxy_port
    typer.echo(f"Server running on http://{bind_host}:{bind_port}")
    if settings.api_key is None:
        typer.secho("Ensure GOOGLE_API_KEY is set.", fg=typer.colors.YELLOW, err=True)
    uvicorn.run(create_app(settings), host=bind_host, port=bind_port)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
