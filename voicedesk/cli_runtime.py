"""CLI runtime resolution helpers.

This module isolates API-key prompting, runtime source assembly, secure
credential persistence, and session construction from the command wiring
layer.
"""

from __future__ import annotations

import os
from typing import Callable, Protocol

import typer

from .config import RuntimeConfigSources, VoiceDeskConfig
from .credentials import create_credential_store
from .errors import CommandError
from .models.datatypes import ExecutionMode, SynthesisSettings
from .parsing import normalize_optional_string
from .session import VoiceDeskSession
from .telemetry.logger import RunLogger
from .tts.router import ExecutionModeRouter


class CredentialStoreProtocol(Protocol):
    """Protocol for secure store operations used by CLI runtime resolution."""

    def get_api_key(self) -> str | None:
        """Return currently stored API key, if available."""

    def set_api_key(self, api_key: str) -> None:
        """Persist API key value in secure storage."""

    def get_execution_mode(self) -> ExecutionMode | None:
        """Return the persisted execution mode, if any."""


def _prompt_api_key() -> str | None:
    """Prompt for an API key with hidden input; blank means skip."""

    return normalize_optional_string(
        typer.prompt(
            "Google API key (hidden; leave blank to skip)",
            default="",
            hide_input=True,
            show_default=False,
        )
    )


def resolve_runtime_sources(
    api_key: str | None,
    mode: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
) -> tuple[dict[str, str], dict[str, str]]:
    """Resolve CLI and secure runtime source mappings for one command."""

    runtime_cli_values: dict[str, str] = {}
    normalized_key = normalize_optional_string(api_key)
    if normalized_key is not None:
        runtime_cli_values["api_key"] = normalized_key
    normalized_mode = normalize_optional_string(mode)
    if normalized_mode is not None:
        runtime_cli_values["execution_mode"] = normalized_mode

    api_key_entered_in_run = "api_key" in runtime_cli_values
    if prompt_api_key and "api_key" not in runtime_cli_values:
        prompted = _prompt_api_key()
        if prompted is not None:
            runtime_cli_values["api_key"] = prompted
            api_key_entered_in_run = True

    credential_store = credential_store_factory()
    runtime_secure_values: dict[str, str] = {}
    stored_api_key = credential_store.get_api_key()
    if stored_api_key is not None:
        runtime_secure_values["api_key"] = stored_api_key
    stored_mode = credential_store.get_execution_mode()
    if stored_mode is not None:
        runtime_secure_values["execution_mode"] = stored_mode.value

    if api_key_entered_in_run and store_api_key:
        try:
            credential_store.set_api_key(runtime_cli_values["api_key"])
            typer.echo("Stored API key in secure credential storage.")
        except Exception as exc:
            raise CommandError(
                stage="credentials",
                detail=f"Failed to store API key securely: {exc}",
                hint=(
                    "Install and configure a keyring backend, or rerun with "
                    "`--no-store-api-key` for one-off usage."
                ),
            ) from exc

    return runtime_cli_values, runtime_secure_values


def build_session(
    config: VoiceDeskConfig,
    runtime_cli_values: dict[str, str],
    runtime_secure_values: dict[str, str],
    run_logger: RunLogger | None = None,
) -> VoiceDeskSession:
    """Create a session from config plus resolved runtime sources."""

    try:
        runtime = config.resolved_client_runtime(
            RuntimeConfigSources(
                cli=runtime_cli_values,
                secure=runtime_secure_values,
                env=os.environ,
            )
        )
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=str(exc),
            hint="Use `--mode direct` or `--mode proxy`.",
        ) from exc

    router = ExecutionModeRouter(
        provider_base_url=config.provider_base_url,
        proxy_base_url=config.proxy_base_url,
        timeout_seconds=config.timeout_seconds,
    )
    settings = SynthesisSettings(
        language_code=config.language_code,
        speed=config.speed,
        pitch=config.pitch,
    )
    return VoiceDeskSession(
        mode=runtime.execution_mode,
        credential=runtime.api_key,
        settings=settings,
        router=router,
        run_logger=run_logger,
    )
