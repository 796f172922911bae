"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
voice rows, language rows, and generation summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import CommandError, UpstreamError
from .models.datatypes import Notification, VoiceDescriptor
from .voices.selector import voice_label


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CommandError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    elif isinstance(exc, UpstreamError) and exc.status is not None:
        typer.secho(
            f"{command_name} failed (HTTP {exc.status}): {exc}",
            fg=typer.colors.RED,
            err=True,
        )
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_language_list(languages: list[str]) -> None:
    """Print one language code per line."""

    for code in languages:
        typer.echo(code)


def echo_voice_list(voices: list[VoiceDescriptor]) -> None:
    """Print voices in selection order with their labels."""

    if not voices:
        typer.echo("No voices available for this language.")
        return
    for index, voice in enumerate(voices, start=1):
        typer.echo(f"{index}. {voice_label(voice)}")


def echo_notification(notification: Notification) -> None:
    """Print a lifecycle notification in its level color."""

    color = {
        "error": typer.colors.RED,
        "success": typer.colors.GREEN,
    }.get(notification.level)
    typer.secho(notification.message, fg=color, err=notification.level == "error")
