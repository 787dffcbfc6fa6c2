"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics
and probe summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import AudioProfile


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_probe_summary(profile: AudioProfile, duration_seconds: float) -> None:
    """Print probed audio profile and duration."""

    typer.echo(f"Sample rate (Hz): {profile.sample_rate}")
    typer.echo(f"Channels: {profile.channel_count} ({profile.channel_layout})")
    typer.echo(f"Bitrate (kbps): {profile.bitrate_kbps}")
    typer.echo(f"Duration (s): {duration_seconds:.3f}")
