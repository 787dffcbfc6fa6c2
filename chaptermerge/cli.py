"""Command-line interface for chaptermerge.

Responsibilities:
- Expose user-facing commands for merging, probing, and serving.
- Convert CLI arguments into `MergeWorkerConfig` and `MergeRequest` values.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .audio.probe import MediaProber
from .audio.tooling import SubprocessToolRunner
from .cli_rendering import echo_probe_summary, exit_with_command_error
from .config import ConfigLoader, MergeWorkerConfig
from .errors import ConfigurationError
from .pipeline import MergePipeline
from .runtime_tools import resolve_media_tool
from .server import create_app
from .service import parse_request
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="chaptermerge",
    no_args_is_help=True,
    help="Merge chapter MP3s into one chaptered audiobook track.",
)


class MergeProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_config(config_path: Path | None, gap_ms: int | None = None) -> MergeWorkerConfig:
    """Load YAML or environment config and map failures to configuration errors."""

    try:
        if config_path is None:
            config = ConfigLoader.from_env()
        else:
            config = ConfigLoader.from_yaml(config_path)
        return config.with_overrides(gap_ms=gap_ms)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid configuration: {exc}",
            hint="Fix config values and rerun.",
        ) from exc


@app.command("merge")
def merge_command(
    chapter_urls: Annotated[
        list[str],
        typer.Argument(help="Chapter audio URLs in playback order."),
    ],
    book_id: Annotated[
        str,
        typer.Option("--book-id", help="Work identifier used in the storage key."),
    ],
    titles: Annotated[
        list[str] | None,
        typer.Option("--title", help="Chapter title; repeat once per chapter, in order."),
    ] = None,
    gap_ms: Annotated[
        int | None,
        typer.Option("--gap-ms", min=1, help="Silence between chapters in milliseconds."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file (defaults to environment)."),
    ] = None,
) -> None:
    """Merge chapters synchronously and print the published URL."""

    try:
        config = _load_config(config_file, gap_ms)
        merge_request = parse_request(
            {
                "bookId": book_id,
                "chapterAudioUrls": list(chapter_urls),
                "chapterTitles": list(titles) if titles else None,
                "mode": "sync",
            }
        )
        progress = MergeProgressIndicator(command_name="merge")
        pipeline = MergePipeline(
            config,
            run_logger=RunLogger(),
            stage_progress_callback=progress.on_stage_start,
        )
        audio_url = pipeline.run(merge_request)
    except Exception as exc:
        exit_with_command_error("merge", exc)

    typer.echo(f"Book id: {merge_request.book_id}")
    typer.echo(f"Chapters: {merge_request.chapter_count}")
    typer.echo(f"Audio URL: {audio_url}")


@app.command("probe")
def probe_command(
    audio_file: Annotated[Path, typer.Argument(help="Local audio file to inspect.")],
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file (defaults to environment)."),
    ] = None,
) -> None:
    """Print the audio profile a gap would be synthesized with, plus duration."""

    try:
        config = _load_config(config_file)
        prober = MediaProber(
            SubprocessToolRunner(),
            resolve_media_tool("ffprobe", config.ffprobe_path),
        )
        profile = prober.probe_profile(audio_file)
        duration = prober.probe_duration(audio_file)
    except Exception as exc:
        exit_with_command_error("probe", exc)

    echo_probe_summary(profile, duration)


@app.command("serve")
def serve_command(
    host: Annotated[
        str | None, typer.Option("--host", help="Bind address (overrides config).")
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", min=1, help="Bind port (overrides config).")
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file (defaults to environment)."),
    ] = None,
) -> None:
    """Serve `POST /merge` and `GET /health` over HTTP."""

    try:
        config = _load_config(config_file).with_overrides(host=host, port=port)
        http_app = create_app(config)
    except Exception as exc:
        exit_with_command_error("serve", exc)

    typer.echo(f"merge worker listening on {config.host}:{config.port}")
    http_app.run(host=config.host, port=config.port)


def main() -> None:
    """Run the chaptermerge CLI."""

    app()
