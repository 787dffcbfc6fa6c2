"""CLI command tests for merge, probe, and serve."""

from __future__ import annotations

from pathlib import Path

from pytest import MonkeyPatch
from typer.testing import CliRunner

from chaptermerge.cli import app
from chaptermerge.errors import TransportError
from chaptermerge.models.datatypes import MergeRequest


def _write_config(tmp_path: Path, body: str = "") -> Path:
    """Write a YAML config with a public destination plus extra lines."""

    config_path = tmp_path / "merge.yml"
    config_path.write_text(
        "storage:\n  public_base_url: https://cdn.example.com\n" + body,
        encoding="utf-8",
    )
    return config_path


def test_merge_command_prints_published_url(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Merge should pass URLs, titles, and gap override through to the pipeline."""

    captured: dict[str, object] = {}

    def _fake_run(self, request: MergeRequest) -> str:
        captured["request"] = request
        captured["gap_ms"] = self.gap_ms
        return "https://cdn.example.com/audio/book-42-merged-1.mp3"

    monkeypatch.setattr("chaptermerge.cli.MergePipeline.run", _fake_run)

    result = CliRunner().invoke(
        app,
        [
            "merge",
            "https://files.example.com/1.mp3",
            "https://files.example.com/2.mp3",
            "--book-id",
            "42",
            "--title",
            "Intro",
            "--title",
            "Finale",
            "--gap-ms",
            "500",
            "--config",
            str(_write_config(tmp_path)),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Book id: 42" in result.output
    assert "Chapters: 2" in result.output
    assert "Audio URL: https://cdn.example.com/audio/book-42-merged-1.mp3" in result.output
    request = captured["request"]
    assert isinstance(request, MergeRequest)
    assert request.chapter_audio_urls == (
        "https://files.example.com/1.mp3",
        "https://files.example.com/2.mp3",
    )
    assert request.chapter_titles == ("Intro", "Finale")
    assert captured["gap_ms"] == 500


def test_merge_command_reports_stage_error(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Pipeline failures should be rendered with their stage and exit code 1."""

    def _failing_run(*_: object, **__: object) -> str:
        raise TransportError(stage="download", detail="Fetch failed 404", status_code=404)

    monkeypatch.setattr("chaptermerge.cli.MergePipeline.run", _failing_run)

    result = CliRunner().invoke(
        app,
        [
            "merge",
            "https://files.example.com/1.mp3",
            "--book-id",
            "42",
            "--config",
            str(_write_config(tmp_path)),
        ],
    )

    assert result.exit_code == 1
    assert "merge failed at stage `download`: Fetch failed 404" in result.output


def test_merge_command_reports_missing_config_file(tmp_path: Path) -> None:
    """A missing `--config` path should be a configuration-stage failure."""

    result = CliRunner().invoke(
        app,
        [
            "merge",
            "https://files.example.com/1.mp3",
            "--book-id",
            "42",
            "--config",
            str(tmp_path / "missing.yml"),
        ],
    )

    assert result.exit_code == 1
    assert "merge failed at stage `config`: Config file not found" in result.output
    assert "Hint: Provide an existing path via `--config <path.yaml>`." in result.output


def test_merge_command_reports_invalid_config(tmp_path: Path) -> None:
    """Invalid config values should be reported before any download."""

    result = CliRunner().invoke(
        app,
        [
            "merge",
            "https://files.example.com/1.mp3",
            "--book-id",
            "42",
            "--config",
            str(_write_config(tmp_path, "gap_ms: zero\n")),
        ],
    )

    assert result.exit_code == 1
    assert "merge failed at stage `config`: Invalid configuration" in result.output


def test_probe_command_prints_profile(
    monkeypatch: MonkeyPatch, tmp_path: Path, fake_tool_runner
) -> None:
    """Probe should print the gap profile and duration of a local file."""

    fake_tool_runner.durations["chapter.mp3"] = 61.5
    monkeypatch.setattr("chaptermerge.cli.SubprocessToolRunner", lambda: fake_tool_runner)

    result = CliRunner().invoke(
        app,
        ["probe", str(tmp_path / "chapter.mp3"), "--config", str(_write_config(tmp_path))],
    )

    assert result.exit_code == 0, result.output
    assert "Sample rate (Hz): 44100" in result.output
    assert "Channels: 2 (stereo)" in result.output
    assert "Bitrate (kbps): 128" in result.output
    assert "Duration (s): 61.500" in result.output


def test_serve_command_binds_configured_address(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Serve should apply host/port overrides and start the HTTP app."""

    started: dict[str, object] = {}

    class _FakeHttpApp:
        def run(self, *, host: str, port: int) -> None:
            started.update(host=host, port=port)

    monkeypatch.setattr("chaptermerge.cli.create_app", lambda config: _FakeHttpApp())

    result = CliRunner().invoke(
        app,
        ["serve", "--host", "127.0.0.1", "--port", "8099", "--config", str(_write_config(tmp_path))],
    )

    assert result.exit_code == 0, result.output
    assert "merge worker listening on 127.0.0.1:8099" in result.output
    assert started == {"host": "127.0.0.1", "port": 8099}
