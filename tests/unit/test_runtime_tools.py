"""Unit tests for media tool executable resolution."""

from __future__ import annotations

from pathlib import Path

from pytest import MonkeyPatch

from chaptermerge import runtime_tools


def test_resolve_media_tool_prefers_configured_path(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """An explicitly configured path should win over bundled and PATH binaries."""

    bundled_bin = tmp_path / "bin"
    bundled_bin.mkdir(parents=True, exist_ok=True)
    (bundled_bin / "ffmpeg").write_text("stub", encoding="utf-8")
    monkeypatch.setattr(runtime_tools, "_app_root", lambda: tmp_path)

    resolved = runtime_tools.resolve_media_tool("ffmpeg", " /custom/ffmpeg ")

    assert resolved == "/custom/ffmpeg"


def test_resolve_media_tool_prefers_bundled_bin_over_path(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """Bundled `bin` executable should take precedence over PATH discovery."""

    bundled_bin = tmp_path / "bin"
    bundled_bin.mkdir(parents=True, exist_ok=True)
    bundled_tool = bundled_bin / "ffprobe"
    bundled_tool.write_text("stub", encoding="utf-8")
    monkeypatch.setattr(runtime_tools, "_app_root", lambda: tmp_path)
    monkeypatch.setattr(runtime_tools.shutil, "which", lambda _: "/usr/bin/ffprobe")

    resolved = runtime_tools.resolve_media_tool("ffprobe")

    assert resolved == str(bundled_tool)


def test_resolve_media_tool_falls_back_to_bare_name(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """Without any binary found, the bare name is returned for the runner to report."""

    monkeypatch.setattr(runtime_tools, "_app_root", lambda: tmp_path)
    monkeypatch.setattr(runtime_tools.shutil, "which", lambda _: None)

    assert runtime_tools.resolve_media_tool("ffmpeg", None) == "ffmpeg"
