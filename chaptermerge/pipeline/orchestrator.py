"""Pipeline orchestration for chapter merges.

Responsibilities:
- Define the stage order: download, probe, gap, clean, concat, chapters,
  inject, upload.
- Own one `Workspace` per run and release it on every exit path.
- Report `MergeState` transitions, ending in `DONE` or `FAILED`.

Key types:
- `MergePipeline`: orchestration facade; safe to share across concurrent runs.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from ..audio.chapters import (
    ChapterMarkerInjector,
    build_chapter_timeline,
    resolve_chapter_titles,
)
from ..audio.cleaner import MetadataStripper
from ..audio.gap import GapSynthesizer
from ..audio.merger import ChapterConcatenator
from ..audio.probe import MediaProber
from ..audio.tooling import SubprocessToolRunner, ToolRunner
from ..config import MergeWorkerConfig
from ..errors import ValidationError
from ..io.downloader import ChapterDownloader
from ..io.publisher import ArtifactPublisher, S3ObjectStore
from ..io.storage import Workspace
from ..models.datatypes import AudioProfile, ChapterTimeline, MergeRequest, MergeState
from ..runtime_tools import resolve_media_tool
from ..telemetry.logger import RunLogger
from .telemetry import PipelineTelemetryMixin


class MergePipeline(PipelineTelemetryMixin):
    """Coordinate all stages for a single chapter merge.

    Runs are strictly sequential and keep their state on the call stack, so
    one instance may serve concurrent requests.
    """

    def __init__(
        self,
        config: MergeWorkerConfig | None = None,
        *,
        runner: ToolRunner | None = None,
        downloader: ChapterDownloader | None = None,
        publisher: ArtifactPublisher | None = None,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        state_listener: Callable[[str, MergeState], None] | None = None,
    ) -> None:
        """Wire stage components from configuration, allowing injected collaborators."""

        self._config = config or MergeWorkerConfig()
        self._config.validate()
        tool_runner = runner or SubprocessToolRunner()
        ffmpeg_bin = resolve_media_tool("ffmpeg", self._config.ffmpeg_path)
        ffprobe_bin = resolve_media_tool("ffprobe", self._config.ffprobe_path)

        self._prober = MediaProber(tool_runner, ffprobe_bin)
        self._gap_synthesizer = GapSynthesizer(tool_runner, ffmpeg_bin)
        self._stripper = MetadataStripper(tool_runner, ffmpeg_bin)
        self._concatenator = ChapterConcatenator(tool_runner, ffmpeg_bin)
        self._injector = ChapterMarkerInjector(tool_runner, ffmpeg_bin)
        self._downloader = downloader or ChapterDownloader(
            timeout_seconds=self._config.download_timeout_seconds
        )
        self._publisher = publisher or ArtifactPublisher(
            S3ObjectStore(self._config.storage),
            self._config.storage.public_base_url,
        )
        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self._state_listener = state_listener

    @property
    def gap_ms(self) -> int:
        """Return the configured inter-chapter gap in milliseconds."""

        return self._config.gap_ms

    @property
    def prober(self) -> MediaProber:
        """Return the media prober used by this pipeline."""

        return self._prober

    def run(self, request: MergeRequest) -> str:
        """Merge, publish, and return the public URL of the finished artifact.

        Raises:
            ValidationError: The request has no chapters.
            ConfigurationError: No publish destination is configured.
            TransportError: A download or the upload failed.
            ToolError: An ffmpeg invocation failed.
        """

        if not request.chapter_audio_urls:
            raise ValidationError("bookId and chapterAudioUrls[] required")
        self._publisher.require_destination()

        self._transition(request, MergeState.CREATED)
        try:
            with Workspace(parent=self._config.workspace_root) as workspace:
                audio_url = self._merge_in_workspace(request, workspace)
        except Exception:
            self._transition(request, MergeState.FAILED)
            raise
        self._transition(request, MergeState.DONE)
        return audio_url

    def _merge_in_workspace(self, request: MergeRequest, workspace: Workspace) -> str:
        """Run every stage in order inside one acquired workspace."""

        part_paths = self._run_stage(
            request,
            "download",
            lambda: self._downloader.download_all(request.chapter_audio_urls, workspace),
        )
        profile = self._run_stage(
            request,
            "probe",
            lambda: self._prober.probe_profile(part_paths[0]),
        )
        gap_path = self._run_stage(
            request,
            "gap",
            lambda: self._synthesize_gap(profile, workspace),
        )
        cleaned_paths = self._run_stage(
            request,
            "clean",
            lambda: self._stripper.strip_all(part_paths),
        )
        merged_path = self._run_stage(
            request,
            "concat",
            lambda: self._concatenator.concatenate(
                chapter_paths=cleaned_paths,
                gap_path=gap_path,
                list_path=workspace.path("list.txt"),
                output_path=workspace.path("out.mp3"),
            ),
        )
        timeline = self._run_stage(
            request,
            "chapters",
            lambda: self._compute_timeline(request, cleaned_paths),
        )
        final_path = self._run_stage(
            request,
            "inject",
            lambda: self._injector.inject(
                audio_path=merged_path,
                timeline=timeline,
                metadata_path=workspace.path("chapters.ffmeta"),
                output_path=workspace.path("out_chapters.mp3"),
            ),
        )
        return self._run_stage(
            request,
            "upload",
            lambda: self._publisher.publish(request.book_id, final_path),
        )

    def _synthesize_gap(self, profile: AudioProfile, workspace: Workspace) -> Path:
        """Encode the inter-chapter gap matching the reference chapter profile."""

        return self._gap_synthesizer.synthesize(
            profile, self._config.gap_ms, workspace.path("gap.mp3")
        )

    def _compute_timeline(
        self, request: MergeRequest, cleaned_paths: list[Path]
    ) -> ChapterTimeline:
        """Probe cleaned chapter durations and lay out chapter markers."""

        durations = [self._prober.probe_duration(path) for path in cleaned_paths]
        titles = resolve_chapter_titles(request.chapter_titles, len(cleaned_paths))
        return build_chapter_timeline(durations, self._config.gap_ms, titles)
