"""Chapter marker computation and injection.

Responsibilities:
- Resolve chapter titles with positional defaults.
- Compute a millisecond `ChapterTimeline` from per-chapter durations and the gap.
- Render an FFMETADATA1 document and merge its chapter table into the
  concatenated stream without re-encoding.
"""

from __future__ import annotations

from collections.abc import Sequence
import math
from pathlib import Path

from ..models.datatypes import ChapterMarker, ChapterTimeline
from ..parsing import normalize_optional_string
from .tooling import ToolRunner


def resolve_chapter_titles(titles: Sequence[object | None], count: int) -> list[str]:
    """Return `count` titles, defaulting blank or missing entries to `Chapter N`."""

    resolved: list[str] = []
    for index in range(count):
        supplied = normalize_optional_string(titles[index]) if index < len(titles) else None
        resolved.append(supplied or f"Chapter {index + 1}")
    return resolved


def seconds_to_ms(seconds: float) -> int:
    """Convert seconds to whole milliseconds, rounding halves up."""

    if not math.isfinite(seconds) or seconds <= 0:
        return 0
    return int(math.floor(seconds * 1000 + 0.5))


def build_chapter_timeline(
    durations_seconds: Sequence[float],
    gap_ms: int,
    titles: Sequence[str],
) -> ChapterTimeline:
    """Lay chapters end to end with `gap_ms` of silence between neighbours.

    Arithmetic is done in integer milliseconds, so `end == start + duration`
    and `next_start == end + gap_ms` hold exactly. A zero duration (unknown
    length) yields an empty marker; the next chapter still advances by the gap.
    """

    markers: list[ChapterMarker] = []
    cursor_ms = 0
    for index, duration_seconds in enumerate(durations_seconds):
        start_ms = cursor_ms
        end_ms = start_ms + seconds_to_ms(duration_seconds)
        markers.append(ChapterMarker(start_ms=start_ms, end_ms=end_ms, title=titles[index]))
        cursor_ms = end_ms + gap_ms
    return ChapterTimeline(markers=tuple(markers), gap_ms=gap_ms)


def escape_ffmetadata_value(value: str) -> str:
    """Escape characters with special meaning in FFMETADATA values."""

    escaped = str(value).replace("\\", "\\\\").replace("\n", "\\n")
    escaped = escaped.replace("=", "\\=").replace(";", "\\;").replace("#", "\\#")
    return escaped


def render_ffmetadata(timeline: ChapterTimeline) -> str:
    """Render one `[CHAPTER]` block per marker in a 1/1000 timebase."""

    lines = [";FFMETADATA1"]
    for marker in timeline.markers:
        lines.append("[CHAPTER]")
        lines.append("TIMEBASE=1/1000")
        lines.append(f"START={marker.start_ms}")
        lines.append(f"END={marker.end_ms}")
        lines.append(f"title={escape_ffmetadata_value(marker.title)}")
    return "\n".join(lines) + "\n"


class ChapterMarkerInjector:
    """Merge a chapter table into an MP3 container by stream copy."""

    def __init__(self, runner: ToolRunner, ffmpeg_bin: str = "ffmpeg") -> None:
        self._runner = runner
        self._ffmpeg_bin = ffmpeg_bin

    def inject(
        self,
        *,
        audio_path: Path,
        timeline: ChapterTimeline,
        metadata_path: Path,
        output_path: Path,
    ) -> Path:
        """Write the FFMETADATA document and remux `audio_path` with its chapters."""

        metadata_path.write_text(render_ffmetadata(timeline), encoding="utf-8")
        command = [
            self._ffmpeg_bin,
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(audio_path),
            "-i",
            str(metadata_path),
            "-map_metadata",
            "1",
            "-map_chapters",
            "1",
            "-codec",
            "copy",
            "-write_id3v2",
            "1",
            "-id3v2_version",
            "3",
            str(output_path),
        ]
        self._runner.run(command, stage="inject")
        return output_path
