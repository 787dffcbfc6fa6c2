"""Stream-copy concatenation of chapters and gaps.

Responsibilities:
- Interleave the gap between adjacent chapters, preserving chapter order.
- Render an ffmpeg concat-demuxer list with quote-safe path escaping.
- Join all segments without re-encoding and restamp the Xing header.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .tooling import ToolRunner


def escape_concat_path(path: Path | str) -> str:
    """Escape one file path for the ffmpeg concat list format."""

    return str(path).replace("'", "'\\''")


def interleave_with_gap(chapter_paths: Sequence[Path], gap_path: Path) -> list[Path]:
    """Insert `gap_path` between every adjacent pair of chapters.

    No gap is placed before the first or after the last chapter, so a single
    chapter yields a one-element list.
    """

    segments: list[Path] = []
    for index, chapter_path in enumerate(chapter_paths):
        if index > 0:
            segments.append(gap_path)
        segments.append(chapter_path)
    return segments


def build_concat_list(segment_paths: Sequence[Path]) -> str:
    """Render concat-demuxer list content for ordered segment paths."""

    return "\n".join(f"file '{escape_concat_path(path)}'" for path in segment_paths) + "\n"


class ChapterConcatenator:
    """Join cleaned chapters and gaps into one continuous MP3."""

    def __init__(self, runner: ToolRunner, ffmpeg_bin: str = "ffmpeg") -> None:
        self._runner = runner
        self._ffmpeg_bin = ffmpeg_bin

    def concatenate(
        self,
        *,
        chapter_paths: Sequence[Path],
        gap_path: Path,
        list_path: Path,
        output_path: Path,
    ) -> Path:
        """Write the concat list to `list_path` and stream-copy all segments into `output_path`."""

        segments = interleave_with_gap(chapter_paths, gap_path)
        list_path.write_text(build_concat_list(segments), encoding="utf-8")

        command = [
            self._ffmpeg_bin,
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            "concat",
            "-safe",
            "0",
            "-i",
            str(list_path),
            "-c",
            "copy",
            "-write_xing",
            "1",
            str(output_path),
        ]
        self._runner.run(command, stage="concat")
        return output_path
