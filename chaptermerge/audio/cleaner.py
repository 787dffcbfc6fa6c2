"""Per-chapter metadata stripping.

Each chapter is remuxed with all metadata dropped and a fresh Xing header,
without touching the audio payload. No chapter-level ID3 frame may survive into
the concatenated stream.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .tooling import ToolRunner


def cleaned_path_for(source_path: Path) -> Path:
    """Return the cleaned-copy path next to `source_path` (`part_1.mp3` -> `part_1.clean.mp3`)."""

    return source_path.with_name(f"{source_path.stem}.clean.mp3")


class MetadataStripper:
    """Remove tags from chapter files by stream copy."""

    def __init__(self, runner: ToolRunner, ffmpeg_bin: str = "ffmpeg") -> None:
        self._runner = runner
        self._ffmpeg_bin = ffmpeg_bin

    def strip(self, source_path: Path, output_path: Path) -> Path:
        """Write a tag-free, stream-copied copy of `source_path`."""

        command = [
            self._ffmpeg_bin,
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(source_path),
            "-vn",
            "-map_metadata",
            "-1",
            "-c:a",
            "copy",
            "-write_xing",
            "1",
            str(output_path),
        ]
        self._runner.run(command, stage="clean")
        return output_path

    def strip_all(self, source_paths: Sequence[Path]) -> list[Path]:
        """Clean every chapter in order; the first failure aborts the batch."""

        return [self.strip(path, cleaned_path_for(path)) for path in source_paths]
