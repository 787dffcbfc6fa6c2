"""Silent gap synthesis.

The gap is the only segment that is encoded; it must share sample rate,
channel layout, and bitrate with the chapters it sits between, otherwise the
concat demuxer stream-copies incompatible frames.
"""

from __future__ import annotations

from pathlib import Path

from ..models.datatypes import AudioProfile
from .tooling import ToolRunner


class GapSynthesizer:
    """Generate a fixed-duration silent MP3 with lavfi `anullsrc`."""

    def __init__(self, runner: ToolRunner, ffmpeg_bin: str = "ffmpeg") -> None:
        self._runner = runner
        self._ffmpeg_bin = ffmpeg_bin

    def synthesize(self, profile: AudioProfile, gap_ms: int, output_path: Path) -> Path:
        """Encode `gap_ms` of silence matching `profile` into `output_path`.

        Channel counts other than one or two are encoded with the probed count
        but a stereo source layout; this is a known limitation.
        """

        source = (
            f"anullsrc=channel_layout={profile.channel_layout}"
            f":sample_rate={profile.sample_rate}"
        )
        command = [
            self._ffmpeg_bin,
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            "lavfi",
            "-t",
            f"{gap_ms / 1000:.3f}",
            "-i",
            source,
            "-ar",
            str(profile.sample_rate),
            "-ac",
            str(profile.channel_count),
            "-c:a",
            "libmp3lame",
            "-b:a",
            f"{profile.bitrate_kbps}k",
            str(output_path),
        ]
        self._runner.run(command, stage="gap")
        return output_path
