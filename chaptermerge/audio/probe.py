"""Media inspection via `ffprobe`.

Responsibilities:
- Read sample rate, channel count, and bitrate of the first audio stream.
- Read container duration.
- Fall back to default values when a probe fails or a field is missing.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

from ..errors import ToolError
from ..models.datatypes import DEFAULT_AUDIO_PROFILE, AudioProfile
from ..parsing import parse_positive_number
from .tooling import ToolRunner

MIN_BITRATE_KBPS = 32
MAX_BITRATE_KBPS = 320
_DEFAULT_BITRATE_BPS = 192000


def clamp_bitrate_kbps(bitrate_bps: float) -> int:
    """Convert a bit/s value to kbit/s, clamped to the supported MP3 range."""

    kbps = math.floor(bitrate_bps / 1000 + 0.5)
    return max(MIN_BITRATE_KBPS, min(MAX_BITRATE_KBPS, kbps))


class MediaProber:
    """Probe audio files with one `ffprobe` process per call. No retries."""

    def __init__(self, runner: ToolRunner, ffprobe_bin: str = "ffprobe") -> None:
        self._runner = runner
        self._ffprobe_bin = ffprobe_bin

    def probe_profile(self, path: Path) -> AudioProfile:
        """Return the audio profile of `path`, or the default profile on any failure."""

        command = [
            self._ffprobe_bin,
            "-v",
            "error",
            "-of",
            "json",
            "-show_entries",
            "stream=sample_rate,channels,bit_rate",
            "-select_streams",
            "a:0",
            str(path),
        ]
        try:
            payload = self._run_json(command)
        except (ToolError, ValueError):
            return DEFAULT_AUDIO_PROFILE

        streams = payload.get("streams")
        stream: dict[str, Any] = {}
        if isinstance(streams, list) and streams and isinstance(streams[0], dict):
            stream = streams[0]

        sample_rate = parse_positive_number(stream.get("sample_rate"))
        channels = parse_positive_number(stream.get("channels"))
        bitrate = parse_positive_number(stream.get("bit_rate"))
        return AudioProfile(
            sample_rate=int(sample_rate) if sample_rate else DEFAULT_AUDIO_PROFILE.sample_rate,
            channel_count=int(channels) if channels else DEFAULT_AUDIO_PROFILE.channel_count,
            bitrate_kbps=clamp_bitrate_kbps(bitrate or _DEFAULT_BITRATE_BPS),
        )

    def probe_duration(self, path: Path) -> float:
        """Return the duration of `path` in seconds, `0.0` when unknown."""

        command = [
            self._ffprobe_bin,
            "-v",
            "error",
            "-of",
            "json",
            "-show_entries",
            "format=duration",
            str(path),
        ]
        try:
            payload = self._run_json(command)
        except (ToolError, ValueError):
            return 0.0

        container = payload.get("format")
        if not isinstance(container, dict):
            return 0.0
        return parse_positive_number(container.get("duration")) or 0.0

    def _run_json(self, command: list[str]) -> dict[str, Any]:
        """Run ffprobe and decode its JSON output into a mapping."""

        output = self._runner.run(command, stage="probe")
        payload = json.loads(output.stdout or "{}")
        if not isinstance(payload, dict):
            raise ValueError("ffprobe output is not a JSON object.")
        return payload
