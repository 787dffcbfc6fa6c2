"""Core datatypes shared across chaptermerge modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Provide explicit typing for request, timeline, and result payloads.

Key types:
- `MergeRequest`, `DeliveryMode`, `AudioProfile`, `ChapterMarker`,
  `ChapterTimeline`, `MergeResult`, `ToolOutput`, and `MergeState`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DeliveryMode(str, Enum):
    """How a finished merge is handed back to the caller."""

    SYNC = "sync"
    CALLBACK = "callback"


class MergeState(str, Enum):
    """Lifecycle states of one merge pipeline run."""

    CREATED = "created"
    DOWNLOADING = "downloading"
    PROBING = "probing"
    SYNTHESIZING_GAP = "synthesizing_gap"
    CLEANING = "cleaning"
    CONCATENATING = "concatenating"
    COMPUTING_CHAPTERS = "computing_chapters"
    INJECTING_METADATA = "injecting_metadata"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Return whether no further transition may follow this state."""

        return self in (MergeState.DONE, MergeState.FAILED)


@dataclass(frozen=True, slots=True)
class MergeRequest:
    """One merge job as accepted from the request boundary.

    Attributes:
        book_id: Work identifier used for storage keys and callback correlation.
        chapter_audio_urls: Ordered, non-empty chapter audio locations.
        chapter_titles: Optional ordered titles; may be shorter or longer than the URL list.
        callback_url: Optional result-delivery target for callback mode.
        mode: Resolved delivery mode.
    """

    book_id: str
    chapter_audio_urls: tuple[str, ...]
    chapter_titles: tuple[str | None, ...] = ()
    callback_url: str | None = None
    mode: DeliveryMode = DeliveryMode.SYNC

    @property
    def chapter_count(self) -> int:
        """Return the number of chapters requested."""

        return len(self.chapter_audio_urls)


@dataclass(frozen=True, slots=True)
class AudioProfile:
    """Encoding parameters that must match across stream-copied segments.

    Attributes:
        sample_rate: Sample rate in Hz.
        channel_count: Number of audio channels.
        bitrate_kbps: Bitrate in kbit/s, clamped to [32, 320] by the prober.
    """

    sample_rate: int
    channel_count: int
    bitrate_kbps: int

    @property
    def channel_layout(self) -> str:
        """Return the lavfi channel layout name; only mono is special-cased."""

        return "mono" if self.channel_count == 1 else "stereo"


DEFAULT_AUDIO_PROFILE = AudioProfile(sample_rate=44100, channel_count=2, bitrate_kbps=192)


@dataclass(frozen=True, slots=True)
class ChapterMarker:
    """One chapter marker in millisecond timebase."""

    start_ms: int
    end_ms: int
    title: str

    @property
    def duration_ms(self) -> int:
        """Return marker length in milliseconds."""

        return self.end_ms - self.start_ms


@dataclass(frozen=True, slots=True)
class ChapterTimeline:
    """Ordered chapter markers separated by a fixed gap.

    Attributes:
        markers: Chapter markers in audio order.
        gap_ms: Silence inserted between adjacent chapters.
    """

    markers: tuple[ChapterMarker, ...]
    gap_ms: int

    def __len__(self) -> int:
        return len(self.markers)

    def as_tuples(self) -> list[tuple[int, int, str]]:
        """Return `(start_ms, end_ms, title)` triples in order."""

        return [(marker.start_ms, marker.end_ms, marker.title) for marker in self.markers]


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Outcome of one merge, correlated by work identifier.

    Exactly one of `audio_url` and `error` is set.
    """

    book_id: str
    audio_url: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether the merge produced a published artifact."""

        return self.error is None and self.audio_url is not None

    def as_payload(self) -> dict[str, str]:
        """Serialize to the outbound notification payload."""

        if self.succeeded:
            return {"bookId": self.book_id, "audioUrl": str(self.audio_url)}
        return {"bookId": self.book_id, "error": self.error or "Merge failed"}


@dataclass(frozen=True, slots=True)
class ToolOutput:
    """Captured output of one external tool invocation."""

    stdout: str
    stderr: str
