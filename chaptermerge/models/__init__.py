"""Typed data models used by the merge pipeline."""

from .datatypes import (
    DEFAULT_AUDIO_PROFILE,
    AudioProfile,
    ChapterMarker,
    ChapterTimeline,
    DeliveryMode,
    MergeRequest,
    MergeResult,
    MergeState,
    ToolOutput,
)

__all__ = [
    "DEFAULT_AUDIO_PROFILE",
    "AudioProfile",
    "ChapterMarker",
    "ChapterTimeline",
    "DeliveryMode",
    "MergeRequest",
    "MergeResult",
    "MergeState",
    "ToolOutput",
]
