"""Media-tool components of the merge pipeline.

Each component wraps one ffmpeg/ffprobe invocation behind a `ToolRunner`.
"""

from .chapters import ChapterMarkerInjector, build_chapter_timeline, render_ffmetadata
from .cleaner import MetadataStripper
from .gap import GapSynthesizer
from .merger import ChapterConcatenator, build_concat_list
from .probe import MediaProber
from .tooling import SubprocessToolRunner, ToolRunner

__all__ = [
    "ChapterConcatenator",
    "ChapterMarkerInjector",
    "GapSynthesizer",
    "MediaProber",
    "MetadataStripper",
    "SubprocessToolRunner",
    "ToolRunner",
    "build_chapter_timeline",
    "build_concat_list",
    "render_ffmetadata",
]
