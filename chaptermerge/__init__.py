"""Top-level package for chaptermerge.

This package merges independently produced MP3 chapter files into one
continuous, chaptered audio track and publishes it to object storage. The main
orchestration entry point is `MergePipeline`.
"""

from .pipeline import MergePipeline

__all__ = ["MergePipeline", "__version__"]

__version__ = "0.1.0"
