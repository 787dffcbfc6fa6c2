"""I/O boundaries: workspace files, chapter downloads, and artifact publishing."""

from .downloader import ChapterDownloader
from .publisher import ArtifactPublisher, S3ObjectStore, StorageKeyFactory
from .storage import Workspace

__all__ = [
    "ArtifactPublisher",
    "ChapterDownloader",
    "S3ObjectStore",
    "StorageKeyFactory",
    "Workspace",
]
