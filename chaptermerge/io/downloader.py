"""Chapter audio download.

Responsibilities:
- Fetch chapter URLs sequentially, in request order, into the workspace.
- Map any non-success response or transport failure to `TransportError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import requests

from ..errors import TransportError
from .storage import Workspace


class ChapterDownloader:
    """Download chapter files with `requests`. No retries."""

    _MAX_MESSAGE_CHARS = 180

    def __init__(self, timeout_seconds: float = 120.0) -> None:
        self.timeout_seconds = timeout_seconds

    def download_all(self, urls: Sequence[str], workspace: Workspace) -> list[Path]:
        """Download every URL to `part_<n>.mp3`; the first failure aborts."""

        return [
            self.download(url, workspace, f"part_{position}.mp3")
            for position, url in enumerate(urls, start=1)
        ]

    def download(self, url: str, workspace: Workspace, filename: str) -> Path:
        """Download one URL into the workspace and return the written path."""

        try:
            response = requests.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
            payload = bytes(response.content)
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise TransportError(
                stage="download",
                detail=f"Fetch failed {status_code}",
                status_code=status_code,
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(
                stage="download",
                detail=f"Fetch failed: {self._short_message(str(exc))}",
            ) from exc
        return workspace.save_bytes(filename, payload)

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap transport error text."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_MESSAGE_CHARS - 1]}..."
