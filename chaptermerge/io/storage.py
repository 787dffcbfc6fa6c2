"""Per-run workspace storage.

Responsibilities:
- Own one temporary directory for every intermediate file of a merge run.
- Guarantee recursive removal on every exit path via the context manager.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import tempfile
from types import TracebackType


class Workspace:
    """Exclusively-owned temporary directory scoped to one merge invocation."""

    def __init__(self, parent: Path | None = None, prefix: str = "merge-") -> None:
        """Remember where to create the directory; nothing is created until entry."""

        self._parent = parent
        self._prefix = prefix
        self._root: Path | None = None

    @property
    def root(self) -> Path:
        """Return the workspace directory, failing when not acquired."""

        if self._root is None:
            raise RuntimeError("Workspace is not acquired.")
        return self._root

    def __enter__(self) -> Workspace:
        if self._parent is not None:
            self._parent.mkdir(parents=True, exist_ok=True)
        self._root = Path(
            tempfile.mkdtemp(
                prefix=self._prefix,
                dir=str(self._parent) if self._parent is not None else None,
            )
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()

    def release(self) -> None:
        """Remove the workspace directory and everything in it."""

        if self._root is None:
            return
        shutil.rmtree(self._root, ignore_errors=True)
        self._root = None

    def path(self, relative_path: Path | str) -> Path:
        """Return an absolute path inside the workspace."""

        return self.root / relative_path

    def save_bytes(self, relative_path: Path | str, data: bytes) -> Path:
        """Save binary content and return final path."""

        path = self.path(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def save_text(self, relative_path: Path | str, content: str) -> Path:
        """Save text content and return final path."""

        path = self.path(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
