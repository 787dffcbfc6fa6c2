"""Media tool executable resolution helpers.

Responsibilities:
- Resolve `ffmpeg`/`ffprobe` paths once at startup.
- Honor explicit configuration first, then bundled binaries, then `PATH`.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import sys

from .parsing import normalize_optional_string


def resolve_media_tool(command_name: str, configured_path: str | None = None) -> str:
    """Resolve one media tool executable.

    Resolution order:
    1. Explicitly configured path (`FFMPEG_PATH` / `FFPROBE_PATH`).
    2. Bundled app directories (`./bin/<tool>` then `./<tool>` from app root).
    3. System `PATH`.
    4. Raw command name, so a missing binary surfaces as a tool error at run time.
    """

    explicit = normalize_optional_string(configured_path)
    if explicit is not None:
        return explicit

    normalized = command_name.strip()
    if not normalized:
        return command_name

    for candidate in _bundled_candidates(normalized):
        if candidate.is_file():
            return str(candidate)

    resolved_path = shutil.which(normalized)
    if resolved_path is not None:
        return resolved_path

    return normalized


def _bundled_candidates(command_name: str) -> list[Path]:
    """Return bundled candidate paths for one executable name."""

    app_root = _app_root()
    candidates: list[Path] = []
    for name in _candidate_names(command_name):
        candidates.append(app_root / "bin" / name)
        candidates.append(app_root / name)
    return candidates


def _candidate_names(command_name: str) -> tuple[str, ...]:
    """Return command name variants including Windows `.exe` fallback."""

    if command_name.lower().endswith(".exe"):
        return (command_name,)
    return (command_name, f"{command_name}.exe")


def _app_root() -> Path:
    """Resolve runtime application root for frozen and non-frozen execution."""

    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]
