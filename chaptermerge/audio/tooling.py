"""External media tool invocation.

Responsibilities:
- Spawn one external process, wait for it, and capture stdout/stderr.
- Map a missing binary or a non-zero exit to a stage-aware `ToolError`.

Key types:
- `ToolRunner`: narrow protocol used by every media component.
- `SubprocessToolRunner`: `subprocess`-backed implementation.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
import subprocess
from typing import Protocol

from ..errors import ToolError
from ..models.datatypes import ToolOutput
from ..parsing import normalize_optional_string


class ToolRunner(Protocol):
    """Run one external tool command and return its captured output."""

    def run(self, command: Sequence[str], *, stage: str) -> ToolOutput:
        """Run `command` for `stage`, raising `ToolError` on failure."""


class SubprocessToolRunner:
    """Run media tools as blocking subprocesses with captured text output."""

    def run(self, command: Sequence[str], *, stage: str) -> ToolOutput:
        """Run one command and return captured output or raise `ToolError`."""

        arguments = [str(item) for item in command]
        tool = arguments[0]
        tool_name = Path(tool).name
        try:
            completed = subprocess.run(
                arguments,
                check=True,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise ToolError(
                stage=stage,
                tool=tool,
                detail=f"Media tool `{tool_name}` is not available.",
                hint="Install ffmpeg or set `FFMPEG_PATH` / `FFPROBE_PATH`.",
            ) from exc
        except subprocess.CalledProcessError as exc:
            stderr = normalize_optional_string(exc.stderr) or "no stderr output"
            raise ToolError(
                stage=stage,
                tool=tool,
                detail=f"{tool_name} exited {exc.returncode}: {stderr}",
                returncode=exc.returncode,
                diagnostics=stderr,
            ) from exc
        return ToolOutput(stdout=completed.stdout or "", stderr=completed.stderr or "")
