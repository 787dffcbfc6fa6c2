"""Stage telemetry helper methods for the merge pipeline.

Responsibilities:
- Map stage names to pipeline states and report state transitions.
- Provide stage index/total metadata for progress reporting.
- Wrap stage actions with consistent start/complete/failure events.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from ..models.datatypes import MergeRequest, MergeState
from ..telemetry.logger import RunLogger

_StageResult = TypeVar("_StageResult")


class PipelineTelemetryMixin:
    """Provide stage-telemetry helper methods."""

    _STAGE_STATES: dict[str, MergeState] = {
        "download": MergeState.DOWNLOADING,
        "probe": MergeState.PROBING,
        "gap": MergeState.SYNTHESIZING_GAP,
        "clean": MergeState.CLEANING,
        "concat": MergeState.CONCATENATING,
        "chapters": MergeState.COMPUTING_CHAPTERS,
        "inject": MergeState.INJECTING_METADATA,
        "upload": MergeState.UPLOADING,
    }
    _PHASE_SEQUENCE = tuple(_STAGE_STATES)

    _run_logger: RunLogger | None
    _stage_progress_callback: Callable[[str, int, int], None] | None
    _state_listener: Callable[[str, MergeState], None] | None

    def _stage_position(self, stage_name: str) -> tuple[int, int] | None:
        """Return 1-based stage index and total stage count for known stages."""

        try:
            index = self._PHASE_SEQUENCE.index(stage_name) + 1
        except ValueError:
            return None
        return index, len(self._PHASE_SEQUENCE)

    def _transition(self, request: MergeRequest, state: MergeState) -> None:
        """Report one state transition to the listener and structured logger."""

        if self._state_listener is not None:
            self._state_listener(request.book_id, state)
        if self._run_logger is not None:
            self._run_logger.log_state(request.book_id, state.value)

    def _on_stage_start(self, request: MergeRequest, stage_name: str) -> None:
        """Emit start events to the state listener, progress callback, and logger."""

        state = self._STAGE_STATES.get(stage_name)
        if state is not None:
            self._transition(request, state)
        stage_position = self._stage_position(stage_name)
        if stage_position and self._stage_progress_callback is not None:
            self._stage_progress_callback(stage_name, stage_position[0], stage_position[1])
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name, book_id=request.book_id)

    def _on_stage_complete(self, request: MergeRequest, stage_name: str) -> None:
        """Emit stage-complete event to the structured logger."""

        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name, book_id=request.book_id)

    def _on_stage_failure(self, request: MergeRequest, stage_name: str, exc: Exception) -> None:
        """Emit stage-failure event with sanitized exception metadata."""

        if self._run_logger is not None:
            self._run_logger.log_stage_failure(
                stage_name, type(exc).__name__, book_id=request.book_id
            )

    def _run_stage(
        self,
        request: MergeRequest,
        stage_name: str,
        action: Callable[[], _StageResult],
    ) -> _StageResult:
        """Run one named stage and emit start/complete/failure telemetry events."""

        self._on_stage_start(request, stage_name)
        try:
            result = action()
        except Exception as exc:
            self._on_stage_failure(request, stage_name, exc)
            raise
        self._on_stage_complete(request, stage_name)
        return result
