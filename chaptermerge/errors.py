"""Domain exceptions for merge pipeline, service, and CLI diagnostics.

Every error is a `PipelineStageError` so callers can report the failing stage
uniformly. Subclasses add the fields needed by the HTTP and callback layers.
"""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ValidationError(PipelineStageError):
    """Raised when a merge request is missing or has malformed fields."""

    def __init__(self, detail: str, *, hint: str | None = None) -> None:
        super().__init__(stage="validate", detail=detail, hint=hint)


class ConfigurationError(PipelineStageError):
    """Raised when required process configuration is unset or invalid."""

    def __init__(self, detail: str, *, hint: str | None = None) -> None:
        super().__init__(stage="config", detail=detail, hint=hint)


class TransportError(PipelineStageError):
    """Raised when a chapter download or outbound notification fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(stage=stage, detail=detail, hint=hint)
        self.status_code = status_code


class ToolError(PipelineStageError):
    """Raised when an external media tool exits non-zero or cannot be started.

    Attributes:
        tool: Executable name or path that was invoked.
        returncode: Process exit code, `None` when the process never started.
        diagnostics: Captured stderr text of the failed invocation.
    """

    def __init__(
        self,
        *,
        stage: str,
        tool: str,
        detail: str,
        returncode: int | None = None,
        diagnostics: str = "",
        hint: str | None = None,
    ) -> None:
        super().__init__(stage=stage, detail=detail, hint=hint)
        self.tool = tool
        self.returncode = returncode
        self.diagnostics = diagnostics
