"""Result delivery for finished merges.

One `deliver(result)` capability with two implementations, chosen once when a
job is accepted: reply in place (sync) or fire-and-forget notification
(callback).
"""

from __future__ import annotations

from typing import Protocol

import requests

from .models.datatypes import MergeResult
from .telemetry.logger import RunLogger


class ResultDelivery(Protocol):
    """Hand a finished `MergeResult` to whoever is waiting for it."""

    def deliver(self, result: MergeResult) -> None:
        """Deliver one result."""


class SyncDelivery:
    """Keep the result for the blocked caller to read."""

    def __init__(self) -> None:
        self.result: MergeResult | None = None

    def deliver(self, result: MergeResult) -> None:
        self.result = result


class CallbackDelivery:
    """POST the result as JSON to a callback URL; failures are logged, never raised."""

    def __init__(
        self,
        callback_url: str,
        *,
        timeout_seconds: float = 30.0,
        run_logger: RunLogger | None = None,
    ) -> None:
        self.callback_url = callback_url
        self.timeout_seconds = timeout_seconds
        self._run_logger = run_logger

    def deliver(self, result: MergeResult) -> None:
        """Send one notification; no retry on failure."""

        try:
            response = requests.post(
                self.callback_url,
                json=result.as_payload(),
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            if self._run_logger is not None:
                self._run_logger.log_delivery_failure(result.book_id, type(exc).__name__)
