"""Merge job acceptance and execution modes.

Responsibilities:
- Validate raw request payloads into `MergeRequest` records.
- Select sync or callback delivery once per job.
- Run the pipeline and turn its outcome into a `MergeResult`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import threading
from typing import Any

from .delivery import CallbackDelivery, ResultDelivery, SyncDelivery
from .errors import PipelineStageError, ValidationError
from .models.datatypes import DeliveryMode, MergeRequest, MergeResult
from .parsing import normalize_optional_string
from .pipeline import MergePipeline
from .telemetry.logger import RunLogger

_REQUIRED_FIELDS_MESSAGE = "bookId and chapterAudioUrls[] required"


def _spawn_daemon_thread(action: Callable[[], None]) -> None:
    """Run `action` on a background daemon thread."""

    threading.Thread(target=action, name="merge-callback", daemon=True).start()


def error_message(exc: BaseException) -> str:
    """Return the caller-facing description of a pipeline failure."""

    if isinstance(exc, PipelineStageError):
        return exc.detail
    return str(exc) or type(exc).__name__


def parse_request(payload: Mapping[str, Any] | None) -> MergeRequest:
    """Validate a decoded JSON payload and build a `MergeRequest`.

    Raises:
        ValidationError: When `bookId` or `chapterAudioUrls` is missing or
            malformed, or `chapterTitles` is not a list.
    """

    if not isinstance(payload, Mapping):
        raise ValidationError(_REQUIRED_FIELDS_MESSAGE)

    book_id = normalize_optional_string(payload.get("bookId"))
    raw_urls = payload.get("chapterAudioUrls")
    if book_id is None or not isinstance(raw_urls, list) or not raw_urls:
        raise ValidationError(_REQUIRED_FIELDS_MESSAGE)

    urls: list[str] = []
    for position, raw_url in enumerate(raw_urls, start=1):
        url = normalize_optional_string(raw_url) if isinstance(raw_url, str) else None
        if url is None:
            raise ValidationError(f"chapterAudioUrls[{position - 1}] must be a non-empty string")
        urls.append(url)

    raw_titles = payload.get("chapterTitles")
    if raw_titles is None:
        titles: tuple[str | None, ...] = ()
    elif isinstance(raw_titles, list):
        titles = tuple(None if title is None else str(title) for title in raw_titles)
    else:
        raise ValidationError("chapterTitles must be a list when provided")

    callback_url = normalize_optional_string(payload.get("callbackUrl"))
    explicit_mode = normalize_optional_string(payload.get("mode"))
    if explicit_mode == DeliveryMode.SYNC.value or callback_url is None:
        mode = DeliveryMode.SYNC
    else:
        mode = DeliveryMode.CALLBACK

    return MergeRequest(
        book_id=book_id,
        chapter_audio_urls=tuple(urls),
        chapter_titles=titles,
        callback_url=callback_url,
        mode=mode,
    )


class MergeService:
    """Accept merge jobs and deliver their results in the requested mode."""

    def __init__(
        self,
        pipeline: MergePipeline,
        *,
        run_logger: RunLogger | None = None,
        callback_timeout_seconds: float = 30.0,
        spawn: Callable[[Callable[[], None]], None] | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._run_logger = run_logger
        self._callback_timeout_seconds = callback_timeout_seconds
        self._spawn = spawn or _spawn_daemon_thread

    def handle(self, request: MergeRequest) -> MergeResult | None:
        """Run a sync job to completion, or schedule a callback job.

        Returns:
            The result for sync jobs; `None` once a callback job is accepted.
        """

        if self._run_logger is not None:
            self._run_logger.log_request_accepted(
                request.book_id, request.mode.value, request.chapter_count
            )

        if request.mode is DeliveryMode.SYNC or request.callback_url is None:
            sync_delivery = SyncDelivery()
            self._execute(request, sync_delivery)
            return sync_delivery.result

        callback_delivery = CallbackDelivery(
            request.callback_url,
            timeout_seconds=self._callback_timeout_seconds,
            run_logger=self._run_logger,
        )
        self._spawn(lambda: self._execute(request, callback_delivery))
        return None

    def _execute(self, request: MergeRequest, delivery: ResultDelivery) -> None:
        """Run the pipeline once and deliver its outcome."""

        try:
            audio_url = self._pipeline.run(request)
        except Exception as exc:
            result = MergeResult(book_id=request.book_id, error=error_message(exc))
        else:
            result = MergeResult(book_id=request.book_id, audio_url=audio_url)
        delivery.deliver(result)
