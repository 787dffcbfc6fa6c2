"""HTTP adapter exposing the merge service.

Routes:
- `POST /merge`: accept a merge job (sync reply or queued callback).
- `GET /health`: liveness probe.
"""

from __future__ import annotations

import hmac
from typing import Optional

from flask import Flask, jsonify, request
from flask.typing import ResponseReturnValue

from .config import MergeWorkerConfig
from .errors import ValidationError
from .pipeline import MergePipeline
from .service import MergeService, parse_request
from .telemetry.logger import RunLogger

_MAX_REQUEST_BYTES = 2 * 1024 * 1024


def _is_authorized(config: MergeWorkerConfig) -> bool:
    """Check Bearer token first, then `X-API-Key`; open when neither is configured."""

    if config.auth_token:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return False
        return hmac.compare_digest(header[len("Bearer "):], config.auth_token)
    if config.api_key:
        return hmac.compare_digest(request.headers.get("X-API-Key", ""), config.api_key)
    return True


def create_app(
    config: Optional[MergeWorkerConfig] = None,
    service: Optional[MergeService] = None,
) -> Flask:
    """Build the Flask app around one shared `MergeService`."""

    resolved_config = config or MergeWorkerConfig()
    if service is None:
        run_logger = RunLogger()
        service = MergeService(
            MergePipeline(resolved_config, run_logger=run_logger),
            run_logger=run_logger,
            callback_timeout_seconds=resolved_config.callback_timeout_seconds,
        )
    merge_service = service

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = _MAX_REQUEST_BYTES

    @app.post("/merge")
    def merge() -> ResponseReturnValue:
        if not _is_authorized(resolved_config):
            return jsonify({"error": "Unauthorized"}), 401

        payload = request.get_json(silent=True) or {}
        try:
            merge_request = parse_request(payload)
        except ValidationError as exc:
            return jsonify({"error": exc.detail}), 400

        result = merge_service.handle(merge_request)
        if result is None:
            return jsonify({"queued": True})
        if not result.succeeded:
            return jsonify({"error": result.error}), 500
        return jsonify({"audioUrl": result.audio_url})

    @app.get("/health")
    def health() -> ResponseReturnValue:
        return jsonify({"ok": True})

    return app
