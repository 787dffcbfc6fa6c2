"""Publishing merged artifacts to S3-compatible object storage.

Responsibilities:
- Build unique, time-qualified storage keys per work identifier.
- Upload artifact bytes with `boto3` and return the public URL.

Key types:
- `ObjectStore`: upload boundary (`put(key, body, content_type)`).
- `S3ObjectStore`: `boto3`-backed store for S3/R2 endpoints.
- `StorageKeyFactory`: strictly increasing millisecond keys.
- `ArtifactPublisher`: ties key construction, upload, and public URL together.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import threading
import time
from typing import Any, Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import StorageConfig
from ..errors import ConfigurationError, TransportError
from ..parsing import normalize_optional_string

MP3_CONTENT_TYPE = "audio/mpeg"


class ObjectStore(Protocol):
    """Accept a byte payload under a key; return nothing on success."""

    def put(self, key: str, body: bytes, content_type: str) -> None:
        """Store `body` under `key`."""


class S3ObjectStore:
    """Object store backed by a path-style `boto3` S3 client."""

    def __init__(self, storage: StorageConfig, client: Any | None = None) -> None:
        self._storage = storage
        self._client = client
        self._client_lock = threading.Lock()

    def _s3_client(self) -> Any:
        """Create the boto3 client on first use."""

        with self._client_lock:
            if self._client is None:
                self._client = boto3.client(
                    "s3",
                    endpoint_url=self._storage.endpoint_url,
                    region_name=self._storage.region,
                    aws_access_key_id=self._storage.access_key_id,
                    aws_secret_access_key=self._storage.secret_access_key,
                    config=BotoConfig(s3={"addressing_style": "path"}),
                )
            return self._client

    def put(self, key: str, body: bytes, content_type: str) -> None:
        """Upload one object, mapping client failures to `TransportError`."""

        try:
            self._s3_client().put_object(
                Bucket=self._storage.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except ClientError as exc:
            status_code = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            raise TransportError(
                stage="upload",
                detail=f"Upload of `{key}` failed: {exc}",
                status_code=status_code,
            ) from exc
        except BotoCoreError as exc:
            raise TransportError(stage="upload", detail=f"Upload of `{key}` failed: {exc}") from exc


class StorageKeyFactory:
    """Issue `audio/book-<id>-merged-<millis>.mp3` keys that never repeat in-process."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last_millis = 0
        self._lock = threading.Lock()

    def next_key(self, book_id: str) -> str:
        """Return a fresh key; equal clock readings are bumped by one millisecond."""

        with self._lock:
            millis = int(self._clock() * 1000)
            if millis <= self._last_millis:
                millis = self._last_millis + 1
            self._last_millis = millis
        return f"audio/book-{book_id}-merged-{millis}.mp3"


class ArtifactPublisher:
    """Upload a finished artifact and return its public location."""

    def __init__(
        self,
        store: ObjectStore,
        public_base_url: str | None,
        key_factory: StorageKeyFactory | None = None,
    ) -> None:
        self._store = store
        self._public_base_url = normalize_optional_string(public_base_url)
        self._key_factory = key_factory or StorageKeyFactory()

    def require_destination(self) -> str:
        """Return the public base URL or raise when the destination is unset."""

        if self._public_base_url is None:
            raise ConfigurationError(
                "R2_PUBLIC_URL is not set",
                hint="Set `R2_PUBLIC_URL` to the public base URL of the bucket.",
            )
        return self._public_base_url.rstrip("/")

    def publish(self, book_id: str, artifact_path: Path) -> str:
        """Upload `artifact_path` for `book_id` and return its public URL."""

        base_url = self.require_destination()
        key = self._key_factory.next_key(book_id)
        self._store.put(key, artifact_path.read_bytes(), MP3_CONTENT_TYPE)
        return f"{base_url}/{key}"
