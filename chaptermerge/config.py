"""Configuration model and loaders for the merge worker.

Responsibilities:
- Define process-wide settings as a typed dataclass.
- Provide loader entry points for environment- and YAML-based configuration.
- Keep configuration immutable after startup; the pipeline never re-reads env.

Key types:
- `MergeWorkerConfig`: normalized settings for the whole process.
- `StorageConfig`: S3-compatible publish destination settings.
- `ConfigLoader`: static construction helpers for `MergeWorkerConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string, parse_positive_int


DEFAULT_GAP_MS = 350
_DEFAULT_BUCKET = "sellaudiobooks"
_DEFAULT_REGION = "us-east-1"
_DEFAULT_HOST = "0.0.0.0"
_DEFAULT_PORT = 3000
_DEFAULT_DOWNLOAD_TIMEOUT_SECONDS = 120
_DEFAULT_CALLBACK_TIMEOUT_SECONDS = 30


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Publish destination for merged artifacts.

    Attributes:
        bucket: Target bucket name.
        endpoint_url: S3-compatible endpoint (for example a Cloudflare R2 account URL).
        access_key_id: Static access key id, `None` to use the default boto3 chain.
        secret_access_key: Static secret key, `None` to use the default boto3 chain.
        region: Signing region.
        public_base_url: Public URL prefix under which uploaded keys are served.
    """

    bucket: str = _DEFAULT_BUCKET
    endpoint_url: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    region: str = _DEFAULT_REGION
    public_base_url: str | None = None


@dataclass(frozen=True, slots=True)
class MergeWorkerConfig:
    """Process-wide settings, read once at startup.

    Attributes:
        gap_ms: Silence inserted between adjacent chapters, in milliseconds.
        ffmpeg_path: Explicit ffmpeg executable, `None` to resolve automatically.
        ffprobe_path: Explicit ffprobe executable, `None` to resolve automatically.
        storage: Publish destination settings.
        auth_token: Bearer token required by the HTTP endpoint, when set.
        api_key: `X-API-Key` value required by the HTTP endpoint when no token is set.
        host: HTTP bind address.
        port: HTTP bind port.
        download_timeout_seconds: Per-chapter download timeout.
        callback_timeout_seconds: Outbound notification timeout.
        workspace_root: Parent directory for per-run workspaces, `None` for system temp.
    """

    gap_ms: int = DEFAULT_GAP_MS
    ffmpeg_path: str | None = None
    ffprobe_path: str | None = None
    storage: StorageConfig = field(default_factory=StorageConfig)
    auth_token: str | None = None
    api_key: str | None = None
    host: str = _DEFAULT_HOST
    port: int = _DEFAULT_PORT
    download_timeout_seconds: int = _DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
    callback_timeout_seconds: int = _DEFAULT_CALLBACK_TIMEOUT_SECONDS
    workspace_root: Path | None = None

    def validate(self) -> None:
        """Validate configuration values before serving requests."""

        for field_name in (
            "gap_ms",
            "port",
            "download_timeout_seconds",
            "callback_timeout_seconds",
        ):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"`{field_name}` must be a positive integer.")
        if not self.storage.bucket.strip():
            raise ValueError("`bucket` must be a non-empty string.")

    def with_overrides(self, **changes: Any) -> MergeWorkerConfig:
        """Return a validated copy with explicit overrides applied, skipping `None` values."""

        applied = {key: value for key, value in changes.items() if value is not None}
        updated = replace(self, **applied)
        updated.validate()
        return updated


class ConfigLoader:
    """Factory helpers for creating validated `MergeWorkerConfig` instances."""

    _ENV_KEYS: Mapping[str, str] = {
        "gap_ms": "MERGE_GAP_MS",
        "ffmpeg_path": "FFMPEG_PATH",
        "ffprobe_path": "FFPROBE_PATH",
        "endpoint_url": "R2_ENDPOINT",
        "access_key_id": "R2_ACCESS_KEY_ID",
        "secret_access_key": "R2_SECRET_ACCESS_KEY",
        "bucket": "R2_BUCKET",
        "region": "R2_REGION",
        "public_base_url": "R2_PUBLIC_URL",
        "auth_token": "MERGE_WORKER_TOKEN",
        "api_key": "MERGE_WORKER_API_KEY",
        "host": "MERGE_WORKER_HOST",
        "port": "PORT",
        "download_timeout_seconds": "MERGE_DOWNLOAD_TIMEOUT_SECONDS",
        "callback_timeout_seconds": "MERGE_CALLBACK_TIMEOUT_SECONDS",
        "workspace_root": "MERGE_WORKSPACE_ROOT",
    }
    _INT_KEYS = frozenset(
        {"gap_ms", "port", "download_timeout_seconds", "callback_timeout_seconds"}
    )
    _STORAGE_KEYS = frozenset(
        {
            "bucket",
            "endpoint_url",
            "access_key_id",
            "secret_access_key",
            "region",
            "public_base_url",
        }
    )

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> MergeWorkerConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        values: dict[str, Any] = {}
        for key, env_key in ConfigLoader._ENV_KEYS.items():
            raw_value = normalize_optional_string(env_map.get(env_key))
            if raw_value is None:
                continue
            values[key] = raw_value
        return ConfigLoader._build_config(values, source_label="Environment")

    @staticmethod
    def from_yaml(path: Path) -> MergeWorkerConfig:
        """Create a validated config from a YAML file.

        Storage keys may be given flat or nested under a `storage` mapping.
        """

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        flattened: dict[str, Any] = {}
        for key, value in payload.items():
            if key == "storage":
                if not isinstance(value, Mapping):
                    raise ValueError(f"YAML config `{path}` field `storage` must be a mapping.")
                flattened.update(value)
            else:
                flattened[key] = value

        unknown = sorted(set(flattened).difference(ConfigLoader._ENV_KEYS))
        if unknown:
            raise ValueError(
                f"YAML config `{path}` includes unsupported key(s): {', '.join(unknown)}."
            )

        values = {
            key: value
            for key, value in flattened.items()
            if normalize_optional_string(value) is not None
        }
        return ConfigLoader._build_config(values, source_label=f"YAML `{path}`")

    @staticmethod
    def _build_config(values: Mapping[str, Any], source_label: str) -> MergeWorkerConfig:
        """Build a validated config from a flat mapping of raw values."""

        top_level: dict[str, Any] = {}
        storage: dict[str, Any] = {}
        for key, raw_value in values.items():
            if key in ConfigLoader._INT_KEYS:
                try:
                    value: Any = parse_positive_int(raw_value, key)
                except ValueError as exc:
                    raise ValueError(f"{source_label}: {exc}") from exc
            elif key == "workspace_root":
                value = Path(str(raw_value).strip())
            else:
                value = normalize_optional_string(raw_value)

            if key in ConfigLoader._STORAGE_KEYS:
                storage[key] = value
            else:
                top_level[key] = value

        config = MergeWorkerConfig(storage=StorageConfig(**storage), **top_level)
        config.validate()
        return config
