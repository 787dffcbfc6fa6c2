"""Unit tests for YAML/environment configuration loader behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from chaptermerge.config import ConfigLoader, MergeWorkerConfig


def test_config_loader_from_env_uses_defaults_for_empty_environment() -> None:
    """An empty environment should yield the documented defaults."""

    config = ConfigLoader.from_env({})

    assert config.gap_ms == 350
    assert config.port == 3000
    assert config.host == "0.0.0.0"
    assert config.storage.bucket == "sellaudiobooks"
    assert config.storage.region == "us-east-1"
    assert config.storage.public_base_url is None
    assert config.auth_token is None
    assert config.workspace_root is None


def test_config_loader_from_env_loads_values_and_normalizes_blanks() -> None:
    """Environment loader should parse known keys and ignore blank values."""

    env = {
        "MERGE_GAP_MS": " 500 ",
        "FFMPEG_PATH": " /opt/ffmpeg/bin/ffmpeg ",
        "FFPROBE_PATH": "   ",
        "R2_ENDPOINT": "https://account.r2.cloudflarestorage.com",
        "R2_ACCESS_KEY_ID": "key-id",
        "R2_SECRET_ACCESS_KEY": "secret",
        "R2_BUCKET": " books ",
        "R2_PUBLIC_URL": "https://cdn.example.com",
        "MERGE_WORKER_TOKEN": "token",
        "PORT": "8080",
        "MERGE_WORKSPACE_ROOT": "/var/tmp/merge",
        "UNRELATED": "ignored",
    }

    config = ConfigLoader.from_env(env)

    assert config.gap_ms == 500
    assert config.ffmpeg_path == "/opt/ffmpeg/bin/ffmpeg"
    assert config.ffprobe_path is None
    assert config.storage.endpoint_url == "https://account.r2.cloudflarestorage.com"
    assert config.storage.access_key_id == "key-id"
    assert config.storage.secret_access_key == "secret"
    assert config.storage.bucket == "books"
    assert config.storage.public_base_url == "https://cdn.example.com"
    assert config.auth_token == "token"
    assert config.port == 8080
    assert config.workspace_root == Path("/var/tmp/merge")


@pytest.mark.parametrize("raw_gap", ["abc", "0", "-10"])
def test_config_loader_from_env_rejects_invalid_gap(raw_gap: str) -> None:
    """Gap duration must be a positive integer."""

    with pytest.raises(ValueError, match="`gap_ms` must be a positive integer"):
        ConfigLoader.from_env({"MERGE_GAP_MS": raw_gap})


def test_config_loader_from_yaml_accepts_nested_storage_mapping(tmp_path: Path) -> None:
    """YAML loader should accept storage keys nested under `storage`."""

    config_path = tmp_path / "merge.yml"
    config_path.write_text(
        """
gap_ms: 750
api_key: " yaml-key "
storage:
  bucket: audiobooks
  public_base_url: https://cdn.example.com/books
""".strip(),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.gap_ms == 750
    assert config.api_key == "yaml-key"
    assert config.storage.bucket == "audiobooks"
    assert config.storage.public_base_url == "https://cdn.example.com/books"


def test_config_loader_from_yaml_rejects_unknown_keys(tmp_path: Path) -> None:
    """YAML loader should fail clearly on unsupported fields."""

    config_path = tmp_path / "unknown.yml"
    config_path.write_text("gap_ms: 100\nunknown_field: x\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"unsupported key\(s\): unknown_field"):
        ConfigLoader.from_yaml(config_path)


def test_config_loader_from_yaml_rejects_non_mapping_root(tmp_path: Path) -> None:
    """A YAML list root is not a valid configuration document."""

    config_path = tmp_path / "list.yml"
    config_path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="top-level mapping"):
        ConfigLoader.from_yaml(config_path)


def test_with_overrides_skips_none_and_validates() -> None:
    """Explicit overrides should apply only non-`None` values and stay validated."""

    base = MergeWorkerConfig()

    assert base.with_overrides(gap_ms=None).gap_ms == 350
    assert base.with_overrides(gap_ms=1200).gap_ms == 1200
    with pytest.raises(ValueError, match="`port` must be a positive integer"):
        base.with_overrides(port=0)
