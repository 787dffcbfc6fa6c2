"""Shared pytest fixtures for the full chaptermerge test suite."""

from __future__ import annotations

from collections.abc import Callable, Sequence
import json
from pathlib import Path

import pytest
import requests

from chaptermerge.config import MergeWorkerConfig, StorageConfig
from chaptermerge.errors import ToolError
from chaptermerge.io.publisher import ArtifactPublisher, StorageKeyFactory
from chaptermerge.models.datatypes import MergeState, ToolOutput
from chaptermerge.pipeline import MergePipeline


class FakeToolRunner:
    """Record media-tool commands and emulate ffmpeg/ffprobe results."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str]]] = []
        self.stream: dict[str, object] = {
            "sample_rate": "44100",
            "channels": 2,
            "bit_rate": "128000",
        }
        self.durations: dict[str, float] = {}
        self.fail_stage: str | None = None
        self.concat_lists: list[str] = []
        self.metadata_documents: list[str] = []

    def run(self, command: Sequence[str], *, stage: str) -> ToolOutput:
        arguments = [str(item) for item in command]
        self.calls.append((stage, arguments))
        if stage == self.fail_stage:
            raise ToolError(
                stage=stage,
                tool=arguments[0],
                detail=f"{Path(arguments[0]).name} exited 1: simulated failure",
                returncode=1,
                diagnostics="simulated failure",
            )

        target = Path(arguments[-1])
        if stage == "probe":
            if "format=duration" in arguments:
                duration = self.durations.get(target.name, 0)
                return ToolOutput(stdout=json.dumps({"format": {"duration": str(duration)}}), stderr="")
            return ToolOutput(stdout=json.dumps({"streams": [self.stream]}), stderr="")
        if stage == "concat":
            list_path = Path(arguments[arguments.index("-i") + 1])
            self.concat_lists.append(list_path.read_text(encoding="utf-8"))
        if stage == "inject":
            last_input = max(i for i, item in enumerate(arguments) if item == "-i")
            metadata_path = Path(arguments[last_input + 1])
            self.metadata_documents.append(metadata_path.read_text(encoding="utf-8"))

        target.write_bytes(f"{stage}:{target.name}".encode("utf-8"))
        return ToolOutput(stdout="", stderr="")

    def stages(self) -> list[str]:
        """Return the stage name of every recorded call, in order."""

        return [stage for stage, _ in self.calls]

    def commands_for(self, stage: str) -> list[list[str]]:
        """Return recorded commands for one stage."""

        return [arguments for call_stage, arguments in self.calls if call_stage == stage]


class InMemoryObjectStore:
    """Collect uploaded objects instead of sending them anywhere."""

    def __init__(self) -> None:
        self.objects: list[tuple[str, bytes, str]] = []

    def put(self, key: str, body: bytes, content_type: str) -> None:
        self.objects.append((key, body, content_type))


class FakeHTTPResponse:
    """Minimal requests response stand-in."""

    def __init__(self, *, content: bytes = b"", status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code} error", response=self)


class FakeChapterServer:
    """Serve canned chapter bytes keyed by URL through a patched `requests.get`."""

    def __init__(self) -> None:
        self.responses: dict[str, FakeHTTPResponse] = {}
        self.requested: list[str] = []

    def add(self, url: str, content: bytes = b"ID3mp3-bytes", status_code: int = 200) -> str:
        self.responses[url] = FakeHTTPResponse(content=content, status_code=status_code)
        return url

    def get(self, url: str, timeout: float | None = None) -> FakeHTTPResponse:
        _ = timeout
        self.requested.append(url)
        response = self.responses.get(url)
        if response is None:
            raise requests.ConnectionError(f"connection refused: {url}")
        return response


@pytest.fixture
def fake_tool_runner() -> FakeToolRunner:
    """Provide a recording tool runner that never spawns processes."""

    return FakeToolRunner()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    """Provide an in-memory upload target."""

    return InMemoryObjectStore()


@pytest.fixture
def chapter_server(monkeypatch: pytest.MonkeyPatch) -> FakeChapterServer:
    """Patch chapter downloads to read from an in-memory URL table."""

    server = FakeChapterServer()
    monkeypatch.setattr("chaptermerge.io.downloader.requests.get", server.get)
    return server


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Provide the parent directory for per-run workspaces."""

    return tmp_path / "workspaces"


@pytest.fixture
def merge_config(workspace_root: Path) -> MergeWorkerConfig:
    """Provide a config with a public destination and an isolated workspace root."""

    return MergeWorkerConfig(
        gap_ms=350,
        ffmpeg_path="ffmpeg",
        ffprobe_path="ffprobe",
        storage=StorageConfig(public_base_url="https://cdn.example.com/"),
        workspace_root=workspace_root,
    )


@pytest.fixture
def recorded_states() -> list[tuple[str, MergeState]]:
    """Collect pipeline state transitions."""

    return []


@pytest.fixture
def build_pipeline(
    merge_config: MergeWorkerConfig,
    fake_tool_runner: FakeToolRunner,
    object_store: InMemoryObjectStore,
    recorded_states: list[tuple[str, MergeState]],
) -> Callable[..., MergePipeline]:
    """Build pipelines wired to fakes, with a clock that starts at a fixed instant."""

    def _build(
        config: MergeWorkerConfig | None = None,
        clock: Callable[[], float] = lambda: 1_700_000_000.0,
    ) -> MergePipeline:
        resolved = config or merge_config
        publisher = ArtifactPublisher(
            object_store,
            resolved.storage.public_base_url,
            key_factory=StorageKeyFactory(clock=clock),
        )
        return MergePipeline(
            resolved,
            runner=fake_tool_runner,
            publisher=publisher,
            state_listener=lambda book_id, state: recorded_states.append((book_id, state)),
        )

    return _build
