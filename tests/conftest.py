"""Shared pytest fixtures for brandr tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from brandr.core.animation.models import AnimationKind, AnimationSpec
from brandr.core.assets.storage import FileStorage
from brandr.core.config.models import StorageConfig
from brandr.core.errors import AssetGenerationFailed, EngineError
from brandr.core.export.models import EngineJob, EngineResult

# ============================================================================
# Spec Fixtures
# ============================================================================


@pytest.fixture
def spec() -> AnimationSpec:
    """Default spec (slide-up-fade, 500ms delay, 500ms duration)."""
    return AnimationSpec()


@pytest.fixture
def slide_from_right_spec() -> AnimationSpec:
    """Slide-from-right over 1s with no delay."""
    return AnimationSpec(kind=AnimationKind.SLIDE_FROM_RIGHT, duration_ms=1000, delay_ms=0)


# ============================================================================
# Filesystem Fixtures
# ============================================================================


@pytest.fixture
def storage(tmp_path: Path) -> FileStorage:
    """FileStorage rooted in a temporary directory."""
    return FileStorage(
        StorageConfig(
            cache_dir=tmp_path / "cache",
            temp_dir=tmp_path / "tmp",
            album_dir=tmp_path / "gallery" / "Branded Videos",
        )
    )


@pytest.fixture
def photo_file(tmp_path: Path) -> Path:
    """A small non-square RGB photo."""
    path = tmp_path / "photo.jpg"
    Image.new("RGB", (120, 80), (200, 30, 30)).save(path)
    return path


@pytest.fixture
def video_file(tmp_path: Path) -> Path:
    """Placeholder source video (content is never decoded by fakes)."""
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return path


# ============================================================================
# Collaborator Fakes
# ============================================================================


class FakeCanvas:
    """Canvas that writes placeholder PNG files and records calls."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.calls: list[tuple[str, object]] = []

    def render_circular_photo(self, source_image: Path, size: float, output_dir: Path) -> Path:
        self.calls.append(("photo", size))
        if self.fail_on == "photo":
            raise AssetGenerationFailed("boom", path=source_image)
        path = output_dir / "profile.png"
        path.write_bytes(b"png")
        return path

    def render_name_pill(self, text: str, output_dir: Path) -> Path:
        self.calls.append(("name", text))
        if self.fail_on == "name":
            raise AssetGenerationFailed("boom")
        path = output_dir / "name.png"
        path.write_bytes(b"png")
        return path


class FakeSession:
    def __init__(self, engine: FakeEngine, job: EngineJob) -> None:
        self.session_id = f"session-{len(engine.jobs)}"
        self._engine = engine
        self._job = job

    async def wait(self) -> EngineResult:
        engine = self._engine
        self._job.output.write_bytes(b"partial")
        for seconds in engine.progress_times:
            if engine.on_time:
                engine.on_time(seconds)
            await asyncio.sleep(0)
        if engine.block is not None:
            await engine.block.wait()
        if engine.cancelled:
            return EngineResult(return_code=255, log="Exiting normally, received signal 15.")
        if engine.return_code == 0:
            self._job.output.write_bytes(b"video")
        return EngineResult(return_code=engine.return_code, log=engine.log)


class FakeEngine:
    """Compositing engine fake with scripted progress and return code.

    ``block`` (an asyncio.Event) holds the run open until set, so tests can
    cancel mid-run.
    """

    def __init__(
        self,
        *,
        return_code: int = 0,
        log: str = "",
        progress_times: tuple[float, ...] = (),
        fail_to_start: bool = False,
    ) -> None:
        self.return_code = return_code
        self.log = log
        self.progress_times = progress_times
        self.fail_to_start = fail_to_start
        self.block: asyncio.Event | None = None
        self.jobs: list[EngineJob] = []
        self.cancel_calls: list[str] = []
        self.cancelled = False
        self.on_time: Callable[[float], None] | None = None

    async def start(self, job: EngineJob, on_time=None) -> FakeSession:
        if self.fail_to_start:
            raise EngineError(None, "ffmpeg: not found")
        self.jobs.append(job)
        self.on_time = on_time
        return FakeSession(self, job)

    async def cancel(self, session_id: str) -> None:
        self.cancel_calls.append(session_id)
        self.cancelled = True
        if self.block is not None:
            self.block.set()


@pytest.fixture
def fake_canvas() -> FakeCanvas:
    return FakeCanvas()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_engine() -> type[FakeEngine]:
    """FakeEngine class, for tests that need a scripted engine."""
    return FakeEngine


@pytest.fixture
def make_canvas() -> type[FakeCanvas]:
    """FakeCanvas class, for tests that need a failing canvas."""
    return FakeCanvas
