"""Tests for the FFmpeg engine adapter."""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from brandr.core.animation.models import AnimationSpec, OverlayRole
from brandr.core.config.models import ExportConfig
from brandr.core.errors import EngineError
from brandr.core.export.engine import FfmpegEngine, parse_progress_line
from brandr.core.export.models import EngineJob
from brandr.core.expressions.compiler import ExpressionCompiler
from brandr.core.expressions.graph import OverlayGraphBuilder

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses a shebang script")


def _write_fake_ffmpeg(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\nimport sys, time\n{body}\n")
    path.chmod(path.stat().st_mode | stat.S_IEXEC)
    return path


@pytest.fixture
def job(tmp_path: Path, spec: AnimationSpec) -> EngineJob:
    exprs = ExpressionCompiler().compile_roles(spec, [OverlayRole.NAME])
    graph = OverlayGraphBuilder().build(name_asset=tmp_path / "n.png", expressions=exprs)
    return EngineJob(video=tmp_path / "in.mp4", output=tmp_path / "out.mp4", graph=graph)


class TestParseProgressLine:
    """Tests for -progress output parsing."""

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("out_time_us=2500000", 2.5),
            ("out_time_ms=1500000\n", 1.5),
            ("out_time_us=N/A", None),
            ("out_time=00:00:01.500000", None),
            ("progress=continue", None),
            ("frame=42", None),
            ("garbage", None),
            ("out_time_us=-5", None),
        ],
    )
    def test_parse(self, line: str, expected: float | None) -> None:
        """Only microsecond out_time keys yield processed seconds."""
        assert parse_progress_line(line) == expected


class TestFfmpegEngine:
    """Tests for FfmpegEngine."""

    def test_command(self, job: EngineJob) -> None:
        """The command starts with the configured binary."""
        engine = FfmpegEngine(ExportConfig(ffmpeg_binary="/opt/ffmpeg"))
        cmd = engine.command(job)
        assert cmd[0] == "/opt/ffmpeg"
        assert cmd[-1] == str(job.output)

    @pytest.mark.asyncio
    async def test_missing_binary(self, job: EngineJob, tmp_path: Path) -> None:
        """A binary that cannot be started raises EngineError."""
        engine = FfmpegEngine(ExportConfig(ffmpeg_binary=str(tmp_path / "missing-ffmpeg")))
        with pytest.raises(EngineError) as exc_info:
            await engine.start(job)
        assert exc_info.value.code is None

    @posix_only
    @pytest.mark.asyncio
    async def test_progress_and_success(self, job: EngineJob, tmp_path: Path) -> None:
        """Progress lines are parsed and a zero exit succeeds."""
        binary = _write_fake_ffmpeg(
            tmp_path / "ffmpeg",
            "for us in (500000, 1000000):\n"
            "    print(f'out_time_us={us}', flush=True)\n"
            "print('progress=end', flush=True)\n"
            "print('encoder done', file=sys.stderr)\n",
        )
        engine = FfmpegEngine(ExportConfig(ffmpeg_binary=str(binary)))
        times: list[float] = []
        session = await engine.start(job, on_time=times.append)
        result = await session.wait()
        assert result.succeeded
        assert times == [0.5, 1.0]
        assert "encoder done" in result.log

    @posix_only
    @pytest.mark.asyncio
    async def test_failure_keeps_log_tail(self, job: EngineJob, tmp_path: Path) -> None:
        """Non-zero exits report the code and only the last log lines."""
        binary = _write_fake_ffmpeg(
            tmp_path / "ffmpeg",
            "for i in range(30):\n"
            "    print(f'line {i}', file=sys.stderr)\n"
            "sys.exit(3)\n",
        )
        engine = FfmpegEngine(ExportConfig(ffmpeg_binary=str(binary), log_tail_lines=5))
        session = await engine.start(job)
        result = await session.wait()
        assert result.return_code == 3
        assert not result.succeeded
        assert result.log.splitlines() == [f"line {i}" for i in range(25, 30)]

    @posix_only
    @pytest.mark.asyncio
    async def test_cancel_terminates(self, job: EngineJob, tmp_path: Path) -> None:
        """cancel() stops a running process."""
        binary = _write_fake_ffmpeg(
            tmp_path / "ffmpeg",
            "print('out_time_us=0', flush=True)\ntime.sleep(30)\n",
        )
        engine = FfmpegEngine(ExportConfig(ffmpeg_binary=str(binary)))
        session = await engine.start(job)
        await engine.cancel(session.session_id)
        result = await session.wait()
        assert result.return_code != 0

    @pytest.mark.asyncio
    async def test_cancel_unknown_session(self) -> None:
        """Cancelling an unknown session is a no-op."""
        await FfmpegEngine().cancel("nope")
