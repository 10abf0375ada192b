"""Compositing engine adapters.

The orchestrator only sees ``CompositingEngine``: start a job, receive
processed-time updates, await an ``EngineResult``, and cancel by session id.
``FfmpegEngine`` runs the FFmpeg CLI as an asyncio subprocess.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import deque
from collections.abc import Callable
from typing import Protocol

from brandr.core.config.models import ExportConfig
from brandr.core.errors import EngineError
from brandr.core.export.models import EngineJob, EngineResult
from brandr.core.expressions.graph import engine_arguments

logger = logging.getLogger(__name__)

TimeCallback = Callable[[float], None]

TERMINATE_TIMEOUT_S = 3.0


class EngineSession(Protocol):
    """A running engine job."""

    session_id: str

    async def wait(self) -> EngineResult:
        """Wait for the job to finish and return its result."""
        ...


class CompositingEngine(Protocol):
    """External compositing engine driven by an ``ExpressionGraph``."""

    async def start(self, job: EngineJob, on_time: TimeCallback | None = None) -> EngineSession:
        """Start ``job``; ``on_time`` receives processed seconds as they advance.

        Raises:
            EngineError: If the engine cannot be started at all
        """
        ...

    async def cancel(self, session_id: str) -> None:
        """Ask a running session to stop. Unknown or finished sessions are ignored."""
        ...


def parse_progress_line(line: str) -> float | None:
    """Processed seconds from one ``-progress`` key=value line.

    ``out_time_us`` and ``out_time_ms`` both carry microseconds;
    ``N/A`` and unrelated keys yield None.

    Example:
        >>> parse_progress_line("out_time_ms=1500000")
        1.5
    """
    key, sep, value = line.strip().partition("=")
    if not sep or key not in ("out_time_us", "out_time_ms"):
        return None
    try:
        micros = int(value)
    except ValueError:
        return None
    if micros < 0:
        return None
    return micros / 1_000_000


class FfmpegSession:
    """One FFmpeg subprocess with its progress and log readers."""

    def __init__(
        self,
        session_id: str,
        process: asyncio.subprocess.Process,
        on_time: TimeCallback | None,
        log_tail_lines: int,
        on_finished: Callable[[str], None] | None = None,
    ) -> None:
        self.session_id = session_id
        self.process = process
        self._on_time = on_time
        self._on_finished = on_finished
        self._log: deque[str] = deque(maxlen=log_tail_lines)

    async def _read_progress(self) -> None:
        assert self.process.stdout is not None
        async for raw in self.process.stdout:
            seconds = parse_progress_line(raw.decode("utf-8", errors="replace"))
            if seconds is not None and self._on_time:
                self._on_time(seconds)

    async def _read_log(self) -> None:
        assert self.process.stderr is not None
        async for raw in self.process.stderr:
            line = raw.decode("utf-8", errors="replace").rstrip()
            if line:
                self._log.append(line)
                logger.debug(f"ffmpeg[{self.session_id}]: {line}")

    async def wait(self) -> EngineResult:
        try:
            await asyncio.gather(self._read_progress(), self._read_log())
            return_code = await self.process.wait()
        finally:
            if self._on_finished:
                self._on_finished(self.session_id)
        return EngineResult(return_code=return_code, log="\n".join(self._log))


class FfmpegEngine:
    """``CompositingEngine`` backed by the FFmpeg CLI.

    Args:
        settings: Binary, encoder and log-tail settings

    Example:
        >>> engine = FfmpegEngine(ExportConfig(ffmpeg_binary="/usr/bin/ffmpeg"))
        >>> session = await engine.start(job, on_time=print)
        >>> result = await session.wait()
    """

    def __init__(self, settings: ExportConfig | None = None) -> None:
        self.settings = settings or ExportConfig()
        self._sessions: dict[str, FfmpegSession] = {}

    def command(self, job: EngineJob) -> list[str]:
        return [
            self.settings.ffmpeg_binary,
            *engine_arguments(job.graph, job.video, job.output, self.settings),
        ]

    async def start(self, job: EngineJob, on_time: TimeCallback | None = None) -> FfmpegSession:
        cmd = self.command(job)
        logger.debug(f"FFmpeg command: {' '.join(cmd)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EngineError(None, f"Could not start {self.settings.ffmpeg_binary}: {e}") from e

        session_id = uuid.uuid4().hex[:12]
        session = FfmpegSession(
            session_id,
            process,
            on_time,
            self.settings.log_tail_lines,
            on_finished=self._forget,
        )
        self._sessions[session_id] = session
        logger.info(f"FFmpeg session {session_id} started (pid {process.pid})")
        return session

    async def cancel(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session is None:
            return
        process = session.process
        if process.returncode is not None:
            return

        logger.info(f"Cancelling FFmpeg session {session_id} (pid {process.pid})")
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=TERMINATE_TIMEOUT_S)
        except TimeoutError:
            logger.warning(f"FFmpeg pid {process.pid} did not terminate, sending SIGKILL")
            process.kill()
            await process.wait()

    def _forget(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
