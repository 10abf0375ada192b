"""Export orchestrator.

Drives one export attempt end to end: source checks, overlay asset
rendering, expression compilation, graph building, the engine run with
progress smoothing, cancellation and cleanup. Every asset, engine and
cancellation error becomes an ``ExportOutcome``; compilation errors are
programmer errors and propagate.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Callable
from pathlib import Path

from brandr.core.animation.models import AnimationSpec, OverlayRole
from brandr.core.assets.canvas import CanvasRenderer
from brandr.core.assets.gallery import Gallery
from brandr.core.assets.storage import FileStorage
from brandr.core.config.models import ExportConfig
from brandr.core.errors import AssetError, EngineError, SourceFileMissing
from brandr.core.export.engine import CompositingEngine
from brandr.core.export.models import (
    EngineJob,
    ExportOutcome,
    FailureReason,
    cancelled_outcome,
    failure_outcome,
    success_outcome,
)
from brandr.core.export.progress import ProgressEstimator
from brandr.core.expressions.compiler import ExpressionCompiler
from brandr.core.expressions.graph import OverlayGraphBuilder
from brandr.core.utils.logging import get_logger

ProgressCallback = Callable[[float], None]


class ExportOrchestrator:
    """Runs branded-video exports, one at a time.

    Collaborators are injected; nothing here is a process-wide singleton.
    A second ``export`` call waits until the previous export, including its
    cleanup, has finished.

    Args:
        engine: Compositing engine
        canvas: Overlay asset renderer
        storage: Temp/output path owner
        gallery: Optional gallery that receives successful exports
        compiler: Expression compiler (built from ``settings`` when omitted)
        builder: Overlay graph builder
        settings: Export policy

    Example:
        >>> orchestrator = ExportOrchestrator(FfmpegEngine(), PillowCanvas(), FileStorage())
        >>> outcome = await orchestrator.export(spec, Path("clip.mp4"), Path("me.jpg"))
        >>> outcome.status
        <OutcomeStatus.SUCCESS: 'success'>
    """

    def __init__(
        self,
        engine: CompositingEngine,
        canvas: CanvasRenderer,
        storage: FileStorage,
        *,
        gallery: Gallery | None = None,
        compiler: ExpressionCompiler | None = None,
        builder: OverlayGraphBuilder | None = None,
        settings: ExportConfig | None = None,
    ) -> None:
        self.settings = settings or ExportConfig()
        self.engine = engine
        self.canvas = canvas
        self.storage = storage
        self.gallery = gallery
        self.compiler = compiler or ExpressionCompiler(self.settings.easing_approximation)
        self.builder = builder or OverlayGraphBuilder()

        self._lock = asyncio.Lock()
        self._cancel_requested = asyncio.Event()
        self._session_id: str | None = None
        self._committed = False

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    async def cancel(self) -> None:
        """Request cancellation of the export in flight.

        Advisory: the engine may take a while to stop. Once the orchestrator
        observes the request, the attempt ends as cancelled and its output
        file is deleted, even if the engine had already finished. Requests
        arriving after the output has been committed (gallery save under way)
        are ignored.
        """
        if not self.is_busy or self._committed:
            return
        self._cancel_requested.set()
        if self._session_id is not None:
            await self.engine.cancel(self._session_id)

    async def export(
        self,
        spec: AnimationSpec,
        video_asset: Path | str,
        photo_asset: Path | str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ExportOutcome:
        """Export ``video_asset`` with the branding overlay baked in.

        Args:
            spec: Animation to bake in
            video_asset: Source video
            photo_asset: Source photo; the photo overlay is skipped when None
            on_progress: Receives monotonic progress in [0, 1]; 1.0 only on success

        Returns:
            ExportOutcome (success, failure or cancelled)

        Raises:
            CompilationError: If the spec cannot be compiled
        """
        async with self._lock:
            self._cancel_requested.clear()
            self._committed = False
            try:
                return await self._run(
                    spec,
                    Path(video_asset),
                    Path(photo_asset) if photo_asset is not None else None,
                    on_progress,
                )
            finally:
                self._session_id = None
                self._committed = False
                self._cancel_requested.clear()

    async def _run(
        self,
        spec: AnimationSpec,
        video: Path,
        photo: Path | None,
        on_progress: ProgressCallback | None,
    ) -> ExportOutcome:
        export_id = uuid.uuid4().hex[:12]
        log = get_logger(__name__, export_id=export_id)
        started = time.perf_counter()
        estimator = ProgressEstimator(self.settings.assumed_duration_s)

        def report(value: float) -> None:
            if on_progress and not self._cancel_requested.is_set():
                on_progress(value)

        log.info(f"Starting export of {video.name} ({spec.kind.value})")

        try:
            for source in (video, photo):
                if source is not None:
                    _require_source(source)
        except SourceFileMissing as e:
            log.warning(str(e))
            return failure_outcome(FailureReason.SOURCE_FILE_MISSING, str(e))

        overlay_dir = self.storage.create_overlay_dir(export_id)
        output: Path | None = None
        try:
            try:
                photo_png = (
                    await asyncio.to_thread(
                        self.canvas.render_circular_photo, photo, spec.photo_size, overlay_dir
                    )
                    if photo is not None
                    else None
                )
                name_png = await asyncio.to_thread(
                    self.canvas.render_name_pill, spec.display_name, overlay_dir
                )
            except AssetError as e:
                log.error(f"Overlay asset generation failed: {e}")
                return failure_outcome(FailureReason.ASSET_GENERATION_FAILED, str(e))

            report(estimator.assets_ready())
            if self._cancel_requested.is_set():
                return self._cancelled(log, None)

            roles = [OverlayRole.PHOTO] if photo_png is not None else []
            roles.append(OverlayRole.NAME)
            expressions = self.compiler.compile_roles(spec, roles)
            graph = self.builder.build(
                photo_asset=photo_png, name_asset=name_png, expressions=expressions
            )

            output = self.storage.export_output_path()
            job = EngineJob(video=video, output=output, graph=graph)
            try:
                session = await self.engine.start(
                    job, on_time=lambda seconds: report(estimator.update(seconds))
                )
            except EngineError as e:
                log.error(f"Engine failed to start: {e.log_tail or e}")
                self.storage.delete_file(output)
                return failure_outcome(
                    FailureReason.ENGINE_FAILED, str(e), code=e.code, log_tail=e.log_tail
                )

            self._session_id = session.session_id
            if self._cancel_requested.is_set():
                await self.engine.cancel(session.session_id)
            try:
                result = await session.wait()
            except asyncio.CancelledError:
                log.warning(f"Export task cancelled, stopping engine session {session.session_id}")
                await self.engine.cancel(session.session_id)
                self.storage.delete_file(output)
                raise
            finally:
                self._session_id = None

            if self._cancel_requested.is_set():
                return self._cancelled(log, output)

            if not result.succeeded:
                log.error(f"Engine failed with code {result.return_code}:\n{result.log}")
                self.storage.delete_file(output)
                return failure_outcome(
                    FailureReason.ENGINE_FAILED,
                    f"Compositing engine failed with code: {result.return_code}",
                    code=result.return_code,
                    log_tail=result.log,
                )

            # Past this point the output is kept; late cancel requests are ignored
            self._committed = True
            duration = time.perf_counter() - started
            report(estimator.finish())

            saved = False
            if self.gallery is not None and self.settings.save_to_gallery:
                saved = await asyncio.to_thread(self.gallery.save_video, output)

            log.info(f"Export completed in {duration:.2f}s -> {output}")
            return success_outcome(output, duration, saved_to_gallery=saved)
        finally:
            self.storage.cleanup_overlays(overlay_dir)

    def _cancelled(self, log, output: Path | None) -> ExportOutcome:
        if output is not None and self.storage.delete_file(output):
            log.info(f"Deleted partial output {output}")
        log.info("Export cancelled")
        return cancelled_outcome()


def _require_source(path: Path) -> None:
    if not path.is_file():
        raise SourceFileMissing("Source file not found", path=path)
