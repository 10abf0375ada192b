"""Export result types.

``ExportOutcome`` is immutable and never raised: every asset, engine and
cancellation error of an export attempt ends up as one of its three shapes.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from brandr.core.expressions.graph import ExpressionGraph


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"


class FailureReason(str, Enum):
    """Terminal failure causes of one export attempt."""

    ASSET_GENERATION_FAILED = "asset_generation_failed"
    SOURCE_FILE_MISSING = "source_file_missing"
    ENGINE_FAILED = "engine_failed"


class ExportOutcome(BaseModel):
    """Result of one export attempt.

    Attributes:
        status: success, failure or cancelled
        path: Exported video (success only)
        wall_clock_duration: Seconds from export start to completion (success only)
        saved_to_gallery: Whether the gallery accepted the video (success only)
        reason: Failure cause (failure only)
        code: Engine return code (engine failures only)
        log_tail: Last lines of the engine log (engine failures only)
        message: Human-readable detail

    Example:
        >>> outcome = await orchestrator.export(spec, Path("in.mp4"))
        >>> if outcome.is_success:
        ...     print(outcome.path)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: OutcomeStatus
    path: Path | None = None
    wall_clock_duration: float | None = Field(default=None, ge=0.0)
    saved_to_gallery: bool = False
    reason: FailureReason | None = None
    code: int | None = None
    log_tail: str = ""
    message: str = ""

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def is_cancelled(self) -> bool:
        return self.status == OutcomeStatus.CANCELLED


# Helper functions to create outcomes


def success_outcome(
    path: Path, wall_clock_duration: float, *, saved_to_gallery: bool = False
) -> ExportOutcome:
    return ExportOutcome(
        status=OutcomeStatus.SUCCESS,
        path=path,
        wall_clock_duration=wall_clock_duration,
        saved_to_gallery=saved_to_gallery,
        message="Export completed",
    )


def failure_outcome(
    reason: FailureReason,
    message: str,
    *,
    code: int | None = None,
    log_tail: str = "",
) -> ExportOutcome:
    return ExportOutcome(
        status=OutcomeStatus.FAILURE,
        reason=reason,
        code=code,
        log_tail=log_tail,
        message=message,
    )


def cancelled_outcome(message: str = "Export cancelled") -> ExportOutcome:
    return ExportOutcome(status=OutcomeStatus.CANCELLED, message=message)


class EngineJob(BaseModel):
    """Everything the compositing engine needs for one run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    video: Path
    output: Path
    graph: ExpressionGraph


class EngineResult(BaseModel):
    """Return status and log excerpt of a finished engine run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    return_code: int | None
    log: str = ""

    @property
    def succeeded(self) -> bool:
        return self.return_code == 0
