"""Export orchestration: engine adapters, progress and outcomes."""

from brandr.core.export.engine import (
    CompositingEngine,
    EngineSession,
    FfmpegEngine,
    parse_progress_line,
)
from brandr.core.export.models import (
    EngineJob,
    EngineResult,
    ExportOutcome,
    FailureReason,
    OutcomeStatus,
)
from brandr.core.export.orchestrator import ExportOrchestrator
from brandr.core.export.progress import ProgressEstimator

__all__ = [
    "CompositingEngine",
    "EngineJob",
    "EngineResult",
    "EngineSession",
    "ExportOrchestrator",
    "ExportOutcome",
    "FailureReason",
    "FfmpegEngine",
    "OutcomeStatus",
    "ProgressEstimator",
    "parse_progress_line",
]
