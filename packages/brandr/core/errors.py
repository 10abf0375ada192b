"""Exception hierarchy for Brandr.

Configuration and compilation errors are programmer errors and surface
immediately. Asset and engine errors carry enough context (paths, return
codes, log excerpts) to be shown to a user. The export orchestrator maps
asset and engine errors, and cancellation, onto ``ExportOutcome`` values
instead of letting them escape.
"""

from __future__ import annotations

from pathlib import Path


class BrandrError(Exception):
    """Base exception for all Brandr errors."""


class ConfigurationError(BrandrError, ValueError):
    """Invalid animation spec or application configuration."""


class AssetError(BrandrError):
    """Source asset missing, unreadable, or could not be produced."""

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        self.message = message
        self.path = Path(path) if path is not None else None
        super().__init__(str(self))

    def __str__(self) -> str:
        """Format error for logging and display."""
        if self.path is not None:
            return f"{self.message} | path={self.path}"
        return self.message


class SourceFileMissing(AssetError):
    """Input video or photo does not exist on disk."""


class AssetGenerationFailed(AssetError):
    """Canvas collaborator failed to render an overlay asset."""


class DownloadError(AssetError):
    """Remote asset could not be downloaded after all retry attempts."""

    def __init__(
        self,
        message: str,
        *,
        url: str,
        attempts: int = 0,
        status_code: int | None = None,
        path: Path | str | None = None,
    ) -> None:
        self.url = url
        self.attempts = attempts
        self.status_code = status_code
        super().__init__(message, path=path)

    def __str__(self) -> str:
        parts = [self.message, f"url={self.url}"]
        if self.attempts:
            parts.append(f"attempts={self.attempts}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " | ".join(parts)


class CompilationError(BrandrError):
    """Animation could not be compiled into an expression graph."""


class UnsupportedAnimationKind(CompilationError):
    """Animation kind is outside the closed set of supported kinds."""

    def __init__(self, kind: object) -> None:
        self.kind = kind
        super().__init__(f"Unsupported animation kind: {kind!r}")


class EmptyGraph(CompilationError):
    """Neither overlay is present and pass-through was not requested."""


class InvalidExpression(CompilationError):
    """Generated expression is not syntactically valid."""

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(f"Invalid expression ({reason}): {expression}")


class EngineError(BrandrError):
    """Compositing engine exited with a non-zero return code."""

    def __init__(self, code: int | None, log_tail: str = "") -> None:
        self.code = code
        self.log_tail = log_tail
        super().__init__(f"Compositing engine failed with code: {code}")
