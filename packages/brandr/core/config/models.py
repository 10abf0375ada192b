"""Configuration models for Brandr."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from brandr.core.animation.formulas import EasingApproximation


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON log lines")
    filename: str | None = Field(default=None, description="Log file (stdout when unset)")


class StorageConfig(BaseModel):
    """Where downloaded, temporary and exported files live."""

    model_config = ConfigDict(extra="forbid")

    cache_dir: Path = Field(default=Path("data/cache"), description="Downloaded assets")
    temp_dir: Path = Field(
        default=Path("data/tmp"), description="Overlay assets and export outputs"
    )
    album_dir: Path = Field(
        default=Path("data/gallery/Branded Videos"), description="Gallery album directory"
    )


class ExportConfig(BaseModel):
    """Compositing engine and export policy settings."""

    model_config = ConfigDict(extra="forbid")

    ffmpeg_binary: str = Field(default="ffmpeg", description="FFmpeg executable")
    video_codec: str = "libx264"
    preset: str = "ultrafast"
    crf: int = Field(default=23, ge=0, le=51)
    audio_codec: str = "copy"
    assumed_duration_s: float = Field(
        default=30.0,
        gt=0.0,
        description="Assumed source length for progress estimation (real length is unknown)",
    )
    easing_approximation: EasingApproximation = Field(
        default=EasingApproximation.LINEAR,
        description="How easing curves are rendered into engine expressions",
    )
    log_tail_lines: int = Field(default=20, gt=0, description="Engine log lines kept on failure")
    save_to_gallery: bool = True


class DownloadConfig(BaseModel):
    """Remote asset download settings."""

    model_config = ConfigDict(extra="forbid")

    max_attempts: int = Field(default=3, ge=1)
    base_delay_s: float = Field(default=1.0, ge=0.0, description="First retry delay (doubles)")
    max_delay_s: float = Field(default=8.0, ge=0.0)
    timeout_s: float = Field(default=30.0, gt=0.0)
    chunk_size: int = Field(default=1024 * 1024, gt=0)


class PreviewConfig(BaseModel):
    """Live preview settings."""

    model_config = ConfigDict(extra="forbid")

    fps: float = Field(default=60.0, gt=0.0, le=240.0)


class AppConfig(BaseModel):
    """Application-level configuration."""

    model_config = ConfigDict(extra="ignore")

    logging: LoggingConfig = LoggingConfig()
    storage: StorageConfig = StorageConfig()
    export: ExportConfig = ExportConfig()
    download: DownloadConfig = DownloadConfig()
    preview: PreviewConfig = PreviewConfig()

    @classmethod
    def default_path(cls) -> Path:
        """Default path for application config."""
        return Path("brandr.json")
