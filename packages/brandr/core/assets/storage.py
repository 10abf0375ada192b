"""File storage paths for downloaded, temporary and exported files.

Injected into the collaborators that need it instead of being a process-wide
singleton, so tests can point everything at a temporary directory.
"""

from __future__ import annotations

import logging
import shutil
import time
import uuid
from pathlib import Path

from brandr.core.config.models import StorageConfig

logger = logging.getLogger(__name__)


class FileStorage:
    """Resolves and manages Brandr's on-disk locations.

    Layout::

        <cache_dir>/videos/      downloaded source videos
        <cache_dir>/images/      downloaded source photos
        <temp_dir>/overlays/<id> per-export overlay PNGs
        <temp_dir>/export_<ms>.mp4
    """

    def __init__(self, config: StorageConfig | None = None) -> None:
        self.config = config or StorageConfig()

    @property
    def cache_dir(self) -> Path:
        return self.config.cache_dir

    @property
    def temp_dir(self) -> Path:
        return self.config.temp_dir

    def _ensure_dir(self, path: Path) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        return path

    def cached_video_path(self, file_name: str) -> Path:
        """Path for a cached source video."""
        return self._ensure_dir(self.cache_dir / "videos") / file_name

    def cached_image_path(self, file_name: str) -> Path:
        """Path for a cached source image."""
        return self._ensure_dir(self.cache_dir / "images") / file_name

    @property
    def overlays_root(self) -> Path:
        return self.temp_dir / "overlays"

    def create_overlay_dir(self, session_id: str | None = None) -> Path:
        """Create a fresh directory for one export's overlay assets."""
        session_id = session_id or uuid.uuid4().hex[:12]
        return self._ensure_dir(self.overlays_root / session_id)

    def export_output_path(self) -> Path:
        """Timestamped output path for an exported video."""
        timestamp = int(time.time() * 1000)
        return self._ensure_dir(self.temp_dir) / f"export_{timestamp}.mp4"

    def delete_file(self, path: Path | str) -> bool:
        """Delete a file if it exists.

        Returns:
            True if a file was removed
        """
        path = Path(path)
        if path.exists():
            path.unlink()
            logger.debug(f"Deleted {path}")
            return True
        return False

    def file_size(self, path: Path | str) -> int:
        """Size in bytes, 0 for missing files."""
        path = Path(path)
        return path.stat().st_size if path.exists() else 0

    def cleanup_overlays(self, overlay_dir: Path | None = None) -> None:
        """Remove one export's overlay directory, or all overlay assets."""
        target = overlay_dir or self.overlays_root
        if target.exists():
            shutil.rmtree(target)
            logger.debug(f"Removed overlay assets at {target}")
