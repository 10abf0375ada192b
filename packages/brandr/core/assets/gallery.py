"""Gallery sink for exported videos."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class Gallery(Protocol):
    """Persists exported videos. Failures are reported, never raised."""

    def save_video(self, path: Path) -> bool:
        """Save ``path`` into the gallery; return True on success."""
        ...


class DirectoryGallery:
    """Gallery backed by an album directory on disk."""

    def __init__(self, album_dir: Path) -> None:
        self.album_dir = album_dir

    def save_video(self, path: Path) -> bool:
        try:
            self.album_dir.mkdir(parents=True, exist_ok=True)
            target = self.album_dir / path.name
            shutil.copy2(path, target)
        except OSError as e:
            logger.warning(f"Could not save {path} to gallery {self.album_dir}: {e}")
            return False
        logger.info(f"Saved {path.name} to gallery {self.album_dir}")
        return True
