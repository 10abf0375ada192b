"""Tests for the directory-backed gallery."""

from __future__ import annotations

from pathlib import Path

from brandr.core.assets.gallery import DirectoryGallery


def test_save_video_copies_into_album(tmp_path: Path) -> None:
    """The export is copied into the album directory, which is created."""
    source = tmp_path / "export_1.mp4"
    source.write_bytes(b"video")
    album = tmp_path / "gallery" / "Branded Videos"

    assert DirectoryGallery(album).save_video(source)
    assert (album / "export_1.mp4").read_bytes() == b"video"
    assert source.exists()


def test_save_missing_video_reports_failure(tmp_path: Path) -> None:
    """Gallery failures are reported as False, not raised."""
    assert not DirectoryGallery(tmp_path / "album").save_video(tmp_path / "missing.mp4")
