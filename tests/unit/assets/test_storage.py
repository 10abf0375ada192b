"""Tests for FileStorage."""

from __future__ import annotations

from brandr.core.assets.storage import FileStorage


class TestFileStorage:
    """Tests for path resolution and cleanup."""

    def test_cache_paths(self, storage: FileStorage) -> None:
        """Videos and images get separate cache directories."""
        video = storage.cached_video_path("a.mp4")
        image = storage.cached_image_path("a.jpg")
        assert video.parent == storage.cache_dir / "videos"
        assert image.parent == storage.cache_dir / "images"
        assert video.parent.is_dir()
        assert image.parent.is_dir()

    def test_overlay_dirs_are_distinct(self, storage: FileStorage) -> None:
        a = storage.create_overlay_dir()
        b = storage.create_overlay_dir()
        assert a != b
        assert a.parent == storage.overlays_root
        assert storage.create_overlay_dir("abc").name == "abc"

    def test_export_output_path(self, storage: FileStorage) -> None:
        """Outputs are timestamped mp4 files in the temp directory."""
        path = storage.export_output_path()
        assert path.parent == storage.temp_dir
        assert path.name.startswith("export_")
        assert path.suffix == ".mp4"
        assert not path.exists()

    def test_delete_file(self, storage: FileStorage) -> None:
        path = storage.export_output_path()
        path.write_bytes(b"data")
        assert storage.file_size(path) == 4
        assert storage.delete_file(path)
        assert not storage.delete_file(path)
        assert storage.file_size(path) == 0

    def test_cleanup_single_overlay_dir(self, storage: FileStorage) -> None:
        """Only the given export's overlay directory is removed."""
        keep = storage.create_overlay_dir("keep")
        drop = storage.create_overlay_dir("drop")
        (drop / "name.png").write_bytes(b"png")
        storage.cleanup_overlays(drop)
        assert not drop.exists()
        assert keep.exists()

    def test_cleanup_all_overlays(self, storage: FileStorage) -> None:
        storage.create_overlay_dir("one")
        storage.cleanup_overlays()
        assert not storage.overlays_root.exists()
        storage.cleanup_overlays()
