"""Source assets, overlay rendering, and file locations."""

from brandr.core.assets.canvas import CanvasRenderer, PillowCanvas
from brandr.core.assets.download import AssetDownloader, cache_file_name, is_remote
from brandr.core.assets.gallery import DirectoryGallery, Gallery
from brandr.core.assets.retry import RetryPolicy
from brandr.core.assets.storage import FileStorage

__all__ = [
    "AssetDownloader",
    "CanvasRenderer",
    "DirectoryGallery",
    "FileStorage",
    "Gallery",
    "PillowCanvas",
    "RetryPolicy",
    "cache_file_name",
    "is_remote",
]
