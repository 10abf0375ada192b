"""Remote source asset downloads.

Videos and photos given as URLs are streamed into the storage cache before
an export. Files already in the cache are reused without a request.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from urllib.parse import urlparse

import httpx

from brandr.core.assets.retry import RetryPolicy
from brandr.core.assets.storage import FileStorage
from brandr.core.config.models import DownloadConfig
from brandr.core.errors import DownloadError

logger = logging.getLogger(__name__)

KNOWN_EXTENSIONS = (".mp4", ".mov", ".jpg", ".jpeg", ".png")

ProgressCallback = Callable[[float], None]
Sleep = Callable[[float], Awaitable[None]]


def is_remote(location: str) -> bool:
    """True for http(s) URLs."""
    return urlparse(location).scheme in ("http", "https")


def cache_file_name(url: str, default_name: str) -> str:
    """Cache file name derived from the full URL.

    The last path segment is kept when it has a known media extension;
    ``default_name`` is used otherwise. Either way it is prefixed with a
    short hash of the whole URL so distinct URLs never collide.
    """
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:12]
    segment = urlparse(url).path.rsplit("/", 1)[-1]
    if segment and segment.lower().endswith(KNOWN_EXTENSIONS):
        return f"{digest}_{segment}"
    return f"{digest}_{default_name}"


class AssetDownloader:
    """Downloads remote videos and images into the storage cache.

    Args:
        storage: Storage that owns the cache directories
        config: Download settings (attempts, backoff, timeout)
        transport: Optional custom transport (useful for testing)
        sleep: Awaitable used between retries (useful for testing)

    Example:
        >>> downloader = AssetDownloader(FileStorage())
        >>> path = await downloader.download_video("https://example.com/clip.mp4")
    """

    def __init__(
        self,
        storage: FileStorage,
        config: DownloadConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.storage = storage
        self.config = config or DownloadConfig()
        self.retry_policy = RetryPolicy.from_config(self.config)
        self._transport = transport
        self._sleep = sleep

    async def download_video(self, url: str, on_progress: ProgressCallback | None = None) -> Path:
        """Download a video, or return its cached copy."""
        path = self.storage.cached_video_path(cache_file_name(url, "video.mp4"))
        return await self._fetch(url, path, on_progress)

    async def download_image(self, url: str, on_progress: ProgressCallback | None = None) -> Path:
        """Download an image, or return its cached copy."""
        path = self.storage.cached_image_path(cache_file_name(url, "image.jpg"))
        return await self._fetch(url, path, on_progress)

    async def _fetch(self, url: str, path: Path, on_progress: ProgressCallback | None) -> Path:
        if path.exists():
            logger.debug(f"Cache hit for {url}: {path}")
            if on_progress:
                on_progress(1.0)
            return path

        attempts = 0
        part = path.with_suffix(path.suffix + ".part")
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_s,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                while True:
                    attempts += 1
                    start = time.perf_counter()
                    try:
                        await self._download_once(client, url, part, on_progress)
                    except (httpx.HTTPStatusError, httpx.RequestError) as e:
                        self.storage.delete_file(part)
                        status = (
                            e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
                        )
                        if attempts >= self.retry_policy.max_attempts:
                            raise DownloadError(
                                f"Download failed after {attempts} attempts: {e}",
                                url=url,
                                attempts=attempts,
                                status_code=status,
                                path=path,
                            ) from e
                        delay = self.retry_policy.compute_delay(attempts)
                        logger.warning(
                            f"Download attempt {attempts} for {url} failed ({e}); "
                            f"retrying in {delay:.1f}s"
                        )
                        await self._sleep(delay)
                        continue

                    # Only complete downloads ever reach the cache path
                    part.replace(path)
                    elapsed = time.perf_counter() - start
                    logger.info(f"Downloaded {url} -> {path} in {elapsed:.2f}s (attempt {attempts})")
                    if on_progress:
                        on_progress(1.0)
                    return path
        finally:
            self.storage.delete_file(part)

    async def _download_once(
        self,
        client: httpx.AsyncClient,
        url: str,
        path: Path,
        on_progress: ProgressCallback | None,
    ) -> None:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            total = int(response.headers.get("content-length") or 0)
            received = 0
            with path.open("wb") as fh:
                async for chunk in response.aiter_bytes(self.config.chunk_size):
                    fh.write(chunk)
                    received += len(chunk)
                    if total > 0 and on_progress:
                        on_progress(min(received / total, 1.0))
