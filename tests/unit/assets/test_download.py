"""Tests for remote asset downloads."""

from __future__ import annotations

import httpx
import pytest

from brandr.core.assets.download import AssetDownloader, cache_file_name, is_remote
from brandr.core.assets.retry import RetryPolicy
from brandr.core.assets.storage import FileStorage
from brandr.core.config.models import DownloadConfig
from brandr.core.errors import DownloadError

VIDEO_URL = "https://cdn.example.test/media/clip.mp4"


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _downloader(storage: FileStorage, handler, sleep: RecordingSleep) -> AssetDownloader:
    return AssetDownloader(storage, transport=httpx.MockTransport(handler), sleep=sleep)


def test_is_remote() -> None:
    """Only http(s) locations are remote."""
    assert is_remote("https://example.test/a.mp4")
    assert is_remote("http://example.test/a.jpg")
    assert not is_remote("/tmp/a.mp4")
    assert not is_remote("file:///tmp/a.mp4")


class TestCacheFileName:
    """Tests for cache file naming."""

    def test_keeps_known_extension(self) -> None:
        """A media file name in the URL is kept behind the hash."""
        name = cache_file_name(VIDEO_URL, "video.mp4")
        digest, _, rest = name.partition("_")
        assert len(digest) == 12
        assert rest == "clip.mp4"

    def test_falls_back_to_default(self) -> None:
        """URLs without a media extension use the default name."""
        name = cache_file_name("https://example.test/stream?id=7", "video.mp4")
        assert name.endswith("_video.mp4")

    def test_distinct_urls_do_not_collide(self) -> None:
        """Same file name on different hosts yields different cache names."""
        a = cache_file_name("https://a.test/clip.mp4", "video.mp4")
        b = cache_file_name("https://b.test/clip.mp4", "video.mp4")
        assert a != b


class TestRetryPolicy:
    """Tests for download backoff."""

    def test_doubling_delays(self) -> None:
        """Delays start at 1s and double."""
        policy = RetryPolicy()
        assert [policy.compute_delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]

    def test_capped(self) -> None:
        """Delays never exceed max_delay_s."""
        policy = RetryPolicy(base_delay_s=1.0, max_delay_s=3.0)
        assert policy.compute_delay(5) == 3.0

    def test_invalid_max_delay(self) -> None:
        """max_delay_s below base_delay_s is rejected."""
        with pytest.raises(ValueError):
            RetryPolicy(base_delay_s=2.0, max_delay_s=1.0)

    def test_from_config(self) -> None:
        policy = RetryPolicy.from_config(DownloadConfig(max_attempts=5, base_delay_s=0.5))
        assert policy.max_attempts == 5
        assert policy.compute_delay(2) == 1.0


class TestAssetDownloader:
    """Tests for AssetDownloader."""

    @pytest.mark.asyncio
    async def test_success(self, storage: FileStorage) -> None:
        """Downloaded bytes land in the video cache and progress ends at 1.0."""
        sleep = RecordingSleep()
        progress: list[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"x" * 100)

        path = await _downloader(storage, handler, sleep).download_video(VIDEO_URL, progress.append)
        assert path.parent == storage.cache_dir / "videos"
        assert path.read_bytes() == b"x" * 100
        assert progress[-1] == 1.0
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_image_cache(self, storage: FileStorage) -> None:
        """Images are cached under images/ with the default name."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"img")

        path = await _downloader(storage, handler, RecordingSleep()).download_image(
            "https://example.test/avatar"
        )
        assert path.parent == storage.cache_dir / "images"
        assert path.name.endswith("_image.jpg")

    @pytest.mark.asyncio
    async def test_retry_then_success(self, storage: FileStorage) -> None:
        """Two server errors are retried with 1s then 2s backoff."""
        calls = {"n": 0}
        sleep = RecordingSleep()

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] < 3:
                return httpx.Response(500, text="boom")
            return httpx.Response(200, content=b"ok")

        path = await _downloader(storage, handler, sleep).download_video(VIDEO_URL)
        assert calls["n"] == 3
        assert sleep.delays == [1.0, 2.0]
        assert path.read_bytes() == b"ok"

    @pytest.mark.asyncio
    async def test_connection_errors_retried(self, storage: FileStorage) -> None:
        """Transport errors are retried like status errors."""
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, content=b"ok")

        await _downloader(storage, handler, RecordingSleep()).download_video(VIDEO_URL)
        assert calls["n"] == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_three_attempts(self, storage: FileStorage) -> None:
        """Persistent failures raise DownloadError and leave no partial file."""
        sleep = RecordingSleep()

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="missing")

        with pytest.raises(DownloadError) as exc_info:
            await _downloader(storage, handler, sleep).download_video(VIDEO_URL)

        err = exc_info.value
        assert err.attempts == 3
        assert err.status_code == 404
        assert err.url == VIDEO_URL
        assert sleep.delays == [1.0, 2.0]
        assert not (storage.cache_dir / "videos" / cache_file_name(VIDEO_URL, "video.mp4")).exists()
        assert list((storage.cache_dir / "videos").glob("*.part")) == []

    @pytest.mark.asyncio
    async def test_cache_hit_skips_request(self, storage: FileStorage) -> None:
        """A cached file is returned without touching the network."""
        cached = storage.cached_video_path(cache_file_name(VIDEO_URL, "video.mp4"))
        cached.write_bytes(b"cached")
        progress: list[float] = []

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        path = await _downloader(storage, handler, RecordingSleep()).download_video(
            VIDEO_URL, progress.append
        )
        assert path == cached
        assert progress == [1.0]

    @pytest.mark.asyncio
    async def test_interrupted_write_is_not_cached(self, storage: FileStorage) -> None:
        """A download that dies mid-write leaves nothing behind and is fetched again."""
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            return httpx.Response(200, content=b"x" * 100)

        def disk_full(fraction: float) -> None:
            raise OSError(28, "No space left on device")

        downloader = AssetDownloader(
            storage,
            DownloadConfig(chunk_size=10),
            transport=httpx.MockTransport(handler),
            sleep=RecordingSleep(),
        )
        with pytest.raises(OSError):
            await downloader.download_video(VIDEO_URL, disk_full)

        videos = storage.cache_dir / "videos"
        assert not (videos / cache_file_name(VIDEO_URL, "video.mp4")).exists()
        assert list(videos.glob("*.part")) == []

        path = await downloader.download_video(VIDEO_URL)
        assert calls["n"] == 2
        assert path.read_bytes() == b"x" * 100
