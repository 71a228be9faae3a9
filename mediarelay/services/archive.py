import logging
import zipfile
from typing import AsyncIterator, Callable, List, Optional

import httpx

from mediarelay.core.errors import UpstreamFetchError
from mediarelay.services.images import ImageFetcher
from mediarelay.services.media import guess_extension

logger = logging.getLogger(__name__)


class _ZipSink:
    """
    Write-only, non-seekable target for ZipFile.
    ZipFile falls back to data descriptors when it cannot seek, so every
    byte written here is final and can go straight to the client.
    """

    def __init__(self):
        self._buffer = bytearray()

    def write(self, data) -> int:
        self._buffer.extend(data)
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = bytes(self._buffer)
        self._buffer.clear()
        return data


class ZipAggregator:
    """Stream a zip of remote images, skipping the ones that fail to fetch"""

    def __init__(self, fetcher: ImageFetcher):
        self.fetcher = fetcher

    async def stream(
        self,
        urls: List[str],
        on_close: Optional[Callable[[], None]] = None
    ) -> AsyncIterator[bytes]:
        """
        Fetch ``urls`` in order and yield archive bytes as entries are added.
        Entries are named image-<n>.<ext>, n counting successful fetches only.
        ``on_close`` runs once the archive is finalized or the stream dies.
        """
        sink = _ZipSink()
        index = 1
        try:
            # Images are already compressed; storing keeps the event loop free
            with zipfile.ZipFile(sink, mode="w", compression=zipfile.ZIP_STORED) as archive:
                for url in urls:
                    try:
                        payload = await self.fetcher.fetch(url)
                    except UpstreamFetchError as e:
                        logger.warning("Skipping image %s (status %s)", url, e.upstream_status)
                        continue
                    except httpx.HTTPError as e:
                        logger.warning("Skipping image %s (%s)", url, e)
                        continue

                    archive.writestr(f"image-{index}.{guess_extension(url)}", payload)
                    index += 1

                    chunk = sink.drain()
                    if chunk:
                        yield chunk

            logger.info("Zip finalized with %d of %d images", index - 1, len(urls))
            tail = sink.drain()
            if tail:
                yield tail
        finally:
            if on_close is not None:
                on_close()
