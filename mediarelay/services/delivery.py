import logging
import os
import tempfile
from contextlib import ExitStack
from typing import AsyncIterator, Awaitable, Callable
from urllib.parse import quote

import aiofiles
from fastapi.responses import RedirectResponse, Response, StreamingResponse
from starlette.types import Receive, Scope, Send

from mediarelay.config.settings import config
from mediarelay.core.errors import DeliveryError, NotFoundError, ToolError, ValidationError
from mediarelay.core.security import ValidatedUrl
from mediarelay.models.response import InfoResponse, MediaResponse
from mediarelay.services.archive import ZipAggregator
from mediarelay.services.credentials import CookieContext, CredentialProvisioner
from mediarelay.services.images import ImageFetcher
from mediarelay.services.media import MediaTreeCollector, is_image_url
from mediarelay.services.ytdlp import YtDlp
from mediarelay.utils.tempfiles import remove_dir, remove_file

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
DOWNLOAD_FILENAME = "video.mp4"
ZIP_FILENAME = "x-images.zip"

Deliver = Callable[[ValidatedUrl, CookieContext, ExitStack], Awaitable[Response]]


def attachment_headers(filename: str) -> dict:
    return {
        'Content-Disposition': f"attachment; filename=\"{filename}\"; filename*=UTF-8''{quote(filename)}",
        'X-Content-Type-Options': 'nosniff',
        'Cache-Control': 'no-cache',
    }


class CleanupStreamingResponse(StreamingResponse):
    """
    StreamingResponse that runs ``cleanup`` however sending ends.

    Starlette skips ``background`` when the client goes away (ClientDisconnect
    on ASGI 2.4 servers) and may leave the body generator suspended at a
    yield. Here the generator is closed and the cleanup runs in a finally.
    """

    def __init__(self, content: AsyncIterator[bytes], cleanup: Callable[[], None], **kwargs):
        super().__init__(content, **kwargs)
        self.cleanup = cleanup

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            try:
                await self.body_iterator.aclose()
            finally:
                self.cleanup()


class DeliveryPipeline:
    """
    Validate -> Resolve -> Deliver -> Cleanup, shared by every yt-dlp route.

    ``deliver`` receives the cookie context and the request's ExitStack. It
    registers whatever temp artifacts it creates on the stack; the stack
    already holds the cookie release, so LIFO order releases artifacts
    first and cookies last. Non-streaming responses are cleaned up before
    returning. Streaming strategies return a CleanupStreamingResponse bound
    to the stack; their body generators also close it when they finish (a
    closed ExitStack is empty, so the second close is a no-op).
    """

    @staticmethod
    async def run(url: ValidatedUrl, deliver: Deliver, failure_message: str) -> Response:
        stack = ExitStack()
        try:
            cookies = CredentialProvisioner.provision(config.cookies)
            stack.callback(cookies.release)
            response = await deliver(url, cookies, stack)
        except (ValidationError, NotFoundError, DeliveryError):
            stack.close()
            raise
        except ToolError as e:
            stack.close()
            raise DeliveryError(failure_message, details=str(e))
        except Exception as e:
            stack.close()
            logger.exception("%s", failure_message)
            raise DeliveryError(failure_message, details=str(e))
        except BaseException:
            stack.close()
            raise

        if not isinstance(response, CleanupStreamingResponse):
            stack.close()
        return response


class DeliveryStrategies:
    """The three response-producing flows plus the JSON metadata flows"""

    def __init__(self, tool: YtDlp, fetcher: ImageFetcher):
        self.tool = tool
        self.fetcher = fetcher

    async def redirect(self, url: ValidatedUrl, cookies: CookieContext, stack: ExitStack) -> Response:
        direct = await self.tool.resolve_direct_url(url, cookies.args)
        return RedirectResponse(direct, status_code=302)

    async def download(self, url: ValidatedUrl, cookies: CookieContext, stack: ExitStack) -> Response:
        workdir = tempfile.mkdtemp(prefix="ytdlp-")
        stack.callback(remove_dir, workdir)
        output_path = os.path.join(workdir, DOWNLOAD_FILENAME)
        stack.callback(remove_file, output_path)

        await self.tool.download(url, output_path, cookies.args)

        if not os.path.isfile(output_path):
            raise ToolError("Output file not found after download")
        file_size = os.path.getsize(output_path)
        logger.info("Download finished, streaming %.1f MB", file_size / 1024 / 1024)

        async def generate() -> AsyncIterator[bytes]:
            try:
                async with aiofiles.open(output_path, 'rb') as f:
                    while True:
                        chunk = await f.read(CHUNK_SIZE)
                        if not chunk:
                            break
                        yield chunk
            finally:
                stack.close()

        headers = attachment_headers(DOWNLOAD_FILENAME)
        headers['Content-Length'] = str(file_size)
        return CleanupStreamingResponse(generate(), cleanup=stack.close, media_type="video/mp4", headers=headers)

    async def zip_images(self, url: ValidatedUrl, cookies: CookieContext, stack: ExitStack) -> Response:
        document = await self.tool.extract_metadata(url, cookies.args)
        media = MediaTreeCollector.collect(document)
        candidates = [u for u in media.images if is_image_url(u)][: config.limits.max_zip_images]

        if not candidates:
            raise NotFoundError("No images found in this post.")

        logger.info("Zipping %d image(s)", len(candidates))
        aggregator = ZipAggregator(self.fetcher)
        return CleanupStreamingResponse(
            aggregator.stream(candidates, on_close=stack.close),
            cleanup=stack.close,
            media_type="application/zip",
            headers=attachment_headers(ZIP_FILENAME)
        )

    async def info(self, url: ValidatedUrl, cookies: CookieContext, stack: ExitStack) -> Response:
        document = await self.tool.extract_metadata(url, cookies.args)
        direct = await self.tool.direct_urls(url, cookies.args)
        body = InfoResponse(
            title=document.get("title"),
            site=document.get("extractor"),
            download=direct
        )
        return Response(content=body.model_dump_json(), media_type="application/json")

    async def media(self, url: ValidatedUrl, cookies: CookieContext, stack: ExitStack) -> Response:
        document = await self.tool.extract_metadata(url, cookies.args)
        media = MediaTreeCollector.collect(document)
        body = MediaResponse(
            title=document.get("title"),
            extractor=document.get("extractor"),
            images=media.images,
            videos=media.videos[: config.limits.max_listed_videos]
        )
        return Response(content=body.model_dump_json(), media_type="application/json")
