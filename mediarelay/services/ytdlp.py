from typing import Any, Dict, List, Optional, NamedTuple, Sequence
import asyncio
import json
import logging
from mediarelay.config.settings import config
from mediarelay.core.errors import ToolError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024
STDERR_TAIL_CHARS = 500

class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes

class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def run(
        cmd: List[str],
        timeout: float,
        max_output_bytes: Optional[int] = None
    ) -> CompletedProcess:
        """
        Run subprocess with timeout, output cap and proper cleanup.
        The process is killed and reaped on every failure path.
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            stdin=asyncio.subprocess.DEVNULL
        )

        try:
            return await asyncio.wait_for(
                SubprocessExecutor._collect(process, max_output_bytes),
                timeout=timeout
            )

        except asyncio.TimeoutError:
            await SubprocessExecutor._kill(process)
            raise ToolError(f"{cmd[0]} timed out after {timeout:g}s")
        except BaseException:
            await SubprocessExecutor._kill(process)
            raise

    @staticmethod
    async def _collect(
        process: asyncio.subprocess.Process,
        max_output_bytes: Optional[int]
    ) -> CompletedProcess:
        """Drain stdout and stderr together, failing once their combined size passes the cap"""
        total = 0
        stdout = bytearray()
        stderr = bytearray()

        async def pump(stream: asyncio.StreamReader, buffer: bytearray) -> None:
            nonlocal total
            while True:
                chunk = await stream.read(READ_CHUNK_SIZE)
                if not chunk:
                    return
                total += len(chunk)
                if max_output_bytes is not None and total > max_output_bytes:
                    raise ToolError(f"Output exceeded {max_output_bytes} bytes")
                buffer.extend(chunk)

        readers = [
            asyncio.ensure_future(pump(process.stdout, stdout)),
            asyncio.ensure_future(pump(process.stderr, stderr)),
        ]
        try:
            await asyncio.gather(*readers)
        finally:
            for reader in readers:
                reader.cancel()
            await asyncio.gather(*readers, return_exceptions=True)

        returncode = await process.wait()
        return CompletedProcess(
            returncode=returncode,
            stdout=bytes(stdout),
            stderr=bytes(stderr)
        )

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()

class YTDLPCommandBuilder:
    """Build yt-dlp argument vectors (binary excluded)"""

    @staticmethod
    def _common_args(cookie_args: Sequence[str]) -> List[str]:
        args = list(cookie_args)
        args.extend(['--socket-timeout', str(config.ytdlp.socket_timeout)])

        if config.ytdlp.js_runtime:
            args.extend(['--js-runtimes', config.ytdlp.js_runtime])

        return args

    @staticmethod
    def build_metadata_command(url: str, cookie_args: Sequence[str] = ()) -> List[str]:
        """Build command for dumping the full metadata document"""
        args = YTDLPCommandBuilder._common_args(cookie_args)
        args.extend(['-J', '--no-warnings'])
        args.append(url)
        return args

    @staticmethod
    def build_direct_url_command(url: str, cookie_args: Sequence[str] = ()) -> List[str]:
        """Build command for fetching direct media URL(s)"""
        args = YTDLPCommandBuilder._common_args(cookie_args)
        args.extend(['-f', config.ytdlp.format, '-g', '--no-warnings'])
        args.append(url)
        return args

    @staticmethod
    def build_download_command(
        url: str,
        output_path: str,
        cookie_args: Sequence[str] = ()
    ) -> List[str]:
        """Build command for downloading a merged single file"""
        args = YTDLPCommandBuilder._common_args(cookie_args)
        args.extend([
            '-f', config.ytdlp.format,
            '--merge-output-format', config.ytdlp.merge_output_format,
            '-o', output_path,
            '--no-progress',
            '--quiet',
        ])
        args.append(url)
        return args


class YtDlp:
    """Async facade over the yt-dlp binary"""

    def __init__(self, binary: Optional[str] = None):
        self.binary = binary or config.ytdlp.binary

    async def invoke(
        self,
        args: List[str],
        timeout: float,
        max_output_bytes: Optional[int] = None
    ) -> str:
        """Run yt-dlp once. Raises ToolError on timeout, oversize output or non-zero exit."""
        logger.debug("Running %s with %d args (timeout=%gs)", self.binary, len(args), timeout)
        result = await SubprocessExecutor.run(
            [self.binary, *args],
            timeout=timeout,
            max_output_bytes=max_output_bytes
        )

        if result.returncode != 0:
            error_msg = result.stderr.decode(errors="replace").strip()
            raise ToolError(
                f"yt-dlp exited with code {result.returncode}",
                details=error_msg[-STDERR_TAIL_CHARS:] or None
            )

        return result.stdout.decode(errors="replace").strip()

    async def extract_metadata(self, url: str, cookie_args: Sequence[str] = ()) -> Dict[str, Any]:
        output = await self.invoke(
            YTDLPCommandBuilder.build_metadata_command(url, cookie_args),
            timeout=config.limits.metadata_timeout,
            max_output_bytes=config.limits.max_output_bytes
        )

        try:
            document = json.loads(output)
        except json.JSONDecodeError as e:
            raise ToolError("Failed to parse yt-dlp output", details=str(e))

        if not isinstance(document, dict):
            raise ToolError("Unexpected yt-dlp output", details=f"expected a JSON object, got {type(document).__name__}")

        return document

    async def direct_urls(self, url: str, cookie_args: Sequence[str] = ()) -> str:
        """Everything -g printed, one URL per line (video and audio apart when merged)"""
        output = await self.invoke(
            YTDLPCommandBuilder.build_direct_url_command(url, cookie_args),
            timeout=config.limits.direct_url_timeout,
            max_output_bytes=1024 * 1024
        )
        if not output:
            raise ToolError("No direct URL found")
        return output

    async def resolve_direct_url(self, url: str, cookie_args: Sequence[str] = ()) -> str:
        """First direct URL, the video stream when formats are split"""
        output = await self.direct_urls(url, cookie_args)
        return output.splitlines()[0].strip()

    async def download(self, url: str, output_path: str, cookie_args: Sequence[str] = ()) -> None:
        await self.invoke(
            YTDLPCommandBuilder.build_download_command(url, output_path, cookie_args),
            timeout=config.limits.download_timeout
        )

    async def version(self) -> str:
        return await self.invoke(['--version'], timeout=10.0, max_output_bytes=64 * 1024)
