import json
import os
import tempfile
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from mediarelay.api.deps import get_ytdlp
from mediarelay.core.errors import ToolError
from mediarelay.infra.http import get_http_client
from mediarelay.main import app
from mediarelay.services.ytdlp import YtDlp


class FakeYtDlp(YtDlp):
    """
    yt-dlp stand-in. Only ``invoke`` is replaced, so command building and
    output parsing in YtDlp still run.
    """

    def __init__(
        self,
        metadata: Optional[Dict[str, Any]] = None,
        direct_url: str = "https://cdn.example.com/video.mp4",
        download_payload: bytes = b"fake-mp4-bytes",
        fail: bool = False,
        raw_output: Optional[str] = None,
    ):
        super().__init__(binary="yt-dlp")
        self.metadata = metadata if metadata is not None else {"title": "Clip", "extractor": "generic"}
        self.direct_url = direct_url
        self.download_payload = download_payload
        self.fail = fail
        self.raw_output = raw_output
        self.calls: List[List[str]] = []
        self.output_path: Optional[str] = None
        self.cookie_path: Optional[str] = None
        self.cookie_contents: Optional[str] = None

    async def invoke(self, args, timeout, max_output_bytes=None):
        self.calls.append(list(args))

        if "--cookies" in args:
            self.cookie_path = args[args.index("--cookies") + 1]
            if os.path.exists(self.cookie_path):
                with open(self.cookie_path, encoding="utf-8") as f:
                    self.cookie_contents = f.read()

        if "-o" in args:
            self.output_path = args[args.index("-o") + 1]
            with open(self.output_path, "wb") as f:
                f.write(self.download_payload)

        if self.fail:
            raise ToolError("yt-dlp exited with code 1", details="ERROR: Unsupported URL")

        if self.raw_output is not None:
            return self.raw_output
        if "-J" in args:
            return json.dumps(self.metadata)
        if "-g" in args:
            return self.direct_url
        return ""


def image_host(failing: Optional[set] = None, calls: Optional[list] = None) -> Callable[[httpx.Request], httpx.Response]:
    """MockTransport handler serving fake images; URLs in ``failing`` get a 404"""
    failing = failing or set()

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if calls is not None:
            calls.append(url)
        if url in failing:
            return httpx.Response(404, content=b"missing")
        content_type = "image/png" if url.endswith(".png") else "image/jpeg"
        return httpx.Response(200, headers={"Content-Type": content_type}, content=f"img:{url}".encode())

    return handler


@pytest.fixture(autouse=True)
def isolated_tempdir(tmp_path, monkeypatch):
    """Send every temp artifact into the test's own directory"""
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    return tmp_path


@pytest.fixture
def make_ytdlp():
    return FakeYtDlp


@pytest.fixture
def make_image_host():
    return image_host


@pytest.fixture
def use_fakes():
    """Install a FakeYtDlp and an httpx MockTransport handler as app dependencies"""
    def install(tool: FakeYtDlp, handler: Optional[Callable] = None) -> None:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler or image_host()),
            follow_redirects=True,
        )
        app.dependency_overrides[get_ytdlp] = lambda: tool
        app.dependency_overrides[get_http_client] = lambda: http_client

    yield install
    app.dependency_overrides.clear()
