from urllib.parse import urlparse

import httpx

from mediarelay.core.errors import UpstreamFetchError

UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


def image_headers(target_url: str) -> dict:
    parsed = urlparse(target_url)
    return {
        "User-Agent": UA,
        "Accept": "image/avif,image/webp,image/*,*/*;q=0.8",
        "Referer": f"{parsed.scheme}://{parsed.netloc}/",
    }


def extension_for_content_type(content_type: str) -> str:
    if "png" in content_type:
        return "png"
    if "jpeg" in content_type:
        return "jpg"
    if "webp" in content_type:
        return "webp"
    return "img"


class ImageFetcher:
    """Fetch remote images through the shared httpx client (redirects followed)"""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch(self, url: str) -> bytes:
        """Whole body in memory. Raises UpstreamFetchError on non-2xx."""
        resp = await self.client.get(url, headers=image_headers(url), follow_redirects=True)
        if not resp.is_success:
            raise UpstreamFetchError("Failed fetching image", upstream_status=resp.status_code)
        return resp.content

    async def open(self, url: str) -> httpx.Response:
        """
        Streaming variant for the proxy endpoint.
        The caller owns the returned response and must aclose() it.
        """
        req = self.client.build_request("GET", url, headers=image_headers(url))
        resp = await self.client.send(req, stream=True, follow_redirects=True)
        if not resp.is_success:
            await resp.aclose()
            raise UpstreamFetchError("Failed fetching image", upstream_status=resp.status_code)
        return resp
