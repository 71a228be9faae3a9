from typing import Optional
import httpx
from fastapi import APIRouter, Request, Depends, Query
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from mediarelay.api.deps import get_image_fetcher
from mediarelay.core.errors import DeliveryError
from mediarelay.core.logging import log_error, log_info, safe_url_for_log
from mediarelay.core.security import require_url
from mediarelay.services.images import ImageFetcher, extension_for_content_type

router = APIRouter()

@router.get("/image")
async def proxy_image(
    request: Request,
    url: Optional[str] = Query(None, description="Image URL"),
    fetcher: ImageFetcher = Depends(get_image_fetcher)
):
    """Proxy a single image as an attachment"""
    image_url = require_url(url, message="Bad image url")
    log_info(request, f"Proxying image {safe_url_for_log(image_url)}")

    try:
        resp = await fetcher.open(image_url)
    except httpx.HTTPError as e:
        log_error(request, f"Image fetch error: {str(e)}")
        raise DeliveryError("image download failed", details=str(e))

    content_type = resp.headers.get("content-type") or "application/octet-stream"
    extension = extension_for_content_type(content_type)
    headers = {
        "Content-Disposition": f'attachment; filename="image.{extension}"',
        "X-Content-Type-Options": "nosniff",
    }

    return StreamingResponse(
        resp.aiter_bytes(),
        media_type=content_type,
        headers=headers,
        background=BackgroundTask(resp.aclose)
    )
