from typing import Optional
from fastapi import APIRouter, Request, Depends, Query
from mediarelay.api.deps import get_strategies
from mediarelay.core.logging import log_info, safe_url_for_log
from mediarelay.core.security import require_url
from mediarelay.services.delivery import DeliveryPipeline, DeliveryStrategies

router = APIRouter()

@router.get("/download")
async def download_video(
    request: Request,
    url: Optional[str] = Query(None, description="Media page URL"),
    strategies: DeliveryStrategies = Depends(get_strategies)
):
    """Download to a temp file, then stream it as video.mp4"""
    page_url = require_url(url)
    log_info(request, f"Starting download for {safe_url_for_log(page_url)}")

    return await DeliveryPipeline.run(page_url, strategies.download, failure_message="Download failed")
