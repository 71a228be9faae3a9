from typing import Optional
from fastapi import APIRouter, Request, Depends, Query
from mediarelay.api.deps import get_strategies
from mediarelay.core.logging import log_info, safe_url_for_log
from mediarelay.core.security import require_url
from mediarelay.models.request import UrlRequest
from mediarelay.models.response import MediaResponse
from mediarelay.services.delivery import DeliveryPipeline, DeliveryStrategies

router = APIRouter()

@router.post("/media", response_model=MediaResponse)
async def list_media(
    request: Request,
    media_request: UrlRequest,
    strategies: DeliveryStrategies = Depends(get_strategies)
):
    """List image and video URLs found on a page"""
    url = require_url(media_request.url)
    log_info(request, f"Collecting media for {safe_url_for_log(url)}")

    return await DeliveryPipeline.run(url, strategies.media, failure_message="Media extraction failed")

@router.get("/x-images")
async def zip_images(
    request: Request,
    post: Optional[str] = Query(None, description="Post URL"),
    strategies: DeliveryStrategies = Depends(get_strategies)
):
    """Every image of a post as x-images.zip"""
    url = require_url(post, message="Bad post url")
    log_info(request, f"Zipping images for {safe_url_for_log(url)}")

    return await DeliveryPipeline.run(url, strategies.zip_images, failure_message="zip failed")
