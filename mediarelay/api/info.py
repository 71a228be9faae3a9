from fastapi import APIRouter, Request, Depends
from mediarelay.api.deps import get_strategies
from mediarelay.core.logging import log_info, safe_url_for_log
from mediarelay.core.security import require_url
from mediarelay.models.request import UrlRequest
from mediarelay.models.response import InfoResponse
from mediarelay.services.delivery import DeliveryPipeline, DeliveryStrategies

router = APIRouter()

@router.post("/info", response_model=InfoResponse)
async def get_video_info(
    request: Request,
    video_request: UrlRequest,
    strategies: DeliveryStrategies = Depends(get_strategies)
):
    """Title, site and a direct download link"""
    url = require_url(video_request.url)
    log_info(request, f"Fetching info for {safe_url_for_log(url)}")

    return await DeliveryPipeline.run(url, strategies.info, failure_message="Failed")
