from fastapi import APIRouter

from mediarelay.core.state import state
from mediarelay.models.response import HealthResponse, RootResponse

router = APIRouter()


@router.get("/", response_model=RootResponse)
async def root():
    """Root endpoint"""
    return RootResponse(ok=True, message="ytdlp api running")


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight health check"""
    return HealthResponse(status="ok", ytdlp_version=state.ytdlp_version)
