from typing import List, Optional

from pydantic import BaseModel


class InfoResponse(BaseModel):
    """Title, extractor and a direct download link"""
    title: Optional[str] = None
    site: Optional[str] = None
    download: str


class MediaResponse(BaseModel):
    """Every image and (capped) video URL found in the page metadata"""
    title: Optional[str] = None
    extractor: Optional[str] = None
    images: List[str] = []
    videos: List[str] = []


class RootResponse(BaseModel):
    ok: bool = True
    message: str


class HealthResponse(BaseModel):
    status: str
    ytdlp_version: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    status: Optional[int] = None
