from .request import UrlRequest
from .response import ErrorResponse, HealthResponse, InfoResponse, MediaResponse, RootResponse

__all__ = ["ErrorResponse", "HealthResponse", "InfoResponse", "MediaResponse", "RootResponse", "UrlRequest"]
