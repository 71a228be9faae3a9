import httpx
from fastapi import Depends

from mediarelay.infra.http import get_http_client
from mediarelay.services.delivery import DeliveryStrategies
from mediarelay.services.images import ImageFetcher
from mediarelay.services.ytdlp import YtDlp


def get_ytdlp() -> YtDlp:
    return YtDlp()


def get_image_fetcher(client: httpx.AsyncClient = Depends(get_http_client)) -> ImageFetcher:
    return ImageFetcher(client)


def get_strategies(
    tool: YtDlp = Depends(get_ytdlp),
    fetcher: ImageFetcher = Depends(get_image_fetcher),
) -> DeliveryStrategies:
    return DeliveryStrategies(tool, fetcher)
