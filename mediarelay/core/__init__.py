from .errors import (
    DeliveryError,
    MediaRelayError,
    NotFoundError,
    ResourceCleanupError,
    ToolError,
    UpstreamFetchError,
    ValidationError,
)
from .security import UrlSanitizer, ValidatedUrl, require_url

__all__ = [
    "DeliveryError",
    "MediaRelayError",
    "NotFoundError",
    "ResourceCleanupError",
    "ToolError",
    "UpstreamFetchError",
    "UrlSanitizer",
    "ValidatedUrl",
    "ValidationError",
    "require_url",
]
