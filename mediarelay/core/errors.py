from typing import Optional


class MediaRelayError(Exception):
    """Base error carrying the HTTP status it maps to"""
    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ValidationError(MediaRelayError):
    """Bad or missing caller input"""
    status_code = 400


class NotFoundError(MediaRelayError):
    status_code = 404


class ToolError(MediaRelayError):
    """yt-dlp timed out, exited non-zero, produced too much output or unparsable JSON"""
    status_code = 500


class DeliveryError(MediaRelayError):
    """A delivery flow failed; message is the route-level summary"""
    status_code = 500


class UpstreamFetchError(MediaRelayError):
    """A remote media host answered with a non-success status"""
    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None, details: Optional[str] = None):
        super().__init__(message, details)
        self.upstream_status = upstream_status


class ResourceCleanupError(MediaRelayError):
    """Temp file or directory removal failed. Logged, never surfaced."""
