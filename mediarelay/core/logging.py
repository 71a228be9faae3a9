from fastapi import Request
import logging
from typing import Any
from urllib.parse import urlparse

from rich.logging import RichHandler

from mediarelay.config.settings import LoggingConfig

logger = logging.getLogger("mediarelay")

def setup_logging(settings: LoggingConfig) -> None:
    """Configure root logging once at startup"""
    if settings.enable_rich:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.format))

    logging.basicConfig(level=settings.level, handlers=[handler], force=True)

def log_with_context(
    request: Request,
    level: int,
    message: str,
    **kwargs: Any
) -> None:
    """
    Log with request context.
    Automatically includes request_id for tracing.
    """
    request_id = getattr(request.state, "request_id", "unknown")
    extra = {
        "request_id": request_id,
        **kwargs
    }
    logger.log(level, f"[{request_id}] {message}", extra=extra)

def log_info(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.INFO, message, **kwargs)

def log_error(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.ERROR, message, **kwargs)

def log_warning(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.WARNING, message, **kwargs)

def log_debug(request: Request, message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.DEBUG, message, **kwargs)

def safe_url_for_log(url: str) -> str:
    """Strip query strings (signed CDN tokens) before logging"""
    try:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    except ValueError:
        return "invalid_url"
