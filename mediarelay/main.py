import logging
import uuid

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mediarelay.api import download, health, image, info, media, stream
from mediarelay.config.settings import config
from mediarelay.core.errors import MediaRelayError, ToolError, UpstreamFetchError, ValidationError
from mediarelay.core.logging import log_error, log_warning, setup_logging
from mediarelay.core.state import state
from mediarelay.infra.http import close_http_client, init_http_client
from mediarelay.models.response import ErrorResponse
from mediarelay.services.ytdlp import YtDlp

logger = logging.getLogger(__name__)

app = FastAPI(
    title=config.api.title,
    description=config.api.description,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(info.router, tags=["Info"])
app.include_router(stream.router, tags=["Stream"])
app.include_router(download.router, tags=["Download"])
app.include_router(media.router, tags=["Media"])
app.include_router(image.router, tags=["Image"])


def error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Attach a request id and reject oversized JSON bodies"""
    request.state.request_id = uuid.uuid4().hex[:12]

    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > config.limits.max_body_bytes:
        response = error_response(413, ErrorResponse(error="Request body too large"))
    else:
        response = await call_next(request)

    response.headers["X-Request-ID"] = request.state.request_id
    return response


@app.exception_handler(MediaRelayError)
async def media_relay_error_handler(request: Request, exc: MediaRelayError):
    body = ErrorResponse(error=exc.message)
    if isinstance(exc, (ToolError, UpstreamFetchError)) or exc.status_code >= 500:
        body.details = exc.details
    if isinstance(exc, UpstreamFetchError):
        body.status = exc.upstream_status

    if exc.status_code >= 500:
        log_error(request, str(exc))
    elif not isinstance(exc, ValidationError):
        log_warning(request, str(exc))

    return error_response(exc.status_code, body)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    # Malformed JSON or a body that is not an object
    return error_response(400, ErrorResponse(error="Bad URL"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("[%s] Unhandled error: %s", getattr(request.state, "request_id", "unknown"), exc, exc_info=exc)
    return error_response(500, ErrorResponse(error="Internal server error", details=str(exc)))


@app.on_event("startup")
async def startup_event():
    setup_logging(config.logging)
    await init_http_client()

    try:
        state.ytdlp_version = await YtDlp().version()
        logger.info("yt-dlp %s", state.ytdlp_version)
    except (ToolError, OSError) as e:
        logger.warning("yt-dlp not usable: %s", e)


@app.on_event("shutdown")
async def shutdown_event():
    await close_http_client()


def run() -> None:
    """Console entry point"""
    uvicorn.run(app, host=config.host, port=config.port)
