import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from video_segmenter.api.routes.video import router as video_router
from video_segmenter.config import get_settings
from video_segmenter.segmentation.errors import SegmenterError

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="Video Segmenter API",
    description="Split stored videos into fixed-duration segments with ffmpeg",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(video_router)

if settings.uses_default_api_key:
    logger.warning("API_KEY is not set; using the insecure development default")


@app.middleware("http")
async def log_requests(request: Request, call_next):  # type: ignore[no-untyped-def]
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


@app.exception_handler(SegmenterError)
async def segmenter_error_handler(request: Request, exc: SegmenterError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed bodies are client errors: 400 with the first field-specific message
    errors = exc.errors()
    if errors and errors[0].get("type") == "json_invalid":
        detail = "Request body is not valid JSON"
    elif errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=400, content={"detail": detail})


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
