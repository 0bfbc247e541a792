import logging
import os
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ogmeta.errors import MetadataFetchError
from .routes import router

LOG_LEVEL = os.getenv("OGMETA_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Link Preview Metadata",
    description=(
        "Given any URL, returns its standard meta tags, Open Graph and Twitter Card "
        "tags, canonical URL and favicon, grouped by namespace."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.middleware("http")
async def timing_header(request: Request, call_next):
    # upstream fetches dominate latency, so expose it to clients
    start = time.monotonic()
    response = await call_next(request)
    elapsed_ms = int((time.monotonic() - start) * 1000)
    response.headers["X-Elapsed-Ms"] = str(elapsed_ms)
    logger.debug("%s %s -> %d (%dms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.exception_handler(MetadataFetchError)
async def upstream_failure_handler(request: Request, exc: MetadataFetchError):
    # the target page or the relay failed; the request itself was fine
    logger.warning("Upstream failure for %s: %r", exc.url, exc.original_error)
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "code": "upstream_error", "url": exc.url},
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred.", "code": "internal_error"},
    )


app.include_router(router)
