import logging
import time

from fastapi import APIRouter

from ogmeta.core import fetch_and_extract
from ogmeta.models import NAMESPACES, ExtractOptions
from .schemas import ErrorResponse, HealthResponse, MetadataRequest, MetadataResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/metadata",
    response_model=MetadataResponse,
    response_model_exclude_none=True,
    responses={502: {"model": ErrorResponse}},
    summary="Fetch a URL and extract its link-preview metadata",
)
async def get_metadata(request: MetadataRequest) -> MetadataResponse:
    """
    Returns standard, Open Graph and Twitter Card metadata for a URL.

    - `include_all_meta` adds every other meta tag and all `<link>` tags under `other`.
    - `include_html` / `include_response_headers` attach the raw page and a few response headers.
    - Namespaces with nothing in them are left out of the response.
    - Fetch failures come back as 502 (see the app's MetadataFetchError handler).
    """
    options = ExtractOptions(
        include_all_meta=request.include_all_meta,
        include_html=request.include_html,
        include_response_headers=request.include_response_headers,
        timeout=request.timeout,
        fetch_options={"headers": request.headers} if request.headers else {},
    )

    start = time.monotonic()
    result = await fetch_and_extract(request.url, options)
    data = result.to_dict()

    logger.info(
        "Metadata for %s: %s (%dms)",
        request.url,
        ", ".join(ns for ns in NAMESPACES if ns in data) or "nothing found",
        int((time.monotonic() - start) * 1000),
    )
    return MetadataResponse(url=request.url, **data)


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")
