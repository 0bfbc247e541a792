import logging
from typing import Optional

from .errors import InvalidUrlError, MetadataFetchError
from .extractor import extract_metadata
from .fetcher import fetch_page
from .models import RESPONSE_HEADERS, ExtractOptions, ExtractionResult
from .urls import is_valid_url

logger = logging.getLogger(__name__)


async def fetch_and_extract(url: str, options: Optional[ExtractOptions] = None) -> ExtractionResult:
    """
    Top-level entry point. Fetches a page and extracts its metadata.
    Every failure comes out as MetadataFetchError, with the original error chained.
    """
    options = options or ExtractOptions()

    try:
        if not is_valid_url(url):
            raise InvalidUrlError("Invalid URL provided")

        page = await fetch_page(url, fetch_options=options.fetch_options, timeout=options.timeout)

        # relative URLs resolve against what was asked for, not where redirects ended
        result = extract_metadata(page.contents, base_url=url, options=options)

        if options.include_html:
            result.html = page.contents

        if options.include_response_headers:
            result.headers = {
                name: page.headers[name]
                for name in RESPONSE_HEADERS
                if page.headers.get(name) is not None
            }
    except Exception as exc:
        logger.error("Metadata fetch failed for %s: %s", url, exc)
        raise MetadataFetchError(url, exc) from exc

    return result
