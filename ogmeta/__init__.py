from .core import fetch_and_extract
from .errors import FetchError, InvalidUrlError, MetadataFetchError, OgMetaError, UpstreamPayloadError
from .extractor import extract_metadata
from .fetcher import fetch_page
from .models import ExtractionResult, ExtractOptions
from .parser import parse_metadata
from .urls import is_valid_url, resolve_url

__all__ = [
    "fetch_and_extract", "fetch_page", "extract_metadata", "parse_metadata",
    "ExtractionResult", "ExtractOptions",
    "is_valid_url", "resolve_url",
    "OgMetaError", "InvalidUrlError", "FetchError", "UpstreamPayloadError", "MetadataFetchError",
]
