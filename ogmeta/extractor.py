import logging
from typing import Optional

from bs4 import BeautifulSoup

from .models import Document, ExtractOptions, ExtractionResult
from .parser import iter_tags, make_soup, parse_metadata
from .urls import resolve_url

logger = logging.getLogger(__name__)

_CANONICAL_RELS = ("canonical",)
_FAVICON_RELS = ("icon", "shortcut icon")


def _first_link_href(soup: BeautifulSoup, rels: tuple) -> Optional[str]:
    """href of the first <link> whose rel is one of `rels` (case-insensitive)."""
    for attrs in iter_tags(soup, "link"):
        rel = " ".join((attrs.get("rel") or "").lower().split())
        href = attrs.get("href")
        if rel in rels and href:
            return href
    return None


def _page_title(soup: BeautifulSoup) -> Optional[str]:
    if soup.title is None:
        return None
    return soup.title.get_text().strip() or None


def _augment(metadata: dict, soup: BeautifulSoup, document: Document) -> None:
    """
    Fill in what the meta scan can't see: <title>, canonical link and favicon.
    Canonical is stored as written; favicon is made absolute against the base URL.
    """
    standard = metadata.setdefault("standard", {})

    if not standard.get("title"):
        title = _page_title(soup)
        if title:
            standard["title"] = title

    canonical = _first_link_href(soup, _CANONICAL_RELS)
    if canonical:
        standard["canonicalUrl"] = canonical

    favicon = _first_link_href(soup, _FAVICON_RELS)
    if favicon:
        standard["favicon"] = resolve_url(favicon, document.base_url)

    if not standard:
        del metadata["standard"]


def extract_metadata(html: str, base_url: str = "", options: Optional[ExtractOptions] = None) -> ExtractionResult:
    """
    Turn raw HTML into an ExtractionResult. Pure: no I/O, never raises on bad markup.
    Only include_all_meta is read from `options` here; html/headers are attached by the caller.
    """
    options = options or ExtractOptions()
    document = Document(html=html or "", base_url=base_url)
    soup = make_soup(document.html)

    metadata = parse_metadata(soup, include_all_meta=options.include_all_meta)
    _augment(metadata, soup, document)

    logger.debug(
        "Extracted namespaces %s from %s",
        sorted(metadata), document.base_url or "<no base url>",
    )
    return ExtractionResult(
        standard=metadata.get("standard"),
        og=metadata.get("og"),
        twitter=metadata.get("twitter"),
        other=metadata.get("other"),
    )
