import logging
import re
from typing import Iterator, Optional, Union

from bs4 import BeautifulSoup

from .models import NAMESPACES, MetaRecord

logger = logging.getLogger(__name__)

# Folds a letter after ":" or "_", so og:site_name gives siteName.
# Intentionally differs from the old colon-only rule, which gave site_name.
_CAMEL_RE = re.compile(r"[:_]([a-zA-Z])")

# charset token inside <meta http-equiv="Content-Type" content="text/html; charset=...">
_CONTENT_CHARSET_RE = re.compile(r"""charset=["']?([^"'\s;>]+)""", re.IGNORECASE)

PROPERTY_PREFIXES = ("og:", "twitter:", "article:", "product:")

STANDARD_NAMES = frozenset({
    "description", "keywords", "viewport", "robots",
    "generator", "theme-color", "author",
})

# other["links"] holds the link list; meta tags named "links" are ignored
LINKS_KEY = "links"


def camelize(name: str) -> str:
    """site_name -> siteName, audio:secure_url -> audioSecureUrl."""
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), name)


def make_soup(html: str) -> BeautifulSoup:
    # html.parser keeps tags where they are; first duplicate attribute wins
    return BeautifulSoup(html or "", "html.parser", on_duplicate_attribute="ignore")


def _flat_attrs(tag) -> dict[str, str]:
    """Tag attributes with multi-valued ones (rel) joined back into a string."""
    return {
        name: " ".join(value) if isinstance(value, list) else value
        for name, value in tag.attrs.items()
    }


def iter_tags(soup: BeautifulSoup, name: str) -> Iterator[dict[str, str]]:
    """Attribute dicts of every <meta> or <link> element, in document order."""
    for tag in soup.find_all(name):
        yield _flat_attrs(tag)


def _property_prefix(prop: str) -> Optional[str]:
    lowered = prop.lower()
    for prefix in PROPERTY_PREFIXES:
        if lowered.startswith(prefix) and len(prop) > len(prefix):
            return prefix
    return None


def _content_type_charset(attrs: dict) -> Optional[str]:
    if (attrs.get("http-equiv") or "").strip().lower() != "content-type":
        return None
    m = _CONTENT_CHARSET_RE.search(attrs.get("content") or "")
    return m.group(1) if m else None


def classify_meta(attrs: dict, include_all_meta: bool = False) -> Optional[MetaRecord]:
    """
    Map one <meta> element to a MetaRecord, or None if it should be skipped.

    Rules, first match wins:
      1. property="og:|twitter:|article:|product:..." with content
      2. name="twitter:..." or a known standard name, with content
      3. any other name with content (include_all_meta only)
      4. charset, content not required; else http-equiv="Content-Type" with a charset
    """
    content = attrs.get("content")
    prop = attrs.get("property") or ""
    name = attrs.get("name") or ""

    # 1. property-based tags
    prefix = _property_prefix(prop)
    if prefix and content is not None:
        remainder = prop[len(prefix):]
        if prefix == "og:":
            return MetaRecord("og", camelize(remainder), content)
        if prefix == "twitter:":
            return MetaRecord("twitter", camelize(remainder), content)
        if include_all_meta:
            return MetaRecord("other", prop, content)
        return None

    if name and content is not None:
        lowered = name.lower()

        # 2. twitter cards by name, plus the fixed standard set
        if lowered.startswith("twitter:") and len(name) > len("twitter:"):
            return MetaRecord("twitter", camelize(name[len("twitter:"):]), content)
        if lowered in STANDARD_NAMES:
            return MetaRecord("standard", lowered, content)

        # 3. everything else
        if include_all_meta:
            if name == LINKS_KEY:
                logger.debug("Ignoring meta tag named %r, key is reserved", LINKS_KEY)
                return None
            return MetaRecord("other", name, content)
        return None

    # 4. <meta charset="..."> or the older http-equiv form
    charset = (attrs.get("charset") or "").strip() or _content_type_charset(attrs)
    if charset:
        return MetaRecord("standard", "charset", charset)

    return None


def classify_link(attrs: dict) -> Optional[MetaRecord]:
    rel, href = attrs.get("rel"), attrs.get("href")
    if not rel or not href:
        return None
    return MetaRecord("other", LINKS_KEY, {"rel": rel, "href": href})


def iter_records(soup: BeautifulSoup, include_all_meta: bool = False) -> Iterator[MetaRecord]:
    """Meta records first, then link records (only with include_all_meta), each in document order."""
    for attrs in iter_tags(soup, "meta"):
        record = classify_meta(attrs, include_all_meta)
        if record is not None:
            yield record

    if not include_all_meta:
        return
    for attrs in iter_tags(soup, "link"):
        record = classify_link(attrs)
        if record is not None:
            yield record


def parse_metadata(html: Union[str, BeautifulSoup], include_all_meta: bool = False) -> dict:
    """
    Scan HTML for meta and link tags and group them by namespace.
    Later tags overwrite earlier ones with the same key. Empty namespaces are dropped.
    Accepts raw HTML or an already parsed soup.
    """
    soup = html if isinstance(html, BeautifulSoup) else make_soup(html)

    data: dict[str, dict] = {
        ns: {} for ns in NAMESPACES if ns != "other" or include_all_meta
    }

    for record in iter_records(soup, include_all_meta):
        if record.namespace == "other" and record.key == LINKS_KEY:
            data["other"].setdefault(LINKS_KEY, []).append(record.value)
        else:
            data[record.namespace][record.key] = record.value

    return {ns: values for ns, values in data.items() if values}
