import re
from urllib.parse import urljoin, urlsplit

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*$")

# schemes that are meaningless without a host
_HOST_SCHEMES = {"http", "https", "ftp", "ws", "wss"}


def is_valid_url(url: str) -> bool:
    """True if `url` is a well-formed absolute URL."""
    if not isinstance(url, str):
        return False
    url = url.strip()
    if not url or any(ch.isspace() for ch in url):
        return False

    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a bad port
    except ValueError:
        return False

    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return False
    if parts.scheme.lower() in _HOST_SCHEMES:
        return bool(parts.hostname)
    return bool(parts.netloc or parts.path)


def resolve_url(relative: str, base: str) -> str:
    """Resolve `relative` against `base`; returns `relative` untouched if that fails."""
    if not is_valid_url(base):
        return relative
    try:
        return urljoin(base, relative)
    except ValueError:
        return relative
