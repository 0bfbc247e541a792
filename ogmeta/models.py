from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

# namespaces a parsed tag can land in
NAMESPACES = ("standard", "og", "twitter", "other")

# response headers callers may ask for
RESPONSE_HEADERS = ("content-type", "content-length", "last-modified")


@dataclass(frozen=True)
class Document:
    html: str
    base_url: str                       # the URL the HTML was requested from


@dataclass(frozen=True)
class MetaRecord:
    namespace: str                      # standard | og | twitter | other
    key: str
    value: Any                          # str, or a {rel, href} dict for other.links


@dataclass
class ExtractOptions:
    include_all_meta: bool = False      # capture unknown meta + link tags into `other`
    include_html: bool = False
    include_response_headers: bool = False
    timeout: int = 5000                 # milliseconds, fetcher only
    fetch_options: dict = field(default_factory=dict)   # passed through to the fetcher


@dataclass
class FetchResponse:
    contents: str
    headers: Mapping[str, str] = field(default_factory=dict)    # case-insensitive when coming from requests


@dataclass
class ExtractionResult:
    # namespaces are None when nothing landed in them
    standard: Optional[dict] = None
    og: Optional[dict] = None
    twitter: Optional[dict] = None
    other: Optional[dict] = None

    # opt-in extras
    html: Optional[str] = None
    headers: Optional[dict] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in self.__dict__.items() if v is not None}
