class OgMetaError(Exception):
    """Base error for ogmeta."""


class InvalidUrlError(OgMetaError):
    pass


class FetchError(OgMetaError):
    """Network failure, timeout, non-success status or relay-reported error."""


class UpstreamPayloadError(FetchError):
    """Relay answered, but the envelope is missing the page contents."""


class MetadataFetchError(OgMetaError):
    """
    The single error surfaced by fetch_and_extract().
    Wraps whatever went wrong and remembers which URL was requested.
    """

    def __init__(self, url: str, original_error: Exception):
        super().__init__(f"Failed to fetch metadata: {original_error}")
        self.url = url
        self.original_error = original_error
