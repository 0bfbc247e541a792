import asyncio
import json
import logging
import os
import time
from typing import Optional

import requests
import urllib3

from .errors import FetchError, UpstreamPayloadError
from .models import FetchResponse

logger = logging.getLogger(__name__)

# public CORS relay; answers {"contents": "...", "status": {...}} and sometimes {"error": "..."}
# set OGMETA_RELAY_URL="" to fetch target pages directly
RELAY_URL = os.getenv("OGMETA_RELAY_URL", "https://api.allorigins.win/get")

# realistic browser UA, avoids most trivial bot blocks
USER_AGENT = os.getenv(
    "OGMETA_USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36",
)

DEFAULT_TIMEOUT = 5000  # milliseconds
MAX_CONTENT_BYTES = int(os.getenv("OGMETA_MAX_CONTENT_BYTES", str(5 * 1024 * 1024)))
READ_CHUNK_BYTES = 64 * 1024

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class _Transfer:
    """
    One in-flight request. Lives on the async side so a timeout can close the
    session and response while the worker thread is still reading.
    """

    def __init__(self):
        self.session = requests.Session()
        self.response: Optional[requests.Response] = None

    def close(self) -> None:
        if self.response is not None:
            self.response.close()
        self.session.close()


def _timed_out(timeout: int) -> FetchError:
    return FetchError(f"Request timed out after {timeout}ms")


def _read_body(response: requests.Response, deadline: float, timeout: int) -> str:
    """
    Read the streamed body against a total deadline. requests' own timeout only
    bounds each socket read, so a server dripping bytes would never trip it.
    """
    chunks, size = [], 0
    while size < MAX_CONTENT_BYTES:
        if time.monotonic() > deadline:
            raise _timed_out(timeout)
        # read1 returns whatever has arrived instead of waiting for a full chunk
        chunk = response.raw.read1(READ_CHUNK_BYTES, decode_content=True)
        if not chunk:
            break
        chunks.append(chunk)
        size += len(chunk)

    body = b"".join(chunks)[:MAX_CONTENT_BYTES]
    return body.decode(response.encoding or "utf-8", errors="replace")


def _read_relay_envelope(text: str) -> str:
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise UpstreamPayloadError("Relay returned a non-JSON payload") from exc

    if not isinstance(payload, dict):
        raise UpstreamPayloadError("Relay returned an unexpected payload")
    if payload.get("error"):
        raise FetchError(str(payload["error"]))

    contents = payload.get("contents")
    if not isinstance(contents, str):
        raise UpstreamPayloadError("Relay response has no page contents")
    return contents


def _sync_fetch(transfer: _Transfer, url: str, fetch_options: dict, timeout: int, relay_url: str) -> FetchResponse:
    """Blocking fetch with requests, runs inside a thread executor."""
    deadline = time.monotonic() + timeout / 1000
    options = dict(fetch_options)
    headers = {**DEFAULT_HEADERS, **(options.pop("headers", None) or {})}
    options.pop("timeout", None)      # the budget is ours, not the caller's
    options.pop("params", None)
    options.pop("stream", None)
    timeout_s = timeout / 1000

    try:
        if relay_url:
            transfer.response = transfer.session.get(
                relay_url, params={"url": url}, headers=headers,
                timeout=timeout_s, stream=True, **options,
            )
        else:
            transfer.response = transfer.session.get(
                url, headers=headers, timeout=timeout_s, stream=True, **options
            )

        response = transfer.response
        if not response.ok:
            raise FetchError(f"HTTP error! status: {response.status_code}")

        text = _read_body(response, deadline, timeout)
    except (requests.Timeout, urllib3.exceptions.ReadTimeoutError) as exc:
        raise _timed_out(timeout) from exc
    except (requests.RequestException, urllib3.exceptions.HTTPError, OSError) as exc:
        # body reads go through urllib3 directly; a socket closed on timeout lands here too
        raise FetchError(str(exc)) from exc
    finally:
        transfer.close()

    contents = _read_relay_envelope(text) if relay_url else text
    return FetchResponse(contents=contents, headers=response.headers)


async def fetch_page(
    url: str,
    fetch_options: Optional[dict] = None,
    timeout: int = DEFAULT_TIMEOUT,
    relay_url: Optional[str] = None,
) -> FetchResponse:
    """
    Fetch the HTML of a URL without blocking the event loop.

    Goes through the relay unless relay_url (or RELAY_URL) is empty.
    The whole call, body included, is bounded by `timeout` milliseconds. When the
    budget runs out the connection is closed right away, not when the worker
    thread next wakes up.
    """
    relay_url = RELAY_URL if relay_url is None else relay_url
    transfer = _Transfer()
    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(
        None, _sync_fetch, transfer, url, fetch_options or {}, timeout, relay_url
    )

    try:
        return await asyncio.wait_for(future, timeout=timeout / 1000)
    except asyncio.TimeoutError as exc:
        logger.warning("Fetch of %s timed out after %dms", url, timeout)
        transfer.close()
        raise _timed_out(timeout) from exc
