import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from api.main import app
from ogmeta.errors import FetchError, MetadataFetchError
from ogmeta.models import ExtractionResult

client = TestClient(app)

# a realistic ExtractionResult to reuse across tests
MOCK_RESULT = ExtractionResult(
    standard={"title": "Example Article Title", "favicon": "https://example.com/favicon.ico"},
    og={"title": "Example Article", "siteName": "Example"},
    twitter={"card": "summary"},
)


# --- /health ---

def test_health_returns_ok():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# --- /metadata ---

def test_metadata_success():
    with patch("api.routes.fetch_and_extract", new_callable=AsyncMock, return_value=MOCK_RESULT):
        response = client.post("/metadata", json={"url": "https://example.com/article"})

    assert response.status_code == 200
    data = response.json()
    assert data["url"] == "https://example.com/article"
    assert data["og"]["siteName"] == "Example"
    assert data["twitter"]["card"] == "summary"


def test_empty_namespaces_left_out():
    with patch("api.routes.fetch_and_extract", new_callable=AsyncMock, return_value=MOCK_RESULT):
        data = client.post("/metadata", json={"url": "https://example.com/article"}).json()

    assert "other" not in data
    assert "html" not in data
    assert "headers" not in data


def test_options_forwarded():
    with patch("api.routes.fetch_and_extract", new_callable=AsyncMock, return_value=MOCK_RESULT) as mock_extract:
        client.post("/metadata", json={
            "url": "https://example.com/article",
            "include_all_meta": True,
            "include_html": True,
            "timeout": 2500,
            "headers": {"Accept-Language": "fr"},
        })

    url, options = mock_extract.call_args[0]
    assert url == "https://example.com/article"
    assert options.include_all_meta is True
    assert options.include_html is True
    assert options.include_response_headers is False
    assert options.timeout == 2500
    assert options.fetch_options == {"headers": {"Accept-Language": "fr"}}


def test_other_links_serialised():
    result = ExtractionResult(other={"links": [{"rel": "alternate", "href": "/feed"}], "x": "y"})
    with patch("api.routes.fetch_and_extract", new_callable=AsyncMock, return_value=result):
        data = client.post("/metadata", json={"url": "https://example.com/", "include_all_meta": True}).json()

    assert data["other"]["links"] == [{"rel": "alternate", "href": "/feed"}]
    assert data["other"]["x"] == "y"


def test_invalid_url_rejected():
    response = client.post("/metadata", json={"url": "not a url"})
    assert response.status_code == 422


def test_missing_url_rejected():
    response = client.post("/metadata", json={})
    assert response.status_code == 422


def test_out_of_range_timeout_rejected():
    response = client.post("/metadata", json={"url": "https://example.com/", "timeout": 0})
    assert response.status_code == 422


def test_fetch_failure_returns_502():
    error = MetadataFetchError("https://dead.example.com", FetchError("HTTP error! status: 500"))
    with patch("api.routes.fetch_and_extract", new_callable=AsyncMock, side_effect=error):
        response = client.post("/metadata", json={"url": "https://dead.example.com"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to fetch metadata: HTTP error! status: 500"


def test_fetch_failure_reports_code_and_url():
    error = MetadataFetchError("https://slow.example.com/", FetchError("Request timed out after 5000ms"))
    with patch("api.routes.fetch_and_extract", new_callable=AsyncMock, side_effect=error):
        data = client.post("/metadata", json={"url": "https://slow.example.com/"}).json()

    assert data["code"] == "upstream_error"
    assert data["url"] == "https://slow.example.com/"


def test_elapsed_header_set():
    response = client.get("/health")
    assert int(response.headers["X-Elapsed-Ms"]) >= 0


def test_returned_namespaces_logged(caplog):
    with patch("api.routes.fetch_and_extract", new_callable=AsyncMock, return_value=MOCK_RESULT), \
         caplog.at_level("INFO", logger="api.routes"):
        client.post("/metadata", json={"url": "https://example.com/article"})

    assert "https://example.com/article: standard, og, twitter" in caplog.text
