"""Tests for the catalog HTTP client."""
from unittest.mock import MagicMock, patch

import pytest
import requests

from litcatalog.client import CatalogClient
from litcatalog.errors import TransportError

URL = "https://gutendex.com/books/?search=emma"


def response(status_code, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    return resp


def test_fetch_returns_body_text():
    """A 2xx response returns the raw body."""
    client = CatalogClient(timeout=5)
    with patch.object(client.session, "get", return_value=response(200, '{"count": 0}')) as get:
        assert client.fetch(URL) == '{"count": 0}'

    get.assert_called_once_with(URL, timeout=5)


def test_session_sends_json_headers():
    """Requests ask for JSON and identify the client."""
    client = CatalogClient(user_agent="tester/1.0")

    assert client.session.headers["Accept"] == "application/json"
    assert client.session.headers["User-Agent"] == "tester/1.0"


def test_client_error_is_not_retried():
    """4xx responses fail immediately with the status attached."""
    client = CatalogClient(max_retries=3)
    with patch.object(client.session, "get", return_value=response(404, "Not found")) as get:
        with pytest.raises(TransportError) as excinfo:
            client.fetch(URL)

    assert excinfo.value.status_code == 404
    assert excinfo.value.url == URL
    assert get.call_count == 1


def test_single_attempt_by_default():
    """Without configured retries a server error fails after one request."""
    client = CatalogClient()
    with patch.object(client.session, "get", return_value=response(503)) as get:
        with pytest.raises(TransportError) as excinfo:
            client.fetch(URL)

    assert excinfo.value.status_code == 503
    assert get.call_count == 1


def test_timeout_is_transport_error():
    """Timeouts surface as TransportError with the cause kept."""
    client = CatalogClient(timeout=1)
    with patch.object(client.session, "get", side_effect=requests.exceptions.Timeout("slow")):
        with pytest.raises(TransportError) as excinfo:
            client.fetch(URL)

    assert isinstance(excinfo.value.__cause__, requests.exceptions.Timeout)


def test_connection_error_is_transport_error():
    """Connection failures surface as TransportError."""
    client = CatalogClient()
    with patch.object(client.session, "get", side_effect=requests.exceptions.ConnectionError("refused")):
        with pytest.raises(TransportError):
            client.fetch(URL)


def test_configured_retries_back_off_then_succeed():
    """With retries enabled, 5xx and 429 responses are retried with backoff."""
    client = CatalogClient(max_retries=3, base_backoff=0.01)
    responses = [response(500), response(429), response(200, "{}")]
    with patch.object(client.session, "get", side_effect=responses) as get, \
            patch("litcatalog.client.time.sleep") as sleep:
        assert client.fetch(URL) == "{}"

    assert get.call_count == 3
    assert sleep.call_count == 2


def test_context_manager_closes_session():
    """Leaving the context closes the session."""
    client = CatalogClient()
    with patch.object(client.session, "close") as close:
        with client:
            pass

    close.assert_called_once()
