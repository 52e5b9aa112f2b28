"""Tests for the shared HTTP client."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from ingest.http import FetchError, FetchTimeout, HttpClient, MalformedPayload


def _client(response=None, side_effect=None) -> HttpClient:
    session = MagicMock(spec=requests.Session)
    if side_effect is not None:
        session.request.side_effect = side_effect
    else:
        session.request.return_value = response
    return HttpClient(user_agent="test-agent/1.0", timeout=3, session=session)


def _response(payload=None, json_error=None, status_error=None) -> MagicMock:
    response = MagicMock()
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


def test_get_json_sends_headers_params_and_timeout() -> None:
    client = _client(_response({"ok": True}))

    payload = client.get_json("https://example.com/api", params={"limit": 5}, headers={"Accept": "x"})

    assert payload == {"ok": True}
    client.session.request.assert_called_once_with(
        "GET",
        "https://example.com/api",
        headers={"User-Agent": "test-agent/1.0", "Accept": "x"},
        timeout=3,
        params={"limit": 5},
    )


def test_post_json_uses_explicit_timeout() -> None:
    client = _client(_response({"data": {}}))

    client.post_json("https://example.com/graphql", {"query": "{}"}, timeout=8)

    _, kwargs = client.session.request.call_args
    assert kwargs["timeout"] == 8
    assert kwargs["json"] == {"query": "{}"}


def test_timeout_raises_fetch_timeout() -> None:
    client = _client(side_effect=requests.exceptions.ReadTimeout("slow"))

    with pytest.raises(FetchTimeout):
        client.get_json("https://example.com/api")


def test_connection_error_raises_fetch_error() -> None:
    client = _client(side_effect=requests.exceptions.ConnectionError("refused"))

    with pytest.raises(FetchError) as excinfo:
        client.get_json("https://example.com/api")

    assert not isinstance(excinfo.value, FetchTimeout)


def test_http_status_error_raises_fetch_error() -> None:
    client = _client(_response(status_error=requests.exceptions.HTTPError("503 Server Error")))

    with pytest.raises(FetchError, match="503"):
        client.get_json("https://example.com/api")


def test_invalid_json_raises_malformed_payload() -> None:
    client = _client(_response(json_error=ValueError("Expecting value")))

    with pytest.raises(MalformedPayload):
        client.get_json("https://example.com/api")
