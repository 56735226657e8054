import io
import json

import pytest
import requests

from ddnskit import http as http_mod
from ddnskit.http import (
    HTTPStatusError,
    create_http_client,
    create_no_proxy_http_client,
    get_http_response,
    get_http_response_org,
    set_insecure_skip_verify,
)


def make_response(status, body):
    resp = requests.Response()
    resp.status_code = status
    resp.raw = io.BytesIO(body)
    return resp


def test_json_body_is_decoded():
    data = {"a": 1, "b": ["x", "y"]}
    resp = make_response(200, json.dumps(data).encode())
    assert get_http_response(resp) == data


def test_empty_body_gives_none():
    assert get_http_response(make_response(200, b"")) is None


def test_invalid_json_raises():
    with pytest.raises(ValueError):
        get_http_response(make_response(200, b"{not json"))


def test_status_error_carries_body_and_code():
    with pytest.raises(HTTPStatusError) as info:
        get_http_response_org(make_response(404, b"not found"))
    assert info.value.status_code == 404
    assert info.value.body == b"not found"
    assert str(info.value) == "Response body: not found ,Response status code: 404"


def test_status_boundary():
    assert get_http_response_org(make_response(299, b"ok")) == b"ok"
    with pytest.raises(HTTPStatusError):
        get_http_response_org(make_response(300, b"ok"))


def test_json_helper_raises_on_status():
    with pytest.raises(HTTPStatusError):
        get_http_response(make_response(500, b'{"a": 1}'))


def test_body_is_limited():
    body = b"a" * (1024000 + 10)
    result = get_http_response_org(make_response(200, body))
    assert len(result) == 1024000
    assert result == body[:1024000]


def test_default_client_uses_environment_and_timeout():
    client = create_http_client()
    assert client.timeout == 30
    assert client.trust_env is True


def test_no_proxy_client_ipv4():
    client = create_no_proxy_http_client("tcp4")
    assert client.trust_env is False
    assert client.headers["Connection"] == "close"
    adapter = client.get_adapter("https://example.com")
    assert adapter.poolmanager.connection_pool_kw["source_address"] == ("0.0.0.0", 0)


def test_no_proxy_client_ipv6():
    client = create_no_proxy_http_client("tcp6")
    adapter = client.get_adapter("http://example.com")
    assert adapter.poolmanager.connection_pool_kw["source_address"] == ("::", 0)


def test_insecure_skip_verify_affects_all_clients(monkeypatch):
    monkeypatch.setattr(http_mod._TLS, "skip_verify", False)
    existing = create_http_client()
    assert existing.verify is True
    set_insecure_skip_verify()
    assert existing.verify is False
    assert create_no_proxy_http_client("tcp4").verify is False