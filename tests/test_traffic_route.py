import re
from unittest import mock
from urllib.parse import parse_qsl, urlsplit

from ddnskit.traffic_route import traffic_route_signer


def build(method="GET", query=None, header=None, sk="secret", action="ListZones", body=b""):
    with mock.patch("ddnskit.traffic_route.time.time", return_value=0):
        return traffic_route_signer(method, query, header, "placeholder", sk, action, body)


def test_url_carries_sorted_query_with_action_and_version():
    request = build(query={"b": ["2"], "a": ["x y"]})
    parts = urlsplit(request.url)
    assert parts.netloc == "open.volcengineapi.com"
    assert parts.path == "/"
    assert parse_qsl(parts.query) == [
        ("Action", "ListZones"),
        ("Version", "2018-08-01"),
        ("a", "x y"),
        ("b", "2"),
    ]


def test_action_overrides_query_value():
    request = build(query={"Action": ["Other"]}, action="ListRecords")
    assert dict(parse_qsl(urlsplit(request.url).query))["Action"] == "ListRecords"


def test_signed_headers_are_set():
    request = build(header={"X-Custom": "1"})
    assert request.headers["Host"] == "open.volcengineapi.com"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["X-Date"] == "19700101T000000Z"
    assert (
        request.headers["X-Content-Sha256"]
        == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )
    assert request.headers["X-Custom"] == "1"


def test_authorization_layout():
    auth = build().headers["Authorization"]
    prefix = (
        "HMAC-SHA256 Credential=placeholder/19700101/cn-north-1/DNS/request, "
        "SignedHeaders=content-type;host;x-content-sha256;x-date, Signature="
    )
    assert auth.startswith(prefix)
    assert re.fullmatch(r"[0-9a-f]{64}", auth[len(prefix):])


def test_body_and_method_are_kept():
    request = build(method="POST", body=b'{"ZID":1}')
    assert request.method == "POST"
    assert request.body == b'{"ZID":1}'


def test_signature_deterministic_and_input_dependent():
    base = build().headers["Authorization"]
    assert build().headers["Authorization"] == base
    assert build(sk="token").headers["Authorization"] != base
    assert build(body=b"{}").headers["Authorization"] != base
    assert build(action="ListRecords").headers["Authorization"] != base