"""Request building and signing for the Volcengine TrafficRoute DNS API."""

from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from urllib.parse import urlencode

import requests

VERSION = "2018-08-01"
SERVICE = "DNS"
REGION = "cn-north-1"
HOST = "open.volcengineapi.com"
_CONTENT_TYPE = "application/json"
_SIGNED_HEADERS = "content-type;host;x-content-sha256;x-date"


def _hmac_sha256(key: bytes, content: str) -> bytes:
    return hmac.new(key, content.encode("utf-8"), hashlib.sha256).digest()


def _hash_sha256(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def traffic_route_signer(
    method: str,
    query: Mapping[str, Iterable[str]] | None,
    header: Mapping[str, str] | None,
    ak: str,
    sk: str,
    action: str,
    body: bytes | None,
) -> requests.PreparedRequest:
    """Build a signed request for ``action`` against the DNS API."""
    method = method or "GET"
    body = body or b""

    values = {key: list(items) for key, items in (query or {}).items()}
    values["Action"] = [action]
    values["Version"] = [VERSION]
    raw_query = urlencode([(key, value) for key in sorted(values) for value in values[key]])

    request = requests.Request(
        method, f"https://{HOST}/?{raw_query}", headers=dict(header or {}), data=body
    ).prepare()

    x_date = datetime.fromtimestamp(time.time(), timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    short_x_date = x_date[:8]
    content_sha256 = _hash_sha256(body)

    canonical_request = "\n".join(
        (
            method,
            "/",
            raw_query,
            "\n".join(
                (
                    "content-type:" + _CONTENT_TYPE,
                    "host:" + HOST,
                    "x-content-sha256:" + content_sha256,
                    "x-date:" + x_date,
                )
            ),
            "",
            _SIGNED_HEADERS,
            content_sha256,
        )
    )
    credential_scope = "/".join((short_x_date, REGION, SERVICE, "request"))
    string_to_sign = "\n".join(
        ("HMAC-SHA256", x_date, credential_scope, _hash_sha256(canonical_request.encode("utf-8")))
    )

    k_date = _hmac_sha256(sk.encode("utf-8"), short_x_date)
    k_region = _hmac_sha256(k_date, REGION)
    k_service = _hmac_sha256(k_region, SERVICE)
    k_signing = _hmac_sha256(k_service, "request")
    signature = _hmac_sha256(k_signing, string_to_sign).hex()

    request.headers["Host"] = HOST
    request.headers["Content-Type"] = _CONTENT_TYPE
    request.headers["X-Date"] = x_date
    request.headers["X-Content-Sha256"] = content_sha256
    request.headers["Authorization"] = (
        f"HMAC-SHA256 Credential={ak}/{credential_scope}, "
        f"SignedHeaders={_SIGNED_HEADERS}, Signature={signature}"
    )
    return request