"""Request signing for the Baidu Cloud DNS API (bce-auth-v1)."""

from __future__ import annotations

import hashlib
import hmac
import time
from datetime import datetime, timezone

import requests

from .huawei import HEADER_AUTHORIZATION, canonical_uri

BAIDU_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
EXPIRATION_PERIOD = "1800"
_CANONICAL_HEADERS = "host:bcd.baidubce.com"


def hmac_sha256_hex(secret: str, message: str) -> str:
    """Hex HMAC-SHA256 of ``message`` keyed by ``secret``."""
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def baidu_canonical_uri(request: requests.PreparedRequest) -> str:
    """The escaped request path without a trailing slash."""
    return canonical_uri(request)[:-1]


def baidu_signer(access_key_id: str, access_secret: str, request: requests.PreparedRequest) -> None:
    """Set the Authorization header of ``request``."""
    now = datetime.fromtimestamp(time.time(), timezone.utc)
    auth_string_prefix = (
        f"bce-auth-v1/{access_key_id}/{now.strftime(BAIDU_DATE_FORMAT)}/{EXPIRATION_PERIOD}"
    )
    # Only fixed POST endpoints are called, so query and headers are constant.
    canonical_req = f"{request.method}\n{baidu_canonical_uri(request)}\n\n{_CANONICAL_HEADERS}"

    signing_key = hmac_sha256_hex(access_secret, auth_string_prefix)
    signature = hmac_sha256_hex(signing_key, canonical_req)
    request.headers[HEADER_AUTHORIZATION] = f"{auth_string_prefix}/host/{signature}"