"""Request signing for the Tencent Cloud DNSPod API (TC3-HMAC-SHA256)."""

from __future__ import annotations

import hashlib
import hmac
import time
from datetime import datetime, timezone

import requests

ALGORITHM = "TC3-HMAC-SHA256"
SERVICE = "dnspod"
HOST = f"{SERVICE}.tencentcloudapi.com"
_SIGNED_HEADERS = "content-type;host;x-tc-action"


def _sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _hmac_sha256(message: str, key: bytes) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def tencent_cloud_signer(
    secret_id: str, secret_key: str, request: requests.PreparedRequest, action: str, payload: str
) -> None:
    """Set the Authorization, Host, X-TC-Action and X-TC-Timestamp headers."""
    timestamp = int(time.time())
    timestamp_str = str(timestamp)

    canonical_headers = (
        f"content-type:application/json\nhost:{HOST}\nx-tc-action:{action.lower()}\n"
    )
    canonical_request = (
        f"POST\n/\n\n{canonical_headers}\n{_SIGNED_HEADERS}\n{_sha256_hex(payload)}"
    )

    date = datetime.fromtimestamp(timestamp, timezone.utc).strftime("%Y-%m-%d")
    credential_scope = f"{date}/{SERVICE}/tc3_request"
    string_to_sign = (
        f"{ALGORITHM}\n{timestamp_str}\n{credential_scope}\n{_sha256_hex(canonical_request)}"
    )

    secret_date = _hmac_sha256(date, ("TC3" + secret_key).encode("utf-8"))
    secret_service = _hmac_sha256(SERVICE, secret_date)
    secret_signing = _hmac_sha256("tc3_request", secret_service)
    signature = _hmac_sha256(string_to_sign, secret_signing).hex()

    request.headers["Authorization"] = (
        f"{ALGORITHM} Credential={secret_id}/{credential_scope}, "
        f"SignedHeaders={_SIGNED_HEADERS}, Signature={signature}"
    )
    request.headers["Host"] = HOST
    request.headers["X-TC-Action"] = action
    request.headers["X-TC-Timestamp"] = timestamp_str