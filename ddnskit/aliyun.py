"""Request signing for the Alibaba Cloud DNS API (signature version 1.0)."""

from __future__ import annotations

import base64
import hashlib
import hmac
import re
import time
from collections.abc import Iterable, Mapping, MutableMapping
from datetime import datetime, timezone
from urllib.parse import urlencode

_SIGN_METHODS = {
    "HMAC-SHA1": hashlib.sha1,
    "HMAC-SHA256": hashlib.sha256,
    "HMAC-MD5": hashlib.md5,
}
_SPECIAL_RE = re.compile(r"%7E|[%*/&=+]")
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

ParamValue = str | Iterable[str]


def _values(value: ParamValue) -> list[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


def _encode_values(params: Mapping[str, ParamValue]) -> str:
    """Form-encode parameters sorted by key, keeping each key's value order."""
    return urlencode([(key, value) for key in sorted(params) for value in _values(params[key])])


def _special_char(match: re.Match[str]) -> str:
    text = match.group(0)
    if text == "%7E":
        return "~"
    if text == "+":
        return "%20"
    return f"%{ord(text):02X}"


def _special_url_encode(text: str) -> str:
    return _SPECIAL_RE.sub(_special_char, text)


def _data_to_sign(http_method: str, params: Mapping[str, ParamValue]) -> str:
    return "&".join(
        (http_method, _special_url_encode("/"), _special_url_encode(_encode_values(params)))
    )


def hmac_sign(
    sign_method: str, http_method: str, app_key_secret: str, params: Mapping[str, ParamValue]
) -> bytes:
    """HMAC of the canonical request; unknown methods fall back to HMAC-SHA1."""
    digest = _SIGN_METHODS.get(sign_method, hashlib.sha1)
    key = (app_key_secret + "&").encode("utf-8")
    data = _data_to_sign(http_method, params).encode("utf-8")
    return hmac.new(key, data, digest).digest()


def hmac_sign_to_b64(
    sign_method: str, http_method: str, app_key_secret: str, params: Mapping[str, ParamValue]
) -> str:
    """The signature of :func:`hmac_sign` in standard base64."""
    signature = hmac_sign(sign_method, http_method, app_key_secret, params)
    return base64.b64encode(signature).decode("ascii")


def aliyun_signer(
    access_key_id: str, access_secret: str, params: MutableMapping[str, ParamValue]
) -> MutableMapping[str, ParamValue]:
    """Add the common parameters and the signature to ``params`` in place and return it."""
    now = datetime.fromtimestamp(time.time(), timezone.utc)
    params["SignatureMethod"] = "HMAC-SHA1"
    params["SignatureNonce"] = str(time.time_ns())
    params["AccessKeyId"] = access_key_id
    params["SignatureVersion"] = "1.0"
    params["Timestamp"] = now.strftime(_TIMESTAMP_FORMAT)
    params["Format"] = "JSON"
    params["Version"] = "2015-01-09"
    params["Signature"] = hmac_sign_to_b64("HMAC-SHA1", "GET", access_secret, params)
    return params