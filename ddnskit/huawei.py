"""Request signing for the Huawei Cloud API gateway (SDK-HMAC-SHA256)."""

from __future__ import annotations

import hashlib
import hmac
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import parse_qs, unquote, urlsplit, urlunsplit

import requests

from .text import escape

BASIC_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
ALGORITHM = "SDK-HMAC-SHA256"
HEADER_X_DATE = "X-Sdk-Date"
HEADER_HOST = "host"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_SHA256 = "X-Sdk-Content-Sha256"

_BASIC_DATE_RE = re.compile(r"\d{8}T\d{6}Z")


def _to_utc(t: datetime) -> datetime:
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc)


def _parse_basic_date(text: str) -> datetime | None:
    if not _BASIC_DATE_RE.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, BASIC_DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _request_host(request: requests.PreparedRequest) -> str:
    return urlsplit(request.url or "").netloc.rpartition("@")[2]


def canonical_request(request: requests.PreparedRequest, signed_headers: list[str]) -> str:
    """Build the canonical request: method, URI, query, headers, signed headers, payload hash."""
    hexencode = request.headers.get(HEADER_CONTENT_SHA256, "")
    if not hexencode:
        hexencode = hex_encode_sha256_hash(request_payload(request))
    return "\n".join(
        (
            request.method or "",
            canonical_uri(request),
            canonical_query_string(request),
            canonical_headers(request, signed_headers),
            ";".join(signed_headers),
            hexencode,
        )
    )


def canonical_uri(request: requests.PreparedRequest) -> str:
    """The escaped request path, always ending with '/'."""
    path = unquote(urlsplit(request.url or "").path)
    uri = "/".join(escape(segment) for segment in path.split("/"))
    if not uri.endswith("/"):
        uri += "/"
    return uri


def canonical_query_string(request: requests.PreparedRequest) -> str:
    """Sorted, escaped query string; the request URL is rewritten to use it."""
    parts = urlsplit(request.url or "")
    query = parse_qs(parts.query, keep_blank_values=True)
    query_str = "&".join(
        f"{escape(key)}={escape(value)}" for key in sorted(query) for value in sorted(query[key])
    )
    request.url = urlunsplit(parts._replace(query=query_str))
    return query_str


def canonical_headers(request: requests.PreparedRequest, signed_headers: list[str]) -> str:
    """Lines of 'name:value' for each signed header, each followed by a newline."""
    headers = {key.lower(): value for key, value in request.headers.items()}
    lines = []
    for key in signed_headers:
        if key.lower() == HEADER_HOST:
            values = [_request_host(request)]
        elif key in headers:
            values = [headers[key]]
        else:
            values = []
        lines.extend(f"{key}:{value.strip()}" for value in sorted(values))
    return "\n".join(lines) + "\n"


def signed_headers(request: requests.PreparedRequest) -> list[str]:
    """Lower-cased names of all request headers, sorted."""
    return sorted(key.lower() for key in request.headers)


def request_payload(request: requests.PreparedRequest) -> bytes:
    """The request body as bytes; a stream body is read and replaced by its bytes."""
    body = request.body
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if hasattr(body, "read"):
        data = body.read()
    else:
        data = b"".join(
            chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk) for chunk in body
        )
    if isinstance(data, str):
        data = data.encode("utf-8")
    request.body = data
    return data


def string_to_sign(canonical_request: str, t: datetime) -> str:
    """Algorithm, UTC timestamp and hash of the canonical request, one per line."""
    digest = hashlib.sha256(canonical_request.encode("utf-8")).hexdigest()
    return f"{ALGORITHM}\n{_to_utc(t).strftime(BASIC_DATE_FORMAT)}\n{digest}"


def sign_string_to_sign(string_to_sign: str, signing_key: bytes) -> str:
    """Hex HMAC-SHA256 of the string to sign."""
    return hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


def hex_encode_sha256_hash(body: bytes | None) -> str:
    """Hex SHA-256 of ``body``; None counts as empty."""
    return hashlib.sha256(body or b"").hexdigest()


def auth_header_value(signature: str, access_key: str, signed_headers: list[str]) -> str:
    """The value of the Authorization header."""
    return (
        f"{ALGORITHM} Access={access_key}, SignedHeaders={';'.join(signed_headers)}, "
        f"Signature={signature}"
    )


@dataclass
class Signer:
    """Access key and secret used to sign requests."""

    key: str
    secret: str

    def sign(self, request: requests.PreparedRequest) -> None:
        """Set the Authorization header, adding X-Sdk-Date when it is missing or invalid."""
        date_text = request.headers.get(HEADER_X_DATE, "")
        t = _parse_basic_date(date_text) if date_text else None
        if t is None:
            t = datetime.fromtimestamp(time.time(), timezone.utc)
            request.headers[HEADER_X_DATE] = t.strftime(BASIC_DATE_FORMAT)

        headers = signed_headers(request)
        canonical = canonical_request(request, headers)
        to_sign = string_to_sign(canonical, t)
        signature = sign_string_to_sign(to_sign, self.secret.encode("utf-8"))
        request.headers[HEADER_AUTHORIZATION] = auth_header_value(signature, self.key, headers)