"""HTTP clients with fixed timeouts and helpers that read and check responses."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from .messages import log_str

DEFAULT_TIMEOUT = 30.0
MAX_BODY_SIZE = 1024000
_MAX_IDLE_CONNS = 100
_CHUNK_SIZE = 64 * 1024


@dataclass
class _TlsSettings:
    skip_verify: bool = False


_TLS = _TlsSettings()


class HTTPStatusError(Exception):
    """Raised when a response carries a status code of 300 or above."""

    def __init__(self, status_code: int, body: bytes) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            log_str("返回内容: %s ,返回状态码: %d", body.decode("utf-8", "replace"), status_code)
        )


class _Client(requests.Session):
    """A session with a default timeout that honours the global TLS setting."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._verify: Any = True
        super().__init__()
        self.timeout = timeout

    @property
    def verify(self) -> Any:
        return False if _TLS.skip_verify else self._verify

    @verify.setter
    def verify(self, value: Any) -> None:
        self._verify = value

    def request(self, method, url, *args, **kwargs):
        # ``timeout`` is the seventh positional parameter after the URL.
        if len(args) < 7 and kwargs.get("timeout") is None:
            kwargs["timeout"] = self.timeout
        return super().request(method, url, *args, **kwargs)


class _BoundAdapter(HTTPAdapter):
    """Adapter whose connections bind to one address family's wildcard address."""

    def __init__(self, source_address: tuple[str, int], **kwargs: Any) -> None:
        self._source_address = source_address
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        pool_kwargs["source_address"] = self._source_address
        super().init_poolmanager(connections, maxsize, block, **pool_kwargs)


def create_http_client() -> requests.Session:
    """A client that uses proxies from the environment and a 30 second timeout."""
    client = _Client()
    adapter = HTTPAdapter(pool_maxsize=_MAX_IDLE_CONNS)
    client.mount("https://", adapter)
    client.mount("http://", adapter)
    return client


def create_no_proxy_http_client(network: str) -> requests.Session:
    """A client without proxies or keep-alive, limited to IPv6 for 'tcp6' and IPv4 otherwise."""
    source = ("::", 0) if network == "tcp6" else ("0.0.0.0", 0)
    client = _Client()
    client.trust_env = False
    client.proxies = {}
    client.headers["Connection"] = "close"
    adapter = _BoundAdapter(source, pool_maxsize=_MAX_IDLE_CONNS)
    client.mount("https://", adapter)
    client.mount("http://", adapter)
    return client


def set_insecure_skip_verify() -> None:
    """Turn off TLS certificate checks for every client, existing and future."""
    _TLS.skip_verify = True


def get_http_response_org(resp: requests.Response) -> bytes:
    """Read at most 1024000 bytes of the body; raise HTTPStatusError for status >= 300."""
    chunks: list[bytes] = []
    size = 0
    try:
        for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
            taken = chunk[: MAX_BODY_SIZE - size]
            chunks.append(taken)
            size += len(taken)
            if size >= MAX_BODY_SIZE:
                break
    finally:
        resp.close()

    body = b"".join(chunks)
    if resp.status_code >= 300:
        raise HTTPStatusError(resp.status_code, body)
    return body


def get_http_response(resp: requests.Response) -> Any:
    """Return the decoded JSON body, or None for an empty body."""
    body = get_http_response_org(resp)
    if not body:
        return None
    return json.loads(body)