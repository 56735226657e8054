"""Private address checks, DNS server selection and waiting for connectivity."""

from __future__ import annotations

import ipaddress
import socket
import time
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

from dns import exception as dns_exception
from dns import resolver as dns_resolver

from .messages import log
from .text import to_hostname

BACKUP_DNS = ["1.1.1.1", "8.8.8.8", "9.9.9.9", "223.5.5.5"]
_CHINESE_BACKUP_DNS = ["223.5.5.5", "114.114.114.114", "119.29.29.29"]
_CHINESE = "zh"

RETRY_DELAY = 5.0
_DNS_ERROR_MARK = "[::1]:53: read: connection refused"

_PRIVATE_NETWORKS = tuple(
    ipaddress.ip_network(net)
    for net in (
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "fc00::/7",
        "169.254.0.0/16",
        "fe80::/10",
    )
)


@dataclass
class _ResolverState:
    resolver: dns_resolver.Resolver | None = None
    use_tcp: bool = False


_state = _ResolverState()


def _parse_ip(text: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    if not text or "%" in text:
        return None
    try:
        ip = ipaddress.ip_address(text)
    except ValueError:
        return None
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        return ip.ipv4_mapped
    return ip


def is_private_network(remote_addr: str) -> bool:
    """Whether the address, with optional port, is loopback, private or link-local."""
    if remote_addr.startswith("["):
        end = remote_addr.rfind("]")
        if end == -1:
            return False
        host = remote_addr[1:end]
    else:
        colon = remote_addr.rfind(":")
        host = remote_addr[:colon] if colon != -1 else remote_addr

    ip = _parse_ip(host)
    if ip is None:
        return False
    return ip.is_loopback or any(ip in net for net in _PRIVATE_NETWORKS)


def _header(headers: Mapping[str, object], name: str) -> str:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            if isinstance(value, (list, tuple)):
                return str(value[0]) if value else ""
            return str(value)
    return ""


def get_request_ip_str(remote_addr: str, headers: Mapping[str, object] | None = None) -> str:
    """Describe the remote address together with proxy forwarding headers."""
    headers = headers or {}
    text = "Remote: " + remote_addr
    real_ip = _header(headers, "X-Real-IP")
    if real_ip:
        text += " ,Real-IP: " + real_ip
    forwarded = _header(headers, "X-Forwarded-For")
    if forwarded:
        text += " ,Forwarded-For: " + forwarded
    return text


def init_backup_dns(custom_dns: str, lang: str) -> None:
    """Use the custom server as sole backup, or servers reachable in China for Chinese."""
    if custom_dns:
        BACKUP_DNS[:] = [custom_dns]
        return
    if lang == _CHINESE:
        BACKUP_DNS[:] = _CHINESE_BACKUP_DNS


def _nameserver_address(host: str, port: int) -> str:
    if _parse_ip(host) is not None:
        return host
    try:
        infos = socket.getaddrinfo(host, port)
    except OSError:
        return host
    return infos[0][4][0]


def set_dns(dns: str) -> dns_resolver.Resolver:
    """Route later lookups through ``dns`` ('host', 'host:port', 'udp://…' or 'tcp://…')."""
    if "://" not in dns:
        dns = "udp://" + dns
    parts = urlsplit(dns)
    use_tcp = parts.scheme.lower() == "tcp"
    try:
        port = parts.port
    except ValueError:
        port = None
    if port is None:
        port = 53

    resolver = dns_resolver.Resolver(configure=False)
    resolver.nameservers = [_nameserver_address(parts.hostname or "", port)]
    resolver.port = port
    _state.resolver = resolver
    _state.use_tcp = use_tcp
    return resolver


def lookup_host(url: str) -> list[str]:
    """Resolve the host of ``url``; raise OSError when it cannot be resolved."""
    name = to_hostname(url)
    if _parse_ip(name) is not None:
        return [name]

    resolver = _state.resolver
    if resolver is None:
        infos = socket.getaddrinfo(name, None)
        return list(dict.fromkeys(info[4][0] for info in infos))

    addresses: list[str] = []
    last_error: dns_exception.DNSException | None = None
    for rdtype in ("A", "AAAA"):
        try:
            answer = resolver.resolve(name, rdtype, tcp=_state.use_tcp, search=False)
        except dns_exception.DNSException as exc:
            last_error = exc
            continue
        addresses.extend(record.to_text() for record in answer)

    if not addresses:
        reason = last_error if last_error is not None else "no such host"
        raise OSError(f"lookup {name}: {reason}") from last_error
    return list(dict.fromkeys(addresses))


def _is_dns_error(error: OSError) -> bool:
    if _DNS_ERROR_MARK in str(error):
        return True
    eai_again = getattr(socket, "EAI_AGAIN", None)
    return isinstance(error, socket.gaierror) and eai_again is not None and error.errno == eai_again


def wait_internet(addresses: list[str]) -> None:
    """Block until one of ``addresses`` resolves, switching to backup DNS on DNS failures."""
    retry_times = 0
    failed = False
    while True:
        for addr in addresses:
            try:
                lookup_host(addr)
            except OSError as error:
                failed = True
                log("等待网络连接: %s", error)
                log("%s 后重试...", f"{RETRY_DELAY:g}s")

                if _is_dns_error(error) or retry_times > 0:
                    server = BACKUP_DNS[retry_times % len(BACKUP_DNS)]
                    log("本机DNS异常! 将默认使用 %s, 可参考文档通过 -dns 自定义 DNS 服务器", server)
                    set_dns(server)
                    retry_times += 1

                time.sleep(RETRY_DELAY)
            else:
                if failed:
                    log("网络已连接")
                return