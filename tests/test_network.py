import logging
import socket
from unittest.mock import patch

import dns.resolver
import pytest

from ddnskit import network
from ddnskit.network import (
    get_request_ip_str,
    init_backup_dns,
    is_private_network,
    lookup_host,
    set_dns,
    wait_internet,
)

TEST_DNS = "1.1.1.1"
TEST_URL = "https://cloudflare.com"
CLOUDFLARE_ADDR = "104.16.132.229"


class _Record:
    def __init__(self, text):
        self._text = text

    def to_text(self):
        return self._text


def _addrinfo(address):
    return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", (address, 0))]


def _backup_nameservers():
    return [set_dns(server).nameservers[0] for server in network.BACKUP_DNS]


@pytest.fixture(autouse=True)
def isolated(monkeypatch):
    monkeypatch.setattr(network, "_state", network._ResolverState())
    monkeypatch.setattr(network, "BACKUP_DNS", list(network.BACKUP_DNS))


@pytest.mark.parametrize(
    "addr, expected",
    [
        ("127.0.0.1", True),
        ("127.0.0.1:9876", True),
        ("[::1]", True),
        ("[::1]:9876", True),
        ("192.168.1.18:9876", True),
        ("172.16.1.18:9876", True),
        ("10.1.1.18:9876", True),
        ("[fe80::1]:9876", True),
        ("[fd00::1]:9876", True),
        ("100.0.0.1", False),
        ("100.0.0.1:9876", False),
        ("[2409::1]", False),
        ("[2409::1]:9876", False),
        ("223.5.5.5:9876", False),
    ],
)
def test_is_private_network(addr, expected):
    assert is_private_network(addr) is expected


def test_unclosed_bracket_is_not_private():
    assert is_private_network("[::1") is False


def test_get_request_ip_str():
    headers = {"X-Real-IP": "10.0.0.1", "X-Forwarded-For": "10.0.0.2"}
    assert (
        get_request_ip_str("192.168.1.1", headers)
        == "Remote: 192.168.1.1 ,Real-IP: 10.0.0.1 ,Forwarded-For: 10.0.0.2"
    )


def test_get_request_ip_str_without_headers():
    assert get_request_ip_str("192.168.1.1", {}) == "Remote: 192.168.1.1"


def test_init_backup_dns_custom():
    init_backup_dns("9.9.9.9", "zh")
    assert network.BACKUP_DNS == ["9.9.9.9"]
    assert _backup_nameservers() == ["9.9.9.9"]


def test_init_backup_dns_chinese():
    init_backup_dns("", "zh")
    assert network.BACKUP_DNS == ["223.5.5.5", "114.114.114.114", "119.29.29.29"]
    assert _backup_nameservers() == ["223.5.5.5", "114.114.114.114", "119.29.29.29"]


def test_init_backup_dns_english_keeps_defaults():
    init_backup_dns("", "en")
    assert network.BACKUP_DNS == ["1.1.1.1", "8.8.8.8", "9.9.9.9", "223.5.5.5"]
    assert _backup_nameservers() == ["1.1.1.1", "8.8.8.8", "9.9.9.9", "223.5.5.5"]


def test_set_dns():
    resolver = set_dns(TEST_DNS)
    assert resolver.nameservers == [TEST_DNS]
    assert resolver.port == 53
    assert network._state.resolver is resolver


def test_set_dns_with_scheme_and_port():
    resolver = set_dns("tcp://8.8.8.8:5353")
    assert resolver.nameservers == ["8.8.8.8"]
    assert resolver.port == 5353
    with patch.object(dns.resolver.Resolver, "resolve", return_value=[_Record(CLOUDFLARE_ADDR)]) as resolve:
        lookup_host(TEST_URL)
    assert resolve.call_args.kwargs["tcp"] is True


def test_lookup_host_valid_url():
    with patch("socket.getaddrinfo", return_value=_addrinfo(CLOUDFLARE_ADDR)) as getaddrinfo:
        assert lookup_host(TEST_URL) == [CLOUDFLARE_ADDR]
    assert getaddrinfo.call_args.args[0] == "cloudflare.com"


def test_lookup_host_invalid_url():
    error = socket.gaierror(socket.EAI_NONAME, "Name or service not known")
    with patch("socket.getaddrinfo", side_effect=error):
        with pytest.raises(OSError):
            lookup_host("invalidurl")


def test_lookup_host_after_set_dns():
    set_dns(TEST_DNS)
    with patch.object(dns.resolver.Resolver, "resolve", return_value=[_Record(CLOUDFLARE_ADDR)]) as resolve:
        assert lookup_host(TEST_URL) == [CLOUDFLARE_ADDR]
    assert resolve.call_args.args[0] == "cloudflare.com"


def test_lookup_host_after_set_dns_not_found():
    set_dns(TEST_DNS)
    with patch.object(dns.resolver.Resolver, "resolve", side_effect=dns.resolver.NXDOMAIN()):
        with pytest.raises(OSError):
            lookup_host("invalidurl")


def test_lookup_host_ip_literal():
    with patch("socket.getaddrinfo", side_effect=AssertionError("no lookup expected")):
        assert lookup_host("https://1.2.3.4/path") == ["1.2.3.4"]


def test_wait_internet_switches_to_backup_dns(caplog):
    caplog.set_level(logging.INFO, logger="ddnskit")
    error = socket.gaierror(socket.EAI_AGAIN, "Temporary failure in name resolution")
    with patch("socket.getaddrinfo", side_effect=error), patch.object(
        dns.resolver.Resolver, "resolve", return_value=[_Record(CLOUDFLARE_ADDR)]
    ), patch("ddnskit.network.time.sleep") as sleep:
        wait_internet([TEST_URL])
    assert sleep.call_count == 1
    assert sleep.call_args.args[0] == network.RETRY_DELAY
    assert network._state.resolver.nameservers == [network.BACKUP_DNS[0]]
    assert "The network is connected" in caplog.text
    assert "Retry after 5s" in caplog.text


def test_wait_internet_other_error_keeps_system_resolver():
    error = socket.gaierror(socket.EAI_NONAME, "Name or service not known")
    with patch(
        "socket.getaddrinfo",
        side_effect=[error, _addrinfo(CLOUDFLARE_ADDR), _addrinfo(CLOUDFLARE_ADDR)],
    ) as getaddrinfo, patch("ddnskit.network.time.sleep") as sleep:
        wait_internet([TEST_URL])
        assert lookup_host(TEST_URL) == [CLOUDFLARE_ADDR]
    assert sleep.call_count == 1
    assert getaddrinfo.call_count == 3
    assert network._state.resolver is None


def test_wait_internet_returns_at_once_when_connected():
    with patch("socket.getaddrinfo", return_value=_addrinfo(CLOUDFLARE_ADDR)) as getaddrinfo, patch(
        "ddnskit.network.time.sleep"
    ) as sleep:
        wait_internet([TEST_URL])
        assert getaddrinfo.call_count == 1
        assert lookup_host(TEST_URL) == [CLOUDFLARE_ADDR]
    assert sleep.call_count == 0