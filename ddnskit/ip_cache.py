"""Cache of the last address, so that unchanged addresses skip provider checks."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

IP_CACHE_TIMES_ENV = "DDNS_IP_CACHE_TIMES"
DEFAULT_CACHE_TIMES = 5

FORCE_COMPARE_GLOBAL = True

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _cache_times() -> int:
    raw = os.environ.get(IP_CACHE_TIMES_ENV, "")
    if _INT_RE.fullmatch(raw):
        return int(raw)
    return DEFAULT_CACHE_TIMES


@dataclass
class IpCache:
    """The last seen address and how many more checks it may be reused for."""

    addr: str = ""
    times: int = 0
    times_failed_ip: int = 0

    def check(self, new_addr: str) -> bool:
        """Return True when the address must be compared with the DNS provider."""
        if not new_addr:
            return True
        if self.addr != new_addr or self.times <= 1:
            self.addr = new_addr
            self.times = _cache_times() + 1
            return True
        self.addr = new_addr
        self.times -= 1
        return False