"""String helpers: URL path escaping, joining, hostname extraction and ordinals."""

from __future__ import annotations

import string

_UNRESERVED = frozenset((string.ascii_letters + string.digits + "_-~.").encode("ascii"))


def escape(s: str) -> str:
    """Percent-encode every byte of ``s`` outside the unreserved set, using upper-case hex."""
    return "".join(
        chr(byte) if byte in _UNRESERVED else f"%{byte:02X}" for byte in s.encode("utf-8")
    )


def write_string(*args: str) -> str:
    """Concatenate all given strings."""
    return "".join(args)


def to_hostname(url: str) -> str:
    """Reduce a URL with an optional https scheme to its hostname."""
    stripped = url.removeprefix("https://")
    return stripped.split("/")[0]


def split_lines(s: str) -> list[str]:
    """Split on '\\r\\n' if present, otherwise on '\\n'."""
    if "\r\n" in s:
        return s.split("\r\n")
    return s.split("\n")


def ordinal(x: int, lang: str) -> str:
    """Return ``x`` with its English ordinal suffix; Chinese takes no suffix."""
    text = str(x)
    if lang == "zh":
        return text

    suffix = "th"
    if x >= 0:
        last, last_two = x % 10, x % 100
        if last == 1 and last_two != 11:
            suffix = "st"
        elif last == 2 and last_two != 12:
            suffix = "nd"
        elif last == 3 and last_two != 13:
            suffix = "rd"
    return text + suffix