"""Looking up the newest published release and the asset that fits this platform."""

from __future__ import annotations

import logging
import platform
import re
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests

from .http import HTTPStatusError, create_http_client, get_http_response
from .messages import log
from .semver import Version, parse_version

MIN_ARM = 5
MAX_ARM = 7
ARCHIVE_EXTENSIONS = (".zip", ".tar.gz")
RELEASES_API = "https://api.github.com/repos/{repo}/releases/latest"

_logger = logging.getLogger("ddnskit")

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i486": "386",
    "i586": "386",
    "i686": "386",
    "x86": "386",
}
_ARM_VERSION_RE = re.compile(r"armv(\d+)")


@dataclass(frozen=True)
class Asset:
    """A downloadable file attached to a release."""

    name: str
    url: str


@dataclass
class Release:
    """A release tag and its assets."""

    tag_name: str = ""
    assets: list[Asset] = field(default_factory=list)


@dataclass(frozen=True)
class Latest:
    """The newest asset for this operating system and architecture."""

    name: str
    url: str
    version: Version


def _go_os() -> str:
    platform_name = sys.platform
    if platform_name == "win32":
        return "windows"
    if platform_name.startswith("linux"):
        return "linux"
    if platform_name.startswith("freebsd"):
        return "freebsd"
    return platform_name


def _machine() -> str:
    return platform.machine().lower()


def _go_arch() -> str:
    machine = _machine()
    if machine in _ARCH_ALIASES:
        return _ARCH_ALIASES[machine]
    if machine.startswith("arm"):
        return "arm"
    return machine


def _go_arm() -> int:
    match = _ARM_VERSION_RE.match(_machine())
    return int(match.group(1)) if match else 0


def new_release(data: Mapping[str, Any] | None) -> Release:
    """Build a Release from the decoded JSON of a release API response."""
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError("release data must be a JSON object")
    assets = [
        Asset(name=item.get("name", ""), url=item.get("browser_download_url", ""))
        for item in data.get("assets") or []
    ]
    return Release(tag_name=data.get("tag_name", ""), assets=assets)


def get_latest(repo: str) -> Release:
    """Fetch the latest release of ``repo`` ('owner/name')."""
    url = RELEASES_API.format(repo=repo)
    with create_http_client() as client:
        resp = client.get(url)
        try:
            data = get_http_response(resp)
        except (HTTPStatusError, requests.RequestException, ValueError) as err:
            log("异常信息: %s", err)
            raise
    return new_release(data)


def generate_additional_arch() -> list[str]:
    """More specific architecture names to try before the generic one."""
    arch = _go_arch()
    if arch == "arm":
        goarm = _go_arm()
        if MIN_ARM <= goarm <= MAX_ARM:
            return [f"armv{v}" for v in range(goarm, MIN_ARM - 1, -1)]
    if arch == "amd64":
        return ["x86_64"]
    return []


def get_suffixes(arch: str) -> list[str]:
    """Asset name endings accepted for ``arch`` on this operating system."""
    return [f"{_go_os()}_{arch}{ext}" for ext in ARCHIVE_EXTENSIONS]


def asset_match_suffixes(name: str, suffixes: list[str]) -> bool:
    """Whether ``name`` ends with any of ``suffixes``."""
    return any(name.endswith(suffix) for suffix in suffixes)


def _find_asset_from_release(
    release: Release | None, suffixes: list[str]
) -> tuple[Asset, Version] | None:
    if release is None:
        _logger.info("There is no source release information")
        return None
    try:
        version = parse_version(release.tag_name)
    except ValueError:
        _logger.info("Cannot parse semantic version: %s", release.tag_name)
        return None
    for asset in release.assets:
        if asset_match_suffixes(asset.name, suffixes):
            return asset, version
    _logger.info("Can't find suitable asset in release %s", release.tag_name)
    return None


def find_asset(release: Release | None) -> tuple[Asset, Version] | None:
    """The first asset that fits this platform, with the release version, or None."""
    for arch in [*generate_additional_arch(), _go_arch()]:
        found = _find_asset_from_release(release, get_suffixes(arch))
        if found is not None:
            return found
        _logger.info("Cannot find any release for %s/%s", _go_os(), _go_arch())
    return None


def detect_latest(repo: str) -> Latest | None:
    """The newest asset of ``repo`` for this platform, or None when there is none."""
    release = get_latest(repo)
    found = find_asset(release)
    if found is None:
        return None
    asset, version = found
    return Latest(name=asset.name, url=asset.url, version=version)