"""Downloading a release archive and replacing the running executable with it."""

from __future__ import annotations

import contextlib
import io
import logging
import os
import posixpath
import subprocess
import sys
import tarfile
import zipfile
import zlib
from typing import BinaryIO, Callable

import requests

from .http import create_http_client
from .release import _go_arch, _go_os, detect_latest
from .semver import parse_version

UPDATE_REPOSITORY_ENV = "DDNS_UPDATE_REPOSITORY"

_logger = logging.getLogger("ddnskit")


class CannotDecompressFileError(Exception):
    """The downloaded archive could not be decompressed."""


class ExecutableNotFoundInArchiveError(Exception):
    """The archive holds no file named like the executable."""


def apply(update: BinaryIO | bytes, target_path: str | os.PathLike[str]) -> None:
    """Replace the file at ``target_path`` with the new content, rolling back on failure."""
    data = bytes(update) if isinstance(update, (bytes, bytearray)) else update.read()
    target = os.fspath(target_path)
    directory, filename = os.path.split(target)
    new_path = os.path.join(directory, filename + ".new")
    old_path = os.path.join(directory, filename + ".old")

    flags = os.O_CREAT | os.O_WRONLY | os.O_TRUNC | getattr(os, "O_BINARY", 0)
    with os.fdopen(os.open(new_path, flags, 0o755), "wb") as fp:
        fp.write(data)

    # A leftover .old file blocks the rename on Windows.
    with contextlib.suppress(OSError):
        os.remove(old_path)

    os.rename(target, old_path)
    try:
        os.rename(new_path, target)
    except OSError:
        with contextlib.suppress(OSError):
            os.rename(old_path, target)
        raise

    try:
        os.remove(old_path)
    except OSError:
        if sys.platform == "win32":
            # The running executable cannot be deleted; remove it once the process has exited.
            subprocess.Popen(["cmd.exe", "/c", f"ping 127.0.0.1 -n 2 > NUL & del {old_path}"])
            return
        raise


def match_executable_name(cmd: str, target: str) -> bool:
    """Whether ``target`` is ``cmd`` or ``cmd`` with '.exe'."""
    return target in (cmd, cmd + ".exe")


def _unzip(src: BinaryIO, cmd: str) -> BinaryIO:
    try:
        archive = zipfile.ZipFile(io.BytesIO(src.read()))
    except (OSError, zipfile.BadZipFile) as err:
        raise CannotDecompressFileError(f"failed to decompress zip file: {err}") from err

    with archive:
        for info in archive.infolist():
            name = posixpath.basename(info.filename)
            if not info.is_dir() and match_executable_name(cmd, name):
                try:
                    return io.BytesIO(archive.read(info))
                except (OSError, zipfile.BadZipFile, zlib.error) as err:
                    raise CannotDecompressFileError(
                        f"failed to decompress zip file: {err}"
                    ) from err
    raise ExecutableNotFoundInArchiveError(f"executable not found in zip file: {cmd!r}")


def _untar(src: BinaryIO, cmd: str) -> BinaryIO:
    try:
        with tarfile.open(fileobj=src, mode="r|gz") as archive:
            for member in archive:
                if match_executable_name(cmd, posixpath.basename(member.name)):
                    extracted = archive.extractfile(member)
                    return io.BytesIO(extracted.read() if extracted is not None else b"")
    except (tarfile.TarError, OSError, EOFError, zlib.error) as err:
        raise CannotDecompressFileError(f"failed to decompress tar.gz file: {err}") from err
    raise ExecutableNotFoundInArchiveError(f"executable not found in tar.gz file: {cmd!r}")


_DECOMPRESSORS: dict[str, Callable[[BinaryIO, str], BinaryIO]] = {
    ".zip": _unzip,
    ".tar.gz": _untar,
}


def decompress_command(src: BinaryIO, url: str, cmd: str) -> BinaryIO:
    """Return the content of ``cmd`` from the archive named by ``url``, or ``src`` if not an archive."""
    for ext, decompress in _DECOMPRESSORS.items():
        if url.endswith(ext):
            return decompress(src, cmd)
    _logger.info("It's not a compressed file, skip decompressing")
    return src


def decompress_and_update(src: BinaryIO, asset_name: str, cmd_path: str) -> None:
    """Extract the executable from ``src`` and install it at ``cmd_path``."""
    cmd = os.path.basename(cmd_path)
    apply(decompress_command(src, asset_name, cmd), cmd_path)


def download_asset_from_url(url: str) -> BinaryIO:
    """Open a stream of the asset at ``url``; raise OSError on failure."""
    client = create_http_client()
    try:
        resp = client.get(url, stream=True)
    except requests.RequestException as err:
        raise OSError(f"could not download release from {url}: {err}") from err
    if resp.status_code >= 300:
        resp.close()
        raise OSError(f"could not download release from {url}. Response code: {resp.status_code}")
    raw = resp.raw
    if hasattr(raw, "decode_content"):
        raw.decode_content = True
    return raw


def update_to(asset_url: str, asset_file_name: str, cmd_path: str) -> None:
    """Download the asset and replace the executable at ``cmd_path`` with it."""
    src = download_asset_from_url(asset_url)
    with contextlib.closing(src):
        decompress_and_update(src, asset_file_name, cmd_path)


def self_update(version: str) -> bool:
    """Update the running program to the newest release; return whether it was updated."""
    try:
        current = parse_version(version)
    except ValueError as err:
        _logger.info("Cannot update because: %s", err)
        return False

    repository = os.environ.get(UPDATE_REPOSITORY_ENV, "")
    if not repository:
        _logger.info("Cannot update because %s is not set", UPDATE_REPOSITORY_ENV)
        return False

    try:
        latest = detect_latest(repository)
    except (OSError, ValueError) as err:
        _logger.info("Error happened when detecting latest version: %s", err)
        return False
    if latest is None:
        _logger.info("Cannot find any release for %s/%s", _go_os(), _go_arch())
        return False
    if current.greater_than_or_equal(latest.version):
        _logger.info("Current version (%s) is the latest", version)
        return False

    if not sys.argv or not sys.argv[0]:
        _logger.info("Cannot find executable path")
        return False
    exe = os.path.realpath(sys.argv[0])

    try:
        update_to(latest.url, latest.name, exe)
    except (OSError, CannotDecompressFileError, ExecutableNotFoundInArchiveError) as err:
        _logger.info("Error happened when updating binary: %s", err)
        return False

    _logger.info("Success update to v%s", latest.version)
    return True