"""Facts about the runtime environment and small interactions with the host."""

from __future__ import annotations

import os
import subprocess
import sys
import time
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TERMUX_PREFIX = "/data/data/com.termux/files/usr"
DOCKER_ENV_FILE = "/.dockerenv"
CONFIG_FILE_PATH_ENV = "DDNS_CONFIG_FILE_PATH"
CONFIG_FILE_NAME = ".ddns_go_config.yaml"


def is_termux() -> bool:
    """Whether the process runs inside Termux."""
    return os.environ.get("PREFIX") == TERMUX_PREFIX


def is_run_in_docker() -> bool:
    """Whether the process runs inside a Docker container."""
    return os.path.exists(DOCKER_ENV_FILE)


def get_config_file_path() -> str:
    """Config file path from the environment, or the default one."""
    configured = os.environ.get(CONFIG_FILE_PATH_ENV, "")
    if configured:
        return configured
    return get_config_file_path_default()


def get_config_file_path_default() -> str:
    """Default config file path in the user's home directory."""
    try:
        home = str(Path.home())
    except (RuntimeError, KeyError):
        return "../" + CONFIG_FILE_NAME
    if not home or home == "~":
        return "../" + CONFIG_FILE_NAME
    return home + os.sep + CONFIG_FILE_NAME


def fix_timezone() -> str | None:
    """Apply the Android system time zone; return its name, or None if unavailable."""
    try:
        result = subprocess.run(
            ["/system/bin/getprop", "persist.sys.timezone"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None

    name = result.stdout.strip() or "UTC"
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None

    os.environ["TZ"] = name
    if hasattr(time, "tzset"):
        time.tzset()
    return name


def open_explorer(url: str) -> bool:
    """Try to open ``url`` in the local browser; return whether a browser was started."""
    platform = sys.platform
    if platform == "win32":
        command = ["rundll32", "url.dll,FileProtocolHandler", url]
    elif platform == "darwin":
        command = ["open", url]
    else:
        # Starting processes inside Termux may be killed with a bad system call.
        if is_termux():
            return False
        command = ["xdg-open", url]

    try:
        subprocess.Popen(command)
    except OSError:
        print(f"Please open a browser and visit {url} to finish the configuration")
        return False
    print("Success to open the browser, please configure in the web page")
    return True